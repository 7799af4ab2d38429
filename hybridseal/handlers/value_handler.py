#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: value_handler.py

    Description:
        Encrypts and decrypts structured values by composing a serializer
        with the envelope Encryptor and Decryptor. Decrypted values are always
        handed back as Sensitive.
"""

import typing

from hybridseal.handlers.decryptor import Decryptor
from hybridseal.handlers.encryptor import Encryptor
from hybridseal.identity.recipient_identity import RecipientIdentity, RecipientSecret
from hybridseal.utilities.serializer import JsonSerializer, Sensitive


def seal_value(value: typing.Any, recipient: typing.Optional[RecipientIdentity], serializer: typing.Any = None, encryptor: typing.Optional[Encryptor] = None) -> str:
    serializer = serializer or JsonSerializer()
    encryptor = encryptor or Encryptor()
    return encryptor.encrypt(serializer.serialize(value), recipient)


"""
    Decrypt a token and deserialize its payload.

    @return Sensitive: The decrypted value, wrapped once.
"""
def unseal_value(token: str, secret: typing.Optional[RecipientSecret], serializer: typing.Any = None, decryptor: typing.Optional[Decryptor] = None) -> Sensitive:

    serializer = serializer or JsonSerializer()
    decryptor = decryptor or Decryptor()

    clear = serializer.deserialize(decryptor.decrypt(token, secret))

    return clear if isinstance(clear, Sensitive) else Sensitive(clear)
