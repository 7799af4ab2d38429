#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: decryptor.py

    Description:
        Recipient side of the HybridSeal envelope. Decodes the token, selects
        the cipher named in it, unwraps the session key with the caller's
        private key, opens the payload, and verifies the bound fingerprint
        against the caller's own. Structural errors surface before any
        cryptography; cipher and key transport errors surface before the
        fingerprint comparison.
"""

import typing

from hybridseal.encryption.cipher_registry import get_cipher_engine
from hybridseal.encryption.framing import open_with_iv_prefix
from hybridseal.encryption.identity_binder import IdentityBinder
from hybridseal.encryption.RSA_manager import RSAManager
from hybridseal.handlers.envelope_codec import EnvelopeCodec
from hybridseal.handlers.error_handler import NoRecipientError
from hybridseal.identity.recipient_identity import RecipientSecret
from hybridseal.utilities.memory import wipe



class Decryptor:

    def __init__(self, key_transport: typing.Optional[RSAManager] = None, identity_binder: typing.Optional[IdentityBinder] = None, codec: typing.Optional[EnvelopeCodec] = None) -> None:

        self._key_transport = key_transport or RSAManager()
        self._identity_binder = identity_binder or IdentityBinder()
        self._codec = codec or EnvelopeCodec()


    """
        Decrypt an envelope token with the caller's own identity secret.

        @param token (str): Envelope produced by Encryptor.encrypt().
        @param secret (RecipientSecret): Caller's private key and current fingerprint.
        @return bytes: The original payload.
        @ensures EnvelopeFormatError, CipherError, KeyTransportError, or IdentityMismatchError on failure; the session key is wiped on every exit path.
    """
    def decrypt(self, token: str, secret: typing.Optional[RecipientSecret]) -> bytes:

        if secret is None or getattr(secret, "private_key", None) is None:
            raise NoRecipientError("No identity secret supplied to decrypt with", "secret")

        envelope = self._codec.decode(token)

        # Algorithm agility: the envelope names its cipher
        engine = get_cipher_engine(envelope.cipher_id)

        session_key = self._key_transport.unwrap(secret.private_key, envelope.wrapped_key, engine.key_length)
        try:
            payload = open_with_iv_prefix(engine, session_key, envelope.ciphertext, "ciphertext")

            self._identity_binder.verify(engine, session_key, envelope.wrapped_fingerprint, secret.fingerprint)

            return payload

        finally:
            wipe(session_key)



"""
    Decrypt an envelope token with the caller's identity secret.
"""
def decrypt(token: str, secret: typing.Optional[RecipientSecret]) -> bytes:
    return Decryptor().decrypt(token, secret)
