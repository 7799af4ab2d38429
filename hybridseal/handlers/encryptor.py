#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: encryptor.py

    Description:
        Sender side of the HybridSeal envelope. Generates a one-time AES-256
        key, seals the payload with an IV prefix, wraps the key for the
        recipient's RSA public key, binds the recipient fingerprint with a
        second independent cipher invocation, and encodes the four fields.
        Pure and stateless: every key, IV, and buffer lives for one call.
"""

import typing

from hybridseal.encryption.cipher_registry import get_cipher_engine
from hybridseal.encryption.framing import seal_with_iv_prefix
from hybridseal.encryption.identity_binder import IdentityBinder
from hybridseal.encryption.RSA_manager import RSAManager
from hybridseal.handlers.envelope_codec import EnvelopeCodec
from hybridseal.handlers.error_handler import HybridSealError, NoRecipientError, ApplicationCodes, HTTPCodes
from hybridseal.identity.recipient_identity import RecipientIdentity
from hybridseal.utilities.memory import wipe
import hybridseal.constants as CONSTANTS



class Encryptor:

    """
        Initialize an Encryptor for one cipher.

        @param cipher_id (str): Cipher written to the envelope; must be registered.
        @ensures Unknown cipher ids fail here with CipherError rather than at encrypt time.
    """
    def __init__(self, cipher_id: str = CONSTANTS._DEFAULT_CIPHER_ID, key_transport: typing.Optional[RSAManager] = None, identity_binder: typing.Optional[IdentityBinder] = None, codec: typing.Optional[EnvelopeCodec] = None) -> None:

        self._engine = get_cipher_engine(cipher_id)
        self._key_transport = key_transport or RSAManager()
        self._identity_binder = identity_binder or IdentityBinder()
        self._codec = codec or EnvelopeCodec()


    @property
    def cipher_id(self) -> str:
        return self._engine.cipher_id


    """
        Encrypt a payload for one recipient identity.

        @param payload (bytes): Serialized plaintext; may be empty.
        @param recipient (RecipientIdentity): Public key and fingerprint of the recipient.
        @return str: The envelope token.
        @ensures NoRecipientError when no recipient is supplied; the session key is wiped on every exit path.
    """
    def encrypt(self, payload: bytes, recipient: typing.Optional[RecipientIdentity]) -> str:

        if recipient is None or getattr(recipient, "public_key", None) is None:
            raise NoRecipientError()

        if not isinstance(payload, (bytes, bytearray, memoryview)):
            raise HybridSealError(ApplicationCodes.INVALID_TYPE, HTTPCodes.BAD_REQUEST, "Payload must be bytes", "payload")

        session_key = self._engine.generate_key()
        try:
            # Main payload under its own IV prefix
            ciphertext = seal_with_iv_prefix(self._engine, session_key, self._engine.generate_iv(), bytes(payload))

            wrapped_key = self._key_transport.wrap(recipient.public_key, session_key)

            # Second, independent invocation for the fingerprint
            wrapped_fingerprint = self._identity_binder.bind(self._engine, session_key, recipient.fingerprint)

            return self._codec.encode(self._engine.cipher_id, wrapped_key, ciphertext, wrapped_fingerprint)

        finally:
            wipe(session_key)



"""
    Encrypt a payload for a recipient with the default cipher.
"""
def encrypt(payload: bytes, recipient: typing.Optional[RecipientIdentity]) -> str:
    return Encryptor().encrypt(payload, recipient)
