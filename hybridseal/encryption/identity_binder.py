#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: identity_binder.py

    Description:
        Binds an envelope to the recipient's current identity material. The
        recipient fingerprint is sealed under the envelope's one-time key in a
        separate cipher invocation, and on decryption it is compared in
        constant time with the decrypting identity's own fingerprint. A
        mismatch means the token was sealed for another (or a rotated)
        certificate even though the private key still unwraps it.
"""

import typing
from hybridseal.encryption.checksum_manager import ChecksumManager
from hybridseal.encryption.framing import seal_with_iv_prefix, open_with_iv_prefix
from hybridseal.handlers.error_handler import HybridSealError, IdentityMismatchError, ApplicationCodes, HTTPCodes
import hybridseal.constants as CONSTANTS


"""
    Reject anything that is not a short, non-empty byte fingerprint.
"""
def validate_fingerprint(fingerprint: typing.Any, field: str = "fingerprint") -> bytes:

    if not isinstance(fingerprint, (bytes, bytearray)):
        raise HybridSealError(ApplicationCodes.INVALID_FINGERPRINT, HTTPCodes.BAD_REQUEST, "Fingerprint must be bytes", field)

    if len(fingerprint) == 0 or len(fingerprint) > CONSTANTS._MAX_FINGERPRINT_LEN_BYTES:
        raise HybridSealError(ApplicationCodes.INVALID_FINGERPRINT, HTTPCodes.BAD_REQUEST, f"Fingerprint must be 1 to {CONSTANTS._MAX_FINGERPRINT_LEN_BYTES} bytes", field)

    return bytes(fingerprint)



class IdentityBinder:

    def __init__(self, checksum_manager: typing.Optional[ChecksumManager] = None) -> None:
        self._checksums = checksum_manager or ChecksumManager()


    """
        Seal the recipient fingerprint under the session key with a fresh IV.

        @param engine: Symmetric cipher engine used for the payload.
        @param key (bytes): The envelope's one-time session key.
        @param fingerprint (bytes): Recipient fingerprint.
        @return bytes: The wrapped fingerprint field.
    """
    def bind(self, engine, key: bytes, fingerprint: bytes) -> bytes:

        fingerprint = validate_fingerprint(fingerprint)

        return seal_with_iv_prefix(engine, key, engine.generate_iv(), fingerprint)


    """
        Open the wrapped fingerprint and compare it with our own.

        @param engine: Symmetric cipher engine named by the envelope.
        @param key (bytes): Recovered session key.
        @param wrapped_fingerprint (bytes): Fourth envelope field.
        @param own_fingerprint (bytes): Decrypting identity's fingerprint.
        @ensures CipherError when the field cannot be opened, IdentityMismatchError when the fingerprints differ.
    """
    def verify(self, engine, key: bytes, wrapped_fingerprint: bytes, own_fingerprint: bytes) -> None:

        own_fingerprint = validate_fingerprint(own_fingerprint, "own_fingerprint")

        bound_fingerprint = open_with_iv_prefix(engine, key, wrapped_fingerprint, "wrapped_fingerprint")

        if not self._checksums.constant_time_equals(bound_fingerprint, own_fingerprint):
            raise IdentityMismatchError()
