#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: checksum_manager.py

    Description:
        Provides SHA-256 checksum utilities for HybridSeal, including plain
        hashing, constant-time checksum verification, and constant-time
        equality used for fingerprint comparison. All methods enforce strict
        type and length validation and raise HybridSealError on misuse.
"""


import hashlib
import hmac
import typing
from hybridseal.handlers.error_handler import HTTPCodes, ApplicationCodes, HybridSealError
import hybridseal.constants as CONSTANTS



class ChecksumManager:

    """
        Initialize a ChecksumManager configured for SHA-256.

        @ensures The manager is ready to compute deterministic 32-byte SHA-256 digests.
    """
    def __init__(self) -> None:

        self._digest_size: int = CONSTANTS._INTEGRITY_DIGEST_LEN_BYTES
        self._algorithm: str = "SHA-256"


    @property
    def digest_size(self) -> int:
        return self._digest_size



    """
        Compute a SHA-256 checksum for the given bytes.

        @param data (bytes): Raw input bytes.
        @return bytes: 32-byte SHA-256 digest.
    """
    def compute_checksum(self, data: bytes) -> bytes:

        try:
            # Validate input type
            if not isinstance(data, (bytes, bytearray)):
                raise HybridSealError(ApplicationCodes.INVALID_CHECKSUM_DATA, HTTPCodes.BAD_REQUEST, "Input to compute_checksum must be bytes", "data")

            digest = hashlib.sha256(data).digest()

            # Validate digest output
            if len(digest) != self._digest_size:
                raise HybridSealError(ApplicationCodes.INVALID_CHECKSUM, HTTPCodes.INTERNAL_SERVER_ERROR, "Invalid digest output from SHA-256", "checksum")

            return digest

        except HybridSealError:
            raise
        except Exception:
            raise HybridSealError(ApplicationCodes.INVALID_CHECKSUM, HTTPCodes.INTERNAL_SERVER_ERROR, "Checksum computation failure", "checksum")



    """
        Verify that SHA-256(data) == expected_checksum using constant-time comparison.

        @return bool: True if match, False otherwise.
    """
    def verify_checksum(self, data: bytes, expected_checksum: bytes) -> bool:

        # Validate expected checksum type and size
        if not isinstance(expected_checksum, (bytes, bytearray)):
            raise HybridSealError(ApplicationCodes.INVALID_CHECKSUM, HTTPCodes.BAD_REQUEST, "Expected checksum must be bytes", "expected_checksum")

        if len(expected_checksum) != self._digest_size:
            raise HybridSealError(ApplicationCodes.INVALID_LENGTH, HTTPCodes.BAD_REQUEST, "Expected checksum must be 32 bytes", "expected_checksum")

        computed = self.compute_checksum(data)

        return hmac.compare_digest(computed, bytes(expected_checksum))



    """
        Compare two byte strings in constant time.

        @return bool: True if both values are identical.
    """
    @staticmethod
    def constant_time_equals(left: typing.Any, right: typing.Any) -> bool:

        if not isinstance(left, (bytes, bytearray)) or not isinstance(right, (bytes, bytearray)):
            raise HybridSealError(ApplicationCodes.INVALID_TYPE, HTTPCodes.BAD_REQUEST, "Values to compare must be bytes", "data")

        return hmac.compare_digest(bytes(left), bytes(right))
