#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: RSA_manager.py

    Description:
        Key transport for HybridSeal envelopes. Wraps one-time AES session keys
        under a recipient's RSA public key with RSA-OAEP (SHA-256) and unwraps
        them with the matching private key. Also parses PEM key material. Holds
        no keys between calls; every failure surfaces as KeyTransportError.
"""

import typing
from cryptography.hazmat.primitives.asymmetric import rsa, padding
from cryptography.hazmat.primitives import serialization, hashes
from hybridseal.handlers.error_handler import KeyTransportError, ApplicationCodes
from hybridseal.utilities.memory import wipe
import hybridseal.constants as CONSTANTS


def _oaep_padding() -> padding.OAEP:
    return padding.OAEP(mgf=padding.MGF1(algorithm=hashes.SHA256()), algorithm=hashes.SHA256(), label=None)


def _as_pem_bytes(pem: typing.Union[str, bytes, bytearray]) -> bytes:
    if isinstance(pem, str):
        return pem.encode("utf-8")
    return bytes(pem)



class RSAManager:

    """
        Load an RSA public key from a key object or PEM text.

        @param public_key (RSAPublicKey | str | bytes): Key object or SubjectPublicKeyInfo PEM.
        @return RSAPublicKey: The parsed key.
        @ensures Raises KeyTransportError(INVALID_PUBLIC_KEY) for anything that is not an RSA public key.
    """
    @staticmethod
    def load_public_key(public_key: typing.Any) -> rsa.RSAPublicKey:

        if isinstance(public_key, rsa.RSAPublicKey):
            return public_key

        if not isinstance(public_key, (str, bytes, bytearray)) or not public_key.strip():
            raise KeyTransportError("RSA public key must be a key object or non-empty PEM", "public_key", ApplicationCodes.INVALID_PUBLIC_KEY)

        try:
            loaded = serialization.load_pem_public_key(_as_pem_bytes(public_key))
        except Exception:
            raise KeyTransportError("Failed to parse RSA public key PEM", "public_key", ApplicationCodes.INVALID_PUBLIC_KEY)

        if not isinstance(loaded, rsa.RSAPublicKey):
            raise KeyTransportError("Parsed key is not an RSA public key", "public_key", ApplicationCodes.INVALID_PUBLIC_KEY)

        return loaded


    """
        Load an RSA private key from a key object or unencrypted PEM text.

        @param private_key (RSAPrivateKey | str | bytes): Key object or PKCS#1/PKCS#8 PEM.
        @return RSAPrivateKey: The parsed key.
        @ensures Raises KeyTransportError(INVALID_PRIVATE_KEY) for anything that is not an RSA private key.
    """
    @staticmethod
    def load_private_key(private_key: typing.Any) -> rsa.RSAPrivateKey:

        if isinstance(private_key, rsa.RSAPrivateKey):
            return private_key

        if not isinstance(private_key, (str, bytes, bytearray)) or not private_key.strip():
            raise KeyTransportError("RSA private key must be a key object or non-empty PEM", "private_key", ApplicationCodes.INVALID_PRIVATE_KEY)

        try:
            loaded = serialization.load_pem_private_key(_as_pem_bytes(private_key), password=None)
        except Exception:
            raise KeyTransportError("Failed to parse RSA private key PEM", "private_key", ApplicationCodes.INVALID_PRIVATE_KEY)

        if not isinstance(loaded, rsa.RSAPrivateKey):
            raise KeyTransportError("Loaded key is not an RSA private key", "private_key", ApplicationCodes.INVALID_PRIVATE_KEY)

        return loaded


    """
        Largest plaintext RSA-OAEP(SHA-256) can carry for the given key.

        @param key (RSAPublicKey | RSAPrivateKey): Key whose modulus bounds the payload.
        @return int: Maximum wrapped-key length in bytes.
    """
    @staticmethod
    def max_wrappable_length(key: typing.Union[rsa.RSAPublicKey, rsa.RSAPrivateKey]) -> int:
        return (key.key_size + 7) // 8 - CONSTANTS._OAEP_SHA256_OVERHEAD_BYTES



    """
        Encrypt a symmetric session key under the recipient's RSA public key.

        @param public_key (RSAPublicKey | str | bytes): Recipient public key or PEM.
        @param symmetric_key (bytes): Session key to wrap.
        @require modulus >= 2048 bits and len(symmetric_key) <= max_wrappable_length(public_key)
        @return bytes: RSA-OAEP ciphertext, as long as the modulus.
    """
    def wrap(self, public_key: typing.Any, symmetric_key: bytes) -> bytes:

        try:
            # Validate session key material
            if not isinstance(symmetric_key, (bytes, bytearray)) or len(symmetric_key) == 0:
                raise KeyTransportError("Session key must be non-empty bytes", "aes_key", ApplicationCodes.INVALID_AES_KEY)

            recipient_key = RSAManager.load_public_key(public_key)

            if recipient_key.key_size < CONSTANTS._MIN_RSA_KEY_BITS:
                raise KeyTransportError(f"RSA key must be at least {CONSTANTS._MIN_RSA_KEY_BITS} bits", "public_key", ApplicationCodes.RSA_KEY_TOO_SMALL)

            if len(symmetric_key) > RSAManager.max_wrappable_length(recipient_key):
                raise KeyTransportError("Session key is too long for this RSA key size", "aes_key", ApplicationCodes.INVALID_AES_KEY)

            wrapped_key = recipient_key.encrypt(bytes(symmetric_key), _oaep_padding())

            if not isinstance(wrapped_key, bytes) or len(wrapped_key) == 0:
                raise KeyTransportError("RSA-OAEP encryption returned empty ciphertext", "wrapped_key", ApplicationCodes.RSA_ENCRYPT_ERROR)

            return wrapped_key

        except KeyTransportError:
            raise
        except Exception:
            raise KeyTransportError("RSA-OAEP encryption failure", "wrapped_key", ApplicationCodes.RSA_ENCRYPT_ERROR)



    """
        Decrypt a wrapped session key with the recipient's RSA private key.

        @param private_key (RSAPrivateKey | str | bytes): Recipient private key or PEM.
        @param wrapped_key (bytes): RSA-OAEP ciphertext.
        @param expected_length (int): Length the unwrapped key must have.
        @return bytearray: The session key; mutable so the caller can wipe it.
        @ensures A wrong private key or an unexpected key length raises KeyTransportError.
    """
    def unwrap(self, private_key: typing.Any, wrapped_key: bytes, expected_length: int = CONSTANTS._AES_256_KEY_LEN_BYTES) -> bytearray:

        try:
            # Validate ciphertext input
            if not isinstance(wrapped_key, (bytes, bytearray)) or len(wrapped_key) == 0:
                raise KeyTransportError("Wrapped key must be non-empty bytes", "wrapped_key", ApplicationCodes.INVALID_CIPHERTEXT)

            recipient_key = RSAManager.load_private_key(private_key)

            try:
                session_key = bytearray(recipient_key.decrypt(bytes(wrapped_key), _oaep_padding()))
            except ValueError:
                raise KeyTransportError("RSA-OAEP decryption failed (wrong private key or corrupted key field)", "wrapped_key", ApplicationCodes.RSA_DECRYPT_ERROR)

            if len(session_key) != expected_length:
                wipe(session_key)
                raise KeyTransportError("Unwrapped session key has the wrong length", "wrapped_key", ApplicationCodes.KEY_MISMATCH)

            return session_key

        except KeyTransportError:
            raise
        except Exception:
            raise KeyTransportError("RSA-OAEP decryption failure", "wrapped_key", ApplicationCodes.RSA_DECRYPT_ERROR)
