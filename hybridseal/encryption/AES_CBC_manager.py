#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: AES_CBC_manager.py

    Description:
        Implements AES-256-CBC with PKCS#7 padding for HybridSeal envelopes.
        Provides key and IV generation along with block-level encrypt and
        decrypt methods. Every call builds its own short-lived cipher context;
        no key is stored on the instance. Raises CipherError on any misuse or
        padding failure.
"""


import os
import typing
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from hybridseal.handlers.error_handler import CipherError, ApplicationCodes
import hybridseal.constants as CONSTANTS



class AESCBCManager:

    cipher_id: str = CONSTANTS._CIPHER_AES_256_CBC
    key_length: int = CONSTANTS._AES_256_KEY_LEN_BYTES
    iv_length: int = CONSTANTS._AES_BLOCK_LEN_BYTES


    """
        Generate a fresh 32-byte AES-256 key using a CSPRNG.

        @return bytearray: A newly generated key; mutable so the caller can wipe it.
        @ensures The returned key is cryptographically random and exactly 32 bytes long.
    """
    @staticmethod
    def generate_key() -> bytearray:

        key = bytearray(os.urandom(CONSTANTS._AES_256_KEY_LEN_BYTES))

        if len(key) != CONSTANTS._AES_256_KEY_LEN_BYTES:
            raise CipherError("Generated AES key must be 32 bytes", "generated_key", ApplicationCodes.INVALID_AES_KEY)

        return key


    """
        Generate a fresh 16-byte CBC initialization vector.

        @return bytes: A newly generated IV.
    """
    @staticmethod
    def generate_iv() -> bytes:

        iv = os.urandom(CONSTANTS._AES_BLOCK_LEN_BYTES)

        if len(iv) != CONSTANTS._AES_BLOCK_LEN_BYTES:
            raise CipherError("Generated CBC IV must be 16 bytes", "iv", ApplicationCodes.INVALID_IV)

        return iv


    """
        Validate key and IV material shared by encrypt_block and decrypt_block.

        @require isinstance(key, (bytes, bytearray)) and len(key) == 32
        @require isinstance(iv, (bytes, bytearray)) and len(iv) == 16
    """
    def _validate_key_and_iv(self, key: typing.Any, iv: typing.Any) -> None:

        # Validate key
        if not isinstance(key, (bytes, bytearray)):
            raise CipherError("AES key must be raw bytes", "aes_key", ApplicationCodes.INVALID_AES_KEY)

        if len(key) != self.key_length:
            raise CipherError("AES-256 key must be exactly 32 bytes", "aes_key", ApplicationCodes.INVALID_AES_KEY)

        # Validate IV
        if not isinstance(iv, (bytes, bytearray)):
            raise CipherError("IV must be raw bytes", "iv", ApplicationCodes.INVALID_IV)

        if len(iv) != self.iv_length:
            raise CipherError("CBC IV must be exactly 16 bytes", "iv", ApplicationCodes.INVALID_IV)


    """
        Pad and encrypt plaintext using AES-256-CBC.

        @param key (bytes): 32-byte one-time key.
        @param iv (bytes): 16-byte IV.
        @param plaintext (bytes): Bytes to encrypt; may be empty.

        @return bytes: Ciphertext, a positive multiple of 16 bytes.
    """
    def encrypt_block(self, key: bytes, iv: bytes, plaintext: bytes) -> bytes:

        try:
            self._validate_key_and_iv(key, iv)

            # Validate plaintext
            if not isinstance(plaintext, (bytes, bytearray)):
                raise CipherError("Plaintext must be bytes", "plaintext", ApplicationCodes.INVALID_TYPE)

            # Apply PKCS#7 padding up to the block size
            padder = padding.PKCS7(self.iv_length * 8).padder()
            padded = padder.update(bytes(plaintext)) + padder.finalize()

            # One cipher context per call
            encryptor = Cipher(algorithms.AES(key), modes.CBC(bytes(iv))).encryptor()
            return encryptor.update(padded) + encryptor.finalize()

        except CipherError:
            raise
        except Exception:
            raise CipherError("AES-CBC encryption failed", "ciphertext")


    """
        Decrypt AES-256-CBC ciphertext and strip PKCS#7 padding.

        @param key (bytes): 32-byte key.
        @param iv (bytes): 16-byte IV.
        @param ciphertext (bytes): Positive multiple of 16 bytes.

        @return bytes: The unpadded plaintext.

        @ensures Raises CipherError when padding validation fails, which is the usual outcome of a wrong key.
    """
    def decrypt_block(self, key: bytes, iv: bytes, ciphertext: bytes) -> bytes:

        try:
            self._validate_key_and_iv(key, iv)

            # Validate ciphertext
            if not isinstance(ciphertext, (bytes, bytearray)):
                raise CipherError("Ciphertext must be bytes", "ciphertext", ApplicationCodes.INVALID_CIPHERTEXT)

            if len(ciphertext) == 0 or len(ciphertext) % self.iv_length != 0:
                raise CipherError("Ciphertext must be a positive multiple of 16 bytes", "ciphertext", ApplicationCodes.INVALID_CIPHERTEXT)

            decryptor = Cipher(algorithms.AES(key), modes.CBC(bytes(iv))).decryptor()
            padded = decryptor.update(bytes(ciphertext)) + decryptor.finalize()

            # Padding validation
            try:
                unpadder = padding.PKCS7(self.iv_length * 8).unpadder()
                return unpadder.update(padded) + unpadder.finalize()
            except ValueError:
                raise CipherError("Bad padding after AES-CBC decryption (wrong key or corrupted ciphertext)", "ciphertext", ApplicationCodes.CIPHERTEXT_AUTH_ERROR)

        except CipherError:
            raise
        except Exception:
            raise CipherError("AES-CBC decryption failed", "ciphertext")
