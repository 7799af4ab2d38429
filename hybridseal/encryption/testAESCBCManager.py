#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testAESCBCManager.py

    Description:
        Test suite for AESCBCManager (AES-256-CBC with PKCS#7 padding) and the
        cipher registry. Verifies key/IV generation, block encryption and
        decryption, padding failures, and all error-handling branches.
"""

import os
import unittest
from hybridseal.encryption.AES_CBC_manager import AESCBCManager
from hybridseal.encryption.cipher_registry import get_cipher_engine, supported_cipher_ids
from hybridseal.handlers.error_handler import CipherError, ApplicationCodes, HTTPCodes


class TestAESCBCManager(unittest.TestCase):

    PLAINTEXT = b"hybrid-seal-test-plaintext"

    """
        Fresh engine, key, and IV for every test.
    """
    def setUp(self) -> None:

        self.manager = AESCBCManager()
        self.key = AESCBCManager.generate_key()
        self.iv = AESCBCManager.generate_iv()

    """
        generate_key() must return distinct 32-byte mutable buffers.
    """
    def test_generate_key_properties(self):

        key1 = AESCBCManager.generate_key()
        key2 = AESCBCManager.generate_key()

        self.assertIsInstance(key1, bytearray)
        self.assertEqual(32, len(key1))
        self.assertNotEqual(key1, key2)

    """
        generate_iv() must return distinct 16-byte values.
    """
    def test_generate_iv_properties(self):

        iv1 = AESCBCManager.generate_iv()
        iv2 = AESCBCManager.generate_iv()

        self.assertIsInstance(iv1, bytes)
        self.assertEqual(16, len(iv1))
        self.assertNotEqual(iv1, iv2)

    """
        Encrypting and then decrypting returns the original plaintext.
    """
    def test_encrypt_decrypt_round_trip(self):

        ciphertext = self.manager.encrypt_block(self.key, self.iv, self.PLAINTEXT)
        recovered = self.manager.decrypt_block(self.key, self.iv, ciphertext)

        self.assertEqual(self.PLAINTEXT, recovered)
        self.assertEqual(0, len(ciphertext) % 16)

    """
        Empty plaintext still produces one full padding block.
    """
    def test_empty_plaintext_pads_to_one_block(self):

        ciphertext = self.manager.encrypt_block(self.key, self.iv, b"")

        self.assertEqual(16, len(ciphertext))
        self.assertEqual(b"", self.manager.decrypt_block(self.key, self.iv, ciphertext))

    """
        Block-aligned plaintext gains a full extra block of padding.
    """
    def test_block_aligned_plaintext_gains_padding_block(self):

        ciphertext = self.manager.encrypt_block(self.key, self.iv, b"\x00" * 32)
        self.assertEqual(48, len(ciphertext))

    """
        The same inputs always produce the same ciphertext; a new IV changes it.
    """
    def test_iv_changes_ciphertext(self):

        first = self.manager.encrypt_block(self.key, self.iv, self.PLAINTEXT)
        again = self.manager.encrypt_block(self.key, self.iv, self.PLAINTEXT)
        other = self.manager.encrypt_block(self.key, AESCBCManager.generate_iv(), self.PLAINTEXT)

        self.assertEqual(first, again)
        self.assertNotEqual(first, other)

    """
        Invalid key types and lengths must raise INVALID_AES_KEY.
    """
    def test_rejects_invalid_key(self):

        with self.assertRaises(CipherError) as cm:
            self.manager.encrypt_block("not-bytes", self.iv, self.PLAINTEXT)  # type: ignore

        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_AES_KEY)
        self.assertEqual(cm.exception.http_code, HTTPCodes.CIPHERTEXT_AUTH_ERROR)
        self.assertEqual(cm.exception.field, "aes_key")

        for bad_len in (0, 16, 24, 31, 33):
            with self.subTest(bad_len=bad_len):
                with self.assertRaises(CipherError) as cm:
                    self.manager.encrypt_block(os.urandom(bad_len), self.iv, self.PLAINTEXT)

                self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_AES_KEY)

                with self.assertRaises(CipherError):
                    self.manager.decrypt_block(os.urandom(bad_len), self.iv, b"\x00" * 16)

    """
        Invalid IV types and lengths must raise INVALID_IV.
    """
    def test_rejects_invalid_iv(self):

        for bad_iv in (b"", b"\x00" * 8, b"\x00" * 17, "0123456789abcdef"):
            with self.subTest(bad_iv=bad_iv):
                with self.assertRaises(CipherError) as cm:
                    self.manager.encrypt_block(self.key, bad_iv, self.PLAINTEXT)  # type: ignore

                self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_IV)
                self.assertEqual(cm.exception.field, "iv")

    """
        encrypt_block(): non-bytes plaintext.
    """
    def test_encrypt_rejects_invalid_plaintext_type(self):

        with self.assertRaises(CipherError) as cm:
            self.manager.encrypt_block(self.key, self.iv, "not-bytes")  # type: ignore

        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)
        self.assertEqual(cm.exception.field, "plaintext")

    """
        decrypt_block(): ciphertext must be a positive multiple of the block size.
    """
    def test_decrypt_rejects_misaligned_ciphertext(self):

        for bad in (b"", b"\x00" * 15, b"\x00" * 17):
            with self.subTest(length=len(bad)):
                with self.assertRaises(CipherError) as cm:
                    self.manager.decrypt_block(self.key, self.iv, bad)

                self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_CIPHERTEXT)

    """
        Decrypting under the wrong key is detected by padding validation (almost always).
    """
    def test_decrypt_with_wrong_key_fails_padding(self):

        ciphertext = self.manager.encrypt_block(self.key, self.iv, self.PLAINTEXT)

        failures = 0
        for _ in range(20):
            try:
                recovered = self.manager.decrypt_block(AESCBCManager.generate_key(), self.iv, ciphertext)
            except CipherError as e:
                self.assertEqual(e.application_code, ApplicationCodes.CIPHERTEXT_AUTH_ERROR)
                failures += 1
            else:
                self.assertNotEqual(self.PLAINTEXT, recovered)

        self.assertGreaterEqual(failures, 15)

    """
        The engine keeps no key material between calls.
    """
    def test_engine_is_stateless(self):

        self.manager.encrypt_block(self.key, self.iv, self.PLAINTEXT)

        self.assertEqual({}, vars(self.manager))



class TestCipherRegistry(unittest.TestCase):

    def test_known_cipher_id_returns_engine(self):

        for cipher_id in ("AES-256-CBC", b"AES-256-CBC", "aes-256-cbc"):
            with self.subTest(cipher_id=cipher_id):
                self.assertIsInstance(get_cipher_engine(cipher_id), AESCBCManager)

    def test_unknown_cipher_id_raises(self):

        for cipher_id in ("AES-128-CBC", b"DES", b"\xff\xfe", ""):
            with self.subTest(cipher_id=cipher_id):
                with self.assertRaises(CipherError) as cm:
                    get_cipher_engine(cipher_id)

                self.assertEqual(cm.exception.application_code, ApplicationCodes.UNSUPPORTED_CIPHER)
                self.assertEqual(cm.exception.field, "cipher_id")

    def test_supported_cipher_ids(self):
        self.assertEqual(["AES-256-CBC"], supported_cipher_ids())


if __name__ == "__main__":
    unittest.main()
