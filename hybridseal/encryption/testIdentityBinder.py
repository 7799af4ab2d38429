#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testIdentityBinder.py

    Description:
        Test suite for IV-prefix framing and the IdentityBinder. Verifies that
        sealed bodies open under the same key without knowing the IV, that
        corrupted ciphertext raises CipherError, and that fingerprints are
        bound and compared correctly.
"""

import hashlib
import unittest
from hybridseal.encryption.AES_CBC_manager import AESCBCManager
from hybridseal.encryption.framing import seal_with_iv_prefix, open_with_iv_prefix
from hybridseal.encryption.identity_binder import IdentityBinder, validate_fingerprint
from hybridseal.handlers.error_handler import CipherError, IdentityMismatchError, HybridSealError, ApplicationCodes, HTTPCodes


class TestFraming(unittest.TestCase):

    BODY = b"framed body that spans more than one AES block"

    def setUp(self) -> None:

        self.engine = AESCBCManager()
        self.key = AESCBCManager.generate_key()
        self.iv = AESCBCManager.generate_iv()

    """
        The opener recovers the body without being told the IV.
    """
    def test_seal_open_round_trip(self):

        for body in (b"", b"x", self.BODY, b"\x00" * 64):
            with self.subTest(length=len(body)):
                ciphertext = seal_with_iv_prefix(self.engine, self.key, self.iv, body)
                self.assertEqual(body, open_with_iv_prefix(self.engine, self.key, ciphertext))

    """
        The sealed plaintext is prefix ++ body ++ SHA-256(body), with a prefix block independent of the IV.
    """
    def test_sealed_layout(self):

        ciphertext = seal_with_iv_prefix(self.engine, self.key, self.iv, self.BODY)
        plaintext = self.engine.decrypt_block(self.key, self.iv, ciphertext)

        self.assertEqual(16, len(plaintext[:16]))
        self.assertNotEqual(self.iv, plaintext[:16])
        self.assertEqual(self.BODY, plaintext[16:-32])
        self.assertEqual(hashlib.sha256(self.BODY).digest(), plaintext[-32:])

    """
        Two seals under the same key never share a first ciphertext block.
    """
    def test_first_block_differs_under_same_key(self):

        first = seal_with_iv_prefix(self.engine, self.key, AESCBCManager.generate_iv(), self.BODY)
        second = seal_with_iv_prefix(self.engine, self.key, AESCBCManager.generate_iv(), b"fingerprint")

        self.assertNotEqual(first[:16], second[:16])

        same_iv = seal_with_iv_prefix(self.engine, self.key, self.iv, self.BODY)
        again = seal_with_iv_prefix(self.engine, self.key, self.iv, self.BODY)

        self.assertNotEqual(same_iv[:16], again[:16])
        self.assertEqual(open_with_iv_prefix(self.engine, self.key, same_iv), open_with_iv_prefix(self.engine, self.key, again))

    """
        Flipping any single ciphertext byte is detected.
    """
    def test_any_flipped_byte_is_detected(self):

        ciphertext = seal_with_iv_prefix(self.engine, self.key, self.iv, self.BODY)

        for position in range(len(ciphertext)):
            with self.subTest(position=position):
                tampered = bytearray(ciphertext)
                tampered[position] ^= 0x01

                with self.assertRaises(CipherError) as cm:
                    open_with_iv_prefix(self.engine, self.key, bytes(tampered), "ciphertext")

                self.assertEqual(cm.exception.field, "ciphertext")

    """
        Ciphertext too short to hold the prefix and digest is rejected.
    """
    def test_truncated_plaintext_is_rejected(self):

        short = self.engine.encrypt_block(self.key, self.iv, b"\x00" * 20)

        with self.assertRaises(CipherError) as cm:
            open_with_iv_prefix(self.engine, self.key, short, "wrapped_fingerprint")

        self.assertEqual(cm.exception.application_code, ApplicationCodes.CIPHERTEXT_AUTH_ERROR)
        self.assertEqual(cm.exception.field, "wrapped_fingerprint")

    """
        The IV prefix must be a 16-byte value.
    """
    def test_seal_rejects_bad_iv(self):

        with self.assertRaises(CipherError) as cm:
            seal_with_iv_prefix(self.engine, self.key, b"\x00" * 8, self.BODY)

        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_IV)



class TestIdentityBinder(unittest.TestCase):

    FINGERPRINT = hashlib.sha256(b"certificate-a").digest()
    OTHER_FINGERPRINT = hashlib.sha256(b"certificate-b").digest()

    def setUp(self) -> None:

        self.engine = AESCBCManager()
        self.binder = IdentityBinder()
        self.key = AESCBCManager.generate_key()

    """
        A bound fingerprint verifies against the same fingerprint.
    """
    def test_bind_verify(self):

        wrapped = self.binder.bind(self.engine, self.key, self.FINGERPRINT)

        self.assertIsNone(self.binder.verify(self.engine, self.key, wrapped, self.FINGERPRINT))

    """
        Each binding uses a fresh IV.
    """
    def test_bind_is_randomized(self):

        first = self.binder.bind(self.engine, self.key, self.FINGERPRINT)
        second = self.binder.bind(self.engine, self.key, self.FINGERPRINT)

        self.assertNotEqual(first, second)

    """
        A different fingerprint raises IdentityMismatchError.
    """
    def test_verify_mismatch(self):

        wrapped = self.binder.bind(self.engine, self.key, self.FINGERPRINT)

        with self.assertRaises(IdentityMismatchError) as cm:
            self.binder.verify(self.engine, self.key, wrapped, self.OTHER_FINGERPRINT)

        self.assertEqual(cm.exception.application_code, ApplicationCodes.IDENTITY_MISMATCH)
        self.assertEqual(cm.exception.http_code, HTTPCodes.FORBIDDEN)

    """
        A prefix of the bound fingerprint is still a mismatch.
    """
    def test_verify_mismatch_on_truncated_fingerprint(self):

        wrapped = self.binder.bind(self.engine, self.key, self.FINGERPRINT)

        with self.assertRaises(IdentityMismatchError):
            self.binder.verify(self.engine, self.key, wrapped, self.FINGERPRINT[:16])

    """
        A wrong key is a cipher failure, not an identity mismatch.
    """
    def test_verify_with_wrong_key_is_cipher_error(self):

        wrapped = self.binder.bind(self.engine, self.key, self.FINGERPRINT)

        with self.assertRaises(CipherError) as cm:
            self.binder.verify(self.engine, AESCBCManager.generate_key(), wrapped, self.FINGERPRINT)

        self.assertEqual(cm.exception.field, "wrapped_fingerprint")

    """
        Fingerprints must be 1 to 64 bytes.
    """
    def test_invalid_fingerprints(self):

        for bad in (b"", b"\x00" * 65, "not-bytes", None):
            with self.subTest(bad=bad):
                with self.assertRaises(HybridSealError) as cm:
                    validate_fingerprint(bad)

                self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_FINGERPRINT)

        self.assertEqual(b"\x01" * 64, validate_fingerprint(bytearray(b"\x01" * 64)))


if __name__ == "__main__":
    unittest.main()
