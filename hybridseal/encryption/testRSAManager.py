#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testRSAManager.py

    Description:
        Test suite for RSAManager key transport. Ensures RSA-OAEP wrapping and
        unwrapping of session keys, PEM parsing, key size limits, wrong-key
        detection, and proper KeyTransportError ApplicationCodes & HTTPCodes.
"""

import unittest
from cryptography.hazmat.primitives.asymmetric import rsa, ec, padding
from cryptography.hazmat.primitives import serialization, hashes
from hybridseal.encryption.RSA_manager import RSAManager
from hybridseal.handlers.error_handler import KeyTransportError, ApplicationCodes, HTTPCodes


class TestRSAManager(unittest.TestCase):

    AES_KEY_32 = b"\x01" * 32

    """
        RSA key generation is slow; share two recipient keypairs across the suite.
    """
    @classmethod
    def setUpClass(cls) -> None:

        cls.private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        cls.other_private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

        cls.public_pem = cls.private_key.public_key().public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo
        ).decode("utf-8")

        cls.private_pem = cls.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption()
        )

    def setUp(self) -> None:
        self.manager = RSAManager()

    """
        wrap/unwrap must round-trip a session key with key objects and with PEM.
    """
    def test_wrap_unwrap_round_trip(self):

        for public_key, private_key in ((self.private_key.public_key(), self.private_key), (self.public_pem, self.private_pem)):
            with self.subTest(kind=type(public_key).__name__):
                wrapped = self.manager.wrap(public_key, self.AES_KEY_32)

                self.assertIsInstance(wrapped, bytes)
                self.assertEqual(256, len(wrapped))

                recovered = self.manager.unwrap(private_key, wrapped)
                self.assertIsInstance(recovered, bytearray)
                self.assertEqual(self.AES_KEY_32, bytes(recovered))

    """
        Wrapped keys use RSA-OAEP with SHA-256.
    """
    def test_wrap_uses_oaep_sha256(self):

        wrapped = self.manager.wrap(self.public_pem, self.AES_KEY_32)

        recovered = self.private_key.decrypt(
            wrapped,
            padding.OAEP(
                mgf=padding.MGF1(algorithm=hashes.SHA256()),
                algorithm=hashes.SHA256(),
                label=None,
            ),
        )
        self.assertEqual(recovered, self.AES_KEY_32)

    """
        Wrapping is randomized: the same key wraps differently each time.
    """
    def test_wrap_is_randomized(self):

        first = self.manager.wrap(self.public_pem, self.AES_KEY_32)
        second = self.manager.wrap(self.public_pem, self.AES_KEY_32)

        self.assertNotEqual(first, second)

    """
        wrap must reject invalid session key types and sizes.
    """
    def test_wrap_rejects_invalid_session_key(self):

        for bad in ("not-bytes", b"", b"\x00" * 191):
            with self.subTest(bad=bad[:8]):
                with self.assertRaises(KeyTransportError) as cm:
                    self.manager.wrap(self.public_pem, bad)  # type: ignore

                exc = cm.exception
                self.assertEqual(exc.application_code, ApplicationCodes.INVALID_AES_KEY)
                self.assertEqual(exc.http_code, HTTPCodes.KEY_VALIDATION_FAILURE)
                self.assertEqual(exc.field, "aes_key")

    """
        The largest session key OAEP-SHA256 allows for a 2048-bit key still wraps.
    """
    def test_wrap_accepts_maximum_length(self):

        limit = RSAManager.max_wrappable_length(self.private_key.public_key())
        self.assertEqual(190, limit)

        wrapped = self.manager.wrap(self.public_pem, b"\x02" * limit)
        self.assertEqual(b"\x02" * limit, bytes(self.manager.unwrap(self.private_key, wrapped, limit)))

    """
        wrap must reject malformed, empty, and non-RSA public keys.
    """
    def test_wrap_rejects_invalid_public_key(self):

        ec_public_pem = ec.generate_private_key(ec.SECP256R1()).public_key().public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo
        )

        for bad in ("", "not-a-pem", ec_public_pem, None, 42):
            with self.subTest(bad=bad):
                with self.assertRaises(KeyTransportError) as cm:
                    self.manager.wrap(bad, self.AES_KEY_32)

                exc = cm.exception
                self.assertEqual(exc.application_code, ApplicationCodes.INVALID_PUBLIC_KEY)
                self.assertEqual(exc.field, "public_key")

    """
        RSA keys below 2048 bits are refused.
    """
    def test_wrap_rejects_small_rsa_key(self):

        small_key = rsa.generate_private_key(public_exponent=65537, key_size=1024)

        with self.assertRaises(KeyTransportError) as cm:
            self.manager.wrap(small_key.public_key(), self.AES_KEY_32)

        self.assertEqual(cm.exception.application_code, ApplicationCodes.RSA_KEY_TOO_SMALL)

    """
        unwrap must reject empty and non-bytes ciphertext.
    """
    def test_unwrap_rejects_invalid_ciphertext(self):

        for bad in ("not-bytes", b""):
            with self.subTest(bad=bad):
                with self.assertRaises(KeyTransportError) as cm:
                    self.manager.unwrap(self.private_key, bad)  # type: ignore

                exc = cm.exception
                self.assertEqual(exc.application_code, ApplicationCodes.INVALID_CIPHERTEXT)
                self.assertEqual(exc.field, "wrapped_key")

    """
        unwrap with an unrelated private key must fail with RSA_DECRYPT_ERROR.
    """
    def test_unwrap_with_wrong_private_key(self):

        wrapped = self.manager.wrap(self.public_pem, self.AES_KEY_32)

        with self.assertRaises(KeyTransportError) as cm:
            self.manager.unwrap(self.other_private_key, wrapped)

        exc = cm.exception
        self.assertEqual(exc.application_code, ApplicationCodes.RSA_DECRYPT_ERROR)
        self.assertEqual(exc.http_code, HTTPCodes.KEY_VALIDATION_FAILURE)
        self.assertEqual(exc.field, "wrapped_key")

    """
        Garbage of the right size cannot be unwrapped.
    """
    def test_unwrap_garbage(self):

        with self.assertRaises(KeyTransportError) as cm:
            self.manager.unwrap(self.private_key, b"\x00" * 256)

        self.assertEqual(cm.exception.application_code, ApplicationCodes.RSA_DECRYPT_ERROR)

    """
        An unwrapped key of unexpected length signals KEY_MISMATCH.
    """
    def test_unwrap_rejects_wrong_length(self):

        wrapped = self.manager.wrap(self.public_pem, b"\x03" * 16)

        with self.assertRaises(KeyTransportError) as cm:
            self.manager.unwrap(self.private_key, wrapped)

        self.assertEqual(cm.exception.application_code, ApplicationCodes.KEY_MISMATCH)

    """
        unwrap must reject malformed private key material.
    """
    def test_unwrap_rejects_invalid_private_key(self):

        wrapped = self.manager.wrap(self.public_pem, self.AES_KEY_32)

        for bad in ("", "not-a-pem", self.public_pem):
            with self.subTest(bad=bad[:10]):
                with self.assertRaises(KeyTransportError) as cm:
                    self.manager.unwrap(bad, wrapped)

                self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_PRIVATE_KEY)
                self.assertEqual(cm.exception.field, "private_key")


if __name__ == "__main__":
    unittest.main()
