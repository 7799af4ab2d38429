#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testIdentityProvider.py

    Description:
        Test suite for RecipientIdentity, RecipientSecret, FileIdentityProvider,
        and resolve_recipient. Certificates are self-signed and written to a
        temporary directory for each test.
"""

import os
import shutil
import tempfile
import unittest
from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from hybridseal.handlers.decryptor import decrypt
from hybridseal.handlers.encryptor import encrypt
from hybridseal.handlers.error_handler import HybridSealError, IdentityMismatchError, KeyTransportError, NoRecipientError, ApplicationCodes
from hybridseal.identity.identity_provider import FileIdentityProvider, IdentityProvider, resolve_recipient
from hybridseal.identity.recipient_identity import RecipientIdentity, RecipientSecret, certificate_fingerprint, load_certificate


def _self_signed_certificate(private_key: rsa.RSAPrivateKey, common_name: str) -> x509.Certificate:

    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)

    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(private_key, hashes.SHA256())
    )


def _private_pem(private_key: rsa.RSAPrivateKey) -> bytes:
    return private_key.private_bytes(encoding=serialization.Encoding.PEM, format=serialization.PrivateFormat.PKCS8, encryption_algorithm=serialization.NoEncryption())


def _certificate_pem(certificate: x509.Certificate) -> bytes:
    return certificate.public_bytes(serialization.Encoding.PEM)



class TestRecipientIdentity(unittest.TestCase):

    @classmethod
    def setUpClass(cls) -> None:

        cls.private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        cls.other_private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        cls.certificate = _self_signed_certificate(cls.private_key, "node-a.example.com")

    """
        The fingerprint is SHA-256 over the certificate DER.
    """
    def test_certificate_fingerprint(self):

        expected = self.certificate.fingerprint(hashes.SHA256())

        self.assertEqual(expected, certificate_fingerprint(self.certificate))
        self.assertEqual(expected, certificate_fingerprint(_certificate_pem(self.certificate)))
        self.assertEqual(expected, certificate_fingerprint(_certificate_pem(self.certificate).decode("ascii")))
        self.assertEqual(32, len(expected))

    """
        from_certificate and from_pem produce matching identity material.
    """
    def test_identity_and_secret_from_certificate(self):

        identity = RecipientIdentity.from_certificate(_certificate_pem(self.certificate))
        secret = RecipientSecret.from_pem(_private_pem(self.private_key), self.certificate)

        self.assertEqual(identity.fingerprint, secret.fingerprint)
        self.assertEqual(identity.public_key.public_numbers(), secret.identity().public_key.public_numbers())
        self.assertTrue(identity.public_pem().startswith("-----BEGIN PUBLIC KEY-----"))

        token = encrypt(b"payload", identity)
        self.assertEqual(b"payload", decrypt(token, secret))

    """
        A private key that does not belong to the certificate is refused.
    """
    def test_secret_rejects_mismatched_key(self):

        with self.assertRaises(KeyTransportError) as cm:
            RecipientSecret.from_pem(_private_pem(self.other_private_key), self.certificate)

        self.assertEqual(cm.exception.application_code, ApplicationCodes.KEY_MISMATCH)

    """
        The private key is kept out of the dataclass repr.
    """
    def test_secret_repr_hides_private_key(self):

        secret = RecipientSecret(private_key=self.private_key, fingerprint=b"\x01" * 32)
        self.assertNotIn("private_key", repr(secret))

    def test_invalid_certificate(self):

        for bad in ("", "not-a-certificate", b"-----BEGIN CERTIFICATE-----\nAAAA\n-----END CERTIFICATE-----\n", None):
            with self.subTest(bad=bad):
                with self.assertRaises(HybridSealError) as cm:
                    load_certificate(bad)

                self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_CERTIFICATE)

    def test_identity_validates_fields(self):

        with self.assertRaises(HybridSealError) as cm:
            RecipientIdentity(public_key=self.private_key.public_key(), fingerprint=b"")
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_FINGERPRINT)

        with self.assertRaises(KeyTransportError):
            RecipientIdentity(public_key="not-a-pem", fingerprint=b"\x01" * 32)



class TestFileIdentityProvider(unittest.TestCase):

    @classmethod
    def setUpClass(cls) -> None:

        cls.private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        cls.certificate = _self_signed_certificate(cls.private_key, "node-a.example.com")
        cls.rotated_certificate = _self_signed_certificate(cls.private_key, "node-a.example.com")

    def setUp(self) -> None:

        self.temp_dir = tempfile.mkdtemp(prefix="identity_provider_test_")
        self.private_key_path = os.path.join(self.temp_dir, "node_private_key.pem")
        self.certificate_path = os.path.join(self.temp_dir, "node_certificate.pem")

        with open(self.private_key_path, "wb") as f:
            f.write(_private_pem(self.private_key))
        with open(self.certificate_path, "wb") as f:
            f.write(_certificate_pem(self.certificate))

        self.provider = FileIdentityProvider(self.private_key_path, self.certificate_path)

    def tearDown(self) -> None:
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    """
        The provider yields matching identity and secret from disk.
    """
    def test_identity_and_secret(self):

        identity = self.provider.recipient_identity()
        secret = self.provider.recipient_secret()

        self.assertEqual(certificate_fingerprint(self.certificate), identity.fingerprint)
        self.assertEqual(identity.fingerprint, secret.fingerprint)
        self.assertIn("BEGIN CERTIFICATE", self.provider.certificate_pem())

        self.assertEqual(b"local", decrypt(encrypt(b"local", identity), secret))

    """
        After certificate rotation, old tokens fail with IdentityMismatchError.
    """
    def test_rotated_certificate_detected(self):

        token = encrypt(b"before rotation", self.provider.recipient_identity())

        with open(self.certificate_path, "wb") as f:
            f.write(_certificate_pem(self.rotated_certificate))

        with self.assertRaises(IdentityMismatchError):
            decrypt(token, self.provider.recipient_secret())

    """
        Missing or empty files raise NoRecipientError.
    """
    def test_missing_files(self):

        os.remove(self.certificate_path)

        with self.assertRaises(NoRecipientError) as cm:
            self.provider.recipient_identity()
        self.assertEqual(cm.exception.field, "certificate")

        with open(self.certificate_path, "wb") as f:
            f.write(b"")

        with self.assertRaises(NoRecipientError):
            self.provider.recipient_identity()

        os.remove(self.private_key_path)
        with self.assertRaises(NoRecipientError) as cm:
            self.provider.recipient_secret()
        self.assertEqual(cm.exception.field, "private_key")

    """
        Invalid constructor paths must raise INVALID_PATH.
    """
    def test_invalid_paths(self):

        with self.assertRaises(HybridSealError) as cm:
            FileIdentityProvider("", self.certificate_path)
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_PATH)
        self.assertEqual(cm.exception.field, "private_key_path")

        with self.assertRaises(HybridSealError) as cm:
            FileIdentityProvider(self.private_key_path, "  ")
        self.assertEqual(cm.exception.field, "certificate_path")

    """
        resolve_recipient prefers the explicit target and never silently falls back.
    """
    def test_resolve_recipient(self):

        other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        target = _self_signed_certificate(other_key, "node-b.example.com")

        resolved = resolve_recipient(target_certificate=_certificate_pem(target), provider=self.provider, allow_self=True)
        self.assertEqual(certificate_fingerprint(target), resolved.fingerprint)

        with self.assertRaises(NoRecipientError):
            resolve_recipient(provider=self.provider)

        with self.assertRaises(NoRecipientError):
            resolve_recipient(allow_self=True)

        own = resolve_recipient(provider=self.provider, allow_self=True)
        self.assertEqual(certificate_fingerprint(self.certificate), own.fingerprint)

    def test_base_provider_is_abstract(self):

        with self.assertRaises(NotImplementedError):
            IdentityProvider().recipient_identity()

        with self.assertRaises(NotImplementedError):
            IdentityProvider().recipient_secret()


if __name__ == "__main__":
    unittest.main()
