#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testEncryptorDecryptor.py

    Description:
        End-to-end test suite for the Encryptor and Decryptor. Covers round
        trips, tamper detection, identity binding, wrong-key decryption,
        envelope structural validation, non-determinism, cipher selection,
        missing recipients, and session key wiping.
"""

import base64
import hashlib
import os
import unittest
from unittest import mock
from cryptography.hazmat.primitives.asymmetric import rsa

from hybridseal.encryption.AES_CBC_manager import AESCBCManager
from hybridseal.encryption.RSA_manager import RSAManager
from hybridseal.handlers.decryptor import Decryptor, decrypt
from hybridseal.handlers.encryptor import Encryptor, encrypt
from hybridseal.handlers.error_handler import (
    CipherError,
    EnvelopeFormatError,
    HybridSealError,
    IdentityMismatchError,
    KeyTransportError,
    NoRecipientError,
    ApplicationCodes,
)
from hybridseal.identity.recipient_identity import RecipientIdentity, RecipientSecret


class TestEncryptorDecryptor(unittest.TestCase):

    PAYLOAD = b'{"password":"Area 51 - the aliens are alive and well"}'
    FINGERPRINT_A = hashlib.sha256(b"certificate A").digest()
    FINGERPRINT_B = hashlib.sha256(b"certificate B").digest()

    @classmethod
    def setUpClass(cls) -> None:

        cls.private_key_a = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        cls.private_key_other = rsa.generate_private_key(public_exponent=65537, key_size=2048)

        cls.identity_a = RecipientIdentity(public_key=cls.private_key_a.public_key(), fingerprint=cls.FINGERPRINT_A)
        cls.secret_a = RecipientSecret(private_key=cls.private_key_a, fingerprint=cls.FINGERPRINT_A)

    def setUp(self) -> None:
        self.encryptor = Encryptor()
        self.decryptor = Decryptor()

    def _swap_field(self, token: str, index: int, raw: bytes) -> str:
        parts = token.split("|")
        parts[index] = base64.b64encode(raw).decode("ascii")
        return "|".join(parts)

    """
        Round trip for assorted payloads, including empty and binary ones.
    """
    def test_round_trip(self):

        for payload in (b"", b"x", self.PAYLOAD, os.urandom(1000), bytes(range(256)) * 4):
            with self.subTest(length=len(payload)):
                token = self.encryptor.encrypt(payload, self.identity_a)

                self.assertIsInstance(token, str)
                self.assertEqual(payload, self.decryptor.decrypt(token, self.secret_a))

    """
        Module-level helpers mirror the classes.
    """
    def test_module_level_functions(self):

        token = encrypt(bytearray(self.PAYLOAD), self.identity_a)
        self.assertEqual(self.PAYLOAD, decrypt(token, self.secret_a))

    """
        The token is four '|' separated Base64 fields and names its cipher.
    """
    def test_token_shape(self):

        token = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)
        parts = token.split("|")

        self.assertEqual(4, len(parts))
        self.assertEqual(b"AES-256-CBC", base64.b64decode(parts[0]))
        self.assertEqual(256, len(base64.b64decode(parts[1])))
        self.assertEqual(0, len(base64.b64decode(parts[2])) % 16)
        self.assertEqual(0, len(base64.b64decode(parts[3])) % 16)

    """
        The payload and fingerprint fields of one envelope do not share a first block.
    """
    def test_fields_do_not_share_first_block(self):

        for _ in range(5):
            parts = self.encryptor.encrypt(self.PAYLOAD, self.identity_a).split("|")

            self.assertNotEqual(base64.b64decode(parts[2])[:16], base64.b64decode(parts[3])[:16])

    """
        Flipping any byte of the ciphertext field fails with CipherError.
    """
    def test_tampered_ciphertext_fails(self):

        token = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)
        ciphertext = base64.b64decode(token.split("|")[2])

        for position in range(len(ciphertext)):
            with self.subTest(position=position):
                tampered = bytearray(ciphertext)
                tampered[position] ^= 0x80

                with self.assertRaises(CipherError) as cm:
                    self.decryptor.decrypt(self._swap_field(token, 2, bytes(tampered)), self.secret_a)

                self.assertEqual(cm.exception.field, "ciphertext")

    """
        Tampering with the wrapped fingerprint is a cipher failure, not a mismatch.
    """
    def test_tampered_fingerprint_field_fails(self):

        token = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)
        wrapped_fingerprint = bytearray(base64.b64decode(token.split("|")[3]))
        wrapped_fingerprint[20] ^= 0x01

        with self.assertRaises(CipherError) as cm:
            self.decryptor.decrypt(self._swap_field(token, 3, bytes(wrapped_fingerprint)), self.secret_a)

        self.assertEqual(cm.exception.field, "wrapped_fingerprint")

    """
        Right private key but another fingerprint fails with IdentityMismatchError.
    """
    def test_identity_binding(self):

        token = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)
        rotated_secret = RecipientSecret(private_key=self.private_key_a, fingerprint=self.FINGERPRINT_B)

        with self.assertRaises(IdentityMismatchError) as cm:
            self.decryptor.decrypt(token, rotated_secret)

        self.assertEqual(cm.exception.application_code, ApplicationCodes.IDENTITY_MISMATCH)

    """
        Encrypting for fingerprint B and decrypting as A also mismatches.
    """
    def test_token_for_other_fingerprint(self):

        identity_b = RecipientIdentity(public_key=self.private_key_a.public_key(), fingerprint=self.FINGERPRINT_B)
        token = self.encryptor.encrypt(self.PAYLOAD, identity_b)

        with self.assertRaises(IdentityMismatchError):
            self.decryptor.decrypt(token, self.secret_a)

    """
        An unrelated private key never yields plaintext.
    """
    def test_wrong_private_key(self):

        token = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)
        wrong_secret = RecipientSecret(private_key=self.private_key_other, fingerprint=self.FINGERPRINT_A)

        with self.assertRaises((KeyTransportError, CipherError)):
            self.decryptor.decrypt(token, wrong_secret)

    """
        A wrapped key from another envelope unwraps fine but opens nothing.
    """
    def test_swapped_wrapped_key_fails(self):

        token = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)
        other = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)

        parts = token.split("|")
        parts[1] = other.split("|")[1]

        with self.assertRaises(CipherError):
            self.decryptor.decrypt("|".join(parts), self.secret_a)

    """
        Structural errors surface before any cryptographic operation.
    """
    def test_structural_validation_precedes_crypto(self):

        token = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)
        parts = token.split("|")

        bad_tokens = [
            "|".join(parts[:3]),
            "|".join(parts + [parts[1]]),
            "|".join(parts[:2] + ["%%%%"] + parts[3:]),
            "",
        ]

        with mock.patch.object(RSAManager, "unwrap") as unwrap, mock.patch.object(AESCBCManager, "decrypt_block") as decrypt_block:
            for bad in bad_tokens:
                with self.subTest(token=bad[:20]):
                    with self.assertRaises(EnvelopeFormatError):
                        self.decryptor.decrypt(bad, self.secret_a)

            unwrap.assert_not_called()
            decrypt_block.assert_not_called()

    """
        Two encryptions of the same payload differ and both decrypt.
    """
    def test_non_deterministic(self):

        first = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)
        second = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)

        self.assertNotEqual(first, second)
        for index in range(1, 4):
            self.assertNotEqual(first.split("|")[index], second.split("|")[index])

        self.assertEqual(self.PAYLOAD, self.decryptor.decrypt(first, self.secret_a))
        self.assertEqual(self.PAYLOAD, self.decryptor.decrypt(second, self.secret_a))

    """
        The decryptor follows the cipher id in the envelope.
    """
    def test_unknown_cipher_id_is_rejected(self):

        token = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)

        with self.assertRaises(CipherError) as cm:
            self.decryptor.decrypt(self._swap_field(token, 0, b"AES-128-GCM"), self.secret_a)

        self.assertEqual(cm.exception.application_code, ApplicationCodes.UNSUPPORTED_CIPHER)

    def test_encryptor_rejects_unknown_cipher(self):

        with self.assertRaises(CipherError):
            Encryptor(cipher_id="ROT13")

    """
        Missing recipients fail loudly instead of falling back to another identity.
    """
    def test_no_recipient(self):

        with self.assertRaises(NoRecipientError) as cm:
            self.encryptor.encrypt(self.PAYLOAD, None)
        self.assertEqual(cm.exception.application_code, ApplicationCodes.NO_RECIPIENT)

        token = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)
        with self.assertRaises(NoRecipientError):
            self.decryptor.decrypt(token, None)

    """
        Only bytes-like payloads are accepted.
    """
    def test_payload_must_be_bytes(self):

        for bad in ("text", None, 42, {"a": 1}):
            with self.subTest(bad=bad):
                with self.assertRaises(HybridSealError) as cm:
                    self.encryptor.encrypt(bad, self.identity_a)  # type: ignore

                self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)

    """
        The session key is wiped after success and after failure.
    """
    def test_session_key_is_wiped(self):

        captured = []
        real_generate_key = AESCBCManager.generate_key

        def capture_key():
            key = real_generate_key()
            captured.append(key)
            return key

        with mock.patch.object(AESCBCManager, "generate_key", side_effect=capture_key):
            self.encryptor.encrypt(self.PAYLOAD, self.identity_a)

            with mock.patch.object(RSAManager, "wrap", side_effect=KeyTransportError("boom")):
                with self.assertRaises(KeyTransportError):
                    self.encryptor.encrypt(self.PAYLOAD, self.identity_a)

        self.assertEqual(2, len(captured))
        for key in captured:
            self.assertEqual(bytearray(32), key)

    """
        The unwrapped key is wiped after decryption, including on identity mismatch.
    """
    def test_unwrapped_key_is_wiped(self):

        token = self.encryptor.encrypt(self.PAYLOAD, self.identity_a)
        captured = []
        real_unwrap = RSAManager.unwrap

        def capture_unwrap(manager, *args, **kwargs):
            key = real_unwrap(manager, *args, **kwargs)
            captured.append(key)
            return key

        with mock.patch.object(RSAManager, "unwrap", autospec=True, side_effect=capture_unwrap):
            self.decryptor.decrypt(token, self.secret_a)

            with self.assertRaises(IdentityMismatchError):
                self.decryptor.decrypt(token, RecipientSecret(private_key=self.private_key_a, fingerprint=self.FINGERPRINT_B))

        self.assertEqual(2, len(captured))
        for key in captured:
            self.assertEqual(bytearray(32), key)


if __name__ == "__main__":
    unittest.main()
