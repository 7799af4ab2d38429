#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testValueHandler.py

    Description:
        Test suite for JsonSerializer, Sensitive, seal_value, and unseal_value.
"""

import hashlib
import unittest
from cryptography.hazmat.primitives.asymmetric import rsa

from hybridseal.handlers.error_handler import HybridSealError, IdentityMismatchError, NoRecipientError, ApplicationCodes
from hybridseal.handlers.value_handler import seal_value, unseal_value
from hybridseal.identity.recipient_identity import RecipientIdentity, RecipientSecret
from hybridseal.utilities.serializer import JsonSerializer, Sensitive


class TestJsonSerializer(unittest.TestCase):

    def setUp(self) -> None:
        self.serializer = JsonSerializer()

    """
        Serialization is compact UTF-8 JSON.
    """
    def test_serialize_compact(self):

        self.assertEqual(b'{"a":[1,2],"b":"\xc3\xa9"}', self.serializer.serialize({"a": [1, 2], "b": "é"}))

    """
        Nested Sensitive values survive a round trip.
    """
    def test_sensitive_round_trip(self):

        value = {"user": "admin", "password": Sensitive("hunter2")}
        restored = self.serializer.deserialize(self.serializer.serialize(value))

        self.assertEqual("admin", restored["user"])
        self.assertIsInstance(restored["password"], Sensitive)
        self.assertEqual("hunter2", restored["password"].unwrap())

    """
        User dicts shaped like the internal markers come back unchanged.
    """
    def test_marker_shaped_dicts_round_trip(self):

        values = [
            {"__hybridseal_sensitive__": "x"},
            {"__hybridseal_sensitive__": [1, 2]},
            {"__hybridseal_escape__": {"a": 1}},
            {"__hybridseal_escape__": {"__hybridseal_sensitive__": "x"}},
            [{"__hybridseal_sensitive__": None}, {"__hybridseal_sensitive__": "y", "other": 1}],
            {"outer": {"__hybridseal_sensitive__": {"__hybridseal_sensitive__": "z"}}},
        ]

        for value in values:
            with self.subTest(value=value):
                restored = self.serializer.deserialize(self.serializer.serialize(value))

                self.assertEqual(value, restored)
                self.assertNotIsInstance(restored, Sensitive)

    """
        A Sensitive value wrapping a marker-shaped dict keeps both layers.
    """
    def test_sensitive_wrapping_marker_shaped_dict(self):

        restored = self.serializer.deserialize(self.serializer.serialize(Sensitive({"__hybridseal_sensitive__": "x"})))

        self.assertIsInstance(restored, Sensitive)
        self.assertEqual({"__hybridseal_sensitive__": "x"}, restored.unwrap())

    def test_serialize_rejects_unsupported(self):

        for bad in (object(), {"x": {1, 2}}, float("nan")):
            with self.subTest(bad=type(bad).__name__):
                with self.assertRaises(HybridSealError) as cm:
                    self.serializer.serialize(bad)

                self.assertEqual(cm.exception.application_code, ApplicationCodes.SERIALIZATION_ERROR)

    def test_deserialize_rejects_garbage(self):

        with self.assertRaises(HybridSealError) as cm:
            self.serializer.deserialize(b"\xff\xfe not json")
        self.assertEqual(cm.exception.application_code, ApplicationCodes.SERIALIZATION_ERROR)

        with self.assertRaises(HybridSealError) as cm:
            self.serializer.deserialize("text")  # type: ignore
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)

    """
        Sensitive never shows its content.
    """
    def test_sensitive_redacts(self):

        secret = Sensitive("hunter2")

        self.assertNotIn("hunter2", repr(secret))
        self.assertNotIn("hunter2", str(secret))
        self.assertEqual(Sensitive("hunter2"), secret)
        self.assertNotEqual(Sensitive("other"), secret)

        with self.assertRaises(TypeError):
            hash(secret)



class TestValueHandler(unittest.TestCase):

    FINGERPRINT = hashlib.sha256(b"value handler certificate").digest()

    @classmethod
    def setUpClass(cls) -> None:

        private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        cls.identity = RecipientIdentity(public_key=private_key.public_key(), fingerprint=cls.FINGERPRINT)
        cls.secret = RecipientSecret(private_key=private_key, fingerprint=cls.FINGERPRINT)
        cls.other_secret = RecipientSecret(private_key=private_key, fingerprint=hashlib.sha256(b"other").digest())

    """
        Structured values decrypt back wrapped in Sensitive.
    """
    def test_seal_unseal(self):

        for value in ("plain text", 42, None, [1, "two", 3.5], {"db": {"password": "s3cret"}}):
            with self.subTest(value=value):
                token = seal_value(value, self.identity)
                result = unseal_value(token, self.secret)

                self.assertIsInstance(result, Sensitive)
                self.assertEqual(value, result.unwrap())

    """
        A value that was already Sensitive is not wrapped twice.
    """
    def test_sensitive_not_double_wrapped(self):

        result = unseal_value(seal_value(Sensitive("hunter2"), self.identity), self.secret)

        self.assertIsInstance(result, Sensitive)
        self.assertEqual("hunter2", result.unwrap())

    """
        A payload dict that uses the Sensitive tag as a key is not turned into Sensitive.
    """
    def test_marker_shaped_payload_survives_seal_unseal(self):

        value = {"__hybridseal_sensitive__": "x"}
        result = unseal_value(seal_value(value, self.identity), self.secret)

        self.assertIsInstance(result, Sensitive)
        self.assertEqual(value, result.unwrap())

    def test_errors_propagate(self):

        token = seal_value({"k": "v"}, self.identity)

        with self.assertRaises(IdentityMismatchError):
            unseal_value(token, self.other_secret)

        with self.assertRaises(NoRecipientError):
            seal_value({"k": "v"}, None)


if __name__ == "__main__":
    unittest.main()
