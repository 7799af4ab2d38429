#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testEnvelopeCodec.py

    Description:
        Test suite for EnvelopeCodec. Verifies the four-field '|' wire format,
        field order, Base64 handling, and every EnvelopeFormatError branch.
"""

import base64
import unittest
from hybridseal.handlers.envelope_codec import Envelope, EnvelopeCodec
from hybridseal.handlers.error_handler import EnvelopeFormatError, ApplicationCodes, HTTPCodes


class TestEnvelopeCodec(unittest.TestCase):

    CIPHER_ID = b"AES-256-CBC"
    WRAPPED_KEY = bytes(range(256))
    CIPHERTEXT = b"\xfb\xff" * 40
    WRAPPED_FINGERPRINT = b"\x10" * 64

    def setUp(self) -> None:
        self.codec = EnvelopeCodec()
        self.token = self.codec.encode(self.CIPHER_ID, self.WRAPPED_KEY, self.CIPHERTEXT, self.WRAPPED_FINGERPRINT)

    """
        encode() joins four standard Base64 fields with '|' in fixed order.
    """
    def test_encode_layout(self):

        parts = self.token.split("|")

        self.assertEqual(4, len(parts))
        self.assertEqual(base64.b64encode(self.CIPHER_ID).decode("ascii"), parts[0])
        self.assertEqual(base64.b64encode(self.WRAPPED_KEY).decode("ascii"), parts[1])
        self.assertEqual(base64.b64encode(self.CIPHERTEXT).decode("ascii"), parts[2])
        self.assertEqual(base64.b64encode(self.WRAPPED_FINGERPRINT).decode("ascii"), parts[3])
        self.assertNotIn("\n", self.token)

    """
        decode() returns the four fields by position and by name.
    """
    def test_decode_fields(self):

        envelope = self.codec.decode(self.token)

        self.assertIsInstance(envelope, Envelope)
        self.assertEqual((self.CIPHER_ID, self.WRAPPED_KEY, self.CIPHERTEXT, self.WRAPPED_FINGERPRINT), tuple(envelope))
        self.assertEqual(self.CIPHERTEXT, envelope.ciphertext)

    """
        A text cipher id is encoded as ASCII.
    """
    def test_encode_accepts_text_cipher_id(self):

        token = self.codec.encode("AES-256-CBC", self.WRAPPED_KEY, self.CIPHERTEXT, self.WRAPPED_FINGERPRINT)
        self.assertEqual(self.token, token)

    """
        MIME-style line breaks inside fields and a trailing newline are tolerated.
    """
    def test_decode_tolerates_line_breaks(self):

        wrapped = "|".join(base64.encodebytes(field).decode("ascii") for field in (self.CIPHER_ID, self.WRAPPED_KEY, self.CIPHERTEXT, self.WRAPPED_FINGERPRINT))

        self.assertIn("\n", wrapped)
        self.assertEqual(self.codec.decode(self.token), self.codec.decode(wrapped))

    """
        ASCII bytes are accepted as a token.
    """
    def test_decode_accepts_ascii_bytes(self):
        self.assertEqual(self.codec.decode(self.token), self.codec.decode(self.token.encode("ascii")))

    """
        Anything other than exactly four fields is rejected.
    """
    def test_decode_rejects_wrong_field_count(self):

        parts = self.token.split("|")

        for bad in ("|".join(parts[:3]), "|".join(parts + [parts[0]]), parts[0], "|".join(parts[:2])):
            with self.subTest(fields=bad.count("|") + 1):
                with self.assertRaises(EnvelopeFormatError) as cm:
                    self.codec.decode(bad)

                exc = cm.exception
                self.assertEqual(exc.application_code, ApplicationCodes.INVALID_ENVELOPE)
                self.assertEqual(exc.http_code, HTTPCodes.BAD_REQUEST)
                self.assertEqual(exc.field, "envelope")

    """
        A field that is not valid Base64 is rejected and named.
    """
    def test_decode_rejects_invalid_base64(self):

        parts = self.token.split("|")

        for index, name in enumerate(("cipher_id", "wrapped_key", "ciphertext", "wrapped_fingerprint")):
            for bad_field in ("not base64!", "abc", "ab=c", "****"):
                with self.subTest(field=name, value=bad_field):
                    tampered = list(parts)
                    tampered[index] = bad_field

                    with self.assertRaises(EnvelopeFormatError) as cm:
                        self.codec.decode("|".join(tampered))

                    self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_BASE64)
                    self.assertEqual(cm.exception.field, name)

    """
        Empty fields are rejected.
    """
    def test_decode_rejects_empty_field(self):

        parts = self.token.split("|")
        parts[2] = ""

        with self.assertRaises(EnvelopeFormatError) as cm:
            self.codec.decode("|".join(parts))

        self.assertEqual(cm.exception.field, "ciphertext")

    """
        Non-text tokens are rejected.
    """
    def test_decode_rejects_non_text(self):

        for bad in (None, 42, b"\xff|\xfe|\xfd|\xfc"):
            with self.subTest(bad=bad):
                with self.assertRaises(EnvelopeFormatError) as cm:
                    self.codec.decode(bad)

                self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)

    """
        encode() rejects empty or non-bytes fields.
    """
    def test_encode_rejects_invalid_fields(self):

        with self.assertRaises(EnvelopeFormatError) as cm:
            self.codec.encode(self.CIPHER_ID, b"", self.CIPHERTEXT, self.WRAPPED_FINGERPRINT)
        self.assertEqual(cm.exception.field, "wrapped_key")

        with self.assertRaises(EnvelopeFormatError) as cm:
            self.codec.encode(self.CIPHER_ID, self.WRAPPED_KEY, "text", self.WRAPPED_FINGERPRINT)  # type: ignore
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)
        self.assertEqual(cm.exception.field, "ciphertext")


if __name__ == "__main__":
    unittest.main()
