#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name:    testChecksumManager.py

    Description:

        Test suite for ChecksumManager. Covers SHA-256 checksum computation,
        constant-time verification, constant-time equality, and correct
        HybridSealError ApplicationCodes and HTTPCodes.
"""

import hashlib
import unittest

from hybridseal.encryption.checksum_manager import ChecksumManager
from hybridseal.handlers.error_handler import HybridSealError, ApplicationCodes, HTTPCodes



class TestChecksumManager(unittest.TestCase):

    DATA = b"hybrid-seal-test-payload"
    DATA_MODIFIED = b"hybrid-seal-test-payload-modified"


    def setUp(self):
        self.manager = ChecksumManager()


    """
        compute_checksum returns deterministic 32-byte SHA-256 digest.
    """
    def test_compute_checksum_properties(self):

        digest1 = self.manager.compute_checksum(self.DATA)
        digest2 = self.manager.compute_checksum(bytearray(self.DATA))

        self.assertIsInstance(digest1, bytes)
        self.assertEqual(32, len(digest1))
        self.assertEqual(digest1, digest2)
        self.assertEqual(hashlib.sha256(self.DATA).digest(), digest1)


    """
        compute_checksum rejects non-bytes input.
    """
    def test_compute_checksum_rejects_invalid_type(self):

        with self.assertRaises(HybridSealError) as cm:
            self.manager.compute_checksum("not-bytes")  # type: ignore

        exc = cm.exception
        self.assertEqual(exc.application_code, ApplicationCodes.INVALID_CHECKSUM_DATA)
        self.assertEqual(exc.http_code, HTTPCodes.BAD_REQUEST)
        self.assertEqual(exc.field, "data")


    """
        verify_checksum accepts the matching digest and rejects a modified payload.
    """
    def test_verify_checksum(self):

        digest = self.manager.compute_checksum(self.DATA)

        self.assertTrue(self.manager.verify_checksum(self.DATA, digest))
        self.assertFalse(self.manager.verify_checksum(self.DATA_MODIFIED, digest))


    """
        verify_checksum rejects expected checksums of the wrong type or size.
    """
    def test_verify_checksum_rejects_bad_expected(self):

        with self.assertRaises(HybridSealError) as cm:
            self.manager.verify_checksum(self.DATA, "digest")  # type: ignore
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_CHECKSUM)

        with self.assertRaises(HybridSealError) as cm:
            self.manager.verify_checksum(self.DATA, b"\x00" * 31)
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_LENGTH)
        self.assertEqual(cm.exception.field, "expected_checksum")


    """
        constant_time_equals compares bytes of any length.
    """
    def test_constant_time_equals(self):

        self.assertTrue(ChecksumManager.constant_time_equals(b"abc", bytearray(b"abc")))
        self.assertFalse(ChecksumManager.constant_time_equals(b"abc", b"abd"))
        self.assertFalse(ChecksumManager.constant_time_equals(b"abc", b"abcd"))

        with self.assertRaises(HybridSealError) as cm:
            ChecksumManager.constant_time_equals("abc", b"abc")
        self.assertEqual(cm.exception.application_code, ApplicationCodes.INVALID_TYPE)


if __name__ == "__main__":
    unittest.main()
