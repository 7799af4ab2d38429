#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testErrorHandler.py

    Description:
        Test suite for the typed HybridSeal errors, ErrorHandler failure
        packets, and the AuditLog they are recorded in.
"""

import json
import os
import shutil
import tempfile
import unittest

from hybridseal.handlers.error_handler import (
    CipherError,
    EnvelopeFormatError,
    ErrorHandler,
    HybridSealError,
    IdentityMismatchError,
    KeyTransportError,
    NoRecipientError,
    ApplicationCodes,
    HTTPCodes,
)
from hybridseal.utilities.audit_log import AuditLog
import hybridseal.constants as CONSTANTS


class TestErrorHandler(unittest.TestCase):

    def setUp(self) -> None:

        self.temp_dir = tempfile.mkdtemp(prefix="error_handler_test_")
        self.audit_log = AuditLog(os.path.join(self.temp_dir, "audit.log"))
        self.handler = ErrorHandler(self.audit_log)

    def tearDown(self) -> None:
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _records(self) -> list:
        with open(self.audit_log.path, "r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]

    """
        Each typed error carries its application code, HTTP status, and field.
    """
    def test_typed_errors(self):

        cases = [
            (EnvelopeFormatError("bad"), ApplicationCodes.INVALID_ENVELOPE, HTTPCodes.BAD_REQUEST, "envelope"),
            (CipherError("bad"), ApplicationCodes.CIPHER_ERROR, HTTPCodes.CIPHERTEXT_AUTH_ERROR, "ciphertext"),
            (KeyTransportError("bad"), ApplicationCodes.KEY_TRANSPORT_ERROR, HTTPCodes.KEY_VALIDATION_FAILURE, "wrapped_key"),
            (IdentityMismatchError(), ApplicationCodes.IDENTITY_MISMATCH, HTTPCodes.FORBIDDEN, "wrapped_fingerprint"),
            (NoRecipientError(), ApplicationCodes.NO_RECIPIENT, HTTPCodes.BAD_REQUEST, "recipient"),
        ]

        for error, application_code, http_code, field in cases:
            with self.subTest(error=type(error).__name__):
                self.assertIsInstance(error, HybridSealError)
                self.assertEqual(application_code, error.application_code)
                self.assertEqual(http_code, error.http_code)
                self.assertEqual(field, error.field)
                self.assertIn(application_code, str(error))

    """
        A HybridSealError keeps its own detail in the failure packet.
    """
    def test_handle_hybridseal_error(self):

        packet, status = self.handler.handle_server_error(IdentityMismatchError(), "decrypt")

        self.assertEqual(HTTPCodes.FORBIDDEN, status)
        self.assertEqual(CONSTANTS._PROTOCOL_VERSION, packet["protocol_version"])
        self.assertEqual(CONSTANTS.RESPONSE_STATUS_FAILURE, packet["response_status"])
        self.assertEqual(ApplicationCodes.IDENTITY_MISMATCH, packet["error_code"])
        self.assertEqual("wrapped_fingerprint", packet["field"])
        self.assertRegex(packet["timestamp"], r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")

    """
        Unexpected exceptions are normalized and their detail stays out of the packet.
    """
    def test_handle_unexpected_error(self):

        packet, status = self.handler.handle_server_error(RuntimeError("internal detail"), "encrypt")

        self.assertEqual(HTTPCodes.INTERNAL_SERVER_ERROR, status)
        self.assertEqual(ApplicationCodes.INTERNAL_SERVER_ERROR, packet["error_code"])
        self.assertNotIn("internal detail", packet["message"])

        records = self._records()
        self.assertEqual(1, len(records))
        self.assertEqual("server_exception", records[0]["event"])
        self.assertEqual("encrypt", records[0]["context"])
        self.assertEqual("internal detail", records[0]["detail"])

    """
        AuditLog appends one JSON record per event.
    """
    def test_audit_log_appends(self):

        self.audit_log.event(event="encrypt", cipher_id="AES-256-CBC")
        self.audit_log.event(event="decrypt", cipher_id="AES-256-CBC")

        records = self._records()
        self.assertEqual(["encrypt", "decrypt"], [r["event"] for r in records])
        self.assertIn("timestamp", records[0])

    """
        An unwritable audit path does not raise.
    """
    def test_audit_log_unwritable_path(self):

        audit_log = AuditLog(os.path.join(self.temp_dir, "missing", "audit.log"))
        audit_log.event(event="encrypt")

        self.assertFalse(os.path.exists(audit_log.path))


if __name__ == "__main__":
    unittest.main()
