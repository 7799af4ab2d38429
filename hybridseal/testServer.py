#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
    File name: testServer.py

    Description:
        Test suite for the HybridSeal Flask service. Runs the identity,
        encrypt, and decrypt routes through the Flask test client against a
        local identity written to a temporary directory.
"""

import json
import os
import shutil
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from unittest import mock

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from hybridseal.handlers.encryptor import encrypt
from hybridseal.handlers.error_handler import HybridSealError, ApplicationCodes, HTTPCodes
from hybridseal.identity.recipient_identity import RecipientIdentity
from hybridseal.server import create_app, load_config
from hybridseal.utilities.serializer import JsonSerializer
import hybridseal.constants as CONSTANTS


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



class TestServer(unittest.TestCase):

    @classmethod
    def setUpClass(cls) -> None:

        cls.private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        cls.certificate = _self_signed_certificate(cls.private_key, "local.example.com")

        cls.remote_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        cls.remote_certificate = _self_signed_certificate(cls.remote_key, "remote.example.com")

    def setUp(self) -> None:

        self.temp_dir = tempfile.mkdtemp(prefix="server_test_")
        self.private_key_path = os.path.join(self.temp_dir, "private_key.pem")
        self.certificate_path = os.path.join(self.temp_dir, "certificate.pem")
        self.audit_log_path = os.path.join(self.temp_dir, "audit.log")

        with open(self.private_key_path, "wb") as f:
            f.write(self.private_key.private_bytes(encoding=serialization.Encoding.PEM, format=serialization.PrivateFormat.PKCS8, encryption_algorithm=serialization.NoEncryption()))
        with open(self.certificate_path, "wb") as f:
            f.write(self.certificate.public_bytes(serialization.Encoding.PEM))

        self.app = self._create_app()
        self.client = self.app.test_client()

    def tearDown(self) -> None:
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _create_app(self, **overrides):

        config = {
            "PRIVATE_KEY_PATH": self.private_key_path,
            "CERTIFICATE_PATH": self.certificate_path,
            "ALLOW_SELF_ENCRYPTION": False,
            "AUDIT_LOG_PATH": self.audit_log_path,
            "TESTING": True,
        }
        config.update(overrides)
        return create_app(config)

    def _audit_records(self) -> list:
        with open(self.audit_log_path, "r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]

    def _assert_failure(self, response, http_code: int, application_code: str) -> dict:

        self.assertEqual(http_code, response.status_code)

        body = response.get_json()
        self.assertEqual(CONSTANTS.RESPONSE_STATUS_FAILURE, body["response_status"])
        self.assertEqual(application_code, body["error_code"])
        return body

    """
        GET /api/identity returns the local certificate and its fingerprint.
    """
    def test_identity(self):

        response = self.client.get("/api/identity")
        body = response.get_json()

        self.assertEqual(HTTPCodes.OK, response.status_code)
        self.assertEqual(self.certificate.fingerprint(hashes.SHA256()).hex(), body["fingerprint"])
        self.assertIn("BEGIN CERTIFICATE", body["certificate"])

    """
        Without a configured identity the identity route reports no recipient.
    """
    def test_identity_not_configured(self):

        client = self._create_app(PRIVATE_KEY_PATH="", CERTIFICATE_PATH="").test_client()
        self._assert_failure(client.get("/api/identity"), HTTPCodes.BAD_REQUEST, ApplicationCodes.NO_RECIPIENT)

    """
        A value encrypted for the local certificate decrypts through the service.
    """
    def test_encrypt_decrypt_self(self):

        certificate_pem = self.certificate.public_bytes(serialization.Encoding.PEM).decode("ascii")
        data = {"username": "admin", "password": "hunter2", "ports": [80, 443]}

        response = self.client.post("/api/encrypt", json={"data": data, "recipient_certificate": certificate_pem})
        self.assertEqual(HTTPCodes.OK, response.status_code)

        token = response.get_json()["token"]
        self.assertEqual(4, len(token.split("|")))
        self.assertNotIn("hunter2", token)

        response = self.client.post("/api/decrypt", json={"token": token})
        self.assertEqual(HTTPCodes.OK, response.status_code)
        self.assertEqual(data, response.get_json()["data"])

        events = [record["event"] for record in self._audit_records()]
        self.assertEqual(["encrypt", "decrypt"], events)

        with open(self.audit_log_path, "r", encoding="utf-8") as f:
            self.assertNotIn("hunter2", f.read())

    """
        Data shaped like the serializer's markers survives the service round trip.
    """
    def test_marker_shaped_data_round_trip(self):

        client = self._create_app(ALLOW_SELF_ENCRYPTION=True).test_client()
        data = {"__hybridseal_sensitive__": "x", "nested": [{"__hybridseal_escape__": {"a": 1}}]}

        for value in (data, {"__hybridseal_sensitive__": "x"}):
            with self.subTest(value=value):
                token = client.post("/api/encrypt", json={"data": value}).get_json()["token"]

                response = client.post("/api/decrypt", json={"token": token})
                self.assertEqual(HTTPCodes.OK, response.status_code)
                self.assertEqual(value, response.get_json()["data"])

    """
        A token for another certificate cannot be decrypted locally.
    """
    def test_encrypt_for_remote_certificate(self):

        remote_pem = self.remote_certificate.public_bytes(serialization.Encoding.PEM).decode("ascii")

        response = self.client.post("/api/encrypt", json={"data": "for remote", "recipient_certificate": remote_pem})
        self.assertEqual(HTTPCodes.OK, response.status_code)

        response = self.client.post("/api/decrypt", json={"token": response.get_json()["token"]})
        self.assertIn(response.status_code, (HTTPCodes.KEY_VALIDATION_FAILURE, HTTPCodes.CIPHERTEXT_AUTH_ERROR))

    """
        Without a certificate, self-encryption is refused unless enabled.
    """
    def test_self_encryption_flag(self):

        response = self.client.post("/api/encrypt", json={"data": "x"})
        body = self._assert_failure(response, HTTPCodes.BAD_REQUEST, ApplicationCodes.NO_RECIPIENT)
        self.assertEqual("recipient", body["field"])

        client = self._create_app(ALLOW_SELF_ENCRYPTION=True).test_client()

        response = client.post("/api/encrypt", json={"data": "x"})
        self.assertEqual(HTTPCodes.OK, response.status_code)

        response = client.post("/api/decrypt", json={"token": response.get_json()["token"]})
        self.assertEqual("x", response.get_json()["data"])

    """
        A token bound to another fingerprint of the same key is a 403.
    """
    def test_identity_mismatch(self):

        stale_identity = RecipientIdentity(public_key=self.private_key.public_key(), fingerprint=b"\x42" * 32)
        token = encrypt(JsonSerializer().serialize("stale"), stale_identity)

        response = self.client.post("/api/decrypt", json={"token": token})
        self._assert_failure(response, HTTPCodes.FORBIDDEN, ApplicationCodes.IDENTITY_MISMATCH)

    """
        Malformed tokens are rejected as envelope errors.
    """
    def test_decrypt_malformed_token(self):

        response = self.client.post("/api/decrypt", json={"token": "a|b|c"})
        self._assert_failure(response, HTTPCodes.BAD_REQUEST, ApplicationCodes.INVALID_ENVELOPE)

        response = self.client.post("/api/decrypt", json={"token": ""})
        self._assert_failure(response, HTTPCodes.BAD_REQUEST, ApplicationCodes.INVALID_ENVELOPE)

    """
        Request bodies must be JSON objects with exactly the expected fields.
    """
    def test_request_validation(self):

        response = self.client.post("/api/encrypt", data="data=x", content_type="application/x-www-form-urlencoded")
        self._assert_failure(response, HTTPCodes.BAD_REQUEST, ApplicationCodes.INVALID_CONTENT_TYPE)

        response = self.client.post("/api/encrypt", data="{not json", content_type="application/json")
        self._assert_failure(response, HTTPCodes.BAD_REQUEST, ApplicationCodes.MALFORMED_JSON)

        response = self.client.post("/api/encrypt", json=["data"])
        self._assert_failure(response, HTTPCodes.BAD_REQUEST, ApplicationCodes.INVALID_PACKET_STRUCTURE)

        response = self.client.post("/api/encrypt", json={"recipient_certificate": "x"})
        self._assert_failure(response, HTTPCodes.BAD_REQUEST, ApplicationCodes.INVALID_PACKET_STRUCTURE)

        response = self.client.post("/api/decrypt", json={"token": "x", "extra": 1})
        self._assert_failure(response, HTTPCodes.BAD_REQUEST, ApplicationCodes.INVALID_PACKET_STRUCTURE)

        response = self.client.post("/api/encrypt", json={"data": "x", "recipient_certificate": "not a certificate"})
        self._assert_failure(response, HTTPCodes.BAD_REQUEST, ApplicationCodes.INVALID_CERTIFICATE)

    """
        Oversized bodies are a 413 failure packet.
    """
    def test_payload_too_large(self):

        client = self._create_app(MAX_CONTENT_LENGTH=64).test_client()

        response = client.post("/api/encrypt", json={"data": "x" * 1024})
        self.assertEqual(HTTPCodes.PAYLOAD_TOO_LARGE, response.status_code)

    """
        Routing errors keep their status and use the failure packet shape.
    """
    def test_routing_errors(self):

        self._assert_failure(self.client.get("/api/missing"), HTTPCodes.NOT_FOUND, ApplicationCodes.INVALID_REQUEST)
        self._assert_failure(self.client.get("/api/encrypt"), 405, ApplicationCodes.INVALID_REQUEST)

    """
        Environment variables feed the configuration and overrides win.
    """
    def test_load_config(self):

        environment = {
            CONSTANTS._ENV_PRIVATE_KEY_PATH: "/etc/hybridseal/key.pem",
            CONSTANTS._ENV_CERTIFICATE_PATH: "/etc/hybridseal/cert.pem",
            CONSTANTS._ENV_ALLOW_SELF_ENCRYPTION: "Yes",
            CONSTANTS._ENV_MAX_CONTENT_LENGTH: "1024",
        }

        with mock.patch.dict(os.environ, environment, clear=True):
            config = load_config({"CERTIFICATE_PATH": "/tmp/override.pem"})

        self.assertEqual("/etc/hybridseal/key.pem", config["PRIVATE_KEY_PATH"])
        self.assertEqual("/tmp/override.pem", config["CERTIFICATE_PATH"])
        self.assertTrue(config["ALLOW_SELF_ENCRYPTION"])
        self.assertIsNone(config["AUDIT_LOG_PATH"])
        self.assertEqual(1024, config["MAX_CONTENT_LENGTH"])

        with mock.patch.dict(os.environ, {}, clear=True):
            config = load_config()

        self.assertFalse(config["ALLOW_SELF_ENCRYPTION"])
        self.assertEqual(CONSTANTS._DEFAULT_MAX_CONTENT_LENGTH, config["MAX_CONTENT_LENGTH"])

    """
        A size limit that is not a positive integer fails with a HybridSealError naming the variable.
    """
    def test_invalid_max_content_length(self):

        for bad in ("lots", "12.5", "0", "-1"):
            with self.subTest(value=bad):
                with mock.patch.dict(os.environ, {CONSTANTS._ENV_MAX_CONTENT_LENGTH: bad}, clear=True):
                    with self.assertRaises(HybridSealError) as cm:
                        create_app({"AUDIT_LOG_PATH": self.audit_log_path})

                exc = cm.exception
                self.assertEqual(exc.application_code, ApplicationCodes.INVALID_REQUEST)
                self.assertEqual(exc.field, CONSTANTS._ENV_MAX_CONTENT_LENGTH)
                self.assertIn(CONSTANTS._ENV_MAX_CONTENT_LENGTH, exc.detail)


if __name__ == "__main__":
    unittest.main()
