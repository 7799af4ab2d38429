#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: server.py

    Description:
        Optional HTTP surface for HybridSeal. Configures a Flask application
        around the local identity (PEM key + certificate on disk), audit
        logging, and centralized error handling. Exposes the local identity,
        envelope encryption for an explicit recipient certificate, and
        envelope decryption with the local identity. Normalizes all
        exceptions through the ErrorHandler to keep packet structures uniform.
"""


import os
import typing
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

# Import logging module
from hybridseal.utilities.audit_log import AuditLog
from hybridseal.utilities.serializer import Sensitive

# Import identity resolution
from hybridseal.identity.identity_provider import FileIdentityProvider, IdentityProvider, resolve_recipient

# Import handlers
from hybridseal.handlers.value_handler import seal_value, unseal_value
from hybridseal.handlers.encryptor import Encryptor
from hybridseal.handlers.error_handler import ErrorHandler, ApplicationCodes, HTTPCodes, HybridSealError, NoRecipientError
import hybridseal.handlers.sanitization_validation as VALIDATION
import hybridseal.constants as CONSTANTS


_TRUE_VALUES = {"1", "true", "yes", "on"}

_ENCRYPT_REQUIRED_FIELDS = {"data"}
_ENCRYPT_ALLOWED_FIELDS = {"data", "recipient_certificate"}
_DECRYPT_REQUIRED_FIELDS = {"token"}


#####################################################################################################################################################################

"""
    Resolve service configuration from environment variables, then explicit overrides.

    @param overrides (dict | None): Values that win over the environment.
    @return dict: PRIVATE_KEY_PATH, CERTIFICATE_PATH, ALLOW_SELF_ENCRYPTION, AUDIT_LOG_PATH, MAX_CONTENT_LENGTH.
    @ensures HybridSealError(INVALID_REQUEST) when the size limit is not a positive integer.
"""
def load_config(overrides: typing.Optional[dict] = None) -> dict:

    max_content_length = os.environ.get(CONSTANTS._ENV_MAX_CONTENT_LENGTH, "")

    if max_content_length.strip():
        try:
            max_content_length = int(max_content_length)
        except ValueError:
            max_content_length = 0

        if max_content_length <= 0:
            raise HybridSealError(ApplicationCodes.INVALID_REQUEST, HTTPCodes.INTERNAL_SERVER_ERROR, f"{CONSTANTS._ENV_MAX_CONTENT_LENGTH} must be a positive integer", CONSTANTS._ENV_MAX_CONTENT_LENGTH)
    else:
        max_content_length = CONSTANTS._DEFAULT_MAX_CONTENT_LENGTH

    config = {
        "PRIVATE_KEY_PATH": os.environ.get(CONSTANTS._ENV_PRIVATE_KEY_PATH, ""),
        "CERTIFICATE_PATH": os.environ.get(CONSTANTS._ENV_CERTIFICATE_PATH, ""),
        "ALLOW_SELF_ENCRYPTION": os.environ.get(CONSTANTS._ENV_ALLOW_SELF_ENCRYPTION, "").strip().lower() in _TRUE_VALUES,
        "AUDIT_LOG_PATH": os.environ.get(CONSTANTS._ENV_AUDIT_LOG_PATH) or None,
        "MAX_CONTENT_LENGTH": max_content_length,
    }

    config.update(overrides or {})
    return config


"""
    Replace Sensitive wrappers with their values so a decrypted value can be rendered as JSON.
"""
def _reveal(value: typing.Any) -> typing.Any:
    if isinstance(value, Sensitive):
        return _reveal(value.unwrap())
    if isinstance(value, dict):
        return {k: _reveal(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_reveal(v) for v in value]
    return value



"""
    Create and configure the HybridSeal Flask application.

    @param config (dict | None): Overrides for load_config().
    @param identity_provider (IdentityProvider | None): Local identity; built from the configured paths when omitted.
    @return Flask: Configured application instance.
"""
def create_app(config: typing.Optional[dict] = None, identity_provider: typing.Optional[IdentityProvider] = None) -> Flask:

    app = Flask(__name__)

    settings = load_config(config)
    app.config.update(settings)

    # Instantiate audit log for non-sensitive operational logging
    app.audit_log = AuditLog(settings["AUDIT_LOG_PATH"])

    # Centralized error handler
    app.error_handler = ErrorHandler(app.audit_log)

    # Local identity (may be absent when the service only encrypts for explicit certificates)
    if identity_provider is None and settings["PRIVATE_KEY_PATH"] and settings["CERTIFICATE_PATH"]:
        identity_provider = FileIdentityProvider(settings["PRIVATE_KEY_PATH"], settings["CERTIFICATE_PATH"])
    app.identity_provider = identity_provider

    app.encryptor = Encryptor()


    def _require_identity_provider() -> IdentityProvider:
        if app.identity_provider is None:
            raise NoRecipientError("No local identity is configured", "identity")
        return app.identity_provider


    """
        Parse a JSON object body.

        @require Content-Type is application/json and the body is a JSON object
        @return dict: Parsed request.
    """
    def _parse_json_request(context: str) -> dict:

        content_type = request.headers.get("Content-Type", "").lower()
        if "application/json" not in content_type:
            raise HybridSealError(ApplicationCodes.INVALID_CONTENT_TYPE, HTTPCodes.BAD_REQUEST, f"Invalid Content-Type header: {content_type}", "Content-Type")

        try:
            body = request.get_json(force=True)
        except RequestEntityTooLarge:
            raise HybridSealError(ApplicationCodes.INVALID_LENGTH, HTTPCodes.PAYLOAD_TOO_LARGE, "Payload exceeds maximum size limit", "body")
        except Exception:
            raise HybridSealError(ApplicationCodes.MALFORMED_JSON, HTTPCodes.BAD_REQUEST, f"Failed to parse JSON body for {context}", "body")

        if not isinstance(body, dict):
            raise HybridSealError(ApplicationCodes.INVALID_PACKET_STRUCTURE, HTTPCodes.BAD_REQUEST, "Invalid JSON structure (expected object)", "request_obj")

        return body



    ################################################################################################
    # ROUTES
    ################################################################################################

    """
        Return the local identity's certificate and fingerprint so senders can target it.
    """
    @app.get("/api/identity")
    def identity():
        try:
            provider = _require_identity_provider()
            recipient = provider.recipient_identity()

            packet = {
                "protocol_version": CONSTANTS._PROTOCOL_VERSION,
                "response_status": CONSTANTS.RESPONSE_STATUS_SUCCESS,
                "fingerprint": recipient.fingerprint.hex(),
            }
            if isinstance(provider, FileIdentityProvider):
                packet["certificate"] = provider.certificate_pem()

            return jsonify(packet), HTTPCodes.OK

        except Exception as e:
            clean_packet, status = app.error_handler.handle_server_error(e, context="identity_error")
            return jsonify(clean_packet), status


    """
        Encrypt a JSON value for the certificate in the request.

        @require body {"data": <JSON>, "recipient_certificate": <PEM, optional>}
        @return flask.Response: {"token": ...}
        @ensures Without a certificate, encrypts for the local identity only when self-encryption is enabled.
    """
    @app.post("/api/encrypt")
    def encrypt():
        try:
            body = _parse_json_request("encrypt")
            VALIDATION.validate_required_fields(body, _ENCRYPT_REQUIRED_FIELDS, ApplicationCodes.INVALID_PACKET_STRUCTURE, "body")
            VALIDATION.validate_no_extra_fields(body, _ENCRYPT_ALLOWED_FIELDS, ApplicationCodes.INVALID_PACKET_STRUCTURE, "body")

            target_certificate = body.get("recipient_certificate")
            if target_certificate is not None:
                VALIDATION.validate_string(target_certificate, ApplicationCodes.INVALID_CERTIFICATE, "recipient_certificate")

            recipient = resolve_recipient(target_certificate=target_certificate, provider=app.identity_provider, allow_self=app.config["ALLOW_SELF_ENCRYPTION"])

            token = seal_value(body["data"], recipient, encryptor=app.encryptor)

            app.audit_log.event(event="encrypt", context="api_encrypt", cipher_id=app.encryptor.cipher_id, recipient_fingerprint=recipient.fingerprint.hex(), self_encryption=target_certificate is None)

            return jsonify({
                "protocol_version": CONSTANTS._PROTOCOL_VERSION,
                "response_status": CONSTANTS.RESPONSE_STATUS_SUCCESS,
                "token": token,
            }), HTTPCodes.OK

        except Exception as e:
            clean_packet, status = app.error_handler.handle_server_error(e, context="encrypt_error")
            return jsonify(clean_packet), status


    """
        Decrypt a token with the local identity.

        @require body {"token": <envelope>}
        @return flask.Response: {"data": <JSON>}
    """
    @app.post("/api/decrypt")
    def decrypt():
        try:
            body = _parse_json_request("decrypt")
            VALIDATION.validate_required_fields(body, _DECRYPT_REQUIRED_FIELDS, ApplicationCodes.INVALID_PACKET_STRUCTURE, "body")
            VALIDATION.validate_no_extra_fields(body, _DECRYPT_REQUIRED_FIELDS, ApplicationCodes.INVALID_PACKET_STRUCTURE, "body")
            VALIDATION.validate_string(body["token"], ApplicationCodes.INVALID_ENVELOPE, "token")

            secret = _require_identity_provider().recipient_secret()

            clear = unseal_value(body["token"], secret)

            app.audit_log.event(event="decrypt", context="api_decrypt", recipient_fingerprint=secret.fingerprint.hex())

            return jsonify({
                "protocol_version": CONSTANTS._PROTOCOL_VERSION,
                "response_status": CONSTANTS.RESPONSE_STATUS_SUCCESS,
                "data": _reveal(clear),
            }), HTTPCodes.OK

        except Exception as e:
            clean_packet, status = app.error_handler.handle_server_error(e, context="decrypt_error")
            return jsonify(clean_packet), status



    ################################################################################################
    # GLOBAL ERROR HANDLERS
    ################################################################################################

    """
        413 Payload Too Large exception into a failure packet.
    """
    @app.errorhandler(413)
    def handle_payload_too_large(_e):

        e = HybridSealError(ApplicationCodes.INVALID_LENGTH, HTTPCodes.PAYLOAD_TOO_LARGE, "Payload exceeds maximum size limit", "body")

        clean_packet, status = app.error_handler.handle_server_error(e, context="payload_too_large")
        return jsonify(clean_packet), status


    """
        Routing errors (404, 405, ...) keep their HTTP status.
    """
    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):

        wrapped = HybridSealError(ApplicationCodes.INVALID_REQUEST, e.code or HTTPCodes.BAD_REQUEST, e.description or e.name, "request")

        clean_packet, status = app.error_handler.handle_server_error(wrapped, context="http_error")
        return jsonify(clean_packet), status


    """
        Catch-all handler for any unexpected exception raised during request processing.
    """
    @app.errorhandler(Exception)
    def handle_internal_error(e: Exception):

        clean_packet, status = app.error_handler.handle_server_error(e, context="global_error_handler")
        return jsonify(clean_packet), status

    return app
