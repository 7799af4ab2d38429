#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: error_handler.py

    Description:
        Centralized error handling for HybridSeal. Defines the typed failures
        raised by the envelope protocol (format, cipher, key transport,
        identity mismatch, missing recipient), converts exceptions into
        standardized failure packets for the HTTP service, and records each
        failure in the audit log.
"""


from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple
from hybridseal.utilities.audit_log import AuditLog
import hybridseal.constants as CONSTANTS



"""
    Container Class for HTTP status constants.
"""
@dataclass
class HTTPCodes:
    # 200 OK
    OK = 200

    # 400 Bad Request
    BAD_REQUEST = 400

    # 403 Forbidden (token was sealed for a different identity)
    FORBIDDEN = 403

    # 404 Not Found
    NOT_FOUND = 404

    # 413 Payload Too Large
    PAYLOAD_TOO_LARGE = 413

    # 440 Custom – key validation failure
    KEY_VALIDATION_FAILURE = 440

    # 498 Custom – ciphertext auth error
    CIPHERTEXT_AUTH_ERROR = 498

    # 500 Internal Server Error
    INTERNAL_SERVER_ERROR = 500


"""
    Container Class for application error code strings.
"""
@dataclass
class ApplicationCodes:

    MALFORMED_JSON           = "malformed_json"
    INVALID_TYPE             = "invalid_type"
    INVALID_LENGTH           = "invalid_length"
    INVALID_CONTENT_TYPE     = "invalid_content_type"
    INVALID_REQUEST          = "invalid_request"
    INVALID_PACKET_STRUCTURE = "invalid_packet_structure"
    INVALID_ENVELOPE         = "invalid_envelope"
    INVALID_BASE64           = "invalid_base64"
    INVALID_FINGERPRINT      = "invalid_fingerprint"
    INVALID_PUBLIC_KEY       = "invalid_public_key"
    INVALID_PRIVATE_KEY      = "invalid_private_key"
    INVALID_CERTIFICATE      = "invalid_certificate"
    INVALID_AES_KEY          = "invalid_aes_key"
    INVALID_IV               = "invalid_iv"
    INVALID_CIPHERTEXT       = "invalid_ciphertext"
    INVALID_CHECKSUM         = "invalid_checksum"
    INVALID_CHECKSUM_DATA    = "invalid_checksum_data"
    UNSUPPORTED_CIPHER       = "unsupported_cipher"
    CIPHER_ERROR             = "cipher_error"
    CIPHERTEXT_AUTH_ERROR    = "ciphertext_auth_error"
    KEY_TRANSPORT_ERROR      = "key_transport_error"
    KEY_MISMATCH             = "key_mismatch"
    RSA_KEY_TOO_SMALL        = "rsa_key_too_small"
    RSA_ENCRYPT_ERROR        = "rsa_encrypt_error"
    RSA_DECRYPT_ERROR        = "rsa_decrypt_error"
    IDENTITY_MISMATCH        = "identity_mismatch"
    NO_RECIPIENT             = "no_recipient"
    SERIALIZATION_ERROR      = "serialization_error"
    INVALID_PATH             = "invalid_path"
    INTERNAL_SERVER_ERROR    = "internal_server_error"






class HybridSealError(Exception):

    """
        Initialize a HybridSealError containing application code, HTTP code, detail message, and field context.

        @param application_code (str): Identifier from ApplicationCodes signaling the failure type.
        @param http_code (int): HTTP status code associated with the error.
        @param detail (str): Descriptive message intended for failure packets.
        @param field (str): Logical field related to the error (optional).
        @require isinstance(application_code, str)
        @require isinstance(http_code, int)
        @require isinstance(detail, str)
        @ensures Error metadata is accessible to the centralized ErrorHandler.
    """
    def __init__(self, application_code: str, http_code: int, detail: str, field: str = "") -> None:
        self.application_code = application_code
        self.http_code = http_code
        self.detail = detail
        self.field = field
        super().__init__(f"{application_code}: {detail}")



"""
    The token is not a well-formed four-field envelope.
"""
class EnvelopeFormatError(HybridSealError):

    def __init__(self, detail: str, field: str = "envelope", application_code: str = ApplicationCodes.INVALID_ENVELOPE) -> None:
        super().__init__(application_code, HTTPCodes.BAD_REQUEST, detail, field)



"""
    Symmetric encryption or decryption failed: bad key/IV length, bad padding,
    integrity digest mismatch, or an unsupported cipher id.
"""
class CipherError(HybridSealError):

    def __init__(self, detail: str, field: str = "ciphertext", application_code: str = ApplicationCodes.CIPHER_ERROR) -> None:
        super().__init__(application_code, HTTPCodes.CIPHERTEXT_AUTH_ERROR, detail, field)



"""
    Wrapping or unwrapping the session key failed, usually because the key
    material is malformed or the private key does not belong to the recipient.
"""
class KeyTransportError(HybridSealError):

    def __init__(self, detail: str, field: str = "wrapped_key", application_code: str = ApplicationCodes.KEY_TRANSPORT_ERROR) -> None:
        super().__init__(application_code, HTTPCodes.KEY_VALIDATION_FAILURE, detail, field)



"""
    Every cryptographic step succeeded but the bound fingerprint is not the
    decrypting identity's own fingerprint (e.g. its certificate was rotated).
"""
class IdentityMismatchError(HybridSealError):

    def __init__(self, detail: str = "Decryption failed, not encrypted for the current certificate of this identity", field: str = "wrapped_fingerprint") -> None:
        super().__init__(ApplicationCodes.IDENTITY_MISMATCH, HTTPCodes.FORBIDDEN, detail, field)



"""
    No identity is available to encrypt for (or to decrypt as).
"""
class NoRecipientError(HybridSealError):

    def __init__(self, detail: str = "Cannot find a recipient identity to encrypt for", field: str = "recipient") -> None:
        super().__init__(ApplicationCodes.NO_RECIPIENT, HTTPCodes.BAD_REQUEST, detail, field)






class ErrorHandler:

    """
        Initialize the ErrorHandler and attach an AuditLog for diagnostic event recording.

        @param audit_log (AuditLog): Optional audit log; a default one is created when omitted.
        @ensures ErrorHandler is ready to format and log errors.
    """
    def __init__(self, audit_log: Optional[AuditLog] = None) -> None:

        self.audit_log = audit_log if audit_log is not None else AuditLog()


    """
        Process an exception and return a standardized failure packet.

        @param e (Exception): Exception raised during request handling.
        @param context (str): Logical context string identifying the failing operation.
        @return tuple[dict, int]: (clean_error_packet, http_status_code)
        @ensures Exception is logged to audit_log and a canonical failure packet is returned.
    """
    def handle_server_error(self, e: Exception, context: str = "") -> Tuple[dict, int]:

        # If the exception is already a HybridSealError
        if isinstance(e, HybridSealError):
            application_code = e.application_code
            http_code = e.http_code
            message = e.detail
            field = e.field
        else:
            # For non-raised errors, normalize to INTERNAL_SERVER_ERROR
            application_code = ApplicationCodes.INTERNAL_SERVER_ERROR
            http_code = HTTPCodes.INTERNAL_SERVER_ERROR
            message = "An internal server error occurred. Please try again later."
            field = ""

        # Always log the raw exception detail for operators
        self.audit_log.event(event="server_exception", context=context, error_code=application_code, detail=str(e))

        clean_packet = self.create_error_response_packet(CONSTANTS.RESPONSE_STATUS_FAILURE, message, application_code, field)

        return clean_packet, http_code




    """
        Build a standardized failure packet.

        @param response_status (str): Must be "failure" for all error packets.
        @param message (str): Human-readable error message.
        @param error_code (str): One of ApplicationCodes.* defining the error type.
        @param field (str): Logical field associated with the error (optional).
        @return dict: Error packet including protocol_version and timestamp.
    """
    def create_error_response_packet(self, response_status: str, message: str, error_code: str, field: str = "") -> dict:

        timestamp_iso = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

        return {
            "protocol_version": CONSTANTS._PROTOCOL_VERSION,
            "response_status": response_status,
            "timestamp": timestamp_iso,
            "message": message,
            "error_code": error_code,
            "field": field,
        }
