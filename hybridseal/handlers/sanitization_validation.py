#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: sanitization_validation.py

    Description:
        Encoding, decoding, and field-level validation helpers shared by the
        envelope codec and the HTTP service. Includes strict standard Base64
        conversions and JSON request-field validators. Raises
        HybridSealError (or the supplied subclass) for malformed input.
"""

import base64
import binascii
import re
import typing

from hybridseal.handlers.error_handler import HybridSealError, EnvelopeFormatError, ApplicationCodes, HTTPCodes


# Standard Base64 alphabet with up to two padding characters
_BASE64_RX = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")

# Line breaks allowed inside MIME-wrapped Base64
_LINE_BREAKS_RX = re.compile(r"[\r\n]")


####################################################################################################
#                                   Base64 Encoding / Decoding
####################################################################################################

"""
    Convert raw bytes into a standard Base64 string with padding and no line breaks.

    @param raw (bytes): Bytes to encode.
    @return str: ASCII Base64 text.
"""
def encode_bytes_to_base64(raw: bytes) -> str:

    if not isinstance(raw, (bytes, bytearray)):
        raise HybridSealError(ApplicationCodes.INVALID_TYPE, HTTPCodes.BAD_REQUEST, "Base64 encode expects bytes", "raw")

    return base64.b64encode(bytes(raw)).decode("ascii")



"""
    Convert standard Base64 text into raw bytes.

    @param field_name (str): Logical field name for context in error messages.
    @param b64_text (Any): Base64 text; line breaks are ignored.
    @return bytes: Decoded byte sequence.
    @ensures Any character outside the Base64 alphabet, bad padding, or empty input raises EnvelopeFormatError.
"""
def decode_base64_to_bytes(field_name: str, b64_text: typing.Any) -> bytes:

    if not isinstance(b64_text, str):
        raise EnvelopeFormatError(f"{field_name} must be text", field_name, ApplicationCodes.INVALID_TYPE)

    compact = _LINE_BREAKS_RX.sub("", b64_text)

    if not compact:
        raise EnvelopeFormatError(f"{field_name} is empty", field_name)

    if not _BASE64_RX.match(compact) or len(compact) % 4 != 0:
        raise EnvelopeFormatError(f"Invalid Base64 for {field_name}", field_name, ApplicationCodes.INVALID_BASE64)

    try:
        decoded = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        raise EnvelopeFormatError(f"Invalid Base64 for {field_name}", field_name, ApplicationCodes.INVALID_BASE64)

    if len(decoded) == 0:
        raise EnvelopeFormatError(f"{field_name} is empty", field_name)

    return decoded



####################################################################################################
#                                   Field Validation
####################################################################################################

"""
    Validate that a value is a non-empty string.

    @param value (Any): Value to check.
    @param application_code (str): Code raised on failure.
    @param field_name (str): Field reported on failure.
"""
def validate_string(value: typing.Any, application_code: str, field_name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise HybridSealError(application_code, HTTPCodes.BAD_REQUEST, f"{field_name} must be a non-empty string", field_name)


"""
    Validate that a request packet contains every required field.
"""
def validate_required_fields(payload: dict, required_fields: set, error_code: str, field_context: str) -> None:
    missing = sorted(f for f in required_fields if f not in payload)
    if missing:
        raise HybridSealError(error_code, HTTPCodes.BAD_REQUEST, f"Missing required fields: {', '.join(missing)}", field_context)


"""
    Validate that a request packet carries no unexpected fields.
"""
def validate_no_extra_fields(payload: dict, allowed_fields: set, error_code: str, field_context: str) -> None:
    extra = sorted(f for f in payload if f not in allowed_fields)
    if extra:
        raise HybridSealError(error_code, HTTPCodes.BAD_REQUEST, f"Unknown fields: {', '.join(extra)}", field_context)
