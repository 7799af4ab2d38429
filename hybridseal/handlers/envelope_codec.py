#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: envelope_codec.py

    Description:
        Assembles and parses the HybridSeal wire format: four standard Base64
        fields joined by '|' in the fixed order
        cipher-id | wrapped-key | ciphertext | wrapped-fingerprint.
        The codec is purely structural and performs no cryptographic checks.
"""

import typing

from hybridseal.handlers.error_handler import EnvelopeFormatError, ApplicationCodes
import hybridseal.handlers.sanitization_validation as VALIDATION
import hybridseal.constants as CONSTANTS


class Envelope(typing.NamedTuple):
    cipher_id: bytes
    wrapped_key: bytes
    ciphertext: bytes
    wrapped_fingerprint: bytes



class EnvelopeCodec:

    """
        Encode the four envelope fields into a single token.

        @param cipher_id (bytes | str): Cipher identifier; text is encoded as ASCII.
        @param wrapped_key (bytes): RSA-wrapped session key.
        @param ciphertext (bytes): Sealed payload.
        @param wrapped_fingerprint (bytes): Sealed recipient fingerprint.
        @return str: Token containing exactly three '|' delimiters.
    """
    def encode(self, cipher_id: typing.Union[bytes, str], wrapped_key: bytes, ciphertext: bytes, wrapped_fingerprint: bytes) -> str:

        if isinstance(cipher_id, str):
            cipher_id = cipher_id.encode("ascii")

        fields = (cipher_id, wrapped_key, ciphertext, wrapped_fingerprint)

        for name, value in zip(CONSTANTS._ENVELOPE_FIELD_NAMES, fields):
            if not isinstance(value, (bytes, bytearray)):
                raise EnvelopeFormatError(f"{name} must be bytes", name, ApplicationCodes.INVALID_TYPE)
            if len(value) == 0:
                raise EnvelopeFormatError(f"{name} cannot be empty", name)

        return CONSTANTS._ENVELOPE_DELIMITER.join(VALIDATION.encode_bytes_to_base64(value) for value in fields)


    """
        Split a token into its four decoded fields.

        @param text (str): Token produced by encode().
        @return Envelope: (cipher_id, wrapped_key, ciphertext, wrapped_fingerprint) as bytes.
        @ensures EnvelopeFormatError when the token is not text, has other than four fields, or holds a field that is empty or not valid Base64.
    """
    def decode(self, text: typing.Any) -> Envelope:

        if isinstance(text, (bytes, bytearray)):
            try:
                text = bytes(text).decode("ascii")
            except UnicodeDecodeError:
                raise EnvelopeFormatError("Envelope must be ASCII text", "envelope", ApplicationCodes.INVALID_TYPE)

        if not isinstance(text, str):
            raise EnvelopeFormatError("Envelope must be text", "envelope", ApplicationCodes.INVALID_TYPE)

        parts = text.strip().split(CONSTANTS._ENVELOPE_DELIMITER)

        if len(parts) != CONSTANTS._ENVELOPE_FIELD_COUNT:
            raise EnvelopeFormatError(f"Envelope must have exactly {CONSTANTS._ENVELOPE_FIELD_COUNT} fields, found {len(parts)}")

        decoded = [VALIDATION.decode_base64_to_bytes(name, part) for name, part in zip(CONSTANTS._ENVELOPE_FIELD_NAMES, parts)]

        return Envelope(*decoded)
