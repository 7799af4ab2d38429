#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: serializer.py

    Description:
        Default serializer collaborator for HybridSeal. Turns JSON-compatible
        values into compact UTF-8 bytes before encryption and back after
        decryption. Sensitive values survive the round trip as Sensitive.
"""

import json
import typing

from hybridseal.handlers.error_handler import HybridSealError, ApplicationCodes, HTTPCodes


# Tag marking a Sensitive value inside serialized data
_SENSITIVE_TAG = "__hybridseal_sensitive__"

# Wraps a user dict whose only key is itself a marker
_ESCAPE_TAG = "__hybridseal_escape__"

_MARKERS = (_SENSITIVE_TAG, _ESCAPE_TAG)



class Sensitive:

    """
        Wrap a value whose content must not appear in logs or reprs.
    """
    def __init__(self, value: typing.Any) -> None:
        self._value = value

    def unwrap(self) -> typing.Any:
        return self._value

    def __repr__(self) -> str:
        return "Sensitive [value redacted]"

    __str__ = __repr__

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Sensitive) and other._value == self._value

    __hash__ = None



class JsonSerializer:

    """
        Rewrite a value into plain JSON types, tagging Sensitive values and
        escaping user dicts that would read back as a marker.
    """
    def _tag(self, value: typing.Any) -> typing.Any:

        if isinstance(value, Sensitive):
            return {_SENSITIVE_TAG: self._tag(value.unwrap())}

        if isinstance(value, dict):
            tagged = {k: self._tag(v) for k, v in value.items()}
            if len(tagged) == 1 and next(iter(tagged)) in _MARKERS:
                return {_ESCAPE_TAG: tagged}
            return tagged

        if isinstance(value, (list, tuple)):
            return [self._tag(v) for v in value]

        return value


    """
        Inverse of _tag(). Walks top-down so an escaped dict is never read as a marker.
    """
    def _untag(self, value: typing.Any) -> typing.Any:

        if isinstance(value, dict):
            if len(value) == 1:
                key, inner = next(iter(value.items()))

                if key == _SENSITIVE_TAG:
                    return Sensitive(self._untag(inner))

                if key == _ESCAPE_TAG and isinstance(inner, dict):
                    return {k: self._untag(v) for k, v in inner.items()}

            return {k: self._untag(v) for k, v in value.items()}

        if isinstance(value, list):
            return [self._untag(v) for v in value]

        return value


    """
        Serialize a JSON-compatible value (possibly containing Sensitive values) to UTF-8 bytes.

        @param value (Any): Value to serialize.
        @return bytes: Compact JSON.
        @ensures Raises HybridSealError(SERIALIZATION_ERROR) for unsupported values.
    """
    def serialize(self, value: typing.Any) -> bytes:

        try:
            return json.dumps(self._tag(value), separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise HybridSealError(ApplicationCodes.SERIALIZATION_ERROR, HTTPCodes.BAD_REQUEST, f"Value cannot be serialized: {e}", "data")


    """
        Deserialize bytes produced by serialize().

        @param data (bytes): UTF-8 JSON bytes.
        @return Any: The restored value.
    """
    def deserialize(self, data: bytes) -> typing.Any:

        if not isinstance(data, (bytes, bytearray)):
            raise HybridSealError(ApplicationCodes.INVALID_TYPE, HTTPCodes.BAD_REQUEST, "Serialized data must be bytes", "data")

        try:
            decoded = json.loads(bytes(data).decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            raise HybridSealError(ApplicationCodes.SERIALIZATION_ERROR, HTTPCodes.BAD_REQUEST, "Decrypted data is not valid serialized JSON", "data")

        return self._untag(decoded)
