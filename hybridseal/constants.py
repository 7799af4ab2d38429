#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: constants.py

    Description:
        Centralized protocol constants for HybridSeal envelopes. Defines the
        protocol version, the supported cipher identifier, key/IV/digest sizes,
        the envelope wire layout, and the limits shared across the cipher,
        key transport, codec, and service modules.
"""

from typing import Tuple


# Protocol version string (reported in service packets)
_PROTOCOL_VERSION = "HybridSeal Envelope v1"


################################################################################################
# Symmetric cipher
################################################################################################

# Cipher identifier written into the first envelope field
_CIPHER_AES_256_CBC = "AES-256-CBC"

# Cipher used by new envelopes
_DEFAULT_CIPHER_ID = _CIPHER_AES_256_CBC

# AES-256 key length in bytes
_AES_256_KEY_LEN_BYTES = 32

# AES block length in bytes (also the CBC IV length)
_AES_BLOCK_LEN_BYTES = 16

# Length of the IV prefix riding inside every ciphertext
_IV_PREFIX_LEN_BYTES = 16

# SHA-256 digest appended to every sealed body
_INTEGRITY_DIGEST_LEN_BYTES = 32


################################################################################################
# Key transport
################################################################################################

# Smallest RSA modulus accepted for wrapping session keys
_MIN_RSA_KEY_BITS = 2048

# OAEP overhead with SHA-256 for both the label hash and MGF1: 2 * 32 + 2
_OAEP_SHA256_OVERHEAD_BYTES = 66


################################################################################################
# Identity
################################################################################################

# Fingerprints are short fixed-length digests (SHA-256 by default, SHA-512 at most)
_MAX_FINGERPRINT_LEN_BYTES = 64


################################################################################################
# Envelope wire format
################################################################################################

# Delimiter is outside the standard Base64 alphabet
_ENVELOPE_DELIMITER = "|"

_ENVELOPE_FIELD_COUNT = 4

# Positional order of the envelope fields
_ENVELOPE_FIELD_NAMES: Tuple[str, ...] = ("cipher_id", "wrapped_key", "ciphertext", "wrapped_fingerprint")


################################################################################################
# Service
################################################################################################

# 256 KB request limit for the HTTP service
_DEFAULT_MAX_CONTENT_LENGTH = 262_144

RESPONSE_STATUS_SUCCESS = "success"
RESPONSE_STATUS_FAILURE = "failure"

# Environment variables read by create_app()
_ENV_PRIVATE_KEY_PATH = "HYBRIDSEAL_PRIVATE_KEY_PATH"
_ENV_CERTIFICATE_PATH = "HYBRIDSEAL_CERTIFICATE_PATH"
_ENV_ALLOW_SELF_ENCRYPTION = "HYBRIDSEAL_ALLOW_SELF_ENCRYPTION"
_ENV_AUDIT_LOG_PATH = "HYBRIDSEAL_AUDIT_LOG_PATH"
_ENV_MAX_CONTENT_LENGTH = "HYBRIDSEAL_MAX_CONTENT_LENGTH"
