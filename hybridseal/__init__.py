"""
    HybridSeal: hybrid RSA-OAEP + AES-256-CBC envelopes bound to a recipient identity.
"""

from hybridseal.handlers.encryptor import Encryptor, encrypt
from hybridseal.handlers.decryptor import Decryptor, decrypt
from hybridseal.handlers.value_handler import seal_value, unseal_value
from hybridseal.handlers.envelope_codec import Envelope, EnvelopeCodec
from hybridseal.handlers.error_handler import (
    HybridSealError,
    EnvelopeFormatError,
    CipherError,
    KeyTransportError,
    IdentityMismatchError,
    NoRecipientError,
)
from hybridseal.identity.recipient_identity import RecipientIdentity, RecipientSecret, certificate_fingerprint
from hybridseal.identity.identity_provider import IdentityProvider, FileIdentityProvider, resolve_recipient
from hybridseal.utilities.serializer import JsonSerializer, Sensitive

__all__ = [
    "Encryptor",
    "encrypt",
    "Decryptor",
    "decrypt",
    "seal_value",
    "unseal_value",
    "Envelope",
    "EnvelopeCodec",
    "HybridSealError",
    "EnvelopeFormatError",
    "CipherError",
    "KeyTransportError",
    "IdentityMismatchError",
    "NoRecipientError",
    "RecipientIdentity",
    "RecipientSecret",
    "certificate_fingerprint",
    "IdentityProvider",
    "FileIdentityProvider",
    "resolve_recipient",
    "JsonSerializer",
    "Sensitive",
]
