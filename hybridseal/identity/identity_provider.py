#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: identity_provider.py

    Description:
        Resolves "who to encrypt for" and "who is decrypting" into concrete
        key and fingerprint material before the protocol runs. Loads the local
        identity's PEM private key and certificate from disk and never
        substitutes one identity for another unless the caller asks for it.
"""

import os
import typing

from hybridseal.identity.recipient_identity import RecipientIdentity, RecipientSecret
from hybridseal.handlers.error_handler import HybridSealError, NoRecipientError, ApplicationCodes, HTTPCodes



class IdentityProvider:

    def recipient_identity(self) -> RecipientIdentity:
        raise NotImplementedError

    def recipient_secret(self) -> RecipientSecret:
        raise NotImplementedError



class FileIdentityProvider(IdentityProvider):

    """
        Initialize a provider backed by a PEM private key and a PEM certificate on disk.

        @param private_key_path (str): Path of the unencrypted PEM private key.
        @param certificate_path (str): Path of the PEM certificate for that key.
        @require both paths are non-empty strings
        @ensures Files are read lazily on every call so a rotated certificate is picked up.
    """
    def __init__(self, private_key_path: str, certificate_path: str) -> None:

        if not isinstance(private_key_path, str) or not private_key_path.strip():
            raise HybridSealError(ApplicationCodes.INVALID_PATH, HTTPCodes.INTERNAL_SERVER_ERROR, "private_key_path must be a non-empty string", "private_key_path")

        if not isinstance(certificate_path, str) or not certificate_path.strip():
            raise HybridSealError(ApplicationCodes.INVALID_PATH, HTTPCodes.INTERNAL_SERVER_ERROR, "certificate_path must be a non-empty string", "certificate_path")

        self._private_key_path: str = private_key_path
        self._certificate_path: str = certificate_path


    """
        Read a PEM file from disk.

        @ensures A missing, unreadable, or empty file raises NoRecipientError.
    """
    @staticmethod
    def _read_pem(path: str, field: str) -> bytes:

        if not os.path.isfile(path):
            raise NoRecipientError(f"No {field.replace('_', ' ')} found at {path}", field)

        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError:
            raise NoRecipientError(f"Cannot read {field.replace('_', ' ')} at {path}", field)

        if not data.strip():
            raise NoRecipientError(f"{field.replace('_', ' ').capitalize()} file is empty", field)

        return data


    def certificate_pem(self) -> str:
        return self._read_pem(self._certificate_path, "certificate").decode("ascii")


    def recipient_identity(self) -> RecipientIdentity:
        return RecipientIdentity.from_certificate(self._read_pem(self._certificate_path, "certificate"))


    def recipient_secret(self) -> RecipientSecret:
        private_pem = self._read_pem(self._private_key_path, "private_key")
        certificate_pem = self._read_pem(self._certificate_path, "certificate")
        return RecipientSecret.from_pem(private_pem, certificate_pem)



"""
    Decide which identity a payload is encrypted for.

    @param target_certificate (x509.Certificate | str | bytes | None): Explicit recipient certificate.
    @param provider (IdentityProvider | None): Local identity source.
    @param allow_self (bool): Encrypt for the provider's own identity when no target is given.
    @return RecipientIdentity: The resolved recipient.
    @ensures NoRecipientError instead of an implicit fallback to the local identity.
"""
def resolve_recipient(target_certificate: typing.Any = None, provider: typing.Optional[IdentityProvider] = None, allow_self: bool = False) -> RecipientIdentity:

    if target_certificate is not None:
        return RecipientIdentity.from_certificate(target_certificate)

    if allow_self and provider is not None:
        return provider.recipient_identity()

    raise NoRecipientError("Cannot find a target certificate to encrypt for")
