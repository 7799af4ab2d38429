#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: recipient_identity.py

    Description:
        Identity material passed explicitly into every encrypt and decrypt
        call. A RecipientIdentity is what a sender needs (public key and
        fingerprint); a RecipientSecret is what the recipient holds (private
        key and its own fingerprint). Neither is cached by the protocol.
"""

import typing
from dataclasses import dataclass, field

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from hybridseal.encryption.RSA_manager import RSAManager
from hybridseal.encryption.identity_binder import validate_fingerprint
from hybridseal.handlers.error_handler import HybridSealError, KeyTransportError, ApplicationCodes, HTTPCodes


"""
    Load a PEM X.509 certificate, passing certificate objects through.
"""
def load_certificate(certificate: typing.Any) -> x509.Certificate:

    if isinstance(certificate, x509.Certificate):
        return certificate

    if isinstance(certificate, str):
        certificate = certificate.encode("utf-8")

    if not isinstance(certificate, (bytes, bytearray)) or not certificate.strip():
        raise HybridSealError(ApplicationCodes.INVALID_CERTIFICATE, HTTPCodes.BAD_REQUEST, "Certificate must be a non-empty PEM", "certificate")

    try:
        return x509.load_pem_x509_certificate(bytes(certificate))
    except ValueError:
        raise HybridSealError(ApplicationCodes.INVALID_CERTIFICATE, HTTPCodes.BAD_REQUEST, "Failed to parse PEM certificate", "certificate")


"""
    SHA-256 fingerprint over the certificate's DER encoding.

    @return bytes: 32-byte fingerprint.
"""
def certificate_fingerprint(certificate: typing.Any) -> bytes:
    return load_certificate(certificate).fingerprint(hashes.SHA256())


def _public_numbers_match(private_key: rsa.RSAPrivateKey, public_key: rsa.RSAPublicKey) -> bool:
    return private_key.public_key().public_numbers() == public_key.public_numbers()



@dataclass(frozen=True)
class RecipientIdentity:

    public_key: rsa.RSAPublicKey
    fingerprint: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "public_key", RSAManager.load_public_key(self.public_key))
        object.__setattr__(self, "fingerprint", validate_fingerprint(self.fingerprint))


    """
        Build the identity a sender encrypts for from the recipient's certificate.

        @param certificate (x509.Certificate | str | bytes): Certificate object or PEM.
        @return RecipientIdentity: Public key and SHA-256 certificate fingerprint.
    """
    @classmethod
    def from_certificate(cls, certificate: typing.Any) -> "RecipientIdentity":

        cert = load_certificate(certificate)
        return cls(public_key=cert.public_key(), fingerprint=certificate_fingerprint(cert))


    def public_pem(self) -> str:
        return self.public_key.public_bytes(encoding=serialization.Encoding.PEM, format=serialization.PublicFormat.SubjectPublicKeyInfo).decode("utf-8")



@dataclass(frozen=True)
class RecipientSecret:

    private_key: rsa.RSAPrivateKey = field(repr=False)
    fingerprint: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "private_key", RSAManager.load_private_key(self.private_key))
        object.__setattr__(self, "fingerprint", validate_fingerprint(self.fingerprint))


    """
        Build the secret a recipient decrypts with from its private key and certificate.

        @param private_key (RSAPrivateKey | str | bytes): Private key object or PEM.
        @param certificate (x509.Certificate | str | bytes): The identity's current certificate.
        @return RecipientSecret: Private key and SHA-256 certificate fingerprint.
        @ensures KeyTransportError(KEY_MISMATCH) when the key does not belong to the certificate.
    """
    @classmethod
    def from_pem(cls, private_key: typing.Any, certificate: typing.Any) -> "RecipientSecret":

        key = RSAManager.load_private_key(private_key)
        cert = load_certificate(certificate)

        cert_public_key = cert.public_key()
        if not isinstance(cert_public_key, rsa.RSAPublicKey) or not _public_numbers_match(key, cert_public_key):
            raise KeyTransportError("Private key does not match the certificate", "private_key", ApplicationCodes.KEY_MISMATCH)

        return cls(private_key=key, fingerprint=certificate_fingerprint(cert))


    """
        The matching identity a sender would encrypt for.
    """
    def identity(self) -> RecipientIdentity:
        return RecipientIdentity(public_key=self.private_key.public_key(), fingerprint=self.fingerprint)
