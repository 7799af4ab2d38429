#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: framing.py

    Description:
        IV-prefix framing shared by the payload and the fingerprint. A sealed
        body is encrypted as prefix ++ body ++ SHA-256(body), where the prefix
        is a random block independent of the CBC IV, so the IV never has to
        travel as its own field. Opening decrypts with an all-zero IV: only the
        first plaintext block depends on the IV, and that block is the
        discarded prefix. The trailing digest turns any corrupted ciphertext
        block into a CipherError.
"""

from hybridseal.encryption.checksum_manager import ChecksumManager
from hybridseal.handlers.error_handler import CipherError, ApplicationCodes
import hybridseal.constants as CONSTANTS


_CHECKSUMS = ChecksumManager()


"""
    Encrypt a body with a random prefix block prepended and its digest appended.

    @param engine: Symmetric cipher engine (encrypt_block/decrypt_block/generate_iv).
    @param key (bytes): One-time session key.
    @param iv (bytes): Fresh CBC IV for this invocation.
    @param body (bytes): Payload or fingerprint bytes.
    @return bytes: Ciphertext.
    @ensures The first ciphertext block differs between invocations under the same key.
"""
def seal_with_iv_prefix(engine, key: bytes, iv: bytes, body: bytes) -> bytes:

    if not isinstance(body, (bytes, bytearray)):
        raise CipherError("Body to seal must be bytes", "plaintext", ApplicationCodes.INVALID_TYPE)

    if not isinstance(iv, (bytes, bytearray)) or len(iv) != CONSTANTS._IV_PREFIX_LEN_BYTES:
        raise CipherError("IV must be 16 bytes", "iv", ApplicationCodes.INVALID_IV)

    prefix = engine.generate_iv()
    digest = _CHECKSUMS.compute_checksum(body)
    return engine.encrypt_block(key, iv, prefix + bytes(body) + digest)



"""
    Decrypt a ciphertext produced by seal_with_iv_prefix and return the body.

    @param engine: Symmetric cipher engine matching the envelope cipher id.
    @param key (bytes): Recovered session key.
    @param ciphertext (bytes): Sealed bytes.
    @param field (str): Envelope field name reported on failure.
    @return bytes: The original body.
    @ensures Raises CipherError on bad padding, truncated plaintext, or digest mismatch.
"""
def open_with_iv_prefix(engine, key: bytes, ciphertext: bytes, field: str = "ciphertext") -> bytes:

    try:
        plaintext = engine.decrypt_block(key, bytes(engine.iv_length), ciphertext)
    except CipherError as e:
        raise CipherError(e.detail, field, e.application_code)

    prefix_len = CONSTANTS._IV_PREFIX_LEN_BYTES
    digest_len = _CHECKSUMS.digest_size

    if len(plaintext) < prefix_len + digest_len:
        raise CipherError("Decrypted data is shorter than its IV prefix and digest", field, ApplicationCodes.CIPHERTEXT_AUTH_ERROR)

    body = plaintext[prefix_len:len(plaintext) - digest_len]
    digest = plaintext[len(plaintext) - digest_len:]

    if not _CHECKSUMS.verify_checksum(body, digest):
        raise CipherError("Integrity check failed after decryption (wrong key or corrupted ciphertext)", field, ApplicationCodes.CIPHERTEXT_AUTH_ERROR)

    return body
