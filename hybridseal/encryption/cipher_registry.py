#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    File name: cipher_registry.py

    Description:
        Maps envelope cipher identifiers to symmetric cipher engines so that
        decryption follows the cipher named in the envelope instead of a
        hard-coded one.
"""

import typing
from hybridseal.encryption.AES_CBC_manager import AESCBCManager
from hybridseal.handlers.error_handler import CipherError, ApplicationCodes


_CIPHER_ENGINES: typing.Dict[str, type] = {
    AESCBCManager.cipher_id: AESCBCManager,
}


"""
    Return a new engine for the given cipher id.

    @param cipher_id (str | bytes): Cipher identifier, e.g. "AES-256-CBC".
    @return AESCBCManager: Engine implementing encrypt_block/decrypt_block.
    @ensures Raises CipherError(UNSUPPORTED_CIPHER) for unknown identifiers.
"""
def get_cipher_engine(cipher_id: typing.Union[str, bytes]) -> AESCBCManager:

    if isinstance(cipher_id, (bytes, bytearray)):
        try:
            cipher_id = bytes(cipher_id).decode("ascii")
        except UnicodeDecodeError:
            raise CipherError("Cipher identifier is not ASCII", "cipher_id", ApplicationCodes.UNSUPPORTED_CIPHER)

    if not isinstance(cipher_id, str):
        raise CipherError("Cipher identifier must be a string", "cipher_id", ApplicationCodes.UNSUPPORTED_CIPHER)

    engine_class = _CIPHER_ENGINES.get(cipher_id.strip().upper())
    if engine_class is None:
        raise CipherError(f"Unsupported cipher: {cipher_id!r}", "cipher_id", ApplicationCodes.UNSUPPORTED_CIPHER)

    return engine_class()


def supported_cipher_ids() -> typing.List[str]:
    return sorted(_CIPHER_ENGINES)
