#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Payload encryption for the miIO protocol.

Every miIO payload is encrypted with AES-128-CBC. Both the key and the IV
are derived from the 16-byte device token:

    key = MD5(token)
    iv  = MD5(key + token)

Plaintext is padded with PKCS7 before encryption.
"""

from __future__ import annotations

import string

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .internal_types import *
from .constants import AES_BLOCK_SIZE, TOKEN_LENGTH
from .exceptions import CryptoError, InvalidTokenError

_HEX_DIGITS = frozenset(string.hexdigits)

def parse_token(hex_token: str) -> bytes:
    """Decode a 32-character hexadecimal device token into its 16 raw bytes.

    Raises InvalidTokenError for any other length or for non-hex characters.
    """
    if not isinstance(hex_token, str):
        raise InvalidTokenError(f"token must be a string, got {type(hex_token).__name__}")
    if len(hex_token) != TOKEN_LENGTH * 2:
        raise InvalidTokenError(f"token must be {TOKEN_LENGTH * 2} hex characters, got {len(hex_token)}")
    if not all(c in _HEX_DIGITS for c in hex_token):
        raise InvalidTokenError("token contains non-hexadecimal characters")
    return bytes.fromhex(hex_token)

def md5(data: bytes) -> bytes:
    """Returns the 16-byte MD5 digest of data."""
    hasher = hashes.Hash(hashes.MD5())
    hasher.update(data)
    return hasher.finalize()

def derive_key_iv(token: bytes) -> Tuple[bytes, bytes]:
    """Returns the (key, iv) pair used to encrypt payloads for a device with the given token."""
    key = md5(token)
    iv = md5(key + token)
    return (key, iv)

def _create_cipher(token: bytes) -> Cipher:
    key, iv = derive_key_iv(token)
    try:
        return Cipher(algorithms.AES(key), modes.CBC(iv))
    except ValueError as e:
        raise CryptoError(f"cannot create cipher: {e}") from e

def encrypt(plaintext: bytes, token: bytes) -> bytes:
    """Encrypts a payload with AES-128-CBC and PKCS7 padding.

    A plaintext whose length is already a multiple of the block size is
    still padded with a full block.
    """
    padder = padding.PKCS7(AES_BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = _create_cipher(token).encryptor()
    return encryptor.update(padded) + encryptor.finalize()

def decrypt(ciphertext: bytes, token: bytes) -> bytes:
    """Decrypts a payload produced by encrypt().

    Raises CryptoError if the ciphertext is not a whole number of blocks.

    The trailing pad byte is only stripped when it is in the range
    1..AES_BLOCK_SIZE and not longer than the plaintext. Otherwise the
    decrypted bytes are returned as-is, padding included.
    """
    if len(ciphertext) % AES_BLOCK_SIZE != 0:
        raise CryptoError(
            f"encrypted data length {len(ciphertext)} is not a multiple of block size {AES_BLOCK_SIZE}"
          )
    decryptor = _create_cipher(token).decryptor()
    plaintext = decryptor.update(ciphertext) + decryptor.finalize()
    if len(plaintext) > 0:
        pad = plaintext[-1]
        if 0 < pad <= AES_BLOCK_SIZE and pad <= len(plaintext):
            plaintext = plaintext[:-pad]
    return plaintext
