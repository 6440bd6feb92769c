from __future__ import annotations

import base64
import binascii
import hashlib
import os
from typing import Tuple, Union

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher as _AES, algorithms, modes

from .base import Cipher, CipherError, _secret_bytes


SALT_MAGIC = b"Salted__"
SALT_SIZE = 8
KEY_SIZE = 32
IV_SIZE = 16
BLOCK_BITS = 128

# Urlsafe alphabet back to standard base64
_TO_STANDARD = str.maketrans("-_", "+/")


def evp_bytes_to_key(passphrase: bytes, salt: bytes) -> Tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey with MD5 and a single iteration.

    Returns (key, iv) sized for AES-256-CBC.
    """
    derived = b""
    block = b""
    while len(derived) < KEY_SIZE + IV_SIZE:
        block = hashlib.md5(block + passphrase + salt).digest()
        derived += block
    return derived[:KEY_SIZE], derived[KEY_SIZE:KEY_SIZE + IV_SIZE]


class OpenSSLCipher(Cipher):
    """
    Passphrase AES-256-CBC in the OpenSSL "Salted__" envelope.

    This is the format `CryptoJS.AES.encrypt(text, passphrase)` emits in the
    browser, so tokens minted client-side decrypt here and vice versa:

        base64( b"Salted__" + salt[8] + AES-256-CBC(PKCS7(plaintext)) )

    The envelope carries no MAC. A wrong key is usually caught by the
    padding check, but not always.
    """

    name = "openssl"

    def __init__(self, secret: Union[str, bytes]) -> None:
        self._passphrase = _secret_bytes(secret)

    def encrypt(self, plaintext: str) -> str:
        if not isinstance(plaintext, str):
            raise CipherError("plaintext must be a string")
        salt = os.urandom(SALT_SIZE)
        key, iv = evp_bytes_to_key(self._passphrase, salt)

        padder = padding.PKCS7(BLOCK_BITS).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = _AES(algorithms.AES(key), modes.CBC(iv)).encryptor()
        body = encryptor.update(padded) + encryptor.finalize()
        return base64.b64encode(SALT_MAGIC + salt + body).decode("ascii")

    def decrypt(self, token: str) -> bytes:
        if not isinstance(token, str):
            raise CipherError("token must be a string")
        try:
            raw = base64.b64decode(token.translate(_TO_STANDARD).encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as ex:
            raise CipherError("token is not valid base64") from ex

        header = len(SALT_MAGIC) + SALT_SIZE
        if not raw.startswith(SALT_MAGIC):
            raise CipherError("token is missing the Salted__ header")
        body = raw[header:]
        if not body or len(body) % (BLOCK_BITS // 8):
            raise CipherError("ciphertext is not a whole number of blocks")

        key, iv = evp_bytes_to_key(self._passphrase, raw[len(SALT_MAGIC):header])
        decryptor = _AES(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()
        unpadder = padding.PKCS7(BLOCK_BITS).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as ex:
            raise CipherError("bad padding; wrong key or corrupted token") from ex
