from __future__ import annotations

from typing import Union

from common.config import CipherKind, ConfigurationError


class CipherError(ValueError):
    """Raised when a token cannot be decrypted or plaintext cannot be encrypted."""


class Cipher:
    """Passphrase-keyed symmetric cipher.

    - `encrypt(text)` returns base64 text (alphabet is cipher-specific).
    - `decrypt(token)` returns the plaintext bytes; accepts standard or
      urlsafe base64 and raises `CipherError` on any failure.
    """

    name = "abstract"

    def encrypt(self, plaintext: str) -> str:
        raise NotImplementedError

    def decrypt(self, token: str) -> bytes:
        raise NotImplementedError

    def __repr__(self) -> str:
        # Never expose key material
        return f"<{type(self).__name__} {self.name}>"


def _secret_bytes(secret: Union[str, bytes]) -> bytes:
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    if not secret:
        raise ConfigurationError("cipher secret must not be empty")
    return secret


def build_cipher(kind: Union[CipherKind, str], secret: Union[str, bytes]) -> Cipher:
    """Construct the cipher named by `kind` keyed with `secret`."""
    from .fernet import FernetCipher
    from .openssl import OpenSSLCipher

    try:
        kind = CipherKind(kind)
    except ValueError as ex:
        raise ConfigurationError(f"Unsupported cipher: {kind!r}") from ex
    if kind is CipherKind.OPENSSL:
        return OpenSSLCipher(secret)
    return FernetCipher(secret)
