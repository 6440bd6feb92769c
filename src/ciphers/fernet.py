from __future__ import annotations

import base64
import hashlib
from typing import Union

from cryptography.fernet import Fernet, InvalidToken

from .base import Cipher, CipherError, _secret_bytes


# Standard base64 alphabet back to Fernet's urlsafe alphabet
_TO_URLSAFE = str.maketrans("+/", "-_")


def _to_fernet(secret: Union[str, bytes]) -> Fernet:
    """Derive a Fernet instance from an arbitrary passphrase.

    Fernet wants a urlsafe base64-encoded 32-byte key; the passphrase is
    stretched to 32 bytes with SHA-256.
    """
    digest = hashlib.sha256(_secret_bytes(secret)).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


class FernetCipher(Cipher):
    """
    Authenticated encryption (AES-128-CBC + HMAC-SHA256) via `cryptography.fernet`.

    Tokens are urlsafe base64. Tampered, truncated or foreign tokens fail
    with `CipherError` instead of yielding garbage.
    """

    name = "fernet"

    def __init__(self, secret: Union[str, bytes]) -> None:
        self._fernet = _to_fernet(secret)

    def encrypt(self, plaintext: str) -> str:
        try:
            token = self._fernet.encrypt(plaintext.encode("utf-8"))
        except (TypeError, AttributeError) as ex:
            raise CipherError("plaintext must be a string") from ex
        return token.decode("ascii")

    def decrypt(self, token: str) -> bytes:
        if not isinstance(token, str):
            raise CipherError("token must be a string")
        try:
            return self._fernet.decrypt(token.translate(_TO_URLSAFE).encode("ascii"))
        except (InvalidToken, UnicodeEncodeError, ValueError) as ex:
            raise CipherError("invalid Fernet token") from ex
