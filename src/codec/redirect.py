from __future__ import annotations

import logging
from typing import Any, Optional

from ciphers import Cipher


logger = logging.getLogger(__name__)

_TO_TOKEN = str.maketrans("+/", "-_")
_FROM_TOKEN = str.maketrans("-_", "+/")


def to_url_safe(b64: str) -> str:
    """Map base64 text to the URL-safe alphabet and drop all padding."""
    return b64.translate(_TO_TOKEN).replace("=", "")


def from_url_safe(token: str) -> str:
    """Inverse of `to_url_safe`: standard alphabet, padded to a multiple of 4."""
    restored = token.translate(_FROM_TOKEN)
    return restored + "=" * (-len(restored) % 4)


class RedirectCodec:
    """
    Encrypt a redirect target into a token safe for a path or query segment.

    Tokens use only ``A-Z a-z 0-9 - _``. There is no development bypass.
    Both directions return None on failure; a None from `decode` means
    the redirect is untrusted and must not be followed.
    """

    def __init__(self, cipher: Cipher) -> None:
        self._cipher = cipher

    def encode(self, url: Any) -> Optional[str]:
        if not isinstance(url, str) or not url:
            logger.warning("Redirect URL must be a non-empty string")
            return None
        try:
            return to_url_safe(self._cipher.encrypt(url))
        except Exception:
            logger.warning("Redirect URL encryption failed", exc_info=True)
            return None

    def decode(self, token: Any) -> Optional[str]:
        if not isinstance(token, str) or not token:
            return None
        try:
            url = self._cipher.decrypt(from_url_safe(token)).decode("utf-8")
        except Exception:
            # Token content stays out of the log
            logger.warning("Rejected redirect token that failed to decrypt")
            return None
        return url or None
