"""
Payload and redirect-URL codecs plus the process-wide defaults.

Importing the package loads `CodecSettings` from the environment once and
raises `ConfigurationError` when no secret is set, so a misconfigured process
fails at startup. `configure(settings, force=True)` swaps in explicit
settings. The module level helpers below route through that single instance
and never raise.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Optional

from ciphers import build_cipher
from common.config import CodecSettings

from .payload import PayloadCodec
from .redirect import RedirectCodec


@dataclass(frozen=True)
class Codecs:
    settings: CodecSettings
    payload: PayloadCodec
    redirect: RedirectCodec

    @classmethod
    def from_settings(cls, settings: CodecSettings) -> "Codecs":
        cipher = build_cipher(settings.cipher, settings.secret)
        return cls(
            settings=settings,
            payload=PayloadCodec(cipher, settings.mode, strict=settings.strict_decode),
            redirect=RedirectCodec(cipher),
        )


_lock = threading.Lock()
_codecs: Optional[Codecs] = None


def configure(settings: Optional[CodecSettings] = None, *, force: bool = False) -> Codecs:
    """Initialize the process-wide codecs once; later calls return the same instance.

    Pass `force=True` to replace an existing configuration (tests, reloads).
    This is the only place `ConfigurationError` can come from.
    """
    global _codecs
    with _lock:
        if _codecs is None or force:
            _codecs = Codecs.from_settings(settings or CodecSettings.from_env())
        return _codecs


def get_codecs() -> Codecs:
    # Set at import time; the package does not import without a secret
    return _codecs


# -------- Convenience top-level helpers --------
def encode_payload(data: Any) -> Any:
    return get_codecs().payload.encode(data)


def decode_payload(value: Any) -> Any:
    return get_codecs().payload.decode(value)


def decode_payload_safe(value: Any) -> Any:
    return get_codecs().payload.decode_safe(value)


def encode_redirect_url(url: str) -> Optional[str]:
    return get_codecs().redirect.encode(url)


def decode_redirect_url(token: str) -> Optional[str]:
    return get_codecs().redirect.decode(token)


# Fail fast at startup when the secret is missing
configure()


__all__ = [
    "Codecs",
    "PayloadCodec",
    "RedirectCodec",
    "configure",
    "get_codecs",
    "encode_payload",
    "decode_payload",
    "decode_payload_safe",
    "encode_redirect_url",
    "decode_redirect_url",
]
