from __future__ import annotations

import os
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


# Environment configuration
ENV_SECRET_KEY = "CODEC_SECRET_KEY"
ENV_MODE = "APP_ENV"
ENV_CIPHER = "CODEC_CIPHER"
ENV_STRICT_DECODE = "CODEC_STRICT_DECODE"

# Backward-compatible fallbacks (names used by the browser build)
FALLBACK_ENV_SECRET_KEY = "NEXT_PUBLIC_ENCRYPTION_KEY"
FALLBACK_ENV_MODE = "NODE_ENV"

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigurationError(RuntimeError):
    """Raised at startup when the codec configuration is missing or invalid."""


class Mode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    UNSPECIFIED = "unspecified"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "Mode":
        """Map a raw environment value to a Mode.

        An unset value means production. Anything other than
        ``development`` / ``production`` is UNSPECIFIED.
        """
        if raw is None:
            return cls.PRODUCTION
        norm = raw.strip().lower()
        if norm == cls.DEVELOPMENT.value:
            return cls.DEVELOPMENT
        if norm == cls.PRODUCTION.value:
            return cls.PRODUCTION
        return cls.UNSPECIFIED


class CipherKind(str, Enum):
    FERNET = "fernet"
    OPENSSL = "openssl"


def _getenv(environ: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        v = environ.get(name)
        if v not in (None, ""):
            return v
    return None


def _require(v: Optional[str], what: str) -> str:
    if not v or not v.strip():
        raise ConfigurationError(f"Missing required configuration: {what}")
    return v


class CodecSettings(BaseModel):
    """
    Immutable codec configuration, read once at process start.

    Fields
    - secret: symmetric passphrase shared by both codecs. Never logged.
    - mode: DEVELOPMENT disables payload encryption, UNSPECIFIED degrades to
      plain JSON.
    - cipher: which cipher primitive backs the codecs.
    - strict_decode: when True, production decode refuses plain JSON and only
      accepts values that decrypt.
    """

    model_config = ConfigDict(frozen=True)

    secret: str = Field(min_length=1, repr=False)
    mode: Mode = Mode.PRODUCTION
    cipher: CipherKind = CipherKind.FERNET
    strict_decode: bool = False

    @field_validator("secret")
    @classmethod
    def _secret_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("secret must not be blank")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CodecSettings":
        env = os.environ if environ is None else environ
        secret = _require(
            _getenv(env, ENV_SECRET_KEY, FALLBACK_ENV_SECRET_KEY),
            f"{ENV_SECRET_KEY} (or {FALLBACK_ENV_SECRET_KEY})",
        )
        mode = Mode.parse(_getenv(env, ENV_MODE, FALLBACK_ENV_MODE))

        raw_cipher = (_getenv(env, ENV_CIPHER) or CipherKind.FERNET.value).strip().lower()
        try:
            cipher = CipherKind(raw_cipher)
        except ValueError as ex:
            choices = ", ".join(k.value for k in CipherKind)
            raise ConfigurationError(
                f"Unsupported {ENV_CIPHER}={raw_cipher!r}; expected one of: {choices}"
            ) from ex

        strict = (_getenv(env, ENV_STRICT_DECODE) or "").strip().lower() in _TRUTHY

        try:
            return cls(secret=secret, mode=mode, cipher=cipher, strict_decode=strict)
        except ValidationError as ex:
            raise ConfigurationError(f"Invalid codec configuration: {ex}") from ex
