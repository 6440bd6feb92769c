from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from ciphers import Cipher, CipherError
from common.config import Mode


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decoded:
    """Successful sub-decoder result. `value` may itself be None."""

    value: Any


Step = Callable[[Any], Optional[Decoded]]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _json_key(key: Any) -> str:
    # Same key coercion json.dumps applies, done up front so mixed keys can sort
    if isinstance(key, str):
        return key
    if key is True:
        return "true"
    if key is False:
        return "false"
    if key is None:
        return "null"
    if isinstance(key, (int, float)):
        return json.dumps(key, allow_nan=False)
    raise TypeError(f"keys must be str, int, float, bool or None, not {type(key).__name__}")


def _stringify_keys(data: Any) -> Any:
    if isinstance(data, dict):
        return {_json_key(k): _stringify_keys(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [_stringify_keys(v) for v in data]
    return data


def dumps_canonical(data: Any) -> str:
    """Compact JSON with a stable key order; non-ASCII kept as-is.

    Non-string keys become JSON strings first, so ``{1: "a", "b": 2}``
    serializes as ``{"1":"a","b":2}``.
    """
    return json.dumps(
        _stringify_keys(data),
        separators=(",", ":"),
        sort_keys=True,
        ensure_ascii=False,
        allow_nan=False,
    )


def try_parse_json(text: str) -> Optional[Decoded]:
    """Strict JSON parse (no NaN/Infinity). None when `text` is not JSON."""
    try:
        return Decoded(json.loads(text, parse_constant=_reject_constant))
    except (ValueError, RecursionError):
        return None


def is_empty(value: Any) -> bool:
    """True for None, False, "", numeric zero and NaN.

    Empty containers are real payloads and do not count.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or value != value
    return False


class PayloadCodec:
    """
    Reversible transform for JSON-serializable payloads kept in untrusted storage.

    Encode by mode
    - DEVELOPMENT: identity; the payload stays readable.
    - PRODUCTION: canonical JSON, then the cipher.
    - UNSPECIFIED: canonical JSON only, with a warning.
    Encode returns None when serialization or encryption fails.

    Decode runs an ordered list of sub-decoders per mode; the first one that
    applies wins and anything left over returns the input unchanged. The
    pipeline tolerates values written under a different mode: already-decoded
    objects, plain JSON and ciphertext all come back usable. Decode never
    raises.
    """

    def __init__(self, cipher: Cipher, mode: Mode, *, strict: bool = False) -> None:
        self._cipher = cipher
        self._mode = Mode(mode)
        self._strict = strict
        self._steps = self._pipeline()

    @property
    def mode(self) -> Mode:
        return self._mode

    def _pipeline(self) -> Tuple[Step, ...]:
        if self._mode is Mode.DEVELOPMENT:
            return (self._empty, self._non_string, self._plain_json)
        if self._mode is Mode.PRODUCTION:
            if self._strict:
                return (self._empty, self._non_string, self._decrypted)
            return (self._empty, self._non_string, self._plain_json, self._decrypted)
        return (self._empty,)

    # -------- Encode --------
    def encode(self, data: Any) -> Any:
        try:
            if self._mode is Mode.DEVELOPMENT:
                return data
            if self._mode is Mode.PRODUCTION:
                return self._cipher.encrypt(dumps_canonical(data))
            logger.warning("Codec mode is unspecified; storing payload as plain JSON")
            return dumps_canonical(data)
        except Exception:
            logger.error("Payload encode failed", exc_info=True)
            return None

    # -------- Decode steps --------
    @staticmethod
    def _empty(value: Any) -> Optional[Decoded]:
        return Decoded(None) if is_empty(value) else None

    @staticmethod
    def _non_string(value: Any) -> Optional[Decoded]:
        # Already-decoded objects and other non-string values were never serialized
        return None if isinstance(value, str) else Decoded(value)

    @staticmethod
    def _plain_json(value: str) -> Optional[Decoded]:
        return try_parse_json(value)

    def _decrypted(self, value: str) -> Optional[Decoded]:
        try:
            raw = self._cipher.decrypt(value)
        except CipherError:
            logger.debug("Payload is neither JSON nor ciphertext; returning it unchanged")
            return None
        if not raw:
            return None
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
        if not text.strip():
            return None
        return try_parse_json(text) or Decoded(text)

    # -------- Decode --------
    def decode(self, value: Any) -> Any:
        try:
            for step in self._steps:
                result = step(value)
                if result is not None:
                    return result.value
        except Exception:
            logger.debug("Payload decode failed; returning input unchanged", exc_info=True)
        return value

    def decode_safe(self, value: Any) -> Any:
        """Decode, mapping an empty result to None.

        Unlike `decode`, an internal error hands back `value` itself.
        """
        try:
            decoded = self.decode(value)
        except Exception:
            return value
        if is_empty(decoded):
            return None
        return decoded
