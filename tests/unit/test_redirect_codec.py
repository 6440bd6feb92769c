from __future__ import annotations

import re

import pytest

from ciphers import CipherError, FernetCipher, OpenSSLCipher
from codec.redirect import RedirectCodec, from_url_safe, to_url_safe


TOKEN_ALPHABET = re.compile(r"^[A-Za-z0-9_-]+$")

URLS = [
    "https://example.com/",
    "/dashboard?tab=billing&sort=-created",
    "https://example.com/path/with spaces/and/ünïcode?q=a+b&x=%2F",
    "/a",
    "https://shop.example.com/checkout?next=" + "x" * 500,
]


class _RaisingCipher:
    def encrypt(self, plaintext: str) -> str:
        raise CipherError("encrypt failed")

    def decrypt(self, token: str) -> bytes:
        raise CipherError("decrypt failed")


@pytest.fixture(params=[FernetCipher, OpenSSLCipher], ids=["fernet", "openssl"])
def codec(request) -> RedirectCodec:
    return RedirectCodec(request.param("test-key"))


@pytest.mark.parametrize("url", URLS)
def test_roundtrip(codec, url):
    token = codec.encode(url)
    assert token is not None
    assert codec.decode(token) == url


@pytest.mark.parametrize("url", URLS)
def test_token_alphabet_is_url_safe(codec, url):
    token = codec.encode(url)
    assert TOKEN_ALPHABET.match(token)
    assert "+" not in token and "/" not in token and "=" not in token


def test_bad_token_is_rejected(codec):
    assert codec.decode("%%%invalid%%%") is None


def test_foreign_key_token_is_rejected():
    token = RedirectCodec(FernetCipher("key-a")).encode("https://evil.example/")
    assert RedirectCodec(FernetCipher("key-b")).decode(token) is None


def test_tampered_token_is_rejected():
    codec = RedirectCodec(FernetCipher("test-key"))
    token = codec.encode("https://example.com/account")
    mid = len(token) // 2
    tampered = token[:mid] + ("A" if token[mid] != "A" else "B") + token[mid + 1:]
    assert codec.decode(tampered) is None


def test_plain_url_is_not_passed_through(codec):
    assert codec.decode("https://example.com/") is None


@pytest.mark.parametrize("bad", [None, "", 123, b"bytes"])
def test_decode_non_string_returns_none(codec, bad):
    assert codec.decode(bad) is None


@pytest.mark.parametrize("bad", [None, "", 123])
def test_encode_invalid_input_returns_none(codec, bad):
    assert codec.encode(bad) is None


def test_cipher_failures_return_none():
    codec = RedirectCodec(_RaisingCipher())
    assert codec.encode("https://example.com/") is None
    assert codec.decode("abcd") is None


def test_decrypted_empty_url_is_rejected():
    cipher = FernetCipher("test-key")
    token = to_url_safe(cipher.encrypt(""))
    assert RedirectCodec(cipher).decode(token) is None


def test_url_safe_helpers():
    assert to_url_safe("ab+/cd==") == "ab-_cd"
    assert from_url_safe("ab-_cd") == "ab+/cd=="
    assert from_url_safe("abcd") == "abcd"
    assert from_url_safe("abc") == "abc="
