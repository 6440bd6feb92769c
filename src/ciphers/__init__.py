"""
Symmetric cipher primitives behind the payload and redirect codecs.

Both ciphers take a passphrase, return base64 text from `encrypt`, and raw
bytes from `decrypt`. Every failure surfaces as `CipherError`.
"""

from .base import Cipher, CipherError, build_cipher
from .fernet import FernetCipher
from .openssl import OpenSSLCipher

__all__ = ["Cipher", "CipherError", "FernetCipher", "OpenSSLCipher", "build_cipher"]
