"""
Common utilities for transit-codec.

Modules:
- config: environment-driven settings (secret, mode, cipher choice)
"""

__all__ = [
    "config",
]
