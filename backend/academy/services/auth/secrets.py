"""Refresh-secret generation and digesting.

The digest is a lookup key, not a password verifier: a plain SHA-256 over
a high-entropy secret is enough, and equal digests are the comparison path.
"""

from __future__ import annotations

import hashlib
import secrets

DEFAULT_SECRET_BYTES = 48


def generate_refresh_secret(num_bytes: int = DEFAULT_SECRET_BYTES) -> str:
    """
    Return ``num_bytes`` of OS randomness as lowercase hex.

    The result is ``2 * num_bytes`` characters long. Entropy failures from
    the OS propagate unchanged.

    :raises ValueError: If ``num_bytes`` is not positive.
    """
    if num_bytes <= 0:
        raise ValueError("num_bytes must be positive")
    return secrets.token_hex(num_bytes)


def hash_secret(plaintext: str) -> str:
    """Hex-encoded SHA-256 of the UTF-8 bytes of ``plaintext``."""
    return hashlib.sha256(plaintext.encode("utf-8")).hexdigest()
