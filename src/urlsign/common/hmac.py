"""HMAC primitives shared by the key deriver, token generator and validator."""

from __future__ import annotations

import hashlib
import hmac
from typing import Any, Callable

from urlsign.common.errors import UnsupportedAlgorithmError

HashAlgorithm = Callable[..., Any]
"""A hashlib constructor such as ``hashlib.sha1``."""

# SHA1-HMAC remains sound even though plain SHA-1 collisions are practical.
DEFAULT_ALGORITHM: HashAlgorithm = hashlib.sha1

SUPPORTED_ALGORITHMS = ("sha1", "sha224", "sha256", "sha384", "sha512")


def resolve_algorithm(name: str) -> HashAlgorithm:
    """Map a hashlib algorithm name to its constructor."""
    normalized = name.strip().lower()
    if normalized not in SUPPORTED_ALGORITHMS:
        raise UnsupportedAlgorithmError(f"Unsupported hash algorithm: {name}")
    constructor: HashAlgorithm = getattr(hashlib, normalized)
    return constructor


def hmac_digest(key: bytes, message: bytes, algorithm: HashAlgorithm = DEFAULT_ALGORITHM) -> bytes:
    """Create a raw HMAC digest."""
    return hmac.new(key, message, algorithm).digest()


def tokens_equal(expected: str, claimed: str) -> bool:
    """Compare two tokens in constant time."""
    return hmac.compare_digest(
        expected.encode("utf-8", "surrogateescape"), claimed.encode("utf-8", "surrogateescape")
    )
