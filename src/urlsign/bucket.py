"""Time-bucketed key derivation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from urlsign.common.hmac import DEFAULT_ALGORITHM, HashAlgorithm, hmac_digest
from urlsign.common.logging import KeyMaterialTrace

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_UINT64_MASK = (1 << 64) - 1


def _as_bytes(secret: bytes | str) -> bytes:
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return secret


def timedelta_nanoseconds(delta: timedelta) -> int:
    """Exact nanoseconds in a timedelta."""
    return ((delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds) * 1000


def unix_nanoseconds(instant: datetime) -> int:
    """Nanoseconds since the Unix epoch. Naive datetimes are read as UTC."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return timedelta_nanoseconds(instant - EPOCH)


def bucket_index(instant: datetime, bucket_size: timedelta) -> int:
    """
    Index of the time bucket containing ``instant``.

    Division truncates toward zero, so instants before the epoch share
    bucket 0 with the first bucket after it. A zero bucket size puts every
    instant in bucket 0.
    """
    size = timedelta_nanoseconds(bucket_size)
    if size == 0:
        return 0
    nanos = unix_nanoseconds(instant)
    quotient = abs(nanos) // abs(size)
    return quotient if (nanos < 0) == (size < 0) else -quotient


def derive_bucket_key(
    secret: bytes | str,
    bucket_index: int,
    algorithm: HashAlgorithm = DEFAULT_ALGORITHM,
    trace: KeyMaterialTrace | None = None,
) -> bytes:
    """
    Derive the short-lived key for one time bucket.

    This is RFC 6238 TOTP without the truncation step: an HMAC keyed by the
    long-lived secret over the bucket index as an 8-byte big-endian integer.

    Args:
        secret: Long-lived shared secret
        bucket_index: Index from :func:`bucket_index`
        algorithm: Hash constructor for the HMAC
        trace: Optional sink for the derived key

    Returns:
        Raw HMAC digest used as the bucket key
    """
    counter = (bucket_index & _UINT64_MASK).to_bytes(8, "big")
    key = hmac_digest(_as_bytes(secret), counter, algorithm)
    if trace is not None:
        trace.bucket_key(bucket_index, key)
    return key
