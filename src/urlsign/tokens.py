"""Token generation over a canonical payload."""

from __future__ import annotations

from datetime import datetime, timedelta

from urlsign.bucket import bucket_index, derive_bucket_key
from urlsign.common.hmac import DEFAULT_ALGORITHM, HashAlgorithm, hmac_digest
from urlsign.common.logging import KeyMaterialTrace


def generate_token(
    secret: bytes | str,
    bucket_size: timedelta,
    instant: datetime,
    payload: str,
    algorithm: HashAlgorithm = DEFAULT_ALGORITHM,
    trace: KeyMaterialTrace | None = None,
) -> str:
    """
    Sign ``payload`` with the key for the bucket containing ``instant``.

    The payload is signed exactly as given. Use
    :func:`urlsign.signer.url_token` to sign a URL, which canonicalizes it first.

    Returns:
        Lower-case hex digest, twice the digest size in length
    """
    index = bucket_index(instant, bucket_size)
    key = derive_bucket_key(secret, index, algorithm, trace)
    token = hmac_digest(key, payload.encode("utf-8", "surrogateescape"), algorithm).hex()
    if trace is not None:
        trace.expected_token(index, token)
    return token
