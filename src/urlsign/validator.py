"""Signed URL validation over a sliding window of time buckets."""

from __future__ import annotations

from datetime import datetime, timedelta

from urlsign.canonical import canonical_payload, parse_signed_url
from urlsign.common.errors import MalformedUrlError
from urlsign.common.hmac import DEFAULT_ALGORITHM, HashAlgorithm, tokens_equal
from urlsign.common.logging import KeyMaterialTrace, get_logger
from urlsign.tokens import generate_token

logger = get_logger(__name__)


def candidate_instants(reference: datetime, bucket_size: timedelta) -> tuple[datetime, ...]:
    """
    Instants whose buckets are accepted: current, previous, next.

    Neighbours outside the representable datetime range are left out.
    """
    candidates = [reference]
    for step in (-1, 1):
        try:
            candidates.append(reference + step * bucket_size)
        except OverflowError:
            continue
    return tuple(candidates)


def is_valid_signature(
    secret: bytes | str,
    bucket_size: timedelta,
    reference_instant: datetime,
    signed_url: str,
    algorithm: HashAlgorithm = DEFAULT_ALGORITHM,
    trace: KeyMaterialTrace | None = None,
) -> bool:
    """
    Check the token carried in a signed URL.

    The token is recomputed over the URL's path and sorted non-token query
    parameters for the bucket of ``reference_instant`` and its two neighbours,
    so a token stays valid for up to three bucket widths. Scheme and host are
    not checked.

    Args:
        secret: Shared secret used when signing
        bucket_size: Agreed bucket width
        reference_instant: Verifier's notion of now
        signed_url: Full URL including its ``token`` parameter
        algorithm: Hash constructor used when signing
        trace: Optional sink for expected tokens

    Returns:
        True if the token matches one of the accepted buckets. Every failure,
        including an unparseable URL, is reported as False.
    """
    try:
        parsed = parse_signed_url(signed_url)
    except MalformedUrlError as exc:
        logger.warning("Unparseable signed URL", error=str(exc))
        return False

    claimed = parsed.token
    if claimed is None:
        return False

    payload = canonical_payload(parsed.path, parsed.params)

    for candidate in candidate_instants(reference_instant, bucket_size):
        expected = generate_token(secret, bucket_size, candidate, payload, algorithm, trace)
        if tokens_equal(expected, claimed):
            return True

    return False
