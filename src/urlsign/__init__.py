"""
urlsign: time-bucketed signed URLs.

A URL signed by one service can pass through an untrusted party and be
verified by a second service that shares only a secret and a bucket size.
"""

from urlsign.bucket import bucket_index, derive_bucket_key
from urlsign.canonical import TOKEN_PARAM, canonical_payload, canonicalize, parse_signed_url
from urlsign.common.errors import MalformedUrlError, UrlSignError
from urlsign.signer import SigningConfig, UrlSigner, sign_url, url_token
from urlsign.tokens import generate_token
from urlsign.validator import is_valid_signature

__version__ = "1.0.0"

__all__ = [
    "TOKEN_PARAM",
    "MalformedUrlError",
    "SigningConfig",
    "UrlSignError",
    "UrlSigner",
    "bucket_index",
    "canonical_payload",
    "canonicalize",
    "derive_bucket_key",
    "generate_token",
    "is_valid_signature",
    "parse_signed_url",
    "sign_url",
    "url_token",
]
