"""Signing entry points and a configured signer facade."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable
from urllib.parse import quote

from urlsign.canonical import TOKEN_PARAM, canonicalize, parse_signed_url
from urlsign.common.hmac import DEFAULT_ALGORITHM, HashAlgorithm
from urlsign.common.logging import KeyMaterialTrace
from urlsign.tokens import generate_token
from urlsign.validator import is_valid_signature

if TYPE_CHECKING:
    from urlsign.common.settings import Settings

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def url_token(
    secret: bytes | str,
    bucket_size: timedelta,
    instant: datetime,
    url: str,
    algorithm: HashAlgorithm = DEFAULT_ALGORITHM,
    trace: KeyMaterialTrace | None = None,
) -> str:
    """
    Compute the token for a token-free URL.

    The URL is canonicalized first, so the order of its query parameters
    does not affect the token.

    Raises:
        MalformedUrlError: If the URL cannot be parsed
    """
    return generate_token(secret, bucket_size, instant, canonicalize(url), algorithm, trace)


def append_token(url: str, token: str) -> str:
    """Append a token parameter to a URL, keeping any fragment last."""
    base, hash_mark, fragment = url.partition("#")
    if "?" not in base:
        separator = "?"
    elif base.endswith(("?", "&")):
        separator = ""
    else:
        separator = "&"
    return f"{base}{separator}{TOKEN_PARAM}={quote(token)}{hash_mark}{fragment}"


def sign_url(
    secret: bytes | str,
    bucket_size: timedelta,
    instant: datetime,
    url: str,
    algorithm: HashAlgorithm = DEFAULT_ALGORITHM,
    trace: KeyMaterialTrace | None = None,
) -> str:
    """
    Return ``url`` with its token attached.

    Raises:
        MalformedUrlError: If the URL cannot be parsed
        ValueError: If the URL already carries a token
    """
    if parse_signed_url(url).token is not None:
        raise ValueError(f"URL already has a '{TOKEN_PARAM}' parameter")
    token = url_token(secret, bucket_size, instant, url, algorithm, trace)
    return append_token(url, token)


@dataclass(frozen=True)
class SigningConfig:
    """Everything signer and verifier must agree on."""

    secret: bytes
    bucket_size: timedelta
    algorithm: HashAlgorithm = DEFAULT_ALGORITHM
    trace: KeyMaterialTrace | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.secret, str):
            object.__setattr__(self, "secret", self.secret.encode("utf-8"))

    def __repr__(self) -> str:
        return f"SigningConfig(bucket_size={self.bucket_size!r}, algorithm={self.algorithm!r})"


class UrlSigner:
    """Helper for signing and verifying URLs with one configuration."""

    def __init__(self, config: SigningConfig, clock: Clock | None = None) -> None:
        """Initialize with a signing configuration.

        Args:
            config: Shared secret, bucket size and algorithm.
            clock: Source of the current time, defaults to UTC now.
        """
        self.config = config
        self._clock = clock or utc_now

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock | None = None) -> UrlSigner:
        return cls(settings.signing_config(), clock)

    def _at(self, at: datetime | None) -> datetime:
        return at if at is not None else self._clock()

    def token(self, url: str, at: datetime | None = None) -> str:
        """Token for a token-free URL."""
        config = self.config
        return url_token(
            config.secret, config.bucket_size, self._at(at), url, config.algorithm, config.trace
        )

    def sign(self, url: str, at: datetime | None = None) -> str:
        """URL with its token attached."""
        config = self.config
        return sign_url(
            config.secret, config.bucket_size, self._at(at), url, config.algorithm, config.trace
        )

    def verify(self, url: str, at: datetime | None = None) -> bool:
        """Whether a signed URL is authentic and fresh."""
        config = self.config
        return is_valid_signature(
            config.secret, config.bucket_size, self._at(at), url, config.algorithm, config.trace
        )
