"""URL parsing and canonical payload construction."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping, Sequence
from urllib.parse import parse_qsl, unquote, urlsplit

from urlsign.common.errors import MalformedUrlError

TOKEN_PARAM = "token"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_SURROGATES = re.compile("[\ud800-\udfff]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass
class ParsedUrl:
    """Decoded path and query parameters of a URL."""

    path: str
    params: dict[str, list[str]] = field(default_factory=dict)

    @property
    def token(self) -> str | None:
        """First value of the token parameter, if present."""
        values = self.params.get(TOKEN_PARAM)
        return values[0] if values else None


def parse_signed_url(url: str) -> ParsedUrl:
    """
    Parse a URL into its decoded path and query parameters.

    Scheme, host and fragment are discarded. Parameters keep their first-seen
    key order and every value, including blank ones. Escapes that are not
    valid UTF-8 decode to surrogates so distinct raw bytes stay distinct.

    Raises:
        MalformedUrlError: If the URL cannot be parsed
    """
    if _CONTROL_CHARS.search(url):
        raise MalformedUrlError("URL contains a control character")
    if _SURROGATES.search(url):
        raise MalformedUrlError("URL contains a lone surrogate")
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise MalformedUrlError(str(exc)) from exc

    if _BAD_ESCAPE.search(parts.path):
        raise MalformedUrlError("Invalid percent escape in URL path")

    params: dict[str, list[str]] = {}
    for key, value in parse_qsl(parts.query, keep_blank_values=True, errors="surrogateescape"):
        params.setdefault(key, []).append(value)

    return ParsedUrl(path=unquote(parts.path, errors="surrogateescape"), params=params)


def canonical_payload(path: str, params: Mapping[str, Sequence[str]]) -> str:
    """
    Build the string that is actually signed.

    The token parameter is dropped and only the first value of each remaining
    key participates. Pairs are sorted as whole ``key=value`` strings, not by key.
    """
    pairs = sorted(
        f"{key}={values[0]}"
        for key, values in params.items()
        if key != TOKEN_PARAM and values
    )
    return f"{path}?{'&'.join(pairs)}"


def canonicalize(url: str) -> str:
    """Parse a URL and return its canonical payload."""
    parsed = parse_signed_url(url)
    return canonical_payload(parsed.path, parsed.params)
