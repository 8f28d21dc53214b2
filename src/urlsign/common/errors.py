"""Shared error types and HTTP error helpers."""

from __future__ import annotations

from starlette.responses import JSONResponse


class UrlSignError(Exception):
    """Base error for URL signing."""


class MalformedUrlError(UrlSignError):
    """The URL could not be parsed."""


class UnsupportedAlgorithmError(UrlSignError, ValueError):
    """The configured hash algorithm is not supported."""


class SigningNotConfiguredError(UrlSignError):
    """No signing secret is configured."""


class ErrorCode:
    INVALID_SIGNATURE = "invalid_signature"
    SIGNING_NOT_CONFIGURED = "signing_not_configured"


def error_response(
    code: str,
    message: str,
    status_code: int,
) -> JSONResponse:
    payload = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    return JSONResponse(payload, status_code=status_code)
