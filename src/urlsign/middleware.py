"""Starlette middleware that requires a valid signed URL."""

from __future__ import annotations

import time
from urllib.parse import quote

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from urlsign.common.errors import ErrorCode, error_response
from urlsign.common.logging import get_logger, setup_logging
from urlsign.common.metrics import record_validation
from urlsign.common.settings import Settings, get_settings
from urlsign.signer import Clock, UrlSigner

logger = get_logger(__name__)


def request_target(request: Request) -> str:
    """Rebuild the undecoded ``path?query`` the client requested."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        path = raw_path.decode("latin-1")
    else:
        path = quote(request.url.path)
    query = request.scope.get("query_string", b"").decode("latin-1")
    if query:
        return f"{path}?{query}"
    return path


class SignedUrlMiddleware(BaseHTTPMiddleware):
    """Reject requests whose URL does not carry a valid token."""

    def __init__(
        self,
        app: ASGIApp,
        settings: Settings | None = None,
        signer: UrlSigner | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(app)
        self._settings = settings or get_settings()
        setup_logging(self._settings.log_level, self._settings.log_json)
        self._exempt_paths = set(self._settings.exempt_paths)
        self._protected_prefixes = tuple(self._settings.protected_paths)
        self._signer = signer
        if self._signer is None and self._settings.secret:
            self._signer = UrlSigner.from_settings(self._settings, clock)

    def _is_guarded(self, path: str) -> bool:
        if path in self._exempt_paths:
            return False
        if not self._protected_prefixes:
            return True
        return path.startswith(self._protected_prefixes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self._is_guarded(request.url.path):
            return await call_next(request)

        if self._signer is None:
            record_validation("not_configured")
            logger.error("Signed URL required but no secret configured", path=request.url.path)
            return error_response(
                ErrorCode.SIGNING_NOT_CONFIGURED,
                "URL signing secret not configured",
                status_code=500,
            )

        start = time.perf_counter()
        valid = self._signer.verify(request_target(request))
        record_validation("valid" if valid else "invalid", time.perf_counter() - start)

        if not valid:
            logger.info("Rejected request with invalid signature", path=request.url.path)
            return error_response(
                ErrorCode.INVALID_SIGNATURE,
                "Invalid or expired signature",
                status_code=403,
            )

        request.state.signature_verified = True
        return await call_next(request)
