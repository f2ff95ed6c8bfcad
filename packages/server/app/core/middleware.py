"""
Security middleware: CSRF protection and security headers.

Errors raised inside middleware never reach FastAPI's exception handlers, so
the CSRF rejection is rendered here from the same ``CRMError`` envelope.
"""

from __future__ import annotations

import secrets

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.core.auth import CSRF_COOKIE, CSRF_HEADER, SESSION_COOKIE
from app.core.errors import CSRFValidationFailed

log = structlog.get_logger()

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

# ---------------------------------------------------------------------------
# Security Headers
# ---------------------------------------------------------------------------

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "img-src 'self' data: https://lh3.googleusercontent.com; "
        "frame-ancestors 'none';"
    ),
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains",
}

# Swagger UI loads its assets from a CDN
DOCS_PATHS = frozenset({"/docs", "/redoc"})


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach security headers to every response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            if header == "Content-Security-Policy" and request.url.path in DOCS_PATHS:
                continue
            response.headers[header] = value
        return response


# ---------------------------------------------------------------------------
# CSRF Protection (Double-Submit Cookie)
# ---------------------------------------------------------------------------

class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Double-submit cookie CSRF protection for cookie-authenticated writes.

    A state-changing request that carries a session cookie must echo the
    ``crm_csrf`` cookie in the ``X-CSRF-Token`` header. Requests without a
    session cookie (signup, login) have nothing to forge and pass through.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method in SAFE_METHODS or SESSION_COOKIE not in request.cookies:
            return await call_next(request)

        cookie_token = request.cookies.get(CSRF_COOKIE) or ""
        header_token = request.headers.get(CSRF_HEADER) or ""

        if not cookie_token or not secrets.compare_digest(cookie_token.encode(), header_token.encode()):
            log.info("csrf.rejected", method=request.method, path=request.url.path)
            error = CSRFValidationFailed()
            return JSONResponse(status_code=error.status_code, content=error.error_body)

        return await call_next(request)
