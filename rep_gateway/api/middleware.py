"""
HTTP middleware

- Request id: reuse the caller's X-Request-ID or mint one, echo it back, and
  bind it to every log line emitted while the request is handled
- Access log: one line at start, one at completion with status and duration
- Security headers: CSP and the usual hardening headers on every response
- Recovery: unhandled exceptions become a JSON 500 instead of a dropped connection
"""

import time
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from rep_gateway.api.schemas.chat import ErrorResponse
from rep_gateway.config.settings import settings

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request id tagging, access logging and panic recovery"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()

        with logger.contextualize(request_id=request_id):
            client = request.client.host if request.client else "-"
            logger.info(f"Request started: {request.method} {request.url.path} from {client}")

            try:
                response = await call_next(request)
            except Exception:
                logger.exception("Unhandled error while processing request")
                response = JSONResponse(
                    status_code=500,
                    content=ErrorResponse(
                        error="Internal Server Error",
                        message="Internal server error",
                        code=500,
                    ).model_dump(),
                )

            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                f"Request completed: {request.method} {request.url.path} "
                f"status={response.status_code} duration={duration_ms:.1f}ms"
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds CSP and hardening headers"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self' 'unsafe-inline'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data: https:; "
            f"connect-src 'self' {settings.allowed_origin}; "
            "frame-ancestors 'none'; "
            "base-uri 'self'; "
            "form-action 'self'"
        )
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
