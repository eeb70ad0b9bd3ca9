"""
Request context middleware for the CallSync player API.

Each request gets a ``request_id`` (taken from ``X-Request-ID`` or
generated) bound into structlog contextvars, so the parser, content
source and router events emitted while handling it carry the same id.
One ``http_request`` event is logged per request with the matched path
params (``document_id`` for document fetches), at a level chosen by
status class.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Polled constantly; logged at debug only.
QUIET_PATHS = frozenset({"/health", "/metrics"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind per-request log context and log the outcome."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        start = time.monotonic()
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id

            path = request.url.path
            log = logger.bind(
                method=request.method,
                path=path,
                status=response.status_code,
                duration_ms=round((time.monotonic() - start) * 1000, 2),
                **request.path_params,
            )
            if response.status_code >= 500:
                log.error("http_request")
            elif response.status_code >= 400:
                log.warning("http_request")
            elif path.rstrip("/") in QUIET_PATHS:
                log.debug("http_request")
            else:
                log.info("http_request")
        return response
