"""
Middleware to add request ID to all HTTP API requests.

Binds the request ID in the request context so every log record emitted
while serving the request, including tool operations, carries it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from mcp_filesystem.utils.request_context import (
    clear_request_id,
    generate_request_id,
    set_request_id,
)

if TYPE_CHECKING:
    from fastapi import Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate or generate request IDs and echo them in responses."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        """Process request with its ID bound in context."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        set_request_id(request_id)

        # Health probes would drown out real traffic
        should_log = not request.url.path.startswith("/health")

        if should_log:
            logger.info(
                "Request started",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                },
            )

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id

            if should_log:
                logger.info(
                    "Request completed",
                    extra={"status_code": response.status_code},
                )

            return response
        finally:
            clear_request_id()
