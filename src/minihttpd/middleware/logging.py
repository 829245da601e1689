"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

One INFO line per request on the "minihttpd.access" logger:

    127.0.0.1 "GET /echo/abc" 200 3 0.41ms
    ────┬──── ──────┬─────── ─┬─ ┬ ───┬──
        │           │         │  │    └── time spent in the pipeline
        │           │         │  └─────── body bytes as sent (post-gzip)
        │           │         └────────── status code
        │           └──────────────────── method and raw path
        └──────────────────────────────── client IP

The User-Agent of every request goes to the same logger at DEBUG.

Nothing is added to the response. In particular there is no
X-Request-ID header: identical requests must get byte-identical
responses.

=============================================================================
"""

import time
import logging
from dataclasses import dataclass

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


# ═══════════════════════════════════════════════════════════════════════════
# LOGGER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════
# Namespaced so the access log can be routed or silenced on its own:
#   logging.getLogger("minihttpd.access").setLevel(logging.WARNING)
# ═══════════════════════════════════════════════════════════════════════════

logger = logging.getLogger("minihttpd.access")


@dataclass
class RequestLog:
    """Access-log entry for one request."""

    method: str
    path: str
    client_ip: str
    status_code: int
    content_length: int
    duration_ms: float

    def to_text(self) -> str:
        return (
            f'{self.client_ip} "{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Should be FIRST in the pipeline so that timing covers everything and
    the logged length is the length that goes on the wire.

        pipeline.add(LoggingMiddleware())
    """

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        logger.debug(f"User-Agent: {request.user_agent or '-'}")

        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            # Logged here with timing; the connection loop logs the
            # traceback and answers 500
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        log_entry = RequestLog(
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0],
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
        )
        logger.info(log_entry.to_text())

        return response
