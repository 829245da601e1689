"""
=============================================================================
MIDDLEWARE
=============================================================================

Wrappers around the router, applied in this order:

LoggingMiddleware:
    Times each request and writes one access-log line.

CompressionMiddleware:
    gzip-compresses the response body when the client accepts gzip.

=============================================================================
DESIGN PATTERN: CHAIN OF RESPONSIBILITY
=============================================================================

Each middleware gets the request and a `next` callable. It may act before
calling next, after it returns, or both.

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware
from .compression import CompressionMiddleware, accepted_encodings

__all__ = [
    # Base classes
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",

    # Built-in middleware
    "LoggingMiddleware",
    "CompressionMiddleware",
    "accepted_encodings",
]
