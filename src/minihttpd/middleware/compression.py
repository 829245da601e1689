"""
=============================================================================
GZIP COMPRESSION MIDDLEWARE
=============================================================================

Content negotiation for response bodies. The client lists the encodings
it understands in Accept-Encoding; if the literal token "gzip" is among
them, the response body is gzip-compressed.

    Accept-Encoding: deflate, GZIP , br   →  {"deflate", "gzip", "br"}  →  gzip
    Accept-Encoding: deflate, br          →  {"deflate", "br"}          →  as-is
    Accept-Encoding: gzip;q=0             →  {"gzip;q=0"}               →  as-is
    (no header)                           →  set()                      →  as-is

Only gzip is supported. Other tokens, and quality values, are ignored.

=============================================================================
WHAT GETS COMPRESSED
=============================================================================

Every response produced by the router when gzip is accepted: no size
threshold and no content-type filter. Even an empty 404 body becomes a
(small, valid) gzip member.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  body          →  gzip.compress(body, mtime=0)                       │
    │  headers       →  ... + ("Content-Encoding", "gzip")                 │
    │  Content-Length→  recomputed by HTTPResponse.to_bytes()              │
    └─────────────────────────────────────────────────────────────────────┘

mtime=0 pins the timestamp field of the gzip header, so the same body
always compresses to the same bytes.

=============================================================================
"""

import gzip
from typing import Optional, Set

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


GZIP = "gzip"


def accepted_encodings(header: Optional[str]) -> Set[str]:
    """
    Parse an Accept-Encoding value into a set of lower-cased tokens.

    Tokens are split on ",", trimmed and lower-cased; empty tokens are
    dropped. No q-value parsing.
    """
    if not header:
        return set()

    tokens = (token.strip().lower() for token in header.split(","))
    return {token for token in tokens if token}


def accepts_gzip(header: Optional[str]) -> bool:
    return GZIP in accepted_encodings(header)


def compress_body(body: bytes, level: int = 9) -> bytes:
    """Deterministic gzip: identical input always yields identical output."""
    return gzip.compress(body, compresslevel=level, mtime=0)


class CompressionMiddleware(Middleware):
    """
    Response compression middleware.

    =========================================================================
    MIDDLEWARE POSITION
    =========================================================================

    Compression sits closest to the router:

        pipeline.add(LoggingMiddleware())      # logs the compressed size
        pipeline.add(CompressionMiddleware())  # compresses handler output

    =========================================================================
    """

    def __init__(self, level: int = 9):
        """
        Args:
            level: gzip compression level (1 = fastest, 9 = smallest).
        """
        self.level = level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        # ═══════════════════════════════════════════════════════════════════
        # CHECK CLIENT SUPPORT
        # ═══════════════════════════════════════════════════════════════════
        wants_gzip = accepts_gzip(request.accept_encoding)

        response = next(request)

        if not wants_gzip:
            return response

        # ═══════════════════════════════════════════════════════════════════
        # COMPRESS AND MARK
        # ═══════════════════════════════════════════════════════════════════
        response.body = compress_body(response.body, self.level)
        response.set_header("Content-Encoding", GZIP)

        return response
