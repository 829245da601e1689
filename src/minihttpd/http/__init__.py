"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

Everything that knows what HTTP/1.1 looks like on the wire lives here.
Nothing in this package touches a socket; it works on bytes handed in by
minihttpd.core and hands bytes back.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP Request-Response Cycle                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   CLIENT                                         SERVER              │
    │      │   GET /echo/abc HTTP/1.1                     │                │
    │      │   Accept-Encoding: gzip                      │                │
    │      │  ─────────────────────────────────────────►  │                │
    │      │                                              │                │
    │      │               HTTP/1.1 200 OK                │                │
    │      │               Content-Type: text/plain       │                │
    │      │               Content-Encoding: gzip         │                │
    │      │               Content-Length: 23             │                │
    │      │  ◄─────────────────────────────────────────  │                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
MODULE COMPONENTS
=============================================================================

    headers.py       Header-line tokenizer shared with core.framing
    request.py       Bytes → HTTPRequest
    response.py      HTTPResponse → bytes
    router.py        (method, pattern) → handler table
    status_codes.py  The status codes this server emits

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, MalformedRequest
from .response import (
    HTTPResponse,
    ok,                 # 200 OK
    created,            # 201 Created
    not_found,          # 404 Not Found
    error_response,     # 400 / 413 / any status, empty body
    internal_error,     # 500 Internal Server Error
)
from .router import Router, Route
from .status_codes import HTTPStatus, reason_phrase

__all__ = [
    # Request decoding
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "MalformedRequest",

    # Response encoding
    "HTTPResponse",
    "ok",
    "created",
    "not_found",
    "error_response",
    "internal_error",

    # Routing
    "Router",
    "Route",

    # Status codes
    "HTTPStatus",
    "reason_phrase",
]
