"""
=============================================================================
HTTP RESPONSE ENCODER
=============================================================================

Builds HTTP/1.1 responses and serializes them onto the wire.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                                         │ │
    │  │    ────┬─── ─┬─ ─┬─                                            │ │
    │  │        │     │   │                                              │ │
    │  │    Version  Code Phrase                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS (in the order they were set) ─────────────────────────┐ │
    │  │    Content-Type: text/plain\r\n                                │ │
    │  │    Content-Encoding: gzip\r\n        ← added by compression     │ │
    │  │    Content-Length: 23\r\n            ← always last              │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    (raw bytes, possibly gzip-compressed)                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SERIALIZATION RULES
=============================================================================

1. Headers keep insertion order. They are stored as a list of pairs, not
   a dict, so the wire order is exactly the order handlers and middleware
   added them.

2. Content-Length is computed from the FINAL body at serialization time
   and written after every other header. Any Content-Length a handler set
   by hand is dropped. The length on the wire therefore always matches the
   bytes on the wire, even after compression swapped the body.

3. No Date, Server or request-id headers. Two identical requests get two
   byte-identical responses.

4. Unknown status codes get an empty reason phrase: "HTTP/1.1 599 \\r\\n".

=============================================================================
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .headers import HEAD_ENCODING, HEAD_ERRORS
from .status_codes import HTTPStatus, reason_phrase


CRLF = "\r\n"


def _to_bytes(body: Union[str, bytes]) -> bytes:
    # str bodies usually come from the request path, which was decoded with
    # surrogateescape; encoding the same way restores the original bytes.
    if isinstance(body, str):
        return body.encode(HEAD_ENCODING, HEAD_ERRORS)
    return body


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response.

        Handler returns          to_bytes()              Socket sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes

        HTTPResponse(            b"HTTP/1.1 200 OK\\r\\n   socket.sendall(
          status=200,              Content-Type: ...\\r\\n     response_bytes
          headers=[...],           Content-Length: 3\\r\\n  )
          body=b"abc"              \\r\\n
        )                          abc"
    """

    status: int = HTTPStatus.OK
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {int(self.status)} {reason_phrase(self.status)}"

    def get_header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup. Returns the last value set."""
        wanted = name.lower()
        found = None
        for key, value in self.headers:
            if key.lower() == wanted:
                found = value
        return found

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a response header.

        An existing header with the same name (any case) is replaced where
        it stands; otherwise the header is appended. Returns self for
        method chaining:

            response.set_header("Content-Type", "text/plain").set_header(...)
        """
        wanted = name.lower()
        for index, (key, _) in enumerate(self.headers):
            if key.lower() == wanted:
                self.headers[index] = (name, value)
                return self
        self.headers.append((name, value))
        return self


    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the response body. Strings are encoded back to raw bytes."""
        self.body = _to_bytes(body)
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\\r\\n            ← Status line
            Content-Type: text/plain\\r\\n   ← Headers, in order
            Content-Length: 3\\r\\n          ← Auto-calculated, always last
            \\r\\n                           ← Empty line (separator)
            abc                            ← Body bytes

        =====================================================================
        """
        lines = [self.status_line]

        for name, value in self.headers:
            if name.lower() == "content-length":
                continue
            lines.append(f"{name}: {value}")

        lines.append(f"Content-Length: {len(self.body)}")

        head = CRLF.join(lines) + CRLF + CRLF
        return head.encode(HEAD_ENCODING, HEAD_ERRORS) + self.body


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Every status the server emits on its own has an empty body.
#

def ok(body: Union[str, bytes] = b"", content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    Example:
        return ok()                                  # GET /
        return ok("abc", content_type="text/plain")  # GET /echo/abc
    """
    response = HTTPResponse(status=HTTPStatus.OK)
    if content_type is not None:
        response.set_header("Content-Type", content_type)
    return response.set_body(body)


def created() -> HTTPResponse:
    """Create a 201 Created response with an empty body."""
    return HTTPResponse(status=HTTPStatus.CREATED)


def not_found() -> HTTPResponse:
    """Create a 404 Not Found response with an empty body."""
    return HTTPResponse(status=HTTPStatus.NOT_FOUND)


def internal_error() -> HTTPResponse:
    """Create a 500 Internal Server Error response with an empty body."""
    return HTTPResponse(status=HTTPStatus.INTERNAL_SERVER_ERROR)


def error_response(status_code: int) -> HTTPResponse:
    """Empty-bodied response for an arbitrary error status."""
    return HTTPResponse(status=status_code)
