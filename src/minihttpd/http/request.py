"""
=============================================================================
HTTP REQUEST DECODER
=============================================================================

Turns one complete message (as cut out by core.framing) into an
HTTPRequest. By the time bytes get here the framing layer has already
decided the message is whole, so the decoder never has to wait for data.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n                          │ │
    │  │    ─┬── ───────┬──────── ────┬───                              │ │
    │  │     │          │             │                                  │ │
    │  │   Method      Path        Version                               │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Host: localhost:4221\r\n                                    │ │
    │  │    User-Agent: curl/8.4.0\r\n                                  │ │
    │  │    Content-Length: 5\r\n                                       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    hello                                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHAT THE DECODER CHECKS (AND WHAT IT DOESN'T)
=============================================================================

    Checked:
        - request line has method, path and version tokens
        - path starts with "/"

    Not checked:
        - method is a known verb     ("BREW" passes, the router 404s it)
        - version value              ("HTTP/9.9" passes)
        - header syntax              (bad lines are skipped, see headers.py)

    Not transformed:
        - path is NOT URL-decoded    (/echo/a%20b echoes "a%20b")
        - path is NOT normalized     (/echo/a//b/ echoes "a//b/")
        - no query-string splitting  (/echo/x?y=1 echoes "x?y=1")

A request line that fails the checks raises MalformedRequest, which the
connection loop turns into "400 Bad Request".

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from .headers import (
    HEADER_TERMINATOR,
    content_length,
    parse_header_lines,
    split_head,
)


class HTTPParseError(Exception):
    """
    Raised when HTTP request decoding fails.

    Carries the HTTP status code that should be returned to the client,
    so the connection loop never has to guess:

        400 Bad Request       - Malformed request line
        413 Payload Too Large - Request exceeds the buffer limit
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code  # HTTP status to return


class MalformedRequest(HTTPParseError):
    """Request line is missing a token or has a path without a leading "/"."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


@dataclass
class HTTPRequest:
    """
    Represents a decoded HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         Request method exactly as sent. Unknown verbs are
                        kept as opaque strings.

        path:           Request target exactly as sent. Always starts with
                        "/". Not URL-decoded, not normalized.

        version:        Protocol token from the request line.

        headers:        Lower-cased header name → raw value.
                        Repeated headers: the last one wins.

        body:           Exactly Content-Length bytes, or b"" when no valid
                        length was declared.

        path_params:    Filled in by the router.
                        Route "/echo/*value" with "/echo/abc" → {"value": "abc"}

        client_address: (ip, port) of the peer, for logging.

    =========================================================================
    """

    # Request line
    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    # Router-injected parameters
    path_params: Dict[str, str] = field(default_factory=dict)

    client_address: tuple[str, int] = ("", 0)

    @property
    def user_agent(self) -> str:
        """User-Agent header value, or "" when the client sent none."""
        return self.headers.get("user-agent", "")

    @property
    def accept_encoding(self) -> Optional[str]:
        """Raw Accept-Encoding header value, if present."""
        return self.headers.get("accept-encoding")


class RequestParser:
    """
    Decodes complete HTTP messages into HTTPRequest objects.

    Stateless: one instance is shared by every connection thread.

    Usage:
        parser = RequestParser()
        request = parser.parse(message, client_address=("127.0.0.1", 51234))
    """

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Decode one complete HTTP message.

        =====================================================================
        DECODING STEPS
        =====================================================================

        1. Split head and body at the first \\r\\n\\r\\n
        2. Decode the head (UTF-8, surrogateescape) and split into lines
        3. Parse the request line (first line)
        4. Tokenize the remaining lines as headers
        5. Cut the body down to Content-Length

        =====================================================================

        Args:
            data: A complete message, as produced by core.framing.
            client_address: Client's (ip, port) tuple for logging.

        Returns:
            Decoded HTTPRequest.

        Raises:
            MalformedRequest: If the request line is unusable.
        """
        # ─── Step 1: head / body split ───────────────────────────────────
        header_end = data.find(HEADER_TERMINATOR)
        if header_end == -1:
            # Framing normally guarantees a terminator. Treat a bare request
            # line as a head with no body.
            head, body = data, b""
        else:
            head, body = data[:header_end], data[header_end + len(HEADER_TERMINATOR):]

        # ─── Steps 2-4: request line and headers ─────────────────────────
        lines = split_head(head)
        method, path, version = self._parse_request_line(lines[0])
        headers = parse_header_lines(lines[1:])

        # ─── Step 5: body ────────────────────────────────────────────────
        declared = content_length(headers)
        body = body[:declared] if declared is not None else b""

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split the request line into (method, path, version).

            "GET /echo/abc HTTP/1.1"
             ─┬─ ────┬──── ───┬────
              │      │        │
            Method  Path   Version

        Tokens are separated by single spaces, so "GET  / HTTP/1.1" has an
        empty path token and is rejected.

        Raises:
            MalformedRequest: Fewer than three tokens, an empty token, or a
                path that does not start with "/".
        """
        tokens = line.split(" ")
        if len(tokens) < 3:
            raise MalformedRequest(f"Invalid request line: {line!r}")

        method, path, version = tokens[0], tokens[1], tokens[2]
        if not method or not path or not version:
            raise MalformedRequest(f"Invalid request line: {line!r}")

        if not path.startswith("/"):
            raise MalformedRequest(f"Invalid request path: {path!r}")

        return method, path, version
