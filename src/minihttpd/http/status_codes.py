"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever answers with a handful of status codes, so this module
keeps a deliberately small table instead of the full RFC 7231 registry.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  Code  │ When this server sends it                                 │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  200   │ GET /, /echo/..., /user-agent, file read succeeded        │
    │  201   │ POST /files/... wrote the file                            │
    │  400   │ Request line is missing its method, path or version       │
    │  404   │ No route matched, or the requested file does not exist   │
    │  413   │ Request grew past ServerConfig.max_request_size           │
    │  500   │ File I/O failed, or a handler raised                      │
    └────────┴───────────────────────────────────────────────────────────┘

Anything outside this table still serializes: the status line just carries
an empty reason phrase ("HTTP/1.1 599 \\r\\n").

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Status codes produced by the server.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.CREATED == 201
        True
        >>> HTTPStatus.CREATED.phrase
        'Created'
    """

    OK = 200                        # Request handled
    CREATED = 201                   # File written
    BAD_REQUEST = 400               # Malformed request line
    NOT_FOUND = 404                 # Route miss or missing file
    PAYLOAD_TOO_LARGE = 413         # Buffer limit exceeded
    INTERNAL_SERVER_ERROR = 500     # I/O failure or handler crash

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── phrase
                      └───────── code
        """
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def reason_phrase(code: int) -> str:
    """
    Look up the reason phrase for any integer status code.

    Unknown codes map to an empty phrase rather than raising, so a handler
    returning an unusual code still produces a valid status line.
    """
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""
