"""
=============================================================================
ROUTE HANDLERS
=============================================================================

The fixed route table, in match order:

    ┌────────┬────────────────┬──────────────────────────────────────────────┐
    │ Method │ Pattern        │ Response                                     │
    ├────────┼────────────────┼──────────────────────────────────────────────┤
    │ GET    │ /              │ 200, empty body                              │
    │ GET    │ /echo/*value   │ 200, text/plain, body = value verbatim       │
    │ GET    │ /user-agent    │ 200, text/plain, body = User-Agent or ""     │
    │ GET    │ /files/*name   │ 200, application/octet-stream, file bytes    │
    │ POST   │ /files/*name   │ 201, empty body (request body written)       │
    │ *      │ anything else  │ 404, empty body                              │
    └────────┴────────────────┴──────────────────────────────────────────────┘

Examples:

    GET /echo/abc                 → "abc"
    GET /echo/a/b%20c             → "a/b%20c"    (no decoding)
    GET /echo/                    → ""           (empty suffix still matches)
    GET /echo                     → 404
    GET /user-agent  (no header)  → 200, ""

=============================================================================
"""

import logging

from ..filestore import FileStore
from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse,
    ok, created, not_found, internal_error,
)
from ..http.router import Router


logger = logging.getLogger(__name__)


TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"


def index(request: HTTPRequest) -> HTTPResponse:
    """GET / → empty 200."""
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """GET /echo/<value> → the value, byte for byte."""
    return ok(request.path_params.get("value", ""), content_type=TEXT_PLAIN)


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """GET /user-agent → the client's User-Agent header, or an empty body."""
    return ok(request.user_agent, content_type=TEXT_PLAIN)


class FileHandler:
    """
    GET and POST /files/<name>, backed by a FileStore.

    =========================================================================
    ERROR MAPPING
    =========================================================================

        read:   FileNotFoundError → 404
                other OSError     → 500

        write:  any OSError       → 500

    Traversal attempts surface as PermissionError and get 500, the same as
    any other refusal from the filesystem.

    =========================================================================
    """

    def __init__(self, store: FileStore):
        self.store = store

    def read(self, request: HTTPRequest) -> HTTPResponse:
        name = request.path_params.get("name", "")

        try:
            data = self.store.read(name)
        except FileNotFoundError:
            logger.debug(f"File not found: {name!r}")
            return not_found()
        except OSError as e:
            logger.error(f"Failed to read {name!r}: {e}")
            return internal_error()

        return ok(data, content_type=OCTET_STREAM)

    def write(self, request: HTTPRequest) -> HTTPResponse:
        name = request.path_params.get("name", "")

        try:
            self.store.write(name, request.body)
        except OSError as e:
            logger.error(f"Failed to write {name!r}: {e}")
            return internal_error()

        logger.debug(f"Wrote {len(request.body)} bytes to {name!r}")
        return created()


def build_router(store: FileStore) -> Router:
    """
    Build the route table.

    Order matters: first-registered, first-matched. The table is built
    once at startup and only read afterwards.
    """
    files = FileHandler(store)
    router = Router()

    router.add_route("/", index, method="GET")
    router.add_route("/echo/*value", echo, method="GET")
    router.add_route("/user-agent", user_agent, method="GET")
    router.add_route("/files/*name", files.read, method="GET")
    router.add_route("/files/*name", files.write, method="POST")

    return router
