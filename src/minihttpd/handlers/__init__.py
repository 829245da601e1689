"""
=============================================================================
REQUEST HANDLERS
=============================================================================

A handler is any callable that takes an HTTPRequest and returns an
HTTPResponse:

    def my_handler(request: HTTPRequest) -> HTTPResponse:
        return ok("hello", content_type="text/plain")

The server's handlers and its fixed route table live in routes.py.

=============================================================================
"""

from .routes import FileHandler, build_router, echo, index, user_agent

__all__ = [
    "FileHandler",
    "build_router",
    "echo",
    "index",
    "user_agent",
]
