"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The socket-level plumbing. Nothing here decides what a response says.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Creates, binds and listens on the TCP socket                     │
    │  • Runs the accept() loop                                           │
    │  • Handles graceful shutdown via signals (SIGTERM, SIGINT)          │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ Hands off new connections
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Wraps a client socket                                            │
    │  • Reads until one message is complete, then closes                 │
    │  • WAITING_FOR_DATA → COMPLETE → DISPATCHED → CLOSED                │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ feeds bytes to
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                           FRAMING                                    │
    │  • Pure function: buffer → complete or not                          │
    │  • Content-Length aware, chunking independent                       │
    └─────────────────────────────────────────────────────────────────────┘

Each connection is served on its own daemon thread, started by
HTTPServer.

=============================================================================
"""

from .framing import Frame, MessageAccumulator, find_message
from .connection import Connection, ConnectionState, RequestTooLarge
from .socket_server import SocketServer

__all__ = [
    "Frame",
    "MessageAccumulator",
    "find_message",
    "Connection",
    "ConnectionState",
    "RequestTooLarge",
    "SocketServer",
]
