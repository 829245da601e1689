"""
=============================================================================
MINIHTTPD - Minimal HTTP/1.1 Server on Raw Sockets
=============================================================================

A small HTTP/1.1 server that works directly on TCP sockets. No http.server,
no framework: it finds message boundaries in the byte stream itself,
decodes requests, routes them through a fixed table and writes responses
back, gzip-compressed when the client asks for it.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    MINIHTTPD ARCHITECTURE                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. RAW SOCKET PROGRAMMING                                         │
    │      - Listening socket and accept loop                             │
    │      - One daemon thread per connection                             │
    │                                                                      │
    │   2. MESSAGE FRAMING                                                │
    │      - "\\r\\n\\r\\n" ends the head                                     │
    │      - Content-Length bytes of body follow                          │
    │      - Correct however the bytes are split across recv() calls      │
    │                                                                      │
    │   3. HTTP/1.1 PROTOCOL                                              │
    │      - Request decoding (method, path, headers, body)               │
    │      - Response encoding (status line, ordered headers, body)       │
    │                                                                      │
    │   4. ROUTES                                                         │
    │      - GET /, /echo/<text>, /user-agent                             │
    │      - GET/POST /files/<name> under a base directory                │
    │                                                                      │
    │   5. MIDDLEWARE                                                     │
    │      - Access logging, gzip content negotiation                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttpd)
    ├── server.py            # HTTPServer: wires everything together
    ├── config.py            # ServerConfig dataclass
    ├── filestore.py         # Files under the base directory
    ├── core/                # Sockets and bytes
    │   ├── socket_server.py # Listening socket, accept loop
    │   ├── connection.py    # One client socket
    │   └── framing.py       # "Is the message complete yet?"
    ├── http/                # HTTP protocol
    │   ├── headers.py       # Header-line tokenizer
    │   ├── request.py       # Request decoding
    │   ├── response.py      # Response encoding
    │   ├── router.py        # Route table
    │   └── status_codes.py  # Status codes and reason phrases
    ├── middleware/
    │   ├── base.py          # Middleware ABC and pipeline
    │   ├── logging.py       # Access log
    │   └── compression.py   # gzip
    └── handlers/
        └── routes.py        # Route handlers and the route table

=============================================================================
QUICK START
=============================================================================

    from minihttpd import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(directory="/tmp/data"))
    server.run()

    $ curl -v http://127.0.0.1:4221/echo/hello
    $ curl -v --data-binary @notes.txt http://127.0.0.1:4221/files/notes.txt

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
