"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with the read/write/close operations the
server needs. Every connection carries exactly one request:

    accept → read one message → respond → close

There is no keep-alive. Once a response is written the socket is shut down,
and any bytes that arrived after the first message are discarded.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

    Client sends:
        send(b"POST /files/a HTTP/1.1\\r\\nContent-Length: 10\\r\\n\\r\\nhello")
        send(b" worl")
        send(b"d")

    Server might see:
        recv() → b"POST /files/a HTTP/1.1\\r\\nCon"
        recv() → b"tent-Length: 10\\r\\n\\r\\nhello wo"
        recv() → b"rld"

read_message() keeps calling recv() and feeding a MessageAccumulator until
core.framing says a whole message is present. What counts as "whole" is
decided there, not here.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    WAITING_FOR_DATA ──────► COMPLETE ──────► DISPATCHED ──────► CLOSED
           │                                                       ▲
           │   peer closed / timeout / too large / socket error    │
           └───────────────────────────────────────────────────────┘

    WAITING_FOR_DATA  bytes are being accumulated
    COMPLETE          a full message has been cut out of the buffer
    DISPATCHED        the message was handed to the request pipeline
    CLOSED            socket released; nothing more happens

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from .framing import MessageAccumulator
from ..http.request import HTTPParseError


logger = logging.getLogger(__name__)


# Upper bounds on reading leftover client bytes in close()
DRAIN_TIMEOUT = 1.0         # seconds, in total
DRAIN_LIMIT = 64 * 1024     # bytes


class ConnectionState(Enum):
    """Connection lifecycle states."""
    WAITING_FOR_DATA = "waiting_for_data"
    COMPLETE = "complete"
    DISPATCHED = "dispatched"
    CLOSED = "closed"


class RequestTooLarge(HTTPParseError):
    """The buffered request grew past max_request_size (413)."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            f"Request too large: {size} bytes (limit {limit})",
            status_code=413,
        )
        self.size = size
        self.limit = limit


@dataclass
class Connection:
    """
    Represents a client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. BUFFERED READING                                                 │
    │     └── Accumulate recv() chunks until one message is complete       │
    │                                                                      │
    │  2. LIMITS                                                           │
    │     └── Each recv() is bounded by `timeout`                          │
    │     └── The buffer is bounded by `max_request_size`                  │
    │                                                                      │
    │  3. STATE TRACKING                                                   │
    │     └── WAITING_FOR_DATA → COMPLETE → DISPATCHED → CLOSED            │
    │                                                                      │
    │  4. GRACEFUL CLOSE                                                   │
    │     └── shutdown(SHUT_WR), drain, close                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.WAITING_FOR_DATA
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 4096
    timeout: float = 30.0
    max_request_size: int = 10 * 1024 * 1024

    _accumulator: MessageAccumulator = field(default_factory=MessageAccumulator, repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_message(self) -> Optional[bytes]:
        """
        Read one complete HTTP message from the socket.

        ┌─────────────────────────────────────────────────────────────────┐
        │                    read_message() Flow                           │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   ┌──────────────────────┐                                      │
        │   │ recv() → chunk       │ ◄──────────────────┐                 │
        │   └──────────┬───────────┘                    │                 │
        │              │ empty? → peer closed → None    │                 │
        │   ┌──────────▼───────────┐                    │                 │
        │   │ accumulator.feed()   │                    │                 │
        │   └──────────┬───────────┘                    │                 │
        │              │ too big? → RequestTooLarge     │                 │
        │   ┌──────────▼───────────┐   incomplete       │                 │
        │   │ frame.complete?      │ ───────────────────┘                 │
        │   └──────────┬───────────┘                                      │
        │              │ yes                                              │
        │   ┌──────────▼───────────┐                                      │
        │   │ return frame.message │                                      │
        │   └──────────────────────┘                                      │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘

        Returns:
            Complete message bytes, or None if the peer went away first.

        Raises:
            TimeoutError: If a single recv() waits longer than `timeout`.
            RequestTooLarge: If the message exceeds max_request_size.
        """
        self.state = ConnectionState.WAITING_FOR_DATA

        try:
            while True:
                chunk = self._recv()
                if not chunk:
                    # Peer closed before a full message arrived
                    self._accumulator.clear()
                    return None

                frame = self._accumulator.feed(chunk)

                if frame.complete:
                    if len(frame.message) > self.max_request_size:
                        raise RequestTooLarge(len(frame.message), self.max_request_size)
                    if frame.leftover:
                        logger.debug(
                            f"[{self.id}] Discarding {len(frame.leftover)} bytes "
                            f"after the first message"
                        )
                    self.state = ConnectionState.COMPLETE
                    return frame.message

                if len(self._accumulator) > self.max_request_size:
                    raise RequestTooLarge(len(self._accumulator), self.max_request_size)

        except socket.timeout:
            raise TimeoutError("Request read timeout")

    def _recv(self) -> bytes:
        """
        Receive data from socket.

        Returns:
            Received bytes, or empty bytes if the connection was closed
            or reset by the peer.
        """
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError) as e:
            logger.warning(f"[{self.id}] Receive failed: {e}")
            return b""

    def mark_dispatched(self):
        """Record that the message was handed to the request pipeline."""
        self.state = ConnectionState.DISPATCHED

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response data to the client.

        Uses sendall() so the whole response goes out, however many
        send() calls that takes.

        Returns:
            True if send succeeded, False if connection lost.
        """
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): tell the client we're done sending (FIN)
        2. Drain whatever the client still sends, at most DRAIN_LIMIT
           bytes within DRAIN_TIMEOUT seconds
        3. close(): release the file descriptor

        Without step 2, unread bytes make the kernel answer with RST,
        which can destroy the response before the client has read it.

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection from {self.client_ip} closed after {self.age:.3f}s")

    def _drain(self):
        """Discard incoming bytes until EOF, the byte limit, or the deadline."""
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # socket.timeout is an OSError too

        if drained:
            logger.debug(f"[{self.id}] Drained {drained} bytes before closing")

    def __enter__(self):
        """
        Context manager entry:

            with Connection(sock, addr) as conn:
                data = conn.read_message()
                conn.send_response(response)
            # Connection automatically closed
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
