"""
=============================================================================
MESSAGE FRAMING
=============================================================================

TCP hands us a byte stream, not messages. A single request can show up as
one recv() or as twenty, split anywhere, including inside the "\\r\\n\\r\\n"
delimiter or halfway through the body:

    recv() → b"POST /files/a HTTP/1.1\\r\\nContent-Le"
    recv() → b"ngth: 10\\r\\n\\r\\nhel"
    recv() → b"lo worl"
    recv() → b"d"

This module answers one question about whatever has arrived so far:
"is there a complete HTTP message in here yet?"

=============================================================================
COMPLETENESS RULES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        find_message(buffer)                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   "\\r\\n\\r\\n" in buffer?                                             │
    │        │                                                             │
    │        ├── no  ──► INCOMPLETE (wait for more bytes, not an error)   │
    │        │                                                             │
    │        └── yes ──► usable Content-Length in the header block?        │
    │                        │                                             │
    │                        ├── no  ──► COMPLETE at the delimiter         │
    │                        │          (bodiless GET, or a malformed      │
    │                        │           length: fail open, never hang)    │
    │                        │                                             │
    │                        └── yes ──► body bytes so far >= length?      │
    │                                        │                             │
    │                                        ├── no  ──► INCOMPLETE        │
    │                                        └── yes ──► COMPLETE          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A complete Frame splits the buffer in two:

    message  = head + "\\r\\n\\r\\n" + exactly Content-Length body bytes
    leftover = everything after that

Only one message is served per connection, so leftover is never parsed.
It is still computed so the message itself is never padded with bytes
that belong to something else.

=============================================================================
"""

from dataclasses import dataclass

from ..http.headers import (
    HEADER_TERMINATOR,
    content_length,
    parse_header_lines,
    split_head,
)


@dataclass(frozen=True)
class Frame:
    """
    Result of checking a buffer for a complete message.

    Attributes:
        complete: True once a whole message is present.
        message: The message bytes (empty while incomplete).
        leftover: Bytes after the message (empty while incomplete).
    """
    complete: bool
    message: bytes = b""
    leftover: bytes = b""


INCOMPLETE = Frame(complete=False)


def find_message(buffer: bytes) -> Frame:
    """
    Decide whether `buffer` holds a complete HTTP message.

    Pure function of the bytes received so far: the answer does not depend
    on how those bytes were chunked on the wire.

    Args:
        buffer: Everything received on the connection so far.

    Returns:
        A Frame. Incomplete frames carry no bytes.
    """
    header_end = buffer.find(HEADER_TERMINATOR)
    if header_end == -1:
        return INCOMPLETE

    body_start = header_end + len(HEADER_TERMINATOR)

    # Skip the request line; only header lines can declare a length
    lines = split_head(buffer[:header_end])
    declared = content_length(parse_header_lines(lines[1:]))

    if declared is None:
        return Frame(True, bytes(buffer[:body_start]), bytes(buffer[body_start:]))

    message_end = body_start + declared
    if len(buffer) < message_end:
        return INCOMPLETE

    return Frame(True, bytes(buffer[:message_end]), bytes(buffer[message_end:]))


class MessageAccumulator:
    """
    Per-connection byte buffer.

    Owns the only mutable state a connection needs while reading:

        acc = MessageAccumulator()
        acc.feed(b"GET / HT")          # Frame(complete=False)
        acc.feed(b"TP/1.1\\r\\n\\r\\n")    # Frame(complete=True, message=...)
    """

    def __init__(self):
        self._buffer = bytearray()

    def feed(self, chunk: bytes) -> Frame:
        """Append freshly received bytes and re-check for a message."""
        self._buffer += chunk
        return find_message(self._buffer)

    def clear(self) -> None:
        """Drop everything buffered (used when a connection is abandoned)."""
        self._buffer.clear()

    def __len__(self) -> int:
        return len(self._buffer)
