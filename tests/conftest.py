"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Dict, Generator, Iterable, Tuple
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttpd import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"hello world"
    return (
        b"POST /files/notes.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
        + body
    )


@pytest.fixture
def config(tmp_path: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        directory=str(tmp_path),
        timeout=5.0,
        log_level="WARNING",
    )


# =============================================================================
# RAW SOCKET CLIENT
# =============================================================================

class RawResponse:
    """A response as read off the wire, split into its parts."""

    def __init__(self, raw: bytes):
        self.raw = raw
        head, sep, self.body = raw.partition(b"\r\n\r\n")
        assert sep, f"no header terminator in {raw!r}"

        lines = head.decode("latin-1").split("\r\n")
        self.status_line = lines[0]
        version, code, reason = self.status_line.split(" ", 2)
        self.version = version
        self.status = int(code)
        self.reason = reason

        self.header_list = [tuple(line.split(": ", 1)) for line in lines[1:]]
        self.headers: Dict[str, str] = {k.lower(): v for k, v in self.header_list}

    @property
    def header_names(self):
        return [name for name, _ in self.header_list]


def send_raw(
    address: Tuple[str, int],
    chunks: Iterable[bytes],
    delay: float = 0.0,
    timeout: float = 5.0,
) -> bytes:
    """
    Send request bytes in one or more writes and read until the server
    closes the connection.
    """
    with socket.create_connection(address, timeout=timeout) as sock:
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        for chunk in chunks:
            sock.sendall(chunk)
            if delay:
                threading.Event().wait(delay)

        received = b""
        while True:
            data = sock.recv(65536)
            if not data:
                break
            received += data
        return received


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self) -> Tuple[str, int]:
        return self.server.address

    @property
    def directory(self) -> Path:
        return Path(self.server.config.directory)

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(self, data: bytes, **kwargs) -> RawResponse:
        """Send a whole request in one write."""
        return RawResponse(send_raw(self.address, [data], **kwargs))

    def request_chunks(self, chunks: Iterable[bytes], **kwargs) -> RawResponse:
        """Send a request split across several writes."""
        return RawResponse(send_raw(self.address, chunks, **kwargs))


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server on an ephemeral port, serving files from tmp_path."""
    test_srv = TestServer(HTTPServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
