"""
Unit tests for Connection, driven over a local socket pair.
"""

import logging
import socket
import threading
import time

import pytest

from minihttpd.core import connection as connection_module
from minihttpd.core.connection import Connection, ConnectionState, RequestTooLarge
from minihttpd.http.request import HTTPParseError


@pytest.fixture
def sockets():
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    for sock in (server_side, client_side):
        try:
            sock.close()
        except OSError:
            pass


def make_connection(sock, **kwargs) -> Connection:
    kwargs.setdefault("timeout", 2.0)
    return Connection(socket=sock, address=("127.0.0.1", 50000), **kwargs)


class TestReadMessage:
    """Tests for Connection.read_message."""

    def test_reads_request_without_body(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side)

        client_side.sendall(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n")

        assert conn.read_message() == b"GET / HTTP/1.1\r\nHost: x\r\n\r\n"
        assert conn.state == ConnectionState.COMPLETE

    def test_reads_across_small_recvs(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side, buffer_size=3)
        message = b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\n0123456789"

        client_side.sendall(message)

        assert conn.read_message() == message

    def test_waits_for_declared_body(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side)
        head = b"POST /files/a HTTP/1.1\r\nContent-Length: 4\r\n\r\n"

        client_side.sendall(head + b"ab")
        client_side.sendall(b"cd")

        assert conn.read_message() == head + b"abcd"

    def test_bytes_after_message_are_dropped(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side)

        client_side.sendall(b"GET / HTTP/1.1\r\n\r\nGET /again HTTP/1.1\r\n\r\n")

        assert conn.read_message() == b"GET / HTTP/1.1\r\n\r\n"

    def test_peer_close_before_message_returns_none(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side)

        client_side.sendall(b"GET / HTTP/1.1\r\n")
        client_side.shutdown(socket.SHUT_WR)

        assert conn.read_message() is None

    def test_peer_close_with_nothing_sent(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side)

        client_side.close()

        assert conn.read_message() is None

    def test_timeout(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side, timeout=0.1)

        client_side.sendall(b"GET / HTTP/1.1\r\n")

        with pytest.raises(TimeoutError):
            conn.read_message()

    def test_oversized_head(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side, max_request_size=64, buffer_size=16)

        client_side.sendall(b"GET /" + b"a" * 200)

        with pytest.raises(RequestTooLarge) as exc_info:
            conn.read_message()
        assert exc_info.value.status_code == 413

    def test_oversized_complete_message(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side, max_request_size=32)

        client_side.sendall(b"POST /files/a HTTP/1.1\r\nContent-Length: 40\r\n\r\n" + b"x" * 40)

        with pytest.raises(RequestTooLarge):
            conn.read_message()

    def test_request_too_large_is_parse_error(self):
        error = RequestTooLarge(100, 10)
        assert isinstance(error, HTTPParseError)
        assert (error.size, error.limit) == (100, 10)


class TestLifecycle:
    """Tests for sending and closing."""

    def test_initial_state(self, sockets):
        conn = make_connection(sockets[0])
        assert conn.state == ConnectionState.WAITING_FOR_DATA
        assert conn.client_ip == "127.0.0.1"
        assert len(conn.id) == 8

    def test_mark_dispatched(self, sockets):
        conn = make_connection(sockets[0])
        conn.mark_dispatched()
        assert conn.state == ConnectionState.DISPATCHED

    def test_send_then_close_delivers_eof(self, sockets):
        server_side, client_side = sockets
        client_side.settimeout(2.0)
        conn = make_connection(server_side)

        assert conn.send_response(b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n")
        client_side.shutdown(socket.SHUT_WR)
        conn.close()

        received = b""
        while True:
            chunk = client_side.recv(1024)
            if not chunk:
                break
            received += chunk

        assert received == b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n"
        assert conn.state == ConnectionState.CLOSED

    def test_close_is_idempotent(self, sockets):
        server_side, client_side = sockets
        client_side.close()
        conn = make_connection(server_side)

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_send_after_close_fails(self, sockets):
        server_side, client_side = sockets
        client_side.close()
        conn = make_connection(server_side)
        conn.close()

        assert conn.send_response(b"data") is False

    def test_context_manager_closes(self, sockets):
        server_side, client_side = sockets
        client_side.close()

        with make_connection(server_side) as conn:
            pass

        assert conn.state == ConnectionState.CLOSED


class TestBoundedDrain:
    """close() gives up on a client that keeps sending."""

    def test_dribbling_peer_does_not_hold_close(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side)
        stop = threading.Event()

        def dribble():
            while not stop.is_set():
                try:
                    client_side.send(b"x")
                except OSError:
                    return
                stop.wait(0.2)

        sender = threading.Thread(target=dribble, daemon=True)
        sender.start()
        try:
            started = time.monotonic()
            conn.close()
            elapsed = time.monotonic() - started
        finally:
            stop.set()
            sender.join(timeout=2.0)

        assert conn.state == ConnectionState.CLOSED
        assert elapsed < connection_module.DRAIN_TIMEOUT + 1.0

    def test_drain_stops_at_byte_limit(self, sockets, monkeypatch):
        server_side, client_side = sockets
        monkeypatch.setattr(connection_module, "DRAIN_LIMIT", 1024)
        monkeypatch.setattr(connection_module, "DRAIN_TIMEOUT", 30.0)
        conn = make_connection(server_side)

        # Never closed by the client, so only the byte limit ends the drain
        client_side.sendall(b"x" * 8192)

        started = time.monotonic()
        conn.close()

        assert time.monotonic() - started < 5.0
        assert conn.state == ConnectionState.CLOSED


class ResettingSocket:
    """Stand-in socket whose peer has already reset the connection."""

    def setblocking(self, flag):
        pass

    def settimeout(self, value):
        pass

    def recv(self, size):
        raise ConnectionResetError(104, "Connection reset by peer")


class TestReceiveErrors:
    def test_reset_is_logged_as_warning(self, caplog):
        caplog.set_level(logging.DEBUG, logger="minihttpd.core.connection")
        conn = make_connection(ResettingSocket())

        assert conn.read_message() is None

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "Connection reset by peer" in warnings[0].getMessage()
