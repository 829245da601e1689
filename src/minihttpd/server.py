"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer ──accept──► Connection ──start───► own thread         │
    │                                                       │              │
    │            ┌──────────────────────────────────────────┘              │
    │            ▼                                                         │
    │   conn.read_message()        core.framing decides "complete"         │
    │            │                                                         │
    │            ▼                                                         │
    │   RequestParser.parse()      bytes → HTTPRequest                     │
    │            │                                                         │
    │            ▼                                                         │
    │   LoggingMiddleware                                                  │
    │     CompressionMiddleware                                            │
    │       Router → handler       HTTPRequest → HTTPResponse              │
    │            │                                                         │
    │            ▼                                                         │
    │   response.to_bytes() ──► conn.send_response() ──► conn.close()      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

One request per connection. Whatever happens, the connection thread
closes the socket before it returns.

=============================================================================
FAILURE HANDLING
=============================================================================

    ┌──────────────────────────────┬──────────────────────────────────────┐
    │ What went wrong              │ What the client gets                 │
    ├──────────────────────────────┼──────────────────────────────────────┤
    │ Peer closed before complete  │ nothing (socket closed)              │
    │ recv() timed out             │ nothing (socket closed)              │
    │ Request too large            │ 413, empty body                      │
    │ Malformed request line       │ 400, empty body                      │
    │ Handler/middleware raised    │ 500, empty body, traceback logged    │
    │ Socket error while sending   │ nothing more; logged                 │
    └──────────────────────────────┴──────────────────────────────────────┘

No failure in one connection affects another connection or the listener.

=============================================================================
"""

import logging
import threading
from typing import Optional, Callable, Set, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection
from .filestore import FileStore
from .handlers import build_router
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, error_response, internal_error,
)
from .middleware import MiddlewarePipeline, LoggingMiddleware, CompressionMiddleware


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Thread-per-connection HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(directory="/srv/data")
        server = HTTPServer(config)
        server.run()            # blocks until SIGINT/SIGTERM or shutdown()

    In tests, run it in a background thread on an ephemeral port:

        server = HTTPServer(ServerConfig(port=0, directory=str(tmp_path)))
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready()
        host, port = server.address
        ...
        server.shutdown()
        thread.join()

    =========================================================================
    WHY ONE THREAD PER CONNECTION
    =========================================================================

    A connection spends most of its life blocked in recv(), for up to
    `timeout` seconds when the client is idle. Every accepted socket gets
    its own daemon thread, so a client that never finishes its request
    only ever holds its own thread:

        accept ──► Thread(conn 1) ── recv() ... idle ...
        accept ──► Thread(conn 2) ── recv() ... idle ...
        accept ──► Thread(conn 3) ── GET /echo/x ──► 200 ──► close

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Uses defaults if not provided.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        # ─────────────────────────────────────────────────────────────────
        # CORE COMPONENTS
        # ─────────────────────────────────────────────────────────────────
        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()

        # Live connection threads, joined on shutdown
        self._threads: Set[threading.Thread] = set()
        self._threads_lock = threading.Lock()

        # ─────────────────────────────────────────────────────────────────
        # APPLICATION COMPONENTS
        # ─────────────────────────────────────────────────────────────────
        self._store = FileStore(self.config.directory)
        self._router = build_router(self._store)

        self._middleware = MiddlewarePipeline()
        self._middleware.use(LoggingMiddleware(), CompressionMiddleware())

        self._handler: Callable[[HTTPRequest], HTTPResponse] = self._middleware.wrap(self._router.handle)

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening with port=0."""
        return self._socket_server.address

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is bound. Returns False on timeout."""
        return self._socket_server.ready.wait(timeout)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Blocks until shutdown() is called or SIGINT/SIGTERM arrives (the
        latter only when running in the main thread).

        Raises:
            OSError: If the address cannot be bound.
        """
        self._setup_logging()

        logger.info(f"Serving files from {self._store.base_dir}")
        for route in self._router.routes:
            logger.debug(f"Route: {route.method or '*'} {route.path}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask the accept loop to stop. run() returns once in-flight work ends."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("minihttpd").setLevel(level)

    def _shutdown(self):
        """
        Graceful shutdown.

        1. The accept loop has already stopped
        2. Wait for in-flight connections to finish

        Each connection thread is bounded by the read timeout plus the
        close drain, so the join cannot hang for longer than that.
        """
        logger.info("Shutting down server...")

        with self._threads_lock:
            pending = list(self._threads)

        if pending:
            logger.info(f"Waiting for {len(pending)} connection(s) to finish")
        for thread in pending:
            thread.join()

        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Start a thread for a new connection (called by SocketServer)."""
        thread = threading.Thread(
            target=self._run_connection,
            args=(conn,),
            name=f"minihttpd-conn-{conn.id}",
            daemon=True,
        )

        with self._threads_lock:
            self._threads.add(thread)

        try:
            thread.start()
        except RuntimeError as e:
            # Interpreter shutting down or out of threads
            logger.warning(f"[{conn.id}] Rejecting connection: {e}")
            with self._threads_lock:
                self._threads.discard(thread)
            conn.close()

    def _run_connection(self, conn: Connection):
        try:
            self._process_connection(conn)
        finally:
            with self._threads_lock:
                self._threads.discard(threading.current_thread())

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on a connection (runs in its own thread).

        Never raises: every failure is logged here so one bad connection
        cannot affect any other.
        """
        with conn:
            try:
                # ─────────────────────────────────────────────────────────
                # READ MESSAGE
                # ─────────────────────────────────────────────────────────
                try:
                    message = conn.read_message()
                except HTTPParseError as e:
                    # RequestTooLarge
                    logger.warning(f"[{conn.id}] {e}")
                    self._send_error(conn, e.status_code)
                    return
                except TimeoutError:
                    logger.warning(f"[{conn.id}] Timed out waiting for request from {conn.client_ip}")
                    return

                if message is None:
                    logger.debug(f"[{conn.id}] Peer closed before sending a complete request")
                    return

                # ─────────────────────────────────────────────────────────
                # DECODE
                # ─────────────────────────────────────────────────────────
                try:
                    request = self._parser.parse(message, conn.address)
                except HTTPParseError as e:
                    logger.warning(f"[{conn.id}] Malformed request from {conn.client_ip}: {e}")
                    self._send_error(conn, e.status_code)
                    return

                # ─────────────────────────────────────────────────────────
                # PROCESS (Middleware + Router)
                # ─────────────────────────────────────────────────────────
                conn.mark_dispatched()
                try:
                    response = self._handler(request)
                except Exception as e:
                    logger.exception(f"[{conn.id}] Handler error: {e}")
                    response = internal_error()

                # ─────────────────────────────────────────────────────────
                # SEND RESPONSE
                # ─────────────────────────────────────────────────────────
                conn.send_response(response.to_bytes())

            except OSError as e:
                logger.warning(f"[{conn.id}] Socket error: {e}")
            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")

    def _send_error(self, conn: Connection, status_code: int):
        """Send an empty-bodied error response for failures before routing."""
        conn.send_response(error_response(status_code).to_bytes())


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Component wiring: config, sockets, connection threads, routes, middleware
# 2. Request flow: Accept → Read → Decode → Middleware → Route → Respond
# 3. Failure isolation: every connection is closed, nothing escapes a connection thread
# 4. Lifecycle: startup, signal-driven or programmatic shutdown
#
# =============================================================================
