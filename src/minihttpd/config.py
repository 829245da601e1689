"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the HTTP server.

Configuration should be:
1. Centralized - One place to see all options
2. Typed - IDE autocomplete and error detection
3. Validated - Catch errors at startup, not on the first request

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    WHERE VALUES COME FROM                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   --directory PATH     →  ServerConfig.directory   (command line)   │
    │   everything else      →  dataclass defaults        (code)          │
    │                                                                      │
    │   No environment variables are read.                                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A ServerConfig is built once at startup and never mutated afterwards;
every connection thread reads the same instance.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass, field


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    HTTP SETTINGS
    - max_request_size

    FILES
    - directory

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """The IP address to bind to. Localhost only by default."""

    port: int = 4221
    """
    The port number to listen on.
    0 asks the OS for a free ephemeral port (used by the test suite).
    """

    backlog: int = 128
    """
    Maximum number of queued connections.
    When the accept queue is full, new connections are refused.
    """

    buffer_size: int = 4096
    """Bytes requested per recv() call."""

    timeout: float = 30.0
    """
    Seconds a single recv() may wait before the connection is dropped.
    A client that stalls mid-request gets no response, just a close.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 10 * 1024 * 1024  # 10 MB
    """
    Maximum size of one buffered request (head + body) in bytes.
    Anything larger is answered with 413 Payload Too Large.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: str = field(default_factory=os.getcwd)
    """
    Base directory for GET/POST /files/<name>.
    Defaults to the current working directory at construction time.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    DEBUG also logs connection open/close and each User-Agent.
    """

    def validate(self) -> None:
        """
        Validate configuration values.

        =====================================================================
        FAIL-FAST PRINCIPLE
        =====================================================================

        Bad values are rejected at startup, before the socket is bound,
        not when the first request happens to need them.

        =====================================================================

        Raises:
            ValueError: Describing the first invalid setting found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.timeout is None or self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < 1:
            raise ValueError("max_request_size must be >= 1")


        if not os.path.isdir(self.directory):
            raise ValueError(f"directory does not exist: {self.directory}")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Type-safe configuration with a dataclass
# 2. Validation at startup (fail-fast)
# 3. Defaults that match the command-line contract (port 4221, cwd)
#
# =============================================================================
