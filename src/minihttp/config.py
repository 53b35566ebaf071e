"""
=============================================================================
CLIENT AND SERVER CONFIGURATION
=============================================================================

Centralized configuration for both halves of minihttp.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── minihttp-server -p 3000 ./public                          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── MINIHTTP_PORT=3000 minihttp-server ./public               │
    │                                                                      │
    │   3. Default values (in these dataclasses)                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE 1512-BYTE BUFFER
=============================================================================

Both programs historically used a single 1512-byte receive buffer, so any
message larger than that was silently truncated. Here buffer_size is only
the size of each recv() call. The read loops keep going until the header
terminator arrives (server) or the peer closes (client), and the
max_*_size settings turn runaway messages into a MessageTooLarge error
instead of a silent cut.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

MAX_PORT_LENGTH = 6
MAX_INDEX_LENGTH = 31


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, max_request_size, accept_timeout

    CONTENT
    - doc_root, index_file

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: Optional[str] = None
    """
    Address to bind to. None binds the wildcard address (passive
    getaddrinfo lookup), the usual choice.
    """

    port: int = 8080

    backlog: int = 1
    """
    listen() backlog. Only one connection is ever serviced at a time,
    so the queue is kept at one.
    """

    buffer_size: int = 1512
    """Bytes requested per recv() call."""

    max_request_size: int = 64 * 1024
    """
    Ceiling for the request head. A GET carries no body, so anything
    this big is either broken or hostile and is answered with 413.
    """

    accept_timeout: Optional[float] = None
    """
    None = accept() blocks until a peer arrives or a signal interrupts it.
    A number makes the accept loop wake up periodically to re-check the
    running flag (handy when the server runs off the main thread, where
    signal handlers cannot be installed).
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    doc_root: str = "."
    index_file: str = "index.html"
    """File served for request paths that end in '/'."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    server_name: str = "minihttp/1.0"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        MINIHTTP_PORT       Server port (default: 8080)
        MINIHTTP_INDEX      Index file name (default: index.html)
        MINIHTTP_DOC_ROOT   Document root (default: .)
        MINIHTTP_LOG_LEVEL  Logging level (default: INFO)
        """
        return cls(
            port=int(os.getenv("MINIHTTP_PORT", "8080")),
            index_file=os.getenv("MINIHTTP_INDEX", "index.html"),
            doc_root=os.getenv("MINIHTTP_DOC_ROOT", "."),
            log_level=os.getenv("MINIHTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """Fail fast on values the server cannot run with."""
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if not self.index_file or len(self.index_file) > MAX_INDEX_LENGTH:
            raise ValueError(
                f"index_file must be 1-{MAX_INDEX_LENGTH} characters long"
            )

        if "/" in self.index_file:
            raise ValueError("index_file must be a plain file name")

        if not os.path.isdir(self.doc_root):
            raise ValueError(f"Document root is not a directory: {self.doc_root}")

        if not os.access(self.doc_root, os.R_OK | os.X_OK):
            raise ValueError(f"Document root is not readable: {self.doc_root}")

        if self.accept_timeout is not None and self.accept_timeout <= 0:
            raise ValueError("accept_timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")


@dataclass
class ClientConfig:
    """
    Configuration for a single fetch.

    At most one of output_file / output_dir may be set. With neither,
    the body goes to standard output.
    """

    port: int = 80
    output_file: Optional[str] = None
    output_dir: Optional[str] = None

    buffer_size: int = 1512
    max_response_size: int = 64 * 1024 * 1024  # 64 MB

    timeout: Optional[float] = None
    """Connect/receive timeout in seconds. None = block indefinitely."""

    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Create configuration from environment variables.

        MINIHTTP_CLIENT_TIMEOUT    Socket timeout in seconds (default: none)
        MINIHTTP_LOG_LEVEL         Logging level (default: WARNING)
        """
        timeout = os.getenv("MINIHTTP_CLIENT_TIMEOUT")
        return cls(
            timeout=float(timeout) if timeout else None,
            log_level=os.getenv("MINIHTTP_LOG_LEVEL", "WARNING"),
        )

    def validate(self) -> None:
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.output_file and self.output_dir:
            raise ValueError("output_file and output_dir can't be used together")

        if self.output_dir is not None and not os.path.isdir(self.output_dir):
            raise ValueError(f"Invalid directory: {self.output_dir}")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")


def parse_port(value: str) -> int:
    """
    Parse a port argument.

    Ports arrive as decimal strings of at most six characters and must
    fit in 16 bits.

    Raises:
        ValueError: If the string is not a usable port.
    """
    value = value.strip()
    if not value or len(value) > MAX_PORT_LENGTH or not value.isdigit():
        raise ValueError(f"Invalid port: {value!r}")

    port = int(value)
    if port > 65535:
        raise ValueError(f"Invalid port: {value!r}")
    return port
