"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop. Everything HTTP happens in
the connection handler the file server passes to start().

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. getaddrinfo()   Resolve (None, port) with AI_PASSIVE
                       └─ None + AI_PASSIVE = the wildcard address

    2. socket()        For each candidate until one works...
       setsockopt()    ...SO_REUSEADDR so a restart doesn't hit TIME_WAIT
       bind()          ...first successful bind wins

    3. listen(1)       Only one connection is ever in flight, so the
                       queue is kept at one

    4. accept()        BLOCKS until a client connects or a signal arrives
       handler(conn)   Fully handled and closed before the next accept()

    5. close()         Release the listening socket on the way out

=============================================================================
"""

import logging
import socket
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from ..errors import BindError, ShutdownRequested, TransportError
from .connection import Connection
from .shutdown import ShutdownController


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Sequential TCP server: one connection at a time, until shutdown.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(handler)                                                    │
    │        │                                                             │
    │        ├──► _bind()             resolve + socket + bind per candidate│
    │        ├──► listen(backlog)                                          │
    │        ├──► controller.install() SIGINT / SIGTERM                   │
    │        │                                                             │
    │        └──► _accept_loop()                                           │
    │                 │                                                    │
    │                 └──► while controller.running:                       │
    │                         accept()       (waiting = True)              │
    │                         handler(conn)  (waiting = False)             │
    │                                                                      │
    │    _cleanup()                                                        │
    │        └──► restore signal handlers                                  │
    │        └──► close listening socket                                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig, controller: Optional[ShutdownController] = None):
        self.config = config
        self.controller = controller or ShutdownController()

        self._socket: Optional[socket.socket] = None
        self._address: Optional[Tuple[str, int]] = None
        self.connections_handled = 0

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """The bound (ip, port), available once start() has bound."""
        return self._address

    @property
    def is_running(self) -> bool:
        return self._socket is not None and self.controller.running

    def _bind(self) -> socket.socket:
        """
        Create and bind the listening socket.

        Raises:
            BindError: If resolution fails or no candidate binds.
        """
        try:
            candidates = socket.getaddrinfo(
                self.config.host,
                self.config.port,
                socket.AF_INET,
                socket.SOCK_STREAM,
                0,
                socket.AI_PASSIVE,
            )
        except socket.gaierror as e:
            raise BindError(f"getaddrinfo() failed for port {self.config.port}: {e}") from e

        last_error: Optional[OSError] = None

        for family, socktype, proto, _, sockaddr in candidates:
            try:
                sock = socket.socket(family, socktype, proto)
            except OSError as e:
                last_error = e
                continue

            try:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                sock.bind(sockaddr)
            except OSError as e:
                last_error = e
                sock.close()
                continue

            return sock

        raise BindError(f"socket() or bind() failed on port {self.config.port}: {last_error}")

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and serve until shutdown.

        This method BLOCKS. It returns normally once the Shutdown
        Controller stops the loop.

        Raises:
            BindError: If the socket cannot be bound or listened on.
            TransportError: If accept() fails, or the handler reports a
                            socket failure. The listening socket is
                            closed first.
        """
        self._socket = self._bind()

        try:
            self._socket.listen(self.config.backlog)
        except OSError as e:
            self._cleanup()
            raise BindError(f"listen() failed: {e}") from e

        self._socket.settimeout(self.config.accept_timeout)
        self._address = self._socket.getsockname()[:2]

        self.controller.install()
        logger.info(f"Listening on {self._address[0]}:{self._address[1]}")

        try:
            self._accept_loop(connection_handler)
        except ShutdownRequested:
            logger.info("Shutdown requested while waiting for a connection")
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self.controller.running:
            client_socket = None
            try:
                with self.controller.accepting():
                    client_socket, client_address = self._socket.accept()
            except ShutdownRequested:
                # Signal landed after accept() returned: the peer is not served
                if client_socket is not None:
                    client_socket.close()
                raise
            except socket.timeout:
                # Only with accept_timeout set: wake up to re-check running
                continue
            except OSError as e:
                if not self.controller.running:
                    break
                raise TransportError(f"accept() failed: {e}") from e

            conn = Connection(
                socket=client_socket,
                address=client_address[:2],
                buffer_size=self.config.buffer_size,
                max_message_size=self.config.max_request_size,
            )
            logger.debug(f"[{conn.id}] Accepted connection from {conn.peer}")

            with conn:
                connection_handler(conn)
            self.connections_handled += 1

    def _cleanup(self):
        self.controller.restore()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        logger.info("Listening socket closed")
