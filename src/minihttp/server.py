"""
=============================================================================
FILE SERVER
=============================================================================

Ties the pieces together for each accepted connection:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept ──► read_request() ──► RequestParser.parse()               │
    │                  │                   │                               │
    │                  │                   ├── MalformedRequest ──► 400/501│
    │                  │                   ▼                               │
    │                  │             StaticFileHandler.resolve()           │
    │                  │                   │                               │
    │                  │                   ├── None ──────────────► 404    │
    │                  │                   ▼                               │
    │                  │             StaticFileHandler.read()              │
    │                  │                   │                               │
    │                  │                   ├── FileAccessError ───► 500    │
    │                  │                   ▼                               │
    │                  │             send(header block); send(body) 200    │
    │                  │                                                   │
    │                  └── MessageTooLarge ───────────────────────► 413    │
    │                                                                      │
    │   close ──► back to accept, unless shutdown was requested           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Request-level problems are answered and the server carries on. Socket
failures (SendError, ReceiveError) are fatal: the connection and the
listening socket are closed and the error propagates to the caller.

=============================================================================
"""

import logging
from typing import Optional, Tuple

from .config import ServerConfig
from .core import Connection, ConnectionState, ShutdownController, SocketServer
from .errors import FileAccessError, MalformedRequest, MessageTooLarge
from .handlers import StaticFileHandler
from .http import (
    HTTPResponse,
    HTTPStatus,
    RequestParser,
    error_response,
    not_found,
    ok,
)


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("minihttp.access")


class HTTPServer:
    """
    Serves static files from a document root, one connection at a time.

    Usage:
        server = HTTPServer(ServerConfig(doc_root="./public"))
        server.run()    # Blocks until SIGINT / SIGTERM
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        controller: Optional[ShutdownController] = None,
    ):
        self.config = config or ServerConfig()
        self.config.validate()

        self.controller = controller or ShutdownController()
        self._socket_server = SocketServer(self.config, self.controller)
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._static = StaticFileHandler(
            self.config.doc_root,
            index_file=self.config.index_file,
        )

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """Bound (ip, port) once the server is listening."""
        return self._socket_server.address

    @property
    def connections_handled(self) -> int:
        return self._socket_server.connections_handled

    def run(self):
        """
        Serve until shutdown. Blocks.

        Raises:
            BindError: If the port cannot be bound.
            TransportError: On a fatal socket failure while serving.
        """
        logger.info(
            f"{self.config.server_name} serving {self._static.root_dir} "
            f"(index: {self.config.index_file})"
        )
        self._socket_server.start(self.handle_connection)
        logger.info(f"Server stopped after {self.connections_handled} connections")

    def stop(self):
        """Stop after the current connection (or the next accept timeout)."""
        self.controller.request_shutdown()

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle_connection(self, conn: Connection):
        """
        Answer the single request on conn. The caller closes conn.

        Raises:
            SendError, ReceiveError: Fatal socket failures.
        """
        try:
            raw = conn.read_request()
        except MessageTooLarge as e:
            logger.warning(f"[{conn.id}] {e}")
            self._send(conn, error_response(HTTPStatus.PAYLOAD_TOO_LARGE), "-")
            return

        if not raw:
            logger.debug(f"[{conn.id}] Peer closed without sending a request")
            return

        conn.state = ConnectionState.PROCESSING
        request_line = raw.split(b"\r", 1)[0].split(b"\n", 1)[0]
        request_line = request_line.decode("utf-8", errors="replace")

        try:
            request = self._parser.parse(raw)
        except MalformedRequest as e:
            logger.debug(f"[{conn.id}] {e}")
            self._send(conn, error_response(e.status_code), request_line)
            return

        path = self._static.resolve(request.path)
        if path is None:
            self._send(conn, not_found(), request_line)
            return

        try:
            body = self._static.read(path)
        except FileAccessError as e:
            logger.error(f"[{conn.id}] {e}")
            self._send(conn, error_response(HTTPStatus.INTERNAL_SERVER_ERROR), request_line)
            return

        self._send(conn, ok(body), request_line)

    def _send(self, conn: Connection, response: HTTPResponse, request_line: str):
        """
        Write the header block, then the body if there is one.
        """
        conn.send(response.header_bytes())
        if response.body:
            conn.send(response.body)

        access_logger.info(
            f'{conn.address[0]} "{request_line}" '
            f"{int(response.status)} {len(response.body)}"
        )
