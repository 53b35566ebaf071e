"""
=============================================================================
CONNECTION: ONE TCP EXCHANGE
=============================================================================

Wraps a connected socket for exactly one request/response exchange. The
same class serves both sides:

    CLIENT                                  SERVER
    ──────                                  ──────
    open_connection(host, port)             SocketServer.accept()
        │                                       │
        ▼                                       ▼
    send(request)                           read_request()
    read_until_close()                      send(header block)
    close()                                 send(body)
                                            close()

=============================================================================
READING WITHOUT A FIXED BUFFER
=============================================================================

TCP delivers bytes in arbitrary chunks. Instead of one recv() into a
fixed-size buffer (which silently truncated anything larger), both read
methods loop:

    read_request()       recv until \r\n\r\n is in the buffer, or the
                         peer closes
    read_until_close()   recv until the peer closes (the client always
                         sends Connection: close, so the server's close
                         marks the end of the response)

Either loop raises MessageTooLarge once the buffer passes max_message_size.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► PROCESSING ──────► WRITING
     │             │                                  │
     └─────────────┴──────────► CLOSED ◄──────────────┘

=============================================================================
"""

import logging
import socket
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from ..errors import ConnectError, MessageTooLarge, ReceiveError, SendError


logger = logging.getLogger(__name__)


HEADER_TERMINATOR = b"\r\n\r\n"


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and idempotent close."""

    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A connected socket plus the state of its single exchange.

    Attributes:
        socket: The connected socket.
        address: Peer (ip, port).
        id: Short identifier for log lines.
        state: Where in the exchange we are.
        buffer_size: Bytes requested per recv() call.
        max_message_size: Ceiling on bytes read in one message.
        timeout: Socket timeout in seconds, None = block.
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW

    buffer_size: int = 1512
    max_message_size: int = 64 * 1024
    timeout: Optional[float] = None

    bytes_received: int = 0
    bytes_sent: int = 0

    def __post_init__(self):
        self.socket.settimeout(self.timeout)

    @property
    def peer(self) -> str:
        return f"{self.address[0]}:{self.address[1]}"

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Read a request head from the peer.

        Returns:
            Everything received up to and including the first header
            terminator, plus whatever arrived in the same chunk. May be
            short (or empty) if the peer closed early.

        Raises:
            ReceiveError: If recv() fails.
            MessageTooLarge: If no terminator arrives within
                             max_message_size bytes.
        """
        self.state = ConnectionState.READING
        buffer = bytearray()

        while HEADER_TERMINATOR not in buffer:
            chunk = self._recv()
            if not chunk:
                break
            buffer += chunk
            self._check_size(len(buffer))

        return bytes(buffer)

    def read_until_close(self) -> bytes:
        """
        Read everything the peer sends until it closes the connection.

        Raises:
            ReceiveError: If recv() fails.
            MessageTooLarge: If more than max_message_size bytes arrive.
        """
        self.state = ConnectionState.READING
        buffer = bytearray()

        while True:
            chunk = self._recv()
            if not chunk:
                break
            buffer += chunk
            self._check_size(len(buffer))

        return bytes(buffer)

    def _recv(self) -> bytes:
        try:
            data = self.socket.recv(self.buffer_size)
        except OSError as e:
            raise ReceiveError(f"recv() failed: {e}") from e

        self.bytes_received += len(data)
        return data

    def _check_size(self, size: int) -> None:
        if size > self.max_message_size:
            raise MessageTooLarge(size, self.max_message_size)

    # =========================================================================
    # WRITING
    # =========================================================================

    def send(self, data: bytes) -> None:
        """
        Send all of data.

        sendall() keeps writing until every byte is out, so a short write
        never goes unnoticed; any failure is reported, not retried.

        Raises:
            SendError: If the socket write fails.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except OSError as e:
            raise SendError(f"send() failed: {e}") from e

        self.bytes_sent += len(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Safe to call more than once.

        shutdown(SHUT_WR) first so the peer sees a clean end of stream
        after the last byte we sent, then release the descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already gone

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Closed {self.peer} "
            f"(received {self.bytes_received}, sent {self.bytes_sent} bytes)"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def open_connection(
    host: str,
    port: int,
    buffer_size: int = 1512,
    max_message_size: int = 64 * 1024 * 1024,
    timeout: Optional[float] = None,
) -> Connection:
    """
    Resolve host and connect to the first IPv4 address that accepts.

    =========================================================================
    CANDIDATE LOOP
    =========================================================================

        getaddrinfo(host, port, AF_INET, SOCK_STREAM)
              │
              ▼
        for each candidate:
            socket()  ── fails ──► next candidate
            connect() ── fails ──► close, next candidate
            success   ──────────► return Connection

        no candidate left ──► ConnectError

    =========================================================================

    Raises:
        ConnectError: If resolution fails or no candidate connects.
    """
    try:
        candidates = socket.getaddrinfo(
            host, port, socket.AF_INET, socket.SOCK_STREAM
        )
    except socket.gaierror as e:
        raise ConnectError(f"getaddrinfo() failed for {host}:{port}: {e}") from e

    last_error: Optional[OSError] = None

    for family, socktype, proto, _, sockaddr in candidates:
        try:
            sock = socket.socket(family, socktype, proto)
        except OSError as e:
            last_error = e
            continue

        try:
            sock.settimeout(timeout)
            sock.connect(sockaddr)
        except OSError as e:
            last_error = e
            sock.close()
            logger.debug(f"connect() to {sockaddr[0]}:{sockaddr[1]} failed: {e}")
            continue

        logger.info(f"Connected to {host} ({sockaddr[0]}:{sockaddr[1]})")
        return Connection(
            socket=sock,
            address=sockaddr[:2],
            buffer_size=buffer_size,
            max_message_size=max_message_size,
            timeout=timeout,
        )

    raise ConnectError(f"socket() or connect() failed for {host}:{port}: {last_error}")
