"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from typing import Callable, Generator, List

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig


INDEX_CONTENT = b"hello\n"
BINARY_CONTENT = bytes(range(256)) * 50 + b"\r\n\r\nafter-terminator\x00"


@pytest.fixture
def sample_get_request() -> bytes:
    """The request the client sends for /index.html."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    )


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """
    A small document root:

        root/
        ├── index.html        "hello\\n"
        ├── data.bin          binary, larger than one recv() buffer
        ├── empty.txt         zero bytes
        ├── docs/
        │   └── index.html
        └── nodefault/
            └── page.txt
    """
    root = tmp_path / "root"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_CONTENT)
    (root / "data.bin").write_bytes(BINARY_CONTENT)
    (root / "empty.txt").write_bytes(b"")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_bytes(b"<h1>docs</h1>\n")
    (root / "nodefault").mkdir()
    (root / "nodefault" / "page.txt").write_bytes(b"page\n")
    return root


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class ServerThread:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self.error = None
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def _run(self):
        try:
            self.server.run()
        except Exception as e:  # surfaced by the test through .error
            self.error = e

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        for _ in range(50):  # 5 seconds max
            if self.server.address is not None:
                return
            time.sleep(0.1)

        raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server and wait for the accept loop to exit."""
        self.server.stop()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def test_server(doc_root: Path) -> Generator[ServerThread, None, None]:
    """A file server on a random loopback port, serving doc_root."""
    server = HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=0,
        doc_root=str(doc_root),
        accept_timeout=0.1,  # off the main thread: poll instead of signals
        max_request_size=2048,
        log_level="WARNING",
    ))

    srv = ServerThread(server)
    srv.start()

    yield srv

    srv.stop()


def send_raw(port: int, data: bytes) -> bytes:
    """Send raw bytes to 127.0.0.1:port and read until the server closes."""
    with socket.create_connection(("127.0.0.1", port), timeout=5.0) as s:
        s.sendall(data)
        chunks = []
        while True:
            chunk = s.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def canned_server() -> Generator[Callable[[bytes], int], None, None]:
    """
    Factory for one-shot servers that answer any request with fixed bytes.

    Usage:
        port = canned_server(b"HTTP/1.1 500 Oops\\r\\n\\r\\n")
    """
    threads: List[threading.Thread] = []
    sockets: List[socket.socket] = []

    def start(response: bytes) -> int:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(("127.0.0.1", 0))
        listener.listen(1)
        listener.settimeout(5.0)
        sockets.append(listener)

        def serve():
            try:
                conn, _ = listener.accept()
            except OSError:
                return
            with conn:
                received = b""
                while b"\r\n\r\n" not in received:
                    chunk = conn.recv(1024)
                    if not chunk:
                        break
                    received += chunk
                conn.sendall(response)

        thread = threading.Thread(target=serve, daemon=True)
        thread.start()
        threads.append(thread)
        return listener.getsockname()[1]

    yield start

    for thread in threads:
        thread.join(timeout=5.0)
    for listener in sockets:
        listener.close()


@pytest.fixture
def exchange() -> Callable[[int, bytes], bytes]:
    """send_raw() as a fixture, for tests that talk to the server directly."""
    return send_raw
