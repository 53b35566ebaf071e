"""
=============================================================================
HTTP REQUEST CODEC
=============================================================================

Both directions of the request message:

- build_request() is what the client sends.
- RequestParser turns what the server receives into an HTTPRequest and
  decides whether it is acceptable.

=============================================================================
THE ONLY REQUEST THE CLIENT SENDS
=============================================================================

    GET /index.html HTTP/1.1\r\n
    Host: example.com\r\n
    Connection: close\r\n
    \r\n                         ← header terminator, no body follows

=============================================================================
SERVER-SIDE VALIDATION ORDER
=============================================================================

    request line = text before the first CR
                   │
                   ▼
    split on ' '  ──── fewer than 3 fields ──────────────► 400 Bad Request
                   │
                   ├── 4th field present ────────────────► 400 Bad Request
                   ├── version != HTTP/1.1 ──────────────► 400 Bad Request
                   │
                   ├── method != GET ────────────────────► 501 Not Implemented
                   │
                   ▼
    HTTPRequest   (file lookup happens in the static handler: 404 / 200)

The parser never modifies the buffer it is given; each field is validated
on its own and the outcome is either an HTTPRequest or a MalformedRequest
carrying the status code to answer with.

=============================================================================
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..errors import MalformedRequest, MessageTooLarge
from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"
SUPPORTED_METHOD = "GET"
HEADER_TERMINATOR = b"\r\n\r\n"


@dataclass
class HTTPRequest:
    """
    A request message.

    Attributes:
        method: Request method, "GET" for everything the client sends.
        path: Request target exactly as it appeared on the wire.
        version: Protocol version string.
        headers: Header name → value, in arrival order. Names are
                 lower-cased by the parser; build_request() keeps the
                 canonical casing it writes.
        raw: The bytes the request was parsed from (empty when built).
    """

    method: str
    path: str
    version: str = HTTP_VERSION
    headers: Dict[str, str] = field(default_factory=dict)
    raw: bytes = field(default=b"", repr=False)

    @property
    def host(self) -> str:
        return self.get_header("Host")

    @property
    def request_line(self) -> str:
        return f"{self.method} {self.path} {self.version}"

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    def to_bytes(self) -> bytes:
        """
        Serialize the request for sending.

        The request line and every header end in CRLF, followed by one
        empty line. No body is ever sent.
        """
        lines = [self.request_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")
        return ("\r\n".join(lines) + "\r\n").encode("utf-8")


def build_request(host: str, path: str) -> HTTPRequest:
    """
    Build the client's GET request for a path on a host.

    The client never keeps connections open, so every request asks the
    server to close after responding.
    """
    return HTTPRequest(
        method=SUPPORTED_METHOD,
        path=path,
        headers={"Host": host, "Connection": "close"},
    )


class RequestParser:
    """
    Parses raw request bytes received by the server.

    Only the request head is examined. A GET carries no body, so anything
    after the header terminator is ignored.
    """

    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 64 * 1024):
        self.max_request_size = max_request_size

    def parse(self, data: bytes) -> HTTPRequest:
        """
        Parse and validate a request.

        Args:
            data: Bytes received from the client.

        Returns:
            The parsed request. Its method is always GET and its version
            always HTTP/1.1.

        Raises:
            MalformedRequest: status_code 400 for a bad request line or
                              version, 501 for an unsupported method.
            MessageTooLarge: If data exceeds max_request_size.
        """
        if len(data) > self.max_request_size:
            raise MessageTooLarge(len(data), self.max_request_size)

        head_end = data.find(HEADER_TERMINATOR)
        head = data if head_end == -1 else data[:head_end]
        text = head.decode("utf-8", errors="replace")

        lines = re.split(r"\r\n|\r|\n", text)
        method, path, version = self.parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            raw=data,
        )

    def parse_request_line(self, line: str) -> tuple:
        """
        Split a request line into (method, path, version) and validate it.

        Raises:
            MalformedRequest: See parse().
        """
        fields = [token for token in line.split(" ") if token]

        if len(fields) < 3:
            raise MalformedRequest(
                f"Invalid request line: {line!r}",
                status_code=HTTPStatus.BAD_REQUEST,
            )

        if len(fields) > 3:
            raise MalformedRequest(
                f"Unexpected token in request line: {line!r}",
                status_code=HTTPStatus.BAD_REQUEST,
            )

        method, path, version = fields

        if version != HTTP_VERSION:
            raise MalformedRequest(
                f"Unsupported HTTP version: {version}",
                status_code=HTTPStatus.BAD_REQUEST,
            )

        if method != SUPPORTED_METHOD:
            raise MalformedRequest(
                f"Method not implemented: {method}",
                status_code=HTTPStatus.NOT_IMPLEMENTED,
            )

        return method, path, version

    def _parse_headers(self, lines: list) -> Dict[str, str]:
        """
        Parse "Name: value" lines into a dict with lower-cased names.

        Malformed lines are skipped. Repeated headers are joined with ", ".
        """
        headers: Dict[str, str] = {}

        for line in lines:
            if not line:
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def parse_request(data: bytes, max_size: Optional[int] = None) -> HTTPRequest:
    """Parse a request with a one-off RequestParser."""
    parser = RequestParser() if max_size is None else RequestParser(max_size)
    return parser.parse(data)
