"""
=============================================================================
HTTP RESPONSE CODEC
=============================================================================

Both directions of the response message:

- HTTPResponse / ResponseBuilder are what the server sends.
- parse_response() is how the client reads what came back.

=============================================================================
WHAT THE SERVER SENDS
=============================================================================

Success, written as two sends (header block, then body):

    HTTP/1.1 200 OK\r\n
    Date: Mon, 19 Oct 26 14:03:11 CEST\r\n
    Content-Length: 6\r\n        ← exactly len(body)
    Connection: Close\r\n
    \r\n
    hello\n                      ← body bytes, untouched

Every error, one send, no body:

    HTTP/1.1 404 Not Found\r\n
    Connection: close\r\n
    \r\n

=============================================================================
WHAT THE CLIENT ACCEPTS
=============================================================================

    "HTTP/1.1 200 OK"  ──► split on spaces ──► ("HTTP/1.1", "200", "OK")
                                               │           │
                            must be HTTP/1.1 ──┘           └── must be an
                                                               integer
    anything else          ──► ProtocolError      (exit 2)
    integer but not 200    ──► ServerStatusError  (exit 3)
    200                    ──► body = everything after \r\n\r\n

=============================================================================
"""

import re
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from ..errors import ProtocolError, ServerStatusError
from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"
HEADER_TERMINATOR = b"\r\n\r\n"

# <weekday>, <day> <month> <2-digit year> <time> <zone>
DATE_FORMAT = "%a, %d %b %y %H:%M:%S %Z"

# <version> <integer code> [<reason>], fields separated by runs of spaces
STATUS_LINE_PATTERN = re.compile(r"^ *(\S+) +([+-]?[0-9]+)(?: +(.*))?$")


@dataclass
class HTTPResponse:
    """
    A response the server is about to send.

    Headers are written in insertion order. Content-Length is not added
    automatically: only responses with a body carry it.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = HTTP_VERSION

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def header_bytes(self) -> bytes:
        """Status line and headers, terminated by the empty line."""
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")
        return ("\r\n".join(lines) + "\r\n").encode("utf-8")

    def to_bytes(self) -> bytes:
        """The whole message as one byte string."""
        return self.header_bytes() + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .date()
            .body(content)
            .header("Connection", "Close")
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = HTTPStatus(status)
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def date(self, timestamp: Optional[float] = None) -> "ResponseBuilder":
        """Add a Date header for now, or for the given epoch timestamp."""
        return self.header("Date", format_date(timestamp))

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the body and its Content-Length.

        Strings are encoded as UTF-8; bytes are kept as they are.
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._body = body
        return self.header("Content-Length", str(len(body)))

    def close_connection(self, value: str = "close") -> "ResponseBuilder":
        return self.header("Connection", value)

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )


def format_date(timestamp: Optional[float] = None) -> str:
    """
    Format a timestamp for the Date header.

    Uses local time and a two-digit year, e.g.
    "Mon, 19 Oct 26 14:03:11 CEST".
    """
    if timestamp is None:
        timestamp = time.time()
    return time.strftime(DATE_FORMAT, time.localtime(timestamp))


def ok(body: bytes, timestamp: Optional[float] = None) -> HTTPResponse:
    """200 OK carrying a file body."""
    return (ResponseBuilder()
        .status(HTTPStatus.OK)
        .date(timestamp)
        .body(body)
        .close_connection("Close")
        .build())


def error_response(status: HTTPStatus) -> HTTPResponse:
    """Status line plus Connection: close, no body."""
    return ResponseBuilder().status(status).close_connection().build()


def bad_request() -> HTTPResponse:
    return error_response(HTTPStatus.BAD_REQUEST)


def not_found() -> HTTPResponse:
    return error_response(HTTPStatus.NOT_FOUND)


def not_implemented() -> HTTPResponse:
    return error_response(HTTPStatus.NOT_IMPLEMENTED)


# =============================================================================
# CLIENT SIDE
# =============================================================================


@dataclass
class ParsedResponse:
    """
    A response as the client received it.

    Attributes:
        version: Protocol version from the status line.
        status_code: Integer status code.
        reason: Reason phrase (may be empty).
        headers: Lower-cased header name → value.
        body: Everything after the header terminator.
    """

    version: str
    status_code: int
    reason: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def content_length(self) -> Optional[int]:
        try:
            return int(self.headers["content-length"])
        except (KeyError, ValueError):
            return None


def parse_status_line(raw: bytes) -> tuple:
    """
    Validate the status line at the start of a response.

    Fields are separated by runs of spaces and the code may carry a sign,
    so "HTTP/1.1  200 OK" and "HTTP/1.1 +200 OK" are both accepted.

    Returns:
        (version, status_code, reason, status_text), where status_text is
        the line from the code onwards, e.g. "404 Not Found".

    Raises:
        ProtocolError: If the line is not "HTTP/1.1 <integer> ...".
    """
    first_line = raw.split(b"\n", 1)[0].rstrip(b"\r").decode("iso-8859-1")
    match = STATUS_LINE_PATTERN.match(first_line)

    if not match or match.group(1) != HTTP_VERSION:
        raise ProtocolError(f"Protocol error! Invalid status line: {first_line!r}")

    version, code, reason = match.group(1), match.group(2), match.group(3) or ""
    return version, int(code), reason, first_line[match.start(2):]


def parse_response(raw: bytes) -> ParsedResponse:
    """
    Validate a complete response and extract its body.

    Args:
        raw: Every byte received before the server closed the connection.

    Returns:
        ParsedResponse for a 200 response.

    Raises:
        ProtocolError: Bad status line or no header terminator.
        ServerStatusError: The status parsed but is not 200. The error
                           text is the status line from the code on,
                           e.g. "404 Not Found".
    """
    version, status_code, reason, status_text = parse_status_line(raw)

    if status_code != HTTPStatus.OK:
        raise ServerStatusError(status_code, status_text)

    head_end = raw.find(HEADER_TERMINATOR)
    if head_end == -1:
        raise ProtocolError("Protocol error! Missing header terminator")

    head = raw[:head_end].decode("iso-8859-1")
    headers: Dict[str, str] = {}
    for line in head.split("\r\n")[1:]:
        if ":" not in line:
            continue
        name, value = line.split(":", 1)
        headers[name.strip().lower()] = value.strip()

    return ParsedResponse(
        version=version,
        status_code=status_code,
        reason=reason,
        headers=headers,
        body=raw[head_end + len(HEADER_TERMINATOR):],
    )
