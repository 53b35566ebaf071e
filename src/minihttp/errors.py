"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure the client or server can report is a MiniHTTPError. Each
class carries the process exit code the CLI should use when the error ends
the program, so the entry points never have to guess.

    MiniHTTPError                     exit 1
    ├── UsageError                    exit 1   bad command-line input
    ├── MalformedURL                  exit 1   URL is not http://host...
    ├── MalformedRequest              (answered with 400 / 501)
    ├── MessageTooLarge               exit 1   (server answers 413)
    ├── ProtocolError                 exit 2   status line is not HTTP/1.1 <int>
    ├── ServerStatusError             exit 3   server answered != 200
    ├── FileAccessError               exit 1   (server answers 500)
    └── TransportError                exit 1
        ├── ConnectError              resolve / connect failed
        ├── BindError                 resolve / bind / listen failed
        ├── SendError                 send() failed
        └── ReceiveError              recv() failed

ShutdownRequested is not an error: it unwinds a blocked accept() when a
signal arrives, and maps to exit 0.

=============================================================================
"""

from typing import Optional


class MiniHTTPError(Exception):
    """Base class for all minihttp errors."""

    exit_code = 1


class UsageError(MiniHTTPError):
    """Bad or missing command-line input."""


class MalformedURL(MiniHTTPError):
    """The URL cannot be split into host and request path."""


class MalformedRequest(MiniHTTPError):
    """
    Raised when an inbound request line fails validation.

    The status code tells the server which response to send:
    400 for a malformed line or wrong version, 501 for a method
    other than GET.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class MessageTooLarge(MiniHTTPError):
    """A message grew past the configured size ceiling."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Message too large: {size} bytes (limit {limit})")
        self.size = size
        self.limit = limit


class ProtocolError(MiniHTTPError):
    """The response status line is not `HTTP/1.1 <integer> ...`."""

    exit_code = 2


class ServerStatusError(MiniHTTPError):
    """
    The server answered with a status other than 200.

    str(error) is the server's own status text, e.g. "404 Not Found".
    """

    exit_code = 3

    def __init__(self, status_code: int, reason: str):
        super().__init__(reason)
        self.status_code = status_code
        self.reason = reason


class FileAccessError(MiniHTTPError):
    """A file could not be read (server) or written (client)."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class TransportError(MiniHTTPError):
    """Base class for socket-level failures."""


class ConnectError(TransportError):
    """Name resolution failed or no candidate address accepted a connection."""


class BindError(TransportError):
    """Name resolution, bind() or listen() failed for every candidate."""


class SendError(TransportError):
    """send() failed."""


class ReceiveError(TransportError):
    """recv() failed."""


class ShutdownRequested(Exception):
    """Raised from the signal handler to abort a blocked accept()."""
