"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can emit, as an IntEnum with reason phrases.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Code  Phrase                  When                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │  200   OK                      file found and read                  │
    │  400   Bad Request             extra token or version != HTTP/1.1   │
    │  404   Not Found               file missing, unreadable, or outside │
    │                                the document root                    │
    │  413   Payload Too Large       request head over max_request_size   │
    │  500   Internal Server Error   file vanished between check and read │
    │  501   Not Implemented         method other than GET                │
    └─────────────────────────────────────────────────────────────────────┘

The client accepts any integer status; it only cares whether it is 200.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes with reason phrases.

    Because this is an IntEnum, members compare equal to plain ints:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200

    BAD_REQUEST = 400
    NOT_FOUND = 404
    PAYLOAD_TOO_LARGE = 413

    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line, e.g. 'Not Found'."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self < 600


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
}
