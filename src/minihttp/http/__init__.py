"""
HTTP message handling: URL resolution, request and response codecs,
status codes.
"""

from .status_codes import HTTPStatus
from .url import ParsedURL, resolve_url
from .request import HTTPRequest, RequestParser, build_request, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ParsedResponse,
    parse_response,
    format_date,
    ok,
    error_response,
    bad_request,
    not_found,
    not_implemented,
)

__all__ = [
    "HTTPStatus",
    "ParsedURL",
    "resolve_url",
    "HTTPRequest",
    "RequestParser",
    "build_request",
    "parse_request",
    "HTTPResponse",
    "ResponseBuilder",
    "ParsedResponse",
    "parse_response",
    "format_date",
    "ok",
    "error_response",
    "bad_request",
    "not_found",
    "not_implemented",
]
