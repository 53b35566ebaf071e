"""
Unit tests for the HTTP response codec.
"""

import re
import time

import pytest

from minihttp.errors import ProtocolError, ServerStatusError
from minihttp.http.response import (
    HTTPResponse,
    ResponseBuilder,
    bad_request,
    error_response,
    format_date,
    not_found,
    not_implemented,
    ok,
    parse_response,
    parse_status_line,
)
from minihttp.http.status_codes import HTTPStatus


DATE_PATTERN = re.compile(r"^[A-Z][a-z]{2}, \d{2} [A-Z][a-z]{2} \d{2} \d{2}:\d{2}:\d{2}")


class TestHTTPStatus:
    """Tests for HTTPStatus."""

    def test_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.BAD_REQUEST.phrase == "Bad Request"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.NOT_IMPLEMENTED.phrase == "Not Implemented"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"

    def test_int_comparison(self):
        assert HTTPStatus.NOT_FOUND == 404
        assert HTTPStatus(501) is HTTPStatus.NOT_IMPLEMENTED

    def test_classification(self):
        assert HTTPStatus.OK.is_success
        assert HTTPStatus.NOT_FOUND.is_client_error
        assert HTTPStatus.NOT_IMPLEMENTED.is_server_error
        assert not HTTPStatus.OK.is_client_error


class TestServerResponses:
    """Tests for the responses the server sends."""

    def test_ok_header_order(self):
        """Date, Content-Length and Connection appear in that order."""
        response = ok(b"hello\n")

        assert list(response.headers) == ["Date", "Content-Length", "Connection"]
        assert response.headers["Content-Length"] == "6"
        assert response.headers["Connection"] == "Close"

    def test_ok_bytes(self):
        timestamp = time.time()
        response = ok(b"hello\n", timestamp)

        assert response.header_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            + f"Date: {format_date(timestamp)}\r\n".encode()
            + b"Content-Length: 6\r\n"
            + b"Connection: Close\r\n"
            + b"\r\n"
        )
        assert response.to_bytes().endswith(b"\r\n\r\nhello\n")

    def test_ok_body_is_untouched(self):
        body = b"\x00\r\n\r\n\xff"
        response = ok(body)

        assert response.body == body
        assert response.headers["Content-Length"] == str(len(body))

    def test_ok_empty_body(self):
        response = ok(b"")

        assert response.headers["Content-Length"] == "0"
        assert response.to_bytes().endswith(b"Connection: Close\r\n\r\n")

    @pytest.mark.parametrize("status,line", [
        (HTTPStatus.BAD_REQUEST, b"HTTP/1.1 400 Bad Request"),
        (HTTPStatus.NOT_FOUND, b"HTTP/1.1 404 Not Found"),
        (HTTPStatus.PAYLOAD_TOO_LARGE, b"HTTP/1.1 413 Payload Too Large"),
        (HTTPStatus.INTERNAL_SERVER_ERROR, b"HTTP/1.1 500 Internal Server Error"),
        (HTTPStatus.NOT_IMPLEMENTED, b"HTTP/1.1 501 Not Implemented"),
    ])
    def test_error_response_bytes(self, status, line):
        assert error_response(status).to_bytes() == line + b"\r\nConnection: close\r\n\r\n"

    def test_error_shortcuts(self):
        assert bad_request().status == 400
        assert not_found().status == 404
        assert not_implemented().status == 501
        assert not_found().body == b""

    def test_builder_string_body(self):
        response = ResponseBuilder().body("héllo").build()

        assert response.body == "héllo".encode("utf-8")
        assert response.headers["Content-Length"] == "6"

    def test_response_without_headers(self):
        assert HTTPResponse(HTTPStatus.OK).to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"


class TestFormatDate:
    """Tests for the Date header value."""

    def test_shape(self):
        assert DATE_PATTERN.match(format_date())

    def test_two_digit_year(self):
        timestamp = time.mktime((2026, 10, 19, 12, 0, 0, 0, 0, -1))

        formatted = format_date(timestamp)

        assert formatted.startswith("Mon, 19 Oct 26 12:00:00")


class TestParseStatusLine:
    """Tests for parse_status_line()."""

    def test_valid(self):
        version, code, reason, status_text = parse_status_line(b"HTTP/1.1 200 OK\r\n\r\n")

        assert (version, code, reason) == ("HTTP/1.1", 200, "OK")
        assert status_text == "200 OK"

    def test_multi_word_reason(self):
        _, code, reason, _ = parse_status_line(b"HTTP/1.1 404 Not Found\r\n\r\n")

        assert code == 404
        assert reason == "Not Found"

    def test_missing_reason(self):
        _, code, reason, _ = parse_status_line(b"HTTP/1.1 204\r\n\r\n")

        assert code == 204
        assert reason == ""

    def test_runs_of_spaces(self):
        version, code, reason, status_text = parse_status_line(b"HTTP/1.1  200   OK\r\n\r\n")

        assert (version, code, reason) == ("HTTP/1.1", 200, "OK")
        assert status_text == "200   OK"

    @pytest.mark.parametrize("line,expected", [
        (b"HTTP/1.1 +200 OK", 200),
        (b"HTTP/1.1 -5 Odd", -5),
        (b"HTTP/1.1 0200 OK", 200),
    ])
    def test_signed_code(self, line, expected):
        _, code, _, _ = parse_status_line(line + b"\r\n\r\n")

        assert code == expected

    @pytest.mark.parametrize("raw", [
        b"",
        b"garbage",
        b"HTTP/1.0 200 OK\r\n\r\n",
        b"HTTP/1.1 abc OK\r\n\r\n",
        b"HTTP/1.1 20x OK\r\n\r\n",
        b"HTTP/1.1 200OK\r\n\r\n",
        b"http/1.1 200 OK\r\n\r\n",
    ])
    def test_invalid(self, raw):
        with pytest.raises(ProtocolError) as exc_info:
            parse_status_line(raw)

        assert str(exc_info.value).startswith("Protocol error!")
        assert exc_info.value.exit_code == 2


class TestParseResponse:
    """Tests for parse_response()."""

    def test_ok_body(self):
        response = parse_response(
            b"HTTP/1.1 200 OK\r\n"
            b"Date: Mon, 19 Oct 26 12:00:00 UTC\r\n"
            b"Content-Length: 6\r\n"
            b"Connection: Close\r\n"
            b"\r\n"
            b"hello\n"
        )

        assert response.status_code == 200
        assert response.body == b"hello\n"
        assert response.headers["connection"] == "Close"
        assert response.content_length == 6

    def test_body_keeps_later_terminators(self):
        response = parse_response(b"HTTP/1.1 200 OK\r\n\r\na\r\n\r\nb")

        assert response.body == b"a\r\n\r\nb"

    def test_empty_body(self):
        response = parse_response(b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n")

        assert response.body == b""

    def test_content_length_missing_or_bad(self):
        assert parse_response(b"HTTP/1.1 200 OK\r\n\r\n").content_length is None
        assert parse_response(
            b"HTTP/1.1 200 OK\r\nContent-Length: lots\r\n\r\n"
        ).content_length is None

    def test_missing_terminator(self):
        with pytest.raises(ProtocolError):
            parse_response(b"HTTP/1.1 200 OK\r\nContent-Length: 6\r\n")

    def test_not_found(self):
        with pytest.raises(ServerStatusError) as exc_info:
            parse_response(b"HTTP/1.1 404 Not Found\r\nConnection: close\r\n\r\n")

        error = exc_info.value
        assert error.status_code == 404
        assert str(error) == "404 Not Found"
        assert error.exit_code == 3

    def test_any_integer_status_is_status_error(self):
        with pytest.raises(ServerStatusError) as exc_info:
            parse_response(b"HTTP/1.1 299 Whatever\r\n\r\n")

        assert str(exc_info.value) == "299 Whatever"

    def test_status_error_without_terminator(self):
        """A non-200 status is reported even if the headers never ended."""
        with pytest.raises(ServerStatusError):
            parse_response(b"HTTP/1.1 500 Internal Server Error\r\n")

    def test_protocol_error_before_status(self):
        with pytest.raises(ProtocolError):
            parse_response(b"HTTP/1.0 404 Not Found\r\n\r\n")

    def test_double_spaced_ok(self):
        response = parse_response(b"HTTP/1.1  200 OK\r\n\r\nhi")

        assert response.body == b"hi"

    def test_double_spaced_status_text(self):
        with pytest.raises(ServerStatusError) as exc_info:
            parse_response(b"HTTP/1.1  404 Not Found\r\n\r\n")

        assert str(exc_info.value) == "404 Not Found"
