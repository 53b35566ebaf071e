"""
Unit tests for the HTTP request codec.
"""

import pytest

from minihttp.errors import MalformedRequest, MessageTooLarge
from minihttp.http.request import HTTPRequest, RequestParser, build_request, parse_request
from minihttp.http.status_codes import HTTPStatus


class TestBuildRequest:
    """Tests for the client's outbound request."""

    def test_exact_bytes(self):
        """The client request is the request line plus Host and Connection."""
        request = build_request("example.com", "/index.html")

        assert request.to_bytes() == (
            b"GET /index.html HTTP/1.1\r\n"
            b"Host: example.com\r\n"
            b"Connection: close\r\n"
            b"\r\n"
        )

    def test_fields(self):
        request = build_request("example.com", "/a/b.txt")

        assert request.method == "GET"
        assert request.path == "/a/b.txt"
        assert request.version == "HTTP/1.1"
        assert request.host == "example.com"
        assert request.request_line == "GET /a/b.txt HTTP/1.1"

    def test_server_parses_what_client_builds(self):
        request = build_request("localhost", "/docs/")

        parsed = RequestParser().parse(request.to_bytes())

        assert (parsed.method, parsed.path, parsed.version) == ("GET", "/docs/", "HTTP/1.1")
        assert parsed.host == "localhost"


class TestRequestParser:
    """Tests for RequestParser."""

    @pytest.fixture
    def parser(self):
        return RequestParser()

    def test_parse_simple_get(self, parser, sample_get_request):
        """Test parsing a simple GET request."""
        request = parser.parse(sample_get_request)

        assert request.method == "GET"
        assert request.path == "/index.html"
        assert request.version == "HTTP/1.1"
        assert request.raw == sample_get_request

    def test_headers_lowercased(self, parser, sample_get_request):
        request = parser.parse(sample_get_request)

        assert request.headers["host"] == "localhost"
        assert request.headers["connection"] == "close"
        assert request.get_header("HOST") == "localhost"

    def test_repeated_headers_joined(self, parser):
        request = parser.parse(
            b"GET / HTTP/1.1\r\nAccept: text/html\r\nAccept: text/plain\r\n\r\n"
        )

        assert request.headers["accept"] == "text/html, text/plain"

    def test_header_lines_without_colon_skipped(self, parser):
        request = parser.parse(b"GET / HTTP/1.1\r\nnot a header\r\nHost: h\r\n\r\n")

        assert request.headers == {"host": "h"}

    def test_request_line_only(self, parser):
        request = parser.parse(b"GET /x HTTP/1.1\r\n")

        assert request.path == "/x"
        assert request.headers == {}

    def test_bare_lf_line_endings(self, parser):
        request = parser.parse(b"GET /x HTTP/1.1\nHost: h\n\n")

        assert request.path == "/x"
        assert request.host == "h"

    def test_repeated_spaces_between_fields(self, parser):
        request = parser.parse(b"GET  /x   HTTP/1.1\r\n\r\n")

        assert request.path == "/x"

    def test_body_after_terminator_ignored(self, parser):
        request = parser.parse(b"GET /x HTTP/1.1\r\n\r\nGET /y HTTP/1.1\r\n\r\n")

        assert request.path == "/x"

    def test_method_other_than_get_is_501(self, parser):
        with pytest.raises(MalformedRequest) as exc_info:
            parser.parse(b"POST /index.html HTTP/1.1\r\n\r\n")

        assert exc_info.value.status_code == HTTPStatus.NOT_IMPLEMENTED

    def test_method_is_case_sensitive(self, parser):
        with pytest.raises(MalformedRequest) as exc_info:
            parser.parse(b"get /index.html HTTP/1.1\r\n\r\n")

        assert exc_info.value.status_code == 501

    def test_wrong_version_is_400(self, parser):
        with pytest.raises(MalformedRequest) as exc_info:
            parser.parse(b"GET /index.html HTTP/1.0\r\n\r\n")

        assert exc_info.value.status_code == HTTPStatus.BAD_REQUEST

    def test_version_checked_before_method(self, parser):
        """An unsupported method with a bad version is a 400, not a 501."""
        with pytest.raises(MalformedRequest) as exc_info:
            parser.parse(b"POST /index.html HTTP/1.0\r\n\r\n")

        assert exc_info.value.status_code == 400

    def test_extra_token_is_400(self, parser):
        with pytest.raises(MalformedRequest) as exc_info:
            parser.parse(b"GET /index.html HTTP/1.1 extra\r\n\r\n")

        assert exc_info.value.status_code == 400

    def test_extra_token_checked_before_method(self, parser):
        with pytest.raises(MalformedRequest) as exc_info:
            parser.parse(b"POST /index.html HTTP/1.1 extra\r\n\r\n")

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("data", [
        b"",
        b"\r\n\r\n",
        b"GET\r\n\r\n",
        b"GET /index.html\r\n\r\n",
    ])
    def test_too_few_fields_is_400(self, parser, data):
        with pytest.raises(MalformedRequest) as exc_info:
            parser.parse(data)

        assert exc_info.value.status_code == 400

    def test_too_large(self):
        parser = RequestParser(max_request_size=32)

        with pytest.raises(MessageTooLarge) as exc_info:
            parser.parse(b"GET /" + b"a" * 64 + b" HTTP/1.1\r\n\r\n")

        assert exc_info.value.limit == 32

    def test_parse_request_helper(self, sample_get_request):
        request = parse_request(sample_get_request)

        assert isinstance(request, HTTPRequest)
        assert request.path == "/index.html"

    def test_parse_request_helper_with_limit(self, sample_get_request):
        with pytest.raises(MessageTooLarge):
            parse_request(sample_get_request, max_size=8)
