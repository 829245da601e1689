"""
Unit tests for HTTP response encoding.
"""

import pytest

from minihttpd.http import (
    HTTPResponse,
    ok,
    created,
    not_found,
    internal_error,
    error_response,
)
from minihttpd.http.status_codes import HTTPStatus, reason_phrase


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"

    def test_status_line_plain_int(self):
        assert HTTPResponse(status=201).status_line == "HTTP/1.1 201 Created"

    def test_unknown_status_has_empty_reason(self):
        """Unknown codes serialize with an empty phrase instead of failing."""
        result = HTTPResponse(status=599).to_bytes()
        assert result.startswith(b"HTTP/1.1 599 \r\n")

    def test_exact_wire_format(self):
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers=[("Content-Type", "text/plain")],
            body=b"abc",
        )
        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_empty_body_still_has_content_length(self):
        assert HTTPResponse().to_bytes() == b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n"

    def test_content_length_last_and_recomputed(self):
        """A hand-set Content-Length is dropped and the real one goes last."""
        response = HTTPResponse(
            headers=[("Content-Length", "999"), ("X-One", "1")],
            body=b"hello",
        )
        result = response.to_bytes()

        assert b"999" not in result
        assert result.count(b"Content-Length") == 1
        assert b"X-One: 1\r\nContent-Length: 5\r\n\r\nhello" in result

    def test_header_order_preserved(self):
        response = HTTPResponse(headers=[("B", "2"), ("A", "1"), ("C", "3")])
        head = response.to_bytes().split(b"\r\n\r\n")[0]
        assert head.split(b"\r\n")[1:] == [b"B: 2", b"A: 1", b"C: 3", b"Content-Length: 0"]

    def test_no_date_or_server_headers(self):
        result = HTTPResponse(body=b"x").to_bytes()
        assert b"Date:" not in result
        assert b"Server:" not in result

    def test_set_header_replaces_in_place(self):
        response = (HTTPResponse()
            .set_header("Content-Type", "text/html")
            .set_header("X-Two", "2")
            .set_header("content-type", "text/plain"))

        assert response.headers == [("content-type", "text/plain"), ("X-Two", "2")]
        assert response.get_header("Content-Type") == "text/plain"

    def test_get_header_missing(self):
        assert HTTPResponse().get_header("X-Nope") is None

    def test_set_body_str_restores_raw_bytes(self):
        """Strings decoded with surrogateescape encode back to the same bytes."""
        text = b"\xff\xfeabc".decode("utf-8", "surrogateescape")
        assert HTTPResponse().set_body(text).body == b"\xff\xfeabc"


class TestConvenienceFunctions:
    """Tests for convenience response functions."""

    def test_ok(self):
        response = ok("Hello", content_type="text/plain")
        assert response.status == HTTPStatus.OK
        assert response.body == b"Hello"
        assert response.headers == [("Content-Type", "text/plain")]

    def test_ok_default_is_empty(self):
        response = ok()
        assert response.body == b""
        assert response.headers == []

    @pytest.mark.parametrize("factory,status", [
        (created, 201),
        (not_found, 404),
        (internal_error, 500),
    ])
    def test_empty_bodied_responses(self, factory, status):
        response = factory()
        assert response.status == status
        assert response.body == b""
        assert response.headers == []

    @pytest.mark.parametrize("status,status_line", [
        (400, b"HTTP/1.1 400 Bad Request"),
        (413, b"HTTP/1.1 413 Payload Too Large"),
        (500, b"HTTP/1.1 500 Internal Server Error"),
    ])
    def test_error_response(self, status, status_line):
        assert error_response(status).to_bytes() == status_line + b"\r\nContent-Length: 0\r\n\r\n"

    def test_ok_binary_body(self):
        response = ok(b"\x00\x01", content_type="application/octet-stream")
        assert response.headers == [("Content-Type", "application/octet-stream")]
        assert response.body == b"\x00\x01"


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.CREATED.phrase == "Created"
        assert HTTPStatus.BAD_REQUEST.phrase == "Bad Request"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.PAYLOAD_TOO_LARGE.phrase == "Payload Too Large"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"

    def test_reason_phrase_lookup(self):
        assert reason_phrase(404) == "Not Found"
        assert reason_phrase(418) == ""
        assert reason_phrase(-1) == ""
