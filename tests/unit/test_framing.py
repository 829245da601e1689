"""
Unit tests for message framing.
"""

import pytest

from minihttpd.core.framing import Frame, MessageAccumulator, find_message


POST_HEAD = b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\n"


class TestFindMessage:
    """Tests for the completeness predicate."""

    def test_no_delimiter_is_incomplete(self):
        """Without \\r\\n\\r\\n the message is not complete (and not an error)."""
        frame = find_message(b"GET / HTTP/1.1\r\nHost: x\r\n")
        assert frame.complete is False
        assert frame.message == b""

    def test_empty_buffer(self):
        assert find_message(b"").complete is False

    def test_bodiless_get_complete_at_delimiter(self):
        """No Content-Length means complete as soon as the head ends."""
        data = b"GET / HTTP/1.1\r\nHost: x\r\n\r\n"
        frame = find_message(data)
        assert frame.complete is True
        assert frame.message == data
        assert frame.leftover == b""

    def test_body_shorter_than_length(self):
        """Body still arriving: incomplete."""
        assert find_message(POST_HEAD + b"hello").complete is False

    def test_body_exactly_length(self):
        frame = find_message(POST_HEAD + b"helloworld")
        assert frame.complete is True
        assert frame.message == POST_HEAD + b"helloworld"

    def test_extra_bytes_become_leftover(self):
        """Bytes past Content-Length are split off, not part of the message."""
        frame = find_message(POST_HEAD + b"helloworldEXTRA")
        assert frame.complete is True
        assert frame.message == POST_HEAD + b"helloworld"
        assert frame.leftover == b"EXTRA"

    def test_bytes_after_bodiless_head_are_leftover(self):
        frame = find_message(b"GET / HTTP/1.1\r\n\r\nGET /x HTTP/1.1\r\n\r\n")
        assert frame.message == b"GET / HTTP/1.1\r\n\r\n"
        assert frame.leftover == b"GET /x HTTP/1.1\r\n\r\n"

    def test_content_length_case_insensitive(self):
        head = b"POST /files/a HTTP/1.1\r\ncOnTeNt-LeNgTh: 3\r\n\r\n"
        assert find_message(head + b"ab").complete is False
        assert find_message(head + b"abc").complete is True

    def test_zero_content_length(self):
        head = b"POST /files/a HTTP/1.1\r\nContent-Length: 0\r\n\r\n"
        frame = find_message(head)
        assert frame.complete is True
        assert frame.message == head

    @pytest.mark.parametrize("value", [b"abc", b"-5", b"", b"1.5", b"0x10"])
    def test_malformed_length_fails_open(self, value: bytes):
        """A bad Content-Length is treated as absent: complete at the delimiter."""
        head = b"POST /files/a HTTP/1.1\r\nContent-Length: " + value + b"\r\n\r\n"
        frame = find_message(head + b"body")
        assert frame.complete is True
        assert frame.message == head
        assert frame.leftover == b"body"

    def test_request_line_is_not_a_header(self):
        """A request line that looks like a header does not declare a length."""
        data = b"Content-Length: 99\r\n\r\n"
        assert find_message(data).complete is True

    def test_delimiter_in_body_does_not_end_message(self):
        head = b"POST /files/a HTTP/1.1\r\nContent-Length: 8\r\n\r\n"
        assert find_message(head + b"ab\r\n\r\n").complete is False
        assert find_message(head + b"ab\r\n\r\ncd").complete is True


class TestMessageAccumulator:
    """Tests for the per-connection buffer."""

    def test_feed_until_complete(self):
        acc = MessageAccumulator()
        assert acc.feed(b"GET / HT").complete is False
        frame = acc.feed(b"TP/1.1\r\n\r\n")
        assert frame.complete is True
        assert frame.message == b"GET / HTTP/1.1\r\n\r\n"

    def test_body_completes_only_on_last_write(self):
        """Content-Length 10: 3 bytes, then the other 7 split over two writes."""
        head = b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\n"
        acc = MessageAccumulator()

        assert acc.feed(head + b"012").complete is False
        assert acc.feed(b"3456").complete is False
        frame = acc.feed(b"789")

        assert frame.complete is True
        assert frame.message == head + b"0123456789"
        assert frame.leftover == b""

    def test_delimiter_split_across_chunks(self):
        acc = MessageAccumulator()
        assert acc.feed(b"GET / HTTP/1.1\r\n\r").complete is False
        assert acc.feed(b"\n").complete is True

    @pytest.mark.parametrize("size", [1, 2, 3, 7, 16])
    def test_chunking_does_not_matter(self, size: int):
        """Feeding any split of the same bytes gives the same message."""
        data = POST_HEAD + b"hello world"
        acc = MessageAccumulator()

        frame = Frame(complete=False)
        for start in range(0, len(data), size):
            frame = acc.feed(data[start:start + size])
            if frame.complete:
                break

        assert frame.complete is True
        assert frame.message == POST_HEAD + b"hello worl"

    def test_len_and_clear(self):
        acc = MessageAccumulator()
        acc.feed(b"12345")
        assert len(acc) == 5
        acc.clear()
        assert len(acc) == 0
