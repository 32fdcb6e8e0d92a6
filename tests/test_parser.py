"""Tests for nanoget.parser."""

import socket

import pytest

from nanoget.errors import (
    IoError,
    MalformedChunk,
    MalformedHeader,
    MalformedStatusLine,
    TruncatedBody,
)
from nanoget.parser import ParserState, ResponseParser, StreamReader, parse_bytes
from nanoget.response import Framing, StatusClass

from conftest import FakeStream


def parse(data: bytes, method: str = "GET", **stream_options):
    return ResponseParser().parse(FakeStream(data, **stream_options), method)


# ============================================================================
# Status line
# ============================================================================


def test_content_length_response():
    response = parse(b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\n\r\nhello")

    assert response.status_code == 200
    assert response.status_text == "OK"
    assert response.body == b"hello"
    assert response.text == "hello"
    assert response.http_version == "HTTP/1.1"
    assert response.framing is Framing.CONTENT_LENGTH


def test_status_text_may_contain_spaces():
    response = parse(b"HTTP/1.1 404 Not Found Here\r\nContent-Length: 0\r\n\r\n")

    assert response.status_code == 404
    assert response.status_text == "Not Found Here"
    assert response.status_class is StatusClass.CLIENT_ERROR
    assert not response.ok


def test_status_text_may_be_empty():
    response = parse(b"HTTP/1.1 200\r\nContent-Length: 0\r\n\r\n")

    assert response.status_text == ""
    assert str(response.status) == "200"


def test_http10_response():
    response = parse(b"HTTP/1.0 200 OK\r\n\r\nold school")

    assert response.http_version == "HTTP/1.0"
    assert response.body == b"old school"


@pytest.mark.parametrize(
    "status_line",
    [
        b"HTTP/1.1\r\n",
        b"HTTP/1.1 OK\r\n",
        b"HTTP/1.1 2x0 OK\r\n",
        b"HTTP/1.1 99 Too Low\r\n",
        b"HTTP/1.1 600 Too High\r\n",
        b"SPDY/3 200 OK\r\n",
    ],
)
def test_malformed_status_line(status_line):
    with pytest.raises(MalformedStatusLine):
        parse(status_line + b"Content-Length: 0\r\n\r\n")


def test_empty_stream_is_malformed_status_line():
    with pytest.raises(MalformedStatusLine):
        parse(b"")


def test_leading_empty_lines_are_skipped():
    response = parse(b"\r\nHTTP/1.1 204 No Content\r\n\r\n")

    assert response.status_code == 204


def test_overlong_status_line():
    parser = ResponseParser(max_line_size=16)

    with pytest.raises(MalformedStatusLine):
        parser.parse(FakeStream(b"HTTP/1.1 200 " + b"O" * 64 + b"\r\n\r\n"))


# ============================================================================
# Headers
# ============================================================================


def test_header_values_are_trimmed():
    response = parse(
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Type:   text/plain  \r\n"
        b"X-Empty:\r\n"
        b"Content-Length: 0\r\n"
        b"\r\n"
    )

    assert response.headers["content-type"] == "text/plain"
    assert response.header("X-Empty") == ""


def test_header_without_colon():
    with pytest.raises(MalformedHeader):
        parse(b"HTTP/1.1 200 OK\r\nNot a header\r\n\r\n")


def test_header_with_empty_name():
    with pytest.raises(MalformedHeader):
        parse(b"HTTP/1.1 200 OK\r\n: value\r\n\r\n")


def test_stream_ends_inside_headers():
    with pytest.raises(MalformedHeader):
        parse(b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\n")


def test_duplicate_headers_are_all_kept():
    response = parse(
        b"HTTP/1.1 200 OK\r\n"
        b"Set-Cookie: a=1\r\n"
        b"Set-Cookie: b=2\r\n"
        b"Content-Length: 0\r\n"
        b"\r\n"
    )

    assert response.headers.get_all("set-cookie") == ["a=1", "b=2"]
    assert response.headers["Set-Cookie"] == "a=1, b=2"


def test_folded_header_is_joined():
    response = parse(
        b"HTTP/1.1 200 OK\r\n"
        b"X-Long: first\r\n"
        b"\tsecond\r\n"
        b"Content-Length: 0\r\n"
        b"\r\n"
    )

    assert response.headers["X-Long"] == "first second"


def test_bare_newlines_are_tolerated():
    response = parse(b"HTTP/1.1 200 OK\nContent-Length: 3\n\nabc")

    assert response.status_text == "OK"
    assert response.body == b"abc"


def test_headers_keep_wire_order():
    response = parse(b"HTTP/1.1 200 OK\r\nB: 2\r\nA: 1\r\nContent-Length: 0\r\n\r\n")

    assert response.headers.items() == [("B", "2"), ("A", "1"), ("Content-Length", "0")]


# ============================================================================
# Content-Length framing
# ============================================================================


def test_truncated_content_length_body():
    with pytest.raises(TruncatedBody) as excinfo:
        parse(b"HTTP/1.1 200 OK\r\nContent-Length: 100\r\n\r\n0123456789")

    assert excinfo.value.expected == 100
    assert excinfo.value.received == 10


def test_content_length_stops_reading_at_length():
    stream = FakeStream(b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\n\r\nhiEXTRA")

    response = ResponseParser().parse(stream)

    assert response.body == b"hi"


def test_zero_content_length():
    response = parse(b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n")

    assert response.body == b""
    assert response.framing is Framing.CONTENT_LENGTH


def test_repeated_identical_content_length():
    response = parse(b"HTTP/1.1 200 OK\r\nContent-Length: 3\r\nContent-Length: 3\r\n\r\nabc")

    assert response.body == b"abc"


def test_conflicting_content_length():
    with pytest.raises(MalformedHeader):
        parse(b"HTTP/1.1 200 OK\r\nContent-Length: 3\r\nContent-Length: 4\r\n\r\nabcd")


def test_invalid_content_length_falls_back_to_close():
    response = parse(b"HTTP/1.1 200 OK\r\nContent-Length: -1\r\n\r\nuntil close")

    assert response.framing is Framing.UNTIL_CLOSE
    assert response.body == b"until close"


# ============================================================================
# Chunked framing
# ============================================================================

CHUNKED = (
    b"HTTP/1.1 200 OK\r\n"
    b"Transfer-Encoding: chunked\r\n"
    b"\r\n"
    b"4\r\nWiki\r\n"
    b"5\r\npedia\r\n"
    b"0\r\n"
    b"\r\n"
)


def test_chunked_response():
    response = parse(CHUNKED)

    assert response.body == b"Wikipedia"
    assert response.framing is Framing.CHUNKED


def test_chunked_response_read_one_byte_at_a_time():
    response = parse(CHUNKED, chunk_size=1)

    assert response.body == b"Wikipedia"


def test_chunked_takes_priority_over_content_length():
    response = parse(CHUNKED.replace(b"\r\n\r\n", b"\r\nContent-Length: 2\r\n\r\n", 1))

    assert response.body == b"Wikipedia"


def test_chunked_detection_is_case_insensitive():
    response = parse(CHUNKED.replace(b"chunked", b"gzip, CHUNKED"))

    assert response.framing is Framing.CHUNKED


def test_chunk_extensions_are_ignored():
    response = parse(
        b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n"
        b"A;name=value\r\n0123456789\r\n"
        b"0;last\r\n\r\n"
    )

    assert response.body == b"0123456789"


def test_chunk_trailers_are_collected():
    response = parse(
        b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n"
        b"3\r\nabc\r\n"
        b"0\r\n"
        b"Expires: never\r\n"
        b"X-Checksum: 42\r\n"
        b"\r\n"
    )

    assert response.body == b"abc"
    assert response.trailers["expires"] == "never"
    assert response.trailers["x-checksum"] == "42"
    assert "Expires" not in response.headers


def test_stream_closing_after_last_chunk_is_accepted():
    response = parse(b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n3\r\nabc\r\n0\r\n")

    assert response.body == b"abc"


def test_invalid_chunk_size():
    with pytest.raises(MalformedChunk) as excinfo:
        parse(b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\nzz\r\nabc\r\n0\r\n\r\n")

    assert isinstance(excinfo.value, MalformedHeader)


@pytest.mark.parametrize("size_line", [b"", b"0x3", b"+3", b"3_0"])
def test_chunk_size_must_be_plain_hex(size_line):
    with pytest.raises(MalformedChunk):
        parse(b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n" + size_line + b"\r\nabc\r\n")


def test_chunk_not_followed_by_crlf():
    with pytest.raises(MalformedChunk):
        parse(b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n3\r\nabcdef\r\n0\r\n\r\n")


def test_stream_ends_mid_chunk():
    with pytest.raises(TruncatedBody) as excinfo:
        parse(b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n4\r\nWiki\r\n9\r\nped")

    assert excinfo.value.expected == 13
    assert excinfo.value.received == 7


def test_stream_ends_before_next_chunk_size():
    with pytest.raises(TruncatedBody) as excinfo:
        parse(b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n4\r\nWiki\r\n")

    assert excinfo.value.received == 4
    assert excinfo.value.expected > excinfo.value.received


def test_stream_ends_before_chunk_terminator():
    with pytest.raises(TruncatedBody) as excinfo:
        parse(b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n4\r\nWiki")

    assert excinfo.value.received == 4
    assert excinfo.value.expected == 5


# ============================================================================
# Read-until-close framing and bodiless responses
# ============================================================================


def test_body_until_close():
    response = parse(b"HTTP/1.1 200 OK\r\n\r\nraw")

    assert response.body == b"raw"
    assert response.framing is Framing.UNTIL_CLOSE


def test_body_until_close_across_many_reads():
    response = parse(b"HTTP/1.1 200 OK\r\n\r\n" + b"x" * 50000, chunk_size=777)

    assert response.body == b"x" * 50000


def test_stream_that_never_closes_is_bounded_by_transport():
    stream = FakeStream(b"HTTP/1.1 200 OK\r\n\r\npartial", error=socket.timeout("timed out"))

    with pytest.raises(IoError) as excinfo:
        ResponseParser().parse(stream)

    assert isinstance(excinfo.value.__cause__, socket.timeout)


@pytest.mark.parametrize("status", [b"204 No Content", b"304 Not Modified", b"101 Switching"])
def test_bodiless_statuses_read_nothing(status):
    stream = FakeStream(b"HTTP/1.1 " + status + b"\r\nContent-Length: 10\r\n\r\n")

    response = ResponseParser().parse(stream)

    assert response.body == b""
    assert response.framing is Framing.NONE


def test_interim_responses_are_skipped():
    response = parse(
        b"HTTP/1.1 103 Early Hints\r\nLink: </style.css>; rel=preload\r\n\r\n"
        b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\n\r\nhello"
    )

    assert response.status_code == 200
    assert response.body == b"hello"
    assert "Link" not in response.headers


def test_continue_before_final_response():
    response = parse(
        b"HTTP/1.1 100 Continue\r\n\r\n"
        b"HTTP/1.1 100 Continue\r\n\r\n"
        b"HTTP/1.1 404 Not Found\r\nContent-Length: 4\r\n\r\ngone"
    )

    assert response.status_code == 404
    assert response.body == b"gone"


def test_switching_protocols_is_final():
    response = parse(b"HTTP/1.1 101 Switching Protocols\r\nUpgrade: websocket\r\n\r\nframes")

    assert response.status_code == 101
    assert response.headers["Upgrade"] == "websocket"
    assert response.body == b""


def test_interim_response_without_final_response():
    with pytest.raises(MalformedStatusLine):
        parse(b"HTTP/1.1 100 Continue\r\n\r\n")


def test_head_response_has_no_body():
    stream = FakeStream(b"HTTP/1.1 200 OK\r\nContent-Length: 1234\r\n\r\n")

    response = ResponseParser().parse(stream, method="HEAD")

    assert response.body == b""
    assert response.headers["Content-Length"] == "1234"


# ============================================================================
# Miscellaneous
# ============================================================================


def test_invalid_utf8_body_is_not_a_parse_failure():
    response = parse(b"HTTP/1.1 200 OK\r\nContent-Length: 3\r\n\r\na\xffb")

    assert response.body == b"a\xffb"
    assert response.text == "a�b"


def test_parser_state_reaches_done():
    parser = ResponseParser()
    assert parser.state is ParserState.STATUS_LINE

    parser.parse(FakeStream(b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n"))

    assert parser.state is ParserState.DONE


def test_parser_state_stops_where_parsing_failed():
    parser = ResponseParser()

    with pytest.raises(MalformedHeader):
        parser.parse(FakeStream(b"HTTP/1.1 200 OK\r\nbroken\r\n\r\n"))

    assert parser.state is ParserState.HEADERS


def test_os_errors_become_io_errors():
    stream = FakeStream(b"", error=ConnectionResetError("reset by peer"))

    with pytest.raises(IoError, match="reset by peer"):
        ResponseParser().parse(stream)


def test_parse_bytes():
    response = parse_bytes(b"HTTP/1.1 201 Created\r\nContent-Length: 2\r\n\r\nok")

    assert response.status_code == 201
    assert response.ok
    assert str(response.status) == "201 - Created"


def test_stream_reader_returns_partial_line_at_eof():
    reader = StreamReader(FakeStream(b"abc\r\ndef"))

    assert reader.read_line(100, MalformedHeader) == b"abc"
    assert reader.read_line(100, MalformedHeader) == b"def"
    assert reader.read_line(100, MalformedHeader) is None
    assert reader.at_eof
