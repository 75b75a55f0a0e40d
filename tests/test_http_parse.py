import pytest

from pktperf.http import HttpResult, build_response
from pktperf.http_parse import (
    F_CLOSE,
    F_CONTENT_LENGTH,
    F_CONTENT_LENGTH_AUTO,
    F_TRANSFER_ENCODING,
    HttpParser,
    ParseResult,
    ParseState,
)

CHUNKED_HEAD = b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n"
CHUNKED_BODY = b"5\r\nhello\r\n0\r\n\r\n"


def test_content_length_in_one_piece():
    parser = HttpParser()
    result = parser.feed(b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\n\r\nhello")
    assert result is ParseResult.END
    assert parser.state is ParseState.BODY_DONE
    assert parser.flags == F_CONTENT_LENGTH
    assert parser.keepalive is True
    assert parser.response_class is HttpResult.SUCCESS


def test_content_length_split_body():
    parser = HttpParser()
    assert parser.feed(b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\n\r\nhe") is ParseResult.CONTINUE
    assert parser.feed(b"llo") is ParseResult.END


def test_body_longer_than_content_length():
    parser = HttpParser()
    with pytest.raises(ValueError):
        parser.feed(b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\n\r\nhello")
    assert parser.state is ParseState.ERROR
    with pytest.raises(ValueError):
        parser.feed(b"more")


def test_uppercase_header_name():
    parser = HttpParser()
    assert parser.feed(b"HTTP/1.1 200 OK\r\nCONTENT-LENGTH: 2\r\n\r\nok") is ParseResult.END


def test_negative_content_length():
    with pytest.raises(ValueError):
        HttpParser().feed(b"HTTP/1.1 200 OK\r\nContent-Length: -5\r\n\r\n")


def test_content_length_and_chunked_conflict():
    with pytest.raises(ValueError):
        HttpParser().feed(b"HTTP/1.1 200 OK\r\nContent-Length: 3\r\nTransfer-Encoding: chunked\r\n\r\n")
    with pytest.raises(ValueError):
        HttpParser().feed(b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\nContent-Length: 3\r\n\r\n")


def test_connection_close():
    parser = HttpParser()
    result = parser.feed(b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\nConnection: close\r\n\r\nok")
    assert result is ParseResult.END
    assert parser.keepalive is False
    assert parser.flags & F_CLOSE


def test_connection_keep_alive():
    parser = HttpParser()
    parser.feed(b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\nConnection: keep-alive\r\n\r\nok")
    assert parser.keepalive is True
    assert not parser.flags & F_CLOSE


def test_no_length_reads_until_close():
    parser = HttpParser()
    assert parser.feed(b"HTTP/1.1 200 OK\r\nServer: x\r\n\r\nbody") is ParseResult.CONTINUE
    assert parser.flags == F_CONTENT_LENGTH_AUTO | F_CLOSE
    assert parser.length == -1
    assert parser.keepalive is False


def test_chunked_in_one_piece():
    parser = HttpParser()
    assert parser.feed(CHUNKED_HEAD + CHUNKED_BODY) is ParseResult.END
    assert parser.flags == F_TRANSFER_ENCODING
    assert parser.state is ParseState.BODY_DONE


def test_chunked_byte_by_byte():
    parser = HttpParser()
    assert parser.feed(CHUNKED_HEAD) is ParseResult.CONTINUE
    results = [parser.feed(bytes([b])) for b in CHUNKED_BODY]
    assert results[-1] is ParseResult.END
    assert all(r is ParseResult.CONTINUE for r in results[:-1])


def test_chunked_with_trailer():
    parser = HttpParser()
    body = b"3\r\nabc\r\n0\r\nX-Trailer: 1\r\n\r\n"
    assert parser.feed(CHUNKED_HEAD + body) is ParseResult.END


def test_chunk_data_without_crlf():
    with pytest.raises(ValueError):
        HttpParser().feed(CHUNKED_HEAD + b"3\r\nabcX\r\n")


def test_error_status_recorded():
    parser = HttpParser()
    parser.feed(b"HTTP/1.1 500 Internal Server Error\r\nContent-Length: 0\r\n\r\n")
    assert parser.response_class is HttpResult.ERROR


@pytest.mark.parametrize("size", [0, 70, 200])
def test_parses_generated_responses(size):
    parser = HttpParser()
    assert parser.feed(build_response(size, False).encode()) is ParseResult.END
    assert parser.keepalive is True