"""Incremental parsing of HTTP/1.1 responses to find where a message ends."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from pktperf.http import HttpResult, classify_response


class ParseState(enum.IntEnum):
    INIT = 0
    HEADER_BEGIN = 1
    HEADER_LINE_END = 2
    HEADER_DONE = 3
    CHUNK_SIZE = 4
    CHUNK_SIZE_END = 5
    CHUNK_DATA = 6
    CHUNK_DATA_END = 7
    CHUNK_TRAILER_BEGIN = 8
    CHUNK_TRAILER = 9
    CHUNK_END = 10
    BODY_DONE = 11
    ERROR = 12


class ParseResult(enum.IntEnum):
    CONTINUE = 0
    END = 1


F_CONTENT_LENGTH_AUTO = 0x1
F_CONTENT_LENGTH = 0x2
F_TRANSFER_ENCODING = 0x4
F_CLOSE = 0x8

_CONTENT_LENGTH = b"Content-Length:"
_TRANSFER_ENCODING = b"Transfer-Encoding:"
_CONNECTION = b"Connection:"
_KEEP_ALIVE_LEN = len(b"keep-alive")

_CR = 0x0D
_LF = 0x0A
_COLON = 0x3A
_NUMBER = re.compile(rb"[+-]?\d+")


def _atol(raw: bytes) -> int:
    match = _NUMBER.match(raw.lstrip(b" \t\n\v\f\r"))
    return int(match.group()) if match else 0


def _header_match(line: bytes, name_len: int, name: bytes, first: bytes, last: bytes) -> bool:
    """Identify a header by its name length and its first and last letters."""
    size = len(name)
    return name_len == size and line[0] in first and line[size - 2] in last


@dataclass
class HttpParser:
    """Follows one response across the pieces of data it arrives in."""

    keepalive: bool = True
    state: ParseState = ParseState.INIT
    flags: int = 0
    length: int = 0
    response_class: HttpResult | None = None

    def feed(self, data: bytes) -> ParseResult:
        """Consume the next piece; END once the whole response has been seen.

        Raises ValueError on a malformed response.
        """
        if self.state == ParseState.ERROR:
            raise ValueError("parser has already failed")
        try:
            return self._run(bytes(data))
        except ValueError:
            self.state = ParseState.ERROR
            raise

    def _run(self, data: bytes) -> ParseResult:
        if self.state == ParseState.INIT:
            self.response_class = classify_response(data)
            self.state = ParseState.HEADER_BEGIN

        if self.state < ParseState.HEADER_DONE:
            data = data[self._parse_headers(data):]

        return self._parse_body(data)

    def _parse_header_line(self, line: bytes, name_len: int, line_len: int) -> None:
        if _header_match(line, name_len, _CONTENT_LENGTH, b"Cc", b"hH"):
            content_length = _atol(line[len(_CONTENT_LENGTH):])
            if content_length < 0:
                raise ValueError(f"negative Content-Length {content_length}")
            if self.flags & F_TRANSFER_ENCODING:
                raise ValueError("Content-Length together with chunked Transfer-Encoding")
            self.length = content_length
            self.flags |= F_CONTENT_LENGTH
        elif _header_match(line, name_len, _TRANSFER_ENCODING, b"Tt", b"gG"):
            # 'k' only occurs in 'chunked' among the usual codings.
            if any(c in b"kK" for c in line[name_len:line_len]):
                if self.flags & F_CONTENT_LENGTH:
                    raise ValueError("chunked Transfer-Encoding together with Content-Length")
                self.flags |= F_TRANSFER_ENCODING
        elif _header_match(line, name_len, _CONNECTION, b"Cc", b"nN"):
            if line_len < name_len + _KEEP_ALIVE_LEN + 1:
                self.flags |= F_CLOSE
                self.keepalive = False

    def _parse_headers(self, data: bytes) -> int:
        """Parse header lines; return how many bytes were consumed."""
        start = 0
        line_len = 0
        name_len = 0
        pos = 0
        end = len(data)
        while pos < end:
            c = data[pos]
            pos += 1
            line_len += 1
            if c == _COLON and name_len == 0:
                name_len = line_len
            elif c == _CR:
                continue
            elif c == _LF:
                if self.state == ParseState.HEADER_BEGIN:
                    self._parse_header_line(data[start:start + line_len], name_len, line_len)
                    line_len = 0
                    name_len = 0
                    start = pos
                    self.state = ParseState.HEADER_LINE_END
                else:
                    self.state = ParseState.HEADER_DONE
                    if self.flags == 0:
                        self.flags = F_CONTENT_LENGTH_AUTO | F_CLOSE
                        self.length = -1
                        self.keepalive = False
                    break
            elif self.state != ParseState.HEADER_BEGIN:
                self.state = ParseState.HEADER_BEGIN
        return pos

    def _parse_body(self, data: bytes) -> ParseResult:
        if self.flags & F_CONTENT_LENGTH:
            if len(data) < self.length:
                self.length -= len(data)
                return ParseResult.CONTINUE
            if len(data) == self.length:
                self.length = 0
                self.state = ParseState.BODY_DONE
                return ParseResult.END
            raise ValueError("body longer than Content-Length")
        if self.flags & F_TRANSFER_ENCODING:
            return self._parse_chunk(data)
        return ParseResult.CONTINUE

    def _parse_chunk(self, data: bytes) -> ParseResult:
        pos = 0
        end = len(data)
        step = self.state
        if step == ParseState.HEADER_DONE:
            self.state = ParseState.CHUNK_SIZE
            step = ParseState.CHUNK_SIZE

        while True:
            if step == ParseState.CHUNK_SIZE:
                while pos < end:
                    c = data[pos]
                    pos += 1
                    if 0x30 <= c <= 0x39:
                        self.length = (self.length << 4) + c - 0x30
                    elif 0x61 <= c <= 0x66:
                        self.length = (self.length << 4) + c - 0x61 + 10
                    else:
                        self.state = ParseState.CHUNK_SIZE_END
                        break
                step = ParseState.CHUNK_SIZE_END
            elif step == ParseState.CHUNK_SIZE_END:
                step = ParseState.CHUNK_DATA
                while pos < end:
                    c = data[pos]
                    pos += 1
                    if c == _LF:
                        if self.length > 0:
                            self.state = ParseState.CHUNK_DATA
                        else:
                            self.state = ParseState.CHUNK_TRAILER_BEGIN
                            step = ParseState.CHUNK_TRAILER_BEGIN
                        break
            elif step == ParseState.CHUNK_DATA:
                if pos >= end:
                    return ParseResult.CONTINUE
                remaining = end - pos
                if self.length >= remaining:
                    self.length -= remaining
                    return ParseResult.CONTINUE
                pos += self.length
                self.length = 0
                c = data[pos]
                pos += 1
                if c != _CR:
                    raise ValueError("chunk data not followed by CRLF")
                self.state = ParseState.CHUNK_DATA_END
                step = ParseState.CHUNK_DATA_END
            elif step == ParseState.CHUNK_DATA_END:
                if pos >= end:
                    return ParseResult.CONTINUE
                c = data[pos]
                pos += 1
                if c != _LF:
                    raise ValueError("chunk data not followed by CRLF")
                self.state = ParseState.CHUNK_SIZE
                step = ParseState.CHUNK_SIZE
            elif step == ParseState.CHUNK_TRAILER_BEGIN:
                if pos >= end:
                    return ParseResult.CONTINUE
                c = data[pos]
                pos += 1
                if c == _CR:
                    self.state = ParseState.CHUNK_END
                    step = ParseState.CHUNK_END
                else:
                    self.state = ParseState.CHUNK_TRAILER
                    step = ParseState.CHUNK_TRAILER
            elif step == ParseState.CHUNK_TRAILER:
                while pos < end:
                    c = data[pos]
                    pos += 1
                    if c == _LF:
                        self.state = ParseState.CHUNK_TRAILER_BEGIN
                        step = ParseState.CHUNK_TRAILER_BEGIN
                        break
                else:
                    return ParseResult.CONTINUE
            elif step == ParseState.CHUNK_END:
                if pos >= end:
                    return ParseResult.CONTINUE
                c = data[pos]
                pos += 1
                if c != _LF:
                    raise ValueError("chunked body not terminated by CRLF")
                self.state = ParseState.BODY_DONE
                return ParseResult.END
            else:
                raise ValueError(f"unexpected parser state {step.name}")