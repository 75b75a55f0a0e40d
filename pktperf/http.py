"""Fixed-size HTTP request and response payloads, and quick classification."""

from __future__ import annotations

import enum
import random
import string

from pktperf.settings import HTTP_HOST_DEFAULT, HTTP_PATH_DEFAULT, MBUF_DATA_SIZE

# The request and response templates below are both exactly this long.
HTTP_DATA_MIN_SIZE = 70

_REQUEST_FORMAT = (
    "GET {path} HTTP/1.1\r\n"
    "User-Agent: dperf\r\n"
    "Host: {host}\r\n"
    "Accept: */*\r\n"
    "P: aa\r\n"
    "\r\n"
)

_RESPONSE_FORMAT = (
    "HTTP/1.1 200 OK\n"
    "Serv:dperf\n"
    "Content-Length:{length:4d}\n"
    "Connection:keep-alive\n"
    "\n"
    "{body}"
)

_DEFAULT_BODY = "hello dperf!\r\n"


class HttpResult(enum.Enum):
    """What a quick look at a payload found."""

    GET = "get"
    SUCCESS = "2xx"
    ERROR = "error"


def _limit(text: str) -> str:
    return text[: MBUF_DATA_SIZE - 1]


def make_payload(length: int, new_line: bool = False, random_payload: bool = False) -> str:
    """``length`` lowercase letters ('a', or random ones); the last is a newline if asked."""
    if length < 0:
        raise ValueError(f"bad payload length {length}")
    if length == 0:
        return ""
    if random_payload:
        chars = random.choices(string.ascii_lowercase, k=length)
    else:
        chars = ["a"] * length
    if length > 1 and new_line:
        chars[-1] = "\n"
    return "".join(chars)


def build_request(
    path: str = HTTP_PATH_DEFAULT,
    host: str = HTTP_HOST_DEFAULT,
    payload_size: int = 0,
    random_payload: bool = False,
) -> str:
    """The client's request payload for a given payload size (0 means the plain request)."""
    if payload_size <= 0:
        return _limit(_REQUEST_FORMAT.format(path=path, host=host))
    if payload_size < HTTP_DATA_MIN_SIZE:
        return make_payload(payload_size, True, random_payload)

    pad = payload_size - HTTP_DATA_MIN_SIZE
    padded = make_payload(pad, False, random_payload) if pad > 0 else ""
    padded_path = "/" + padded[1:]
    return _limit(_REQUEST_FORMAT.format(path=padded_path, host=host))


def build_response(payload_size: int = 0, random_payload: bool = False) -> str:
    """The server's response payload for a given payload size (0 means the default body)."""
    if payload_size <= 0:
        body = _DEFAULT_BODY
        return _limit(_RESPONSE_FORMAT.format(length=len(body), body=body))
    if payload_size < HTTP_DATA_MIN_SIZE:
        return make_payload(payload_size, True, random_payload)

    pad = payload_size - HTTP_DATA_MIN_SIZE
    body = make_payload(pad, True, random_payload) if pad > 0 else ""
    return _limit(_RESPONSE_FORMAT.format(length=len(body), body=body))


def _as_bytes(data: bytes | str) -> bytes:
    return data.encode("latin-1") if isinstance(data, str) else bytes(data)


def classify_request(data: bytes | str) -> HttpResult:
    """GET when the payload looks like 'GET /xxx HTTP/1.1', ERROR otherwise."""
    raw = _as_bytes(data)
    if len(raw) > 18 and raw[0] == ord("G"):
        return HttpResult.GET
    return HttpResult.ERROR


def classify_response(data: bytes | str) -> HttpResult:
    """SUCCESS when the status code starts with '2', ERROR otherwise."""
    raw = _as_bytes(data)
    if len(raw) > 9 and raw[9] == ord("2"):
        return HttpResult.SUCCESS
    return HttpResult.ERROR