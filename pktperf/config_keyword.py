"""Parser for configuration files made of ``keyword arg1 arg2 ...`` lines."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import IO, Any

CONFIG_ARG_NUM_MAX = 32
CONFIG_LINE_MAX = 2048

# Lines longer than this are read as several lines.
_PIECE_LEN = CONFIG_LINE_MAX - 2
_SPACE = " \t\n\v\f\r"

Handler = Callable[[list[str], Any], None]


@dataclass(frozen=True)
class Keyword:
    """A keyword, its handler and its one-line manual entry.

    The handler gets the whole line's words (the keyword first) and the
    data object, and raises ValueError on a bad line.
    """

    name: str
    handler: Handler | None = None
    help: str | None = None


class KeywordError(ValueError):
    """A configuration file could not be read or has a bad line."""

    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(message)
        self.line = line


def _check_input(line: str) -> None:
    for ch in line:
        if not (" " <= ch <= "~" or ch in _SPACE):
            raise KeywordError(f"invalid character {ch!r}")


def parse_line(line: str) -> list[str]:
    """The words of a line; empty for blank lines and comments."""
    _check_input(line)
    args = line.split()[:CONFIG_ARG_NUM_MAX]
    if args and args[0].startswith("#"):
        return []
    return args


def _pieces(fp: IO[str]) -> Iterator[str]:
    for raw in fp:
        while len(raw) > _PIECE_LEN:
            yield raw[:_PIECE_LEN]
            raw = raw[_PIECE_LEN:]
        yield raw


def _lookup(keywords: Iterable[Keyword], name: str) -> Keyword | None:
    return next((kw for kw in keywords if kw.name == name), None)


def parse_file(path: str, keywords: Sequence[Keyword], data: Any) -> None:
    """Read ``path`` and hand each line to its keyword's handler."""
    try:
        fp = open(path, encoding="latin-1", newline="\n")
    except OSError as exc:
        raise KeywordError(f"config file open error: {path}") from exc

    with fp:
        for line_num, piece in enumerate(_pieces(fp), start=1):
            try:
                args = parse_line(piece)
            except KeywordError as exc:
                raise KeywordError(f"line {line_num}: {exc}", line_num) from exc
            if not args:
                continue

            keyword = _lookup(keywords, args[0])
            if keyword is None:
                raise KeywordError(f'line {line_num}: unknown config keyword("{args[0]}")', line_num)
            if keyword.handler is None:
                continue
            try:
                keyword.handler(args, data)
            except ValueError as exc:
                raise KeywordError(f"line {line_num}: error: {exc}", line_num) from exc


def format_help(keywords: Iterable[Keyword]) -> str:
    """One manual line per keyword."""
    lines = [kw.name if kw.help is None else f"{kw.name} {kw.help}" for kw in keywords]
    return "".join(f"{line}\n" for line in lines)