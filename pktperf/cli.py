"""Command line entry point: option handling and configuration loading."""

from __future__ import annotations

import enum
import socket
import sys
import warnings
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from pktperf.config_keyword import format_help
from pktperf.keywords import keyword_table, load_config_file
from pktperf.settings import Config
from pktperf.validate import check_config, port_for_thread, total_socket_num

VERSION = "1.6.0-dev"

HELP_TEXT = (
    "-h --help\n"
    "-v --version\n"
    "-t --test       Test configure file and exit\n"
    "-c --conf file  Run with conf file\n"
    "-m --manual     Show manual\n"
)

# long name -> (short letter, takes an argument)
_LONG_OPTIONS = {
    "help": ("h", False),
    "version": ("v", False),
    "test": ("t", False),
    "conf": ("c", True),
    "manual": ("m", False),
}
_SHORT_OPTIONS = {letter: needs for letter, needs in _LONG_OPTIONS.values()}


class UsageError(ValueError):
    """The command line could not be understood."""


class Action(enum.Enum):
    RUN = "run"
    HELP = "help"
    VERSION = "version"
    MANUAL = "manual"


_ACTIONS = {"h": Action.HELP, "v": Action.VERSION, "m": Action.MANUAL}


@dataclass
class Options:
    """What the command line asks for.

    ``conf_files`` holds the configuration files named before ``action``
    was chosen, in the order given.
    """

    action: Action = Action.RUN
    conf_files: list[str] = field(default_factory=list)
    test: bool = False


def _take_argument(name: str, rest: Iterator[str]) -> str:
    value = next(rest, None)
    if value is None:
        raise UsageError(f"option '{name}' requires an argument")
    return value


def _expand(arg: str, rest: Iterator[str]) -> Iterator[tuple[str, str | None]]:
    """Yield (letter, argument) pairs for one option word, long form first."""
    double = arg.startswith("--")
    body = arg[2:] if double else arg[1:]
    name, eq, value = body.partition("=")

    if name in _LONG_OPTIONS:
        matches = [name]
    else:
        matches = [long for long in _LONG_OPTIONS if name and long.startswith(name)]
    if len(matches) > 1:
        raise UsageError(f"option '{arg}' is ambiguous")
    if matches:
        long = matches[0]
        letter, needs = _LONG_OPTIONS[long]
        if needs:
            yield letter, value if eq else _take_argument(long, rest)
        elif eq:
            raise UsageError(f"option '{long}' doesn't allow an argument")
        else:
            yield letter, None
        return

    if double:
        raise UsageError(f"unrecognized option '{arg}'")

    for pos, ch in enumerate(body):
        if ch not in _SHORT_OPTIONS:
            raise UsageError(f"invalid option -- '{ch}'")
        if _SHORT_OPTIONS[ch]:
            yield ch, body[pos + 1:] or _take_argument(ch, rest)
            return
        yield ch, None


def parse_args(argv: Sequence[str]) -> Options:
    """Interpret the command-line arguments (without the program name)."""
    args = list(argv)
    if not args:
        raise UsageError("no arguments")

    opts = Options()
    rest = iter(args)
    for arg in rest:
        if arg == "--":
            break
        if not arg.startswith("-") or arg == "-":
            continue
        for letter, value in _expand(arg, rest):
            if letter == "c":
                opts.conf_files.append(value)
            elif letter == "t":
                opts.test = True
            else:
                opts.action = _ACTIONS[letter]
                return opts
    return opts


def _protocol_name(cfg: Config) -> str:
    if cfg.http:
        return "http"
    return "udp" if cfg.protocol == socket.IPPROTO_UDP else "tcp"


def _print_plan(cfg: Config) -> None:
    mode = "server" if cfg.server else "client"
    print(f"{mode} mode, {_protocol_name(cfg)}, {cfg.cpu_num} workers, duration {cfg.duration}s")
    for worker, cpu in enumerate(cfg.cpu):
        port, queue = port_for_thread(cfg, worker)
        name = port.bond_name if port.bond else port.pci_list[0]
        sockets = total_socket_num(cfg, worker)
        print(f"worker {worker}: cpu {cpu}, port {name}, queue {queue}, sockets {sockets}")


def main(argv: Sequence[str] | None = None) -> int:
    """Read and check the configuration, then report the per-worker plan."""
    if argv is None:
        argv = sys.argv[1:]

    try:
        opts = parse_args(argv)
    except UsageError as exc:
        if argv:
            print(f"Error: {exc}")
        else:
            print(HELP_TEXT, end="")
        return 1

    cfg = Config()
    for path in opts.conf_files:
        try:
            load_config_file(path, cfg)
        except ValueError as exc:
            print(exc)
            return 1

    if opts.action is Action.HELP:
        print(HELP_TEXT, end="")
        return 0
    if opts.action is Action.VERSION:
        print(VERSION)
        return 0
    if opts.action is Action.MANUAL:
        print(format_help(keyword_table()), end="")
        return 0

    if not opts.conf_files:
        print("No configuration file")
        return 1

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            check_config(cfg)
            failure = None
        except ValueError as exc:
            failure = exc
    for warning in caught:
        print(f"Warning: {warning.message}")
    if failure is not None:
        print(f"Error: {failure}")
        return 1

    if opts.test:
        print("Config file OK")
        return 0

    _print_plan(cfg)
    return 0