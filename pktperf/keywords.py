"""Configuration file keywords and the handlers that fill in a Config."""

from __future__ import annotations

import re
import socket
import string
import warnings
from collections.abc import Callable

from pktperf.config_keyword import Keyword, parse_file
from pktperf.eth import EthAddr
from pktperf.ip import AF_INET, AF_INET6, IpAddr, IpRange
from pktperf.settings import (
    DEFAULT_LAUNCH,
    HTTP_HOST_DEFAULT,
    HTTP_HOST_MAX,
    HTTP_PATH_DEFAULT,
    HTTP_PATH_MAX,
    KEEPALIVE_REQ_NUM,
    KNI_NAMESIZE,
    NETWORK_PORT_NUM,
    PIPELINE_DEFAULT,
    PIPELINE_MAX,
    PIPELINE_MIN,
    RTE_ARG_LEN,
    SLOW_START_DEFAULT,
    SLOW_START_MAX,
    SLOW_START_MIN,
    VLAN_ID_MAX,
    VLAN_ID_MIN,
    WAIT_DEFAULT,
    Config,
    ConfigError,
    Port,
    Rss,
    Vxlan,
)

PCI_LEN = 12
PCI_NUM_MAX = 4
NETIF_PORT_MAX = 4
THREAD_NUM_MAX = 64
IP_RANGE_NUM_MAX = NETIF_PORT_MAX
VNI_MAX = 0xFFFFFF
TX_BURST_MAX = 1024
BONDING_MODE_ALB = 6
KNI_NAME_DEFAULT = "dperf"

_BOND_STR_BASE = 9
_BOND_STR_MIN = _BOND_STR_BASE + PCI_LEN
_BOND_STR_MAX = _BOND_STR_BASE + (PCI_LEN + 1) * PCI_NUM_MAX - 1

_INT = re.compile(r"\s*([+-]?\d+)")
_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_CPU_RANGE = re.compile(r"\s*([+-]?\d+)-\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _INT.match(text)
    return int(match.group(1)) if match else 0


def _atof(text: str) -> float:
    match = _FLOAT.match(text)
    return float(match.group(1)) if match else 0.0


def _find_nondigit(text: str, float_enable: bool) -> int | None:
    """Index of the first character that is not part of a number, if any.

    A second decimal point ends the scan as if the text were all digits.
    """
    points = 0
    for index, ch in enumerate(text):
        if ch.isdigit() and ch.isascii():
            continue
        if float_enable and ch == ".":
            points += 1
            if points > 1:
                return None
            continue
        return index
    return None


def parse_number(text: str, float_enable: bool = False, rate_enable: bool = False) -> int:
    """Parse a non-negative number, optionally fractional and with a k/m suffix."""
    rate = 1
    pos = _find_nondigit(text, float_enable)
    if pos is not None:
        if not rate_enable:
            raise ConfigError(f"bad number {text!r}")
        suffix = text[pos:]
        if len(suffix) != 1:
            raise ConfigError(f"bad number {text!r}")
        if suffix in "kK":
            rate = 1000
        elif suffix in "mM":
            rate = 1000000
        else:
            raise ConfigError(f"bad number {text!r}")
        if pos == 0:
            raise ConfigError(f"bad number {text!r}")

    if float_enable:
        value = int(_atof(text) * rate)
    else:
        value = _atoi(text) * rate
    if value < 0:
        raise ConfigError(f"bad number {text!r}")
    return value


def parse_bond(text: str) -> tuple[int, int, list[str]]:
    """Parse 'bondMODE:POLICY(PCI0,PCI1,...)' into (mode, policy, pci list)."""
    if not _BOND_STR_MIN <= len(text) <= _BOND_STR_MAX:
        raise ConfigError(f"bad bond {text!r}")
    pci_num = (len(text) - _BOND_STR_BASE + 1) // (PCI_LEN + 1)

    if not text.startswith("bond"):
        raise ConfigError(f"bad bond {text!r}")
    pos = 4
    ch = text[pos]
    if not "0" <= ch <= "9" or int(ch) > BONDING_MODE_ALB:
        raise ConfigError(f"bad bond mode in {text!r}")
    mode = int(ch)
    pos += 1
    if text[pos] != ":":
        raise ConfigError(f"bad bond {text!r}")
    pos += 1
    ch = text[pos]
    if not "0" <= ch <= "3":
        raise ConfigError(f"bad bond policy in {text!r}")
    policy = int(ch)
    pos += 1
    if text[pos] != "(":
        raise ConfigError(f"bad bond {text!r}")
    pos += 1

    pci_list = []
    for i in range(pci_num):
        pci_list.append(text[pos:pos + PCI_LEN])
        pos += PCI_LEN
        expected = "," if i < pci_num - 1 else ")"
        if text[pos:pos + 1] != expected:
            raise ConfigError(f"bad bond {text!r}")
        pos += 1

    if len(set(pci_list)) != len(pci_list):
        raise ConfigError("duplicate pci")
    return mode, policy, pci_list


def _argc(args: list[str], low: int, high: int | None = None) -> None:
    high = low if high is None else high
    if not low <= len(args) <= high:
        raise ConfigError(f"'{args[0]}' takes {low - 1}..{high - 1} arguments, got {len(args) - 1}")


def _set_af(cfg: Config, af: int) -> None:
    if af > 0 and cfg.af in (0, af):
        cfg.af = af
        cfg.ipv6 = af == AF_INET6
    else:
        raise ConfigError("mixed address families")


def _parse_ip_range(ip_text: str, num_text: str) -> IpRange:
    ip = IpAddr.parse(ip_text)
    if ip.low32 == 0:
        raise ConfigError(f"bad address {ip_text!r}")
    try:
        num = parse_number(num_text)
        return IpRange(ip, num)
    except ValueError as exc:
        raise ConfigError(f"bad ip range {ip_text} {num_text}") from exc


def _parse_daemon(args: list[str], cfg: Config) -> None:
    cfg.daemon = True


def _parse_keepalive_interval(cfg: Config, text: str) -> None:
    pos = _find_nondigit(text, False)
    if pos is None:
        raise ConfigError(f"keepalive interval needs a unit: {text!r}")
    unit = text[pos:]
    rates = {"us": 1, "ms": 1000, "s": 1000 * 1000}
    if unit not in rates:
        raise ConfigError(f"bad keepalive interval unit {unit!r}")
    rate = rates[unit]
    value = _atoi(text)
    if value < 0:
        raise ConfigError(f"bad keepalive interval {text!r}")

    if rate == 1:
        if value >= 10 and value % 10 != 0:
            raise ConfigError("keepalive request interval must be a multiple of 10us")
        if 1 < value < 10 and value % 2 != 0:
            raise ConfigError("keepalive request interval must be a multiple of 2us")
        if value >= 1000 and value % 1000 != 0:
            raise ConfigError(
                "microseconds can only be used if the interval is less than 1 millisecond"
            )
    cfg.keepalive_request_interval_us = value * rate


def _parse_keepalive(args: list[str], cfg: Config) -> None:
    _argc(args, 2, 3)
    if cfg.keepalive:
        raise ConfigError("duplicate 'keepalive'")
    _parse_keepalive_interval(cfg, args[1])
    if len(args) == 3:
        num = parse_number(args[2], True, True)
        if num > KEEPALIVE_REQ_NUM:
            raise ConfigError(f"keepalive request number above {KEEPALIVE_REQ_NUM}")
        cfg.keepalive_request_num = num
    if cfg.keepalive_request_interval_us == 0 and cfg.keepalive_request_num != 0:
        raise ConfigError("keepalive request number needs a positive interval")
    cfg.keepalive = True


def _parse_pipeline(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    value = _atoi(args[1])
    if not PIPELINE_MIN <= value <= PIPELINE_MAX:
        raise ConfigError(f"bad pipeline {args[1]!r}")
    cfg.pipeline = value


def _parse_mode(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    if args[1] == "client":
        cfg.server = False
    elif args[1] == "server":
        cfg.server = True
    else:
        raise ConfigError(f"unknown mode {args[1]}")


def _parse_cpu(args: list[str], cfg: Config) -> None:
    if len(args) <= 1:
        raise ConfigError("'cpu' needs arguments")
    cpus: list[int] = []
    for text in args[1:]:
        if "-" in text:
            match = _CPU_RANGE.match(text)
            if match is None:
                raise ConfigError(f"bad cpu number {text}")
            low, high = int(match.group(1)), int(match.group(2))
        else:
            try:
                low = high = parse_number(text)
            except ConfigError as exc:
                raise ConfigError(f"bad cpu number {text}") from exc
        if low < 0 or high < 0 or low > high:
            raise ConfigError(f"bad cpu number {text}")
        for cpu in range(low, high + 1):
            if len(cpus) + 1 > THREAD_NUM_MAX:
                raise ConfigError(f"too much cpu {len(cpus) + 1} > {THREAD_NUM_MAX}")
            cpus.append(cpu)
    if len(set(cpus)) != len(cpus):
        raise ConfigError("duplicate cpu")
    cfg.cpu = cpus


def _parse_socket_mem(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    if len(args[1]) >= RTE_ARG_LEN:
        raise ConfigError("socket_mem too long")
    cfg.socket_mem = args[1]


def _parse_port(args: list[str], cfg: Config) -> None:
    _argc(args, 4, 5)
    if len(cfg.ports) >= NETIF_PORT_MAX:
        raise ConfigError("too many ports")
    port = Port()
    name = args[1]
    if name.startswith("b"):
        try:
            port.bond_mode, port.bond_policy, port.pci_list = parse_bond(name)
        except ConfigError as exc:
            raise ConfigError(f'bad bond "{name}"') from exc
        port.bond = True
    elif len(name) == PCI_LEN:
        port.pci_list = [name]
    else:
        raise ConfigError(f"bad pci {name!r}")

    port.local_ip = IpAddr.parse(args[2])
    port.gateway_ip = IpAddr.parse(args[3])
    if port.local_ip.family != port.gateway_ip.family:
        raise ConfigError("local and gateway address families differ")
    port.ipv6 = port.local_ip.family == AF_INET6
    if len(args) == 5:
        port.gateway_mac = EthAddr.parse(args[4])
    if port.local_ip == port.gateway_ip:
        raise ConfigError("local address equals gateway address")

    port.bond_name = f"net_bonding{len(cfg.ports)}"
    port.id = -1
    cfg.ports.append(port)


def _parse_listen(args: list[str], cfg: Config) -> None:
    _argc(args, 3)
    try:
        listen = parse_number(args[1])
        listen_num = parse_number(args[2])
    except ConfigError as exc:
        raise ConfigError("bad listen") from exc
    if listen <= 0 or listen_num <= 0:
        raise ConfigError("bad listen")
    if listen + listen_num >= NETWORK_PORT_NUM - 1:
        raise ConfigError("listen ports out of range")
    cfg.listen = listen
    cfg.listen_num = listen_num


def _parse_ip_group(args: list[str], cfg: Config, group: list[IpRange]) -> None:
    if len(group) >= IP_RANGE_NUM_MAX:
        raise ConfigError("too many address ranges")
    _argc(args, 3)
    ip_range = _parse_ip_range(args[1], args[2])
    _set_af(cfg, ip_range.family)
    group.append(ip_range)


def _parse_client(args: list[str], cfg: Config) -> None:
    _parse_ip_group(args, cfg, cfg.client_ip_group)


def _parse_server(args: list[str], cfg: Config) -> None:
    _parse_ip_group(args, cfg, cfg.server_ip_group)


def _parse_change_dip(args: list[str], cfg: Config) -> None:
    _argc(args, 4)
    ip = IpAddr.parse(args[1])
    step = _atoi(args[2])
    if step <= 0:
        return
    num = _atoi(args[3])
    for _ in range(max(num, 0)):
        cfg.dip_list.add(ip.family, ip)
        ip = ip.increment(step)


def _parse_duration(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    rate = {"m": 60, "h": 60 * 60, "d": 60 * 60 * 24}.get(args[1][-1], 1)
    value = _atof(args[1])
    if value < 0:
        raise ConfigError(f"bad duration {args[1]!r}")
    duration = int(value * rate)
    if duration <= 0:
        raise ConfigError(f"bad duration {args[1]!r}")
    cfg.duration = duration


def _parse_cps(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    cfg.cps = parse_number(args[1], True, True)


def _parse_cc(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    cc = parse_number(args[1], True, True)
    if cc <= 0:
        raise ConfigError(f"bad cc {args[1]!r}")
    cfg.cc = cc


def _parse_flood(args: list[str], cfg: Config) -> None:
    _argc(args, 1)
    cfg.flood = True


def _parse_launch_num(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    cfg.launch_num = parse_number(args[1])


def _parse_tx_burst(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    try:
        value = parse_number(args[1])
    except ConfigError:
        value = -1
    if not 1 <= value <= TX_BURST_MAX:
        raise ConfigError(f"bad tx_burst {args[1]!r}")
    cfg.tx_burst = value


def _parse_slow_start(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    try:
        value = parse_number(args[1])
    except ConfigError:
        value = -1
    if not SLOW_START_MIN <= value <= SLOW_START_MAX:
        raise ConfigError(f"bad slow_start {args[1]!r}")
    cfg.slow_start = value


def _parse_wait(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    value = parse_number(args[1])
    if value <= 0:
        raise ConfigError(f"bad wait {args[1]!r}")
    cfg.wait = value


def _parse_payload_random(args: list[str], cfg: Config) -> None:
    _argc(args, 1)
    cfg.payload_random = True


def _parse_payload_size(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    size = parse_number(args[1], True, True)
    if size <= 0:
        raise ConfigError(f"bad payload_size {args[1]!r}")
    cfg.payload_size = size


def _parse_packet_size(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    cfg.packet_size = parse_number(args[1], True, True)


def _parse_mss(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    mss = parse_number(args[1])
    if mss <= 0:
        raise ConfigError(f"bad mss {args[1]!r}")
    cfg.mss = mss


def _parse_protocol(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    if args[1] == "tcp":
        cfg.protocol = socket.IPPROTO_TCP
    elif args[1] == "udp":
        cfg.protocol = socket.IPPROTO_UDP
    elif args[1] == "http":
        cfg.protocol = socket.IPPROTO_TCP
        cfg.http = True
    else:
        raise ConfigError(f"unknown protocol {args[1]!r}")


def _parse_vxlan(args: list[str], cfg: Config) -> None:
    _argc(args, 8)
    if len(cfg.vxlans) >= NETIF_PORT_MAX:
        raise ConfigError("too many vxlans")
    vni = _atoi(args[1])
    if not 0 < vni <= VNI_MAX:
        raise ConfigError(f"bad vni {args[1]}")
    inner_smac = EthAddr.parse(args[2])
    inner_dmac = EthAddr.parse(args[3])
    vtep_local = _parse_ip_range(args[4], args[5])
    if vtep_local.family != AF_INET:
        raise ConfigError("vtep addresses must be IPv4")
    vtep_remote = _parse_ip_range(args[6], args[7])
    if vtep_remote.family != AF_INET:
        raise ConfigError("vtep addresses must be IPv4")
    cfg.vxlans.append(Vxlan(vni, inner_smac, inner_dmac, vtep_local, vtep_remote))


def _parse_vlan(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    if cfg.vlan_id != 0:
        raise ConfigError("duplicate vlan")
    vlan_id = _atoi(args[1])
    if not VLAN_ID_MIN <= vlan_id <= VLAN_ID_MAX:
        raise ConfigError(f"bad vlan id {args[1]}")
    cfg.vlan_id = vlan_id


def _parse_hex(text: str, low: int, high: int) -> int | None:
    if len(text) > 2 and text[0] == "0" and text[1] in "xX":
        digits = text[2:]
        if not all(c in string.hexdigits for c in digits):
            return None
        value = int(digits, 16)
    else:
        value = _atoi(text)
    return value if low <= value <= high else None


def _parse_tos(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    if cfg.tos != 0:
        raise ConfigError("duplicate tos")
    tos = _parse_hex(args[1], 0, 0xFF)
    if tos is None:
        warnings.warn(f"invalid tos {args[1]}, using 0", stacklevel=2)
        tos = 0
    cfg.tos = tos


def _parse_kni(args: list[str], cfg: Config) -> None:
    if len(args) > 2:
        raise ConfigError("'kni' takes at most one argument")
    if cfg.kni:
        raise ConfigError("duplicate kni")
    ifname = args[1] if len(args) == 2 else KNI_NAME_DEFAULT
    if len(ifname) >= KNI_NAMESIZE:
        raise ConfigError("long kni name")
    if not (ifname[0].isascii() and ifname[0].isalpha()):
        raise ConfigError("invalid kni name")
    cfg.kni_ifname = ifname
    cfg.kni = True


def _parse_jumbo(args: list[str], cfg: Config) -> None:
    if len(args) > 1:
        raise ConfigError("'jumbo' takes no arguments")
    cfg.jumbo = True


_RSS_TYPES = {"l3": Rss.L3, "l3l4": Rss.L3L4, "auto": Rss.AUTO}


def _parse_rss(args: list[str], cfg: Config) -> None:
    _argc(args, 2, 3)
    if cfg.rss != Rss.NONE:
        raise ConfigError("duplicate rss")
    if args[1] not in _RSS_TYPES:
        raise ConfigError(f"unknown rss type '{args[1]}'")
    cfg.rss = _RSS_TYPES[args[1]]

    mq_rx_rss = True
    if len(args) == 3:
        option = args[2]
        if option == "mq_rx_rss":
            mq_rx_rss = True
        elif option == "mq_rx_none":
            if cfg.rss != Rss.AUTO:
                raise ConfigError(f"rss type '{args[1]}' does not support 'mq_rx_none'")
            mq_rx_rss = False
        elif cfg.rss == Rss.AUTO and option in ("l3", "l3l4"):
            cfg.rss_auto = _RSS_TYPES[option]
        else:
            raise ConfigError(f"unknown rss config '{option}'")
    cfg.mq_rx_rss = mq_rx_rss


def _parse_quiet(args: list[str], cfg: Config) -> None:
    if len(args) > 1:
        raise ConfigError("'quiet' takes no arguments")
    if cfg.quiet:
        raise ConfigError("duplicate quiet")
    cfg.quiet = True


def _parse_tcp_rst(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    value = _atoi(args[1])
    if value not in (0, 1):
        raise ConfigError(f"bad tcp_rst {args[1]!r}")
    cfg.tcp_rst = bool(value)


def _parse_http_host(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    if cfg.http_host:
        raise ConfigError("duplicate http_host")
    if len(args[1]) >= HTTP_HOST_MAX:
        raise ConfigError("http_host too long")
    cfg.http_host = args[1]


def _parse_http_path(args: list[str], cfg: Config) -> None:
    _argc(args, 2)
    if cfg.http_path:
        raise ConfigError("duplicate http_path")
    path = args[1]
    if len(path) >= HTTP_PATH_MAX:
        raise ConfigError("http_path too long")
    if not path.startswith("/"):
        raise ConfigError("http_path must start with '/'")
    cfg.http_path = path


def _parse_lport_range(args: list[str], cfg: Config) -> None:
    _argc(args, 2, 3)
    if cfg.lport_min != 0 or cfg.lport_max != 0:
        raise ConfigError("duplicate lport_range")
    lport_min = _atoi(args[1])
    lport_max = NETWORK_PORT_NUM - 1
    if not 0 < lport_min < NETWORK_PORT_NUM:
        raise ConfigError(f"bad port {args[1]!r}")
    if len(args) == 3:
        lport_max = _atoi(args[2])
        if not 0 < lport_max < NETWORK_PORT_NUM:
            raise ConfigError(f"bad port {args[2]!r}")
    if lport_min > lport_max:
        raise ConfigError("lport_range minimum above maximum")
    cfg.lport_min = lport_min
    cfg.lport_max = lport_max


def _parse_client_hop(args: list[str], cfg: Config) -> None:
    _argc(args, 1)
    cfg.client_hop = True


_TABLE: list[tuple[str, Callable[[list[str], Config], None], str]] = [
    ("daemon", _parse_daemon, ""),
    ("keepalive", _parse_keepalive,
     f"Interval(Timeout) [Number[0-{KEEPALIVE_REQ_NUM}]], eg 1ms/10us/1s"),
    ("pipeline", _parse_pipeline,
     f"Number[{PIPELINE_MIN}-{PIPELINE_MAX}], default {PIPELINE_DEFAULT}"),
    ("mode", _parse_mode, "client/server"),
    ("cpu", _parse_cpu, "n0 n1 n2-n3..., eg 0-4 7 8 9 10"),
    ("socket_mem", _parse_socket_mem, "n0,n1,n2..."),
    ("port", _parse_port,
     "PCI/bondMode:Policy(PCI0,PCI1,...) IPAddress Gateway [Gateway-Mac], "
     "eg 0000:13:00.0 192.168.1.3 192.168.1.1"),
    ("duration", _parse_duration, "Time, eg 1.5d, 2h, 3.5m, 100s, 100"),
    ("cps", _parse_cps, "Number, eg 1m, 1.5m, 2k, 100"),
    ("cc", _parse_cc, "Number, eg 100m, 1.5m, 2k, 100"),
    ("flood", _parse_flood, ""),
    ("launch_num", _parse_launch_num, f"Number, default {DEFAULT_LAUNCH}"),
    ("client", _parse_client, "IPAddress Number"),
    ("server", _parse_server, "IPAddress Number"),
    ("change_dip", _parse_change_dip, "IPAddress Step Number"),
    ("listen", _parse_listen, "Port Number, default 80 1"),
    ("payload_random", _parse_payload_random, ""),
    ("payload_size", _parse_payload_size, "Number"),
    ("packet_size", _parse_packet_size, "Number"),
    ("mss", _parse_mss, "Number, default 1460"),
    ("protocol", _parse_protocol, "http/tcp/udp, default tcp"),
    ("tx_burst", _parse_tx_burst, f"Number[1-{TX_BURST_MAX}]"),
    ("slow_start", _parse_slow_start,
     f"Number[{SLOW_START_MIN}-{SLOW_START_MAX}], default {SLOW_START_DEFAULT}"),
    ("wait", _parse_wait, f"Number, default {WAIT_DEFAULT}"),
    ("vxlan", _parse_vxlan, "vni inner-smac inner-dmac vtep-local num vtep-remote num"),
    ("vlan", _parse_vlan, f"vlanID[{VLAN_ID_MIN}-{VLAN_ID_MAX}]"),
    ("kni", _parse_kni, f"[ifName], default {KNI_NAME_DEFAULT}"),
    ("tos", _parse_tos, "Number[0x00-0xff], default 0, eg 0x01 or 1"),
    ("jumbo", _parse_jumbo, ""),
    ("rss", _parse_rss, "[l3/l3l4/auto [mq_rx_none|mq_rx_rss|l3|l3l4], default l3 mq_rx_rss"),
    ("quiet", _parse_quiet, ""),
    ("tcp_rst", _parse_tcp_rst, "Number[0-1], default 1"),
    ("http_host", _parse_http_host, f"String, default {HTTP_HOST_DEFAULT}"),
    ("http_path", _parse_http_path, f"String, default {HTTP_PATH_DEFAULT}"),
    ("lport_range", _parse_lport_range, "Number [Number], default 1 65535"),
    ("client_hop", _parse_client_hop, ""),
]


def keyword_table() -> list[Keyword]:
    """Every configuration keyword with its handler and manual text."""
    return [Keyword(name, handler, help_text) for name, handler, help_text in _TABLE]


def load_config_file(path: str, cfg: Config | None = None) -> Config:
    """Apply every line of the file at ``path`` to ``cfg`` (a new Config if None)."""
    if cfg is None:
        cfg = Config()
    parse_file(str(path), keyword_table(), cfg)
    return cfg