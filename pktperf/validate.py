"""Checks and defaults applied to a Config once its file has been read."""

from __future__ import annotations

import os
import socket
import warnings

from pktperf.http import HTTP_DATA_MIN_SIZE
from pktperf.ip import AF_INET6, IpRange
from pktperf.settings import (
    DEFAULT_CPS,
    DEFAULT_DURATION,
    DEFAULT_LAUNCH,
    HTTP_HOST_DEFAULT,
    HTTP_PATH_DEFAULT,
    JUMBO_PKT_SIZE_MAX,
    LOG_DIR,
    MSS_IPV4,
    MSS_IPV6,
    MSS_JUMBO_IPV4,
    MSS_JUMBO_IPV6,
    NETWORK_PORT_NUM,
    PACKET_SIZE_MAX,
    SLOW_START_DEFAULT,
    WAIT_DEFAULT,
    Config,
    ConfigError,
    Port,
    Rss,
)

TX_BURST_DEFAULT = 8
RETRANSMIT_TIMEOUT_SEC = 8
TICKS_PER_SEC_DEFAULT = 1000

ETH_HDR_SIZE = 14
IPV4_HDR_SIZE = 20
IPV6_HDR_SIZE = 40
TCP_HDR_SIZE = 20
UDP_HDR_SIZE = 8
VXLAN_HDR_SIZE = 8
VXLAN_HEADERS_SIZE = ETH_HDR_SIZE + IPV4_HDR_SIZE + UDP_HDR_SIZE + VXLAN_HDR_SIZE


def _addresses(ip_range: IpRange) -> set[bytes]:
    return {addr.packed for addr in ip_range}


def _overlap(range0: IpRange, range1: IpRange) -> bool:
    return not _addresses(range0).isdisjoint(_addresses(range1))


def _check_mss(cfg: Config) -> None:
    if cfg.ipv6:
        mss_max = MSS_JUMBO_IPV6 if cfg.jumbo else MSS_IPV6
    else:
        mss_max = MSS_JUMBO_IPV4 if cfg.jumbo else MSS_IPV4
    if cfg.mss > mss_max:
        raise ConfigError(f"bad mss {cfg.mss}")
    if cfg.mss == 0:
        cfg.mss = mss_max


def _ticks_for_interval(interval_us: int) -> int:
    if interval_us == 1:
        return 1000 * 1000 * 2
    if interval_us == 2:
        return 1000 * 1000
    if interval_us < 10:
        return 1000 * 500
    if interval_us < 50:
        return 1000 * 100 * 2
    if interval_us < 100:
        return 1000 * 100
    if interval_us < 500:
        return 1000 * 10 * 2
    if interval_us < 1000:
        return 1000 * 10
    return TICKS_PER_SEC_DEFAULT


def _check_keepalive(cfg: Config) -> None:
    if cfg.server:
        cfg.keepalive_request_num = 0
        return
    if cfg.cc and not cfg.keepalive:
        raise ConfigError("'cc' requires 'keepalive'")
    if not cfg.keepalive:
        return
    if cfg.flood and cfg.keepalive_request_interval_us == 0:
        raise ConfigError("'flood' requires a positive keepalive request interval")
    cfg.ticks_per_sec = _ticks_for_interval(cfg.keepalive_request_interval_us)


def _check_pipeline(cfg: Config) -> None:
    if cfg.pipeline == 0:
        return
    if cfg.server:
        raise ConfigError("'pipeline' cannot set in server mode")
    if cfg.protocol == socket.IPPROTO_TCP:
        raise ConfigError("'pipeline' cannot support tcp")
    if not cfg.keepalive:
        raise ConfigError("'pipeline' requires 'keepalive'")
    if not cfg.flood and cfg.keepalive_request_interval_us:
        raise ConfigError("'pipeline' requires zero keepalive interval")


def _check_http(cfg: Config) -> None:
    custom = bool(cfg.http_host) or bool(cfg.http_path)
    if custom and (cfg.packet_size or cfg.payload_size):
        raise ConfigError("the HTTP host/path cannot be set with packet_size or payload_size")
    if custom and cfg.server:
        raise ConfigError("the HTTP host/path cannot be set in server mode")
    if custom and cfg.protocol == socket.IPPROTO_UDP:
        raise ConfigError("the HTTP host/path cannot be set in udp protocol")
    if not cfg.http_host:
        cfg.http_host = HTTP_HOST_DEFAULT
    if not cfg.http_path:
        cfg.http_path = HTTP_PATH_DEFAULT
    if cfg.http:
        cfg.stats_http = True


def _check_wait(cfg: Config) -> None:
    if cfg.server:
        if cfg.wait != 0:
            raise ConfigError("wait in server config")
        return
    if cfg.wait == 0:
        cfg.wait = WAIT_DEFAULT


def _check_slow_start(cfg: Config) -> None:
    if cfg.server:
        if cfg.slow_start != 0:
            raise ConfigError("slow_start in server config")
        return
    if cfg.slow_start == 0:
        cfg.slow_start = SLOW_START_DEFAULT


def _check_client_addr(cfg: Config) -> None:
    used: set[int] = set()
    for ip_range in cfg.client_ip_group:
        low = ip_range.start.low32 & 0xFFFF
        for i in range(ip_range.num):
            if low + i in used:
                raise ConfigError("duplicate client ip address's last 2 byte")
            used.add(low + i)


def _check_server_addr(cfg: Config) -> None:
    group = cfg.server_ip_group
    for i, range0 in enumerate(group):
        for j, range1 in enumerate(group):
            if i != j and _overlap(range0, range1):
                raise ConfigError("duplicate server ip address")


def _port_conflicts(cfg: Config, group: list[IpRange], local: bool) -> bool:
    for port in cfg.ports:
        addr = port.local_ip if local else port.gateway_ip
        if any(addr in ip_range for ip_range in group):
            return True
    return False


def _check_address_conflict(cfg: Config) -> None:
    clients = cfg.client_ip_group
    servers = cfg.server_ip_group
    for range0 in clients:
        for range1 in servers:
            if _overlap(range0, range1):
                raise ConfigError("client and server address conflict")

    if cfg.server:
        if _port_conflicts(cfg, clients, True):
            raise ConfigError("local ip conflict with client address")
        if _port_conflicts(cfg, servers, False):
            raise ConfigError("gateway ip conflict with server address")
    else:
        if _port_conflicts(cfg, servers, True):
            raise ConfigError("local ip conflict with server address")
        if _port_conflicts(cfg, clients, False):
            raise ConfigError("gateway ip conflict with client address")


def _check_local_addr(cfg: Config) -> None:
    locals_seen = [port.local_ip for port in cfg.ports]
    if len(set(locals_seen)) != len(locals_seen):
        raise ConfigError("duplicate port ip")


def _headers_size(cfg: Config) -> int:
    size = VXLAN_HEADERS_SIZE if cfg.vxlan else 0
    size += ETH_HDR_SIZE
    size += IPV6_HDR_SIZE if cfg.ipv6 else IPV4_HDR_SIZE
    size += TCP_HDR_SIZE if cfg.protocol == socket.IPPROTO_TCP else UDP_HDR_SIZE
    return size


def _check_size(cfg: Config) -> int:
    if cfg.packet_size and cfg.payload_size:
        raise ConfigError("both payload_size and packet_size are set")
    packet_size_max = JUMBO_PKT_SIZE_MAX if cfg.jumbo else PACKET_SIZE_MAX
    headers = _headers_size(cfg)
    tcp = cfg.protocol == socket.IPPROTO_TCP

    payload_size = 0
    if cfg.packet_size:
        if cfg.packet_size <= headers:
            raise ConfigError(f"small packet_size {cfg.packet_size}")
        if cfg.packet_size > packet_size_max:
            raise ConfigError(f"big packet_size {cfg.packet_size}")
        payload_size = cfg.packet_size - headers
    elif cfg.payload_size:
        if cfg.payload_size + headers > packet_size_max:
            raise ConfigError(f"big payload_size {cfg.payload_size}")
        if tcp and cfg.payload_size < HTTP_DATA_MIN_SIZE:
            payload_size = HTTP_DATA_MIN_SIZE
        else:
            payload_size = cfg.payload_size

    if tcp and (payload_size == 0 or payload_size >= HTTP_DATA_MIN_SIZE):
        cfg.stats_http = True
    return payload_size


def _queue_num(cfg: Config) -> int:
    return cfg.cpu_num // cfg.port_count()


def _check_port(cfg: Config) -> None:
    if cfg.cpu_num == 0:
        raise ConfigError("not found cpu")
    if cfg.port_count() == 0:
        raise ConfigError("no found port")
    if cfg.cpu_num % cfg.port_count():
        raise ConfigError(
            f"the number of CPUs({cfg.cpu_num}) is not a multiple of "
            f"the number of ports({cfg.port_count()})"
        )
    for i, port0 in enumerate(cfg.ports):
        for j, port1 in enumerate(cfg.ports):
            if i != j and set(port0.pci_list) & set(port1.pci_list):
                raise ConfigError("duplicate pci")
    for port in cfg.ports:
        port.queue_num = _queue_num(cfg)


def _check_vxlan(cfg: Config) -> None:
    if not cfg.vxlans:
        return
    if len(cfg.vxlans) != cfg.port_count():
        raise ConfigError("the number of 'vxlan' and 'port' are not equal")
    for port, vxlan in zip(cfg.ports, cfg.vxlans):
        if vxlan.vtep_local.num != port.queue_num:
            raise ConfigError("the number of vtep_local and queue_num are not equal")
        if vxlan.vtep_remote.num > 1 and vxlan.vtep_remote.num != port.queue_num:
            raise ConfigError("bad vtep_remote num")
        port.vxlan = vxlan
    cfg.vxlan = True


def _check_vlan(cfg: Config) -> None:
    if cfg.vlan_id == 0:
        return
    if cfg.vxlans:
        raise ConfigError("cannot enable vlan and vxlan at the same time")
    if any(port.bond for port in cfg.ports):
        raise ConfigError("cannot enable vlan and bond at the same time")


def _check_af(cfg: Config) -> None:
    for port in cfg.ports:
        if cfg.vxlan:
            if port.ipv6:
                raise ConfigError("underlay address not support IPv6")
        elif cfg.ipv6 != port.ipv6:
            raise ConfigError("bad port address")


def _check_rss(cfg: Config) -> None:
    if cfg.rss == Rss.NONE:
        return
    if cfg.cpu_num == cfg.port_count():
        warnings.warn("rss is disabled", stacklevel=3)
        cfg.rss = Rss.NONE
    if cfg.vxlan:
        raise ConfigError("rss is not supported for vxlan")
    if cfg.flood and cfg.rss in (Rss.AUTO, Rss.L3):
        raise ConfigError("'rss auto|l3' conflicts with 'flood'")
    if cfg.rss == Rss.AUTO and any(r.num != 1 for r in cfg.server_ip_group):
        raise ConfigError("rss 'auto' requires one server address")


def _set_port_ip_range(cfg: Config) -> None:
    ports = cfg.port_count()
    clients = cfg.client_ip_group
    servers = cfg.server_ip_group
    if ports == 0:
        raise ConfigError("no port")
    if not clients:
        raise ConfigError("no client_ip_range")
    if not servers:
        raise ConfigError("no server_ip_range")
    if ports != len(servers):
        raise ConfigError(f"port num ({ports}) != server_ip_range ({len(servers)})")
    if not cfg.server and len(clients) != ports:
        raise ConfigError(f"port num ({ports}) != client_ip_range ({len(clients)})")

    i = 0
    for port in cfg.ports:
        port.local_ip_range = servers[i] if cfg.server else clients[i]
        port.client_ip_range = clients[i] if i < len(clients) else None
        port.server_ip_range = servers[i]
        if port.queue_num != port.server_ip_range.num:
            if cfg.vxlan:
                raise ConfigError("'vxlan' requires cpu num to be equal to server ip num")
            if port.queue_num < port.server_ip_range.num:
                raise ConfigError("cpu num less than server ip num")
            if cfg.flood:
                if len(cfg.dip_list):
                    continue
                if cfg.rss != Rss.L3L4:
                    cfg.rss = Rss.L3L4
                    warnings.warn("'rss l3l4' is enabled", stacklevel=3)
            elif cfg.rss == Rss.NONE:
                raise ConfigError("'rss' is required if cpu num is not equal to server ip num")
        i += 1


def _check_change_dip(cfg: Config) -> None:
    dips = cfg.dip_list
    if len(dips) == 0:
        return
    if cfg.server:
        raise ConfigError("'change_dip' only support client mode")
    if not cfg.flood:
        raise ConfigError("'change_dip' only support flood mode")
    if cfg.vxlan:
        raise ConfigError("'change_dip' not support vxlan")
    if (dips.af == AF_INET6) != cfg.ipv6:
        raise ConfigError("bad ip address family of 'change_dip'")
    if len(dips) < cfg.cpu_num:
        raise ConfigError("number of 'change_dip' is less than cpu number")


def _check_logdir(cfg: Config) -> None:
    if cfg.daemon and not os.path.isdir(LOG_DIR):
        raise ConfigError(f"{LOG_DIR} not exist")


def _check_target(cfg: Config) -> None:
    if cfg.server:
        cfg.cc = 0
        cfg.cps = 0
        cfg.flood = False
    else:
        if cfg.cps == 0 and cfg.cc == 0:
            raise ConfigError("no targets")
        if cfg.cps == 0:
            cfg.cps = DEFAULT_CPS

    cps_cc = (cfg.cps // cfg.cpu_num) * RETRANSMIT_TIMEOUT_SEC
    cc = cfg.cc // cfg.cpu_num
    for worker in range(cfg.cpu_num):
        sockets = total_socket_num(cfg, worker)
        if sockets < cc:
            raise ConfigError(f"insufficient sockets. worker={worker} sockets={sockets} cc={cc}")
        if sockets < cps_cc:
            raise ConfigError(
                f"insufficient sockets. worker={worker} sockets={sockets} cps's cc={cps_cc}"
            )


def check_config(cfg: Config) -> int:
    """Fill in defaults and check a parsed Config; raise ConfigError when it is unusable.

    Returns the payload size that packets will carry (0 for the default HTTP payload).
    """
    if cfg.protocol == 0:
        cfg.protocol = socket.IPPROTO_TCP
    if cfg.duration == 0:
        cfg.duration = DEFAULT_DURATION
    _check_mss(cfg)
    if cfg.listen == 0 or cfg.listen_num == 0:
        cfg.listen = 80
        cfg.listen_num = 1
    _check_keepalive(cfg)
    _check_pipeline(cfg)
    _check_http(cfg)
    if cfg.launch_num == 0:
        cfg.launch_num = DEFAULT_LAUNCH
    _check_wait(cfg)
    _check_slow_start(cfg)
    _check_client_addr(cfg)
    _check_server_addr(cfg)
    _check_address_conflict(cfg)
    _check_local_addr(cfg)
    payload_size = _check_size(cfg)
    _check_port(cfg)
    _check_vxlan(cfg)
    _check_vlan(cfg)
    _check_af(cfg)
    _check_rss(cfg)
    _set_port_ip_range(cfg)
    _check_change_dip(cfg)
    if cfg.tx_burst == 0:
        cfg.tx_burst = TX_BURST_DEFAULT
    _check_logdir(cfg)
    _check_target(cfg)
    if cfg.lport_min == 0:
        cfg.lport_min = 1
    if cfg.lport_max == 0:
        cfg.lport_max = NETWORK_PORT_NUM - 1
    return payload_size


def port_for_thread(cfg: Config, thread_id: int) -> tuple[Port, int]:
    """The port a worker thread serves and its queue on that port."""
    queue_num = _queue_num(cfg)
    return cfg.ports[thread_id // queue_num], thread_id % queue_num


def _range_socket_num(cfg: Config, ip_range: IpRange) -> int:
    return ip_range.num * cfg.listen_num * (NETWORK_PORT_NUM - 1)


def total_socket_num(cfg: Config, thread_id: int) -> int:
    """How many sockets a worker thread can use."""
    port, _ = port_for_thread(cfg, thread_id)
    if cfg.server:
        total = sum(_range_socket_num(cfg, r) for r in cfg.client_ip_group)
    else:
        if port.client_ip_range is None:
            raise ConfigError("port has no client address range")
        total = _range_socket_num(cfg, port.client_ip_range)
    return total & 0xFFFFFFFF


def set_tsc(cfg: Config, hz: int) -> int:
    """Convert the keepalive interval to timestamp-counter ticks at ``hz``."""
    us = cfg.keepalive_request_interval_us
    if us % 1000 == 0:
        tsc = (us // 1000) * (hz // 1000)
    else:
        tsc = (us * (hz // 1000)) // 1000
    cfg.keepalive_request_interval = tsc
    return tsc