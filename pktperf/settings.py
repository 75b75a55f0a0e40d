"""Run configuration: limits, defaults and the settings objects."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from pktperf.eth import EthAddr
from pktperf.ip import IpAddr, IpRange
from pktperf.ip_list import IpList

RTE_ARG_LEN = 64
CACHE_ALIGN_SIZE = 64
TCP_WIN = 1460 * 40
NETWORK_PORT_NUM = 65536

PACKET_SIZE_MAX = 1514
DEFAULT_CPS = 1000
DEFAULT_INTERVAL = 1
DEFAULT_DURATION = 60
DEFAULT_TTL = 64
ND_TTL = 255
DEFAULT_LAUNCH = 4
DELAY_SEC = 4
WAIT_DEFAULT = 3
SLOW_START_DEFAULT = 30
SLOW_START_MIN = 10
SLOW_START_MAX = 600
KEEPALIVE_REQ_NUM = 32767

ETHER_CRC_LEN = 4
JUMBO_FRAME_MAX_LEN = 0x2600
JUMBO_PKT_SIZE_MAX = JUMBO_FRAME_MAX_LEN - ETHER_CRC_LEN
JUMBO_MTU = JUMBO_PKT_SIZE_MAX - 14
JUMBO_MBUF_SIZE = 1024 * 11
MBUF_DATA_SIZE = 1024 * 10

MSS_IPV4 = PACKET_SIZE_MAX - 14 - 20 - 20
MSS_IPV6 = PACKET_SIZE_MAX - 14 - 40 - 20
MSS_JUMBO_IPV4 = JUMBO_PKT_SIZE_MAX - 14 - 20 - 20
MSS_JUMBO_IPV6 = JUMBO_PKT_SIZE_MAX - 14 - 40 - 20

DEFAULT_WSCALE = 13

LOG_DIR = "/var/log/dperf"

HTTP_HOST_MAX = 128
HTTP_PATH_MAX = 256
HTTP_HOST_DEFAULT = "dperf"
HTTP_PATH_DEFAULT = "/"

TCP_ACK_DELAY_MAX = 1024

KNI_NAMESIZE = 10

VLAN_ID_MIN = 1
VLAN_ID_MAX = 4094

PIPELINE_MIN = 0
PIPELINE_MAX = 100
PIPELINE_DEFAULT = 0


class ConfigError(ValueError):
    """A configuration value or combination is invalid."""


class Rss(enum.IntEnum):
    NONE = 0
    L3 = 1
    L3L4 = 2
    AUTO = 3


@dataclass
class Vxlan:
    vni: int
    inner_smac: EthAddr
    inner_dmac: EthAddr
    vtep_local: IpRange
    vtep_remote: IpRange


@dataclass
class Port:
    """A network port: one PCI device, or a bond of several."""

    pci_list: list[str] = field(default_factory=list)
    bond: bool = False
    bond_mode: int = 0
    bond_policy: int = 0
    bond_name: str = ""
    local_ip: IpAddr | None = None
    gateway_ip: IpAddr | None = None
    gateway_mac: EthAddr = field(default_factory=EthAddr)
    ipv6: bool = False
    id: int = -1
    queue_num: int = 0
    local_ip_range: IpRange | None = None
    client_ip_range: IpRange | None = None
    server_ip_range: IpRange | None = None
    vxlan: Vxlan | None = None

    @property
    def pci(self) -> str:
        return self.pci_list[0] if self.pci_list else ""

    @property
    def pci_num(self) -> int:
        return len(self.pci_list)


@dataclass
class Config:
    server: bool = False
    keepalive: bool = False
    ipv6: bool = False
    vxlan: bool = False
    kni: bool = False
    daemon: bool = False
    flood: bool = False
    jumbo: bool = False
    payload_random: bool = False
    client_hop: bool = False
    rss: Rss = Rss.NONE
    mq_rx_rss: bool = False
    rss_auto: Rss = Rss.NONE
    quiet: bool = False
    tcp_rst: bool = True
    http: bool = False
    stats_http: bool = False
    tos: int = 0
    pipeline: int = 0
    tx_burst: int = 0
    protocol: int = 0
    vlan_id: int = 0

    ticks_per_sec: int = 0

    lport_min: int = 0
    lport_max: int = 0

    kni_ifname: str = ""
    af: int = 0

    keepalive_request_interval_us: int = 0
    keepalive_request_interval: int = 0
    keepalive_request_num: int = 0

    http_host: str = ""
    http_path: str = ""

    payload_size: int = 0
    packet_size: int = 0
    mss: int = 0

    wait: int = 0
    slow_start: int = 0
    launch_num: int = 0
    duration: int = 0
    cps: int = 0
    cc: int = 0

    cpu: list[int] = field(default_factory=list)
    socket_mem: str = ""

    ports: list[Port] = field(default_factory=list)
    vxlans: list[Vxlan] = field(default_factory=list)

    listen: int = 0
    listen_num: int = 0

    client_ip_group: list[IpRange] = field(default_factory=list)
    server_ip_group: list[IpRange] = field(default_factory=list)
    dip_list: IpList = field(default_factory=IpList)

    @property
    def cpu_num(self) -> int:
        return len(self.cpu)

    def port_count(self) -> int:
        return len(self.ports)