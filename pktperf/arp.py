"""ARP headers, gateway requests and replies."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from pktperf.eth import (
    BROADCAST_MAC,
    ETH_ADDR_LEN,
    ETH_HDR_LEN,
    ETHER_TYPE_ARP,
    ETHER_TYPE_IPV4,
    ZERO_MAC,
    EthAddr,
    EthHeader,
)
from pktperf.ip import IpAddr

ARP_HDR_LEN = 28
_ARP = struct.Struct("!HHBBH6s4s6s4s")


class ArpOp(enum.IntEnum):
    REQUEST = 1
    REPLY = 2


def _ipv4(raw: bytes) -> IpAddr:
    return IpAddr(bytes(12) + raw)


@dataclass
class ArpHeader:
    """An ARP header for Ethernet and IPv4."""

    op: int
    sha: EthAddr
    sip: IpAddr
    tha: EthAddr
    tip: IpAddr
    hrd: int = 0x0001
    pro: int = ETHER_TYPE_IPV4
    hln: int = ETH_ADDR_LEN
    pln: int = 4

    def pack(self) -> bytes:
        return _ARP.pack(
            self.hrd, self.pro, self.hln, self.pln, self.op,
            self.sha.octets, self.sip.packed[12:], self.tha.octets, self.tip.packed[12:],
        )

    @classmethod
    def unpack(cls, data: bytes) -> "ArpHeader":
        if len(data) < ARP_HDR_LEN:
            raise ValueError(f"ARP header needs {ARP_HDR_LEN} bytes, got {len(data)}")
        hrd, pro, hln, pln, op, sha, sip, tha, tip = _ARP.unpack_from(data)
        return cls(op, EthAddr(sha), _ipv4(sip), EthAddr(tha), _ipv4(tip), hrd, pro, hln, pln)


def build_request(smac: EthAddr, sip: IpAddr, dip: IpAddr) -> bytes:
    """A broadcast frame asking who has ``dip``, sent from ``sip``/``smac``."""
    eth = EthHeader(BROADCAST_MAC, smac, ETHER_TYPE_ARP)
    arp = ArpHeader(ArpOp.REQUEST, smac, sip, ZERO_MAC, dip)
    return eth.pack() + arp.pack()


def build_reply(request_frame: bytes, local_mac: EthAddr) -> bytes:
    """Turn a received ARP request frame into the reply for ``local_mac``."""
    eth = EthHeader.unpack(request_frame)
    if eth.type != ETHER_TYPE_ARP:
        raise ValueError(f"not an ARP frame: ether type {eth.type:#06x}")
    request = ArpHeader.unpack(request_frame[ETH_HDR_LEN:])
    if request.op != ArpOp.REQUEST:
        raise ValueError(f"not an ARP request: op {request.op}")

    dmac = eth.src
    reply_eth = EthHeader(dmac, local_mac, ETHER_TYPE_ARP)
    reply = ArpHeader(ArpOp.REPLY, local_mac, request.tip, dmac, request.sip)
    return reply_eth.pack() + reply.pack() + bytes(request_frame[ETH_HDR_LEN + ARP_HDR_LEN:])