"""Internet checksums: full computation, incremental updates and verification."""

from __future__ import annotations

import socket
from collections.abc import Sequence

from pktperf.eth import ETH_HDR_LEN
from pktperf.ip import IpAddr

IPV4_HDR_MIN_LEN = 20
IPV6_HDR_LEN = 40

_TCP_CSUM_OFFSET = 16
_UDP_CSUM_OFFSET = 6


def _fold(total: int) -> int:
    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)
    return total


def _low32(value: int | IpAddr) -> int:
    if isinstance(value, IpAddr):
        return value.low32
    return value & 0xFFFFFFFF


def _addr16(value: bytes | IpAddr) -> bytes:
    packed = value.packed if isinstance(value, IpAddr) else bytes(value)
    if len(packed) != 16:
        raise ValueError(f"an IPv6 address has 16 bytes, got {len(packed)}")
    return packed


def raw_checksum(data: bytes) -> int:
    """Folded one's complement sum of big-endian 16-bit words (not inverted)."""
    data = bytes(data)
    if len(data) % 2:
        data += b"\x00"
    return _fold((sum(data[0::2]) << 8) + sum(data[1::2]))


def csum_update_u16(ocsum: int, oval: int, nval: int) -> int:
    """Update a stored checksum after a 16-bit field changes from oval to nval."""
    csum = (~ocsum & 0xFFFF) + (~oval & 0xFFFF) + (nval & 0xFFFF)
    csum = (csum >> 16) + (csum & 0xFFFF)
    csum += csum >> 16
    return ~csum & 0xFFFF


def csum_update_u32(ocsum: int, oval: int, nval: int) -> int:
    """Fold the complements of both 32-bit values into ``ocsum``."""
    oval &= 0xFFFFFFFF
    nval &= 0xFFFFFFFF
    csum = (
        (~(oval >> 16) & 0xFFFF)
        + (~(oval & 0xFFFF) & 0xFFFF)
        + (~(nval >> 16) & 0xFFFF)
        + (~(nval & 0xFFFF) & 0xFFFF)
        + (ocsum & 0xFFFF)
    )
    csum = (csum & 0xFFFF) + (csum >> 16)
    csum = (csum & 0xFFFF) + (csum >> 16)
    return csum & 0xFFFF


def csum_update_u128(ocsum: int, oval: Sequence[int], nval: Sequence[int]) -> int:
    """Apply ``csum_update_u32`` to each of four 32-bit word pairs."""
    if len(oval) != 4 or len(nval) != 4:
        raise ValueError("a 128-bit value is four 32-bit words")
    csum = ocsum
    for old, new in zip(oval, nval):
        csum = csum_update_u32(csum, old, new)
    return csum


def pseudo_header_ipv4(proto: int, sip: int | IpAddr, dip: int | IpAddr, length: int) -> int:
    """Folded sum of the IPv4 pseudo header."""
    sip = _low32(sip)
    dip = _low32(dip)
    csum = (sip & 0xFFFF) + (sip >> 16)
    csum += (dip & 0xFFFF) + (dip >> 16)
    csum += proto & 0xFF
    csum += length & 0xFFFF
    csum = (csum & 0xFFFF) + (csum >> 16)
    csum = (csum & 0xFFFF) + (csum >> 16)
    return csum & 0xFFFF


def pseudo_header_ipv6(proto: int, saddr: bytes | IpAddr, daddr: bytes | IpAddr, length: int) -> int:
    """Folded sum of the IPv6 pseudo header."""
    header = _addr16(saddr) + _addr16(daddr) + bytes([0, proto & 0xFF]) + (length & 0xFFFF).to_bytes(2, "big")
    return raw_checksum(header)


def _ipv4_header_len(header: bytes) -> int:
    if len(header) < IPV4_HDR_MIN_LEN:
        raise ValueError(f"IPv4 header needs {IPV4_HDR_MIN_LEN} bytes, got {len(header)}")
    ihl = (header[0] & 0x0F) * 4
    if ihl < IPV4_HDR_MIN_LEN or len(header) < ihl:
        raise ValueError(f"bad IPv4 header length {ihl}")
    return ihl


def ipv4_header_checksum(header: bytes) -> int:
    """Checksum of an IPv4 header; its own checksum field counts as zero."""
    ihl = _ipv4_header_len(header)
    data = bytearray(header[:ihl])
    data[10:12] = b"\x00\x00"
    return ~raw_checksum(data) & 0xFFFF


def _finish(total: int) -> int:
    csum = ~_fold(total) & 0xFFFF
    return 0xFFFF if csum == 0 else csum


def udptcp_checksum_ipv4(ip_header: bytes, l4: bytes) -> int:
    """TCP/UDP checksum over ``l4`` as given; zero its checksum field first."""
    ihl = _ipv4_header_len(ip_header)
    total_length = int.from_bytes(ip_header[2:4], "big")
    l4_len = total_length - ihl
    if l4_len < 0 or len(l4) < l4_len:
        raise ValueError("layer 4 data shorter than the IP total length says")
    proto = ip_header[9]
    sip = int.from_bytes(ip_header[12:16], "big")
    dip = int.from_bytes(ip_header[16:20], "big")
    return _finish(raw_checksum(l4[:l4_len]) + pseudo_header_ipv4(proto, sip, dip, l4_len))


def udptcp_checksum_ipv6(ip6_header: bytes, l4: bytes) -> int:
    """TCP/UDP/ICMPv6 checksum over ``l4`` as given; zero its checksum field first."""
    if len(ip6_header) < IPV6_HDR_LEN:
        raise ValueError(f"IPv6 header needs {IPV6_HDR_LEN} bytes, got {len(ip6_header)}")
    l4_len = int.from_bytes(ip6_header[4:6], "big")
    if len(l4) < l4_len:
        raise ValueError("layer 4 data shorter than the IPv6 payload length says")
    proto = ip6_header[6]
    phdr = pseudo_header_ipv6(proto, ip6_header[8:24], ip6_header[24:40], l4_len)
    return _finish(raw_checksum(l4[:l4_len]) + phdr)


def _check_l4(ip: bytes, header_len: int, proto: int, compute) -> None:
    l4 = bytearray(ip[header_len:])
    if proto == socket.IPPROTO_TCP:
        offset, name = _TCP_CSUM_OFFSET, "TCP"
    else:
        offset, name = _UDP_CSUM_OFFSET, "UDP"
    if len(l4) < offset + 2:
        raise ValueError(f"{name} header truncated")
    stored = int.from_bytes(l4[offset:offset + 2], "big")
    l4[offset:offset + 2] = b"\x00\x00"
    if stored != compute(ip, bytes(l4)):
        raise ValueError(f"{name} checksum mismatch")


def verify_packet(frame: bytes) -> bool:
    """Check the IP and TCP/UDP checksums of an Ethernet frame.

    Returns True when they are right and raises ValueError otherwise.
    """
    ip = bytes(frame[ETH_HDR_LEN:])
    if not ip:
        raise ValueError("frame holds no IP packet")
    if ip[0] >> 4 == 4:
        ihl = _ipv4_header_len(ip)
        stored = int.from_bytes(ip[10:12], "big")
        if stored != ipv4_header_checksum(ip):
            raise ValueError("IP checksum mismatch")
        _check_l4(ip, ihl, ip[9], udptcp_checksum_ipv4)
    else:
        if len(ip) < IPV6_HDR_LEN:
            raise ValueError("IPv6 header truncated")
        _check_l4(ip, IPV6_HDR_LEN, ip[6], udptcp_checksum_ipv6)
    return True