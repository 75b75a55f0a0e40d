import struct

import pytest

from pktperf.csum import (
    csum_update_u16,
    csum_update_u32,
    csum_update_u128,
    ipv4_header_checksum,
    pseudo_header_ipv4,
    pseudo_header_ipv6,
    raw_checksum,
    udptcp_checksum_ipv4,
    udptcp_checksum_ipv6,
    verify_packet,
)
from pktperf.ip import IpAddr

# Well-known worked example of an IPv4 header with checksum 0xb861.
SAMPLE_HEADER = bytes.fromhex("450000730000400040110000c0a80001c0a800c7")
ETH = bytes(12) + b"\x08\x00"
ETH6 = bytes(12) + b"\x86\xdd"


def _fold(value):
    while value >> 16:
        value = (value & 0xFFFF) + (value >> 16)
    return value


def _ipv4_udp(payload=b"hello"):
    udp_len = 8 + len(payload)
    ip = bytearray(struct.pack("!BBHHHBBH4s4s", 0x45, 0, 20 + udp_len, 0, 0x4000, 64, 17, 0,
                               bytes([10, 0, 0, 1]), bytes([10, 0, 0, 2])))
    udp = bytearray(struct.pack("!HHHH", 1234, 80, udp_len, 0)) + payload
    ip[10:12] = ipv4_header_checksum(ip).to_bytes(2, "big")
    udp[6:8] = udptcp_checksum_ipv4(ip, udp).to_bytes(2, "big")
    return bytes(ip), bytes(udp)


def _ipv4_tcp(payload=b"GET / HTTP/1.1\r\n"):
    tcp_len = 20 + len(payload)
    ip = bytearray(struct.pack("!BBHHHBBH4s4s", 0x45, 0, 20 + tcp_len, 0, 0x4000, 64, 6, 0,
                               bytes([10, 0, 0, 1]), bytes([10, 0, 0, 2])))
    tcp = bytearray(struct.pack("!HHIIBBHHH", 1234, 80, 1, 0, 0x50, 0x18, 512, 0, 0)) + payload
    ip[10:12] = ipv4_header_checksum(ip).to_bytes(2, "big")
    tcp[16:18] = udptcp_checksum_ipv4(ip, tcp).to_bytes(2, "big")
    return ETH + bytes(ip) + bytes(tcp)


def _ipv6_tcp(payload=b"data"):
    tcp_len = 20 + len(payload)
    src = IpAddr.parse("2001:db8::1").packed
    dst = IpAddr.parse("2001:db8::2").packed
    ip6 = struct.pack("!IHBB16s16s", 0x60000000, tcp_len, 6, 64, src, dst)
    tcp = bytearray(struct.pack("!HHIIBBHHH", 1234, 80, 1, 0, 0x50, 0x02, 512, 0, 0)) + payload
    tcp[16:18] = udptcp_checksum_ipv6(ip6, tcp).to_bytes(2, "big")
    return ETH6 + ip6 + bytes(tcp)


def test_ipv4_header_checksum_worked_example():
    assert ipv4_header_checksum(SAMPLE_HEADER) == 0xB861


def test_ipv4_header_checksum_ignores_stored_field():
    filled = bytearray(SAMPLE_HEADER)
    filled[10:12] = b"\x12\x34"
    assert ipv4_header_checksum(bytes(filled)) == ipv4_header_checksum(SAMPLE_HEADER)


def test_header_with_checksum_sums_to_all_ones():
    header = bytearray(SAMPLE_HEADER)
    header[10:12] = ipv4_header_checksum(header).to_bytes(2, "big")
    assert raw_checksum(header) == 0xFFFF


def test_raw_checksum_pads_odd_length():
    assert raw_checksum(b"\x12\x34\x56") == raw_checksum(b"\x12\x34\x56\x00")


def test_raw_checksum_empty():
    assert raw_checksum(b"") == 0


def test_incremental_update_matches_recompute():
    old = bytearray(SAMPLE_HEADER)
    old_csum = ipv4_header_checksum(old)
    new = bytearray(old)
    new[8] = 0x3F
    updated = csum_update_u16(old_csum, int.from_bytes(old[8:10], "big"), int.from_bytes(new[8:10], "big"))
    assert updated == ipv4_header_checksum(new)


def test_update_u16_same_value_keeps_checksum():
    assert csum_update_u16(0x1234, 0xABCD, 0xABCD) == 0x1234


def test_update_u32_symmetric_in_values():
    assert csum_update_u32(0x5555, 0x01020304, 0xA0B0C0D0) == csum_update_u32(0x5555, 0xA0B0C0D0, 0x01020304)


def test_update_u128_chains_u32():
    oval = [1, 2, 3, 4]
    nval = [0xFFFF0000, 7, 0x12345678, 9]
    expected = 0x4321
    for o, n in zip(oval, nval):
        expected = csum_update_u32(expected, o, n)
    assert csum_update_u128(0x4321, oval, nval) == expected


def test_update_u128_needs_four_words():
    with pytest.raises(ValueError):
        csum_update_u128(0, [1, 2, 3], [1, 2, 3, 4])


def test_pseudo_ipv4_symmetric_in_addresses():
    a = IpAddr.parse("192.168.1.3")
    b = IpAddr.parse("10.0.0.7")
    assert pseudo_header_ipv4(6, a, b, 40) == pseudo_header_ipv4(6, b, a, 40)


def test_pseudo_ipv6_symmetric_in_addresses():
    a = IpAddr.parse("2001:db8::1")
    b = IpAddr.parse("2001:db8::ff")
    assert pseudo_header_ipv6(17, a, b, 12) == pseudo_header_ipv6(17, b, a, 12)


def test_pseudo_ipv6_rejects_short_address():
    with pytest.raises(ValueError):
        pseudo_header_ipv6(6, b"\x00" * 4, b"\x00" * 16, 20)


def test_udp_checksum_with_pseudo_header_sums_to_all_ones():
    ip, udp = _ipv4_udp()
    phdr = pseudo_header_ipv4(17, int.from_bytes(ip[12:16], "big"), int.from_bytes(ip[16:20], "big"), len(udp))
    assert _fold(phdr + raw_checksum(udp)) == 0xFFFF


def test_verify_ipv4_udp():
    ip, udp = _ipv4_udp()
    assert verify_packet(ETH + ip + udp) is True


def test_verify_ipv4_tcp():
    assert verify_packet(_ipv4_tcp()) is True


def test_verify_ipv6_tcp():
    assert verify_packet(_ipv6_tcp()) is True


def test_verify_detects_bad_ip_checksum():
    frame = bytearray(_ipv4_tcp())
    frame[14 + 10] ^= 0xFF
    with pytest.raises(ValueError, match="IP"):
        verify_packet(bytes(frame))


def test_verify_detects_bad_tcp_checksum():
    frame = bytearray(_ipv4_tcp())
    frame[-1] ^= 0x01
    with pytest.raises(ValueError, match="TCP"):
        verify_packet(bytes(frame))


def test_verify_detects_bad_udp_checksum():
    ip, udp = _ipv4_udp()
    frame = bytearray(ETH + ip + udp)
    frame[-1] ^= 0x01
    with pytest.raises(ValueError, match="UDP"):
        verify_packet(bytes(frame))


def test_verify_detects_bad_ipv6_tcp_checksum():
    frame = bytearray(_ipv6_tcp())
    frame[-2] ^= 0x10
    with pytest.raises(ValueError, match="TCP"):
        verify_packet(bytes(frame))


def test_short_ipv4_header_rejected():
    with pytest.raises(ValueError):
        ipv4_header_checksum(SAMPLE_HEADER[:10])


def test_l4_shorter_than_total_length_rejected():
    ip, udp = _ipv4_udp()
    with pytest.raises(ValueError):
        udptcp_checksum_ipv4(ip, udp[:4])