import pytest

from pktperf.eth import (
    BROADCAST_MAC,
    ETH_HDR_LEN,
    ETHER_TYPE_ARP,
    EthAddr,
    EthHeader,
)

LLDP_DMAC = "01:80:c2:00:00:0e"


def test_parse_known_address():
    mac = EthAddr.parse(LLDP_DMAC)
    assert mac.octets == bytes([0x01, 0x80, 0xC2, 0x00, 0x00, 0x0E])


def test_str_uses_unpadded_hex():
    assert str(EthAddr.parse(LLDP_DMAC)) == "1:80:c2:0:0:e"


def test_str_parse_round_trip_for_full_octets():
    mac = EthAddr.parse("aa:bb:cc:dd:ee:ff")
    assert EthAddr.parse(str(mac)) == mac


@pytest.mark.parametrize(
    "text",
    ["", "01:80:c2:00:00", "01:80:c2:00:00:0g", "1:2:3:4:5:1234567", "01-80-c2-00-00-0e"],
)
def test_parse_rejects_bad_text(text):
    with pytest.raises(ValueError):
        EthAddr.parse(text)


def test_wrong_length_rejected():
    with pytest.raises(ValueError):
        EthAddr(b"\x00" * 5)


def test_is_zero():
    assert EthAddr().is_zero()
    assert not BROADCAST_MAC.is_zero()


def test_header_round_trip():
    header = EthHeader(BROADCAST_MAC, EthAddr.parse(LLDP_DMAC), ETHER_TYPE_ARP)
    data = header.pack()
    assert len(data) == ETH_HDR_LEN
    assert data[:6] == BROADCAST_MAC.octets
    assert EthHeader.unpack(data) == header


def test_header_type_is_big_endian():
    header = EthHeader(BROADCAST_MAC, EthAddr(), ETHER_TYPE_ARP)
    assert int.from_bytes(header.pack()[12:14], "big") == ETHER_TYPE_ARP


def test_unpack_short_data():
    with pytest.raises(ValueError):
        EthHeader.unpack(b"\x00" * (ETH_HDR_LEN - 1))


def test_swap():
    src = EthAddr.parse(LLDP_DMAC)
    header = EthHeader(BROADCAST_MAC, src, ETHER_TYPE_ARP)
    header.swap()
    assert header.dst == src
    assert header.src == BROADCAST_MAC