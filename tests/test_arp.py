import pytest

from pktperf.arp import ARP_HDR_LEN, ArpHeader, ArpOp, build_reply, build_request
from pktperf.eth import BROADCAST_MAC, ETHER_TYPE_ARP, EthAddr, EthHeader
from pktperf.ip import IpAddr

CLIENT_MAC = EthAddr.parse("02:00:00:00:00:01")
GATEWAY_MAC = EthAddr.parse("02:00:00:00:00:02")
CLIENT_IP = IpAddr.parse("192.168.1.3")
GATEWAY_IP = IpAddr.parse("192.168.1.1")


def test_request_frame_layout():
    frame = build_request(CLIENT_MAC, CLIENT_IP, GATEWAY_IP)
    assert len(frame) == 14 + ARP_HDR_LEN
    assert frame[14:22] == b"\x00\x01\x08\x00\x06\x04\x00\x01"


def test_request_ethernet_header():
    eth = EthHeader.unpack(build_request(CLIENT_MAC, CLIENT_IP, GATEWAY_IP))
    assert eth.dst == BROADCAST_MAC
    assert eth.src == CLIENT_MAC
    assert eth.type == ETHER_TYPE_ARP


def test_request_arp_fields():
    arp = ArpHeader.unpack(build_request(CLIENT_MAC, CLIENT_IP, GATEWAY_IP)[14:])
    assert arp.op == ArpOp.REQUEST
    assert arp.sha == CLIENT_MAC
    assert arp.sip == CLIENT_IP
    assert arp.tip == GATEWAY_IP
    assert arp.tha.is_zero()


def test_header_round_trip():
    header = ArpHeader(ArpOp.REPLY, GATEWAY_MAC, GATEWAY_IP, CLIENT_MAC, CLIENT_IP)
    assert ArpHeader.unpack(header.pack()) == header


def test_unpack_short_raises():
    with pytest.raises(ValueError):
        ArpHeader.unpack(b"\x00" * 10)


def test_reply_swaps_roles():
    request = build_request(CLIENT_MAC, CLIENT_IP, GATEWAY_IP)
    reply = build_reply(request, GATEWAY_MAC)
    eth = EthHeader.unpack(reply)
    arp = ArpHeader.unpack(reply[14:])
    assert eth.dst == CLIENT_MAC
    assert eth.src == GATEWAY_MAC
    assert arp.op == ArpOp.REPLY
    assert arp.sip == GATEWAY_IP
    assert arp.tip == CLIENT_IP
    assert arp.sha == GATEWAY_MAC
    assert arp.tha == CLIENT_MAC


def test_reply_keeps_padding():
    request = build_request(CLIENT_MAC, CLIENT_IP, GATEWAY_IP) + b"\x00" * 18
    reply = build_reply(request, GATEWAY_MAC)
    assert len(reply) == len(request)


def test_reply_to_reply_rejected():
    request = build_request(CLIENT_MAC, CLIENT_IP, GATEWAY_IP)
    reply = build_reply(request, GATEWAY_MAC)
    with pytest.raises(ValueError):
        build_reply(reply, CLIENT_MAC)


def test_reply_to_non_arp_rejected():
    frame = EthHeader(BROADCAST_MAC, CLIENT_MAC, 0x0800).pack() + bytes(ARP_HDR_LEN)
    with pytest.raises(ValueError):
        build_reply(frame, GATEWAY_MAC)