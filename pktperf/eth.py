"""Ethernet addresses and headers."""

from __future__ import annotations

import string
import struct
from dataclasses import dataclass

ETH_ADDR_LEN = 6
ETH_ADDR_STR_LEN = 17
ETH_HDR_LEN = 14

ETHER_TYPE_IPV4 = 0x0800
ETHER_TYPE_ARP = 0x0806
ETHER_TYPE_IPV6 = 0x86DD

_HEADER = struct.Struct("!6s6sH")


@dataclass(frozen=True)
class EthAddr:
    """A 6-byte MAC address."""

    octets: bytes = bytes(ETH_ADDR_LEN)

    def __post_init__(self) -> None:
        octets = bytes(self.octets)
        if len(octets) != ETH_ADDR_LEN:
            raise ValueError(f"a MAC address has {ETH_ADDR_LEN} bytes, got {len(octets)}")
        object.__setattr__(self, "octets", octets)

    @classmethod
    def parse(cls, text: str) -> "EthAddr":
        """Parse 'xx:xx:xx:xx:xx:xx' (exactly 17 characters)."""
        if len(text) != ETH_ADDR_STR_LEN:
            raise ValueError(f"bad MAC address {text!r}")
        parts = text.split(":")
        if len(parts) != ETH_ADDR_LEN:
            raise ValueError(f"bad MAC address {text!r}")
        values = []
        for part in parts:
            if not part or any(c not in string.hexdigits for c in part):
                raise ValueError(f"bad MAC address {text!r}")
            value = int(part, 16)
            if value > 0xFF:
                raise ValueError(f"bad MAC address {text!r}")
            values.append(value)
        return cls(bytes(values))

    def is_zero(self) -> bool:
        return not any(self.octets)

    def __str__(self) -> str:
        return ":".join(f"{b:x}" for b in self.octets)


ZERO_MAC = EthAddr()
BROADCAST_MAC = EthAddr(b"\xff" * ETH_ADDR_LEN)


@dataclass
class EthHeader:
    """An Ethernet II header."""

    dst: EthAddr
    src: EthAddr
    type: int

    def pack(self) -> bytes:
        return _HEADER.pack(self.dst.octets, self.src.octets, self.type)

    @classmethod
    def unpack(cls, data: bytes) -> "EthHeader":
        if len(data) < ETH_HDR_LEN:
            raise ValueError(f"ethernet header needs {ETH_HDR_LEN} bytes, got {len(data)}")
        dst, src, eth_type = _HEADER.unpack_from(data)
        return cls(EthAddr(dst), EthAddr(src), eth_type)

    def swap(self) -> None:
        """Exchange source and destination addresses in place."""
        self.dst, self.src = self.src, self.dst