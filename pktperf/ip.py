"""IP addresses held in a 16-byte form, and consecutive address ranges."""

from __future__ import annotations

import ipaddress
import socket
from collections.abc import Iterator
from dataclasses import dataclass, field

IP6_ADDR_SIZE = 16
AF_INET = socket.AF_INET
AF_INET6 = socket.AF_INET6

_LOW32_MASK = 0xFFFFFFFF


@dataclass(frozen=True)
class IpAddr:
    """An IPv4 or IPv6 address.

    IPv4 addresses occupy the low 32 bits of the 16 bytes, like IPv6 ones.
    Equality compares the 16 bytes only.
    """

    packed: bytes = bytes(IP6_ADDR_SIZE)
    family: int = field(default=AF_INET, compare=False)

    def __post_init__(self) -> None:
        packed = bytes(self.packed)
        if len(packed) != IP6_ADDR_SIZE:
            raise ValueError(f"an address holds {IP6_ADDR_SIZE} bytes, got {len(packed)}")
        object.__setattr__(self, "packed", packed)

    @classmethod
    def parse(cls, text: str) -> "IpAddr":
        """Parse an address; a ':' in the text means IPv6."""
        try:
            if ":" in text:
                if "%" in text:
                    raise ipaddress.AddressValueError(text)
                return cls(ipaddress.IPv6Address(text).packed, AF_INET6)
            return cls(bytes(12) + ipaddress.IPv4Address(text).packed, AF_INET)
        except ipaddress.AddressValueError as exc:
            raise ValueError(f"bad IP address {text!r}") from exc

    @classmethod
    def join(cls, prefix: "IpAddr", last: int) -> "IpAddr":
        """The prefix's upper 96 bits with ``last`` as the low 32 bits."""
        return cls(prefix.packed[:12] + (last & _LOW32_MASK).to_bytes(4, "big"), prefix.family)

    @property
    def low32(self) -> int:
        return int.from_bytes(self.packed[12:], "big")

    @property
    def last_byte(self) -> int:
        return self.packed[15]

    @property
    def is_ipv6(self) -> bool:
        return self.family == AF_INET6

    def increment(self, n: int) -> "IpAddr":
        """Add ``n`` to the low 32 bits, wrapping around."""
        return IpAddr.join(self, self.low32 + n)

    def __str__(self) -> str:
        if self.is_ipv6:
            return ipaddress.IPv6Address(self.packed).exploded
        return str(ipaddress.IPv4Address(self.packed[12:]))


@dataclass(frozen=True)
class IpRange:
    """``num`` consecutive addresses starting at ``start``."""

    start: IpAddr
    num: int

    def __post_init__(self) -> None:
        if self.num <= 0:
            raise ValueError(f"bad address count {self.num}")
        if self.start.low32 + self.num - 1 > _LOW32_MASK:
            raise ValueError("address range wraps around")

    @property
    def family(self) -> int:
        return self.start.family

    def get(self, index: int) -> IpAddr:
        if not 0 <= index < self.num:
            raise IndexError(f"index {index} out of range of {self.num} addresses")
        return self.start.increment(index)

    def __contains__(self, addr: object) -> bool:
        if not isinstance(addr, IpAddr):
            return False
        if addr.packed[:12] != self.start.packed[:12]:
            return False
        return 0 <= addr.low32 - self.start.low32 < self.num

    def __len__(self) -> int:
        return self.num

    def __iter__(self) -> Iterator[IpAddr]:
        return (self.start.increment(i) for i in range(self.num))