"""A list of addresses of one family, handed out round robin."""

from __future__ import annotations

from dataclasses import dataclass, field

from pktperf.ip import AF_INET, AF_INET6, IpAddr

IP_LIST_NUM_MAX = 65536


@dataclass
class IpList:
    af: int = 0
    addrs: list[IpAddr] = field(default_factory=list)
    _next: int = field(default=0, repr=False)

    def add(self, af: int, ip: IpAddr) -> None:
        if af not in (AF_INET, AF_INET6):
            raise ValueError(f"unsupported address family {af}")
        if len(self.addrs) >= IP_LIST_NUM_MAX:
            raise ValueError("address list is full")
        if not self.addrs:
            self.af = af
        elif self.af != af:
            raise ValueError("address family differs from the list's")
        self.addrs.append(ip)

    def split(self, start: int, step: int) -> "IpList":
        """Every ``step``-th address beginning at ``start``, as a new list."""
        if start < 0 or step <= 0:
            raise ValueError(f"bad split start={start} step={step}")
        return IpList(af=self.af, addrs=self.addrs[start::step])

    def next_address(self) -> IpAddr:
        if not self.addrs:
            raise IndexError("address list is empty")
        addr = self.addrs[self._next]
        self._next = (self._next + 1) % len(self.addrs)
        return addr

    def __len__(self) -> int:
        return len(self.addrs)