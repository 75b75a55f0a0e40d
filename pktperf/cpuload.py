"""Per-worker CPU usage measured in timestamp-counter ticks."""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass
class CpuLoad:
    """Accumulates working time; ``usage`` reports and resets it."""

    init_tsc: int = field(default_factory=time.perf_counter_ns)
    start_tsc: int = 0
    work_tsc: int = 0

    def add(self, now_tsc: int, work: bool) -> None:
        """Count the time since the last call as work if ``work`` is set."""
        if work:
            self.work_tsc += now_tsc - self.start_tsc
        self.start_tsc = now_tsc

    def usage(self, now_tsc: int) -> int:
        """Percentage of the period spent working, then start a new period."""
        total = now_tsc - self.init_tsc
        work = self.work_tsc
        if work <= total:
            work //= 128
            total //= 128
            result = (work * 100) // total if total else 0
        else:
            result = 100

        self.init_tsc = now_tsc
        self.start_tsc = now_tsc
        self.work_tsc = 0
        return result