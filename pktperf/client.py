"""Sharing client targets between workers and pacing connection launches."""

from __future__ import annotations

from dataclasses import dataclass

from pktperf.settings import Config


@dataclass
class ClientLaunch:
    """How often and how many connections one worker opens."""

    cc: int
    launch_num: int
    launch_interval: int
    launch_interval_default: int
    launch_next: int


def assign_task(worker_id: int, cpu_num: int, target: int) -> int:
    """This worker's share of ``target``; worker 0 takes the remainder."""
    if target <= cpu_num:
        return 1 if worker_id < target else 0
    val = int(float(target) / cpu_num)
    if worker_id == 0:
        val = target - val * (cpu_num - 1)
    return val


def client_launch(cfg: Config, worker_id: int, tsc_per_second: int, now: int) -> ClientLaunch | None:
    """Launch plan for a worker, or None when the worker has nothing to do."""
    cps = assign_task(worker_id, cfg.cpu_num, cfg.cps)
    cc = assign_task(worker_id, cfg.cpu_num, cfg.cc)
    if cps == 0:
        return None

    if cps <= cfg.launch_num:
        launch_num = cps
        interval = tsc_per_second
    else:
        launch_num = cfg.launch_num
        interval = tsc_per_second // (cps // launch_num)

    return ClientLaunch(
        cc=cc,
        launch_num=launch_num,
        launch_interval=interval,
        launch_interval_default=interval,
        launch_next=now + tsc_per_second * cfg.wait,
    )