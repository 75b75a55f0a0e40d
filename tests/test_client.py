import pytest

from pktperf.client import assign_task, client_launch
from pktperf.settings import Config


@pytest.mark.parametrize("target,cpu_num", [(10, 3), (1000, 4), (7, 7), (2, 5), (0, 3), (65537, 6)])
def test_shares_sum_to_target(target, cpu_num):
    assert sum(assign_task(i, cpu_num, target) for i in range(cpu_num)) == target


def test_small_target_one_task_per_low_worker():
    shares = [assign_task(i, 4, 2) for i in range(4)]
    assert shares == [1, 1, 0, 0]


def test_worker_zero_takes_remainder():
    shares = [assign_task(i, 3, 10) for i in range(3)]
    assert shares[0] >= shares[1] == shares[2]


def test_idle_worker_has_no_launch():
    cfg = Config(cpu=[0, 1, 2], cps=1, launch_num=4, wait=3)
    assert client_launch(cfg, 2, 1000, 0) is None


def test_small_cps_launches_once_a_second():
    cfg = Config(cpu=[0], cps=3, cc=0, launch_num=4, wait=3)
    launch = client_launch(cfg, 0, 1000, 0)
    assert launch.launch_num == 3
    assert launch.launch_interval == 1000
    assert launch.launch_interval_default == launch.launch_interval


def test_large_cps_launches_several_times_a_second():
    cfg = Config(cpu=[0], cps=1000, cc=0, launch_num=4, wait=3)
    launch = client_launch(cfg, 0, 1_000_000, 0)
    assert launch.launch_num == 4
    assert launch.launch_interval == 4000


def test_first_launch_waits():
    cfg = Config(cpu=[0], cps=5, cc=0, launch_num=4, wait=3)
    launch = client_launch(cfg, 0, 10, 100)
    assert launch.launch_next == 130


def test_cc_shared_between_workers():
    cfg = Config(cpu=[0, 1], cps=100, cc=50, launch_num=4, wait=1)
    launches = [client_launch(cfg, i, 1000, 0) for i in range(2)]
    assert sum(launch.cc for launch in launches) == 50