"""Tests for disk scheduling.

The textbook queue (head at 53 on a 200-cylinder disk) is the demo
workload, so its totals are pinned here.
"""

import pytest

from bank_os.disk import DiskScheduler, FCFSPolicy, SCANPolicy, SeekPlan
from bank_os.logging import Logger

_TEXTBOOK_REQUESTS = [98, 183, 37, 122, 14, 124, 65, 67]
_TEXTBOOK_HEAD = 53
_FCFS_TOTAL = 640
_SCAN_UP_TOTAL = 331
_SCAN_DOWN_TOTAL = 236
_LAST_CYLINDER = 199


class TestFCFS:
    """FCFS serves requests in arrival order."""

    def test_preserves_order(self) -> None:
        """Requests are served as submitted."""
        plan = FCFSPolicy().schedule(_TEXTBOOK_REQUESTS, head=_TEXTBOOK_HEAD)
        assert plan.order == _TEXTBOOK_REQUESTS
        assert plan.path == [_TEXTBOOK_HEAD, *_TEXTBOOK_REQUESTS]

    def test_total_seek(self) -> None:
        """The textbook FCFS total is 640 cylinders."""
        plan = FCFSPolicy().schedule(_TEXTBOOK_REQUESTS, head=_TEXTBOOK_HEAD)
        assert plan.total_seek == _FCFS_TOTAL
        assert plan.average_seek == pytest.approx(_FCFS_TOTAL / len(_TEXTBOOK_REQUESTS))

    def test_empty(self) -> None:
        """No requests means no movement and a zero average."""
        plan = FCFSPolicy().schedule([], head=10)
        assert plan == SeekPlan(head=10, order=[], path=[10], total_seek=0)
        assert plan.average_seek == pytest.approx(0.0)


class TestSCAN:
    """SCAN sweeps to the edge, then reverses."""

    def test_up_order(self) -> None:
        """Upward sweep serves higher cylinders first, then descends."""
        plan = SCANPolicy(disk_size=200).schedule(_TEXTBOOK_REQUESTS, head=_TEXTBOOK_HEAD)
        assert plan.order == [65, 67, 98, 122, 124, 183, 37, 14]

    def test_up_travels_to_edge(self) -> None:
        """The arm touches the last cylinder before turning."""
        plan = SCANPolicy(disk_size=200).schedule(_TEXTBOOK_REQUESTS, head=_TEXTBOOK_HEAD)
        assert _LAST_CYLINDER in plan.path
        assert plan.total_seek == _SCAN_UP_TOTAL

    def test_down_sweep(self) -> None:
        """Downward sweep runs to cylinder 0 before going up."""
        plan = SCANPolicy(direction="down", disk_size=200).schedule(
            _TEXTBOOK_REQUESTS, head=_TEXTBOOK_HEAD
        )
        assert plan.order == [37, 14, 65, 67, 98, 122, 124, 183]
        assert plan.path[3] == 0
        assert plan.total_seek == _SCAN_DOWN_TOTAL

    def test_edge_not_duplicated(self) -> None:
        """A request on the edge is not visited twice."""
        plan = SCANPolicy(disk_size=200).schedule([199, 10], head=100)
        assert plan.path == [100, 199, 10]

    def test_direction_defaults_up(self) -> None:
        """SCAN sweeps upward unless told otherwise."""
        assert SCANPolicy().direction == "up"
        assert SCANPolicy(direction="down").direction == "down"

    def test_unknown_direction(self) -> None:
        """Only up and down are valid."""
        with pytest.raises(ValueError, match="direction"):
            SCANPolicy(direction="sideways")


class TestDiskScheduler:
    """Verify the queue-and-run wrapper."""

    def test_run_moves_head_and_clears(self) -> None:
        """After a run the head rests on the last stop and the queue is empty."""
        scheduler = DiskScheduler(policy=FCFSPolicy(), logger=Logger(), head=_TEXTBOOK_HEAD)
        for cylinder in (10, 90):
            scheduler.add_request(cylinder)
        assert scheduler.pending == [10, 90]
        scheduler.run()
        assert scheduler.head == 90
        assert scheduler.pending == []

    def test_policy_swap(self) -> None:
        """The policy can be replaced between runs."""
        scheduler = DiskScheduler(policy=FCFSPolicy(), logger=Logger())
        scan = SCANPolicy()
        scheduler.policy = scan
        assert scheduler.policy is scan

    def test_negative_cylinder(self) -> None:
        """Cylinders are non-negative."""
        scheduler = DiskScheduler(policy=FCFSPolicy(), logger=Logger())
        with pytest.raises(ValueError, match="Cylinder"):
            scheduler.add_request(-1)

    def test_render(self) -> None:
        """The rendering shows the path and totals."""
        plan = FCFSPolicy().schedule([60], head=50)
        text = plan.render()
        assert "50 -> 60" in text
        assert "Total seek time: 10" in text
