"""Disk scheduling demo - ordering I/O requests to cut seek time.

When several transactions need disk blocks, the arm must travel between
cylinders to serve them, and that travel (**seek time**) dominates the
cost.  The order requests are served in decides how far the arm moves.

Think of the arm like an elevator:
    - **FCFS** - stop at every floor in the order buttons were pressed.
    - **SCAN** - ride all the way up to the top floor, then come down.

Both policies implement the ``DiskPolicy`` protocol (Strategy pattern)
and produce a ``SeekPlan``: the service order, the full path the arm
follows, and the total and average seek distance.

Our SCAN always runs to the edge of the disk in its sweep direction
before reversing, so the trip to the edge counts toward the total even
when no request lies there.
"""

from dataclasses import dataclass
from typing import Protocol

from bank_os.config import DEFAULT_DISK_SIZE, DEFAULT_INITIAL_HEAD
from bank_os.logging import Logger, LogLevel

_SOURCE = "disk"


@dataclass(frozen=True)
class SeekPlan:
    """The result of scheduling a batch of requests.

    Attributes:
        head: Cylinder the arm started from.
        order: Requests in the order they are serviced.
        path: Every cylinder the arm stops at, starting with *head*.
        total_seek: Total cylinders travelled.

    """

    head: int
    order: list[int]
    path: list[int]
    total_seek: int

    @property
    def average_seek(self) -> float:
        """Return mean seek distance per request (0.0 for no requests)."""
        if not self.order:
            return 0.0
        return self.total_seek / len(self.order)

    def render(self) -> str:
        """Render the arm movement and totals."""
        lines = [
            f"Seek sequence: {' -> '.join(str(c) for c in self.path)}",
            f"Total seek time: {self.total_seek}",
            f"Average seek time: {self.average_seek:.2f}",
        ]
        return "\n".join(lines)


def _plan(head: int, order: list[int], path: list[int]) -> SeekPlan:
    total = sum(abs(b - a) for a, b in zip(path, path[1:], strict=False))
    return SeekPlan(head=head, order=order, path=path, total_seek=total)


class DiskPolicy(Protocol):
    """Protocol for disk scheduling policies (Strategy pattern)."""

    def schedule(self, requests: list[int], *, head: int) -> SeekPlan:
        """Plan the service of *requests* with the arm at *head*."""
        ...  # pragma: no cover


class FCFSPolicy:
    """First Come, First Served - service in arrival order.

    Fair (no starvation), but the arm zigzags across the disk.
    """

    def schedule(self, requests: list[int], *, head: int) -> SeekPlan:
        """Serve requests exactly as submitted."""
        order = list(requests)
        return _plan(head, order, [head, *order])


class SCANPolicy:
    """SCAN (elevator) - sweep to the edge, then reverse.

    Args:
        direction: Initial sweep direction ("up" or "down").
        disk_size: Number of cylinders; the edges are 0 and size - 1.

    """

    def __init__(self, *, direction: str = "up", disk_size: int = DEFAULT_DISK_SIZE) -> None:
        """Create a SCAN policy.

        Raises:
            ValueError: If *direction* is unknown or *disk_size* not positive.

        """
        if direction not in ("up", "down"):
            msg = f"Unknown sweep direction: {direction!r}"
            raise ValueError(msg)
        if disk_size <= 0:
            msg = f"Disk size must be positive, got {disk_size}"
            raise ValueError(msg)
        self._direction = direction
        self._disk_size = disk_size

    @property
    def direction(self) -> str:
        """Return the initial sweep direction."""
        return self._direction

    def schedule(self, requests: list[int], *, head: int) -> SeekPlan:
        """Serve requests in elevator order."""
        if not requests:
            return _plan(head, [], [head])

        if self._direction == "up":
            first = sorted(r for r in requests if r >= head)
            second = sorted((r for r in requests if r < head), reverse=True)
            edge = self._disk_size - 1
        else:
            first = sorted((r for r in requests if r <= head), reverse=True)
            second = sorted(r for r in requests if r > head)
            edge = 0

        path = [head, *first]
        if path[-1] != edge:
            path.append(edge)
        path.extend(second)
        return _plan(head, first + second, path)


class DiskScheduler:
    """Ties a disk policy to a request queue and tracks the arm."""

    def __init__(
        self,
        *,
        policy: DiskPolicy,
        logger: Logger,
        head: int = DEFAULT_INITIAL_HEAD,
    ) -> None:
        """Create a disk scheduler.

        Raises:
            ValueError: If *head* is negative.

        """
        if head < 0:
            msg = f"Head position must be non-negative, got {head}"
            raise ValueError(msg)
        self._policy = policy
        self._logger = logger
        self._head = head
        self._queue: list[int] = []

    @property
    def head(self) -> int:
        """Return current head position."""
        return self._head

    @property
    def policy(self) -> DiskPolicy:
        """Return the current scheduling policy."""
        return self._policy

    @policy.setter
    def policy(self, value: DiskPolicy) -> None:
        """Swap the scheduling policy (Strategy pattern)."""
        self._policy = value

    @property
    def pending(self) -> list[int]:
        """Return the current request queue."""
        return list(self._queue)

    def add_request(self, cylinder: int) -> None:
        """Queue an I/O request for *cylinder*.

        Raises:
            ValueError: If *cylinder* is negative.

        """
        if cylinder < 0:
            msg = f"Cylinder must be non-negative, got {cylinder}"
            raise ValueError(msg)
        self._queue.append(cylinder)

    def run(self) -> SeekPlan:
        """Serve every queued request and move the head.

        The head ends on the last cylinder of the path.  The queue is
        cleared.
        """
        plan = self._policy.schedule(self._queue, head=self._head)
        self._head = plan.path[-1]
        self._queue.clear()
        self._logger.log(
            LogLevel.INFO,
            f"{type(self._policy).__name__}: served {len(plan.order)} requests, "
            f"total seek {plan.total_seek}",
            source=_SOURCE,
        )
        return plan
