"""Process Control Block (PCB) and the process state machine.

Every transaction the bank runs is wrapped in a simulated process.  The
PCB records its identity (PID and the transaction it serves), where it
is in its lifecycle, and its scheduling metrics.

PCBs are frozen dataclasses.  The registry never mutates a PCB in
place; it swaps in an updated copy under its lock.  That makes every
PCB handed out by the registry a point-in-time snapshot for free.

State machine::

    NEW → READY ⇄ RUNNING → COMPLETED
            ↑       ↓
            └── WAITING

WAITING is only entered when a caller explicitly asks for it.  The
transaction path never goes through it.
"""

from dataclasses import dataclass, replace
from enum import StrEnum

DEFAULT_BURST_TIME = 1


class ProcessStatus(StrEnum):
    """Lifecycle states of a simulated process.

    - NEW: just created, not yet admitted.
    - READY: admitted and waiting for the CPU.
    - RUNNING: its transaction is executing.
    - WAITING: blocked on an event (only on explicit request).
    - COMPLETED: its transaction has finished.
    """

    NEW = "new"
    READY = "ready"
    RUNNING = "running"
    WAITING = "waiting"
    COMPLETED = "completed"


# Source state → states it may move to.
_TRANSITIONS: dict[ProcessStatus, frozenset[ProcessStatus]] = {
    ProcessStatus.NEW: frozenset({ProcessStatus.READY}),
    ProcessStatus.READY: frozenset({ProcessStatus.RUNNING}),
    ProcessStatus.RUNNING: frozenset(
        {ProcessStatus.COMPLETED, ProcessStatus.WAITING, ProcessStatus.READY}
    ),
    ProcessStatus.WAITING: frozenset({ProcessStatus.READY}),
    ProcessStatus.COMPLETED: frozenset(),
}


class ProcessStateError(RuntimeError):
    """Raise when a PCB is asked to make an illegal status transition."""


def can_transition(current: ProcessStatus, target: ProcessStatus) -> bool:
    """Return True if a process may move from *current* to *target*."""
    return target in _TRANSITIONS[current]


@dataclass(frozen=True)
class ProcessControlBlock:
    """An immutable snapshot of one simulated process.

    Attributes:
        pid: Unique process identifier, assigned by the registry.
        transaction_id: Label of the transaction this process serves.
        status: Current lifecycle state.
        arrival_time: Simulated time the process arrived.
        burst_time: Simulated CPU time the process needs.
        waiting_time: Simulated time spent ready but not running.
        turnaround_time: Simulated time from arrival to completion.

    """

    pid: int
    transaction_id: str
    status: ProcessStatus = ProcessStatus.NEW
    arrival_time: int = 0
    burst_time: int = DEFAULT_BURST_TIME
    waiting_time: int = 0
    turnaround_time: int = 0

    def __post_init__(self) -> None:
        """Validate the numeric fields.

        Raises:
            ValueError: If the PID is not positive or a time is negative.

        """
        if self.pid <= 0:
            msg = f"PID must be positive, got {self.pid}"
            raise ValueError(msg)
        for name in ("arrival_time", "burst_time", "waiting_time", "turnaround_time"):
            value: int = getattr(self, name)
            if value < 0:
                msg = f"{name} must be non-negative, got {value} (pid {self.pid})"
                raise ValueError(msg)

    def with_status(self, target: ProcessStatus) -> "ProcessControlBlock":
        """Return a copy of this PCB moved to *target*.

        Raises:
            ProcessStateError: If the transition is not allowed.

        """
        if not can_transition(self.status, target):
            msg = f"Cannot move process {self.pid} from {self.status} to {target}"
            raise ProcessStateError(msg)
        return replace(self, status=target)

    def with_waiting_time(self, value: int) -> "ProcessControlBlock":
        """Return a copy of this PCB with a new waiting time."""
        return replace(self, waiting_time=value)

    def with_turnaround_time(self, value: int) -> "ProcessControlBlock":
        """Return a copy of this PCB with a new turnaround time."""
        return replace(self, turnaround_time=value)


def format_process_table(pcbs: tuple[ProcessControlBlock, ...] | list[ProcessControlBlock]) -> str:
    """Render PCBs as the classic process table."""
    lines = [
        f"{'PID':>6}{'Transaction':>15}{'Status':>12}{'Wait':>8}{'Turnaround':>12}",
        "-" * 53,
    ]
    lines.extend(
        f"{p.pid:>6}{p.transaction_id:>15}{p.status.upper():>12}"
        f"{p.waiting_time:>8}{p.turnaround_time:>12}"
        for p in pcbs
    )
    return "\n".join(lines)
