"""Process registry - the process table.

The registry owns every PCB the simulator has created.  It hands out
PIDs, applies status and timing updates, and answers queries.  All of
that goes through one registry-wide lock, so PIDs come out strictly
increasing with no gaps or duplicates however many workers call
``create_process`` at once.

Lookups are a linear scan over the table.  That is deliberate for a
classroom-sized simulation and callers must not expect better than O(n).

Completed processes are never collected implicitly: they stay in the
table for reporting until someone calls ``clear``.  Clearing does not
reset the PID counter, so a PID is never handed out twice by the same
registry.
"""

from itertools import count
from threading import Lock

from bank_os.logging import Logger, LogLevel
from bank_os.process.pcb import DEFAULT_BURST_TIME, ProcessControlBlock, ProcessStatus

_SOURCE = "process-table"


class ProcessRegistry:
    """Thread-safe table of process control blocks."""

    def __init__(self, *, logger: Logger) -> None:
        """Create an empty process table.

        Args:
            logger: Where PID creation and state changes are announced.

        """
        self._logger = logger
        self._lock = Lock()
        self._next_pid = count(start=1)
        self._processes: list[ProcessControlBlock] = []

    def __len__(self) -> int:
        """Return the number of PCBs in the table."""
        with self._lock:
            return len(self._processes)

    def create_process(
        self,
        transaction_id: str,
        *,
        arrival_time: int = 0,
        burst_time: int = DEFAULT_BURST_TIME,
    ) -> int:
        """Allocate the next PID and admit a new process.

        The PCB is created in NEW and immediately promoted to READY.

        Args:
            transaction_id: Label of the transaction the process serves.
            arrival_time: Simulated arrival time.
            burst_time: Simulated CPU time the process needs.

        Returns:
            The new PID.

        """
        with self._lock:
            pcb = ProcessControlBlock(
                pid=next(self._next_pid),
                transaction_id=transaction_id,
                arrival_time=arrival_time,
                burst_time=burst_time,
            )
            pcb = pcb.with_status(ProcessStatus.READY)
            self._processes.append(pcb)
            self._logger.log(
                LogLevel.INFO,
                f"Created PID {pcb.pid} for transaction {transaction_id} ({pcb.status})",
                source=_SOURCE,
            )
            return pcb.pid

    def update_status(self, pid: int, new_status: ProcessStatus) -> None:
        """Move process *pid* to *new_status*.

        Unknown PIDs are ignored.

        Raises:
            ProcessStateError: If the transition is not allowed.

        """
        with self._lock:
            index = self._index_of(pid)
            if index is None:
                return
            self._processes[index] = self._processes[index].with_status(new_status)
            self._logger.log(LogLevel.INFO, f"PID {pid} status: {new_status}", source=_SOURCE)

    def set_waiting_time(self, pid: int, value: int) -> None:
        """Record the waiting time of process *pid*.

        Unknown PIDs are ignored.

        Raises:
            ValueError: If *value* is negative.

        """
        with self._lock:
            index = self._index_of(pid)
            if index is None:
                return
            self._processes[index] = self._processes[index].with_waiting_time(value)
            self._logger.log(LogLevel.DEBUG, f"PID {pid} waiting time: {value}", source=_SOURCE)

    def set_turnaround_time(self, pid: int, value: int) -> None:
        """Record the turnaround time of process *pid*.

        Unknown PIDs are ignored.

        Raises:
            ValueError: If *value* is negative.

        """
        with self._lock:
            index = self._index_of(pid)
            if index is None:
                return
            self._processes[index] = self._processes[index].with_turnaround_time(value)
            self._logger.log(
                LogLevel.DEBUG, f"PID {pid} turnaround time: {value}", source=_SOURCE
            )

    def get(self, pid: int) -> ProcessControlBlock | None:
        """Return the PCB for *pid*, or None if there is none."""
        with self._lock:
            index = self._index_of(pid)
            return None if index is None else self._processes[index]

    def list_processes(self) -> tuple[ProcessControlBlock, ...]:
        """Return a point-in-time snapshot of the whole table."""
        with self._lock:
            return tuple(self._processes)

    def clear(self) -> None:
        """Drop every PCB (the PID counter keeps counting)."""
        with self._lock:
            dropped = len(self._processes)
            self._processes.clear()
            self._logger.log(LogLevel.INFO, f"Cleared {dropped} processes", source=_SOURCE)

    def _index_of(self, pid: int) -> int | None:
        """Find *pid* in the table (caller holds the lock)."""
        for i, pcb in enumerate(self._processes):
            if pcb.pid == pid:
                return i
        return None
