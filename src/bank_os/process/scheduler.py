"""Round-robin CPU scheduler for transactions.

The scheduler takes an ordered batch of transactions, creates one
process per transaction, grants each a fixed time quantum on a
simulated clock, and runs it through the executor.  At the end it
reports a Gantt-style trace, the classic metrics (average waiting
time, average turnaround time, CPU utilization), and a snapshot of the
process table.

The model is one round with no requeueing: every transaction is assumed
to finish inside one quantum.  Execution is strictly sequential on the
caller's thread, so "time already elapsed" is well defined::

    time      0     2     4     6     8
              | P1  | P2  | P3  | P4  |
    waiting   0     2     4     6

With quantum Q and n processes, process k (0-based) starts at ``k*Q``,
waits ``k*Q``, and completes at ``(k+1)*Q``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from bank_os.config import DEFAULT_QUANTUM
from bank_os.logging import Logger, LogLevel
from bank_os.process.pcb import format_process_table

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bank_os.process.executor import Transaction, TransactionExecutor, TransactionResult
    from bank_os.process.pcb import ProcessControlBlock
    from bank_os.process.registry import ProcessRegistry

_SOURCE = "scheduler"


@dataclass(frozen=True)
class ScheduleEntry:
    """One row of the Gantt trace."""

    pid: int
    transaction_id: str
    start_time: int
    end_time: int
    waiting_time: int


@dataclass(frozen=True)
class SchedulingReport:
    """Everything a round-robin run produced.

    Metrics are zero when no processes were scheduled.

    Attributes:
        quantum: The time slice used.
        entries: The trace, in execution order.
        results: Each transaction's result, in execution order.
        average_waiting_time: Mean waiting time.
        average_turnaround_time: Mean completion time.
        cpu_utilization: Busy time over elapsed time, as a percentage.
        total_time: Simulated time when the last process completed.
        process_table: Snapshot of the whole process table afterwards.

    """

    quantum: int
    entries: tuple[ScheduleEntry, ...]
    results: tuple[TransactionResult, ...]
    average_waiting_time: float
    average_turnaround_time: float
    cpu_utilization: float
    total_time: int
    process_table: tuple[ProcessControlBlock, ...]

    @property
    def total_processes(self) -> int:
        """Return how many processes were scheduled."""
        return len(self.entries)

    def gantt(self) -> str:
        """Render the trace as a table."""
        lines = [
            f"Round Robin (quantum={self.quantum})",
            f"{'PID':>6}{'Transaction':>15}{'Start':>8}{'End':>8}{'Wait':>8}",
            "-" * 45,
        ]
        lines.extend(
            f"{e.pid:>6}{e.transaction_id:>15}{e.start_time:>8}{e.end_time:>8}{e.waiting_time:>8}"
            for e in self.entries
        )
        return "\n".join(lines)

    def summary(self) -> str:
        """Render the metrics block."""
        return "\n".join(
            [
                f"Total processes: {self.total_processes}",
                f"Average waiting time: {self.average_waiting_time:.2f} units",
                f"Average turnaround time: {self.average_turnaround_time:.2f} units",
                f"CPU utilization: {self.cpu_utilization:.2f}%",
                f"Total CPU time: {self.total_time} units",
            ]
        )

    def render(self) -> str:
        """Render trace, metrics, and process table together."""
        return "\n\n".join([self.gantt(), self.summary(), format_process_table(self.process_table)])


class RoundRobinScheduler:
    """Sequence transactions through processes with a fixed quantum."""

    def __init__(
        self,
        *,
        registry: ProcessRegistry,
        executor: TransactionExecutor,
        logger: Logger,
        quantum: int = DEFAULT_QUANTUM,
    ) -> None:
        """Create a scheduler.

        Args:
            registry: Process table to create PCBs in.
            executor: Runs each transaction.
            logger: Where dispatch decisions are recorded.
            quantum: Time slice per process (fixed for this instance).

        Raises:
            ValueError: If *quantum* is not positive.

        """
        if quantum <= 0:
            msg = f"Quantum must be positive, got {quantum}"
            raise ValueError(msg)
        self._registry = registry
        self._executor = executor
        self._logger = logger
        self._quantum = quantum

    @property
    def quantum(self) -> int:
        """Return the time quantum (time units per slice)."""
        return self._quantum

    def run(self, transactions: Sequence[Transaction]) -> SchedulingReport:
        """Schedule *transactions* in input order and report metrics.

        Args:
            transactions: The batch to run, in arrival order.

        Returns:
            The trace, metrics, and process table snapshot.

        """
        time = 0
        entries: list[ScheduleEntry] = []
        results: list[TransactionResult] = []
        total_waiting = 0
        total_turnaround = 0

        for transaction in transactions:
            pid = self._registry.create_process(transaction.transaction_id)
            start_time = time
            waiting_time = start_time
            entries.append(
                ScheduleEntry(
                    pid=pid,
                    transaction_id=transaction.transaction_id,
                    start_time=start_time,
                    end_time=start_time + self._quantum,
                    waiting_time=waiting_time,
                )
            )
            self._registry.set_waiting_time(pid, waiting_time)
            self._logger.log(
                LogLevel.INFO,
                f"Dispatch PID {pid} at t={start_time} (waited {waiting_time})",
                source=_SOURCE,
            )

            results.append(self._executor.execute(transaction, pid))

            time += self._quantum
            self._registry.set_turnaround_time(pid, time)
            total_waiting += waiting_time
            total_turnaround += time

        count = len(entries)
        if count:
            avg_waiting = total_waiting / count
            avg_turnaround = total_turnaround / count
            utilization = count * self._quantum / time * 100
        else:
            avg_waiting = avg_turnaround = utilization = 0.0

        self._logger.log(
            LogLevel.INFO,
            f"Scheduled {count} processes in {time} units "
            f"(avg wait {avg_waiting:.2f}, utilization {utilization:.2f}%)",
            source=_SOURCE,
        )
        return SchedulingReport(
            quantum=self._quantum,
            entries=tuple(entries),
            results=tuple(results),
            average_waiting_time=avg_waiting,
            average_turnaround_time=avg_turnaround,
            cpu_utilization=utilization,
            total_time=time,
            process_table=self._registry.list_processes(),
        )
