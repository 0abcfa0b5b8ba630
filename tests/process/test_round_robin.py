"""Tests for the round-robin transaction scheduler.

One round, fixed quantum, strict input order: process k (0-based)
starts and waits ``k * Q`` and completes at ``(k + 1) * Q``.
"""

import pytest

from bank_os.ledger import AccountManager
from bank_os.logging import Logger
from bank_os.process.executor import Transaction, TransactionExecutor, TransactionOutcome
from bank_os.process.pcb import ProcessStatus
from bank_os.process.registry import ProcessRegistry
from bank_os.process.scheduler import RoundRobinScheduler, ScheduleEntry

DEFAULT_QUANTUM = 2
_FOUR_WAITS = [0, 2, 4, 6]
_FOUR_TOTAL = 8


def _scheduler(quantum: int = DEFAULT_QUANTUM) -> tuple[RoundRobinScheduler, ProcessRegistry]:
    """Return a scheduler over a ledger holding accounts A1 and A2."""
    logger = Logger()
    registry = ProcessRegistry(logger=logger)
    ledger = AccountManager(logger=logger)
    ledger.create_account("A1", 100)
    ledger.create_account("A2", 100)
    executor = TransactionExecutor(registry=registry, ledger=ledger, logger=logger)
    scheduler = RoundRobinScheduler(
        registry=registry, executor=executor, logger=logger, quantum=quantum
    )
    return scheduler, registry


def _batch() -> list[Transaction]:
    return [
        Transaction("T1", "deposit", "A1", 500),
        Transaction("T2", "withdraw", "A2", 200),
        Transaction("T3", "balance", "A1"),
        Transaction("T4", "deposit", "A2", 300),
    ]


class TestConstruction:
    """Verify quantum handling."""

    def test_default_quantum(self) -> None:
        """The default quantum is 2."""
        logger = Logger()
        registry = ProcessRegistry(logger=logger)
        executor = TransactionExecutor(
            registry=registry, ledger=AccountManager(logger=logger), logger=logger
        )
        scheduler = RoundRobinScheduler(registry=registry, executor=executor, logger=logger)
        assert scheduler.quantum == DEFAULT_QUANTUM

    @pytest.mark.parametrize("quantum", [0, -1])
    def test_non_positive_quantum_raises(self, quantum: int) -> None:
        """A non-positive quantum is an invariant violation."""
        with pytest.raises(ValueError, match="Quantum"):
            _scheduler(quantum)


class TestFourProcesses:
    """The classic four-transaction batch with Q=2."""

    def test_waiting_times(self) -> None:
        """Waiting times should be 0, 2, 4, 6."""
        scheduler, _ = _scheduler()
        report = scheduler.run(_batch())
        assert [e.waiting_time for e in report.entries] == _FOUR_WAITS

    def test_total_time(self) -> None:
        """Total elapsed time should be 8."""
        scheduler, _ = _scheduler()
        assert scheduler.run(_batch()).total_time == _FOUR_TOTAL

    def test_metrics(self) -> None:
        """Average wait 3.0, average turnaround 5.0, utilization 100%."""
        scheduler, _ = _scheduler()
        report = scheduler.run(_batch())
        assert report.total_processes == len(_FOUR_WAITS)
        assert report.average_waiting_time == pytest.approx(3.0)
        assert report.average_turnaround_time == pytest.approx(5.0)
        assert report.cpu_utilization == pytest.approx(100.0)

    def test_trace_rows(self) -> None:
        """The trace records PID, label, start, end and wait in order."""
        scheduler, _ = _scheduler()
        report = scheduler.run(_batch())
        assert report.entries[1] == ScheduleEntry(
            pid=2, transaction_id="T2", start_time=2, end_time=4, waiting_time=2
        )
        assert [e.transaction_id for e in report.entries] == ["T1", "T2", "T3", "T4"]

    def test_process_table_snapshot(self) -> None:
        """Every PCB completes and carries its waiting/turnaround times."""
        scheduler, _ = _scheduler()
        report = scheduler.run(_batch())
        table = report.process_table
        assert all(p.status is ProcessStatus.COMPLETED for p in table)
        assert [p.waiting_time for p in table] == _FOUR_WAITS
        assert [p.turnaround_time for p in table] == [2, 4, 6, 8]

    def test_pids_follow_input_order(self) -> None:
        """PIDs are assigned in input order."""
        scheduler, _ = _scheduler()
        assert [e.pid for e in scheduler.run(_batch()).entries] == [1, 2, 3, 4]


class TestEdgeCases:
    """Verify empty input, rejections and custom quanta."""

    def test_empty_batch(self) -> None:
        """An empty batch reports zero processes without dividing by zero."""
        scheduler, registry = _scheduler()
        report = scheduler.run([])
        assert report.total_processes == 0
        assert report.total_time == 0
        assert report.average_waiting_time == pytest.approx(0.0)
        assert report.average_turnaround_time == pytest.approx(0.0)
        assert report.cpu_utilization == pytest.approx(0.0)
        assert report.process_table == ()
        assert len(registry) == 0

    def test_report_survives_rejections(self) -> None:
        """Overdraws and unknown actions still produce a full report."""
        scheduler, _ = _scheduler()
        report = scheduler.run(
            [
                Transaction("T1", "withdraw", "A1", 10_000),
                Transaction("T2", "audit", "A1"),
            ]
        )
        outcomes = [r.outcome for r in report.results]
        assert outcomes == [
            TransactionOutcome.INSUFFICIENT_FUNDS,
            TransactionOutcome.UNSUPPORTED_ACTION,
        ]
        assert all(p.status is ProcessStatus.COMPLETED for p in report.process_table)

    def test_custom_quantum(self) -> None:
        """With Q=3, three processes wait 0, 3, 6 and finish at 9."""
        scheduler, _ = _scheduler(quantum=3)
        report = scheduler.run(_batch()[:3])
        assert [e.waiting_time for e in report.entries] == [0, 3, 6]
        assert report.total_time == 9

    def test_table_includes_earlier_processes(self) -> None:
        """The final snapshot lists every PCB in the registry."""
        scheduler, registry = _scheduler()
        registry.create_process("earlier")
        report = scheduler.run(_batch()[:1])
        assert [p.transaction_id for p in report.process_table] == ["earlier", "T1"]


class TestRendering:
    """Verify the text report."""

    def test_render_contains_sections(self) -> None:
        """The report shows the trace, metrics and process table."""
        scheduler, _ = _scheduler()
        text = scheduler.run(_batch()).render()
        assert "Round Robin (quantum=2)" in text
        assert "Average waiting time: 3.00 units" in text
        assert "CPU utilization: 100.00%" in text
        assert "COMPLETED" in text
