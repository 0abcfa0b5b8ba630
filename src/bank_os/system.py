"""The banking system - composition root for every subsystem.

``BankingSystem`` builds each subsystem once, from one ``SystemConfig``,
and hands each its collaborators explicitly.  There is no module-level
state: two systems in one interpreter share nothing.

Build order (leaves first):
    0. Logger - capture events from the start.
    1. Ledger - the work processes perform.
    2. Process registry - PCBs for every transaction.
    3. Executor and round-robin scheduler.
    4. IPC hub.
    5. Demo collaborators - page cache, disk scheduler, FAT.

The fixed demo routines reproduce the classroom walkthroughs: a four-
transaction round-robin batch, two concurrent transactions on one
account, an LRU paging trace, disk scheduling over the textbook request
queue, and a small file allocation table.
"""

from enum import StrEnum

from bank_os.config import SystemConfig
from bank_os.disk import DiskPolicy, DiskScheduler, FCFSPolicy, SCANPolicy, SeekPlan
from bank_os.fat import FileAllocationTable
from bank_os.ipc import IPCHub
from bank_os.ledger import AccountManager
from bank_os.logging import Logger, LogLevel
from bank_os.memory import PageCache
from bank_os.process.executor import (
    Transaction,
    TransactionAction,
    TransactionExecutor,
    TransactionResult,
)
from bank_os.process.registry import ProcessRegistry
from bank_os.process.scheduler import RoundRobinScheduler, SchedulingReport

_SOURCE = "system"

DEMO_SCHEDULE: tuple[Transaction, ...] = (
    Transaction("T1", TransactionAction.DEPOSIT, "A1", 500),
    Transaction("T2", TransactionAction.WITHDRAW, "A2", 200),
    Transaction("T3", TransactionAction.BALANCE, "A1"),
    Transaction("T4", TransactionAction.DEPOSIT, "A2", 300),
)

DEMO_CONCURRENT: tuple[Transaction, ...] = (
    Transaction("T1", TransactionAction.DEPOSIT, "111", 1000),
    Transaction("T2", TransactionAction.WITHDRAW, "111", 500),
)

DEMO_PAGES: tuple[tuple[int, str], ...] = (
    (1, "Account Data - Page 1"),
    (2, "Transaction Log - Page 2"),
    (3, "User Data - Page 3"),
    (4, "Audit Trail - Page 4"),
    (1, "Account Data - Page 1 (Re-access)"),
)

DEMO_DISK_REQUESTS: tuple[int, ...] = (98, 183, 37, 122, 14, 124, 65, 67)

DEMO_FILES: tuple[tuple[str, int], ...] = (
    ("transaction_log.txt", 5),
    ("account_data.dat", 3),
    ("audit_trail.log", 7),
)


class SystemState(StrEnum):
    """Lifecycle of a banking system."""

    RUNNING = "running"
    SHUTDOWN = "shutdown"


class BankingSystem:
    """Owns and wires the ledger, process, IPC, and demo subsystems."""

    def __init__(self, config: SystemConfig | None = None) -> None:
        """Build every subsystem from *config* (defaults if None)."""
        self._config = config if config is not None else SystemConfig()
        self._logger = Logger()
        self._ledger = AccountManager(logger=self._logger, path=self._config.accounts_path)
        self._registry = ProcessRegistry(logger=self._logger)
        self._executor = TransactionExecutor(
            registry=self._registry, ledger=self._ledger, logger=self._logger
        )
        self._scheduler = RoundRobinScheduler(
            registry=self._registry,
            executor=self._executor,
            logger=self._logger,
            quantum=self._config.quantum,
        )
        self._ipc = IPCHub(logger=self._logger, ack_delay=self._config.sync_ack_delay)
        self._memory = PageCache(logger=self._logger, capacity=self._config.max_pages)
        self._disk = DiskScheduler(
            policy=FCFSPolicy(), logger=self._logger, head=self._config.initial_head
        )
        self._fat = FileAllocationTable(logger=self._logger)
        self._state = SystemState.RUNNING
        self._logger.log(LogLevel.INFO, "Banking system ready", source=_SOURCE)

    @property
    def config(self) -> SystemConfig:
        """Return the configuration the system was built from."""
        return self._config

    @property
    def state(self) -> SystemState:
        """Return the lifecycle state."""
        return self._state

    @property
    def logger(self) -> Logger:
        """Return the shared audit log."""
        return self._logger

    @property
    def ledger(self) -> AccountManager:
        """Return the account ledger."""
        return self._ledger

    @property
    def registry(self) -> ProcessRegistry:
        """Return the process table."""
        return self._registry

    @property
    def executor(self) -> TransactionExecutor:
        """Return the transaction executor."""
        return self._executor

    @property
    def scheduler(self) -> RoundRobinScheduler:
        """Return the round-robin scheduler."""
        return self._scheduler

    @property
    def ipc(self) -> IPCHub:
        """Return the IPC hub."""
        return self._ipc

    @property
    def memory(self) -> PageCache:
        """Return the paging demo's page cache."""
        return self._memory

    @property
    def disk(self) -> DiskScheduler:
        """Return the disk scheduler."""
        return self._disk

    @property
    def fat(self) -> FileAllocationTable:
        """Return the file allocation table."""
        return self._fat

    def shutdown(self) -> None:
        """Stop the system.

        Raises:
            RuntimeError: If the system is already shut down.

        """
        if self._state is SystemState.SHUTDOWN:
            msg = "Banking system is already shut down"
            raise RuntimeError(msg)
        self._logger.log(LogLevel.INFO, "Banking system shutting down", source=_SOURCE)
        self._state = SystemState.SHUTDOWN

    def run_schedule_demo(self) -> SchedulingReport:
        """Run the four-transaction round-robin batch."""
        return self._scheduler.run(DEMO_SCHEDULE)

    def run_concurrent_demo(self) -> list[TransactionResult]:
        """Run two transactions on one account at once, then announce them.

        Each completed process posts a completion notice on the IPC
        global queue.
        """
        results = self._executor.execute_concurrently(DEMO_CONCURRENT)
        for result in results:
            if result.pid is not None:
                self._ipc.notify_completion(result.pid)
        return results

    def run_paging_demo(self) -> list[int | None]:
        """Replay the demo page trace.

        Returns:
            The page evicted by each access (None where none was).

        """
        return [self._memory.access(page, data) for page, data in DEMO_PAGES]

    def run_disk_demo(self, policy: str) -> SeekPlan:
        """Schedule the textbook request queue with "fcfs" or "scan".

        The arm restarts from the configured initial head each time.

        Raises:
            ValueError: If *policy* is not a known policy name.

        """
        chosen: DiskPolicy
        match policy:
            case "fcfs":
                chosen = FCFSPolicy()
            case "scan":
                chosen = SCANPolicy(disk_size=self._config.disk_size)
            case _:
                msg = f"Unknown disk policy: {policy!r} (use fcfs or scan)"
                raise ValueError(msg)
        self._disk = DiskScheduler(
            policy=chosen, logger=self._logger, head=self._config.initial_head
        )
        for cylinder in DEMO_DISK_REQUESTS:
            self._disk.add_request(cylinder)
        return self._disk.run()

    def run_fat_demo(self) -> dict[str, list[int]]:
        """Allocate the demo files and return the table."""
        for filename, size in DEMO_FILES:
            self._fat.allocate(filename, size)
        return self._fat.files
