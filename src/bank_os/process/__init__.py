"""Process subsystem - PCBs, the process table, execution, and scheduling.

Re-exports public symbols so callers can write::

    from bank_os.process import ProcessRegistry, RoundRobinScheduler, Transaction
"""

from bank_os.process.executor import (
    Transaction,
    TransactionAction,
    TransactionExecutor,
    TransactionOutcome,
    TransactionResult,
)
from bank_os.process.pcb import (
    ProcessControlBlock,
    ProcessStateError,
    ProcessStatus,
    format_process_table,
)
from bank_os.process.registry import ProcessRegistry
from bank_os.process.scheduler import RoundRobinScheduler, ScheduleEntry, SchedulingReport

__all__ = [
    "ProcessControlBlock",
    "ProcessRegistry",
    "ProcessStateError",
    "ProcessStatus",
    "RoundRobinScheduler",
    "ScheduleEntry",
    "SchedulingReport",
    "Transaction",
    "TransactionAction",
    "TransactionExecutor",
    "TransactionOutcome",
    "TransactionResult",
    "format_process_table",
]
