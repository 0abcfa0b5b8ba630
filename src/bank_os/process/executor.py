"""Transaction executor - runs one bank transaction inside a process.

A transaction descriptor names an action, an account, and an amount.
The executor binds it to a PCB and drives that PCB through its
lifecycle around the ledger call::

    READY → RUNNING → (ledger operation) → COMPLETED

Ledger rejections such as insufficient funds are outcomes, not errors,
so the PCB still reaches COMPLETED.  A genuine fault raised by the
ledger propagates and leaves the PCB in RUNNING.

Action strings are resolved to the closed ``TransactionAction`` enum
before dispatch.  An unrecognised action does not touch the ledger; it
is reported as ``UNSUPPORTED_ACTION`` and logged as a warning, and the
process still completes.

Lock order: the registry lock is taken and released around each status
update, then the ledger lock inside the ledger call.  Neither is held
while the other is acquired.
"""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, assert_never

from bank_os.ledger import LedgerResult, LedgerStatus
from bank_os.logging import Logger, LogLevel
from bank_os.process.pcb import ProcessStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bank_os.ledger import AccountManager
    from bank_os.process.registry import ProcessRegistry

_SOURCE = "executor"


class TransactionAction(StrEnum):
    """The operations a transaction can ask of the ledger."""

    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    BALANCE = "balance"

    @classmethod
    def parse(cls, raw: str) -> TransactionAction | None:
        """Resolve *raw* to an action, or None if it names none."""
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


class TransactionOutcome(StrEnum):
    """How a transaction ended."""

    OK = "ok"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    ACCOUNT_NOT_FOUND = "account_not_found"
    UNSUPPORTED_ACTION = "unsupported_action"


_OUTCOMES: dict[LedgerStatus, TransactionOutcome] = {
    LedgerStatus.OK: TransactionOutcome.OK,
    LedgerStatus.INSUFFICIENT_FUNDS: TransactionOutcome.INSUFFICIENT_FUNDS,
    LedgerStatus.NOT_FOUND: TransactionOutcome.ACCOUNT_NOT_FOUND,
}


@dataclass(frozen=True)
class Transaction:
    """A transaction descriptor supplied by the caller.

    ``action`` is kept as given (a ``TransactionAction`` is a str) so
    that unsupported actions can be reported rather than rejected.

    Attributes:
        transaction_id: Caller-chosen label (need not be unique).
        action: "deposit", "withdraw", "balance", or anything else.
        account: The target account.
        amount: Amount to move (ignored for balance checks).

    """

    transaction_id: str
    action: str
    account: str
    amount: float = 0.0

    def __post_init__(self) -> None:
        """Reject negative and non-finite amounts.

        Raises:
            ValueError: If the amount is negative, NaN or infinite.

        """
        if not math.isfinite(self.amount) or self.amount < 0:
            msg = f"Transaction {self.transaction_id}: amount must be finite and non-negative"
            raise ValueError(msg)


@dataclass(frozen=True)
class TransactionResult:
    """What happened when a transaction ran.

    Attributes:
        transaction_id: Label of the transaction.
        pid: The process that ran it, or None if it ran unbound.
        action: The resolved action, or None if unsupported.
        outcome: How the transaction ended.
        message: Human-readable report.
        balance: Account balance afterwards, if the account exists.

    """

    transaction_id: str
    pid: int | None
    action: TransactionAction | None
    outcome: TransactionOutcome
    message: str
    balance: float | None = None


class TransactionExecutor:
    """Bind transactions to processes and run them against the ledger."""

    def __init__(
        self,
        *,
        registry: ProcessRegistry,
        ledger: AccountManager,
        logger: Logger,
    ) -> None:
        """Create an executor over a process table and a ledger."""
        self._registry = registry
        self._ledger = ledger
        self._logger = logger

    def execute(self, transaction: Transaction, pid: int | None = None) -> TransactionResult:
        """Run *transaction*, moving process *pid* through its lifecycle.

        Args:
            transaction: The descriptor to run.
            pid: The process bound to it, or None to run unbound.

        Returns:
            The result of the ledger operation.

        Raises:
            ProcessStateError: If *pid* is not READY when dispatched.

        """
        if pid is not None:
            self._registry.update_status(pid, ProcessStatus.RUNNING)
        self._logger.log(
            LogLevel.INFO, f"Transaction {transaction.transaction_id} started", source=_SOURCE
        )

        result = self._dispatch(transaction, pid)

        self._logger.log(
            LogLevel.INFO,
            f"Transaction {transaction.transaction_id} completed ({result.outcome})",
            source=_SOURCE,
        )
        if pid is not None:
            self._registry.update_status(pid, ProcessStatus.COMPLETED)
        return result

    def execute_concurrently(self, transactions: Sequence[Transaction]) -> list[TransactionResult]:
        """Run every transaction at once, one worker thread each.

        A PCB is created for each transaction up front, in input order,
        so PIDs follow the input.  The call returns when every worker
        has finished.  Correctness rests on the registry and ledger
        locks; no ordering between workers is promised.

        Returns:
            Results in input order.

        """
        if not transactions:
            return []
        pids = [self._registry.create_process(t.transaction_id) for t in transactions]
        with ThreadPoolExecutor(
            max_workers=len(transactions), thread_name_prefix="transaction"
        ) as pool:
            return list(pool.map(self.execute, transactions, pids))

    def _dispatch(self, transaction: Transaction, pid: int | None) -> TransactionResult:
        """Resolve the action and call the matching ledger operation."""
        action = TransactionAction.parse(transaction.action)
        if action is None:
            message = (
                f"Transaction {transaction.transaction_id}: unsupported action "
                f"{transaction.action!r}, ledger untouched"
            )
            self._logger.log(LogLevel.WARNING, message, source=_SOURCE)
            return TransactionResult(
                transaction_id=transaction.transaction_id,
                pid=pid,
                action=None,
                outcome=TransactionOutcome.UNSUPPORTED_ACTION,
                message=message,
            )

        ledger_result: LedgerResult
        match action:
            case TransactionAction.DEPOSIT:
                ledger_result = self._ledger.deposit(transaction.account, transaction.amount)
            case TransactionAction.WITHDRAW:
                ledger_result = self._ledger.withdraw(transaction.account, transaction.amount)
            case TransactionAction.BALANCE:
                ledger_result = self._ledger.balance(transaction.account)
            case _:
                assert_never(action)

        return TransactionResult(
            transaction_id=transaction.transaction_id,
            pid=pid,
            action=action,
            outcome=_OUTCOMES[ledger_result.status],
            message=ledger_result.message,
            balance=ledger_result.balance,
        )
