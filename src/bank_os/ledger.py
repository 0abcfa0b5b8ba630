"""The ledger - bank accounts and their balances.

The ledger is the *work* a simulated process performs: each transaction
deposits into, withdraws from, or reads the balance of one account.

Business-rule rejections (unknown account, insufficient funds, duplicate
account) are ordinary outcomes, reported through ``LedgerResult``.  Only
programming errors, such as a negative or non-finite amount, raise.

Persistence mirrors a filesystem ``sync``: when the manager is given a
path, every successful mutation rewrites a JSON file holding the whole
balance map, and a new manager loads that file on start-up.
"""

import json
import math
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from threading import Lock

from bank_os.logging import Logger, LogLevel

_SOURCE = "ledger"


class LedgerStatus(StrEnum):
    """Outcome of a ledger operation."""

    OK = "ok"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class LedgerResult:
    """What a ledger operation did.

    Attributes:
        status: Whether the operation succeeded, and if not, why.
        account: The account that was addressed.
        balance: The balance after the operation, or None if the account
            does not exist.
        message: A human-readable report of the outcome.

    """

    status: LedgerStatus
    account: str
    balance: float | None
    message: str

    @property
    def ok(self) -> bool:
        """Return True if the operation succeeded."""
        return self.status is LedgerStatus.OK


def dump_accounts(accounts: dict[str, float], path: Path) -> None:
    """Write the balance map to a JSON file.

    The map is written to a sibling temporary file first and then swapped
    in, so a crash mid-write leaves the previous file intact.
    """
    tmp = path.with_name(f"{path.name}.tmp")
    tmp.write_text(json.dumps(accounts, indent=2, sort_keys=True, allow_nan=False))
    tmp.replace(path)


def load_accounts(path: Path) -> dict[str, float]:
    """Read a balance map written by ``dump_accounts``.

    Raises:
        FileNotFoundError: If the path does not exist.
        ValueError: If the file is not a map of account names to finite,
            non-negative balances.

    """
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        msg = f"Corrupt accounts file {path}: {e}"
        raise ValueError(msg) from e
    if not isinstance(data, dict):
        msg = f"Corrupt accounts file {path}: expected an object"
        raise ValueError(msg)
    accounts: dict[str, float] = {}
    for account, balance in data.items():  # pyright: ignore[reportUnknownVariableType]
        if (
            isinstance(balance, bool)
            or not isinstance(balance, int | float)
            or not math.isfinite(balance)
            or balance < 0
        ):
            msg = f"Corrupt accounts file {path}: bad balance for {account}"
            raise ValueError(msg)
        accounts[str(account)] = float(balance)  # pyright: ignore[reportUnknownArgumentType]
    return accounts


def _check_amount(amount: float) -> None:
    if not math.isfinite(amount) or amount < 0:
        msg = f"Amount must be finite and non-negative, got {amount}"
        raise ValueError(msg)


class AccountManager:
    """Thread-safe store of account balances."""

    def __init__(self, *, logger: Logger, path: Path | None = None) -> None:
        """Create a ledger, loading *path* if it exists.

        Args:
            logger: Where balance movements are recorded.
            path: JSON file to persist to, or None to stay in memory.

        Raises:
            ValueError: If *path* exists but is not a valid accounts file.

        """
        self._logger = logger
        self._path = path
        self._lock = Lock()
        self._accounts: dict[str, float] = {}
        if path is not None and path.exists():
            self._accounts = load_accounts(path)
            self._logger.log(
                LogLevel.INFO,
                f"Loaded {len(self._accounts)} accounts from {path}",
                source=_SOURCE,
            )

    @property
    def accounts(self) -> dict[str, float]:
        """Return a copy of the balance map."""
        with self._lock:
            return dict(self._accounts)

    def create_account(self, account: str, initial: float = 0.0) -> LedgerResult:
        """Open *account* with an *initial* balance.

        Raises:
            ValueError: If *initial* is negative or not finite.

        """
        _check_amount(initial)
        with self._lock:
            if account in self._accounts:
                return self._report(
                    LedgerStatus.DUPLICATE, account, f"Account {account} already exists"
                )
            self._accounts[account] = initial
            self._sync()
            return self._report(
                LedgerStatus.OK, account, f"Account created for {account} with balance {initial}"
            )

    def deposit(self, account: str, amount: float) -> LedgerResult:
        """Credit *amount* to *account*.

        Raises:
            ValueError: If *amount* is negative or not finite.

        """
        _check_amount(amount)
        with self._lock:
            if account not in self._accounts:
                return self._not_found(account)
            self._accounts[account] += amount
            self._sync()
            return self._report(
                LedgerStatus.OK, account, f"Deposited {amount} to account {account}"
            )

    def withdraw(self, account: str, amount: float) -> LedgerResult:
        """Debit *amount* from *account* if the balance covers it.

        Raises:
            ValueError: If *amount* is negative or not finite.

        """
        _check_amount(amount)
        with self._lock:
            if account not in self._accounts:
                return self._not_found(account)
            if self._accounts[account] < amount:
                return self._report(
                    LedgerStatus.INSUFFICIENT_FUNDS,
                    account,
                    f"Insufficient balance in account {account}",
                )
            self._accounts[account] -= amount
            self._sync()
            return self._report(
                LedgerStatus.OK, account, f"Withdrew {amount} from account {account}"
            )

    def balance(self, account: str) -> LedgerResult:
        """Report the balance of *account*."""
        with self._lock:
            if account not in self._accounts:
                return self._not_found(account)
            return self._report(
                LedgerStatus.OK,
                account,
                f"Balance for account {account}: {self._accounts[account]}",
            )

    def _not_found(self, account: str) -> LedgerResult:
        return self._report(LedgerStatus.NOT_FOUND, account, f"Account {account} not found")

    def _report(self, status: LedgerStatus, account: str, message: str) -> LedgerResult:
        """Log and build a result (caller holds the lock)."""
        level = LogLevel.INFO if status is LedgerStatus.OK else LogLevel.WARNING
        self._logger.log(level, message, source=_SOURCE)
        return LedgerResult(
            status=status,
            account=account,
            balance=self._accounts.get(account),
            message=message,
        )

    def _sync(self) -> None:
        """Flush the balance map to disk (caller holds the lock)."""
        if self._path is not None:
            dump_accounts(self._accounts, self._path)
