"""Tests for the account ledger.

The ledger is the work each simulated process performs.  Rejections
(unknown account, insufficient funds, duplicates) are reported as
results; only negative amounts raise.
"""

import json
from pathlib import Path

import pytest

from bank_os.ledger import AccountManager, LedgerStatus, load_accounts
from bank_os.logging import Logger, LogLevel

_OPENING = 100.0


def _ledger(path: Path | None = None) -> AccountManager:
    """Return a ledger with account A1 holding the opening balance."""
    ledger = AccountManager(logger=Logger(), path=path)
    ledger.create_account("A1", _OPENING)
    return ledger


class TestCreateAccount:
    """Verify opening accounts."""

    def test_create_sets_balance(self) -> None:
        """A new account should hold its initial balance."""
        ledger = _ledger()
        assert ledger.accounts == {"A1": _OPENING}

    def test_duplicate_is_reported(self) -> None:
        """Opening an existing account should report DUPLICATE."""
        ledger = _ledger()
        result = ledger.create_account("A1", 5)
        assert result.status is LedgerStatus.DUPLICATE
        assert ledger.accounts["A1"] == _OPENING

    def test_negative_initial_raises(self) -> None:
        """A negative opening balance is a programming error."""
        ledger = _ledger()
        with pytest.raises(ValueError, match="non-negative"):
            ledger.create_account("A2", -1)

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_amounts_raise(self, amount: float) -> None:
        """NaN and infinities are rejected before touching any balance."""
        ledger = _ledger()
        with pytest.raises(ValueError, match="finite"):
            ledger.deposit("A1", amount)
        with pytest.raises(ValueError, match="finite"):
            ledger.withdraw("A1", amount)
        with pytest.raises(ValueError, match="finite"):
            ledger.create_account("A2", amount)
        assert ledger.accounts == {"A1": _OPENING}


class TestMovements:
    """Verify deposits, withdrawals and balance checks."""

    def test_deposit_credits(self) -> None:
        """Deposit should add to the balance."""
        ledger = _ledger()
        result = ledger.deposit("A1", 50)
        assert result.ok
        assert result.balance == pytest.approx(150.0)

    def test_withdraw_debits(self) -> None:
        """Withdraw should subtract from the balance."""
        ledger = _ledger()
        result = ledger.withdraw("A1", 40)
        assert result.ok
        assert result.balance == pytest.approx(60.0)

    def test_withdraw_exact_balance(self) -> None:
        """Withdrawing the whole balance is allowed."""
        ledger = _ledger()
        assert ledger.withdraw("A1", _OPENING).balance == pytest.approx(0.0)

    def test_overdraw_leaves_balance(self) -> None:
        """Withdrawing too much should be reported and change nothing."""
        ledger = _ledger()
        result = ledger.withdraw("A1", _OPENING + 1)
        assert result.status is LedgerStatus.INSUFFICIENT_FUNDS
        assert ledger.accounts["A1"] == _OPENING

    def test_unknown_account(self) -> None:
        """Operations on a missing account should report NOT_FOUND."""
        ledger = _ledger()
        assert ledger.deposit("ZZ", 1).status is LedgerStatus.NOT_FOUND
        assert ledger.withdraw("ZZ", 1).status is LedgerStatus.NOT_FOUND
        result = ledger.balance("ZZ")
        assert result.status is LedgerStatus.NOT_FOUND
        assert result.balance is None

    def test_balance_reports_value(self) -> None:
        """Balance should report without changing anything."""
        ledger = _ledger()
        result = ledger.balance("A1")
        assert result.ok
        assert "100" in result.message

    @pytest.mark.parametrize("operation", ["deposit", "withdraw"])
    def test_negative_amount_raises(self, operation: str) -> None:
        """Negative amounts are programming errors."""
        ledger = _ledger()
        with pytest.raises(ValueError, match="non-negative"):
            getattr(ledger, operation)("A1", -5)

    def test_rejections_log_warnings(self) -> None:
        """Rejected operations should be logged as warnings."""
        logger = Logger()
        ledger = AccountManager(logger=logger)
        ledger.balance("ghost")
        warnings = logger.filter(min_level=LogLevel.WARNING, source="ledger")
        assert len(warnings) == 1


class TestPersistence:
    """Verify the JSON file backing."""

    def test_mutations_are_written(self, tmp_path: Path) -> None:
        """Each successful mutation should rewrite the file."""
        path = tmp_path / "accounts.json"
        ledger = _ledger(path)
        ledger.deposit("A1", 25)
        assert json.loads(path.read_text()) == {"A1": 125.0}

    def test_new_ledger_loads_file(self, tmp_path: Path) -> None:
        """A ledger built on an existing file should see its balances."""
        path = tmp_path / "accounts.json"
        _ledger(path).withdraw("A1", 30)
        reloaded = AccountManager(logger=Logger(), path=path)
        assert reloaded.accounts == {"A1": 70.0}

    def test_rejection_does_not_write(self, tmp_path: Path) -> None:
        """An overdraw should leave the file untouched."""
        path = tmp_path / "accounts.json"
        _ledger(path).withdraw("A1", 1000)
        assert load_accounts(path) == {"A1": _OPENING}

    def test_no_temporary_file_left(self, tmp_path: Path) -> None:
        """The write is swapped into place, leaving only the accounts file."""
        path = tmp_path / "accounts.json"
        _ledger(path).deposit("A1", 5)
        assert [p.name for p in tmp_path.iterdir()] == ["accounts.json"]

    @pytest.mark.parametrize(
        "content",
        ['{"A1": 10', "[1, 2]", '{"A1": "ten"}', '{"A1": NaN}', '{"A1": -5}'],
    )
    def test_corrupt_file_raises(self, tmp_path: Path, content: str) -> None:
        """An unreadable accounts file is reported as a ValueError."""
        path = tmp_path / "accounts.json"
        path.write_text(content)
        with pytest.raises(ValueError, match="Corrupt accounts file"):
            AccountManager(logger=Logger(), path=path)
