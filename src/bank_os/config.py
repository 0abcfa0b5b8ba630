"""System configuration.

All tunables of the simulator live in one frozen dataclass so that a
``BankingSystem`` can be built from explicit values (tests), from
defaults, or from ``BANK_OS_*`` environment variables (the REPL).

Defaults reproduce the classic classroom setup: a round-robin quantum
of 2 time units, a 100 ms synchronous IPC acknowledgment, a three-page
memory, and a 200-cylinder disk whose head starts at cylinder 53.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

DEFAULT_QUANTUM = 2
DEFAULT_SYNC_ACK_DELAY = 0.1
DEFAULT_MAX_PAGES = 3
DEFAULT_DISK_SIZE = 200
DEFAULT_INITIAL_HEAD = 53
DEFAULT_ACCOUNTS_PATH = Path("accounts.json")

ENV_PREFIX = "BANK_OS_"

T = TypeVar("T")


@dataclass(frozen=True)
class SystemConfig:
    """Construction-time settings for every subsystem.

    Attributes:
        quantum: Round-robin time slice, in simulated time units.
        sync_ack_delay: Seconds ``send_sync`` waits for its acknowledgment.
        max_pages: Resident page capacity of the paging demo.
        disk_size: Number of cylinders on the simulated disk.
        initial_head: Starting cylinder of the disk arm.
        accounts_path: JSON file backing the ledger, or None for in-memory.

    """

    quantum: int = DEFAULT_QUANTUM
    sync_ack_delay: float = DEFAULT_SYNC_ACK_DELAY
    max_pages: int = DEFAULT_MAX_PAGES
    disk_size: int = DEFAULT_DISK_SIZE
    initial_head: int = DEFAULT_INITIAL_HEAD
    accounts_path: Path | None = None

    def __post_init__(self) -> None:
        """Reject settings no subsystem could honour.

        Raises:
            ValueError: If any numeric setting is out of range.

        """
        if self.quantum <= 0:
            msg = f"quantum must be positive, got {self.quantum}"
            raise ValueError(msg)
        if self.sync_ack_delay < 0:
            msg = f"sync_ack_delay must be non-negative, got {self.sync_ack_delay}"
            raise ValueError(msg)
        if self.max_pages <= 0:
            msg = f"max_pages must be positive, got {self.max_pages}"
            raise ValueError(msg)
        if self.disk_size <= 0:
            msg = f"disk_size must be positive, got {self.disk_size}"
            raise ValueError(msg)
        if not 0 <= self.initial_head < self.disk_size:
            msg = f"initial_head must be within [0, {self.disk_size}), got {self.initial_head}"
            raise ValueError(msg)

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> SystemConfig:
        """Build a configuration from ``BANK_OS_*`` variables.

        Missing variables fall back to the defaults.  The ledger is backed
        by ``DEFAULT_ACCOUNTS_PATH`` unless ``BANK_OS_ACCOUNTS`` names another
        file; setting it to the empty string keeps the ledger in memory.

        Args:
            environ: A mapping such as ``os.environ``.

        Returns:
            The resulting configuration.

        Raises:
            ValueError: If a variable is present but not a valid number.

        """
        path = environ.get(f"{ENV_PREFIX}ACCOUNTS", str(DEFAULT_ACCOUNTS_PATH))
        return cls(
            quantum=_read(environ, "QUANTUM", int, DEFAULT_QUANTUM),
            sync_ack_delay=_read(environ, "SYNC_DELAY", float, DEFAULT_SYNC_ACK_DELAY),
            max_pages=_read(environ, "MAX_PAGES", int, DEFAULT_MAX_PAGES),
            disk_size=_read(environ, "DISK_SIZE", int, DEFAULT_DISK_SIZE),
            initial_head=_read(environ, "INITIAL_HEAD", int, DEFAULT_INITIAL_HEAD),
            accounts_path=Path(path) if path else None,
        )


def _read(environ: Mapping[str, str], name: str, parse: Callable[[str], T], default: T) -> T:
    """Parse ``BANK_OS_<name>`` with *parse*, or return *default*."""
    key = ENV_PREFIX + name
    raw = environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        msg = f"{key} is not a valid number: {raw!r}"
        raise ValueError(msg) from None
