"""The shell - command interpreter for the banking system.

The shell reads a command string, splits it into a command name and
arguments, dispatches to a handler, and returns a string result.  It is
the menu of the classroom simulator, turned into commands:

    account ops     create, deposit, withdraw, balance, run
    processes       ps, concurrent, schedule
    demos           paging, disk, fat
    IPC             send, recv, sendsync, sendasync, recvglobal, notify, ipc
    housekeeping    log, help, exit

Design choices:
    - **Returns strings, not prints.**  The shell is fully testable and
      the caller decides how to display output.
    - **Command dispatch via a dict.**  Adding a command means writing a
      method and adding one dict entry.
    - **Errors stop at this boundary.**  Invariant violations raised by
      the subsystems (``ValueError``, ``ProcessStateError``) are rendered
      as ``Error: ...`` lines; nothing else is caught.
"""

from collections.abc import Callable

from bank_os.process.executor import Transaction
from bank_os.process.pcb import ProcessStateError, format_process_table
from bank_os.system import BankingSystem, SystemState

# Type alias for a command handler: takes a list of args, returns output.
_Handler = Callable[[list[str]], str]


def _parse_amount(raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        msg = f"invalid amount '{raw}'"
        raise ValueError(msg) from None


def _parse_pid(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        msg = f"invalid PID '{raw}'"
        raise ValueError(msg) from None


class Shell:
    """Command interpreter that operates on a running banking system."""

    EXIT_SENTINEL = "__EXIT__"

    def __init__(self, *, system: BankingSystem) -> None:
        """Create a shell attached to a running system.

        Raises:
            RuntimeError: If the system is not running.

        """
        if system.state is not SystemState.RUNNING:
            msg = f"Shell requires a running system (state: {system.state})"
            raise RuntimeError(msg)
        self._system = system

        # Command name -> handler method.
        self._commands: dict[str, _Handler] = {
            "help": self._cmd_help,
            "create": self._cmd_create,
            "deposit": self._cmd_deposit,
            "withdraw": self._cmd_withdraw,
            "balance": self._cmd_balance,
            "run": self._cmd_run,
            "ps": self._cmd_ps,
            "concurrent": self._cmd_concurrent,
            "schedule": self._cmd_schedule,
            "paging": self._cmd_paging,
            "disk": self._cmd_disk,
            "fat": self._cmd_fat,
            "send": self._cmd_send,
            "recv": self._cmd_recv,
            "sendsync": self._cmd_sendsync,
            "sendasync": self._cmd_sendasync,
            "recvglobal": self._cmd_recvglobal,
            "notify": self._cmd_notify,
            "ipc": self._cmd_ipc,
            "log": self._cmd_log,
            "exit": self._cmd_exit,
        }

    @property
    def commands(self) -> list[str]:
        """Return the sorted command names."""
        return sorted(self._commands)

    def execute(self, command: str) -> str:
        """Parse and execute one command line.

        Args:
            command: The raw command string (e.g. "deposit A1 100").

        Returns:
            The command output, or an error message.

        """
        parts = command.split()
        if not parts:
            return ""
        name, args = parts[0], parts[1:]
        handler = self._commands.get(name)
        if handler is None:
            return f"Unknown command: {name}"
        try:
            return handler(args)
        except (ValueError, ProcessStateError) as e:
            return f"Error: {e}"

    def _cmd_help(self, _args: list[str]) -> str:
        """List available commands."""
        return "Available commands: " + ", ".join(self.commands)

    # -- Account operations --------------------------------------------------

    def _cmd_create(self, args: list[str]) -> str:
        """Open an account."""
        if not args:
            return "Usage: create <account> [initial]"
        initial = _parse_amount(args[1]) if len(args) > 1 else 0.0
        return self._system.ledger.create_account(args[0], initial).message

    def _cmd_deposit(self, args: list[str]) -> str:
        """Deposit into an account."""
        if len(args) != 2:  # noqa: PLR2004
            return "Usage: deposit <account> <amount>"
        return self._system.ledger.deposit(args[0], _parse_amount(args[1])).message

    def _cmd_withdraw(self, args: list[str]) -> str:
        """Withdraw from an account."""
        if len(args) != 2:  # noqa: PLR2004
            return "Usage: withdraw <account> <amount>"
        return self._system.ledger.withdraw(args[0], _parse_amount(args[1])).message

    def _cmd_balance(self, args: list[str]) -> str:
        """Show an account balance."""
        if len(args) != 1:
            return "Usage: balance <account>"
        return self._system.ledger.balance(args[0]).message

    def _cmd_run(self, args: list[str]) -> str:
        """Run one transaction inside a new process."""
        if len(args) not in (3, 4):
            return "Usage: run <id> <action> <account> [amount]"
        amount = _parse_amount(args[3]) if len(args) == 4 else 0.0  # noqa: PLR2004
        transaction = Transaction(args[0], args[1], args[2], amount)
        pid = self._system.registry.create_process(transaction.transaction_id)
        result = self._system.executor.execute(transaction, pid)
        return f"PID {pid} [{result.outcome}]: {result.message}"

    # -- Processes -----------------------------------------------------------

    def _cmd_ps(self, _args: list[str]) -> str:
        """Show the process table."""
        return format_process_table(self._system.registry.list_processes())

    def _cmd_concurrent(self, _args: list[str]) -> str:
        """Run the concurrent transaction demo."""
        results = self._system.run_concurrent_demo()
        lines = [f"PID {r.pid} [{r.outcome}]: {r.message}" for r in results]
        lines.append("All transactions completed.")
        return "\n".join(lines)

    def _cmd_schedule(self, _args: list[str]) -> str:
        """Run the round-robin demo and show its report."""
        return self._system.run_schedule_demo().render()

    # -- Demos ---------------------------------------------------------------

    def _cmd_paging(self, _args: list[str]) -> str:
        """Run the LRU paging demo."""
        evicted = self._system.run_paging_demo()
        lines = [f"Evicted page {page}" for page in evicted if page is not None]
        lines.append(self._system.memory.render())
        return "\n".join(lines)

    def _cmd_disk(self, args: list[str]) -> str:
        """Run a disk scheduling demo."""
        if len(args) != 1:
            return "Usage: disk <fcfs|scan>"
        return self._system.run_disk_demo(args[0]).render()

    def _cmd_fat(self, _args: list[str]) -> str:
        """Run the file allocation table demo."""
        self._system.run_fat_demo()
        return self._system.fat.render()

    # -- IPC -----------------------------------------------------------------

    def _cmd_send(self, args: list[str]) -> str:
        """Send a message from one process to another."""
        if len(args) < 3:  # noqa: PLR2004
            return "Usage: send <source_pid> <target_pid> <message>"
        formatted = self._system.ipc.send_to_process(
            _parse_pid(args[0]), _parse_pid(args[1]), " ".join(args[2:])
        )
        return f"Sent: {formatted}"

    def _cmd_recv(self, args: list[str]) -> str:
        """Receive the next message for a process."""
        if len(args) != 1:
            return "Usage: recv <pid>"
        pid = _parse_pid(args[0])
        message = self._system.ipc.receive_for_process(pid)
        return f"No messages for process {pid}" if message is None else message

    def _cmd_sendsync(self, args: list[str]) -> str:
        """Send a global message and wait for the acknowledgment."""
        if not args:
            return "Usage: sendsync <message>"
        self._system.ipc.send_sync(" ".join(args))
        return "Message sent (blocking); acknowledgment received"

    def _cmd_sendasync(self, args: list[str]) -> str:
        """Send a global message without waiting."""
        if not args:
            return "Usage: sendasync <message>"
        self._system.ipc.send_async(" ".join(args))
        return "Message sent (non-blocking); returned immediately"

    def _cmd_recvglobal(self, _args: list[str]) -> str:
        """Receive the next message from the global queue."""
        message = self._system.ipc.receive_global()
        return "No messages in global queue" if message is None else message

    def _cmd_notify(self, args: list[str]) -> str:
        """Post a completion notice for a process."""
        if len(args) != 1:
            return "Usage: notify <pid>"
        return self._system.ipc.notify_completion(_parse_pid(args[0]))

    def _cmd_ipc(self, _args: list[str]) -> str:
        """Show IPC queue depths."""
        return self._system.ipc.status().render()

    # -- Housekeeping --------------------------------------------------------

    def _cmd_log(self, _args: list[str]) -> str:
        """Show the audit log."""
        entries = self._system.logger.entries
        return "\n".join(str(e) for e in entries) if entries else "No log entries."

    def _cmd_exit(self, _args: list[str]) -> str:
        """Shut the system down and signal the REPL to stop."""
        self._system.shutdown()
        return self.EXIT_SENTINEL
