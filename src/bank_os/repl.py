"""Interactive REPL (Read-Eval-Print Loop) for the banking system.

The REPL builds a ``BankingSystem`` from the environment, attaches a
shell, and enters the classic loop:

    1. **Read** - display a prompt and read user input.
    2. **Eval** - pass the command to ``shell.execute()``.
    3. **Print** - display the result.
    4. **Loop** - repeat until the shell returns the exit sentinel.

The shell is fully testable (returns strings, no I/O); the REPL is the
thin I/O wrapper that connects it to ``stdin``/``stdout``.
"""

import os

from bank_os.config import SystemConfig
from bank_os.shell import Shell
from bank_os.system import BankingSystem, SystemState

PROMPT = "bank-os $ "

_BANNER_WIDTH = 60


def format_banner() -> str:
    """Return the start-up banner."""
    border = "=" * _BANNER_WIDTH
    return (
        f"{border}\n"
        f"{'BANKING SYSTEM - OS SIMULATION':^{_BANNER_WIDTH}}\n"
        f"{border}\n"
        "Type 'help' for commands, 'exit' to quit."
    )


def run() -> None:
    """Build the system and run the interactive REPL.

    Handles Ctrl+C and Ctrl+D gracefully and always shuts down cleanly.
    A bad setting or an unreadable accounts file is reported instead of
    starting the system.
    """
    try:
        system = BankingSystem(SystemConfig.from_env(os.environ))
    except ValueError as e:
        print(f"Error: {e}")  # noqa: T201
        return
    shell = Shell(system=system)
    print(format_banner())  # noqa: T201

    try:
        while system.state is SystemState.RUNNING:
            try:
                command = input(PROMPT)
            except EOFError:
                # Ctrl+D
                print()  # noqa: T201
                break

            result = shell.execute(command)
            if result == Shell.EXIT_SENTINEL:
                break
            if result:
                print(result)  # noqa: T201

    except KeyboardInterrupt:
        print("\nInterrupted.")  # noqa: T201

    finally:
        if system.state is SystemState.RUNNING:
            system.shutdown()
        print("Exiting banking system. Goodbye!")  # noqa: T201
