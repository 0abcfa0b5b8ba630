"""Allow ``python -m bank_os`` to start the REPL."""

from bank_os.repl import run

run()
