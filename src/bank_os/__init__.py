"""bank-os - a pedagogical operating-system simulator over a toy ledger.

Each bank transaction runs inside a simulated process: the process
table tracks its lifecycle, a round-robin scheduler sequences the batch
and reports timing metrics, and an IPC hub carries messages between
processes.
"""

__version__ = "0.1.0"
