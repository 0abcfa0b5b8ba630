"""Inter-process communication (IPC) - mailboxes and a global queue.

Processes are isolated, so they talk through the hub:

**Mailboxes** - one FIFO ``MessageQueue`` per process, created on first
    use.  ``send_to_process`` drops a formatted message into the target's
    mailbox; ``receive_for_process`` pops the oldest one.

**Global queue** - a single shared FIFO for unaddressed traffic:
    synchronous sends, asynchronous sends, and completion notices such
    as ``Process 3 has completed``.

Synchronous vs asynchronous:
    ``send_async`` enqueues and returns at once.  ``send_sync`` enqueues
    and then blocks for a fixed acknowledgment delay, modelling a
    round-trip handshake.  The hub lock covers only the enqueue, never
    the wait, so other senders are not stuck behind one caller's delay.

Receiving from an empty mailbox or queue returns None.  That is a
normal outcome, not an error.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from threading import Lock
from typing import TYPE_CHECKING, Generic, TypeVar

from bank_os.config import DEFAULT_SYNC_ACK_DELAY
from bank_os.logging import Logger, LogLevel

if TYPE_CHECKING:
    from collections.abc import Callable

_SOURCE = "ipc"

T = TypeVar("T")


class MessageQueue(Generic[T]):
    """A named, typed FIFO of discrete messages.

    The generic parameter ``T`` keeps the queue type-safe: a
    ``MessageQueue[str]`` only accepts and returns strings.  The queue
    itself is not locked; the hub that owns it is.
    """

    def __init__(self, *, name: str) -> None:
        """Create an empty, named message queue."""
        self._name: str = name
        self._messages: deque[T] = deque()

    @property
    def name(self) -> str:
        """Return the queue name."""
        return self._name

    @property
    def size(self) -> int:
        """Return the number of messages in the queue."""
        return len(self._messages)

    def is_empty(self) -> bool:
        """Return True if the queue has no messages."""
        return not self._messages

    def send(self, message: T) -> None:
        """Append *message* to the back of the queue."""
        self._messages.append(message)

    def receive(self) -> T | None:
        """Pop the oldest message, or return None if the queue is empty."""
        if not self._messages:
            return None
        return self._messages.popleft()


@dataclass(frozen=True)
class IPCStatus:
    """Diagnostic snapshot of the hub.

    Attributes:
        global_queue_depth: Messages waiting in the global queue.
        mailboxes: PID → number of messages waiting in its mailbox.

    """

    global_queue_depth: int
    mailboxes: dict[int, int] = field(default_factory=dict)

    def render(self) -> str:
        """Render the snapshot as text."""
        lines = [
            f"Global queue size: {self.global_queue_depth}",
            f"Process mailboxes: {len(self.mailboxes)} active",
        ]
        lines.extend(
            f"  PID {pid}: {depth} messages" for pid, depth in sorted(self.mailboxes.items())
        )
        return "\n".join(lines)


def format_message(source_pid: int, target_pid: int, message: str) -> str:
    """Return the mailbox form of a process-to-process message."""
    return f"[PID {source_pid} -> PID {target_pid}]: {message}"


class IPCHub:
    """Per-process mailboxes plus one global queue, behind one lock."""

    def __init__(
        self,
        *,
        logger: Logger,
        ack_delay: float = DEFAULT_SYNC_ACK_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Create an empty hub.

        Args:
            logger: Where routed messages are recorded.
            ack_delay: Seconds ``send_sync`` waits for its acknowledgment.
            sleep: Blocking wait used by ``send_sync``.

        Raises:
            ValueError: If *ack_delay* is negative.

        """
        if ack_delay < 0:
            msg = f"Acknowledgment delay must be non-negative, got {ack_delay}"
            raise ValueError(msg)
        self._logger = logger
        self._ack_delay = ack_delay
        self._sleep = sleep
        self._lock = Lock()
        self._mailboxes: dict[int, MessageQueue[str]] = {}
        self._global: MessageQueue[str] = MessageQueue(name="global")

    @property
    def ack_delay(self) -> float:
        """Return the synchronous acknowledgment delay in seconds."""
        return self._ack_delay

    def send_to_process(self, source_pid: int, target_pid: int, message: str) -> str:
        """Deliver *message* to *target_pid*'s mailbox.

        Returns:
            The formatted entry that was queued.

        """
        formatted = format_message(source_pid, target_pid, message)
        with self._lock:
            mailbox = self._mailboxes.get(target_pid)
            if mailbox is None:
                mailbox = MessageQueue(name=f"pid-{target_pid}")
                self._mailboxes[target_pid] = mailbox
            mailbox.send(formatted)
        self._logger.log(LogLevel.INFO, f"Process-to-process: {formatted}", source=_SOURCE)
        return formatted

    def receive_for_process(self, pid: int) -> str | None:
        """Pop the oldest message for *pid*, or None if there is none."""
        with self._lock:
            mailbox = self._mailboxes.get(pid)
            message = None if mailbox is None else mailbox.receive()
        if message is None:
            self._logger.log(LogLevel.DEBUG, f"No messages for process {pid}", source=_SOURCE)
        else:
            self._logger.log(LogLevel.INFO, f"Process {pid} received: {message}", source=_SOURCE)
        return message

    def send_sync(self, message: str) -> None:
        """Queue *message* globally, then block for the acknowledgment."""
        self._enqueue_global(message)
        self._logger.log(LogLevel.INFO, f"Sync send (blocking): {message}", source=_SOURCE)
        self._sleep(self._ack_delay)
        self._logger.log(LogLevel.INFO, "Sync acknowledgment received", source=_SOURCE)

    def send_async(self, message: str) -> None:
        """Queue *message* globally and return immediately."""
        self._enqueue_global(message)
        self._logger.log(LogLevel.INFO, f"Async send (non-blocking): {message}", source=_SOURCE)

    def receive_global(self) -> str | None:
        """Pop the oldest global message, or None if the queue is empty."""
        with self._lock:
            message = self._global.receive()
        if message is not None:
            self._logger.log(LogLevel.INFO, f"Global receive: {message}", source=_SOURCE)
        return message

    def notify_completion(self, pid: int) -> str:
        """Announce on the global queue that *pid* has completed.

        Returns:
            The notification text.

        """
        notification = f"Process {pid} has completed"
        self._enqueue_global(notification)
        self._logger.log(LogLevel.INFO, f"Notification: {notification}", source=_SOURCE)
        return notification

    def status(self) -> IPCStatus:
        """Return queue depths for diagnostics."""
        with self._lock:
            return IPCStatus(
                global_queue_depth=self._global.size,
                mailboxes={pid: box.size for pid, box in self._mailboxes.items()},
            )

    def _enqueue_global(self, message: str) -> None:
        with self._lock:
            self._global.send(message)
