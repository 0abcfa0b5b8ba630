"""LRU paging demo - a tiny page cache for bank data.

Physical memory holds only a few pages.  When a new page is touched
and memory is full, the **least recently used** page is evicted.
Re-touching a resident page refreshes it to the most recently used
position without any eviction.

The recency order lives in an ``OrderedDict`` for O(1) move-to-end on
access; its first key is always the next victim.
"""

from collections import OrderedDict

from bank_os.config import DEFAULT_MAX_PAGES
from bank_os.logging import Logger, LogLevel

_SOURCE = "memory"


class PageCache:
    """Fixed-capacity page store with LRU eviction."""

    def __init__(self, *, logger: Logger, capacity: int = DEFAULT_MAX_PAGES) -> None:
        """Create an empty cache holding at most *capacity* pages.

        Raises:
            ValueError: If *capacity* is not positive.

        """
        if capacity <= 0:
            msg = f"Page capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._logger = logger
        self._capacity = capacity
        self._pages: OrderedDict[int, str] = OrderedDict()
        self._faults = 0
        self._evictions = 0

    @property
    def capacity(self) -> int:
        """Return the maximum number of resident pages."""
        return self._capacity

    @property
    def resident(self) -> list[int]:
        """Return resident page ids, least recently used first."""
        return list(self._pages)

    @property
    def memory_map(self) -> dict[int, str]:
        """Return resident pages and their contents, by page id."""
        return dict(sorted(self._pages.items()))

    @property
    def faults(self) -> int:
        """Return how many accesses found their page not resident."""
        return self._faults

    @property
    def evictions(self) -> int:
        """Return how many pages have been evicted."""
        return self._evictions

    def access(self, page_id: int, data: str) -> int | None:
        """Touch *page_id*, storing *data* in it.

        Returns:
            The evicted page id, or None if nothing was evicted.

        """
        if page_id in self._pages:
            self._pages.move_to_end(page_id)
        else:
            self._faults += 1
        self._pages[page_id] = data

        victim: int | None = None
        if len(self._pages) > self._capacity:
            victim, _ = self._pages.popitem(last=False)
            self._evictions += 1
            self._logger.log(LogLevel.INFO, f"Evicted page {victim}", source=_SOURCE)
        self._logger.log(LogLevel.DEBUG, f"Accessed page {page_id}", source=_SOURCE)
        return victim

    def render(self) -> str:
        """Render the memory map."""
        lines = ["Memory map:"]
        lines.extend(f"  Page {page}: {data}" for page, data in self.memory_map.items())
        return "\n".join(lines)
