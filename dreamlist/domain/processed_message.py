"""
Processed message cache for idempotency tracking.
Remembers which message keys were already evaluated so they are never
extracted (or dispatched) twice by this process.
"""

import logging
from collections import OrderedDict

logger = logging.getLogger(__name__)


class ProcessedMessageCache:
    """
    Bounded record of evaluated message keys.

    Capacity is a multiple of the per-poll window. Eviction is by insertion
    order (oldest first); messages are never looked up again after being
    marked, so access order carries no information.
    """

    def __init__(self, window_size: int = 50, multiplier: int = 10):
        if window_size < 1 or multiplier < 1:
            raise ValueError("window_size and multiplier must be positive")
        self.capacity = window_size * multiplier
        self._entries: "OrderedDict[str, bool]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def seen(self, key: str) -> bool:
        """Return True if the key was already evaluated."""
        return key in self._entries

    def mark(self, key: str) -> None:
        """Mark a key as evaluated. Re-marking keeps the original position."""
        if key not in self._entries:
            self._entries[key] = True

    def evict_if_oversized(self) -> int:
        """
        Drop the oldest keys until the cache is back within capacity.

        Returns:
            Number of evicted keys
        """
        evicted = 0
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)
            evicted += 1

        if evicted:
            logger.debug(f"Evicted {evicted} processed message keys (capacity {self.capacity})")
        return evicted
