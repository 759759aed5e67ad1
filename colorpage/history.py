"""Snapshot history for multi-step undo."""

import logging
from typing import List, Optional

from .types import HistoryError, ImageArray

logger = logging.getLogger(__name__)


class HistoryStack:
    """Append-only log of page snapshots; undo truncates it.

    Every entry is a private copy, and every page handed back is another
    copy, so the live editable page never aliases a snapshot. Once reset,
    the stack always holds at least its base entry.
    """

    def __init__(self, max_depth: Optional[int] = None):
        """
        Args:
            max_depth: Optional cap on the number of entries. When exceeded,
                       the oldest edit snapshot is dropped; the base entry
                       is always kept.
        """
        if max_depth is not None and max_depth < 2:
            raise ValueError(f"max_depth must be >= 2, got {max_depth}")
        self.max_depth = max_depth
        self._entries: List[ImageArray] = []

    def __len__(self) -> int:
        return len(self._entries)

    def reset(self, page: ImageArray) -> None:
        """Clear the stack and make page its single base entry."""
        self._entries = [page.copy()]

    def push(self, page: ImageArray) -> None:
        if not self._entries:
            raise HistoryError("History has not been initialized; call reset() first")

        self._entries.append(page.copy())

        if self.max_depth is not None and len(self._entries) > self.max_depth:
            # Index 0 is the generated page and is never discarded
            del self._entries[1]

        logger.debug(f"History depth {len(self._entries)}")

    def undo(self) -> ImageArray:
        """Remove the newest entry and return a copy of the new newest.

        With only the base entry left this is a no-op that returns a copy
        of it.
        """
        if not self._entries:
            raise HistoryError("History has not been initialized; call reset() first")

        if len(self._entries) > 1:
            self._entries.pop()

        return self._entries[-1].copy()

    def current(self) -> ImageArray:
        if not self._entries:
            raise HistoryError("History has not been initialized; call reset() first")
        return self._entries[-1].copy()
