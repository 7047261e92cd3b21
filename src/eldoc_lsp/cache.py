"""Region-keyed cache of completion backend answers for one document."""

from __future__ import annotations

import bisect
import logging
from typing import TYPE_CHECKING

from eldoc_lsp.models import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from eldoc_lsp.models import Candidate

logger = logging.getLogger(__name__)


class ResultCache:
    """Candidates per source region, evicted by any edit touching the region.

    Entries are kept sorted by start offset and move with the text when an
    edit happens before them, the way editor annotations do.
    """

    def __init__(self):
        self._entries: list[CacheEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(list(self._entries))

    def _starts(self) -> list[int]:
        return [entry.start for entry in self._entries]

    def lookup(self, start: int, end: int) -> CacheEntry | None:
        """Get the entry stored for exactly ``[start, end)``."""
        index = bisect.bisect_left(self._starts(), start)
        while index < len(self._entries) and self._entries[index].start == start:
            entry = self._entries[index]
            if entry.end == end:
                return entry
            index += 1
        return None

    def entries_at(self, offset: int) -> list[CacheEntry]:
        """Get all entries whose region covers ``offset``."""
        return [entry for entry in self._entries if entry.start <= offset < entry.end]

    def store(
        self, start: int, end: int, source_text: str, candidates: Iterable[Candidate]
    ) -> CacheEntry:
        """Store candidates for ``[start, end)``, replacing overlapping entries."""
        stale = [e for e in self._entries if e.start < end and start < e.end]
        for entry in stale:
            self._entries.remove(entry)
        if stale:
            logger.debug(f"Replaced {len(stale)} overlapping cache entries at [{start}, {end})")

        entry = CacheEntry(start, end, source_text, tuple(candidates))
        index = bisect.bisect_right(self._starts(), start)
        self._entries.insert(index, entry)
        return entry

    def invalidate(self, start: int, end: int, inserts: bool = True) -> int:
        """Remove entries touched by an edit of ``[start, end)``.

        An edit overlapping a region touches it. An edit that ``inserts`` text
        also touches a region it only borders, while a pure deletion next to a
        region leaves it alone.

        Returns:
            Number of removed entries
        """

        def touches(entry: CacheEntry) -> bool:
            if start < entry.end and end > entry.start:
                return True
            return inserts and start <= entry.end and end >= entry.start

        kept = [e for e in self._entries if not touches(e)]
        removed = len(self._entries) - len(kept)
        self._entries = kept
        if removed:
            logger.debug(f"Invalidated {removed} cache entries for edit at [{start}, {end})")
        return removed

    def apply_edit(self, start: int, end: int, inserted_length: int) -> int:
        """Account for replacing ``[start, end)`` with ``inserted_length`` characters.

        Touched entries are removed; entries after the edit are shifted.

        Returns:
            Number of removed entries
        """
        removed = self.invalidate(start, end, inserts=inserted_length > 0)
        delta = inserted_length - (end - start)
        if delta:
            self._entries = [e.shifted(delta) if e.start >= end else e for e in self._entries]
        return removed

    def reset_all(self) -> int:
        """Remove every entry.

        Returns:
            Number of removed entries
        """
        removed = len(self._entries)
        self._entries = []
        if removed:
            logger.info(f"Cleared {removed} cache entries")
        return removed
