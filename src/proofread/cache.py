"""Per-unit cache of checker results keyed by unit id and validated by content hash."""
from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import CacheEntry, RawSuggestion, TextUnit

LOGGER = logging.getLogger(__name__)


class SuggestionCache:
    """Map unit ids to the last suggestion set computed for that unit's content.

    An entry is only valid while its stored hash equals the unit's freshly
    computed hash; there is no time-based expiry.
    """

    def __init__(self, name: str = "default", *, max_entries: int = 2048) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be a positive integer")
        self.name = name
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def lookup(self, unit: TextUnit) -> Optional[List[RawSuggestion]]:
        entry = self._entries.get(unit.id)
        if entry is None or entry.unit_hash != unit.hash:
            self.misses += 1
            return None
        self._entries.move_to_end(unit.id)
        self.hits += 1
        return list(entry.suggestions)

    def store(self, unit: TextUnit, suggestions: Iterable[RawSuggestion]) -> CacheEntry:
        entry = CacheEntry(unit_hash=unit.hash, suggestions=list(suggestions))
        self._entries[unit.id] = entry
        self._entries.move_to_end(unit.id)
        while len(self._entries) > self.max_entries:
            evicted_id, _ = self._entries.popitem(last=False)
            LOGGER.debug("Cache %s evicted %s", self.name, evicted_id)
        return entry

    def partition(self, units: Sequence[TextUnit]) -> Tuple[List[TextUnit], List[TextUnit]]:
        """Split units into ``(dirty, clean)`` without touching hit statistics."""

        dirty: List[TextUnit] = []
        clean: List[TextUnit] = []
        for unit in units:
            entry = self._entries.get(unit.id)
            if entry is not None and entry.unit_hash == unit.hash:
                clean.append(unit)
            else:
                dirty.append(unit)
        return dirty, clean

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._entries

    def stats(self) -> dict[str, int]:
        return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses}


__all__ = ["SuggestionCache"]
