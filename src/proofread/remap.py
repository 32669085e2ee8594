"""Keep suggestion and highlight offsets aligned with a mutating buffer."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .merge import merge_suggestions
from .models import Edit, HighlightMark, Suggestion

LOGGER = logging.getLogger(__name__)


def remap_span(start: int, end: int, edit: Edit) -> Optional[Tuple[int, int]]:
    """Return the span's offsets after ``edit``, or ``None`` when the edit touched it.

    Spans ending at or before the edit are unchanged, spans starting at or
    after the edited range shift by the edit's delta, and anything else no
    longer refers to text that exists verbatim.
    """

    if end <= edit.start:
        return start, end
    if start >= edit.end:
        return start + edit.delta, end + edit.delta
    return None


class ActiveSuggestions:
    """Suggestions currently shown to the user, grouped by the checker that produced them.

    Highlights are kept as a separate collection because they are what the
    rendering surface holds, and both are remapped in the same call.
    """

    def __init__(self) -> None:
        self._by_source: Dict[str, List[Suggestion]] = {}
        self._highlights: Dict[str, HighlightMark] = {}

    def replace_source(self, source: str, suggestions: Iterable[Suggestion]) -> None:
        """Swap in a fresh result set for ``source``.

        A re-reported issue keeps the id it was first shown under, so clients
        holding that id can still act on it after another pass.
        """

        previous = {item.identity: item.id for item in self._by_source.get(source, [])}
        fresh = list(suggestions)
        for suggestion in fresh:
            suggestion.id = previous.get(suggestion.identity, suggestion.id)
        self._by_source[source] = fresh
        self._rebuild_highlights()

    def clear(self) -> None:
        self._by_source.clear()
        self._highlights.clear()

    def merged(self) -> List[Suggestion]:
        return merge_suggestions(self._by_source.values())

    def highlights(self) -> List[HighlightMark]:
        return sorted(self._highlights.values(), key=lambda mark: (mark.from_offset, mark.to_offset))

    def get(self, suggestion_id: str) -> Optional[Suggestion]:
        for suggestions in self._by_source.values():
            for suggestion in suggestions:
                if suggestion.id == suggestion_id:
                    return suggestion
        return None

    def remove(self, suggestion: Suggestion) -> List[Suggestion]:
        """Remove ``suggestion`` and every duplicate of it reported by another checker."""

        removed: List[Suggestion] = []
        for source, suggestions in self._by_source.items():
            kept: List[Suggestion] = []
            for item in suggestions:
                if item.id == suggestion.id or item.identity == suggestion.identity:
                    removed.append(item)
                else:
                    kept.append(item)
            self._by_source[source] = kept
        self._rebuild_highlights()
        return removed

    def apply_edit(self, edit: Edit) -> List[Suggestion]:
        """Remap every suggestion and highlight for ``edit``; return the dropped suggestions."""

        dropped: List[Suggestion] = []
        for source, suggestions in self._by_source.items():
            kept: List[Suggestion] = []
            for suggestion in suggestions:
                span = remap_span(suggestion.start, suggestion.end, edit)
                if span is None:
                    dropped.append(suggestion)
                    continue
                suggestion.start, suggestion.end = span
                kept.append(suggestion)
            self._by_source[source] = kept

        for mark_id in list(self._highlights):
            mark = self._highlights[mark_id]
            span = remap_span(mark.from_offset, mark.to_offset, edit)
            if span is None:
                del self._highlights[mark_id]
                continue
            mark.from_offset, mark.to_offset = span

        if dropped:
            LOGGER.debug("Edit %s-%s (delta %s) dropped %s suggestions", edit.start, edit.end, edit.delta, len(dropped))
        return dropped

    def is_consistent(self) -> bool:
        """Return ``True`` when every highlight mirrors a visible suggestion exactly."""

        visible = {suggestion.id: suggestion for suggestion in self.merged()}
        if set(visible) != set(self._highlights):
            return False
        return all(
            (mark.from_offset, mark.to_offset) == (visible[mark_id].start, visible[mark_id].end)
            for mark_id, mark in self._highlights.items()
        )

    def _rebuild_highlights(self) -> None:
        self._highlights = {
            suggestion.id: HighlightMark.for_suggestion(suggestion) for suggestion in self.merged()
        }

    def __len__(self) -> int:
        return len(self.merged())


__all__ = ["ActiveSuggestions", "remap_span"]
