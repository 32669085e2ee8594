"""Commit a chosen suggestion into the live buffer without touching unrelated text."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .buffer import TrackedBuffer
from .errors import StaleSuggestionError
from .models import Suggestion

LOGGER = logging.getLogger(__name__)

DEFAULT_SEARCH_WINDOW = 50


@dataclass(slots=True)
class AppliedSuggestion:
    """Outcome of a successful :meth:`ApplicationEngine.apply` call."""

    suggestion: Suggestion
    located_at: int
    drifted: bool
    dropped: List[Suggestion] = field(default_factory=list)


def _nearest_occurrence(haystack: str, needle: str, target: int, *, base: int = 0) -> Optional[int]:
    best: Optional[int] = None
    index = haystack.find(needle)
    while index != -1:
        candidate = base + index
        if best is None or abs(candidate - target) < abs(best - target):
            best = candidate
        index = haystack.find(needle, index + 1)
    return best


class ApplicationEngine:
    """Replace a suggestion's span with its replacement through the tracked buffer."""

    def __init__(self, tracked: TrackedBuffer, *, search_window: int = DEFAULT_SEARCH_WINDOW) -> None:
        self.tracked = tracked
        self.search_window = max(search_window, 0)

    def locate(self, suggestion: Suggestion, content: str) -> Optional[int]:
        """Return where ``suggestion.text`` currently lives, preferring its recorded offset."""

        if content[suggestion.start:suggestion.end] == suggestion.text:
            return suggestion.start

        window_start = max(0, suggestion.start - self.search_window)
        window_end = min(len(content), suggestion.end + self.search_window)
        located = _nearest_occurrence(
            content[window_start:window_end], suggestion.text, suggestion.start, base=window_start
        )
        if located is not None:
            return located

        return _nearest_occurrence(content, suggestion.text, suggestion.start)

    def apply(self, suggestion: Suggestion) -> AppliedSuggestion:
        content = self.tracked.content
        located = self.locate(suggestion, content)
        if located is None:
            self.tracked.active.remove(suggestion)
            self.tracked.publish_decorations()
            LOGGER.info("Suggestion %s is stale: %r no longer present", suggestion.id, suggestion.text)
            raise StaleSuggestionError(
                f"The text {suggestion.text!r} is no longer in the document.",
                suggestion_id=suggestion.id,
            )

        drifted = located != suggestion.start
        if drifted:
            LOGGER.info(
                "Suggestion %s drifted from %s to %s before apply", suggestion.id, suggestion.start, located
            )
        dropped = self.tracked.replace_range(
            located,
            located + len(suggestion.text),
            suggestion.replacement,
            move_caret=True,
        )
        # A drifted suggestion's recorded span need not overlap the replaced range.
        dropped = [item for item in dropped if item is not suggestion]
        self.tracked.active.remove(suggestion)
        self.tracked.publish_decorations()
        return AppliedSuggestion(suggestion=suggestion, located_at=located, drifted=drifted, dropped=dropped)


__all__ = ["AppliedSuggestion", "ApplicationEngine", "StaleSuggestionError"]
