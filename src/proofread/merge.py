"""Combine suggestions from every checker into one presentation order."""
from __future__ import annotations

from typing import Iterable, List

from .models import Suggestion


def _sort_key(suggestion: Suggestion) -> tuple[int, int, int]:
    return (suggestion.start, suggestion.kind.priority, suggestion.end)


def merge_suggestions(groups: Iterable[Iterable[Suggestion]]) -> List[Suggestion]:
    """Return all suggestions ordered by start offset with cross-checker duplicates removed.

    Ties on ``start`` are broken by kind priority (spelling, grammar, style).
    Entries identical in ``(start, end, text, replacement)`` collapse into the
    first one in that order.
    """

    combined = [suggestion for group in groups for suggestion in group]
    combined.sort(key=_sort_key)

    merged: List[Suggestion] = []
    seen: set[tuple[int, int, str, str]] = set()
    for suggestion in combined:
        if suggestion.identity in seen:
            continue
        seen.add(suggestion.identity)
        merged.append(suggestion)
    return merged


__all__ = ["merge_suggestions"]
