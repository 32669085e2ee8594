"""Session-scoped store of suggestions the user chose to hide."""
from __future__ import annotations

import logging
from typing import Iterable, List

from .hashing import fingerprint
from .models import DismissalRecord, Suggestion

LOGGER = logging.getLogger(__name__)

DEFAULT_CONTEXT_CHARS = 50


class DismissalStore:
    """Recognise dismissed issues by the text surrounding them rather than by position.

    The fingerprint covers ``context_chars`` characters on each side of the
    span plus the suggestion's text, replacement and kind. Shifting the issue
    keeps it suppressed; editing anything inside the window makes the stored
    fingerprint unreachable, which expires the dismissal.
    """

    def __init__(self, context_chars: int = DEFAULT_CONTEXT_CHARS) -> None:
        self.context_chars = max(context_chars, 0)
        self._records: dict[str, DismissalRecord] = {}

    def fingerprint_for(self, suggestion: Suggestion, document_text: str) -> str:
        window_start = max(0, suggestion.start - self.context_chars)
        window_end = min(len(document_text), suggestion.end + self.context_chars)
        context = document_text[window_start:window_end]
        return fingerprint(context, suggestion.text, suggestion.replacement, suggestion.kind.value)

    def dismiss(self, suggestion: Suggestion, document_text: str) -> DismissalRecord:
        key = self.fingerprint_for(suggestion, document_text)
        record = self._records.get(key)
        if record is None:
            record = self._records[key] = DismissalRecord(fingerprint=key)
        LOGGER.debug("Dismissed %s suggestion %r -> %r", suggestion.kind.value, suggestion.text, suggestion.replacement)
        return record

    def is_dismissed(self, suggestion: Suggestion, document_text: str) -> bool:
        if not self._records:
            return False
        return self.fingerprint_for(suggestion, document_text) in self._records

    def filter(self, suggestions: Iterable[Suggestion], document_text: str) -> List[Suggestion]:
        return [item for item in suggestions if not self.is_dismissed(item, document_text)]

    def clear(self) -> None:
        self._records.clear()

    def records(self) -> List[DismissalRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)


__all__ = ["DismissalStore", "DEFAULT_CONTEXT_CHARS"]
