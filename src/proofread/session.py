"""One editing context: a buffer plus everything that analyses and edits it."""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from .apply import AppliedSuggestion, ApplicationEngine
from .buffer import EditorBuffer, InMemoryEditorBuffer, TrackedBuffer
from .cache import SuggestionCache
from .checkers.base import CheckerClient
from .config import DEFAULT_DEBOUNCE_SECONDS, DEFAULT_STRATEGIES, CheckerSettings, ProofreadSettings
from .dismissals import DismissalStore
from .errors import StaleSuggestionError, SuggestionNotFoundError
from .logging_config import AUDIT_LOGGER_NAME
from .models import HighlightMark, Suggestion
from .remap import ActiveSuggestions
from .scheduler import AnalysisCategory, AnalysisScheduler
from .segmentation import SegmentationConfig, SegmentationStrategy, Segmenter
from .telemetry import emit_suggestion_event

LOGGER = logging.getLogger(__name__)
AUDIT_LOGGER = logging.getLogger(AUDIT_LOGGER_NAME)


class EditorSession:
    """Own the buffer, analysis state and user actions of a single document.

    Methods that may start analysis (:meth:`handle_edit`, :meth:`apply`,
    :meth:`clear_dismissals`) must be called from a running event loop.
    """

    def __init__(
        self,
        clients: Mapping[str, CheckerClient],
        *,
        settings: Optional[ProofreadSettings] = None,
        content: str = "",
        buffer: Optional[EditorBuffer] = None,
        session_id: Optional[str] = None,
        title: str = "",
        document_id: Optional[str] = None,
    ) -> None:
        self.settings = settings or ProofreadSettings()
        self.session_id = session_id or uuid.uuid4().hex
        self.title = title
        self.document_id = document_id
        self.buffer = buffer or InMemoryEditorBuffer(content)
        self.active = ActiveSuggestions()
        self.tracked = TrackedBuffer(self.buffer, self.active)
        self.dismissals = DismissalStore(self.settings.context_chars)
        self.engine = ApplicationEngine(self.tracked, search_window=self.settings.apply_search_window)
        self.categories = [self._build_category(name, client) for name, client in clients.items()]
        self.scheduler = AnalysisScheduler(
            self.tracked,
            self.dismissals,
            self.categories,
            trigger_words=self.settings.trigger_words,
            session_id=self.session_id,
        )

    def _checker_settings(self, name: str) -> CheckerSettings:
        for checker in self.settings.checkers:
            if checker.name == name:
                return checker
        return CheckerSettings(
            name=name,
            kinds=frozenset(),
            strategy=DEFAULT_STRATEGIES.get(name, SegmentationStrategy.SENTENCE),
            debounce_seconds=DEFAULT_DEBOUNCE_SECONDS.get(name, 5.0),
        )

    def _build_category(self, name: str, client: CheckerClient) -> AnalysisCategory:
        checker = self._checker_settings(name)
        segmenter = Segmenter(
            SegmentationConfig(
                strategy=checker.strategy,
                words_per_unit=self.settings.words_per_unit,
                strict=self.settings.strict_segmentation,
            )
        )
        return AnalysisCategory(
            name=name,
            client=client,
            segmenter=segmenter,
            cache=SuggestionCache(name, max_entries=self.settings.cache_max_entries),
            debounce_seconds=checker.debounce_seconds,
        )

    @property
    def content(self) -> str:
        return self.tracked.content

    @property
    def is_checking(self) -> Dict[str, bool]:
        return self.scheduler.checking_status()

    @property
    def dismissed_count(self) -> int:
        return len(self.dismissals)

    def handle_edit(self, start: int, end: int, text: str) -> List[Suggestion]:
        """Apply a user edit and let the scheduler decide whether to analyse."""

        dropped = self.tracked.replace_range(start, end, text)
        self.scheduler.on_edit(text)
        return dropped

    async def force_check(self) -> List[Suggestion]:
        self.scheduler.force_check()
        await self.scheduler.drain()
        return self.suggestions()

    def suggestions(self) -> List[Suggestion]:
        return self.active.merged()

    def highlights(self) -> List[HighlightMark]:
        return self.active.highlights()

    def get_suggestion(self, suggestion_id: str) -> Suggestion:
        suggestion = self.active.get(suggestion_id)
        if suggestion is None:
            raise SuggestionNotFoundError(f"Suggestion {suggestion_id} is not active.")
        return suggestion

    def apply(self, suggestion_id: str) -> AppliedSuggestion:
        suggestion = self.get_suggestion(suggestion_id)
        try:
            applied = self.engine.apply(suggestion)
        except StaleSuggestionError:
            self._audit("apply", suggestion, outcome="stale")
            raise
        self._audit("apply", suggestion, outcome="ok", located_at=applied.located_at, drifted=applied.drifted)
        self.scheduler.on_edit(suggestion.replacement)
        return applied

    def dismiss(self, suggestion_id: str) -> Suggestion:
        suggestion = self.get_suggestion(suggestion_id)
        content = self.content
        # Duplicates from other checkers carry a different kind; each needs its own fingerprint.
        for item in self.active.remove(suggestion) or [suggestion]:
            self.dismissals.dismiss(item, content)
        self.tracked.publish_decorations()
        self._audit("dismiss", suggestion, outcome="ok")
        return suggestion

    def clear_dismissals(self) -> int:
        cleared = len(self.dismissals)
        self.dismissals.clear()
        LOGGER.info("Cleared %s dismissals for session %s", cleared, self.session_id)
        if cleared and self.content.strip():
            self.scheduler.trigger("dismissals-cleared")
        return cleared

    def update_debounce(self, intervals: Mapping[str, float]) -> Dict[str, float]:
        """Set debounce intervals per category; nothing changes if any entry is invalid."""

        unknown = sorted(set(intervals) - set(self.scheduler.categories))
        if unknown:
            raise ValueError(f"Unknown checker categories: {', '.join(unknown)}")
        if any(seconds <= 0 for seconds in intervals.values()):
            raise ValueError("Debounce interval must be positive")
        for name, seconds in intervals.items():
            self.scheduler.update_debounce(name, seconds)
        return self.debounce_intervals

    @property
    def debounce_intervals(self) -> Dict[str, float]:
        return {category.name: category.debounce_seconds for category in self.categories}

    def clear_cache(self) -> None:
        for category in self.categories:
            category.cache.clear()

    def snapshot(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "documentId": self.document_id,
            "title": self.title,
            "content": self.content,
            "suggestions": [suggestion.to_dict() for suggestion in self.suggestions()],
            "highlights": [mark.to_dict() for mark in self.highlights()],
            "dismissed": self.dismissed_count,
            "checking": self.is_checking,
            "cache": {category.name: category.cache.stats() for category in self.categories},
        }

    async def drain(self) -> None:
        await self.scheduler.drain()

    async def aclose(self) -> None:
        await self.scheduler.aclose()

    def _audit(self, action: str, suggestion: Suggestion, *, outcome: str, **payload: Any) -> None:
        emit_suggestion_event(
            action,
            session_id=self.session_id,
            suggestion_id=suggestion.id,
            kind=suggestion.kind.value,
            outcome=outcome,
            **payload,
        )
        AUDIT_LOGGER.info(
            {
                "event": action,
                "session_id": self.session_id,
                "suggestion_id": suggestion.id,
                "kind": suggestion.kind.value,
                "text": suggestion.text,
                "replacement": suggestion.replacement,
                "outcome": outcome,
            }
        )


__all__ = ["EditorSession"]
