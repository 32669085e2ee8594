"""Decide when each checker category analyses the document and publish its results."""
from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .buffer import TrackedBuffer
from .cache import SuggestionCache
from .checkers.base import CheckerClient
from .dismissals import DismissalStore
from .models import Suggestion, TextUnit
from .segmentation import Segmenter
from .telemetry import emit_analysis_pass, emit_exception

LOGGER = logging.getLogger(__name__)

DEFAULT_TRIGGER_WORDS = 5
_WORD_RE = re.compile(r"\w")
_SENTENCE_END = (".", "!", "?")


def count_words(text: str) -> int:
    return sum(1 for token in text.split() if _WORD_RE.search(token))


@dataclass(slots=True)
class AnalysisCategory:
    """One checker together with the segmenter and cache it analyses through."""

    name: str
    client: CheckerClient
    segmenter: Segmenter
    cache: SuggestionCache
    debounce_seconds: float
    timer: Optional[asyncio.TimerHandle] = None
    task: Optional["asyncio.Task[None]"] = None
    rerun: bool = False
    passes: int = 0
    last_error: Optional[str] = None

    @property
    def is_checking(self) -> bool:
        return self.task is not None and not self.task.done()

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class AnalysisScheduler:
    """Run at most one analysis pass per category and publish only fresh results.

    Passes start on a manual request, on a structural trigger (enough new
    words, or sentence-ending punctuation just typed) or when a category's
    debounce timer expires. A trigger that arrives while a pass is in flight
    marks the category for one more pass instead of queueing.
    """

    def __init__(
        self,
        tracked: TrackedBuffer,
        dismissals: DismissalStore,
        categories: Iterable[AnalysisCategory],
        *,
        trigger_words: int = DEFAULT_TRIGGER_WORDS,
        session_id: Optional[str] = None,
    ) -> None:
        self.tracked = tracked
        self.dismissals = dismissals
        self.categories: Dict[str, AnalysisCategory] = {category.name: category for category in categories}
        self.trigger_words = max(trigger_words, 1)
        self.session_id = session_id
        self._last_word_count = count_words(tracked.content)
        self._closed = False

    @property
    def is_checking(self) -> bool:
        return any(category.is_checking for category in self.categories.values())

    def checking_status(self) -> Dict[str, bool]:
        return {name: category.is_checking for name, category in self.categories.items()}

    def on_edit(self, inserted_text: str) -> None:
        """React to a user edit that has already been applied to the buffer."""

        if self._closed:
            return
        content = self.tracked.content
        if not content.strip():
            self.cancel_timers()
            self._last_word_count = 0
            self.tracked.active.clear()
            self.tracked.publish_decorations()
            return

        word_count = count_words(content)
        if word_count < self._last_word_count:
            self._last_word_count = word_count

        if word_count - self._last_word_count >= self.trigger_words or inserted_text.rstrip().endswith(_SENTENCE_END):
            self._last_word_count = word_count
            self.trigger("structural")
            return

        for category in self.categories.values():
            self._schedule_debounce(category)

    def trigger(self, reason: str = "manual") -> None:
        """Start a pass for every category right away."""

        if self._closed:
            return
        LOGGER.debug("Analysis triggered (%s) for session %s", reason, self.session_id)
        self.cancel_timers()
        for category in self.categories.values():
            self._start(category)

    def force_check(self) -> None:
        self._last_word_count = count_words(self.tracked.content)
        self.trigger("manual")

    async def drain(self) -> None:
        """Wait until no category has a pass in flight."""

        while True:
            tasks = [category.task for category in self.categories.values() if category.is_checking]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    def update_debounce(self, name: str, seconds: float) -> None:
        """Change a category's debounce interval; a pending timer restarts with it."""

        category = self.categories.get(name)
        if category is None:
            raise ValueError(f"Unknown checker category: {name}")
        if seconds <= 0:
            raise ValueError("Debounce interval must be positive")
        category.debounce_seconds = seconds
        LOGGER.info("Debounce for %s set to %.3fs in session %s", name, seconds, self.session_id)
        if category.timer is not None and not self._closed:
            self._schedule_debounce(category)

    def cancel_timers(self) -> None:
        for category in self.categories.values():
            category.cancel_timer()

    async def aclose(self) -> None:
        self._closed = True
        self.cancel_timers()
        tasks = [category.task for category in self.categories.values() if category.is_checking]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _schedule_debounce(self, category: AnalysisCategory) -> None:
        category.cancel_timer()
        loop = asyncio.get_running_loop()
        category.timer = loop.call_later(category.debounce_seconds, self._on_timer, category)

    def _on_timer(self, category: AnalysisCategory) -> None:
        category.timer = None
        self._start(category)

    def _start(self, category: AnalysisCategory) -> None:
        if self._closed:
            return
        if category.is_checking:
            category.rerun = True
            return
        category.task = asyncio.get_running_loop().create_task(self._run(category))

    async def _run(self, category: AnalysisCategory) -> None:
        while True:
            category.rerun = False
            try:
                await self._pass(category)
                category.last_error = None
            except asyncio.CancelledError:
                raise
            except Exception as error:
                category.last_error = str(error)
                emit_exception(module=f"{__name__}.{category.name}", error=error, session_id=self.session_id)
            if not category.rerun or self._closed:
                return

    async def _pass(self, category: AnalysisCategory) -> None:
        started = time.perf_counter()
        category.passes += 1
        units = category.segmenter.segment(self.tracked.content)
        dirty, _clean = category.cache.partition(units)

        submitted: List[TextUnit] = []
        for unit in dirty:
            if unit.text.strip():
                submitted.append(unit)
            else:
                category.cache.store(unit, [])

        batch = await category.client.check(submitted)
        for unit in submitted:
            if unit.id in batch.results:
                category.cache.store(unit, batch.results[unit.id])

        content = self.tracked.content
        live_units = category.segmenter.segment(content)
        live_hashes = {unit.id: unit.hash for unit in live_units}
        published = all(live_hashes.get(unit.id) == unit.hash for unit in submitted)
        suggestions: List[Suggestion] = []
        if published:
            suggestions = self._publish(category, live_units, content)
        else:
            LOGGER.debug("Discarding stale %s results for session %s", category.name, self.session_id)
            category.rerun = True

        emit_analysis_pass(
            session_id=self.session_id,
            checker=category.name,
            units=len(units),
            dirty=len(submitted),
            published=published,
            duration_ms=(time.perf_counter() - started) * 1000.0,
            suggestions=len(suggestions),
        )

    def _publish(self, category: AnalysisCategory, units: List[TextUnit], content: str) -> List[Suggestion]:
        suggestions: List[Suggestion] = []
        for unit in units:
            cached = category.cache.lookup(unit)
            if not cached:
                continue
            suggestions.extend(raw.to_suggestion(unit.start_offset, source=category.name) for raw in cached)

        visible = self.dismissals.filter(suggestions, content)
        self.tracked.active.replace_source(category.name, visible)
        self.tracked.publish_decorations()
        return visible


__all__ = ["AnalysisCategory", "AnalysisScheduler", "count_words"]
