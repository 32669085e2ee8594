"""Shared fixtures: scripted checkers and fast session settings."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

os.environ.setdefault("PROOFREAD_LOG_DIR", str(Path(tempfile.gettempdir()) / "proofread-test-logs"))

from proofread.checkers.base import CheckerClient  # noqa: E402
from proofread.config import CheckerSettings, ProofreadSettings  # noqa: E402
from proofread.models import SuggestionKind, TextUnit  # noqa: E402
from proofread.segmentation import SegmentationStrategy  # noqa: E402


class ScriptedChecker(CheckerClient):
    """Checker whose responses are computed by a plain function per unit.

    ``respond(unit)`` returns wire-shaped entries without ``segmentId``; the
    checker fills it in. Every submitted batch is recorded in ``batches``.
    """

    def __init__(
        self,
        name: str = "spelling",
        kinds: frozenset[SuggestionKind] = frozenset({SuggestionKind.SPELLING}),
        respond: Optional[Callable[[TextUnit], List[Dict[str, Any]]]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, kinds, **kwargs)
        self.respond = respond or (lambda unit: [])
        self.batches: List[List[TextUnit]] = []
        self.before_reply: Optional[Callable[[], Any]] = None

    async def _fetch(self, units: List[TextUnit]) -> Any:
        self.batches.append(list(units))
        if self.before_reply is not None:
            result = self.before_reply()
            if hasattr(result, "__await__"):
                await result
        entries: List[Dict[str, Any]] = []
        for unit in units:
            for entry in self.respond(unit):
                entries.append({**entry, "segmentId": unit.id})
        return {"suggestions": entries}


def spelling_entries(
    word: str, replacement: str, kind: str = "spelling"
) -> Callable[[TextUnit], List[Dict[str, Any]]]:
    """Respond with a ``kind`` suggestion for every occurrence of ``word``."""

    def respond(unit: TextUnit) -> List[Dict[str, Any]]:
        entries = []
        index = unit.text.find(word)
        while index != -1:
            entries.append(
                {
                    "text": word,
                    "suggestion": replacement,
                    "start": index,
                    "end": index + len(word),
                    "type": kind,
                }
            )
            index = unit.text.find(word, index + 1)
        return entries

    return respond


@pytest.fixture
def settings(tmp_path: Path) -> ProofreadSettings:
    return ProofreadSettings(
        data_dir=tmp_path / "data",
        checkers=[
            CheckerSettings(
                name="spelling",
                kinds=frozenset({SuggestionKind.SPELLING}),
                strategy=SegmentationStrategy.WORD_WINDOW,
                debounce_seconds=0.05,
            ),
            CheckerSettings(
                name="grammar",
                kinds=frozenset({SuggestionKind.GRAMMAR}),
                strategy=SegmentationStrategy.SENTENCE,
                debounce_seconds=0.05,
            ),
            CheckerSettings(
                name="style",
                kinds=frozenset({SuggestionKind.STYLE}),
                strategy=SegmentationStrategy.SENTENCE,
                debounce_seconds=0.05,
            ),
        ],
    )
