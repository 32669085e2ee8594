"""Split document text into offset-stable analysis units."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Tuple

from .errors import SegmentationInvariantViolation
from .hashing import content_hash
from .models import TextUnit

_WORD_SPLIT_RE = re.compile(r"(\s+)")
_SENTENCE_RE = re.compile(r"[^.!?]*[.!?]+\s*")
_SENTENCE_END_RE = re.compile(r"[.!?]")
LOGGER = logging.getLogger(__name__)


class SegmentationStrategy(str, Enum):
    """Supported ways of cutting a document into units."""

    WORD_WINDOW = "word_window"
    SENTENCE = "sentence"


@dataclass(slots=True)
class SegmentationConfig:
    strategy: SegmentationStrategy = SegmentationStrategy.SENTENCE
    words_per_unit: int = 5
    strict: bool = True


class Segmenter:
    """Produce units whose concatenated text reconstructs the document exactly.

    Trailing whitespace stays with the unit it follows, so a unit's hash only
    changes when its own words or the spacing after them change.
    """

    def __init__(self, config: SegmentationConfig | None = None) -> None:
        self.config = config or SegmentationConfig()

    @property
    def strategy(self) -> SegmentationStrategy:
        return self.config.strategy

    def segment(self, text: str) -> List[TextUnit]:
        if not text:
            return []
        units = self._build_units(text, self._split(text))
        try:
            self._verify(text, units)
        except SegmentationInvariantViolation:
            if self.config.strict:
                raise
            LOGGER.error(
                "Segmentation invariant violated for %s strategy; falling back to a single unit",
                self.strategy.value,
            )
            return self._build_units(text, [(0, len(text))])
        return units

    def _split(self, text: str) -> List[Tuple[int, int]]:
        splitter = getattr(self, f"_split_{self.strategy.value}")
        return list(splitter(text))

    def _split_word_window(self, text: str) -> Iterator[Tuple[int, int]]:
        words_per_unit = max(self.config.words_per_unit, 1)
        unit_start = 0
        offset = 0
        word_count = 0
        pending_break = False
        for part in _WORD_SPLIT_RE.split(text):
            if not part:
                continue
            is_word = not part.isspace()
            if is_word and pending_break:
                yield unit_start, offset
                unit_start = offset
                word_count = 0
                pending_break = False
            offset += len(part)
            if is_word:
                word_count += 1
                if word_count >= words_per_unit or _SENTENCE_END_RE.search(part):
                    pending_break = True
        if offset > unit_start:
            yield unit_start, offset

    def _split_sentence(self, text: str) -> Iterator[Tuple[int, int]]:
        position = 0
        for match in _SENTENCE_RE.finditer(text):
            if match.start() != position:
                break
            yield match.start(), match.end()
            position = match.end()
        if position < len(text):
            yield position, len(text)

    def _build_units(self, text: str, spans: List[Tuple[int, int]]) -> List[TextUnit]:
        occurrences: dict[str, int] = {}
        units: List[TextUnit] = []
        for start, end in spans:
            unit_text = text[start:end]
            unit_hash = content_hash(unit_text)
            occurrence = occurrences.get(unit_hash, 0)
            occurrences[unit_hash] = occurrence + 1
            units.append(
                TextUnit(
                    id=f"{self.strategy.value}:{unit_hash}:{occurrence}",
                    text=unit_text,
                    hash=unit_hash,
                    start_offset=start,
                    end_offset=end,
                )
            )
        LOGGER.debug("Segmented %s chars into %s %s units", len(text), len(units), self.strategy.value)
        return units

    @staticmethod
    def _verify(text: str, units: List[TextUnit]) -> None:
        expected_start = 0
        for unit in units:
            if unit.start_offset != expected_start or unit.end_offset <= unit.start_offset:
                raise SegmentationInvariantViolation(
                    f"unit {unit.id} spans {unit.start_offset}-{unit.end_offset}, expected start {expected_start}"
                )
            expected_start = unit.end_offset
        if "".join(unit.text for unit in units) != text:
            raise SegmentationInvariantViolation("units do not reconstruct the document text")


def segment(
    text: str,
    strategy: SegmentationStrategy | str = SegmentationStrategy.SENTENCE,
    *,
    words_per_unit: int = 5,
) -> List[TextUnit]:
    """Convenience wrapper returning the units of ``text`` for ``strategy``."""

    config = SegmentationConfig(strategy=SegmentationStrategy(strategy), words_per_unit=words_per_unit)
    return Segmenter(config).segment(text)


__all__ = ["SegmentationConfig", "SegmentationStrategy", "Segmenter", "segment"]
