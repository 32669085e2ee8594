"""Data models shared by the suggestion engine."""
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SuggestionKind(str, Enum):
    """Categories of suggestions a checker can emit."""

    SPELLING = "spelling"
    GRAMMAR = "grammar"
    STYLE = "style"

    @property
    def priority(self) -> int:
        """Lower values are presented first when suggestions share a start offset."""

        return _KIND_PRIORITY[self]

    @property
    def color_tag(self) -> str:
        return _KIND_COLORS[self]


_KIND_PRIORITY = {
    SuggestionKind.SPELLING: 0,
    SuggestionKind.GRAMMAR: 1,
    SuggestionKind.STYLE: 2,
}

_KIND_COLORS = {
    SuggestionKind.SPELLING: "red",
    SuggestionKind.GRAMMAR: "yellow",
    SuggestionKind.STYLE: "purple",
}


def _new_suggestion_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(slots=True)
class TextUnit:
    """Offset-stable slice of the document analysed and cached as one granule."""

    id: str
    text: str
    hash: str
    start_offset: int
    end_offset: int


@dataclass(slots=True)
class RawSuggestion:
    """Checker output with offsets relative to the submitted unit."""

    unit_id: str
    text: str
    replacement: str
    start: int
    end: int
    kind: SuggestionKind
    description: Optional[str] = None

    def to_suggestion(self, unit_start: int, *, source: str) -> "Suggestion":
        return Suggestion(
            text=self.text,
            replacement=self.replacement,
            start=unit_start + self.start,
            end=unit_start + self.end,
            kind=self.kind,
            description=self.description,
            source=source,
        )


@dataclass(slots=True)
class Suggestion:
    """Active suggestion expressed in absolute document offsets."""

    text: str
    replacement: str
    start: int
    end: int
    kind: SuggestionKind
    description: Optional[str] = None
    source: str = ""
    id: str = field(default_factory=_new_suggestion_id)

    @property
    def identity(self) -> tuple[int, int, str, str]:
        """Key under which suggestions from different checkers are considered equal."""

        return (self.start, self.end, self.text, self.replacement)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "id": self.id,
            "text": self.text,
            "replacement": self.replacement,
            "start": self.start,
            "end": self.end,
            "kind": self.kind.value,
            "source": self.source,
        }
        if self.description:
            payload["description"] = self.description
        return payload


@dataclass(slots=True)
class CacheEntry:
    """Last-known checker result for a unit's content."""

    unit_hash: str
    suggestions: list[RawSuggestion]
    timestamp: float = field(default_factory=time.time)


@dataclass(slots=True)
class DismissalRecord:
    """A user-suppressed issue keyed by its context fingerprint."""

    fingerprint: str
    dismissed_at: float = field(default_factory=time.time)


@dataclass(slots=True)
class HighlightMark:
    """Rendering projection of an active suggestion."""

    from_offset: int
    to_offset: int
    color_tag: str
    id: str

    @classmethod
    def for_suggestion(cls, suggestion: Suggestion) -> "HighlightMark":
        return cls(
            from_offset=suggestion.start,
            to_offset=suggestion.end,
            color_tag=suggestion.kind.color_tag,
            id=suggestion.id,
        )

    def to_dict(self) -> dict[str, object]:
        return {"from": self.from_offset, "to": self.to_offset, "colorTag": self.color_tag, "id": self.id}


@dataclass(slots=True, frozen=True)
class Edit:
    """A single buffer mutation replacing ``[start, end)`` with ``inserted_length`` characters."""

    start: int
    end: int
    inserted_length: int

    @property
    def delta(self) -> int:
        return self.inserted_length - (self.end - self.start)
