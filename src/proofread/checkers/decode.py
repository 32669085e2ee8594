"""Strict decoding of checker service responses.

Every entry is validated on its own and turned into a tagged result, so one
bad entry never voids the rest of a batch. Offsets reported by a checker are
re-anchored on the entry's text inside the submitted unit: services that see
the unit wrapped in a prompt (quotes, prefixes) tend to report offsets shifted
by the wrapper, and the text itself is the only reliable anchor.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, model_validator

from ..errors import MalformedCheckerResponse, TransientCheckerFailure
from ..models import RawSuggestion, SuggestionKind, TextUnit


class CheckerSuggestionPayload(BaseModel):
    """One suggestion entry as it appears on the wire."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    text: StrictStr = Field(..., min_length=1)
    suggestion: StrictStr
    start: StrictInt = Field(..., ge=0)
    end: StrictInt = Field(..., ge=1)
    type: SuggestionKind
    description: Optional[StrictStr] = None
    segment_id: Optional[StrictStr] = Field(None, alias="segmentId")

    @model_validator(mode="after")
    def _check_span(self) -> "CheckerSuggestionPayload":
        if self.end <= self.start:
            raise ValueError("end must be greater than start")
        return self


class CheckerResponsePayload(BaseModel):
    """Envelope of a checker response; anything else is a decode failure."""

    model_config = ConfigDict(extra="ignore")

    suggestions: List[Any]


@dataclass(slots=True, frozen=True)
class DecodeOk:
    suggestion: RawSuggestion


@dataclass(slots=True, frozen=True)
class DecodeErr:
    reason: str
    entry: Any = None


DecodeResult = Union[DecodeOk, DecodeErr]


def decode_envelope(payload: Any) -> List[Any]:
    """Return the raw entries of a response or raise :class:`TransientCheckerFailure`."""

    try:
        envelope = CheckerResponsePayload.model_validate(payload)
    except ValidationError as error:
        raise TransientCheckerFailure("checker response has an unexpected shape", cause=error) from error
    return envelope.suggestions


def anchor_span(unit_text: str, text: str, start: int, end: int) -> Optional[Tuple[int, int]]:
    """Return the span of ``text`` inside ``unit_text`` closest to the reported ``start``."""

    if end <= len(unit_text) and unit_text[start:end] == text:
        return start, end
    best: Optional[int] = None
    index = unit_text.find(text)
    while index != -1:
        if best is None or abs(index - start) < abs(best - start):
            best = index
        index = unit_text.find(text, index + 1)
    if best is None:
        return None
    return best, best + len(text)


def _resolve_entry(
    entry: Any,
    units: Mapping[str, TextUnit],
    allowed_kinds: frozenset[SuggestionKind],
) -> RawSuggestion:
    try:
        payload = CheckerSuggestionPayload.model_validate(entry)
    except ValidationError as error:
        fields = ", ".join(".".join(str(part) for part in item["loc"]) or "<entry>" for item in error.errors())
        raise MalformedCheckerResponse(f"invalid fields: {fields}", cause=error) from error

    if payload.type not in allowed_kinds:
        raise MalformedCheckerResponse(f"unexpected kind {payload.type.value}")

    if payload.segment_id is not None:
        unit = units.get(payload.segment_id)
        if unit is None:
            raise MalformedCheckerResponse(f"unknown segmentId {payload.segment_id}")
    elif len(units) == 1:
        unit = next(iter(units.values()))
    else:
        raise MalformedCheckerResponse("segmentId is required for multi-segment requests")

    span = anchor_span(unit.text, payload.text, payload.start, payload.end)
    if span is None:
        raise MalformedCheckerResponse("text not found in unit")

    start, end = span
    return RawSuggestion(
        unit_id=unit.id,
        text=payload.text,
        replacement=payload.suggestion,
        start=start,
        end=end,
        kind=payload.type,
        description=payload.description,
    )


def decode_entry(
    entry: Any,
    units: Mapping[str, TextUnit],
    *,
    allowed_kinds: frozenset[SuggestionKind],
) -> DecodeResult:
    """Decode one response entry against the units it may refer to."""

    try:
        return DecodeOk(_resolve_entry(entry, units, allowed_kinds))
    except MalformedCheckerResponse as error:
        return DecodeErr(reason=str(error), entry=entry)


__all__ = [
    "CheckerResponsePayload",
    "CheckerSuggestionPayload",
    "DecodeErr",
    "DecodeOk",
    "DecodeResult",
    "anchor_span",
    "decode_entry",
    "decode_envelope",
]
