"""Rule-based checkers used for tests and offline development.

They emit wire-shaped payloads so that responses go through the same decoding
path as those of a remote service.
"""
from __future__ import annotations

import asyncio
import re
from typing import Any, Callable, Dict, Iterable, List, Pattern, Tuple

from ..models import SuggestionKind, TextUnit
from .base import DEFAULT_TIMEOUT_SECONDS, CheckerClient

Rule = Tuple[Pattern[str], Callable[[re.Match[str]], str], str]

_MISSPELLINGS: Dict[str, str] = {
    "teh": "the",
    "recieve": "receive",
    "adn": "and",
    "wiht": "with",
    "definately": "definitely",
    "seperate": "separate",
    "occured": "occurred",
    "untill": "until",
    "becuase": "because",
    "thier": "their",
}


def _match_case(original: str, replacement: str) -> str:
    if original.isupper() and len(original) > 1:
        return replacement.upper()
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def _spelling_rules() -> List[Rule]:
    pattern = re.compile(r"\b(" + "|".join(_MISSPELLINGS) + r")\b", re.IGNORECASE)
    return [
        (
            pattern,
            lambda match: _match_case(match.group(0), _MISSPELLINGS[match.group(0).lower()]),
            "Possible spelling mistake",
        )
    ]


def _grammar_rules() -> List[Rule]:
    return [
        (
            re.compile(r"\b(\w+)\s+\1\b", re.IGNORECASE),
            lambda match: match.group(1),
            "Repeated word",
        ),
        (
            re.compile(r"\b([Aa])\s+([aeiouAEIOU]\w*)"),
            lambda match: f"{match.group(1)}n {match.group(2)}",
            "Use 'an' before a vowel sound",
        ),
        (
            re.compile(r"\b(could|should|would)\s+of\b", re.IGNORECASE),
            lambda match: f"{match.group(1)} have",
            "Use 'have' after a modal verb",
        ),
    ]


_STYLE_PHRASES: Dict[str, str] = {
    "in order to": "to",
    "very unique": "unique",
    "at this point in time": "now",
    "due to the fact that": "because",
}


def _style_rules() -> List[Rule]:
    rules: List[Rule] = []
    for phrase, replacement in _STYLE_PHRASES.items():
        rules.append(
            (
                re.compile(r"\b" + re.escape(phrase) + r"\b", re.IGNORECASE),
                lambda match, replacement=replacement: _match_case(match.group(0), replacement),
                "Wordy phrase",
            )
        )
    return rules


_RULES: Dict[SuggestionKind, Callable[[], List[Rule]]] = {
    SuggestionKind.SPELLING: _spelling_rules,
    SuggestionKind.GRAMMAR: _grammar_rules,
    SuggestionKind.STYLE: _style_rules,
}


class MockChecker(CheckerClient):
    """Apply regex rules for ``kinds`` to each unit.

    ``delay_seconds`` simulates service latency so tests can exercise
    timeouts and edits that land while a call is in flight.
    """

    def __init__(
        self,
        name: str,
        kinds: Iterable[SuggestionKind],
        *,
        delay_seconds: float = 0.0,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        kinds = frozenset(kinds)
        super().__init__(name, kinds, timeout_seconds=timeout_seconds)
        self.delay_seconds = delay_seconds
        self._rules = [(kind, rule) for kind in sorted(kinds, key=lambda item: item.priority) for rule in _RULES[kind]()]

    def find(self, unit: TextUnit) -> List[dict[str, Any]]:
        entries: List[dict[str, Any]] = []
        for kind, (pattern, replace, description) in self._rules:
            for match in pattern.finditer(unit.text):
                entries.append(
                    {
                        "text": match.group(0),
                        "suggestion": replace(match),
                        "start": match.start(),
                        "end": match.end(),
                        "type": kind.value,
                        "description": description,
                        "segmentId": unit.id,
                    }
                )
        return entries

    async def _fetch(self, units: List[TextUnit]) -> Any:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        suggestions: List[dict[str, Any]] = []
        for unit in units:
            suggestions.extend(self.find(unit))
        return {"suggestions": suggestions}


class MockSpellingChecker(MockChecker):
    def __init__(self, name: str = "spelling", **kwargs: Any) -> None:
        super().__init__(name, [SuggestionKind.SPELLING], **kwargs)


class MockGrammarChecker(MockChecker):
    def __init__(self, name: str = "grammar", **kwargs: Any) -> None:
        super().__init__(name, [SuggestionKind.GRAMMAR], **kwargs)


class MockStyleChecker(MockChecker):
    def __init__(self, name: str = "style", **kwargs: Any) -> None:
        super().__init__(name, [SuggestionKind.STYLE], **kwargs)


class MockCombinedChecker(MockChecker):
    """Grammar and style in a single call."""

    def __init__(self, name: str = "combined", **kwargs: Any) -> None:
        super().__init__(name, [SuggestionKind.GRAMMAR, SuggestionKind.STYLE], **kwargs)


__all__ = [
    "MockChecker",
    "MockCombinedChecker",
    "MockGrammarChecker",
    "MockSpellingChecker",
    "MockStyleChecker",
]
