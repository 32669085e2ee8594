"""Environment-driven settings for the suggestion engine."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .models import SuggestionKind
from .segmentation import SegmentationStrategy

LOGGER = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS: dict[str, float] = {
    "spelling": 3.0,
    "grammar": 5.0,
    "style": 5.0,
}

DEFAULT_STRATEGIES: dict[str, SegmentationStrategy] = {
    "spelling": SegmentationStrategy.WORD_WINDOW,
    "grammar": SegmentationStrategy.SENTENCE,
    "style": SegmentationStrategy.SENTENCE,
}

DEFAULT_KINDS: dict[str, frozenset[SuggestionKind]] = {
    "spelling": frozenset({SuggestionKind.SPELLING}),
    "grammar": frozenset({SuggestionKind.GRAMMAR}),
    "style": frozenset({SuggestionKind.STYLE}),
    "combined": frozenset({SuggestionKind.GRAMMAR, SuggestionKind.STYLE}),
}


def is_dev_environment() -> bool:
    return os.getenv("ENVIRONMENT", "development").strip().lower() not in {"prod", "production"}


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int_from_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        LOGGER.warning("Invalid integer for %s: %s; using default %s", name, value, default)
        return default


def _float_from_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        LOGGER.warning("Invalid float for %s: %s; using default %s", name, value, default)
        return default


def _strategy_from_env(name: str, default: SegmentationStrategy) -> SegmentationStrategy:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return SegmentationStrategy(value.strip().lower())
    except ValueError:
        LOGGER.warning("Invalid segmentation strategy for %s: %s; using default %s", name, value, default.value)
        return default


@dataclass(slots=True)
class CheckerSettings:
    """Per-category checker configuration."""

    name: str
    kinds: frozenset[SuggestionKind]
    strategy: SegmentationStrategy
    debounce_seconds: float
    url: Optional[str] = None
    request_mode: str = "segments"


@dataclass(slots=True)
class ProofreadSettings:
    words_per_unit: int = 5
    trigger_words: int = 5
    context_chars: int = 50
    apply_search_window: int = 50
    cache_max_entries: int = 2048
    checker_mode: str = "mock"
    checker_timeout_seconds: float = 10.0
    strict_segmentation: bool = True
    data_dir: Path = Path("data")
    checkers: list[CheckerSettings] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "ProofreadSettings":
        categories = [
            item.strip().lower()
            for item in os.getenv("PROOFREAD_CHECKERS", "spelling,grammar,style").split(",")
            if item.strip()
        ]
        checkers: list[CheckerSettings] = []
        for name in categories:
            kinds = DEFAULT_KINDS.get(name)
            if kinds is None:
                LOGGER.warning("Unknown checker category %s; skipping", name)
                continue
            prefix = f"CHECKER_{name.upper()}"
            checkers.append(
                CheckerSettings(
                    name=name,
                    kinds=kinds,
                    strategy=_strategy_from_env(
                        f"{prefix}_STRATEGY",
                        DEFAULT_STRATEGIES.get(name, SegmentationStrategy.SENTENCE),
                    ),
                    debounce_seconds=_float_from_env(
                        f"{prefix}_DEBOUNCE_SECONDS", DEFAULT_DEBOUNCE_SECONDS.get(name, 5.0)
                    ),
                    url=os.getenv(f"{prefix}_URL"),
                    request_mode=os.getenv(f"{prefix}_REQUEST_MODE", "segments").strip().lower(),
                )
            )

        return cls(
            words_per_unit=_int_from_env("PROOFREAD_WORDS_PER_UNIT", 5),
            trigger_words=_int_from_env("PROOFREAD_TRIGGER_WORDS", 5),
            context_chars=_int_from_env("PROOFREAD_CONTEXT_CHARS", 50),
            apply_search_window=_int_from_env("PROOFREAD_APPLY_SEARCH_WINDOW", 50),
            cache_max_entries=_int_from_env("PROOFREAD_CACHE_MAX_ENTRIES", 2048),
            checker_mode=os.getenv("CHECKER_MODE", "mock").strip().lower(),
            checker_timeout_seconds=_float_from_env("CHECKER_TIMEOUT_SECONDS", 10.0),
            strict_segmentation=_env_flag("PROOFREAD_STRICT_SEGMENTATION", is_dev_environment()),
            data_dir=Path(os.getenv("PROOFREAD_DATA_DIR", "data")),
            checkers=checkers,
        )


__all__ = ["CheckerSettings", "ProofreadSettings", "is_dev_environment"]
