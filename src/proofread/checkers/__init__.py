"""Checker clients and the factory that builds them from settings."""
from __future__ import annotations

import logging

from ..config import CheckerSettings, ProofreadSettings
from .base import CheckerBatch, CheckerClient
from .http import HttpCheckerClient
from .mock import (
    MockChecker,
    MockCombinedChecker,
    MockGrammarChecker,
    MockSpellingChecker,
    MockStyleChecker,
)

LOGGER = logging.getLogger(__name__)


def build_checker(checker: CheckerSettings, settings: ProofreadSettings) -> CheckerClient:
    """Instantiate the client for one checker category."""

    if settings.checker_mode == "http":
        if checker.url:
            return HttpCheckerClient(
                checker.name,
                checker.kinds,
                checker.url,
                request_mode=checker.request_mode,
                timeout_seconds=settings.checker_timeout_seconds,
            )
        LOGGER.warning("CHECKER_%s_URL is not set; using the mock %s checker", checker.name.upper(), checker.name)
    elif settings.checker_mode != "mock":
        LOGGER.warning("Unknown CHECKER_MODE %s; using mock checkers", settings.checker_mode)

    return MockChecker(checker.name, checker.kinds, timeout_seconds=settings.checker_timeout_seconds)


__all__ = [
    "CheckerBatch",
    "CheckerClient",
    "HttpCheckerClient",
    "MockChecker",
    "MockCombinedChecker",
    "MockGrammarChecker",
    "MockSpellingChecker",
    "MockStyleChecker",
    "build_checker",
]
