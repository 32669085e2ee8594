"""Structured lifecycle events for analysis passes, checker calls and user actions."""

from __future__ import annotations

import logging
import os
import platform
import sys
import time
import traceback
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

LOGGER = logging.getLogger("proofread.telemetry")

_ENV_KEYS_TO_LOG: tuple[str, ...] = (
    "ENVIRONMENT",
    "CHECKER_MODE",
    "CHECKER_TIMEOUT_SECONDS",
    "PROOFREAD_CHECKERS",
    "PROOFREAD_WORDS_PER_UNIT",
    "PROOFREAD_TRIGGER_WORDS",
    "PROOFREAD_CONTEXT_CHARS",
    "PROOFREAD_DATA_DIR",
)


def _format_exception(error: BaseException) -> str:
    return "".join(traceback.format_exception(error.__class__, error, error.__traceback__))


def log_event(
    logger: Optional[logging.Logger],
    step: str,
    *,
    level: str = "info",
    session_id: str | None = None,
    duration_ms: float | None = None,
    exc: BaseException | str | None = None,
    details: dict[str, Any] | None = None,
    **payload: Any,
) -> None:
    """Emit a structured log event with the agreed-upon schema."""

    logger = logger or LOGGER
    event: dict[str, Any] = {"step": step, "module": logger.name}
    if session_id:
        event["session_id"] = session_id
    if duration_ms is not None:
        event["duration_ms"] = round(duration_ms, 3)
    if details is not None:
        event["details"] = details
    event.update(payload)

    exc_info = None
    if exc is not None:
        if isinstance(exc, BaseException):
            event["exc"] = _format_exception(exc)
            exc_info = (exc.__class__, exc, exc.__traceback__)
        else:
            event["exc"] = str(exc)

    log_method = getattr(logger, level.lower(), logger.info)
    log_method(event, exc_info=exc_info)


def emit_app_startup_event() -> None:
    env_values = {key: os.getenv(key) for key in _ENV_KEYS_TO_LOG if os.getenv(key) is not None}
    log_event(
        LOGGER,
        "app.startup",
        details={
            "env": env_values,
            "python": sys.version.split()[0],
            "platform": platform.platform(),
        },
    )


def emit_checker_request(*, checker: str, units: int, chars: int, session_id: str | None = None) -> None:
    log_event(LOGGER, "checker.request", level="debug", session_id=session_id, checker=checker, units=units, chars=chars)


def emit_checker_result(
    *,
    checker: str,
    duration_ms: float,
    suggestions: int,
    rejected: int = 0,
    failed_units: int = 0,
    error: BaseException | str | None = None,
) -> None:
    log_event(
        LOGGER,
        "checker.result",
        level="warning" if error is not None else "debug",
        duration_ms=duration_ms,
        checker=checker,
        suggestions=suggestions,
        rejected=rejected,
        failed_units=failed_units,
        error=str(error) if error is not None else None,
    )


def emit_analysis_pass(
    *,
    session_id: str | None,
    checker: str,
    units: int,
    dirty: int,
    published: bool,
    duration_ms: float,
    suggestions: int,
) -> None:
    log_event(
        LOGGER,
        "analysis.pass",
        session_id=session_id,
        duration_ms=duration_ms,
        checker=checker,
        units=units,
        dirty=dirty,
        published=published,
        suggestions=suggestions,
    )


def emit_suggestion_event(
    action: str,
    *,
    session_id: str | None,
    suggestion_id: str,
    kind: str,
    outcome: str = "ok",
    **payload: Any,
) -> None:
    log_event(
        LOGGER,
        f"suggestion.{action}",
        session_id=session_id,
        suggestion_id=suggestion_id,
        kind=kind,
        outcome=outcome,
        **payload,
    )


def emit_decode_rejections(*, checker: str, reasons: Iterable[str]) -> None:
    reasons = list(reasons)
    if not reasons:
        return
    log_event(LOGGER, "checker.decode", level="warning", checker=checker, rejected=len(reasons), reasons=reasons[:10])


def emit_exception(*, module: str, error: BaseException, session_id: str | None = None) -> None:
    log_event(LOGGER, "exception", level="error", session_id=session_id, exc=error, origin=module)


@contextmanager
def traced_duration(step: str, *, logger: Optional[logging.Logger] = None, **fields: Any) -> Iterator[None]:
    """Log ``step`` with its wall-clock duration, including failures."""

    started = time.perf_counter()
    try:
        yield
    except Exception as error:
        log_event(
            logger,
            step,
            level="error",
            duration_ms=(time.perf_counter() - started) * 1000.0,
            exc=error,
            **fields,
        )
        raise
    log_event(logger, step, level="debug", duration_ms=(time.perf_counter() - started) * 1000.0, **fields)
