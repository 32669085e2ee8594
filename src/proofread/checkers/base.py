"""Common contract for checker clients."""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from ..errors import TransientCheckerFailure
from ..models import RawSuggestion, SuggestionKind, TextUnit
from ..telemetry import emit_checker_request, emit_checker_result, emit_decode_rejections, emit_exception
from .decode import DecodeErr, decode_entry, decode_envelope

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
REQUEST_MODES = ("segments", "text")


@dataclass(slots=True)
class CheckerBatch:
    """Result of one :meth:`CheckerClient.check` call.

    ``results`` only holds units whose call succeeded (possibly with no
    suggestions); ``failed`` lists units that must be retried later.
    """

    results: Dict[str, List[RawSuggestion]] = field(default_factory=dict)
    failed: List[str] = field(default_factory=list)
    rejected: int = 0

    @property
    def suggestions(self) -> List[RawSuggestion]:
        return [item for items in self.results.values() for item in items]

    @property
    def ok(self) -> bool:
        return not self.failed


class CheckerClient(ABC):
    """Adapter to one external suggestion source.

    :meth:`check` never raises: transport errors, undecodable responses and
    timeouts mark the affected units as failed and yield no suggestions.
    """

    def __init__(
        self,
        name: str,
        kinds: frozenset[SuggestionKind],
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        request_mode: str = "segments",
    ) -> None:
        if request_mode not in REQUEST_MODES:
            raise ValueError(f"request_mode must be one of {REQUEST_MODES}")
        self.name = name
        self.kinds = kinds
        self.timeout_seconds = timeout_seconds
        self.request_mode = request_mode
        self.calls = 0

    async def initialize(self) -> None:
        """Acquire resources needed before the first call."""

        return None

    async def aclose(self) -> None:
        """Release resources acquired by :meth:`initialize`."""

        return None

    async def check(self, units: Sequence[TextUnit]) -> CheckerBatch:
        units = list(units)
        batch = CheckerBatch()
        if not units:
            return batch

        self.calls += 1
        emit_checker_request(checker=self.name, units=len(units), chars=sum(len(unit.text) for unit in units))
        started = time.perf_counter()
        error: BaseException | None = None
        try:
            await asyncio.wait_for(self._check_units(units, batch), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            LOGGER.warning("Checker %s timed out after %.1fs", self.name, self.timeout_seconds)
            error = exc
        except TransientCheckerFailure as exc:
            LOGGER.warning("Checker %s failed: %s", self.name, exc)
            error = exc
        except Exception as exc:  # pragma: no cover - unexpected adapter bug
            emit_exception(module=f"{__name__}.{self.name}", error=exc)
            error = exc

        for unit in units:
            if unit.id not in batch.results and unit.id not in batch.failed:
                batch.failed.append(unit.id)

        emit_checker_result(
            checker=self.name,
            duration_ms=(time.perf_counter() - started) * 1000.0,
            suggestions=len(batch.suggestions),
            rejected=batch.rejected,
            failed_units=len(batch.failed),
            error=error,
        )
        return batch

    async def _check_units(self, units: List[TextUnit], batch: CheckerBatch) -> None:
        if self.request_mode == "segments":
            payload = await self._fetch(units)
            self._decode_into(batch, payload, units)
            return

        for unit in units:
            try:
                payload = await self._fetch([unit])
                self._decode_into(batch, payload, [unit])
            except TransientCheckerFailure as exc:
                LOGGER.warning("Checker %s failed for unit %s: %s", self.name, unit.id, exc)
                batch.failed.append(unit.id)

    def _decode_into(self, batch: CheckerBatch, payload: Any, units: List[TextUnit]) -> None:
        entries = decode_envelope(payload)
        units_by_id = {unit.id: unit for unit in units}
        results: Dict[str, List[RawSuggestion]] = {unit.id: [] for unit in units}
        reasons: List[str] = []
        for entry in entries:
            decoded = decode_entry(entry, units_by_id, allowed_kinds=self.kinds)
            if isinstance(decoded, DecodeErr):
                reasons.append(decoded.reason)
                continue
            results[decoded.suggestion.unit_id].append(decoded.suggestion)
        batch.results.update(results)
        batch.rejected += len(reasons)
        emit_decode_rejections(checker=self.name, reasons=reasons)

    @abstractmethod
    async def _fetch(self, units: List[TextUnit]) -> Any:
        """Send ``units`` to the service and return the decoded JSON body.

        Implementations raise :class:`TransientCheckerFailure` on transport errors.
        """


__all__ = ["CheckerBatch", "CheckerClient", "DEFAULT_TIMEOUT_SECONDS"]
