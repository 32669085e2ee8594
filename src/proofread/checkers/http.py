"""Checker client talking to a remote suggestion service over HTTP."""
from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from ..errors import TransientCheckerFailure
from ..models import SuggestionKind, TextUnit
from .base import DEFAULT_TIMEOUT_SECONDS, CheckerClient

LOGGER = logging.getLogger(__name__)


class HttpCheckerClient(CheckerClient):
    """POST units to ``url`` and decode ``{"suggestions": [...]}`` responses.

    In ``segments`` mode all dirty units go out in one request as
    ``{"segments": [{"id", "text", "hash"}]}``; in ``text`` mode each unit is
    sent on its own as ``{"text": ...}``.
    """

    def __init__(
        self,
        name: str,
        kinds: frozenset[SuggestionKind],
        url: str,
        *,
        request_mode: str = "segments",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(name, kinds, timeout_seconds=timeout_seconds, request_mode=request_mode)
        self.url = url
        self._external_client = client
        self._client: Optional[httpx.AsyncClient] = client

    async def initialize(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))

    async def aclose(self) -> None:
        if self._client is not None and self._client is not self._external_client:
            await self._client.aclose()
        self._client = self._external_client

    def _request_body(self, units: List[TextUnit]) -> dict[str, Any]:
        if self.request_mode == "text":
            return {"text": units[0].text}
        return {"segments": [{"id": unit.id, "text": unit.text, "hash": unit.hash} for unit in units]}

    async def _fetch(self, units: List[TextUnit]) -> Any:
        if self._client is None:
            raise TransientCheckerFailure(f"checker {self.name} used before initialize()")
        try:
            response = await self._client.post(self.url, json=self._request_body(units))
            response.raise_for_status()
        except httpx.HTTPStatusError as error:
            raise TransientCheckerFailure(
                f"checker {self.name} returned HTTP {error.response.status_code}", cause=error
            ) from error
        except httpx.HTTPError as error:
            raise TransientCheckerFailure(f"checker {self.name} is unreachable: {error}", cause=error) from error

        try:
            return response.json()
        except ValueError as error:
            raise TransientCheckerFailure(f"checker {self.name} returned invalid JSON", cause=error) from error


__all__ = ["HttpCheckerClient"]
