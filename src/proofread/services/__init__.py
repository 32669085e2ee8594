"""Service layer shared by the HTTP API."""
from __future__ import annotations

from .sessions import SessionRegistry, get_session_registry

__all__ = ["SessionRegistry", "get_session_registry"]
