"""Registry of live editing sessions and the checker clients they share."""
from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from fastapi import HTTPException, Request

from ..checkers import CheckerClient, build_checker
from ..config import ProofreadSettings
from ..errors import DocumentNotFoundError, SessionNotFoundError
from ..session import EditorSession
from ..storage import DocumentStore, JsonDocumentStore, StoredDocument
from ..telemetry import traced_duration

LOGGER = logging.getLogger(__name__)


class SessionRegistry:
    """Create, look up and tear down :class:`EditorSession` objects.

    Checker clients are built once in :meth:`initialize` and shared by every
    session; each session keeps its own caches and dismissals.
    """

    def __init__(
        self,
        settings: Optional[ProofreadSettings] = None,
        *,
        clients: Optional[Mapping[str, CheckerClient]] = None,
        store: Optional[DocumentStore] = None,
    ) -> None:
        self.settings = settings or ProofreadSettings.from_env()
        self.store: DocumentStore = store or JsonDocumentStore(self.settings.data_dir)
        self.clients: Dict[str, CheckerClient] = dict(clients or {})
        self._sessions: Dict[str, EditorSession] = {}

    async def initialize(self) -> None:
        if not self.clients:
            for checker in self.settings.checkers:
                self.clients[checker.name] = build_checker(checker, self.settings)
        for client in self.clients.values():
            await client.initialize()
        LOGGER.info("Session registry ready with checkers: %s", ", ".join(self.clients) or "none")

    async def aclose(self) -> None:
        for session_id in list(self._sessions):
            await self.close(session_id)
        for client in self.clients.values():
            await client.aclose()

    def create(self, content: str = "", *, title: str = "", document_id: Optional[str] = None) -> EditorSession:
        session = EditorSession(
            self.clients,
            settings=self.settings,
            content=content,
            title=title,
            document_id=document_id,
        )
        self._sessions[session.session_id] = session
        LOGGER.info("Created session %s (%s chars)", session.session_id, len(content))
        return session

    def get(self, session_id: str) -> EditorSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} does not exist.")
        return session

    async def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} does not exist.")
        await session.aclose()

    def save(self, session_id: str, *, title: Optional[str] = None, document_id: Optional[str] = None) -> StoredDocument:
        session = self.get(session_id)
        if title is not None:
            session.title = title
        session.document_id = document_id or session.document_id or session.session_id
        with traced_duration("document.save", session_id=session_id, document_id=session.document_id):
            return self.store.save(session.document_id, session.title, session.content, session.snapshot())

    def restore(self, document_id: str) -> EditorSession:
        document = self.store.load(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} has not been saved.")
        return self.create(document.content, title=document.title, document_id=document.document_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions


def get_session_registry(request: Request) -> SessionRegistry:
    """FastAPI dependency returning the registry built at startup."""

    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(status_code=503, detail="Session registry is not initialised")
    return registry


__all__ = ["SessionRegistry", "get_session_registry"]
