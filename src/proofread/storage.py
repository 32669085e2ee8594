"""Persist documents and their last analysis snapshot on disk."""
from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Optional, Protocol

from .errors import CorruptDocumentError

LOGGER = logging.getLogger(__name__)

_FILENAME_SAFE_CHARS_RE: Final[re.Pattern[str]] = re.compile(r"[^A-Za-z0-9._-]+")


def _sanitize_document_id(document_id: str) -> str:
    """Return a filesystem-safe name for ``document_id``."""
    sanitized = Path(document_id or "").name
    sanitized = _FILENAME_SAFE_CHARS_RE.sub("_", sanitized)
    sanitized = sanitized.strip("._")
    if not sanitized:
        raise ValueError(f"invalid document id: {document_id!r}")
    return sanitized


@dataclass(slots=True)
class StoredDocument:
    document_id: str
    title: str
    content: str
    analysis_snapshot: dict[str, Any] = field(default_factory=dict)
    updated_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "documentId": self.document_id,
            "title": self.title,
            "content": self.content,
            "analysisSnapshot": self.analysis_snapshot,
            "updatedAt": self.updated_at,
        }


class DocumentStore(Protocol):
    """Persistence collaborator; it never drives analysis."""

    def save(
        self, document_id: str, title: str, content: str, analysis_snapshot: dict[str, Any]
    ) -> StoredDocument:
        ...

    def load(self, document_id: str) -> Optional[StoredDocument]:
        ...


class JsonDocumentStore:
    """Store one JSON file per document inside ``data_dir``."""

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, document_id: str) -> Path:
        return self.data_dir / f"{_sanitize_document_id(document_id)}.json"

    def save(
        self, document_id: str, title: str, content: str, analysis_snapshot: dict[str, Any]
    ) -> StoredDocument:
        document = StoredDocument(
            document_id=document_id,
            title=title,
            content=content,
            analysis_snapshot=dict(analysis_snapshot),
        )
        destination = self.path_for(document_id)
        destination.parent.mkdir(parents=True, exist_ok=True)
        staging = destination.with_suffix(".json.tmp")
        staging.write_text(json.dumps(document.to_dict(), ensure_ascii=False), encoding="utf-8")
        staging.replace(destination)
        LOGGER.info("Saved document %s (%s chars) to %s", document_id, len(content), destination)
        return document

    def load(self, document_id: str) -> Optional[StoredDocument]:
        source = self.path_for(document_id)
        if not source.exists():
            return None
        try:
            payload = json.loads(source.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            LOGGER.error("Saved document %s is not valid JSON: %s", source, exc)
            raise CorruptDocumentError(f"Document {document_id} could not be read.", cause=exc) from exc
        if not isinstance(payload, dict):
            LOGGER.error("Saved document %s does not hold a JSON object", source)
            raise CorruptDocumentError(f"Document {document_id} could not be read.")
        return StoredDocument(
            document_id=payload.get("documentId", document_id),
            title=payload.get("title", ""),
            content=payload.get("content", ""),
            analysis_snapshot=payload.get("analysisSnapshot") or {},
            updated_at=payload.get("updatedAt", 0.0),
        )


__all__ = ["DocumentStore", "JsonDocumentStore", "StoredDocument"]
