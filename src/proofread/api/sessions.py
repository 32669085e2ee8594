"""API router exposing editing sessions, analysis and suggestion actions."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..errors import (
    CorruptDocumentError,
    DocumentNotFoundError,
    SessionNotFoundError,
    StaleSuggestionError,
    SuggestionNotFoundError,
)
from ..models import HighlightMark, Suggestion
from ..services.sessions import SessionRegistry, get_session_registry
from ..session import EditorSession

router = APIRouter(prefix="/sessions", tags=["sessions"])


class CreateSessionRequest(BaseModel):
    """Request body accepted when opening a session."""

    content: str = Field("", description="Initial document text.")
    title: str = Field("", description="Document title used when saving.")
    document_id: Optional[str] = Field(None, description="Identifier the document is saved under.")
    check: bool = Field(False, description="Run every checker before responding.")


class EditRequest(BaseModel):
    """Replace ``[start, end)`` of the document with ``text``."""

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    text: str = ""

    @model_validator(mode="after")
    def _check_range(self) -> "EditRequest":
        if self.end < self.start:
            raise ValueError("end must not be smaller than start")
        return self


class SaveRequest(BaseModel):
    title: Optional[str] = None
    document_id: Optional[str] = None


class DebounceRequest(BaseModel):
    """Debounce interval in seconds per checker category."""

    intervals: dict[str, float] = Field(..., min_length=1)


class DebounceResponse(BaseModel):
    session_id: str
    intervals: dict[str, float]


class SuggestionModel(BaseModel):
    id: str
    text: str
    replacement: str
    start: int
    end: int
    kind: str
    source: str
    description: Optional[str] = None


class HighlightModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: int = Field(..., alias="from")
    to: int
    color_tag: str = Field(..., alias="colorTag")
    id: str


class SessionResponse(BaseModel):
    """State of a session after the requested operation."""

    session_id: str
    document_id: Optional[str]
    title: str
    content: str
    suggestions: list[SuggestionModel]
    highlights: list[HighlightModel]
    dismissed: int
    checking: dict[str, bool]


class EditResponse(SessionResponse):
    dropped: list[str]


class ApplyResponse(SessionResponse):
    applied: str
    located_at: int
    drifted: bool


class ClearDismissalsResponse(SessionResponse):
    cleared: int


class SaveResponse(BaseModel):
    document_id: str
    title: str
    updated_at: float


def _serialise_suggestion(suggestion: Suggestion) -> SuggestionModel:
    return SuggestionModel(
        id=suggestion.id,
        text=suggestion.text,
        replacement=suggestion.replacement,
        start=suggestion.start,
        end=suggestion.end,
        kind=suggestion.kind.value,
        source=suggestion.source,
        description=suggestion.description,
    )


def _serialise_highlight(mark: HighlightMark) -> HighlightModel:
    return HighlightModel.model_validate(mark.to_dict())


def _session_state(session: EditorSession) -> dict[str, object]:
    return {
        "session_id": session.session_id,
        "document_id": session.document_id,
        "title": session.title,
        "content": session.content,
        "suggestions": [_serialise_suggestion(item) for item in session.suggestions()],
        "highlights": [_serialise_highlight(mark) for mark in session.highlights()],
        "dismissed": session.dismissed_count,
        "checking": session.is_checking,
    }


def _get_session(registry: SessionRegistry, session_id: str) -> EditorSession:
    try:
        return registry.get(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _get_suggestion(session: EditorSession, suggestion_id: str) -> Suggestion:
    try:
        return session.get_suggestion(suggestion_id)
    except SuggestionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    request: CreateSessionRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    """Open an editing session for the supplied text."""

    session = registry.create(request.content, title=request.title, document_id=request.document_id)
    if request.check and session.content.strip():
        await session.force_check()
    return SessionResponse(**_session_state(session))


@router.post("/restore/{document_id}", response_model=SessionResponse, status_code=201)
async def restore_session(
    document_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    """Open a session on a previously saved document and analyse it."""

    try:
        session = registry.restore(document_id)
    except DocumentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except CorruptDocumentError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if session.content.strip():
        await session.force_check()
    return SessionResponse(**_session_state(session))


@router.get("/{session_id}", response_model=SessionResponse)
async def read_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    return SessionResponse(**_session_state(_get_session(registry, session_id)))


@router.delete("/{session_id}", status_code=204)
async def close_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> None:
    try:
        await registry.close(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.post("/{session_id}/edits", response_model=EditResponse)
async def edit_document(
    session_id: str,
    request: EditRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> EditResponse:
    """Apply a user edit; analysis is scheduled in the background."""

    session = _get_session(registry, session_id)
    try:
        dropped = session.handle_edit(request.start, request.end, request.text)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return EditResponse(**_session_state(session), dropped=[item.id for item in dropped])


@router.post("/{session_id}/check", response_model=SessionResponse)
async def check_document(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    """Analyse the document now and wait for every checker to finish."""

    session = _get_session(registry, session_id)
    await session.force_check()
    return SessionResponse(**_session_state(session))


@router.post("/{session_id}/suggestions/{suggestion_id}/apply", response_model=ApplyResponse)
async def apply_suggestion(
    session_id: str,
    suggestion_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = _get_session(registry, session_id)
    _get_suggestion(session, suggestion_id)
    try:
        applied = session.apply(suggestion_id)
    except StaleSuggestionError as exc:
        return JSONResponse(
            status_code=409,
            content={"notice": str(exc), "suggestion_id": exc.suggestion_id},
        )
    return ApplyResponse(
        **_session_state(session),
        applied=applied.suggestion.id,
        located_at=applied.located_at,
        drifted=applied.drifted,
    )


@router.post("/{session_id}/suggestions/{suggestion_id}/dismiss", response_model=SessionResponse)
async def dismiss_suggestion(
    session_id: str,
    suggestion_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    session = _get_session(registry, session_id)
    _get_suggestion(session, suggestion_id)
    session.dismiss(suggestion_id)
    return SessionResponse(**_session_state(session))


@router.delete("/{session_id}/dismissals", response_model=ClearDismissalsResponse)
async def clear_dismissals(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> ClearDismissalsResponse:
    session = _get_session(registry, session_id)
    cleared = session.clear_dismissals()
    return ClearDismissalsResponse(**_session_state(session), cleared=cleared)


@router.put("/{session_id}/debounce", response_model=DebounceResponse)
async def update_debounce(
    session_id: str,
    request: DebounceRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> DebounceResponse:
    session = _get_session(registry, session_id)
    try:
        intervals = session.update_debounce(request.intervals)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return DebounceResponse(session_id=session.session_id, intervals=intervals)


@router.post("/{session_id}/save", response_model=SaveResponse)
async def save_document(
    session_id: str,
    request: Optional[SaveRequest] = None,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SaveResponse:
    """Persist the document text together with its current analysis."""

    request = request or SaveRequest()
    _get_session(registry, session_id)
    try:
        document = registry.save(session_id, title=request.title, document_id=request.document_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except OSError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to save document: {exc}") from exc
    return SaveResponse(document_id=document.document_id, title=document.title, updated_at=document.updated_at)
