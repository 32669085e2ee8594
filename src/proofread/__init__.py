"""Incremental suggestion engine for a writing assistant."""
from __future__ import annotations

from .errors import ProofreadError, StaleSuggestionError
from .models import Edit, HighlightMark, Suggestion, SuggestionKind, TextUnit
from .session import EditorSession

__all__ = [
    "Edit",
    "EditorSession",
    "HighlightMark",
    "ProofreadError",
    "StaleSuggestionError",
    "Suggestion",
    "SuggestionKind",
    "TextUnit",
]
