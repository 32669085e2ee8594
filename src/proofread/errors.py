"""Common exceptions raised by the suggestion engine."""
from __future__ import annotations


class ProofreadError(RuntimeError):
    """Base class for engine failures."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.__cause__ = cause


class TransientCheckerFailure(ProofreadError):
    """Raised inside a checker client when a call fails at the transport or parse level.

    Clients recover from it locally; it never reaches the caller of ``check``.
    """


class MalformedCheckerResponse(ProofreadError):
    """Raised for an individual response entry that does not match the wire schema."""


class StaleSuggestionError(ProofreadError):
    """Raised when the text a suggestion refers to can no longer be located."""

    def __init__(self, message: str, *, suggestion_id: str | None = None) -> None:
        super().__init__(message)
        self.suggestion_id = suggestion_id


class SegmentationInvariantViolation(ProofreadError):
    """Raised when the produced units do not reconstruct the source text."""


class SessionNotFoundError(ProofreadError):
    """Raised when an editing session id is unknown."""


class SuggestionNotFoundError(ProofreadError):
    """Raised when a suggestion id is not among the active suggestions."""


class DocumentNotFoundError(ProofreadError):
    """Raised when restoring a document that was never saved."""


class CorruptDocumentError(ProofreadError):
    """Raised when a saved document file cannot be decoded."""
