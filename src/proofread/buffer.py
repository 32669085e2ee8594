"""Editor buffer boundary and the single funnel through which it is mutated."""
from __future__ import annotations

import logging
from typing import List, Protocol, Sequence, runtime_checkable

from .models import Edit, Suggestion
from .remap import ActiveSuggestions

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class EditorBuffer(Protocol):
    """Contract of the live text surface the engine edits and decorates."""

    def get_content(self) -> str:
        ...

    def replace_range(self, start: int, end: int, text: str) -> None:
        ...

    def get_selection(self) -> int:
        ...

    def set_selection(self, offset: int) -> None:
        ...

    def set_decorations(self, decorations: Sequence[dict[str, object]]) -> None:
        ...


class InMemoryEditorBuffer:
    """Plain-text buffer with a caret and a decoration sink."""

    def __init__(self, content: str = "") -> None:
        self._content = content
        self._selection = len(content)
        self.decorations: List[dict[str, object]] = []

    def get_content(self) -> str:
        return self._content

    def replace_range(self, start: int, end: int, text: str) -> None:
        if not 0 <= start <= end <= len(self._content):
            raise ValueError(f"range {start}-{end} is outside the buffer (length {len(self._content)})")
        self._content = self._content[:start] + text + self._content[end:]

    def get_selection(self) -> int:
        return self._selection

    def set_selection(self, offset: int) -> None:
        self._selection = min(max(offset, 0), len(self._content))

    def set_decorations(self, decorations: Sequence[dict[str, object]]) -> None:
        self.decorations = [dict(item) for item in decorations]


class TrackedBuffer:
    """Wrap an :class:`EditorBuffer` so every mutation remaps active suggestions.

    User edits and applied suggestions both go through :meth:`replace_range`;
    nothing else writes to the underlying buffer.
    """

    def __init__(self, buffer: EditorBuffer, active: ActiveSuggestions) -> None:
        self.buffer = buffer
        self.active = active

    @property
    def content(self) -> str:
        return self.buffer.get_content()

    def replace_range(self, start: int, end: int, text: str, *, move_caret: bool = False) -> List[Suggestion]:
        """Replace ``[start, end)`` with ``text`` and return suggestions dropped by the edit.

        With ``move_caret`` the caret is restored relative to the edit, which is
        what a programmatic replace needs; user edits leave caret handling to
        the editor.
        """

        edit = Edit(start=start, end=end, inserted_length=len(text))
        caret = self.buffer.get_selection()
        self.buffer.replace_range(start, end, text)
        dropped = self.active.apply_edit(edit)
        if move_caret:
            self.buffer.set_selection(self._restored_caret(caret, edit))
        self.publish_decorations()
        return dropped

    def publish_decorations(self) -> None:
        self.buffer.set_decorations([mark.to_dict() for mark in self.active.highlights()])

    @staticmethod
    def _restored_caret(caret: int, edit: Edit) -> int:
        if caret <= edit.start:
            return caret
        if caret >= edit.end:
            return caret + edit.delta
        return edit.start + edit.inserted_length


__all__ = ["EditorBuffer", "InMemoryEditorBuffer", "TrackedBuffer"]
