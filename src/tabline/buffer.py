"""Edit buffer interface used by the completion applier.

The line editor owns the real buffer; :class:`LineBuffer` is a minimal
in-memory implementation for hosts without one.
"""

from __future__ import annotations

from typing import Protocol


class EditBuffer(Protocol):
    """Interface for the line being edited. Invariant: ``0 <= cursor <= len(text)``."""

    @property
    def text(self) -> str: ...

    @property
    def cursor(self) -> int: ...

    def insert(self, text: str) -> None:
        """Insert *text* at the cursor and move the cursor past it."""
        ...

    def delete_range(self, start: int, end: int) -> None:
        """Delete ``text[start:end]``, keeping the cursor on the same character."""
        ...

    def move_cursor_to(self, position: int) -> None: ...


class LineBuffer:
    """Single-line text buffer with a cursor."""

    def __init__(self, text: str = "", cursor: int | None = None) -> None:
        self._text = text
        self._cursor = len(text) if cursor is None else _clamp(cursor, len(text))

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    def insert(self, text: str) -> None:
        self._text = self._text[: self._cursor] + text + self._text[self._cursor :]
        self._cursor += len(text)

    def delete_range(self, start: int, end: int) -> None:
        start = _clamp(start, len(self._text))
        end = _clamp(end, len(self._text))
        if end <= start:
            return
        self._text = self._text[:start] + self._text[end:]
        if self._cursor >= end:
            self._cursor -= end - start
        elif self._cursor > start:
            self._cursor = start

    def move_cursor_to(self, position: int) -> None:
        self._cursor = _clamp(position, len(self._text))

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"{type(self).__name__}(text={self._text!r}, cursor={self._cursor})"


def _clamp(value: int, upper: int) -> int:
    return max(0, min(value, upper))
