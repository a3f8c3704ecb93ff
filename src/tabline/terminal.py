"""Terminal collaborators used while presenting completions.

Provides the ``TerminalOutput`` and ``TerminalAttributes`` protocols and a
stream-backed ``StreamTerminalOutput`` that writes to a text stream and
reads answers through a :class:`~tabline.char_source.CharSource`.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import AbstractSet, Protocol, Sequence, TextIO, Union

from tabline.char_source import CharSource
from tabline.types import EOF, ReadSignal
from tabline.utils import format_columns

_BELL = "\x07"


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


class TerminalOutput(Protocol):
    """Output side of the terminal, plus the one-key prompt reader."""

    def print(self, text: str) -> None: ...

    def println(self) -> None: ...

    def print_columns(self, labels: Sequence[str]) -> None: ...

    def beep(self) -> None: ...

    def read_restricted_char(self, allowed: AbstractSet[str]) -> Union[str, ReadSignal]:
        """Read until one of *allowed* is typed; return it, or ``EOF``."""
        ...


class TerminalAttributes(Protocol):
    """Read-only terminal facts the applier needs."""

    def display_width(self) -> int: ...

    def candidate_count_threshold(self) -> int:
        """Listings with more distinct labels than this ask for confirmation."""
        ...


@dataclass
class FixedTerminalAttributes:
    """``TerminalAttributes`` with constant values."""

    width: int = 80
    autoprint_threshold: int = 100

    def display_width(self) -> int:
        return self.width

    def candidate_count_threshold(self) -> int:
        return self.autoprint_threshold


# ---------------------------------------------------------------------------
# StreamTerminalOutput
# ---------------------------------------------------------------------------


class StreamTerminalOutput:
    """``TerminalOutput`` writing to *stream* (stdout by default)."""

    def __init__(
        self,
        char_source: CharSource,
        attributes: TerminalAttributes | None = None,
        stream: TextIO | None = None,
        *,
        bell_enabled: bool = True,
    ) -> None:
        self._char_source = char_source
        self._attributes = attributes if attributes is not None else FixedTerminalAttributes()
        self._stream = stream if stream is not None else sys.stdout
        self._bell_enabled = bell_enabled

    def print(self, text: str) -> None:
        self._raw_write(text)

    def println(self) -> None:
        self._raw_write("\n")

    def print_columns(self, labels: Sequence[str]) -> None:
        lines = format_columns(labels, self._attributes.display_width())
        if lines:
            self._raw_write("\n".join(lines) + "\n")

    def beep(self) -> None:
        if self._bell_enabled:
            self._raw_write(_BELL)

    def read_restricted_char(self, allowed: AbstractSet[str]) -> Union[str, ReadSignal]:
        while True:
            ch = self._char_source.read(True)
            if ch is EOF:
                return EOF
            if ch in allowed:
                return ch

    def _raw_write(self, data: str) -> None:
        try:
            self._stream.write(data)
            self._stream.flush()
        except OSError:
            pass
