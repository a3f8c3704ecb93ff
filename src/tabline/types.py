"""Shared value types: completion candidates, outcomes, and reader signals."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class ReadSignal(enum.Enum):
    """Non-character results of :meth:`tabline.char_source.CharSource.read`."""

    EOF = "eof"
    NOT_READY = "not-ready"

    def __repr__(self) -> str:
        return f"<{self.name}>"


EOF = ReadSignal.EOF
NOT_READY = ReadSignal.NOT_READY


class CharSourceState(enum.Enum):
    """Internal state of a :class:`~tabline.char_source.CharSource`.

    IDLE
        No read is in flight and nothing is buffered.
    READING
        A single blocking read is in progress (on the background thread, or
        inline on a caller that claimed it).
    READY
        A character, EOF, or captured failure is waiting to be consumed.
    """

    IDLE = "idle"
    READING = "reading"
    READY = "ready"


@dataclass
class Candidate:
    """A single completion proposal.

    ``value`` is what gets inserted into the buffer; ``label`` is what gets
    shown in a listing and may carry ANSI styling. ``label`` falls back to
    ``value`` when omitted.
    """

    value: str
    label: str | None = None
    group: str | None = None

    def __post_init__(self) -> None:
        if self.label is None:
            self.label = self.value

    def with_value(self, value: str) -> Candidate:
        """Return a copy carrying *value* but the same label and group."""
        return Candidate(value=value, label=self.label, group=self.group)


@dataclass
class CompletionOutcome:
    """The result of running a completer against a line.

    ``insertion_offset`` is the buffer index where the completed token
    begins, or ``None`` when no completion is possible.
    """

    insertion_offset: int | None
    candidates: list[Candidate] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.insertion_offset is not None and self.insertion_offset < 0:
            self.insertion_offset = None

    @property
    def is_empty(self) -> bool:
        return self.insertion_offset is None or not self.candidates
