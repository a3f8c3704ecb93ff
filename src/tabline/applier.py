"""Turns a completion outcome into buffer edits and screen output.

A single candidate is spliced into the buffer and terminated with a blank.
Several candidates extend the token to their greatest common prefix and
are then listed in columns, with a confirmation prompt when the list is
long. The behaviour mirrors readline's.
"""

from __future__ import annotations

import logging

from tabline.buffer import EditBuffer
from tabline.config import CompletionOptions, Messages
from tabline.terminal import TerminalAttributes, TerminalOutput
from tabline.types import EOF, Candidate, CompletionOutcome
from tabline.utils import (
    common_prefix,
    dedupe_preserving_order,
    ends_token,
    matching_prefix_length,
    strip_ansi,
)

logger = logging.getLogger(__name__)

_BLANK = " "


class CompletionApplier:
    """Applies :class:`~tabline.types.CompletionOutcome` objects to a buffer."""

    def __init__(
        self,
        terminal: TerminalOutput,
        attributes: TerminalAttributes,
        options: CompletionOptions | None = None,
        messages: Messages | None = None,
    ) -> None:
        self._terminal = terminal
        self._attributes = attributes
        self._options = options if options is not None else CompletionOptions()
        self._messages = messages if messages is not None else Messages()

    @property
    def options(self) -> CompletionOptions:
        return self._options

    def apply(self, buffer: EditBuffer, outcome: CompletionOutcome) -> bool:
        """Apply *outcome* to *buffer*. Returns False when there was nothing to do."""
        if outcome.is_empty:
            return False
        offset = outcome.insertion_offset
        assert offset is not None

        if len(outcome.candidates) == 1:
            self.apply_single(buffer, outcome.candidates[0], offset)
            return True

        prefix = common_prefix(self._value_of(c) for c in outcome.candidates)
        logger.debug("%d candidates, common prefix %r", len(outcome.candidates), prefix)
        # Never shorten what the user typed.
        if len(prefix) >= buffer.cursor - offset:
            self.replace_token(buffer, prefix, offset)
        self.print_candidates(outcome.candidates)
        return True

    # -- single candidate ---------------------------------------------------

    def apply_single(self, buffer: EditBuffer, candidate: Candidate, offset: int) -> None:
        value = self._value_of(candidate)
        text = buffer.text

        if text[offset : offset + len(value)] == value:
            # Already completed: only the cursor moves.
            buffer.move_cursor_to(offset + len(value))
        elif self._options.consume_matching_suffix:
            matched = matching_prefix_length(value, text[offset:])
            buffer.delete_range(offset, max(offset + matched, buffer.cursor))
            buffer.move_cursor_to(offset)
            buffer.insert(value)
        else:
            self.replace_token(buffer, value, offset)

        if self._options.print_space_after_full_completion and not ends_token(value):
            self._finish_token(buffer)

    def _finish_token(self, buffer: EditBuffer) -> None:
        cursor = buffer.cursor
        if buffer.text[cursor : cursor + 1] == _BLANK:
            buffer.move_cursor_to(cursor + 1)
        else:
            buffer.insert(_BLANK)

    # -- buffer edits -------------------------------------------------------

    @staticmethod
    def replace_token(buffer: EditBuffer, value: str, offset: int) -> None:
        """Replace ``text[offset:cursor]`` with *value*, cursor after it."""
        if buffer.cursor > offset:
            buffer.delete_range(offset, buffer.cursor)
        buffer.move_cursor_to(offset)
        buffer.insert(value)

    # -- listing ------------------------------------------------------------

    def print_candidates(self, candidates: list[Candidate]) -> None:
        """List candidate labels, asking first when there are many."""
        labels = [c.label or c.value for c in candidates]
        distinct = dedupe_preserving_order(labels)
        if len(distinct) != len(labels):
            labels = distinct

        if len(labels) > self._attributes.candidate_count_threshold():
            if not self._confirm(len(labels)):
                return

        self._terminal.println()
        self._terminal.print_columns(labels)

    def _confirm(self, count: int) -> bool:
        yes = self._messages.yes_key[0]
        no = self._messages.no_key[0]
        self._terminal.print(self._messages.format_prompt(count))

        while True:
            ch = self._terminal.read_restricted_char(frozenset({yes, no}))
            if ch is EOF:
                return False
            if ch == no:
                self._terminal.println()
                return False
            if ch == yes:
                return True
            self._terminal.beep()

    def _value_of(self, candidate: Candidate) -> str:
        if self._options.strip_display_styling:
            return strip_ansi(candidate.value)
        return candidate.value

