"""Completer protocol and the string-set and aggregate strategies.

A completer looks at the text being completed, appends matching
:class:`~tabline.types.Candidate` objects to a caller-owned list, and returns
the buffer offset at which the completed token starts, or ``-1`` when it has
nothing to offer.
"""

from __future__ import annotations

import bisect
from typing import Callable, Iterable, Protocol, Sequence

from tabline.types import Candidate, CompletionOutcome

NO_MATCH = -1


class Completer(Protocol):
    """Protocol for completion strategies."""

    def complete(self, buffer: str, cursor: int, candidates: list[Candidate]) -> int:
        """Append candidates for *buffer* and return the insertion offset.

        *cursor* is the cursor position (or the length of the token being
        completed). Entries already in *candidates* must be left alone.
        Returns ``-1`` when there is no match.
        """
        ...


def run_completer(completer: Completer, buffer: str, cursor: int | None = None) -> CompletionOutcome:
    """Run *completer* on *buffer* and package the result."""
    if cursor is None:
        cursor = len(buffer)
    candidates: list[Candidate] = []
    offset = completer.complete(buffer, cursor, candidates)
    if offset < 0:
        return CompletionOutcome(insertion_offset=None, candidates=candidates)
    return CompletionOutcome(insertion_offset=offset, candidates=candidates)


def append_blank_to_single(candidates: list[Candidate], start: int = 0) -> None:
    """Mark a lone candidate as a finished token by appending a blank.

    Only candidates at or after *start* are considered, so entries placed by
    earlier completers are never modified.
    """
    if len(candidates) - start == 1:
        only = candidates[start]
        candidates[start] = only.with_value(only.value + " ")


class StringSetCompleter:
    """Completes against a fixed set of literal strings.

    The set is kept sorted and deduplicated, so a prefix lookup is a binary
    search followed by a short forward scan.
    """

    def __init__(self, strings: Iterable[str] = ()) -> None:
        self._strings: list[str] = sorted(set(strings))

    @property
    def strings(self) -> Sequence[str]:
        return tuple(self._strings)

    def add(self, *strings: str) -> None:
        for s in strings:
            i = bisect.bisect_left(self._strings, s)
            if i == len(self._strings) or self._strings[i] != s:
                self._strings.insert(i, s)

    def discard(self, string: str) -> None:
        i = bisect.bisect_left(self._strings, string)
        if i < len(self._strings) and self._strings[i] == string:
            del self._strings[i]

    def replace(self, strings: Iterable[str]) -> None:
        self._strings = sorted(set(strings))

    def matches(self, prefix: str) -> list[str]:
        """Return the stored strings starting with *prefix*, in sorted order."""
        result: list[str] = []
        for s in self._strings[bisect.bisect_left(self._strings, prefix) :]:
            if not s.startswith(prefix):
                break
            result.append(s)
        return result

    def complete(self, buffer: str, cursor: int, candidates: list[Candidate]) -> int:
        start = len(candidates)
        candidates.extend(Candidate(value=s) for s in self.matches(buffer or ""))
        if len(candidates) == start:
            return NO_MATCH
        append_blank_to_single(candidates, start)
        return 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}(strings={self._strings!r})"


class ResolvingStringSetCompleter(StringSetCompleter):
    """A :class:`StringSetCompleter` whose strings are looked up on demand.

    *resolve* is called before every completion; its result replaces the
    current set. Returning ``None`` empties it.
    """

    def __init__(self, resolve: Callable[[], Iterable[str] | None]) -> None:
        super().__init__()
        self._resolve = resolve

    def complete(self, buffer: str, cursor: int, candidates: list[Candidate]) -> int:
        self.replace(self._resolve() or ())
        return super().complete(buffer, cursor, candidates)


class AggregateCompleter:
    """Runs several completers and keeps the most specific answer.

    Each sub-completer works on its own copy of the incoming candidate list.
    Only results whose offset equals the largest offset survive: the
    completer that consumed most of the buffer wins, ties are merged in
    registration order.
    """

    def __init__(self, *completers: Completer) -> None:
        self._completers: list[Completer] = list(completers)

    @property
    def completers(self) -> list[Completer]:
        return self._completers

    def add(self, completer: Completer) -> None:
        self._completers.append(completer)

    def complete(self, buffer: str, cursor: int, candidates: list[Candidate]) -> int:
        start = len(candidates)
        results: list[tuple[int, list[Candidate]]] = []
        best = NO_MATCH

        for completer in self._completers:
            own = list(candidates)
            offset = completer.complete(buffer, cursor, own)
            best = max(best, offset)
            results.append((offset, own))

        if best == NO_MATCH:
            return NO_MATCH

        for offset, own in results:
            if offset == best:
                candidates.extend(own[start:])
        return best

    def __repr__(self) -> str:
        return f"{type(self).__name__}(completers={self._completers!r})"
