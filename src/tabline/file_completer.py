"""File name completion modelled on bash/readline behaviour.

Differences from readline: directory candidates end with the path
separator, wildcards are not expanded, and ``~`` only ever refers to the
current user's home directory.

Names containing whitespace (or the active quote character) are rendered
inside quotes with backslash escapes, e.g. ``the file.txt`` becomes
``'the file.txt'``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from tabline.completer import NO_MATCH
from tabline.config import CompletionOptions
from tabline.types import Candidate

logger = logging.getLogger(__name__)

QUOTE_CHARS = frozenset({"'", '"'})
ESCAPE_CHAR = "\\"


# ---------------------------------------------------------------------------
# Quoting
# ---------------------------------------------------------------------------


def needs_quoting(name: str, quote_char: str) -> bool:
    """Return True when *name* cannot be inserted bare."""
    return quote_char in name or any(ch.isspace() for ch in name)


def escape_name(name: str, quote_char: str) -> str:
    """Backslash-escape backslashes and *quote_char* inside *name*."""
    out: list[str] = []
    for ch in name:
        if ch == ESCAPE_CHAR or ch == quote_char:
            out.append(ESCAPE_CHAR)
        out.append(ch)
    return "".join(out)


def render_name(
    name: str,
    quote_char: str | None = None,
    *,
    opening: bool = True,
    closing: bool = True,
    force: bool = False,
) -> str:
    """Render *name* for insertion into a command line.

    *quote_char* defaults to a single quote. Quoting happens when the name
    needs it or *force* is set (the buffer already opened a quote).
    *opening* and *closing* control whether the surrounding quote characters
    are emitted; the escaping applies either way.
    """
    quote = quote_char or "'"
    if not force and not needs_quoting(name, quote):
        return name
    return (
        (quote if opening else "")
        + escape_name(name, quote)
        + (quote if closing else "")
    )


def parse_rendered_name(text: str) -> str:
    """Undo :func:`render_name`: strip the quotes and resolve escapes."""
    if not text or text[0] not in QUOTE_CHARS:
        return text
    quote = text[0]
    body = text[1:]
    if body.endswith(quote) and not _is_escaped(body, len(body) - 1):
        body = body[:-1]
    return unescape(body)


def unescape(text: str) -> str:
    """Drop every backslash that escapes the character following it."""
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == ESCAPE_CHAR and i + 1 < len(text):
            out.append(text[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _is_escaped(text: str, index: int) -> bool:
    backslashes = 0
    i = index - 1
    while i >= 0 and text[i] == ESCAPE_CHAR:
        backslashes += 1
        i -= 1
    return backslashes % 2 == 1


# ---------------------------------------------------------------------------
# Directory entries
# ---------------------------------------------------------------------------


@dataclass
class PathEntry:
    """A directory entry considered for completion."""

    name: str
    path: str
    is_directory: bool


def list_directory(directory: str) -> list[PathEntry]:
    """List *directory* sorted by name. Raises ``OSError`` on failure."""
    entries: list[PathEntry] = []
    with os.scandir(directory) as it:
        for entry in it:
            try:
                is_directory = entry.is_dir()
            except OSError:
                # Broken symlink or permission error - treat as file
                is_directory = False
            entries.append(
                PathEntry(
                    name=entry.name,
                    path=os.path.join(directory, entry.name),
                    is_directory=is_directory,
                )
            )
    entries.sort(key=lambda e: e.name)
    return entries


def has_subdirectories(directory: str) -> bool:
    try:
        with os.scandir(directory) as it:
            for entry in it:
                try:
                    if entry.is_dir():
                        return True
                except OSError:
                    continue
    except OSError as exc:
        logger.debug("Cannot probe %s for subdirectories: %s", directory, exc)
    return False


# ---------------------------------------------------------------------------
# FileSystemCompleter
# ---------------------------------------------------------------------------


class FileSystemCompleter:
    """Completes file and directory names relative to the buffer's path.

    Parameters
    ----------
    options:
        ``complete_folders_only``, ``complete_files``,
        ``print_space_after_full_completion``, ``handle_leading_quote`` and
        ``quote_char`` are honoured.
    ignore:
        Predicate on an entry's absolute path; matching entries are hidden.
    home, cwd:
        Providers for the home and working directories.
    """

    def __init__(
        self,
        options: CompletionOptions | None = None,
        *,
        ignore: Callable[[str], bool] | None = None,
        home: Callable[[], str] | None = None,
        cwd: Callable[[], str] | None = None,
    ) -> None:
        self._options = options if options is not None else CompletionOptions()
        self._ignore = ignore
        self._home = home if home is not None else lambda: str(Path.home())
        self._cwd = cwd if cwd is not None else os.getcwd
        self._separator = os.sep
        self._is_windows = os.name == "nt"

    @property
    def options(self) -> CompletionOptions:
        return self._options

    @property
    def complete_folders(self) -> bool:
        return self._options.complete_folders_only

    @property
    def complete_files(self) -> bool:
        return self._options.complete_files and not self._options.complete_folders_only

    def complete(self, buffer: str, cursor: int, candidates: list[Candidate]) -> int:
        buffer = buffer or ""
        if self._is_windows:
            buffer = buffer.replace("/", "\\")

        path_text = buffer
        leading_quote: str | None = None
        if self._options.handle_leading_quote and buffer[:1] in QUOTE_CHARS:
            leading_quote = buffer[0]
            path_text = buffer[1:]
            if not self._is_windows:
                path_text = unescape(path_text)

        translated = self.translate(path_text)
        if translated.endswith(self._separator):
            directory = translated
        else:
            directory = os.path.dirname(translated)

        try:
            entries = list_directory(directory)
        except OSError as exc:
            logger.debug("Cannot list %s: %s", directory, exc)
            return NO_MATCH

        return self.match_entries(buffer, translated, entries, candidates, leading_quote)

    def translate(self, path_text: str) -> str:
        """Turn the typed path into an absolute path prefix."""
        sep = self._separator
        if not self._is_windows and path_text.startswith("~"):
            home = self._home()
            if path_text.startswith("~" + sep):
                return home + path_text[1:]
            return os.path.dirname(os.path.abspath(home))
        if not os.path.isabs(path_text):
            return self._cwd() + sep + path_text
        return path_text

    def match_entries(
        self,
        buffer: str,
        prefix: str,
        entries: list[PathEntry],
        candidates: list[Candidate],
        leading_quote: str | None = None,
    ) -> int:
        """Append a candidate for every entry whose path starts with *prefix*."""
        sep = self._separator
        index = buffer.rfind(sep)
        offset = index + len(sep)
        quote = leading_quote or self._options.quote_char
        # The buffer's own quote survives unless the whole token gets replaced.
        opening = leading_quote is None or offset == 0
        blank = " " if self._options.print_space_after_full_completion else ""
        start = len(candidates)

        for entry in entries:
            if self._ignore is not None and self._ignore(entry.path):
                continue
            if not self.complete_files and not entry.is_directory:
                continue
            if not entry.path.startswith(prefix):
                continue

            force = leading_quote is not None
            if entry.is_directory:
                if self.complete_files or has_subdirectories(entry.path):
                    value = render_name(entry.name, quote, opening=opening, closing=False, force=force)
                    candidates.append(Candidate(value=value + sep, label=entry.name + sep))
                if self.complete_folders:
                    value = render_name(entry.name, quote, opening=opening, force=force)
                    candidates.append(Candidate(value=value + blank, label=entry.name))
            else:
                value = render_name(entry.name, quote, opening=opening, force=force)
                candidates.append(Candidate(value=value + blank, label=entry.name))

        if len(candidates) == start:
            return NO_MATCH
        return offset
