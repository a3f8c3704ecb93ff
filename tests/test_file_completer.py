"""Tests for tabline.file_completer."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from tabline.applier import CompletionApplier
from tabline.buffer import LineBuffer
from tabline.completer import NO_MATCH, run_completer
from tabline.config import CompletionOptions
from tabline.file_completer import (
    FileSystemCompleter,
    PathEntry,
    has_subdirectories,
    list_directory,
    needs_quoting,
    parse_rendered_name,
    render_name,
    unescape,
)
from tabline.terminal import FixedTerminalAttributes
from tabline.types import Candidate

from .virtual_terminal import VirtualTerminal

SEP = os.sep

posix_only = pytest.mark.skipif(os.name == "nt", reason="POSIX path handling")


def complete(completer: FileSystemCompleter, buffer: str) -> tuple[int, list[str]]:
    candidates: list[Candidate] = []
    offset = completer.complete(buffer, len(buffer), candidates)
    return offset, [c.value for c in candidates]


def make_completer(root: Path, **options: bool | str) -> FileSystemCompleter:
    return FileSystemCompleter(CompletionOptions(**options), cwd=lambda: str(root))


@pytest.fixture
def plain_tree(tmp_path: Path) -> Path:
    (tmp_path / "file.txt").touch()
    (tmp_path / "folder").mkdir()
    return tmp_path


@pytest.fixture
def blank_tree(tmp_path: Path) -> Path:
    (tmp_path / "the file.txt").touch()
    (tmp_path / "the folder").mkdir()
    return tmp_path


@pytest.fixture
def nested_tree(tmp_path: Path) -> Path:
    (tmp_path / "the folder" / "the subfolder").mkdir(parents=True)
    return tmp_path


# ---------------------------------------------------------------------------
# Quoting
# ---------------------------------------------------------------------------


class TestRenderName:
    def test_plain_name_untouched(self) -> None:
        assert render_name("foo") == "foo"

    def test_blank_quoted(self) -> None:
        assert render_name("foo bar") == "'foo bar'"

    def test_quote_char_escaped(self) -> None:
        assert render_name("foo 'bar") == "'foo \\'bar'"
        assert render_name("foo 'bar", "'") == "'foo \\'bar'"

    def test_double_quote(self) -> None:
        assert render_name("foo \" 'bar", '"') == "\"foo \\\" 'bar\""

    def test_backslash_escaped(self) -> None:
        assert render_name("a\\b c") == "'a\\\\b c'"

    def test_quote_alone_triggers_quoting(self) -> None:
        assert render_name("it's") == "'it\\'s'"

    def test_force(self) -> None:
        assert render_name("plain", '"', force=True) == '"plain"'

    def test_partial_quotes(self) -> None:
        assert render_name("a b", opening=False) == "a b'"
        assert render_name("a b", closing=False) == "'a b"
        assert render_name("a b", opening=False, closing=False) == "a b"

    def test_needs_quoting(self) -> None:
        assert needs_quoting("a\tb", "'")
        assert needs_quoting('say "hi"', '"')
        assert not needs_quoting('say"hi"', "'")


class TestParseRenderedName:
    @pytest.mark.parametrize(
        "name,quote",
        [
            ("plain", "'"),
            ("foo bar", "'"),
            ("foo 'bar", "'"),
            ("foo \" 'bar", '"'),
            ("back\\slash here", "'"),
        ],
    )
    def test_inverts_render(self, name: str, quote: str) -> None:
        assert parse_rendered_name(render_name(name, quote)) == name

    def test_unterminated_quote(self) -> None:
        assert parse_rendered_name("'the fi") == "the fi"

    def test_escaped_closing_quote_kept(self) -> None:
        assert parse_rendered_name("'it\\'") == "it'"

    def test_unescape(self) -> None:
        assert unescape("a\\ b\\\\c\\") == "a b\\c\\"


# ---------------------------------------------------------------------------
# Directory helpers
# ---------------------------------------------------------------------------


class TestDirectoryHelpers:
    def test_list_directory_sorted(self, tmp_path: Path) -> None:
        for name in ("b", "a", "c"):
            (tmp_path / name).touch()
        (tmp_path / "d").mkdir()
        entries = list_directory(str(tmp_path))
        assert [e.name for e in entries] == ["a", "b", "c", "d"]
        assert [e.is_directory for e in entries] == [False, False, False, True]
        assert entries[0].path == os.path.join(str(tmp_path), "a")

    def test_list_directory_missing(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            list_directory(str(tmp_path / "missing"))

    def test_has_subdirectories(self, nested_tree: Path) -> None:
        assert has_subdirectories(str(nested_tree / "the folder"))
        assert not has_subdirectories(str(nested_tree / "the folder" / "the subfolder"))

    def test_has_subdirectories_missing(self, tmp_path: Path) -> None:
        assert not has_subdirectories(str(tmp_path / "missing"))


# ---------------------------------------------------------------------------
# Absolute paths
# ---------------------------------------------------------------------------


class TestAbsolutePaths:
    def test_defaults(self, plain_tree: Path) -> None:
        buffer = str(plain_tree) + SEP
        offset, values = complete(FileSystemCompleter(), buffer)
        assert offset == len(buffer)
        assert values == ["file.txt ", "folder" + SEP]

    def test_labels(self, plain_tree: Path) -> None:
        outcome = run_completer(FileSystemCompleter(), str(plain_tree) + SEP)
        assert [c.label for c in outcome.candidates] == ["file.txt", "folder" + SEP]

    def test_single_file(self, tmp_path: Path) -> None:
        (tmp_path / "file.txt").touch()
        buffer = str(tmp_path) + SEP
        assert complete(FileSystemCompleter(), buffer) == (len(buffer), ["file.txt "])

    def test_single_file_no_blank(self, tmp_path: Path) -> None:
        (tmp_path / "file.txt").touch()
        buffer = str(tmp_path) + SEP
        completer = FileSystemCompleter(CompletionOptions(print_space_after_full_completion=False))
        assert complete(completer, buffer) == (len(buffer), ["file.txt"])

    def test_single_folder(self, tmp_path: Path) -> None:
        (tmp_path / "folder").mkdir()
        buffer = str(tmp_path) + SEP
        assert complete(FileSystemCompleter(), buffer) == (len(buffer), ["folder" + SEP])

    def test_no_blank(self, plain_tree: Path) -> None:
        buffer = str(plain_tree) + SEP
        completer = FileSystemCompleter(CompletionOptions(print_space_after_full_completion=False))
        assert complete(completer, buffer) == (len(buffer), ["file.txt", "folder" + SEP])

    def test_folders_only(self, plain_tree: Path) -> None:
        buffer = str(plain_tree) + SEP
        completer = FileSystemCompleter(CompletionOptions(complete_folders_only=True))
        assert complete(completer, buffer) == (len(buffer), ["folder "])

    def test_folders_only_no_blank(self, plain_tree: Path) -> None:
        buffer = str(plain_tree) + SEP
        completer = FileSystemCompleter(
            CompletionOptions(complete_folders_only=True, print_space_after_full_completion=False)
        )
        assert complete(completer, buffer) == (len(buffer), ["folder"])

    def test_names_with_blanks(self, blank_tree: Path) -> None:
        buffer = str(blank_tree) + SEP
        offset, values = complete(FileSystemCompleter(), buffer)
        assert offset == len(buffer)
        assert values == ["'the file.txt' ", "'the folder" + SEP]

    def test_prefix(self, blank_tree: Path) -> None:
        buffer = str(blank_tree) + SEP
        offset, values = complete(FileSystemCompleter(), buffer + "the")
        assert offset == len(buffer)
        assert values == ["'the file.txt' ", "'the folder" + SEP]

    def test_prefix_narrows(self, blank_tree: Path) -> None:
        buffer = str(blank_tree) + SEP + "the fi"
        offset, values = complete(FileSystemCompleter(), buffer)
        assert values == ["'the file.txt' "]

    def test_ignore(self, tmp_path: Path) -> None:
        (tmp_path / "file.txt").touch()
        (tmp_path / "file.pdf").touch()
        buffer = str(tmp_path) + SEP
        completer = FileSystemCompleter(ignore=lambda path: path.endswith(".pdf"))
        assert complete(completer, buffer) == (len(buffer), ["file.txt "])

    def test_files_disabled(self, nested_tree: Path) -> None:
        (nested_tree / "file.txt").touch()
        (nested_tree / "empty").mkdir()
        buffer = str(nested_tree) + SEP
        completer = FileSystemCompleter(CompletionOptions(complete_files=False))
        assert complete(completer, buffer) == (len(buffer), ["'the folder" + SEP])

    def test_missing_directory(self, tmp_path: Path) -> None:
        buffer = str(tmp_path / "missing") + SEP + "x"
        assert complete(FileSystemCompleter(), buffer) == (NO_MATCH, [])

    def test_nothing_matches(self, plain_tree: Path) -> None:
        buffer = str(plain_tree) + SEP + "zzz"
        assert complete(FileSystemCompleter(), buffer) == (NO_MATCH, [])


# ---------------------------------------------------------------------------
# Leading quote handling
# ---------------------------------------------------------------------------


class TestLeadingQuote:
    def test_absolute_prefix(self, blank_tree: Path) -> None:
        buffer = '"' + str(blank_tree) + SEP
        completer = FileSystemCompleter(CompletionOptions(handle_leading_quote=True))
        offset, values = complete(completer, buffer + "the")
        assert offset == len(buffer)
        assert values == ['the file.txt" ', "the folder" + SEP]

    def test_absolute_prefix_folders_only(self, blank_tree: Path) -> None:
        buffer = '"' + str(blank_tree) + SEP
        completer = FileSystemCompleter(
            CompletionOptions(handle_leading_quote=True, complete_folders_only=True)
        )
        offset, values = complete(completer, buffer + "the")
        assert offset == len(buffer)
        assert values == ['the folder" ']

    def test_relative_without_quote_uses_default(self, blank_tree: Path) -> None:
        completer = make_completer(blank_tree, handle_leading_quote=True)
        assert complete(completer, "the") == (0, ["'the file.txt' ", "'the folder" + SEP])

    def test_relative_keeps_opening_quote(self, blank_tree: Path) -> None:
        completer = make_completer(blank_tree, handle_leading_quote=True)
        offset, values = complete(completer, '"the')
        assert offset == 0
        assert values == ['"the file.txt" ', '"the folder' + SEP]

    def test_nested_relative(self, tmp_path: Path) -> None:
        folder = tmp_path / "the folder"
        folder.mkdir()
        (folder / "junit1.tmp").touch()
        completer = make_completer(tmp_path, handle_leading_quote=True)
        buffer = '"the folder' + SEP
        assert complete(completer, buffer) == (len(buffer), ['junit1.tmp" '])

    def test_nested_folders_only(self, nested_tree: Path) -> None:
        buffer = '"' + str(nested_tree) + SEP
        completer = FileSystemCompleter(
            CompletionOptions(handle_leading_quote=True, complete_folders_only=True)
        )
        offset, values = complete(completer, buffer)
        assert offset == len(buffer)
        assert values == ["the folder" + SEP, 'the folder" ']

    @posix_only
    def test_escaped_quote_in_buffer(self, tmp_path: Path) -> None:
        (tmp_path / "it's here.txt").touch()
        completer = make_completer(tmp_path, handle_leading_quote=True)
        assert complete(completer, "'it\\'s") == (0, ["'it\\'s here.txt' "])

    def test_quote_not_special_when_disabled(self, blank_tree: Path) -> None:
        completer = make_completer(blank_tree)
        assert complete(completer, '"the') == (NO_MATCH, [])


# ---------------------------------------------------------------------------
# Relative paths and home expansion
# ---------------------------------------------------------------------------


class TestRelativePaths:
    def test_empty_buffer_lists_cwd(self, plain_tree: Path) -> None:
        completer = make_completer(plain_tree)
        assert complete(completer, "") == (0, ["file.txt ", "folder" + SEP])

    def test_nested_subfolders(self, nested_tree: Path) -> None:
        completer = make_completer(nested_tree)
        assert complete(completer, "") == (0, ["'the folder" + SEP])

    def test_nested_subfolders_folders_only(self, nested_tree: Path) -> None:
        completer = make_completer(nested_tree, complete_folders_only=True)
        assert complete(completer, "") == (0, ["'the folder" + SEP, "'the folder' "])

    def test_nested_subfolders_folders_only_no_blank(self, nested_tree: Path) -> None:
        completer = make_completer(
            nested_tree, complete_folders_only=True, print_space_after_full_completion=False
        )
        assert complete(completer, "") == (0, ["'the folder" + SEP, "'the folder'"])

    def test_into_subdirectory(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "main.py").touch()
        completer = make_completer(tmp_path)
        assert complete(completer, "src" + SEP + "m") == (4, ["main.py "])


@posix_only
class TestHomeExpansion:
    def test_tilde_slash(self, tmp_path: Path) -> None:
        home = tmp_path / "home"
        home.mkdir()
        (home / "notes.txt").touch()
        completer = FileSystemCompleter(home=lambda: str(home), cwd=lambda: "/nonexistent")
        assert complete(completer, "~/no") == (2, ["notes.txt "])

    def test_translate(self, tmp_path: Path) -> None:
        home = str(tmp_path / "home")
        completer = FileSystemCompleter(home=lambda: home, cwd=lambda: "/work")
        assert completer.translate("~/x") == home + "/x"
        assert completer.translate("~") == str(tmp_path)
        assert completer.translate("rel/x") == "/work/rel/x"
        assert completer.translate("/abs/x") == "/abs/x"


# ---------------------------------------------------------------------------
# match_entries
# ---------------------------------------------------------------------------


@posix_only
class TestMatchEntries:
    def test_unix_paths(self) -> None:
        completer = FileSystemCompleter()
        candidates: list[Candidate] = []
        entries = [
            PathEntry(name="baroo", path="/foo/baroo", is_directory=False),
            PathEntry(name="barbee", path="/foo/barbee", is_directory=False),
        ]
        offset = completer.match_entries("foo/bar", "/foo/bar", entries, candidates)
        assert offset == len("foo/")
        assert [c.value for c in candidates] == ["baroo ", "barbee "]

    def test_non_matching_entries_skipped(self) -> None:
        completer = FileSystemCompleter()
        candidates: list[Candidate] = []
        entries = [PathEntry(name="other", path="/foo/other", is_directory=False)]
        assert completer.match_entries("foo/bar", "/foo/bar", entries, candidates) == NO_MATCH
        assert candidates == []


# ---------------------------------------------------------------------------
# Applied to a buffer
# ---------------------------------------------------------------------------


class TestAppliedToBuffer:
    def test_leading_quote_single_file(self, tmp_path: Path) -> None:
        (tmp_path / "the file.txt").touch()
        completer = make_completer(tmp_path, handle_leading_quote=True)
        applier = CompletionApplier(VirtualTerminal(), FixedTerminalAttributes())

        buffer = LineBuffer('"the')
        assert applier.apply(buffer, run_completer(completer, buffer.text)) is True
        assert buffer.text == '"the file.txt" '
        assert buffer.cursor == len(buffer.text)

    def test_directory_completion_has_no_blank(self, tmp_path: Path) -> None:
        (tmp_path / "docs").mkdir()
        completer = make_completer(tmp_path)
        applier = CompletionApplier(VirtualTerminal(), FixedTerminalAttributes())

        buffer = LineBuffer("do")
        applier.apply(buffer, run_completer(completer, buffer.text))
        assert buffer.text == "docs" + SEP
