"""Tests for tabline.buffer.LineBuffer."""

from __future__ import annotations

from tabline.buffer import LineBuffer


class TestLineBuffer:
    def test_defaults_cursor_to_end(self) -> None:
        buffer = LineBuffer("abc")
        assert buffer.cursor == 3

    def test_cursor_clamped(self) -> None:
        assert LineBuffer("abc", cursor=10).cursor == 3
        assert LineBuffer("abc", cursor=-2).cursor == 0

    def test_insert(self) -> None:
        buffer = LineBuffer("ac", cursor=1)
        buffer.insert("b")
        assert buffer.text == "abc"
        assert buffer.cursor == 2

    def test_delete_before_cursor(self) -> None:
        buffer = LineBuffer("abcdef")
        buffer.delete_range(1, 3)
        assert buffer.text == "adef"
        assert buffer.cursor == 4

    def test_delete_around_cursor(self) -> None:
        buffer = LineBuffer("abcdef", cursor=2)
        buffer.delete_range(1, 4)
        assert buffer.text == "aef"
        assert buffer.cursor == 1

    def test_delete_after_cursor(self) -> None:
        buffer = LineBuffer("abcdef", cursor=1)
        buffer.delete_range(3, 5)
        assert buffer.text == "abcf"
        assert buffer.cursor == 1

    def test_delete_empty_range(self) -> None:
        buffer = LineBuffer("abc")
        buffer.delete_range(2, 1)
        assert buffer.text == "abc"

    def test_move_cursor(self) -> None:
        buffer = LineBuffer("abc")
        buffer.move_cursor_to(1)
        assert buffer.cursor == 1
        buffer.move_cursor_to(99)
        assert buffer.cursor == 3

    def test_str_and_repr(self) -> None:
        buffer = LineBuffer("ab", cursor=1)
        assert str(buffer) == "ab"
        assert repr(buffer) == "LineBuffer(text='ab', cursor=1)"
