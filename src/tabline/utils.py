"""Text utilities: ANSI stripping, display width, column layout, common prefix.

Widths are measured per grapheme cluster with ``wcwidth`` so candidate
labels containing styling, CJK text, or emoji line up in listings.
"""

from __future__ import annotations

import os
import re
import unicodedata
from typing import Iterable, Sequence

import grapheme
import wcwidth as _wcwidth

# ---------------------------------------------------------------------------
# ANSI handling
# ---------------------------------------------------------------------------

_STRIP_RE = re.compile(
    r"\x1b\[[0-9;?]*[A-Za-z]"             # CSI
    r"|\x1b\]8;;[^\x07]*\x07"             # OSC 8
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"  # APC
)


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from *text*."""
    if "\x1b" not in text:
        return text
    return _STRIP_RE.sub("", text)


# ---------------------------------------------------------------------------
# Width measurement (capped cache)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


def _grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster."""
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ, skin tone modifiers, regional indicators
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2
    if unicodedata.category(first).startswith("M") or unicodedata.category(first) == "Cf":
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*, ignoring ANSI codes."""
    if not text:
        return 0

    stripped = strip_ansi(text)
    if not stripped:
        return 0

    if all(0x20 <= ord(ch) <= 0x7E for ch in stripped):
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


# ---------------------------------------------------------------------------
# Column layout
# ---------------------------------------------------------------------------

COLUMN_GAP = 2


def format_columns(labels: Sequence[str], width: int, *, gap: int = COLUMN_GAP) -> list[str]:
    """Lay *labels* out in as many columns as fit into *width*.

    Items fill each row left to right. Every column is as wide as the widest
    label plus *gap*; a label wider than the terminal gets a row of its own.
    Trailing padding is not emitted.
    """
    if not labels:
        return []

    widths = [visible_width(label) for label in labels]
    cell = max(widths) + gap
    per_row = max(1, (max(width, 1) + gap) // cell)

    lines: list[str] = []
    for start in range(0, len(labels), per_row):
        row = labels[start : start + per_row]
        row_widths = widths[start : start + per_row]
        parts: list[str] = []
        for i, (label, w) in enumerate(zip(row, row_widths)):
            if i < len(row) - 1:
                parts.append(label + " " * (cell - w))
            else:
                parts.append(label)
        lines.append("".join(parts))
    return lines


# ---------------------------------------------------------------------------
# Prefix helpers
# ---------------------------------------------------------------------------


def common_prefix(values: Iterable[str]) -> str:
    """Return the longest literal prefix shared by every string in *values*.

    Walks the shortest string character by character and stops at the first
    position where any other string disagrees. An empty input yields ``""``.
    """
    items = list(values)
    if not items:
        return ""

    shortest = min(items, key=len)
    for i, ch in enumerate(shortest):
        for other in items:
            if other[i] != ch:
                return shortest[:i]
    return shortest


def matching_prefix_length(a: str, b: str) -> int:
    """Return how many leading characters *a* and *b* have in common."""
    n = 0
    for x, y in zip(a, b):
        if x != y:
            break
        n += 1
    return n


def dedupe_preserving_order(items: Sequence[str]) -> list[str]:
    """Drop repeated entries, keeping the first occurrence of each."""
    return list(dict.fromkeys(items))


def ends_token(value: str) -> bool:
    """True when *value* already ends with a blank or a path separator."""
    return bool(value) and (value[-1].isspace() or value[-1] in ("/", os.sep))
