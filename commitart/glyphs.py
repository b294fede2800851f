"""
glyphs.py

Responsibility: the static 5x7 bitmap font used to draw text on the
contribution calendar.

Glyphs are authored as row strings ("1" lit, anything else blank) and frozen
into tuples at import time. Characters without a glyph draw as blank space.
"""

from __future__ import annotations

GLYPH_ROWS = 7
GLYPH_COLS = 5

Glyph = tuple[tuple[int, ...], ...]

_FONT: dict[str, list[str]] = {
    "A": [" 111 ", "1   1", "1   1", "11111", "1   1", "1   1", "1   1"],
    "B": ["1111 ", "1   1", "1   1", "1111 ", "1   1", "1   1", "1111 "],
    "C": [" 1111", "1    ", "1    ", "1    ", "1    ", "1    ", " 1111"],
    "D": ["1111 ", "1   1", "1   1", "1   1", "1   1", "1   1", "1111 "],
    "E": ["11111", "1    ", "1    ", "1111 ", "1    ", "1    ", "11111"],
    "F": ["11111", "1    ", "1    ", "1111 ", "1    ", "1    ", "1    "],
    "G": [" 1111", "1    ", "1    ", "1  11", "1   1", "1   1", " 111 "],
    "H": ["1   1", "1   1", "1   1", "11111", "1   1", "1   1", "1   1"],
    "I": ["11111", "  1  ", "  1  ", "  1  ", "  1  ", "  1  ", "11111"],
    "J": ["  111", "   1 ", "   1 ", "   1 ", "   1 ", "1  1 ", " 11  "],
    "K": ["1   1", "1  1 ", "1 1  ", "11   ", "1 1  ", "1  1 ", "1   1"],
    "L": ["1    ", "1    ", "1    ", "1    ", "1    ", "1    ", "11111"],
    "M": ["1   1", "11 11", "1 1 1", "1 1 1", "1   1", "1   1", "1   1"],
    "N": ["1   1", "11  1", "1 1 1", "1  11", "1   1", "1   1", "1   1"],
    "O": [" 111 ", "1   1", "1   1", "1   1", "1   1", "1   1", " 111 "],
    "P": ["1111 ", "1   1", "1   1", "1111 ", "1    ", "1    ", "1    "],
    "Q": [" 111 ", "1   1", "1   1", "1   1", "1 1 1", "1  1 ", " 11 1"],
    "R": ["1111 ", "1   1", "1   1", "1111 ", "1 1  ", "1  1 ", "1   1"],
    "S": [" 1111", "1    ", "1    ", " 111 ", "    1", "    1", "1111 "],
    "T": ["11111", "  1  ", "  1  ", "  1  ", "  1  ", "  1  ", "  1  "],
    "U": ["1   1", "1   1", "1   1", "1   1", "1   1", "1   1", " 111 "],
    "V": ["1   1", "1   1", "1   1", "1   1", "1   1", " 1 1 ", "  1  "],
    "W": ["1   1", "1   1", "1   1", "1 1 1", "1 1 1", "11 11", "1   1"],
    "X": ["1   1", "1   1", " 1 1 ", "  1  ", " 1 1 ", "1   1", "1   1"],
    "Y": ["1   1", "1   1", " 1 1 ", "  1  ", "  1  ", "  1  ", "  1  "],
    "Z": ["11111", "    1", "   1 ", "  1  ", " 1   ", "1    ", "11111"],
    "0": [" 111 ", "1   1", "1  11", "1 1 1", "11  1", "1   1", " 111 "],
    "1": ["  1  ", " 11  ", "  1  ", "  1  ", "  1  ", "  1  ", " 111 "],
    "2": [" 111 ", "1   1", "    1", "   1 ", "  1  ", " 1   ", "11111"],
    "3": ["11111", "   1 ", "  1  ", "   1 ", "    1", "1   1", " 111 "],
    "4": ["   1 ", "  11 ", " 1 1 ", "1  1 ", "11111", "   1 ", "   1 "],
    "5": ["11111", "1    ", "1111 ", "    1", "    1", "1   1", " 111 "],
    "6": ["  11 ", " 1   ", "1    ", "1111 ", "1   1", "1   1", " 111 "],
    "7": ["11111", "    1", "   1 ", "  1  ", " 1   ", " 1   ", " 1   "],
    "8": [" 111 ", "1   1", "1   1", " 111 ", "1   1", "1   1", " 111 "],
    "9": [" 111 ", "1   1", "1   1", " 1111", "    1", "   1 ", " 11  "],
}


def _freeze(rows: list[str]) -> Glyph:
    if len(rows) != GLYPH_ROWS or any(len(r) != GLYPH_COLS for r in rows):
        raise ValueError(f"Glyph must be {GLYPH_ROWS}x{GLYPH_COLS}: {rows!r}")
    return tuple(tuple(1 if c == "1" else 0 for c in row) for row in rows)


BLANK: Glyph = tuple((0,) * GLYPH_COLS for _ in range(GLYPH_ROWS))

GLYPHS: dict[str, Glyph] = {ch: _freeze(rows) for ch, rows in _FONT.items()}


def lookup(char: str) -> Glyph:
    """
    Return the glyph for `char` (case-insensitive).

    Unknown characters, including whitespace and punctuation, render as BLANK.
    """
    return GLYPHS.get(char.upper(), BLANK)
