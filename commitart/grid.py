"""
grid.py

Responsibility: build and edit the 7-row pixel grids that describe a
contribution pattern.

Rows are weekdays (row 0 = Sunday), columns are calendar weeks. A grid is a
plain `list[list[int]]` holding only 0 and 1. Grids are either compiled from
text via the glyph table or authored by hand; the schedule compiler accepts
both.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from commitart.errors import ContractViolation
from commitart.glyphs import GLYPH_ROWS, lookup

Grid = list[list[int]]

ROWS = GLYPH_ROWS
YEAR_WEEKS = 52

_ON = {"1", "#", "x", "X"}
_OFF = {"0", ".", " ", "-"}


def compile_text(text: str) -> Grid:
    """
    Render `text` into a pixel grid.

    Each character contributes its 5 glyph columns followed by one blank
    spacing column, including the last one, so the width is always
    6 * len(text). Empty text gives 7 rows of zero width.
    """
    grid: Grid = [[] for _ in range(ROWS)]
    for char in text:
        glyph = lookup(char)
        for row in range(ROWS):
            grid[row].extend(glyph[row])
            grid[row].append(0)
    return grid


def validate_grid(grid: Sequence[Sequence[int]]) -> None:
    """Raise ContractViolation unless `grid` is 7 equal-length rows of 0/1."""
    if len(grid) != ROWS:
        raise ContractViolation(f"Grid must have {ROWS} rows, got {len(grid)}")
    width = len(grid[0])
    for index, row in enumerate(grid):
        if len(row) != width:
            raise ContractViolation(f"Grid is not rectangular: row {index} has {len(row)} columns, expected {width}")
        for value in row:
            # bool is an int subclass; only exact 0/1 ints are accepted.
            if type(value) is not int or value not in (0, 1):
                raise ContractViolation(f"Grid cells must be 0 or 1, got {value!r} in row {index}")


def width_of(grid: Sequence[Sequence[int]]) -> int:
    return len(grid[0]) if grid else 0


def blank_grid(width: int = YEAR_WEEKS) -> Grid:
    """A 7 x `width` all-zero canvas for free-hand drawing."""
    if width < 0:
        raise ContractViolation(f"Grid width must be non-negative, got {width}")
    return [[0] * width for _ in range(ROWS)]


def pad_grid(grid: Sequence[Sequence[int]], width: int = YEAR_WEEKS) -> Grid:
    """
    Right-pad `grid` with zero columns up to `width` (one calendar year by default).

    Returns a new grid; the input is left untouched.
    """
    validate_grid(grid)
    current = width_of(grid)
    if current > width:
        raise ContractViolation(f"Grid is {current} columns wide, which exceeds the {width}-column limit")
    return [list(row) + [0] * (width - current) for row in grid]


def toggle_cell(grid: Sequence[Sequence[int]], row: int, col: int) -> Grid:
    """Return a copy of `grid` with the cell at (row, col) flipped."""
    validate_grid(grid)
    if not (0 <= row < ROWS and 0 <= col < width_of(grid)):
        raise ContractViolation(f"Cell ({row}, {col}) is outside the {ROWS}x{width_of(grid)} grid")
    out = [list(r) for r in grid]
    out[row][col] = 0 if out[row][col] else 1
    return out


def grid_from_rows(rows: Iterable[str]) -> Grid:
    """
    Parse a hand-authored grid written as one string per weekday.

    "1", "#" and "x" mark a lit cell; "0", ".", "-" and space mark a blank one.
    """
    grid: Grid = []
    for index, line in enumerate(rows):
        cells: list[int] = []
        for char in str(line):
            if char in _ON:
                cells.append(1)
            elif char in _OFF:
                cells.append(0)
            else:
                raise ContractViolation(f"Unexpected character {char!r} in grid row {index}")
        grid.append(cells)
    validate_grid(grid)
    return grid
