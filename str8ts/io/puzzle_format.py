"""Textual puzzle formats.

Three inputs are understood:

* the multi-line grid, one string per row (``1-9`` givens, ``a-i`` numbered
  blockers, ``.`` open cells, ``#`` black cells);
* the digit one-liner used by str8ts.com links (``bd=`` followed by the
  numbers half and the black-cell flag half);
* the typed one-liner ``T<size>B<cells>`` with two base-36 characters per
  cell, optionally followed by the four side arrays after a ``;``.

``encode`` always writes the typed one-liner, which is lossless.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, List, Set, Union

from ..core.constants import BASE36_DIGITS, CellType
from ..core.exceptions import PuzzleFormatError
from ..core.models import Cell
from ..engine.grid import Grid
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

_ONE_LINE_TOKEN = re.compile(r"^[0-9A-Za-z;,]*")
_UNSUPPORTED_TYPES = {
    "U": "Str8ts X puzzles not supported",
    "B": "Str8ts B puzzles not supported",
    "X": "Str8ts BX puzzles not supported",
}


def parse(lines: Union[str, Iterable[str]]) -> Grid:
    """Parse puzzle text into a :class:`Grid`.

    Raises :class:`PuzzleFormatError` with a human-readable message when the
    input is malformed; no partially built grid is ever returned.
    """

    if isinstance(lines, str):
        lines = [lines]
    rows = [row.strip() for row in "\n".join(lines).strip().splitlines()]
    if not rows or not rows[0]:
        raise PuzzleFormatError("Invalid grid dimensions")
    # A lone character can only be a 1x1 grid; one-liners always hold pairs.
    if len(rows) > 1 or len(rows[0]) == 1:
        return _parse_grid(rows)

    token = _ONE_LINE_TOKEN.match(rows[0].split("bd=")[-1]).group(0)
    body, _, side_arrays = token.partition(";")
    if body[:1] in ("T", "U", "B", "X"):
        grid = _parse_typed(body)
    else:
        grid = _parse_digits(body)
    if side_arrays:
        _parse_side_arrays(grid, side_arrays)
    LOGGER.debug("Parsed %sx%s one-line puzzle", grid.size, grid.size)
    return grid


def _parse_grid(rows: List[str]) -> Grid:
    size = len(rows)
    cells = []
    for row in rows:
        parsed = []
        for char in row:
            if "1" <= char <= "9":
                parsed.append(Cell.requirement(int(char)))
            elif "a" <= char <= "i":
                parsed.append(Cell.blocker(ord(char) - ord("a") + 1))
            elif char == ".":
                parsed.append(Cell.indeterminate(range(1, size + 1)))
            elif char == "#":
                parsed.append(Cell.black())
            else:
                raise PuzzleFormatError(f"Unexpected character: {char}")
        cells.append(parsed)
    return Grid(cells)


def _parse_digits(token: str) -> Grid:
    size = math.isqrt(len(token) // 2)
    area = size * size
    if size == 0 or 2 * area != len(token):
        raise PuzzleFormatError(
            "Did not recognize puzzle format: Tried to detect as oneline but dimensions did not match"
        )
    cells = []
    for y in range(size):
        row = []
        for x in range(size):
            number, flag = token[y * size + x], token[y * size + x + area]
            if number == "0" and flag == "0":
                row.append(Cell.indeterminate(range(1, size + 1)))
            elif number == "0" and flag == "1":
                row.append(Cell.black())
            elif "1" <= number <= "9" and flag == "0":
                row.append(Cell.requirement(int(number)))
            elif "1" <= number <= "9" and flag == "1":
                row.append(Cell.blocker(int(number)))
            else:
                raise PuzzleFormatError(f"Unexpected character: {number}")
        cells.append(row)
    return Grid(cells)


def _base36(char: str) -> int:
    value = BASE36_DIGITS.find(char.upper())
    if value < 0:
        raise PuzzleFormatError(f"Unexpected character: {char}")
    return value


def _parse_typed(token: str) -> Grid:
    if len(token) < 3:
        raise PuzzleFormatError("Could not parse puzzle")
    kind = token[0]
    if kind in _UNSUPPORTED_TYPES:
        raise PuzzleFormatError(_UNSUPPORTED_TYPES[kind])
    if kind != "T":
        raise PuzzleFormatError(f"Unknown puzzle type '{kind}'")
    if token[1].upper() not in BASE36_DIGITS:
        raise PuzzleFormatError(f"Unknown puzzle size '{token[1]}'")
    size = _base36(token[1])
    if token[2] != "B":
        raise PuzzleFormatError(f"Unknown puzzle version '{token[2]}'")
    expected = 2 * size * size + 3
    if size == 0 or len(token) != expected:
        raise PuzzleFormatError(
            f"Invalid puzzle string length; expected {expected} but got {len(token)}"
        )

    cells = []
    for y in range(size):
        row = []
        for x in range(size):
            offset = 2 * (y * size + x) + 3
            code = 36 * _base36(token[offset]) + _base36(token[offset + 1])
            row.append(_decode_cell(code, size))
        cells.append(row)
    return Grid(cells)


def _decode_cell(code: int, size: int) -> Cell:
    if code < 10:
        if code == 0:
            raise PuzzleFormatError("Unexpected cell code 00")
        return Cell.requirement(code)
    if code == 10:
        return Cell.black()
    if code < 20:
        return Cell.blocker(code - 10)
    if code < 29:
        return Cell.solution(code - 20)
    mask = (code - 29) << 1
    return Cell.indeterminate(n for n in range(1, size + 1) if mask & (1 << n))


def _parse_side_arrays(grid: Grid, text: str) -> None:
    groups = text.split(";")
    if len(groups) != 4:
        raise PuzzleFormatError("Expected four side arrays after ';'")
    for target, group in zip(grid.side_arrays(), groups):
        entries = group.split(",")
        if len(entries) != grid.size:
            raise PuzzleFormatError(
                f"Invalid side array length; expected {grid.size} but got {len(entries)}"
            )
        for index, entry in enumerate(entries):
            numbers = {_base36(char) for char in entry}
            for number in numbers:
                if not 1 <= number <= grid.size:
                    raise PuzzleFormatError(f"Side array number {number} out of range 1-{grid.size}")
            target[index] = numbers


# ----------------------------------------------------------------------
# Encoding
# ----------------------------------------------------------------------
def _encode_code(code: int) -> str:
    return (BASE36_DIGITS[code // 36] + BASE36_DIGITS[code % 36]).lower()


def _encode_cell(cell: Cell) -> str:
    if cell.type == CellType.REQUIREMENT:
        return _encode_code(cell.value)
    if cell.type == CellType.SOLUTION:
        return _encode_code(cell.value + 20)
    if cell.type == CellType.BLOCKER:
        return _encode_code(cell.value + 10)
    if cell.type == CellType.INDETERMINATE:
        mask = sum(1 << n for n in cell.candidates)
        return _encode_code((mask >> 1) + 29)
    return _encode_code(10)


def _encode_set(values: Set[int]) -> str:
    return "".join(BASE36_DIGITS[n] for n in sorted(values)).lower()


def encode(grid: Grid) -> str:
    """Write ``grid`` in the typed one-line format accepted by :func:`parse`."""

    # Requirement codes share the 0..9 range with the black cell code.
    if grid.size > 9:
        raise PuzzleFormatError(f"Cannot encode a {grid.size}x{grid.size} grid; the format stops at 9x9")
    text = "T" + BASE36_DIGITS[grid.size] + "B"
    text += "".join(_encode_cell(cell) for row in grid.cells for cell in row)
    if grid.has_requirements():
        text += ";" + ";".join(
            ",".join(_encode_set(values) for values in side) for side in grid.side_arrays()
        )
    return text
