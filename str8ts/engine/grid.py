"""Grid representation and helper utilities."""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from ..core.constants import CellType, Point
from ..core.exceptions import PuzzleFormatError
from ..core.models import Cell, CellPair, Compartment


class Grid:
    """Square str8ts grid plus the per-line requirement and forbidden sets.

    Cells are addressed by ``(x, y)`` points; ``cells[y][x]`` holds the cell.
    """

    def __init__(
        self,
        cells: Sequence[Sequence[Cell]],
        row_requirements: Optional[Sequence[Iterable[int]]] = None,
        col_requirements: Optional[Sequence[Iterable[int]]] = None,
        row_forbidden: Optional[Sequence[Iterable[int]]] = None,
        col_forbidden: Optional[Sequence[Iterable[int]]] = None,
    ) -> None:
        size = len(cells)
        if size == 0 or any(len(row) != size for row in cells):
            raise PuzzleFormatError("Invalid grid dimensions")
        self.size = size
        self.cells: List[List[Cell]] = [list(row) for row in cells]
        self.row_requirements = self._side_array(row_requirements)
        self.col_requirements = self._side_array(col_requirements)
        self.row_forbidden = self._side_array(row_forbidden)
        self.col_forbidden = self._side_array(col_forbidden)

    def _side_array(self, values: Optional[Sequence[Iterable[int]]]) -> List[Set[int]]:
        if values is None:
            return [set() for _ in range(self.size)]
        if len(values) != self.size:
            raise PuzzleFormatError("Invalid grid dimensions")
        return [set(v) for v in values]

    # ------------------------------------------------------------------
    # Basic access
    # ------------------------------------------------------------------
    def clone(self) -> Grid:
        return Grid(
            self.cells,
            self.row_requirements,
            self.col_requirements,
            self.row_forbidden,
            self.col_forbidden,
        )

    def all_numbers(self) -> FrozenSet[int]:
        return frozenset(range(1, self.size + 1))

    def cell(self, pos: Point) -> Cell:
        x, y = pos
        return self.cells[y][x]

    def set_cell(self, pos: Point, cell: Cell) -> None:
        x, y = pos
        self.cells[y][x] = cell

    def row(self, y: int) -> List[CellPair]:
        return [((x, y), cell) for x, cell in enumerate(self.cells[y])]

    def col(self, x: int) -> List[CellPair]:
        return [((x, y), row[x]) for y, row in enumerate(self.cells)]

    def line(self, vertical: bool, pos: Point) -> List[CellPair]:
        return self.col(pos[0]) if vertical else self.row(pos[1])

    def rows(self) -> List[List[CellPair]]:
        return [self.row(y) for y in range(self.size)]

    def cols(self) -> List[List[CellPair]]:
        return [self.col(x) for x in range(self.size)]

    def lines(self) -> List[Tuple[bool, int, List[CellPair]]]:
        """Every row, then every column, as ``(vertical, index, cells)``."""

        res = [(False, y, row) for y, row in enumerate(self.rows())]
        res.extend((True, x, col) for x, col in enumerate(self.cols()))
        return res

    def iter_cells(self) -> List[CellPair]:
        return [pair for row in self.rows() for pair in row]

    def indeterminates(self) -> List[Tuple[Point, FrozenSet[int]]]:
        """Unresolved cells in row-major order."""

        return [(pos, cell.candidates) for pos, cell in self.iter_cells() if cell.is_indeterminate()]

    def is_solved(self) -> bool:
        return not any(cell.is_indeterminate() for row in self.cells for cell in row)

    # ------------------------------------------------------------------
    # Compartments
    # ------------------------------------------------------------------
    @staticmethod
    def line_to_compartments(vertical: bool, line: Iterable[CellPair]) -> List[Compartment]:
        compartments: List[Compartment] = []
        current: List[CellPair] = []
        for pos, cell in line:
            if cell.is_compartment_cell():
                current.append((pos, cell))
            elif current:
                compartments.append(Compartment(current, vertical))
                current = []
        if current:
            compartments.append(Compartment(current, vertical))
        return compartments

    def row_compartments(self) -> List[List[Compartment]]:
        return [self.line_to_compartments(False, row) for row in self.rows()]

    def col_compartments(self) -> List[List[Compartment]]:
        return [self.line_to_compartments(True, col) for col in self.cols()]

    def compartments(self) -> List[Compartment]:
        """All row compartments followed by all column compartments."""

        res = [c for line in self.row_compartments() for c in line]
        res.extend(c for line in self.col_compartments() for c in line)
        return res

    def compartments_containing(self, pos: Point) -> Tuple[Compartment, Compartment]:
        row = next(c for c in self.line_to_compartments(False, self.row(pos[1])) if c.contains_pos(pos))
        col = next(c for c in self.line_to_compartments(True, self.col(pos[0])) if c.contains_pos(pos))
        return row, col

    # ------------------------------------------------------------------
    # Candidate elimination
    # ------------------------------------------------------------------
    def set_impossible(self, pos: Point, number: int) -> bool:
        cell = self.cell(pos)
        if cell.is_indeterminate() and number in cell.candidates:
            self.set_cell(pos, Cell.indeterminate(cell.candidates - {number}))
            return True
        return False

    def restrict(self, pos: Point, allowed: Iterable[int]) -> bool:
        """Drop every candidate of ``pos`` outside ``allowed``."""

        cell = self.cell(pos)
        if not cell.is_indeterminate():
            return False
        narrowed = cell.candidates & frozenset(allowed)
        if narrowed == cell.candidates:
            return False
        self.set_cell(pos, Cell.indeterminate(narrowed))
        return True

    def set_impossible_in(
        self,
        sample_pos: Point,
        vertical: bool,
        number: int,
        except_in: Iterable[Point] = (),
    ) -> bool:
        skip = set(except_in)
        changes = False
        for pos, _ in self.line(vertical, sample_pos):
            if pos not in skip:
                changes |= self.set_impossible(pos, number)
        return changes

    # ------------------------------------------------------------------
    # Line requirements
    # ------------------------------------------------------------------
    def requirements(self, vertical: bool, pos: Point) -> Set[int]:
        return self.col_requirements[pos[0]] if vertical else self.row_requirements[pos[1]]

    def forbidden(self, vertical: bool, pos: Point) -> Set[int]:
        return self.col_forbidden[pos[0]] if vertical else self.row_forbidden[pos[1]]

    def line_requirements(self, vertical: bool, index: int) -> Set[int]:
        return self.col_requirements[index] if vertical else self.row_requirements[index]

    def line_forbidden(self, vertical: bool, index: int) -> Set[int]:
        return self.col_forbidden[index] if vertical else self.row_forbidden[index]

    def side_arrays(self) -> Tuple[List[Set[int]], ...]:
        return (self.row_requirements, self.col_requirements, self.row_forbidden, self.col_forbidden)

    def has_requirements(self) -> bool:
        return any(values for side in self.side_arrays() for values in side)

    # ------------------------------------------------------------------
    # Comparison and serialisation
    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.cells == other.cells and self.side_arrays() == other.side_arrays()

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return "\n".join("".join(_cell_char(cell) for cell in row) for row in self.cells)

    def __repr__(self) -> str:
        return f"Grid(size={self.size})\n{self}"

    def to_jsonable(self) -> Dict[str, Any]:
        def sets(values: List[Set[int]]) -> List[List[int]]:
            return [sorted(v) for v in values]

        return {
            "cells": [[cell.to_jsonable() for cell in row] for row in self.cells],
            "x": self.size,
            "y": self.size,
            "row_requirements": sets(self.row_requirements),
            "col_requirements": sets(self.col_requirements),
            "row_forbidden": sets(self.row_forbidden),
            "col_forbidden": sets(self.col_forbidden),
        }

    @classmethod
    def from_jsonable(cls, raw: Dict[str, Any]) -> Grid:
        return cls(
            [[Cell.from_jsonable(cell) for cell in row] for row in raw["cells"]],
            raw.get("row_requirements"),
            raw.get("col_requirements"),
            raw.get("row_forbidden"),
            raw.get("col_forbidden"),
        )


def _cell_char(cell: Cell) -> str:
    if cell.type in (CellType.REQUIREMENT, CellType.SOLUTION):
        return str(cell.value)
    if cell.type == CellType.BLOCKER:
        return chr(ord("a") + cell.value - 1)
    if cell.type == CellType.INDETERMINATE:
        return "."
    return "#"
