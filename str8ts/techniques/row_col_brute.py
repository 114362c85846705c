"""Exhaustive arrangement of a single row or column."""

from __future__ import annotations

from typing import List, Optional, Set

from ..core.constants import SolveKind
from ..core.models import Cell, CellPair, Compartment, SolveResult
from ..engine.grid import Grid
from ..engine.validator import compartment_valid
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

# Lines with more arrangements than this are skipped rather than enumerated.
MAX_ARRANGEMENTS = 5000

Arrangement = List[List[CellPair]]


class _TooManyArrangements(Exception):
    pass


def _arrangement_valid(compartments: Arrangement, vertical: bool, requirements: Set[int]) -> bool:
    seen: Set[int] = set()
    for cells in compartments:
        for _, cell in cells:
            value = cell.to_determinate()
            if value is None:
                continue
            if value in seen:
                return False
            seen.add(value)
    if not requirements <= seen:
        return False
    return all(compartment_valid(Compartment(cells, vertical)) for cells in compartments)


def line_arrangements(compartments: Arrangement, vertical: bool, requirements: Set[int], limit: int = MAX_ARRANGEMENTS) -> List[Arrangement]:
    """Every way to fill the open cells of one line.

    Raises ``_TooManyArrangements`` once more than ``limit`` partial or
    complete fills have been explored.
    """

    found: List[Arrangement] = []
    explored = 0

    def walk(current: Arrangement) -> None:
        nonlocal explored
        explored += 1
        if explored > limit:
            raise _TooManyArrangements()
        for index, cells in enumerate(current):
            for cell_index, (pos, cell) in enumerate(cells):
                if not cell.is_indeterminate():
                    continue
                for number in sorted(cell.candidates):
                    nxt = [
                        [
                            (p, Cell.indeterminate(c.candidates - {number}) if c.is_indeterminate() else c)
                            for p, c in part
                        ]
                        for part in current
                    ]
                    nxt[index][cell_index] = (pos, Cell.solution(number))
                    if compartment_valid(Compartment(nxt[index], vertical)):
                        walk(nxt)
                return
        if _arrangement_valid(current, vertical, requirements):
            found.append(current)

    walk(compartments)
    return found


def _contains(arrangement: Arrangement, number: int) -> bool:
    return any(cell.to_req_or_sol() == number for cells in arrangement for _, cell in cells)


def row_col_brute(grid: Grid) -> Optional[SolveResult]:
    """Keep only the numbers some full arrangement of the line actually uses."""

    changes = False
    for vertical, index, line in grid.lines():
        compartments = Grid.line_to_compartments(vertical, line)
        if len(compartments) <= 1:
            continue
        if any(cell.is_indeterminate() and not cell.candidates for _, cell in line):
            continue
        requirements = set(grid.line_requirements(vertical, index))
        try:
            arrangements = line_arrangements([c.cells for c in compartments], vertical, requirements)
        except _TooManyArrangements:
            LOGGER.debug("Skipping %s %d: too many arrangements", "column" if vertical else "row", index)
            continue

        required = grid.line_requirements(vertical, index)
        forbidden = grid.line_forbidden(vertical, index)
        for number in range(1, grid.size + 1):
            if all(_contains(a, number) for a in arrangements) and number not in required:
                required.add(number)
                changes = True
            if not any(_contains(a, number) for a in arrangements) and number not in forbidden:
                forbidden.add(number)
                changes = True

        if not arrangements:
            continue
        seen = {pos: set() for pos, _ in line}
        for arrangement in arrangements:
            for cells in arrangement:
                for pos, cell in cells:
                    if cell.to_req_or_sol() is not None:
                        seen[pos].add(cell.value)
        for pos, cell in line:
            if cell.is_indeterminate():
                changes |= grid.restrict(pos, seen[pos])

    return SolveResult.of(SolveKind.ROW_COL_BRUTE) if changes else None
