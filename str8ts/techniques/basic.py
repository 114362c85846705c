"""Cheap bookkeeping techniques that every solve leans on."""

from __future__ import annotations

from typing import Optional, Set

from ..core.constants import CellType, SolveKind
from ..core.models import Cell, SolveResult
from ..engine.grid import Grid
from .ranges import required_in_compartment_by_range


def trivial(grid: Grid) -> bool:
    """Commit single-candidate cells and keep the side arrays current.

    This runs after every technique, so it reports progress but never
    produces a step of its own.
    """

    changes = False
    for pos, candidates in grid.indeterminates():
        if len(candidates) == 1:
            grid.set_cell(pos, Cell.solution(next(iter(candidates))))
            changes = True

    if grid.has_requirements():
        for vertical, index, line in grid.lines():
            required = grid.line_requirements(vertical, index)
            forbidden = grid.line_forbidden(vertical, index)
            missing: Set[int] = set(grid.all_numbers())
            for _, cell in line:
                if cell.is_indeterminate():
                    missing -= cell.candidates
                elif cell.type in (CellType.REQUIREMENT, CellType.SOLUTION):
                    missing.discard(cell.value)
                    if cell.value not in required:
                        required.add(cell.value)
                        changes = True
                elif cell.type == CellType.BLOCKER and cell.value not in forbidden:
                    forbidden.add(cell.value)
                    changes = True
            forbidden |= missing

    return changes


def update_impossibles(grid: Grid) -> Optional[SolveResult]:
    """Remove committed and forbidden numbers from the rest of their lines."""

    changes = False
    for vertical, index, line in grid.lines():
        taken = set(grid.line_forbidden(vertical, index))
        taken.update(cell.to_determinate() for _, cell in line if cell.to_determinate() is not None)
        for pos, cell in line:
            if cell.is_indeterminate():
                changes |= grid.restrict(pos, cell.candidates - taken)

    return SolveResult.of(SolveKind.UPDATE_IMPOSSIBLES) if changes else None


def singles(grid: Grid) -> Optional[SolveResult]:
    """A number a compartment must hold, with only one place left for it."""

    changes = False
    for compartment in grid.compartments():
        for number in sorted(required_in_compartment_by_range(grid.size, compartment)):
            holders = [
                pos
                for pos, _ in compartment.cells
                if grid.cell(pos).is_indeterminate() and number in grid.cell(pos).candidates
            ]
            placed = any(grid.cell(pos).to_req_or_sol() == number for pos in compartment.positions())
            if len(holders) == 1 and not placed:
                grid.set_cell(holders[0], Cell.solution(number))
                changes = True

    return SolveResult.of(SolveKind.SINGLES) if changes else None


def stranded(grid: Grid) -> Optional[SolveResult]:
    """Drop candidates whose run of reachable neighbours is shorter than the compartment."""

    changes = False
    for compartment in grid.compartments():
        length = len(compartment)
        for pos, _ in compartment.cells:
            cell = grid.cell(pos)
            if not cell.is_indeterminate():
                continue
            others: Set[int] = set()
            for other, _ in compartment.cells:
                if other != pos:
                    others |= grid.cell(other).to_possibles()

            stuck = set()
            for start in cell.candidates:
                low = high = start
                while low - 1 in others:
                    low -= 1
                while high + 1 in others:
                    high += 1
                if high - low + 1 < length:
                    stuck.add(start)
            if stuck:
                grid.set_cell(pos, Cell.indeterminate(cell.candidates - stuck))
                changes = True

    return SolveResult.of(SolveKind.STRANDED) if changes else None
