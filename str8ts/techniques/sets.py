"""Naked and hidden sets along whole rows and columns."""

from __future__ import annotations

from itertools import combinations
from typing import FrozenSet, List, Optional, Set, Tuple

from ..core.constants import Point
from ..core.models import SolveResult, SolveType
from ..engine.grid import Grid
from .ranges import required_by_range


def _open_cells(grid: Grid, vertical: bool, index: int) -> List[Tuple[Point, FrozenSet[int]]]:
    line = grid.col(index) if vertical else grid.row(index)
    return [(pos, grid.cell(pos).candidates) for pos, _ in line if grid.cell(pos).is_indeterminate()]


def _naked_sets(grid: Grid, n: int) -> bool:
    changes = False
    for vertical, index, _ in grid.lines():
        cells = _open_cells(grid, vertical, index)
        used: Set[int] = set()
        for _, candidates in cells:
            used |= candidates
        if len(used) <= 2 or len(cells) <= 2:
            continue

        for combo in combinations(sorted(used), n):
            try_set = frozenset(combo)
            applies_to = [pos for pos, candidates in _open_cells(grid, vertical, index) if candidates <= try_set]
            if len(applies_to) != n:
                continue
            local_changes = False
            for number in sorted(try_set):
                local_changes |= grid.set_impossible_in(applies_to[0], vertical, number, applies_to)
            if grid.has_requirements():
                required = grid.line_requirements(vertical, index)
                if not try_set <= required:
                    required |= try_set
                    changes = True
            changes |= local_changes
            if local_changes:
                break
    return changes


def _hidden_sets(grid: Grid, n: int) -> bool:
    """Required numbers that only fit in as many cells as there are numbers."""

    changes = False
    for vertical, index, line in grid.lines():
        placed = {cell.to_req_or_sol() for _, cell in line if cell.to_req_or_sol() is not None}
        required = (set(grid.line_requirements(vertical, index)) | required_by_range(grid.size, line)) - placed
        if len(required) < n:
            continue

        for combo in combinations(sorted(required), n):
            numbers = frozenset(combo)
            cells = _open_cells(grid, vertical, index)
            holders = [pos for pos, candidates in cells if candidates & numbers]
            if len(holders) != n:
                continue
            for pos in holders:
                changes |= grid.restrict(pos, numbers)
    return changes


def sets(grid: Grid) -> Optional[SolveResult]:
    """Naked then hidden sets, smallest set size first."""

    for n in range(2, grid.size):
        if _naked_sets(grid, n) | _hidden_sets(grid, n):
            return SolveResult(SolveType.sets(n))
    return None
