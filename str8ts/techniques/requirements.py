"""Per-line required/forbidden bookkeeping and the Setti count argument."""

from __future__ import annotations

from typing import FrozenSet, List, Optional, Set

from ..core.constants import CellType, SolveKind
from ..core.models import CellPair, SolveResult, SolveType
from ..engine.grid import Grid
from .ranges import required_by_range


def required_numbers(size: int, line: List[CellPair]) -> FrozenSet[int]:
    placed = {cell.value for _, cell in line if cell.to_req_or_sol() is not None}
    return frozenset(placed) | required_by_range(size, line)


def forbidden_numbers(line: List[CellPair]) -> FrozenSet[int]:
    return frozenset(cell.value for _, cell in line if cell.type == CellType.BLOCKER)


def update_required_and_forbidden(grid: Grid) -> Optional[SolveResult]:
    """Record every number a line must or must not contain."""

    changes = False
    for vertical, index, line in grid.lines():
        required = grid.line_requirements(vertical, index)
        forbidden = grid.line_forbidden(vertical, index)
        new_required = required_numbers(grid.size, line) - required
        new_forbidden = forbidden_numbers(line) - forbidden
        if new_required or new_forbidden:
            required |= new_required
            forbidden |= new_forbidden
            changes = True

    return SolveResult.of(SolveKind.REQUIRED_AND_FORBIDDEN) if changes else None


def _settle(required: List[Set[int]], forbidden: List[Set[int]], number: int, count: int) -> bool:
    """Fill the undecided lines once ``count`` pins down where ``number`` goes."""

    size = len(required)
    low = sum(1 for values in required if number in values)
    high = size - sum(1 for values in forbidden if number in values)
    changes = False
    if high == count:
        for values, blocked in zip(required, forbidden):
            if number not in blocked and number not in values:
                values.add(number)
                changes = True
    elif low == count:
        for values, blocked in zip(required, forbidden):
            if number not in values and number not in blocked:
                blocked.add(number)
                changes = True
    return changes


def setti(grid: Grid) -> Optional[SolveResult]:
    """Every number appears in as many rows as columns.

    Counting the rows that must and may hold a number bounds the count from
    both sides; the column counts do the same.  When the two intervals meet in
    a single value, the side that reaches that bound is fully decided.
    """

    changed: Set[int] = set()
    for number in range(1, grid.size + 1):
        row_low = sum(1 for values in grid.row_requirements if number in values)
        row_high = grid.size - sum(1 for values in grid.row_forbidden if number in values)
        col_low = sum(1 for values in grid.col_requirements if number in values)
        col_high = grid.size - sum(1 for values in grid.col_forbidden if number in values)

        low, high = max(row_low, col_low), min(row_high, col_high)
        if low != high:
            continue
        if _settle(grid.row_requirements, grid.row_forbidden, number, low):
            changed.add(number)
        if _settle(grid.col_requirements, grid.col_forbidden, number, low):
            changed.add(number)

    return SolveResult(SolveType.setti(changed)) if changed else None
