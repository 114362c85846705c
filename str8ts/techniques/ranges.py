"""Compartment range reasoning.

A compartment of length ``L`` must hold a straight of ``L`` consecutive
numbers.  The committed numbers and candidate extremes bound where that
straight can sit, which both prunes candidates and tells which numbers the
compartment is certain to contain.
"""

from __future__ import annotations

from typing import FrozenSet, List, Optional, Tuple

from ..core.constants import SolveKind
from ..core.models import CellPair, Compartment, SolveResult
from ..engine.grid import Grid


def get_compartment_range(
    size: int, compartment: Compartment, must_contain: Optional[int] = None
) -> Optional[Tuple[int, int]]:
    """Smallest and largest number the compartment's straight can reach."""

    length = len(compartment)
    ranges: List[Tuple[int, int]] = []
    for _, cell in compartment.cells:
        value = cell.to_req_or_sol()
        if value is not None:
            ranges.append((value, value))
        elif cell.candidates:
            ranges.append((min(cell.candidates), max(cell.candidates)))
    if must_contain is not None:
        ranges.append((must_contain, must_contain))
    if not ranges:
        return None

    absolute_smallest = min(low for low, _ in ranges)
    absolute_biggest = max(high for _, high in ranges)
    biggest_left = max(low for low, _ in ranges)
    smallest_right = min(high for _, high in ranges)

    low = max(biggest_left - (length - 1), 1)
    high = min(smallest_right + length - 1, size)
    return max(low, absolute_smallest), min(high, absolute_biggest)


def required_in_compartment_by_range(size: int, compartment: Compartment) -> FrozenSet[int]:
    """Numbers every placement of the compartment's straight must include."""

    free_numbers = compartment.combined_unresolved()
    if len(compartment.unresolved()) == len(free_numbers):
        return free_numbers

    bounds = get_compartment_range(size, compartment)
    if bounds is None:
        return frozenset()
    low, high = bounds
    length = len(compartment)
    return frozenset(range(high + 1 - length, low - 1 + length + 1))


def required_by_range(size: int, line: List[CellPair]) -> FrozenSet[int]:
    required: FrozenSet[int] = frozenset()
    for compartment in Grid.line_to_compartments(False, line):
        required = required | required_in_compartment_by_range(size, compartment)
    return required


def _refresh(grid: Grid, compartment: Compartment) -> Compartment:
    return Compartment([(pos, grid.cell(pos)) for pos, _ in compartment.cells], compartment.vertical)


def _clamp(grid: Grid, compartment: Compartment, bounds: Optional[Tuple[int, int]]) -> bool:
    if bounds is None:
        return False
    low, high = bounds
    changes = False
    for pos, _ in compartment.cells:
        changes |= grid.restrict(pos, range(low, high + 1))
    return changes


def definite_min_max(grid: Grid) -> Optional[SolveResult]:
    """Drop candidates that no placement of the compartment straight can reach."""

    changes = False
    for compartment in grid.compartments():
        compartment = _refresh(grid, compartment)
        changes |= _clamp(grid, compartment, get_compartment_range(grid.size, compartment))

    if grid.has_requirements():
        for compartment in grid.compartments():
            sample = compartment.sample_pos()
            line = grid.line(compartment.vertical, sample)
            for number in sorted(grid.requirements(compartment.vertical, sample)):
                compartment = _refresh(grid, compartment)
                if not compartment.contains(number):
                    continue
                holders = [
                    other
                    for other in Grid.line_to_compartments(compartment.vertical, line)
                    if _refresh(grid, other).contains(number)
                ]
                if len(holders) != 1:
                    continue
                changes |= _clamp(
                    grid, compartment, get_compartment_range(grid.size, compartment, number)
                )

    return SolveResult.of(SolveKind.DEFINITE_MIN_MAX) if changes else None


def required_range(grid: Grid) -> Optional[SolveResult]:
    """Numbers certain to sit in one compartment cannot appear elsewhere in its line."""

    changes = False
    for compartment in grid.compartments():
        compartment = _refresh(grid, compartment)
        positions = compartment.positions()
        for number in sorted(required_in_compartment_by_range(grid.size, compartment)):
            changes |= grid.set_impossible_in(
                compartment.sample_pos(), compartment.vertical, number, positions
            )

    return SolveResult.of(SolveKind.REQUIRED_RANGE) if changes else None
