"""Deductions that rely on the puzzle having exactly one solution.

Each sub-case spots a configuration where one choice could always be swapped
for another without disturbing the rest of the grid.  A well-formed puzzle
cannot allow that, so the swappable choice is eliminated.
"""

from __future__ import annotations

from typing import FrozenSet, List, Optional, Tuple

from ..core.constants import Point, UrKind
from ..core.exceptions import ValidationError
from ..core.models import Cell, Compartment, SolveResult, SolveType, UrResult, ValidationResult
from ..engine.grid import Grid
from ..engine.validator import GridValidator
from ..utils.logger import get_logger
from .basic import trivial, update_impossibles
from .ranges import definite_min_max, get_compartment_range


LOGGER = get_logger(__name__)

CompartmentInfo = Tuple[Compartment, FrozenSet[int], List[Point]]


# ----------------------------------------------------------------------
# Single cell cases
# ----------------------------------------------------------------------
def cross_compartment_unique(grid: Grid, pos: Point, candidates: FrozenSet[int]) -> Optional[UrResult]:
    """The last open cell of both its compartments.

    Numbers no other cell of its row or column can take are interchangeable
    here, so exactly one may remain: the cell must be it, and two or more mean
    the puzzle is ambiguous.
    """

    row, col = grid.compartments_containing(pos)
    if len(row.unresolved()) != 1 or len(col.unresolved()) != 1:
        return None

    free = set(candidates)
    for other, cell in grid.row(pos[1]) + grid.col(pos[0]):
        if other != pos:
            free -= cell.to_possibles()
    if len(free) > 1:
        raise ValidationError(ValidationResult.ambiguous([pos]))
    if free:
        (number,) = free
        grid.set_cell(pos, Cell.solution(number))
        return UrResult(UrKind.SINGLE_UNIQUE, number, pos)
    return None


def would_become_free(grid: Grid, pos: Point, candidates: FrozenSet[int]) -> Optional[UrResult]:
    """Two open cells sharing one three-number set that nothing else touches.

    With the middle number removed from the partner, the partner can no
    longer mirror this cell's choice between the outer numbers.
    """

    if len(candidates) != 3:
        return None
    for compartment in grid.compartments_containing(pos):
        unresolved = compartment.unresolved()
        if len(unresolved) != 2:
            continue
        partner, partner_set = next((p, c) for p, c in unresolved if p != pos)
        if partner_set != candidates:
            continue
        for other, cell in grid.row(pos[1]) + grid.col(pos[0]):
            if other in (pos, partner):
                continue
            if candidates & cell.to_unresolved():
                return None
        middle = sorted(candidates)[1]
        grid.set_impossible(partner, middle)
        return UrResult(UrKind.SINGLE_CELL_WOULD_BECOME_FREE, middle, partner)
    return None


def _closed_set(compartment: Compartment) -> bool:
    return len(compartment.unresolved()) == len(compartment.combined_unresolved())


def intra_compartment_unique(grid: Grid, pos: Point, candidates: FrozenSet[int]) -> Optional[UrResult]:
    """A cell holding both ends of a range one wider than its compartments.

    If only one end is claimed by the rest of the row and column, taking the
    other end could always be swapped out, so the claimed end's opposite goes.
    """

    row, col = grid.compartments_containing(pos)
    row_range = get_compartment_range(grid.size, row)
    col_range = get_compartment_range(grid.size, col)
    if row_range is None or row_range != col_range:
        return None
    low, high = row_range
    width = high - low + 1
    row_len, col_len = len(row), len(col)
    if not (
        (row_len + 1 == width or col_len + 1 == width)
        and row_len in (width, width - 1)
        and col_len in (width, width - 1)
        and low in candidates
        and high in candidates
    ):
        return None
    if _closed_set(row) or _closed_set(col):
        return None

    free = set(candidates)
    for other, cell in grid.row(pos[1]):
        if not row.contains_pos(other):
            free -= cell.to_possibles()
    for other, cell in grid.col(pos[0]):
        if not col.contains_pos(other):
            free -= cell.to_possibles()

    if low in free:
        grid.set_impossible(pos, high)
        return UrResult(UrKind.INTRA_COMPARTMENT_UNIQUE, high, pos)
    if high in free:
        grid.set_impossible(pos, low)
        return UrResult(UrKind.INTRA_COMPARTMENT_UNIQUE, low, pos)
    return None


# ----------------------------------------------------------------------
# Compartment pair cases
# ----------------------------------------------------------------------
def _open_positions(compartment: Compartment) -> List[Point]:
    return [pos for pos, _ in compartment.unresolved()]


def compartment_pairs(grid: Grid) -> List[Tuple[CompartmentInfo, CompartmentInfo]]:
    """Parallel compartments with two open cells each, lined up cell for cell."""

    pairs = []
    compartments = grid.compartments()
    for compartment in compartments:
        vertical = compartment.vertical
        top_left = compartment.sample_pos()
        base_set = compartment.combined_unresolved()
        if len(base_set) not in (2, 3):
            continue
        positions = _open_positions(compartment)
        if len(positions) != 2:
            continue

        for other in compartments:
            if other.vertical != vertical:
                continue
            lane = 0 if vertical else 1
            if other.sample_pos()[lane] <= top_left[lane]:
                continue
            other_positions = _open_positions(other)
            if len(other_positions) != len(positions):
                continue
            cross = 1 - lane
            if not all(any(p[cross] == q[cross] for q in other_positions) for p in positions):
                continue
            pairs.append(
                (
                    (compartment, base_set, positions),
                    (other, other.combined_unresolved(), other_positions),
                )
            )
    return pairs


def _union(grid: Grid, a: Point, b: Point) -> FrozenSet[int]:
    return grid.cell(a).to_unresolved() | grid.cell(b).to_unresolved()


def _pair_set(grid: Grid, a: Point, b: Point) -> bool:
    first, second = grid.cell(a).to_unresolved(), grid.cell(b).to_unresolved()
    return len(first) == 2 and first == second


def two_compartments_would_have_closed_set(grid: Grid) -> Optional[UrResult]:
    """Stop four cells in two compartments from collapsing into swappable pairs."""

    for (compartment, base_set, positions), (_, other_set, other_positions) in compartment_pairs(grid):
        if len(base_set | other_set) != 3 or (len(base_set) == 2 and len(other_set) == 2):
            continue
        vertical = compartment.vertical
        coord = 1 if vertical else 0
        if [p[coord] for p in positions] != [p[coord] for p in other_positions]:
            continue
        cross_1 = _union(grid, positions[0], other_positions[0])
        cross_2 = _union(grid, positions[1], other_positions[1])
        if base_set == other_set == cross_1 == cross_2:
            continue

        checks = [
            (positions[0], positions[1], other_positions[0], vertical, other_positions),
            (other_positions[0], other_positions[1], positions[0], vertical, positions),
            (positions[0], other_positions[0], positions[1], not vertical, [positions[1], other_positions[1]]),
            (positions[1], other_positions[1], positions[0], not vertical, [positions[0], other_positions[0]]),
        ]
        if not any(_pair_set(grid, a, b) for a, b, *_ in checks):
            continue

        difference = sorted(base_set ^ other_set) or sorted(cross_1 ^ cross_2)
        impossible = difference[0]
        changes = False
        for a, b, sample, line_vertical, keep in checks:
            if changes:
                break
            if _pair_set(grid, a, b):
                changes = grid.set_impossible_in(sample, line_vertical, impossible, keep)
        if changes:
            return UrResult(UrKind.CLOSED_SET_COMPARTMENT, impossible, cells=tuple(positions + other_positions))
    return None


def two_compartment_setti(grid: Grid) -> Optional[UrResult]:
    """Two identical three-number compartments must split an end number between their lines."""

    for (compartment, base_set, positions), (other, other_set, other_positions) in compartment_pairs(grid):
        if len(base_set | other_set) != 3:
            continue
        cross_1 = _union(grid, positions[0], other_positions[0])
        cross_2 = _union(grid, positions[1], other_positions[1])
        if not base_set == other_set == cross_1 == cross_2:
            continue

        vertical = compartment.vertical
        sample, other_sample = compartment.sample_pos(), other.sample_pos()
        low, high = min(base_set), max(base_set)
        contains_low = contains_high = False
        for line_sample in (sample, other_sample):
            for rest in Grid.line_to_compartments(vertical, grid.line(vertical, line_sample)):
                if rest.contains_pos(sample) or rest.contains_pos(other_sample):
                    continue
                contains_low |= low in rest.combined_unresolved()
                contains_high |= high in rest.combined_unresolved()

        if contains_low == contains_high:
            continue
        to_add = low if contains_low else high

        changes = False
        for line_sample in (sample, other_sample):
            required = grid.requirements(vertical, line_sample)
            if to_add not in required:
                required.add(to_add)
                changes = True
        if changes:
            return UrResult(UrKind.UR_SETTI, to_add, cells=tuple(positions + other_positions), vertical=vertical)
    return None


# ----------------------------------------------------------------------
# Trial case
# ----------------------------------------------------------------------
def will_have_closed_sets(grid: Grid) -> bool:
    """Propagate cheaply, then look for two compartments reduced to the same pair."""

    try:
        trivial(grid)
        while update_impossibles(grid) is not None:
            trivial(grid)
        while definite_min_max(grid) is not None:
            trivial(grid)
        GridValidator().check(grid)
    except ValidationError:
        return False

    for (_, base_set, positions), (_, other_set, other_positions) in compartment_pairs(grid):
        if len(positions) == len(other_positions) == len(base_set) == 2 and base_set == other_set:
            return True
    return False


def solution_causes_closed_sets(grid: Grid) -> Optional[UrResult]:
    for pos, candidates in grid.indeterminates():
        for number in sorted(candidates):
            trial = grid.clone()
            trial.set_cell(pos, Cell.solution(number))
            if will_have_closed_sets(trial):
                grid.set_impossible(pos, number)
                return UrResult(UrKind.SOLUTION_CAUSES_CLOSED_SETS, number, pos)
    return None


# ----------------------------------------------------------------------
# Entry points
# ----------------------------------------------------------------------
def _find(grid: Grid) -> Optional[UrResult]:
    for pos, _ in grid.iter_cells():
        current = grid.cell(pos)
        if not current.is_indeterminate():
            continue
        for case in (cross_compartment_unique, would_become_free, intra_compartment_unique):
            res = case(grid, pos, current.candidates)
            if res is not None:
                return res
    return two_compartments_would_have_closed_set(grid) or two_compartment_setti(grid)


def unique_requirement(grid: Grid) -> Optional[SolveResult]:
    res = _find(grid)
    if res is None:
        return None
    LOGGER.debug("Unique requirement: %s", res)
    return SolveResult(SolveType.unique_requirement(res))


def unique_requirement_guess(grid: Grid) -> Optional[SolveResult]:
    """Try each candidate and reject those that leave swappable pairs behind."""

    res = solution_causes_closed_sets(grid)
    if res is None:
        return None
    LOGGER.debug("Unique requirement by trial: %s", res)
    return SolveResult(SolveType.unique_requirement(res))
