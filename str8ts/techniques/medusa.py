"""3D Medusa colouring.

Candidates are linked when exactly one of them must be true: the two
candidates of a bivalue cell, or the only two places left for a number a
line is required to contain.  Colouring a chain of such links with two
colours means exactly one colour is true, and the six cases below derive
eliminations from that.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Set, Tuple

from ..core.constants import Point, SolveKind
from ..core.models import SolveMetadata, SolveResult, SolveType
from ..engine.grid import Grid
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

Candidate = Tuple[Point, int]
Pairs = Dict[Candidate, Set[Point]]
Colors = Dict[Point, Dict[int, bool]]


def gather_pairs(grid: Grid) -> Pairs:
    """Strong links between the same number in two cells of a line."""

    pairs: Pairs = defaultdict(set)
    indeterminates = grid.indeterminates()
    for pos, candidates in indeterminates:
        for number in candidates:
            other_row: List[Point] = []
            other_col: List[Point] = []
            for other, other_candidates in indeterminates:
                if other == pos or (other[0] != pos[0] and other[1] != pos[1]):
                    continue
                vertical = other[0] == pos[0]
                if number not in grid.requirements(vertical, pos):
                    continue
                if number in other_candidates:
                    (other_col if vertical else other_row).append(other)

            for others in (other_row, other_col):
                if len(others) == 1:
                    pairs[(pos, number)].add(others[0])
                    pairs[(others[0], number)].add(pos)
    return pairs


def get_colors(grid: Grid, pairs: Pairs, origin: Point, number: int) -> Colors:
    colors: Colors = defaultdict(dict)
    colors[origin][number] = False
    queue: Set[Point] = set()
    for pos in pairs.get((origin, number), ()):
        colors[pos][number] = True
        queue.add(pos)

    while queue:
        pos = min(queue)
        queue.remove(pos)
        possibles = grid.cell(pos).to_possibles()
        if len(colors[pos]) == 1 and len(possibles) == 2:
            ((existing, color),) = colors[pos].items()
            (other,) = possibles - {existing}
            colors[pos][other] = not color

        for num, color in list(colors[pos].items()):
            for linked in sorted(pairs.get((pos, num), ())):
                if num not in colors[linked]:
                    colors[linked][num] = not color
                    queue.add(linked)
    return dict(colors)


def split(colors: Colors) -> Tuple[List[Candidate], List[Candidate]]:
    false_side: List[Candidate] = []
    true_side: List[Candidate] = []
    for pos, numbers in colors.items():
        for num, color in numbers.items():
            (true_side if color else false_side).append((pos, num))
    return sorted(false_side), sorted(true_side)


def _seen(colors: Colors, center: Point, include_center: bool) -> Tuple[Dict[int, List[Point]], Dict[int, List[Point]]]:
    seen_false: Dict[int, List[Point]] = defaultdict(list)
    seen_true: Dict[int, List[Point]] = defaultdict(list)
    for pos, numbers in sorted(colors.items()):
        if pos == center and not include_center:
            continue
        if pos[0] != center[0] and pos[1] != center[1]:
            continue
        for num, color in numbers.items():
            (seen_true if color else seen_false)[num].append(pos)
    return seen_false, seen_true


def _repeats_in_line(seen: Dict[int, List[Point]], center: Point, num: int) -> bool:
    points = seen.get(num, [])
    in_col = [p for p in points if p[0] == center[0]]
    in_row = [p for p in points if p[1] == center[1]]
    return len(in_col) > 1 or len(in_row) > 1


def _block_color(grid: Grid, colors: Colors, value: bool) -> bool:
    changes = False
    for pos, numbers in sorted(colors.items()):
        for num, color in sorted(numbers.items()):
            if color == value:
                changes |= grid.set_impossible(pos, num)
    return changes


def _contradicted_color(colors: Colors) -> Optional[bool]:
    # Two candidates of one cell sharing a colour.
    for numbers in colors.values():
        values = list(numbers.values())
        if values.count(True) > 1:
            return True
        if values.count(False) > 1:
            return False

    # The same number twice in one colour along a row or column.
    for pos, numbers in sorted(colors.items()):
        seen_false, seen_true = _seen(colors, pos, True)
        for num in sorted(numbers):
            if _repeats_in_line(seen_false, pos, num):
                return False
            if _repeats_in_line(seen_true, pos, num):
                return True
    return None


def _apply_cases(grid: Grid, colors: Colors) -> bool:
    bad = _contradicted_color(colors)
    if bad is not None and _block_color(grid, colors, bad):
        return True

    # Both colours inside one cell: every other candidate goes.
    changes = False
    for pos, numbers in sorted(colors.items()):
        if len(numbers) > 1:
            for num in sorted(grid.cell(pos).to_possibles() - set(numbers)):
                changes |= grid.set_impossible(pos, num)
    if changes:
        return True

    # An uncoloured candidate seeing both colours of its number.
    for pos, candidates in grid.indeterminates():
        seen_false, seen_true = _seen(colors, pos, False)
        for num in sorted(candidates):
            if num in colors.get(pos, {}):
                continue
            if num in seen_false and num in seen_true:
                changes |= grid.set_impossible(pos, num)
    if changes:
        return True

    # An uncoloured candidate seeing one colour while its cell holds the other.
    for pos, candidates in grid.indeterminates():
        cell_colors = colors.get(pos, {})
        if not cell_colors:
            continue
        shared = next(iter(cell_colors.values()))
        seen_false, seen_true = _seen(colors, pos, False)
        for num in sorted(candidates):
            if num in cell_colors:
                continue
            if (shared and num in seen_false) or (not shared and num in seen_true):
                changes |= grid.set_impossible(pos, num)
    if changes:
        return True

    # A colour that would empty an uncoloured cell.
    for pos, candidates in grid.indeterminates():
        if colors.get(pos):
            continue
        seen_false, seen_true = _seen(colors, pos, False)
        if set(seen_true) == set(candidates):
            changes |= _block_color(grid, colors, True)
        elif set(seen_false) == set(candidates):
            changes |= _block_color(grid, colors, False)
    return changes


def medusa(grid: Grid) -> Optional[SolveResult]:
    colored: Set[Candidate] = set()
    pairs = gather_pairs(grid)
    for origin, candidates in grid.indeterminates():
        for number in sorted(candidates):
            if (origin, number) in colored:
                continue
            colors = get_colors(grid, pairs, origin, number)
            for pos, numbers in colors.items():
                colored.update((pos, num) for num in numbers)
            if len(colors) == 1:
                continue

            if _apply_cases(grid, colors):
                false_side, true_side = split(colors)
                LOGGER.debug("Medusa chain from %s=%s coloured %d candidates", origin, number, len(false_side) + len(true_side))
                return SolveResult(
                    SolveType.unit(SolveKind.MEDUSA),
                    SolveMetadata.from_lists([false_side, true_side]),
                )
    return None
