"""Y-Wing and N-fish eliminations."""

from __future__ import annotations

from typing import List, Optional

from ..core.constants import Point
from ..core.models import CellPair, SolveMetadata, SolveResult, SolveType
from ..engine.grid import Grid


def y_wing(grid: Grid) -> Optional[SolveResult]:
    """A bivalue pivot with one wing in its row and one in its column.

    Whichever value the pivot takes, one wing ends up holding the shared
    third number, so the cell seeing both wings cannot hold it.
    """

    pairs = [(pos, candidates) for pos, candidates in grid.indeterminates() if len(candidates) == 2]
    for (x, y), ab in pairs:
        row_matches = [(pos, c) for pos, c in pairs if pos[1] == y and pos[0] != x]
        col_matches = [(pos, c) for pos, c in pairs if pos[0] == x and pos[1] != y]
        for pos1, set1 in row_matches:
            abc = ab | set1
            if len(abc) != 3:
                continue
            for pos2, set2 in col_matches:
                if ab | set2 != abc or set1 == set2:
                    continue
                (number,) = abc - ab
                target = (pos1[0], pos2[1])
                if grid.set_impossible(target, number):
                    colors = [[(p, n) for n in sorted(abc) for p in ((x, y), pos1, pos2)]]
                    return SolveResult(SolveType.y_wing(target, number), SolveMetadata.from_lists(colors))
    return None


def _holding(line: List[CellPair], number: int) -> List[Point]:
    return [pos for pos, cell in line if number in cell.to_unresolved()]


def fish(grid: Grid) -> Optional[SolveResult]:
    """N lines that must hold a number, all confined to the same N crossing lanes."""

    for count in range(2, grid.size):
        changes = False
        colors = []
        for vertical in (False, True):
            lines = grid.cols() if vertical else grid.rows()
            reqs = [set(values) for values in (grid.col_requirements if vertical else grid.row_requirements)]
            lane = 1 if vertical else 0

            for index, line in enumerate(lines):
                for number in sorted(reqs[index]):
                    cells = _holding(line, number)
                    if len(cells) != count:
                        continue

                    matches = []
                    for other_index, other_line in enumerate(lines):
                        other_cells = _holding(other_line, number)
                        if len(other_cells) != count or number not in reqs[other_index]:
                            continue
                        if all(a[lane] == b[lane] for a, b in zip(other_cells, cells)):
                            matches.append(other_cells)

                    positions = sorted({pos for group in matches for pos in group})
                    if len(matches) > count:
                        # More lines than lanes: no placement exists.
                        for pos in positions:
                            grid.set_impossible(pos, number)
                        changes = True
                    elif len(matches) == count:
                        local_changes = False
                        for pos in positions:
                            local_changes |= grid.set_impossible_in(pos, False, number, positions)
                            local_changes |= grid.set_impossible_in(pos, True, number, positions)
                        for px, py in positions:
                            if number not in grid.row_requirements[py]:
                                grid.row_requirements[py].add(number)
                                local_changes = True
                            if number not in grid.col_requirements[px]:
                                grid.col_requirements[px].add(number)
                                local_changes = True
                        if local_changes:
                            colors.append([(pos, number) for pos in positions])
                        changes |= local_changes
        if changes:
            return SolveResult(SolveType.fish(count), SolveMetadata.from_lists(colors))
    return None
