"""Pretty-print helpers for str8ts grids."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, List

from ..core.constants import CellType

if TYPE_CHECKING:
    from ..core.models import Cell
    from ..engine.difficulty import Difficulty
    from ..engine.grid import Grid
    from ..engine.solver import SolveOutcome


SYMBOLS = {
    CellType.BLACK: "#",
    CellType.INDETERMINATE: ".",
}


def cell_symbol(cell: Cell) -> str:
    if cell.type == CellType.BLOCKER:
        return chr(ord("a") + cell.value - 1)
    if cell.type in (CellType.REQUIREMENT, CellType.SOLUTION):
        return str(cell.value)
    return SYMBOLS.get(cell.type, "?")


def format_grid(grid: Grid, candidates: bool = False) -> str:
    """Render the grid with 1-based row and column headers.

    With ``candidates`` set, open cells list their remaining candidates
    instead of a dot.
    """

    width = 1
    if candidates:
        width = max([len(c.candidates) for _, c in grid.iter_cells() if c.is_indeterminate()] + [1])

    def render(cell: Cell) -> str:
        if candidates and cell.is_indeterminate():
            return "".join(str(n) for n in sorted(cell.candidates)) or "!"
        return cell_symbol(cell)

    header_cells = [f"{x + 1:>{width}}" for x in range(grid.size)]
    lines = ["    " + " ".join(header_cells)]
    lines.append("    " + "-" * ((width + 1) * grid.size - 1))
    for y, row in enumerate(grid.cells):
        row_render = " ".join(f"{render(cell):>{width}}" for cell in row)
        lines.append(f"{y + 1:>2} | {row_render}")
    return "\n".join(lines)


def format_difficulty(difficulty: Difficulty) -> str:
    techniques = [
        name.replace("_", " ")
        for name, value in difficulty.to_jsonable().items()
        if isinstance(value, bool) and value
    ]
    lines = [
        f"Stars:       {difficulty.star_count}",
        f"Moves:       {difficulty.move_count}",
    ]
    if difficulty.n_fish:
        lines.append(f"Largest fish: {difficulty.n_fish}")
    if difficulty.short_guess_count or difficulty.long_guess_count:
        lines.append(f"Guesses:     {difficulty.short_guess_count} short, {difficulty.long_guess_count} long")
    if techniques:
        lines.append(f"Techniques:  {', '.join(techniques)}")
    return "\n".join(lines)


def print_solve_trace(outcomes: List[SolveOutcome], *, stream=None) -> None:
    """Print every step explanation followed by the final grid."""

    stream = stream or sys.stdout
    for index, outcome in enumerate(outcomes, start=1):
        marker = "!" if outcome.error is not None else f"{outcome.difficulty}*"
        print(f"{index:>3}. [{marker}] {outcome.explanation}", file=stream)
    if outcomes:
        print(file=stream)
        print(format_grid(outcomes[-1].grid, candidates=True), file=stream)
