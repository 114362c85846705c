"""Finish nearly solved grids by listing every remaining solution."""

from __future__ import annotations

from typing import Optional

from ..core.constants import ENUMERATE_MAX_INDETERMINATES, SolveKind
from ..core.exceptions import ValidationError
from ..core.models import SolveMetadata, SolveResult, ValidationResult
from ..engine import cpsat
from ..engine.grid import Grid

# Enough to report the competing solutions without enumerating all of them.
MAX_REPORTED_SOLUTIONS = 16


def enumerate_solutions(grid: Grid) -> Optional[SolveResult]:
    indeterminates = grid.indeterminates()
    if not indeterminates or len(indeterminates) > ENUMERATE_MAX_INDETERMINATES:
        return None

    solutions = cpsat.find_solutions(grid, MAX_REPORTED_SOLUTIONS)
    if not solutions:
        raise ValidationError(ValidationResult.no_solutions())
    if len(solutions) > 1:
        colors = [[(pos, solved.cell(pos).value) for pos, _ in indeterminates] for solved in solutions]
        raise ValidationError(
            ValidationResult.ambiguous([pos for pos, _ in indeterminates], SolveMetadata.from_lists(colors))
        )

    (solved,) = solutions
    for pos, _ in indeterminates:
        grid.set_cell(pos, solved.cell(pos))
    return SolveResult.of(SolveKind.ENUMERATE_SOLUTIONS)
