"""Branch-and-verify search used when the logical ladder stalls."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from ..core.constants import Point, SolveKind, ValidationErrorType
from ..core.exceptions import ValidationError
from ..core.models import (
    Cell,
    SolveMetadata,
    SolveResult,
    SolveStep,
    SolveType,
    ValidationResult,
)
from .grid import Grid
from .strategies import Strategy, StrategyList
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from .solver import SolveOutcome

LOGGER = get_logger(__name__)

StepFunction = Callable[..., "SolveOutcome"]


@dataclass
class GuessConfig:
    """Budgets bounding the search."""

    max_depth: int = 2
    max_branch_steps: int = 200


@dataclass
class Branch:
    """What happened after committing one candidate of the pivot."""

    value: int
    trace: List[SolveStep] = field(default_factory=list)
    solved: Optional[Grid] = None
    error: Optional[ValidationResult] = None
    final_grid: Optional[Grid] = None

    @property
    def ambiguous(self) -> bool:
        return self.error is not None and self.error.kind == ValidationErrorType.AMBIGUOUS

    @property
    def failed(self) -> bool:
        """The branch hit a contradiction; an ambiguous branch still holds solutions."""
        return self.error is not None and not self.ambiguous


def choose_pivot(grid: Grid) -> Optional[Tuple[Point, frozenset]]:
    """Open cell with the fewest candidates, earliest in row-major order on ties."""

    indeterminates = grid.indeterminates()
    if not indeterminates:
        return None
    return min(indeterminates, key=lambda item: len(item[1]))


class GuessEngine:
    """Tries every candidate of a pivot cell and compares the branches.

    ``step`` is the single-step solver; branches drain it on their own clone
    of the grid, so the parent grid only changes once a decision is made.
    """

    def __init__(self, step: StepFunction, config: Optional[GuessConfig] = None) -> None:
        self.step = step
        self.config = config or GuessConfig()

    def guess(self, grid: Grid, strategies: StrategyList, depth: int = 1) -> Optional[SolveResult]:
        pivot = choose_pivot(grid)
        if pivot is None:
            return None
        pos, candidates = pivot
        # Uniqueness deductions assume a single solution, which a branch cannot promise.
        branch_strategies = strategies.except_(Strategy.UNIQUE_REQUIREMENT, Strategy.UNIQUE_REQUIREMENT_GUESS)
        if depth >= self.config.max_depth:
            branch_strategies = branch_strategies.except_(Strategy.GUESS)

        branches = [self._run_branch(grid, pos, value, branch_strategies, depth) for value in sorted(candidates)]
        successes = [b for b in branches if b.solved is not None]
        ambiguous = [b for b in branches if b.ambiguous]
        failures = [b for b in branches if b.failed]
        LOGGER.debug(
            "Guess at %s (depth %d): %d solved, %d ambiguous, %d failed, %d stalled",
            pos,
            depth,
            len(successes),
            len(ambiguous),
            len(failures),
            len(branches) - len(successes) - len(ambiguous) - len(failures),
        )

        if ambiguous or len(successes) > 1:
            raise ValidationError(self._ambiguity(pos, successes, ambiguous))

        if len(successes) == 1 and len(failures) == len(branches) - 1:
            value = successes[0].value
            grid.set_cell(pos, Cell.solution(value))
            return SolveResult(
                SolveType.unit(SolveKind.ENUMERATE_SOLUTIONS),
                SolveMetadata.from_lists([[(pos, value)]]),
            )

        if failures and len(failures) == len(branches):
            raise ValidationError(failures[0].error)

        if failures:
            first = failures[0]
            grid.set_impossible(pos, first.value)
            return SolveResult(
                SolveType.guess_step(pos, first.value, first.trace, first.final_grid),
                SolveMetadata.from_lists([[(pos, first.value)]]),
            )
        return None

    def _run_branch(self, grid: Grid, pos: Point, value: int, strategies: StrategyList, depth: int) -> Branch:
        work = grid.clone()
        work.set_cell(pos, Cell.solution(value))
        start = SolveResult(SolveType.start_guess(pos, value))
        branch = Branch(value, [SolveStep(work, start, str(start))], final_grid=work)

        for _ in range(self.config.max_branch_steps):
            outcome = self.step(work, strategies=strategies, guess_config=self.config, depth=depth + 1)
            if outcome.error is not None:
                end = SolveResult(SolveType.end_guess(outcome.error))
                branch.trace.append(SolveStep(outcome.grid, end, str(end)))
                branch.error = outcome.error
                branch.final_grid = outcome.grid
                return branch
            kind = outcome.result.kind
            if kind == SolveKind.PUZZLE_SOLVED:
                branch.solved = outcome.grid
                branch.final_grid = outcome.grid
                return branch
            if kind == SolveKind.OUT_OF_BASIC_STRATS:
                break
            branch.trace.append(SolveStep(outcome.grid, outcome.result, outcome.explanation))
            work = outcome.grid
            branch.final_grid = work
        return branch

    @staticmethod
    def _ambiguity(pos: Point, successes: List[Branch], ambiguous: List[Branch]) -> ValidationResult:
        cells = [pos]
        if successes:
            first = successes[0].solved
            for other_pos, _ in first.iter_cells():
                if other_pos == pos:
                    continue
                values = {b.solved.cell(other_pos).to_determinate() for b in successes}
                if len(values) > 1:
                    cells.append(other_pos)
        colors = [[(p, b.solved.cell(p).to_determinate()) for p in cells] for b in successes]
        for branch in ambiguous:
            cells.extend(p for p in branch.error.details.get("cells", ()) if p not in cells)
            colors.extend(branch.error.meta.colors)
        return ValidationResult.ambiguous(cells, SolveMetadata.from_lists(colors))
