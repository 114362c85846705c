"""The technique ladder: one solving step at a time.

``solve_one`` never mutates its input.  Each rung runs on a fresh clone; the
first rung that changes anything wins, the clone is tidied up by the trivial
pass and validated, and the outcome carries the new grid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from ..core.constants import SolveKind
from ..core.exceptions import ValidationError
from ..core.models import SolveResult, ValidationResult
from ..techniques.basic import singles, stranded, trivial, update_impossibles
from ..techniques.enumerate_solutions import enumerate_solutions
from ..techniques.fish import fish, y_wing
from ..techniques.medusa import medusa
from ..techniques.ranges import definite_min_max, required_range
from ..techniques.requirements import setti, update_required_and_forbidden
from ..techniques.row_col_brute import row_col_brute
from ..techniques.sets import sets
from ..techniques.unique_requirement import unique_requirement, unique_requirement_guess
from .grid import Grid
from .guess import GuessConfig, GuessEngine
from .strategies import Strategy, StrategyList, difficulty_of
from .validator import GridValidator
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

Technique = Callable[[Grid], Optional[SolveResult]]


def _basic_reductions(grid: Grid) -> Optional[SolveResult]:
    res = update_impossibles(grid)
    if res is None and trivial(grid):
        res = SolveResult.of(SolveKind.UPDATE_IMPOSSIBLES)
    return res


LADDER: List[Tuple[Strategy, Technique]] = [
    (Strategy.UPDATE_IMPOSSIBLES, _basic_reductions),
    (Strategy.SINGLES, singles),
    (Strategy.STRANDED, stranded),
    (Strategy.DEFINITE_MIN_MAX, definite_min_max),
    (Strategy.REQUIRED_RANGE, required_range),
    (Strategy.SETS, sets),
    (Strategy.REQUIRED_AND_FORBIDDEN, update_required_and_forbidden),
    (Strategy.SETTI, setti),
    (Strategy.Y_WING, y_wing),
    (Strategy.FISH, fish),
    (Strategy.MEDUSA, medusa),
    (Strategy.UNIQUE_REQUIREMENT, unique_requirement),
    (Strategy.ROW_COL_BRUTE, row_col_brute),
    (Strategy.UNIQUE_REQUIREMENT_GUESS, unique_requirement_guess),
]


@dataclass
class SolveOutcome:
    """Result of a single ladder step."""

    grid: Grid
    result: Optional[SolveResult] = None
    error: Optional[ValidationResult] = None
    explanation: str = ""
    difficulty: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, grid: Grid, result: SolveResult) -> SolveOutcome:
        return cls(grid, result=result, explanation=str(result), difficulty=difficulty_of(result.ty))

    @classmethod
    def failure(cls, grid: Grid, error: ValidationResult) -> SolveOutcome:
        return cls(grid, error=error, explanation=str(error))

    def is_terminal(self) -> bool:
        return self.error is not None or self.result.kind in (
            SolveKind.PUZZLE_SOLVED,
            SolveKind.OUT_OF_BASIC_STRATS,
        )

    def to_jsonable(self) -> Dict[str, Any]:
        if self.error is not None:
            result: Dict[str, Any] = {"Err": self.error.to_jsonable()}
            explanation = {"Err": self.explanation}
        else:
            result = {"Ok": self.result.to_jsonable()}
            explanation = {"Ok": self.explanation}
        return {
            "difficulty": self.difficulty,
            "grid": self.grid.to_jsonable(),
            "result": result,
            "explanation": explanation,
        }


def _techniques(strategies: StrategyList, guess_config: Optional[GuessConfig], depth: int) -> Iterator[Technique]:
    for strategy, technique in LADDER:
        if strategies.has(strategy):
            yield technique
    if strategies.has(Strategy.GUESS):
        engine = GuessEngine(solve_one, guess_config)
        yield lambda grid: engine.guess(grid, strategies, depth)
    if strategies.has(Strategy.ENUMERATE_SOLUTIONS):
        yield enumerate_solutions


def solve_one(
    grid: Grid,
    allow_guessing: bool = False,
    strategies: Optional[StrategyList] = None,
    guess_config: Optional[GuessConfig] = None,
    depth: int = 1,
) -> SolveOutcome:
    """Apply the least aggressive technique that makes progress."""

    if strategies is None:
        strategies = StrategyList.all() if allow_guessing else StrategyList.no_guesses()

    validator = GridValidator()
    checked = validator.validate(grid)
    if not checked.ok:
        return SolveOutcome.failure(grid, checked.error)
    if grid.is_solved():
        return SolveOutcome.success(grid, SolveResult.of(SolveKind.PUZZLE_SOLVED))

    for technique in _techniques(strategies, guess_config, depth):
        work = grid.clone()
        try:
            result = technique(work)
            if result is None:
                continue
            trivial(work)
            validator.check(work)
        except ValidationError as exc:
            LOGGER.debug("Step failed: %s", exc)
            return SolveOutcome.failure(grid, exc.result)
        LOGGER.debug("Applied %s", result.kind.value)
        return SolveOutcome.success(work, result)

    return SolveOutcome.success(grid.clone(), SolveResult.of(SolveKind.OUT_OF_BASIC_STRATS))


def iter_solve(
    grid: Grid,
    allow_guessing: bool = False,
    strategies: Optional[StrategyList] = None,
    guess_config: Optional[GuessConfig] = None,
    max_steps: Optional[int] = None,
) -> Iterator[SolveOutcome]:
    """Step until the puzzle is solved, contradicts itself or stalls."""

    steps = 0
    while max_steps is None or steps < max_steps:
        outcome = solve_one(grid, allow_guessing, strategies, guess_config)
        steps += 1
        yield outcome
        if outcome.is_terminal():
            return
        grid = outcome.grid


def solve(
    grid: Grid,
    allow_guessing: bool = False,
    strategies: Optional[StrategyList] = None,
    guess_config: Optional[GuessConfig] = None,
    max_steps: Optional[int] = None,
) -> List[SolveOutcome]:
    return list(iter_solve(grid, allow_guessing, strategies, guess_config, max_steps))
