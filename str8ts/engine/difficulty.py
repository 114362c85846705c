"""Difficulty rating derived from a solving history."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from ..core.constants import SHORT_GUESS_MAX_STEPS, SolveKind
from ..core.models import SolveResult, SolveType
from .grid import Grid
from .solver import iter_solve
from .strategies import StrategyList, difficulty_of
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

HistoryItem = Union[SolveResult, SolveType]

_NOT_MOVES = (SolveKind.PUZZLE_SOLVED, SolveKind.OUT_OF_BASIC_STRATS)


@dataclass
class Difficulty:
    star_count: int = 0
    move_count: int = 0
    basic_reductions: bool = False
    min_max_reductions: bool = False
    cross_compartment_ranges: bool = False
    maintain_reqs_and_blocks: bool = False
    sets: bool = False
    setti: bool = False
    y_wing: bool = False
    x_wing: bool = False
    swordfish: bool = False
    n_fish: int = 0
    medusa: bool = False
    unique_requirement: bool = False
    short_guess_count: int = 0
    long_guess_count: int = 0

    def to_jsonable(self) -> Dict[str, Any]:
        return asdict(self)


def puzzle_difficulty(history: Iterable[HistoryItem]) -> Difficulty:
    """Reduce a history of steps to a rating.

    The star count is the highest tier seen, so it only ever grows as steps
    are added; the order of the steps does not matter.  Steps inside guess
    branches are not counted as moves of their own.
    """

    types: List[SolveType] = [item.ty if isinstance(item, SolveResult) else item for item in history]
    kinds = {ty.kind for ty in types}
    fish_sizes = [ty.number for ty in types if ty.kind == SolveKind.FISH]
    guesses = [ty for ty in types if ty.kind == SolveKind.GUESS_STEP]

    return Difficulty(
        star_count=max((difficulty_of(ty) for ty in types), default=0),
        move_count=sum(1 for ty in types if ty.kind not in _NOT_MOVES),
        basic_reductions=bool(
            kinds & {SolveKind.UPDATE_IMPOSSIBLES, SolveKind.SINGLES, SolveKind.STRANDED}
        ),
        min_max_reductions=SolveKind.DEFINITE_MIN_MAX in kinds,
        cross_compartment_ranges=SolveKind.REQUIRED_RANGE in kinds,
        maintain_reqs_and_blocks=SolveKind.REQUIRED_AND_FORBIDDEN in kinds,
        sets=SolveKind.SETS in kinds,
        setti=SolveKind.SETTI in kinds,
        y_wing=SolveKind.Y_WING in kinds,
        x_wing=2 in fish_sizes,
        swordfish=3 in fish_sizes,
        n_fish=max(fish_sizes, default=0),
        medusa=SolveKind.MEDUSA in kinds,
        unique_requirement=SolveKind.UNIQUE_REQUIREMENT in kinds,
        short_guess_count=sum(1 for ty in guesses if len(ty.steps) < SHORT_GUESS_MAX_STEPS),
        long_guess_count=sum(1 for ty in guesses if len(ty.steps) >= SHORT_GUESS_MAX_STEPS),
    )


def get_puzzle_difficulty(
    grid: Grid, strategies: Optional[StrategyList] = None, max_steps: Optional[int] = None
) -> Optional[Difficulty]:
    """Solve ``grid`` with ``strategies`` and rate the path taken.

    Returns None when the puzzle is contradictory or the strategies run out
    before it is solved.
    """

    strategies = strategies or StrategyList.all()
    history: List[SolveResult] = []
    for outcome in iter_solve(grid, strategies=strategies, max_steps=max_steps):
        if outcome.error is not None:
            LOGGER.debug("Rating stopped on error: %s", outcome.explanation)
            return None
        if outcome.result.kind == SolveKind.OUT_OF_BASIC_STRATS:
            return None
        if outcome.result.kind == SolveKind.PUZZLE_SOLVED:
            return puzzle_difficulty(history)
        history.append(outcome.result)
    return None
