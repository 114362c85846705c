"""Technique catalogue: ladder order, difficulty tiers and selectable subsets."""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Iterable, Iterator

from ..core.constants import SolveKind, UrKind
from ..core.models import SolveType


class Strategy(str, Enum):
    """Every technique the ladder can run, in ladder order."""

    UPDATE_IMPOSSIBLES = "UpdateImpossibles"
    SINGLES = "Singles"
    STRANDED = "Stranded"
    DEFINITE_MIN_MAX = "DefiniteMinMax"
    REQUIRED_RANGE = "RequiredRange"
    SETS = "Sets"
    REQUIRED_AND_FORBIDDEN = "RequiredAndForbidden"
    SETTI = "Setti"
    Y_WING = "YWing"
    FISH = "Fish"
    MEDUSA = "Medusa"
    UNIQUE_REQUIREMENT = "UniqueRequirement"
    ROW_COL_BRUTE = "RowColBrute"
    UNIQUE_REQUIREMENT_GUESS = "UniqueRequirementGuess"
    GUESS = "Guess"
    ENUMERATE_SOLUTIONS = "EnumerateSolutions"

    @property
    def difficulty(self) -> int:
        return STRATEGY_DIFFICULTY[self]


STRATEGY_DIFFICULTY: Dict[Strategy, int] = {
    Strategy.UPDATE_IMPOSSIBLES: 1,
    Strategy.STRANDED: 1,
    Strategy.DEFINITE_MIN_MAX: 2,
    Strategy.SINGLES: 2,
    Strategy.REQUIRED_RANGE: 4,
    Strategy.SETS: 4,
    Strategy.REQUIRED_AND_FORBIDDEN: 5,
    Strategy.ROW_COL_BRUTE: 5,
    Strategy.SETTI: 5,
    Strategy.Y_WING: 5,
    Strategy.FISH: 5,
    Strategy.MEDUSA: 6,
    Strategy.UNIQUE_REQUIREMENT: 6,
    Strategy.UNIQUE_REQUIREMENT_GUESS: 7,
    Strategy.GUESS: 7,
    Strategy.ENUMERATE_SOLUTIONS: 7,
}

MAX_DIFFICULTY = max(STRATEGY_DIFFICULTY.values())

_BY_KIND: Dict[SolveKind, Strategy] = {
    SolveKind.UPDATE_IMPOSSIBLES: Strategy.UPDATE_IMPOSSIBLES,
    SolveKind.SINGLES: Strategy.SINGLES,
    SolveKind.STRANDED: Strategy.STRANDED,
    SolveKind.DEFINITE_MIN_MAX: Strategy.DEFINITE_MIN_MAX,
    SolveKind.REQUIRED_RANGE: Strategy.REQUIRED_RANGE,
    SolveKind.SETS: Strategy.SETS,
    SolveKind.REQUIRED_AND_FORBIDDEN: Strategy.REQUIRED_AND_FORBIDDEN,
    SolveKind.ROW_COL_BRUTE: Strategy.ROW_COL_BRUTE,
    SolveKind.SETTI: Strategy.SETTI,
    SolveKind.Y_WING: Strategy.Y_WING,
    SolveKind.FISH: Strategy.FISH,
    SolveKind.MEDUSA: Strategy.MEDUSA,
    SolveKind.START_GUESS: Strategy.GUESS,
    SolveKind.GUESS_STEP: Strategy.GUESS,
    SolveKind.END_GUESS: Strategy.GUESS,
    SolveKind.ENUMERATE_SOLUTIONS: Strategy.ENUMERATE_SOLUTIONS,
}


def difficulty_of(ty: SolveType) -> int:
    """Tier of the technique behind a reported step."""

    if ty.kind in (SolveKind.PUZZLE_SOLVED, SolveKind.START_GUESS, SolveKind.END_GUESS):
        return 1
    if ty.kind == SolveKind.OUT_OF_BASIC_STRATS:
        return 0
    if ty.kind == SolveKind.UNIQUE_REQUIREMENT:
        if ty.unique is not None and ty.unique.kind == UrKind.SOLUTION_CAUSES_CLOSED_SETS:
            return Strategy.UNIQUE_REQUIREMENT_GUESS.difficulty
        return Strategy.UNIQUE_REQUIREMENT.difficulty
    return _BY_KIND[ty.kind].difficulty


class StrategyList:
    """An ordered subset of the ladder.

    Membership never changes the order techniques run in; it only switches
    individual rungs on or off.
    """

    def __init__(self, strategies: Iterable[Strategy]) -> None:
        self._enabled: FrozenSet[Strategy] = frozenset(strategies)

    @classmethod
    def all(cls) -> StrategyList:
        return cls(Strategy)

    @classmethod
    def for_difficulty(cls, difficulty: int) -> StrategyList:
        return cls(s for s in Strategy if s.difficulty <= difficulty)

    @classmethod
    def basic(cls) -> StrategyList:
        return cls(
            [
                Strategy.UPDATE_IMPOSSIBLES,
                Strategy.SINGLES,
                Strategy.STRANDED,
                Strategy.DEFINITE_MIN_MAX,
                Strategy.REQUIRED_RANGE,
                Strategy.SETS,
            ]
        )

    @classmethod
    def fast(cls) -> StrategyList:
        return cls.basic().except_(Strategy.SETS)

    @classmethod
    def no_guesses(cls) -> StrategyList:
        return cls.all().except_(
            Strategy.UNIQUE_REQUIREMENT_GUESS, Strategy.GUESS, Strategy.ENUMERATE_SOLUTIONS
        )

    def except_(self, *strategies: Strategy) -> StrategyList:
        return StrategyList(self._enabled - set(strategies))

    def has(self, strategy: Strategy) -> bool:
        return strategy in self._enabled

    def __iter__(self) -> Iterator[Strategy]:
        return (s for s in Strategy if s in self._enabled)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StrategyList):
            return NotImplemented
        return self._enabled == other._enabled

    def __repr__(self) -> str:
        return f"StrategyList({[s.value for s in self]})"
