"""Puzzle generation.

Each attempt runs three phases:
  1. Layout: carve black cells (mirrored when symmetric) and number a few.
  2. Fill: let CP-SAT complete the layout into a solved grid.
  3. Carve: reopen solved cells while the puzzle stays uniquely solvable
     within the target difficulty.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple

from ..core.constants import CellType, Point
from ..core.exceptions import GeneratorError
from ..core.models import Cell
from ..io.puzzle_format import encode
from . import cpsat
from .difficulty import Difficulty, get_puzzle_difficulty
from .grid import Grid
from .strategies import MAX_DIFFICULTY, StrategyList
from .validator import GridValidator
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


def effective_target(target: int) -> int:
    """Clamp a requested star count to one the ladder can actually produce.

    No technique sits in tier 3, so it is promoted to 4.
    """

    if target == 3:
        return 4
    return max(1, min(target, MAX_DIFFICULTY))


@dataclass
class GeneratorConfig:
    size: int = 9
    blocker_count: int = 15
    blocker_num_count: int = 5
    symmetric: bool = True
    target_difficulty: int = 5
    seed: Optional[int] = None
    retry_limit: int = 20
    max_evaluations: int = 400
    fill_timeout_seconds: float = 10.0


@dataclass
class GenerationResult:
    grid: Optional[Grid]
    canonical_text: str
    difficulty: Optional[Difficulty] = None
    seed: Optional[int] = None
    attempts: int = 0
    note: Optional[str] = None

    @property
    def star_count(self) -> int:
        return self.difficulty.star_count if self.difficulty else 0

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "grid": self.grid.to_jsonable() if self.grid is not None else None,
            "canonical_text": self.canonical_text,
            "text": str(self.grid) if self.grid is not None else "",
            "difficulty": self.difficulty.to_jsonable() if self.difficulty else None,
            "seed": self.seed,
            "attempts": self.attempts,
            "note": self.note,
        }


def _rank(result: GenerationResult, target: int) -> Tuple[bool, int, int]:
    star = result.star_count
    moves = result.difficulty.move_count if result.difficulty else 0
    within = star <= target
    return within, star if within else -star, moves


class PuzzleGenerator:
    """Retry loop around layout, fill and carve."""

    def __init__(self, config: GeneratorConfig) -> None:
        self.config = config
        self.rng = random.Random(config.seed)
        self.validator = GridValidator()

    # ------------------------------------------------------------------
    # Public entrypoint
    # ------------------------------------------------------------------
    def generate(self) -> GenerationResult:
        target = effective_target(self.config.target_difficulty)
        best: Optional[GenerationResult] = None
        for attempt in range(1, self.config.retry_limit + 1):
            LOGGER.info("Generation attempt %s/%s (target %s stars)", attempt, self.config.retry_limit, target)
            try:
                puzzle, difficulty = self._attempt(target)
            except GeneratorError as exc:
                LOGGER.warning("Generation attempt failed: %s", exc)
                continue

            result = GenerationResult(
                grid=puzzle,
                canonical_text=encode(puzzle),
                difficulty=difficulty,
                seed=self.config.seed,
                attempts=attempt,
            )
            if difficulty.star_count == target:
                LOGGER.info("Generated %s-star puzzle with %s moves", difficulty.star_count, difficulty.move_count)
                return result
            LOGGER.info("Attempt rated %s stars, wanted %s", difficulty.star_count, target)
            if best is None or _rank(result, target) > _rank(best, target):
                best = result

        if best is None:
            LOGGER.warning("No attempt produced a puzzle")
            return GenerationResult(
                grid=None,
                canonical_text="",
                seed=self.config.seed,
                attempts=self.config.retry_limit,
                note="No attempt produced a valid puzzle; try fewer black cells",
            )
        best.attempts = self.config.retry_limit
        best.note = (
            f"Could not reach {target} stars in {self.config.retry_limit} attempts; "
            f"returning the best {best.star_count}-star puzzle"
        )
        LOGGER.warning(best.note)
        return best

    # ------------------------------------------------------------------
    # Attempt phases
    # ------------------------------------------------------------------
    def _attempt(self, target: int) -> Tuple[Grid, Difficulty]:
        layout = self._carve_layout()
        outcome = self.validator.validate(layout)
        if not outcome.ok:
            raise GeneratorError(f"Layout invalid: {outcome.error}")

        solved = cpsat.fill_grid(layout, self.rng, self.config.fill_timeout_seconds)
        if solved is None:
            raise GeneratorError("Layout cannot be filled")

        puzzle = self._carve_numbers(solved, target)
        puzzle = _solutions_to_requirements(puzzle)
        difficulty = get_puzzle_difficulty(puzzle, StrategyList.for_difficulty(target))
        if difficulty is None:
            raise GeneratorError("Carved puzzle cannot be solved")
        return puzzle, difficulty

    def _mirror(self, pos: Point) -> Point:
        size = self.config.size
        return (size - pos[0] - 1, size - pos[1] - 1)

    def _carve_layout(self) -> Grid:
        size = self.config.size
        open_cell = Cell.indeterminate(range(1, size + 1))
        grid = Grid([[open_cell] * size for _ in range(size)])
        symmetric = self.config.symmetric
        count = min(self.config.blocker_count, size * size)

        def pool() -> List[Point]:
            if symmetric:
                return [(x, y) for y in range(size) for x in range(size) if x <= size // 2 and y <= size // 2]
            return [(x, y) for y in range(size) for x in range(size)]

        choices = pool()
        self.rng.shuffle(choices)
        black: Set[Point] = set()
        for pos in choices:
            if len(black) >= count:
                break
            group = {pos, self._mirror(pos)} if symmetric else {pos}
            if len(black) + len(group) > count:
                continue
            black |= group
        for pos in black:
            grid.set_cell(pos, Cell.black())

        numbered = [pos for pos in pool() if pos in black]
        self.rng.shuffle(numbered)
        remaining = self.config.blocker_num_count
        for pos in numbered:
            if remaining <= 0:
                break
            group = sorted({pos, self._mirror(pos)}) if symmetric else [pos]
            if remaining < len(group):
                continue
            for cell_pos in group:
                grid.set_cell(cell_pos, Cell.blocker(self.rng.randint(1, size)))
            remaining -= len(group)

        LOGGER.debug("Layout:\n%s", grid)
        return grid

    def _carve_numbers(self, solved: Grid, target: int) -> Grid:
        strategies = StrategyList.for_difficulty(target)
        puzzle = solved
        open_cell = Cell.indeterminate(range(1, self.config.size + 1))
        positions = [pos for pos, cell in solved.iter_cells() if cell.type == CellType.SOLUTION]
        self.rng.shuffle(positions)

        evaluations = 0
        for pos in positions:
            if puzzle.cell(pos).type != CellType.SOLUTION:
                continue
            if evaluations >= self.config.max_evaluations:
                LOGGER.info("Evaluation budget spent after %s checks", evaluations)
                break
            evaluations += 1

            trial = puzzle.clone()
            trial.set_cell(pos, open_cell)
            mirror = self._mirror(pos)
            if self.config.symmetric and trial.cell(mirror).type == CellType.SOLUTION:
                trial.set_cell(mirror, open_cell)

            difficulty = get_puzzle_difficulty(trial, strategies)
            if difficulty is None or difficulty.star_count > target:
                continue
            if not cpsat.has_unique_solution(trial, self.config.fill_timeout_seconds):
                continue
            puzzle = trial

        LOGGER.debug("Carved puzzle after %s evaluations:\n%s", evaluations, puzzle)
        return puzzle


def _solutions_to_requirements(grid: Grid) -> Grid:
    res = grid.clone()
    for pos, cell in grid.iter_cells():
        if cell.type == CellType.SOLUTION:
            res.set_cell(pos, Cell.requirement(cell.value))
    return res


def generate(config: Optional[GeneratorConfig] = None, **overrides: Any) -> GenerationResult:
    """Build a :class:`PuzzleGenerator` and run it once."""

    if config is None:
        config = GeneratorConfig(**overrides)
    elif overrides:
        raise TypeError("Pass either a GeneratorConfig or keyword overrides, not both")
    return PuzzleGenerator(config).generate()
