"""Str8ts solver, rater and generator.

This package exposes the public API surface via:

- ``str8ts.io.puzzle_format``: ``parse`` and ``encode`` for puzzle text.
- ``str8ts.engine.solver``: ``solve_one`` runs a single technique step.
- ``str8ts.engine.difficulty``: star rating of a solving path.
- ``str8ts.engine.generator.PuzzleGenerator``: builds rated puzzles.
"""

from .engine.difficulty import Difficulty, get_puzzle_difficulty, puzzle_difficulty
from .engine.generator import GenerationResult, GeneratorConfig, PuzzleGenerator
from .engine.grid import Grid
from .engine.solver import SolveOutcome, solve, solve_one
from .engine.strategies import Strategy, StrategyList
from .io.puzzle_format import encode, parse

__all__ = [
    "Difficulty",
    "GenerationResult",
    "GeneratorConfig",
    "Grid",
    "PuzzleGenerator",
    "SolveOutcome",
    "Strategy",
    "StrategyList",
    "encode",
    "get_puzzle_difficulty",
    "parse",
    "puzzle_difficulty",
    "solve",
    "solve_one",
]

__version__ = "0.1.0"
