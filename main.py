"""CLI entrypoint for the str8ts solver and generator."""

from __future__ import annotations

import argparse
import io
import json
import logging
from pathlib import Path
from typing import Any, Dict

from str8ts.core.exceptions import PuzzleFormatError
from str8ts.engine.difficulty import puzzle_difficulty
from str8ts.engine.generator import GeneratorConfig, PuzzleGenerator
from str8ts.engine.solver import solve
from str8ts.io.puzzle_format import encode, parse
from str8ts.utils.logger import configure_logging
from str8ts.utils.pretty import format_difficulty, format_grid, print_solve_trace


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Solve, rate and generate Str8ts puzzles",
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--generate", action="store_true", help="Generate a new puzzle")
    mode.add_argument("--solve", action="store_true", help="Solve a puzzle step by step")

    parser.add_argument("--size", type=int, default=9, help="Grid side length (default 9)")
    parser.add_argument("--blocker-count", type=int, default=15, help="Number of black cells")
    parser.add_argument(
        "--blocker-num-count",
        type=int,
        default=5,
        help="How many black cells carry a number",
    )
    parser.add_argument(
        "--target-difficulty",
        type=int,
        default=5,
        help="Target star rating between 1 and 7",
    )
    parser.add_argument(
        "--not-symmetric",
        action="store_true",
        help="Do not mirror black cells through the centre",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")

    parser.add_argument("--puzzle", type=str, help="Puzzle as a one-line string")
    parser.add_argument(
        "--puzzle-file",
        type=Path,
        metavar="FILE",
        help="File holding the puzzle, one row per line or a single one-line string",
    )
    parser.add_argument(
        "--no-guesses",
        action="store_true",
        help="Only use logical techniques when solving",
    )
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Write a human-readable report instead of JSON",
    )
    return parser


def run_generate(args: argparse.Namespace, parser: argparse.ArgumentParser):
    if not 1 <= args.size <= 9:
        parser.error("--size must be between 1 and 9")
    if not 0 <= args.blocker_count <= args.size * args.size:
        parser.error("--blocker-count must fit in the grid")
    if args.blocker_num_count > args.blocker_count:
        parser.error("--blocker-num-count cannot exceed --blocker-count")

    config = GeneratorConfig(
        size=args.size,
        blocker_count=args.blocker_count,
        blocker_num_count=args.blocker_num_count,
        symmetric=not args.not_symmetric,
        target_difficulty=args.target_difficulty,
        seed=args.seed,
    )
    result = PuzzleGenerator(config).generate()
    if not args.pretty:
        return result.to_jsonable()

    out = io.StringIO()
    if result.grid is None:
        print(result.note, file=out)
        return out.getvalue()
    print(format_grid(result.grid), file=out)
    print(file=out)
    print(result.canonical_text, file=out)
    print(format_difficulty(result.difficulty), file=out)
    if result.note:
        print(result.note, file=out)
    return out.getvalue()


def run_solve(args: argparse.Namespace, parser: argparse.ArgumentParser):
    if args.puzzle and args.puzzle_file:
        parser.error("--puzzle and --puzzle-file are mutually exclusive")
    if args.puzzle_file:
        text = args.puzzle_file.read_text(encoding="utf-8")
    elif args.puzzle:
        text = args.puzzle
    else:
        parser.error("--solve requires --puzzle or --puzzle-file")

    try:
        grid = parse(text)
    except PuzzleFormatError as exc:
        parser.error(str(exc))

    outcomes = solve(grid, allow_guessing=not args.no_guesses)
    final = outcomes[-1]
    history = [o.result for o in outcomes[:-1]]
    solved = final.error is None and final.grid.is_solved()
    difficulty = puzzle_difficulty(history) if solved else None

    if args.pretty:
        out = io.StringIO()
        print_solve_trace(outcomes, stream=out)
        if difficulty is not None:
            print(file=out)
            print(format_difficulty(difficulty), file=out)
        return out.getvalue()

    payload: Dict[str, Any] = {
        "puzzle": encode(grid) if grid.size <= 9 else None,
        "solved": solved,
        "steps": [o.to_jsonable() for o in outcomes],
        "difficulty": difficulty.to_jsonable() if difficulty else None,
    }
    return payload


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.WARNING)
    configure_logging(level)

    if args.generate:
        payload = run_generate(args, parser)
    else:
        payload = run_solve(args, parser)

    output_text = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(output_text, encoding="utf-8")
    else:
        print(output_text)


if __name__ == "__main__":  # pragma: no cover
    main()
