import unittest

from str8ts.core.constants import CellType, SolveKind
from str8ts.engine import cpsat
from str8ts.engine.generator import (
    GeneratorConfig,
    PuzzleGenerator,
    effective_target,
    generate,
)
from str8ts.engine.solver import solve
from str8ts.io.puzzle_format import parse


def small_config(**overrides) -> GeneratorConfig:
    options = dict(
        size=4,
        blocker_count=2,
        blocker_num_count=0,
        target_difficulty=1,
        seed=1234,
        retry_limit=3,
        max_evaluations=40,
    )
    options.update(overrides)
    return GeneratorConfig(**options)


class EffectiveTargetTests(unittest.TestCase):
    def test_tier_three_is_promoted(self) -> None:
        self.assertEqual(effective_target(3), 4)

    def test_clamped(self) -> None:
        self.assertEqual(effective_target(0), 1)
        self.assertEqual(effective_target(9), 7)
        self.assertEqual(effective_target(5), 5)


class PuzzleGeneratorTests(unittest.TestCase):
    def test_generates_unique_puzzle(self) -> None:
        result = PuzzleGenerator(small_config()).generate()
        self.assertIsNotNone(result.grid)
        grid = result.grid

        self.assertTrue(cpsat.has_unique_solution(grid))
        self.assertFalse(any(cell.type == CellType.SOLUTION for _, cell in grid.iter_cells()))
        self.assertEqual(sum(1 for _, cell in grid.iter_cells() if cell.type == CellType.BLACK), 2)
        self.assertLessEqual(result.star_count, 1)

        kinds = [outcome.result.kind for outcome in solve(grid, allow_guessing=True)]
        self.assertEqual(kinds[-1], SolveKind.PUZZLE_SOLVED)
        self.assertNotIn(SolveKind.GUESS_STEP, kinds)

    def test_black_cells_are_mirrored(self) -> None:
        result = PuzzleGenerator(small_config(blocker_count=4)).generate()
        black = {pos for pos, cell in result.grid.iter_cells() if cell.type == CellType.BLACK}
        self.assertEqual(len(black), 4)
        for x, y in black:
            self.assertIn((3 - x, 3 - y), black)

    def test_same_seed_same_puzzle(self) -> None:
        first = PuzzleGenerator(small_config()).generate()
        second = PuzzleGenerator(small_config()).generate()
        self.assertEqual(first.canonical_text, second.canonical_text)
        self.assertEqual(parse(first.canonical_text), first.grid)

    def test_jsonable(self) -> None:
        payload = PuzzleGenerator(small_config()).generate().to_jsonable()
        self.assertEqual(payload["seed"], 1234)
        self.assertIn("canonical_text", payload)
        self.assertIn("star_count", payload["difficulty"])


class LayoutTests(unittest.TestCase):
    @staticmethod
    def count(grid, cell_type: CellType) -> int:
        return sum(1 for _, cell in grid.iter_cells() if cell.type == cell_type)

    def test_odd_numbered_count_uses_the_centre(self) -> None:
        for seed in range(10):
            with self.subTest(seed=seed):
                config = GeneratorConfig(size=5, blocker_count=5, blocker_num_count=3, seed=seed)
                grid = PuzzleGenerator(config)._carve_layout()
                self.assertEqual(self.count(grid, CellType.BLOCKER), 3)
                self.assertEqual(self.count(grid, CellType.BLOCKER) + self.count(grid, CellType.BLACK), 5)

    def test_numbered_count_never_overshoots(self) -> None:
        for seed in range(10):
            with self.subTest(seed=seed):
                config = GeneratorConfig(size=4, blocker_count=4, blocker_num_count=3, seed=seed)
                grid = PuzzleGenerator(config)._carve_layout()
                self.assertLessEqual(self.count(grid, CellType.BLOCKER), 3)


class GenerateFunctionTests(unittest.TestCase):
    def test_overrides(self) -> None:
        result = generate(size=4, blocker_count=2, blocker_num_count=0, target_difficulty=1, seed=5, retry_limit=2)
        self.assertIsNotNone(result.grid)
        self.assertEqual(result.grid.size, 4)

    def test_config_and_overrides_conflict(self) -> None:
        with self.assertRaises(TypeError):
            generate(small_config(), size=5)


if __name__ == "__main__":
    unittest.main()
