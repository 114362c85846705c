import unittest

from str8ts.core.constants import SolveKind, UrKind
from str8ts.core.models import SolveResult, SolveStep, SolveType, UrResult
from str8ts.engine.difficulty import get_puzzle_difficulty, puzzle_difficulty
from str8ts.engine.strategies import MAX_DIFFICULTY, Strategy, StrategyList, difficulty_of
from str8ts.io.puzzle_format import parse


def guess_with(step_count: int) -> SolveType:
    grid = parse(["."])
    steps = [SolveStep(grid, SolveResult.of(SolveKind.SINGLES), "step") for _ in range(step_count)]
    return SolveType.guess_step((0, 0), 1, steps, grid)


class PuzzleDifficultyTests(unittest.TestCase):
    def test_empty_history(self) -> None:
        rating = puzzle_difficulty([])
        self.assertEqual(rating.star_count, 0)
        self.assertEqual(rating.move_count, 0)

    def test_basic_history(self) -> None:
        rating = puzzle_difficulty(
            [SolveType.unit(SolveKind.UPDATE_IMPOSSIBLES), SolveType.unit(SolveKind.SINGLES)]
        )
        self.assertEqual(rating.star_count, 2)
        self.assertEqual(rating.move_count, 2)
        self.assertTrue(rating.basic_reductions)
        self.assertFalse(rating.sets)

    def test_fish_flags(self) -> None:
        rating = puzzle_difficulty([SolveType.fish(2), SolveType.fish(4)])
        self.assertTrue(rating.x_wing)
        self.assertFalse(rating.swordfish)
        self.assertEqual(rating.n_fish, 4)
        self.assertEqual(rating.star_count, 5)

    def test_guess_counts(self) -> None:
        rating = puzzle_difficulty([guess_with(3), guess_with(8), guess_with(12)])
        self.assertEqual(rating.short_guess_count, 1)
        self.assertEqual(rating.long_guess_count, 2)
        self.assertEqual(rating.star_count, 7)
        self.assertEqual(rating.move_count, 3)

    def test_terminal_steps_are_not_moves(self) -> None:
        rating = puzzle_difficulty(
            [SolveResult.of(SolveKind.SINGLES), SolveResult.of(SolveKind.PUZZLE_SOLVED)]
        )
        self.assertEqual(rating.move_count, 1)

    def test_star_count_never_drops(self) -> None:
        history = [
            SolveType.unit(SolveKind.MEDUSA),
            SolveType.unit(SolveKind.STRANDED),
            SolveType.sets(3),
            SolveType.setti([1, 2]),
        ]
        stars = [puzzle_difficulty(history[: i + 1]).star_count for i in range(len(history))]
        self.assertEqual(stars, sorted(stars))
        self.assertEqual(stars[-1], 6)

    def test_jsonable_keys(self) -> None:
        payload = puzzle_difficulty([SolveType.sets(2)]).to_jsonable()
        self.assertEqual(payload["star_count"], 4)
        self.assertTrue(payload["sets"])
        self.assertIn("long_guess_count", payload)


class DifficultyOfTests(unittest.TestCase):
    def test_tiers(self) -> None:
        self.assertEqual(difficulty_of(SolveType.unit(SolveKind.STRANDED)), 1)
        self.assertEqual(difficulty_of(SolveType.unit(SolveKind.DEFINITE_MIN_MAX)), 2)
        self.assertEqual(difficulty_of(SolveType.sets(2)), 4)
        self.assertEqual(difficulty_of(SolveType.y_wing((0, 0), 3)), 5)
        self.assertEqual(difficulty_of(SolveType.unit(SolveKind.MEDUSA)), 6)

    def test_unique_requirement_by_trial_is_harder(self) -> None:
        single = UrResult(UrKind.SINGLE_UNIQUE, 1, pos=(0, 0))
        trial = UrResult(UrKind.SOLUTION_CAUSES_CLOSED_SETS, 1, pos=(0, 0))
        self.assertEqual(difficulty_of(SolveType.unique_requirement(single)), 6)
        self.assertEqual(difficulty_of(SolveType.unique_requirement(trial)), 7)

    def test_bookkeeping_steps(self) -> None:
        self.assertEqual(difficulty_of(SolveType.unit(SolveKind.PUZZLE_SOLVED)), 1)
        self.assertEqual(difficulty_of(SolveType.unit(SolveKind.OUT_OF_BASIC_STRATS)), 0)
        self.assertEqual(difficulty_of(SolveType.start_guess((0, 0), 2)), 1)


class StrategyListTests(unittest.TestCase):
    def test_for_difficulty(self) -> None:
        two = StrategyList.for_difficulty(2)
        self.assertTrue(two.has(Strategy.SINGLES))
        self.assertFalse(two.has(Strategy.SETS))
        self.assertEqual(StrategyList.for_difficulty(MAX_DIFFICULTY), StrategyList.all())

    def test_no_guesses(self) -> None:
        strategies = StrategyList.no_guesses()
        self.assertFalse(strategies.has(Strategy.GUESS))
        self.assertFalse(strategies.has(Strategy.UNIQUE_REQUIREMENT_GUESS))
        self.assertTrue(strategies.has(Strategy.MEDUSA))

    def test_iteration_keeps_ladder_order(self) -> None:
        strategies = StrategyList([Strategy.SETS, Strategy.SINGLES])
        self.assertEqual(list(strategies), [Strategy.SINGLES, Strategy.SETS])

    def test_fast_is_basic_without_sets(self) -> None:
        self.assertEqual(StrategyList.fast(), StrategyList.basic().except_(Strategy.SETS))
        self.assertFalse(StrategyList.fast().has(Strategy.SETS))


class GetPuzzleDifficultyTests(unittest.TestCase):
    def test_simple_puzzle(self) -> None:
        rating = get_puzzle_difficulty(parse(["####", "#4.#", "#.##", "####"]))
        self.assertEqual(rating.star_count, 2)
        self.assertEqual(rating.move_count, 2)

    def test_unsolvable_without_guesses(self) -> None:
        self.assertIsNone(get_puzzle_difficulty(parse(["..", ".."]), StrategyList.no_guesses()))

    def test_ambiguous_puzzle(self) -> None:
        self.assertIsNone(get_puzzle_difficulty(parse(["..", ".."])))


if __name__ == "__main__":
    unittest.main()
