import io
import unittest

from str8ts.core.models import Cell, SolveType
from str8ts.core.constants import SolveKind
from str8ts.engine.difficulty import puzzle_difficulty
from str8ts.engine.solver import solve
from str8ts.io.puzzle_format import parse
from str8ts.utils.pretty import cell_symbol, format_difficulty, format_grid, print_solve_trace


class PrettyTests(unittest.TestCase):
    def test_cell_symbols(self) -> None:
        self.assertEqual(cell_symbol(Cell.black()), "#")
        self.assertEqual(cell_symbol(Cell.blocker(3)), "c")
        self.assertEqual(cell_symbol(Cell.solution(7)), "7")
        self.assertEqual(cell_symbol(Cell.indeterminate([1, 2])), ".")

    def test_format_grid(self) -> None:
        text = format_grid(parse(["1.", "#a"]))
        self.assertEqual(text.splitlines(), ["    1 2", "    ---", " 1 | 1 .", " 2 | # a"])

    def test_format_grid_with_candidates(self) -> None:
        text = format_grid(parse(["1.", "#a"]), candidates=True)
        self.assertIn("12", text)

    def test_format_difficulty(self) -> None:
        text = format_difficulty(puzzle_difficulty([SolveType.unit(SolveKind.SINGLES), SolveType.fish(2)]))
        self.assertIn("Stars:       5", text)
        self.assertIn("x wing", text)
        self.assertIn("Largest fish: 2", text)

    def test_solve_trace(self) -> None:
        stream = io.StringIO()
        print_solve_trace(solve(parse(["11", ".."])), stream=stream)
        first = stream.getvalue().splitlines()[0]
        self.assertEqual(first, "  1. [!] Cells (1, 1) and (2, 1) both contain 1")


if __name__ == "__main__":
    unittest.main()
