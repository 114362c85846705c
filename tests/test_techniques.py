import unittest

from str8ts.core.constants import SolveKind, UrKind, ValidationErrorType
from str8ts.core.exceptions import ValidationError
from str8ts.core.models import Cell, Compartment, SolveMetadata
from str8ts.io.puzzle_format import parse
from str8ts.techniques.basic import singles, stranded, trivial, update_impossibles
from str8ts.techniques.enumerate_solutions import enumerate_solutions
from str8ts.techniques.fish import fish, y_wing
from str8ts.techniques.medusa import gather_pairs, medusa
from str8ts.techniques.ranges import definite_min_max, get_compartment_range, required_range
from str8ts.techniques.requirements import setti, update_required_and_forbidden
from str8ts.techniques.row_col_brute import row_col_brute
from str8ts.techniques.sets import sets
from str8ts.techniques.unique_requirement import (
    cross_compartment_unique,
    unique_requirement,
    would_become_free,
)


def det(*numbers: int) -> Cell:
    return Cell.indeterminate(numbers)


def full(size: int) -> Cell:
    return Cell.indeterminate(range(1, size + 1))


class TrivialTests(unittest.TestCase):
    def test_trivial_updates(self) -> None:
        grid = parse(["#.#", "..#", "#.."])
        grid.cells[0][1] = det(1)
        grid.cells[1][1] = det(1, 2)
        grid.cells[1][0] = det(2)
        grid.cells[2][2] = det(3)

        self.assertTrue(trivial(grid))

        self.assertEqual(grid.cells[0][0], Cell.black())
        self.assertEqual(grid.cells[0][1], Cell.solution(1))
        self.assertEqual(grid.cells[1][0], Cell.solution(2))
        self.assertEqual(grid.cells[1][1], det(1, 2))

    def test_required_forbidden_updates(self) -> None:
        grid = parse(["#.b", "..#", "#.."])
        grid.cells[0][1] = det(1)
        grid.cells[1][1] = det(1, 2)
        grid.cells[1][0] = det(2)
        grid.cells[2][2] = det(3)

        self.assertTrue(trivial(grid))
        grid.row_requirements[1].add(1)
        self.assertTrue(trivial(grid))

        self.assertEqual(grid.row_requirements, [{1}, {1, 2}, {3}])
        self.assertEqual(grid.col_requirements, [{2}, {1}, {3}])
        self.assertEqual(grid.row_forbidden, [{2, 3}, {3}, set()])
        self.assertEqual(grid.col_forbidden, [{1, 3}, set(), {1, 2}])


class BasicTechniqueTests(unittest.TestCase):
    def test_update_impossibles(self) -> None:
        grid = parse(["####", "#4.#", "#.##", "####"])
        result = update_impossibles(grid)
        self.assertEqual(result.kind, SolveKind.UPDATE_IMPOSSIBLES)
        self.assertEqual(grid.cells[1][1], Cell.requirement(4))
        self.assertEqual(grid.cells[2][1], det(1, 2, 3))
        self.assertEqual(grid.cells[1][2], det(1, 2, 3))

    def test_update_impossibles_no_progress(self) -> None:
        grid = parse(["####", "#..#", "####", "####"])
        self.assertIsNone(update_impossibles(grid))

    def test_singles(self) -> None:
        grid = parse(["...", ".##", ".##"])
        grid.cells[0][0] = det(1, 2)
        grid.cells[1][0] = det(1, 2)
        grid.cells[2][0] = det(1, 2, 3)
        grid.cells[0][1] = det(1, 2)
        grid.cells[0][2] = det(1, 2, 3)

        self.assertEqual(singles(grid).kind, SolveKind.SINGLES)
        self.assertEqual(grid.cells[2][0], Cell.solution(3))
        self.assertEqual(grid.cells[0][2], Cell.solution(3))

    def test_stranded(self) -> None:
        grid = parse(["####", "#..#", "#.##", "####"])
        grid.cells[1][1] = det(1, 2)
        grid.cells[2][1] = det(1, 2, 4)
        grid.cells[1][2] = det(1, 2, 4)

        self.assertEqual(stranded(grid).kind, SolveKind.STRANDED)
        self.assertEqual(grid.cells[1][1], det(1, 2))
        self.assertEqual(grid.cells[2][1], det(1, 2))
        self.assertEqual(grid.cells[1][2], det(1, 2))


class RangeTests(unittest.TestCase):
    def test_compartment_range(self) -> None:
        def comp(*cells: Cell) -> Compartment:
            return Compartment([((0, 0), cell) for cell in cells], False)

        self.assertEqual(get_compartment_range(1, comp(Cell.requirement(1))), (1, 1))
        self.assertEqual(get_compartment_range(2, comp(Cell.requirement(1), Cell.requirement(2))), (1, 2))
        self.assertEqual(get_compartment_range(3, comp(Cell.requirement(1), Cell.requirement(2))), (1, 2))
        self.assertEqual(get_compartment_range(4, comp(Cell.requirement(2), Cell.requirement(3))), (2, 3))
        self.assertEqual(get_compartment_range(4, comp(Cell.requirement(3), Cell.requirement(4))), (3, 4))
        self.assertEqual(get_compartment_range(1, comp(det(1))), (1, 1))

    def test_forced_compartment_range(self) -> None:
        cells = Compartment([((0, 0), det(1, 2, 3, 4, 5))] * 3, False)
        self.assertEqual(get_compartment_range(5, cells, 2), (1, 4))

    def test_definite_range(self) -> None:
        grid = parse(["####", "#4.#", "#.##", "####"])
        self.assertIsNotNone(update_impossibles(grid))
        self.assertEqual(definite_min_max(grid).kind, SolveKind.DEFINITE_MIN_MAX)
        self.assertEqual(grid.cells[1][1], Cell.requirement(4))
        self.assertEqual(grid.cells[2][1], det(3))
        self.assertEqual(grid.cells[1][2], det(3))

    def test_min_max_uses_line_requirements(self) -> None:
        grid = parse(["#########"] * 9)
        grid.cells[1][0] = det(1, 2, 3, 4, 5, 6, 7)
        grid.cells[1][1] = det(1, 2, 3, 4, 5, 6, 7)
        grid.cells[1][3] = det(4, 6)
        grid.cells[1][4] = det(3, 6, 7)
        grid.cells[1][5] = det(2, 5)
        grid.cells[1][7] = det(3, 4, 5)
        grid.cells[1][8] = det(3, 4, 5, 6)
        grid.row_requirements[1].update({1, 2, 3, 4, 5, 6, 7})

        self.assertIsNotNone(definite_min_max(grid))

        self.assertEqual(grid.cells[1][0], det(1, 2))
        self.assertEqual(grid.cells[1][1], det(1, 2))
        self.assertEqual(grid.cells[1][3], det(6))
        self.assertEqual(grid.cells[1][4], det(6, 7))
        self.assertEqual(grid.cells[1][5], det(5))
        self.assertEqual(grid.cells[1][7], det(3, 4))
        self.assertEqual(grid.cells[1][8], det(3, 4))

    def test_required_range(self) -> None:
        grid = parse(
            [
                "########",
                "#..##..#",
                "#.####.#",
                "########",
                "########",
                "#.####.#",
                "#..##..#",
                "########",
            ]
        )
        grid.cells[1][1] = det(1, 2)
        grid.cells[2][1] = det(1, 2)
        grid.cells[1][2] = det(1, 2)

        self.assertEqual(required_range(grid).kind, SolveKind.REQUIRED_RANGE)

        self.assertEqual(grid.cells[1][1], det(1, 2))
        self.assertEqual(grid.cells[5][1], det(3, 4, 5, 6, 7, 8))
        self.assertEqual(grid.cells[6][1], det(3, 4, 5, 6, 7, 8))
        self.assertEqual(grid.cells[6][2], full(8))
        self.assertEqual(grid.cells[1][5], det(3, 4, 5, 6, 7, 8))
        self.assertEqual(grid.cells[1][6], det(3, 4, 5, 6, 7, 8))
        self.assertEqual(grid.cells[2][6], full(8))
        self.assertEqual(grid.cells[6][6], full(8))


SETS_GRID = [
    "########",
    "#..##..#",
    "#.####.#",
    "#.######",
    "########",
    "#.####.#",
    "#..##..#",
    "########",
]


class SetsTests(unittest.TestCase):
    def _grid(self):
        grid = parse(SETS_GRID)
        grid.cells[1][1] = det(1, 2)
        grid.cells[1][2] = det(1, 2)
        grid.cells[2][1] = det(1, 2, 3)
        grid.cells[3][1] = det(1, 2, 3)
        return grid

    def test_sets(self) -> None:
        grid = self._grid()

        self.assertEqual(sets(grid).ty.number, 2)
        self.assertEqual(grid.cells[1][5], det(3, 4, 5, 6, 7, 8))
        self.assertEqual(grid.cells[1][6], det(3, 4, 5, 6, 7, 8))
        self.assertEqual(grid.cells[5][1], full(8))
        self.assertEqual(grid.cells[6][1], full(8))

        self.assertEqual(sets(grid).ty.number, 3)
        self.assertEqual(grid.cells[2][1], det(1, 2, 3))
        self.assertEqual(grid.cells[5][1], det(4, 5, 6, 7, 8))
        self.assertEqual(grid.cells[6][1], det(4, 5, 6, 7, 8))
        self.assertEqual(grid.cells[6][2], full(8))

    def test_sets_record_requirements(self) -> None:
        grid = self._grid()
        grid.row_requirements[0].add(1)

        self.assertEqual(sets(grid).ty.number, 2)
        self.assertEqual(grid.row_requirements[1], {1, 2})
        self.assertEqual(grid.col_requirements[1], set())

        self.assertEqual(sets(grid).ty.number, 3)
        self.assertEqual(grid.row_requirements[1], {1, 2})
        self.assertEqual(grid.col_requirements[1], {1, 2, 3})


class RequirementTests(unittest.TestCase):
    def test_update_required_and_forbidden(self) -> None:
        grid = parse(["1..", "b..", "..."])
        result = update_required_and_forbidden(grid)
        self.assertEqual(result.kind, SolveKind.REQUIRED_AND_FORBIDDEN)
        self.assertIn(1, grid.row_requirements[0])
        self.assertIn(1, grid.col_requirements[0])
        self.assertEqual(grid.row_forbidden[1], {2})
        self.assertEqual(grid.col_forbidden[0], {2})
        self.assertIsNone(update_required_and_forbidden(grid))

    def test_setti_decides_remaining_lines(self) -> None:
        grid = parse(["...", "...", "..."])
        # 1 sits in exactly two rows, so exactly two columns.
        grid.row_requirements[0].add(1)
        grid.row_requirements[1].add(1)
        grid.row_forbidden[2].add(1)
        grid.col_forbidden[0].add(1)
        # 2 is required in two columns and at most two rows.
        grid.col_requirements[0].add(2)
        grid.col_requirements[1].add(2)
        grid.row_forbidden[0].add(2)

        result = setti(grid)
        self.assertEqual(result.kind, SolveKind.SETTI)
        self.assertEqual(result.ty.numbers, (1, 2))
        self.assertEqual(grid.col_requirements[1], {1, 2})
        self.assertEqual(grid.col_requirements[2], {1})
        self.assertIn(2, grid.col_forbidden[2])
        self.assertEqual(grid.row_requirements[1], {1, 2})
        self.assertEqual(grid.row_requirements[2], {2})

    def test_setti_without_information(self) -> None:
        self.assertIsNone(setti(parse(["..", ".."])))


class WingTests(unittest.TestCase):
    def test_y_wing(self) -> None:
        grid = parse([".....", ".....", "..##.", "..#..", "....."])
        grid.cells[1][1] = det(1, 2)
        grid.cells[3][1] = det(2, 3)
        grid.cells[1][3] = det(1, 3)
        grid.cells[3][3] = det(1, 2, 3)

        result = y_wing(grid)
        self.assertEqual(result.kind, SolveKind.Y_WING)
        self.assertEqual(result.ty.pos, (3, 3))
        self.assertEqual(result.ty.number, 3)
        self.assertEqual(
            result.meta,
            SolveMetadata.from_lists(
                [
                    [
                        ((1, 1), 1), ((3, 1), 1), ((1, 3), 1),
                        ((1, 1), 2), ((3, 1), 2), ((1, 3), 2),
                        ((1, 1), 3), ((3, 1), 3), ((1, 3), 3),
                    ]
                ]
            ),
        )
        self.assertEqual(grid.cells[3][3], det(1, 2))

    def test_x_wing(self) -> None:
        grid = parse([".....", ".....", ".....", ".....", "....."])
        for y in (0, 1):
            for x in (0, 1, 4):
                grid.cells[y][x] = det(1, 2, 4, 5)
            grid.row_requirements[y].add(3)

        result = fish(grid)
        self.assertEqual(result.kind, SolveKind.FISH)
        self.assertEqual(result.ty.number, 2)
        self.assertEqual(
            result.meta,
            SolveMetadata.from_lists([[((2, 0), 3), ((2, 1), 3), ((3, 0), 3), ((3, 1), 3)]]),
        )
        for y in (2, 3, 4):
            self.assertEqual(grid.cells[y][2], det(1, 2, 4, 5))
            self.assertEqual(grid.cells[y][3], det(1, 2, 4, 5))
        self.assertIn(3, grid.col_requirements[2])
        self.assertIn(3, grid.col_requirements[3])


class MedusaTests(unittest.TestCase):
    def _grid(self):
        grid = parse(["...", "...", "..."])
        grid.cells[0][0] = det(1, 2, 3)
        grid.cells[0][1] = det(1, 2)
        grid.cells[0][2] = det(3)
        grid.row_requirements[0].update({1, 2})
        return grid

    def test_gather_pairs_links_only_required_numbers(self) -> None:
        pairs = gather_pairs(self._grid())
        self.assertEqual(pairs[((0, 0), 1)], {(1, 0)})
        self.assertEqual(pairs[((1, 0), 2)], {(0, 0)})
        self.assertNotIn(((0, 0), 3), pairs)

    def test_both_colours_in_one_cell(self) -> None:
        grid = self._grid()
        result = medusa(grid)
        self.assertEqual(result.kind, SolveKind.MEDUSA)
        self.assertEqual(grid.cells[0][0], det(1, 2))
        self.assertEqual(
            result.meta,
            SolveMetadata.from_lists(
                [[((0, 0), 1), ((1, 0), 2)], [((0, 0), 2), ((1, 0), 1)]]
            ),
        )


class UniqueRequirementTests(unittest.TestCase):
    def _cross_grid(self):
        grid = parse(
            [
                "#######",
                "##..#.#",
                "#######",
                "##..#.#",
                "##..#.#",
                "#######",
                "#######",
            ]
        )
        grid.cells[1][2] = det(1, 2, 3)
        grid.cells[1][3] = det(1, 2, 3)
        grid.cells[1][5] = det(1, 5)
        grid.cells[3][5] = det(1, 2, 3)
        grid.cells[4][5] = det(1, 2, 3)
        for y in (3, 4):
            for x in (2, 3):
                grid.cells[y][x] = det(1, 2, 3, 4)
        return grid

    def test_cross_compartment(self) -> None:
        grid = self._cross_grid()
        res = cross_compartment_unique(grid, (5, 1), grid.cell((5, 1)).candidates)
        self.assertEqual(res.kind, UrKind.SINGLE_UNIQUE)
        self.assertEqual((res.pos, res.number), ((5, 1), 5))
        self.assertEqual(grid.cells[1][5], Cell.solution(5))
        self.assertEqual(grid.cells[3][5], det(1, 2, 3))

    def test_cross_compartment_ambiguous(self) -> None:
        grid = self._cross_grid()
        grid.cells[1][5] = det(4, 5)
        with self.assertRaises(ValidationError) as ctx:
            cross_compartment_unique(grid, (5, 1), grid.cell((5, 1)).candidates)
        self.assertEqual(ctx.exception.result.kind, ValidationErrorType.AMBIGUOUS)

    def test_unique_requirement_wraps_result(self) -> None:
        grid = self._cross_grid()
        result = unique_requirement(grid)
        self.assertEqual(result.kind, SolveKind.UNIQUE_REQUIREMENT)
        self.assertEqual(result.ty.unique.kind, UrKind.SINGLE_UNIQUE)

    def test_would_become_free(self) -> None:
        grid = parse(["..##", "####", "####", "####"])
        grid.cells[0][0] = det(1, 2, 3)
        grid.cells[0][1] = det(1, 2, 3)
        res = would_become_free(grid, (0, 0), grid.cell((0, 0)).candidates)
        self.assertEqual(res.kind, UrKind.SINGLE_CELL_WOULD_BECOME_FREE)
        self.assertEqual((res.pos, res.number), ((1, 0), 2))
        self.assertEqual(grid.cells[0][1], det(1, 3))


class RowColBruteTests(unittest.TestCase):
    def test_row_col_brute(self) -> None:
        grid = parse([".#..#", "#####", ".####", ".####", "#####"])
        grid.cells[0][0] = det(1, 3)
        grid.cells[0][2] = det(1, 2, 3)
        grid.cells[0][3] = det(1, 2, 3)
        grid.cells[2][0] = det(1, 2, 3)
        grid.cells[3][0] = det(1, 2, 3)

        self.assertIsNotNone(update_required_and_forbidden(grid))
        self.assertEqual(grid.row_requirements[0], {2})
        self.assertEqual(grid.col_requirements[0], {2})
        self.assertNotIn(4, grid.col_forbidden[0])

        self.assertEqual(row_col_brute(grid).kind, SolveKind.ROW_COL_BRUTE)
        self.assertTrue({1, 2, 3} <= grid.row_requirements[0])
        self.assertTrue({1, 2, 3} <= grid.col_requirements[0])
        self.assertIn(4, grid.col_forbidden[0])

    def test_partial_row_brute(self) -> None:
        grid = parse(
            [
                ".#....#..",
                "#########",
                ".########",
                ".########",
                ".########",
                ".########",
                "#########",
                ".########",
                ".########",
            ]
        )
        line = [
            det(1, 2, 3, 4),
            None,
            det(2, 3, 4, 5, 6, 8),
            det(3, 4, 5, 7),
            det(3, 4, 5, 6),
            det(2, 3, 4, 5, 6),
            None,
            det(7, 8, 9),
            det(6, 8, 9),
        ]
        for i, cell in enumerate(line):
            if cell is not None:
                grid.cells[0][i] = cell
                grid.cells[i][0] = cell

        self.assertIsNotNone(update_required_and_forbidden(grid))
        self.assertIsNotNone(row_col_brute(grid))

        self.assertEqual(grid.cells[0][2], det(2, 3, 4, 5, 6))
        self.assertEqual(grid.cells[2][0], det(2, 3, 4, 5, 6))


class EnumerateSolutionsTests(unittest.TestCase):
    def test_no_solutions(self) -> None:
        grid = parse(["..", ".."])
        grid.cells[0][0] = det(1)
        grid.cells[0][1] = det(1)
        with self.assertRaises(ValidationError) as ctx:
            enumerate_solutions(grid)
        self.assertEqual(ctx.exception.result.kind, ValidationErrorType.NO_SOLUTIONS)

    def test_one_solution(self) -> None:
        grid = parse(["1.", "21"])
        result = enumerate_solutions(grid)
        self.assertEqual(result.kind, SolveKind.ENUMERATE_SOLUTIONS)
        self.assertEqual(grid.cells[0][1], Cell.solution(2))

    def test_multiple_solutions(self) -> None:
        grid = parse(["..", ".."])
        with self.assertRaises(ValidationError) as ctx:
            enumerate_solutions(grid)
        error = ctx.exception.result
        self.assertEqual(error.kind, ValidationErrorType.AMBIGUOUS)
        self.assertEqual(error.details["cells"], ((0, 0), (1, 0), (0, 1), (1, 1)))
        self.assertEqual(len(error.meta.colors), 2)

    def test_over_limit(self) -> None:
        grid = parse(["....."] * 5)
        self.assertIsNone(enumerate_solutions(grid))


if __name__ == "__main__":
    unittest.main()
