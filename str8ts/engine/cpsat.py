"""CP-SAT model of a str8ts grid using OR-Tools.

Used for three jobs: filling an empty layout during generation, proving a
candidate puzzle has a unique solution, and enumerating the last few
solutions when logical techniques run dry.
"""

from __future__ import annotations

import random
from typing import Dict, List, Optional, Tuple, Union

from ortools.sat.python import cp_model

from ..core.constants import CellType, Point
from ..core.models import Cell
from .grid import Grid
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

CellVar = Union[cp_model.IntVar, int]


def build_model(grid: Grid) -> Optional[Tuple[cp_model.CpModel, Dict[Point, CellVar]]]:
    """Translate ``grid`` into a CP-SAT model.

    Returns None when some open cell has no value left once the line's
    forbidden numbers are taken out, since the model would be trivially
    infeasible.
    """

    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: Cell variables
    # ------------------------------------------------------------------
    cell_vars: Dict[Point, CellVar] = {}
    for (x, y), cell in grid.iter_cells():
        value = cell.to_req_or_sol()
        if value is not None:
            cell_vars[(x, y)] = value
        elif cell.is_indeterminate():
            domain = sorted(cell.candidates - grid.row_forbidden[y] - grid.col_forbidden[x])
            if not domain:
                LOGGER.debug("Cell (%d,%d) has an empty domain", x, y)
                return None
            cell_vars[(x, y)] = model.new_int_var_from_domain(
                cp_model.Domain.from_values(domain), f"c_{x}_{y}"
            )

    # ------------------------------------------------------------------
    # Step 2: Line constraints
    # ------------------------------------------------------------------
    for vertical, index, line in grid.lines():
        members: List[CellVar] = []
        for pos, cell in line:
            if cell.type == CellType.BLOCKER:
                members.append(cell.value)
            elif pos in cell_vars:
                members.append(cell_vars[pos])
        if len(members) > 1:
            model.add_all_different(members)

        for number in sorted(grid.line_requirements(vertical, index)):
            if not _add_requirement(model, [cell_vars[pos] for pos, _ in line if pos in cell_vars], number):
                LOGGER.debug("Required %d cannot fit line %d", number, index)
                return None

    # ------------------------------------------------------------------
    # Step 3: Compartments form straights
    # ------------------------------------------------------------------
    for compartment in grid.compartments():
        if len(compartment) < 2:
            continue
        members = [cell_vars[pos] for pos in compartment.positions()]
        low = model.new_int_var(1, grid.size, f"lo_{compartment.vertical:d}_{compartment.sample_pos()}")
        high = model.new_int_var(1, grid.size, f"hi_{compartment.vertical:d}_{compartment.sample_pos()}")
        model.add_min_equality(low, members)
        model.add_max_equality(high, members)
        model.add(high - low == len(compartment) - 1)

    return model, cell_vars


def _add_requirement(model: cp_model.CpModel, members: List[CellVar], number: int) -> bool:
    """At least one member of the line takes ``number``."""

    flags = []
    for var in members:
        if not isinstance(var, cp_model.IntVar):
            if var == number:
                return True
            continue
        flag = model.new_bool_var(f"req_{var.name}_{number}")
        # Fully reified so enumeration sees one model solution per grid.
        model.add(var == number).only_enforce_if(flag)
        model.add(var != number).only_enforce_if(~flag)
        flags.append(flag)
    if not flags:
        return False
    model.add_bool_or(flags)
    return True


def _resolve_var(value_of, var_or_const: CellVar) -> int:
    if isinstance(var_or_const, cp_model.IntVar):
        return value_of(var_or_const)
    return var_or_const


def _solved_grid(grid: Grid, cell_vars: Dict[Point, CellVar], value_of) -> Grid:
    solved = grid.clone()
    for pos, var in cell_vars.items():
        if isinstance(var, cp_model.IntVar):
            solved.set_cell(pos, Cell.solution(_resolve_var(value_of, var)))
    return solved


class _SolutionCollector(cp_model.CpSolverSolutionCallback):
    """Collects solved grids until ``limit`` is reached."""

    def __init__(self, grid: Grid, cell_vars: Dict[Point, CellVar], limit: int) -> None:
        super().__init__()
        self._grid = grid
        self._cell_vars = cell_vars
        self._limit = limit
        self.solutions: List[Grid] = []

    def on_solution_callback(self) -> None:
        self.solutions.append(_solved_grid(self._grid, self._cell_vars, self.value))
        if len(self.solutions) >= self._limit:
            self.stop_search()


def find_solutions(grid: Grid, limit: int = 2, timeout: float = 10.0) -> List[Grid]:
    """Up to ``limit`` fully solved versions of ``grid``."""

    built = build_model(grid)
    if built is None:
        return []
    model, cell_vars = built

    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.num_workers = 1
    solver.parameters.enumerate_all_solutions = True

    collector = _SolutionCollector(grid, cell_vars, limit)
    status = solver.solve(model, collector)
    LOGGER.debug(
        "CP-SAT enumeration: %d solution(s), status=%s, %.2fs",
        len(collector.solutions),
        solver.status_name(status),
        solver.wall_time,
    )
    return collector.solutions


def count_solutions(grid: Grid, limit: int = 2, timeout: float = 10.0) -> int:
    """Number of solutions, saturating at ``limit``."""

    return len(find_solutions(grid, limit, timeout))


def has_unique_solution(grid: Grid, timeout: float = 10.0) -> bool:
    return count_solutions(grid, 2, timeout) == 1


def fill_grid(grid: Grid, rng: random.Random, timeout: float = 10.0) -> Optional[Grid]:
    """Solve an open layout into a random complete grid.

    Randomised hints and a solver seed drawn from ``rng`` keep fills varied
    while staying reproducible for a fixed generator seed.
    """

    built = build_model(grid)
    if built is None:
        return None
    model, cell_vars = built
    for var in cell_vars.values():
        if isinstance(var, cp_model.IntVar):
            model.add_hint(var, rng.randint(1, grid.size))

    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.num_workers = 1
    solver.parameters.random_seed = rng.randrange(2 ** 31)
    solver.parameters.randomize_search = True

    LOGGER.info(
        "CP-SAT: filling %dx%d layout with %d open cells (timeout=%0.1fs)...",
        grid.size,
        grid.size,
        sum(1 for v in cell_vars.values() if isinstance(v, cp_model.IntVar)),
        timeout,
    )
    status = solver.solve(model)
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        LOGGER.warning("CP-SAT: no fill found (status=%s)", solver.status_name(status))
        return None

    LOGGER.info("CP-SAT: fill found in %.2fs", solver.wall_time)
    return _solved_grid(grid, cell_vars, solver.value)
