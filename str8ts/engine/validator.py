"""Deterministic consistency validation for str8ts grids."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..core.constants import ValidationErrorType
from ..core.exceptions import ValidationError
from ..core.models import Compartment, SolveMetadata, ValidationResult
from .grid import Grid
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


@dataclass
class ValidationOutcome:
    ok: bool
    error: Optional[ValidationResult] = None
    meta: SolveMetadata = field(default_factory=SolveMetadata)


class GridValidator:
    """Runs the consistency checks, cheapest first, stopping at the first failure."""

    def validate(self, grid: Grid) -> ValidationOutcome:
        try:
            self.check(grid)
        except ValidationError as exc:
            LOGGER.debug("Validation failed: %s", exc)
            return ValidationOutcome(ok=False, error=exc.result)
        return ValidationOutcome(ok=True)

    def check(self, grid: Grid) -> None:
        """Raise :class:`ValidationError` describing the first broken invariant."""

        self._check_conflicts(grid)
        for compartment in grid.compartments():
            check_compartment(compartment)
        if grid.has_requirements():
            self._check_requirements(grid)
        self._check_empty_cells(grid)

    def _check_conflicts(self, grid: Grid) -> None:
        for _vertical, _index, line in grid.lines():
            seen: Dict[int, tuple] = {}
            for pos, cell in line:
                value = cell.to_determinate()
                if value is None:
                    continue
                if value in seen:
                    raise ValidationError(ValidationResult.conflict(seen[value], pos, value))
                seen[value] = pos

    def _check_requirements(self, grid: Grid) -> None:
        for vertical, index, line in grid.lines():
            required = grid.line_requirements(vertical, index)
            forbidden = grid.line_forbidden(vertical, index)
            both = required & forbidden
            if both:
                raise ValidationError(
                    ValidationResult.line_issue(
                        ValidationErrorType.REQUIREMENT_BLOCKER_CONFLICT, vertical, index, min(both)
                    )
                )
            for number in sorted(required):
                if not any(number in cell.to_possibles() for _, cell in line):
                    raise ValidationError(
                        ValidationResult.line_issue(
                            ValidationErrorType.REQUIRED_NUMBER_MISSING, vertical, index, number
                        )
                    )
            for number in sorted(forbidden):
                if any(cell.to_req_or_sol() == number for _, cell in line):
                    raise ValidationError(
                        ValidationResult.line_issue(
                            ValidationErrorType.BLOCKED_NUMBER_PRESENT, vertical, index, number
                        )
                    )

    def _check_empty_cells(self, grid: Grid) -> None:
        for pos, candidates in grid.indeterminates():
            if not candidates:
                raise ValidationError(ValidationResult.empty_cell(pos))


def check_compartment(compartment: Compartment) -> None:
    """Committed numbers of a compartment must be able to form one straight."""

    placed = compartment.placed()
    if not placed:
        return
    available = set()
    for _, cell in compartment.cells:
        available |= cell.to_possibles()
    low, high = min(placed), max(placed)
    for number in range(low, high + 1):
        if number not in available:
            raise ValidationError(
                ValidationResult.sequence(
                    compartment.vertical, compartment.sample_pos(), low, high, number
                )
            )
    if high - low + 1 > len(compartment):
        raise ValidationError(
            ValidationResult.sequence_too_large(
                compartment.vertical, compartment.sample_pos(), low, high, len(compartment)
            )
        )


def compartment_valid(compartment: Compartment) -> bool:
    try:
        check_compartment(compartment)
    except ValidationError:
        return False
    return True


def validate(grid: Grid) -> ValidationOutcome:
    return GridValidator().validate(grid)
