"""Data models supporting the str8ts engine.

Every structured value the engine hands out is a closed tagged record: the
``kind``/``type`` enum names the variant and the remaining fields carry its
payload.  ``to_jsonable`` produces the wire form, where unit variants are bare
strings and all other variants are single-key objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .constants import (
    CellType,
    Point,
    SolveKind,
    UNIT_SOLVE_KINDS,
    UNIT_VALIDATION_ERRORS,
    UrKind,
    ValidationErrorType,
)

if TYPE_CHECKING:
    from ..engine.grid import Grid


ColorClass = Tuple[Tuple[Point, int], ...]


def _point(raw: Sequence[int]) -> Point:
    return (int(raw[0]), int(raw[1]))


def _human(pos: Point) -> str:
    return f"({pos[0] + 1}, {pos[1] + 1})"


def _human_list(points: Iterable[Point]) -> str:
    return "[" + ", ".join(_human(p) for p in points) + "]"


def english_list(items: Sequence[Any]) -> str:
    """Join items as ``a, b and c``."""

    if not items:
        return ""
    if len(items) == 1:
        return str(items[0])
    return ", ".join(str(item) for item in items[:-1]) + f" and {items[-1]}"


# ----------------------------------------------------------------------
# Cells and compartments
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Cell:
    """A single grid cell. Cells are immutable; grids swap them out."""

    type: CellType
    value: Optional[int] = None
    candidates: FrozenSet[int] = frozenset()

    @classmethod
    def black(cls) -> Cell:
        return cls(CellType.BLACK)

    @classmethod
    def requirement(cls, value: int) -> Cell:
        return cls(CellType.REQUIREMENT, value)

    @classmethod
    def blocker(cls, value: int) -> Cell:
        return cls(CellType.BLOCKER, value)

    @classmethod
    def solution(cls, value: int) -> Cell:
        return cls(CellType.SOLUTION, value)

    @classmethod
    def indeterminate(cls, candidates: Iterable[int]) -> Cell:
        return cls(CellType.INDETERMINATE, None, frozenset(candidates))

    def is_indeterminate(self) -> bool:
        return self.type == CellType.INDETERMINATE

    def is_compartment_cell(self) -> bool:
        return self.type in (CellType.REQUIREMENT, CellType.SOLUTION, CellType.INDETERMINATE)

    def to_determinate(self) -> Optional[int]:
        if self.type in (CellType.REQUIREMENT, CellType.SOLUTION, CellType.BLOCKER):
            return self.value
        return None

    def to_req_or_sol(self) -> Optional[int]:
        if self.type in (CellType.REQUIREMENT, CellType.SOLUTION):
            return self.value
        return None

    def to_possibles(self) -> FrozenSet[int]:
        if self.type in (CellType.REQUIREMENT, CellType.SOLUTION):
            return frozenset((self.value,))
        if self.type == CellType.INDETERMINATE:
            return self.candidates
        return frozenset()

    def to_unresolved(self) -> FrozenSet[int]:
        return self.candidates if self.type == CellType.INDETERMINATE else frozenset()

    def to_jsonable(self) -> Any:
        if self.type == CellType.BLACK:
            return self.type.value
        if self.type == CellType.INDETERMINATE:
            return {self.type.value: sorted(self.candidates)}
        return {self.type.value: self.value}

    @classmethod
    def from_jsonable(cls, raw: Any) -> Cell:
        if raw == CellType.BLACK.value:
            return cls.black()
        (tag, payload), = raw.items()
        cell_type = CellType(tag)
        if cell_type == CellType.INDETERMINATE:
            return cls.indeterminate(int(n) for n in payload)
        return cls(cell_type, int(payload))

    def __repr__(self) -> str:
        if self.type == CellType.BLACK:
            return "Black"
        if self.type == CellType.INDETERMINATE:
            return f"Indeterminate({sorted(self.candidates)})"
        return f"{self.type.value}({self.value})"


CellPair = Tuple[Point, Cell]


@dataclass
class Compartment:
    """A maximal run of non-black, non-blocker cells within one line."""

    cells: List[CellPair]
    vertical: bool

    def __len__(self) -> int:
        return len(self.cells)

    def sample_pos(self) -> Point:
        return self.cells[0][0]

    def positions(self) -> List[Point]:
        return [pos for pos, _ in self.cells]

    def contains(self, num: int) -> bool:
        return any(num in cell.to_possibles() for _, cell in self.cells)

    def contains_pos(self, pos: Point) -> bool:
        return any(p == pos for p, _ in self.cells)

    def unresolved(self) -> List[Tuple[Point, FrozenSet[int]]]:
        return [(pos, cell.candidates) for pos, cell in self.cells if cell.is_indeterminate()]

    def combined_unresolved(self) -> FrozenSet[int]:
        combined: FrozenSet[int] = frozenset()
        for _, cell in self.cells:
            combined = combined | cell.to_unresolved()
        return combined

    def placed(self) -> List[int]:
        return [cell.value for _, cell in self.cells if cell.to_req_or_sol() is not None]


# ----------------------------------------------------------------------
# Metadata and validation results
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class SolveMetadata:
    """Colour classes attached to a step for downstream visualisation."""

    colors: Tuple[ColorClass, ...] = ()

    @classmethod
    def from_lists(cls, colors: Iterable[Iterable[Tuple[Point, int]]]) -> SolveMetadata:
        return cls(tuple(tuple((tuple(pos), int(n)) for pos, n in group) for group in colors))

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "colors": [[[list(pos), num] for pos, num in group] for group in self.colors]
        }

    @classmethod
    def from_jsonable(cls, raw: Optional[Dict[str, Any]]) -> SolveMetadata:
        if not raw:
            return cls()
        return cls.from_lists(
            [(_point(pos), num) for pos, num in group] for group in raw.get("colors", [])
        )


@dataclass(frozen=True)
class ValidationResult:
    """Why a grid is inconsistent.

    ``details`` holds the variant payload keyed exactly as on the wire, with
    points stored as ``(x, y)`` tuples.
    """

    kind: ValidationErrorType
    details: Dict[str, Any] = field(default_factory=dict)
    meta: SolveMetadata = field(default_factory=SolveMetadata)

    @classmethod
    def empty_cell(cls, pos: Point) -> ValidationResult:
        return cls(ValidationErrorType.EMPTY_CELL, {"pos": pos})

    @classmethod
    def conflict(cls, pos1: Point, pos2: Point, val: int) -> ValidationResult:
        return cls(ValidationErrorType.CONFLICT, {"pos1": pos1, "pos2": pos2, "val": val})

    @classmethod
    def sequence(cls, vertical: bool, top_left: Point, low: int, high: int, missing: int) -> ValidationResult:
        return cls(
            ValidationErrorType.SEQUENCE,
            {"vertical": vertical, "top_left": top_left, "range": (low, high), "missing": missing},
        )

    @classmethod
    def sequence_too_large(cls, vertical: bool, top_left: Point, low: int, high: int, length: int) -> ValidationResult:
        return cls(
            ValidationErrorType.SEQUENCE_TOO_LARGE,
            {
                "vertical": vertical,
                "top_left": top_left,
                "contains": (low, high),
                "max_ranges": ((low, low + length - 1), (high + 1 - length, high)),
            },
        )

    @classmethod
    def line_issue(cls, kind: ValidationErrorType, vertical: bool, index: int, number: int) -> ValidationResult:
        return cls(kind, {"vertical": vertical, "index": index, "number": number})

    @classmethod
    def ambiguous(cls, cells: Iterable[Point], meta: Optional[SolveMetadata] = None) -> ValidationResult:
        return cls(ValidationErrorType.AMBIGUOUS, {"cells": tuple(cells)}, meta or SolveMetadata())

    @classmethod
    def no_solutions(cls) -> ValidationResult:
        return cls(ValidationErrorType.NO_SOLUTIONS)

    @classmethod
    def out_of_strats(cls) -> ValidationResult:
        return cls(ValidationErrorType.OUT_OF_STRATS)

    def __str__(self) -> str:
        d = self.details
        kind = self.kind
        if kind == ValidationErrorType.EMPTY_CELL:
            return f"Cell scan: Cell {_human(d['pos'])} ran out of possible options"
        if kind == ValidationErrorType.CONFLICT:
            return f"Cells {_human(d['pos1'])} and {_human(d['pos2'])} both contain {d['val']}"
        if kind == ValidationErrorType.SEQUENCE:
            low, high = d["range"]
            return (
                f"Compartment scan: {'Vertical' if d['vertical'] else 'Horizontal'} compartment "
                f"starting from {_human(d['top_left'])} contains numbers {low} and {high}, "
                f"but it doesn't contain {d['missing']} making it non-contiguous"
            )
        if kind == ValidationErrorType.SEQUENCE_TOO_LARGE:
            low, high = d["contains"]
            (min_a, max_a), (min_b, max_b) = d["max_ranges"]
            return (
                f"Compartment scan: {'Vertical' if d['vertical'] else 'Horizontal'} compartment "
                f"starting from {_human(d['top_left'])} contains numbers {low} and {high}, "
                f"but it's too small for them as it can either contain {min_a} to {max_a} "
                f"or {min_b} to {max_b}"
            )
        if kind in (
            ValidationErrorType.REQUIREMENT_BLOCKER_CONFLICT,
            ValidationErrorType.REQUIRED_NUMBER_MISSING,
            ValidationErrorType.BLOCKED_NUMBER_PRESENT,
        ):
            line = "column" if d["vertical"] else "row"
            number, index = d["number"], d["index"] + 1
            if kind == ValidationErrorType.REQUIREMENT_BLOCKER_CONFLICT:
                return f"The number {number} is included both in required and blocked numbers for {line} {index}"
            if kind == ValidationErrorType.REQUIRED_NUMBER_MISSING:
                return f"The number {number} is required in {line} {index} but not present in any container"
            return f"The number {number} is forbidden in {line} {index} but is a solution or a requirement"
        if kind == ValidationErrorType.AMBIGUOUS:
            return "Grid is ambiguous, and cannot be solved"
        if kind == ValidationErrorType.NO_SOLUTIONS:
            return "Exhaustive search proves grid has no solutions"
        return "Ran out of strategies!"

    def ty_jsonable(self) -> Any:
        if self.kind in UNIT_VALIDATION_ERRORS:
            return self.kind.value
        payload: Dict[str, Any] = {}
        for key, value in self.details.items():
            if key in ("pos", "pos1", "pos2", "top_left", "range", "contains"):
                payload[key] = list(value)
            elif key == "max_ranges":
                payload[key] = [list(part) for part in value]
            elif key == "cells":
                payload[key] = [list(p) for p in value]
            else:
                payload[key] = value
        return {self.kind.value: payload}

    def to_jsonable(self) -> Dict[str, Any]:
        return {"ty": self.ty_jsonable(), "meta": self.meta.to_jsonable()}

    @classmethod
    def from_jsonable(cls, raw: Dict[str, Any]) -> ValidationResult:
        ty = raw["ty"]
        meta = SolveMetadata.from_jsonable(raw.get("meta"))
        if isinstance(ty, str):
            return cls(ValidationErrorType(ty), {}, meta)
        (tag, payload), = ty.items()
        details: Dict[str, Any] = {}
        for key, value in payload.items():
            if key in ("pos", "pos1", "pos2", "top_left", "range", "contains"):
                details[key] = _point(value)
            elif key == "max_ranges":
                details[key] = (_point(value[0]), _point(value[1]))
            elif key == "cells":
                details[key] = tuple(_point(p) for p in value)
            else:
                details[key] = value
        return cls(ValidationErrorType(tag), details, meta)


# ----------------------------------------------------------------------
# Technique steps
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class UrResult:
    """Outcome of one unique requirement sub-case."""

    kind: UrKind
    number: int
    pos: Optional[Point] = None
    cells: Tuple[Point, ...] = ()
    vertical: bool = False

    def __str__(self) -> str:
        kind = self.kind
        if kind == UrKind.SINGLE_UNIQUE:
            return f"{_human(self.pos)} must be {self.number}, as other solutions would be ambiguous"
        if kind in (UrKind.INTRA_COMPARTMENT_UNIQUE, UrKind.SINGLE_CELL_WOULD_BECOME_FREE):
            return f"{_human(self.pos)} cannot be {self.number}, as it would cause ambiguous solutions"
        if kind == UrKind.CLOSED_SET_COMPARTMENT:
            return (
                f"The cells {_human_list(self.cells)} must contain {self.number} "
                "or the puzzle becomes ambiguous"
            )
        if kind == UrKind.UR_SETTI:
            return (
                f"The {'columns' if self.vertical else 'rows'} containing points "
                f"{_human_list(self.cells)} must contain {self.number}, or the puzzle becomes ambiguous"
            )
        return (
            f"Setting {_human(self.pos)} to {self.number} creates closed sets, "
            "causing puzzle to become ambiguous"
        )

    def to_jsonable(self) -> Dict[str, Any]:
        if self.kind == UrKind.CLOSED_SET_COMPARTMENT:
            payload: List[Any] = [[list(p) for p in self.cells], self.number]
        elif self.kind == UrKind.UR_SETTI:
            payload = [[list(p) for p in self.cells], self.vertical, self.number]
        else:
            payload = [list(self.pos), self.number]
        return {self.kind.value: payload}

    @classmethod
    def from_jsonable(cls, raw: Dict[str, Any]) -> UrResult:
        (tag, payload), = raw.items()
        kind = UrKind(tag)
        if kind == UrKind.CLOSED_SET_COMPARTMENT:
            return cls(kind, payload[1], cells=tuple(_point(p) for p in payload[0]))
        if kind == UrKind.UR_SETTI:
            return cls(kind, payload[2], cells=tuple(_point(p) for p in payload[0]), vertical=payload[1])
        return cls(kind, payload[1], pos=_point(payload[0]))


@dataclass(frozen=True)
class SolveType:
    """Which technique fired, with its payload."""

    kind: SolveKind
    number: Optional[int] = None
    pos: Optional[Point] = None
    numbers: Tuple[int, ...] = ()
    unique: Optional[UrResult] = None
    steps: Tuple["SolveStep", ...] = ()
    grid: Optional["Grid"] = None
    end: Optional[ValidationResult] = None

    @classmethod
    def unit(cls, kind: SolveKind) -> SolveType:
        return cls(kind)

    @classmethod
    def sets(cls, size: int) -> SolveType:
        return cls(SolveKind.SETS, number=size)

    @classmethod
    def fish(cls, size: int) -> SolveType:
        return cls(SolveKind.FISH, number=size)

    @classmethod
    def setti(cls, numbers: Iterable[int]) -> SolveType:
        return cls(SolveKind.SETTI, numbers=tuple(sorted(numbers)))

    @classmethod
    def y_wing(cls, pos: Point, number: int) -> SolveType:
        return cls(SolveKind.Y_WING, number=number, pos=pos)

    @classmethod
    def unique_requirement(cls, result: UrResult) -> SolveType:
        return cls(SolveKind.UNIQUE_REQUIREMENT, unique=result)

    @classmethod
    def start_guess(cls, pos: Point, number: int) -> SolveType:
        return cls(SolveKind.START_GUESS, number=number, pos=pos)

    @classmethod
    def guess_step(cls, pos: Point, number: int, steps: Iterable["SolveStep"], grid: "Grid") -> SolveType:
        return cls(SolveKind.GUESS_STEP, number=number, pos=pos, steps=tuple(steps), grid=grid)

    @classmethod
    def end_guess(cls, end: ValidationResult) -> SolveType:
        return cls(SolveKind.END_GUESS, end=end)

    def __str__(self) -> str:
        kind = self.kind
        if kind == SolveKind.SETS:
            return f"Find out sets of {self.number} numbers"
        if kind == SolveKind.SETTI:
            return f"Calculate settis on {english_list(list(self.numbers))}"
        if kind == SolveKind.Y_WING:
            return f"Y-Wing causes {_human(self.pos)} to not be {self.number}"
        if kind == SolveKind.FISH:
            if self.number == 2:
                return "Calculate a X-wing"
            if self.number == 3:
                return "Calculate a Swordfish"
            return f"Calculate a {self.number}-fish"
        if kind == SolveKind.UNIQUE_REQUIREMENT:
            return str(self.unique)
        if kind == SolveKind.START_GUESS:
            return f"Start guess with {_human(self.pos)} = {self.number}"
        if kind == SolveKind.GUESS_STEP:
            return (
                f"{_human(self.pos)} cannot be {self.number}, "
                f"as it causes a conflict in {len(self.steps)} steps"
            )
        if kind == SolveKind.END_GUESS:
            return str(self.end)
        return _UNIT_TEXT[kind]

    def to_jsonable(self) -> Any:
        kind = self.kind
        if kind in UNIT_SOLVE_KINDS:
            return kind.value
        if kind in (SolveKind.SETS, SolveKind.FISH):
            payload: Any = self.number
        elif kind == SolveKind.SETTI:
            payload = list(self.numbers)
        elif kind in (SolveKind.Y_WING, SolveKind.START_GUESS):
            payload = [list(self.pos), self.number]
        elif kind == SolveKind.UNIQUE_REQUIREMENT:
            payload = self.unique.to_jsonable()
        elif kind == SolveKind.GUESS_STEP:
            payload = [
                list(self.pos),
                self.number,
                [step.to_jsonable() for step in self.steps],
                self.grid.to_jsonable(),
            ]
        else:
            payload = self.end.to_jsonable()
        return {kind.value: payload}

    @classmethod
    def from_jsonable(cls, raw: Any) -> SolveType:
        from ..engine.grid import Grid

        if isinstance(raw, str):
            return cls(SolveKind(raw))
        (tag, payload), = raw.items()
        kind = SolveKind(tag)
        if kind in (SolveKind.SETS, SolveKind.FISH):
            return cls(kind, number=payload)
        if kind == SolveKind.SETTI:
            return cls.setti(payload)
        if kind in (SolveKind.Y_WING, SolveKind.START_GUESS):
            return cls(kind, number=payload[1], pos=_point(payload[0]))
        if kind == SolveKind.UNIQUE_REQUIREMENT:
            return cls.unique_requirement(UrResult.from_jsonable(payload))
        if kind == SolveKind.GUESS_STEP:
            return cls.guess_step(
                _point(payload[0]),
                payload[1],
                [SolveStep.from_jsonable(step) for step in payload[2]],
                Grid.from_jsonable(payload[3]),
            )
        return cls.end_guess(ValidationResult.from_jsonable(payload))


_UNIT_TEXT = {
    SolveKind.UPDATE_IMPOSSIBLES: "Remove trivially impossible numbers",
    SolveKind.SINGLES: "Find hidden singles",
    SolveKind.STRANDED: "Remove stranded numbers",
    SolveKind.DEFINITE_MIN_MAX: "Remove unreachable numbers from compartments",
    SolveKind.REQUIRED_RANGE: "Remove numbers from other compartments if they are required in others",
    SolveKind.REQUIRED_AND_FORBIDDEN: "List required numbers and blocked numbers",
    SolveKind.ROW_COL_BRUTE: "Think very hard about possible combinations in rows and columns",
    SolveKind.MEDUSA: "Calculate a 3D Medusa",
    SolveKind.PUZZLE_SOLVED: "Puzzle solved",
    SolveKind.ENUMERATE_SOLUTIONS: "Enumerate all possible solutions",
    SolveKind.OUT_OF_BASIC_STRATS: "Out of basic strats",
}


@dataclass(frozen=True)
class SolveResult:
    """A fired technique plus its visualisation metadata."""

    ty: SolveType
    meta: SolveMetadata = field(default_factory=SolveMetadata)

    @classmethod
    def of(cls, kind: SolveKind) -> SolveResult:
        return cls(SolveType.unit(kind))

    @property
    def kind(self) -> SolveKind:
        return self.ty.kind

    def __str__(self) -> str:
        return str(self.ty)

    def to_jsonable(self) -> Dict[str, Any]:
        return {"ty": self.ty.to_jsonable(), "meta": self.meta.to_jsonable()}

    @classmethod
    def from_jsonable(cls, raw: Dict[str, Any]) -> SolveResult:
        return cls(SolveType.from_jsonable(raw["ty"]), SolveMetadata.from_jsonable(raw.get("meta")))


@dataclass(frozen=True)
class SolveStep:
    """One entry of a guess branch trace."""

    grid: "Grid"
    result: SolveResult
    explanation: str

    def to_jsonable(self) -> List[Any]:
        return [self.grid.to_jsonable(), self.result.to_jsonable(), self.explanation]

    @classmethod
    def from_jsonable(cls, raw: Sequence[Any]) -> SolveStep:
        from ..engine.grid import Grid

        return cls(Grid.from_jsonable(raw[0]), SolveResult.from_jsonable(raw[1]), raw[2])
