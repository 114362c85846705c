"""Shared constants and enumerations for the str8ts engine."""

from __future__ import annotations

from enum import Enum
from typing import Tuple

Point = Tuple[int, int]


class CellType(str, Enum):
    """All supported cell kinds in the grid."""

    BLACK = "Black"
    REQUIREMENT = "Requirement"
    BLOCKER = "Blocker"
    SOLUTION = "Solution"
    INDETERMINATE = "Indeterminate"


class SolveKind(str, Enum):
    """Tags of every step the solver can report."""

    UPDATE_IMPOSSIBLES = "UpdateImpossibles"
    SINGLES = "Singles"
    STRANDED = "Stranded"
    DEFINITE_MIN_MAX = "DefiniteMinMax"
    REQUIRED_RANGE = "RequiredRange"
    SETS = "Sets"
    REQUIRED_AND_FORBIDDEN = "RequiredAndForbidden"
    ROW_COL_BRUTE = "RowColBrute"
    SETTI = "Setti"
    Y_WING = "YWing"
    FISH = "Fish"
    MEDUSA = "Medusa"
    UNIQUE_REQUIREMENT = "UniqueRequirement"
    START_GUESS = "StartGuess"
    GUESS_STEP = "GuessStep"
    END_GUESS = "EndGuess"
    PUZZLE_SOLVED = "PuzzleSolved"
    ENUMERATE_SOLUTIONS = "EnumerateSolutions"
    OUT_OF_BASIC_STRATS = "OutOfBasicStrats"


UNIT_SOLVE_KINDS = frozenset(
    {
        SolveKind.UPDATE_IMPOSSIBLES,
        SolveKind.SINGLES,
        SolveKind.STRANDED,
        SolveKind.DEFINITE_MIN_MAX,
        SolveKind.REQUIRED_RANGE,
        SolveKind.REQUIRED_AND_FORBIDDEN,
        SolveKind.ROW_COL_BRUTE,
        SolveKind.MEDUSA,
        SolveKind.PUZZLE_SOLVED,
        SolveKind.ENUMERATE_SOLUTIONS,
        SolveKind.OUT_OF_BASIC_STRATS,
    }
)


class UrKind(str, Enum):
    """Sub-cases of the unique requirement technique."""

    SINGLE_UNIQUE = "SingleUnique"
    INTRA_COMPARTMENT_UNIQUE = "IntraCompartmentUnique"
    CLOSED_SET_COMPARTMENT = "ClosedSetCompartment"
    SINGLE_CELL_WOULD_BECOME_FREE = "SingleCellWouldBecomeFree"
    UR_SETTI = "UrSetti"
    SOLUTION_CAUSES_CLOSED_SETS = "SolutionCausesClosedSets"


class ValidationErrorType(str, Enum):
    """Reasons a grid can be inconsistent."""

    EMPTY_CELL = "EmptyCell"
    CONFLICT = "Conflict"
    SEQUENCE = "Sequence"
    SEQUENCE_TOO_LARGE = "SequenceTooLarge"
    REQUIREMENT_BLOCKER_CONFLICT = "RequirementBlockerConflict"
    REQUIRED_NUMBER_MISSING = "RequiredNumberMissing"
    BLOCKED_NUMBER_PRESENT = "BlockedNumberPresent"
    AMBIGUOUS = "Ambiguous"
    NO_SOLUTIONS = "NoSolutions"
    OUT_OF_STRATS = "OutOfStrats"


UNIT_VALIDATION_ERRORS = frozenset(
    {ValidationErrorType.NO_SOLUTIONS, ValidationErrorType.OUT_OF_STRATS}
)

# Guess traces shorter than this count as short guesses in the rating.
SHORT_GUESS_MAX_STEPS = 8

# Exhaustive enumeration only runs on nearly finished grids.
ENUMERATE_MAX_INDETERMINATES = 8

BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
