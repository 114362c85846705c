"""Custom exception hierarchy for the str8ts engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ValidationResult


class Str8tsError(Exception):
    """Base exception for engine failures."""


class PuzzleFormatError(Str8tsError):
    """Raised when puzzle text cannot be parsed into a grid."""


class ValidationError(Str8tsError):
    """Raised when a grid breaks one of its invariants.

    The structured reason travels in ``result`` so callers can show the
    specific contradiction instead of a plain message.
    """

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(str(result))
        self.result = result


class GeneratorError(Str8tsError):
    """Raised when a single generation attempt has to be abandoned."""
