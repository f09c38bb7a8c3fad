"""Errors raised by the templating engine.

Parse errors are user-facing: they describe a problem in the command text and
carry the offending placeholder and its offset. Precondition errors signal a
caller bug and are not meant to be caught.
"""

from __future__ import annotations

from typing import Optional


class ParameterParseError(ValueError):
    """Base class for problems found while parsing placeholders."""

    kind = "ParseError"

    def __init__(self, message: str, placeholder: str = "", position: Optional[int] = None):
        self.message = message
        self.placeholder = placeholder
        self.position = position
        super().__init__(self._format())

    def _format(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} at position {self.position}: {self.placeholder!r}"

    def to_dict(self) -> dict:
        return {
            "error": self.kind,
            "detail": str(self),
            "placeholder": self.placeholder,
            "position": self.position,
        }


class UnterminatedPlaceholder(ParameterParseError):
    kind = "UnterminatedPlaceholder"


class UnknownType(ParameterParseError):
    kind = "UnknownType"


class InvalidBound(ParameterParseError):
    kind = "InvalidBound"


class InvalidRange(ParameterParseError):
    kind = "InvalidRange"


class UnexpectedBounds(ParameterParseError):
    kind = "UnexpectedBounds"


class ValueCountMismatch(AssertionError):
    """Substitution was given a different number of values than placeholders."""

    def __init__(self, provided: int, needed: int):
        self.provided = provided
        self.needed = needed
        super().__init__(
            f"Failed to fill in parameters: {provided} value(s) provided, needed {needed} value(s)"
        )


class ConstraintViolation(AssertionError):
    """A parameter reached the generator with min > max."""


__all__ = [
    "ParameterParseError",
    "UnterminatedPlaceholder",
    "UnknownType",
    "InvalidBound",
    "InvalidRange",
    "UnexpectedBounds",
    "ValueCountMismatch",
    "ConstraintViolation",
]
