"""Parameter model shared by the parser, generator and substitution engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ParameterType(str, Enum):
    """Kinds of placeholders understood by the parser."""

    STRING = "String"
    INT = "Int"
    BOOLEAN = "Boolean"
    BLANK = "Blank"

    @property
    def has_bounds(self) -> bool:
        return self in (ParameterType.STRING, ParameterType.INT)


# Type tag as written inside a placeholder -> parameter type
TYPE_TAGS: Dict[str, ParameterType] = {
    "string": ParameterType.STRING,
    "int": ParameterType.INT,
    "bool": ParameterType.BOOLEAN,
}


@dataclass(frozen=True)
class Constraints:
    """Inclusive (min, max) bounds of a String length or Int value."""

    min: int
    max: int


@dataclass(frozen=True)
class Parameter:
    """A parsed placeholder, positioned by its order in the command text."""

    type: ParameterType
    constraints: Optional[Constraints] = None

    @property
    def is_blank(self) -> bool:
        return self.type is ParameterType.BLANK

    @classmethod
    def blank(cls) -> Parameter:
        return cls(ParameterType.BLANK)

    @classmethod
    def boolean(cls) -> Parameter:
        return cls(ParameterType.BOOLEAN)

    @classmethod
    def string(cls, min: int, max: int) -> Parameter:
        return cls(ParameterType.STRING, Constraints(min, max))

    @classmethod
    def integer(cls, min: int, max: int) -> Parameter:
        return cls(ParameterType.INT, Constraints(min, max))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize as ``{"type": ..., "data": {...}}``."""
        data: Dict[str, Any] = {}
        if self.constraints is not None:
            data = {"min": self.constraints.min, "max": self.constraints.max}
        return {"type": self.type.value, "data": data}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Parameter:
        """Create from the dictionary produced by :meth:`to_dict`."""
        param_type = ParameterType(data["type"])
        bounds = data.get("data") or {}
        constraints = None
        if param_type.has_bounds:
            constraints = Constraints(int(bounds["min"]), int(bounds["max"]))
        return cls(param_type, constraints)

    def describe(self) -> str:
        """Short human label, e.g. ``Int (Min: 1, Max: 5)``."""
        if self.constraints is None:
            return self.type.value
        return f"{self.type.value} (Min: {self.constraints.min}, Max: {self.constraints.max})"


def count_blanks(parameters) -> int:
    """Number of Blank parameters in ``parameters``."""
    return sum(1 for p in parameters if p.is_blank)


__all__ = ["ParameterType", "TYPE_TAGS", "Constraints", "Parameter", "count_blanks"]
