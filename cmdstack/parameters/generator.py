"""Random value generation for parsed parameters."""

from __future__ import annotations

import logging
import random
import string
from typing import List, Optional, Protocol, Sequence

from cmdstack.parameters.errors import ConstraintViolation
from cmdstack.parameters.models import Parameter, ParameterType

logger = logging.getLogger("cmdstack.parameters")

ALPHANUMERIC = string.ascii_uppercase + string.ascii_lowercase + string.digits


class RandomSource(Protocol):
    """Source of integers, inclusive on both ends (``random.Random`` fits)."""

    def randint(self, a: int, b: int) -> int: ...


_default_rng = random.Random()


def _bounds(parameter: Parameter) -> tuple[int, int]:
    constraints = parameter.constraints
    if constraints is None or constraints.min > constraints.max:
        raise ConstraintViolation(f"Malformed constraints on {parameter!r}")
    return constraints.min, constraints.max


def generate_string(parameter: Parameter, rng: RandomSource, alphabet: str = ALPHANUMERIC) -> str:
    low, high = _bounds(parameter)
    length = rng.randint(low, high)
    last = len(alphabet) - 1
    return "".join(alphabet[rng.randint(0, last)] for _ in range(length))


def generate_int(parameter: Parameter, rng: RandomSource) -> str:
    low, high = _bounds(parameter)
    return str(rng.randint(low, high))


def generate_bool(rng: RandomSource) -> str:
    return "true" if rng.randint(0, 1) else "false"


def generate_value(
    parameter: Parameter, rng: Optional[RandomSource] = None, alphabet: str = ALPHANUMERIC
) -> str:
    """Generate one value; blanks always yield an empty string."""
    rng = rng or _default_rng
    if parameter.type is ParameterType.STRING:
        return generate_string(parameter, rng, alphabet)
    if parameter.type is ParameterType.INT:
        return generate_int(parameter, rng)
    if parameter.type is ParameterType.BOOLEAN:
        return generate_bool(rng)
    return ""


def generate(
    parameters: Sequence[Parameter],
    rng: Optional[RandomSource] = None,
    alphabet: str = ALPHANUMERIC,
) -> List[str]:
    """Generate one value per parameter, in parameter order.

    Args:
        parameters: Output of :func:`cmdstack.parameters.parser.parse`
        rng: Randomness source; a module-level ``random.Random`` by default
        alphabet: Characters used for String parameters

    Returns:
        Values aligned 1:1 with ``parameters``; blanks map to ``""``
    """
    if not alphabet:
        raise ValueError("alphabet must not be empty")
    values = [generate_value(p, rng, alphabet) for p in parameters]
    logger.debug("Generated %d value(s)", len(values))
    return values


__all__ = [
    "ALPHANUMERIC",
    "RandomSource",
    "generate",
    "generate_value",
    "generate_string",
    "generate_int",
    "generate_bool",
]
