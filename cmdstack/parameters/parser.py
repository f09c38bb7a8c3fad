"""Placeholder tokenizer and parser.

Command templates embed parameters as ``@{...}`` placeholders::

    @{string}   @{string[min,max]}
    @{int}      @{int[min,max]}
    @{bool}
    @{}         (blank, filled in by the user)

Scanning is a single left-to-right pass. A ``}`` closes the nearest preceding
``@{``; placeholders do not nest.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Protocol, Tuple, Union

from cmdstack.parameters.errors import (
    InvalidBound,
    InvalidRange,
    UnexpectedBounds,
    UnknownType,
    UnterminatedPlaceholder,
)
from cmdstack.parameters.models import TYPE_TAGS, Constraints, Parameter, ParameterType

logger = logging.getLogger("cmdstack.parameters")

OPEN = "@{"
CLOSE = "}"

_BOUND_RE = re.compile(r"[0-9]+")
# Bounds are unsigned 32-bit values
MAX_BOUND = 2**32 - 1

# Fallback used when no defaults resolver is supplied
DEFAULT_BOUNDS: Tuple[int, int] = (5, 10)


class DefaultsResolver(Protocol):
    """Supplies bounds for String/Int placeholders written without them."""

    def bounds_for(self, param_type: ParameterType) -> Tuple[int, int]: ...


class StaticDefaults:
    """Resolver returning the same bounds for every type."""

    def __init__(self, bounds: Tuple[int, int] = DEFAULT_BOUNDS):
        self.bounds = bounds

    def bounds_for(self, param_type: ParameterType) -> Tuple[int, int]:
        return self.bounds


@dataclass(frozen=True)
class PlaceholderSpan:
    """Raw ``@{...}`` span: ``text[start:end]`` is the whole placeholder."""

    start: int
    end: int
    body: str

    @property
    def raw(self) -> str:
        return f"{OPEN}{self.body}{CLOSE}"

    @property
    def is_blank(self) -> bool:
        return not self.body.strip()


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Placeholder:
    span: PlaceholderSpan
    parameter: Parameter


Token = Union[Literal, Placeholder]


def scan(text: str) -> Iterator[PlaceholderSpan]:
    """Yield every placeholder span in ``text`` in order of appearance.

    Raises:
        UnterminatedPlaceholder: an ``@{`` has no closing ``}``
    """
    pos = 0
    while True:
        start = text.find(OPEN, pos)
        if start < 0:
            return
        close = text.find(CLOSE, start + len(OPEN))
        if close < 0:
            raise UnterminatedPlaceholder(
                "Placeholder is missing a closing '}'", text[start:], start
            )
        yield PlaceholderSpan(start, close + 1, text[start + len(OPEN) : close])
        pos = close + 1


def _split_body(span: PlaceholderSpan) -> Tuple[str, Optional[str]]:
    """Split a placeholder body into its type tag and optional bounds clause."""
    body = span.body.strip()
    bracket = body.find("[")
    if bracket < 0:
        return body, None
    return body[:bracket].strip(), body[bracket:].strip()


def _parse_bound(raw: str, span: PlaceholderSpan) -> int:
    value = raw.strip()
    if not _BOUND_RE.fullmatch(value):
        raise InvalidBound(
            f"Bound {value!r} is not a non-negative integer", span.raw, span.start
        )
    bound = int(value)
    if bound > MAX_BOUND:
        raise InvalidBound(f"Bound {value} exceeds {MAX_BOUND}", span.raw, span.start)
    return bound


def _parse_bounds(clause: str, span: PlaceholderSpan) -> Tuple[int, int]:
    if not clause.endswith("]"):
        raise InvalidBound("Bounds must be written as [min,max]", span.raw, span.start)
    parts = clause[1:-1].split(",")
    if len(parts) != 2:
        raise InvalidBound("Bounds must be written as [min,max]", span.raw, span.start)
    return _parse_bound(parts[0], span), _parse_bound(parts[1], span)


def parse_placeholder(
    span: PlaceholderSpan, defaults: Optional[DefaultsResolver] = None
) -> Parameter:
    """Turn one placeholder span into a :class:`Parameter`."""
    tag, clause = _split_body(span)

    if not tag:
        if clause is not None:
            raise UnexpectedBounds("Blank placeholders take no bounds", span.raw, span.start)
        return Parameter.blank()

    param_type = TYPE_TAGS.get(tag)
    if param_type is None:
        raise UnknownType(f"Unknown parameter type {tag!r}", span.raw, span.start)

    if not param_type.has_bounds:
        if clause is not None:
            raise UnexpectedBounds(
                f"Parameter type {tag!r} takes no bounds", span.raw, span.start
            )
        return Parameter(param_type)

    if clause is None:
        low, high = (defaults or StaticDefaults()).bounds_for(param_type)
    else:
        low, high = _parse_bounds(clause, span)

    if low > high:
        raise InvalidRange(f"Invalid (min,max): ({low},{high})", span.raw, span.start)
    return Parameter(param_type, Constraints(low, high))


def tokenize(text: str, defaults: Optional[DefaultsResolver] = None) -> Iterator[Token]:
    """Yield literal text and parsed placeholders in source order.

    Literal tokens are only produced for non-empty stretches of text.
    """
    pos = 0
    for span in scan(text):
        if span.start > pos:
            yield Literal(text[pos : span.start])
        yield Placeholder(span, parse_placeholder(span, defaults))
        pos = span.end
    if pos < len(text):
        yield Literal(text[pos:])


def parse(text: str, defaults: Optional[DefaultsResolver] = None) -> List[Parameter]:
    """Extract the ordered parameter list from a command template.

    Args:
        text: Raw command text
        defaults: Source of bounds for ``@{string}``/``@{int}`` without
            explicit bounds; ``(5, 10)`` when omitted

    Returns:
        Parameters in left-to-right order of appearance

    Raises:
        ParameterParseError: the text contains a malformed placeholder
    """
    parameters = [t.parameter for t in tokenize(text, defaults) if isinstance(t, Placeholder)]
    logger.debug("Parsed %d parameter(s) from %r", len(parameters), text)
    return parameters


__all__ = [
    "DefaultsResolver",
    "StaticDefaults",
    "PlaceholderSpan",
    "Literal",
    "Placeholder",
    "Token",
    "scan",
    "tokenize",
    "parse_placeholder",
    "parse",
    "DEFAULT_BOUNDS",
    "MAX_BOUND",
]
