"""Blank indexing and value substitution over a command template."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from cmdstack.parameters.errors import ValueCountMismatch
from cmdstack.parameters.models import Parameter
from cmdstack.parameters.parser import Literal, Placeholder, tokenize

logger = logging.getLogger("cmdstack.parameters")


def index_blanks(text: str) -> str:
    """Number the blank placeholders of ``text`` for display.

    ``"echo @{} @{int} @{}"`` becomes ``"echo @{1} @{int} @{2}"``. Everything
    else is left as written.
    """
    out: List[str] = []
    ordinal = 0
    for token in tokenize(text):
        if isinstance(token, Literal):
            out.append(token.text)
        elif token.parameter.is_blank:
            ordinal += 1
            out.append(f"@{{{ordinal}}}")
        else:
            out.append(text[token.span.start : token.span.end])
    return "".join(out)


def resolve_values(
    parameters: Sequence[Parameter],
    generated_values: Sequence[str],
    blank_values: Sequence[str] = (),
) -> List[str]:
    """Merge generated values with user-supplied blank values.

    Blank parameters take ``blank_values[n]`` where ``n`` is the blank's
    ordinal (0-based, counting only blanks); missing entries become ``""``.
    """
    if len(generated_values) != len(parameters):
        raise ValueCountMismatch(len(generated_values), len(parameters))

    resolved: List[str] = []
    ordinal = 0
    for parameter, generated in zip(parameters, generated_values):
        if parameter.is_blank:
            resolved.append(blank_values[ordinal] if ordinal < len(blank_values) else "")
            ordinal += 1
        else:
            resolved.append(generated)
    return resolved


def substitute(text: str, resolved_values: Sequence[str]) -> str:
    """Replace each placeholder in ``text`` with the value at its position.

    Raises:
        ValueCountMismatch: ``resolved_values`` does not hold exactly one value
            per placeholder
    """
    tokens = list(tokenize(text))
    needed = sum(1 for t in tokens if isinstance(t, Placeholder))
    if len(resolved_values) != needed:
        raise ValueCountMismatch(len(resolved_values), needed)

    values = iter(resolved_values)
    out: List[str] = []
    for token in tokens:
        out.append(token.text if isinstance(token, Literal) else next(values))
    logger.debug("Substituted %d value(s)", needed)
    return "".join(out)


def render(
    text: str,
    parameters: Sequence[Parameter],
    generated_values: Sequence[str],
    blank_values: Optional[Sequence[str]] = None,
) -> str:
    """Resolve values and substitute them in one step."""
    return substitute(text, resolve_values(parameters, generated_values, blank_values or ()))


__all__ = ["index_blanks", "resolve_values", "substitute", "render"]
