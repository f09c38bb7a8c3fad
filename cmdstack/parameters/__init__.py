"""Command templating engine: parse, index blanks, generate, substitute."""

from cmdstack.parameters.errors import (
    ConstraintViolation,
    InvalidBound,
    InvalidRange,
    ParameterParseError,
    UnexpectedBounds,
    UnknownType,
    UnterminatedPlaceholder,
    ValueCountMismatch,
)
from cmdstack.parameters.generator import ALPHANUMERIC, RandomSource, generate
from cmdstack.parameters.models import Constraints, Parameter, ParameterType, count_blanks
from cmdstack.parameters.parser import DefaultsResolver, StaticDefaults, parse, scan, tokenize
from cmdstack.parameters.session import CommandSession
from cmdstack.parameters.substitution import index_blanks, render, resolve_values, substitute

__all__ = [
    "ALPHANUMERIC",
    "CommandSession",
    "ConstraintViolation",
    "Constraints",
    "DefaultsResolver",
    "InvalidBound",
    "InvalidRange",
    "Parameter",
    "ParameterParseError",
    "ParameterType",
    "RandomSource",
    "StaticDefaults",
    "UnexpectedBounds",
    "UnknownType",
    "UnterminatedPlaceholder",
    "ValueCountMismatch",
    "count_blanks",
    "generate",
    "index_blanks",
    "parse",
    "render",
    "resolve_values",
    "scan",
    "substitute",
    "tokenize",
]
