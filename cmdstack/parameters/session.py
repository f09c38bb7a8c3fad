"""State of one open command: parsed, generated, substituted.

The three engine steps are plain functions; this class only decides which of
them to re-run. Changing the text re-parses everything, ``refresh`` draws new
values for non-blank parameters, and editing a blank only re-substitutes.
"""

from __future__ import annotations

import itertools
import logging
from typing import List, Optional, Sequence

from cmdstack.parameters.errors import ValueCountMismatch
from cmdstack.parameters.generator import ALPHANUMERIC, RandomSource, generate
from cmdstack.parameters.models import Parameter, count_blanks
from cmdstack.parameters.parser import DefaultsResolver, parse
from cmdstack.parameters.substitution import index_blanks, render

logger = logging.getLogger("cmdstack.parameters")


class CommandSession:
    """Parameters, values and rendered text for a single command template."""

    def __init__(
        self,
        text: str = "",
        defaults: Optional[DefaultsResolver] = None,
        rng: Optional[RandomSource] = None,
        alphabet: str = ALPHANUMERIC,
    ):
        self.defaults = defaults
        self.rng = rng
        self.alphabet = alphabet

        self.text = ""
        self.parameters: List[Parameter] = []
        self.generated_values: List[str] = []
        self.blank_values: List[str] = []
        self.indexed_command = ""
        self.generated_command = ""

        self._tickets = itertools.count(1)
        self._latest_ticket = 0

        if text:
            self.set_text(text)

    def set_text(self, text: str) -> None:
        """Re-parse ``text`` and regenerate everything.

        On a parse error the previous state is left untouched and the error
        propagates to the caller.
        """
        parameters = parse(text, self.defaults)
        indexed = index_blanks(text)

        self.text = text
        self.parameters = parameters
        self.indexed_command = indexed
        self.blank_values = [""] * count_blanks(parameters)
        self.refresh()

    def refresh(self) -> None:
        """Draw new values for non-blank parameters, keeping blank values."""
        ticket = self.issue_request()
        self.apply_generated(ticket, generate(self.parameters, self.rng, self.alphabet))

    def issue_request(self) -> int:
        """Start a generation request; only the latest ticket is honoured."""
        self._latest_ticket = next(self._tickets)
        return self._latest_ticket

    def is_current(self, ticket: int) -> bool:
        return ticket == self._latest_ticket

    def apply_generated(self, ticket: int, values: Sequence[str]) -> bool:
        """Install generated values unless a newer request was issued since.

        Returns:
            True if the values were applied, False if they were stale
        """
        if not self.is_current(ticket):
            logger.debug(
                "Discarding stale generation result %d (latest %d)", ticket, self._latest_ticket
            )
            return False
        if len(values) != len(self.parameters):
            raise ValueCountMismatch(len(values), len(self.parameters))
        self.generated_values = list(values)
        self._substitute()
        return True

    def set_blank(self, ordinal: int, value: str) -> None:
        """Set the value of the blank at 0-based ``ordinal`` and re-render."""
        if not 0 <= ordinal < len(self.blank_values):
            raise IndexError(f"No blank parameter at index {ordinal}")
        self.blank_values[ordinal] = value
        self._substitute()

    def set_blanks(self, values: Sequence[str]) -> None:
        """Set blank values in order; extra values are ignored."""
        for ordinal, value in enumerate(values[: len(self.blank_values)]):
            self.blank_values[ordinal] = value
        self._substitute()

    @property
    def blank_count(self) -> int:
        return len(self.blank_values)

    @property
    def missing_blanks(self) -> List[int]:
        """Ordinals of blanks that have no value yet."""
        return [i for i, v in enumerate(self.blank_values) if not v]

    def _substitute(self) -> None:
        self.generated_command = render(
            self.text, self.parameters, self.generated_values, self.blank_values
        )


__all__ = ["CommandSession"]
