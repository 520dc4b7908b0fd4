"""Filter chains that select measurements by their filter word."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .measurement import Measurement

__all__ = ["FilterOp", "FilterChainError", "Filter", "FilterChain"]

_WORD = 0xFFFFFFFF


class FilterOp(IntEnum):
    """How a filter's result combines with the result of the filters before it."""

    IS = 0
    NOT = 1
    AND = 2
    AND_NOT = 3
    OR = 4
    OR_NOT = 5
    XOR = 6

    @property
    def label(self) -> str:
        """The operand as printed in a chain listing."""
        return self.name.replace("_", " ")


class FilterChainError(ValueError):
    """A filter chain can't be evaluated against the given measurement."""


@dataclass
class Filter:
    """One exact-match filter, with optional bits to ignore."""

    op: FilterOp = FilterOp.IS
    match: int = 0
    ignore_mask: int = 0

    def evaluate(self, filter_bits: int, prev: bool) -> bool:
        """Evaluate this filter against a filter word, combined with ``prev``."""
        keep = ~(self.ignore_mask & _WORD) & _WORD
        current = (filter_bits & keep) == (self.match & keep)

        op = FilterOp(self.op)
        if op is FilterOp.IS:
            return current
        if op is FilterOp.NOT:
            return not current
        if op is FilterOp.AND:
            return current and prev
        if op is FilterOp.AND_NOT:
            return prev and not current
        if op is FilterOp.OR:
            return prev or current
        if op is FilterOp.OR_NOT:
            return prev or not current
        return prev != current


@dataclass
class FilterChain:
    """An ordered list of filters evaluated left to right."""

    filters: list[Filter] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.filters)

    def __iter__(self):
        return iter(self.filters)

    def evaluate(self, measurement: Measurement | None) -> bool:
        """Return whether the measurement matches the chain.

        An empty chain accepts every measurement. A chain must start with an
        IS or NOT filter.
        """
        if measurement is None:
            raise FilterChainError("no measurement to evaluate")
        if not self.filters:
            return True
        if FilterOp(self.filters[0].op) not in (FilterOp.IS, FilterOp.NOT):
            raise FilterChainError("filter chain must start with IS or NOT")

        bits = measurement.header.filter_bits
        result = False
        for flt in self.filters:
            result = flt.evaluate(bits, result)
        return result

    def format(self) -> str:
        """Return a listing of the chain, or an empty string if it is empty."""
        if not self.filters:
            return ""
        lines = [f"Filters: {len(self.filters)}"]
        for i, flt in enumerate(self.filters):
            line = (
                f"  #{i}: {FilterOp(flt.op).label} "
                f"exact match: 0x{flt.match & _WORD:08X}"
            )
            mask = flt.ignore_mask & _WORD
            if mask:
                line += f" (mask 0x{mask:08X})"
            lines.append(line)
        return "\n".join(lines) + "\n"