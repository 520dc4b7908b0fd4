"""Processor nodes and node chains."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from .filter import FilterChain

__all__ = ["Node", "format_nodes"]


@dataclass(eq=False)
class Node:
    """A processor node, optionally linked to the next node in its chain.

    Handlers:
      init_handler(config, handle, inst) -> error code (0 on success)
      evaluate_handler(measurement, handle, inst) -> bool
      matched_handler(measurement, handle, inst) -> bool
      start_handler / exec_handler / stop_handler(measurement, handle, inst)
          -> error code (0 on success)
      error_handler(measurement, handle, inst, error)
    """

    name: str | None = None
    filters: FilterChain = field(default_factory=FilterChain)
    init_handler: Callable[..., Any] | None = None
    evaluate_handler: Callable[..., Any] | None = None
    matched_handler: Callable[..., Any] | None = None
    start_handler: Callable[..., Any] | None = None
    exec_handler: Callable[..., Any] | None = None
    stop_handler: Callable[..., Any] | None = None
    error_handler: Callable[..., Any] | None = None
    config: Any = None
    next: Node | None = None

    def __iter__(self) -> Iterator[Node]:
        """Yield this node and every node after it in the chain."""
        node: Node | None = self
        while node is not None:
            yield node
            node = node.next


def _yes_no(value: object) -> str:
    return "no" if value is None else "yes"


def format_nodes(node: Node | None) -> str:
    """Return a description of every node in a chain."""
    if node is None:
        return ""
    parts = []
    for count, n in enumerate(node):
        lines = [f"Node #{count}", "-------"]
        if n.name is not None:
            lines.append(f"Name: {n.name}")
        text = "\n".join(lines) + "\n" + n.filters.format()
        text += (
            "Handlers:\n"
            f"  init: {_yes_no(n.init_handler)}\n"
            f"  evaluate: {_yes_no(n.evaluate_handler)}\n"
            f"  matched: {_yes_no(n.matched_handler)}\n"
            f"  start: {_yes_no(n.start_handler)}\n"
            f"  run: {_yes_no(n.exec_handler)}\n"
            f"  stop: {_yes_no(n.stop_handler)}\n"
            f"  error: {_yes_no(n.error_handler)}\n"
            f"End of chain: {'yes' if n.next is None else 'no'}\n\n"
        )
        parts.append(text)
    return "".join(parts)