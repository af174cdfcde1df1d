"""Depth-first traversal of call expressions in source order."""
from __future__ import annotations

from enum import Enum
from typing import Callable, Iterator

from tree_sitter import Node

CALL_EXPRESSION = "call_expression"


class WalkEvent(Enum):
    """Traversal events."""
    ENTER = "enter"  # a call expression, before its subtree
    LEAVE = "leave"  # after the subtree of a scope call


def walk_calls(
    root: Node,
    *,
    is_scope: Callable[[Node], bool] | None = None,
) -> Iterator[tuple[WalkEvent, Node]]:
    """
    Yield every call expression under root exactly once, in source order.

    Calls for which is_scope returns True also get a LEAVE event once their
    whole subtree has been yielded.

    Args:
        root: Root of the syntax tree
        is_scope: Predicate marking calls that open a scope (test cases)

    Yields:
        (WalkEvent, Node) pairs
    """
    # Entries are (node, leaving); leaving markers sit below their children.
    stack: list[tuple[Node, bool]] = [(root, False)]
    while stack:
        node, leaving = stack.pop()
        if leaving:
            yield WalkEvent.LEAVE, node
            continue

        if node.type == CALL_EXPRESSION:
            yield WalkEvent.ENTER, node
            if is_scope is not None and is_scope(node):
                stack.append((node, True))

        for child in reversed(node.children):
            stack.append((child, False))
