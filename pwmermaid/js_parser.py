"""
tree-sitter front end for Playwright test files.

Parses JavaScript / TypeScript source and exposes the handful of node
helpers the classifier needs. Only literal shapes are ever read: nothing
here evaluates code.
"""
from __future__ import annotations

from typing import Iterable

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree


class SourceParseError(RuntimeError):
    """The test file does not parse cleanly."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"{message} at line {line}, column {column}")
        self.line = line
        self.column = column


_ESCAPES = {
    "\\n": "\n",
    "\\t": "\t",
    "\\r": "\r",
    "\\0": "\0",
    "\\'": "'",
    '\\"': '"',
    "\\`": "`",
    "\\\\": "\\",
}


def _language(name: str) -> Language:
    if name == "typescript":
        raw = tree_sitter_typescript.language_typescript()
    elif name == "tsx":
        raw = tree_sitter_typescript.language_tsx()
    elif name == "javascript":
        raw = tree_sitter_javascript.language()
    else:
        raise ValueError(f"Unsupported language: {name}")
    # Grammar packages hand back a PyCapsule; Parser expects a Language.
    return Language(raw)


def _walk(node: Node) -> Iterable[Node]:
    stack = [node]
    while stack:
        n = stack.pop()
        yield n
        for c in reversed(n.children):
            stack.append(c)


def _first_error(root: Node) -> Node | None:
    for n in _walk(root):
        if n.is_error or n.is_missing:
            return n
    return None


def parse_source(source: str, *, language: str = "javascript") -> Tree:
    """
    Parse test source into a tree-sitter tree.

    Args:
        source: Source text of the test file
        language: "javascript", "typescript" or "tsx"

    Returns:
        The parsed tree

    Raises:
        SourceParseError: if the source contains syntax errors
    """
    parser = Parser(_language(language))
    tree = parser.parse(source.encode("utf-8"))
    root = tree.root_node
    if root.has_error:
        bad = _first_error(root) or root
        row, col = bad.start_point
        kind = "Missing token" if bad.is_missing else "Syntax error"
        raise SourceParseError(kind, row + 1, col + 1)
    return tree


def node_text(node: Node) -> str:
    """Extract text from a tree-sitter node."""
    raw = node.text
    return raw.decode("utf-8", errors="ignore") if raw is not None else ""


def call_callee(call: Node) -> Node | None:
    return call.child_by_field_name("function")


def call_arguments(call: Node) -> list[Node]:
    """Argument expressions of a call, comments dropped."""
    args = call.child_by_field_name("arguments")
    # Tagged templates put a template_string here instead of an argument list.
    if args is None or args.type != "arguments":
        return []
    return [c for c in args.named_children if c.type != "comment"]


def member_property(member: Node) -> str | None:
    """Property name of `obj.prop`, or None for computed access."""
    prop = member.child_by_field_name("property")
    if prop is None:
        return None
    return node_text(prop)


def _unescape(seq: str) -> str:
    if seq in _ESCAPES:
        return _ESCAPES[seq]
    # hex, unicode and line-continuation escapes keep their source form
    return seq


def string_value(node: Node | None) -> str | None:
    """
    Value of a string literal.

    Template strings count only when they carry no substitutions. Any
    other node kind is not a literal and yields None.
    """
    if node is None:
        return None
    if node.type not in {"string", "template_string"}:
        return None
    parts: list[str] = []
    for child in node.named_children:
        if child.type == "template_substitution":
            return None
        if child.type == "escape_sequence":
            parts.append(_unescape(node_text(child)))
        else:
            parts.append(node_text(child))
    return "".join(parts)


def regex_text(node: Node) -> str:
    """Render a regex literal as /pattern/flags."""
    pattern = node.child_by_field_name("pattern")
    flags = node.child_by_field_name("flags")
    body = node_text(pattern) if pattern is not None else ""
    tail = node_text(flags) if flags is not None else ""
    return f"/{body}/{tail}"


def object_property(obj: Node, key: str) -> Node | None:
    """Value node of `key` in an object literal, if present."""
    for pair in obj.named_children:
        if pair.type != "pair":
            continue
        key_node = pair.child_by_field_name("key")
        if key_node is None:
            continue
        if key_node.type == "property_identifier":
            name = node_text(key_node)
        else:
            name = string_value(key_node)
        if name == key:
            return pair.child_by_field_name("value")
    return None
