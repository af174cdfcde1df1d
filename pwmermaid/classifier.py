"""
Action classification for Playwright call expressions.

Maps one tree-sitter `call_expression` to at most one Action:

- test('name', [{ tag }], fn)          -> TEST_START
- <receiver>.goto(url)                 -> NAVIGATE
- <receiver>.click(selector)           -> CLICK
- <receiver>.fill(selector, text)      -> FILL
- expect(subject).<predicate>(detail)  -> ASSERT

Everything else is dropped. Classification only reads literal shapes; a
non-literal argument is treated as absent.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from tree_sitter import Node

from pwmermaid.config import SETTINGS, Settings
from pwmermaid.js_parser import (
    call_arguments,
    call_callee,
    member_property,
    node_text,
    object_property,
    regex_text,
    string_value,
)
from pwmermaid.logging_utils import get_logger

logger = get_logger(__name__)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)

# Page-interaction methods
_PAGE_ACTIONS = {"goto", "click", "fill"}


class ActionKind(Enum):
    """Kinds of recognized test steps."""
    TEST_START = "test_start"
    NAVIGATE = "navigate"
    CLICK = "click"
    FILL = "fill"
    ASSERT = "assert"


IdentityKey = Tuple[ActionKind, str, Optional[str]]


@dataclass(frozen=True)
class Action:
    """
    A classified test step.

    `target` is the URL, selector, assertion detail or (for TEST_START) the
    test name. `value` is the filled text for FILL and the predicate name
    for ASSERT; it is None for every other kind. `opaque` marks a page step
    whose arguments were not all literals.
    """
    kind: ActionKind
    target: str
    value: Optional[str] = None
    is_manual: bool = False
    opaque: bool = False

    @property
    def identity_key(self) -> IdentityKey:
        return (self.kind, self.target, self.value)


@dataclass(frozen=True)
class ChainedPredicate:
    """The `.predicate(...)` call applied to an expect(...) result."""
    name: str
    call: Node
    negated: bool = False

    @property
    def label(self) -> str:
        return f"not {self.name}" if self.negated else self.name


def strip_scheme(text: str) -> str:
    """Drop a leading http:// or https:// from a URL-looking string."""
    return _SCHEME_RE.sub("", text, count=1)


def _root_identifier(node: Node) -> str:
    """Leftmost identifier of a member chain (`page` for page.a.b)."""
    current = node
    while current.type == "member_expression":
        obj = current.child_by_field_name("object")
        if obj is None:
            break
        current = obj
    if current.type in {"identifier", "this"}:
        return node_text(current)
    return "subject"


def _locator_text(call: Node) -> Optional[str]:
    """First string argument of a `receiver.query('text')` call."""
    callee = call_callee(call)
    if callee is None or callee.type != "member_expression":
        return None
    args = call_arguments(call)
    if not args:
        return None
    return string_value(args[0])


def assertion_detail(node: Optional[Node]) -> Optional[str]:
    """
    Human-readable detail for an assertion argument.

    Returns None when the argument carries no literal detail.
    """
    if node is None:
        return None

    kind = node.type
    if kind == "call_expression":
        text = _locator_text(node)
        if text is None:
            return None
        return f"'{strip_scheme(text)}'"
    if kind == "member_expression":
        return _root_identifier(node)
    if kind in {"string", "template_string"}:
        text = string_value(node)
        return strip_scheme(text) if text is not None else None
    if kind == "regex":
        return regex_text(node)
    return None


def find_chained_predicate(expect_call: Node) -> Optional[ChainedPredicate]:
    """
    Scan upward from expect(...) to the predicate call chained onto it.

    Only the chain itself is followed: the expect call (or a member access
    built on it) must be the object of the next member access, and the
    member access must be the callee of the next call. The first such call
    is the predicate. Anything else ends the scan with no match.
    """
    current = expect_call
    negated = False
    parent = current.parent
    while parent is not None:
        if parent.type == "member_expression" and parent.child_by_field_name("object") == current:
            if member_property(parent) == "not":
                negated = not negated
            current = parent
        elif parent.type == "call_expression" and call_callee(parent) == current:
            if current.type != "member_expression":
                return None
            name = member_property(current)
            if not name:
                return None
            return ChainedPredicate(name=name, call=parent, negated=negated)
        elif parent.type == "parenthesized_expression":
            current = parent
        else:
            return None
        parent = current.parent
    return None


class ActionClassifier:
    """
    Classifies call expressions into Actions.

    Stateless apart from its settings; one instance may serve any number
    of runs.
    """

    def __init__(self, settings: Settings = SETTINGS):
        self.settings = settings

    def is_test_declaration(self, call: Node) -> bool:
        """True for `test('name', ...)` calls."""
        callee = call_callee(call)
        if callee is None or callee.type != "identifier":
            return False
        if node_text(callee) != self.settings.test_function:
            return False
        args = call_arguments(call)
        return bool(args) and string_value(args[0]) is not None

    def classify(self, call: Node) -> Optional[Action]:
        """
        Classify one call expression.

        Args:
            call: A tree-sitter `call_expression` node

        Returns:
            The Action, or None if the call is not a recognized step
        """
        callee = call_callee(call)
        if callee is None:
            return None

        if callee.type == "identifier":
            name = node_text(callee)
            if name == self.settings.test_function:
                return self._test_start(call)
            if name == self.settings.assertion_function:
                return self._assertion(call)
            return None

        if callee.type == "member_expression":
            method = member_property(callee)
            if method in _PAGE_ACTIONS:
                return self._page_action(method, callee, call)
        return None

    def _is_manual(self, options: Optional[Node]) -> bool:
        if options is None or options.type != "object":
            return False
        tag = object_property(options, "tag")
        if tag is None:
            return False
        marker = self.settings.manual_tag
        if tag.type == "array":
            tags = [string_value(el) for el in tag.named_children]
        else:
            tags = [string_value(tag)]
        return any(t is not None and marker in t for t in tags)

    def _test_start(self, call: Node) -> Optional[Action]:
        args = call_arguments(call)
        name = string_value(args[0]) if args else None
        if name is None:
            return None
        options = args[1] if len(args) > 1 else None
        return Action(kind=ActionKind.TEST_START, target=name, is_manual=self._is_manual(options))

    def _page_action(self, method: str, callee: Node, call: Node) -> Action:
        args = call_arguments(call)
        receiver = callee.child_by_field_name("object")
        # page.locator('#a').fill('x') keeps the selector on the receiver
        receiver_selector = None
        if receiver is not None and receiver.type == "call_expression":
            receiver_selector = _locator_text(receiver)

        if method == "goto":
            url = string_value(args[0]) if args else None
            return Action(
                kind=ActionKind.NAVIGATE,
                target=strip_scheme(url or ""),
                opaque=url is None,
            )

        if method == "click":
            selector = string_value(args[0]) if args else None
            if selector is None:
                selector = receiver_selector
            return Action(kind=ActionKind.CLICK, target=selector or "", opaque=selector is None)

        # locator.fill(value[, options]) vs page.fill(selector, value[, options])
        second = string_value(args[1]) if len(args) > 1 else None
        if receiver_selector is not None and second is None:
            selector = receiver_selector
            text = string_value(args[0]) if args else None
        else:
            selector = string_value(args[0]) if args else None
            text = second
        return Action(
            kind=ActionKind.FILL,
            target=selector or "",
            value=text or "",
            opaque=selector is None or text is None,
        )

    def _assertion(self, call: Node) -> Optional[Action]:
        args = call_arguments(call)
        detail = assertion_detail(args[0]) if args else None

        predicate = find_chained_predicate(call)
        if predicate is None:
            logger.debug(f"Dropping assertion without predicate: {node_text(call)}")
            return None

        predicate_args = call_arguments(predicate.call)
        override = None
        # An opaque subject (data.message) is never more specific than the locator
        if predicate_args and predicate_args[0].type != "member_expression":
            override = assertion_detail(predicate_args[0])
        if override is not None:
            detail = override

        return Action(kind=ActionKind.ASSERT, target=detail or "", value=predicate.label)
