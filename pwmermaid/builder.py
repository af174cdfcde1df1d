"""
Mermaid graph construction from classified Actions.

The builder is fed Actions in source order and appends Mermaid
statements as it goes. All per-run state (step counter, dedup table,
last node of the open subgraph) lives on the instance, so each diagram
gets a fresh builder.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from pwmermaid.classifier import Action, ActionKind, IdentityKey
from pwmermaid.config import DEDUP_SCOPES, SETTINGS, THEME_DIRECTIVE, Settings
from pwmermaid.logging_utils import get_logger

logger = get_logger(__name__)

_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]+")

_TOP_INDENT = "    "
_SUBGRAPH_INDENT = "        "

# kind -> (id prefix, icon hint)
_NODE_STYLES = {
    ActionKind.NAVIGATE: ("B", "fa:fa-globe"),
    ActionKind.CLICK: ("C", "fa:fa-mouse-pointer"),
    ActionKind.FILL: ("D", "fa:fa-keyboard"),
    ActionKind.ASSERT: ("E", "fa:fa-check"),
}


class BuilderState(Enum):
    """Builder lifecycle."""
    IDLE = "idle"
    IN_SUBGRAPH = "in_subgraph"
    CLOSED = "closed"


@dataclass(frozen=True)
class DiagramNode:
    """A node in the Mermaid flowchart."""
    id: str
    label: str

    def declaration(self) -> str:
        return f'{self.id}("{self.label}")'


@dataclass(frozen=True)
class DiagramEdge:
    """An edge in the Mermaid flowchart."""
    from_id: str
    to_id: str

    def statement(self) -> str:
        return f"{self.from_id} --> {self.to_id}"


@dataclass
class Subgraph:
    """The region of the diagram belonging to one test case."""
    id: str
    label: str
    last_node: Optional[str] = None
    edges: Set[Tuple[str, str]] = field(default_factory=set)


def _escape_label(label: str) -> str:
    # Labels sit inside ("...") on a single line: no double quotes, no control characters.
    return _CONTROL_RE.sub(" ", label.replace('"', "'"))


def render_label(action: Action) -> str:
    """Human-readable label, with icon hint, for a step."""
    _, icon = _NODE_STYLES[action.kind]
    if action.kind == ActionKind.NAVIGATE:
        text = f"Navigate to {action.target}"
    elif action.kind == ActionKind.CLICK:
        text = f"Click {action.target}"
    elif action.kind == ActionKind.FILL:
        text = f"Fill {action.target} with '{action.value}'"
    else:
        text = f"Assertion: {action.target} {action.value}"
    return _escape_label(f"{icon} {text}")


class MermaidFlowBuilder:
    """
    Emits a Mermaid flowchart with one subgraph per test case.

    Navigate / click / fill steps with equal identity keys share one node
    inside the dedup scope ("test": per subgraph, "run": whole diagram).
    Assertions always get a fresh node.
    """

    def __init__(self, settings: Settings = SETTINGS, dedup_scope: Optional[str] = None):
        scope = dedup_scope or settings.dedup_scope
        if scope not in DEDUP_SCOPES:
            raise ValueError(f"Unknown dedup scope: {scope!r} (expected 'test' or 'run')")
        self.settings = settings
        self.dedup_scope = scope

        self.state = BuilderState.IDLE
        self.lines: List[str] = [THEME_DIRECTIVE, "flowchart TD"]
        self.node_map: Dict[IdentityKey, str] = {}
        self.nodes: List[DiagramNode] = []
        self.edges: List[DiagramEdge] = []
        self.subgraph_count = 0
        self._step = 1
        self._subgraph: Optional[Subgraph] = None
        # Steps outside any test case chain at top level
        self._top_level = Subgraph(id="", label="")

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def add(self, action: Action) -> None:
        """Feed one classified Action."""
        self._check_open()
        if action.kind == ActionKind.TEST_START:
            self.start_test(action)
        elif action.kind == ActionKind.ASSERT:
            self._add_assertion(action)
        else:
            self._add_step(action)

    def start_test(self, action: Action) -> None:
        """Open the subgraph for a test case."""
        self._check_open()
        if self.state == BuilderState.IN_SUBGRAPH:
            logger.debug("Test started inside an open subgraph; closing it first")
            self.end_test()

        self.subgraph_count += 1
        label = action.target
        if action.is_manual:
            label = f"{self.settings.manual_prefix}{label}"
        self._subgraph = Subgraph(id=f"T{self.subgraph_count}", label=_escape_label(label))
        if self.dedup_scope == "test":
            self.node_map = {}

        self.lines.append(f'{_TOP_INDENT}subgraph {self._subgraph.id} ["{self._subgraph.label}"]')
        self.state = BuilderState.IN_SUBGRAPH
        logger.debug(f"Opened subgraph {self._subgraph.id}: {label}")

    def end_test(self) -> None:
        """Close the open subgraph; a no-op when none is open."""
        self._check_open()
        if self.state != BuilderState.IN_SUBGRAPH:
            return
        self.lines.append(f"{_TOP_INDENT}end")
        self._subgraph = None
        if self.dedup_scope == "test":
            # Hooks after a test must not reach back into its subgraph
            self.node_map = {}
        self.state = BuilderState.IDLE

    def finish(self) -> str:
        """Close any open subgraph and return the diagram text."""
        if self.state == BuilderState.IN_SUBGRAPH:
            self.end_test()
        self.state = BuilderState.CLOSED
        return "\n".join(self.lines) + "\n"

    def _check_open(self) -> None:
        if self.state == BuilderState.CLOSED:
            raise RuntimeError("Diagram already finished")

    def _scope(self) -> Subgraph:
        return self._subgraph if self._subgraph is not None else self._top_level

    def _indent(self) -> str:
        return _SUBGRAPH_INDENT if self._subgraph is not None else _TOP_INDENT

    def _new_node(self, action: Action) -> DiagramNode:
        prefix, _ = _NODE_STYLES[action.kind]
        node = DiagramNode(id=f"{prefix}{self._step}", label=render_label(action))
        self._step += 1
        self.nodes.append(node)
        self.lines.append(f"{self._indent()}{node.declaration()}")
        logger.debug(f"Declared {node.id}: {node.label}")
        return node

    def _link(self, node_id: str) -> None:
        scope = self._scope()
        prev = scope.last_node
        scope.last_node = node_id
        if prev is None or prev == node_id:
            return
        if (prev, node_id) in scope.edges:
            return
        scope.edges.add((prev, node_id))
        edge = DiagramEdge(from_id=prev, to_id=node_id)
        self.edges.append(edge)
        self.lines.append(f"{self._indent()}{edge.statement()}")

    def _add_step(self, action: Action) -> None:
        if action.opaque:
            # Computed arguments cannot be compared, so each call is its own step
            self._link(self._new_node(action).id)
            return
        key = action.identity_key
        node_id = self.node_map.get(key)
        if node_id is None:
            node_id = self._new_node(action).id
            self.node_map[key] = node_id
        else:
            logger.debug(f"Reusing {node_id} for {action.kind.value} {action.target}")
        self._link(node_id)

    def _add_assertion(self, action: Action) -> None:
        self._link(self._new_node(action).id)
