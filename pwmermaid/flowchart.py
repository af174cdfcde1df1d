"""
Pipeline from a Playwright test file to a Mermaid flow diagram.

Parse with tree-sitter, walk the call expressions, classify each one and
feed the resulting Actions to a fresh MermaidFlowBuilder.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pwmermaid.builder import MermaidFlowBuilder
from pwmermaid.classifier import ActionClassifier
from pwmermaid.config import SETTINGS, Settings
from pwmermaid.fs_utils import language_for_path, read_source, write_text
from pwmermaid.js_parser import parse_source
from pwmermaid.logging_utils import get_logger
from pwmermaid.walker import WalkEvent, walk_calls

logger = get_logger(__name__)


@dataclass(frozen=True)
class MermaidGraph:
    mermaid: str
    node_count: int
    edge_count: int
    test_count: int


def generate_flowchart_mermaid(
    source: str,
    *,
    language: str = "javascript",
    settings: Settings = SETTINGS,
    dedup_scope: str | None = None,
) -> MermaidGraph:
    """
    Build the flow diagram for one test source.

    Parsing fails fast: a SourceParseError propagates before any diagram
    text exists.
    """
    tree = parse_source(source, language=language)
    classifier = ActionClassifier(settings)
    builder = MermaidFlowBuilder(settings, dedup_scope=dedup_scope)

    for event, node in walk_calls(tree.root_node, is_scope=classifier.is_test_declaration):
        if event is WalkEvent.LEAVE:
            builder.end_test()
            continue
        action = classifier.classify(node)
        if action is not None:
            builder.add(action)

    mermaid = builder.finish()
    logger.info(
        f"Built {builder.subgraph_count} test subgraphs, "
        f"{builder.node_count} nodes, {builder.edge_count} edges"
    )
    return MermaidGraph(
        mermaid=mermaid,
        node_count=builder.node_count,
        edge_count=builder.edge_count,
        test_count=builder.subgraph_count,
    )


def write_flowchart(
    *,
    file_path: Path,
    out: Path,
    settings: Settings = SETTINGS,
    dedup_scope: str | None = None,
) -> MermaidGraph:
    source = read_source(file_path)
    language = language_for_path(file_path)
    logger.info(f"Parsing {file_path} as {language}")
    g = generate_flowchart_mermaid(
        source, language=language, settings=settings, dedup_scope=dedup_scope
    )
    write_text(out, g.mermaid)
    return g
