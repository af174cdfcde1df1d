"""Configuration settings for pwmermaid."""
from __future__ import annotations

import os
from dataclasses import dataclass

# Theme header copied verbatim into every diagram.
THEME_DIRECTIVE = (
    '%%{init: {"themeVariables": {"fontSize": "16px", "nodeBorder": "1px solid #333", '
    '"nodeTextColor": "#333", "edgeColor": "#333", "nodeBackground": "#fff", '
    '"edgeLabelBackground": "#ffffff"} }}%%'
)

DEDUP_SCOPES = ("test", "run")


@dataclass(frozen=True)
class Settings:
    """pwmermaid configuration settings."""

    # Call shapes
    test_function: str = os.getenv("PWMERMAID_TEST_FUNCTION", "test")
    assertion_function: str = os.getenv("PWMERMAID_ASSERTION_FUNCTION", "expect")

    # Manual tests
    manual_tag: str = os.getenv("PWMERMAID_MANUAL_TAG", "@manual")
    manual_prefix: str = os.getenv("PWMERMAID_MANUAL_PREFIX", "Manual test - ")

    # "test" keeps node reuse inside one subgraph, "run" shares it across tests.
    dedup_scope: str = os.getenv("PWMERMAID_DEDUP_SCOPE", "test")

    output_path: str = os.getenv("PWMERMAID_OUTPUT", "output.mermaid")


SETTINGS = Settings()
