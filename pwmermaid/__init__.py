"""Mermaid flow diagrams from Playwright test files."""

__version__ = "0.1.0"
