"""Filesystem helpers for reading test files and writing diagrams."""
from __future__ import annotations

from pathlib import Path

# Suffix -> tree-sitter grammar name
TS_EXTS = {".ts", ".mts", ".cts"}
TSX_EXTS = {".tsx"}
JS_EXTS = {".js", ".mjs", ".cjs", ".jsx"}


def language_for_path(path: Path) -> str:
    """
    Pick the grammar for a test file from its suffix.

    Unknown suffixes fall back to JavaScript.
    """
    suffix = path.suffix.lower()
    if suffix in TS_EXTS:
        return "typescript"
    if suffix in TSX_EXTS:
        return "tsx"
    return "javascript"


def read_source(path: Path, *, encoding: str = "utf-8") -> str:
    """
    Read a test file.

    Raises:
        RuntimeError: if the file cannot be read
    """
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise RuntimeError(f"Unable to read test file: {path}") from e


def write_text(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    """Write text to path, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding=encoding)
