"""Console output and logging for pwmermaid, both through one rich console."""
from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()

_ROOT_LOGGER = "pwmermaid"


def setup_logging(verbose: bool = False) -> None:
    """
    Route pwmermaid logs to the shared console.

    Args:
        verbose: DEBUG (per-node decisions) when True, INFO (run summary) otherwise
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Logger under the pwmermaid namespace."""
    if name != _ROOT_LOGGER and not name.startswith(_ROOT_LOGGER + "."):
        name = f"{_ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def echo_diagram(mermaid: str) -> None:
    """Print diagram text verbatim; its brackets must not be read as rich markup."""
    console.out(mermaid, highlight=False, end="")
