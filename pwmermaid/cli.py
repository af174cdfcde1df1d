"""Command-line interface for pwmermaid."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.markup import escape

from pwmermaid.config import DEDUP_SCOPES, SETTINGS
from pwmermaid.logging_utils import console, echo_diagram, setup_logging


def _path(p: str) -> Path:
    """Convert string to Path."""
    return Path(p).expanduser().resolve()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pwmermaid",
        description="Generate a Mermaid flow diagram from a Playwright test file",
    )
    parser.add_argument(
        "--file",
        required=True,
        type=_path,
        help="Path to the Playwright test file (.js, .ts, .tsx)",
    )
    parser.add_argument(
        "--out",
        type=_path,
        default=None,
        help=f"Output path for the diagram (default: env PWMERMAID_OUTPUT or {SETTINGS.output_path})",
    )
    parser.add_argument(
        "--dedup-scope",
        choices=list(DEDUP_SCOPES),
        default=None,
        help="Reuse repeated steps within one test ('test', default) or across the whole file ('run')",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not echo the diagram to the console",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Re-raise errors with a full traceback",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose)

    out = args.out or _path(SETTINGS.output_path)

    try:
        from pwmermaid.flowchart import write_flowchart

        console.print("\n[bold cyan]═══ pwmermaid: Generate Flow Diagram ═══[/bold cyan]\n")
        console.print(f"[cyan]Test file:[/cyan] {args.file}")
        console.print(f"[cyan]Dedup scope:[/cyan] {args.dedup_scope or SETTINGS.dedup_scope}")
        console.print(f"[cyan]Output:[/cyan] {out}")
        console.print()

        graph = write_flowchart(
            file_path=args.file,
            out=out,
            dedup_scope=args.dedup_scope,
        )

        if not args.quiet:
            echo_diagram(graph.mermaid)

        console.print(f"\n[bold green]✓ Flow diagram generated[/bold green]")
        console.print(f"[green]  Tests:[/green] {graph.test_count}")
        console.print(f"[green]  Nodes:[/green] {graph.node_count}")
        console.print(f"[green]  Edges:[/green] {graph.edge_count}")
        console.print(f"[green]  Output:[/green] {out}")
        console.print()
        return 0

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130

    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        if args.debug:
            raise
        return 1


if __name__ == "__main__":
    sys.exit(main())
