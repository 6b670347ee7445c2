"""
editflow command line
=====================
Run one request against a project.

Usage:
    editflow "Add input validation to the signup form" -f src/signup.ts
    editflow -p "Explain how caching works" -r ../service --verbose
    editflow -p "Rename the config loader" -f app/config.py --write-only

Exit code behavior:
- 0 when the request completes.
- 1 when no prompt is given or the request fails.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from editflow import __version__
from editflow.pipeline.context import PipelineContext
from editflow.pipeline.runner import process_request
from editflow.utils.paths import display_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="editflow",
        description="Answer questions about a codebase or apply requested code changes.",
    )
    parser.add_argument("prompt_text", nargs="?", help="Request text (alternative to --prompt)")
    parser.add_argument("-p", "--prompt", help="Request text")
    parser.add_argument("-f", "--files", nargs="*", default=[], help="Seed files for the request")
    parser.add_argument("-r", "--root", default=os.getcwd(), help="Project root (default: current directory)")
    parser.add_argument(
        "-w",
        "--write-only",
        action="store_true",
        help="Write proposed changes to CHANGES.md instead of editing files",
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--context-out", type=Path, help="Write the final request context as JSON")
    return parser


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def render_result(ctx: PipelineContext, console: Console) -> None:
    if ctx.answer is not None:
        console.print(Markdown(ctx.answer))
        return

    if ctx.result.is_empty():
        console.print("[yellow]No files were changed.[/yellow]")
        return

    table = Table(title="File changes")
    table.add_column("Status", style="cyan")
    table.add_column("File", style="green")
    for status, paths in (
        ("created", ctx.result.created_files),
        ("modified", ctx.result.modified_files),
        ("deleted", ctx.result.deleted_files),
    ):
        for path in paths:
            table.add_row(status, display_path(path, ctx.project_root))
    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    console = Console()

    prompt = args.prompt or args.prompt_text
    if not prompt or not prompt.strip():
        console.print("[red]A prompt is required (positional or --prompt).[/red]")
        parser.print_usage(sys.stderr)
        return 1

    configure_logging(args.verbose)

    try:
        ctx = asyncio.run(
            process_request(
                prompt,
                args.files,
                Path(args.root).expanduser(),
                write_only=args.write_only,
            )
        )
    except Exception as e:
        logger.error(f"Request failed: {e}")
        console.print(f"[red]Error:[/red] {e}")
        return 1

    if args.context_out:
        ctx.write_json(args.context_out)
        logger.info(f"Context written to {args.context_out}")

    render_result(ctx, console)
    return 0


if __name__ == "__main__":
    sys.exit(main())
