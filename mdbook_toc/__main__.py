"""CLI entry point for mdbook-toc.

Usage:
    mdbook-toc                               # Preprocess a book (called by mdBook)
    mdbook-toc supports html                 # Exit 0 if the renderer is supported
    mdbook-toc render chapter.md             # Print chapter.md with its ToC added
    mdbook-toc render chapter.md --in-place  # Rewrite chapter.md

Or via python:
    python -m mdbook_toc render chapter.md
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from mdbook_toc._version import get_full_version_string
from mdbook_toc.config import TocConfig, load_config
from mdbook_toc.errors import TocError
from mdbook_toc.preprocessor import handle_preprocessing, supports_renderer
from mdbook_toc.toc import TocGenerator

# Load environment variables (LOG_LEVEL)
load_dotenv()

# stdout carries the processed book, so everything human-facing goes to stderr
console = Console(stderr=True)


def configure_logging() -> None:
    """Send log records to stderr through rich, level taken from LOG_LEVEL."""
    level_name = os.getenv("LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def run_supports(renderer: str) -> int:
    """Signal whether the renderer is supported by exiting with 0 or 1."""
    return 0 if supports_renderer(renderer) else 1


def run_preprocessor() -> int:
    """Process the book mdBook sends on stdin.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        handle_preprocessing(sys.stdin, sys.stdout)
    except TocError as e:
        console.print(f"[red]Error:[/] {e}", highlight=False)
        return 1
    return 0


def run_render(
    path: Path,
    *,
    book_root: Path | None = None,
    marker: str | None = None,
    max_level: int | None = None,
    in_place: bool = False,
) -> int:
    """Add a ToC to a single Markdown file.

    Args:
        path: Markdown file to process
        book_root: Directory holding book.toml (defaults to the nearest parent that has one)
        marker: Override for the configured marker
        max_level: Override for the configured max level
        in_place: Write the result back instead of printing it

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    if not path.exists():
        console.print(f"[red]Error:[/] File not found: {path}")
        return 1

    try:
        root = book_root if book_root is not None else find_book_root(path.parent)
        base = load_config(root)
        config = TocConfig(
            marker=marker if marker is not None else base.marker,
            max_level=max_level if max_level is not None else base.max_level,
        )
        with path.open("r", encoding="utf-8", newline="") as f:
            content = f.read()
        result = TocGenerator(config).generate(content)
    except TocError as e:
        console.print(f"[red]Error:[/] {e}", highlight=False)
        return 1

    if not result.found:
        console.print(f"[yellow]![/] No ToC marker found in {path}")

    if in_place:
        if result.found:
            with path.open("w", encoding="utf-8", newline="") as f:
                f.write(result.content)
            console.print(f"[green]✓[/] Added {result.entries} ToC entries to {path}")
        return 0

    sys.stdout.write(result.content)
    return 0


def find_book_root(start_path: Path) -> Path:
    """Find the directory containing book.toml from a starting path.

    Args:
        start_path: Directory to start searching from

    Returns:
        Path to the book root, or start_path if none is found
    """
    current = start_path.resolve()
    while current != current.parent:
        if (current / "book.toml").exists():
            return current
        current = current.parent
    return start_path


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="mdbook-toc",
        description="mdBook preprocessor that adds a table of contents to chapters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  mdbook-toc                             Preprocess a book (stdin to stdout)
  mdbook-toc supports html               Check renderer support
  mdbook-toc render src/chapter_1.md     Print a chapter with its ToC

Configuration (book.toml):
  [preprocessor.toc]
  command = "mdbook-toc"
  marker = "<!-- toc -->"
  max-level = 4
""",
    )
    parser.add_argument("--version", action="version", version=get_full_version_string())

    subparsers = parser.add_subparsers(dest="command")

    # Supports subcommand
    supports_parser = subparsers.add_parser(
        "supports",
        help="Check whether a renderer is supported by this preprocessor",
    )
    supports_parser.add_argument("renderer", help="Renderer name, e.g. html")

    # Render subcommand
    render_parser = subparsers.add_parser(
        "render",
        help="Add a table of contents to a single Markdown file",
    )
    render_parser.add_argument("path", type=Path, help="Markdown file to process")
    render_parser.add_argument(
        "--book-root",
        "-b",
        type=Path,
        default=None,
        help="Directory containing book.toml (defaults to nearest parent with one)",
    )
    render_parser.add_argument(
        "--marker",
        "-m",
        default=None,
        help="Marker text to replace (overrides book.toml)",
    )
    render_parser.add_argument(
        "--max-level",
        "-l",
        type=int,
        default=None,
        help="Deepest heading level to include (overrides book.toml)",
    )
    render_parser.add_argument(
        "--in-place",
        "-i",
        action="store_true",
        help="Rewrite the file instead of printing the result",
    )

    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "supports":
        return run_supports(args.renderer)

    if args.command == "render":
        return run_render(
            args.path,
            book_root=args.book_root,
            marker=args.marker,
            max_level=args.max_level,
            in_place=args.in_place,
        )

    return run_preprocessor()


if __name__ == "__main__":
    sys.exit(main())
