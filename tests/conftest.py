"""Pytest configuration and fixtures."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest


@pytest.fixture
def temp_book() -> Generator[Path, None, None]:
    """Create a temporary book directory with a src/ folder."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "src").mkdir()
        yield root


@pytest.fixture
def chapter(temp_book: Path) -> Path:
    """A chapter file with the default marker inside temp_book."""
    path = temp_book / "src" / "chapter_1.md"
    path.write_text("# Chapter\n\n<!-- toc -->\n\n# Header 1\n\n## Header 1.1\n")
    return path
