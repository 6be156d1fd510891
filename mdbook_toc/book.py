"""Minimal view of mdBook's serialized book.

Books are kept as the plain JSON structures mdBook sends so that fields this
preprocessor does not know about survive the round trip unchanged.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from mdbook_toc.errors import SerializationError


def get_sections(book: Any) -> list[Any]:
    """Return the top-level items of a book.

    Raises:
        SerializationError: If the book has no section list.
    """
    if not isinstance(book, dict) or not isinstance(book.get("sections"), list):
        raise SerializationError("Book must be an object with a 'sections' list")
    return book["sections"]


def iter_chapters(items: list[Any]) -> Iterator[dict[str, Any]]:
    """Yield every chapter in document order, parents before their sub-chapters.

    Separators and part titles are skipped.
    """
    for item in items:
        if not isinstance(item, dict) or "Chapter" not in item:
            continue
        chapter = item["Chapter"]
        if not isinstance(chapter, dict):
            raise SerializationError("Chapter entry must be an object")
        yield chapter
        yield from iter_chapters(chapter.get("sub_items") or [])


def chapter_name(chapter: dict[str, Any]) -> str:
    """Display name of a chapter for messages."""
    return str(chapter.get("name") or chapter.get("path") or "<unnamed>")
