"""Rendering of collected headings as a nested Markdown link list."""

from __future__ import annotations

from .headings import HeadingEntry


def normalize_levels(levels: list[int]) -> list[int]:
    """Remap heading levels so no entry nests more than one step deeper.

    The first level is the base. A level that jumps more than one past the
    last accepted level is clamped to last + 1; the clamped value does not
    become the new reference.

    Args:
        levels: Raw heading levels in document order

    Returns:
        Emitted levels, same length as the input.
    """
    if not levels:
        return []

    emitted: list[int] = []
    last = levels[0]
    for level in levels:
        if level > last + 1:
            emitted.append(last + 1)
        else:
            emitted.append(level)
            last = level
    return emitted


def format_toc_entry(entry: HeadingEntry, depth: int) -> str:
    """Format one ToC line at the given nesting depth."""
    indent = "  " * depth
    return f"{indent}* [{entry.text}](#{entry.anchor})\n"


def build_toc(entries: list[HeadingEntry]) -> str:
    """Render entries as an indented bullet list of links.

    Returns:
        The list text, one newline-terminated line per entry, or "" if empty.
    """
    levels = normalize_levels([entry.level for entry in entries])
    if not levels:
        return ""
    base = min(levels)
    return "".join(
        format_toc_entry(entry, level - base) for entry, level in zip(entries, levels, strict=True)
    )
