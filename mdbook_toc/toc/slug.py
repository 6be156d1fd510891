"""Heading anchor generation compatible with mdBook's heading ids."""

from __future__ import annotations

import regex

# Unicode Alphabetic or Numeric, the characters mdBook keeps in an id
ID_CHARACTER_PATTERN = regex.compile(r"[\p{Alphabetic}\p{N}_-]")
WHITESPACE_PATTERN = regex.compile(r"\p{White_Space}")


def normalize_id(content: str) -> str:
    """Turn heading text into an anchor the way mdBook does.

    Alphanumerics, `_` and `-` are kept (ASCII letters lower-cased),
    whitespace becomes `-` and everything else is dropped.
    """
    chars: list[str] = []
    for ch in content:
        if ID_CHARACTER_PATTERN.match(ch):
            chars.append(ch.lower() if ch.isascii() else ch)
        elif WHITESPACE_PATTERN.match(ch):
            chars.append("-")
    return "".join(chars)


class AnchorRegistry:
    """Assigns unique anchors within a single document."""

    def __init__(self):
        self._counts: dict[str, int] = {}

    def assign(self, text: str, explicit_id: str | None = None) -> str:
        """Return the anchor for a heading.

        Args:
            text: Raw heading text
            explicit_id: Author-assigned id, used verbatim and never counted

        Returns:
            The base slug on first use, `<slug>-N` for the Nth duplicate.
        """
        if explicit_id:
            return explicit_id

        slug = normalize_id(text)
        count = self._counts.get(slug, 0)
        self._counts[slug] = count + 1
        if count > 0:
            return f"{slug}-{count}"
        return slug
