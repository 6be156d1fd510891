"""Heading extraction from the token stream."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .slug import AnchorRegistry
from .tokenizer import Code, HeadingClose, HeadingOpen, Other, Text, Token

logger = logging.getLogger(__name__)

# Indentation, the ATX `#` run and the whitespace after it
HEADING_PREFIX_PATTERN = re.compile(r"[ \t]*(?:#{1,6}(?=[ \t\n]|$))?[ \t]*")


@dataclass
class HeadingEntry:
    """A heading that will be listed in the table of contents."""

    level: int
    text: str  # Raw source text, escapes and backticks preserved
    anchor: str


@dataclass
class _OpenHeading:
    level: int
    explicit_id: str | None
    content_start: int
    content_end: int | None = None


class HeadingCollector:
    """Collects headings as tokens are fed to it.

    Heading text is sliced from the original source instead of joined from
    event contents, so backslash escapes stay escaped and inline code keeps
    its backticks.
    """

    def __init__(self, source: str, max_level: int = 4, registry: AnchorRegistry | None = None):
        self._source = source
        self._max_level = max_level
        self._registry = registry if registry is not None else AnchorRegistry()
        self._current: _OpenHeading | None = None
        self.entries: list[HeadingEntry] = []

    def feed(self, token: Token) -> None:
        """Process one token."""
        event = token.event
        if isinstance(event, HeadingOpen):
            self._open(event, token)
        elif isinstance(event, (Text, Code)) or _is_image(event):
            if self._current is not None:
                end = self._current.content_end or 0
                self._current.content_end = max(end, token.span.end)
        elif isinstance(event, HeadingClose):
            self._close(event)
        elif isinstance(event, Other):
            pass

    def _open(self, event: HeadingOpen, token: Token) -> None:
        span = token.span
        match = HEADING_PREFIX_PATTERN.match(self._source, span.start, span.end)
        content_start = match.end() if match else span.start
        self._current = _OpenHeading(
            level=event.level, explicit_id=event.id, content_start=content_start
        )

    def _close(self, event: HeadingClose) -> None:
        heading = self._current
        self._current = None
        if heading is None:
            return

        end = heading.content_end
        text = self._source[heading.content_start : end] if end is not None else ""
        anchor = self._registry.assign(text, heading.explicit_id)

        if heading.level > self._max_level:
            logger.debug("Skipping heading %r nested too deeply (h%d)", text, heading.level)
            return

        logger.debug("Heading h%d %r -> #%s", event.level, text, anchor)
        self.entries.append(HeadingEntry(level=heading.level, text=text, anchor=anchor))


def _is_image(event: object) -> bool:
    # An image spans its whole `![alt](src)` source, alt text included
    return isinstance(event, Other) and event.kind == "image"
