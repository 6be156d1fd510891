"""Table of contents generation for a single Markdown chapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from mdbook_toc.config import TocConfig
from mdbook_toc.errors import ConfigurationError

from .headings import HeadingCollector
from .marker import MarkerLocator
from .render import build_toc
from .slug import AnchorRegistry
from .splice import normalize_newlines, splice_toc
from .tokenizer import Event, MarkdownTokenizer

logger = logging.getLogger(__name__)


@dataclass
class TocResult:
    """Result of generating a ToC for one document."""

    content: str
    found: bool  # Whether the marker was present
    entries: int


class TocGenerator:
    """Replaces the configured marker with a list of links to the headings after it."""

    def __init__(self, config: TocConfig | None = None, tokenizer: MarkdownTokenizer | None = None):
        self.config = config if config is not None else TocConfig()
        self._tokenizer = tokenizer if tokenizer is not None else MarkdownTokenizer()
        self._marker = self._tokenize_marker(self.config.marker)

    def _tokenize_marker(self, marker: str) -> list[Event]:
        # Block contents keep their final newline, so "<!-- toc -->" must
        # tokenize like the "<!-- toc -->\n" line found in a document
        text = _terminate(normalize_newlines(marker))
        events = [token.event for token in self._tokenizer.tokenize(text)]
        if not events:
            raise ConfigurationError(f"Marker {marker!r} does not contain any Markdown content")
        return events

    @property
    def marker(self) -> list[Event]:
        """The marker as the event sequence searched for."""
        return list(self._marker)

    def generate(self, content: str) -> TocResult:
        """Insert the table of contents into content.

        Args:
            content: Raw chapter text, any line ending convention

        Returns:
            TocResult. When no marker is present the content is returned
            exactly as given.

        Raises:
            SerializationError: If the document cannot be reconstructed.
        """
        normalized = normalize_newlines(content)
        text = _terminate(normalized)
        padded = len(text) != len(normalized)
        locator = MarkerLocator(self._marker)
        collector = HeadingCollector(
            text, max_level=self.config.max_level, registry=AnchorRegistry()
        )

        for token in self._tokenizer.tokenize(text):
            if not locator.found:
                locator.feed(token)
                continue
            collector.feed(token)

        match = locator.match
        if match is None:
            logger.debug("No ToC marker found, leaving document unchanged")
            return TocResult(content=content, found=False, entries=0)

        toc = build_toc(collector.entries)
        logger.debug("Generated ToC with %d entries", len(collector.entries))
        spliced = splice_toc(text, match, toc)
        if padded and match.end_span.end < len(text):
            # Drop the newline added for tokenizing, it ended up after the ToC
            spliced = spliced[:-1]
        return TocResult(content=spliced, found=True, entries=len(collector.entries))


def _terminate(text: str) -> str:
    """Ensure non-empty text ends with a newline."""
    if text and not text.endswith("\n"):
        return text + "\n"
    return text


def add_toc(content: str, config: TocConfig | None = None) -> str:
    """Return content with its ToC marker replaced by a table of contents."""
    return TocGenerator(config).generate(content).content
