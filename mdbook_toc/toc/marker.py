"""Streaming matcher for the ToC marker token sequence."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from mdbook_toc.errors import ConfigurationError

from .tokenizer import Event, Span, Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkerMatch:
    """Spans of the first and last token of a matched marker."""

    start_span: Span
    end_span: Span


class MarkerLocator:
    """Finds the first run of tokens equal to the marker sequence.

    Tokens are fed one at a time. Matching compares events only, spans are
    recorded but never compared. Once a match completes it is frozen and
    later occurrences are ignored.
    """

    def __init__(self, marker: list[Event]):
        if not marker:
            raise ConfigurationError("ToC marker must produce at least one token")
        self._marker = marker
        self._cursor = 0
        self._start: Span | None = None
        self.match: MarkerMatch | None = None

    @property
    def found(self) -> bool:
        return self.match is not None

    def feed(self, token: Token) -> bool:
        """Advance the matcher by one token.

        Returns:
            True if this token completed the marker.
        """
        if self.match is not None:
            return False

        if token.event != self._marker[self._cursor]:
            if self._cursor == 0:
                return False
            # Restart: the current token may itself begin a new match
            self._cursor = 0
            self._start = None
            if token.event != self._marker[0]:
                return False

        if self._cursor == 0:
            self._start = token.span
        self._cursor += 1

        if self._cursor < len(self._marker):
            return False

        start = self._start if self._start is not None else token.span
        self.match = MarkerMatch(start_span=start, end_span=token.span)
        logger.debug("Found ToC marker at %d..%d", start.start, token.span.end)
        return True


def locate_marker(tokens: list[Token], marker: list[Event]) -> MarkerMatch | None:
    """Return the first match of marker in tokens, or None."""
    locator = MarkerLocator(marker)
    for token in tokens:
        if locator.feed(token):
            break
    return locator.match
