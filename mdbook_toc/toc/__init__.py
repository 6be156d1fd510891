"""Table of contents engine for Markdown chapters."""

from .generator import TocGenerator, TocResult, add_toc
from .headings import HeadingCollector, HeadingEntry
from .marker import MarkerLocator, MarkerMatch, locate_marker
from .render import build_toc, normalize_levels
from .slug import AnchorRegistry, normalize_id
from .splice import normalize_newlines, splice_toc
from .tokenizer import (
    Code,
    Event,
    HeadingClose,
    HeadingOpen,
    MarkdownTokenizer,
    Other,
    Span,
    Text,
    Token,
    tokenize,
)

__all__ = [
    "TocGenerator",
    "TocResult",
    "add_toc",
    "HeadingCollector",
    "HeadingEntry",
    "MarkerLocator",
    "MarkerMatch",
    "locate_marker",
    "build_toc",
    "normalize_levels",
    "AnchorRegistry",
    "normalize_id",
    "normalize_newlines",
    "splice_toc",
    "MarkdownTokenizer",
    "tokenize",
    "Token",
    "Span",
    "Event",
    "Text",
    "Code",
    "HeadingOpen",
    "HeadingClose",
    "Other",
]
