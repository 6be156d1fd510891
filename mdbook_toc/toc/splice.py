"""Replacement of the marker span with the rendered table of contents."""

from __future__ import annotations

from mdbook_toc.errors import SerializationError

from .marker import MarkerMatch


def normalize_newlines(content: str) -> str:
    """Collapse CR-LF line endings to LF."""
    return content.replace("\r\n", "\n")


def splice_toc(content: str, match: MarkerMatch, toc: str) -> str:
    """Replace the matched marker region of content with toc.

    A newline is added after the list unless the text following the marker
    already starts with one or nothing follows it.

    Args:
        content: Newline-normalized document the spans refer to
        match: Marker location
        toc: Rendered list

    Returns:
        The document with the marker replaced.

    Raises:
        SerializationError: If the marker spans do not fit the document.
    """
    start, end = match.start_span.start, match.end_span.end
    if not 0 <= start <= end <= len(content):
        raise SerializationError(
            f"Marker span {start}..{end} does not fit a document of {len(content)} characters"
        )
    before = content[: match.start_span.start]
    after = content[match.end_span.end :]
    extra_newline = "\n" if after and not after.startswith("\n") else ""
    return f"{before}{toc}{extra_newline}{after}"
