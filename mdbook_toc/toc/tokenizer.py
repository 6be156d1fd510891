"""Markdown tokenizer producing a flat event stream with source spans.

markdown-it-py only records line ranges for block tokens, so character spans
are derived here: block tokens map their line range onto offsets, closing
tokens reuse the span of their opener, and inline tokens are located by a
forward scan over the block's source text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import NamedTuple, Union

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.token import Token as MdToken

from mdbook_toc.errors import SerializationError

logger = logging.getLogger(__name__)

# Trailing `{#id .class key=value}` block on a heading line
HEADING_ATTRIBUTES_PATTERN = re.compile(r"[ \t]*\{([^{}]*)\}[ \t]*$")
LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")


class Span(NamedTuple):
    """Half-open range of character offsets into the tokenized text."""

    start: int
    end: int


@dataclass(frozen=True)
class Text:
    """Literal text run. Escapes and entities surface as their own Text."""

    content: str


@dataclass(frozen=True)
class Code:
    """Inline code span (content without the backticks)."""

    content: str


@dataclass(frozen=True)
class HeadingOpen:
    """Start of a heading, with the author-assigned id if one was given."""

    level: int
    id: str | None = None
    classes: tuple[str, ...] = ()


@dataclass(frozen=True)
class HeadingClose:
    """End of a heading."""

    level: int


@dataclass(frozen=True)
class Other:
    """Any construct the ToC engine passes through untouched."""

    kind: str
    tag: str = ""
    markup: str = ""
    content: str = ""
    info: str = ""
    attrs: tuple[tuple[str, str], ...] = ()


Event = Union[Text, Code, HeadingOpen, HeadingClose, Other]


class Token(NamedTuple):
    """An event together with the source span it was produced from."""

    event: Event
    span: Span


def parse_heading_attributes(raw: str) -> tuple[str | None, tuple[str, ...]]:
    """Parse the inside of a heading attribute block.

    Args:
        raw: Text between the braces, e.g. "#intro .wide data-x=1"

    Returns:
        Tuple of (explicit id or None, classes). Other attributes are ignored.
    """
    heading_id: str | None = None
    classes: list[str] = []
    for part in raw.split():
        if part.startswith("#") and len(part) > 1:
            heading_id = part[1:]
        elif part.startswith(".") and len(part) > 1:
            classes.append(part[1:])
    return heading_id, tuple(classes)


def _heading_attributes_rule(state: StateCore) -> None:
    """Move a trailing attribute block from the heading text onto heading_open."""
    tokens = state.tokens
    for i, token in enumerate(tokens[:-1]):
        if token.type != "heading_open":
            continue
        inline = tokens[i + 1]
        match = HEADING_ATTRIBUTES_PATTERN.search(inline.content)
        if not match:
            continue
        heading_id, classes = parse_heading_attributes(match.group(1))
        inline.content = inline.content[: match.start()]
        if heading_id:
            token.attrSet("id", heading_id)
        if classes:
            token.attrSet("class", " ".join(classes))


def heading_attributes_plugin(md: MarkdownIt) -> None:
    """markdown-it plugin enabling `# Heading {#id .class}` syntax."""
    md.core.ruler.after("block", "heading_attributes", _heading_attributes_rule)


def create_parser() -> MarkdownIt:
    """Create a parser with the same extensions mdBook enables."""
    md = MarkdownIt("commonmark").enable(["table", "strikethrough"])
    # Keep escapes and entities as separate tokens so their raw spans survive
    md.disable("text_join")
    md.use(heading_attributes_plugin)
    return md


class _LineIndex:
    """Maps markdown-it line numbers onto character offsets."""

    def __init__(self, text: str):
        self.length = len(text)
        self.starts = [0]
        self.starts.extend(m.end() for m in LINE_BREAK_PATTERN.finditer(text))

    def offset(self, line: int) -> int:
        if line < len(self.starts):
            return self.starts[line]
        return self.length

    def span(self, line_map: list[int]) -> Span:
        start_line, end_line = line_map
        return Span(self.offset(start_line), self.offset(end_line))


def _find_backtick_run(source: str, run: str, start: int, end: int) -> re.Match[str] | None:
    """Find a backtick run of exactly len(run) characters."""
    pattern = re.compile(rf"(?<!`){re.escape(run)}(?!`)")
    return pattern.search(source, start, end)


class MarkdownTokenizer:
    """Turns Markdown text into a list of (event, span) tokens."""

    def __init__(self, parser: MarkdownIt | None = None):
        self._md = parser if parser is not None else create_parser()

    def tokenize(self, text: str) -> list[Token]:
        """Tokenize text into a flat event stream.

        Args:
            text: Markdown source. Spans index into this exact string.

        Returns:
            Tokens in document order.

        Raises:
            SerializationError: If a top-level block carries no source position.
        """
        lines = _LineIndex(text)
        md_tokens = self._md.parse(text)
        tokens: list[Token] = []
        # Span of each open block and where its content starts on its first line
        open_blocks: list[tuple[Span, int]] = []

        for index, md_token in enumerate(md_tokens):
            parent = open_blocks[-1][0] if open_blocks else None

            if md_token.type == "inline":
                region = lines.span(md_token.map) if md_token.map else parent
                if region is None:
                    raise SerializationError("Inline content without source position")
                tokens.extend(self._inline_tokens(text, md_token, region))
                continue

            inner = None
            if md_token.nesting == -1:
                span = open_blocks.pop()[0] if open_blocks else Span(lines.length, lines.length)
            elif md_token.map:
                span = lines.span(md_token.map)
                following = md_tokens[index + 1] if index + 1 < len(md_tokens) else None
                floor = span.start
                if open_blocks and open_blocks[-1][0].start >= span.start:
                    # Nested on the opening line of its parent, e.g. `> > text`
                    floor = open_blocks[-1][1]
                start, inner = self._block_start(text, span, md_token, following, floor)
                span = Span(start, span.end)
            elif parent is not None:
                span = parent
            else:
                raise SerializationError(
                    f"Offset tracking unavailable for '{md_token.type}' token"
                )

            if md_token.nesting == 1:
                open_blocks.append((span, inner if inner is not None else span.start))

            tokens.append(Token(self._event(md_token), span))

        logger.debug("Tokenized %d characters into %d tokens", len(text), len(tokens))
        return tokens

    def _event(self, md_token: MdToken) -> Event:
        if md_token.type == "heading_open":
            classes = str(md_token.attrGet("class") or "").split()
            heading_id = md_token.attrGet("id")
            return HeadingOpen(
                level=int(md_token.tag[1:]),
                id=str(heading_id) if heading_id is not None else None,
                classes=tuple(classes),
            )
        if md_token.type == "heading_close":
            return HeadingClose(level=int(md_token.tag[1:]))
        if md_token.type in ("text", "text_special"):
            return Text(md_token.content)
        if md_token.type == "code_inline":
            return Code(md_token.content)
        return Other(
            kind=md_token.type,
            tag=md_token.tag,
            markup=md_token.markup,
            content=md_token.content,
            info=md_token.info,
            attrs=tuple(sorted((key, str(value)) for key, value in md_token.attrs.items())),
        )

    def _block_start(
        self, source: str, span: Span, block: MdToken, following: MdToken | None, floor: int
    ) -> tuple[int, int]:
        """Find where a block begins inside its line range.

        Container prefixes such as blockquote markers and list indentation
        are skipped, so replacing the span leaves them in place.

        Returns:
            Tuple of (block start, offset just past the block's own marker).
        """
        lower = min(max(span.start, floor), span.end)
        if block.type == "heading_open":
            start = self._heading_start(source, Span(lower, span.end), block, following)
            return start, start

        pattern = _block_pattern(block, following)
        match = pattern.search(source, lower, span.end) if pattern is not None else None
        if match is None:
            return lower, lower
        if block.type in ("bullet_list_open", "ordered_list_open"):
            # The first item starts at the same marker
            return match.start(), match.start()
        return match.start(), match.end()

    def _heading_start(
        self, source: str, span: Span, heading: MdToken, inline: MdToken | None
    ) -> int:
        """Find where the heading begins inside its line range.

        The span starts at the `#` run for ATX headings and at the text for
        setext ones.
        """
        if inline is None or inline.type != "inline" or not inline.content:
            hashes = source.find("#", span.start, span.end)
            return hashes if heading.markup.startswith("#") and hashes >= 0 else span.start
        found = source.find(inline.content, span.start, span.end)
        if found < 0:
            return span.start
        if heading.markup.startswith("#"):
            hashes = source.rfind(heading.markup, span.start, found)
            return hashes if hashes >= 0 else found
        return found

    def _inline_tokens(self, source: str, inline: MdToken, region: Span) -> list[Token]:
        found = source.find(inline.content, region.start, region.end) if inline.content else -1
        cursor = found if found >= 0 else region.start
        tokens: list[Token] = []
        self._locate_children(source, inline.children or [], cursor, region.end, tokens)
        return tokens

    def _locate_children(
        self, source: str, children: list[MdToken], cursor: int, end: int, tokens: list[Token]
    ) -> int:
        """Append located children to tokens, returning the offset after the last one."""
        for child in children:
            if child.type == "image":
                cursor = self._locate_image(source, child, cursor, end, tokens)
                continue
            span = self._locate(source, child, cursor, end)
            cursor = span.end
            tokens.append(Token(self._event(child), span))
        return cursor

    def _locate_image(
        self, source: str, image: MdToken, cursor: int, end: int, tokens: list[Token]
    ) -> int:
        """Locate `![alt](src)`. The image token is followed by its alt text tokens."""
        opening = source.find("![", cursor, end)
        label_start = opening + 2 if opening >= 0 else cursor
        if opening < 0:
            opening = cursor

        alt: list[Token] = []
        label_end = self._locate_children(source, image.children or [], label_start, end, alt)
        closing = source.find("]", label_end, end)
        stop = _link_tail_end(source, closing + 1, end) if closing >= 0 else label_end

        tokens.append(Token(self._event(image), Span(opening, stop)))
        tokens.extend(alt)
        return stop

    def _locate(self, source: str, child: MdToken, cursor: int, end: int) -> Span:
        """Locate an inline token at or after cursor, zero-width if not found."""
        if child.type == "code_inline":
            opening = _find_backtick_run(source, child.markup, cursor, end)
            if opening is None:
                return Span(cursor, cursor)
            closing = _find_backtick_run(source, child.markup, opening.end(), end)
            if closing is None:
                return Span(cursor, cursor)
            return Span(opening.start(), closing.end())

        if child.type == "link_close" and child.markup != "autolink":
            # The closing token owns `](destination "title")` or `][label]`
            closing = source.find("]", cursor, end)
            if closing < 0:
                return Span(cursor, cursor)
            return Span(closing, _link_tail_end(source, closing + 1, end))

        if child.type == "text":
            needle = child.content
        elif child.type == "text_special":
            needle = child.markup or child.content
        elif child.type == "softbreak":
            needle = "\n"
        elif child.type == "html_inline":
            needle = child.content
        elif child.type == "link_open":
            needle = "<" if child.markup == "autolink" else "["
        elif child.type == "link_close":
            needle = ">"
        elif child.type.startswith(("em_", "strong_", "s_")):
            needle = child.markup
        else:
            # Hard breaks do not keep their raw source
            needle = ""

        if not needle:
            return Span(cursor, cursor)
        position = source.find(needle, cursor, end)
        if position < 0:
            return Span(cursor, cursor)
        return Span(position, position + len(needle))


def _block_pattern(block: MdToken, following: MdToken | None) -> re.Pattern[str] | None:
    """Pattern matching the first characters a block owns on its first line."""
    if block.type == "paragraph_open":
        if following is None or following.type != "inline" or not following.content:
            return None
        return re.compile(re.escape(following.content.split("\n", 1)[0]))
    if block.type == "html_block" and block.content:
        return re.compile(re.escape(block.content.split("\n", 1)[0]))
    if block.type == "blockquote_open":
        return re.compile(">")
    if block.type == "ordered_list_open" or (block.type == "list_item_open" and block.info):
        return re.compile(rf"\d{{1,9}}{re.escape(block.markup)}")
    if block.type in ("bullet_list_open", "list_item_open", "fence", "hr") and block.markup:
        return re.compile(re.escape(block.markup[:1] if block.type == "hr" else block.markup))
    return None


def _link_tail_end(source: str, pos: int, end: int) -> int:
    """Return the offset past the `(destination "title")` or `[label]` starting at pos."""
    if pos >= end:
        return pos
    if source[pos] == "[":
        closing = source.find("]", pos + 1, end)
        return closing + 1 if closing >= 0 else pos
    if source[pos] != "(":
        return pos

    depth = 0
    quote: str | None = None
    i = pos
    while i < end:
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch == "<" and not source[pos + 1 : i].strip():
            # `<...>` destinations may hold unbalanced parentheses
            closing = source.find(">", i + 1, end)
            if closing >= 0:
                i = closing
        elif ch in "\"'" and source[i - 1] in " \t\n":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return pos


@lru_cache(maxsize=1)
def _default_tokenizer() -> MarkdownTokenizer:
    return MarkdownTokenizer()


def tokenize(text: str) -> list[Token]:
    """Tokenize text with a shared default tokenizer."""
    return _default_tokenizer().tokenize(text)
