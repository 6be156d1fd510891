"""mdBook preprocessor protocol handling.

mdBook invokes the preprocessor with a JSON array `[context, book]` on
stdin and expects the (possibly modified) book as JSON on stdout.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import IO, Any

from mdbook_toc._version import MDBOOK_VERSION
from mdbook_toc.book import chapter_name, get_sections, iter_chapters
from mdbook_toc.config import TocConfig
from mdbook_toc.errors import ConfigurationError, SerializationError
from mdbook_toc.toc import TocGenerator

logger = logging.getLogger(__name__)

PREPROCESSOR_NAME = "toc"
UNSUPPORTED_RENDERER = "not-supported"


@dataclass
class PreprocessorContext:
    """The context object mdBook passes alongside the book."""

    root: str = ""
    config: dict[str, Any] = field(default_factory=dict)
    renderer: str = ""
    mdbook_version: str = ""

    @classmethod
    def from_json(cls, data: Any) -> PreprocessorContext:
        if not isinstance(data, dict):
            raise SerializationError("Preprocessor context must be an object")
        config = data.get("config") or {}
        if not isinstance(config, dict):
            raise ConfigurationError("Book configuration must be a table")
        return cls(
            root=str(data.get("root", "")),
            config=config,
            renderer=str(data.get("renderer", "")),
            mdbook_version=str(data.get("mdbook_version", "")),
        )

    def toc_config(self) -> TocConfig:
        """Build the ToC settings from `[preprocessor.toc]`."""
        preprocessors = self.config.get("preprocessor") or {}
        if not isinstance(preprocessors, dict):
            raise ConfigurationError("[preprocessor] must be a table")
        return TocConfig.from_mapping(preprocessors.get(PREPROCESSOR_NAME))


def supports_renderer(renderer: str) -> bool:
    """Whether the preprocessor should run for the given renderer."""
    return renderer != UNSUPPORTED_RENDERER


def parse_input(stream: IO[str]) -> tuple[PreprocessorContext, dict[str, Any]]:
    """Read the `[context, book]` pair mdBook writes to stdin.

    Raises:
        SerializationError: If the input is not valid preprocessor JSON.
    """
    try:
        data = json.load(stream)
    except json.JSONDecodeError as e:
        raise SerializationError(f"Unable to parse the input: {e}") from e

    if not isinstance(data, list) or len(data) != 2:
        raise SerializationError("Expected a JSON array of [context, book]")

    context = PreprocessorContext.from_json(data[0])
    book = data[1]
    get_sections(book)
    return context, book


class TocPreprocessor:
    """Adds tables of contents to every chapter of a book."""

    name = PREPROCESSOR_NAME

    def __init__(self, config: TocConfig | None = None):
        self.generator = TocGenerator(config)

    def run(self, book: dict[str, Any]) -> dict[str, Any]:
        """Rewrite each chapter's content in place.

        All chapters are processed before any is modified, so a failure in
        one chapter leaves the whole book untouched.

        Raises:
            TocError: From the first chapter that fails.
        """
        updates: list[tuple[dict[str, Any], str]] = []
        for chapter in iter_chapters(get_sections(book)):
            content = chapter.get("content", "")
            if not isinstance(content, str):
                raise SerializationError(f"Chapter '{chapter_name(chapter)}' content is not text")
            result = self.generator.generate(content)
            if result.found:
                logger.info(
                    "Added ToC with %d entries to '%s'", result.entries, chapter_name(chapter)
                )
                updates.append((chapter, result.content))

        for chapter, content in updates:
            chapter["content"] = content
        return book


def handle_preprocessing(stdin: IO[str], stdout: IO[str]) -> None:
    """Run one preprocessor invocation from stdin to stdout."""
    context, book = parse_input(stdin)

    if context.mdbook_version != MDBOOK_VERSION:
        logger.warning(
            "The mdbook-toc preprocessor was written against version %s of mdbook, "
            "but we're being called from version %s",
            MDBOOK_VERSION,
            context.mdbook_version,
        )

    preprocessor = TocPreprocessor(context.toc_config())
    processed_book = preprocessor.run(book)
    json.dump(processed_book, stdout)
