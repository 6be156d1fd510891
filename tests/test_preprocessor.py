"""Tests for the mdBook preprocessor protocol."""

from __future__ import annotations

import io
import json
import logging
from typing import Any

import pytest

from mdbook_toc._version import MDBOOK_VERSION
from mdbook_toc.book import iter_chapters
from mdbook_toc.config import TocConfig
from mdbook_toc.errors import ConfigurationError, SerializationError
from mdbook_toc.preprocessor import (
    PreprocessorContext,
    TocPreprocessor,
    handle_preprocessing,
    parse_input,
    supports_renderer,
)

CHAPTER_CONTENT = "# Chapter\n\n<!-- toc -->\n\n# Header 1\n\n## Header 1.1\n"
CHAPTER_WITH_TOC = (
    "# Chapter\n\n* [Header 1](#header-1)\n  * [Header 1.1](#header-11)\n\n"
    "# Header 1\n\n## Header 1.1\n"
)


def make_chapter(name: str, content: str, sub_items: list[Any] | None = None) -> dict[str, Any]:
    return {
        "Chapter": {
            "name": name,
            "content": content,
            "number": None,
            "sub_items": sub_items or [],
            "path": f"{name.lower()}.md",
            "source_path": f"{name.lower()}.md",
            "parent_names": [],
        }
    }


def make_book(*items: Any) -> dict[str, Any]:
    return {"sections": list(items), "__non_exhaustive": None}


def make_context(toc: dict[str, Any] | None = None, version: str = MDBOOK_VERSION) -> dict:
    preprocessor = {"toc": toc} if toc is not None else {}
    return {
        "root": "/tmp/book",
        "config": {"book": {"title": "Test"}, "preprocessor": preprocessor},
        "renderer": "html",
        "mdbook_version": version,
    }


class TestSupportsRenderer:
    """Renderer support checks."""

    def test_html_supported(self):
        assert supports_renderer("html") is True

    def test_other_renderers_supported(self):
        assert supports_renderer("markdown") is True

    def test_not_supported(self):
        assert supports_renderer("not-supported") is False


class TestBook:
    """Walking the serialized book."""

    def test_iter_chapters_depth_first(self):
        book = make_book(
            make_chapter("A", "", [make_chapter("A1", ""), make_chapter("A2", "")]),
            "Separator",
            {"PartTitle": "Part II"},
            make_chapter("B", ""),
        )

        names = [chapter["name"] for chapter in iter_chapters(book["sections"])]

        assert names == ["A", "A1", "A2", "B"]


class TestTocPreprocessor:
    """Applying the transform to every chapter."""

    def test_run_updates_all_chapters(self):
        book = make_book(
            make_chapter("Intro", CHAPTER_CONTENT, [make_chapter("Nested", CHAPTER_CONTENT)]),
            make_chapter("Plain", "# No marker\n"),
        )

        result = TocPreprocessor().run(book)

        intro = result["sections"][0]["Chapter"]
        assert intro["content"] == CHAPTER_WITH_TOC
        assert intro["sub_items"][0]["Chapter"]["content"] == CHAPTER_WITH_TOC
        assert result["sections"][1]["Chapter"]["content"] == "# No marker\n"

    def test_failure_leaves_book_untouched(self):
        book = make_book(
            make_chapter("Intro", CHAPTER_CONTENT),
            {"Chapter": {"name": "Broken", "content": 42, "sub_items": []}},
        )

        with pytest.raises(SerializationError, match="Broken"):
            TocPreprocessor().run(book)

        assert book["sections"][0]["Chapter"]["content"] == CHAPTER_CONTENT

    def test_uses_config(self):
        book = make_book(make_chapter("Intro", CHAPTER_CONTENT.replace("<!-- toc -->", "[[_TOC_]]")))

        result = TocPreprocessor(TocConfig(marker="[[_TOC_]]")).run(book)

        assert result["sections"][0]["Chapter"]["content"] == CHAPTER_WITH_TOC

    def test_missing_sections(self):
        with pytest.raises(SerializationError, match="sections"):
            TocPreprocessor().run({"items": []})


class TestPreprocessorContext:
    """Context parsing."""

    def test_toc_config_from_context(self):
        context = PreprocessorContext.from_json(make_context({"max-level": 2}))

        assert context.renderer == "html"
        assert context.toc_config() == TocConfig(max_level=2)

    def test_missing_toc_table_gives_defaults(self):
        context = PreprocessorContext.from_json(make_context())

        assert context.toc_config() == TocConfig()

    def test_bad_config_fails_fast(self):
        context = PreprocessorContext.from_json(make_context({"marker": 7}))

        with pytest.raises(ConfigurationError):
            context.toc_config()


class TestHandlePreprocessing:
    """End-to-end stdin/stdout handling."""

    def test_round_trip(self):
        book = make_book(make_chapter("Intro", CHAPTER_CONTENT), "Separator")
        stdin = io.StringIO(json.dumps([make_context(), book]))
        stdout = io.StringIO()

        handle_preprocessing(stdin, stdout)

        output = json.loads(stdout.getvalue())
        assert output["sections"][0]["Chapter"]["content"] == CHAPTER_WITH_TOC
        assert output["sections"][1] == "Separator"
        assert "__non_exhaustive" in output

    def test_invalid_json(self):
        with pytest.raises(SerializationError, match="Unable to parse"):
            parse_input(io.StringIO("not json"))

    def test_wrong_shape(self):
        with pytest.raises(SerializationError, match="context, book"):
            parse_input(io.StringIO(json.dumps({"book": {}})))

    def test_bad_config_writes_nothing(self):
        book = make_book(make_chapter("Intro", CHAPTER_CONTENT))
        stdin = io.StringIO(json.dumps([make_context({"max-level": "x"}), book]))
        stdout = io.StringIO()

        with pytest.raises(ConfigurationError):
            handle_preprocessing(stdin, stdout)

        assert stdout.getvalue() == ""

    def test_version_mismatch_warns(self, caplog):
        book = make_book()
        stdin = io.StringIO(json.dumps([make_context(version="0.0.1"), book]))

        with caplog.at_level(logging.WARNING, logger="mdbook_toc.preprocessor"):
            handle_preprocessing(stdin, io.StringIO())

        assert "0.0.1" in caplog.text
