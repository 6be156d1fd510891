"""Tests for CLI entry point."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from mdbook_toc.__main__ import find_book_root, main
from mdbook_toc._version import MDBOOK_VERSION

CHAPTER_WITH_TOC = (
    "# Chapter\n\n* [Header 1](#header-1)\n  * [Header 1.1](#header-11)\n\n"
    "# Header 1\n\n## Header 1.1\n"
)


class TestFindBookRoot:
    """Tests for find_book_root function."""

    def test_finds_book_root_in_current_dir(self, tmp_path: Path) -> None:
        """Should find book.toml in current directory."""
        (tmp_path / "book.toml").write_text("")
        assert find_book_root(tmp_path) == tmp_path.resolve()

    def test_finds_book_root_in_parent(self, tmp_path: Path) -> None:
        """Should find book.toml in parent directory."""
        (tmp_path / "book.toml").write_text("")
        subdir = tmp_path / "src" / "nested"
        subdir.mkdir(parents=True)
        assert find_book_root(subdir) == tmp_path.resolve()

    def test_returns_start_path_if_no_book(self, tmp_path: Path) -> None:
        """Should return start path if no book.toml found."""
        subdir = tmp_path / "subdir"
        subdir.mkdir()
        assert find_book_root(subdir) == subdir


class TestMainHelp:
    """Tests for CLI help output."""

    def test_help_returns_zero(self) -> None:
        """--help should return exit code 0."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_render_help_returns_zero(self) -> None:
        """render --help should return exit code 0."""
        with pytest.raises(SystemExit) as exc_info:
            main(["render", "--help"])
        assert exc_info.value.code == 0

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        """--version should print the version and exit 0."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "mdbook-toc" in capsys.readouterr().out


class TestSupports:
    """Tests for the supports subcommand."""

    def test_supported_renderer(self) -> None:
        assert main(["supports", "html"]) == 0

    def test_unsupported_renderer(self) -> None:
        assert main(["supports", "not-supported"]) == 1


class TestPreprocess:
    """Tests for running as an mdBook preprocessor."""

    def test_processes_stdin(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        context = {
            "root": "/book",
            "config": {"preprocessor": {"toc": {"command": "mdbook-toc"}}},
            "renderer": "html",
            "mdbook_version": MDBOOK_VERSION,
        }
        chapter = {
            "name": "Chapter",
            "content": "# Chapter\n\n<!-- toc -->\n\n# Header 1\n\n## Header 1.1\n",
            "sub_items": [],
        }
        book = {"sections": [{"Chapter": chapter}], "__non_exhaustive": None}
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps([context, book])))

        assert main([]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["sections"][0]["Chapter"]["content"] == CHAPTER_WITH_TOC

    def test_invalid_input_exits_one(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("{"))

        assert main([]) == 1
        assert capsys.readouterr().out == ""


class TestRender:
    """Tests for the render subcommand."""

    def test_prints_result(self, chapter: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["render", str(chapter)]) == 0
        assert capsys.readouterr().out == CHAPTER_WITH_TOC

    def test_in_place(self, chapter: Path) -> None:
        assert main(["render", str(chapter), "--in-place"]) == 0
        assert chapter.read_text() == CHAPTER_WITH_TOC

    def test_reads_book_toml(self, temp_book: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (temp_book / "book.toml").write_text('[preprocessor.toc]\nmarker = "[[_TOC_]]"\n')
        path = temp_book / "src" / "gitlab.md"
        path.write_text("# Chapter\n\n[[_TOC_]]\n\n# Header 1\n\n## Header 1.1\n")

        assert main(["render", str(path)]) == 0
        assert capsys.readouterr().out == CHAPTER_WITH_TOC

    def test_flags_override_book_toml(
        self, chapter: Path, temp_book: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (temp_book / "book.toml").write_text("[preprocessor.toc]\nmax-level = 4\n")

        assert main(["render", str(chapter), "--max-level", "1"]) == 0
        out = capsys.readouterr().out
        assert "* [Header 1](#header-1)\n" in out
        assert "[Header 1.1]" not in out

    def test_missing_file(self, tmp_path: Path) -> None:
        assert main(["render", str(tmp_path / "missing.md")]) == 1

    def test_invalid_max_level(self, chapter: Path) -> None:
        assert main(["render", str(chapter), "--max-level", "0"]) == 1

    def test_no_marker_leaves_file(self, tmp_path: Path) -> None:
        path = tmp_path / "plain.md"
        path.write_text("# Plain\n")

        assert main(["render", str(path), "--in-place"]) == 0
        assert path.read_text() == "# Plain\n"
