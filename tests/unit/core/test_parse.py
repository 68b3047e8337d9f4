"""Unit tests for core/parse.py"""

from pathlib import Path

import pytest

from mdctx.core.models import ParsedDoc
from mdctx.core.parse import _strip_frontmatter, discover_files, parse_file, parse_text


def test_strip_frontmatter_with_yaml():
    """_strip_frontmatter extracts YAML header and returns body."""
    text = "---\ntitle: Hello\n---\n# Body\n"
    fm, body = _strip_frontmatter(text)
    assert fm == {"title": "Hello"}
    assert body == "# Body\n"


def test_strip_frontmatter_no_frontmatter():
    """_strip_frontmatter returns empty dict and full text when no header."""
    text = "# No frontmatter\n"
    fm, body = _strip_frontmatter(text)
    assert fm == {}
    assert body == text


def test_strip_frontmatter_not_a_mapping():
    with pytest.raises(ValueError, match="expected a mapping"):
        _strip_frontmatter("---\n- a\n- b\n---\nbody\n")


def test_discover_files_single(tmp_path):
    """discover_files returns a list with one file when given a file path."""
    f = tmp_path / "doc.md"
    f.write_text("# Hello")
    assert discover_files(f) == [f]


def test_discover_files_dir(tmp_path):
    """discover_files finds .md and .mdx files recursively and skips others."""
    (tmp_path / "a.md").write_text("a")
    (tmp_path / "notes.txt").write_text("text")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "b.mdx").write_text("b")
    assert discover_files(tmp_path) == [tmp_path / "a.md", sub / "b.mdx"]


def test_parse_file_with_frontmatter(doc_path):
    """Frontmatter is parsed; tokens and markdown cover the body only."""
    doc = parse_file(doc_path)
    assert isinstance(doc, ParsedDoc)
    assert doc.frontmatter["header-args"] == {"mkdirp": True}
    assert doc.markdown.startswith("# Demo\n")
    assert doc.raw_markdown.endswith(doc.markdown)
    assert any(t.type == "fence" for t in doc.tokens)


def test_parse_text_keeps_path():
    doc = parse_text("```sh\nls\n```\n", Path("virtual.md"))
    assert doc.path == Path("virtual.md")
    assert doc.frontmatter == {}
    assert [t.type for t in doc.tokens] == ["fence"]
