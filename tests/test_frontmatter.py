"""Unit tests for TOML frontmatter splitting and parsing.

Usage
-----
Run ``pytest tests/test_frontmatter.py -v``.
"""

from __future__ import annotations

import tomllib

import pytest

from pagefold.markup.frontmatter import (
    MetadataError,
    content,
    parse_metadata,
    split_frontmatter,
)

DOCUMENT = '---\ntitle = "Hello"\ntags = ["a", "b"]\n---\n# Body\n'


def test_split_frontmatter_returns_block_and_content() -> None:
    """The block between delimiters is separated from the body."""
    block, body = split_frontmatter(DOCUMENT)
    assert block == 'title = "Hello"\ntags = ["a", "b"]\n'
    assert body == "\n# Body\n", "Content should keep the newline after the delimiter"


def test_parse_metadata_reads_toml() -> None:
    """Frontmatter is parsed as TOML."""
    assert parse_metadata(DOCUMENT) == {"title": "Hello", "tags": ["a", "b"]}


def test_content_is_idempotent() -> None:
    """Stripping twice gives the same result as stripping once."""
    once = content(DOCUMENT)
    assert content(once) == once


def test_missing_frontmatter_yields_empty_metadata() -> None:
    """Documents without frontmatter are returned unchanged."""
    text = "# Title\n\n---\nnot = 'meta'\n---\n"
    assert parse_metadata(text) == {}
    assert content(text) == text


@pytest.mark.parametrize("text", ["----\na = 1\n---\n", " ---\na = 1\n---\n", "---\na = 1\n"])
def test_malformed_delimiters_are_not_frontmatter(text: str) -> None:
    """Only an exact opening line with a matching close counts."""
    assert split_frontmatter(text) == (None, text)


def test_empty_frontmatter_block() -> None:
    """An empty block parses to an empty mapping."""
    assert split_frontmatter("---\n---\nbody") == ("", "\nbody")
    assert parse_metadata("---\n---\nbody") == {}


def test_closing_delimiter_at_end_of_input() -> None:
    """The closing delimiter may be the last line without a newline."""
    assert split_frontmatter("---\na = 1\n---") == ("a = 1\n", "")


def test_invalid_toml_raises_metadata_error() -> None:
    """TOML errors are wrapped and keep their cause."""
    with pytest.raises(MetadataError, match="Invalid TOML") as excinfo:
        parse_metadata("---\ntitle = \n---\nbody\n")
    assert isinstance(excinfo.value.__cause__, tomllib.TOMLDecodeError)


def test_content_ignores_invalid_toml() -> None:
    """Stripping never validates the block."""
    assert content("---\ntitle = \n---\nbody\n") == "\nbody\n"
