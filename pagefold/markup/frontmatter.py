r"""Split and parse TOML frontmatter at the top of markup documents.

A document carries frontmatter only when it starts with exactly ``---\n``;
the block ends at the first line that is exactly ``---``. Stripping keeps the
newline that follows the closing delimiter, so stripped content never starts
with a new frontmatter block and stripping twice is a no-op.

Example
-------
>>> from pagefold.markup.frontmatter import content, parse_metadata
>>> source = '---\ntitle = "Hello"\n---\n# Body\n'
>>> parse_metadata(source)
{'title': 'Hello'}
>>> content(source)
'\n# Body\n'
"""

from __future__ import annotations

import re
import tomllib
import typing as typ

from pagefold._constants import FRONTMATTER_DELIMITER

Metadata = dict[str, typ.Any]

FRONTMATTER_PATTERN = re.compile(
    rf"\A{FRONTMATTER_DELIMITER}\n(?P<meta>(?:.*?\n)??){FRONTMATTER_DELIMITER}(?=\n|\Z)",
    re.DOTALL,
)


class MetadataError(ValueError):
    """Raised when a frontmatter block is not valid TOML."""


def split_frontmatter(text: str) -> tuple[str | None, str]:
    """Return ``(frontmatter, content)``; frontmatter is ``None`` when absent."""
    match = FRONTMATTER_PATTERN.match(text)
    if match is None:
        return None, text
    return match.group("meta"), text[match.end() :]


def content(text: str) -> str:
    """Return ``text`` with any frontmatter block removed verbatim."""
    return split_frontmatter(text)[1]


def parse_metadata(text: str) -> Metadata:
    """Parse the frontmatter of ``text`` into a mapping.

    Returns an empty mapping when the document has no frontmatter.

    Raises
    ------
    MetadataError
        If the frontmatter block is not valid TOML.
    """
    block, _ = split_frontmatter(text)
    if block is None:
        return {}
    try:
        return tomllib.loads(block)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML frontmatter: {exc}"
        raise MetadataError(msg) from exc


__all__ = [
    "FRONTMATTER_PATTERN",
    "Metadata",
    "MetadataError",
    "content",
    "parse_metadata",
    "split_frontmatter",
]
