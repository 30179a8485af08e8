"""Document model nodes shared by the markup dialects.

Nodes are immutable dataclasses. Each dialect module declares its own
``Block`` and ``Inline`` unions from these types plus any dialect-only
variants; nodes never hold rendered output, only source structure.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import enum
import typing as typ

Attrs = cabc.Mapping[str, str]


def _no_attrs() -> Attrs:
    return {}


@dc.dataclass(frozen=True, slots=True)
class Href:
    """Link destination given inline in the source."""

    url: str


@dc.dataclass(frozen=True, slots=True)
class Reference:
    """Link destination named by a reference label, resolved at render time."""

    name: str


Destination = Href | Reference


@dc.dataclass(frozen=True, slots=True)
class ReferenceTarget:
    """A reference definition found in the document."""

    url: str
    title: str | None = None


class AlertLevel(enum.StrEnum):
    """Severity of a GitHub-style alert block."""

    NOTE = "note"
    TIP = "tip"
    IMPORTANT = "important"
    WARNING = "warning"
    CAUTION = "caution"


# Blocks


@dc.dataclass(frozen=True, slots=True)
class HorizontalBreak:
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class ThematicBreak:
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class Heading:
    level: int
    children: tuple[typ.Any, ...]
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class CodeBlock:
    """Fenced or indented code.

    ``info`` is the first word of the fence info string (the language);
    ``full_info`` keeps the whole string.
    """

    info: str
    full_info: str
    text: str
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class HtmlBlock:
    text: str
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class RawBlock:
    """Verbatim output for ``format``, written as a ```` ```=format ```` fence."""

    format: str
    text: str
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class Paragraph:
    children: tuple[typ.Any, ...]
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class BlockQuote:
    children: tuple[typ.Any, ...]
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class AlertBlock:
    level: AlertLevel
    children: tuple[typ.Any, ...]
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class Div:
    """Generic container; ``name`` is the container label, possibly empty."""

    name: str
    children: tuple[typ.Any, ...]
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class OrderedList:
    """Numbered list.

    Each item is a tuple of nodes. Items of tight lists hold inline nodes
    directly instead of wrapping them in paragraphs.
    """

    items: tuple[tuple[typ.Any, ...], ...]
    start: int
    marker: str
    tight: bool = False
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class UnorderedList:
    items: tuple[tuple[typ.Any, ...], ...]
    marker: str
    tight: bool = False
    attrs: Attrs = dc.field(default_factory=_no_attrs)


# Inlines


@dc.dataclass(frozen=True, slots=True)
class PlainText:
    text: str


@dc.dataclass(frozen=True, slots=True)
class CodeSpan:
    text: str
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class Emphasis:
    marker: str
    children: tuple[typ.Any, ...]
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class StrongEmphasis:
    children: tuple[typ.Any, ...]
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class StrikeThrough:
    children: tuple[typ.Any, ...]
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class Link:
    destination: Destination
    children: tuple[typ.Any, ...]
    title: str | None = None
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class Image:
    destination: Destination
    alt: tuple[typ.Any, ...]
    title: str | None = None
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class UriAutolink:
    url: str


@dc.dataclass(frozen=True, slots=True)
class EmailAutolink:
    address: str


@dc.dataclass(frozen=True, slots=True)
class HtmlInline:
    text: str


@dc.dataclass(frozen=True, slots=True)
class HardLineBreak:
    pass


@dc.dataclass(frozen=True, slots=True)
class SoftLineBreak:
    pass


@dc.dataclass(frozen=True, slots=True)
class NonBreakingSpace:
    pass


@dc.dataclass(frozen=True, slots=True)
class Span:
    children: tuple[typ.Any, ...]
    attrs: Attrs = dc.field(default_factory=_no_attrs)


@dc.dataclass(frozen=True, slots=True)
class MathInline:
    text: str


@dc.dataclass(frozen=True, slots=True)
class MathDisplay:
    text: str


@dc.dataclass(frozen=True, slots=True)
class Footnote:
    """Footnote reference; renderers emit nothing for it."""

    label: str


@dc.dataclass(frozen=True, slots=True)
class Document:
    """Parsed document: top-level blocks plus the reference table."""

    blocks: tuple[typ.Any, ...]
    references: cabc.Mapping[str, ReferenceTarget] = dc.field(default_factory=dict)
    reference_attributes: cabc.Mapping[str, Attrs] = dc.field(default_factory=dict)


__all__ = [
    "AlertBlock",
    "AlertLevel",
    "Attrs",
    "BlockQuote",
    "CodeBlock",
    "CodeSpan",
    "Destination",
    "Div",
    "Document",
    "EmailAutolink",
    "Emphasis",
    "Footnote",
    "HardLineBreak",
    "Heading",
    "HorizontalBreak",
    "Href",
    "HtmlBlock",
    "HtmlInline",
    "Image",
    "Link",
    "MathDisplay",
    "MathInline",
    "NonBreakingSpace",
    "OrderedList",
    "Paragraph",
    "PlainText",
    "RawBlock",
    "Reference",
    "ReferenceTarget",
    "SoftLineBreak",
    "Span",
    "StrikeThrough",
    "StrongEmphasis",
    "ThematicBreak",
    "UnorderedList",
    "UriAutolink",
]
