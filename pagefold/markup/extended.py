r"""Render the extended markup dialect through a caller-supplied callback table.

On top of CommonMark this dialect understands:

* attribute blocks (``{#id .class key=value}``) on blocks and inline elements;
* bracketed spans, ``[text]{.class}``;
* generic divs, ``::: name`` ... ``:::``;
* raw blocks, fenced code whose info string is ``=format``;
* inline and display math, ``$x$`` and ``$$x$$``;
* footnote references, which render as nothing;
* attributes on reference definitions, ``[label]: /url {.class}``, applied to
  every link that resolves through that label.

Inline HTML is not recognised; use a raw block instead.

Example
-------
>>> from pagefold.markup.extended import render
>>> from pagefold.markup.html import HtmlContentRenderer
>>> views = render("[ok]{.badge}\n", HtmlContentRenderer().extended())
>>> str(views[0])
'<p><span class="badge">ok</span></p>'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import functools
import re
import typing as typ

from markdown_it import MarkdownIt
from markdown_it.common.utils import normalizeReference
from mdit_py_plugins.attrs import attrs_block_plugin, attrs_plugin
from mdit_py_plugins.attrs.parse import ParseError
from mdit_py_plugins.attrs.parse import parse as parse_attributes
from mdit_py_plugins.container import container_plugin
from mdit_py_plugins.dollarmath import dollarmath_plugin
from mdit_py_plugins.footnote import footnote_plugin

from . import _tokens
from ._fold import EMPTY_ATTRS, fold_all, fold_common
from ._fold import text_content as text_content
from .frontmatter import Metadata, content, parse_metadata
from .nodes import (
    Attrs,
    BlockQuote,
    CodeBlock,
    CodeSpan,
    Div,
    Document,
    EmailAutolink,
    Emphasis,
    Footnote,
    HardLineBreak,
    Heading,
    Image,
    Link,
    MathDisplay,
    MathInline,
    NonBreakingSpace,
    OrderedList,
    Paragraph,
    PlainText,
    RawBlock,
    SoftLineBreak,
    Span,
    StrikeThrough,
    StrongEmphasis,
    ThematicBreak,
    UnorderedList,
    UriAutolink,
)

V = typ.TypeVar("V")

Block = (
    ThematicBreak
    | Heading
    | CodeBlock
    | RawBlock
    | Paragraph
    | BlockQuote
    | Div
    | OrderedList
    | UnorderedList
)
Inline = (
    CodeSpan
    | Emphasis
    | StrongEmphasis
    | StrikeThrough
    | Link
    | Image
    | UriAutolink
    | EmailAutolink
    | PlainText
    | HardLineBreak
    | SoftLineBreak
    | NonBreakingSpace
    | Span
    | MathInline
    | MathDisplay
    | Footnote
)

DIV_CONTAINER = "div"
RAW_PREFIX = "="
REFERENCE_ATTRIBUTES = re.compile(
    r"^(?P<definition> {0,3}\[(?!\^)(?P<label>[^\]\n]+)\]:[^\n]*?)"
    r"[ \t]+(?P<attrs>\{[^{}\n]*\})[ \t]*$",
)
LITERAL_BLOCKS = frozenset({"fence", "code_block", "math_block", "math_block_label"})


@dc.dataclass(frozen=True, slots=True)
class ExtendedRenderer(typ.Generic[V]):
    """One callback per extended-dialect node variant.

    Shares the calling conventions of
    :class:`~pagefold.markup.markdown.MarkdownRenderer`; spans receive their
    flattened text rather than rendered children.
    """

    thematic_break: cabc.Callable[[Attrs], V]
    heading: cabc.Callable[[Attrs, int, list[V]], V]
    code_block: cabc.Callable[[Attrs, str, str, str], V]
    raw_block: cabc.Callable[[Attrs, str, str], V]
    paragraph: cabc.Callable[[Attrs, list[V]], V]
    block_quote: cabc.Callable[[Attrs, list[V]], V]
    div: cabc.Callable[[Attrs, str, list[V]], V]
    ordered_list: cabc.Callable[[Attrs, int, str, list[list[V]]], V]
    unordered_list: cabc.Callable[[Attrs, str, list[list[V]]], V]
    code_span: cabc.Callable[[Attrs, str], V]
    emphasis: cabc.Callable[[Attrs, str, list[V]], V]
    strong: cabc.Callable[[Attrs, list[V]], V]
    strikethrough: cabc.Callable[[Attrs, list[V]], V]
    link: cabc.Callable[[Attrs, str, str | None, list[V]], V]
    image: cabc.Callable[[Attrs, str, str | None, str], V]
    uri_autolink: cabc.Callable[[Attrs, str], V]
    email_autolink: cabc.Callable[[Attrs, str], V]
    text: cabc.Callable[[Attrs, str], V]
    hard_break: cabc.Callable[[Attrs], V]
    soft_break: cabc.Callable[[Attrs], V]
    non_breaking_space: cabc.Callable[[Attrs], V]
    span: cabc.Callable[[Attrs, str], V]
    math_inline: cabc.Callable[[Attrs, str], V]
    math_display: cabc.Callable[[Attrs, str], V]


def _any_container(params: str, *args: typ.Any) -> bool:
    return True


def _blocks(converter: _tokens.TreeConverter, node: typ.Any) -> list[typ.Any] | None:
    attrs = _tokens.node_attrs(node)
    match node.type:
        case "fence" if node.info.strip().startswith(RAW_PREFIX):
            raw_format = node.info.strip().removeprefix(RAW_PREFIX).split(maxsplit=1)
            return [RawBlock(raw_format[0] if raw_format else "", node.content, attrs)]
        case "container_div":
            name = node.info.strip().split(maxsplit=1)
            return [Div(name[0] if name else "", converter.blocks(node.children), attrs)]
        case "math_block" | "math_block_label":
            return [Paragraph((MathDisplay(node.content.strip()),), attrs)]
        case "footnote_block":
            return []
    return None


def _inlines(converter: _tokens.TreeConverter, node: typ.Any) -> list[typ.Any] | None:
    match node.type:
        case "span":
            return [Span(converter.inlines(node.children), _tokens.node_attrs(node))]
        case "math_inline":
            return [MathInline(node.content)]
        case "math_inline_double":
            return [MathDisplay(node.content)]
        case "footnote_ref":
            label = node.meta.get("label", node.meta.get("id", ""))
            return [Footnote(str(label))]
    return None


def _literal_lines(text: str) -> set[int]:
    """Return the source line numbers covered by code and math blocks."""
    tokens = _parser().parse(text, {"references": _tokens.DeferredReferences()})
    return {
        line
        for token in tokens
        if token.type in LITERAL_BLOCKS and token.map
        for line in range(*token.map)
    }


def split_reference_attributes(
    text: str, keep: cabc.Container[str] = frozenset()
) -> tuple[str, dict[str, Attrs]]:
    """Strip trailing attribute blocks from reference definitions.

    Returns the source with the blocks removed and the attributes keyed by
    normalized label. Lines inside code or math blocks are never touched,
    and neither are blocks that fail to parse as attributes or whose label
    is listed in ``keep``.
    """
    literal = _literal_lines(text)
    found: dict[str, Attrs] = {}
    lines = text.split("\n")
    for index, line in enumerate(lines):
        match = None if index in literal else REFERENCE_ATTRIBUTES.match(line)
        if match is None:
            continue
        label = normalizeReference(match.group("label"))
        if label in keep:
            continue
        try:
            _, attrs = parse_attributes(match.group("attrs"))
        except ParseError:
            continue
        found[label] = attrs
        lines[index] = match.group("definition")
    return "\n".join(lines), found


@functools.cache
def _parser() -> MarkdownIt:
    md = (
        MarkdownIt("commonmark", {"html": False})
        .enable("strikethrough")
        .use(attrs_plugin, spans=True)
        .use(attrs_block_plugin)
        .use(container_plugin, name=DIV_CONTAINER, validate=_any_container)
        .use(dollarmath_plugin, allow_digits=False, double_inline=True)
        .use(footnote_plugin)
    )
    return _tokens.install_deferred_references(md)


def parse(text: str) -> Document:
    """Parse extended-dialect ``text`` (without frontmatter) into a document.

    Definition attributes are only kept for labels that end up defined. A
    line that merely looks like a definition is reparsed with its attribute
    block left in place.
    """
    source, attributes = split_reference_attributes(text)
    root, references = _tokens.parse_tree(_parser(), source)
    undefined = attributes.keys() - references.targets().keys()
    if undefined:
        source, attributes = split_reference_attributes(text, keep=undefined)
        root, references = _tokens.parse_tree(_parser(), source)
    converter = _tokens.TreeConverter(
        block_hook=_blocks, inline_hook=_inlines, rule_node=ThematicBreak
    )
    return converter.document(root, references, attributes)


def fold(document: Document, renderer: ExtendedRenderer[V]) -> cabc.Iterator[V]:
    """Yield one rendered view per top-level block of ``document``."""

    def visit(node: typ.Any) -> V | None:
        match node:
            case ThematicBreak(attrs=attrs):
                return renderer.thematic_break(attrs)
            case RawBlock(format=raw_format, text=text, attrs=attrs):
                return renderer.raw_block(attrs, raw_format, text)
            case Div(name=name, children=children, attrs=attrs):
                return renderer.div(attrs, name, fold_all(children, visit))
            case Span(children=children, attrs=attrs):
                return renderer.span(attrs, text_content(children))
            case MathInline(text=text):
                return renderer.math_inline(EMPTY_ATTRS, text)
            case MathDisplay(text=text):
                return renderer.math_display(EMPTY_ATTRS, text)
            case Footnote():
                return None
        view = fold_common(document, renderer, node, visit)
        if view is NotImplemented:
            msg = f"Node {type(node).__name__} is not part of the extended dialect"
            raise TypeError(msg)
        return view

    for block in document.blocks:
        view = visit(block)
        if view is not None:
            yield view


def iter_render(text: str, renderer: ExtendedRenderer[V]) -> cabc.Iterator[V]:
    """Lazily render ``text``, skipping (not parsing) any frontmatter."""
    return fold(parse(content(text)), renderer)


def render(text: str, renderer: ExtendedRenderer[V]) -> list[V]:
    """Render ``text`` into a list of views, ignoring frontmatter validity."""
    return list(iter_render(text, renderer))


def render_with_metadata(
    text: str, renderer_factory: cabc.Callable[[Metadata], ExtendedRenderer[V]]
) -> list[V]:
    """Render ``text`` with a renderer built from its TOML frontmatter.

    Raises
    ------
    MetadataError
        If the frontmatter block is not valid TOML.
    """
    renderer = renderer_factory(parse_metadata(text))
    return render(text, renderer)


__all__ = [
    "Block",
    "ExtendedRenderer",
    "Inline",
    "fold",
    "iter_render",
    "parse",
    "render",
    "render_with_metadata",
    "text_content",
]
