r"""Render CommonMark documents through a caller-supplied callback table.

The dialect covers CommonMark plus strikethrough and GitHub-style alert
blocks (``> [!NOTE]``). Parsing is delegated to markdown-it-py; the resulting
token tree is converted into :mod:`pagefold.markup.nodes` and folded
post-order through a :class:`MarkdownRenderer`, whose callbacks choose the
output type.

Example
-------
>>> from pagefold.markup.html import HtmlContentRenderer
>>> from pagefold.markup.markdown import render
>>> views = render("# Hi\n\nSee [docs][guide].\n", HtmlContentRenderer().markdown())
>>> str(views[1])
'<p>See <a href="#guide" id="back-to-guide">docs</a>.</p>'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import functools
import re
import typing as typ

from markdown_it import MarkdownIt

from . import _tokens
from ._fold import EMPTY_ATTRS, fold_all, fold_common
from ._fold import text_content as text_content
from .frontmatter import Metadata, content, parse_metadata
from .nodes import (
    AlertBlock,
    AlertLevel,
    Attrs,
    BlockQuote,
    CodeBlock,
    CodeSpan,
    Document,
    EmailAutolink,
    Emphasis,
    HardLineBreak,
    Heading,
    HorizontalBreak,
    HtmlBlock,
    HtmlInline,
    Image,
    Link,
    NonBreakingSpace,
    OrderedList,
    Paragraph,
    PlainText,
    SoftLineBreak,
    StrikeThrough,
    StrongEmphasis,
    UnorderedList,
    UriAutolink,
)

V = typ.TypeVar("V")

Block = (
    HorizontalBreak
    | Heading
    | CodeBlock
    | HtmlBlock
    | Paragraph
    | BlockQuote
    | AlertBlock
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
    | HtmlInline
    | PlainText
    | HardLineBreak
    | SoftLineBreak
    | NonBreakingSpace
)

ALERT_PATTERN = re.compile(
    r"\[!(NOTE|TIP|IMPORTANT|WARNING|CAUTION)\]", re.IGNORECASE
)


@dc.dataclass(frozen=True, slots=True)
class MarkdownRenderer(typ.Generic[V]):
    """One callback per markdown node variant, producing views of type ``V``.

    Every callback receives the node's attributes first. Container callbacks
    receive their children already rendered; list callbacks receive one list
    of rendered views per item. Link and image callbacks receive the resolved
    URL, so reference lookups never reach the renderer.
    """

    horizontal_break: cabc.Callable[[Attrs], V]
    heading: cabc.Callable[[Attrs, int, list[V]], V]
    code_block: cabc.Callable[[Attrs, str, str, str], V]
    html_block: cabc.Callable[[Attrs, str], V]
    paragraph: cabc.Callable[[Attrs, list[V]], V]
    block_quote: cabc.Callable[[Attrs, list[V]], V]
    alert_block: cabc.Callable[[Attrs, AlertLevel, list[V]], V]
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
    html_inline: cabc.Callable[[Attrs, str], V]
    text: cabc.Callable[[Attrs, str], V]
    hard_break: cabc.Callable[[Attrs], V]
    soft_break: cabc.Callable[[Attrs], V]
    non_breaking_space: cabc.Callable[[Attrs], V]


def _alert_or_quote(
    converter: _tokens.TreeConverter, node: typ.Any
) -> list[typ.Any] | None:
    if node.type != "blockquote":
        return None
    attrs = _tokens.node_attrs(node)
    children = converter.blocks(node.children)
    match children:
        case (Paragraph(children=(PlainText(text=marker), *rest), attrs=first_attrs), *others):
            found = ALERT_PATTERN.fullmatch(marker.strip())
            if found:
                if rest and isinstance(rest[0], SoftLineBreak):
                    rest = rest[1:]
                lead = (Paragraph(tuple(rest), first_attrs),) if rest else ()
                level = AlertLevel(found.group(1).lower())
                return [AlertBlock(level, (*lead, *others), attrs)]
    return [BlockQuote(children, attrs)]


@functools.cache
def _parser() -> MarkdownIt:
    md = MarkdownIt("commonmark").enable("strikethrough")
    return _tokens.install_deferred_references(md)


def parse(text: str) -> Document:
    """Parse markdown ``text`` (without frontmatter) into a document."""
    root, references = _tokens.parse_tree(_parser(), text)
    converter = _tokens.TreeConverter(block_hook=_alert_or_quote)
    return converter.document(root, references)


def fold(document: Document, renderer: MarkdownRenderer[V]) -> cabc.Iterator[V]:
    """Yield one rendered view per top-level block of ``document``."""

    def visit(node: typ.Any) -> V | None:
        match node:
            case HorizontalBreak(attrs=attrs):
                return renderer.horizontal_break(attrs)
            case HtmlBlock(text=text, attrs=attrs):
                return renderer.html_block(attrs, text)
            case AlertBlock(level=level, children=children, attrs=attrs):
                return renderer.alert_block(attrs, level, fold_all(children, visit))
            case HtmlInline(text=text):
                return renderer.html_inline(EMPTY_ATTRS, text)
        view = fold_common(document, renderer, node, visit)
        if view is NotImplemented:
            msg = f"Node {type(node).__name__} is not part of the markdown dialect"
            raise TypeError(msg)
        return view

    for block in document.blocks:
        view = visit(block)
        if view is not None:
            yield view


def iter_render(text: str, renderer: MarkdownRenderer[V]) -> cabc.Iterator[V]:
    """Lazily render ``text``, skipping (not parsing) any frontmatter."""
    return fold(parse(content(text)), renderer)


def render(text: str, renderer: MarkdownRenderer[V]) -> list[V]:
    """Render ``text`` into a list of views, ignoring frontmatter validity."""
    return list(iter_render(text, renderer))


def render_with_metadata(
    text: str, renderer_factory: cabc.Callable[[Metadata], MarkdownRenderer[V]]
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
    "ALERT_PATTERN",
    "Block",
    "Inline",
    "MarkdownRenderer",
    "fold",
    "iter_render",
    "parse",
    "render",
    "render_with_metadata",
    "text_content",
]
