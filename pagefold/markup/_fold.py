"""Post-order folding shared by the dialect renderers.

Both renderer tables name their common callbacks identically, so the
CommonMark part of the walk lives here and each dialect only adds its own
variants. Children are always reduced to views before the parent callback
runs; the callbacks never see raw child nodes.
"""

from __future__ import annotations

import collections.abc as cabc
import types
import typing as typ

from .links import resolve
from .nodes import (
    BlockQuote,
    CodeBlock,
    CodeSpan,
    Document,
    EmailAutolink,
    Emphasis,
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
    SoftLineBreak,
    Span,
    StrikeThrough,
    StrongEmphasis,
    UnorderedList,
    UriAutolink,
)

V = typ.TypeVar("V")

EMPTY_ATTRS: cabc.Mapping[str, str] = types.MappingProxyType({})

Visit = cabc.Callable[[typ.Any], "V | None"]


def fold_all(nodes: cabc.Iterable[typ.Any], visit: Visit) -> list[typ.Any]:
    """Fold ``nodes`` in order, skipping nodes that render to nothing."""
    views = []
    for node in nodes:
        view = visit(node)
        if view is not None:
            views.append(view)
    return views


def fold_common(
    document: Document, renderer: typ.Any, node: typ.Any, visit: Visit
) -> typ.Any:
    """Render a node both dialects share; return ``NotImplemented`` otherwise.

    ``visit`` is the dialect's own fold and is used for every child so that
    dialect-only variants nested anywhere are rendered by their dialect.
    """
    match node:
        case Paragraph(children=children, attrs=attrs):
            return renderer.paragraph(attrs, fold_all(children, visit))
        case Heading(level=level, children=children, attrs=attrs):
            return renderer.heading(attrs, level, fold_all(children, visit))
        case CodeBlock(info=info, full_info=full_info, text=text, attrs=attrs):
            return renderer.code_block(attrs, info, full_info, text)
        case BlockQuote(children=children, attrs=attrs):
            return renderer.block_quote(attrs, fold_all(children, visit))
        case OrderedList(items=items, start=start, marker=marker, attrs=attrs):
            rendered = [fold_all(item, visit) for item in items]
            return renderer.ordered_list(attrs, start, marker, rendered)
        case UnorderedList(items=items, marker=marker, attrs=attrs):
            rendered = [fold_all(item, visit) for item in items]
            return renderer.unordered_list(attrs, marker, rendered)
        case PlainText(text=text):
            return renderer.text(EMPTY_ATTRS, text)
        case CodeSpan(text=text, attrs=attrs):
            return renderer.code_span(attrs, text)
        case Emphasis(marker=marker, children=children, attrs=attrs):
            return renderer.emphasis(attrs, marker, fold_all(children, visit))
        case StrongEmphasis(children=children, attrs=attrs):
            return renderer.strong(attrs, fold_all(children, visit))
        case StrikeThrough(children=children, attrs=attrs):
            return renderer.strikethrough(attrs, fold_all(children, visit))
        case Link(destination=target, children=children, title=title, attrs=attrs):
            link = resolve(document, target, title, attrs)
            return renderer.link(link.attrs, link.url, link.title, fold_all(children, visit))
        case Image(destination=target, alt=alt, title=title, attrs=attrs):
            link = resolve(document, target, title, attrs)
            return renderer.image(link.attrs, link.url, link.title, text_content(alt))
        case UriAutolink(url=url):
            return renderer.uri_autolink(EMPTY_ATTRS, url)
        case EmailAutolink(address=address):
            return renderer.email_autolink(EMPTY_ATTRS, address)
        case HardLineBreak():
            return renderer.hard_break(EMPTY_ATTRS)
        case SoftLineBreak():
            return renderer.soft_break(EMPTY_ATTRS)
        case NonBreakingSpace():
            return renderer.non_breaking_space(EMPTY_ATTRS)
    return NotImplemented


def text_content(nodes: cabc.Iterable[typ.Any]) -> str:
    """Flatten inline ``nodes`` into their plain text.

    Containers contribute their children's text; leaves that carry no text
    (raw HTML, footnotes, autolinks) contribute nothing. Line breaks become
    single spaces so alt text stays readable.
    """
    parts: list[str] = []
    for node in nodes:
        match node:
            case PlainText(text=text) | CodeSpan(text=text):
                parts.append(text)
            case MathInline(text=text) | MathDisplay(text=text):
                parts.append(text)
            case Emphasis(children=children) | StrongEmphasis(children=children):
                parts.append(text_content(children))
            case StrikeThrough(children=children) | Link(children=children):
                parts.append(text_content(children))
            case Span(children=children):
                parts.append(text_content(children))
            case Image(alt=alt):
                parts.append(text_content(alt))
            case SoftLineBreak() | HardLineBreak():
                parts.append(" ")
            case NonBreakingSpace():
                parts.append("\xa0")
    return "".join(parts)


__all__ = ["EMPTY_ATTRS", "fold_all", "fold_common", "text_content"]
