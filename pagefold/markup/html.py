"""Reference renderers producing escaped HTML views.

Views are :class:`markupsafe.Markup` fragments, so text handed to any
callback is escaped exactly once and already-rendered children are spliced in
verbatim. Code blocks are highlighted with Pygments and tagged with a
``data-language`` attribute.

Example
-------
>>> from pagefold.markup import markdown
>>> from pagefold.markup.html import HtmlContentRenderer, to_html
>>> str(to_html(markdown.render("*hi*", HtmlContentRenderer().markdown())))
'<p><em>hi</em></p>'
"""

from __future__ import annotations

import collections.abc as cabc
import re

from markupsafe import Markup, escape
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .extended import ExtendedRenderer
from .markdown import MarkdownRenderer
from .nodes import AlertLevel, Attrs

CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
MAX_HEADING_LEVEL = 6


def attributes(attrs: Attrs) -> Markup:
    """Render ``attrs`` as a leading-space HTML attribute string."""
    return Markup("").join(
        Markup(' {}="{}"').format(key, value) for key, value in attrs.items()
    )


def element(tag: str, attrs: Attrs, children: cabc.Iterable[Markup] = ()) -> Markup:
    """Return ``<tag attrs>children</tag>``."""
    return Markup("<{0}{1}>{2}</{0}>").format(
        Markup(tag), attributes(attrs), Markup("").join(children)
    )


def void_element(tag: str, attrs: Attrs) -> Markup:
    """Return ``<tag attrs>`` for elements without content."""
    return Markup("<{0}{1}>").format(Markup(tag), attributes(attrs))


def to_html(views: cabc.Iterable[Markup], separator: str = "\n") -> Markup:
    """Serialize rendered views into one HTML fragment."""
    return Markup(separator).join(views)


def html_page(
    title: str,
    body: Markup,
    *,
    stylesheet: str | None = None,
    lang: str = "en",
) -> Markup:
    """Wrap a rendered fragment in a minimal HTML5 document."""
    head = [
        Markup('<meta charset="utf-8">'),
        element("title", {}, [escape(title)]),
    ]
    if stylesheet:
        head.append(element("style", {}, [Markup(stylesheet)]))
    return Markup("<!DOCTYPE html>\n{}\n").format(
        element(
            "html",
            {"lang": lang},
            [
                element("head", {}, head),
                element("body", {}, [body]),
            ],
        )
    )


def _merge_class(attrs: Attrs, extra: str) -> dict[str, str]:
    merged = dict(attrs)
    classes = " ".join(part for part in (extra, merged.get("class", "")) if part)
    if classes:
        merged["class"] = classes
    return merged


def _link_attrs(url: str, title: str | None, attrs: Attrs) -> dict[str, str]:
    merged = {"href": url}
    if title:
        merged["title"] = title
    merged.update(attrs)
    return merged


class HtmlContentRenderer:
    """Build HTML callback tables with consistent code highlighting."""

    def __init__(self, pygments_style: str = "monokai") -> None:
        """Initialize the renderer with a Pygments style name."""
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def code_block(self, code: str, language: str | None = None) -> Markup:
        """Render ``code`` into highlighted HTML with an optional language tag.

        Parameters
        ----------
        code : str
            Source snippet to highlight.
        language : str, optional
            Pygments lexer name; defaults to ``"text"`` when not provided or
            when the lexer lookup fails.
        """
        lang = language or "text"
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            lexer = get_lexer_by_name("text")
        html = highlight(code, lexer, self._formatter)
        safe_lang = escape(lang)

        def _repl(match: re.Match[str]) -> str:
            return f'<div class="codehilite" data-language="{safe_lang}">'

        return Markup(CODEHILITE_OPEN_TAG.sub(_repl, html, 1).rstrip("\n"))

    def markdown(self) -> MarkdownRenderer[Markup]:
        """Return the callback table for the markdown dialect."""
        return MarkdownRenderer(
            horizontal_break=lambda attrs: void_element("hr", attrs),
            heading=_heading,
            code_block=self._code_block,
            html_block=lambda attrs, text: Markup(text.rstrip("\n")),
            paragraph=lambda attrs, children: element("p", attrs, children),
            block_quote=_block_quote,
            alert_block=_alert_block,
            ordered_list=_ordered_list,
            unordered_list=_unordered_list,
            code_span=lambda attrs, text: element("code", attrs, [escape(text)]),
            emphasis=lambda attrs, marker, children: element("em", attrs, children),
            strong=lambda attrs, children: element("strong", attrs, children),
            strikethrough=lambda attrs, children: element("del", attrs, children),
            link=_link,
            image=_image,
            uri_autolink=lambda attrs, url: element("a", {"href": url, **attrs}, [escape(url)]),
            email_autolink=_email_autolink,
            html_inline=lambda attrs, text: Markup(text),
            text=lambda attrs, text: escape(text),
            hard_break=lambda attrs: Markup("<br>\n"),
            soft_break=lambda attrs: Markup("\n"),
            non_breaking_space=lambda attrs: Markup("&nbsp;"),
        )

    def extended(self) -> ExtendedRenderer[Markup]:
        """Return the callback table for the extended dialect."""
        return ExtendedRenderer(
            thematic_break=lambda attrs: void_element("hr", attrs),
            heading=_heading,
            code_block=self._code_block,
            raw_block=_raw_block,
            paragraph=lambda attrs, children: element("p", attrs, children),
            block_quote=_block_quote,
            div=lambda attrs, name, children: element(
                "div", _merge_class(attrs, name), ["\n", *_lines(children), "\n"]
            ),
            ordered_list=_ordered_list,
            unordered_list=_unordered_list,
            code_span=lambda attrs, text: element("code", attrs, [escape(text)]),
            emphasis=lambda attrs, marker, children: element("em", attrs, children),
            strong=lambda attrs, children: element("strong", attrs, children),
            strikethrough=lambda attrs, children: element("del", attrs, children),
            link=_link,
            image=_image,
            uri_autolink=lambda attrs, url: element("a", {"href": url, **attrs}, [escape(url)]),
            email_autolink=_email_autolink,
            text=lambda attrs, text: escape(text),
            hard_break=lambda attrs: Markup("<br>\n"),
            soft_break=lambda attrs: Markup("\n"),
            non_breaking_space=lambda attrs: Markup("&nbsp;"),
            span=lambda attrs, text: element("span", attrs, [escape(text)]),
            math_inline=lambda attrs, text: element(
                "span", _merge_class(attrs, "math inline"), [escape(f"\\({text}\\)")]
            ),
            math_display=lambda attrs, text: element(
                "span", _merge_class(attrs, "math display"), [escape(f"\\[{text}\\]")]
            ),
        )

    def _code_block(self, attrs: Attrs, info: str, full_info: str, text: str) -> Markup:
        highlighted = self.code_block(text, info or None)
        if not attrs:
            return highlighted
        return element("div", attrs, [highlighted])


def _heading(attrs: Attrs, level: int, children: list[Markup]) -> Markup:
    return element(f"h{min(max(level, 1), MAX_HEADING_LEVEL)}", attrs, children)


def _block_quote(attrs: Attrs, children: list[Markup]) -> Markup:
    return element("blockquote", attrs, ["\n", *_lines(children), "\n"])


def _alert_block(attrs: Attrs, level: AlertLevel, children: list[Markup]) -> Markup:
    title = element(
        "p", {"class": "markdown-alert-title"}, [escape(level.value.capitalize())]
    )
    classes = f"markdown-alert markdown-alert-{level.value}"
    return element("div", _merge_class(attrs, classes), ["\n", title, "\n", *_lines(children), "\n"])


def _items(items: list[list[Markup]]) -> list[Markup]:
    return ["\n", *_lines(element("li", {}, item) for item in items), "\n"]


def _ordered_list(attrs: Attrs, start: int, marker: str, items: list[list[Markup]]) -> Markup:
    merged = {"start": str(start), **attrs} if start != 1 else attrs
    return element("ol", merged, _items(items))


def _unordered_list(attrs: Attrs, marker: str, items: list[list[Markup]]) -> Markup:
    return element("ul", attrs, _items(items))


def _link(attrs: Attrs, url: str, title: str | None, children: list[Markup]) -> Markup:
    return element("a", _link_attrs(url, title, attrs), children)


def _image(attrs: Attrs, url: str, title: str | None, alt: str) -> Markup:
    merged = {"src": url, "alt": alt}
    if title:
        merged["title"] = title
    merged.update(attrs)
    return void_element("img", merged)


def _email_autolink(attrs: Attrs, address: str) -> Markup:
    return element("a", {"href": f"mailto:{address}", **attrs}, [escape(address)])


def _raw_block(attrs: Attrs, raw_format: str, text: str) -> Markup:
    if raw_format != "html":
        return Markup("")
    return Markup(text.rstrip("\n"))


def _lines(views: cabc.Iterable[Markup]) -> list[Markup]:
    """Interleave newlines between block views."""
    joined: list[Markup] = []
    for index, view in enumerate(views):
        if index:
            joined.append(Markup("\n"))
        joined.append(view)
    return joined


__all__ = [
    "HtmlContentRenderer",
    "attributes",
    "element",
    "html_page",
    "to_html",
    "void_element",
]
