"""Unit tests for the extended markup dialect.

The extended dialect adds attributes, bracketed spans, generic divs, raw
blocks, math, and footnotes on top of CommonMark. Output is checked through
the default HTML callback table with BeautifulSoup.

Usage
-----
Run ``pytest tests/test_extended_render.py -v``.
"""

from __future__ import annotations

import typing as typ

import pytest
from bs4 import BeautifulSoup

from pagefold.markup import extended
from pagefold.markup.extended import ExtendedRenderer
from pagefold.markup.html import HtmlContentRenderer, to_html
from pagefold.markup.nodes import Div, MathDisplay, Paragraph, RawBlock


@pytest.fixture
def html() -> ExtendedRenderer[typ.Any]:
    """Return the default HTML callback table for the extended dialect."""
    return HtmlContentRenderer().extended()


def _render(text: str, renderer: ExtendedRenderer[typ.Any]) -> str:
    return str(to_html(extended.render(text, renderer)))


def _soup(text: str, renderer: ExtendedRenderer[typ.Any]) -> BeautifulSoup:
    return BeautifulSoup(_render(text, renderer), "html.parser")


def test_bracketed_span(html: ExtendedRenderer[typ.Any]) -> None:
    """``[text]{.class}`` becomes a span carrying the attributes."""
    assert _render("[ok]{.badge}\n", html) == '<p><span class="badge">ok</span></p>'


def test_block_attributes(html: ExtendedRenderer[typ.Any]) -> None:
    """An attribute block applies to the block that follows it."""
    paragraph = _soup("{#intro .lead}\nHello\n", html).find("p")
    assert paragraph is not None
    assert paragraph["id"] == "intro"
    assert paragraph["class"] == ["lead"]


def test_inline_attributes_on_links_and_code(html: ExtendedRenderer[typ.Any]) -> None:
    """Attributes after inline code and links are attached to them."""
    soup = _soup("[go](/next){.button} `x`{.mono}\n", html)
    link = soup.find("a")
    assert link is not None
    assert (link["href"], link["class"]) == ("/next", ["button"])
    code = soup.find("code")
    assert code is not None
    assert code["class"] == ["mono"]


def test_generic_div(html: ExtendedRenderer[typ.Any]) -> None:
    """``::: name`` fences wrap their content in a classed div."""
    soup = _soup("::: warning\nBe *careful*.\n:::\n", html)
    div = soup.select_one("div.warning")
    assert div is not None, "Expected a div named after the container"
    assert div.find("em") is not None
    (block,) = extended.parse("::: warning\nBody\n:::\n").blocks
    assert isinstance(block, Div)
    assert block.name == "warning"


def test_raw_blocks_only_emit_html(html: ExtendedRenderer[typ.Any]) -> None:
    """Raw HTML passes through; other raw formats render as nothing."""
    text = "```=html\n<b>bold</b>\n```\n\n```=latex\n\\textbf{x}\n```\n"
    assert _render(text, html).strip() == "<b>bold</b>"
    blocks = extended.parse(text).blocks
    assert [block.format for block in blocks if isinstance(block, RawBlock)] == [
        "html",
        "latex",
    ]


def test_inline_html_is_not_recognized(html: ExtendedRenderer[typ.Any]) -> None:
    """Inline HTML is escaped in the extended dialect."""
    assert _render("a <b>x</b>\n", html) == "<p>a &lt;b&gt;x&lt;/b&gt;</p>"


def test_inline_and_display_math(html: ExtendedRenderer[typ.Any]) -> None:
    """Dollar math renders as delimited spans for client-side typesetting."""
    soup = _soup("Inline $x^2$ and $$y$$.\n", html)
    inline = soup.select_one("span.math.inline")
    display = soup.select_one("span.math.display")
    assert inline is not None
    assert inline.get_text() == "\\(x^2\\)"
    assert display is not None
    assert display.get_text() == "\\[y\\]"


def test_math_block(html: ExtendedRenderer[typ.Any]) -> None:
    """A ``$$`` block becomes a paragraph holding display math."""
    (block,) = extended.parse("$$\na + b\n$$\n").blocks
    assert block == Paragraph((MathDisplay("a + b"),))
    assert _soup("$$\na + b\n$$\n", html).select_one("p > span.math.display") is not None


def test_footnotes_render_nothing(html: ExtendedRenderer[typ.Any]) -> None:
    """Footnote references and definitions are dropped from the output."""
    views = extended.render("Text[^1].\n\n[^1]: The note.\n", html)
    assert [str(view) for view in views] == ["<p>Text.</p>"]


def test_span_text_is_flattened(html: ExtendedRenderer[typ.Any]) -> None:
    """Spans receive their children's plain text."""
    assert _render("[a *b*]{.x}\n", html) == '<p><span class="x">a b</span></p>'


def test_unresolved_reference_in_extended_dialect(
    html: ExtendedRenderer[typ.Any],
) -> None:
    """Reference fallback behaves exactly as in the markdown dialect."""
    link = _soup("[read this][Other Page]\n", html).find("a")
    assert link is not None
    assert (link["href"], link["id"]) == ("#other-page", "back-to-other-page")


def test_thematic_break(html: ExtendedRenderer[typ.Any]) -> None:
    """Rules render as ``<hr>``."""
    assert _render("a\n\n***\n\nb\n", html) == "<p>a</p>\n<hr>\n<p>b</p>"


def test_reference_definition_attributes(html: ExtendedRenderer[typ.Any]) -> None:
    """Attributes on a definition apply to links through it; link attributes win."""
    text = (
        "[one][site] and [two][site]{.local}\n\n"
        "[site]: https://example.com {.external rel=nofollow}\n"
    )
    links = _soup(text, html).find_all("a")
    assert [link["href"] for link in links] == ["https://example.com"] * 2
    assert links[0]["class"] == ["external"]
    assert links[0]["rel"] == ["nofollow"]
    assert links[1]["class"] == ["local"], "Link attributes override the definition"
    document = extended.parse(text)
    assert document.reference_attributes == {
        "SITE": {"class": "external", "rel": "nofollow"}
    }


@pytest.mark.parametrize(
    "text",
    [
        "```\n[x]: /url {.c}\n```\n",
        "    [x]: /url {.c}\n",
        "$$\n[x]: /url {.c}\n$$\n",
    ],
    ids=["fenced", "indented", "math"],
)
def test_definition_lookalikes_in_literal_blocks_are_kept(
    text: str, html: ExtendedRenderer[typ.Any]
) -> None:
    """Definition-shaped lines inside code or math keep their attribute text."""
    assert "[x]: /url {.c}" in _soup(text, html).get_text()
    document = extended.parse(text)
    assert document.reference_attributes == {}, "Code is not a definition"
    assert document.references == {}


def test_attributes_on_invalid_definitions_are_kept(
    html: ExtendedRenderer[typ.Any],
) -> None:
    """A line that does not define a reference keeps its trailing braces."""
    text = "[x]: {.c}\n"
    assert "{.c}" in _soup(text, html).get_text()
    assert extended.parse(text).reference_attributes == {}
