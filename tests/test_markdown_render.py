"""Unit tests for the markdown dialect fold and its HTML renderer.

Most assertions parse the rendered fragment with BeautifulSoup so they check
structure rather than whitespace. A second, JSON-producing callback table
shows that the fold is independent of the output type; its views are encoded
with ``msgspec`` to prove they are plain data.

Usage
-----
Run ``pytest tests/test_markdown_render.py -v``.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

import msgspec.json as msgspec_json
import pytest
from bs4 import BeautifulSoup

from pagefold.markup import markdown
from pagefold.markup.frontmatter import MetadataError
from pagefold.markup.html import HtmlContentRenderer, to_html
from pagefold.markup.markdown import MarkdownRenderer
from pagefold.markup.nodes import UnorderedList

Json = dict[str, typ.Any]


@pytest.fixture
def html() -> MarkdownRenderer[typ.Any]:
    """Return the default HTML callback table."""
    return HtmlContentRenderer().markdown()


def _soup(text: str, renderer: MarkdownRenderer[typ.Any]) -> BeautifulSoup:
    return BeautifulSoup(str(to_html(markdown.render(text, renderer))), "html.parser")


def _node(kind: str, **fields: object) -> Json:
    return {"type": kind, **fields}


def _json_renderer() -> MarkdownRenderer[Json]:
    """Return a callback table producing JSON-ready dictionaries."""
    return MarkdownRenderer(
        horizontal_break=lambda attrs: _node("rule"),
        heading=lambda attrs, level, children: _node("heading", level=level, children=children),
        code_block=lambda attrs, info, full_info, text: _node("code", info=info, text=text),
        html_block=lambda attrs, text: _node("html", text=text),
        paragraph=lambda attrs, children: _node("paragraph", children=children),
        block_quote=lambda attrs, children: _node("quote", children=children),
        alert_block=lambda attrs, level, children: _node(
            "alert", level=str(level), children=children
        ),
        ordered_list=lambda attrs, start, marker, items: _node("list", start=start, items=items),
        unordered_list=lambda attrs, marker, items: _node("list", start=None, items=items),
        code_span=lambda attrs, text: _node("code", info="", text=text),
        emphasis=lambda attrs, marker, children: _node("em", children=children),
        strong=lambda attrs, children: _node("strong", children=children),
        strikethrough=lambda attrs, children: _node("del", children=children),
        link=lambda attrs, url, title, children: _node(
            "link", url=url, attrs=dict(attrs), children=children
        ),
        image=lambda attrs, url, title, alt: _node("image", url=url, alt=alt),
        uri_autolink=lambda attrs, url: _node("link", url=url, attrs={}, children=[]),
        email_autolink=lambda attrs, address: _node(
            "link", url=f"mailto:{address}", attrs={}, children=[]
        ),
        html_inline=lambda attrs, text: _node("html", text=text),
        text=lambda attrs, text: _node("text", text=text),
        hard_break=lambda attrs: _node("break"),
        soft_break=lambda attrs: _node("text", text=" "),
        non_breaking_space=lambda attrs: _node("text", text="\xa0"),
    )


def test_heading_and_inline_formatting(html: MarkdownRenderer[typ.Any]) -> None:
    """Headings and inline emphasis map onto the matching HTML elements."""
    views = markdown.render("# Hi\n\n*a* **b** ~~c~~ `x < y`\n", html)
    assert [str(view) for view in views] == [
        "<h1>Hi</h1>",
        "<p><em>a</em> <strong>b</strong> <del>c</del> <code>x &lt; y</code></p>",
    ]


def test_unresolved_reference_becomes_back_reference(
    html: MarkdownRenderer[typ.Any],
) -> None:
    """An undefined explicit reference links to a same-page anchor."""
    link = _soup("See [the guide][Foo  Bar].\n", html).find("a")
    assert link is not None, "Expected an anchor for the unresolved reference"
    assert link["href"] == "#foo-bar"
    assert link["id"] == "back-to-foo-bar"
    assert link.get_text() == "the guide"


def test_collapsed_reference_without_definition(html: MarkdownRenderer[typ.Any]) -> None:
    """The ``[label][]`` form also degrades to the anchor pair."""
    link = _soup("[Intro][]\n", html).find("a")
    assert link is not None
    assert link["href"] == "#intro"


def test_shortcut_without_definition_stays_text(html: MarkdownRenderer[typ.Any]) -> None:
    """A bare ``[label]`` without a definition is literal text."""
    soup = _soup("Just [brackets] here.\n", html)
    assert soup.find("a") is None
    assert soup.get_text() == "Just [brackets] here."


def test_defined_reference_resolves(html: MarkdownRenderer[typ.Any]) -> None:
    """Defined references use the definition's URL and title."""
    text = '[docs][d] and [d]\n\n[d]: https://example.com/docs "Docs"\n'
    links = _soup(text, html).find_all("a")
    assert [link["href"] for link in links] == ["https://example.com/docs"] * 2
    assert links[0]["title"] == "Docs"
    assert not links[0].has_attr("id"), "Resolved links carry no back-reference id"


def test_references_are_kept_on_document() -> None:
    """Definitions are recorded for render-time resolution."""
    document = markdown.parse('[a]: /target "T"\n\n[x][a]\n')
    assert document.references["A"].url == "/target"
    assert document.references["A"].title == "T"


def test_alert_block(html: MarkdownRenderer[typ.Any]) -> None:
    """A quote starting with an alert marker renders as an alert."""
    soup = _soup("> [!WARNING]\n> Mind the gap.\n", html)
    alert = soup.select_one("div.markdown-alert.markdown-alert-warning")
    assert alert is not None, "Expected a warning alert container"
    title = alert.select_one("p.markdown-alert-title")
    assert title is not None
    assert title.get_text() == "Warning"
    assert [p.get_text() for p in alert.find_all("p")] == ["Warning", "Mind the gap."]
    assert soup.find("blockquote") is None


def test_unknown_alert_marker_is_a_block_quote(html: MarkdownRenderer[typ.Any]) -> None:
    """Unrecognized markers leave the quote untouched."""
    soup = _soup("> [!SHOUT]\n> hi\n", html)
    quote = soup.find("blockquote")
    assert quote is not None
    assert "[!SHOUT]" in quote.get_text()


def test_tight_and_loose_lists(html: MarkdownRenderer[typ.Any]) -> None:
    """Tight list items hold inline content; loose items hold paragraphs."""
    tight = markdown.render("- a\n- b\n", html)
    assert str(tight[0]) == "<ul>\n<li>a</li>\n<li>b</li>\n</ul>"
    loose = _soup("- a\n\n- b\n", html)
    assert [li.find("p").get_text() for li in loose.find_all("li")] == ["a", "b"]

    (block,) = markdown.parse("- a\n- b\n").blocks
    assert isinstance(block, UnorderedList)
    assert block.tight


def test_ordered_list_start(html: MarkdownRenderer[typ.Any]) -> None:
    """A non-default start number is preserved."""
    ol = _soup("3. three\n4. four\n", html).find("ol")
    assert ol is not None
    assert ol["start"] == "3"


def test_breaks_and_non_breaking_space(html: MarkdownRenderer[typ.Any]) -> None:
    """Soft breaks stay newlines, hard breaks emit ``<br>``."""
    (view,) = markdown.render("a&nbsp;b\nc  \nd\n", html)
    assert str(view) == "<p>a&nbsp;b\nc<br>\nd</p>"


def test_code_block_is_highlighted(html: MarkdownRenderer[typ.Any]) -> None:
    """Fenced code carries the Pygments wrapper and language tag."""
    block = _soup("```python\nprint(1)\n```\n", html).select_one("div.codehilite")
    assert block is not None
    assert block["data-language"] == "python"
    assert "print" in block.get_text()


def test_raw_html_passes_through(html: MarkdownRenderer[typ.Any]) -> None:
    """HTML blocks and inline HTML are emitted verbatim."""
    views = markdown.render('<div class="x">raw</div>\n\na <kbd>b</kbd>\n', html)
    assert [str(view) for view in views] == [
        '<div class="x">raw</div>',
        "<p>a <kbd>b</kbd></p>",
    ]


def test_autolinks_and_images(html: MarkdownRenderer[typ.Any]) -> None:
    """URI and email autolinks and images keep their targets."""
    soup = _soup('<https://example.com> <me@example.com>\n\n![an *alt*](/i.png "T")\n', html)
    hrefs = [link["href"] for link in soup.find_all("a")]
    assert hrefs == ["https://example.com", "mailto:me@example.com"]
    image = soup.find("img")
    assert image is not None
    assert (image["src"], image["alt"], image["title"]) == ("/i.png", "an alt", "T")


def test_fold_is_post_order(html: MarkdownRenderer[typ.Any]) -> None:
    """Children are rendered before the callback of their parent."""
    calls: list[str] = []

    def tracking(name: str) -> cabc.Callable[..., typ.Any]:
        original = getattr(html, name)

        def wrapper(*args: typ.Any) -> typ.Any:
            calls.append(name)
            return original(*args)

        return wrapper

    renderer = dc.replace(
        html,
        text=tracking("text"),
        emphasis=tracking("emphasis"),
        paragraph=tracking("paragraph"),
    )
    markdown.render("*a*\n", renderer)
    assert calls == ["text", "emphasis", "paragraph"]


def test_json_renderer_produces_plain_data() -> None:
    """Any view type works; here the views are JSON-encodable dictionaries."""
    views = markdown.render("# Title\n\nSee [guide][].\n", _json_renderer())
    decoded = msgspec_json.decode(msgspec_json.encode(views))
    assert decoded == [
        {"type": "heading", "level": 1, "children": [{"type": "text", "text": "Title"}]},
        {
            "type": "paragraph",
            "children": [
                {"type": "text", "text": "See "},
                {
                    "type": "link",
                    "url": "#guide",
                    "attrs": {"id": "back-to-guide"},
                    "children": [{"type": "text", "text": "guide"}],
                },
                {"type": "text", "text": "."},
            ],
        },
    ]


def test_render_with_metadata_builds_renderer_from_frontmatter() -> None:
    """The factory receives the parsed frontmatter."""
    seen: list[dict[str, typ.Any]] = []

    def factory(metadata: dict[str, typ.Any]) -> MarkdownRenderer[Json]:
        seen.append(metadata)
        return _json_renderer()

    views = markdown.render_with_metadata('---\ntitle = "T"\n---\nbody\n', factory)
    assert seen == [{"title": "T"}]
    assert views == [_node("paragraph", children=[_node("text", text="body")])]


def test_render_with_metadata_rejects_bad_toml() -> None:
    """Malformed frontmatter fails metadata-aware rendering."""
    with pytest.raises(MetadataError):
        markdown.render_with_metadata("---\ntitle =\n---\nbody\n", lambda _: _json_renderer())


def test_render_skips_frontmatter_without_parsing(
    html: MarkdownRenderer[typ.Any],
) -> None:
    """Plain rendering strips frontmatter even when it is not valid TOML."""
    views = markdown.render("---\ntitle =\n---\nbody\n", html)
    assert [str(view) for view in views] == ["<p>body</p>"]


def test_iter_render_is_lazy(html: MarkdownRenderer[typ.Any]) -> None:
    """``iter_render`` returns an iterator of views."""
    views = markdown.iter_render("a\n\nb\n", html)
    assert isinstance(views, cabc.Iterator)
    assert [str(view) for view in views] == ["<p>a</p>", "<p>b</p>"]


def test_text_content_flattens_inlines() -> None:
    """Inline containers contribute their text; breaks become spaces."""
    (paragraph,) = markdown.parse("*a* `b`\n[c](/x)\n").blocks
    assert markdown.text_content(paragraph.children) == "a b c"


def test_frontmatter_does_not_change_output(html: MarkdownRenderer[typ.Any]) -> None:
    """Rendering with frontmatter matches rendering the stripped body."""
    body = "# Title\n\nText with [a link](/x).\n"
    with_meta = markdown.render('---\ntitle = "T"\n---\n' + body, html)
    assert [str(view) for view in with_meta] == [str(view) for view in markdown.render(body, html)]
