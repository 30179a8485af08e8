"""Parse lightweight markup into a document model and fold it into views.

Two dialects are available: :mod:`~pagefold.markup.markdown` (CommonMark with
strikethrough and alerts) and :mod:`~pagefold.markup.extended` (attributes,
spans, divs, raw blocks, math, footnotes). Each exposes ``render`` and
``render_with_metadata`` driven by a callback table; :mod:`pagefold.markup.html`
provides the reference HTML tables.
"""

from . import extended, markdown
from .extended import ExtendedRenderer
from .frontmatter import Metadata, MetadataError, content, parse_metadata
from .html import HtmlContentRenderer, html_page, to_html
from .markdown import MarkdownRenderer
from .nodes import Document

__all__ = [
    "Document",
    "ExtendedRenderer",
    "HtmlContentRenderer",
    "MarkdownRenderer",
    "Metadata",
    "MetadataError",
    "content",
    "extended",
    "html_page",
    "markdown",
    "parse_metadata",
    "to_html",
]
