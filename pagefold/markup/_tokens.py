"""Convert markdown-it syntax trees into pagefold document nodes.

markdown-it resolves reference links while parsing and silently drops links
whose label has no definition. :class:`DeferredReferences` replaces the
parser's reference table so every explicit reference (``[text][label]`` or
``[label][]``) survives as a :class:`~pagefold.markup.nodes.Reference`
destination, leaving resolution to render time.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from markdown_it.helpers import parseLinkLabel
from markdown_it.tree import SyntaxTreeNode

from .nodes import (
    BlockQuote,
    CodeBlock,
    CodeSpan,
    Document,
    EmailAutolink,
    Emphasis,
    HardLineBreak,
    Heading,
    HorizontalBreak,
    Href,
    HtmlBlock,
    HtmlInline,
    Image,
    Link,
    NonBreakingSpace,
    OrderedList,
    Paragraph,
    PlainText,
    Reference,
    ReferenceTarget,
    SoftLineBreak,
    StrikeThrough,
    StrongEmphasis,
    UnorderedList,
    UriAutolink,
)

if typ.TYPE_CHECKING:
    from markdown_it import MarkdownIt
    from markdown_it.rules_inline import StateInline

REFERENCE_MARKER = "\x00reference:"
NBSP = "\xa0"
# Parser bookkeeping that must not leak into node attributes.
LINK_ATTRS = frozenset({"href", "src", "alt", "title"})

Hook = cabc.Callable[["TreeConverter", SyntaxTreeNode], list[typ.Any] | None]


class DeferredReferences(dict):
    """Reference table that hands markdown-it a marker instead of a URL.

    ``allow_undefined`` is toggled per link attempt by
    :func:`track_reference_form`; undefined labels only become links when the
    source used the explicit ``[text][label]`` form.
    """

    allow_undefined = False

    def __contains__(self, key: object) -> bool:
        return super().__contains__(key) or self.allow_undefined

    def __getitem__(self, key: str) -> dict[str, str]:
        if key not in self:
            raise KeyError(key)
        entry = super().get(key) or {}
        return {"href": f"{REFERENCE_MARKER}{key}", "title": entry.get("title", "")}

    def get(self, key: str, default: typ.Any = None) -> typ.Any:
        return self[key] if key in self else default

    def targets(self) -> dict[str, ReferenceTarget]:
        """Return the definitions collected while parsing."""
        return {
            label: ReferenceTarget(url=entry["href"], title=entry.get("title") or None)
            for label, entry in self.items()
        }


def track_reference_form(state: StateInline, silent: bool) -> bool:  # noqa: FBT001
    """Inline rule run before ``link``; never consumes input.

    Also runs for the silent link attempts markdown-it makes while validating
    nested labels; those consult the same reference table.
    """
    references = state.env.get("references")
    if not isinstance(references, DeferredReferences):
        return False
    start = state.pos + 1 if state.src.startswith("![", state.pos) else state.pos
    if not state.src.startswith("[", start):
        return False
    label_end = parseLinkLabel(state, start, start == state.pos)
    references.allow_undefined = label_end >= 0 and state.src.startswith(
        "[", label_end + 1
    )
    return False


def install_deferred_references(md: MarkdownIt) -> MarkdownIt:
    """Register the reference-form tracker on ``md`` and return it."""
    md.inline.ruler.before("link", "pagefold_reference_form", track_reference_form)
    return md


def parse_tree(md: MarkdownIt, text: str) -> tuple[SyntaxTreeNode, DeferredReferences]:
    """Parse ``text`` and return the syntax tree with its reference table."""
    references = DeferredReferences()
    tokens = md.parse(text, {"references": references})
    return SyntaxTreeNode(tokens), references


def node_attrs(node: SyntaxTreeNode) -> dict[str, str]:
    """Return user-facing attributes of ``node`` as strings."""
    return {
        str(key): str(value)
        for key, value in node.attrs.items()
        if key not in LINK_ATTRS
    }


def destination(url: str) -> Href | Reference:
    """Split markdown-it's href into an inline URL or a deferred reference."""
    if url.startswith(REFERENCE_MARKER):
        return Reference(url.removeprefix(REFERENCE_MARKER))
    return Href(url)


class TreeConverter:
    """Walk a markdown-it syntax tree and build document nodes.

    Dialects extend the CommonMark node set through ``block_hook`` and
    ``inline_hook``: each receives the converter and a syntax node and
    returns a list of converted nodes, or ``None`` to fall through to the
    CommonMark handling.
    """

    def __init__(
        self,
        *,
        block_hook: Hook | None = None,
        inline_hook: Hook | None = None,
        rule_node: cabc.Callable[[dict[str, str]], typ.Any] = HorizontalBreak,
    ) -> None:
        self.block_hook = block_hook
        self.inline_hook = inline_hook
        self.rule_node = rule_node

    def document(
        self,
        root: SyntaxTreeNode,
        references: DeferredReferences,
        reference_attributes: cabc.Mapping[str, dict[str, str]] | None = None,
    ) -> Document:
        return Document(
            blocks=self.blocks(root.children),
            references=references.targets(),
            reference_attributes=dict(reference_attributes or {}),
        )

    def blocks(self, nodes: cabc.Iterable[SyntaxTreeNode]) -> tuple[typ.Any, ...]:
        converted: list[typ.Any] = []
        for node in nodes:
            converted.extend(self.block(node))
        return tuple(converted)

    def inlines(self, nodes: cabc.Iterable[SyntaxTreeNode]) -> tuple[typ.Any, ...]:
        converted: list[typ.Any] = []
        for node in nodes:
            converted.extend(self.inline(node))
        return tuple(converted)

    def inline_children(self, node: SyntaxTreeNode) -> tuple[typ.Any, ...]:
        """Return the converted content of a node wrapping one ``inline`` child."""
        return self.inlines(child for inline in node.children for child in inline.children)

    def block(self, node: SyntaxTreeNode) -> list[typ.Any]:
        if self.block_hook is not None:
            hooked = self.block_hook(self, node)
            if hooked is not None:
                return hooked
        attrs = node_attrs(node)
        match node.type:
            case "paragraph" if node.hidden:
                return list(self.inline_children(node))
            case "paragraph":
                return [Paragraph(self.inline_children(node), attrs)]
            case "heading":
                return [Heading(int(node.tag[1:]), self.inline_children(node), attrs)]
            case "blockquote":
                return [BlockQuote(self.blocks(node.children), attrs)]
            case "bullet_list":
                items, tight = self._items(node)
                return [UnorderedList(items, node.markup, tight, attrs)]
            case "ordered_list":
                items, tight = self._items(node)
                start = int(node.attrs.get("start", 1))
                attrs.pop("start", None)
                return [OrderedList(items, start, node.markup, tight, attrs)]
            case "fence":
                info = node.info.strip()
                language = info.split(maxsplit=1)[0] if info else ""
                return [CodeBlock(language, info, node.content, attrs)]
            case "code_block":
                return [CodeBlock("", "", node.content, attrs)]
            case "html_block":
                return [HtmlBlock(node.content, attrs)]
            case "hr":
                return [self.rule_node(attrs)]
        return []

    def _items(self, node: SyntaxTreeNode) -> tuple[tuple[tuple[typ.Any, ...], ...], bool]:
        items = tuple(self.blocks(item.children) for item in node.children)
        tight = any(
            child.type == "paragraph" and child.hidden
            for item in node.children
            for child in item.children
        )
        return items, tight

    def inline(self, node: SyntaxTreeNode) -> list[typ.Any]:
        if self.inline_hook is not None:
            hooked = self.inline_hook(self, node)
            if hooked is not None:
                return hooked
        match node.type:
            case "text" | "text_special":
                return split_text(node.content)
            case "softbreak":
                return [SoftLineBreak()]
            case "hardbreak":
                return [HardLineBreak()]
            case "code_inline":
                return [CodeSpan(node.content, node_attrs(node))]
            case "em":
                return [Emphasis(node.markup, self.inlines(node.children), node_attrs(node))]
            case "strong":
                return [StrongEmphasis(self.inlines(node.children), node_attrs(node))]
            case "s":
                return [StrikeThrough(self.inlines(node.children), node_attrs(node))]
            case "link":
                return [self._link(node)]
            case "image":
                target = destination(str(node.attrs.get("src", "")))
                title = _title(node, target)
                return [Image(target, self.inlines(node.children), title, node_attrs(node))]
            case "html_inline":
                return [HtmlInline(node.content)]
        return split_text(node.content)

    def _link(self, node: SyntaxTreeNode) -> typ.Any:
        href = str(node.attrs.get("href", ""))
        if node.markup == "autolink":
            if href.startswith("mailto:") and not _text_of(node).startswith("mailto:"):
                return EmailAutolink(href.removeprefix("mailto:"))
            return UriAutolink(href)
        target = destination(href)
        return Link(target, self.inlines(node.children), _title(node, target), node_attrs(node))


def split_text(text: str) -> list[typ.Any]:
    """Return ``text`` as plain text nodes separated by non-breaking spaces."""
    nodes: list[typ.Any] = []
    for index, chunk in enumerate(text.split(NBSP)):
        if index:
            nodes.append(NonBreakingSpace())
        if chunk:
            nodes.append(PlainText(chunk))
    return nodes


def _title(node: SyntaxTreeNode, target: Href | Reference) -> str | None:
    if isinstance(target, Reference):
        return None
    title = node.attrs.get("title")
    return str(title) if title else None


def _text_of(node: SyntaxTreeNode) -> str:
    return "".join(child.content for child in node.children)


__all__ = [
    "REFERENCE_MARKER",
    "DeferredReferences",
    "TreeConverter",
    "destination",
    "install_deferred_references",
    "node_attrs",
    "parse_tree",
    "split_text",
    "track_reference_form",
]
