"""Resolve link and image destinations against a document's reference table."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from pagefold._constants import BACK_REFERENCE_PREFIX
from pagefold.paths import slugify

from .nodes import Attrs, Document, Href, Reference

if typ.TYPE_CHECKING:
    from .nodes import Destination


@dc.dataclass(frozen=True, slots=True)
class ResolvedLink:
    """Final URL, title, and attributes handed to link/image callbacks."""

    url: str
    title: str | None
    attrs: Attrs


def resolve(
    document: Document,
    destination: Destination,
    title: str | None = None,
    attrs: Attrs | None = None,
) -> ResolvedLink:
    """Return the concrete target for ``destination``.

    A known reference yields its URL and title, merged with any attributes
    recorded for it; node attributes win on conflict. An unknown reference is
    not an error: it becomes the same-page anchor ``#<slug>`` carrying the id
    ``back-to-<slug>``, so two documents can point at each other without a
    dedicated anchor syntax.
    """
    node_attrs = dict(attrs or {})
    match destination:
        case Href(url=url):
            return ResolvedLink(url=url, title=title, attrs=node_attrs)
        case Reference(name=name):
            target = document.references.get(name)
            if target is None:
                slug = slugify(name)
                merged = {"id": f"{BACK_REFERENCE_PREFIX}{slug}", **node_attrs}
                return ResolvedLink(url=f"#{slug}", title=title, attrs=merged)
            merged = {**document.reference_attributes.get(name, {}), **node_attrs}
            return ResolvedLink(
                url=target.url, title=title or target.title, attrs=merged
            )
    msg = f"Unsupported link destination: {destination!r}"
    raise TypeError(msg)


__all__ = ["ResolvedLink", "resolve"]
