"""Normalize route paths before they reach the filesystem layer.

Every path a caller hands to :class:`~pagefold.site.Site` passes through these
helpers, so raw casing and whitespace never leak into output filenames.

Examples
--------
>>> from pagefold.paths import route_path, routify, split_last_segment
>>> routify("Blog Posts")
'blog-posts'
>>> route_path("/About Us/")
'/about-us'
>>> split_last_segment("/docs/getting-started")
('/docs', 'getting-started')
"""

from __future__ import annotations

import posixpath
import re

WHITESPACE_PATTERN = re.compile(r"\s+")
DOT_SEGMENTS = frozenset({".", ".."})


def routify(path: str) -> str:
    """Collapse whitespace runs into hyphens and lowercase ``path``.

    Leading and trailing whitespace is dropped first so the result never
    begins or ends with a stray hyphen. The function is idempotent.
    """
    return WHITESPACE_PATTERN.sub("-", path.strip()).lower()


def slugify(name: str) -> str:
    """Return the anchor slug used for reference names."""
    return routify(name)


def trim_trailing_slash(path: str) -> str:
    """Remove trailing slashes, keeping a lone ``/`` intact."""
    trimmed = path.rstrip("/")
    if not trimmed and path.startswith("/"):
        return "/"
    return trimmed


def route_path(path: str) -> str:
    """Return the canonical ``/``-rooted form of a route path."""
    return "/" + routify(path).strip("/")


def asset_path(path: str) -> str:
    """Return the canonical workspace-relative form of an asset path."""
    return routify(path).strip("/")


def split_last_segment(path: str) -> tuple[str, str]:
    """Split ``path`` into its parent directory and final segment."""
    parent, segment = posixpath.split(trim_trailing_slash(path))
    return parent or "/", segment


def has_dot_segment(path: str) -> bool:
    """Return ``True`` when any segment of ``path`` is ``.`` or ``..``."""
    return any(segment in DOT_SEGMENTS for segment in path.split("/"))


__all__ = [
    "asset_path",
    "has_dot_segment",
    "route_path",
    "routify",
    "slugify",
    "split_last_segment",
    "trim_trailing_slash",
]
