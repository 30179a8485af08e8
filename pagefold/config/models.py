"""Typed dataclasses describing a declarative pagefold site."""

from __future__ import annotations

import dataclasses as dc
import enum
from pathlib import Path

from pagefold.pages import assemble_site
from pagefold.site import Site


class Dialect(enum.StrEnum):
    """Markup dialect used to render route sources."""

    MARKDOWN = "markdown"
    EXTENDED = "extended"


@dc.dataclass(slots=True)
class RouteConfig:
    """A route declared in the site file.

    Exactly one of ``source`` (static route) or ``sources`` (dynamic route,
    one page per ``*.md`` file in the directory) is set.
    """

    path: str
    source: Path | None = None
    sources: Path | None = None


@dc.dataclass(slots=True)
class SiteConfig:
    """A fully resolved site definition sourced from YAML config."""

    out_dir: Path
    routes: list[RouteConfig]
    static_dir: Path | None = None
    index_routes: bool = False
    dialect: Dialect = Dialect.MARKDOWN
    title: str = "Untitled"
    pygments_style: str = "monokai"
    assets: dict[str, str] = dc.field(default_factory=dict)

    def to_site(self) -> Site:
        """Render every configured route into a :class:`Site`."""
        return assemble_site(self)


__all__ = ["Dialect", "RouteConfig", "SiteConfig"]
