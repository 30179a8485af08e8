"""Turn markup source files into complete HTML pages and assemble a Site.

:class:`PageRenderer` pairs a dialect with the default HTML callback tables and
wraps every rendered fragment in :func:`~pagefold.markup.html.html_page`.
:func:`assemble_site` walks a :class:`~pagefold.config.SiteConfig` and
registers one route per configured entry.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import typing as typ
from pathlib import Path

from markupsafe import Markup

from pagefold.markup import extended, markdown
from pagefold.markup.html import HtmlContentRenderer, html_page, to_html
from pagefold.site import Site, SiteConfigError

if typ.TYPE_CHECKING:
    from pagefold.config.models import RouteConfig, SiteConfig
    from pagefold.markup.frontmatter import Metadata

logger = logging.getLogger(__name__)

SOURCE_GLOB = "*.md"
T = typ.TypeVar("T")


class PageRenderer:
    """Render markup documents into standalone HTML pages."""

    def __init__(
        self,
        *,
        dialect: str = "markdown",
        title: str = "Untitled",
        pygments_style: str = "monokai",
    ) -> None:
        self.dialect = dialect
        self.title = title
        self.html = HtmlContentRenderer(pygments_style=pygments_style)

    def render_fragment(self, text: str) -> tuple[Markup, Metadata]:
        """Render ``text`` and return the HTML fragment with its metadata.

        Raises
        ------
        MetadataError
            If the frontmatter block is not valid TOML.
        SiteConfigError
            If the dialect is unknown.
        """
        metadata: Metadata = {}

        def remembering(table: T) -> cabc.Callable[[Metadata], T]:
            def factory(found: Metadata) -> T:
                metadata.update(found)
                return table

            return factory

        match self.dialect:
            case "markdown":
                views = markdown.render_with_metadata(
                    text, remembering(self.html.markdown())
                )
            case "extended":
                views = extended.render_with_metadata(
                    text, remembering(self.html.extended())
                )
            case other:
                msg = f"Unknown dialect '{other}'."
                raise SiteConfigError(msg)
        return to_html(views), metadata

    def render_page(self, text: str) -> Markup:
        """Render ``text`` into a full HTML document.

        The page title comes from the ``title`` frontmatter key, falling back
        to the renderer's site title.
        """
        body, metadata = self.render_fragment(text)
        title = str(metadata.get("title") or self.title)
        return html_page(title, body, stylesheet=self.html.stylesheet)

    def render_file(self, path: Path) -> Markup:
        """Read ``path`` as UTF-8 and render it into a full HTML document."""
        return self.render_page(path.read_text(encoding="utf-8"))


def _dynamic_sources(directory: Path) -> dict[str, str]:
    if not directory.is_dir():
        msg = f"Route source directory '{directory}' does not exist."
        raise SiteConfigError(msg)
    return {
        source.stem: source.read_text(encoding="utf-8")
        for source in sorted(directory.glob(SOURCE_GLOB))
    }


def _add_route(site: Site, route: RouteConfig, pages: PageRenderer) -> Site:
    if route.sources is not None:
        sources = _dynamic_sources(route.sources)
        logger.debug("Rendering %d pages for %s", len(sources), route.path)
        return site.add_dynamic_route(route.path, sources, pages.render_page)
    if route.source is None or not route.source.is_file():
        msg = f"Route '{route.path}' source '{route.source}' does not exist."
        raise SiteConfigError(msg)
    logger.debug("Rendering %s for %s", route.source, route.path)
    return site.add_static_route(route.path, pages.render_file(route.source))


def assemble_site(config: SiteConfig) -> Site:
    """Render every configured route and return the resulting registry.

    Parameters
    ----------
    config : SiteConfig
        Parsed site configuration.

    Returns
    -------
    Site
        Registry ready for :class:`~pagefold.builder.SiteBuilder`.

    Raises
    ------
    SiteConfigError
        If a route source is missing.
    MetadataError
        If a source carries malformed frontmatter.
    """
    pages = PageRenderer(
        dialect=str(config.dialect),
        title=config.title,
        pygments_style=config.pygments_style,
    )
    site = Site.new(config.out_dir)
    if config.static_dir is not None:
        site = site.add_static_dir(config.static_dir)
    for relative, asset in config.assets.items():
        site = site.add_static_asset(relative, asset)
    if config.index_routes:
        site = site.use_index_routes()
    for route in config.routes:
        site = _add_route(site, route, pages)
    return site


__all__ = ["PageRenderer", "assemble_site"]
