"""Load a site configuration YAML file into typed dataclasses."""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from pagefold.site import SiteConfigError

from .models import Dialect, RouteConfig, SiteConfig

logger = logging.getLogger(__name__)


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML file describing routes, assets, and build options.

    Relative paths inside the file are resolved against the directory that
    contains it.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file.

    Returns
    -------
    SiteConfig
        Parsed configuration ready for :func:`pagefold.pages.assemble_site`.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    SiteConfigError
        If the file is not a mapping, declares no routes, names an unknown
        dialect, or contains a route without a source.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise SiteConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    root = path.parent
    site_raw = raw.get("site", {}) or {}

    routes_raw = raw.get("routes") or []
    if not routes_raw:
        msg = f"No routes defined in '{path}'."
        raise SiteConfigError(msg)
    routes = [_build_route(entry, root) for entry in routes_raw]

    dialect_name = str(site_raw.get("dialect", Dialect.MARKDOWN))
    try:
        dialect = Dialect(dialect_name)
    except ValueError as exc:
        known = ", ".join(item.value for item in Dialect)
        msg = f"Unknown dialect '{dialect_name}'. Known dialects: {known}"
        raise SiteConfigError(msg) from exc

    static_dir = site_raw.get("static_dir")
    assets = {str(key): str(value) for key, value in (raw.get("assets") or {}).items()}
    config = SiteConfig(
        out_dir=root / site_raw.get("out_dir", "public"),
        routes=routes,
        static_dir=root / static_dir if static_dir else None,
        index_routes=bool(site_raw.get("index_routes", False)),
        dialect=dialect,
        title=str(site_raw.get("title", "Untitled")),
        pygments_style=str(site_raw.get("pygments_style", "monokai")),
        assets=assets,
    )
    logger.debug("Loaded %d routes from %s", len(routes), path)
    return config


def _build_route(entry: object, root: Path) -> RouteConfig:
    """Build a RouteConfig from one ``routes`` entry."""
    match entry:
        case {"path": str() as route, "source": str() as source}:
            return RouteConfig(path=route, source=root / source)
        case {"path": str() as route, "sources": str() as sources}:
            return RouteConfig(path=route, sources=root / sources)
        case {"path": str() as route}:
            msg = f"Route '{route}' needs either 'source' or 'sources'."
            raise SiteConfigError(msg)
        case _:
            msg = f"Invalid route entry: {entry!r}"
            raise SiteConfigError(msg)


__all__ = ["load_site_config"]
