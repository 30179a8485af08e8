"""Immutable route registry describing what a site build should emit.

A :class:`Site` collects static and dynamic routes, an optional static
directory used to seed the build, and individually declared assets. Every
mutation returns a new ``Site``; nothing is changed in place, so a registry can
be shared and extended freely before it is handed to
:class:`~pagefold.builder.SiteBuilder`.

Examples
--------
>>> from pagefold.site import Site
>>> site = (
...     Site.new("public")
...     .add_static_route("/", "<h1>Home</h1>")
...     .add_dynamic_route("/blog", {"Hello World": "hi"}, lambda body: f"<p>{body}</p>")
... )
>>> [route.path for route in site.routes]
['/blog', '/']
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import types
import typing as typ
from pathlib import Path

from .paths import asset_path, has_dot_segment, route_path, routify

T = typ.TypeVar("T")


class SiteConfigError(ValueError):
    """Raised when a site registry is misconfigured or cannot be built."""


@dc.dataclass(frozen=True, slots=True)
class StaticRoute:
    """A single output file rendered from one view.

    Attributes
    ----------
    path : str
        Normalized route path, always ``/``-rooted.
    content : object
        Rendered view; serialized with ``str()`` unless it is ``bytes``.
    """

    path: str
    content: object


@dc.dataclass(frozen=True, slots=True)
class DynamicRoute:
    """A family of output files sharing ``path`` as their directory.

    Attributes
    ----------
    path : str
        Normalized route path, always ``/``-rooted.
    pages : Mapping[str, object]
        Rendered view per page key, in insertion order.
    """

    path: str
    pages: cabc.Mapping[str, object]


Route = StaticRoute | DynamicRoute


def _checked(path: str, kind: str) -> str:
    if has_dot_segment(path):
        msg = f"Invalid {kind} path '{path}': '.' and '..' segments are not allowed."
        raise SiteConfigError(msg)
    return path


@dc.dataclass(frozen=True, slots=True)
class Site:
    """Route registry consumed by the site builder.

    Attributes
    ----------
    out_dir : Path
        Final publish location.
    static_dir : Path or None
        Directory recursively copied into the workspace before routes are
        written.
    static_assets : Mapping[str, bytes | str]
        Individually declared files overlaying the static directory.
    routes : tuple[Route, ...]
        Declared routes, most recently added first.
    index_routes : bool
        When set, static routes are written as ``<path>/index.html``.
    """

    out_dir: Path
    static_dir: Path | None = None
    static_assets: cabc.Mapping[str, bytes | str] = dc.field(
        default_factory=lambda: types.MappingProxyType({})
    )
    routes: tuple[Route, ...] = ()
    index_routes: bool = False

    @classmethod
    def new(cls, out_dir: str | Path) -> Site:
        """Return an empty registry publishing into ``out_dir``."""
        return cls(out_dir=Path(out_dir))

    @classmethod
    def with_static_route(cls, out_dir: str | Path, path: str, content: object) -> Site:
        """Return a registry that already satisfies the build precondition."""
        return cls.new(out_dir).add_static_route(path, content)

    def add_static_route(self, path: str, content: object) -> Site:
        """Return a registry with a static route prepended.

        Raises
        ------
        SiteConfigError
            If ``path`` contains a ``.`` or ``..`` segment.
        """
        route = StaticRoute(path=_checked(route_path(path), "route"), content=content)
        return dc.replace(self, routes=(route, *self.routes))

    def add_dynamic_route(
        self,
        path: str,
        data: cabc.Mapping[str, T],
        render: cabc.Callable[[T], object],
    ) -> Site:
        """Return a registry with a dynamic route rendered from ``data``.

        ``render`` is applied to every value; the resulting page keys are
        exactly the keys of ``data``, in the same order.

        Raises
        ------
        SiteConfigError
            If ``path`` or any key of ``data`` contains a ``.`` or ``..``
            segment.
        """
        pages = types.MappingProxyType({key: render(value) for key, value in data.items()})
        for key in pages:
            _checked(routify(key), "page key")
        route = DynamicRoute(path=_checked(route_path(path), "route"), pages=pages)
        return dc.replace(self, routes=(route, *self.routes))

    def add_static_dir(self, path: str | Path) -> Site:
        """Return a registry seeded from ``path``.

        Raises
        ------
        SiteConfigError
            If a static directory has already been configured.
        """
        if self.static_dir is not None:
            msg = (
                f"Static directory already set to '{self.static_dir}'; "
                f"refusing to replace it with '{path}'."
            )
            raise SiteConfigError(msg)
        return dc.replace(self, static_dir=Path(path))

    def add_static_asset(self, path: str, content: bytes | str) -> Site:
        """Return a registry with ``content`` stored at ``path``.

        A later asset with the same normalized path replaces the earlier one.

        Raises
        ------
        SiteConfigError
            If ``path`` contains a ``.`` or ``..`` segment.
        """
        assets = dict(self.static_assets)
        assets[_checked(asset_path(path), "asset")] = content
        return dc.replace(self, static_assets=types.MappingProxyType(assets))

    def use_index_routes(self) -> Site:
        """Return a registry writing static routes as ``<path>/index.html``."""
        return dc.replace(self, index_routes=True)

    @property
    def has_static_route(self) -> bool:
        """Return ``True`` once at least one static route is registered."""
        return any(isinstance(route, StaticRoute) for route in self.routes)

    def sorted_routes(self) -> list[Route]:
        """Return routes ordered by path; equal paths keep registry order."""
        return sorted(self.routes, key=lambda route: route.path)


__all__ = ["DynamicRoute", "Route", "Site", "SiteConfigError", "StaticRoute"]
