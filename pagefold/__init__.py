"""Build static sites from registered routes and lightweight markup.

A :class:`Site` records routes and assets without touching the disk;
:class:`SiteBuilder` stages the result in a scratch workspace and only then
replaces the published directory. :mod:`pagefold.markup` turns markdown into
views through caller-supplied callback tables.

Exports
-------
- ``Site`` and its route types, plus ``SiteConfigError``.
- ``SiteBuilder``, ``build`` and ``BuildError``.
- ``app`` and ``main`` for the ``pagefold`` console script.

Examples
--------
>>> from pagefold import Site, build
>>> site = Site.new("public").add_static_route("/", "<h1>Home</h1>")
>>> build(site)  # doctest: +SKIP
[PosixPath('public/index.html')]
"""

from __future__ import annotations

from .builder import BuildError, SiteBuilder, build
from .cli import app, main
from .site import DynamicRoute, Route, Site, SiteConfigError, StaticRoute

__all__ = [
    "BuildError",
    "DynamicRoute",
    "Route",
    "Site",
    "SiteBuilder",
    "SiteConfigError",
    "StaticRoute",
    "app",
    "build",
    "main",
]
