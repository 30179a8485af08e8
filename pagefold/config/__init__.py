"""Load declarative site definitions for pagefold builds.

This subpackage parses a ``site.yaml`` file into :class:`SiteConfig`
dataclasses; :func:`pagefold.pages.assemble_site` turns those into a
:class:`~pagefold.site.Site` ready for building.

Examples
--------
>>> from pathlib import Path
>>> from pagefold.config import load_site_config
>>> config = load_site_config(Path("site.yaml"))  # doctest: +SKIP
>>> config.dialect  # doctest: +SKIP
<Dialect.MARKDOWN: 'markdown'>
"""

from .loader import load_site_config
from .models import Dialect, RouteConfig, SiteConfig

__all__ = ["Dialect", "RouteConfig", "SiteConfig", "load_site_config"]
