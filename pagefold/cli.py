"""Cyclopts CLI entrypoint for building pagefold sites.

The ``pagefold`` console script builds a site described by a YAML
configuration file, or renders a single markup document to stdout for a quick
preview.

Examples
--------
Build the site described by ``site.yaml``:

>>> from pagefold.cli import main
>>> main()  # doctest: +SKIP

Preview one document with the extended dialect:

>>> from pagefold.cli import app
>>> app(["render", "notes.md", "--dialect", "extended"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .builder import SiteBuilder
from .config import Dialect, load_site_config
from .pages import PageRenderer

DEFAULT_CONFIG = Path("site.yaml")

app = App(name="pagefold", config=cyclopts.config.Env("PAGEFOLD_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command(help="Build the site described by a YAML configuration file.")
def build(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="PAGEFOLD_CONFIG")
    ] = DEFAULT_CONFIG,
    out_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="PAGEFOLD_OUT_DIR"),
    ] = None,
    workspace: typ.Annotated[
        Path | None,
        Parameter(help="Staging directory used during the build"),
    ] = None,
    cleanup_on_failure: typ.Annotated[
        bool, Parameter(help="Remove the staging directory when the build fails")
    ] = False,
    verbose: typ.Annotated[bool, Parameter(help="Log every staged file")] = False,
) -> None:
    """Render every configured route and publish the site.

    Parameters
    ----------
    config : Path, optional
        Path to the site configuration (overridable via ``PAGEFOLD_CONFIG``).
    out_dir : Path or None, optional
        Publish into this directory instead of the configured ``out_dir``.
    workspace : Path or None, optional
        Explicit staging directory; defaults to a unique sibling of
        ``out_dir``.
    cleanup_on_failure : bool, optional
        Delete the staging directory if the build fails.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    SiteConfigError
        If the configuration is invalid or declares no static route.
    BuildError
        If a filesystem step fails; the published site is left untouched.
    """
    _configure_logging(verbose=verbose)
    site_config = load_site_config(config)
    if out_dir is not None:
        site_config.out_dir = out_dir
    builder = SiteBuilder(
        site_config.to_site(),
        workspace=workspace,
        cleanup_on_failure=cleanup_on_failure,
    )
    for path in builder.run():
        print(f"wrote {_format_path(path)}")


@app.command(help="Render one markup document to HTML on stdout.")
def render(
    file: Path,
    *,
    dialect: typ.Annotated[
        Dialect, Parameter(help="Markup dialect of the document")
    ] = Dialect.MARKDOWN,
) -> None:
    """Print the HTML fragment for ``file``, ignoring its frontmatter title.

    Parameters
    ----------
    file : Path
        Markup document to render.
    dialect : Dialect, optional
        ``markdown`` (default) or ``extended``.

    Raises
    ------
    MetadataError
        If the document's frontmatter is not valid TOML.
    """
    fragment, _ = PageRenderer(dialect=str(dialect)).render_fragment(
        file.read_text(encoding="utf-8")
    )
    print(fragment)


def main() -> None:
    """Invoke the Cyclopts application behind the ``pagefold`` command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
