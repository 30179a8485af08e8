"""Stage a site in a scratch workspace, then promote it to the output directory.

:class:`SiteBuilder` materializes every route and asset of a
:class:`~pagefold.site.Site` inside a temporary workspace. Only when every
file has been written does it replace ``out_dir`` with the workspace contents,
so a failed build never touches a previously published site. No atomic
directory rename is assumed; promotion is delete-then-copy.

Two builds sharing the same explicit ``workspace`` race on that directory.
Builds that rely on the default workspace get a unique name each run, but
concurrent builds into the same ``out_dir`` still race during promotion; run
one build per output directory at a time.

Example
-------
>>> from pagefold.builder import SiteBuilder
>>> from pagefold.site import Site
>>> site = Site.new("public").add_static_route("/", "<h1>Home</h1>")
>>> SiteBuilder(site).run()  # doctest: +SKIP
[PosixPath('public/index.html')]
"""

from __future__ import annotations

import contextlib
import dataclasses as dc
import logging
import shutil
import uuid
from pathlib import Path, PurePosixPath

from ._constants import HTML_SUFFIX, INDEX_FILENAME, STAGING_TEMPLATE
from .paths import routify, split_last_segment, trim_trailing_slash
from .site import DynamicRoute, Route, Site, SiteConfigError, StaticRoute

logger = logging.getLogger(__name__)


class BuildError(RuntimeError):
    """Raised when a filesystem step of the build fails.

    Attributes
    ----------
    step : str
        Name of the pipeline step that failed (``"seed"``, ``"write"``...).
    path : Path
        Filesystem path the failing operation targeted.
    """

    def __init__(self, step: str, path: Path, reason: str) -> None:
        super().__init__(f"Build step '{step}' failed for '{path}': {reason}")
        self.step = step
        self.path = path


@dc.dataclass(frozen=True, slots=True)
class OutputFile:
    """A workspace-relative file produced by a route."""

    path: PurePosixPath
    content: object


def output_files(route: Route, *, use_index_routes: bool) -> list[OutputFile]:
    """Return the files ``route`` produces, relative to the site root.

    Parameters
    ----------
    route : Route
        Static or dynamic route with a normalized path.
    use_index_routes : bool
        Write static routes as ``<path>/index.html`` instead of
        ``<parent>/<segment>.html``. The root route always yields
        ``index.html`` and dynamic routes ignore the flag.

    Returns
    -------
    list[OutputFile]
        One entry for a static route; one per page key, in insertion order,
        for a dynamic route.
    """
    root = PurePosixPath(route.path.lstrip("/"))
    match route:
        case StaticRoute(path="/", content=content):
            return [OutputFile(PurePosixPath(INDEX_FILENAME), content)]
        case StaticRoute(content=content) if use_index_routes:
            return [OutputFile(root / INDEX_FILENAME, content)]
        case StaticRoute(path=path, content=content):
            parent, segment = split_last_segment(path)
            directory = PurePosixPath(parent.lstrip("/"))
            return [OutputFile(directory / f"{segment}{HTML_SUFFIX}", content)]
        case DynamicRoute(pages=pages):
            return [
                OutputFile(root / f"{routify(key)}{HTML_SUFFIX}", content)
                for key, content in pages.items()
            ]
    msg = f"Unsupported route type: {type(route).__name__}"
    raise TypeError(msg)


class SiteBuilder:
    """Build a :class:`Site` into its output directory."""

    def __init__(
        self,
        site: Site,
        *,
        workspace: Path | None = None,
        cleanup_on_failure: bool = False,
    ) -> None:
        """Initialize the builder.

        Parameters
        ----------
        site : Site
            Registry describing routes, assets, and the output directory.
        workspace : Path, optional
            Staging directory. Any existing directory at this path is deleted
            before the build starts. Defaults to a uniquely named sibling of
            ``out_dir``.
        cleanup_on_failure : bool, optional
            Remove the workspace when the build fails instead of leaving it
            in place for inspection. Defaults to ``False``.

        Raises
        ------
        SiteConfigError
            If the workspace and ``out_dir`` are the same directory or one
            contains the other. Raised before any I/O.
        """
        self.site = site
        self.out_dir = Path(trim_trailing_slash(str(site.out_dir)))
        self.workspace = workspace or self._default_workspace(self.out_dir)
        self.cleanup_on_failure = cleanup_on_failure
        self._workspace_root = self._check_workspace()

    @staticmethod
    def _default_workspace(out_dir: Path) -> Path:
        name = STAGING_TEMPLATE.format(name=out_dir.name, token=uuid.uuid4().hex[:12])
        return out_dir.parent / name

    def _check_workspace(self) -> Path:
        """Return the resolved workspace after checking it is disjoint from ``out_dir``."""
        workspace = self.workspace.resolve()
        out_dir = self.out_dir.resolve()
        if workspace.is_relative_to(out_dir) or out_dir.is_relative_to(workspace):
            msg = (
                f"Workspace '{self.workspace}' overlaps the output directory "
                f"'{self.out_dir}'; staging there would destroy the published site."
            )
            raise SiteConfigError(msg)
        return workspace

    def run(self) -> list[Path]:
        """Stage, write, and publish the site.

        Returns
        -------
        list[Path]
            Published files under ``out_dir`` for every route, in build order.

        Raises
        ------
        SiteConfigError
            If no static route is registered. Raised before any I/O.
        BuildError
            If any filesystem step fails. The published ``out_dir`` is left
            untouched when the failure happens before promotion. Every failed
            step, promotion included, leaves or removes the workspace according
            to ``cleanup_on_failure``.
        """
        if not self.site.has_static_route:
            msg = "At least one static route is required before building a site."
            raise SiteConfigError(msg)

        try:
            self._reset_workspace()
            self._seed_workspace()
            self._write_assets()
            written = self._write_routes()
            self._promote()
        except BuildError:
            self._handle_failure()
            raise

        return [self.out_dir / relative for relative in written]

    def _reset_workspace(self) -> None:
        try:
            shutil.rmtree(self.workspace)
        except FileNotFoundError:
            logger.debug("No previous workspace at %s", self.workspace)
        except OSError as exc:
            raise BuildError("reset", self.workspace, str(exc)) from exc

    def _seed_workspace(self) -> None:
        static_dir = self.site.static_dir
        try:
            if static_dir is not None:
                logger.debug("Seeding %s from %s", self.workspace, static_dir)
                shutil.copytree(static_dir, self.workspace)
            else:
                self.workspace.mkdir(parents=True)
        except OSError as exc:
            raise BuildError("seed", static_dir or self.workspace, str(exc)) from exc

    def _write_assets(self) -> None:
        for relative, content in self.site.static_assets.items():
            self._write(PurePosixPath(relative), content, step="asset")

    def _write_routes(self) -> list[PurePosixPath]:
        written: list[PurePosixPath] = []
        for route in self.site.sorted_routes():
            if isinstance(route, DynamicRoute):
                self._ensure_route_dir(route)
            for output in output_files(route, use_index_routes=self.site.index_routes):
                self._write(output.path, output.content, step="route")
                written.append(output.path)
        return written

    def _ensure_route_dir(self, route: DynamicRoute) -> None:
        """Create the dynamic route directory; sibling routes may share it."""
        directory = self.workspace / route.path.lstrip("/")
        with contextlib.suppress(OSError):
            directory.mkdir(parents=True, exist_ok=True)

    def _write(self, relative: PurePosixPath, content: object, *, step: str) -> None:
        target = self.workspace / relative
        if not target.resolve().is_relative_to(self._workspace_root):
            raise BuildError(step, target, "path escapes the workspace")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(str(content), encoding="utf-8")
        except OSError as exc:
            raise BuildError(step, target, str(exc)) from exc
        logger.debug("Staged %s", relative)

    def _promote(self) -> None:
        if self.out_dir.is_dir():
            try:
                shutil.rmtree(self.out_dir)
            except OSError as exc:
                raise BuildError("clear", self.out_dir, str(exc)) from exc
        try:
            shutil.copytree(self.workspace, self.out_dir)
        except OSError as exc:
            raise BuildError("publish", self.out_dir, str(exc)) from exc
        try:
            shutil.rmtree(self.workspace)
        except OSError as exc:
            raise BuildError("cleanup", self.workspace, str(exc)) from exc
        logger.info("Published site to %s", self.out_dir)

    def _handle_failure(self) -> None:
        if not self.cleanup_on_failure:
            logger.warning("Build failed; partial workspace left at %s", self.workspace)
            return
        try:
            shutil.rmtree(self.workspace)
        except OSError:
            logger.warning("Build failed; could not remove workspace %s", self.workspace)


def build(
    site: Site,
    *,
    workspace: Path | None = None,
    cleanup_on_failure: bool = False,
) -> list[Path]:
    """Build ``site`` and return the published file paths."""
    builder = SiteBuilder(
        site, workspace=workspace, cleanup_on_failure=cleanup_on_failure
    )
    return builder.run()


__all__ = ["BuildError", "OutputFile", "SiteBuilder", "build", "output_files"]
