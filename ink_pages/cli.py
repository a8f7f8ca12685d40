"""Cyclopts CLI entrypoint for compiling ink projects.

The ``ink`` console script defined here compiles every page of a project
(``ink build``) or only the pages affected by one changed source file
(``ink rebuild PATH``), printing each artefact it writes.

Examples
--------
Build the project described by ``ink.yaml`` in the working directory:

>>> from ink_pages.cli import main
>>> main()  # doctest: +SKIP

Rebuild after editing a component:

>>> from ink_pages.cli import app
>>> app(["rebuild", "resources/ink/components/card.ink"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from .build import BuildOrchestrator
from .config import DEFAULT_CONFIG_NAME, load_ink_config

if typ.TYPE_CHECKING:
    from .build import BuildResult

DEFAULT_CONFIG = Path(DEFAULT_CONFIG_NAME)
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = App(name="ink", help="Compile ink page templates into an SPA bundle.")


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _report(result: BuildResult) -> None:
    """Print written artefacts, or exit non-zero with the failure message."""
    if not result.success:
        print(result.message)
        raise SystemExit(1)
    for path in result.written:
        print(f"wrote {_format_path(path)}")
    print(result.message)


@app.command(help="Compile every page and write all build manifests.")
def build(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to project config", env_var="INK_CONFIG")
    ] = DEFAULT_CONFIG,
    verbose: typ.Annotated[
        bool, Parameter(help="Log debug output", env_var="INK_VERBOSE")
    ] = False,
) -> None:
    """Run a full build of the project.

    Parameters
    ----------
    config : Path, optional
        Path to the ``ink.yaml`` configuration file (overridable via
        ``INK_CONFIG``).
    verbose : bool, optional
        Emit debug logging.

    Raises
    ------
    SystemExit
        With status ``1`` when no page could be compiled.
    """
    _configure_logging(verbose=verbose)
    orchestrator = BuildOrchestrator(load_ink_config(config))
    _report(orchestrator.build())


@app.command(help="Recompile only the pages affected by a changed source file.")
def rebuild(
    path: typ.Annotated[Path, Parameter(help="Changed source file")],
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to project config", env_var="INK_CONFIG")
    ] = DEFAULT_CONFIG,
    verbose: typ.Annotated[
        bool, Parameter(help="Log debug output", env_var="INK_VERBOSE")
    ] = False,
) -> None:
    """Run a selective build for ``path``.

    Parameters
    ----------
    path : Path
        The page, layout or component that changed. Any other file triggers
        a full build.
    config : Path, optional
        Path to the ``ink.yaml`` configuration file.
    verbose : bool, optional
        Emit debug logging.

    Raises
    ------
    SystemExit
        With status ``1`` when nothing could be rebuilt.
    """
    _configure_logging(verbose=verbose)
    orchestrator = BuildOrchestrator(load_ink_config(config))
    changed = path if path.is_absolute() else Path.cwd() / path
    _report(orchestrator.build_selective(changed))


def main() -> None:
    """Invoke the Cyclopts application that powers the ``ink`` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
