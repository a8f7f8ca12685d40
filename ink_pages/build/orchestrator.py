"""Drive full and selective builds of an ink project.

A full build compiles every page under the pages root. A selective build
compiles only the pages a changed source file can affect and folds the
results into the manifests of the previous build. Either way each page
compiles in isolation: a page that fails is logged and skipped, and pages
written before it stay on disk.

Examples
--------
>>> from pathlib import Path
>>> from ink_pages.build import BuildOrchestrator
>>> from ink_pages.config import load_ink_config
>>> config = load_ink_config(Path("ink.yaml"))  # doctest: +SKIP
>>> BuildOrchestrator(config).build().message  # doctest: +SKIP
'Built 3 page(s).'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from ..errors import InkError
from ..parser.document import extract_translation_keys
from .accumulator import BuildAccumulator
from .catalog import build_bundle
from .discovery import (
    ChangeType,
    classify_change,
    discover_pages,
    discover_sources,
    pages_using_component,
    pages_using_layout,
)
from .output import OutputWriter
from .page_compiler import PageCompiler

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from ..components.registry import ComponentRegistry
    from ..config import InkConfig

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True)
class BuildResult:
    """Outcome of a full build."""

    success: bool
    message: str
    page_count: int = 0
    written: list[Path] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class SelectiveBuildResult(BuildResult):
    """Outcome of a selective build and the kind of change that triggered it."""

    change_type: ChangeType = ChangeType.OTHER


class BuildOrchestrator:
    """Compile pages and write every build artefact.

    Parameters
    ----------
    config : InkConfig
        Project configuration.
    compiler : PageCompiler, optional
        Page pipeline; built from ``config`` when omitted.
    writer : OutputWriter, optional
        Artefact writer; built from ``config`` when omitted.
    """

    def __init__(
        self,
        config: InkConfig,
        *,
        compiler: PageCompiler | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self.config = config
        self.compiler = compiler or PageCompiler(config)
        self.writer = writer or OutputWriter(config)

    @property
    def registry(self) -> ComponentRegistry:
        return self.compiler.registry

    def _compile_pages(
        self, pages: cabc.Iterable[Path], accumulator: BuildAccumulator
    ) -> tuple[int, list[Path]]:
        """Compile and write ``pages``; return the success count and paths."""
        count = 0
        written: list[Path] = []
        for path in pages:
            try:
                compiled = self.compiler.compile(path)
            except InkError as exc:
                logger.error("failed to compile %s: %s", path, exc)  # noqa: TRY400
                continue
            written.append(self.writer.write_page(compiled.slug, compiled.html))
            accumulator.register_page(compiled)
            count += 1
        return count, written

    def _finish(self, accumulator: BuildAccumulator) -> list[Path]:
        bundle = build_bundle(self.config, accumulator.translation_keys)
        return self.writer.write_manifests(accumulator, bundle)

    def build(self) -> BuildResult:
        """Compile every page and write all manifests.

        Returns
        -------
        BuildResult
            ``success`` is ``False`` when no pages exist or none compiled.
        """
        pages = discover_pages(self.config)
        if not pages:
            return BuildResult(False, f"No pages found in {self.config.pages_root}")
        self.registry.refresh()

        accumulator = BuildAccumulator(cache_enabled=self.config.cache.enable)
        count, written = self._compile_pages(pages, accumulator)
        if not count:
            return BuildResult(False, "No pages compiled successfully", 0, written)

        written.extend(self._finish(accumulator))
        failed = len(pages) - count
        message = f"Built {count} page(s)."
        if failed:
            message = f"{message} {failed} page(s) failed."
        logger.info(message)
        return BuildResult(True, message, count, written)

    def collect_translation_keys(self) -> set[str]:
        """Return every localization key referenced by any source document."""
        keys: set[str] = set()
        for path in discover_sources(self.config):
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("skipping %s: %s", path, exc)
                continue
            keys |= extract_translation_keys(text)
        return keys

    def _candidates(self, change: ChangeType, name: str, path: Path) -> list[Path]:
        match change:
            case ChangeType.PAGE:
                pages_root = self.config.pages_root
                return [pages_root / path.resolve().relative_to(pages_root.resolve())]
            case ChangeType.LAYOUT:
                return pages_using_layout(self.config, name)
            case ChangeType.COMPONENT:
                return pages_using_component(self.config, name, self.registry)
            case _:
                return []

    def build_selective(self, changed_path: Path) -> SelectiveBuildResult:
        """Rebuild only the pages affected by ``changed_path``.

        Parameters
        ----------
        changed_path : Path
            The modified source file, absolute or relative to the project
            root.

        Returns
        -------
        SelectiveBuildResult
            The rebuild outcome. Files outside the pages, layouts and
            components directories trigger a full build.
        """
        change, name = classify_change(changed_path, self.config)
        if change is ChangeType.OTHER:
            result = self.build()
            return SelectiveBuildResult(
                result.success,
                result.message,
                result.page_count,
                result.written,
                change,
            )

        target = changed_path
        if not target.is_absolute():
            target = self.config.project_root / target
        candidates = self._candidates(change, name, target)
        if not candidates:
            message = f"No pages to rebuild for {change.value}: {name}"
            return SelectiveBuildResult(False, message, change_type=change)

        self.registry.refresh()
        accumulator = self.writer.load_accumulator()
        count, written = self._compile_pages(candidates, accumulator)
        if not count:
            message = f"No pages compiled successfully for {change.value}: {name}"
            return SelectiveBuildResult(False, message, 0, written, change)

        accumulator.translation_keys = self.collect_translation_keys()
        written.extend(self._finish(accumulator))
        message = f"Rebuilt {count} page(s) for {change.value}: {name}"
        logger.info(message)
        return SelectiveBuildResult(True, message, count, written, change)


__all__ = ["BuildOrchestrator", "BuildResult", "SelectiveBuildResult"]
