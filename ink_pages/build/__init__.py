"""Build orchestration: page discovery, compilation, manifests and output.

:class:`BuildOrchestrator` is the entry point; :meth:`~BuildOrchestrator.build`
compiles every page and :meth:`~BuildOrchestrator.build_selective` rebuilds
only the pages a changed source file affects.
"""

from .accumulator import (
    BuildAccumulator,
    CompiledPage,
    RouteEntry,
    RouteRegistration,
    route_pattern,
)
from .catalog import (
    build_bundle,
    discover_locales,
    flatten_messages,
    load_catalog,
    render_bundle,
)
from .discovery import (
    ChangeType,
    affected_components,
    classify_change,
    discover_pages,
    discover_sources,
    pages_using_component,
    pages_using_layout,
)
from .orchestrator import BuildOrchestrator, BuildResult, SelectiveBuildResult
from .output import OutputWriter, page_output_name
from .page_compiler import PageCompiler

__all__ = [
    "BuildAccumulator",
    "BuildOrchestrator",
    "BuildResult",
    "ChangeType",
    "CompiledPage",
    "OutputWriter",
    "PageCompiler",
    "RouteEntry",
    "RouteRegistration",
    "SelectiveBuildResult",
    "affected_components",
    "build_bundle",
    "classify_change",
    "discover_locales",
    "discover_pages",
    "discover_sources",
    "flatten_messages",
    "load_catalog",
    "page_output_name",
    "pages_using_component",
    "pages_using_layout",
    "render_bundle",
    "route_pattern",
]
