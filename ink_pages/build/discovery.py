"""Find page documents and work out which pages a changed file affects."""

from __future__ import annotations

import enum
import logging
import typing as typ
from pathlib import Path

from ..components.registry import candidate_names
from ..components.resolver import referenced_names
from ..errors import DocumentReadError
from ..layout.resolver import layout_name, normalize_layout_name
from ..parser.document import extract_page_config, read_document
from ..parser.models import DocumentKind

if typ.TYPE_CHECKING:
    from ..components.registry import ComponentRegistry
    from ..config import InkConfig

logger = logging.getLogger(__name__)


class ChangeType(enum.Enum):
    """Which part of the source tree a changed file belongs to."""

    PAGE = "page"
    LAYOUT = "layout"
    COMPONENT = "component"
    OTHER = "other"


def _template_files(root: Path, suffixes: tuple[str, ...]) -> list[Path]:
    if not root.is_dir():
        return []
    return sorted(
        path
        for path in root.rglob("*")
        if path.is_file() and any(path.name.endswith(suffix) for suffix in suffixes)
    )


def discover_pages(config: InkConfig) -> list[Path]:
    """Return every page document under the pages root, sorted by path."""
    return _template_files(config.pages_root, config.template_suffixes)


def discover_sources(config: InkConfig) -> list[Path]:
    """Return every page, component and layout document in the project."""
    return [
        path
        for root in (config.pages_root, config.components_root, config.layouts_root)
        for path in _template_files(root, config.template_suffixes)
    ]


def _absolute(path: Path, config: InkConfig) -> Path:
    return (path if path.is_absolute() else config.project_root / path).resolve()


def _relative_name(path: Path, root: Path, config: InkConfig) -> str | None:
    try:
        relative = path.relative_to(root.resolve()).as_posix()
    except ValueError:
        return None
    return config.strip_suffix(relative) or relative


def classify_change(path: Path, config: InkConfig) -> tuple[ChangeType, str]:
    """Classify ``path`` by the source directory it sits under.

    Returns
    -------
    tuple[ChangeType, str]
        The change type and the document's name: the page path relative to
        the pages root, the dotted layout or component name, or the bare
        file name for anything else.

    Examples
    --------
    >>> from ink_pages.config import InkConfig
    >>> config = InkConfig(project_root=Path("/app"))
    >>> classify_change(Path("resources/ink/components/ui/card.ink"), config)
    (<ChangeType.COMPONENT: 'component'>, 'ui.card')
    """
    target = _absolute(path, config)
    if (name := _relative_name(target, config.pages_root, config)) is not None:
        return ChangeType.PAGE, name
    if (name := _relative_name(target, config.layouts_root, config)) is not None:
        resolved = layout_name(
            target, config.layouts_root.resolve(), config.template_suffixes
        )
        return ChangeType.LAYOUT, resolved or name.replace("/", ".")
    if (name := _relative_name(target, config.components_root, config)) is not None:
        return ChangeType.COMPONENT, name.replace("/", ".")
    return ChangeType.OTHER, target.name


def _read_body(path: Path, kind: DocumentKind) -> tuple[str, str] | None:
    try:
        document = read_document(path, kind)
    except DocumentReadError as exc:
        logger.warning("skipping unreadable document %s: %s", path, exc.reason)
        return None
    return document.config_block, document.body


def pages_using_layout(config: InkConfig, name: str) -> list[Path]:
    """Return the pages whose config block declares layout ``name``.

    Dotted and slashed spellings match. Pages that fall back to the default
    layout are not returned.
    """
    wanted = normalize_layout_name(name)
    selected: list[Path] = []
    for path in discover_pages(config):
        if (parts := _read_body(path, DocumentKind.PAGE)) is None:
            continue
        declared = extract_page_config(parts[0], default_ttl=config.cache.ttl).layout
        if declared and normalize_layout_name(declared) == wanted:
            selected.append(path)
    return selected


def _resolved_references(text: str, registry: ComponentRegistry) -> set[str]:
    resolved: set[str] = set()
    for reference in referenced_names(text):
        if (definition := registry.find(reference)) is not None:
            resolved.add(definition.name)
    return resolved


def affected_components(name: str, registry: ComponentRegistry) -> set[str]:
    """Return ``name`` plus every component that embeds it, at any depth."""
    dependencies: dict[str, set[str]] = {}
    for definition in registry.definitions.values():
        if (parts := _read_body(definition.path, DocumentKind.COMPONENT)) is None:
            continue
        dependencies[definition.name] = _resolved_references(parts[1], registry)

    affected = {name}
    if (definition := registry.find(name)) is not None:
        affected.add(definition.name)
    changed = True
    while changed:
        changed = False
        for component, uses in dependencies.items():
            if component not in affected and uses & affected:
                affected.add(component)
                changed = True
    return affected


def pages_using_component(
    config: InkConfig, name: str, registry: ComponentRegistry
) -> list[Path]:
    """Return the pages whose bodies reference component ``name``.

    References are matched under every spelling the registry accepts
    (``ui.card``, ``ui::card``, ``ui-card``) and through components that
    embed the changed one.
    """
    registry.refresh()
    affected = affected_components(name, registry)
    selected: list[Path] = []
    for path in discover_pages(config):
        if (parts := _read_body(path, DocumentKind.PAGE)) is None:
            continue
        spellings = {
            candidate
            for reference in referenced_names(parts[1])
            for candidate in candidate_names(reference)
        }
        if spellings & affected:
            selected.append(path)
    return selected


__all__ = [
    "ChangeType",
    "affected_components",
    "classify_change",
    "discover_pages",
    "discover_sources",
    "pages_using_component",
    "pages_using_layout",
]
