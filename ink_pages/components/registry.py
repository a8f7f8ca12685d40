"""Discover component documents and resolve reference spellings to them.

Components live under ``<source>/components``; a component's name is its
path relative to that root with the template suffix removed and ``/``
replaced by ``.`` (``components/forms/input.ink`` is ``forms.input``).
Pages may spell references as ``forms.input``, ``forms::input`` or
``forms-input``; :data:`CANDIDATE_NORMALIZERS` lists the rewrites tried, in
order, to map a spelling onto a registered name.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from ..config.models import strip_template_suffix
from ..errors import ComponentNotFoundError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class ComponentDefinition:
    """A component document discovered on disk."""

    name: str
    path: Path


def _literal(name: str) -> str:
    return name


def _namespace_to_dot(name: str) -> str:
    return name.replace("::", ".")


def _dash_to_dot(name: str) -> str:
    return name.replace("-", ".")


CANDIDATE_NORMALIZERS: tuple[cabc.Callable[[str], str], ...] = (
    _literal,
    _namespace_to_dot,
    _dash_to_dot,
)


def candidate_names(reference: str) -> list[str]:
    """Return the distinct spellings tried for ``reference``, in order.

    Each normalizer rewrites the previous spelling, so ``ui::my-badge`` reaches
    ``ui.my.badge``.

    Examples
    --------
    >>> candidate_names("forms-input")
    ['forms-input', 'forms.input']
    >>> candidate_names("ui::my-badge")
    ['ui::my-badge', 'ui.my-badge', 'ui.my.badge']
    """
    candidates: list[str] = []
    current = reference
    for normalize in CANDIDATE_NORMALIZERS:
        current = normalize(current)
        if current not in candidates:
            candidates.append(current)
    return candidates


def scan_components(
    root: Path, suffixes: tuple[str, ...]
) -> dict[str, ComponentDefinition]:
    """Return every component document under ``root`` keyed by name."""
    if not root.is_dir():
        return {}
    found: dict[str, ComponentDefinition] = {}
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        relative = strip_template_suffix(path.relative_to(root).as_posix(), suffixes)
        if relative is None:
            continue
        name = relative.replace("/", ".")
        found.setdefault(name, ComponentDefinition(name=name, path=path))
    return found


class ComponentRegistry:
    """Read-through cache of component definitions.

    The cache is filled by a full scan on first use, replaced by
    :meth:`refresh`, and rescanned once more whenever a lookup misses so
    components added mid-build are still found.
    """

    def __init__(self, root: Path, suffixes: tuple[str, ...]) -> None:
        self.root = root
        self.suffixes = suffixes
        self._definitions: dict[str, ComponentDefinition] | None = None

    @property
    def definitions(self) -> dict[str, ComponentDefinition]:
        if self._definitions is None:
            self.refresh()
        return typ.cast("dict[str, ComponentDefinition]", self._definitions)

    def refresh(self) -> None:
        """Rescan the components root."""
        self._definitions = scan_components(self.root, self.suffixes)
        logger.debug(
            "discovered %d component(s) under %s", len(self._definitions), self.root
        )

    def names(self) -> list[str]:
        """Return all registered component names, sorted."""
        return sorted(self.definitions)

    def _lookup(self, candidates: list[str]) -> ComponentDefinition | None:
        definitions = self.definitions
        return next(
            (definitions[name] for name in candidates if name in definitions), None
        )

    def find(self, reference: str) -> ComponentDefinition | None:
        """Return the cached definition ``reference`` points at, without rescanning."""
        return self._lookup(candidate_names(reference))

    def resolve(self, reference: str) -> ComponentDefinition:
        """Return the component a reference spelling points at.

        Raises
        ------
        ComponentNotFoundError
            If no candidate spelling matches, even after a rescan.
        """
        candidates = candidate_names(reference)
        definition = self._lookup(candidates)
        if definition is None:
            self.refresh()
            definition = self._lookup(candidates)
        if definition is None:
            raise ComponentNotFoundError(reference, candidates, self.names())
        return definition


__all__ = [
    "CANDIDATE_NORMALIZERS",
    "ComponentDefinition",
    "ComponentRegistry",
    "candidate_names",
    "scan_components",
]
