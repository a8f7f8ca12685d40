"""Data structures shared by the source-document parser and compiler stages."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


DEFAULT_ROBOTS = "index, follow"


class DocumentKind(enum.Enum):
    """The role a source document plays in a build."""

    PAGE = "page"
    COMPONENT = "component"
    LAYOUT = "layout"


@dc.dataclass(frozen=True, slots=True)
class SourceDocument:
    """Raw text of a page, component, or layout split into config and body."""

    kind: DocumentKind
    path: Path
    text: str
    config_block: str
    body: str
    config_offset: int = 0

    @property
    def has_config(self) -> bool:
        """Return ``True`` when the document opened with a config block."""
        return bool(self.config_block.strip())


@dc.dataclass(frozen=True, slots=True)
class SeoConfig:
    """Search-engine metadata declared with ``seo(...)``."""

    title: str | None = None
    description: str | None = None
    keywords: str | None = None
    image: str | None = None
    canonical: str | None = None
    robots: str = DEFAULT_ROBOTS
    meta: dict[str, str] = dc.field(default_factory=dict)
    og: dict[str, str] = dc.field(default_factory=dict)
    twitter: dict[str, str] = dc.field(default_factory=dict)


@dc.dataclass(frozen=True, slots=True)
class PageConfig:
    """Declarative page settings extracted from a config block."""

    cache_ttl: int | None = None
    layout: str | None = None
    title: str | None = None
    auth: bool = False
    middleware: list[str] | None = None
    seo: SeoConfig | None = None

    @property
    def requires_auth(self) -> bool:
        """Return ``True`` when the client must check authentication first."""
        return self.auth or self.middleware is not None


@dc.dataclass(frozen=True, slots=True)
class PageVariable:
    """A materialized variable and the unique client binding that carries it."""

    name: str
    value: typ.Any
    type: str
    binding_name: str


@dc.dataclass(frozen=True, slots=True)
class ParsedPage:
    """A page parsed into config, body, scripts, and materialized variables."""

    id: str
    slug: str
    file_path: Path
    config: PageConfig
    html: str
    js: str = ""
    css: str = ""
    route_params: list[str] = dc.field(default_factory=list)
    translation_keys: frozenset[str] = frozenset()
    variables: list[PageVariable] = dc.field(default_factory=list)
    style_fragments: list[typ.Any] = dc.field(default_factory=list)

    @property
    def bindings(self) -> dict[str, str]:
        """Map each variable's surface name to its client binding name."""
        return {variable.name: variable.binding_name for variable in self.variables}

    @property
    def values(self) -> dict[str, typ.Any]:
        """Map each variable's surface name to its materialized value."""
        return {variable.name: variable.value for variable in self.variables}


__all__ = [
    "DEFAULT_ROBOTS",
    "DocumentKind",
    "PageConfig",
    "PageVariable",
    "ParsedPage",
    "SeoConfig",
    "SourceDocument",
]
