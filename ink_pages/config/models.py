"""Typed dataclasses describing ink project configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from .._constants import DEFAULT_TEMPLATE_SUFFIXES

DEFAULT_ALPINE_URL = "https://cdn.jsdelivr.net/npm/alpinejs@3.15.1/dist/cdn.min.js"
DEFAULT_INTERSECT_URL = (
    "https://cdn.jsdelivr.net/npm/@alpinejs/intersect@3.15.1/dist/cdn.min.js"
)


class InkConfigError(ValueError):
    """Raised when the project configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class CacheConfig:
    """Client-side response caching defaults."""

    enable: bool = True
    ttl: int = 300


@dc.dataclass(slots=True)
class OutputConfig:
    """Where compiled pages and build manifests are written."""

    pages_dir: Path = Path("public/pages")
    build_dir: Path = Path("public/build")
    base_url: str = "/"


@dc.dataclass(slots=True)
class AuthConfig:
    """Routes the client runtime uses for authentication redirects."""

    api_prefix: str = "/api/ink"
    login_route: str = "/login"
    unauthorized_route: str = "/unauthorized"


@dc.dataclass(slots=True)
class AssetsConfig:
    """Script and stylesheet URLs referenced by the document shell."""

    alpinejs: str = DEFAULT_ALPINE_URL
    intersect: str = DEFAULT_INTERSECT_URL
    scripts: list[str] = dc.field(default_factory=list)
    styles: list[str] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class InkConfig:
    """Root configuration for an ink project.

    Relative paths are resolved against ``project_root`` through the path
    properties, so the dataclass can be built directly in tests.
    """

    project_root: Path = Path()
    name: str = "Ink App"
    source_dir: Path = Path("resources/ink")
    template_suffixes: tuple[str, ...] = DEFAULT_TEMPLATE_SUFFIXES
    default_layout: str | None = None
    locales: list[str] = dc.field(default_factory=list)
    cache: CacheConfig = dc.field(default_factory=CacheConfig)
    output: OutputConfig = dc.field(default_factory=OutputConfig)
    auth: AuthConfig = dc.field(default_factory=AuthConfig)
    assets: AssetsConfig = dc.field(default_factory=AssetsConfig)

    def _resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.project_root / path

    @property
    def source_root(self) -> Path:
        """Return the directory holding pages, components, layouts and lang."""
        return self._resolve(self.source_dir)

    @property
    def pages_root(self) -> Path:
        """Return the directory scanned for page documents."""
        return self.source_root / "pages"

    @property
    def components_root(self) -> Path:
        """Return the directory scanned for component documents."""
        return self.source_root / "components"

    @property
    def layouts_root(self) -> Path:
        """Return the directory holding layout templates."""
        return self.source_root / "layouts"

    @property
    def lang_root(self) -> Path:
        """Return the directory holding translation catalogs."""
        return self.source_root / "lang"

    @property
    def pages_output_dir(self) -> Path:
        """Return the directory compiled page HTML is written to."""
        return self._resolve(self.output.pages_dir)

    @property
    def build_output_dir(self) -> Path:
        """Return the directory manifests and bundles are written to."""
        return self._resolve(self.output.build_dir)

    @property
    def build_url(self) -> str:
        """Return the public URL prefix of the build directory."""
        return f"{self.output.base_url.rstrip('/')}/{self.output.build_dir.name}"

    def strip_suffix(self, name: str) -> str | None:
        """Return ``name`` without its template suffix, or ``None`` if it has none."""
        return strip_template_suffix(name, self.template_suffixes)


def strip_template_suffix(name: str, suffixes: tuple[str, ...]) -> str | None:
    """Strip the longest matching suffix in ``suffixes`` from ``name``.

    Examples
    --------
    >>> strip_template_suffix("card.ink.html", (".ink.html", ".ink"))
    'card'
    >>> strip_template_suffix("notes.txt", (".ink",)) is None
    True
    """
    for suffix in sorted(suffixes, key=len, reverse=True):
        if name.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return None


__all__ = [
    "AssetsConfig",
    "AuthConfig",
    "CacheConfig",
    "InkConfig",
    "InkConfigError",
    "OutputConfig",
    "strip_template_suffix",
]
