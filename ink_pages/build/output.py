"""Write compiled pages and build manifests to disk."""

from __future__ import annotations

import json
import logging
import typing as typ

from .._constants import (
    CACHE_MANIFEST,
    LANG_BUNDLE,
    ROUTE_REGISTRATIONS,
    ROUTES_MANIFEST,
)
from .accumulator import BuildAccumulator, RouteEntry, RouteRegistration
from .catalog import render_bundle

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from ..config import InkConfig

logger = logging.getLogger(__name__)


def page_output_name(slug: str) -> str:
    """Return the file path, relative to the pages directory, for ``slug``.

    Examples
    --------
    >>> page_output_name("/"), page_output_name("/blog/post")
    ('index.html', 'blog/post.html')
    """
    return f"{slug.strip().strip('/') or 'index'}.html"


def _read_json(path: Path) -> typ.Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("ignoring unreadable manifest %s: %s", path, exc)
        return None


class OutputWriter:
    """Persist build artefacts under the configured output directories."""

    def __init__(self, config: InkConfig) -> None:
        self.config = config
        self.pages_dir = config.pages_output_dir
        self.build_dir = config.build_output_dir

    def page_path(self, slug: str) -> Path:
        return self.pages_dir / page_output_name(slug)

    def _write(self, path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if not text.endswith("\n"):
            text += "\n"
        path.write_text(text, encoding="utf-8")
        return path

    def write_page(self, slug: str, html: str) -> Path:
        """Write one page's HTML and return its path."""
        return self._write(self.page_path(slug), html)

    def _write_json(self, name: str, data: typ.Any) -> Path:
        return self._write(self.build_dir / name, json.dumps(data, indent=2))

    def write_manifests(
        self,
        accumulator: BuildAccumulator,
        bundle: cabc.Mapping[str, cabc.Mapping[str, str]],
    ) -> list[Path]:
        """Write the route, cache and registration manifests and the bundle.

        The cache manifest is only written when caching is enabled.
        """
        written = [self._write_json(ROUTES_MANIFEST, accumulator.routes_manifest())]
        if self.config.cache.enable:
            written.append(
                self._write_json(CACHE_MANIFEST, accumulator.cache_manifest())
            )
        written.append(
            self._write_json(ROUTE_REGISTRATIONS, accumulator.registrations_manifest())
        )
        written.append(self._write(self.build_dir / LANG_BUNDLE, render_bundle(bundle)))
        return written

    def load_accumulator(self) -> BuildAccumulator:
        """Seed an accumulator from the manifests of a previous build."""
        accumulator = BuildAccumulator(cache_enabled=self.config.cache.enable)
        routes = _read_json(self.build_dir / ROUTES_MANIFEST)
        if isinstance(routes, dict):
            for slug, entry in routes.items():
                if isinstance(entry, dict):
                    accumulator.routes[slug] = RouteEntry.from_manifest(slug, entry)
        cache = _read_json(self.build_dir / CACHE_MANIFEST)
        if isinstance(cache, dict) and accumulator.cache_enabled:
            accumulator.cache.update(
                {slug: int(ttl) for slug, ttl in cache.items() if isinstance(ttl, int)}
            )
        registrations = _read_json(self.build_dir / ROUTE_REGISTRATIONS)
        if isinstance(registrations, list):
            for entry in registrations:
                if not isinstance(entry, dict) or "slug" not in entry:
                    continue
                slug = str(entry["slug"])
                accumulator.registrations[slug] = RouteRegistration(
                    slug,
                    tuple(str(name) for name in entry.get("middleware") or ()),
                    bool(entry.get("auth_required", False)),
                )
        return accumulator


__all__ = ["OutputWriter", "page_output_name"]
