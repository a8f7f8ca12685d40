"""Build-wide state gathered while pages compile.

Pages compile independently; what they contribute to the build as a whole
(route entries, cache TTLs, host route registrations and translation keys)
is collected in a :class:`BuildAccumulator` that the orchestrator passes by
reference. Registration is keyed by slug, so registering the same page twice
or merging overlapping accumulators is idempotent.
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from ..parser.document import route_params

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

PARAM_SEGMENT_PATTERN = re.compile(r"\[([^\]]+)\]")


def route_pattern(slug: str) -> str:
    """Return the client router pattern for ``slug``.

    Examples
    --------
    >>> route_pattern("/product.[slug].[id]")
    '/product.:slug.:id'
    >>> route_pattern("/index"), route_pattern("/blog/index")
    ('/', '/blog')
    """
    pattern = PARAM_SEGMENT_PATTERN.sub(r":\1", slug)
    if pattern == "/index":
        return "/"
    if pattern.endswith("/index"):
        return pattern[: -len("/index")]
    return pattern


@dc.dataclass(frozen=True, slots=True)
class RouteEntry:
    """A client route for one page."""

    slug: str
    pattern: str
    params: tuple[str, ...] = ()
    kind: str = "static"

    @classmethod
    def from_slug(cls, slug: str) -> RouteEntry:
        params = tuple(route_params(slug))
        return cls(slug, route_pattern(slug), params, "dynamic" if params else "static")

    @classmethod
    def from_manifest(cls, slug: str, entry: cabc.Mapping[str, typ.Any]) -> RouteEntry:
        params = tuple(str(param) for param in entry.get("params", ()))
        kind = str(entry.get("kind") or ("dynamic" if params else "static"))
        return cls(slug, str(entry.get("pattern", route_pattern(slug))), params, kind)

    def to_manifest(self) -> dict[str, typ.Any]:
        return {"pattern": self.pattern, "params": list(self.params), "kind": self.kind}


@dc.dataclass(frozen=True, slots=True)
class RouteRegistration:
    """What the host needs to serve a page: its slug and access rules."""

    slug: str
    middleware: tuple[str, ...] = ()
    auth_required: bool = False

    def to_manifest(self) -> dict[str, typ.Any]:
        return {
            "slug": self.slug,
            "middleware": list(self.middleware),
            "auth_required": self.auth_required,
        }


@dc.dataclass(frozen=True, slots=True)
class CompiledPage:
    """The output of compiling one page document."""

    source: Path
    slug: str
    html: str
    route: RouteEntry
    registration: RouteRegistration
    cache_ttl: int | None = None
    translation_keys: frozenset[str] = frozenset()


@dc.dataclass(slots=True)
class BuildAccumulator:
    """Route table, cache manifest, registrations and translation keys.

    Attributes
    ----------
    cache_enabled : bool
        When ``False`` no TTLs are recorded and the cache manifest stays
        empty.
    """

    cache_enabled: bool = True
    routes: dict[str, RouteEntry] = dc.field(default_factory=dict)
    cache: dict[str, int] = dc.field(default_factory=dict)
    registrations: dict[str, RouteRegistration] = dc.field(default_factory=dict)
    translation_keys: set[str] = dc.field(default_factory=set)

    def register_page(self, page: CompiledPage) -> None:
        """Record ``page``'s route, cache TTL, registration and keys."""
        self.routes[page.slug] = page.route
        self.registrations[page.slug] = page.registration
        if self.cache_enabled and page.cache_ttl is not None:
            self.cache[page.slug] = page.cache_ttl
        else:
            self.cache.pop(page.slug, None)
        self.add_translation_keys(page.translation_keys)

    def add_translation_keys(self, keys: cabc.Iterable[str]) -> None:
        self.translation_keys.update(keys)

    def merge(self, other: BuildAccumulator) -> None:
        """Fold ``other`` into this accumulator; ``other`` wins per slug."""
        self.routes.update(other.routes)
        self.registrations.update(other.registrations)
        for slug in other.routes:
            if slug in other.cache and self.cache_enabled:
                self.cache[slug] = other.cache[slug]
            else:
                self.cache.pop(slug, None)
        self.add_translation_keys(other.translation_keys)

    def routes_manifest(self) -> dict[str, dict[str, typ.Any]]:
        return {slug: self.routes[slug].to_manifest() for slug in sorted(self.routes)}

    def cache_manifest(self) -> dict[str, int]:
        return dict(sorted(self.cache.items()))

    def registrations_manifest(self) -> list[dict[str, typ.Any]]:
        registrations = self.registrations
        return [registrations[slug].to_manifest() for slug in sorted(registrations)]


__all__ = [
    "BuildAccumulator",
    "CompiledPage",
    "RouteEntry",
    "RouteRegistration",
    "route_pattern",
]
