"""Utility helpers shared by the ink configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from .models import AssetsConfig, AuthConfig, CacheConfig, InkConfigError, OutputConfig


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _string_list(value: object | None, *, field: str) -> list[str]:
    """Normalize a YAML list of strings, rejecting scalars and mappings."""
    if value is None:
        return []
    if not isinstance(value, list):
        msg = f"'{field}' must be a list of strings."
        raise InkConfigError(msg)
    return [text for item in value if (text := str(item).strip())]


def _section(raw: typ.Mapping[str, typ.Any], key: str) -> typ.Mapping[str, typ.Any]:
    """Return the mapping stored under ``key`` or an empty mapping."""
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        msg = f"'{key}' must be a mapping."
        raise InkConfigError(msg)
    return value


def _build_cache_config(raw: typ.Mapping[str, typ.Any]) -> CacheConfig:
    """Build the cache section, validating the default TTL."""
    defaults = CacheConfig()
    ttl = raw.get("ttl", defaults.ttl)
    if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl <= 0:
        msg = f"cache.ttl must be a positive integer, got {ttl!r}."
        raise InkConfigError(msg)
    return CacheConfig(enable=bool(raw.get("enable", defaults.enable)), ttl=ttl)


def _build_output_config(raw: typ.Mapping[str, typ.Any]) -> OutputConfig:
    """Build the output section."""
    defaults = OutputConfig()
    return OutputConfig(
        pages_dir=Path(raw.get("pages_dir", defaults.pages_dir)),
        build_dir=Path(raw.get("build_dir", defaults.build_dir)),
        base_url=_optional_str(raw.get("base_url")) or defaults.base_url,
    )


def _build_auth_config(raw: typ.Mapping[str, typ.Any]) -> AuthConfig:
    """Build the auth routes section."""
    defaults = AuthConfig()
    return AuthConfig(
        api_prefix=_optional_str(raw.get("api_prefix")) or defaults.api_prefix,
        login_route=_optional_str(raw.get("login_route")) or defaults.login_route,
        unauthorized_route=_optional_str(raw.get("unauthorized_route"))
        or defaults.unauthorized_route,
    )


def _build_assets_config(raw: typ.Mapping[str, typ.Any]) -> AssetsConfig:
    """Build the asset URL section."""
    defaults = AssetsConfig()
    return AssetsConfig(
        alpinejs=_optional_str(raw.get("alpinejs")) or defaults.alpinejs,
        intersect=_optional_str(raw.get("intersect")) or defaults.intersect,
        scripts=_string_list(raw.get("scripts"), field="assets.scripts"),
        styles=_string_list(raw.get("styles"), field="assets.styles"),
    )


def _template_suffixes(
    value: object | None, default: tuple[str, ...]
) -> tuple[str, ...]:
    """Return configured template suffixes, each starting with a dot."""
    if value is None:
        return default
    suffixes = tuple(_string_list(value, field="template_suffixes"))
    if not suffixes:
        msg = "template_suffixes must name at least one suffix."
        raise InkConfigError(msg)
    invalid = [suffix for suffix in suffixes if not suffix.startswith(".")]
    if invalid:
        msg = f"template_suffixes must start with '.': {', '.join(invalid)}"
        raise InkConfigError(msg)
    return suffixes


__all__ = [
    "_build_assets_config",
    "_build_auth_config",
    "_build_cache_config",
    "_build_output_config",
    "_optional_str",
    "_section",
    "_string_list",
    "_template_suffixes",
]
