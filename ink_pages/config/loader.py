"""Load ink project configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import (
    _build_assets_config,
    _build_auth_config,
    _build_cache_config,
    _build_output_config,
    _optional_str,
    _section,
    _string_list,
    _template_suffixes,
)
from .models import InkConfig

DEFAULT_CONFIG_NAME = "ink.yaml"


def load_ink_config(path: Path) -> InkConfig:
    """Load the YAML configuration describing an ink project.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``ink.yaml``). Relative paths inside the file resolve against the
        file's parent directory.

    Returns
    -------
    InkConfig
        Parsed configuration with defaults applied for every omitted field.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    InkConfigError
        If a field holds an invalid value (for example, a non-positive cache
        TTL or an empty suffix list).
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from ink_pages.config import load_ink_config
    >>> config = load_ink_config(Path("ink.yaml"))  # doctest: +SKIP
    >>> config.cache.ttl  # doctest: +SKIP
    300
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    defaults = InkConfig()

    return InkConfig(
        project_root=path.resolve().parent,
        name=_optional_str(raw.get("name")) or defaults.name,
        source_dir=Path(raw.get("source_dir", defaults.source_dir)),
        template_suffixes=_template_suffixes(
            raw.get("template_suffixes"), defaults.template_suffixes
        ),
        default_layout=_optional_str(raw.get("default_layout")),
        locales=_string_list(raw.get("locales"), field="locales"),
        cache=_build_cache_config(_section(raw, "cache")),
        output=_build_output_config(_section(raw, "output")),
        auth=_build_auth_config(_section(raw, "auth")),
        assets=_build_assets_config(_section(raw, "assets")),
    )


__all__ = ["DEFAULT_CONFIG_NAME", "load_ink_config"]
