"""Load translation catalogs and render the client localization bundle.

Catalogs live under the project's ``lang`` directory in two shapes:

* ``lang/<locale>/<group>.yaml`` holds nested maps; keys are flattened
  and prefixed with the group, so ``auth.yaml`` containing
  ``login: {title: Sign in}`` yields ``auth.login.title``;
* ``lang/<locale>.json`` holds flat key/string pairs.

Only keys referenced by compiled documents are shipped to the client.
"""

from __future__ import annotations

import json
import logging
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .._constants import RUNTIME_GLOBAL
from ..compiler.scripts import script_json

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from ..config import InkConfig

logger = logging.getLogger(__name__)

CATALOG_SUFFIXES = (".yaml", ".yml")


def flatten_messages(
    messages: cabc.Mapping[str, typ.Any], prefix: str = ""
) -> dict[str, str]:
    """Flatten nested message maps into dotted keys.

    Examples
    --------
    >>> flatten_messages({"login": {"title": "Sign in"}, "bye": "Bye"}, "auth")
    {'auth.login.title': 'Sign in', 'auth.bye': 'Bye'}
    """
    flat: dict[str, str] = {}
    for key, value in messages.items():
        name = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(flatten_messages(value, name))
        elif value is not None:
            flat[name] = str(value)
    return flat


def discover_locales(lang_root: Path) -> list[str]:
    """Return the locales with a catalog directory or JSON file under ``lang_root``."""
    if not lang_root.is_dir():
        return []
    locales = {path.name for path in lang_root.iterdir() if path.is_dir()}
    locales |= {path.stem for path in lang_root.glob("*.json")}
    return sorted(locales)


def _load_yaml(path: Path) -> dict[str, typ.Any]:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except (OSError, YAMLError) as exc:
        logger.warning("skipping translation catalog %s: %s", path, exc)
        return {}
    if not isinstance(loaded, dict):
        logger.warning("skipping translation catalog %s: not a mapping", path)
        return {}
    return loaded


def _load_json(path: Path) -> dict[str, typ.Any]:
    try:
        loaded = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("skipping translation catalog %s: %s", path, exc)
        return {}
    if not isinstance(loaded, dict):
        logger.warning("skipping translation catalog %s: not an object", path)
        return {}
    return loaded


def load_catalog(lang_root: Path, locale: str) -> dict[str, str]:
    """Return every message for ``locale`` keyed by its full dotted key."""
    messages: dict[str, str] = {}
    directory = lang_root / locale
    if directory.is_dir():
        for path in sorted(directory.rglob("*")):
            if path.suffix not in CATALOG_SUFFIXES or not path.is_file():
                continue
            group = path.relative_to(directory).with_suffix("").as_posix()
            messages.update(flatten_messages(_load_yaml(path), group.replace("/", ".")))
    flat_file = lang_root / f"{locale}.json"
    if flat_file.is_file():
        messages.update(flatten_messages(_load_json(flat_file)))
    return messages


def build_bundle(
    config: InkConfig, keys: cabc.Iterable[str]
) -> dict[str, dict[str, str]]:
    """Map each locale to the messages for ``keys`` that it defines."""
    wanted = sorted(set(keys))
    locales = config.locales or discover_locales(config.lang_root)
    bundle: dict[str, dict[str, str]] = {}
    for locale in locales:
        catalog = load_catalog(config.lang_root, locale)
        bundle[locale] = {key: catalog[key] for key in wanted if key in catalog}
    return bundle


def render_bundle(bundle: cabc.Mapping[str, cabc.Mapping[str, str]]) -> str:
    """Render ``bundle`` as the script that installs it on the runtime global.

    Examples
    --------
    >>> print(render_bundle({"en": {"nav.home": "Home"}}), end="")
    window.ink = window.ink || {};
    window.ink.translations = {"en": {"nav.home": "Home"}};
    """
    target = f"window.{RUNTIME_GLOBAL}"
    return (
        f"{target} = {target} || {{}};\n"
        f"{target}.translations = {script_json(dict(bundle))};\n"
    )


__all__ = [
    "build_bundle",
    "discover_locales",
    "flatten_messages",
    "load_catalog",
    "render_bundle",
]
