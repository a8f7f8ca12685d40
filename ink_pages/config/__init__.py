"""Load and validate ink project configuration.

This subpackage parses the project's ``ink.yaml`` file, applies defaults for
every omitted field, and produces the :class:`InkConfig` dataclass the
compiler and build orchestrator consume. The primary entry point is
:func:`load_ink_config`.

Examples
--------
>>> from pathlib import Path
>>> from ink_pages.config import load_ink_config
>>> config = load_ink_config(Path("ink.yaml"))  # doctest: +SKIP
>>> config.pages_root  # doctest: +SKIP
PosixPath('/srv/app/resources/ink/pages')
"""

from .loader import DEFAULT_CONFIG_NAME, load_ink_config
from .models import (
    AssetsConfig,
    AuthConfig,
    CacheConfig,
    InkConfig,
    InkConfigError,
    OutputConfig,
    strip_template_suffix,
)

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "AssetsConfig",
    "AuthConfig",
    "CacheConfig",
    "InkConfig",
    "InkConfigError",
    "OutputConfig",
    "load_ink_config",
    "strip_template_suffix",
]
