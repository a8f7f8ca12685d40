"""Common literal values used across ink_pages.

These constants keep artefact filenames, source markers, and runtime names
centralized so the compiler stages, the build orchestrator, and tests import
the same values without drifting. Intended for internal use within the
ink_pages package.

Examples
--------
>>> from ink_pages import _constants
>>> _constants.ROUTES_MANIFEST
'routes.json'
>>> _constants.RUNTIME_GLOBAL + ".trans"
'ink.trans'
"""

CONFIG_OPEN_MARKER = "<?ink"
CONFIG_CLOSE_MARKER = "?>"
CONFIG_BUILDER_ROOT = "ink_make"

DEFAULT_TEMPLATE_SUFFIXES = (".ink.html", ".ink")

RUNTIME_GLOBAL = "ink"
STYLES_VARIABLE = "styles"

ROUTES_MANIFEST = "routes.json"
CACHE_MANIFEST = "cache.json"
ROUTE_REGISTRATIONS = "page-routes.json"
LANG_BUNDLE = "ink-lang.js"

MAX_EXPANSION_PASSES = 10
MAX_EXPANSION_DEPTH = 10
