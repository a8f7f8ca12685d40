"""Split source documents and extract their declarative page configuration.

A page or component opens with an optional config block between a ``<?ink``
line and a ``?>`` line. The block mixes builder-style configuration calls
(``ink_make().layout("app").cache(600)``) with Python variable declarations.
This module reads documents from disk, splits the block from the markup body,
and pulls the configuration out with independent, tolerant pattern matches:
unrecognised calls are ignored rather than rejected.

Examples
--------
>>> text = "<?ink\\nink_make().cache(600)\\n?>\\n<p>hi</p>"
>>> block, body, _ = split_config_block(text)
>>> extract_page_config(block, default_ttl=300).cache_ttl
600
>>> body
'<p>hi</p>'
"""

from __future__ import annotations

import ast
import hashlib
import re
import typing as typ

from .._constants import CONFIG_CLOSE_MARKER, CONFIG_OPEN_MARKER
from .._text import read_balanced
from ..config import strip_template_suffix
from ..errors import DocumentReadError
from .models import DEFAULT_ROBOTS, DocumentKind, PageConfig, SeoConfig, SourceDocument

if typ.TYPE_CHECKING:
    from pathlib import Path

_CALL = r"(?<![\w$]){name}\(\s*"
CACHE_PATTERN = re.compile(
    _CALL.format(name="cache") + r"(\d+|(?i:true|false))\s*\)"
)
LAYOUT_PATTERN = re.compile(_CALL.format(name="layout") + r"""(['"])(.*?)\1\s*\)""")
TITLE_PATTERN = re.compile(_CALL.format(name="title") + r"""(['"])(.*?)\1\s*\)""")
AUTH_PATTERN = re.compile(_CALL.format(name="auth") + r"(?i:(true|false))\s*\)")
MIDDLEWARE_PATTERN = re.compile(
    _CALL.format(name="middleware") + r"""(\[[^\]]*\]|(['"])[^'"]*\2)\s*\)"""
)
SEO_PATTERN = re.compile(r"(?<![\w$])seo\(")
STRING_PATTERN = re.compile(r"""(['"])((?:\\.|(?!\1).)*)\1""", re.DOTALL)
SEO_FIELDS = ("title", "description", "keywords", "image", "canonical", "robots")
SEO_KEYWORD_STRING = re.compile(
    r"""\b(title|description|keywords|image|canonical|robots)\s*=\s*"""
    r"""(['"])((?:\\.|(?!\2).)*)\2""",
    re.DOTALL,
)
SEO_KEYWORD_MAP = re.compile(r"\b(meta|og|twitter)\s*=\s*(?=\{)")
ROUTE_PARAM_PATTERN = re.compile(r"\[([^\]]+)\]")
TRANSLATION_KEY_PATTERN = re.compile(
    r"""(?:(?<![\w$.])(?:__|trans_choice|trans)|@lang)\(\s*(['"])(.+?)\1"""
)
SCRIPT_SETUP_PATTERN = re.compile(
    r"<script\b[^>]*\bsetup\b[^>]*>(.*?)</script>", re.DOTALL | re.IGNORECASE
)


def read_document(path: Path, kind: DocumentKind) -> SourceDocument:
    """Read ``path`` and split it into a :class:`SourceDocument`.

    Parameters
    ----------
    path : Path
        Location of the page, component, or layout file.
    kind : DocumentKind
        Role of the document; layouts never carry a config block.

    Returns
    -------
    SourceDocument
        The immutable document with its config block and body separated.

    Raises
    ------
    DocumentReadError
        If the file is missing, unreadable, or not valid UTF-8.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentReadError(path, str(exc)) from exc
    if kind is DocumentKind.LAYOUT:
        return SourceDocument(kind, path, text, "", text)
    config_block, body, offset = split_config_block(text)
    return SourceDocument(kind, path, text, config_block, body, offset)


def split_config_block(text: str) -> tuple[str, str, int]:
    """Split a leading config block from the markup body.

    Returns
    -------
    tuple[str, str, int]
        The config block (without markers), the body, and the number of
        source lines preceding the first config line. Documents without a
        leading, terminated block return ``("", text, 0)``.
    """
    lines = text.splitlines(keepends=True)
    start: int | None = None
    for index, line in enumerate(lines):
        stripped = line.strip()
        if start is None:
            if stripped == CONFIG_OPEN_MARKER:
                start = index
            elif stripped:
                break
        elif stripped == CONFIG_CLOSE_MARKER:
            config_block = "".join(lines[start + 1 : index])
            body = "".join(lines[index + 1 :])
            return config_block, body.lstrip("\r\n"), start + 1
    return "", text, 0


def _unquote(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


def _quoted_strings(text: str) -> list[str]:
    return [_unquote(match.group(2)) for match in STRING_PATTERN.finditer(text)]


def _seo_maps(arguments: str) -> tuple[str, dict[str, dict[str, str]]]:
    """Pull ``meta=``/``og=``/``twitter=`` dict literals out of SEO arguments."""
    maps: dict[str, dict[str, str]] = {}
    remainder: list[str] = []
    cursor = 0
    for match in SEO_KEYWORD_MAP.finditer(arguments):
        if match.start() < cursor:
            continue
        region = read_balanced(arguments, match.end(), "{", "}")
        if region is None:
            continue
        literal = arguments[match.end() : region[1]]
        remainder.append(arguments[cursor : match.start()])
        cursor = region[1]
        try:
            parsed = ast.literal_eval(literal)
        except (ValueError, SyntaxError):
            continue
        if isinstance(parsed, dict):
            maps[match.group(1)] = {
                str(key): str(value) for key, value in parsed.items()
            }
    remainder.append(arguments[cursor:])
    return "".join(remainder), maps


def _extract_seo(config_block: str) -> SeoConfig | None:
    match = SEO_PATTERN.search(config_block)
    if match is None:
        return None
    region = read_balanced(config_block, match.end() - 1)
    if region is None:
        return None
    arguments, maps = _seo_maps(region[0])
    fields: dict[str, str] = {}
    for keyword in SEO_KEYWORD_STRING.finditer(arguments):
        fields[keyword.group(1)] = _unquote(keyword.group(3))
    positional = SEO_KEYWORD_STRING.sub("", arguments)
    remaining = [name for name in SEO_FIELDS if name not in fields]
    fields.update(zip(remaining, _quoted_strings(positional), strict=False))
    robots = fields.pop("robots", None) or DEFAULT_ROBOTS
    return SeoConfig(
        **{name: value or None for name, value in fields.items()},
        robots=robots,
        meta=maps.get("meta", {}),
        og=maps.get("og", {}),
        twitter=maps.get("twitter", {}),
    )


def extract_page_config(config_block: str, *, default_ttl: int) -> PageConfig:
    """Extract declarative page settings from ``config_block``.

    Parameters
    ----------
    config_block : str
        Text between the config markers.
    default_ttl : int
        TTL applied when the block declares ``cache(true)``.

    Returns
    -------
    PageConfig
        Settings found in the block; absent calls keep their defaults.

    Examples
    --------
    >>> config = extract_page_config(
    ...     "ink_make().layout('dashboard').middleware(['auth', 'verified'])",
    ...     default_ttl=300,
    ... )
    >>> (config.layout, config.middleware)
    ('dashboard', ['auth', 'verified'])
    """
    cache_ttl: int | None = None
    if cache := CACHE_PATTERN.search(config_block):
        value = cache.group(1).lower()
        if value.isdigit():
            cache_ttl = int(value)
        elif value == "true":
            cache_ttl = default_ttl

    middleware: list[str] | None = None
    if found := MIDDLEWARE_PATTERN.search(config_block):
        middleware = _quoted_strings(found.group(1))

    layout = LAYOUT_PATTERN.search(config_block)
    title = TITLE_PATTERN.search(config_block)
    auth = AUTH_PATTERN.search(config_block)
    return PageConfig(
        cache_ttl=cache_ttl,
        layout=_unquote(layout.group(2)) if layout else None,
        title=_unquote(title.group(2)) if title else None,
        auth=bool(auth and auth.group(1).lower() == "true"),
        middleware=middleware,
        seo=_extract_seo(config_block),
    )


def derive_slug(path: Path, pages_root: Path, suffixes: tuple[str, ...]) -> str:
    """Return the route slug for a page file under ``pages_root``.

    Examples
    --------
    >>> from pathlib import Path
    >>> derive_slug(
    ...     Path("pages/product.[slug].[id].ink"), Path("pages"), (".ink",)
    ... )
    '/product.[slug].[id]'
    """
    relative = path.relative_to(pages_root).as_posix()
    return "/" + (strip_template_suffix(relative, suffixes) or relative)


def page_id(path: Path) -> str:
    """Return the stable DOM id derived from a page's path."""
    digest = hashlib.sha1(path.as_posix().encode("utf-8")).hexdigest()  # noqa: S324
    return f"page-{digest[:12]}"


def route_params(slug: str) -> list[str]:
    """Return the bracketed route parameters in ``slug`` in first-seen order."""
    return list(dict.fromkeys(ROUTE_PARAM_PATTERN.findall(slug)))


def extract_translation_keys(text: str) -> set[str]:
    """Return every localization key referenced by ``text``."""
    return {match.group(2) for match in TRANSLATION_KEY_PATTERN.finditer(text)}


def extract_script_setup(body: str) -> tuple[str, str]:
    """Remove ``<script setup>`` blocks from ``body``.

    Returns
    -------
    tuple[str, str]
        The body without the blocks and their joined script source.
    """
    scripts = [match.group(1).strip() for match in SCRIPT_SETUP_PATTERN.finditer(body)]
    return SCRIPT_SETUP_PATTERN.sub("", body), "\n".join(filter(None, scripts))


__all__ = [
    "derive_slug",
    "extract_page_config",
    "extract_script_setup",
    "extract_translation_keys",
    "page_id",
    "read_document",
    "route_params",
    "split_config_block",
]
