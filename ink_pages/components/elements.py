"""Inspect and rewrite the root element of compiled component markup."""

from __future__ import annotations

import dataclasses as dc
import html
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)
_TAG_BODY = r"""((?:[^"'>]|"[^"]*"|'[^']*')*?)"""
ROOT_OPEN_PATTERN = re.compile(r"<([A-Za-z][\w:.-]*)" + _TAG_BODY + r"(/?)>")
ATTRIBUTE_TOKEN_PATTERN = re.compile(
    r"""([^\s"'>/=]+)(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'>]+))?"""
)


@dc.dataclass(frozen=True, slots=True)
class RootElement:
    """The single top-level element of a markup fragment."""

    tag: str
    attributes: str
    content: str
    closing: str  # "standard", "void" or "self-closing"


def _tag_patterns(name: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    escaped = re.escape(name)
    opening = re.compile(rf"<{escaped}(?=[\s/>])" + _TAG_BODY + r"(/?)>", re.IGNORECASE)
    closing = re.compile(rf"</{escaped}\s*>", re.IGNORECASE)
    return opening, closing


def find_matching_close(text: str, name: str, start: int) -> tuple[int, int] | None:
    """Locate the closing tag balancing an element opened before ``start``.

    Parameters
    ----------
    text : str
        Markup being scanned.
    name : str
        Tag name of the open element.
    start : int
        Index just past the opening tag.

    Returns
    -------
    tuple[int, int] or None
        Start and end offsets of the matching closing tag, or ``None`` when
        the element is never closed. Nested same-named elements are counted;
        self-closing ones are not.
    """
    opening, closing = _tag_patterns(name)
    depth = 1
    cursor = start
    while True:
        close = closing.search(text, cursor)
        if close is None:
            return None
        for nested in opening.finditer(text, cursor, close.start()):
            if not nested.group(2):
                depth += 1
        depth -= 1
        if depth == 0:
            return close.start(), close.end()
        cursor = close.end()


def extract_single_root(markup: str) -> RootElement | None:
    """Return the root element when ``markup`` consists of exactly one element.

    Examples
    --------
    >>> extract_single_root('<button class="btn">Go</button>').tag
    'button'
    >>> extract_single_root("<p>a</p><p>b</p>") is None
    True
    """
    trimmed = markup.strip()
    match = ROOT_OPEN_PATTERN.match(trimmed)
    if match is None:
        return None
    tag, attributes, slash = match.groups()
    if slash or tag.lower() in VOID_ELEMENTS:
        if match.end() != len(trimmed):
            return None
        closing = "self-closing" if slash else "void"
        return RootElement(tag, attributes, "", closing)
    close = find_matching_close(trimmed, tag, match.end())
    if close is None or close[1] != len(trimmed):
        return None
    return RootElement(tag, attributes, trimmed[match.end() : close[0]], "standard")


def render_attributes(attributes: cabc.Mapping[str, str]) -> str:
    """Render ``attributes`` as `` name="value"`` pairs with escaped values."""
    return "".join(
        f' {name}="{html.escape(value, quote=False).replace(chr(34), "&quot;")}"'
        for name, value in attributes.items()
    )


def merge_attributes(existing: str, new: cabc.Mapping[str, str]) -> str:
    """Replace same-named attributes in ``existing`` and append ``new``.

    Quoted, unquoted and bare attributes in ``existing`` are all dropped when
    ``new`` names them, matching names case-insensitively.
    """
    replaced = {name.lower() for name in new}
    kept = [
        match.group(0)
        for match in ATTRIBUTE_TOKEN_PATTERN.finditer(existing)
        if match.group(1).lower() not in replaced
    ]
    combined = f"{' '.join(kept)}{render_attributes(new)}".strip()
    return f" {combined}" if combined else ""


def render_root(root: RootElement, new: cabc.Mapping[str, str]) -> str:
    """Re-emit ``root`` with ``new`` merged into its attributes."""
    attributes = merge_attributes(root.attributes, new)
    match root.closing:
        case "void":
            return f"<{root.tag}{attributes}>"
        case "self-closing":
            return f"<{root.tag}{attributes} />"
        case _:
            return f"<{root.tag}{attributes}>{root.content}</{root.tag}>"


def wrap(markup: str, attributes: cabc.Mapping[str, str]) -> str:
    """Merge ``attributes`` into a single root element or wrap in a ``<div>``."""
    root = extract_single_root(markup)
    if root is not None:
        return render_root(root, attributes)
    return f"<div{render_attributes(attributes)}>{markup}</div>"


__all__ = [
    "RootElement",
    "extract_single_root",
    "find_matching_close",
    "merge_attributes",
    "render_attributes",
    "render_root",
    "wrap",
]
