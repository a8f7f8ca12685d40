"""Compile page style fragments and scope CSS to a page or component root.

Pages declare CSS through the reserved ``styles`` config variable. A fragment
is either a plain CSS string or a mapping with ``css``, ``scoped`` and an
optional ``selector``. Scoped fragments have every selector prefixed with
``#<id>`` so rules only reach elements inside the page root.

Examples
--------
>>> scope_css(".a, .b { color: red }", "p1")
'#p1 .a, #p1 .b { color: red }'
"""

from __future__ import annotations

import re
import typing as typ

if typ.TYPE_CHECKING:
    from ..parser.models import ParsedPage

COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)
PRELUDE_PATTERN = re.compile(r"(?:^|(?<=[{};]))([^{};]+)\{")
KEYFRAME_SELECTOR_PATTERN = re.compile(r"^(?:from|to|\d+(?:\.\d+)?%)$", re.IGNORECASE)
KEYFRAMES_PATTERN = re.compile(r"^@(?:-[a-z]+-)?keyframes\b", re.IGNORECASE)


def _split_selectors(prelude: str) -> list[str]:
    """Split a selector list on commas outside brackets and parentheses."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in prelude:
        if char in "([":
            depth += 1
        elif char in ")]":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def _prefix_selector(selector: str, prefix: str) -> str:
    stripped = selector.strip()
    if not stripped or KEYFRAME_SELECTOR_PATTERN.match(stripped):
        return selector
    leading = selector[: len(selector) - len(selector.lstrip())]
    trailing = selector[len(selector.rstrip()) :]
    return f"{leading}{prefix} {stripped}{trailing}"


def prefix_css(css: str, prefix: str) -> str:
    """Prefix each rule's selectors in ``css`` with ``prefix``.

    ``@``-rules pass through; rules nested one level inside ``@media`` or
    ``@supports`` are prefixed like top-level rules, and keyframe steps are
    left alone.
    """
    css = COMMENT_PATTERN.sub("", css)
    in_keyframes = False
    depth = 0
    parts: list[str] = []
    cursor = 0
    for match in PRELUDE_PATTERN.finditer(css):
        gap = css[cursor : match.start()]
        depth += gap.count("{") - gap.count("}")
        if depth == 0:
            in_keyframes = False
        prelude = match.group(1)
        parts.append(gap)
        if prelude.strip().startswith("@"):
            in_keyframes = in_keyframes or bool(
                KEYFRAMES_PATTERN.match(prelude.strip())
            )
            parts.append(match.group(0))
        elif in_keyframes:
            parts.append(match.group(0))
        else:
            selectors = _split_selectors(prelude)
            scoped = ",".join(_prefix_selector(item, prefix) for item in selectors)
            parts.append(f"{scoped}{{")
        depth += 1
        cursor = match.end()
    parts.append(css[cursor:])
    return "".join(parts)


def scope_css(css: str, scope_id: str) -> str:
    """Scope ``css`` beneath the element whose id is ``scope_id``.

    CSS without any rule blocks is returned unchanged.
    """
    if "{" not in css:
        return css
    return prefix_css(css, f"#{scope_id}")


def _fragment_css(fragment: typ.Any, page_id: str) -> str:
    match fragment:
        case str():
            return fragment
        case {"css": str(css), **options} if css:
            if not options.get("scoped"):
                return css
            return scope_css(css, str(options.get("selector") or page_id))
        case _:
            return ""


class StyleCompiler:
    """Concatenate a page's style fragments into one stylesheet."""

    def compile(self, page: ParsedPage) -> str:
        """Return the page stylesheet, scoping fragments flagged ``scoped``."""
        chunks = [_fragment_css(fragment, page.id) for fragment in page.style_fragments]
        if page.css:
            chunks.insert(0, page.css)
        return "\n".join(chunk for chunk in chunks if chunk.strip())


__all__ = ["StyleCompiler", "prefix_css", "scope_css"]
