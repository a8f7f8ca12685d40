"""Rewrite variable references in compiled markup to their client bindings.

Each materialized variable is exposed on the client under a generated
binding name. :func:`rewrite` replaces ``$name`` sigils anywhere in the
markup, and bare ``name`` references inside reactive attributes (``x-*``,
``:attr`` and ``@event``). Bare references are left alone inside JavaScript
string literals, after ``.`` or ``$`` (member access, magic properties and
text that was already rewritten) and in object-literal key position.

Examples
--------
>>> rewrite('<p x-text="count + 1">$count</p>', {"count": "var_count_1a2b3c4d"})
'<p x-text="var_count_1a2b3c4d + 1">var_count_1a2b3c4d</p>'
"""

from __future__ import annotations

import re
import typing as typ

from .._constants import RUNTIME_GLOBAL
from .._text import TAG_PATTERN, map_code, unescape_quotes

if typ.TYPE_CHECKING:
    import collections.abc as cabc

REACTIVE_ATTRIBUTE_PATTERN = re.compile(
    r"""(?<=\s)((?:x-|:|@)[\w:.@-]*)(\s*=\s*)(?:"([^"]*)"|'([^']*)')"""
)


def route_bindings(params: cabc.Iterable[str]) -> dict[str, str]:
    """Map route parameter names to their runtime request accessors.

    Examples
    --------
    >>> route_bindings(["slug"])
    {'slug': 'ink.request().slug'}
    """
    return {param: f"{RUNTIME_GLOBAL}.request().{param}" for param in params}


def page_bindings(
    variables: cabc.Mapping[str, str], params: cabc.Iterable[str] = ()
) -> dict[str, str]:
    """Combine route parameters and variables; variables win on a clash."""
    return route_bindings(params) | dict(variables)


def _alternation(names: cabc.Iterable[str]) -> str:
    return "|".join(re.escape(name) for name in sorted(names, key=len, reverse=True))


def _is_object_key(code: str, start: int, end: int) -> bool:
    before = code[:start].rstrip()
    after = code[end:].lstrip()
    return (
        bool(before)
        and before[-1] in "{,"
        and after.startswith(":")
        and not after.startswith("::")
    )


class _BareNameRewriter:
    """Replace bare identifiers in code chunks of a client expression."""

    def __init__(self, bindings: cabc.Mapping[str, str]) -> None:
        self.bindings = bindings
        self.pattern = re.compile(rf"(?<![\w$.])({_alternation(bindings)})\b")

    def __call__(self, code: str) -> str:
        parts: list[str] = []
        cursor = 0
        for match in self.pattern.finditer(code):
            if _is_object_key(code, match.start(), match.end()):
                continue
            parts.extend((code[cursor : match.start()], self.bindings[match.group(1)]))
            cursor = match.end()
        parts.append(code[cursor:])
        return "".join(parts)


def rewrite(html: str, bindings: cabc.Mapping[str, str]) -> str:
    """Replace variable references in ``html`` with their binding names.

    Parameters
    ----------
    html : str
        Markup produced by the directive and localization stages.
    bindings : Mapping[str, str]
        Surface name to client expression, usually from :func:`page_bindings`.

    Returns
    -------
    str
        The rewritten markup. Quote entities inside reactive attributes are
        decoded for scanning and encoded again on output.
    """
    if not bindings:
        return html
    sigil = re.compile(rf"\$({_alternation(bindings)})\b")
    html = sigil.sub(lambda match: bindings[match.group(1)], html)
    bare = _BareNameRewriter(bindings)

    def attribute(match: re.Match[str]) -> str:
        name, equals, double, single = match.groups()
        if double is not None:
            value = map_code(unescape_quotes(double), bare)
            return f'{name}{equals}"{value.replace(chr(34), "&quot;")}"'
        value = map_code(unescape_quotes(single), bare)
        return f"{name}{equals}'{value.replace(chr(39), '&#39;')}'"

    return TAG_PATTERN.sub(
        lambda tag: REACTIVE_ATTRIBUTE_PATTERN.sub(attribute, tag.group(0)), html
    )


__all__ = ["page_bindings", "rewrite", "route_bindings"]
