"""Low-level text scanning helpers shared by the compiler stages.

The DSL is rewritten textually, so several stages need the same two
primitives: reading a balanced, quote-aware parenthesised argument list and
splitting a client-side expression into code and string-literal chunks so
rewrites never touch literal text.

Examples
--------
>>> read_balanced("if(a(b), ')')", 2)
("a(b), ')'", 13)
>>> map_code("user + 'user'", str.upper)
"USER + 'user'"
"""

from __future__ import annotations

import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_QUOTES = frozenset("'\"")

TAG_PATTERN = re.compile(
    r"""<([A-Za-z][\w:.-]*)((?:\s+(?:[^"'<>/]|/(?!>)|"[^"]*"|'[^']*')*)?)\s*(/?)>"""
)
"""Opening or self-closing tag; captures the name, attribute text and slash."""


def _skip_string(text: str, start: int) -> int:
    """Return the index just past the quoted literal opening at ``start``."""
    quote = text[start]
    index = start + 1
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1
        index += 1
    return len(text)


def read_balanced(
    text: str, start: int, opener: str = "(", closer: str = ")"
) -> tuple[str, int] | None:
    """Read the bracketed region opening at ``start``.

    Parameters
    ----------
    text : str
        Source text being scanned.
    start : int
        Index of the opening bracket.
    opener, closer : str, optional
        Bracket pair to balance; parentheses by default.

    Returns
    -------
    tuple[str, int] or None
        The inner text and the index just past the closing bracket, or
        ``None`` when ``start`` is not an opener or the region never closes.
    """
    if start >= len(text) or text[start] != opener:
        return None
    depth = 0
    index = start
    while index < len(text):
        char = text[index]
        if char in _QUOTES:
            index = _skip_string(text, index)
            continue
        if char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return text[start + 1 : index], index + 1
        index += 1
    return None


def _template_literal(expr: str, start: int) -> tuple[list[tuple[bool, str]], int]:
    """Split a backtick literal into literal text and ``${...}`` code chunks."""
    chunks: list[tuple[bool, str]] = []
    literal = ["`"]
    index = start + 1
    while index < len(expr):
        char = expr[index]
        if char == "\\":
            literal.append(expr[index : index + 2])
            index += 2
            continue
        if char == "`":
            literal.append("`")
            chunks.append((False, "".join(literal)))
            return chunks, index + 1
        if expr.startswith("${", index):
            region = read_balanced(expr, index + 1, "{", "}")
            if region is None:
                break
            literal.append("${")
            chunks.append((False, "".join(literal)))
            chunks.extend(iter_code_segments(region[0]))
            literal = ["}"]
            index = region[1]
            continue
        literal.append(char)
        index += 1
    literal.append(expr[index:])
    chunks.append((False, "".join(literal)))
    return chunks, len(expr)


def iter_code_segments(expr: str) -> cabc.Iterator[tuple[bool, str]]:
    """Yield ``(is_code, chunk)`` pairs splitting ``expr`` around string literals.

    Template literals contribute their ``${...}`` interpolations as code.
    """
    code_start = 0
    index = 0
    while index < len(expr):
        char = expr[index]
        if char in _QUOTES or char == "`":
            if index > code_start:
                yield True, expr[code_start:index]
            if char == "`":
                chunks, index = _template_literal(expr, index)
                yield from chunks
            else:
                end = _skip_string(expr, index)
                yield False, expr[index:end]
                index = end
            code_start = index
            continue
        index += 1
    if code_start < len(expr):
        yield True, expr[code_start:]


def map_code(expr: str, transform: cabc.Callable[[str], str]) -> str:
    """Apply ``transform`` to the code chunks of ``expr`` only."""
    return "".join(
        transform(chunk) if is_code else chunk
        for is_code, chunk in iter_code_segments(expr)
    )


def escape_attribute(value: str) -> str:
    """Escape ``value`` for a double-quoted attribute, keeping JS readable."""
    return value.replace('"', "&quot;")


def unescape_quotes(value: str) -> str:
    """Decode the quote entities attribute escapers emit."""
    for entity, char in (
        ("&quot;", '"'),
        ("&#34;", '"'),
        ("&#39;", "'"),
        ("&#x27;", "'"),
    ):
        value = value.replace(entity, char)
    return value


__all__ = [
    "TAG_PATTERN",
    "escape_attribute",
    "iter_code_segments",
    "map_code",
    "read_balanced",
    "unescape_quotes",
]
