"""Rewrite localization calls into client runtime lookups.

Page and component bodies reference translations with ``trans('key')``,
``__('key')``, ``trans_choice('key', n)`` or ``@lang('key')``. Inside bodies
these become bindings on the client runtime (``ink.trans('key')``), keeping
the echo style: ``{{ }}`` becomes a text binding and ``{!! !!}`` an HTML
binding.

Layouts are rendered by Jinja before the bindings are emitted, and Jinja
would try to evaluate the calls itself. :func:`extract_placeholders` swaps
each call for an opaque random token for exactly that pass, and
:func:`restore_placeholders` turns the tokens into bindings afterwards, with
the key shown as fallback text until the runtime resolves it.

Examples
--------
>>> transform("<h1>{{ trans('app.title') }}</h1>")
'<h1><span x-text="ink.trans(\\'app.title\\')"></span></h1>'
>>> doc, table = extract_placeholders("<p>{{ __('nav.home') }}</p>")
>>> restore_placeholders(doc, table)
'<p><span x-text="ink.trans(\\'nav.home\\')">nav.home</span></p>'
"""

from __future__ import annotations

import dataclasses as dc
import html
import re
import secrets
import typing as typ

from .._constants import RUNTIME_GLOBAL
from .._text import TAG_PATTERN, escape_attribute, read_balanced

if typ.TYPE_CHECKING:
    import collections.abc as cabc

CALL_PATTERN = re.compile(r"(?<![\w$.])(__|trans_choice|trans)\(|(?<![\w@])@(lang)\(")
ECHO_PATTERN = re.compile(r"\{\{\s*(.+?)\s*\}\}|\{!!\s*(.+?)\s*!!\}", re.DOTALL)
KEY_PATTERN = re.compile(r"""\s*(['"])(.+?)\1""")
ATTRIBUTE_ECHO_PATTERN = re.compile(
    r"""(?<=\s)([A-Za-z_][\w.-]*)\s*=\s*(["'])\s*"""
    r"""(?:\{\{|\{!!)\s*(.+?)\s*(?:\}\}|!!\})\s*\2"""
)
TOKEN_PREFIX = "__INK_TRANS_"


@dc.dataclass(frozen=True, slots=True)
class TranslationCall:
    """A localization call located in source text."""

    start: int
    end: int
    expression: str
    key: str | None


@dc.dataclass(frozen=True, slots=True)
class Placeholder:
    """A localization binding parked behind a token during a Jinja pass."""

    expression: str
    key: str
    html: bool = False


def _find_calls(text: str) -> cabc.Iterator[TranslationCall]:
    cursor = 0
    for match in CALL_PATTERN.finditer(text):
        if match.start() < cursor:
            continue
        region = read_balanced(text, match.end() - 1)
        if region is None:
            continue
        arguments, end = region
        function = "trans_choice" if match.group(1) == "trans_choice" else "trans"
        key = KEY_PATTERN.match(arguments)
        cursor = end
        yield TranslationCall(
            start=match.start(),
            end=end,
            expression=f"{RUNTIME_GLOBAL}.{function}({arguments.strip()})",
            key=key.group(2) if key else None,
        )


def _single_call(text: str) -> TranslationCall | None:
    """Return the call when ``text`` is exactly one localization call."""
    call = next(_find_calls(text), None)
    if call is None or call.start != 0 or call.end != len(text):
        return None
    return call


def _binding(expression: str, *, as_html: bool, fallback: str = "") -> str:
    directive = "x-html" if as_html else "x-text"
    return f'<span {directive}="{escape_attribute(expression)}">{fallback}</span>'


def _replace_echoes(
    text: str, render: cabc.Callable[[TranslationCall, bool], str]
) -> str:
    def replace(match: re.Match[str]) -> str:
        as_html = match.group(2) is not None
        call = _single_call(match.group(2) if as_html else match.group(1))
        return match.group(0) if call is None else render(call, as_html)

    return ECHO_PATTERN.sub(replace, text)


def _replace_lang_directives(
    text: str, render: cabc.Callable[[TranslationCall, bool], str]
) -> str:
    parts: list[str] = []
    cursor = 0
    for call in _find_calls(text):
        if not text.startswith("@lang", call.start):
            continue
        parts.extend((text[cursor : call.start], render(call, False)))
        cursor = call.end
    parts.append(text[cursor:])
    return "".join(parts)


def _bind_attribute_echoes(text: str) -> str:
    """Turn ``attr="{{ trans('k') }}"`` inside tags into ``:attr="ink.trans('k')"``."""

    def bind(match: re.Match[str]) -> str:
        call = _single_call(match.group(3))
        if call is None:
            return match.group(0)
        return f':{match.group(1)}="{escape_attribute(call.expression)}"'

    return TAG_PATTERN.sub(
        lambda tag: ATTRIBUTE_ECHO_PATTERN.sub(bind, tag.group(0)), text
    )


def rewrite_calls(text: str) -> str:
    """Rewrite bare localization calls into runtime lookup expressions.

    Examples
    --------
    >>> rewrite_calls(":title=\\"trans('a.b')\\"")
    ':title="ink.trans(\\'a.b\\')"'
    """
    parts: list[str] = []
    cursor = 0
    for call in _find_calls(text):
        parts.extend((text[cursor : call.start], call.expression))
        cursor = call.end
    parts.append(text[cursor:])
    return "".join(parts)


def transform(body: str) -> str:
    """Rewrite every localization call in a page or component body."""

    def render(call: TranslationCall, as_html: bool) -> str:
        return _binding(call.expression, as_html=as_html)

    body = _bind_attribute_echoes(body)
    body = _replace_echoes(body, render)
    body = _replace_lang_directives(body, render)
    return rewrite_calls(body)


def _mint_token(text: str, table: cabc.Mapping[str, Placeholder]) -> str:
    while True:
        token = f"{TOKEN_PREFIX}{secrets.token_hex(16)}__"
        if token not in text and token not in table:
            return token


def extract_placeholders(document: str) -> tuple[str, dict[str, Placeholder]]:
    """Replace localization echoes in ``document`` with opaque tokens.

    Parameters
    ----------
    document : str
        Layout or shell source about to be rendered by Jinja.

    Returns
    -------
    tuple[str, dict[str, Placeholder]]
        The rewritten document and the token table needed by
        :func:`restore_placeholders`. Tokens contain only letters, digits and
        underscores, so no template engine or HTML escaper alters them.
    """
    table: dict[str, Placeholder] = {}

    def render(call: TranslationCall, as_html: bool) -> str:
        token = _mint_token(document, table)
        table[token] = Placeholder(call.expression, call.key or "", as_html)
        return token

    rewritten = _replace_echoes(_bind_attribute_echoes(document), render)
    return _replace_lang_directives(rewritten, render), table


def restore_placeholders(document: str, table: cabc.Mapping[str, Placeholder]) -> str:
    """Swap each token for its runtime binding with the key as fallback text."""
    for token, placeholder in table.items():
        binding = _binding(
            placeholder.expression,
            as_html=placeholder.html,
            fallback=html.escape(placeholder.key),
        )
        document = document.replace(token, binding)
    return document


__all__ = [
    "Placeholder",
    "TranslationCall",
    "extract_placeholders",
    "restore_placeholders",
    "rewrite_calls",
    "transform",
]
