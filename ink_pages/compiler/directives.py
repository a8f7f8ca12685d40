"""Translate template control directives into Alpine.js directive markup.

Bodies use ``@if``/``@for``/``@switch`` style directives and ``{{ }}``
echoes. :class:`DirectiveTranslator` rewrites them textually into
``<template x-if>``/``<template x-for>`` blocks and ``x-text``/``x-html``
bindings. Only the known directive names are recognised, so Alpine event
shorthands such as ``@click`` pass through untouched, and ``@@if`` or
``@{{ }}`` escape a literal directive or echo.

Expressions are normalised for the client: ``$`` sigils are dropped, quoted
identifier subscripts become member access, and Python spellings of boolean
operators and constants become their JavaScript forms.

Examples
--------
>>> translator = DirectiveTranslator()
>>> translator.translate("@if($count > 0)<b>{{ $count }}</b>@endif")
'<template x-if="count > 0"><b><span x-text="count"></span></b></template>'
"""

from __future__ import annotations

import dataclasses as dc
import re

from .._text import TAG_PATTERN, escape_attribute, map_code, read_balanced

DIRECTIVE_PATTERN = re.compile(
    r"(?<![\w@])@(if|elseif|else|endif|unless|endunless|for|foreach|endfor"
    r"|endforeach|isset|endisset|empty|endempty|switch|case|break|default"
    r"|endswitch)\b"
)
ESCAPED_DIRECTIVE_PATTERN = re.compile(r"@(@[a-z]+\b)")
PYTHON_BLOCK_PATTERN = re.compile(r"(?<![\w@])@python\b.*?@endpython\b", re.DOTALL)
ECHO_PATTERN = re.compile(
    r"(?<!@)\{\{\s*(.+?)\s*\}\}|\{!!\s*(.+?)\s*!!\}", re.DOTALL
)
ATTRIBUTE_PATTERN = re.compile(
    r"""(?<=\s)([A-Za-z_][\w.-]*)(\s*=\s*)(?:"([^"]*)"|'([^']*)')"""
)
SUBSCRIPT_PATTERN = re.compile(r"""\[\s*(['"])([A-Za-z_]\w*)\1\s*\]""")
FOR_IN_PATTERN = re.compile(
    r"^\s*\$?(\w+)\s*(?:,\s*\$?(\w+)\s*)?\s+in\s+(.+?)\s*$", re.DOTALL
)
FOREACH_AS_PATTERN = re.compile(
    r"^\s*(.+?)\s+as\s+\$?(\w+)\s*(?:=>\s*\$?(\w+))?\s*$", re.DOTALL
)
WITH_ARGUMENTS = frozenset(
    {"if", "elseif", "unless", "for", "foreach", "isset", "empty", "switch", "case"}
)
PYTHON_BLOCK_COMMENT = "<!-- server-side block removed -->"
SWITCH_VARIABLE = "switchValue"

_WORD_REPLACEMENTS = (
    (re.compile(r"\$(?=[A-Za-z_])"), ""),
    (re.compile(r"\band\b"), "&&"),
    (re.compile(r"\bor\b"), "||"),
    (re.compile(r"\bnot\b(?!\s+in\b)\s*"), "!"),
    (re.compile(r"\bTrue\b"), "true"),
    (re.compile(r"\bFalse\b"), "false"),
    (re.compile(r"\bNone\b"), "null"),
)


def _normalize_code(code: str) -> str:
    for pattern, replacement in _WORD_REPLACEMENTS:
        code = pattern.sub(replacement, code)
    return code


def normalize_expression(expression: str) -> str:
    """Rewrite a template expression into client binding syntax.

    Examples
    --------
    >>> normalize_expression("$user['name'] and not $hidden")
    'user.name && !hidden'
    """
    expression = SUBSCRIPT_PATTERN.sub(r".\2", expression.strip())
    return map_code(expression, _normalize_code)


@dc.dataclass(slots=True)
class _Block:
    """An open directive block on the translation stack."""

    kind: str
    conditions: list[str] = dc.field(default_factory=list)
    case_open: bool = False


def _template(directive: str, expression: str) -> str:
    return f'<template {directive}="{escape_attribute(expression)}">'


def _loop_expression(arguments: str, *, foreach: bool) -> str:
    if foreach and (match := FOREACH_AS_PATTERN.match(arguments)):
        items, first, second = match.groups()
        value, key = (second, first) if second else (first, None)
    elif match := FOR_IN_PATTERN.match(arguments):
        value, key, items = match.groups()
    else:
        return normalize_expression(arguments)
    target = f"({value}, {key})" if key else value
    return f"{target} in {normalize_expression(items)}"


class DirectiveTranslator:
    """Rewrite control directives and echoes in a body into Alpine markup."""

    def translate(self, html: str) -> str:
        """Return ``html`` with directives, echoes and server blocks rewritten."""
        html = PYTHON_BLOCK_PATTERN.sub(PYTHON_BLOCK_COMMENT, html)
        html = self._translate_directives(html)
        html = TAG_PATTERN.sub(self._bind_tag_echoes, html)
        html = ECHO_PATTERN.sub(self._echo, html)
        html = html.replace("@{{", "{{")
        return ESCAPED_DIRECTIVE_PATTERN.sub(r"\1", html)

    def _translate_directives(self, html: str) -> str:
        parts: list[str] = []
        stack: list[_Block] = []
        cursor = 0
        while match := DIRECTIVE_PATTERN.search(html, cursor):
            name = match.group(1)
            end = match.end()
            arguments: str | None = None
            if name in WITH_ARGUMENTS:
                opening = end
                while opening < len(html) and html[opening] in " \t":
                    opening += 1
                region = read_balanced(html, opening)
                if region is None:
                    parts.append(html[cursor:end])
                    cursor = end
                    continue
                arguments, end = region
            parts.append(html[cursor : match.start()])
            parts.append(self._emit(name, arguments, stack))
            cursor = end
        parts.append(html[cursor:])
        return "".join(parts)

    def _emit(  # noqa: C901, PLR0911
        self, name: str, arguments: str | None, stack: list[_Block]
    ) -> str:
        expression = normalize_expression(arguments) if arguments is not None else ""
        top = stack[-1] if stack else None
        match name:
            case "if":
                stack.append(_Block("if", [expression]))
                return _template("x-if", expression)
            case "elseif" | "else":
                prior = top.conditions if top and top.kind == "if" else []
                guards = [f"!({condition})" for condition in prior]
                if name == "elseif":
                    guards.append(f"({expression})")
                    prior.append(expression)
                guard = " && ".join(guards) or "true"
                return "</template>" + _template("x-if", guard)
            case "unless":
                stack.append(_Block("unless"))
                return _template("x-if", f"!({expression})")
            case "for" | "foreach":
                stack.append(_Block("for"))
                loop = _loop_expression(arguments or "", foreach=name == "foreach")
                return _template("x-for", loop)
            case "isset":
                stack.append(_Block("isset"))
                return _template(
                    "x-if",
                    f"typeof {expression} !== 'undefined' && {expression} !== null",
                )
            case "empty":
                stack.append(_Block("empty"))
                return _template(
                    "x-if",
                    f"!{expression} || (Array.isArray({expression}) && "
                    f"{expression}.length === 0)",
                )
            case "switch":
                stack.append(_Block("switch"))
                state = escape_attribute(f"{{ {SWITCH_VARIABLE}: {expression} }}")
                return f'<div x-data="{state}">'
            case "case" | "default" if top and top.kind == "switch":
                prefix = "</template>" if top.case_open else ""
                top.case_open = True
                if name == "case":
                    top.conditions.append(expression)
                    guard = f"{SWITCH_VARIABLE} === {expression}"
                    return prefix + _template("x-if", guard)
                cases = ", ".join(top.conditions)
                guard = f"![{cases}].includes({SWITCH_VARIABLE})" if cases else "true"
                return prefix + _template("x-if", guard)
            case "case" | "default":
                return ""
            case "break":
                if top and top.kind == "switch" and top.case_open:
                    top.case_open = False
                    return "</template>"
                return ""
            case "endswitch":
                if top and top.kind == "switch":
                    stack.pop()
                    return ("</template>" if top.case_open else "") + "</div>"
                return "</div>"
            case _:
                if stack:
                    stack.pop()
                return "</template>"

    def _echo(self, match: re.Match[str]) -> str:
        as_html = match.group(2) is not None
        expression = normalize_expression(match.group(2) if as_html else match.group(1))
        directive = "x-html" if as_html else "x-text"
        return f'<span {directive}="{escape_attribute(expression)}"></span>'

    def _bind_tag_echoes(self, tag: re.Match[str]) -> str:
        return ATTRIBUTE_PATTERN.sub(self._bind_attribute, tag.group(0))

    def _bind_attribute(self, match: re.Match[str]) -> str:
        name, equals = match.group(1), match.group(2)
        value = match.group(3) if match.group(3) is not None else match.group(4)
        if name.startswith("x-") or not ECHO_PATTERN.search(value):
            return match.group(0)
        echoes = list(ECHO_PATTERN.finditer(value))
        if len(echoes) == 1 and echoes[0].span() == (0, len(value)):
            echo = echoes[0]
            expression = normalize_expression(echo.group(1) or echo.group(2))
        else:
            pieces: list[str] = []
            cursor = 0
            for echo in echoes:
                literal = value[cursor : echo.start()]
                pieces.append(literal.replace("`", "\\`").replace("${", "\\${"))
                inner = normalize_expression(echo.group(1) or echo.group(2))
                pieces.append(f"${{{inner}}}")
                cursor = echo.end()
            tail = value[cursor:].replace("`", "\\`").replace("${", "\\${")
            expression = "`" + "".join(pieces) + tail + "`"
        return f':{name}{equals}"{escape_attribute(expression)}"'


__all__ = ["DirectiveTranslator", "normalize_expression"]
