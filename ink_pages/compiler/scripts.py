"""Compile page scripts and the client state factory for each page.

Page JavaScript comes from ``<script setup>`` blocks. Remote calls written
as ``@name(args)`` become awaited runtime requests, localization calls are
routed through the runtime, and a ``request()`` accessor exposing the page's
route parameters is prepended. :meth:`ScriptCompiler.page_data` wraps the
result in the ``pageData()`` factory the page root element initializes
from, seeding it with every materialized variable under its binding name.
"""

from __future__ import annotations

import json
import re
import typing as typ

from .._constants import RUNTIME_GLOBAL
from .._text import read_balanced
from .localization import rewrite_calls

if typ.TYPE_CHECKING:
    from ..parser.models import ParsedPage

REMOTE_CALL_PATTERN = re.compile(r"(?<![\w@])@(\w+)\(")
DEFAULT_LOGIN_ROUTE = "/login"


def script_json(value: typ.Any) -> str:
    """Serialize ``value`` for inline embedding in a ``<script>`` element.

    Examples
    --------
    >>> script_json({"html": "</script>"})
    '{"html": "<\\\\/script>"}'
    """
    return json.dumps(value, ensure_ascii=False).replace("</", "<\\/")


def rewrite_remote_calls(js: str) -> str:
    """Turn ``@name(args)`` into ``await ink.newReq('name', args)``.

    Examples
    --------
    >>> rewrite_remote_calls("const users = @users({ page: 1 });")
    "const users = await ink.newReq('users', { page: 1 });"
    """
    parts: list[str] = []
    cursor = 0
    for match in REMOTE_CALL_PATTERN.finditer(js):
        if match.start() < cursor:
            continue
        region = read_balanced(js, match.end() - 1)
        if region is None:
            continue
        arguments, end = region[0].strip(), region[1]
        call = f"await {RUNTIME_GLOBAL}.newReq('{match.group(1)}'"
        call += f", {arguments})" if arguments else ")"
        parts.extend((js[cursor : match.start()], call))
        cursor = end
    parts.append(js[cursor:])
    return "".join(parts)


def request_accessor(params: typ.Sequence[str]) -> str:
    """Return the ``request()`` accessor declaration for ``params``.

    Examples
    --------
    >>> request_accessor(["slug"])
    'const request = () => Object.assign({ slug: null }, ink.request());'
    """
    defaults = ", ".join(f"{param}: null" for param in params)
    initial = f"{{ {defaults} }}" if defaults else "{}"
    runtime = f"{RUNTIME_GLOBAL}.request()"
    return f"const request = () => Object.assign({initial}, {runtime});"


def _indent(text: str, prefix: str) -> str:
    lines = text.splitlines()
    return "\n".join(prefix + line if line.strip() else line for line in lines)


class ScriptCompiler:
    """Produce the page script and its ``pageData()`` state factory."""

    def __init__(self, *, login_route: str = DEFAULT_LOGIN_ROUTE) -> None:
        self.login_route = login_route

    def compile(self, page: ParsedPage) -> str:
        """Return the page's setup script with runtime calls rewritten."""
        js = rewrite_remote_calls(rewrite_calls(page.js))
        return f"{request_accessor(page.route_params)}\n{js}".rstrip() + "\n"

    def page_data(self, page: ParsedPage, js: str) -> str:
        """Return the ``pageData()`` factory script for ``page``.

        Parameters
        ----------
        page : ParsedPage
            The page whose config and variables seed the state object.
        js : str
            Compiled setup script, run inside ``init()`` after the auth guard.

        Returns
        -------
        str
            JavaScript source declaring ``function pageData()``.
        """
        fields = [
            f"requiresAuth: {script_json(page.config.requires_auth)}",
            f"middleware: {script_json(page.config.middleware or [])}",
        ]
        fields.extend(
            f"{variable.binding_name}: {script_json(variable.value)}"
            for variable in page.variables
        )
        guard = (
            "if (this.requiresAuth) {\n"
            f"    const authenticated = await {RUNTIME_GLOBAL}.is_authenticated();\n"
            "    if (!authenticated) {\n"
            f"        window.location.href = {script_json(self.login_route)};\n"
            "        return;\n"
            "    }\n"
            "}"
        )
        body = _indent(f"{guard}\n{js.strip()}", " " * 12)
        state = ",\n".join(" " * 8 + field for field in fields)
        return (
            "function pageData() {\n"
            "    return {\n"
            f"{state},\n"
            "        async init() {\n"
            f"{body}\n"
            "        }\n"
            "    };\n"
            "}\n"
        )


__all__ = [
    "ScriptCompiler",
    "request_accessor",
    "rewrite_remote_calls",
    "script_json",
]
