"""Minify compiled page HTML along with its inline CSS and JavaScript.

:func:`minify_html` first parks ``<pre>`` and ``<textarea>`` elements behind
opaque tokens so their contents survive byte-for-byte, minifies the bodies
of ``<style>`` elements and of JavaScript ``<script>`` elements (other
script types such as JSON-LD are kept verbatim), drops HTML comments except
conditional ones, and collapses the remaining whitespace.

Examples
--------
>>> minify_html("<div>\\n  <p> hi </p>\\n</div>")
'<div><p> hi </p></div>'
>>> minify_css("a {\\n  color: red;\\n}")
'a{color: red}'
"""

from __future__ import annotations

import re
import secrets

VERBATIM_PATTERN = re.compile(
    r"<(pre|textarea)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)
SCRIPT_PATTERN = re.compile(
    r"(<script\b([^>]*)>)(.*?)(</script\s*>)", re.IGNORECASE | re.DOTALL
)
STYLE_PATTERN = re.compile(
    r"(<style\b[^>]*>)(.*?)(</style\s*>)", re.IGNORECASE | re.DOTALL
)
TYPE_ATTRIBUTE_PATTERN = re.compile(
    r"""\btype\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+))""", re.IGNORECASE
)
COMMENT_PATTERN = re.compile(r"<!--(?!\[if).*?-->", re.DOTALL)
CSS_COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)
CSS_PUNCTUATION_PATTERN = re.compile(r"\s*([{};,>])\s*")
JAVASCRIPT_TYPES = frozenset(
    {
        "",
        "module",
        "text/javascript",
        "application/javascript",
        "text/ecmascript",
        "application/ecmascript",
    }
)


class _Vault:
    """Hold verbatim regions behind tokens that the rewrites cannot alter."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.regions: dict[str, str] = {}

    def park(self, region: str) -> str:
        token = f"__INK_KEEP_{secrets.token_hex(8)}__"
        while token in self.text or token in self.regions:
            token = f"__INK_KEEP_{secrets.token_hex(8)}__"
        self.regions[token] = region
        return token

    def restore(self, text: str) -> str:
        for token, region in reversed(self.regions.items()):
            text = text.replace(token, region)
        return text


def _script_type(attributes: str) -> str:
    match = TYPE_ATTRIBUTE_PATTERN.search(attributes)
    if match is None:
        return ""
    value = next(group for group in match.groups() if group is not None)
    return value.strip().lower()


def minify_css(css: str) -> str:
    """Strip comments and redundant whitespace from ``css``."""
    css = CSS_COMMENT_PATTERN.sub("", css)
    css = re.sub(r"\s+", " ", css)
    css = CSS_PUNCTUATION_PATTERN.sub(r"\1", css)
    return css.replace(";}", "}").strip()


def _edge(whitespace: str) -> str:
    if not whitespace:
        return ""
    return "\n" if "\n" in whitespace else " "


def _squeeze(code: str) -> str:
    lines = (re.sub(r"[ \t]+", " ", line).strip() for line in code.splitlines())
    squeezed = "\n".join(line for line in lines if line)
    if not squeezed:
        return _edge(code)
    leading = code[: len(code) - len(code.lstrip())]
    trailing = code[len(code.rstrip()) :]
    return _edge(leading) + squeezed + _edge(trailing)


def _js_tokens(js: str) -> list[tuple[str, str]]:
    """Split ``js`` into ``("code" | "string" | "comment", text)`` pieces."""
    pieces: list[tuple[str, str]] = []
    code_start = 0
    index = 0
    while index < len(js):
        char = js[index]
        if char in "'\"`":
            end = index + 1
            while end < len(js) and js[end] != char:
                end += 2 if js[end] == "\\" else 1
            literal = js[index : end + 1]
            pieces.extend((("code", js[code_start:index]), ("string", literal)))
            index = code_start = end + 1
            continue
        if js.startswith("//", index):
            end = js.find("\n", index)
            end = len(js) if end < 0 else end
            pieces.extend((("code", js[code_start:index]), ("comment", "\n")))
            index = code_start = end
            continue
        if js.startswith("/*", index):
            end = js.find("*/", index + 2)
            end = len(js) if end < 0 else end + 2
            pieces.extend((("code", js[code_start:index]), ("comment", " ")))
            index = code_start = end
            continue
        index += 1
    pieces.append(("code", js[code_start:]))
    return pieces


def minify_js(js: str) -> str:
    """Remove comments and squeeze whitespace outside string literals.

    Line breaks are kept so automatic semicolon insertion still applies.
    Regular-expression literals are not recognised, so quotes or ``//``
    inside one are misread.
    """
    merged: list[tuple[str, str]] = []
    for kind, text in _js_tokens(js):
        if kind != "string" and merged and merged[-1][0] == "code":
            merged[-1] = ("code", merged[-1][1] + text)
        else:
            merged.append(("code" if kind == "comment" else kind, text))
    return "".join(
        _squeeze(text) if kind == "code" else text for kind, text in merged
    ).strip()


class Minifier:
    """Minify final page documents."""

    def minify_css(self, css: str) -> str:
        return minify_css(css)

    def minify_js(self, js: str) -> str:
        return minify_js(js)

    def minify_html(self, html: str) -> str:
        """Return ``html`` with comments and insignificant whitespace removed.

        ``<pre>`` and ``<textarea>`` contents are kept byte-for-byte, and
        ``<script>`` bodies are never subjected to HTML whitespace collapsing.
        """
        vault = _Vault(html)
        html = VERBATIM_PATTERN.sub(lambda match: vault.park(match.group(0)), html)

        def script(match: re.Match[str]) -> str:
            opening, attributes, body, closing = match.groups()
            if _script_type(attributes) in JAVASCRIPT_TYPES and body.strip():
                body = minify_js(body)
            return vault.park(f"{opening}{body}{closing}")

        def style(match: re.Match[str]) -> str:
            opening, body, closing = match.groups()
            return vault.park(f"{opening}{minify_css(body)}{closing}")

        html = SCRIPT_PATTERN.sub(script, html)
        html = STYLE_PATTERN.sub(style, html)
        html = COMMENT_PATTERN.sub("", html)
        html = re.sub(r">\s+<", "><", html)
        html = re.sub(r"\s+", " ", html).strip()
        return vault.restore(html)


def minify_html(html: str) -> str:
    """Module-level shortcut for :meth:`Minifier.minify_html`."""
    return Minifier().minify_html(html)


__all__ = ["Minifier", "minify_css", "minify_html", "minify_js"]
