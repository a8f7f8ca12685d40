"""Pull head elements out of page markup and wrap the page root.

Pages author ``<title>``, ``<meta>`` and ``<style>`` elements inline. They
are lifted out of the body so the document shell can place them in
``<head>``; ``<style scoped>`` blocks instead stay with the page, rewritten
so their selectors only match inside the page root.

Examples
--------
>>> head = extract_head_elements("<title>Home</title><p>Hi</p>", "page-1")
>>> head.title, head.body
('Home', '<p>Hi</p>')
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from ..compiler.styles import scope_css

if typ.TYPE_CHECKING:
    import collections.abc as cabc

TITLE_PATTERN = re.compile(
    r"<title\b[^>]*>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL
)
META_PATTERN = re.compile(r"<meta\b[^>]*>", re.IGNORECASE)
STYLE_PATTERN = re.compile(
    r"<style\b([^>]*)>(.*?)</style\s*>", re.IGNORECASE | re.DOTALL
)
SCOPED_PATTERN = re.compile(
    r"""\s*\bscoped\b(?:\s*=\s*(?:"[^"]*"|'[^']*'))?""", re.IGNORECASE
)


@dc.dataclass(frozen=True, slots=True)
class ScopedStyle:
    """A ``<style scoped>`` block, its CSS already prefixed with the page id."""

    attributes: str
    css: str


@dc.dataclass(frozen=True, slots=True)
class HeadElements:
    """Head elements lifted out of a page body, plus what remains."""

    title: str | None
    meta: list[str]
    styles: list[str]
    scoped_styles: list[ScopedStyle]
    body: str


def extract_head_elements(html: str, page_id: str) -> HeadElements:
    """Split ``html`` into head elements and the remaining body.

    Only the first ``<title>`` is taken. Every ``<meta>`` tag and ``<style>``
    block is lifted; styles flagged ``scoped`` are rewritten under
    ``#<page_id>`` and kept apart for re-insertion by :func:`wrap_page`.
    """
    title: str | None = None
    if match := TITLE_PATTERN.search(html):
        title = match.group(1).strip()
        html = html[: match.start()] + html[match.end() :]
    meta = META_PATTERN.findall(html)
    html = META_PATTERN.sub("", html)
    styles: list[str] = []
    scoped: list[ScopedStyle] = []
    for style in STYLE_PATTERN.finditer(html):
        attributes, css = style.groups()
        if SCOPED_PATTERN.search(attributes):
            cleaned = SCOPED_PATTERN.sub("", attributes).strip()
            scoped.append(ScopedStyle(cleaned, scope_css(css.strip(), page_id)))
        else:
            styles.append(style.group(0))
    html = STYLE_PATTERN.sub("", html)
    return HeadElements(title, meta, styles, scoped, html.strip())


def render_scoped_styles(styles: cabc.Iterable[ScopedStyle], page_id: str) -> str:
    """Render scoped styles as ``<style data-page-id>`` blocks.

    Examples
    --------
    >>> head = extract_head_elements(
    ...     "<style scoped>.a, .b { color: red }</style>", "p1"
    ... )
    >>> render_scoped_styles(head.scoped_styles, "p1")
    '<style data-page-id="p1">#p1 .a, #p1 .b { color: red }</style>'
    """
    rendered = []
    for style in styles:
        attributes = f" {style.attributes}" if style.attributes else ""
        rendered.append(
            f'<style data-page-id="{page_id}"{attributes}>{style.css}</style>'
        )
    return "\n".join(rendered)


def wrap_page(
    body: str, page_id: str, scoped_styles: cabc.Iterable[ScopedStyle] = ()
) -> str:
    """Wrap ``body`` in the page root element that initializes ``pageData()``."""
    content = body
    if styles := render_scoped_styles(scoped_styles, page_id):
        content = f"{content}\n{styles}"
    return (
        f'<div id="{page_id}" x-data="pageData()" x-init="init()">\n'
        f"{content}\n"
        "</div>"
    )


__all__ = [
    "HeadElements",
    "ScopedStyle",
    "extract_head_elements",
    "render_scoped_styles",
    "wrap_page",
]
