"""Assemble compiled pages into complete HTML documents.

:class:`LayoutAssembler` lifts head elements out of the compiled body, wraps
the rest in the page root element, renders the page's layout around it with
Jinja, and finally renders the packaged ``document.jinja`` shell that carries
the head, the page assets and the client runtime bootstrap.

Layouts mark where the page goes with ``{% block page %}{% endblock %}`` or
``@yield('page')``; older layouts print a ``slot`` variable instead.
Localization calls in layout source are swapped for opaque tokens for the
duration of the Jinja pass and turned into runtime bindings afterwards.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ
from pathlib import Path

from jinja2 import (
    Environment,
    FileSystemLoader,
    TemplateError,
    meta,
    select_autoescape,
)
from markupsafe import Markup

from .._constants import LANG_BUNDLE
from ..compiler import localization
from ..compiler.scripts import script_json
from ..errors import DocumentReadError, LayoutRenderError
from ..parser.document import extract_translation_keys
from .head import extract_head_elements, wrap_page
from .resolver import LayoutResolver
from .seo import SeoRenderer

if typ.TYPE_CHECKING:
    from ..config import InkConfig
    from ..parser.models import ParsedPage

logger = logging.getLogger(__name__)

PAGE_CONTENT_VARIABLE = "__ink_page_content"
LEGACY_SLOT_VARIABLE = "slot"
SHELL_TEMPLATE = "document.jinja"
BLOCK_MARKER_PATTERN = re.compile(
    r"\{%-?\s*block\s+page\s*-?%\}.*?\{%-?\s*endblock(?:\s+page)?\s*-?%\}",
    re.DOTALL,
)
YIELD_MARKER_PATTERN = re.compile(r"""@yield\(\s*(['"])page\1\s*(?:,[^)]*)?\)""")


@dc.dataclass(frozen=True, slots=True)
class AssembledPage:
    """A finished document and the layout it was rendered with."""

    html: str
    layout: Path | None
    translation_keys: frozenset[str]


def insert_page_marker(source: str) -> tuple[str, bool]:
    """Replace the first page marker in layout ``source`` with the content slot.

    Returns
    -------
    tuple[str, bool]
        The rewritten source and whether a marker was found.

    Examples
    --------
    >>> insert_page_marker("<main>@yield('page')</main>")
    ('<main>{{ __ink_page_content }}</main>', True)
    """
    replacement = f"{{{{ {PAGE_CONTENT_VARIABLE} }}}}"
    for pattern in (BLOCK_MARKER_PATTERN, YIELD_MARKER_PATTERN):
        rewritten, count = pattern.subn(lambda _: replacement, source, count=1)
        if count:
            return rewritten, True
    return source, False


class LayoutAssembler:
    """Render compiled pages through their layout and the document shell.

    Parameters
    ----------
    config : InkConfig
        Project configuration; supplies the layouts root, default layout,
        asset URLs and runtime settings.
    templates_dir : Path, optional
        Directory holding ``document.jinja``. Defaults to the packaged
        ``ink_pages/templates``.
    """

    def __init__(self, config: InkConfig, *, templates_dir: Path | None = None) -> None:
        self.config = config
        self.resolver = LayoutResolver(config.layouts_root, config.template_suffixes)
        self.seo = SeoRenderer(config.name)
        self.templates_dir = templates_dir or Path(__file__).parent.parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(self.templates_dir),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.layout_env = Environment(
            loader=FileSystemLoader(config.layouts_root),
            autoescape=select_autoescape(["html", "xml"], default_for_string=True),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.shell = self.env.get_template(SHELL_TEMPLATE)

    def layout_for(self, page: ParsedPage) -> str | None:
        """Return the layout name ``page`` renders with, if any."""
        return page.config.layout or self.config.default_layout

    def _read_layout(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentReadError(path, str(exc)) from exc

    def render_layout(
        self, source: str, content: str, context: dict[str, typ.Any], *, name: str
    ) -> str:
        """Render layout ``source`` with ``content`` at its insertion point.

        Raises
        ------
        LayoutRenderError
            If Jinja cannot parse or render the layout.
        """
        source, table = localization.extract_placeholders(source)
        source, has_marker = insert_page_marker(source)
        markup = Markup(content)
        variables = {**context, LEGACY_SLOT_VARIABLE: markup}
        try:
            if has_marker:
                variables[PAGE_CONTENT_VARIABLE] = markup
            elif LEGACY_SLOT_VARIABLE not in meta.find_undeclared_variables(
                self.layout_env.parse(source)
            ):
                logger.warning(
                    "layout '%s' has no page marker or slot; page content dropped",
                    name,
                )
            rendered = self.layout_env.from_string(source).render(**variables)
        except TemplateError as exc:
            msg = f"Failed to render layout '{name}': {exc}"
            raise LayoutRenderError(msg) from exc
        return localization.restore_placeholders(rendered, table)

    def assemble(
        self, page: ParsedPage, body: str, *, js: str, css: str
    ) -> AssembledPage:
        """Produce the complete document for ``page``.

        Parameters
        ----------
        page : ParsedPage
            The page being compiled.
        body : str
            Compiled page markup.
        js : str
            The page's ``pageData()`` script.
        css : str
            The page stylesheet.

        Returns
        -------
        AssembledPage
            The document, the layout file used, and translation keys found in
            the layout source.

        Raises
        ------
        LayoutNotFoundError
            If the page's layout cannot be located.
        LayoutRenderError
            If the layout fails to render.
        """
        head = extract_head_elements(body, page.id)
        content = wrap_page(head.body, page.id, head.scoped_styles)
        title = self.seo.title(page.config, head.title)

        layout_path: Path | None = None
        keys: set[str] = set()
        if name := self.layout_for(page):
            layout_path = self.resolver.resolve(name)
            source = self._read_layout(layout_path)
            keys = extract_translation_keys(source)
            content = self.render_layout(
                source,
                content,
                {"title": title, "page": page, "config": page.config},
                name=name,
            )

        locale = self.config.locales[0] if self.config.locales else "en"
        runtime = {
            "api_prefix": self.config.auth.api_prefix,
            "login_route": self.config.auth.login_route,
            "unauthorized_route": self.config.auth.unauthorized_route,
        }
        html = self.shell.render(
            locale=locale,
            default_locale=Markup(script_json(locale)),
            title=title,
            seo_tags=self.seo.meta_tags(page.config.seo),
            structured_data=self.seo.structured_data(page.config.seo),
            head_meta=[Markup(tag) for tag in head.meta],
            head_styles=[Markup(tag) for tag in head.styles],
            page_css=Markup(css),
            page_script=Markup(js),
            runtime_config=Markup(script_json(runtime)),
            lang_bundle=f"{self.config.build_url}/{LANG_BUNDLE}",
            assets=self.config.assets,
            content=Markup(content),
        )
        return AssembledPage(html, layout_path, frozenset(keys))


__all__ = [
    "AssembledPage",
    "LayoutAssembler",
    "insert_page_marker",
]
