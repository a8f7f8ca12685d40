"""Run one page document through every compiler stage.

The stages run in a fixed order:

1. parse the document and materialize its variables;
2. expand component references, parking the compiled markup;
3. rewrite localization calls, translate directives and rewrite variable
   references to their client bindings in the page's own markup;
4. restore the parked component markup;
5. compile the page script and stylesheet;
6. render the layout and document shell;
7. minify.

Component markup is compiled in its own scope by the resolver, so parking it
keeps the page's stages from rewriting it a second time.
"""

from __future__ import annotations

import logging
import typing as typ

from ..compiler import bindings, localization
from ..compiler.directives import DirectiveTranslator
from ..compiler.minifier import Minifier
from ..compiler.scripts import ScriptCompiler
from ..compiler.styles import StyleCompiler
from ..components.registry import ComponentRegistry
from ..components.resolver import ComponentResolver, ExpansionContext
from ..layout.assembler import LayoutAssembler
from ..parser.materializer import VariableMaterializer
from ..parser.page import PageParser
from .accumulator import CompiledPage, RouteEntry, RouteRegistration

if typ.TYPE_CHECKING:
    from pathlib import Path

    from ..config import InkConfig

logger = logging.getLogger(__name__)


class PageCompiler:
    """Compile page files into finished documents.

    Parameters
    ----------
    config : InkConfig
        Project configuration.
    registry : ComponentRegistry, optional
        Component lookup shared across pages; a registry over the configured
        components root is created when omitted.
    """

    def __init__(
        self, config: InkConfig, *, registry: ComponentRegistry | None = None
    ) -> None:
        self.config = config
        self.registry = registry or ComponentRegistry(
            config.components_root, config.template_suffixes
        )
        materializer = VariableMaterializer()
        self.translator = DirectiveTranslator()
        self.parser = PageParser(config, materializer=materializer)
        self.resolver = ComponentResolver(
            self.registry, materializer=materializer, translator=self.translator
        )
        self.scripts = ScriptCompiler(login_route=config.auth.login_route)
        self.styles = StyleCompiler()
        self.assembler = LayoutAssembler(config)
        self.minifier = Minifier()

    def compile(self, path: Path) -> CompiledPage:
        """Compile the page at ``path``.

        Raises
        ------
        InkError
            Any fatal stage error for this page: unreadable document, failed
            variable evaluation, non-serializable value, missing or broken
            layout.
        """
        page = self.parser.parse(path)
        keys = set(page.translation_keys)
        page_scope = bindings.page_bindings(page.bindings, page.route_params)
        context = ExpansionContext(
            values=page.values, bindings=page_scope, parent_id=page.id, depth=0
        )

        body, parking = self.resolver.expand_deferred(page.html, context, keys)
        body = localization.transform(body)
        body = self.translator.translate(body)
        body = bindings.rewrite(body, page_scope)
        body = parking.restore(body)

        js = self.scripts.page_data(page, self.scripts.compile(page))
        css = self.styles.compile(page)
        assembled = self.assembler.assemble(page, body, js=js, css=css)
        keys |= assembled.translation_keys
        html = self.minifier.minify_html(assembled.html)
        logger.debug("compiled %s as %s", path, page.slug)

        return CompiledPage(
            source=path,
            slug=page.slug,
            html=html,
            route=RouteEntry.from_slug(page.slug),
            registration=RouteRegistration(
                page.slug,
                tuple(page.config.middleware or ()),
                page.config.requires_auth,
            ),
            cache_ttl=page.config.cache_ttl,
            translation_keys=frozenset(keys),
        )


__all__ = ["PageCompiler"]
