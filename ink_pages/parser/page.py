"""Parse page documents into :class:`ParsedPage` aggregates."""

from __future__ import annotations

import typing as typ

from .._constants import STYLES_VARIABLE
from .document import (
    derive_slug,
    extract_page_config,
    extract_script_setup,
    extract_translation_keys,
    page_id,
    read_document,
    route_params,
)
from .materializer import VariableMaterializer
from .models import DocumentKind, PageVariable, ParsedPage

if typ.TYPE_CHECKING:
    from pathlib import Path

    from ..config import InkConfig


def _split_styles(
    variables: list[PageVariable],
) -> tuple[list[PageVariable], list[typ.Any]]:
    """Separate the reserved ``styles`` variable from client bindings."""
    kept: list[PageVariable] = []
    fragments: list[typ.Any] = []
    for variable in variables:
        if variable.name != STYLES_VARIABLE:
            kept.append(variable)
        elif isinstance(variable.value, list):
            fragments = variable.value
        elif variable.value is not None:
            fragments = [variable.value]
    return kept, fragments


class PageParser:
    """Read a page file and assemble everything later stages need from it."""

    def __init__(
        self, config: InkConfig, *, materializer: VariableMaterializer | None = None
    ) -> None:
        self.config = config
        self.materializer = materializer or VariableMaterializer()

    def parse(self, path: Path) -> ParsedPage:
        """Parse the page at ``path``.

        Parameters
        ----------
        path : Path
            Page document located under the configured pages root.

        Returns
        -------
        ParsedPage
            A fresh aggregate; nothing is cached between calls.

        Raises
        ------
        DocumentReadError
            If the page cannot be read.
        VariableMaterializationError
            If the config block's declarations fail to evaluate.
        NonSerializableVariableError
            If a declared variable cannot be reduced to plain data.
        """
        document = read_document(path, DocumentKind.PAGE)
        variables = self.materializer.materialize(
            document.config_block, path=path, line_offset=document.config_offset
        )
        variables, style_fragments = _split_styles(variables)
        body, js = extract_script_setup(document.body)
        slug = derive_slug(path, self.config.pages_root, self.config.template_suffixes)
        keys = extract_translation_keys(document.config_block)
        keys |= extract_translation_keys(document.body)
        return ParsedPage(
            id=page_id(path),
            slug=slug,
            file_path=path,
            config=extract_page_config(
                document.config_block, default_ttl=self.config.cache.ttl
            ),
            html=body,
            js=js,
            route_params=route_params(slug),
            translation_keys=frozenset(keys),
            variables=variables,
            style_fragments=style_fragments,
        )


__all__ = ["PageParser"]
