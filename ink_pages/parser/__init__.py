"""Source-document parsing and variable materialization.

Pages, components, and layouts are read into :class:`SourceDocument` values;
page config blocks are turned into :class:`PageConfig` settings and typed
:class:`PageVariable` bindings evaluated by a restricted interpreter. The
primary entry point for pages is :class:`PageParser`.

Examples
--------
>>> from pathlib import Path
>>> from ink_pages.config import InkConfig
>>> from ink_pages.parser import PageParser
>>> parser = PageParser(InkConfig(project_root=Path("site")))
>>> page = parser.parse(Path("site/resources/ink/pages/index.ink"))  # doctest: +SKIP
>>> page.slug  # doctest: +SKIP
'/index'
"""

from .document import (
    derive_slug,
    extract_page_config,
    extract_script_setup,
    extract_translation_keys,
    page_id,
    read_document,
    route_params,
    split_config_block,
)
from .materializer import (
    VariableMaterializer,
    binding_name_for,
    classify_value,
    evaluate_expression,
    normalize_value,
)
from .models import (
    DocumentKind,
    PageConfig,
    PageVariable,
    ParsedPage,
    SeoConfig,
    SourceDocument,
)
from .page import PageParser

__all__ = [
    "DocumentKind",
    "PageConfig",
    "PageParser",
    "PageVariable",
    "ParsedPage",
    "SeoConfig",
    "SourceDocument",
    "VariableMaterializer",
    "binding_name_for",
    "classify_value",
    "derive_slug",
    "evaluate_expression",
    "extract_page_config",
    "extract_script_setup",
    "extract_translation_keys",
    "normalize_value",
    "page_id",
    "read_document",
    "route_params",
    "split_config_block",
]
