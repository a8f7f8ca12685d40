"""Layout resolution, head extraction, SEO rendering and document assembly.

The entry point is :class:`LayoutAssembler`, which turns a compiled page body
into the final HTML document written by the build.
"""

from .assembler import AssembledPage, LayoutAssembler, insert_page_marker
from .head import (
    HeadElements,
    ScopedStyle,
    extract_head_elements,
    render_scoped_styles,
    wrap_page,
)
from .resolver import LayoutResolver, layout_name, normalize_layout_name
from .seo import SeoRenderer

__all__ = [
    "AssembledPage",
    "HeadElements",
    "LayoutAssembler",
    "LayoutResolver",
    "ScopedStyle",
    "SeoRenderer",
    "extract_head_elements",
    "insert_page_marker",
    "layout_name",
    "normalize_layout_name",
    "render_scoped_styles",
    "wrap_page",
]
