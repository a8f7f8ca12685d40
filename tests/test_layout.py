"""Unit tests for layout resolution and document assembly."""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from ink_pages.errors import LayoutNotFoundError, LayoutRenderError
from ink_pages.layout import (
    LayoutAssembler,
    LayoutResolver,
    ScopedStyle,
    SeoRenderer,
    extract_head_elements,
    insert_page_marker,
    layout_name,
    wrap_page,
)
from ink_pages.parser.models import PageConfig, ParsedPage, SeoConfig

if typ.TYPE_CHECKING:
    from conftest import ProjectBuilder

APP_LAYOUT = (
    "<header>{{ title }}</header>\n"
    "<main>@yield('page')</main>\n"
    "<footer>{{ __('footer.copy') }}</footer>\n"
)


def _page(config: PageConfig | None = None) -> ParsedPage:
    return ParsedPage(
        id="page-1",
        slug="/",
        file_path=Path("index.ink"),
        config=config or PageConfig(),
        html="",
    )


def _assemble(
    project: ProjectBuilder,
    page: ParsedPage,
    body: str = "<h1>Hi</h1>",
    **overrides: typ.Any,
) -> tuple[typ.Any, BeautifulSoup]:
    assembler = LayoutAssembler(project.config(**overrides))
    result = assembler.assemble(page, body, js="function pageData() {}", css="h1{}")
    return result, BeautifulSoup(result.html, "html.parser")


def test_resolver_accepts_dotted_and_slashed_names(project: ProjectBuilder) -> None:
    path = project.layout("admin/main", "<main></main>")
    config = project.config()
    resolver = LayoutResolver(config.layouts_root, config.template_suffixes)
    assert resolver.resolve("admin.main") == path
    assert resolver.resolve("/admin/main") == path
    with pytest.raises(LayoutNotFoundError) as info:
        resolver.resolve("missing")
    assert len(info.value.searched) == len(config.template_suffixes)


def test_layout_name_outside_root() -> None:
    assert layout_name(Path("elsewhere/app.ink"), Path("layouts"), (".ink",)) is None


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        (
            "<main>{% block page %}default{% endblock %}</main>",
            ("<main>{{ __ink_page_content }}</main>", True),
        ),
        (
            '<main>@yield("page")</main>',
            ("<main>{{ __ink_page_content }}</main>", True),
        ),
        ("<main></main>", ("<main></main>", False)),
    ],
)
def test_insert_page_marker(source: str, expected: tuple[str, bool]) -> None:
    assert insert_page_marker(source) == expected


def test_extract_head_elements() -> None:
    head = extract_head_elements(
        "<title> A </title><meta name='x' content='y'><style>.a{}</style>"
        "<style scoped>.b { c: d }</style><p>x</p>",
        "pg",
    )
    assert head.title == "A"
    assert head.meta == ["<meta name='x' content='y'>"]
    assert head.styles == ["<style>.a{}</style>"]
    assert head.scoped_styles == [ScopedStyle("", "#pg .b { c: d }")]
    assert head.body == "<p>x</p>"


def test_wrap_page_initializes_page_state() -> None:
    assert wrap_page("<p>x</p>", "pg") == (
        '<div id="pg" x-data="pageData()" x-init="init()">\n<p>x</p>\n</div>'
    )


def test_seo_title_precedence() -> None:
    renderer = SeoRenderer("App")
    assert renderer.title(PageConfig()) == "App"
    assert renderer.title(PageConfig(), "Body") == "Body"
    assert renderer.title(PageConfig(title="Config"), "Body") == "Config"
    seo = SeoConfig(title="Seo")
    assert renderer.title(PageConfig(title="Config", seo=seo), "Body") == "Seo"


def test_seo_meta_tags_and_structured_data() -> None:
    renderer = SeoRenderer("App")
    seo = SeoConfig(
        title="Home", description="Fish & <chips>", canonical="https://x.test/"
    )
    tags = str(renderer.meta_tags(seo))
    assert '<meta name="description" content="Fish &amp; &lt;chips&gt;">' in tags
    assert '<meta name="robots" content="index, follow">' in tags
    assert '<link rel="canonical" href="https://x.test/">' in tags
    assert '<meta property="og:title" content="Home">' in tags
    assert '<meta name="twitter:card" content="summary_large_image">' in tags
    assert "keywords" not in tags
    data = str(renderer.structured_data(seo))
    assert '"@type": "WebPage"' in data
    assert '"url": "https://x.test/"' in data
    assert str(renderer.meta_tags(None)) == ""


def test_explicit_open_graph_map_replaces_defaults() -> None:
    tags = str(SeoRenderer("App").meta_tags(SeoConfig(title="T", og={"type": "x"})))
    assert '<meta property="og:type" content="x">' in tags
    assert "og:title" not in tags


def test_assemble_with_layout(project: ProjectBuilder) -> None:
    path = project.layout("app", APP_LAYOUT)
    result, soup = _assemble(
        project,
        _page(PageConfig(layout="app", title="Shop")),
        "<title>Ignored</title><h1>Hi</h1>",
    )
    assert result.layout == path
    assert result.translation_keys == frozenset({"footer.copy"})
    assert soup.html["lang"] == "en"
    assert soup.title.string == "Shop"
    assert soup.header.get_text() == "Shop"
    root = soup.select_one("main > div#page-1")
    assert root is not None
    assert root["x-data"] == "pageData()"
    assert root.h1.get_text() == "Hi"
    assert soup.footer.span["x-text"] == "ink.trans('footer.copy')"
    assert soup.footer.span.get_text() == "footer.copy"
    assert soup.head.style.string == "h1{}"
    sources = [script.get("src") for script in soup.find_all("script")]
    assert "/build/ink-lang.js" in sources
    assert "function pageData() {}" in soup.body.find_all("script")[-1].string


def test_assemble_without_layout(project: ProjectBuilder) -> None:
    result, soup = _assemble(project, _page())
    assert result.layout is None
    assert soup.select_one("body > div#page-1 > h1") is not None


def test_default_layout_applies(project: ProjectBuilder) -> None:
    project.layout("app", APP_LAYOUT)
    result, soup = _assemble(project, _page(), default_layout="app")
    assert result.layout is not None
    assert soup.select_one("main > div#page-1") is not None


def test_missing_layout_raises(project: ProjectBuilder) -> None:
    with pytest.raises(LayoutNotFoundError):
        _assemble(project, _page(PageConfig(layout="nope")))


def test_legacy_slot_variable(project: ProjectBuilder) -> None:
    project.layout("old", "<section>{{ slot }}</section>")
    _, soup = _assemble(project, _page(PageConfig(layout="old")))
    assert soup.select_one("section > div#page-1") is not None


def test_layout_without_marker_warns(
    project: ProjectBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    project.layout("bare", "<p>static</p>")
    with caplog.at_level(logging.WARNING):
        _, soup = _assemble(project, _page(PageConfig(layout="bare")))
    assert "layout 'bare' has no page marker or slot" in caplog.text
    assert soup.select_one("#page-1") is None


def test_broken_layout_raises_render_error(project: ProjectBuilder) -> None:
    project.layout("broken", "{% if %}@yield('page')")
    with pytest.raises(LayoutRenderError, match="layout 'broken'"):
        _assemble(project, _page(PageConfig(layout="broken")))
