"""Unit tests for component discovery and expansion."""

from __future__ import annotations

import logging
import typing as typ

import pytest
from bs4 import BeautifulSoup

from ink_pages.components import (
    ComponentRegistry,
    ComponentResolver,
    ExpansionContext,
    PropKind,
    candidate_names,
    find_references,
    parse_attributes,
    referenced_names,
)
from ink_pages.components.elements import merge_attributes, wrap
from ink_pages.components.resolver import TOKEN_PREFIX
from ink_pages.errors import ComponentNotFoundError

if typ.TYPE_CHECKING:
    from conftest import ProjectBuilder

CARD = (
    "<?ink\nheading = 'Card'\n?>\n"
    '<div class="card"><h2>{{ $heading }}</h2>{{ $slot }}</div>\n'
)


def _registry(project: ProjectBuilder) -> ComponentRegistry:
    config = project.config()
    return ComponentRegistry(config.components_root, config.template_suffixes)


def _expand(
    project: ProjectBuilder,
    html: str,
    values: dict[str, typ.Any] | None = None,
) -> tuple[str, set[str]]:
    keys: set[str] = set()
    resolver = ComponentResolver(_registry(project))
    context = ExpansionContext(values=values or {}, parent_id="page-test")
    return resolver.expand(html, context, keys), keys


def test_candidate_names_cover_every_spelling() -> None:
    assert candidate_names("ui::button") == ["ui::button", "ui.button"]
    assert candidate_names("card") == ["card"]
    assert candidate_names("ui::my-badge") == [
        "ui::my-badge",
        "ui.my-badge",
        "ui.my.badge",
    ]


def test_registry_resolves_alternate_spellings(project: ProjectBuilder) -> None:
    project.component("forms/input", "<input>")
    registry = _registry(project)
    assert registry.names() == ["forms.input"]
    assert registry.resolve("forms-input").name == "forms.input"
    assert registry.resolve("forms::input").name == "forms.input"


def test_registry_rescans_on_miss(project: ProjectBuilder) -> None:
    registry = _registry(project)
    assert registry.names() == []
    project.component("late", "<p>late</p>")
    assert registry.find("late") is None
    assert registry.resolve("late").name == "late"


def test_registry_reports_missing_component(project: ProjectBuilder) -> None:
    project.component("card", CARD)
    with pytest.raises(ComponentNotFoundError) as info:
        _registry(project).resolve("ui::missing")
    assert info.value.candidates == ["ui::missing", "ui.missing"]
    assert info.value.available == ["card"]


def test_find_references_in_source_order() -> None:
    html = "<x-a>one <x-inner /></x-a> @include('b') <x-c /> @include"
    references = find_references(html)
    assert [reference.name for reference in references] == ["a", "b", "c"]
    assert references[0].slot == "one <x-inner />"
    assert referenced_names(html) == {"a", "inner", "b", "c"}


def test_parse_attributes_kinds() -> None:
    attributes = parse_attributes(""" :user="users[0]" title='Hi' compact lazy""")
    assert attributes.lazy is True
    assert {name: spec.kind for name, spec in attributes.props.items()} == {
        "user": PropKind.BOUND,
        "title": PropKind.STATIC,
        "compact": PropKind.BOOLEAN,
    }
    assert attributes.props["title"].value == "Hi"


def test_parse_attributes_keeps_namespaced_names_whole() -> None:
    attributes = parse_attributes(' x-on:click="go()" :xlink:href="url"')
    assert attributes.props["x-on:click"].kind is PropKind.STATIC
    assert attributes.props["x-on:click"].value == "go()"
    assert attributes.props["xlink:href"].kind is PropKind.BOUND
    assert "click" not in attributes.props


def test_wrap_merges_into_single_root_or_adds_div() -> None:
    assert wrap('<input type="text">', {"id": "c1"}) == '<input type="text" id="c1">'
    assert wrap("<p>a</p><p>b</p>", {"id": "c1"}) == (
        '<div id="c1"><p>a</p><p>b</p></div>'
    )
    assert wrap("<br/>", {"x-data": '{ a: "<b>" }'}) == (
        '<br x-data="{ a: &quot;&lt;b&gt;&quot; }" />'
    )
    assert merge_attributes(' id="old" class="a"', {"id": "new"}) == (
        ' class="a" id="new"'
    )


@pytest.mark.parametrize(
    ("existing", "expected"),
    [
        (' x-data class="card"', ' class="card" id="c1" x-data="{}"'),
        (" id=old class='a'", " class='a' id=\"c1\" x-data=\"{}\""),
        (
            ' class="x-data id" X-DATA="{ a: 1 }"',
            ' class="x-data id" id="c1" x-data="{}"',
        ),
    ],
)
def test_merge_attributes_replaces_every_duplicate_form(
    existing: str, expected: str
) -> None:
    assert merge_attributes(existing, {"id": "c1", "x-data": "{}"}) == expected


def test_wrap_replaces_bare_x_data_on_root() -> None:
    html = wrap('<div x-data class="card"><p>a</p></div>', {"x-data": "{ n: 1 }"})
    soup = BeautifulSoup(html, "html.parser")
    assert soup.div["x-data"] == "{ n: 1 }"
    assert html.count("x-data") == 1


def test_component_with_slot_and_state(project: ProjectBuilder) -> None:
    project.component("card", CARD)
    html, _ = _expand(project, "<main><x-card><p>Inside</p></x-card></main>")
    soup = BeautifulSoup(html, "html.parser")
    card = soup.select_one("main > div.card")
    assert card is not None
    assert card["id"].startswith("cmp-")
    state = card["x-data"]
    assert f"componentId: '{card['id']}'" in state
    assert "props: {}" in state
    binding = card.h2.span["x-text"]
    assert binding.startswith("var_heading_")
    assert f'{binding}: "Card"' in state
    assert card.p.get_text() == "Inside"


def test_bound_and_static_props(project: ProjectBuilder) -> None:
    project.component("badge", '<span class="badge">{{ $label }}</span>')
    html, _ = _expand(
        project,
        """<x-badge :label="$user['name']" tone="info" />""",
        {"user": {"name": "Ann"}},
    )
    soup = BeautifulSoup(html, "html.parser")
    badge = soup.select_one("span.badge")
    assert badge is not None
    assert 'props: {"label": "Ann", "tone": "info"}' in badge["x-data"]
    assert badge.span["x-text"] == "props.label"


def test_failed_prop_expression_becomes_null(project: ProjectBuilder) -> None:
    project.component("badge", "<b>{{ $label }}</b>")
    html, _ = _expand(project, '<x-badge :label="missing.name" />')
    soup = BeautifulSoup(html, "html.parser")
    assert 'props: {"label": null}' in soup.b["x-data"]


def test_missing_component_leaves_comment(
    project: ProjectBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    project.component("card", CARD)
    with caplog.at_level(logging.WARNING):
        html, _ = _expand(project, "<x-missing />")
    assert html.startswith("<!-- Component not found. Tried: ['missing']")
    assert "Available: [card]" in html
    assert "Component 'missing' not found" in caplog.text


def test_namespaced_reference(project: ProjectBuilder) -> None:
    project.component("ui/button", "<button>{{ $slot }}</button>")
    html, _ = _expand(project, "<x-ui::button>Go</x-ui::button>")
    soup = BeautifulSoup(html, "html.parser")
    assert soup.button.get_text() == "Go"
    assert soup.button["id"].startswith("cmp-")


def test_namespaced_hyphenated_reference(project: ProjectBuilder) -> None:
    project.component("ui/my/badge", "<span>{{ $slot }}</span>")
    html, _ = _expand(project, "<x-ui::my-badge>New</x-ui::my-badge>")
    soup = BeautifulSoup(html, "html.parser")
    assert soup.span.get_text() == "New"
    assert "Component not found" not in html


def test_include_directive_passes_props(project: ProjectBuilder) -> None:
    project.component("greeting", "<p>{{ $heading }}</p>")
    html, _ = _expand(project, "@include('greeting', {'heading': 'Hi'})")
    soup = BeautifulSoup(html, "html.parser")
    assert 'props: {"heading": "Hi"}' in soup.p["x-data"]
    assert soup.p.span["x-text"] == "props.heading"


def test_nested_components_expand_recursively(project: ProjectBuilder) -> None:
    project.component("badge", "<i>{{ $slot }}</i>")
    project.component("card", CARD)
    html, _ = _expand(project, "<x-card><x-badge>new</x-badge></x-card>")
    soup = BeautifulSoup(html, "html.parser")
    badge = soup.select_one("div.card i")
    assert badge is not None
    assert badge.get_text() == "new"
    assert badge["id"] != soup.div["id"]
    assert "<x-" not in html


def test_self_reference_stops_at_depth_limit(
    project: ProjectBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    project.component("loop", "<div><x-loop /></div>")
    with caplog.at_level(logging.WARNING):
        html, _ = _expand(project, "<x-loop />")
    assert html.count("Component depth limit (10) reached: loop") == 1
    assert html.count('x-data="') == 10
    assert "nested deeper than 10 levels" in caplog.text


def test_lazy_component_defers_body(project: ProjectBuilder) -> None:
    project.component("card", CARD)
    html, _ = _expand(project, "<x-card lazy>Body</x-card>")
    soup = BeautifulSoup(html, "html.parser")
    wrapper = soup.div
    assert wrapper["data-lazy-component"] == "true"
    assert "loaded: false, content: ''" in wrapper["x-data"]
    assert "atob(" in wrapper["x-intersect.margin.50px"]
    assert wrapper.template["x-if"] == "loaded"
    assert "<h2>" not in html


def test_component_translation_keys_are_collected(project: ProjectBuilder) -> None:
    project.component("footer", "<footer>{{ __('footer.copy') }}</footer>")
    html, keys = _expand(project, "<x-footer />")
    assert keys == {"footer.copy"}
    assert "ink.trans('footer.copy')" in html


def test_deferred_expansion_parks_markup(project: ProjectBuilder) -> None:
    project.component("card", CARD)
    resolver = ComponentResolver(_registry(project))
    parked, parking = resolver.expand_deferred(
        "<x-card />", ExpansionContext(), set()
    )
    assert parked.startswith(TOKEN_PREFIX)
    assert parking.restore(parked).startswith('<div class="card"')
