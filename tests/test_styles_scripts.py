"""Unit tests for the style, script and minifier stages."""

from __future__ import annotations

from pathlib import Path

import pytest

from ink_pages.compiler import (
    Minifier,
    ScriptCompiler,
    StyleCompiler,
    minify_css,
    minify_html,
    minify_js,
    scope_css,
    script_json,
)
from ink_pages.parser.models import PageConfig, PageVariable, ParsedPage


def _page(**fields: object) -> ParsedPage:
    defaults: dict[str, object] = {
        "id": "page-1",
        "slug": "/",
        "file_path": Path("index.ink"),
        "config": PageConfig(),
        "html": "",
    }
    return ParsedPage(**(defaults | fields))  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("css", "expected"),
    [
        (".a, .b { color: red }", "#p1 .a, #p1 .b { color: red }"),
        (
            "@media (max-width: 600px) { .a { color: red } }",
            "@media (max-width: 600px) { #p1 .a { color: red } }",
        ),
        (
            "@keyframes spin { from { opacity: 0 } to { opacity: 1 } } .x { a: b }",
            "@keyframes spin { from { opacity: 0 } to { opacity: 1 } } "
            "#p1 .x { a: b }",
        ),
        ("a:is(.x, .y) { }", "#p1 a:is(.x, .y) { }"),
        ("/* note */.a { b: c }", "#p1 .a { b: c }"),
        ("color: red", "color: red"),
    ],
)
def test_scope_css(css: str, expected: str) -> None:
    assert scope_css(css, "p1") == expected


def test_scoping_only_adds_the_prefix() -> None:
    css = ".a, .b { color: red }\n@media print { .c { d: e } }"
    assert scope_css(css, "p1").replace("#p1 ", "") == css


def test_style_compiler_handles_fragment_forms() -> None:
    page = _page(
        style_fragments=[
            "p { margin: 0 }",
            {"css": ".a { b: c }", "scoped": True},
            {"css": ".d { e: f }", "scoped": True, "selector": "app"},
            {"css": ".g { h: i }", "scoped": False},
            {"css": "", "scoped": True},
            42,
        ]
    )
    assert StyleCompiler().compile(page) == (
        "p { margin: 0 }\n#page-1 .a { b: c }\n#app .d { e: f }\n.g { h: i }"
    )


def test_script_compiler_rewrites_runtime_calls() -> None:
    page = _page(
        js="const users = @users({ page: 1 });\nalert(__('saved'));",
        route_params=["slug"],
    )
    assert ScriptCompiler().compile(page) == (
        "const request = () => Object.assign({ slug: null }, ink.request());\n"
        "const users = await ink.newReq('users', { page: 1 });\n"
        "alert(ink.trans('saved'));\n"
    )


def test_script_compiler_without_setup_block() -> None:
    assert ScriptCompiler().compile(_page()) == (
        "const request = () => Object.assign({}, ink.request());\n"
    )


def test_page_data_seeds_state_and_auth_guard() -> None:
    page = _page(
        config=PageConfig(auth=True),
        variables=[PageVariable("title", "Shop", "string", "var_title_1")],
    )
    compiler = ScriptCompiler(login_route="/signin")
    script = compiler.page_data(page, compiler.compile(page))
    assert script.startswith("function pageData() {\n")
    assert "        requiresAuth: true,\n" in script
    assert "        middleware: [],\n" in script
    assert '        var_title_1: "Shop",\n' in script
    assert "await ink.is_authenticated()" in script
    assert 'window.location.href = "/signin";' in script
    assert "\n            const request = () =>" in script


def test_script_json_escapes_closing_tags() -> None:
    assert script_json(["</script>", "é"]) == '["<\\/script>", "é"]'


def test_minify_html_collapses_whitespace() -> None:
    assert minify_html("<div>\n  <p> hi </p>\n</div>") == "<div><p> hi </p></div>"


@pytest.mark.parametrize(
    "region",
    ["<pre>  a\n   b</pre>", "<textarea name='t'>\n x  y\n</textarea>"],
)
def test_verbatim_elements_survive(region: str) -> None:
    assert region in minify_html(f"<div>\n  {region}\n</div>")


def test_comments_are_dropped_except_conditional() -> None:
    html = "<p>a</p> <!-- note --> <!--[if IE]><p>ie</p><![endif]-->"
    assert minify_html(html) == "<p>a</p><!--[if IE]><p>ie</p><![endif]-->"


def test_non_javascript_scripts_are_kept_verbatim() -> None:
    html = '<script type="application/ld+json">\n{ "a":  1 }\n</script>'
    assert minify_html(html) == html


def test_inline_scripts_and_styles_are_minified() -> None:
    html = (
        "<script>\n  // hi\n  let a = 'x  y';  \n</script>"
        "<style>\n a { b: c; }\n</style>"
    )
    assert Minifier().minify_html(html) == (
        "<script>let a = 'x  y';</script><style>a{b: c}</style>"
    )


def test_minify_css() -> None:
    assert minify_css("/* c */ a > b , c { x: y; }") == "a>b,c{x: y}"


def test_minify_js_keeps_strings_and_drops_comments() -> None:
    js = 'var s = "a // not comment"; /* block */ f();'
    assert minify_js(js) == 'var s = "a // not comment"; f();'
    assert minify_js("a()\n\n// done\nb()") == "a()\nb()"
