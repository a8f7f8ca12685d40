"""Unit tests for rewriting variable references to client bindings."""

from __future__ import annotations

from ink_pages.compiler import bindings

COUNT = {"count": "var_count_1a2b3c4d"}


def test_sigils_and_reactive_attributes_are_rewritten() -> None:
    html = bindings.rewrite('<p x-text="count + 1">$count</p>', COUNT)
    assert html == '<p x-text="var_count_1a2b3c4d + 1">var_count_1a2b3c4d</p>'


def test_plain_text_without_sigil_is_untouched() -> None:
    assert bindings.rewrite("<p>count</p>", COUNT) == "<p>count</p>"


def test_string_literals_are_preserved() -> None:
    html = bindings.rewrite("<p x-text=\"'count' + count\"></p>", COUNT)
    assert html == "<p x-text=\"'count' + var_count_1a2b3c4d\"></p>"


def test_member_access_and_object_keys_are_skipped() -> None:
    mapping = {"user": "var_user_00000000", **COUNT}
    html = bindings.rewrite(
        '<div x-data="{ count: count }" :title="user.count"></div>', mapping
    )
    assert 'x-data="{ count: var_count_1a2b3c4d }"' in html
    assert ':title="var_user_00000000.count"' in html


def test_event_handlers_are_rewritten() -> None:
    html = bindings.rewrite('<button @click="count++">+</button>', COUNT)
    assert html == '<button @click="var_count_1a2b3c4d++">+</button>'


def test_route_parameters_use_request_accessor() -> None:
    mapping = bindings.page_bindings({}, ["slug"])
    html = bindings.rewrite("<a :href=\"'/p/' + slug\">$slug</a>", mapping)
    assert html == (
        "<a :href=\"'/p/' + ink.request().slug\">ink.request().slug</a>"
    )


def test_quote_entities_are_encoded_again() -> None:
    html = bindings.rewrite(
        '<p x-text="flag ? &quot;on&quot; : count"></p>', COUNT
    )
    assert html == (
        '<p x-text="flag ? &quot;on&quot; : var_count_1a2b3c4d"></p>'
    )


def test_longest_names_win() -> None:
    assert bindings.rewrite("$ab $a", {"a": "A", "ab": "AB"}) == "AB A"


def test_variables_take_precedence_over_route_parameters() -> None:
    assert bindings.page_bindings({"slug": "var_slug_1"}, ["slug", "id"]) == {
        "slug": "var_slug_1",
        "id": "ink.request().id",
    }


def test_empty_bindings_return_markup_unchanged() -> None:
    html = '<p x-text="count">$count</p>'
    assert bindings.rewrite(html, {}) == html
