"""Unit tests for translating template directives into Alpine markup."""

from __future__ import annotations

import pytest

from ink_pages.compiler import DirectiveTranslator, normalize_expression


@pytest.fixture
def translator() -> DirectiveTranslator:
    return DirectiveTranslator()


@pytest.mark.parametrize(
    ("expression", "expected"),
    [
        ("$count > 0", "count > 0"),
        ("$user['name']", "user.name"),
        ("a and not b", "a && !b"),
        ("x is None or y == True", "x is null || y == true"),
        ("'and' + $label", "'and' + label"),
        ("item not in items", "item not in items"),
    ],
)
def test_normalize_expression(expression: str, expected: str) -> None:
    assert normalize_expression(expression) == expected


def test_if_else_chain(translator: DirectiveTranslator) -> None:
    html = translator.translate(
        "@if($a)<i>A</i>@elseif($b)<i>B</i>@else<i>C</i>@endif"
    )
    assert html == (
        '<template x-if="a"><i>A</i></template>'
        '<template x-if="!(a) && (b)"><i>B</i></template>'
        '<template x-if="!(a) && !(b)"><i>C</i></template>'
    )


def test_unless(translator: DirectiveTranslator) -> None:
    assert translator.translate("@unless($done)<p>todo</p>@endunless") == (
        '<template x-if="!(done)"><p>todo</p></template>'
    )


def test_foreach_and_for_loops(translator: DirectiveTranslator) -> None:
    assert translator.translate(
        "@foreach($items as $item)<li>{{ $item }}</li>@endforeach"
    ) == (
        '<template x-for="item in items"><li><span x-text="item"></span></li>'
        "</template>"
    )
    assert translator.translate("@foreach($rows as $i => $row)@endforeach") == (
        '<template x-for="(row, i) in rows"></template>'
    )
    assert translator.translate("@for(item, i in items)@endfor") == (
        '<template x-for="(item, i) in items"></template>'
    )


def test_isset_and_empty(translator: DirectiveTranslator) -> None:
    isset = translator.translate("@isset($user)ok@endisset")
    assert isset == (
        "<template x-if=\"typeof user !== 'undefined' && user !== null\">"
        "ok</template>"
    )
    empty = translator.translate("@empty($list)none@endempty")
    assert empty.startswith('<template x-if="!list || (Array.isArray(list)')


def test_switch(translator: DirectiveTranslator) -> None:
    html = translator.translate(
        "@switch($role) @case('admin') A @break @default B @endswitch"
    )
    assert html.startswith('<div x-data="{ switchValue: role }">')
    assert "<template x-if=\"switchValue === 'admin'\"> A </template>" in html
    assert "<template x-if=\"!['admin'].includes(switchValue)\"> B </template>" in html
    assert html.endswith("</div>")


def test_echoes(translator: DirectiveTranslator) -> None:
    assert translator.translate("<b>{{ $name }}</b>{!! $bio !!}") == (
        '<b><span x-text="name"></span></b><span x-html="bio"></span>'
    )


def test_echo_quotes_are_escaped(translator: DirectiveTranslator) -> None:
    assert translator.translate('{{ ok ? "yes" : "no" }}') == (
        '<span x-text="ok ? &quot;yes&quot; : &quot;no&quot;"></span>'
    )


def test_attribute_echoes_become_bindings(translator: DirectiveTranslator) -> None:
    html = translator.translate(
        '<a href="/users/{{ $id }}" title="{{ $name }}" class="link">x</a>'
    )
    assert html == (
        '<a :href="`/users/${id}`" :title="name" class="link">x</a>'
    )


def test_event_shorthand_passes_through(translator: DirectiveTranslator) -> None:
    html = '<button @click="open = !open" x-show="open">Toggle</button>'
    assert translator.translate(html) == html


def test_escapes(translator: DirectiveTranslator) -> None:
    assert translator.translate("@@if and @{{ raw }}") == "@if and {{ raw }}"


def test_server_blocks_are_removed(translator: DirectiveTranslator) -> None:
    html = translator.translate("<p>a</p>@python\nsecret = 1\n@endpython<p>b</p>")
    assert html == "<p>a</p><!-- server-side block removed --><p>b</p>"


def test_unclosed_arguments_are_left_alone(translator: DirectiveTranslator) -> None:
    assert translator.translate("@if($a <p>") == "@if($a <p>"
