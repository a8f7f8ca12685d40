"""Unit tests for the config-block sandbox and variable materialization."""

from __future__ import annotations

import ast
import re
from pathlib import Path

import pytest

from ink_pages.errors import NonSerializableVariableError, VariableMaterializationError
from ink_pages.parser import VariableMaterializer, evaluate_expression, normalize_value
from ink_pages.parser.sandbox import Sandbox, SandboxError

BINDING_NAME = re.compile(r"^var_(\w+)_[0-9a-f]{8}$")


class _Money:
    def __init__(self, cents: int) -> None:
        self.cents = cents

    def to_dict(self) -> dict[str, int]:
        return {"cents": self.cents}


def test_variables_keep_declaration_order_and_types() -> None:
    variables = VariableMaterializer().materialize(
        "ink_make().cache(600).layout('app')\n"
        "title = 'Shop'\n"
        "count = 3\n"
        "ratio = count / 2\n"
        "visible = count > 1\n"
        "items = [n * 2 for n in range(count)]\n"
        "meta = {'a': 1, 2: None, True: 'x'}\n"
        "nothing = None\n"
    )
    summary = [(variable.name, variable.type, variable.value) for variable in variables]
    assert summary == [
        ("title", "string", "Shop"),
        ("count", "int", 3),
        ("ratio", "float", 1.5),
        ("visible", "bool", True),
        ("items", "array", [0, 2, 4]),
        ("meta", "array", {"a": 1, "2": None, "true": "x"}),
        ("nothing", "unknown", None),
    ]


def test_binding_names_are_unique_per_materialization() -> None:
    materializer = VariableMaterializer()
    first = materializer.materialize("name = 'a'")[0].binding_name
    second = materializer.materialize("name = 'a'")[0].binding_name
    assert BINDING_NAME.match(first)
    assert BINDING_NAME.match(second)
    assert first != second


def test_control_flow_is_supported() -> None:
    variables = VariableMaterializer().materialize(
        "total = 0\n"
        "for n in range(10):\n"
        "    if n == 5:\n"
        "        break\n"
        "    if n % 2:\n"
        "        continue\n"
        "    total += n\n"
        "label = f'{total:03d}' if total else 'none'\n"
    )
    assert {variable.name: variable.value for variable in variables} == {
        "total": 6,
        "n": 5,
        "label": "006",
    }


def test_tuples_become_lists() -> None:
    (variable,) = VariableMaterializer().materialize("pair = (1, 'a')")
    assert variable.value == [1, "a"]
    assert variable.type == "array"


def test_syntax_error_reports_source_line() -> None:
    with pytest.raises(VariableMaterializationError) as info:
        VariableMaterializer().materialize(
            "x = 1\ny = (", path=Path("page.ink"), line_offset=1
        )
    assert info.value.path == Path("page.ink")
    assert info.value.line == 3


@pytest.mark.parametrize(
    ("block", "fragment"),
    [
        ("import os", "Import is not supported"),
        ("def f():\n    return 1", "FunctionDef is not supported"),
        ("x = ''.__class__", "underscore"),
        ("x = list.append([], 1)", "not allowed"),
        ("x = undefined_name", "not defined"),
        ("x = 'a'.format(1)", "not allowed"),
        ("x = list(range(1000000))", "limit"),
        ("x = 2 ** 100000", "limit"),
        ("while True:\n    pass", "While is not supported"),
    ],
)
def test_disallowed_constructs_fail_closed(block: str, fragment: str) -> None:
    with pytest.raises(VariableMaterializationError) as info:
        VariableMaterializer().materialize(block)
    assert fragment in info.value.message


def test_failure_line_accounts_for_offset() -> None:
    with pytest.raises(VariableMaterializationError) as info:
        VariableMaterializer().materialize("a = 1\nb = 1 / 0", line_offset=4)
    assert info.value.line == 6
    assert "ZeroDivisionError" in info.value.message


def test_non_serializable_value_is_rejected() -> None:
    with pytest.raises(NonSerializableVariableError) as info:
        VariableMaterializer().materialize("tags = {'a', 'b'}", path=Path("p.ink"))
    assert info.value.name == "tags"
    assert info.value.type_name == "set"
    assert "to_dict()" in str(info.value)


def test_objects_convert_through_to_dict() -> None:
    assert normalize_value("price", [_Money(250)]) == [{"cents": 250}]
    with pytest.raises(NonSerializableVariableError):
        normalize_value("price", object())
    with pytest.raises(NonSerializableVariableError):
        normalize_value("ratio", float("nan"))


def test_evaluate_expression_uses_context() -> None:
    context = {"user": {"name": "ann"}, "items": [1, 2, 3]}
    assert evaluate_expression("user['name'].upper()", context) == "ANN"
    assert evaluate_expression("len(items) + 1", context) == 4
    with pytest.raises(VariableMaterializationError):
        evaluate_expression("missing + 1", context)
    with pytest.raises(VariableMaterializationError):
        evaluate_expression("(", context)


def test_sandbox_comprehensions_do_not_leak_names() -> None:
    sandbox = Sandbox()
    sandbox.run(ast.parse("squares = {n: n * n for n in range(3)}").body)
    assert sandbox.namespace == {"squares": {0: 0, 1: 1, 2: 4}}


def test_sandbox_error_carries_node_line() -> None:
    sandbox = Sandbox()
    with pytest.raises(SandboxError) as info:
        sandbox.run(ast.parse("a = 1\nimport os").body)
    assert info.value.line == 2


def test_sandbox_bounds_total_concatenation_output() -> None:
    source = "s = 'x' * 50000\nfor i in range(1000):\n    t = s + s"
    with pytest.raises(SandboxError, match="total output exceeds"):
        Sandbox().run(ast.parse(source).body)


def test_sandbox_bounds_values_grown_inside_loops() -> None:
    source = (
        "s = list(range(60000))\nitems = []\nfor i in range(3):\n    items.extend(s)"
    )
    with pytest.raises(SandboxError, match="exceeds the 100000 limit") as info:
        Sandbox().run(ast.parse(source).body)
    assert info.value.line == 3
