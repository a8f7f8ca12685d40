"""Materialize config-block variable declarations into typed page variables.

The config block of a page or component mixes builder-style configuration
calls with ordinary assignments. :class:`VariableMaterializer` drops the
builder statements, runs the rest through the restricted :class:`Sandbox`,
and captures every binding left in its namespace as a :class:`PageVariable`
holding plain JSON data. Each variable receives a fresh binding name
(``var_<name>_<hex>``) so pages and nested components can reuse surface names
without colliding inside the shared client runtime.

Values that are not plain data are converted through their own ``to_dict()``
or ``to_list()`` method; anything else fails closed with
:class:`NonSerializableVariableError`.

Examples
--------
>>> variables = VariableMaterializer().materialize("count = 2\\nlabel = 'x'")
>>> [(variable.name, variable.type) for variable in variables]
[('count', 'int'), ('label', 'string')]
>>> variables[0].binding_name.startswith("var_count_")
True
"""

from __future__ import annotations

import ast
import math
import secrets
import textwrap
import typing as typ

from .._constants import CONFIG_BUILDER_ROOT
from ..errors import NonSerializableVariableError, VariableMaterializationError
from .models import PageVariable
from .sandbox import Sandbox, SandboxError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

BUILDER_ROOTS = frozenset(
    {CONFIG_BUILDER_ROOT, "cache", "layout", "title", "auth", "middleware", "seo"}
)
EVALUATION_ERRORS = (
    SandboxError,
    ArithmeticError,
    AttributeError,
    LookupError,
    TypeError,
    ValueError,
    RecursionError,
)


def _is_builder_statement(statement: ast.stmt) -> bool:
    """Return ``True`` for expression statements rooted at a config call."""
    if not isinstance(statement, ast.Expr):
        return False
    node: ast.expr = statement.value
    while isinstance(node, ast.Call | ast.Attribute):
        node = node.func if isinstance(node, ast.Call) else node.value
    return isinstance(node, ast.Name) and node.id in BUILDER_ROOTS


def classify_value(value: object) -> str:
    """Return the page-variable type label for a normalized ``value``.

    Examples
    --------
    >>> [classify_value(value) for value in (True, 3, 1.5, "a", [1], {}, None)]
    ['bool', 'int', 'float', 'string', 'array', 'array', 'unknown']
    """
    match value:
        case bool():
            return "bool"
        case int():
            return "int"
        case float():
            return "float"
        case str():
            return "string"
        case list() | dict():
            return "array"
        case _:
            return "unknown"


def _json_key(key: object) -> str:
    return str(key).lower() if isinstance(key, bool) else str(key)


def normalize_value(name: str, value: object, path: Path | None = None) -> typ.Any:
    """Reduce ``value`` to JSON-compatible data.

    Parameters
    ----------
    name : str
        Variable name reported when conversion fails.
    value : object
        Value captured from the sandbox.
    path : Path, optional
        Source document reported when conversion fails.

    Returns
    -------
    Any
        ``None``, a scalar, or nested lists and string-keyed dicts.

    Raises
    ------
    NonSerializableVariableError
        If ``value`` (or anything nested in it) is neither plain data nor
        convertible through ``to_dict()``/``to_list()``.
    """
    match value:
        case None | bool() | int() | str():
            return value
        case float() if math.isfinite(value):
            return value
        case list() | tuple():
            return [normalize_value(name, item, path) for item in value]
        case dict() if all(
            isinstance(key, str | int | float | bool) for key in value
        ):
            return {
                _json_key(key): normalize_value(name, item, path)
                for key, item in value.items()
            }
    for method in ("to_dict", "to_list"):
        converter = getattr(value, method, None)
        if callable(converter):
            return normalize_value(name, converter(), path)
    raise NonSerializableVariableError(name, path, type(value).__name__)


def binding_name_for(name: str) -> str:
    """Mint a fresh, globally unique client binding name for ``name``."""
    return f"var_{name}_{secrets.token_hex(4)}"


def _parse(source: str, path: Path | None, line_offset: int) -> list[ast.stmt]:
    try:
        return ast.parse(textwrap.dedent(source)).body
    except SyntaxError as exc:
        line = None if exc.lineno is None else exc.lineno + line_offset
        raise VariableMaterializationError(path, line, exc.msg) from exc


class VariableMaterializer:
    """Evaluate config-block declarations and capture their bindings."""

    def materialize(
        self,
        config_block: str,
        *,
        path: Path | None = None,
        line_offset: int = 0,
    ) -> list[PageVariable]:
        """Run ``config_block`` and return its variables in declaration order.

        Parameters
        ----------
        config_block : str
            Text between the config markers.
        path : Path, optional
            Source document, used in error messages.
        line_offset : int, optional
            Number of document lines before the block, so reported line
            numbers match the source file.

        Returns
        -------
        list[PageVariable]
            One variable per name bound by the block.

        Raises
        ------
        VariableMaterializationError
            If the block does not parse or a statement fails to evaluate.
        NonSerializableVariableError
            If a bound value cannot be reduced to plain data.
        """
        statements = [
            statement
            for statement in _parse(config_block, path, line_offset)
            if not _is_builder_statement(statement)
        ]
        sandbox = Sandbox()
        try:
            sandbox.run(statements)
        except EVALUATION_ERRORS as exc:
            line = getattr(exc, "line", None) or sandbox.current_line
            if isinstance(exc, SandboxError):
                message = exc.message
            else:
                message = f"{type(exc).__name__}: {exc}"
            raise VariableMaterializationError(
                path, None if line is None else line + line_offset, message
            ) from exc

        variables: list[PageVariable] = []
        for name, raw in sandbox.namespace.items():
            value = normalize_value(name, raw, path)
            variables.append(
                PageVariable(
                    name=name,
                    value=value,
                    type=classify_value(value),
                    binding_name=binding_name_for(name),
                )
            )
        return variables


def evaluate_expression(source: str, context: cabc.Mapping[str, typ.Any]) -> typ.Any:
    """Evaluate a single expression against ``context`` in the sandbox.

    Raises
    ------
    VariableMaterializationError
        If the expression does not parse or fails to evaluate.

    Examples
    --------
    >>> evaluate_expression("user['name'].upper()", {"user": {"name": "ann"}})
    'ANN'
    """
    try:
        tree = ast.parse(source.strip(), mode="eval")
    except SyntaxError as exc:
        raise VariableMaterializationError(None, None, exc.msg) from exc
    try:
        return Sandbox(context).evaluate(tree.body)
    except EVALUATION_ERRORS as exc:
        raise VariableMaterializationError(None, None, str(exc)) from exc


__all__ = [
    "VariableMaterializer",
    "binding_name_for",
    "classify_value",
    "evaluate_expression",
    "normalize_value",
]
