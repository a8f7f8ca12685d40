"""A restricted interpreter for config-block variable declarations.

Config blocks declare page variables in a small subset of Python. Rather than
handing the text to ``exec``, the statements are parsed with :mod:`ast` and
walked by :class:`Sandbox`, which understands assignments, conditionals,
``for`` loops, and pure expressions over literal data. Imports, function and
class definitions, ``while`` loops, private attributes (anything starting with
an underscore), and calls outside a fixed builtin allow-list are rejected.
A loop budget and size caps bound runaway programs; this is best-effort
containment, not a security boundary.

Examples
--------
>>> import ast
>>> sandbox = Sandbox()
>>> sandbox.run(ast.parse("items = [n * 2 for n in range(3)]").body)
>>> sandbox.namespace["items"]
[0, 2, 4]
"""

from __future__ import annotations

import ast
import operator
import types
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

MAX_LOOP_ITERATIONS = 100_000
MAX_EXPONENT = 10_000
MAX_SEQUENCE_LENGTH = 100_000
MAX_TOTAL_OUTPUT = 10_000_000
BLOCKED_ATTRIBUTES = frozenset({"format", "format_map", "mro"})


class SandboxError(Exception):
    """Raised when a statement uses a disallowed construct or fails."""

    def __init__(self, message: str, node: ast.AST | None = None) -> None:
        self.message = message
        self.line: int | None = getattr(node, "lineno", None)
        super().__init__(message)


def _bounded_range(*args: int) -> range:
    """Return ``range(*args)`` unless it would exceed the sequence cap."""
    result = range(*args)
    if len(result) > MAX_SEQUENCE_LENGTH:
        msg = f"range of {len(result)} items exceeds the {MAX_SEQUENCE_LENGTH} limit"
        raise SandboxError(msg)
    return result


SAFE_BUILTINS: dict[str, cabc.Callable[..., typ.Any]] = {
    "abs": abs,
    "all": all,
    "any": any,
    "bool": bool,
    "dict": dict,
    "enumerate": enumerate,
    "float": float,
    "int": int,
    "len": len,
    "list": list,
    "max": max,
    "min": min,
    "range": _bounded_range,
    "reversed": reversed,
    "round": round,
    "sorted": sorted,
    "str": str,
    "sum": sum,
    "tuple": tuple,
    "zip": zip,
}
_CALLABLE_IDS = frozenset(id(function) for function in SAFE_BUILTINS.values())

BinaryFunction = typ.Callable[[typ.Any, typ.Any], typ.Any]

BINARY_OPERATORS: dict[type[ast.operator], BinaryFunction] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
    ast.BitAnd: operator.and_,
    ast.BitOr: operator.or_,
    ast.BitXor: operator.xor,
}
UNARY_OPERATORS: dict[type[ast.unaryop], cabc.Callable[[typ.Any], typ.Any]] = {
    ast.Not: operator.not_,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
    ast.Invert: operator.invert,
}
COMPARISON_OPERATORS: dict[type[ast.cmpop], cabc.Callable[[typ.Any, typ.Any], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda left, right: left in right,
    ast.NotIn: lambda left, right: left not in right,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
}


class _Break(SandboxError):  # noqa: N818 - loop control signal
    def __init__(self, node: ast.AST) -> None:
        super().__init__("'break' outside loop", node)


class _Continue(SandboxError):  # noqa: N818 - loop control signal
    def __init__(self, node: ast.AST) -> None:
        super().__init__("'continue' outside loop", node)


def _check_size(value: typ.Any, node: ast.AST) -> None:
    sized = isinstance(value, str | list | tuple | dict | set)
    if sized and len(value) > MAX_SEQUENCE_LENGTH:
        msg = f"value of {len(value)} items exceeds the {MAX_SEQUENCE_LENGTH} limit"
        raise SandboxError(msg, node)


def _check_name(name: str, node: ast.AST) -> None:
    if name.startswith("_"):
        msg = f"names starting with an underscore are not allowed: '{name}'"
        raise SandboxError(msg, node)


class Sandbox(ast.NodeVisitor):
    """Walk a restricted statement list against a private namespace.

    Parameters
    ----------
    namespace : Mapping[str, Any], optional
        Initial bindings visible to expressions. Config blocks start empty;
        component prop expressions start with the surrounding variables.
    """

    def __init__(self, namespace: cabc.Mapping[str, typ.Any] | None = None) -> None:
        self.namespace: dict[str, typ.Any] = dict(namespace or {})
        self.current_line: int | None = None
        self._iterations = 0
        self._produced = 0

    def run(self, statements: cabc.Iterable[ast.stmt]) -> None:
        """Execute ``statements`` in order."""
        for statement in statements:
            self.current_line = getattr(statement, "lineno", self.current_line)
            self.visit(statement)

    def evaluate(self, node: ast.expr) -> typ.Any:
        """Return the value of the expression ``node``."""
        return self.visit(node)

    def generic_visit(self, node: ast.AST) -> typ.Any:
        msg = f"{type(node).__name__} is not supported in config blocks"
        raise SandboxError(msg, node)

    def _tick(self, node: ast.AST) -> None:
        self._iterations += 1
        if self._iterations > MAX_LOOP_ITERATIONS:
            msg = f"loop iteration budget of {MAX_LOOP_ITERATIONS} exceeded"
            raise SandboxError(msg, node)

    # statements

    def _assign(self, target: ast.expr, value: typ.Any) -> None:
        match target:
            case ast.Name(id=name):
                _check_name(name, target)
                self.namespace[name] = value
            case ast.Tuple(elts=elements) | ast.List(elts=elements):
                values = list(value)
                if len(values) != len(elements):
                    msg = (
                        f"cannot unpack {len(values)} values into "
                        f"{len(elements)} targets"
                    )
                    raise SandboxError(msg, target)
                for element, item in zip(elements, values, strict=True):
                    self._assign(element, item)
            case ast.Subscript(value=container_node, slice=key_node):
                container = self.evaluate(container_node)
                container[self.evaluate(key_node)] = value
            case _:
                self.generic_visit(target)

    def visit_Assign(self, node: ast.Assign) -> None:
        value = self.evaluate(node.value)
        for target in node.targets:
            self._assign(target, value)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        if node.value is not None:
            self._assign(node.target, self.evaluate(node.value))

    def visit_AugAssign(self, node: ast.AugAssign) -> None:
        current = self.evaluate(node.target)
        result = self._binary(node.op, current, self.evaluate(node.value), node)
        self._assign(node.target, result)

    def visit_Expr(self, node: ast.Expr) -> None:
        self.evaluate(node.value)

    def visit_Pass(self, node: ast.Pass) -> None:
        return None

    def visit_If(self, node: ast.If) -> None:
        self.run(node.body if self.evaluate(node.test) else node.orelse)

    def visit_For(self, node: ast.For) -> None:
        for item in self.evaluate(node.iter):
            self._tick(node)
            self._assign(node.target, item)
            try:
                self.run(node.body)
            except _Break:
                break
            except _Continue:
                continue
            finally:
                for value in self.namespace.values():
                    _check_size(value, node)
        else:
            self.run(node.orelse)

    def visit_Break(self, node: ast.Break) -> None:
        raise _Break(node)

    def visit_Continue(self, node: ast.Continue) -> None:
        raise _Continue(node)

    # expressions

    def visit_Constant(self, node: ast.Constant) -> typ.Any:
        return node.value

    def visit_Name(self, node: ast.Name) -> typ.Any:
        _check_name(node.id, node)
        if node.id in self.namespace:
            return self.namespace[node.id]
        if node.id in SAFE_BUILTINS:
            return SAFE_BUILTINS[node.id]
        msg = f"name '{node.id}' is not defined"
        raise SandboxError(msg, node)

    def _elements(self, nodes: cabc.Iterable[ast.expr]) -> list[typ.Any]:
        values: list[typ.Any] = []
        for element in nodes:
            if isinstance(element, ast.Starred):
                values.extend(self.evaluate(element.value))
            else:
                values.append(self.evaluate(element))
        return values

    def visit_List(self, node: ast.List) -> list[typ.Any]:
        return self._elements(node.elts)

    def visit_Tuple(self, node: ast.Tuple) -> tuple[typ.Any, ...]:
        return tuple(self._elements(node.elts))

    def visit_Set(self, node: ast.Set) -> set[typ.Any]:
        return set(self._elements(node.elts))

    def visit_Dict(self, node: ast.Dict) -> dict[typ.Any, typ.Any]:
        result: dict[typ.Any, typ.Any] = {}
        for key, value in zip(node.keys, node.values, strict=True):
            if key is None:
                result.update(self.evaluate(value))
            else:
                result[self.evaluate(key)] = self.evaluate(value)
        return result

    def _binary(
        self, op: ast.operator, left: typ.Any, right: typ.Any, node: ast.AST
    ) -> typ.Any:
        function = BINARY_OPERATORS.get(type(op))
        if function is None:
            self.generic_visit(op)
        exponent = right if isinstance(op, ast.Pow) and isinstance(right, int) else 0
        if abs(exponent) > MAX_EXPONENT:
            msg = f"exponent {right} exceeds the {MAX_EXPONENT} limit"
            raise SandboxError(msg, node)
        if isinstance(op, ast.Mult):
            for sequence, count in ((left, right), (right, left)):
                if (
                    isinstance(sequence, str | list | tuple)
                    and isinstance(count, int)
                    and len(sequence) * count > MAX_SEQUENCE_LENGTH
                ):
                    msg = f"repeated sequence exceeds the {MAX_SEQUENCE_LENGTH} limit"
                    raise SandboxError(msg, node)
        result = function(left, right)
        _check_size(result, node)
        if isinstance(result, str | list | tuple):
            self._produced += len(result)
            if self._produced > MAX_TOTAL_OUTPUT:
                msg = f"total output exceeds the {MAX_TOTAL_OUTPUT} limit"
                raise SandboxError(msg, node)
        return result

    def visit_BinOp(self, node: ast.BinOp) -> typ.Any:
        left = self.evaluate(node.left)
        return self._binary(node.op, left, self.evaluate(node.right), node)

    def visit_UnaryOp(self, node: ast.UnaryOp) -> typ.Any:
        function = UNARY_OPERATORS.get(type(node.op))
        if function is None:
            return self.generic_visit(node.op)
        return function(self.evaluate(node.operand))

    def visit_BoolOp(self, node: ast.BoolOp) -> typ.Any:
        is_and = isinstance(node.op, ast.And)
        result: typ.Any = None
        for value_node in node.values:
            result = self.evaluate(value_node)
            if bool(result) is not is_and:
                return result
        return result

    def visit_Compare(self, node: ast.Compare) -> bool:
        left = self.evaluate(node.left)
        for op, comparator in zip(node.ops, node.comparators, strict=True):
            right = self.evaluate(comparator)
            if not COMPARISON_OPERATORS[type(op)](left, right):
                return False
            left = right
        return True

    def visit_IfExp(self, node: ast.IfExp) -> typ.Any:
        return self.evaluate(node.body if self.evaluate(node.test) else node.orelse)

    def visit_Subscript(self, node: ast.Subscript) -> typ.Any:
        return self.evaluate(node.value)[self.evaluate(node.slice)]

    def visit_Slice(self, node: ast.Slice) -> slice:
        def bound(part: ast.expr | None) -> typ.Any:
            return None if part is None else self.evaluate(part)

        return slice(bound(node.lower), bound(node.upper), bound(node.step))

    def visit_Attribute(self, node: ast.Attribute) -> typ.Any:
        _check_name(node.attr, node)
        if node.attr in BLOCKED_ATTRIBUTES:
            msg = f"attribute '{node.attr}' is not allowed"
            raise SandboxError(msg, node)
        return getattr(self.evaluate(node.value), node.attr)

    def visit_Call(self, node: ast.Call) -> typ.Any:
        function = self.evaluate(node.func)
        allowed = id(function) in _CALLABLE_IDS or (
            isinstance(function, types.BuiltinMethodType)
            and not isinstance(function.__self__, types.ModuleType)
        )
        if not allowed:
            msg = f"calling {getattr(function, '__name__', function)!r} is not allowed"
            raise SandboxError(msg, node)
        args = self._elements(node.args)
        kwargs: dict[str, typ.Any] = {}
        for keyword in node.keywords:
            if keyword.arg is None:
                kwargs.update(self.evaluate(keyword.value))
            else:
                kwargs[keyword.arg] = self.evaluate(keyword.value)
        return function(*args, **kwargs)

    def visit_JoinedStr(self, node: ast.JoinedStr) -> str:
        return "".join(str(self.evaluate(value)) for value in node.values)

    def visit_FormattedValue(self, node: ast.FormattedValue) -> str:
        value = self.evaluate(node.value)
        match node.conversion:
            case 114:
                value = repr(value)
            case 97:
                value = ascii(value)
            case 115:
                value = str(value)
        spec = self.evaluate(node.format_spec) if node.format_spec else ""
        return format(value, spec)

    def _comprehension(
        self, generators: list[ast.comprehension], emit: cabc.Callable[[], None]
    ) -> None:
        first, *rest = generators
        for item in self.evaluate(first.iter):
            self._tick(first)
            self._assign(first.target, item)
            if all(self.evaluate(condition) for condition in first.ifs):
                if rest:
                    self._comprehension(rest, emit)
                else:
                    emit()

    def _scoped(
        self, generators: list[ast.comprehension], emit: cabc.Callable[[], None]
    ) -> None:
        outer = self.namespace
        self.namespace = dict(outer)
        try:
            self._comprehension(generators, emit)
        finally:
            self.namespace = outer

    def visit_ListComp(self, node: ast.ListComp) -> list[typ.Any]:
        result: list[typ.Any] = []
        self._scoped(node.generators, lambda: result.append(self.evaluate(node.elt)))
        return result

    def visit_GeneratorExp(self, node: ast.GeneratorExp) -> cabc.Iterator[typ.Any]:
        result: list[typ.Any] = []
        self._scoped(node.generators, lambda: result.append(self.evaluate(node.elt)))
        return iter(result)

    def visit_SetComp(self, node: ast.SetComp) -> set[typ.Any]:
        result: set[typ.Any] = set()
        self._scoped(node.generators, lambda: result.add(self.evaluate(node.elt)))
        return result

    def visit_DictComp(self, node: ast.DictComp) -> dict[typ.Any, typ.Any]:
        result: dict[typ.Any, typ.Any] = {}

        def emit() -> None:
            result[self.evaluate(node.key)] = self.evaluate(node.value)

        self._scoped(node.generators, emit)
        return result


__all__ = ["SAFE_BUILTINS", "Sandbox", "SandboxError"]
