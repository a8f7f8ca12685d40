"""Expand component references in page and component bodies.

Bodies reference components as paired ``<x-name ...>slot</x-name>`` tags,
self-closing ``<x-name ... />`` tags, or ``@include('name', {...})``
directives. :class:`ComponentResolver` compiles each reference into finished
markup: the component's own config block is materialized with fresh binding
names, props are evaluated, the slot is substituted, nested references are
expanded recursively, and the body runs through the localization, directive
and binding stages before the component state is attached to its root
element.

Compiled components are parked behind opaque tokens while the enclosing body
is still being compiled, so markup is only ever processed by the stages of
the document it came from.
"""

from __future__ import annotations

import base64
import dataclasses as dc
import hashlib
import logging
import re
import secrets
import typing as typ

from .._constants import MAX_EXPANSION_DEPTH, MAX_EXPANSION_PASSES
from .._text import map_code, read_balanced
from ..compiler import bindings, localization
from ..compiler.directives import DirectiveTranslator
from ..compiler.scripts import script_json
from ..errors import ComponentNotFoundError, VariableMaterializationError
from ..parser.document import extract_translation_keys, read_document
from ..parser.materializer import VariableMaterializer, evaluate_expression
from ..parser.models import DocumentKind
from .attributes import PropKind, parse_attributes
from .elements import find_matching_close, render_attributes, wrap

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .registry import ComponentDefinition, ComponentRegistry

logger = logging.getLogger(__name__)

COMPONENT_TAG_PATTERN = re.compile(
    r"""<x-([A-Za-z0-9:._-]+)((?:[^"'>]|"[^"]*"|'[^']*')*?)(/?)>"""
)
INCLUDE_PATTERN = re.compile(r"(?<![\w@])@include(?=\()")
INCLUDE_ARGUMENTS_PATTERN = re.compile(
    r"""^\s*(['"])(.+?)\1\s*(?:,(.*))?$""", re.DOTALL
)
SLOT_PATTERN = re.compile(r"\{\{\s*\$?slot\s*\}\}|\{!!\s*\$?slot\s*!!\}")
SIGIL_PATTERN = re.compile(r"\$(?=[A-Za-z_])")
TOKEN_PREFIX = "__INK_COMPONENT_"


@dc.dataclass(frozen=True, slots=True)
class ExpansionContext:
    """Scope a body is expanded in.

    Attributes
    ----------
    values : Mapping[str, Any]
        Materialized values visible to bound prop expressions.
    bindings : Mapping[str, str]
        Surface names to client expressions for names inherited from
        enclosing documents.
    parent_id : str
        Id of the enclosing page or component root element.
    depth : int
        Nesting level; pages expand at depth ``0``.
    """

    values: cabc.Mapping[str, typ.Any] = dc.field(default_factory=dict)
    bindings: cabc.Mapping[str, str] = dc.field(default_factory=dict)
    parent_id: str = ""
    depth: int = 0


@dc.dataclass(frozen=True, slots=True)
class ComponentReference:
    """A component reference located in a body."""

    start: int
    end: int
    name: str
    attributes: str = ""
    slot: str = ""
    include_props: str | None = None


def _find_tag(html: str, match: re.Match[str]) -> ComponentReference:
    name, attributes, slash = match.groups()
    if not slash:
        close = find_matching_close(html, f"x-{name}", match.end())
        if close is not None:
            return ComponentReference(
                start=match.start(),
                end=close[1],
                name=name,
                attributes=attributes,
                slot=html[match.end() : close[0]],
            )
    return ComponentReference(match.start(), match.end(), name, attributes)


def _find_include(html: str, match: re.Match[str]) -> ComponentReference | None:
    region = read_balanced(html, match.end())
    if region is None:
        return None
    arguments = INCLUDE_ARGUMENTS_PATTERN.match(region[0])
    if arguments is None:
        return None
    props = arguments.group(3)
    return ComponentReference(
        start=match.start(),
        end=region[1],
        name=arguments.group(2),
        include_props=props.strip() if props and props.strip() else None,
    )


def find_references(html: str) -> list[ComponentReference]:
    """Return the outermost component references in ``html`` in source order."""
    found: list[ComponentReference] = []
    cursor = 0
    while True:
        tag = COMPONENT_TAG_PATTERN.search(html, cursor)
        include = INCLUDE_PATTERN.search(html, cursor)
        if tag is None and include is None:
            return found
        if include is not None and (tag is None or include.start() < tag.start()):
            reference = _find_include(html, include)
            if reference is None:
                cursor = include.end()
                continue
        else:
            reference = _find_tag(html, typ.cast("re.Match[str]", tag))
        found.append(reference)
        cursor = reference.end


def referenced_names(html: str) -> set[str]:
    """Return every component name spelled in ``html``, nested slots included.

    Examples
    --------
    >>> sorted(referenced_names("<x-card><x-ui::badge /></x-card>@include('nav')"))
    ['card', 'nav', 'ui::badge']
    """
    names: set[str] = set()
    for reference in find_references(html):
        names.add(reference.name)
        names |= referenced_names(reference.slot)
    return names


def component_id(name: str, parent_id: str) -> str:
    """Mint a root element id for one compiled instance of ``name``."""
    seed = f"{name}{parent_id}{secrets.token_hex(4)}"
    return "cmp-" + hashlib.sha1(seed.encode("utf-8")).hexdigest()[:8]  # noqa: S324


def _state_object(
    instance_id: str, props: cabc.Mapping[str, typ.Any], extra: str = ""
) -> str:
    props_json = script_json(dict(props))
    return f"{{ componentId: '{instance_id}', props: {props_json}{extra} }}"


class ComponentParking:
    """Tokens standing in for compiled components until a body is finished."""

    def __init__(self, html: str) -> None:
        self.html = html
        self.table: dict[str, str] = {}

    def park(self, markup: str) -> str:
        token = f"{TOKEN_PREFIX}{secrets.token_hex(8)}__"
        while token in self.html or token in self.table:
            token = f"{TOKEN_PREFIX}{secrets.token_hex(8)}__"
        self.table[token] = markup
        return token

    def restore(self, html: str) -> str:
        for token, markup in self.table.items():
            html = html.replace(token, markup)
        return html


class ComponentResolver:
    """Compile component references into Alpine component markup.

    Parameters
    ----------
    registry : ComponentRegistry
        Source of component definitions.
    materializer : VariableMaterializer, optional
        Evaluator for component config blocks.
    translator : DirectiveTranslator, optional
        Directive stage applied to each component body.
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        *,
        materializer: VariableMaterializer | None = None,
        translator: DirectiveTranslator | None = None,
    ) -> None:
        self.registry = registry
        self.materializer = materializer or VariableMaterializer()
        self.translator = translator or DirectiveTranslator()

    def expand(self, html: str, context: ExpansionContext, keys: set[str]) -> str:
        """Replace every component reference in ``html`` with compiled markup.

        Parameters
        ----------
        html : str
            Body to expand.
        context : ExpansionContext
            Scope of the enclosing document.
        keys : set[str]
            Sink for translation keys found in component sources.

        Returns
        -------
        str
            ``html`` with each reference compiled in place. Missing components
            become diagnostic comments; the build continues.
        """
        parked, parking = self.expand_deferred(html, context, keys)
        return parking.restore(parked)

    def expand_deferred(
        self, html: str, context: ExpansionContext, keys: set[str]
    ) -> tuple[str, ComponentParking]:
        """Expand references but leave compiled markup behind tokens.

        The caller runs its own stages over the returned text and then calls
        ``restore`` on the returned parking table.
        """
        parking = ComponentParking(html)
        for _ in range(MAX_EXPANSION_PASSES):
            references = find_references(html)
            if not references:
                break
            parts: list[str] = []
            cursor = 0
            for reference in references:
                compiled = self._compile_reference(reference, context, keys)
                parts.extend((html[cursor : reference.start], parking.park(compiled)))
                cursor = reference.end
            parts.append(html[cursor:])
            html = "".join(parts)
        return html, parking

    def _compile_reference(
        self,
        reference: ComponentReference,
        context: ExpansionContext,
        keys: set[str],
    ) -> str:
        if context.depth >= MAX_EXPANSION_DEPTH:
            logger.warning(
                "component '%s' nested deeper than %d levels; not expanded",
                reference.name,
                MAX_EXPANSION_DEPTH,
            )
            return (
                f"<!-- Component depth limit ({MAX_EXPANSION_DEPTH}) reached: "
                f"{reference.name} -->"
            )
        try:
            definition = self.registry.resolve(reference.name)
        except ComponentNotFoundError as exc:
            logger.warning("%s", exc)
            available = ", ".join(exc.available) or "none"
            tried = ", ".join(f"'{candidate}'" for candidate in exc.candidates)
            return (
                f"<!-- Component not found. Tried: [{tried}] | "
                f"Available: [{available}] | Path: {self.registry.root} -->"
            )
        return self.compile_component(definition, reference, context, keys)

    def _props(
        self,
        reference: ComponentReference,
        scope: cabc.Mapping[str, typ.Any],
    ) -> dict[str, typ.Any]:
        if reference.include_props is not None:
            value = self._evaluate(reference.include_props, scope, reference.name)
            return dict(value) if isinstance(value, dict) else {}
        props: dict[str, typ.Any] = {}
        for spec in parse_attributes(reference.attributes).props.values():
            match spec.kind:
                case PropKind.BOUND:
                    props[spec.name] = self._evaluate(
                        str(spec.value), scope, reference.name
                    )
                case _:
                    props[spec.name] = spec.value
        return props

    def _evaluate(
        self, expression: str, scope: cabc.Mapping[str, typ.Any], component: str
    ) -> typ.Any:
        source = map_code(expression, lambda code: SIGIL_PATTERN.sub("", code))
        try:
            return evaluate_expression(source, scope)
        except VariableMaterializationError as exc:
            logger.debug(
                "prop expression %r on component '%s' failed: %s",
                expression,
                component,
                exc.message,
            )
            return None

    def compile_component(
        self,
        definition: ComponentDefinition,
        reference: ComponentReference,
        context: ExpansionContext,
        keys: set[str],
    ) -> str:
        """Compile one component instance.

        Raises
        ------
        DocumentReadError
            If the component file cannot be read.
        VariableMaterializationError
            If the component's config block fails to evaluate.
        NonSerializableVariableError
            If a component variable cannot be reduced to plain data.
        """
        document = read_document(definition.path, DocumentKind.COMPONENT)
        keys |= extract_translation_keys(document.text)
        variables = self.materializer.materialize(
            document.config_block,
            path=definition.path,
            line_offset=document.config_offset,
        )
        own_values = {variable.name: variable.value for variable in variables}
        own_bindings = {variable.name: variable.binding_name for variable in variables}
        props = self._props(reference, {**context.values, **own_values})
        instance_id = component_id(definition.name, context.parent_id)

        body = SLOT_PATTERN.sub(lambda _: reference.slot, document.body)
        child = ExpansionContext(
            values={**context.values, **own_values, **props},
            bindings={**context.bindings, **own_bindings},
            parent_id=instance_id,
            depth=context.depth + 1,
        )
        body, parking = self.expand_deferred(body, child, keys)
        body = localization.transform(body)
        body = self.translator.translate(body)
        body = bindings.rewrite(
            body,
            {
                **context.bindings,
                **{
                    name: f"props.{name}" for name in props if name.isidentifier()
                },
                **own_bindings,
            },
        )
        body = parking.restore(body).strip()

        state = "".join(
            f", {variable.binding_name}: {script_json(variable.value)}"
            for variable in variables
        )
        if parse_attributes(reference.attributes).lazy:
            return self._lazy(instance_id, props, state, body)
        x_data = _state_object(instance_id, props, state)
        return wrap(body, {"id": instance_id, "x-data": x_data})

    def _lazy(
        self,
        instance_id: str,
        props: cabc.Mapping[str, typ.Any],
        state: str,
        body: str,
    ) -> str:
        encoded = base64.b64encode(body.encode("utf-8")).decode("ascii")
        decode = (
            f"new TextDecoder().decode(Uint8Array.from(atob('{encoded}'), "
            "c => c.charCodeAt(0)))"
        )
        attributes = {
            "id": instance_id,
            "x-data": _state_object(
                instance_id, props, f"{state}, loaded: false, content: ''"
            ),
            "x-intersect.margin.50px": (
                f"if (!loaded) {{ loaded = true; content = {decode}; "
                "$nextTick(() => Alpine.initTree($el)); }"
            ),
            "data-lazy-component": "true",
        }
        return (
            f"<div{render_attributes(attributes)}>"
            '<template x-if="loaded"><div x-html="content"></div></template></div>'
        )


__all__ = [
    "ComponentParking",
    "ComponentReference",
    "ComponentResolver",
    "ExpansionContext",
    "component_id",
    "find_references",
    "referenced_names",
]
