"""Parse the attribute text of a component tag into props."""

from __future__ import annotations

import dataclasses as dc
import enum
import re

ATTRIBUTE_PATTERN = re.compile(
    r"""(:?)([A-Za-z_][\w.:-]*)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'))?"""
)
LAZY_FLAG = "lazy"


class PropKind(enum.Enum):
    """How a prop's value is obtained."""

    BOUND = "bound"
    STATIC = "static"
    BOOLEAN = "boolean"


@dc.dataclass(frozen=True, slots=True)
class PropSpec:
    """A prop as written on a component tag."""

    name: str
    kind: PropKind
    value: str | bool


@dc.dataclass(slots=True)
class ComponentAttributes:
    """Props declared on a component tag plus the ``lazy`` flag."""

    props: dict[str, PropSpec] = dc.field(default_factory=dict)
    lazy: bool = False


def parse_attributes(text: str) -> ComponentAttributes:
    """Parse component tag attributes.

    ``:name="expr"`` declares a bound prop evaluated against the surrounding
    variables, ``name="text"`` a static string prop, and a bare ``name`` a
    boolean prop set to ``True``. Only a leading colon marks a binding, so
    ``x-on:click="go()"`` stays one static prop. A bare ``lazy`` defers
    expansion and is not passed on as a prop.

    Examples
    --------
    >>> attributes = parse_attributes(' :user="users[0]" title="Hi" compact lazy')
    >>> [(spec.name, spec.kind.value) for spec in attributes.props.values()]
    [('user', 'bound'), ('title', 'static'), ('compact', 'boolean')]
    >>> attributes.lazy
    True
    """
    attributes = ComponentAttributes()
    for match in ATTRIBUTE_PATTERN.finditer(text):
        bound, name, double, single = match.groups()
        value = double if double is not None else single
        if value is None:
            if name == LAZY_FLAG and not bound:
                attributes.lazy = True
            else:
                flag = PropSpec(name, PropKind.BOOLEAN, True)
                attributes.props.setdefault(name, flag)
            continue
        kind = PropKind.BOUND if bound else PropKind.STATIC
        attributes.props[name] = PropSpec(name, kind, value)
    return attributes


__all__ = ["ComponentAttributes", "PropKind", "PropSpec", "parse_attributes"]
