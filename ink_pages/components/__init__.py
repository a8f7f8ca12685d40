"""Component discovery and recursive expansion.

:class:`ComponentRegistry` maps reference spellings onto component files and
:class:`ComponentResolver` compiles every ``<x-...>`` tag and ``@include``
directive in a body into self-contained Alpine component markup.
"""

from .attributes import ComponentAttributes, PropKind, PropSpec, parse_attributes
from .registry import (
    CANDIDATE_NORMALIZERS,
    ComponentDefinition,
    ComponentRegistry,
    candidate_names,
    scan_components,
)
from .resolver import (
    ComponentParking,
    ComponentReference,
    ComponentResolver,
    ExpansionContext,
    component_id,
    find_references,
    referenced_names,
)

__all__ = [
    "CANDIDATE_NORMALIZERS",
    "ComponentAttributes",
    "ComponentDefinition",
    "ComponentParking",
    "ComponentReference",
    "ComponentRegistry",
    "ComponentResolver",
    "ExpansionContext",
    "PropKind",
    "PropSpec",
    "candidate_names",
    "component_id",
    "find_references",
    "parse_attributes",
    "referenced_names",
    "scan_components",
]
