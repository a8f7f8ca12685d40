"""Error taxonomy raised by the ink_pages compiler stages.

Every compiler failure derives from :class:`InkError` so the build
orchestrator can isolate a failing page without swallowing unrelated
exceptions. Most errors are fatal for the page being compiled;
:class:`ComponentNotFoundError` is the exception and degrades to an inline
diagnostic comment.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path


class InkError(Exception):
    """Base class for compiler errors tied to a source document."""


class DocumentReadError(InkError):
    """Raised when a source document cannot be read from disk."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read source document '{path}': {reason}")


class VariableMaterializationError(InkError):
    """Raised when a config block's variable declarations fail to evaluate."""

    def __init__(self, path: Path | None, line: int | None, message: str) -> None:
        self.path = path
        self.line = line
        self.message = message
        location = str(path) if path is not None else "<config>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"Variable evaluation failed at {location}: {message}")


class NonSerializableVariableError(InkError):
    """Raised when a materialized variable cannot be reduced to plain data."""

    def __init__(self, name: str, path: Path | None, type_name: str) -> None:
        self.name = name
        self.path = path
        self.type_name = type_name
        where = f" in '{path}'" if path is not None else ""
        super().__init__(
            f"Variable '{name}'{where} holds a {type_name} value that cannot be "
            "converted to JSON data; expose to_dict() or to_list() on it."
        )


class ComponentNotFoundError(InkError):
    """Raised when no spelling of a component reference resolves to a file."""

    def __init__(
        self,
        name: str,
        candidates: cabc.Sequence[str],
        available: cabc.Sequence[str],
    ) -> None:
        self.name = name
        self.candidates = list(candidates)
        self.available = list(available)
        super().__init__(
            f"Component '{name}' not found (tried {', '.join(self.candidates)})."
        )


class LayoutNotFoundError(InkError):
    """Raised when a page names a layout that does not exist."""

    def __init__(self, name: str, searched: cabc.Sequence[Path]) -> None:
        self.name = name
        self.searched = list(searched)
        paths = ", ".join(str(path) for path in self.searched)
        super().__init__(f"Layout '{name}' not found (searched {paths}).")


class LayoutRenderError(InkError):
    """Raised when the template engine fails to render a layout."""


__all__ = [
    "ComponentNotFoundError",
    "DocumentReadError",
    "InkError",
    "LayoutNotFoundError",
    "LayoutRenderError",
    "NonSerializableVariableError",
    "VariableMaterializationError",
]
