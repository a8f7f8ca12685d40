"""Locate layout templates by dotted name."""

from __future__ import annotations

import typing as typ

from ..config.models import strip_template_suffix
from ..errors import LayoutNotFoundError

if typ.TYPE_CHECKING:
    from pathlib import Path


def layout_name(path: Path, root: Path, suffixes: tuple[str, ...]) -> str | None:
    """Return the dotted layout name for ``path``, or ``None`` outside ``root``.

    Examples
    --------
    >>> from pathlib import Path
    >>> layout_name(Path("layouts/admin/main.ink"), Path("layouts"), (".ink",))
    'admin.main'
    """
    try:
        relative = path.relative_to(root).as_posix()
    except ValueError:
        return None
    stem = strip_template_suffix(relative, suffixes)
    return None if stem is None else stem.replace("/", ".")


def normalize_layout_name(name: str) -> str:
    """Return ``name`` in dotted form (``admin/main`` becomes ``admin.main``)."""
    return name.strip().strip("/").replace("/", ".")


class LayoutResolver:
    """Map layout names such as ``admin.main`` to files under the layouts root."""

    def __init__(self, root: Path, suffixes: tuple[str, ...]) -> None:
        self.root = root
        self.suffixes = suffixes

    def candidates(self, name: str) -> list[Path]:
        """Return the paths searched for ``name``, in order."""
        relative = normalize_layout_name(name).replace(".", "/")
        return [self.root / f"{relative}{suffix}" for suffix in self.suffixes]

    def resolve(self, name: str) -> Path:
        """Return the layout file for ``name``.

        Raises
        ------
        LayoutNotFoundError
            If no candidate path exists.
        """
        searched = self.candidates(name)
        for path in searched:
            if path.is_file():
                return path
        raise LayoutNotFoundError(name, searched)


__all__ = ["LayoutResolver", "layout_name", "normalize_layout_name"]
