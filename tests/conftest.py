"""Shared fixtures for building throwaway ink projects on disk."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import pytest

from ink_pages.config import InkConfig

if typ.TYPE_CHECKING:
    from pathlib import Path


@dc.dataclass(slots=True)
class ProjectBuilder:
    """Write pages, components, layouts and catalogs under ``root``."""

    root: Path
    suffix: str = ".ink"

    @property
    def source(self) -> Path:
        return self.root / "resources" / "ink"

    def write(self, relative: str, text: str) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def page(self, name: str, text: str) -> Path:
        return self.write(f"resources/ink/pages/{name}{self.suffix}", text)

    def component(self, name: str, text: str) -> Path:
        return self.write(f"resources/ink/components/{name}{self.suffix}", text)

    def layout(self, name: str, text: str) -> Path:
        return self.write(f"resources/ink/layouts/{name}{self.suffix}", text)

    def lang(self, relative: str, text: str) -> Path:
        return self.write(f"resources/ink/lang/{relative}", text)

    def config(self, **overrides: typ.Any) -> InkConfig:
        overrides.setdefault("locales", ["en"])
        return InkConfig(project_root=self.root, **overrides)

    def output(self, relative: str) -> Path:
        return self.root / "public" / relative


@pytest.fixture
def project(tmp_path: Path) -> ProjectBuilder:
    """Return a builder rooted at a fresh temporary project directory."""
    return ProjectBuilder(tmp_path.resolve())
