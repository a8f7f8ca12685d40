"""Compile ink page, component and layout templates into an SPA bundle.

This package exposes the CLI entry points used by the ``ink`` console script
to build a project's pages, route manifests and localization bundle.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from ink_pages import main
>>> main()  # doctest: +SKIP
>>> from ink_pages import app
>>> callable(app)
True
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
