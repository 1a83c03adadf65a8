"""Render element pages and pen design documents into HTML and CSS.

This package exposes the slot-template interpreter, the style sanitizer and
scoper, the pen document compiler, and the page renderer, together with the
``pages`` CLI used to build a site from ``config/pages.yaml``.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that configures logging and invokes the app.

Examples
--------
>>> from lcms_pages import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
