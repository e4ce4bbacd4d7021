r"""Render GitHub-flavored Markdown to sanitized HTML or sectioned plain text.

Exports
-------
- ``render``: Markdown to sanitized, embeddable HTML.
- ``strip`` and ``strip_split_by_sections``: Markdown to plain text, either
  flat or split at headings.
- ``RenderOptions``: the switches one call runs with.
- ``RenderRules``: overridable per-node rendering rules.
- ``CSS`` and ``highlight_css``: stylesheets for the rendered markup.
- ``app`` and ``main``: the ``gfm`` command-line interface.

Examples
--------
>>> from gfm_render import render, strip
>>> strip("# Title\n\nSome **bold** text.")
'Title\n\nSome bold text.\n'
"""

from __future__ import annotations

from .cli import app, main
from .config import (
    AllowedAttribute,
    RenderConfigError,
    RenderOptions,
    load_render_options,
)
from .markdown_parser import tokenize
from .renderer import RenderContext, RenderRules, render
from .sanitizer import SanitizationPolicy, strip_markup
from .stripper import MarkdownSection, strip, strip_split_by_sections
from .style import CSS, highlight_css

__all__ = [
    "CSS",
    "AllowedAttribute",
    "MarkdownSection",
    "RenderConfigError",
    "RenderContext",
    "RenderOptions",
    "RenderRules",
    "SanitizationPolicy",
    "app",
    "highlight_css",
    "load_render_options",
    "main",
    "render",
    "strip",
    "strip_markup",
    "strip_split_by_sections",
    "tokenize",
]
