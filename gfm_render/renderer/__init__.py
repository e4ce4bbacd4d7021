"""Markdown-to-HTML rendering for gfm_render.

Exports
-------
- ``render``: convert Markdown to sanitized HTML.
- ``RenderRules``: overridable per-node rendering rules.
- ``RenderContext``: per-document rendering state.
- ``GfmExtension``: the Python-Markdown extension applying the rules.
"""

from .extension import GfmExtension
from .fragments import runtime_fragments
from .pipeline import build_markdown, expand_emoji, render
from .rules import CodeInfo, RenderContext, RenderRules, parse_code_info

__all__ = [
    "CodeInfo",
    "GfmExtension",
    "RenderContext",
    "RenderRules",
    "build_markdown",
    "expand_emoji",
    "parse_code_info",
    "render",
    "runtime_fragments",
]
