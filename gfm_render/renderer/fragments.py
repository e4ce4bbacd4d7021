"""Client-side runtime fragments prepended to rendered documents.

Mermaid diagrams and lite YouTube embeds need a script (and some CSS) in the
page. The renderer records which of them a document used in its
:class:`~gfm_render.renderer.rules.RenderContext`; :func:`runtime_fragments`
turns those flags into the markup placed ahead of the body.
"""

from __future__ import annotations

import re
import typing as typ

from gfm_render._constants import (
    LITE_YOUTUBE_SCRIPT_URL,
    LITE_YOUTUBE_STYLESHEET_URL,
    MERMAID_MODULE_URL,
)

if typ.TYPE_CHECKING:
    from .rules import RenderContext

_BETWEEN_TAGS = re.compile(r">\s+<")
_TAG_OPENING = re.compile(r"<(\w+)(\s*\n\s*|\s{2,})")
_AROUND_EQUALS = re.compile(r"\s*=\s*")
_AROUND_PUNCTUATION = re.compile(r"\s*([{};(),:])\s*")
_EMBEDDED = re.compile(
    r"(<(?:style|script)[^>]*>)(.*?)(</(?:style|script)>)", re.DOTALL
)
_LINE_EDGES = re.compile(r"^\s+|\s+$", re.MULTILINE)
_NEWLINES = re.compile(r"\s*\n\s*")


def minify(markup: str) -> str:
    """Collapse the whitespace of a hand-written HTML, CSS and JS snippet.

    Only meant for the fixed runtime fragments in this module: it also
    squeezes whitespace around ``=`` and punctuation, which would corrupt
    arbitrary document text.
    """
    text = _BETWEEN_TAGS.sub("><", markup)
    text = _TAG_OPENING.sub(r"<\1 ", text)
    text = _AROUND_EQUALS.sub("=", text)
    text = _AROUND_PUNCTUATION.sub(r"\1", text)

    def _squash(match: re.Match[str]) -> str:
        start, content, end = match.groups()
        content = _NEWLINES.sub(" ", _LINE_EDGES.sub("", content))
        return f"{start}{content}{end}"

    return _EMBEDDED.sub(_squash, text).strip()


MERMAID_RUNTIME = minify(
    f"""
    <script type="module">
      import mermaid from "{MERMAID_MODULE_URL}";
      mermaid.initialize({{ startOnLoad: false, theme: "neutral" }});

      const elements = document.querySelectorAll(".mermaid-container");
      elements.forEach((element) => {{
        const code = element.querySelector(".mermaid-code")?.textContent || "";
        if (code) {{
          element.innerHTML = `<div class="mermaid">${{code}}</div>`;
        }}
      }});

      await mermaid.run();
    </script>
    <style>
      .mermaid-code {{
        display: none;
      }}
    </style>
    """
)

LITE_YOUTUBE_RUNTIME = (
    f'<script defer src="{LITE_YOUTUBE_SCRIPT_URL}"></script>'
    f'<link rel="stylesheet" href="{LITE_YOUTUBE_STYLESHEET_URL}" />'
)


def runtime_fragments(context: RenderContext) -> str:
    """Return the runtime markup required by the widgets ``context`` used."""
    fragments = []
    if context.mermaid_used:
        fragments.append(MERMAID_RUNTIME)
    if context.lite_youtube_used:
        fragments.append(LITE_YOUTUBE_RUNTIME)
    return "".join(fragments)


__all__ = ["LITE_YOUTUBE_RUNTIME", "MERMAID_RUNTIME", "minify", "runtime_fragments"]
