"""Stylesheets for rendered Markdown.

``CSS`` styles the markup emitted by :func:`gfm_render.render` (headings with
anchors, alert boxes, task lists, code titles, footnotes, embeds). Syntax
highlighting colours come from Pygments and are generated separately by
:func:`highlight_css`, so callers can pick any installed Pygments style.
"""

from __future__ import annotations

from functools import lru_cache

from pygments.formatters.html import HtmlFormatter

CSS = """\
.markdown-body {
  line-height: 1.5;
  word-wrap: break-word;
}
.markdown-body > *:first-child { margin-top: 0 !important; }
.markdown-body > *:last-child { margin-bottom: 0 !important; }
.markdown-body h1, .markdown-body h2, .markdown-body h3,
.markdown-body h4, .markdown-body h5, .markdown-body h6 {
  position: relative;
  margin-top: 24px;
  margin-bottom: 16px;
  font-weight: 600;
  line-height: 1.25;
}
.markdown-body h1, .markdown-body h2 {
  padding-bottom: 0.3em;
  border-bottom: 1px solid #d0d7de;
}
.markdown-body .anchor {
  float: left;
  margin-left: -20px;
  padding-right: 4px;
  line-height: 1;
}
.markdown-body .anchor .octicon-link { visibility: hidden; vertical-align: middle; }
.markdown-body h1:hover .anchor .octicon-link,
.markdown-body h2:hover .anchor .octicon-link,
.markdown-body h3:hover .anchor .octicon-link,
.markdown-body h4:hover .anchor .octicon-link,
.markdown-body h5:hover .anchor .octicon-link,
.markdown-body h6:hover .anchor .octicon-link { visibility: visible; }
.markdown-body .octicon { display: inline-block; fill: currentColor; }
.markdown-body blockquote {
  margin: 0 0 16px;
  padding: 0 1em;
  color: #57606a;
  border-left: 0.25em solid #d0d7de;
}
.markdown-body table { border-collapse: collapse; }
.markdown-body table th, .markdown-body table td {
  padding: 6px 13px;
  border: 1px solid #d0d7de;
}
.markdown-body pre {
  padding: 16px;
  overflow: auto;
  font-size: 85%;
  background-color: #f6f8fa;
  border-radius: 6px;
}
.markdown-body code {
  padding: 0.2em 0.4em;
  font-size: 85%;
  background-color: rgba(175, 184, 193, 0.2);
  border-radius: 6px;
}
.markdown-body pre code { padding: 0; background: transparent; }
.markdown-body .markdown-code-title {
  padding: 8px 16px;
  font-size: 85%;
  font-weight: 600;
  background-color: #eaeef2;
  border-radius: 6px 6px 0 0;
}
.markdown-body .markdown-code-title + pre {
  border-top-left-radius: 0;
  border-top-right-radius: 0;
}
.markdown-body li[role="checkbox"] svg {
  width: 1em;
  height: 1em;
  margin-right: 0.4em;
  vertical-align: -0.125em;
}
.markdown-body .markdown-alert {
  margin-bottom: 16px;
  padding: 0.5rem 1rem;
  border-left: 0.25em solid #d0d7de;
}
.markdown-body .markdown-alert > :last-child { margin-bottom: 0; }
.markdown-body .markdown-alert-title {
  display: flex;
  align-items: center;
  font-weight: 500;
}
.markdown-body .markdown-alert-title .octicon { margin-right: 0.5rem; }
.markdown-body .markdown-alert-note { border-left-color: #0969da; }
.markdown-body .markdown-alert-note .markdown-alert-title { color: #0969da; }
.markdown-body .markdown-alert-tip { border-left-color: #1a7f37; }
.markdown-body .markdown-alert-tip .markdown-alert-title { color: #1a7f37; }
.markdown-body .markdown-alert-important { border-left-color: #8250df; }
.markdown-body .markdown-alert-important .markdown-alert-title { color: #8250df; }
.markdown-body .markdown-alert-warning { border-left-color: #9a6700; }
.markdown-body .markdown-alert-warning .markdown-alert-title { color: #9a6700; }
.markdown-body .markdown-alert-caution { border-left-color: #cf222e; }
.markdown-body .markdown-alert-caution .markdown-alert-title { color: #cf222e; }
.markdown-body .footnotes {
  font-size: 12px;
  color: #57606a;
  border-top: 1px solid #d0d7de;
}
.markdown-body .sr-only {
  position: absolute;
  width: 1px;
  height: 1px;
  overflow: hidden;
  clip: rect(0, 0, 0, 0);
  white-space: nowrap;
}
.markdown-body .math-display { display: block; overflow-x: auto; }
.markdown-body .mermaid-code { display: none; }
.markdown-body .youtube-embed {
  display: block;
  max-width: 720px;
  aspect-ratio: 16 / 9;
  background-position: center;
  background-size: cover;
}
.markdown-body img, .markdown-body video { max-width: 100%; }
"""


@lru_cache(maxsize=16)
def highlight_css(style: str = "default") -> str:
    """Return Pygments rules for ``.highlight`` blocks in ``style``.

    Raises
    ------
    pygments.util.ClassNotFound
        If ``style`` is not an installed Pygments style.
    """
    return HtmlFormatter(style=style).get_style_defs(".highlight")


__all__ = ["CSS", "highlight_css"]
