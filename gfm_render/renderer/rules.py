r"""Per-node rendering rules layered over Python-Markdown's default output.

:class:`RenderRules` decides how headings, images, code blocks, links, task
list items, checkboxes and blockquotes are emitted. It only holds the
immutable :class:`~gfm_render.config.RenderOptions`; everything that changes
while a document renders (heading slugs, which client-side widgets were used)
lives in a :class:`RenderContext` passed into every call, so one rule set can
serve many documents.

Rules either mutate the ElementTree node they are given (``heading``,
``link``, ``list_item``) or return an HTML string that the extension stashes
in place of the node (``image``, ``code``, ``checkbox``, ``blockquote``).
Subclass :class:`RenderRules` and pass the instance as
``RenderOptions.renderer`` to customise any of them.

Example
-------
>>> from gfm_render.renderer.rules import RenderContext, RenderRules
>>> rules = RenderRules()
>>> ctx = RenderContext.for_options(rules.options)
>>> rules.code(ctx, "<b>", "unknown-language")
'<pre><code class="notranslate">&lt;b&gt;</code></pre>'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ
import xml.etree.ElementTree as etree  # noqa: N813 - Python-Markdown convention
from html import escape

from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from gfm_render._constants import LINK_REL, OCTICON_LINK_PATH
from gfm_render.alerts import alert_label, detect_alert
from gfm_render.config import RenderOptions
from gfm_render.mathml import MathRenderError, render_math
from gfm_render.media import (
    classify_media,
    image_html,
    lite_youtube_html,
    video_html,
    youtube_iframe_html,
    youtube_link_html,
    youtube_video_id,
)
from gfm_render.slugger import GithubSlugger
from gfm_render.urls import is_protocol_relative, resolve_url

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element
else:  # pragma: no cover - type-checking fallback
    Element = typ.Any

logger = logging.getLogger(__name__)

TITLE_PATTERN = re.compile(r'\stitle="(.+)"')

_UNCHECKED_ICON = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" '
    'viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" '
    'stroke-linecap="round" stroke-linejoin="round" class="lucide lucide-circle">'
    '<circle cx="12" cy="12" r="10"></circle></svg>'
)
_CHECKED_ICON = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" '
    'viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" '
    'stroke-linecap="round" stroke-linejoin="round" '
    'class="lucide lucide-circle-check">'
    '<circle cx="12" cy="12" r="10"></circle><path d="m9 12 2 2 4-4"></path></svg>'
)


@dc.dataclass(slots=True)
class RenderContext:
    """Mutable state for one document render.

    Attributes
    ----------
    slugger : GithubSlugger | None
        Heading slug allocator, or ``None`` when heading anchors are off.
    mermaid_used : bool
        Set once a mermaid diagram was emitted.
    lite_youtube_used : bool
        Set once a ``lite-youtube`` placeholder was emitted.
    """

    slugger: GithubSlugger | None = None
    mermaid_used: bool = False
    lite_youtube_used: bool = False

    @classmethod
    def for_options(cls, options: RenderOptions) -> RenderContext:
        """Return a fresh context honouring ``options.github_slugger``."""
        return cls(slugger=GithubSlugger() if options.github_slugger else None)


@dc.dataclass(frozen=True, slots=True)
class CodeInfo:
    """Language and optional caption parsed from a fence info string."""

    language: str | None = None
    title: str | None = None


def parse_code_info(info: str | None) -> CodeInfo:
    """Parse a fence info string such as ``ts, ignore`` or ``py title="x.py"``.

    The language is lowercased and stripped of comma-separated modifiers. A
    ``title="..."`` pseudo-attribute becomes the code block caption.
    """
    if not info or not info.strip():
        return CodeInfo()
    text = info.strip()
    title = None
    if match := TITLE_PATTERN.search(text):
        title = match.group(1)
        text = text.split(" ")[0]
    language = text.split(",")[0].strip().lower()
    return CodeInfo(language=language or None, title=title)


def _find_lexer(language: str | None) -> typ.Any | None:
    if not language:
        return None
    try:
        return get_lexer_by_name(language)
    except ClassNotFound:
        return None


class RenderRules:
    """Rendering overrides applied to each Markdown node kind."""

    def __init__(self, options: RenderOptions | None = None) -> None:
        self.options = options or RenderOptions()
        self._formatter = HtmlFormatter(nowrap=True)

    def heading(self, ctx: RenderContext, element: Element, raw: str) -> None:
        """Give ``element`` a slug id and a leading self-link anchor."""
        if self.options.no_links or ctx.slugger is None:
            return
        slug = ctx.slugger.slug(raw)
        element.set("id", slug)
        anchor = etree.Element(
            "a",
            {
                "class": "anchor",
                "aria-hidden": "true",
                "tabindex": "-1",
                "href": f"#{slug}",
            },
        )
        icon = etree.SubElement(
            anchor,
            "svg",
            {
                "class": "octicon octicon-link",
                "viewBox": "0 0 16 16",
                "width": "16",
                "height": "16",
                "aria-hidden": "true",
            },
        )
        etree.SubElement(
            icon, "path", {"fill-rule": "evenodd", "d": OCTICON_LINK_PATH}
        )
        anchor.tail = element.text
        element.text = None
        element.insert(0, anchor)

    def image(
        self, ctx: RenderContext, src: str, title: str | None, alt: str
    ) -> str:
        """Return the markup for a Markdown image target."""
        match classify_media(src):
            case "youtube":
                if self.options.youtube_handling == "link":
                    return youtube_link_html(src, title, alt)
                video_id = typ.cast(str, youtube_video_id(src))
                label = title or alt
                if self.options.youtube_handling == "lite":
                    ctx.lite_youtube_used = True
                    return lite_youtube_html(video_id, label)
                return youtube_iframe_html(video_id, label)
            case "video":
                return video_html(src, title, alt)
            case "image":
                return image_html(src, title, alt)
            case unreachable:
                typ.assert_never(unreachable)

    def code(self, ctx: RenderContext, code: str, info: str | None) -> str:
        """Return the markup for a fenced or indented code block."""
        parsed = parse_code_info(info)
        language = parsed.language
        if language == "math" and self.options.allow_math:
            try:
                return render_math(code, display=True)
            except MathRenderError as exc:
                logger.warning("Rendering math block as code: %s", exc)
        is_mermaid = self.options.mermaid and language == "mermaid"
        if is_mermaid:
            ctx.mermaid_used = True
        title_html = ""
        if parsed.title:
            caption = escape(parsed.title, quote=False)
            title_html = f'<div class="markdown-code-title">{caption}</div>'
        escaped = escape(code, quote=False)
        lexer = _find_lexer(language)
        if lexer is None:
            if is_mermaid:
                return (
                    f'<div class="mermaid-container">{title_html}'
                    f'<pre><code class="notranslate">{escaped}</code></pre>'
                    f'<div class="mermaid-code">{escaped}</div></div>'
                )
            return f'<pre><code class="notranslate">{escaped}</code></pre>'
        highlighted = highlight(code, lexer, self._formatter).rstrip("\n")
        block = (
            f'<div class="highlight highlight-source-{escape(language or "")} '
            f'notranslate">{title_html}<pre>{highlighted}</pre></div>'
        )
        if is_mermaid:
            return (
                f'<div class="mermaid-container">{block}'
                f'<div class="mermaid-code">{escaped}</div></div>'
            )
        return block

    def link(self, ctx: RenderContext, parent: Element, element: Element) -> None:
        """Resolve and harden an ``<a>`` element, or unwrap it entirely."""
        if self.options.no_links:
            _unwrap(parent, element)
            return
        href = element.get("href", "")
        if href.startswith("#"):
            return
        if self.options.base_url and not is_protocol_relative(href):
            try:
                element.set("href", resolve_url(href, self.options.base_url))
            except ValueError as exc:
                logger.debug("Keeping unresolved link: %s", exc)
        element.set("rel", LINK_REL)

    def list_item(self, ctx: RenderContext, element: Element, checked: bool) -> None:
        """Mark a task-list item as an accessible checkbox row."""
        element.set("style", "list-style-type: none;")
        element.set("role", "checkbox")
        element.set("aria-checked", "true" if checked else "false")

    def checkbox(self, ctx: RenderContext, checked: bool) -> str:
        """Return the task-list checkbox markup."""
        if self.options.svg_checkboxes:
            return _CHECKED_ICON if checked else _UNCHECKED_ICON
        return "☑" if checked else "□"

    def blockquote(self, ctx: RenderContext, text: str) -> str | None:
        """Return replacement markup for a blockquote, or ``None`` to keep it.

        Only used when alert boxes are disabled: the alert marker is cut out
        of the rendered ``text`` by raw offsets and replaced by a bold label
        paragraph. A marker nested inside inline markup is cut the same way,
        which can leave unbalanced tags for the sanitizer to repair.
        """
        if self.options.alerts:
            return None
        marker = detect_alert(text)
        if marker is None:
            return None
        start = text.lower().index(marker)
        remainder = (text[:start] + text[start + len(marker) :]).strip()
        return f"<p><b>{alert_label(marker)}: </b></p>{remainder}"


def _unwrap(parent: Element, element: Element) -> None:
    """Replace ``element`` in ``parent`` by its text and children."""
    index = list(parent).index(element)
    children = list(element)
    leading = element.text or ""
    if index == 0:
        parent.text = (parent.text or "") + leading
    else:
        previous = parent[index - 1]
        previous.tail = (previous.tail or "") + leading
    parent.remove(element)
    for offset, child in enumerate(children):
        parent.insert(index + offset, child)
    tail = element.tail or ""
    if children:
        last = children[-1]
        last.tail = (last.tail or "") + tail
    elif index == 0:
        parent.text = (parent.text or "") + tail
    else:
        previous = parent[index - 1]
        previous.tail = (previous.tail or "") + tail


__all__ = ["CodeInfo", "RenderContext", "RenderRules", "parse_code_info"]
