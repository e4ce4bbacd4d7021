r"""Render GitHub-flavored Markdown into sanitized HTML.

The pipeline expands emoji shortcodes, converts the document with
Python-Markdown plus the GFM extensions, prepends any client-side runtime the
document needs, and finally passes the HTML through the sanitization policy.

Example
-------
>>> from gfm_render import render
>>> render("# Title\n\nSome **bold** text.")[:15]
'<h1 id="title">'
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from markdown import Markdown
from markdown.extensions import Extension
from pymdownx import emoji as pymdown_emoji

from gfm_render.alerts import AlertExtension
from gfm_render.config import RenderOptions
from gfm_render.sanitizer import SanitizationPolicy

from .extension import SUPERFENCES, GfmExtension, superfences_config
from .fragments import runtime_fragments
from .rules import RenderContext, RenderRules

logger = logging.getLogger(__name__)

_SINGLE_PARAGRAPH = re.compile(r"\A<p>(?P<body>.*)</p>\Z", re.DOTALL)
_SHORTCODE = re.compile(r":[a-z0-9_+-]+:")


@lru_cache(maxsize=1)
def _gemoji_table() -> dict[str, str]:
    """Map every gemoji shortcode and alias to its Unicode sequence."""
    index = pymdown_emoji.gemoji({}, None)
    table: dict[str, str] = {}
    for shortcode, entry in index["emoji"].items():
        codepoints = entry.get("unicode_alt") or entry.get("unicode")
        # GitHub-only images such as :octocat: have no Unicode form.
        if codepoints:
            table[shortcode] = "".join(
                chr(int(point, 16)) for point in codepoints.split("-")
            )
    for alias, target in index["aliases"].items():
        if target in table:
            table[alias] = table[target]
    return table


def expand_emoji(markdown: str) -> str:
    """Replace ``:shortcode:`` emoji aliases with their Unicode characters.

    Shortcodes come from the gemoji index GitHub uses; unknown codes are
    left as written.
    """
    table = _gemoji_table()
    return _SHORTCODE.sub(
        lambda match: table.get(match.group(0), match.group(0)), markdown
    )


def build_markdown(
    options: RenderOptions, rules: RenderRules, context: RenderContext
) -> Markdown:
    """Return a Markdown converter configured for one render call."""
    extensions: list[Extension | str] = [
        "tables",
        "sane_lists",
        "md_in_html",
        "footnotes",
        SUPERFENCES,
    ]
    if options.breaks:
        extensions.append("nl2br")
    if options.alerts:
        extensions.append(AlertExtension())
    extensions.append(GfmExtension(options, rules, context))
    fences = superfences_config(lambda code, info: rules.code(context, code, info))
    return Markdown(
        extensions=extensions,
        extension_configs={
            "tables": {"use_align_attribute": True},
            SUPERFENCES: fences,
        },
        output_format="html",
    )


def _unwrap_paragraph(html: str) -> str:
    match = _SINGLE_PARAGRAPH.match(html.strip())
    if match is None or "<p>" in match.group("body"):
        return html
    return match.group("body")


def render(markdown: str, options: RenderOptions | None = None) -> str:
    """Render ``markdown`` to HTML.

    Parameters
    ----------
    markdown : str
        GitHub-flavored Markdown source.
    options : RenderOptions, optional
        Rendering switches; defaults to :class:`RenderOptions` defaults.

    Returns
    -------
    str
        The rendered body, preceded by the mermaid or lite-youtube runtime
        when the document uses them, and sanitized unless
        ``options.disable_html_sanitization`` is set.

    Raises
    ------
    RenderConfigError
        If a caller-supplied allow-list has an invalid shape.
    """
    opts = options or RenderOptions()
    rules = opts.renderer or RenderRules(opts)
    context = RenderContext.for_options(rules.options)

    source = expand_emoji(markdown)
    converter = build_markdown(opts, rules, context)
    body = converter.convert(source)
    if opts.inline:
        body = _unwrap_paragraph(body)

    runtime = runtime_fragments(context)
    if opts.disable_html_sanitization:
        logger.debug("Sanitization disabled; returning raw HTML")
        return runtime + body
    return runtime + SanitizationPolicy.from_options(opts).clean(body)


__all__ = ["build_markdown", "expand_emoji", "render"]
