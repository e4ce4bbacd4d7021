r"""Detect and render GitHub alert blocks.

GitHub renders blockquotes that open with a marker such as ``[!NOTE]`` as
coloured admonition boxes. This module recognises those markers and ships a
Python-Markdown extension that rewrites matching blockquotes into the
``markdown-alert`` markup GitHub emits.

Example
-------
>>> from gfm_render.alerts import alert_label, detect_alert
>>> detect_alert("<p>[!WARNING]\nMind the gap</p>")
'[!warning]'
>>> alert_label("[!warning]")
'Warning'
"""

from __future__ import annotations

import re
import typing as typ
import xml.etree.ElementTree as etree  # noqa: N813 - Python-Markdown convention

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from ._constants import ALERT_ICONS, ALERT_MARKERS

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

ALERT_MARKER_PATTERN = re.compile(
    r"^\[!(?P<kind>note|tip|important|warning|caution)\]\s*", re.IGNORECASE
)


def detect_alert(text: str) -> str | None:
    """Return the lowercased alert marker found anywhere in ``text``.

    Matching is case-insensitive. When several markers occur, the one that
    appears last in :data:`ALERT_MARKERS` wins.
    """
    lowered = text.lower()
    found = None
    for marker in ALERT_MARKERS:
        if marker in lowered:
            found = marker
    return found


def alert_label(marker: str) -> str:
    """Return the display label for ``marker`` (``[!tip]`` -> ``Tip``)."""
    word = marker[2:-1]
    return word[:1].upper() + word[1:].lower()


class AlertExtension(Extension):
    """Render ``> [!NOTE]`` style blockquotes as GitHub alert boxes."""

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]
        """Register the alert treeprocessor after inline processing."""
        md.treeprocessors.register(AlertTreeprocessor(md), "gfm_alerts", 17)


class AlertTreeprocessor(Treeprocessor):
    """Rewrite alert blockquotes into ``div.markdown-alert`` containers."""

    def run(self, root: Element) -> Element:  # pragma: no cover - Markdown API
        """Convert every blockquote whose first paragraph opens with a marker."""
        for blockquote in list(root.iter("blockquote")):
            kind = self._consume_marker(blockquote)
            if kind is not None:
                self._convert(blockquote, kind)
        return root

    @staticmethod
    def _consume_marker(blockquote: Element) -> str | None:
        """Strip the leading marker from the blockquote and return its kind."""
        if len(blockquote) == 0 or blockquote[0].tag != "p":
            return None
        first = blockquote[0]
        match = ALERT_MARKER_PATTERN.match(first.text or "")
        if match is None:
            return None
        first.text = (first.text or "")[match.end() :]
        if not first.text and len(first) and first[0].tag == "br":
            line_break = first[0]
            first.remove(line_break)
            first.text = (line_break.tail or "").lstrip()
        if not first.text and len(first) == 0:
            blockquote.remove(first)
        return match.group("kind").lower()

    @staticmethod
    def _convert(blockquote: Element, kind: str) -> None:
        icon, path = ALERT_ICONS[kind]
        blockquote.tag = "div"
        blockquote.set("class", f"markdown-alert markdown-alert-{kind}")
        title = etree.Element("p", {"class": "markdown-alert-title"})
        svg = etree.SubElement(
            title,
            "svg",
            {
                "class": f"octicon octicon-{icon}",
                "viewBox": "0 0 16 16",
                "width": "16",
                "height": "16",
                "aria-hidden": "true",
            },
        )
        etree.SubElement(svg, "path", {"d": path})
        svg.tail = alert_label(f"[!{kind}]")
        blockquote.insert(0, title)


__all__ = [
    "ALERT_MARKER_PATTERN",
    "AlertExtension",
    "AlertTreeprocessor",
    "alert_label",
    "detect_alert",
]
