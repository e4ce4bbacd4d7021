"""Python-Markdown extension wiring :class:`RenderRules` into the parser.

The extension contributes two preprocessors (math and details blocks), a
strikethrough inline pattern, and one treeprocessor that walks the parsed
tree and hands each node kind to the matching rule. Rules that return HTML
strings are stored in the Markdown HTML stash and spliced back in by
Python-Markdown's raw-HTML postprocessor.
"""

from __future__ import annotations

import re
import typing as typ
import xml.etree.ElementTree as etree  # noqa: N813 - Python-Markdown convention
from html import escape, unescape

from markdown import util
from markdown.extensions import Extension
from markdown.inlinepatterns import SimpleTagInlineProcessor
from markdown.preprocessors import Preprocessor
from markdown.serializers import to_html_string
from markdown.treeprocessors import Treeprocessor

from gfm_render.mathml import mathify

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from gfm_render.config import RenderOptions

    from .rules import RenderContext, RenderRules
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any
    RenderOptions = typ.Any
    RenderContext = typ.Any
    RenderRules = typ.Any

DETAILS_OPEN_PATTERN = re.compile(
    r"^(?P<indent>[ ]{0,3})<details\b(?![^>]*\bmarkdown=)", re.MULTILINE
)
STRIKETHROUGH_PATTERN = r"(~{2})(.+?)\1"
TASK_MARKER_PATTERN = re.compile(r"^\[(?P<state>[ xX])\][ \t]+")
ESCAPED_CHAR_PATTERN = re.compile(f"{util.STX}([0-9]+){util.ETX}")
TAG_PATTERN = re.compile(r"<[^>]*>")
HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
SUPERFENCES = "pymdownx.superfences"


def fence_info(language: str, options: typ.Mapping[str, typ.Any] | None) -> str:
    """Rebuild a fence info string from a parsed header.

    SuperFences splits ``python title="app.py"`` into the language and an
    options mapping; the rules expect the original single string.
    """
    title = (options or {}).get("title")
    return f'{language} title="{title}"' if title else language


def superfences_config(
    format_block: typ.Callable[[str, str], str],
) -> dict[str, typ.Any]:
    """Return ``pymdownx.superfences`` settings routing fences to ``format_block``.

    The catch-all ``*`` fence replaces SuperFences' own highlighter, so every
    fenced block (top level, quoted, or nested in a list item) reaches
    ``format_block(code, info)`` with its quote and indent prefix removed.
    """

    def _format(
        source: str,
        language: str,
        _css_class: str,
        options: dict[str, typ.Any],
        _md: Markdown,
        **kwargs: typ.Any,
    ) -> str:
        return format_block(source, fence_info(language, options))

    return {
        "relaxed_headers": True,
        "custom_fences": [{"name": "*", "class": "", "format": _format}],
    }


class MathPreprocessor(Preprocessor):
    """Typeset math spans and stash the MathML away from inline parsing."""

    def run(self, lines: list[str]) -> list[str]:
        """Return ``lines`` with every convertible math span substituted."""
        text = mathify("\n".join(lines), emit=self.md.htmlStash.store)
        return text.split("\n")


class DetailsPreprocessor(Preprocessor):
    """Let Markdown inside ``<details>`` blocks render, nested lists included.

    Python-Markdown keeps block HTML opaque, so a list after ``</summary>``
    would stay literal text. Marking the element for ``md_in_html`` parses
    its body as Markdown while the ``<summary>`` line stays raw HTML.
    """

    def run(self, lines: list[str]) -> list[str]:
        """Tag every block-level ``<details>`` opening for Markdown parsing."""
        text = DETAILS_OPEN_PATTERN.sub(
            r'\g<indent><details markdown="1"', "\n".join(lines)
        )
        return text.split("\n")


class RulesTreeprocessor(Treeprocessor):
    """Apply :class:`RenderRules` to the parsed document tree."""

    def __init__(
        self, md: Markdown, rules: RenderRules, context: RenderContext
    ) -> None:
        super().__init__(md)
        self.rules = rules
        self.context = context

    def run(self, root: Element) -> Element:  # pragma: no cover - Markdown API
        """Run every rule pass; blockquotes go last as they freeze their body."""
        self._render_images(root)
        self._render_links(root)
        self._render_indented_code(root)
        self._render_headings(root)
        self._render_task_items(root)
        _reshape_footnotes(root)
        self._render_blockquotes(root)
        return root

    def _render_images(self, root: Element) -> None:
        for parent, image in _children_by_tag(root, "img"):
            markup = self.rules.image(
                self.context,
                image.get("src", ""),
                image.get("title") or None,
                image.get("alt", ""),
            )
            _replace_inline(parent, image, self.md.htmlStash.store(markup))

    def _render_links(self, root: Element) -> None:
        for parent, link in _children_by_tag(root, "a"):
            self.rules.link(self.context, parent, link)

    def _render_indented_code(self, root: Element) -> None:
        for _parent, block in _children_by_tag(root, "pre"):
            if len(block) != 1 or block[0].tag != "code" or block[0].get("class"):
                continue
            source = unescape(block[0].text or "").rstrip("\n")
            markup = self.rules.code(self.context, source, None)
            _replace_block(block, self.md.htmlStash.store(markup))

    def _render_headings(self, root: Element) -> None:
        for heading in [el for el in root.iter() if el.tag in HEADING_TAGS]:
            self.rules.heading(self.context, heading, self._plain_text(heading))

    def _render_task_items(self, root: Element) -> None:
        for item in list(root.iter("li")):
            target = item
            if not (item.text or "").strip() and len(item) and item[0].tag == "p":
                target = item[0]
            match = TASK_MARKER_PATTERN.match(target.text or "")
            if match is None:
                continue
            checked = match.group("state") != " "
            markup = self.rules.checkbox(self.context, checked)
            checkbox = self.md.htmlStash.store(markup)
            target.text = checkbox + target.text[match.end() :]
            self.rules.list_item(self.context, item, checked)

    def _render_blockquotes(self, root: Element) -> None:
        for blockquote in reversed(list(root.iter("blockquote"))):
            text = self._inner_html(blockquote)
            replacement = self.rules.blockquote(self.context, text)
            if replacement is not None:
                _replace_block(blockquote, self.md.htmlStash.store(replacement))

    def _inner_html(self, element: Element) -> str:
        """Serialize the children of ``element`` with escapes resolved."""
        parts = [escape(element.text or "", quote=False)]
        parts.extend(to_html_string(child) for child in element)
        return ESCAPED_CHAR_PATTERN.sub(
            lambda match: escape(chr(int(match.group(1))), quote=False),
            "".join(parts),
        )

    def _plain_text(self, element: Element) -> str:
        """Return the visible text of ``element`` as authored."""
        text = "".join(element.itertext())

        def _stashed(match: re.Match[str]) -> str:
            index = int(match.group(1))
            blocks = self.md.htmlStash.rawHtmlBlocks
            raw = blocks[index] if index < len(blocks) else ""
            return TAG_PATTERN.sub("", raw) if isinstance(raw, str) else ""

        text = util.HTML_PLACEHOLDER_RE.sub(_stashed, text)
        return ESCAPED_CHAR_PATTERN.sub(lambda m: chr(int(m.group(1))), text).strip()


def _children_by_tag(root: Element, tag: str) -> list[tuple[Element, Element]]:
    """Return ``(parent, child)`` pairs for every ``tag`` element, in order."""
    return [
        (parent, child)
        for parent in root.iter()
        for child in parent
        if child.tag == tag
    ]


def _replace_inline(parent: Element, element: Element, text: str) -> None:
    """Swap ``element`` for ``text`` inside the text flow of ``parent``."""
    index = list(parent).index(element)
    merged = text + (element.tail or "")
    if index == 0:
        parent.text = (parent.text or "") + merged
    else:
        previous = parent[index - 1]
        previous.tail = (previous.tail or "") + merged
    parent.remove(element)


def _replace_block(element: Element, placeholder: str) -> None:
    """Turn ``element`` into a paragraph holding only ``placeholder``."""
    tail = element.tail
    element.clear()
    element.tag = "p"
    element.text = placeholder
    element.tail = tail


def _reshape_footnotes(root: Element) -> None:
    """Rewrite Python-Markdown footnote markup into GitHub's structure."""
    for sup in root.iter("sup"):
        ref = sup.find("a")
        if ref is None or "footnote-ref" not in ref.get("class", ""):
            continue
        del ref.attrib["class"]
        if "id" in sup.attrib:
            ref.set("id", sup.attrib.pop("id"))
        ref.set("data-footnote-ref", "")
        ref.set("aria-describedby", "footnote-label")

    for container in list(root.iter("div")):
        if container.get("class") != "footnote":
            continue
        container.tag = "section"
        container.attrib.clear()
        container.set("class", "footnotes")
        container.set("data-footnotes", "")
        for rule in container.findall("hr"):
            container.remove(rule)
        label = etree.Element("h2", {"id": "footnote-label", "class": "sr-only"})
        label.text = "Footnotes"
        container.insert(0, label)
        for number, backref in enumerate(_backrefs(container), start=1):
            del backref.attrib["class"]
            backref.set("data-footnote-backref", "")
            backref.set("aria-label", f"Back to reference {number}")


def _backrefs(container: Element) -> list[Element]:
    return [
        link
        for link in container.iter("a")
        if "footnote-backref" in link.get("class", "")
    ]


class GfmExtension(Extension):
    """Render GitHub-flavored Markdown through a :class:`RenderRules` set.

    Parameters
    ----------
    options : RenderOptions
        Options of the current render; controls math preprocessing.
    rules : RenderRules
        Rule set deciding the markup of each node kind.
    context : RenderContext
        Per-document state shared by every rule invocation.
    """

    def __init__(
        self, options: RenderOptions, rules: RenderRules, context: RenderContext
    ) -> None:
        self.options = options
        self.rules = rules
        self.context = context
        super().__init__()

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]
        """Register the preprocessors, inline pattern and rule treeprocessor.

        Fenced code is handled by ``pymdownx.superfences``, configured with
        :func:`superfences_config` alongside this extension.
        """
        if self.options.allow_math:
            md.preprocessors.register(MathPreprocessor(md), "gfm_math", 27)
        md.preprocessors.register(DetailsPreprocessor(md), "gfm_details", 22)
        md.inlinePatterns.register(
            SimpleTagInlineProcessor(STRIKETHROUGH_PATTERN, "del"),
            "gfm_strikethrough",
            55,
        )
        md.treeprocessors.register(
            RulesTreeprocessor(md, self.rules, self.context), "gfm_rules", 15
        )


__all__ = [
    "STRIKETHROUGH_PATTERN",
    "SUPERFENCES",
    "DetailsPreprocessor",
    "GfmExtension",
    "MathPreprocessor",
    "RulesTreeprocessor",
    "fence_info",
    "superfences_config",
]
