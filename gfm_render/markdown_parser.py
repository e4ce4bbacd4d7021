r"""Parse Markdown into a read-only token tree for plain-text extraction.

Python-Markdown builds an ElementTree; this module runs the same parser
(without any rendering rules) and converts the tree into small frozen
dataclasses. The section stripper walks these tokens instead of HTML so it
never has to re-parse markup.

Example
-------
>>> from gfm_render.markdown_parser import Heading, Paragraph, tokenize
>>> tokens = tokenize("# Intro\n\nBody")
>>> isinstance(tokens[0], Heading), isinstance(tokens[-1], Paragraph)
(True, True)
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from html import escape, unescape

from markdown import Markdown, util
from markdown.extensions import Extension
from markdown.inlinepatterns import SimpleTagInlineProcessor
from markdown.treeprocessors import Treeprocessor

from .config import RenderOptions
from .renderer.extension import (
    ESCAPED_CHAR_PATTERN,
    STRIKETHROUGH_PATTERN,
    SUPERFENCES,
    superfences_config,
)
from .renderer.rules import parse_code_info

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element
else:  # pragma: no cover - type-checking fallback
    Element = typ.Any

BLOCK_SEPARATOR = "\n\n"
ENTITY_PATTERN = re.compile(r"^&(?:#[0-9]+|#x[0-9a-fA-F]+|[0-9A-Za-z]+);$")
TASK_PREFIX_PATTERN = re.compile(r"^\[(?P<state>[ xX])\][ \t]+")
FENCE_MARKER_PATTERN = re.compile(r'\A<pre data-fence="(?P<index>[0-9]+)">')
EMPHASIS_STYLES: dict[str, str] = {
    "em": "em",
    "i": "em",
    "strong": "strong",
    "b": "strong",
    "del": "del",
    "s": "del",
}
HEADING_DEPTHS: dict[str, int] = {f"h{level}": level for level in range(1, 7)}
INLINE_TAGS = frozenset({*EMPHASIS_STYLES, "a", "img", "br", "code"})


@dc.dataclass(frozen=True, slots=True)
class Text:
    """Literal inline text."""

    text: str


@dc.dataclass(frozen=True, slots=True)
class Codespan:
    """Inline code, unescaped."""

    text: str


@dc.dataclass(frozen=True, slots=True)
class Html:
    """Raw HTML, either a block or a single inline tag."""

    html: str


@dc.dataclass(frozen=True, slots=True)
class CodeBlock:
    """Fenced or indented code block."""

    text: str
    lang: str | None = None


@dc.dataclass(frozen=True, slots=True)
class Image:
    """Image reference."""

    src: str
    alt: str
    title: str | None = None


@dc.dataclass(frozen=True, slots=True)
class LineBreak:
    """Hard line break."""


@dc.dataclass(frozen=True, slots=True)
class Rule:
    """Thematic break."""


@dc.dataclass(frozen=True, slots=True)
class Space:
    """Blank-line separator between two sibling blocks."""

    raw: str = BLOCK_SEPARATOR


@dc.dataclass(frozen=True, slots=True)
class Heading:
    """ATX or setext heading of the given ``depth`` (1-6)."""

    depth: int
    children: tuple[Token, ...]


@dc.dataclass(frozen=True, slots=True)
class Paragraph:
    """Paragraph of inline tokens."""

    children: tuple[Token, ...]


@dc.dataclass(frozen=True, slots=True)
class Blockquote:
    """Blockquote of block tokens."""

    children: tuple[Token, ...]


@dc.dataclass(frozen=True, slots=True)
class Emphasis:
    """Emphasis, strong emphasis or strikethrough, per ``style``."""

    style: typ.Literal["em", "strong", "del"]
    children: tuple[Token, ...]


@dc.dataclass(frozen=True, slots=True)
class Link:
    """Hyperlink wrapping inline tokens."""

    href: str
    children: tuple[Token, ...]
    title: str | None = None


@dc.dataclass(frozen=True, slots=True)
class ListItem:
    """One list item; ``task`` items carry a checkbox state."""

    children: tuple[Token, ...]
    task: bool = False
    checked: bool = False


@dc.dataclass(frozen=True, slots=True)
class ListBlock:
    """Ordered or bullet list."""

    items: tuple[ListItem, ...]
    ordered: bool = False


@dc.dataclass(frozen=True, slots=True)
class TableCell:
    """Table header or body cell."""

    children: tuple[Token, ...]
    align: str | None = None


@dc.dataclass(frozen=True, slots=True)
class Table:
    """Table with a header row and body rows."""

    header: tuple[TableCell, ...]
    rows: tuple[tuple[TableCell, ...], ...]


Token = (
    Text
    | Codespan
    | Html
    | CodeBlock
    | Image
    | LineBreak
    | Rule
    | Space
    | Heading
    | Paragraph
    | Blockquote
    | Emphasis
    | Link
    | ListBlock
    | ListItem
    | Table
    | TableCell
)


@dc.dataclass(frozen=True, slots=True)
class FencedBlock:
    """Source and info string of a fenced code block."""

    code: str
    info: str


class _TokenCollector(Treeprocessor):
    """Convert the parsed tree into tokens and keep them on the extension."""

    def __init__(self, md: Markdown, extension: TokenExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: Element) -> None:  # pragma: no cover - Markdown API
        """Record the document tokens; the tree itself is left untouched."""
        self.extension.tokens = self._blocks(root)

    def _blocks(self, container: Element) -> list[Token]:
        tokens: list[Token] = []
        pending = self._text(container.text)
        for child in container:
            if child.tag in INLINE_TAGS:
                pending.extend(self._inline_element(child))
                pending.extend(self._text(child.tail))
                continue
            if _has_content(pending):
                tokens.append(Paragraph(tuple(pending)))
            pending = []
            if tokens:
                tokens.append(Space())
            tokens.extend(self._block(child))
            pending = self._text(child.tail)
        if _has_content(pending):
            tokens.append(Paragraph(tuple(pending)))
        return tokens

    def _block(self, element: Element) -> list[Token]:
        tag = element.tag
        if tag in HEADING_DEPTHS:
            return [Heading(HEADING_DEPTHS[tag], tuple(self._inlines(element)))]
        match tag:
            case "p":
                return [self._paragraph(element)]
            case "blockquote":
                return [Blockquote(tuple(self._blocks(element)))]
            case "ul" | "ol":
                items = tuple(
                    self._list_item(item) for item in element if item.tag == "li"
                )
                return [ListBlock(items=items, ordered=tag == "ol")]
            case "pre":
                code = element.find("code")
                source = code.text if code is not None else element.text
                return [CodeBlock(unescape(source or "").rstrip("\n"))]
            case "table":
                return [self._table(element)]
            case "hr":
                return [Rule()]
            case _:
                return self._blocks(element)

    def _paragraph(self, element: Element) -> Token:
        text = (element.text or "").strip()
        if len(element) == 0 and util.HTML_PLACEHOLDER_RE.fullmatch(text):
            return self._stashed_token(self._stashed(text))
        return Paragraph(tuple(self._inlines(element)))

    def _list_item(self, element: Element) -> ListItem:
        children = self._blocks(element)
        if len(children) == 1 and isinstance(children[0], Paragraph):
            children = list(children[0].children)
        first = children[0] if children else None
        if isinstance(first, Paragraph) and first.children:
            first = first.children[0]
        match = (
            TASK_PREFIX_PATTERN.match(first.text) if isinstance(first, Text) else None
        )
        if match is not None:
            checked = match.group("state") != " "
            children = _replace_first_text(children, first.text[match.end() :])
            return ListItem(tuple(children), task=True, checked=checked)
        return ListItem(tuple(children))

    def _table(self, element: Element) -> Table:
        header: tuple[TableCell, ...] = ()
        rows: list[tuple[TableCell, ...]] = []
        for row in element.iter("tr"):
            cells = tuple(
                TableCell(tuple(self._inlines(cell)), cell.get("align"))
                for cell in row
                if cell.tag in ("th", "td")
            )
            if len(row) and row[0].tag == "th":
                header = cells
            else:
                rows.append(cells)
        return Table(header=header, rows=tuple(rows))

    def _inlines(self, element: Element) -> list[Token]:
        tokens = self._text(element.text)
        for child in element:
            tokens.extend(self._inline_element(child))
            tokens.extend(self._text(child.tail))
        return tokens

    def _inline_element(self, element: Element) -> list[Token]:
        tag = element.tag
        if tag in EMPHASIS_STYLES:
            style = typ.cast(
                typ.Literal["em", "strong", "del"], EMPHASIS_STYLES[tag]
            )
            return [Emphasis(style, tuple(self._inlines(element)))]
        match tag:
            case "a":
                return [
                    Link(
                        element.get("href", ""),
                        tuple(self._inlines(element)),
                        element.get("title"),
                    )
                ]
            case "img":
                return [
                    Image(
                        element.get("src", ""),
                        element.get("alt", ""),
                        element.get("title"),
                    )
                ]
            case "br":
                return [LineBreak()]
            case "code":
                return [Codespan(unescape(_unescape_chars(element.text or "")))]
            case _:
                return self._inlines(element)

    def _text(self, value: str | None) -> list[Token]:
        """Split ``value`` into text and stashed-HTML tokens."""
        if not value:
            return []
        tokens: list[Token] = []
        position = 0
        for match in util.HTML_PLACEHOLDER_RE.finditer(value):
            if match.start() > position:
                chunk = value[position : match.start()]
                tokens.append(Text(_unescape_chars(chunk)))
            raw = self._stashed(match.group(0))
            if ENTITY_PATTERN.match(raw):
                tokens.append(Text(unescape(raw)))
            else:
                tokens.append(self._stashed_token(raw))
            position = match.end()
        if position < len(value):
            tokens.append(Text(_unescape_chars(value[position:])))
        return tokens

    def _stashed_token(self, raw: str) -> Token:
        """Return the code block recorded for a fence marker, else raw HTML."""
        marker = FENCE_MARKER_PATTERN.match(raw)
        if marker is None:
            return Html(raw)
        fenced = self.extension.fenced_blocks[int(marker.group("index"))]
        return CodeBlock(fenced.code, parse_code_info(fenced.info).language)

    def _stashed(self, placeholder: str) -> str:
        match = util.HTML_PLACEHOLDER_RE.fullmatch(placeholder)
        if match is None:
            return placeholder
        index = int(match.group(1))
        blocks = self.md.htmlStash.rawHtmlBlocks
        raw = blocks[index] if index < len(blocks) else ""
        return raw if isinstance(raw, str) else ""


def _has_content(tokens: list[Token]) -> bool:
    """Return whether ``tokens`` holds more than blank text."""
    return any(not isinstance(token, Text) or token.text.strip() for token in tokens)


def _unescape_chars(text: str) -> str:
    return ESCAPED_CHAR_PATTERN.sub(lambda match: chr(int(match.group(1))), text)


def _replace_first_text(children: list[Token], text: str) -> list[Token]:
    """Return ``children`` with the first text token's content replaced."""
    head = children[0]
    if isinstance(head, Paragraph):
        inner = _replace_first_text(list(head.children), text)
        return [Paragraph(tuple(inner)), *children[1:]]
    return [Text(text), *children[1:]]


class TokenExtension(Extension):
    """Capture the token tree of a document while Python-Markdown parses it."""

    def __init__(self) -> None:
        self.tokens: list[Token] = []
        self.fenced_blocks: list[FencedBlock] = []
        super().__init__()

    def capture_fence(self, code: str, info: str) -> str:
        """Record a fenced block and return a marker pointing back at it."""
        self.fenced_blocks.append(FencedBlock(code=code, info=info))
        index = len(self.fenced_blocks) - 1
        body = escape(code, quote=False)
        return f'<pre data-fence="{index}"><code>{body}</code></pre>'

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]
        """Register strikethrough and the token collector."""
        md.inlinePatterns.register(
            SimpleTagInlineProcessor(STRIKETHROUGH_PATTERN, "del"),
            "gfm_strikethrough",
            55,
        )
        md.treeprocessors.register(_TokenCollector(md, self), "gfm_tokens", 15)


def tokenize(markdown: str, options: RenderOptions | None = None) -> list[Token]:
    """Parse ``markdown`` into block tokens.

    Parameters
    ----------
    markdown : str
        GitHub-flavored Markdown source.
    options : RenderOptions, optional
        Only ``breaks`` affects tokenization (soft breaks become
        :class:`LineBreak` tokens).

    Returns
    -------
    list[Token]
        Top-level block tokens in document order, separated by
        :class:`Space` tokens.
    """
    opts = options or RenderOptions()
    extension = TokenExtension()
    extensions: list[Extension | str] = [
        "tables",
        "sane_lists",
        SUPERFENCES,
        extension,
    ]
    if opts.breaks:
        extensions.append("nl2br")
    Markdown(
        extensions=extensions,
        extension_configs={
            "tables": {"use_align_attribute": True},
            SUPERFENCES: superfences_config(extension.capture_fence),
        },
        output_format="html",
    ).convert(markdown)
    return extension.tokens


__all__ = [
    "Blockquote",
    "CodeBlock",
    "Codespan",
    "Emphasis",
    "Heading",
    "Html",
    "Image",
    "LineBreak",
    "Link",
    "ListBlock",
    "ListItem",
    "Paragraph",
    "Rule",
    "Space",
    "Table",
    "TableCell",
    "Text",
    "Token",
    "TokenExtension",
    "tokenize",
]
