r"""Flatten Markdown into plain text split by heading boundaries.

The stripper walks the token tree produced by
:func:`gfm_render.markdown_parser.tokenize` depth first. Each heading closes
the current section and opens a new one; text found inside the heading goes
to the section header, everything else to its content. Formatting markers
are discarded, so the output is lossy by design of the use case (search
indexing), not a round-trippable document.

Example
-------
>>> from gfm_render.stripper import strip, strip_split_by_sections
>>> strip("# Title\n\nSome **bold** text.")
'Title\n\nSome bold text.\n'
>>> [s.depth for s in strip_split_by_sections("intro\n\n## A\n\n## B")]
[0, 2, 2]
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from .config import RenderOptions
from .markdown_parser import (
    Blockquote,
    CodeBlock,
    Codespan,
    Emphasis,
    Heading,
    Html,
    Image,
    LineBreak,
    Link,
    ListBlock,
    ListItem,
    Paragraph,
    Rule,
    Space,
    Table,
    TableCell,
    Text,
    Token,
    tokenize,
)
from .mathml import strip_math
from .renderer.pipeline import expand_emoji
from .sanitizer import strip_markup

_NEWLINE_RUN = re.compile(r"\n{3,}")


def _finalize(text: str) -> str:
    """Trim ``text`` and collapse runs of three or more newlines."""
    return _NEWLINE_RUN.sub("\n\n", text.strip())


@dc.dataclass(frozen=True, slots=True)
class MarkdownSection:
    """Plain text of one heading-delimited section.

    Attributes
    ----------
    header : str
        Text of the heading that opened the section; empty for the leading
        section.
    depth : int
        Heading level (1-6), or ``0`` for content before the first heading.
    content : str
        Text between this heading and the next one.
    """

    header: str
    depth: int
    content: str


@dc.dataclass(slots=True)
class _SectionBuffer:
    depth: int
    header: list[str] = dc.field(default_factory=list)
    content: list[str] = dc.field(default_factory=list)

    def freeze(self) -> MarkdownSection:
        return MarkdownSection(
            header=_finalize("".join(self.header)),
            depth=self.depth,
            content=_finalize("".join(self.content)),
        )


@dc.dataclass(slots=True)
class SectionAccumulator:
    """Collect text into the section opened by the most recent heading."""

    sections: list[_SectionBuffer] = dc.field(
        default_factory=lambda: [_SectionBuffer(depth=0)]
    )

    def open(self, depth: int) -> None:
        """Start a new section for a heading of level ``depth``."""
        self.sections.append(_SectionBuffer(depth=depth))

    def write(self, text: str, *, header: bool) -> None:
        """Append ``text`` to the current header or content buffer."""
        current = self.sections[-1]
        (current.header if header else current.content).append(text)

    def finish(self) -> list[MarkdownSection]:
        """Return every section, trimmed and collapsed."""
        return [section.freeze() for section in self.sections]


def _walk_cells(
    cells: tuple[TableCell, ...], acc: SectionAccumulator, *, header: bool
) -> None:
    for cell in cells:
        _walk(cell.children, acc, header=header)
        acc.write(" ", header=header)
    acc.write("\n", header=header)


def _walk(
    tokens: typ.Iterable[Token], acc: SectionAccumulator, *, header: bool
) -> None:
    """Write the text carried by ``tokens`` into ``acc``."""
    for token in tokens:
        match token:
            case Heading(depth=depth, children=children):
                acc.open(depth)
                _walk(children, acc, header=True)
            case Paragraph(children=children) | Blockquote(children=children):
                _walk(children, acc, header=header)
            case Emphasis(children=children) | Link(children=children):
                _walk(children, acc, header=header)
            case ListBlock(items=items):
                _walk(items, acc, header=header)
            case ListItem(children=children):
                _walk(children, acc, header=header)
                acc.write("\n", header=header)
            case Table(header=head, rows=rows):
                _walk_cells(head, acc, header=header)
                for row in rows:
                    _walk_cells(row, acc, header=header)
            case TableCell(children=children):
                _walk(children, acc, header=header)
            case Space(raw=raw):
                acc.write(raw, header=header)
            case Text(text=text) | Codespan(text=text):
                acc.write(text, header=header)
            case CodeBlock(text=text, lang=lang):
                if lang != "math":
                    acc.write(text, header=header)
            case Html(html=html):
                acc.write(strip_markup(html).strip() + "\n\n", header=header)
            case Image(alt=alt, title=title):
                acc.write(title or alt, header=header)
            case LineBreak() | Rule():
                pass
            case unreachable:
                typ.assert_never(unreachable)


def strip_split_by_sections(
    markdown: str, options: RenderOptions | None = None
) -> list[MarkdownSection]:
    """Return the plain text of ``markdown`` split at every heading.

    Parameters
    ----------
    markdown : str
        GitHub-flavored Markdown source.
    options : RenderOptions, optional
        Only ``breaks`` changes tokenization; other switches are ignored.

    Returns
    -------
    list[MarkdownSection]
        One leading depth-0 section plus one section per heading, in
        document order.
    """
    source = strip_math(expand_emoji(markdown))
    acc = SectionAccumulator()
    _walk(tokenize(source, options), acc, header=False)
    return acc.finish()


def strip(markdown: str, options: RenderOptions | None = None) -> str:
    """Return ``markdown`` as plain text ending in exactly one newline."""
    sections = strip_split_by_sections(markdown, options)
    joined = "\n\n".join(f"{s.header}\n\n{s.content}" for s in sections)
    return _finalize(joined) + "\n"


__all__ = [
    "MarkdownSection",
    "SectionAccumulator",
    "strip",
    "strip_split_by_sections",
]
