"""Unit tests for the token tree built from Python-Markdown's parse."""

from __future__ import annotations

from gfm_render.config import RenderOptions
from gfm_render.markdown_parser import (
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
    Space,
    Table,
    Text,
    tokenize,
)


def _text(tokens: tuple[object, ...] | list[object]) -> str:
    return "".join(token.text for token in tokens if isinstance(token, Text))


def test_heading_and_paragraph_are_separated_by_space() -> None:
    """Sibling blocks are separated by a blank-line space token."""
    tokens = tokenize("# Intro\n\nBody")
    assert tokens == [
        Heading(1, (Text("Intro"),)),
        Space(),
        Paragraph((Text("Body"),)),
    ], tokens


def test_inline_formatting_tokens() -> None:
    """Emphasis, links, strikethrough and codespans nest their children."""
    (paragraph,) = tokenize("**b** *i* ~~s~~ [l](https://x.test) `a < b`")
    assert isinstance(paragraph, Paragraph)
    kinds = [type(token) for token in paragraph.children if not isinstance(token, Text)]
    assert kinds == [Emphasis, Emphasis, Emphasis, Link, Codespan], kinds
    styles = [
        token.style for token in paragraph.children if isinstance(token, Emphasis)
    ]
    assert styles == ["strong", "em", "del"]
    link = next(token for token in paragraph.children if isinstance(token, Link))
    assert link.href == "https://x.test"
    assert link.children == (Text("l"),)
    assert paragraph.children[-1] == Codespan("a < b")


def test_fenced_code_keeps_language() -> None:
    """Fenced blocks become code tokens with a parsed language."""
    tokens = tokenize('```Python title="x.py"\nprint(1)\n```')
    assert tokens == [CodeBlock("print(1)", "python")], tokens


def test_indented_fence_is_dedented() -> None:
    """Fence indentation is removed from the code lines."""
    tokens = tokenize("  ```sh\n  make test\n  ```")
    assert tokens == [CodeBlock("make test", "sh")], tokens


def test_indented_code_block() -> None:
    """Indented code has no language and is unescaped."""
    tokens = tokenize("    if a < b:\n        pass\n")
    assert tokens == [CodeBlock("if a < b:\n    pass")], tokens


def test_task_list_items() -> None:
    """Task markers are removed and recorded on the item."""
    (listing,) = tokenize("- [x] done\n- [ ] todo\n- plain")
    assert listing == ListBlock(
        items=(
            ListItem((Text("done"),), task=True, checked=True),
            ListItem((Text("todo"),), task=True, checked=False),
            ListItem((Text("plain"),)),
        )
    ), listing


def test_ordered_list() -> None:
    """Ordered lists are flagged."""
    (listing,) = tokenize("1. one\n2. two")
    assert isinstance(listing, ListBlock)
    assert listing.ordered
    assert [_text(item.children) for item in listing.items] == ["one", "two"]


def test_table_cells() -> None:
    """Tables expose header cells and body rows."""
    (table,) = tokenize("| a | b |\n|:--|---|\n| 1 | 2 |\n| 3 | 4 |")
    assert isinstance(table, Table)
    assert [_text(cell.children) for cell in table.header] == ["a", "b"]
    assert [[_text(cell.children) for cell in row] for row in table.rows] == [
        ["1", "2"],
        ["3", "4"],
    ]
    assert table.header[0].align == "left"


def test_html_block_and_inline_html() -> None:
    """Raw HTML is kept as HTML tokens, block and inline."""
    tokens = tokenize("<div>hi</div>\n\nSay <b>this</b>")
    block = tokens[0]
    assert isinstance(block, Html), tokens
    assert block.html.strip() == "<div>hi</div>"
    paragraph = tokens[-1]
    assert isinstance(paragraph, Paragraph)
    assert Html("<b>") in paragraph.children
    assert _text(paragraph.children) == "Say this"


def test_entities_and_escapes_become_text() -> None:
    """Entities are decoded and backslash escapes resolved."""
    (paragraph,) = tokenize(r"Fish &amp; chips \*not em\*")
    assert isinstance(paragraph, Paragraph)
    assert _text(paragraph.children) == "Fish & chips *not em*"


def test_image_token() -> None:
    """Images carry their source, alt text and title."""
    (paragraph,) = tokenize('![Logo](img/logo.png "The logo")')
    assert isinstance(paragraph, Paragraph)
    assert paragraph.children == (Image("img/logo.png", "Logo", "The logo"),)


def test_breaks_option_adds_line_breaks() -> None:
    """Soft breaks turn into line-break tokens when requested."""
    (plain,) = tokenize("a\nb")
    (broken,) = tokenize("a\nb", RenderOptions(breaks=True))
    assert isinstance(plain, Paragraph)
    assert isinstance(broken, Paragraph)
    assert not any(isinstance(token, LineBreak) for token in plain.children)
    assert any(isinstance(token, LineBreak) for token in broken.children)


def test_nested_blocks_in_list_items() -> None:
    """Loose list items keep paragraphs and nested lists."""
    (listing,) = tokenize("- parent\n\n    - child\n")
    assert isinstance(listing, ListBlock)
    (item,) = listing.items
    assert any(isinstance(child, ListBlock) for child in item.children), item


def test_quoted_fence_is_code_block() -> None:
    """Fences inside blockquotes are captured with their language."""
    (quote,) = tokenize("> ```Math\n> x^2\n> ```")
    assert isinstance(quote, Blockquote), quote
    assert quote.children == (CodeBlock("x^2", "math"),), quote.children


def test_list_item_fence_is_code_block() -> None:
    """Fences indented under a list item are captured as code."""
    (listing,) = tokenize("1. item\n\n    ```sh\n    make\n    ```")
    assert isinstance(listing, ListBlock), listing
    (item,) = listing.items
    assert CodeBlock("make", "sh") in item.children, item.children
