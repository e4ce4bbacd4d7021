"""Unit tests for GitHub alert detection and the alert extension."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup
from markdown import Markdown

from gfm_render.alerts import AlertExtension, alert_label, detect_alert


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("<p>[!NOTE]\nBody</p>", "[!note]"),
        ("<p>[!Tip] Body</p>", "[!tip]"),
        ("<p>plain quote</p>", None),
        ("<p>[!warning] then [!note]</p>", "[!warning]"),
    ],
)
def test_detect_alert(text: str, expected: str | None) -> None:
    """Markers are matched case-insensitively; later list entries win."""
    actual = detect_alert(text)
    assert actual == expected, f"expected {expected!r}, got {actual!r}"


@pytest.mark.parametrize(
    ("marker", "label"),
    [("[!note]", "Note"), ("[!IMPORTANT]", "Important"), ("[!caution]", "Caution")],
)
def test_alert_label(marker: str, label: str) -> None:
    """Labels capitalise the marker word."""
    assert alert_label(marker) == label


def _convert(source: str) -> BeautifulSoup:
    html = Markdown(extensions=[AlertExtension()]).convert(source)
    return BeautifulSoup(html, "html.parser")


def test_alert_blockquote_becomes_alert_box() -> None:
    """A marked blockquote turns into a titled markdown-alert div."""
    soup = _convert("> [!WARNING]\n> Mind the gap")
    box = soup.find("div")
    assert box is not None, "expected an alert div"
    assert box["class"] == ["markdown-alert", "markdown-alert-warning"]
    title = box.find("p", class_="markdown-alert-title")
    assert title is not None, "expected an alert title paragraph"
    assert title.get_text(strip=True) == "Warning"
    assert title.find("svg")["class"] == ["octicon", "octicon-alert"]
    body = box.find_all("p")[-1]
    assert body.get_text(strip=True) == "Mind the gap"
    assert soup.find("blockquote") is None


def test_marker_only_paragraph_is_removed() -> None:
    """A marker on its own paragraph leaves no empty paragraph behind."""
    soup = _convert("> [!TIP]\n>\n> Use the force")
    paragraphs = soup.find_all("p")
    texts = [p.get_text(strip=True) for p in paragraphs]
    assert texts == ["Tip", "Use the force"], f"unexpected paragraphs {texts!r}"


def test_plain_blockquote_is_untouched() -> None:
    """Blockquotes without a marker stay blockquotes."""
    soup = _convert("> Just a quote")
    assert soup.find("blockquote") is not None
    assert soup.find("div") is None


def test_marker_must_open_the_quote() -> None:
    """A marker in the middle of the text is not an alert."""
    soup = _convert("> See [!NOTE] later")
    assert soup.find("blockquote") is not None
