"""Unit tests for the HTML sanitization policy."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from gfm_render import render
from gfm_render.config import AllowedAttribute, RenderConfigError, RenderOptions
from gfm_render.sanitizer import BASE_TAGS, SanitizationPolicy, strip_markup


def _clean(markup: str, **kwargs: object) -> str:
    policy = SanitizationPolicy.from_options(RenderOptions(**kwargs))
    return policy.clean(markup)


def _soup(markup: str, **kwargs: object) -> BeautifulSoup:
    return BeautifulSoup(_clean(markup, **kwargs), "html.parser")


def test_scripts_and_event_handlers_are_removed() -> None:
    """Script elements vanish with their text; handlers are dropped."""
    actual = _clean('<p onclick="steal()">hi<script>alert(1)</script></p>')
    assert actual == "<p>hi</p>", actual


@pytest.mark.parametrize("tag", ["style", "textarea", "noscript"])
def test_non_text_elements_lose_their_content(tag: str) -> None:
    """Elements whose content is not prose are removed entirely."""
    actual = _clean(f"<p>a</p><{tag}>secret</{tag}>")
    assert actual == "<p>a</p>", actual


def test_unknown_tags_are_stripped_but_text_kept() -> None:
    """Disallowed elements are unwrapped, not escaped."""
    actual = _clean("<marquee>hello</marquee>")
    assert actual == "hello", actual


@pytest.mark.parametrize(
    "href", ["//evil.example/x", "\\\\evil.example", "javascript:alert(1)"]
)
def test_dangerous_hrefs_are_dropped(href: str) -> None:
    """Protocol-relative and non-allow-listed scheme URLs are removed."""
    link = _soup(f'<a href="{href}">x</a>').find("a")
    assert link is not None
    assert link.get("href") is None, f"href {href!r} should be dropped"


def test_safe_links_survive() -> None:
    """Allowed attributes on links are kept."""
    link = _soup(
        '<a href="https://example.com" rel="noopener noreferrer">x</a>'
    ).find("a")
    assert link["href"] == "https://example.com"
    assert link["rel"] == ["noopener", "noreferrer"]


def test_input_type_is_constrained_to_checkbox() -> None:
    """Inputs may only be checkboxes."""
    soup = _soup('<input type="checkbox" checked disabled><input type="text">')
    checkbox, text = soup.find_all("input")
    assert checkbox["type"] == "checkbox"
    assert checkbox.has_attr("checked")
    assert text.get("type") is None, "non-checkbox type must be dropped"


def test_classes_are_pruned_per_tag() -> None:
    """Only allow-listed classes stay; empty class attributes disappear."""
    soup = _soup(
        '<div class="highlight evil"><span class="k">def</span>'
        '<span class="evil">x</span></div>'
    )
    assert soup.div["class"] == ["highlight"]
    spans = soup.find_all("span")
    assert spans[0]["class"] == ["k"]
    assert not spans[1].has_attr("class")


def test_alert_and_octicon_classes_are_allowed() -> None:
    """Renderer classes with wildcard patterns pass through."""
    soup = _soup(
        '<div class="markdown-alert markdown-alert-note">'
        '<p class="markdown-alert-title"><svg class="octicon octicon-info"></svg>'
        "Note</p></div>"
    )
    assert soup.div["class"] == ["markdown-alert", "markdown-alert-note"]
    assert soup.svg["class"] == ["octicon", "octicon-info"]


def test_additive_tags_attributes_and_classes() -> None:
    """Caller allow-lists extend the built-in ones."""
    policy = SanitizationPolicy.from_options(
        RenderOptions(
            allowed_tags=["marquee"],
            allowed_attributes={"img": ["loading"]},
            allowed_classes={"div": ["custom"]},
        )
    )
    assert BASE_TAGS <= policy.tags
    assert "marquee" in policy.tags
    assert policy.allows_attribute("img", "loading", "lazy")
    assert policy.allows_attribute("img", "src", "a.png")
    assert policy.allowed_classes("div", "custom highlight other") == "custom highlight"


def test_valued_attribute_rule() -> None:
    """AllowedAttribute entries restrict the attribute value."""
    policy = SanitizationPolicy.from_options(
        RenderOptions(
            allowed_attributes={"ol": [AllowedAttribute("type", ("a", "i"))]}
        )
    )
    assert policy.allows_attribute("ol", "type", "a")
    assert not policy.allows_attribute("ol", "type", "disc")


def test_iframes_and_math_are_opt_in() -> None:
    """Iframes and MathML are only allowed when switched on."""
    default = SanitizationPolicy.from_options()
    assert "iframe" not in default.tags
    assert "math" not in default.tags
    enabled = SanitizationPolicy.from_options(
        RenderOptions(allow_iframes=True, allow_math=True)
    )
    assert {"iframe", "math", "mfrac"} <= enabled.tags
    assert enabled.allowed_classes("span", "math-inline") == "math-inline"


def test_media_sources_are_resolved() -> None:
    """Relative image and video sources join the media base URL."""
    soup = _soup(
        '<img src="img/logo.png"><video src="clip.mp4"></video><a href="x.md">x</a>',
        media_base_url="https://cdn.example.com/assets/",
    )
    assert soup.img["src"] == "https://cdn.example.com/assets/img/logo.png"
    assert soup.video["src"] == "https://cdn.example.com/assets/clip.mp4"
    assert soup.a["href"] == "x.md", "links are not media"


def test_media_base_falls_back_to_base_url() -> None:
    """Without a media base URL the document base URL is used."""
    soup = _soup('<img src="a.png">', base_url="https://example.com/")
    assert soup.img["src"] == "https://example.com/a.png"


def test_protocol_relative_media_source_is_dropped() -> None:
    """A ``//host`` source is dropped instead of joined onto the media base."""
    soup = _soup(
        '<img src="//evil.example/a.png" alt="x">',
        media_base_url="https://cdn.example.com/assets/",
    )
    assert soup.img.get("src") is None, f"unexpected src: {soup.img}"
    assert soup.img["alt"] == "x"


def test_unresolvable_media_source_is_dropped() -> None:
    """A source that cannot be resolved is removed rather than kept."""
    soup = _soup('<img src="a.png" alt="x">', media_base_url="not-absolute/")
    assert soup.img.get("src") is None
    assert soup.img["alt"] == "x"


def test_invalid_allow_list_shape_raises() -> None:
    """Malformed caller allow-lists are configuration errors."""
    with pytest.raises(RenderConfigError):
        SanitizationPolicy.from_options(
            RenderOptions(allowed_attributes={"img": "src"})
        )


def test_strip_markup_returns_plain_text() -> None:
    """All tags are removed, script text is dropped and entities decoded."""
    actual = strip_markup("<p>Fish &amp; <b>chips</b></p><script>x()</script>")
    assert actual == "Fish & chips", actual


@pytest.mark.parametrize(
    ("markdown", "kwargs"),
    [
        ("> [!WARNING]\n> Mind the **gap**.", {}),
        ("Claim[^1]\n\n[^1]: Source", {}),
        ("- [x] done\n- [ ] todo", {}),
        ('```python title="app.py"\nprint("hi")\n```', {}),
        (
            "![clip](media/demo.mp4)\n\n![logo](img/logo.png)",
            {"media_base_url": "https://cdn.example.com/"},
        ),
        (
            "![Demo](https://youtu.be/dQw4w9WgXcQ)",
            {"youtube_handling": "embed", "allow_iframes": True},
        ),
    ],
    ids=["alert", "footnotes", "tasks", "code", "media", "embed"],
)
def test_sanitizing_is_idempotent(markdown: str, kwargs: dict[str, object]) -> None:
    """Cleaning already sanitized output changes nothing."""
    options = RenderOptions(**kwargs)
    policy = SanitizationPolicy.from_options(options)
    once = render(markdown, options)
    twice = policy.clean(once)
    assert twice == once, f"second pass changed the markup:\n{once}\n---\n{twice}"
    assert policy.clean(twice) == twice
