"""Unit tests for loading and validating render options."""

from __future__ import annotations

import typing as typ

import pytest

from gfm_render.config import (
    AllowedAttribute,
    RenderConfigError,
    RenderOptions,
    load_render_options,
    options_from_mapping,
)

if typ.TYPE_CHECKING:
    from pathlib import Path


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "gfm.yaml"
    path.write_text(body.strip() + "\n", encoding="utf-8")
    return path


def test_defaults() -> None:
    """Options default to safe, GitHub-like rendering."""
    options = RenderOptions()
    assert options.youtube_handling == "lite"
    assert options.alerts
    assert options.github_slugger
    assert not options.allow_math
    assert not options.disable_html_sanitization
    assert options.effective_media_base_url is None


def test_load_top_level_mapping(tmp_path: Path) -> None:
    """Options may sit at the top level of the document."""
    path = _write(
        tmp_path,
        """
base_url: https://example.com/repo/
allow_math: true
youtube_handling: LINK
allowed_tags: [kbd, marquee]
allowed_classes:
  div: [custom]
allowed_attributes:
  img: [loading]
  input:
    - name: type
      values: [checkbox]
""",
    )
    options = load_render_options(path)
    assert options.base_url == "https://example.com/repo/"
    assert options.effective_media_base_url == "https://example.com/repo/"
    assert options.allow_math
    assert options.youtube_handling == "link"
    assert tuple(options.allowed_tags) == ("kbd", "marquee")
    assert options.allowed_classes == {"div": ("custom",)}
    assert options.allowed_attributes == {
        "img": ("loading",),
        "input": (AllowedAttribute("type", ("checkbox",)),),
    }


def test_load_render_section(tmp_path: Path) -> None:
    """Options may be nested under a render key."""
    path = _write(tmp_path, "render:\n  mermaid: true\nother_tool: 1")
    assert load_render_options(path).mermaid


def test_empty_render_section_gives_defaults(tmp_path: Path) -> None:
    """An empty render section means default options."""
    path = _write(tmp_path, "render:")
    assert load_render_options(path) == RenderOptions()


def test_overrides_take_precedence(tmp_path: Path) -> None:
    """Explicit overrides win; None overrides are ignored."""
    path = _write(tmp_path, "allow_math: true\nmermaid: true")
    options = load_render_options(path, allow_math=False, mermaid=None)
    assert not options.allow_math
    assert options.mermaid


def test_missing_file(tmp_path: Path) -> None:
    """A missing file is reported as such."""
    with pytest.raises(FileNotFoundError, match="not found"):
        load_render_options(tmp_path / "absent.yaml")


def test_top_level_must_be_mapping(tmp_path: Path) -> None:
    """A list document is rejected."""
    path = _write(tmp_path, "- allow_math")
    with pytest.raises(TypeError, match="mapping"):
        load_render_options(path)


def test_render_section_must_be_mapping(tmp_path: Path) -> None:
    """A non-mapping render section is a configuration error."""
    path = _write(tmp_path, "render: [allow_math]")
    with pytest.raises(RenderConfigError, match="'render' section"):
        load_render_options(path)


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"allow_maths": True}, "Unknown render option"),
        ({"youtube_handling": "autoplay"}, "youtube_handling"),
        ({"allow_math": "yes"}, "must be a boolean"),
        ({"allowed_tags": [1]}, "entries must be strings"),
        ({"allowed_tags": {"div": 1}}, "list of strings"),
        ({"allowed_classes": ["div"]}, "mapping"),
        ({"allowed_attributes": {"img": "src"}}, "list of attribute entries"),
        ({"allowed_attributes": {"img": [{"values": ["x"]}]}}, "entries must be"),
    ],
)
def test_invalid_values(payload: dict[str, object], message: str) -> None:
    """Invalid option values raise RenderConfigError with a clear message."""
    with pytest.raises(RenderConfigError, match=message):
        options_from_mapping(payload)


def test_yaml_12_booleans(tmp_path: Path) -> None:
    """YAML 1.2 does not treat ``yes`` as a boolean."""
    path = _write(tmp_path, "alerts: yes")
    with pytest.raises(RenderConfigError, match="must be a boolean"):
        load_render_options(path)


def test_string_allowed_tags_rejected() -> None:
    """A bare string would be iterated character by character."""
    with pytest.raises(RenderConfigError, match="not a string"):
        RenderOptions(allowed_tags="div")


def test_string_allowed_tags_in_mapping_are_split() -> None:
    """Whitespace-separated names in configuration are split."""
    options = options_from_mapping({"allowed_tags": "kbd  mark"})
    assert tuple(options.allowed_tags) == ("kbd", "mark")
