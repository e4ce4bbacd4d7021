"""Typed dataclasses describing gfm_render rendering options."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from gfm_render.renderer.rules import RenderRules

YoutubeHandling = typ.Literal["lite", "link", "embed"]
YOUTUBE_HANDLING_MODES: tuple[str, ...] = typ.get_args(YoutubeHandling)


class RenderConfigError(ValueError):
    """Raised when rendering options are invalid or inconsistent."""


@dc.dataclass(frozen=True, slots=True)
class AllowedAttribute:
    """Attribute permitted only when its value is one of ``values``.

    Attributes
    ----------
    name : str
        Attribute name, for example ``type``.
    values : tuple[str, ...]
        Literal values accepted for the attribute; any other value causes the
        sanitizer to drop the attribute.
    """

    name: str
    values: tuple[str, ...] = ()


AttributeRule = str | AllowedAttribute


@dc.dataclass(frozen=True, slots=True)
class RenderOptions:
    """Options controlling a single render or strip call.

    Attributes
    ----------
    base_url : str | None
        Absolute URL that relative link targets are resolved against.
    media_base_url : str | None
        Absolute URL that image and video sources are resolved against;
        falls back to ``base_url``.
    inline : bool
        Render inline Markdown only, without the wrapping paragraph.
    allow_iframes : bool
        Keep ``<iframe>`` elements through sanitization (needed for the
        ``embed`` YouTube mode).
    allow_math : bool
        Typeset ``$...$``, ``$$...$$`` and fenced ``math`` blocks to MathML.
    disable_html_sanitization : bool
        Skip the sanitizer entirely; only for trusted input.
    renderer : RenderRules | None
        Custom rule set used instead of the default one.
    allowed_classes : Mapping[str, Sequence[str]]
        Extra classes per tag, merged with the built-in allow-list.
    allowed_tags : Sequence[str]
        Extra tags merged with the built-in allow-list.
    allowed_attributes : Mapping[str, Sequence[str | AllowedAttribute]]
        Extra attributes per tag, merged with the built-in allow-list.
    breaks : bool
        Turn single newlines inside paragraphs into ``<br>``.
    no_links : bool
        Render link text without anchors and skip heading anchors.
    youtube_handling : {"lite", "link", "embed"}
        How YouTube image targets are embedded.
    github_slugger : bool
        Give headings GitHub-style ids and self-link anchors.
    mermaid : bool
        Emit mermaid diagram containers and the mermaid runtime.
    alerts : bool
        Render ``[!NOTE]`` style blockquotes as alert boxes.
    svg_checkboxes : bool
        Draw task-list checkboxes as SVG icons instead of glyphs.
    """

    base_url: str | None = None
    media_base_url: str | None = None
    inline: bool = False
    allow_iframes: bool = False
    allow_math: bool = False
    disable_html_sanitization: bool = False
    renderer: RenderRules | None = None
    allowed_classes: typ.Mapping[str, typ.Sequence[str]] = dc.field(
        default_factory=dict
    )
    allowed_tags: typ.Sequence[str] = ()
    allowed_attributes: typ.Mapping[str, typ.Sequence[AttributeRule]] = dc.field(
        default_factory=dict
    )
    breaks: bool = False
    no_links: bool = False
    youtube_handling: YoutubeHandling = "lite"
    github_slugger: bool = True
    mermaid: bool = False
    alerts: bool = True
    svg_checkboxes: bool = True

    def __post_init__(self) -> None:
        """Reject option values the renderer cannot honour."""
        if self.youtube_handling not in YOUTUBE_HANDLING_MODES:
            modes = ", ".join(YOUTUBE_HANDLING_MODES)
            msg = (
                f"Unknown youtube_handling {self.youtube_handling!r}; "
                f"expected one of: {modes}."
            )
            raise RenderConfigError(msg)
        if isinstance(self.allowed_tags, str):
            msg = "allowed_tags must be a sequence of tag names, not a string."
            raise RenderConfigError(msg)

    @property
    def effective_media_base_url(self) -> str | None:
        """Return the base URL used for image and video sources."""
        return self.media_base_url or self.base_url


__all__ = [
    "YOUTUBE_HANDLING_MODES",
    "AllowedAttribute",
    "AttributeRule",
    "RenderConfigError",
    "RenderOptions",
    "YoutubeHandling",
]
