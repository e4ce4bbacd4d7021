"""Load and validate rendering options for gfm_render.

This subpackage defines :class:`RenderOptions`, the immutable set of switches
one render call runs with, and loads those switches from YAML so the CLI and
embedding applications can keep them in a file. The primary entry points are
:func:`load_render_options` and :func:`options_from_mapping`, both of which
validate every value and raise :class:`RenderConfigError` on bad input.

Examples
--------
>>> from gfm_render.config import RenderOptions
>>> RenderOptions(base_url="https://example.com/").effective_media_base_url
'https://example.com/'
>>> from gfm_render.config import options_from_mapping
>>> options_from_mapping({"allow_math": True}).allow_math
True
"""

from .loader import load_render_options, options_from_mapping
from .models import (
    YOUTUBE_HANDLING_MODES,
    AllowedAttribute,
    AttributeRule,
    RenderConfigError,
    RenderOptions,
    YoutubeHandling,
)

__all__ = [
    "YOUTUBE_HANDLING_MODES",
    "AllowedAttribute",
    "AttributeRule",
    "RenderConfigError",
    "RenderOptions",
    "YoutubeHandling",
    "load_render_options",
    "options_from_mapping",
]
