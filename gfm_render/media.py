r"""Classify image targets and build embeddable media markup.

Markdown image syntax doubles as the embedding syntax for videos: a YouTube
URL becomes a player (or a plain link), a relative path to a video file
becomes a native ``<video>`` element, and anything else stays an ``<img>``.

Example
-------
>>> from gfm_render.media import classify_media, youtube_video_id
>>> youtube_video_id("https://youtu.be/dQw4w9WgXcQ")
'dQw4w9WgXcQ'
>>> classify_media("clips/demo.mp4")
'video'
>>> classify_media("https://example.com/video.mp4")
'image'
"""

from __future__ import annotations

import mimetypes
import posixpath
import re
import typing as typ
from html import escape
from urllib.parse import urlsplit

from ._constants import (
    YOUTUBE_EMBED_TEMPLATE,
    YOUTUBE_FALLBACK_LABEL,
    YOUTUBE_IFRAME_ALLOW,
    YOUTUBE_THUMBNAIL_TEMPLATE,
    YOUTUBE_WATCH_TEMPLATE,
)
from .urls import is_local_path

MediaKind = typ.Literal["youtube", "video", "image"]

YOUTUBE_PATTERN = re.compile(
    r"(?:https?://)?(?:www\.)?"
    r"(?:youtube\.com/(?:[^/\n\s]+/\S+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)"
    r"([a-zA-Z0-9_-]{11})"
)


def _attr(value: str) -> str:
    return escape(value, quote=True)


def youtube_video_id(url: str) -> str | None:
    """Return the 11-character video id embedded in ``url``, if any."""
    match = YOUTUBE_PATTERN.search(url)
    return match.group(1) if match else None


def is_youtube_video(url: str) -> bool:
    """Return ``True`` when ``url`` uses a recognised YouTube URL shape."""
    return youtube_video_id(url) is not None


def is_video_file(src: str) -> bool:
    """Return ``True`` for local paths whose extension maps to a video type."""
    if not is_local_path(src):
        return False
    path = urlsplit(src).path
    extension = posixpath.splitext(path)[1]
    if not extension:
        return False
    media_type, _encoding = mimetypes.guess_type(f"file{extension.lower()}")
    return bool(media_type and "video" in media_type)


def classify_media(src: str) -> MediaKind:
    """Return which embedding strategy applies to the image target ``src``."""
    if is_youtube_video(src):
        return "youtube"
    if is_video_file(src):
        return "video"
    return "image"


def lite_youtube_html(video_id: str, title: str) -> str:
    """Build the ``lite-youtube`` placeholder for ``video_id``.

    The element only shows the thumbnail and a play button; the real player
    is loaded by the lite-youtube runtime script once the user clicks.
    """
    safe_title = _attr(title)
    thumbnail = YOUTUBE_THUMBNAIL_TEMPLATE.format(video_id=video_id)
    watch_url = YOUTUBE_WATCH_TEMPLATE.format(video_id=video_id)
    return (
        f'<lite-youtube class="youtube-embed" videoid="{video_id}" '
        f'title="{safe_title}" '
        f"style=\"background-image: url('{thumbnail}');\">"
        f'<a href="{watch_url}" class="lty-playbtn" title="{safe_title}">'
        f'<span class="lyt-visually-hidden">{safe_title}</span>'
        "</a></lite-youtube>"
    )


def youtube_iframe_html(video_id: str, title: str) -> str:
    """Build a privacy-enhanced YouTube iframe for ``video_id``."""
    src = YOUTUBE_EMBED_TEMPLATE.format(video_id=video_id)
    return (
        f'<iframe width="560" height="315" src="{src}" class="youtube-embed" '
        f'title="{_attr(title)}" frameborder="0" allow="{YOUTUBE_IFRAME_ALLOW}" '
        'referrerpolicy="strict-origin-when-cross-origin" loading="lazy" '
        "allowfullscreen></iframe>"
    )


def youtube_link_html(src: str, title: str | None, alt: str) -> str:
    """Build a plain hyperlink to a YouTube video."""
    label = title or alt or YOUTUBE_FALLBACK_LABEL
    return f'<a href="{_attr(src)}">{escape(label, quote=False)}</a>'


def video_html(src: str, title: str | None, alt: str) -> str:
    """Build a native ``<video>`` element with playback controls."""
    return (
        f'<video src="{_attr(src)}" alt="{_attr(alt)}" '
        f'title="{_attr(title or "")}" controls></video>'
    )


def image_html(src: str, title: str | None, alt: str) -> str:
    """Build a standard ``<img>`` element."""
    return f'<img src="{_attr(src)}" alt="{_attr(alt)}" title="{_attr(title or "")}">'


__all__ = [
    "YOUTUBE_PATTERN",
    "MediaKind",
    "classify_media",
    "image_html",
    "is_video_file",
    "is_youtube_video",
    "lite_youtube_html",
    "video_html",
    "youtube_iframe_html",
    "youtube_link_html",
    "youtube_video_id",
]
