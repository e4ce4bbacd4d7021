"""URL resolution helpers shared by the link rule and the sanitizer."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

_LOCAL_SCHEMES = ("http://", "https://")


def resolve_url(target: str, base: str) -> str:
    """Resolve ``target`` against an absolute ``base`` URL.

    Parameters
    ----------
    target : str
        Relative or absolute URL taken from the document.
    base : str
        Absolute base URL; it must carry both a scheme and a host.

    Returns
    -------
    str
        The joined absolute URL. Absolute targets are returned unchanged
        apart from normalization performed by :func:`urllib.parse.urljoin`.

    Raises
    ------
    ValueError
        If ``base`` is not absolute or either URL cannot be parsed.
    """
    try:
        parsed_base = urlsplit(base)
        joined = urljoin(base, target)
    except ValueError as exc:
        msg = f"Cannot resolve '{target}' against '{base}': {exc}"
        raise ValueError(msg) from exc
    if not parsed_base.scheme or not parsed_base.netloc:
        msg = f"Base URL '{base}' must be absolute."
        raise ValueError(msg)
    return joined


def is_protocol_relative(target: str) -> bool:
    """Return ``True`` for scheme-less network URLs such as ``//host/x``."""
    return target.strip().startswith(("//", "\\\\", "/\\", "\\/"))


def is_local_path(target: str) -> bool:
    """Return ``True`` when ``target`` is not an ``http(s)`` URL."""
    return not target.lower().startswith(_LOCAL_SCHEMES)


__all__ = ["is_local_path", "is_protocol_relative", "resolve_url"]
