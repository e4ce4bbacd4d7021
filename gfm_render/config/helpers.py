"""Utility helpers shared by the options loader and the sanitizer."""

from __future__ import annotations

import typing as typ
from collections import abc

from .models import AllowedAttribute, AttributeRule, RenderConfigError

_BOOLEAN_KEYS = (
    "inline",
    "allow_iframes",
    "allow_math",
    "disable_html_sanitization",
    "breaks",
    "no_links",
    "github_slugger",
    "mermaid",
    "alerts",
    "svg_checkboxes",
)
_URL_KEYS = ("base_url", "media_base_url")


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _normalize_names(value: object, *, field: str) -> tuple[str, ...]:
    """Normalize a sequence of tag or class names into non-empty strings."""
    match value:
        case None:
            return ()
        case str():
            return tuple(segment for segment in value.split() if segment)
        case list() | tuple() | set() | frozenset():
            names: list[str] = []
            for segment in value:
                if not isinstance(segment, str):
                    msg = f"{field} entries must be strings, got {segment!r}."
                    raise RenderConfigError(msg)
                text = segment.strip()
                if text:
                    names.append(text)
            return tuple(names)
        case _:
            msg = f"{field} must be a list of strings, got {type(value).__name__}."
            raise RenderConfigError(msg)


def _require_mapping(value: object, *, field: str) -> typ.Mapping[str, object]:
    if value is None:
        return {}
    if not isinstance(value, abc.Mapping):
        msg = f"{field} must be a mapping of tag name to entries."
        raise RenderConfigError(msg)
    return value


def _normalize_class_map(value: object) -> dict[str, tuple[str, ...]]:
    """Validate an ``allowed_classes`` mapping of tag -> class names."""
    mapping = _require_mapping(value, field="allowed_classes")
    return {
        str(tag): _normalize_names(classes, field=f"allowed_classes[{tag!r}]")
        for tag, classes in mapping.items()
    }


def _normalize_attribute(entry: object, *, field: str) -> AttributeRule:
    """Validate one attribute allow-list entry."""
    match entry:
        case str() if entry.strip():
            return entry.strip()
        case AllowedAttribute():
            return entry
        case {"name": str() as name, **rest}:
            values = _normalize_names(rest.get("values"), field=f"{field}.values")
            return AllowedAttribute(name=name.strip(), values=values)
        case _:
            msg = (
                f"{field} entries must be attribute names or "
                f"{{name, values}} mappings, got {entry!r}."
            )
            raise RenderConfigError(msg)


def _normalize_attribute_map(value: object) -> dict[str, tuple[AttributeRule, ...]]:
    """Validate an ``allowed_attributes`` mapping of tag -> attribute rules."""
    mapping = _require_mapping(value, field="allowed_attributes")
    result: dict[str, tuple[AttributeRule, ...]] = {}
    for tag, entries in mapping.items():
        field = f"allowed_attributes[{tag!r}]"
        if isinstance(entries, str | abc.Mapping) or not isinstance(
            entries, abc.Iterable
        ):
            msg = f"{field} must be a list of attribute entries."
            raise RenderConfigError(msg)
        result[str(tag)] = tuple(
            _normalize_attribute(entry, field=field) for entry in entries
        )
    return result


def _coerce_bool(value: object, *, field: str) -> bool:
    if isinstance(value, bool):
        return value
    msg = f"{field} must be a boolean, got {value!r}."
    raise RenderConfigError(msg)


def _build_options_kwargs(payload: typ.Mapping[str, typ.Any]) -> dict[str, typ.Any]:
    """Translate a raw options mapping into ``RenderOptions`` keyword arguments."""
    known = {
        *_BOOLEAN_KEYS,
        *_URL_KEYS,
        "allowed_tags",
        "allowed_classes",
        "allowed_attributes",
        "youtube_handling",
    }
    unknown = sorted(str(key) for key in payload if key not in known)
    if unknown:
        msg = f"Unknown render option(s): {', '.join(unknown)}."
        raise RenderConfigError(msg)

    kwargs: dict[str, typ.Any] = {}
    for key in _BOOLEAN_KEYS:
        if key in payload:
            kwargs[key] = _coerce_bool(payload[key], field=key)
    for key in _URL_KEYS:
        if key in payload:
            kwargs[key] = _optional_str(payload[key])
    if "youtube_handling" in payload:
        kwargs["youtube_handling"] = str(payload["youtube_handling"]).strip().lower()
    if "allowed_tags" in payload:
        kwargs["allowed_tags"] = _normalize_names(
            payload["allowed_tags"], field="allowed_tags"
        )
    if "allowed_classes" in payload:
        kwargs["allowed_classes"] = _normalize_class_map(payload["allowed_classes"])
    if "allowed_attributes" in payload:
        kwargs["allowed_attributes"] = _normalize_attribute_map(
            payload["allowed_attributes"]
        )
    return kwargs


__all__ = [
    "_build_options_kwargs",
    "_normalize_attribute_map",
    "_normalize_class_map",
    "_normalize_names",
    "_optional_str",
]
