"""Load rendering options from YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import _build_options_kwargs
from .models import RenderConfigError, RenderOptions


def options_from_mapping(
    payload: typ.Mapping[str, typ.Any], **overrides: typ.Any
) -> RenderOptions:
    """Build :class:`RenderOptions` from a plain mapping.

    Parameters
    ----------
    payload : Mapping[str, Any]
        Option names (``allow_math``, ``youtube_handling`` ...) mapped to raw
        values, as found in a YAML document.
    **overrides : Any
        Keyword arguments applied on top of ``payload``; ``None`` values are
        ignored so unset CLI flags do not clobber configured values.

    Returns
    -------
    RenderOptions
        Validated options.

    Raises
    ------
    RenderConfigError
        If an option is unknown or has an invalid value.
    """
    kwargs = _build_options_kwargs(payload)
    kwargs.update({key: value for key, value in overrides.items() if value is not None})
    return RenderOptions(**kwargs)


def load_render_options(path: Path, **overrides: typ.Any) -> RenderOptions:
    """Load the YAML file describing rendering options.

    The document may either hold the options at its top level or nest them
    under a ``render`` key, which lets the options share a file with other
    tooling configuration.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML file (for example, ``gfm.yaml``).
    **overrides : Any
        Values taking precedence over the file, see
        :func:`options_from_mapping`.

    Returns
    -------
    RenderOptions
        Parsed and validated options.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    RenderConfigError
        If the ``render`` section is not a mapping or an option is invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from gfm_render.config import load_render_options
    >>> options = load_render_options(Path("gfm.yaml"))  # doctest: +SKIP
    >>> options.youtube_handling  # doctest: +SKIP
    'lite'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    section = (raw["render"] or {}) if "render" in raw else raw
    if not isinstance(section, dict):
        msg = "The 'render' section must be a mapping of option names to values."
        raise RenderConfigError(msg)
    return options_from_mapping(section, **overrides)


__all__ = ["load_render_options", "options_from_mapping"]
