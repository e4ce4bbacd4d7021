r"""Typeset ``$...$`` and ``$$...$$`` spans into MathML.

Math is substituted on the raw Markdown text before tokenization so the
Markdown parser never sees TeX syntax. Each span is converted on its own: a
span that fails to convert is left untouched and logged, while its
neighbours still render.

Example
-------
>>> from gfm_render.mathml import mathify
>>> html = mathify("Euler: $e^{i\\pi}$ is neat")
>>> "math-inline" in html
True
"""

from __future__ import annotations

import logging
import re
import typing as typ

from latex2mathml.converter import convert

logger = logging.getLogger(__name__)

BLOCK_MATH_PATTERN = re.compile(r"\$\$\s(.+?)\s\$\$")
INLINE_MATH_PATTERN = re.compile(r"\s\$((?=\S).*?(?=\S))\$")


class MathRenderError(ValueError):
    """Raised when a TeX expression cannot be converted to MathML."""


def render_math(expression: str, *, display: bool) -> str:
    """Convert a TeX ``expression`` into a MathML fragment.

    Parameters
    ----------
    expression : str
        TeX source without the surrounding dollar delimiters.
    display : bool
        ``True`` for block (display) math, ``False`` for inline math.

    Returns
    -------
    str
        ``<span class="math-display">`` or ``<span class="math-inline">``
        wrapping the ``<math>`` element.

    Raises
    ------
    MathRenderError
        If the converter rejects the expression.
    """
    mode = "block" if display else "inline"
    try:
        markup = convert(expression.strip(), display=mode)
    except Exception as exc:  # noqa: BLE001 - converter raises bare exception types
        msg = f"Cannot render {mode} math {expression!r}: {exc}"
        raise MathRenderError(msg) from exc
    css_class = "math-display" if display else "math-inline"
    return f'<span class="{css_class}">{markup}</span>'


def mathify(
    markdown: str, *, emit: typ.Callable[[str], str] | None = None
) -> str:
    """Replace block then inline math spans in ``markdown`` with MathML.

    Parameters
    ----------
    markdown : str
        Raw Markdown source.
    emit : Callable[[str], str], optional
        Hook receiving each rendered fragment and returning the text spliced
        into the document; the Markdown extension uses it to stash the
        fragment away from inline processing. Defaults to the fragment itself.

    Returns
    -------
    str
        Markdown with every convertible math span replaced.
    """
    emitter = emit or (lambda fragment: fragment)

    def _block(match: re.Match[str]) -> str:
        try:
            return emitter(render_math(match.group(1), display=True))
        except MathRenderError as exc:
            logger.warning("Leaving block math untouched: %s", exc)
            return match.group(0)

    def _inline(match: re.Match[str]) -> str:
        try:
            return " " + emitter(render_math(match.group(1), display=False))
        except MathRenderError as exc:
            logger.warning("Leaving inline math untouched: %s", exc)
            return match.group(0)

    with_blocks = BLOCK_MATH_PATTERN.sub(_block, markdown)
    return INLINE_MATH_PATTERN.sub(_inline, with_blocks)


def strip_math(markdown: str) -> str:
    """Remove block and inline math spans so TeX never reaches plain text."""
    return INLINE_MATH_PATTERN.sub("", BLOCK_MATH_PATTERN.sub("", markdown))


__all__ = [
    "BLOCK_MATH_PATTERN",
    "INLINE_MATH_PATTERN",
    "MathRenderError",
    "mathify",
    "render_math",
    "strip_math",
]
