"""Cyclopts CLI entrypoint for rendering and stripping GitHub-flavored Markdown.

The ``gfm`` console script defined here renders Markdown to sanitized HTML,
flattens it to plain text, or lists its heading sections as JSON. Every
command reads its ``SOURCE`` from a file path, ``-`` for standard input, or
an ``http(s)`` URL, and every option can also be supplied through a
``GFM_``-prefixed environment variable.

Examples
--------
Render a README into a standalone page:

>>> from gfm_render.cli import app
>>> app.run(
...     ["render", "README.md", "--standalone", "--output", "readme.html"]
... )  # doctest: +SKIP

Print the plain-text sections of a remote document:

>>> app.run(["sections", "https://example.com/doc.md"])  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import json
import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import (
    RenderOptions,
    YoutubeHandling,
    load_render_options,
    options_from_mapping,
)
from .document import DocumentBuilder
from .renderer import render as render_markdown
from .source import read_source
from .stripper import strip as strip_markdown
from .stripper import strip_split_by_sections

logger = logging.getLogger(__name__)

app = App(name="gfm", config=cyclopts.config.Env("GFM_", command=False))  # type: ignore[unknown-argument]

SourceArg = typ.Annotated[
    str, Parameter(help="Markdown file, '-' for stdin, or an http(s) URL")
]
ConfigOpt = typ.Annotated[
    Path | None, Parameter(help="YAML file with render options", env_var="GFM_CONFIG")
]
OutputOpt = typ.Annotated[
    Path | None, Parameter(help="Write the result here instead of stdout")
]
VerboseOpt = typ.Annotated[bool, Parameter(help="Log debug output to stderr")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _resolve_options(config: Path | None, **overrides: typ.Any) -> RenderOptions:
    """Merge ``config`` (when given) with command-line overrides."""
    if config is not None:
        logger.debug("Loading render options from %s", config)
        return load_render_options(config, **overrides)
    return options_from_mapping({}, **overrides)


def _emit(text: str, output: Path | None) -> None:
    if output is None:
        print(text, end="" if text.endswith("\n") else "\n")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    print(f"wrote {output}")


@app.command(help="Render Markdown to sanitized HTML.")
def render(
    source: SourceArg,
    *,
    config: ConfigOpt = None,
    base_url: typ.Annotated[
        str | None, Parameter(help="Base URL for relative links")
    ] = None,
    media_base_url: typ.Annotated[
        str | None, Parameter(help="Base URL for relative images and videos")
    ] = None,
    allow_math: typ.Annotated[
        bool | None, Parameter(name="--math", help="Typeset $...$ math as MathML")
    ] = None,
    mermaid: typ.Annotated[
        bool | None, Parameter(help="Render ```mermaid fences as diagrams")
    ] = None,
    alerts: typ.Annotated[
        bool | None, Parameter(help="Render [!NOTE]-style alert boxes")
    ] = None,
    youtube_handling: typ.Annotated[
        YoutubeHandling | None,
        Parameter(help="How YouTube image links are embedded"),
    ] = None,
    sanitize: typ.Annotated[
        bool | None, Parameter(help="Sanitize the rendered HTML")
    ] = None,
    inline: typ.Annotated[
        bool | None, Parameter(help="Render a single paragraph without <p>")
    ] = None,
    breaks: typ.Annotated[
        bool | None, Parameter(help="Turn single newlines into <br>")
    ] = None,
    standalone: typ.Annotated[
        bool, Parameter(help="Wrap the output in a full HTML document")
    ] = False,
    title: typ.Annotated[
        str | None, Parameter(help="Document title for --standalone")
    ] = None,
    pygments_style: typ.Annotated[
        str, Parameter(help="Pygments style for --standalone highlighting")
    ] = "default",
    output: OutputOpt = None,
    verbose: VerboseOpt = False,
) -> None:
    """Render ``source`` to HTML and print or write it.

    Parameters
    ----------
    source : str
        Markdown file path, ``-`` for standard input, or an HTTP(S) URL.
    config : Path or None, optional
        YAML file with render options; command-line flags take precedence.
    base_url, media_base_url : str or None, optional
        Bases used to resolve relative links and media sources.
    allow_math, mermaid, alerts, inline, breaks : bool or None, optional
        Rendering switches; ``None`` keeps the configured or default value.
    youtube_handling : {"lite", "link", "embed"} or None, optional
        Embedding mode for YouTube image links.
    sanitize : bool or None, optional
        ``False`` returns the raw renderer output.
    standalone : bool, optional
        Produce a complete HTML page with stylesheets.
    title : str or None, optional
        Page title used with ``standalone``; defaults to the source name.
    pygments_style : str, optional
        Pygments style for the standalone page's highlighting CSS.
    output : Path or None, optional
        Output file; stdout when omitted.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    FileNotFoundError
        If ``source`` or ``config`` does not exist.
    RenderConfigError
        If an option value is invalid.
    SourceFetchError
        If a remote source cannot be downloaded.
    """
    _configure_logging(verbose)
    options = _resolve_options(
        config,
        base_url=base_url,
        media_base_url=media_base_url,
        allow_math=allow_math,
        mermaid=mermaid,
        alerts=alerts,
        youtube_handling=youtube_handling,
        disable_html_sanitization=None if sanitize is None else not sanitize,
        inline=inline,
        breaks=breaks,
    )
    html = render_markdown(read_source(source), options)
    if not standalone:
        _emit(html, output)
        return
    builder = DocumentBuilder(pygments_style=pygments_style)
    page_title = title or Path(source).name or "Document"
    if output is None:
        _emit(builder.render(html, title=page_title), None)
        return
    builder.write(html, output, title=page_title)
    print(f"wrote {output}")


@app.command(help="Flatten Markdown into plain text.")
def strip(
    source: SourceArg,
    *,
    config: ConfigOpt = None,
    breaks: typ.Annotated[
        bool | None, Parameter(help="Treat single newlines as line breaks")
    ] = None,
    output: OutputOpt = None,
    verbose: VerboseOpt = False,
) -> None:
    """Print the plain text of ``source``, formatting markers removed."""
    _configure_logging(verbose)
    options = _resolve_options(config, breaks=breaks)
    _emit(strip_markdown(read_source(source), options), output)


@app.command(help="List the plain-text sections of Markdown as JSON.")
def sections(
    source: SourceArg,
    *,
    config: ConfigOpt = None,
    breaks: typ.Annotated[
        bool | None, Parameter(help="Treat single newlines as line breaks")
    ] = None,
    output: OutputOpt = None,
    verbose: VerboseOpt = False,
) -> None:
    """Print one JSON object per heading section of ``source``.

    Each object carries ``header``, ``depth`` (``0`` for text before the
    first heading) and ``content``.
    """
    _configure_logging(verbose)
    options = _resolve_options(config, breaks=breaks)
    parsed = strip_split_by_sections(read_source(source), options)
    payload = json.dumps(
        [dc.asdict(section) for section in parsed], indent=2, ensure_ascii=False
    )
    _emit(payload + "\n", output)


def main() -> None:
    """Invoke the Cyclopts application behind the ``gfm`` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
