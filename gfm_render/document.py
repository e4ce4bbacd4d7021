"""Standalone HTML document rendering for Markdown bodies."""

from __future__ import annotations

import datetime as dt
from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from .style import CSS, highlight_css


class DocumentBuilder:
    """Wrap rendered Markdown in a complete HTML page."""

    def __init__(
        self,
        *,
        templates_dir: Path | None = None,
        pygments_style: str = "default",
    ) -> None:
        """Initialize the builder and Jinja environment."""
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.pygments_style = pygments_style
        self.env = Environment(
            loader=FileSystemLoader(self.templates_dir),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template("document.jinja")

    def render(self, body: str, *, title: str = "Document") -> str:
        """Return a full HTML page embedding the already rendered ``body``."""
        context = {
            "title": title,
            "body": Markup(body),  # noqa: S704 - body is sanitized by render()
            "base_css": Markup(CSS),
            "highlight_css": Markup(highlight_css(self.pygments_style)),
            "generated_at": dt.datetime.now(dt.UTC),
        }
        html = self.template.render(**context)
        if not html.endswith("\n"):
            html += "\n"
        return html

    def write(self, body: str, output_path: Path, *, title: str = "Document") -> Path:
        """Render the page for ``body`` into ``output_path`` and return it."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render(body, title=title), encoding="utf-8")
        return output_path


__all__ = ["DocumentBuilder"]
