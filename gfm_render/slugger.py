"""GitHub-compatible heading slug allocation.

Example
-------
>>> from gfm_render.slugger import GithubSlugger
>>> slugger = GithubSlugger()
>>> [slugger.slug("Intro"), slugger.slug("Intro"), slugger.slug("C++ & Rust!")]
['intro', 'intro-1', 'c--rust']
"""

from __future__ import annotations

import dataclasses as dc
import re

_STRIP_PATTERN = re.compile(r"[^\w\- ]", re.UNICODE)


def slugify(value: str) -> str:
    """Return the bare GitHub slug for ``value`` without deduplication."""
    return _STRIP_PATTERN.sub("", value.lower()).replace(" ", "-")


@dc.dataclass(slots=True)
class GithubSlugger:
    """Allocate unique heading slugs in first-occurrence order.

    Repeated titles receive ``-1``, ``-2`` suffixes, matching the anchors
    GitHub generates for rendered READMEs. One instance must be used per
    rendered document so the suffixes stay deterministic.
    """

    occurrences: dict[str, int] = dc.field(default_factory=dict)

    def slug(self, value: str) -> str:
        """Return a unique slug for ``value`` and record it as used."""
        original = slugify(value)
        result = original
        while result in self.occurrences:
            self.occurrences[original] += 1
            result = f"{original}-{self.occurrences[original]}"
        self.occurrences[result] = 0
        return result


__all__ = ["GithubSlugger", "slugify"]
