"""Allow-list HTML sanitization applied to rendered Markdown.

The policy is the security boundary between untrusted Markdown and the
browser. It keeps a conservative tag set plus the markup the renderer emits
(media, inline SVG icons, alert boxes, highlighted code) and removes
everything else. Tags, attributes and classes supplied by the caller are
merged into the built-in lists; they never replace them.

Example
-------
>>> from gfm_render.sanitizer import SanitizationPolicy
>>> policy = SanitizationPolicy.from_options()
>>> policy.clean('<p onclick="x()">hi<script>alert(1)</script></p>')
'<p>hi</p>'
"""

from __future__ import annotations

import dataclasses as dc
import html
import logging
import typing as typ
from fnmatch import fnmatchcase
from functools import lru_cache, partial

from bleach.css_sanitizer import CSSSanitizer
from bleach.html5lib_shim import Filter
from bleach.sanitizer import Cleaner
from pygments.token import STANDARD_TYPES

from .config import AllowedAttribute, AttributeRule, RenderOptions
from .config.helpers import (
    _normalize_attribute_map,
    _normalize_class_map,
    _normalize_names,
)
from .urls import is_protocol_relative, resolve_url

logger = logging.getLogger(__name__)

BASE_TAGS: frozenset[str] = frozenset(
    {
        # sectioning
        "address",
        "article",
        "aside",
        "footer",
        "header",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "hgroup",
        "main",
        "nav",
        "section",
        # block text
        "blockquote",
        "dd",
        "div",
        "dl",
        "dt",
        "figcaption",
        "figure",
        "hr",
        "li",
        "ol",
        "p",
        "pre",
        "ul",
        # inline text
        "a",
        "abbr",
        "b",
        "bdi",
        "bdo",
        "br",
        "cite",
        "code",
        "data",
        "dfn",
        "em",
        "i",
        "kbd",
        "mark",
        "q",
        "rb",
        "rp",
        "rt",
        "rtc",
        "ruby",
        "s",
        "samp",
        "small",
        "span",
        "strong",
        "sub",
        "sup",
        "time",
        "u",
        "var",
        "wbr",
        # tables
        "caption",
        "col",
        "colgroup",
        "table",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "tr",
        # renderer output
        "img",
        "video",
        "svg",
        "path",
        "circle",
        "del",
        "details",
        "summary",
        "input",
    }
)

MATH_TAGS: frozenset[str] = frozenset(
    {
        "math",
        "maction",
        "annotation",
        "annotation-xml",
        "menclose",
        "merror",
        "mfenced",
        "mfrac",
        "mi",
        "mmultiscripts",
        "mn",
        "mo",
        "mover",
        "mpadded",
        "mphantom",
        "mprescripts",
        "mroot",
        "mrow",
        "ms",
        "semantics",
        "mspace",
        "msqrt",
        "mstyle",
        "msub",
        "msup",
        "msubsup",
        "mtable",
        "mtd",
        "mtext",
        "mtr",
        "munder",
        "munderover",
    }
)

# Elements whose text is dropped together with the element itself.
DISCARDED_CONTENT_TAGS: frozenset[str] = frozenset(
    {"script", "style", "textarea", "option", "noscript"}
)

HIGHLIGHT_CLASSES: tuple[str, ...] = tuple(
    sorted({css_class for css_class in STANDARD_TYPES.values() if css_class})
)
MATH_CLASSES: tuple[str, ...] = ("math-inline", "math-display")

BASE_CLASSES: dict[str, tuple[str, ...]] = {
    "div": (
        "highlight",
        "highlight-source-*",
        "notranslate",
        "markdown-alert",
        "markdown-alert-*",
        "markdown-code-title",
        "mermaid-code",
        "mermaid-container",
    ),
    "span": HIGHLIGHT_CLASSES,
    "a": ("anchor",),
    "p": ("markdown-alert-title",),
    "svg": ("octicon", "octicon-*"),
    "h2": ("sr-only",),
    "section": ("footnotes",),
}

BASE_ATTRIBUTES: dict[str, tuple[AttributeRule, ...]] = {
    "img": ("src", "alt", "height", "width", "align", "title"),
    "video": (
        "src",
        "alt",
        "height",
        "width",
        "autoplay",
        "muted",
        "loop",
        "playsinline",
        "poster",
        "controls",
        "title",
    ),
    "a": (
        "id",
        "aria-hidden",
        "href",
        "tabindex",
        "rel",
        "target",
        "title",
        "data-footnote-ref",
        "data-footnote-backref",
        "aria-label",
        "aria-describedby",
    ),
    "svg": ("viewBox", "width", "height", "aria-hidden", "background"),
    "path": ("fill-rule", "d"),
    "circle": ("cx", "cy", "r", "stroke", "stroke-width", "fill", "alpha"),
    "h1": ("id",),
    "h2": ("id",),
    "h3": ("id",),
    "h4": ("id",),
    "h5": ("id",),
    "h6": ("id",),
    "li": ("id",),
    "td": ("colspan", "rowspan", "align", "width"),
    "th": ("align",),
    "iframe": ("src", "width", "height"),
    "math": ("xmlns", "display"),
    "annotation": ("encoding",),
    "details": ("open",),
    "section": ("data-footnotes",),
    "input": ("checked", "disabled", AllowedAttribute("type", ("checkbox",))),
}

PROTOCOLS: frozenset[str] = frozenset({"http", "https", "ftp", "mailto", "tel"})
MEDIA_TAGS: frozenset[str] = frozenset({"img", "video"})
URL_ATTRIBUTES: tuple[str, ...] = ("href", "src", "poster", "cite")
STYLE_PROPERTIES: tuple[str, ...] = ("background-image", "list-style-type")


def _merge(
    base: typ.Mapping[str, tuple[typ.Any, ...]],
    extra: typ.Mapping[str, tuple[typ.Any, ...]],
) -> dict[str, tuple[typ.Any, ...]]:
    merged = dict(base)
    for tag, entries in extra.items():
        merged[tag] = (*merged.get(tag, ()), *entries)
    return merged


class _PolicyFilter(Filter):
    """Post-sanitize pass pruning classes and rewriting URL attributes."""

    def __init__(self, source: typ.Any, policy: SanitizationPolicy) -> None:
        super().__init__(source)
        self.policy = policy

    def __iter__(self) -> typ.Iterator[dict[str, typ.Any]]:
        discarding: str | None = None
        for token in super().__iter__():
            name = token.get("name")
            kind = token["type"]
            if discarding is not None:
                if kind == "EndTag" and name == discarding:
                    discarding = None
                continue
            if kind == "StartTag" and name in self.policy.discarded_tags:
                discarding = name
                continue
            if kind in ("StartTag", "EmptyTag") and token.get("data"):
                self.policy._transform_attributes(name, token["data"])
            yield token


@dc.dataclass(frozen=True, slots=True)
class SanitizationPolicy:
    """Resolved allow-lists plus the media URL rewriting rule.

    Build instances with :meth:`from_options`; the policy is immutable and
    may be shared between renders that use the same options.

    Attributes
    ----------
    tags : frozenset[str]
        Element names kept in the output.
    attributes : dict[str, tuple[AttributeRule, ...]]
        Per-tag attribute allow-lists; ``"*"`` applies to every tag. Names
        may use ``fnmatch`` globs.
    classes : dict[str, tuple[str, ...]]
        Per-tag class allow-lists; names may use ``fnmatch`` globs.
    media_base_url : str | None
        Base URL that ``img``/``video`` sources are resolved against.
    """

    tags: frozenset[str]
    attributes: dict[str, tuple[AttributeRule, ...]]
    classes: dict[str, tuple[str, ...]]
    media_base_url: str | None = None
    discarded_tags: frozenset[str] = DISCARDED_CONTENT_TAGS

    @classmethod
    def from_options(cls, options: RenderOptions | None = None) -> SanitizationPolicy:
        """Build the policy for ``options``.

        Raises
        ------
        RenderConfigError
            If one of the caller-supplied allow-lists has an invalid shape.
        """
        opts = options or RenderOptions()
        tags = set(BASE_TAGS)
        classes: dict[str, tuple[str, ...]] = dict(BASE_CLASSES)
        if opts.allow_iframes:
            tags.add("iframe")
        if opts.allow_math:
            tags |= MATH_TAGS
            classes["span"] = (*classes["span"], *MATH_CLASSES)
        extra_tags = _normalize_names(list(opts.allowed_tags), field="allowed_tags")
        tags.update(extra_tags)
        return cls(
            tags=frozenset(tags),
            attributes=_merge(
                BASE_ATTRIBUTES, _normalize_attribute_map(opts.allowed_attributes)
            ),
            classes=_merge(classes, _normalize_class_map(opts.allowed_classes)),
            media_base_url=opts.effective_media_base_url,
            discarded_tags=DISCARDED_CONTENT_TAGS - tags,
        )

    def clean(self, markup: str) -> str:
        """Return ``markup`` with everything outside the allow-lists removed."""
        return self._cleaner().clean(markup)

    def allows_attribute(self, tag: str, name: str, value: str) -> bool:
        """Return ``True`` when attribute ``name=value`` may stay on ``tag``."""
        if name == "class":
            return tag in self.classes
        rules = (*self.attributes.get(tag, ()), *self.attributes.get("*", ()))
        for rule in rules:
            match rule:
                case AllowedAttribute(name=allowed, values=values):
                    if allowed == name and value in values:
                        return True
                case str() if fnmatchcase(name, rule):
                    return True
        return False

    def allowed_classes(self, tag: str, value: str) -> str:
        """Return the subset of the space-separated ``value`` allowed on ``tag``."""
        patterns = self.classes.get(tag, ())
        kept = [
            css_class
            for css_class in value.split()
            if any(fnmatchcase(css_class, pattern) for pattern in patterns)
        ]
        return " ".join(kept)

    def _cleaner(self) -> Cleaner:
        return Cleaner(
            tags=self.tags | self.discarded_tags,
            attributes=self.allows_attribute,
            protocols=PROTOCOLS,
            strip=True,
            strip_comments=True,
            css_sanitizer=CSSSanitizer(allowed_css_properties=STYLE_PROPERTIES),
            filters=[partial(_PolicyFilter, policy=self)],
        )

    def _transform_attributes(
        self, tag: str, data: dict[tuple[str | None, str], str]
    ) -> None:
        class_key = (None, "class")
        if class_key in data:
            kept = self.allowed_classes(tag, data[class_key])
            if kept:
                data[class_key] = kept
            else:
                del data[class_key]

        # Checked before resolution: joining would give the URL a scheme.
        for attribute in URL_ATTRIBUTES:
            key = (None, attribute)
            if key in data and is_protocol_relative(data[key]):
                logger.debug("Dropping protocol-relative %s on <%s>", attribute, tag)
                del data[key]

        src_key = (None, "src")
        if tag in MEDIA_TAGS and self.media_base_url and data.get(src_key):
            try:
                data[src_key] = resolve_url(data[src_key], self.media_base_url)
            except ValueError:
                logger.debug("Dropping unresolvable %s src %r", tag, data[src_key])
                del data[src_key]


@lru_cache(maxsize=1)
def _text_cleaner() -> Cleaner:
    """Cache the strip-everything cleaner used for plain-text extraction."""
    policy = SanitizationPolicy(tags=frozenset(), attributes={}, classes={})
    return Cleaner(
        tags=DISCARDED_CONTENT_TAGS,
        attributes={},
        strip=True,
        strip_comments=True,
        filters=[partial(_PolicyFilter, policy=policy)],
    )


def strip_markup(markup: str) -> str:
    """Return the text of ``markup`` with every tag removed and entities decoded.

    Script, style and similar elements are dropped together with their text.
    """
    return html.unescape(_text_cleaner().clean(markup))


__all__ = [
    "BASE_ATTRIBUTES",
    "BASE_CLASSES",
    "BASE_TAGS",
    "HIGHLIGHT_CLASSES",
    "MATH_TAGS",
    "SanitizationPolicy",
    "strip_markup",
]
