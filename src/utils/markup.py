"""Regex-based HTML tag and attribute helpers.

Shared by the cleaning stages that rewrite start tags. Not a parser:
tags are matched with a tolerant attribute grammar so quoted values may
contain ``>``. Anything that does not match the grammar is left alone.

Tag format: <{name}[ {attr}[={value}]]*[ /]>
Example: '<img src="a.jpg" class="wp-image-5" />' → name="img",
attributes=[src, class], self_closing=True
"""

from __future__ import annotations

import re
from typing import NamedTuple

# Block-level tags a cleaned document may start with.
WRAPPING_BLOCK_TAGS: tuple[str, ...] = ("p", "h1", "h2", "h3", "h4", "h5", "h6", "div", "ul", "ol", "blockquote")

# Tags that start a new block; whitespace around them is not significant.
BLOCK_LEVEL_TAGS: frozenset[str] = frozenset(
    {
        *WRAPPING_BLOCK_TAGS,
        "li",
        "pre",
        "hr",
        "table",
        "thead",
        "tbody",
        "tfoot",
        "tr",
        "td",
        "th",
        "figure",
        "figcaption",
        "section",
        "article",
        "header",
        "footer",
        "dl",
        "dt",
        "dd",
    }
)

_NAME = r"[^\s\"'<>/=]+"
_VALUE = r"(?:\"[^\"]*\"|'[^']*'|[^\s\"'<>=`]+)"

START_TAG_RE = re.compile(
    rf"""
    <(?P<name>[A-Za-z][A-Za-z0-9:-]*)   # tag name
    (?P<attrs>(?:\s+{_NAME}(?:\s*=\s*{_VALUE})?)*)
    \s*
    (?P<slash>/?)
    >
    """,
    re.VERBOSE,
)

_ATTR_RE = re.compile(
    r"""
    \s+
    (?P<name>[^\s"'<>/=]+)
    (?:
        \s*=\s*
        (?:
            "(?P<dq>[^"]*)"
          | '(?P<sq>[^']*)'
          | (?P<bare>[^\s"'<>=`]+)
        )
    )?
    """,
    re.VERBOSE,
)

BLOCK_START_RE = re.compile(
    rf"<(?:{'|'.join(WRAPPING_BLOCK_TAGS)})(?=[\s/>])",
    re.IGNORECASE,
)


class Attribute(NamedTuple):
    """A single parsed attribute. ``value`` is None for bare attributes."""

    name: str
    value: str | None = None
    quote: str = '"'


def parse_attributes(attr_text: str) -> list[Attribute]:
    """Split the attribute section of a start tag into Attribute tuples."""
    attributes: list[Attribute] = []
    for match in _ATTR_RE.finditer(attr_text):
        if match.group("dq") is not None:
            attributes.append(Attribute(match.group("name"), match.group("dq"), '"'))
        elif match.group("sq") is not None:
            attributes.append(Attribute(match.group("name"), match.group("sq"), "'"))
        elif match.group("bare") is not None:
            attributes.append(Attribute(match.group("name"), match.group("bare"), '"'))
        else:
            attributes.append(Attribute(match.group("name"), None))
    return attributes


def find_attribute(attributes: list[Attribute], name: str) -> Attribute | None:
    """Return the first attribute called ``name`` (case-insensitive)."""
    lowered = name.lower()
    for attr in attributes:
        if attr.name.lower() == lowered:
            return attr
    return None


def render_attribute(attr: Attribute) -> str:
    """Serialize an attribute with the quote style it was parsed with."""
    if attr.value is None:
        return attr.name
    return f"{attr.name}={attr.quote}{attr.value}{attr.quote}"


def render_start_tag(name: str, attributes: list[Attribute], *, self_closing: bool = False) -> str:
    """Serialize a start tag with single-space attribute separation."""
    parts = [name, *(render_attribute(a) for a in attributes)]
    if self_closing:
        parts.append("/")
    return "<" + " ".join(parts) + ">"


def starts_with_block(text: str) -> bool:
    """True if the text opens with one of the wrapping block-level tags."""
    return BLOCK_START_RE.match(text) is not None


_SCHEME_NOISE_RE = re.compile(r"[\s\x00-\x1f]+")
_UNSAFE_SCHEME_RE = re.compile(r"^(?:javascript|vbscript|data):", re.IGNORECASE)
_SAFE_DATA_RE = re.compile(r"^data:image/(?:png|gif|jpe?g|webp);", re.IGNORECASE)


def is_unsafe_url(value: str) -> bool:
    """True for script-capable URL schemes.

    Whitespace and control characters are ignored, since browsers skip them
    when reading a scheme. Inline raster images (``data:image/png;...``) are
    allowed; SVG data URLs are not, as they can carry script.
    """
    compact = _SCHEME_NOISE_RE.sub("", value)
    return _UNSAFE_SCHEME_RE.match(compact) is not None and _SAFE_DATA_RE.match(compact) is None
