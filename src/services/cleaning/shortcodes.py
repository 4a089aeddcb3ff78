"""WordPress shortcode removal.

Shortcodes are bracket tokens (``[gallery ids="1,2,3"]``) that the old
site expanded into widgets. Known enclosing shortcodes such as
``[caption]...[/caption]`` are removed along with their payload.
Page-builder shortcodes (``[vc_row]``) wrap real post content, so they
and every other shortcode lose only the token itself.

Rule order matters: known paired blocks, then known single tokens, then
the generic ``[identifier ...]`` fallback. Running the generic rule first
would cut a known token at its first ``]`` and orphan its payload.
"""

from __future__ import annotations

import re
from collections import Counter

from src.models.domain import IssueCategory
from src.services.cleaning.base import StageResult

KNOWN_SHORTCODES: tuple[str, ...] = (
    "caption",
    "gallery",
    "embed",
    "video",
    "audio",
    "playlist",
    "contact-form-7",
    "elementor-template",
)

# Page-builder plugins namespace their shortcodes with these prefixes.
VENDOR_PREFIXES: tuple[str, ...] = ("wp_", "vc_", "et_pb_", "fusion_")

# A paired block never spans more than this many characters of payload.
MAX_SHORTCODE_BODY = 5000
_MAX_ATTRS = 500

_PAIRED_NAME = "(?:" + "|".join(re.escape(name) for name in KNOWN_SHORTCODES) + ")"

_KNOWN_NAME = (
    "(?:"
    + "|".join(re.escape(name) for name in KNOWN_SHORTCODES)
    + "|(?:"
    + "|".join(re.escape(prefix) for prefix in VENDOR_PREFIXES)
    + r")[\w-]*)"
)

_PAIRED_RE = re.compile(
    rf"""
    \[(?P<name>{_PAIRED_NAME})(?=[\s\]/])[^\[\]]{{0,{_MAX_ATTRS}}}\]   # [caption id="..."]
    (?:(?!\[/?(?P=name)[\s\]/])[\s\S]){{0,{MAX_SHORTCODE_BODY}}}?    # payload, no same-name token
    \[/(?P=name)\s*\]                                               # [/caption]
    """,
    re.IGNORECASE | re.VERBOSE,
)

_KNOWN_TOKEN_RE = re.compile(
    rf"\[/?{_KNOWN_NAME}(?=[\s\]/])[^\[\]]{{0,{_MAX_ATTRS}}}\]",
    re.IGNORECASE,
)

_GENERIC_TOKEN_RE = re.compile(
    rf"\[/?[A-Za-z_][\w-]*(?:\s[^\[\]]{{0,{_MAX_ATTRS}}})?/?\]",
)


def remove_shortcodes(text: str) -> StageResult:
    """Strip known and generic shortcodes, counting each removal.

    An opening token with no matching close loses only the token, so
    prose after an unterminated ``[caption]`` survives.
    """
    if "[" not in text:
        return StageResult(text)

    counts: Counter[str] = Counter()
    for pattern in (_PAIRED_RE, _KNOWN_TOKEN_RE, _GENERIC_TOKEN_RE):
        text, removed = pattern.subn("", text)
        counts[IssueCategory.SHORTCODES] += removed
    return StageResult.of(text, counts)
