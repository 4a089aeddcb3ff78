"""Semantic tag normalization and top-level paragraph wrapping."""

from __future__ import annotations

import re
from collections import Counter

from src.models.domain import IssueCategory
from src.services.cleaning.base import StageResult
from src.utils.markup import (
    BLOCK_LEVEL_TAGS,
    START_TAG_RE,
    WRAPPING_BLOCK_TAGS,
    Attribute,
    find_attribute,
    is_unsafe_url,
    parse_attributes,
    render_start_tag,
    starts_with_block,
)

PRESENTATIONAL_REPLACEMENTS: dict[str, str] = {"b": "strong", "i": "em", "u": "em"}

_TAG_NAME_RE = re.compile(r"<(/?)([A-Za-z][A-Za-z0-9:-]*)(?=[\s/>])")
_PRESENTATIONAL_OPEN_RE = re.compile(r"<(b|i|u)(?=[\s/>])[^>]*>", re.IGNORECASE)
_PRESENTATIONAL_CLOSE_RE = re.compile(r"</(b|i|u)\s*>", re.IGNORECASE)
_HEADING_RE = re.compile(r"<(h[1-6])\s[^>]*>", re.IGNORECASE)
_FONT_TAG_RE = re.compile(r"</?font(?=[\s/>])[^>]*>", re.IGNORECASE)

_WRAPPING_START_RE = re.compile(rf"<(?:{'|'.join(WRAPPING_BLOCK_TAGS)})(?=[\s/>])", re.IGNORECASE)
_ANY_BLOCK_START_RE = re.compile(
    rf"<(?:{'|'.join(sorted(BLOCK_LEVEL_TAGS, key=len, reverse=True))})(?=[\s/>])",
    re.IGNORECASE,
)


def _lowercase_tag(match: re.Match[str]) -> str:
    return f"<{match.group(1)}{match.group(2).lower()}"


def _rewrite_anchor(attributes: list[Attribute]) -> list[Attribute]:
    href = find_attribute(attributes, "href")
    if href is None or href.value is None or is_unsafe_url(href.value):
        return []
    return [href._replace(name="href")]


def _rewrite_image(attributes: list[Attribute]) -> list[Attribute] | None:
    src = find_attribute(attributes, "src")
    if src is None or not (src.value or "").strip():
        return None
    kept = [Attribute("src", src.value, src.quote)]
    alt = find_attribute(attributes, "alt")
    if alt is not None and alt.value is not None:
        kept.append(Attribute("alt", alt.value, alt.quote))
    return kept


def normalize_semantics(text: str) -> StageResult:
    """Lowercase tag names and rewrite presentational markup.

    ``<b>`` becomes ``<strong>``, ``<i>`` and ``<u>`` become ``<em>``.
    ``<font>`` tags are unwrapped. Anchors keep only ``href``, headings lose
    every attribute, and images keep only ``src`` and ``alt`` (images with
    no source are dropped).
    """
    if "<" not in text:
        return StageResult(text)

    counts: Counter[str] = Counter()
    text = _TAG_NAME_RE.sub(_lowercase_tag, text)

    def _replace_open(match: re.Match[str]) -> str:
        counts[IssueCategory.PRESENTATIONAL_TAGS] += 1
        return f"<{PRESENTATIONAL_REPLACEMENTS[match.group(1).lower()]}>"

    def _replace_close(match: re.Match[str]) -> str:
        return f"</{PRESENTATIONAL_REPLACEMENTS[match.group(1).lower()]}>"

    text = _PRESENTATIONAL_OPEN_RE.sub(_replace_open, text)
    text = _PRESENTATIONAL_CLOSE_RE.sub(_replace_close, text)

    text, stripped = _HEADING_RE.subn(r"<\1>", text)
    counts[IssueCategory.PRESENTATIONAL_TAGS] += stripped

    text, unwrapped = _FONT_TAG_RE.subn("", text)
    counts[IssueCategory.PRESENTATIONAL_TAGS] += unwrapped

    def _rewrite(match: re.Match[str]) -> str:
        name = match.group("name")
        if name == "a":
            attributes = parse_attributes(match.group("attrs"))
            rendered = render_start_tag("a", _rewrite_anchor(attributes))
        elif name == "img":
            kept = _rewrite_image(parse_attributes(match.group("attrs")))
            rendered = "" if kept is None else render_start_tag("img", kept, self_closing=True)
        else:
            return match.group(0)
        if rendered != match.group(0):
            counts[IssueCategory.PRESENTATIONAL_TAGS] += 1
        return rendered

    text = START_TAG_RE.sub(_rewrite, text)
    return StageResult.of(text, counts)


def ensure_wrapped(text: str) -> StageResult:
    """Make sure the document opens with a block-level element.

    Inline content before the first block is wrapped in ``<p>``. If that
    leading run itself holds a block such as a table or ``<pre>``, it is
    wrapped in ``<div>`` instead, since a paragraph cannot contain one.
    """
    stripped = text.strip()
    if not stripped or starts_with_block(stripped):
        return StageResult(stripped)

    match = _WRAPPING_START_RE.search(stripped)
    head, tail = (stripped, "") if match is None else (stripped[: match.start()], stripped[match.start() :])
    head = head.strip()
    wrapper = "div" if _ANY_BLOCK_START_RE.search(head) else "p"

    counts: Counter[str] = Counter({IssueCategory.UNWRAPPED_CONTENT: 1})
    return StageResult.of(f"<{wrapper}>{head}</{wrapper}>{tail}", counts)
