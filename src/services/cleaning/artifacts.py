"""Removal of WordPress-generated attribute noise.

Strips the class tokens, ids and responsive-image attributes the old
theme and media library stamped onto every element. Other class tokens
and attributes are kept in their original order.
"""

from __future__ import annotations

import re
from collections import Counter

from src.models.domain import IssueCategory
from src.services.cleaning.base import StageResult
from src.utils.markup import START_TAG_RE, Attribute, parse_attributes, render_start_tag

ARTIFACT_CLASS_RE = re.compile(
    r"""^(?:
        wp-image-\d+
      | align(?:left|right|center|none)
      | wp-caption(?:-[\w-]+)?
      | wp-post-image
      | wp-block-[\w-]+
      | size-[\w-]+
      | attachment-[\w-]+
      | post-\d+
      | page-id-\d+
      | postid-\d+
    )$""",
    re.IGNORECASE | re.VERBOSE,
)

ARTIFACT_ID_RE = re.compile(r"^(?:attachment_\d+|post-\d+|more-\d+)$", re.IGNORECASE)

# Responsive image hints and Jetpack carousel metadata.
ARTIFACT_ATTRIBUTE_RE = re.compile(
    r"^(?:srcset|sizes|data-attachment-id|data-permalink|data-orig-[\w-]+|data-image-[\w-]+"
    r"|data-medium-file|data-large-file|data-comments-opened)$",
    re.IGNORECASE,
)


def _clean_attributes(attributes: list[Attribute]) -> tuple[list[Attribute], int]:
    """Return the attributes to keep and the number of artifacts removed."""
    kept: list[Attribute] = []
    removed = 0
    for attr in attributes:
        name = attr.name.lower()
        if ARTIFACT_ATTRIBUTE_RE.match(name):
            removed += 1
            continue
        if name == "class" and attr.value is not None:
            tokens = attr.value.split()
            remaining = [t for t in tokens if not ARTIFACT_CLASS_RE.match(t)]
            if not remaining:
                removed += max(len(tokens), 1)
                continue
            if len(remaining) != len(tokens):
                removed += len(tokens) - len(remaining)
                attr = attr._replace(value=" ".join(remaining))
        elif name == "id" and attr.value is not None:
            if not attr.value.strip() or ARTIFACT_ID_RE.match(attr.value.strip()):
                removed += 1
                continue
        kept.append(attr)
    return kept, removed


def remove_artifacts(text: str) -> StageResult:
    """Drop WordPress class tokens, generated ids, srcset/sizes and data-* noise.

    A ``class`` or ``id`` attribute left empty is removed entirely.
    """
    if "<" not in text:
        return StageResult(text)

    counts: Counter[str] = Counter()

    def _rewrite(match: re.Match[str]) -> str:
        attributes = parse_attributes(match.group("attrs"))
        if not attributes:
            return match.group(0)
        kept, removed = _clean_attributes(attributes)
        if not removed:
            return match.group(0)
        counts[IssueCategory.WORDPRESS_ARTIFACTS] += removed
        return render_start_tag(match.group("name"), kept, self_closing=bool(match.group("slash")))

    return StageResult.of(START_TAG_RE.sub(_rewrite, text), counts)
