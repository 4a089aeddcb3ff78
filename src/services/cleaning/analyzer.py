"""Read-only issue detection for stored content.

Used to size a cleanup before running it and to verify a finished run.
Detection is a set of cheap pattern checks. It never modifies the text.

Cleaned content normally reports no issues. Doubly-escaped entities
(``&amp;lt;``) and CSS text in the body (``@keyframes`` rules) are
reported but left for manual review.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable

from src.models.domain import ContentAnalysis, ContentIssue, ContentIssues, ContentRow
from src.services.cleaning.structure import EMPTY_ELEMENT_RE
from src.utils.markup import starts_with_block

DETECTORS: dict[ContentIssue, re.Pattern[str]] = {
    ContentIssue.ENTITY_ESCAPES: re.compile(r"&(?:#\d+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]+);"),
    ContentIssue.SHORTCODES: re.compile(r"\[/?[A-Za-z_][\w-]*(?:\s[^\[\]]*)?/?\]"),
    ContentIssue.UNSAFE_MARKUP: re.compile(
        r"<!--"
        r"|</?(?:script|style|iframe|object|embed|form|input|button|select|textarea|meta|link)"
        r"|<[^<>]*[\s/\"']on[a-z]+\s*="
        r"|(?:href|src|action|formaction)\s*=\s*[\"']?\s*(?:javascript|vbscript):"
        r"|(?:href|src|action|formaction)\s*=\s*[\"']?\s*data:(?!image/(?:png|gif|jpe?g|webp);)",
        re.IGNORECASE,
    ),
    ContentIssue.WORDPRESS_ARTIFACTS: re.compile(
        r"\b(?:wp-image-\d+|wp-caption|wp-post-image|align(?:left|right|center|none)"
        r"|size-(?:full|large|medium|thumbnail)|attachment_\d+|srcset\s*=|sizes\s*=)",
        re.IGNORECASE,
    ),
    ContentIssue.INLINE_CSS: re.compile(r"@keyframes|\sstyle\s*=", re.IGNORECASE),
    ContentIssue.PRESENTATIONAL_TAGS: re.compile(r"</?(?:b|i|u)(?=[\s/>])", re.IGNORECASE),
    ContentIssue.EXCESS_WHITESPACE: re.compile(r"\s{2,}|^\s|\s$"),
    ContentIssue.EMPTY_ELEMENTS: EMPTY_ELEMENT_RE,
}


def analyze_content(text: str | None) -> ContentIssues:
    """List the issues present in one piece of content."""
    if not text:
        return ContentIssues()
    issues = [issue for issue, pattern in DETECTORS.items() if pattern.search(text)]
    if text.strip() and not starts_with_block(text):
        issues.append(ContentIssue.NOT_WRAPPED)
    return ContentIssues(issues=issues)


def analyze_rows(rows: Iterable[ContentRow], *, sample_size: int = 5) -> ContentAnalysis:
    """Aggregate issue counts over many rows.

    ``issue_counts`` counts rows per issue, not occurrences.
    """
    total = 0
    with_issues = 0
    counts: Counter[ContentIssue] = Counter()
    samples: list[int] = []
    for row in rows:
        total += 1
        found = analyze_content(row.content)
        if not found.has_issues:
            continue
        with_issues += 1
        counts.update(found.issues)
        if len(samples) < sample_size:
            samples.append(row.id)

    return ContentAnalysis(
        total_rows=total,
        rows_with_issues=with_issues,
        clean_rows=total - with_issues,
        issue_counts={issue: counts[issue] for issue in ContentIssue if counts[issue]},
        sample_ids=samples,
    )
