"""Removal of executable, styling and embedded markup.

Covers whole elements (``<script>...</script>``), void tags (``<embed>``),
comments, inline event handlers and script-capable URLs. The stage
repeats until a pass changes nothing, so fragments that reassemble
after one removal (``<scr<script></script>ipt>``) are caught as well.
"""

from __future__ import annotations

import re
from collections import Counter

from src.models.domain import IssueCategory
from src.services.cleaning.base import StageResult
from src.utils.markup import START_TAG_RE, is_unsafe_url, parse_attributes, render_start_tag

# Elements removed together with everything between their tags.
CONTAINER_ELEMENTS: dict[IssueCategory, tuple[str, ...]] = {
    IssueCategory.SCRIPT_TAGS: ("script",),
    IssueCategory.STYLE_TAGS: ("style",),
    IssueCategory.EMBEDDED_OBJECTS: ("iframe", "object"),
    IssueCategory.FORM_CONTROLS: ("form", "button", "select", "textarea"),
}

# Elements that carry no content; only the tag goes.
VOID_ELEMENTS: dict[IssueCategory, tuple[str, ...]] = {
    IssueCategory.EMBEDDED_OBJECTS: ("embed",),
    IssueCategory.FORM_CONTROLS: ("input",),
    IssueCategory.META_TAGS: ("meta", "link"),
}

URL_ATTRIBUTES: frozenset[str] = frozenset({"href", "src", "action", "formaction", "poster", "xlink:href"})

_MAX_ROUNDS = 10


def _alternation(names: tuple[str, ...]) -> str:
    return "|".join(re.escape(n) for n in names)


# Openers of elements removed with their contents. Each is paired with the
# nearest following closer of the same name.
_CONTAINER_OPENER_RES: list[tuple[IssueCategory, re.Pattern[str]]] = [
    (category, re.compile(rf"<(?P<tag>{_alternation(names)})(?=[\s/>])[^>]*>", re.IGNORECASE))
    for category, names in CONTAINER_ELEMENTS.items()
]
_CLOSER_RES: dict[str, re.Pattern[str]] = {
    name: re.compile(rf"</{re.escape(name)}\s*>", re.IGNORECASE)
    for names in CONTAINER_ELEMENTS.values()
    for name in names
}

# Leftover openers and closers with no partner. Matched as a prefix with no
# name boundary, and stopped at the next '<' when the '>' is missing.
_STRAY_NAMES: dict[IssueCategory, tuple[str, ...]] = dict(CONTAINER_ELEMENTS)
for _category, _names in VOID_ELEMENTS.items():
    _STRAY_NAMES[_category] = _STRAY_NAMES.get(_category, ()) + _names

_STRAY_RES: list[tuple[IssueCategory, re.Pattern[str]]] = [
    (category, re.compile(rf"</?(?:{_alternation(names)})[^<>]*>?", re.IGNORECASE))
    for category, names in _STRAY_NAMES.items()
]

_COMMENT_OPENER_RE = re.compile(r"<!--")

# Loose tag scan for markup the attribute grammar does not accept.
_LOOSE_TAG_RE = re.compile(r"<[A-Za-z][^<>]*>")
_LOOSE_HANDLER_RE = re.compile(
    r"""(?<=[\s/"'])on[a-z]+\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]*)""",
    re.IGNORECASE,
)
_LOOSE_URL_RE = re.compile(
    r"""(?<=[\s/"'])(?:href|src|action|formaction)\s*=\s*"""
    r"""(?:"\s*(?:javascript|vbscript):[^"]*"|'\s*(?:javascript|vbscript):[^']*'|(?:javascript|vbscript):[^\s>]*)""",
    re.IGNORECASE,
)


def _strip_attributes(text: str, counts: Counter[str]) -> str:
    def _rewrite(match: re.Match[str]) -> str:
        attributes = parse_attributes(match.group("attrs"))
        kept = []
        for attr in attributes:
            name = attr.name.lower()
            if name.startswith("on"):
                counts[IssueCategory.EVENT_HANDLERS] += 1
            elif name == "style":
                counts[IssueCategory.STYLE_TAGS] += 1
            elif name in URL_ATTRIBUTES and attr.value is not None and is_unsafe_url(attr.value):
                counts[IssueCategory.UNSAFE_URLS] += 1
            else:
                kept.append(attr)
        if len(kept) == len(attributes):
            return match.group(0)
        return render_start_tag(match.group("name"), kept, self_closing=bool(match.group("slash")))

    text = START_TAG_RE.sub(_rewrite, text)

    def _rewrite_loose(match: re.Match[str]) -> str:
        tag = match.group(0)
        if START_TAG_RE.fullmatch(tag):
            return tag
        tag, handlers = _LOOSE_HANDLER_RE.subn("", tag)
        tag, urls = _LOOSE_URL_RE.subn("", tag)
        counts[IssueCategory.EVENT_HANDLERS] += handlers
        counts[IssueCategory.UNSAFE_URLS] += urls
        return tag

    return _LOOSE_TAG_RE.sub(_rewrite_loose, text)


def _remove_containers(text: str, opener_re: re.Pattern[str]) -> tuple[str, int]:
    """Drop each opener through its nearest matching closer.

    An opener with no closer after it is left for the stray-tag pass. Once a
    name has no closer left, later openers of that name are not searched
    again, so unclosed openers cost linear time.
    """
    parts: list[str] = []
    pos = 0
    removed = 0
    unclosed: set[str] = set()
    scan = 0
    while match := opener_re.search(text, scan):
        name = match.group("tag").lower()
        closer = None if name in unclosed else _CLOSER_RES[name].search(text, match.end())
        if closer is None:
            unclosed.add(name)
            scan = match.start() + 1
            continue
        parts.append(text[pos : match.start()])
        pos = scan = closer.end()
        removed += 1
    if not removed:
        return text, 0
    parts.append(text[pos:])
    return "".join(parts), removed


def _remove_comments(text: str) -> tuple[str, int]:
    parts: list[str] = []
    pos = 0
    removed = 0
    while (start := text.find("<!--", pos)) != -1:
        end = text.find("-->", start + 4)
        if end == -1:
            break
        parts.append(text[pos:start])
        pos = end + 3
        removed += 1
    if not removed:
        return text, 0
    parts.append(text[pos:])
    return "".join(parts), removed


def _sanitize_once(text: str, counts: Counter[str]) -> str:
    for category, opener_re in _CONTAINER_OPENER_RES:
        text, removed = _remove_containers(text, opener_re)
        counts[category] += removed

    text, removed = _remove_comments(text)
    counts[IssueCategory.HTML_COMMENTS] += removed
    text, removed = _COMMENT_OPENER_RE.subn("", text)
    counts[IssueCategory.HTML_COMMENTS] += removed

    for category, pattern in _STRAY_RES:
        text, removed = pattern.subn("", text)
        counts[category] += removed

    return _strip_attributes(text, counts)


def remove_unsafe_markup(text: str) -> StageResult:
    """Remove scripts, styles, embeds, forms, comments and unsafe attributes.

    Repeats until stable. Inline ``style`` attributes are counted under
    ``style_tags``.
    """
    if "<" not in text:
        return StageResult(text)

    counts: Counter[str] = Counter()
    for _ in range(_MAX_ROUNDS):
        cleaned = _sanitize_once(text, counts)
        if cleaned == text:
            break
        text = cleaned
    return StageResult.of(text, counts)
