"""Structural repair of cleaned markup.

Each round runs these steps in order:

1. Collapse whitespace runs to a single space.
2. Fix line breaks: three or more become two, and breaks just inside
   block tags or at the document edges are dropped.
3. Balance tags: drop stray closers, close crossed and unclosed
   elements, and close an open paragraph before a block starts.
4. Remove elements holding nothing but whitespace or ``<br>``.
5. Remove whitespace next to block tags and line breaks.
6. Trim.

Rounds repeat until one changes nothing, so an element emptied by an
earlier step is removed by a later round.
"""

from __future__ import annotations

import re
from collections import Counter

from src.models.domain import IssueCategory
from src.services.cleaning.base import StageResult
from src.utils.markup import BLOCK_LEVEL_TAGS

TRACKED_TAGS: tuple[str, ...] = (
    "p",
    "div",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "ul",
    "ol",
    "li",
    "blockquote",
    "strong",
    "em",
    "b",
    "i",
    "u",
    "a",
    "span",
)

# Block openers that end an open paragraph, as browsers do.
PARAGRAPH_CLOSERS: frozenset[str] = BLOCK_LEVEL_TAGS - {"td", "th", "tr", "thead", "tbody", "tfoot"}

EMPTYABLE_TAGS: tuple[str, ...] = TRACKED_TAGS

_MAX_ROUNDS = 8


def _alternation(names: set[str] | tuple[str, ...] | frozenset[str]) -> str:
    return "|".join(sorted(names, key=len, reverse=True))


_BR = r"<br\s*/?>"
_BR_BLOCKS = "p|div|li|h[1-6]|blockquote"

_WHITESPACE_RE = re.compile(r"\s+")
_BR_RUN_RE = re.compile(rf"{_BR}(?:\s*{_BR}){{2,}}", re.IGNORECASE)
_BR_AFTER_OPEN_RE = re.compile(rf"(<(?:{_BR_BLOCKS})(?:\s[^>]*)?>)\s*(?:{_BR}\s*)+", re.IGNORECASE)
_BR_BEFORE_CLOSE_RE = re.compile(rf"(?:\s*{_BR})+\s*(</(?:{_BR_BLOCKS})\s*>)", re.IGNORECASE)
_BR_LEADING_RE = re.compile(rf"^(?:\s*{_BR})+", re.IGNORECASE)
_BR_TRAILING_RE = re.compile(rf"(?:{_BR}\s*)+$", re.IGNORECASE)

_BALANCE_TAG_RE = re.compile(
    rf"<(?P<close>/?)(?P<name>{_alternation(set(TRACKED_TAGS) | PARAGRAPH_CLOSERS)})(?=[\s/>])(?P<rest>[^>]*)>",
    re.IGNORECASE,
)

EMPTY_ELEMENT_RE = re.compile(
    rf"<(?P<name>{_alternation(EMPTYABLE_TAGS)})(?:\s[^>]*)?>(?:\s|&nbsp;|&#160;|{_BR})*</(?P=name)\s*>",
    re.IGNORECASE,
)

_BLOCK_TAG = rf"</?(?:{_alternation(BLOCK_LEVEL_TAGS | {'br'})})(?=[\s/>])[^>]*>"
_WS_BEFORE_BLOCK_RE = re.compile(rf"\s+({_BLOCK_TAG})", re.IGNORECASE)
_WS_AFTER_BLOCK_RE = re.compile(rf"({_BLOCK_TAG})\s+", re.IGNORECASE)


def _fix_line_breaks(text: str, counts: Counter[str]) -> str:
    fixes = 0
    text, n = _BR_RUN_RE.subn("<br><br>", text)
    fixes += n
    for pattern, replacement in (
        (_BR_AFTER_OPEN_RE, r"\1"),
        (_BR_BEFORE_CLOSE_RE, r"\1"),
        (_BR_LEADING_RE, ""),
        (_BR_TRAILING_RE, ""),
    ):
        text, n = pattern.subn(replacement, text)
        fixes += n
    counts[IssueCategory.MALFORMED_HTML] += fixes
    return text


def balance_tags(text: str) -> tuple[str, int]:
    """Close, reorder and drop tags until every tracked element nests properly.

    Returns the repaired text and the number of fixes made. Text that
    needs no fixes is returned unchanged, attribute spacing included.
    """
    out: list[str] = []
    stack: list[str] = []
    fixes = 0
    pos = 0
    for match in _BALANCE_TAG_RE.finditer(text):
        out.append(text[pos : match.start()])
        pos = match.end()
        name = match.group("name").lower()
        tracked = name in TRACKED_TAGS

        if match.group("close"):
            if not tracked:
                out.append(match.group(0))
            elif name not in stack:
                fixes += 1
            else:
                while stack[-1] != name:
                    out.append(f"</{stack.pop()}>")
                    fixes += 1
                stack.pop()
                out.append(match.group(0))
            continue

        if name in PARAGRAPH_CLOSERS and "p" in stack:
            while stack[-1] != "p":
                out.append(f"</{stack.pop()}>")
                fixes += 1
            stack.pop()
            out.append("</p>")
            fixes += 1
        out.append(match.group(0))
        if tracked and not match.group("rest").rstrip().endswith("/"):
            stack.append(name)

    out.append(text[pos:])
    while stack:
        out.append(f"</{stack.pop()}>")
        fixes += 1

    if not fixes:
        return text, 0
    return "".join(out), fixes


def _remove_empty_elements(text: str, counts: Counter[str]) -> str:
    while True:
        text, removed = EMPTY_ELEMENT_RE.subn("", text)
        if not removed:
            return text
        counts[IssueCategory.MALFORMED_HTML] += removed


def _repair_once(text: str, counts: Counter[str]) -> str:
    text = _WHITESPACE_RE.sub(" ", text)
    text = _fix_line_breaks(text, counts)
    text, fixes = balance_tags(text)
    counts[IssueCategory.MALFORMED_HTML] += fixes
    text = _remove_empty_elements(text, counts)
    text = _WS_BEFORE_BLOCK_RE.sub(r"\1", text)
    text = _WS_AFTER_BLOCK_RE.sub(r"\1", text)
    return text.strip()


def repair_structure(text: str) -> StageResult:
    """Normalize whitespace and line breaks, balance tags and drop empties."""
    counts: Counter[str] = Counter()
    for _ in range(_MAX_ROUNDS):
        repaired = _repair_once(text, counts)
        if repaired == text:
            break
        text = repaired
    return StageResult.of(text, counts)
