"""HTML entity decoding.

Legacy exports often store markup in escaped form (``&lt;script&gt;``),
so this stage runs first and the later stages see it as live markup.

Decoding is a single left-to-right pass: ``&amp;lt;`` becomes ``&lt;``,
not ``<``. Ampersands written as ``&amp;amp;`` stay literal after one run.
"""

from __future__ import annotations

import re
from collections import Counter
from html.entities import name2codepoint

from src.models.domain import IssueCategory
from src.services.cleaning.base import StageResult

# HTML 4 named entities plus the XML-only &apos;. Non-breaking spaces become
# plain spaces so the whitespace rules treat them like any other blank.
NAMED_ENTITIES: dict[str, str] = {name: chr(cp) for name, cp in name2codepoint.items()}
NAMED_ENTITIES["apos"] = "'"
NAMED_ENTITIES["nbsp"] = " "

_ENTITY_RE = re.compile(
    r"""
    &
    (?:
        \#(?P<dec>[0-9]{1,8})           # &#8217;
      | \#[xX](?P<hex>[0-9a-fA-F]{1,6}) # &#x2019;
      | (?P<name>[A-Za-z][A-Za-z0-9]{1,31})
    )
    ;
    """,
    re.VERBOSE,
)

_MAX_CODEPOINT = 0x10FFFF


def _decode_codepoint(codepoint: int) -> str | None:
    """Map a numeric reference to text, or None if it should stay escaped."""
    if codepoint == 0xA0:
        return " "
    if 0x80 <= codepoint <= 0x9F:
        # Windows-1252 smart quotes and dashes stored as raw code points.
        try:
            return bytes([codepoint]).decode("cp1252")
        except UnicodeDecodeError:
            return chr(codepoint)
    if codepoint == 0 or 0xD800 <= codepoint <= 0xDFFF or codepoint > _MAX_CODEPOINT:
        return None
    return chr(codepoint)


def _decode_match(match: re.Match[str]) -> str | None:
    if match.group("dec") is not None:
        return _decode_codepoint(int(match.group("dec")))
    if match.group("hex") is not None:
        return _decode_codepoint(int(match.group("hex"), 16))
    return NAMED_ENTITIES.get(match.group("name"))


def decode_entities(text: str) -> StageResult:
    """Replace named, decimal and hex entities with their characters.

    Unknown names and out-of-range code points are left untouched.
    Counts one ``html_entities`` issue per replaced occurrence.
    """
    counts: Counter[str] = Counter()

    def _replace(match: re.Match[str]) -> str:
        decoded = _decode_match(match)
        if decoded is None:
            return match.group(0)
        counts[IssueCategory.HTML_ENTITIES] += 1
        return decoded

    return StageResult.of(_ENTITY_RE.sub(_replace, text), counts)
