"""Display-width helpers for the status and message bars.

Buffer content is laid out one cell per character (tabs aside), but bar
text such as file names may hold wide or combining characters, so it is
measured and cut at grapheme boundaries.
"""

from __future__ import annotations

import unicodedata

import grapheme
import wcwidth as _wcwidth


def _grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster."""
    if not g:
        return 0

    first = g[0]
    cp = ord(first)
    # Control characters
    if cp < 0x20 or (0x7F <= cp <= 0x9F):
        return 0
    # Lone surrogates come from undecodable bytes and print as one cell.
    if 0xD800 <= cp <= 0xDFFF:
        return 1

    if len(g) > 1:
        for ch in g:
            if ord(ch) in (0xFE0F, 0x200D):  # VS16, ZWJ
                return 2
        if unicodedata.category(first).startswith("M"):
            return 0

    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*."""
    if not text:
        return 0
    if text.isascii() and text.isprintable():
        return len(text)
    return sum(_grapheme_width(g) for g in grapheme.graphemes(text))


def truncate_to_width(text: str, max_width: int) -> str:
    """Return the longest prefix of *text* that fits in *max_width* columns."""
    if max_width <= 0:
        return ""
    if visible_width(text) <= max_width:
        return text

    result: list[str] = []
    cols = 0
    for g in grapheme.graphemes(text):
        w = _grapheme_width(g)
        if cols + w > max_width:
            break
        result.append(g)
        cols += w
    return "".join(result)
