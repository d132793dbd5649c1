"""Text normalization helpers shared by adapters, grouping and the store."""

from __future__ import annotations

import html
import re

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


def strip_html(text: str | None) -> str:
    """Remove markup, unescape entities and collapse whitespace.

    Args:
        text: Raw text that may contain HTML.

    Returns:
        Plain text, or an empty string for None.
    """
    if not text:
        return ""
    plain = _TAG_RE.sub(" ", text)
    plain = html.unescape(plain)
    return _WS_RE.sub(" ", plain).strip()


def truncate(text: str, limit: int, *, ellipsis: str = "...") -> str:
    """Cut text to at most ``limit`` characters, preferring a word boundary."""
    if len(text) <= limit:
        return text
    cut = text[: max(0, limit - len(ellipsis))]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip(" ,.;:") + ellipsis
