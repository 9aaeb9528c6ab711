"""Turning bare URLs in release notes into markdown autolinks."""

from __future__ import annotations

_URL_PREFIXES = ("https://", "http://")


def _inside_existing_link(text: str, start: int) -> bool:
    """True when the URL at ``start`` already sits in ``[..](url)`` or ``<url>``."""
    before = text[:start]
    return before.endswith("](") or before.endswith("<")


def _url_end(text: str, start: int) -> int:
    """Index just past the URL that begins at ``start``.

    A URL ends at whitespace, or at a closing parenthesis when no opening
    parenthesis has appeared within the URL so far.
    """
    for offset, ch in enumerate(text[start:]):
        if ch.isspace() or (ch == ")" and "(" not in text[start : start + offset]):
            return start + offset
    return len(text)


def convert_urls_to_links(text: str) -> str:
    """Wrap raw ``http://`` and ``https://`` URLs in ``<...>`` so markdown renders them as links.

    URLs that are already the target of a markdown link or already wrapped
    in angle brackets are left as they are.
    """
    parts: list[str] = []
    pos = 0
    while True:
        found = text.find("http", pos)
        if found < 0:
            parts.append(text[pos:])
            break
        parts.append(text[pos:found])
        if not _inside_existing_link(text, found):
            end = _url_end(text, found)
            url = text[found:end]
            if url.startswith(_URL_PREFIXES):
                parts.append(f"<{url}>")
                pos = end
                continue
        parts.append(text[found])
        pos = found + 1
    return "".join(parts)