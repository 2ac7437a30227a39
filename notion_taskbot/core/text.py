"""Pure text helpers: URL extraction, HTML escaping, and chunking.

WHY: Task titles come from free-form chat text that often carries a link.
The link belongs in the task's URL property, not in its title. Replies are
sent with Telegram's HTML parse mode, so user text must be escaped before
it is embedded. Notion limits rich text to 2000 characters per block, so
long transcripts must be split.

HOW: A single compiled regex finds the first http(s) or www. address;
trailing sentence punctuation is stripped from the match. Escaping uses a
str.translate table (one pass). Chunking slices the string at fixed
offsets.

RULES:
- extract_first_url: trailing ),.;!? runs never belong to the URL
- www. addresses are normalized to https://
- remove_url_from_text: result never contains the raw match; whitespace
  runs collapse to one space; idempotent for the same extracted value
- escape_html is NOT idempotent — escape exactly once, at render time
- split_into_chunks is lossless: "".join(chunks) == text
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# ASCII word boundary: a URL glued to a Cyrillic word still matches.
_URL_START = r"(?<![A-Za-z0-9_])"
_URL_RE = re.compile(
    _URL_START + r"https?://[^\s<>()]+|" + _URL_START + r"www\.[^\s<>()]+",
    re.IGNORECASE,
)
_WHITESPACE_RE = re.compile(r"\s+")

_TRAILING_PUNCTUATION = "),.;!?"

_HTML_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
})


@dataclass(frozen=True)
class ExtractedUrl:
    """A URL found in message text.

    Attributes:
        raw: The substring exactly as it appeared in the text.
        normalized: Absolute form stored on the task (https:// added to www.).
    """

    raw: str
    normalized: str


def extract_first_url(text: str) -> ExtractedUrl | None:
    """Find the first web address in text.

    Matches ``http://``, ``https://`` and bare ``www.`` hosts. Trailing
    punctuation such as the comma in ``"see https://x.io, thanks"`` is
    dropped from the match.
    """
    match = _URL_RE.search(text)
    if match is None:
        return None

    raw = match.group(0).rstrip(_TRAILING_PUNCTUATION)
    normalized = raw
    if raw.lower().startswith("www."):
        normalized = "https://" + raw

    return ExtractedUrl(raw=raw, normalized=normalized)


def remove_url_from_text(text: str, extracted: ExtractedUrl) -> str:
    """Strip a previously extracted URL out of text and tidy whitespace.

    Both the raw and the normalized forms are removed. May return an empty
    string; callers decide the fallback.
    """
    result = text
    # The normalized form may contain the raw one (www. inside https://www.).
    if extracted.normalized != extracted.raw:
        result = result.replace(extracted.normalized, " ")
    result = result.replace(extracted.raw, " ")
    return _WHITESPACE_RE.sub(" ", result).strip()


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for Telegram HTML replies."""
    return text.translate(_HTML_ESCAPES)


def split_into_chunks(text: str, max_size: int) -> list[str]:
    """Split text into consecutive pieces of at most max_size characters.

    Raises:
        ValueError: If max_size is less than 1.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be >= 1, got {max_size}")
    return [text[i:i + max_size] for i in range(0, len(text), max_size)]
