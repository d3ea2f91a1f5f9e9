from __future__ import annotations

import re

from bs4 import BeautifulSoup

_whitespace_re = re.compile(r"\s+")

# Elements whose boundaries separate words; inline tags join text as-is.
_BLOCK_TAGS = ["p", "div", "li", "ul", "ol", "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "tr", "td", "th", "figure", "figcaption"]


def strip_markup(raw_html: str | None) -> str:
    """Reduce feed-supplied HTML to plain text.

    - Strip tags (script/style bodies included)
    - Decode HTML entities (done by the parser)
    - Collapse whitespace
    """
    if not raw_html:
        return ""

    soup = BeautifulSoup(raw_html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    for tag in soup("br"):
        tag.replace_with(" ")
    for tag in soup(_BLOCK_TAGS):
        tag.append(" ")
    text = soup.get_text()
    text = _whitespace_re.sub(" ", text)
    return text.strip()
