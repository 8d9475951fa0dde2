"""
Candidate link extraction from a profile page.

Profile builders render part of their links client-side, so besides the
anchors in the markup we also scan the inline state blobs for
`"url": "https://..."` pairs. Those blobs are usually embedded in script
tags or JS assignments and are not parseable on their own, so the scan
works on the raw text and only decodes the individual string literals.
"""

import json
from typing import Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup

URL_KEY = '"url"'
URL_PREFIXES = ("http://", "https://")
WHITESPACE = " \t\r\n"


def decode_string_literal(body: str) -> str:
    """Decode the inside of a JSON string literal, e.g. `https:\\/\\/a.com`."""
    try:
        return json.loads(f'"{body}"')
    except ValueError:
        return body.replace("\\", "")


def _skip_whitespace(text: str, i: int) -> int:
    while i < len(text) and text[i] in WHITESPACE:
        i += 1
    return i


def _read_string_literal(text: str, start: int) -> Optional[Tuple[str, int]]:
    """
    Read the JSON string literal whose opening quote is at `start`.
    Returns (body, index after the closing quote), or None if it never closes.
    """
    i = start + 1
    while i < len(text):
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if c == '"':
            return text[start + 1:i], i + 1
        if c == "\n":
            return None
        i += 1
    return None


def scan_json_urls(text: str) -> Iterator[str]:
    """Yield every decoded http(s) value of a `"url"` key found in `text`."""
    pos = 0
    while True:
        idx = text.find(URL_KEY, pos)
        if idx < 0:
            return
        pos = idx + len(URL_KEY)

        i = _skip_whitespace(text, pos)
        if i >= len(text) or text[i] != ":":
            continue
        i = _skip_whitespace(text, i + 1)
        if i >= len(text) or text[i] != '"':
            continue

        literal = _read_string_literal(text, i)
        if literal is None:
            continue
        body, pos = literal

        url = decode_string_literal(body)
        if url.startswith(URL_PREFIXES):
            yield url


def extract_anchor_hrefs(html: str) -> Iterator[str]:
    soup = BeautifulSoup(html, "html.parser")
    for a_tag in soup.find_all("a", href=True):
        href = a_tag["href"]
        if href:
            yield href


def scrape(html: str) -> List[str]:
    """Candidate hrefs from anchors and inline JSON, duplicates collapsed."""
    if not html:
        return []
    candidates = dict.fromkeys(extract_anchor_hrefs(html))
    candidates.update(dict.fromkeys(scan_json_urls(html)))
    return list(candidates)
