"""Link extraction utilities.

Extracts hyperlinks from an assistant's markdown answer in two passes:
  - Bare URLs: https://nalsa.gov.in
  - Markdown links: [Consumer Protection Act](https://example.gov/cpa)

A bare URL that is the target half of a markdown link is left to the
markdown pass so the same link is never reported twice.
Returns lists of ``Citation`` with ``kind == link``.
"""
from __future__ import annotations
import re
from typing import List

from advocat.conversation.models import Citation

URL_RE = re.compile(r"(https?://[^\s)]+)")
MARKDOWN_LINK_RE = re.compile(r"\[([^\]]+)\]\((https?://[^\s)]+)\)")

# How far back to look for the "](" that opens a markdown link target
LOOKBEHIND_CHARS = 10


def scan_bare_urls(text: str) -> List[Citation]:
    if not text:
        return []
    found: List[Citation] = []
    for m in URL_RE.finditer(text):
        preceding = text[max(0, m.start() - LOOKBEHIND_CHARS):m.start()]
        if preceding.endswith("]("):
            continue
        url = m.group(1)
        found.append(Citation.link(url, url))
    return found


def scan_markdown_links(text: str) -> List[Citation]:
    if not text:
        return []
    return [Citation.link(m.group(1), m.group(2)) for m in MARKDOWN_LINK_RE.finditer(text)]


if __name__ == '__main__':
    sample = "See [NALSA](https://nalsa.gov.in) or https://edistrict.delhigovt.nic.in (Delhi)."
    print(scan_bare_urls(sample))
    print(scan_markdown_links(sample))
