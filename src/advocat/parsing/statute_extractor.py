"""Statute / provision reference extraction.

Heuristics for the references an advisor answer typically carries:
  - Section 138, Article 21A, Order 39, Rule 3
  - Consumer Protection Act
  - The Transfer of Property Act, 1882

Returns a list of ``Citation`` with ``kind == statute`` and no target.
Matching is case-sensitive: only capitalised phrases count.
"""
from __future__ import annotations
import re
from typing import List

from advocat.conversation.models import Citation

STATUTE_RE = re.compile(
    r"((?:Section|Article|Order|Rule)\s+\d+[A-Za-z]*"
    r"|(?:The\s+)?[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s+Act(?:,\s+\d{4})?)"
)

# Anchor words that must not be reported on their own
DEGENERATE_MATCHES = frozenset({"The", "Act", "Section"})


def scan_statute_references(text: str) -> List[Citation]:
    if not text:
        return []
    refs: List[Citation] = []
    for m in STATUTE_RE.finditer(text):
        raw = m.group(1)
        if raw in DEGENERATE_MATCHES:
            continue
        refs.append(Citation.statute(raw))
    return refs


if __name__ == '__main__':
    sample = "Under Article 21 and The Transfer of Property Act, 1882, read with Section 106."
    print(scan_statute_references(sample))
