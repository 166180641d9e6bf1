"""Citation scanning over assistant answers."""
from __future__ import annotations
from typing import Iterable, List

from advocat.conversation.models import Citation, CitationKind
from advocat.parsing.citation_extractor import scan_bare_urls, scan_markdown_links
from advocat.parsing.statute_extractor import scan_statute_references


def dedupe_by_title(citations: Iterable[Citation]) -> List[Citation]:
    seen = set()
    out: List[Citation] = []
    for c in citations:
        if c.title in seen:
            continue
        seen.add(c.title)
        out.append(c)
    return out


def scan_citations(text: str) -> List[Citation]:
    """Bare URLs, then markdown links, then statute references; unique by title."""
    if not text:
        return []
    return dedupe_by_title(
        scan_bare_urls(text) + scan_markdown_links(text) + scan_statute_references(text)
    )


def merge_references(existing: Iterable[Citation], new: Iterable[Citation]) -> List[Citation]:
    return dedupe_by_title(list(existing) + list(new))


def count_statutes(citations: Iterable[Citation]) -> int:
    return sum(1 for c in citations if c.kind is CitationKind.STATUTE)


__all__ = [
    "scan_citations",
    "scan_bare_urls",
    "scan_markdown_links",
    "scan_statute_references",
    "merge_references",
    "dedupe_by_title",
    "count_statutes",
]
