from advocat.conversation.models import Citation, CitationKind
from advocat.parsing import (
    count_statutes,
    merge_references,
    scan_bare_urls,
    scan_citations,
    scan_markdown_links,
    scan_statute_references,
)


def test_markdown_link_then_statute():
    text = "Under [Consumer Protection Act](https://example.gov/cpa) and Article 21..."
    refs = scan_citations(text)
    assert refs == [
        Citation.link("Consumer Protection Act", "https://example.gov/cpa"),
        Citation.statute("Article 21"),
    ]


def test_bare_url_inside_markdown_link_is_skipped():
    text = "See [NALSA](https://nalsa.gov.in) and https://doj.gov.in for help."
    urls = scan_bare_urls(text)
    assert [c.target for c in urls] == ["https://doj.gov.in"]
    assert urls[0].title == urls[0].target


def test_bare_url_stops_at_closing_paren():
    urls = scan_bare_urls("(visit https://indiankanoon.org/doc/1)")
    assert urls[0].target == "https://indiankanoon.org/doc/1"


def test_markdown_links_keep_label_as_title():
    links = scan_markdown_links("[Bare Act](https://indiacode.nic.in) and [Portal](http://edaakhil.nic.in)")
    assert [(c.title, c.target) for c in links] == [
        ("Bare Act", "https://indiacode.nic.in"),
        ("Portal", "http://edaakhil.nic.in"),
    ]
    assert all(c.kind is CitationKind.LINK for c in links)


def test_statute_patterns():
    text = ("File under Section 138 of the Negotiable Instruments Act, 1881. "
            "Order 39 Rule 1 applies, as does Article 300A and The Transfer Of Property Act.")
    titles = [c.title for c in scan_statute_references(text)]
    assert "Section 138" in titles
    assert "Negotiable Instruments Act, 1881" in titles
    assert "Order 39" in titles
    assert "Rule 1" in titles
    assert "Article 300A" in titles
    assert "The Transfer Of Property Act" in titles
    assert all(c.target is None for c in scan_statute_references(text))


def test_lowercase_act_is_not_a_statute():
    assert scan_statute_references("you must act quickly under the section") == []


def test_duplicates_collapse_first_wins():
    text = "Article 21 protects you. Again, Article 21 applies. https://a.in https://a.in"
    refs = scan_citations(text)
    assert [c.title for c in refs] == ["https://a.in", "Article 21"]


def test_empty_input():
    assert scan_citations("") == []
    assert scan_citations(None) == []
    assert scan_statute_references("") == []


def test_merge_and_count():
    first = scan_citations("Article 21 and https://a.in")
    second = scan_citations("Article 21 and Section 9")
    merged = merge_references(first, second)
    assert [c.title for c in merged] == ["https://a.in", "Article 21", "Section 9"]
    assert count_statutes(merged) == 2
