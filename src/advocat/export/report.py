"""Case exports: plain-text conversation dump and the PDF rights report."""
from __future__ import annotations
import re
from io import BytesIO
from typing import Any, Dict, Iterable, List, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

from advocat.conversation.models import Case, CitationKind, Speaker

SEPARATOR = "------------------------------------"
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_HEADING_RE = re.compile(r"^#{1,6}\s+")


def export_filename(title: str, ext: str, fallback: str = "advocat_case") -> str:
    stem = re.sub(r"[^a-z0-9]", "_", (title or "").lower()) or fallback
    return f"{stem}.{ext}"


def render_case_text(case: Case, mode: str = "quick") -> str:
    lines = [
        f"Case Title: {case.title}",
        f"Total Tokens Saved: {case.total_credits_saved}",
        f"Mode: {mode}",
        SEPARATOR,
        "",
    ]
    for turn in case.turns:
        heading = "My Query:" if turn.speaker is Speaker.USER else "Advocat's Response:"
        lines.extend([heading, turn.text, "", SEPARATOR, ""])
    if case.references:
        lines.extend(["", "--- Collected References ---"])
        for ref in case.references:
            kind = "LINK" if ref.kind is CitationKind.LINK else "STATUTE"
            suffix = f" ({ref.target})" if ref.target else ""
            lines.append(f"- [{kind}] {ref.title}{suffix}")
    return "\n".join(lines) + "\n"


def _markup(text: str) -> str:
    """Escape for reportlab's paragraph markup and keep **bold** spans."""
    return _BOLD_RE.sub(r"<b>\1</b>", escape(text))


def render_rights_report(summary: Iterable[Tuple[str, str]],
                         witnesses: Iterable[Dict[str, Any]],
                         evidence: Iterable[Dict[str, Any]],
                         analysis_text: str,
                         case_title: str = "") -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, rightMargin=54, leftMargin=54,
                            topMargin=54, bottomMargin=36)
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Heading1'],
        fontSize=18,
        alignment=1,
        textColor=colors.HexColor('#2980b9'),
    )
    subtitle_style = ParagraphStyle('ReportSubtitle', parent=styles['Normal'], fontSize=10, alignment=1)
    section_style = ParagraphStyle('Section', parent=styles['Heading2'], fontSize=14, spaceBefore=12)
    body_style = ParagraphStyle('Body', parent=styles['Normal'], fontSize=10, leading=14, spaceAfter=6)

    story: List[Any] = [
        Paragraph("Advocat-Easy: Your Rights Report", title_style),
        Paragraph(_markup(f"Analysis for Case: {case_title or 'Untitled Case'}"), subtitle_style),
        Spacer(1, 16),
        Paragraph("Case Summary (Your Inputs)", section_style),
    ]
    for label, value in summary:
        story.append(Paragraph(f"<b>{escape(label)}:</b> {_markup(value)}", body_style))

    witnesses = list(witnesses)
    if witnesses:
        story.append(Paragraph("Witnesses", section_style))
        for i, w in enumerate(witnesses, 1):
            story.append(Paragraph(_markup(f"Witness {i}: {w.get('name', '')} ({w.get('relation', '')})"), body_style))
            story.append(Paragraph(_markup(f"Knowledge: {w.get('knowledge', '')}"), body_style))

    evidence = list(evidence)
    if evidence:
        story.append(Paragraph("Evidence", section_style))
        for i, e in enumerate(evidence, 1):
            line = f"Item {i} ({e.get('type', 'other')}): {e.get('description', '')}"
            if e.get('attached_file_name'):
                line += f" [attached: {e['attached_file_name']}]"
            story.append(Paragraph(_markup(line), body_style))

    story.append(PageBreak())
    story.append(Paragraph("AI Educational Analysis", section_style))
    for block in (analysis_text or "").split("\n"):
        block = block.strip()
        if not block:
            story.append(Spacer(1, 4))
            continue
        if _HEADING_RE.match(block):
            story.append(Paragraph(_markup(_HEADING_RE.sub("", block)), section_style))
        elif block.startswith(("- ", "* ")):
            story.append(Paragraph(_markup(block[2:]), body_style, bulletText="•"))
        else:
            story.append(Paragraph(_markup(block), body_style))

    doc.build(story)
    pdf_data = buffer.getvalue()
    buffer.close()
    return pdf_data
