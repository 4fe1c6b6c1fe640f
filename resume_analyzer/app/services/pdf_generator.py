"""
Render sample resumes to PDF with reportlab. Used by the seed script (--upload-files)
so seeded resume rows point at real objects in the bucket.
"""
from io import BytesIO

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from resume_analyzer.app.core.config import (
    PDF_DEFAULT_TITLE,
    PDF_FONT_SIZE_BODY,
    PDF_FONT_SIZE_TITLE,
    PDF_LINE_HEIGHT,
    PDF_MAX_LINE_CHARS,
)


def _clip(line: str) -> str:
    return (line[:PDF_MAX_LINE_CHARS] + "..") if len(line) > PDF_MAX_LINE_CHARS else line


def resume_to_pdf_bytes(full_name: str, sections: dict[str, list[str]], contact: str = "") -> bytes:
    """
    Lay out a one-column resume: name header, contact line, then each section
    heading followed by its bullet lines. Overflows onto new pages.
    """
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=letter)
    _, height = letter
    margin = inch
    x, y = margin, height - margin

    def next_line(step: float = PDF_LINE_HEIGHT) -> None:
        nonlocal y
        y -= step
        if y < margin + PDF_LINE_HEIGHT:
            c.showPage()
            c.setFont("Helvetica", PDF_FONT_SIZE_BODY)
            y = height - margin

    title = full_name or PDF_DEFAULT_TITLE
    c.setTitle(title)
    c.setFont("Helvetica-Bold", PDF_FONT_SIZE_TITLE)
    c.drawString(x, y, title[:80])
    if contact:
        next_line()
        c.setFont("Helvetica", PDF_FONT_SIZE_BODY)
        c.drawString(x, y, _clip(contact))
    next_line(PDF_LINE_HEIGHT * 1.5)

    for heading, lines in sections.items():
        c.setFont("Helvetica-Bold", PDF_FONT_SIZE_BODY + 1)
        c.drawString(x, y, heading.upper())
        next_line()
        c.setFont("Helvetica", PDF_FONT_SIZE_BODY)
        for line in lines or ["(No content)"]:
            c.drawString(x + 10, y, _clip(f"- {line}"))
            next_line()
        next_line(PDF_LINE_HEIGHT / 2)

    c.save()
    return buffer.getvalue()
