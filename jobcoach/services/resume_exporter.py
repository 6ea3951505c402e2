"""
Resume export to DOCX and plain text.
"""
import io
import logging
from typing import Sequence

from docx import Document as DocxDocument
from docx.shared import Pt

from jobcoach.models.resume import ResumeSection

logger = logging.getLogger(__name__)

NO_SECTIONS_MESSAGE = "No resume sections available for export."


def export_resume_text(sections: Sequence[ResumeSection]) -> str:
    """Upper-cased title over content, sections separated by a blank line."""
    if not sections:
        raise ValueError(NO_SECTIONS_MESSAGE)
    return "\n\n".join(f"{s.title.upper()}\n{s.content}" for s in sections)


def export_resume_docx(sections: Sequence[ResumeSection]) -> bytes:
    """
    Render sections as a Word document.

    Each section is a level-2 heading followed by one paragraph per
    content line; blank lines are kept as empty paragraphs.
    """
    if not sections:
        raise ValueError(NO_SECTIONS_MESSAGE)

    doc = DocxDocument()
    for index, section in enumerate(sections):
        doc.add_heading(section.title or f"Section {index + 1}", level=2)
        for line in section.content.splitlines():
            paragraph = doc.add_paragraph(line.strip())
            paragraph.paragraph_format.space_after = Pt(4)
        if index < len(sections) - 1:
            doc.add_paragraph()

    buffer = io.BytesIO()
    doc.save(buffer)
    data = buffer.getvalue()
    logger.info(f"Generated resume DOCX: {len(data)} bytes")
    return data
