"""
Tests for document processor service.
"""
import io

import pytest
from docx import Document as DocxDocument
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from jobcoach.services.document_processor import (
    DOCX_CONTENT_TYPE,
    DocumentProcessor,
    get_document_processor,
)


def make_pdf(lines) -> bytes:
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    y = 700
    for line in lines:
        pdf.drawString(72, y, line)
        y -= 20
    pdf.save()
    return buffer.getvalue()


def make_docx(paragraphs, table_rows=None) -> bytes:
    doc = DocxDocument()
    for p in paragraphs:
        doc.add_paragraph(p)
    if table_rows:
        table = doc.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for r, row in enumerate(table_rows):
            for c, value in enumerate(row):
                table.cell(r, c).text = value
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def processor():
    return DocumentProcessor()


class TestDocumentProcessor:

    def test_singleton(self):
        assert get_document_processor() is get_document_processor()

    @pytest.mark.asyncio
    async def test_pdf_by_content_type(self, processor):
        data = make_pdf(["Jane Doe", "Senior Software Engineer"])
        text = await processor.extract_text(data, "application/pdf", "upload")
        assert "Jane Doe" in text
        assert "Senior Software Engineer" in text

    @pytest.mark.asyncio
    async def test_pdf_by_extension(self, processor):
        data = make_pdf(["Extension Detected"])
        text = await processor.extract_text(data, "application/octet-stream", "Resume.PDF")
        assert "Extension Detected" in text

    @pytest.mark.asyncio
    async def test_docx_paragraphs_and_tables(self, processor):
        data = make_docx(
            ["Jane Doe", "", "Python developer"],
            table_rows=[["Skill", "Years"], ["Python", "5"]],
        )
        text = await processor.extract_text(data, DOCX_CONTENT_TYPE, "cv")
        lines = text.split("\n")
        assert lines[:2] == ["Jane Doe", "Python developer"]
        assert "Skill | Years" in lines
        assert "Python | 5" in lines

    @pytest.mark.asyncio
    async def test_docx_by_extension(self, processor):
        data = make_docx(["From extension"])
        text = await processor.extract_text(data, "", "resume.docx")
        assert text == "From extension"

    @pytest.mark.asyncio
    async def test_other_files_decoded_as_utf8(self, processor):
        text = await processor.extract_text("Zoë Müller\nEngineer".encode("utf-8"), "text/plain", "cv.txt")
        assert text == "Zoë Müller\nEngineer"

    @pytest.mark.asyncio
    async def test_corrupt_docx_raises(self, processor):
        with pytest.raises(Exception):
            await processor.extract_text_from_docx(b"not a zip")
