"""
Resume upload text extraction.

PDF pages go through pdfplumber, Word files through python-docx; any
other upload is treated as UTF-8 text.
"""
import io
import logging
from typing import Iterator

from pdfplumber import open as open_pdf
from docx import Document as DocxDocument

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _docx_lines(document) -> Iterator[str]:
    """Body paragraphs first, then one " | "-joined line per table row."""
    for paragraph in document.paragraphs:
        if paragraph.text.strip():
            yield paragraph.text
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            line = " | ".join(c for c in cells if c)
            if line:
                yield line


class DocumentProcessor:
    """Turns an uploaded resume file into plain text."""

    async def extract_text_from_pdf(self, pdf_bytes: bytes) -> str:
        """Concatenate the text layer of every page; scanned pages contribute nothing."""
        with open_pdf(io.BytesIO(pdf_bytes)) as pdf:
            pages = [page.extract_text() for page in pdf.pages]
        return "\n".join(p for p in pages if p)

    async def extract_text_from_docx(self, docx_bytes: bytes) -> str:
        """
        Read paragraphs and table cells from a .docx file.

        Raises whatever python-docx raises for an unreadable package.
        """
        try:
            document = DocxDocument(io.BytesIO(docx_bytes))
        except Exception as e:
            logger.error(f"Could not open DOCX upload: {e}")
            raise
        return "\n".join(_docx_lines(document))

    async def extract_text(self, file_bytes: bytes, content_type: str, filename: str = "") -> str:
        """
        Pick an extractor by MIME type, falling back to the file extension.

        Args:
            file_bytes: Raw upload
            content_type: MIME type reported by the client
            filename: Original file name

        Returns:
            Extracted text, possibly empty
        """
        suffix = (filename or "").lower().rsplit(".", 1)[-1]

        if content_type == PDF_CONTENT_TYPE or suffix == "pdf":
            return await self.extract_text_from_pdf(file_bytes)
        if content_type == DOCX_CONTENT_TYPE or suffix == "docx":
            return await self.extract_text_from_docx(file_bytes)
        logger.debug(f"Treating upload '{filename}' ({content_type}) as plain text")
        return file_bytes.decode("utf-8", errors="replace")


_document_processor = None


def get_document_processor() -> DocumentProcessor:
    global _document_processor
    if _document_processor is None:
        _document_processor = DocumentProcessor()
    return _document_processor
