"""
Resume API endpoints.

Parsing uploaded or pasted resumes into sections, improving a single
section, and exporting sections to PDF.
"""
import io
import logging
import re
from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import StreamingResponse

from jobcoach.core.errors import ServiceError
from jobcoach.models.resume import (
    ExportResumeRequest,
    ImproveSectionRequest,
    ImproveSectionResponse,
    ParseResumeResponse,
)
from jobcoach.services.pdf_generator import ResumePDFGenerator, is_pdf
from jobcoach.services.resume_parser import get_resume_parser

logger = logging.getLogger(__name__)
router = APIRouter()

_UNSAFE_FILENAME = re.compile(r'[^A-Za-z0-9._ -]+')


def _attachment_name(file_name: Optional[str]) -> str:
    name = _UNSAFE_FILENAME.sub("", file_name or "").strip() or "resume.pdf"
    if not name.lower().endswith(".pdf"):
        name = f"{name}.pdf"
    return name


@router.post("/parse-resume", response_model=ParseResumeResponse, response_model_exclude_none=True)
async def parse_resume(
    file: Optional[UploadFile] = File(None),
    text: Optional[str] = Form(None),
):
    """
    Parse a resume into titled sections.

    Pasted `text` takes precedence over an uploaded `file` (PDF, DOCX or
    plain text). Input beyond the configured limit is truncated.
    """
    parser = get_resume_parser()

    file_bytes = None
    content_type = ""
    filename = ""
    if file is not None:
        file_bytes = await file.read()
        content_type = file.content_type or ""
        filename = file.filename or ""
        await file.close()

    try:
        resume_text = await parser.get_resume_text(
            text=text,
            file_bytes=file_bytes,
            content_type=content_type,
            filename=filename,
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Failed to read uploaded resume '{filename}': {e}")
        raise ServiceError(400, "Could not read the uploaded resume file.")

    return await parser.parse_resume(resume_text)


@router.post("/improve-section", response_model=ImproveSectionResponse)
async def improve_section(request: ImproveSectionRequest):
    """Rewrite one resume section, optionally tailored to a target job."""
    improved = await get_resume_parser().improve_section(request)
    return ImproveSectionResponse(improved=improved)


@router.post("/export-resume-pdf")
async def export_resume_pdf(request: ExportResumeRequest):
    """
    Render resume sections to a PDF download.

    Returns:
        StreamingResponse with PDF content
        Content-Disposition: attachment
    """
    if not request.sections:
        raise ServiceError(400, "No resume sections provided.")

    try:
        pdf_bytes = ResumePDFGenerator(request.sections, request.profile).generate()
    except Exception as e:
        logger.error(f"Failed to generate resume PDF: {e}")
        raise ServiceError(500, "Failed to generate PDF.")

    if not is_pdf(pdf_bytes):
        logger.error(f"Generated resume buffer is not a PDF ({len(pdf_bytes)} bytes)")
        raise ServiceError(502, "PDF generation produced an invalid file.")

    file_name = _attachment_name(request.file_name)
    return StreamingResponse(
        io.BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{file_name}"',
            "Content-Length": str(len(pdf_bytes)),
        },
    )
