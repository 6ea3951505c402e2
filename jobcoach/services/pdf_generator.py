"""
Resume PDF export.

Renders resume sections under an optional contact header as a
single-column letter-size document with ReportLab platypus.
"""
import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    Flowable,
    HRFlowable,
    KeepTogether,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
)

from jobcoach.models.resume import Profile, ResumeSection

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
BULLET_PREFIXES = ("- ", "* ", "• ", "•")
PAGE_MARGIN = 0.75 * inch

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def is_pdf(data: bytes) -> bool:
    """True when the buffer starts with the PDF signature."""
    return bool(data) and data[:4] == PDF_MAGIC


class ResumePDFGenerator:
    """
    Builds a resume PDF from stored sections.

    Each section becomes an uppercase heading over a thin rule, followed
    by one paragraph per content line. Lines starting with a bullet
    marker ("-", "*", "•") render as bullets; blank lines become small
    gaps.
    """

    PALETTE = {
        "ink": colors.HexColor("#111827"),
        "heading": colors.HexColor("#1e3a5f"),
        "muted": colors.HexColor("#4b5563"),
        "rule": colors.HexColor("#d1d5db"),
    }

    def __init__(self, sections: Sequence[ResumeSection], profile: Optional[Profile] = None):
        self.sections = list(sections)
        self.profile = profile
        self.styles = self._create_styles()

    def _create_styles(self) -> Dict[str, ParagraphStyle]:
        sample = getSampleStyleSheet()
        ink, heading, muted = self.PALETTE["ink"], self.PALETTE["heading"], self.PALETTE["muted"]

        def style(name, parent, **kwargs):
            return ParagraphStyle(name=f"Resume{name}", parent=sample[parent], **kwargs)

        return {
            "Name": style("Name", "Title", fontSize=20, leading=24, textColor=ink, spaceAfter=2),
            "Headline": style("Headline", "Normal", fontSize=11, textColor=heading,
                              alignment=TA_CENTER, spaceAfter=2),
            "Contact": style("Contact", "Normal", fontSize=9, textColor=muted,
                             alignment=TA_CENTER, spaceAfter=10),
            "SectionTitle": style("SectionTitle", "Heading3", fontName="Helvetica-Bold",
                                  fontSize=11.5, textColor=heading, spaceBefore=10, spaceAfter=3),
            "Line": style("Line", "BodyText", fontSize=10, leading=13.5, textColor=ink, spaceAfter=3),
            "Bullet": style("Bullet", "BodyText", fontSize=10, leading=13, textColor=ink,
                            leftIndent=16, bulletIndent=6, spaceAfter=2),
        }

    def _paragraph(self, text: str, style: str, **kwargs) -> Paragraph:
        return Paragraph(self._escape_xml(text), self.styles[style], **kwargs)

    def _build_header(self) -> List[Flowable]:
        """Name, headline and a contact line, closed by a full-width rule."""
        profile = self.profile
        if profile is None:
            return []

        header: List[Flowable] = []
        if profile.name:
            header.append(self._paragraph(profile.name, "Name"))
        if profile.title:
            header.append(self._paragraph(profile.title, "Headline"))

        contact = [profile.email, profile.phone, profile.location]
        if profile.links:
            contact += [profile.links.linkedin, profile.links.github, profile.links.website]
        contact = [c for c in contact if c]
        if contact:
            header.append(self._paragraph(" | ".join(contact), "Contact"))

        if header:
            header += [HRFlowable(width="100%", thickness=1, color=self.PALETTE["rule"]),
                       Spacer(1, 6)]
        return header

    def _build_section(self, section: ResumeSection, index: int) -> List[Flowable]:
        title = (section.title or f"Section {index + 1}").upper()
        heading: List[Flowable] = [
            self._paragraph(title, "SectionTitle"),
            HRFlowable(width="100%", thickness=0.5, color=self.PALETTE["rule"], spaceAfter=4),
        ]

        lines: List[Flowable] = []
        for raw in section.content.splitlines():
            line = raw.strip()
            if not line:
                lines.append(Spacer(1, 5))
                continue
            bullet = self._strip_bullet(line)
            if bullet is None:
                lines.append(self._paragraph(line, "Line"))
            else:
                lines.append(self._paragraph(bullet, "Bullet", bulletText="•"))

        if not lines:
            return heading
        # Heading never ends a page on its own
        return [KeepTogether(heading + lines[:1])] + lines[1:]

    @staticmethod
    def _strip_bullet(line: str) -> Optional[str]:
        for prefix in BULLET_PREFIXES:
            if line.startswith(prefix):
                return line[len(prefix):].strip()
        return None

    def _escape_xml(self, text: str) -> str:
        """Paragraph text is parsed as markup, so &, <, > and quotes are escaped."""
        return escape(text or "", _XML_ENTITIES)

    def generate(self) -> bytes:
        """
        Render the document.

        Raises:
            ValueError: when there are no sections to render.
        """
        if not self.sections:
            raise ValueError("No resume sections available for export.")

        title = self.profile.name if self.profile and self.profile.name else "Resume"
        story: List[Flowable] = self._build_header()
        for index, section in enumerate(self.sections):
            story.extend(self._build_section(section, index))

        with io.BytesIO() as buffer:
            SimpleDocTemplate(
                buffer,
                pagesize=letter,
                leftMargin=PAGE_MARGIN,
                rightMargin=PAGE_MARGIN,
                topMargin=PAGE_MARGIN,
                bottomMargin=PAGE_MARGIN,
                title=title,
            ).build(story)
            data = buffer.getvalue()

        logger.info(f"Rendered resume PDF ({len(self.sections)} sections, {len(data)} bytes)")
        return data

    def save(self, output_path: str) -> str:
        """Render and write to output_path; returns the absolute path."""
        path = Path(output_path).absolute()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.generate())
        logger.info(f"Wrote resume PDF to {path}")
        return str(path)


def generate_resume_pdf(sections: Sequence[ResumeSection], profile: Optional[Profile] = None) -> bytes:
    return ResumePDFGenerator(sections, profile).generate()
