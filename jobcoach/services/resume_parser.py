"""
Resume Parser Service.

Turns raw resume text into titled sections (plus a contact profile)
with the generative-language provider, and rewrites single sections
for a target role.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from jobcoach.core.config import get_model_config, get_settings
from jobcoach.core.errors import ServiceError
from jobcoach.models.resume import (
    ImproveSectionRequest,
    ParseResumeResponse,
    Profile,
    ResumeSection,
)
from jobcoach.providers.llm import (
    BaseLLMProvider,
    GenerationConfig,
    get_llm_provider,
    system_message,
    user_message,
)
from jobcoach.services.document_processor import DocumentProcessor, get_document_processor
from jobcoach.services.prompts import (
    JOB_CONTEXT_TEMPLATE,
    RESUME_PARSER_SYSTEM_PROMPT,
    RESUME_PARSING_PROMPT,
    SECTION_IMPROVEMENT_PROMPT,
    SECTION_IMPROVER_SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)
_ANY_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


# ==================== Helpers ====================

def create_section_id(title: str, index: int) -> str:
    """Slug of the title, or section-{n} (1-based) when nothing is left."""
    slug = _SLUG_INVALID.sub("-", title.lower()).strip("-")
    return slug or f"section-{index + 1}"


def extract_json(raw_text: Optional[str]) -> str:
    """Pull the JSON body out of a model reply, unwrapping a ```json fence."""
    if not isinstance(raw_text, str):
        raise ServiceError(502, "Gemini returned an empty response.")
    match = _JSON_FENCE.search(raw_text)
    json_string = match.group(1) if match else raw_text
    return json_string.strip()


def normalize_sections(sections: Any) -> List[ResumeSection]:
    """
    Clean up the model's sections.

    Sections without content are dropped, blank titles become
    "Section {n}" and every section gets a slug id. Raises a 502 when
    nothing usable remains.
    """
    if not isinstance(sections, list):
        raise ServiceError(502, "Gemini response did not include sections.")

    normalized = []
    for index, section in enumerate(sections):
        if not isinstance(section, dict):
            continue
        title = section.get("title")
        title = title.strip() if isinstance(title, str) else ""
        content = section.get("content")
        content = content.strip() if isinstance(content, str) else ""
        if not content:
            continue
        normalized.append(
            ResumeSection(
                id=create_section_id(title, index),
                title=title or f"Section {index + 1}",
                content=content,
            )
        )

    if not normalized:
        raise ServiceError(502, "Gemini did not return any usable sections.")
    return normalized


def normalize_profile(profile: Any) -> Optional[Profile]:
    """Best-effort profile; anything malformed is dropped."""
    if not isinstance(profile, dict):
        return None
    cleaned: Dict[str, Any] = {}
    for key in ("name", "email", "phone", "location", "title"):
        value = profile.get(key)
        cleaned[key] = value.strip() if isinstance(value, str) else ""
    links = profile.get("links")
    if isinstance(links, dict):
        cleaned["links"] = {
            key: links[key].strip()
            for key in ("linkedin", "github", "website")
            if isinstance(links.get(key), str) and links[key].strip()
        } or None
    if not any(cleaned.values()):
        return None
    return Profile.model_validate(cleaned)


def _strip_fences(text: str) -> str:
    return _ANY_FENCE.sub("", text.strip()).strip()


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit].rstrip()


# ==================== Service ====================

class ResumeParser:
    """Resume parsing and section improvement backed by the LLM provider."""

    def __init__(
        self,
        llm_provider: Optional[BaseLLMProvider] = None,
        document_processor: Optional[DocumentProcessor] = None,
        max_resume_chars: Optional[int] = None,
        max_improved_chars: Optional[int] = None,
    ):
        settings = get_settings()
        self._llm = llm_provider
        self.document_processor = document_processor or get_document_processor()
        self.max_resume_chars = max_resume_chars or settings.max_resume_chars
        self.max_improved_chars = max_improved_chars or settings.max_improved_chars

        llm_config = get_model_config().get("providers", {}).get("llm", {})
        generation = llm_config.get("generation") or {}
        self.parsing_config = GenerationConfig.from_dict(generation.get("resume_parsing"))
        self.improvement_config = GenerationConfig.from_dict(generation.get("section_improvement"))

    @property
    def llm(self) -> BaseLLMProvider:
        # Resolved lazily so a missing API key only fails the LLM-backed calls
        if self._llm is None:
            self._llm = get_llm_provider()
        return self._llm

    async def _generate(self, messages, config: GenerationConfig) -> str:
        try:
            response = await self.llm.generate(messages, config)
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            raise ServiceError(502, "Gemini request failed.")
        return response.content

    async def get_resume_text(
        self,
        text: Optional[str] = None,
        file_bytes: Optional[bytes] = None,
        content_type: str = "",
        filename: str = "",
    ) -> str:
        """
        Resolve the resume text for parsing.

        Pasted text wins over an uploaded file. The result is capped at
        max_resume_chars.
        """
        resume_text = text.strip() if isinstance(text, str) else ""

        if not resume_text and file_bytes:
            extracted = await self.document_processor.extract_text(file_bytes, content_type, filename)
            resume_text = extracted.strip()

        if not resume_text:
            raise ServiceError(400, "No resume content provided.")

        if len(resume_text) > self.max_resume_chars:
            logger.info(f"Truncating resume text from {len(resume_text)} to {self.max_resume_chars} chars")
            resume_text = resume_text[:self.max_resume_chars]
        return resume_text

    async def parse_resume(self, resume_text: str) -> ParseResumeResponse:
        """Split resume text into sections and a profile."""
        messages = [
            system_message(RESUME_PARSER_SYSTEM_PROMPT),
            user_message(RESUME_PARSING_PROMPT.format(resume_text=resume_text)),
        ]
        raw = await self._generate(messages, self.parsing_config)
        json_text = extract_json(raw)

        try:
            parsed = json.loads(json_text)
        except json.JSONDecodeError:
            logger.error(f"Failed to parse Gemini response: {json_text[:500]}")
            raise ServiceError(502, "Gemini returned an unreadable response.")

        if not isinstance(parsed, dict):
            raise ServiceError(502, "Gemini response did not include sections.")

        sections = normalize_sections(parsed.get("sections"))
        profile = normalize_profile(parsed.get("profile"))
        logger.info(f"Parsed resume into {len(sections)} sections")
        return ParseResumeResponse(sections=sections, profile=profile)

    async def improve_section(self, request: ImproveSectionRequest) -> str:
        """Rewrite one section, optionally tailored to a job."""
        content = (request.content or "").strip()
        if not content:
            raise ServiceError(400, "No section content provided.")

        job_context = ""
        if request.job_title or request.job_description:
            job_context = JOB_CONTEXT_TEMPLATE.format(
                job_title=request.job_title or "Not specified",
                job_description=_truncate(request.job_description or "", self.max_resume_chars),
            )

        prompt = SECTION_IMPROVEMENT_PROMPT.format(
            title=(request.title or "Untitled").strip(),
            job_context=job_context,
            max_chars=self.max_improved_chars,
            content=content,
        )
        raw = await self._generate(
            [system_message(SECTION_IMPROVER_SYSTEM_PROMPT), user_message(prompt)],
            self.improvement_config,
        )

        if not isinstance(raw, str) or not raw.strip():
            raise ServiceError(502, "Gemini returned an empty response.")

        improved = _truncate(_strip_fences(raw), self.max_improved_chars)
        if not improved:
            raise ServiceError(502, "Gemini returned an empty response.")
        return improved


# Global instance (lazy loaded)
_resume_parser: Optional[ResumeParser] = None


def get_resume_parser() -> ResumeParser:
    """Get or create the resume parser instance."""
    global _resume_parser
    if _resume_parser is None:
        _resume_parser = ResumeParser()
    return _resume_parser
