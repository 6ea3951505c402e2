"""
Pydantic models for resume parsing, improvement and export.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResumeSection(BaseModel):
    """A titled block of resume text."""
    id: str = ""
    title: str = ""
    content: str = ""


class ProfileLinks(BaseModel):
    linkedin: Optional[str] = None
    github: Optional[str] = None
    website: Optional[str] = None


class Profile(BaseModel):
    """Candidate contact header."""
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    title: str = ""
    links: Optional[ProfileLinks] = None


class ParseResumeResponse(BaseModel):
    sections: List[ResumeSection]
    profile: Optional[Profile] = None


class ImproveSectionRequest(BaseModel):
    """Request body for /api/improve-section (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    content: str = ""
    job_title: Optional[str] = Field(None, alias="jobTitle")
    job_description: Optional[str] = Field(None, alias="jobDescription")


class ImproveSectionResponse(BaseModel):
    improved: str


class ExportResumeRequest(BaseModel):
    """Request body for /api/export-resume-pdf."""
    model_config = ConfigDict(populate_by_name=True)

    sections: List[ResumeSection] = Field(default_factory=list)
    profile: Optional[Profile] = None
    file_name: str = Field("resume.pdf", alias="fileName")
