"""
Pydantic models for job listings and application tracking.
"""
import uuid
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Skills recognised in job descriptions by plain keyword match
COMMON_SKILLS = [
    "React", "JavaScript", "TypeScript", "Node.js", "Python",
    "Java", "CSS", "HTML", "SQL", "Git",
]
DEFAULT_SKILLS = ["General Software Development"]
REMOTE_MARKERS = ("remote", "work from home")


class JobSearchParams(BaseModel):
    """Query parameters for the backend job search."""
    query: str = ""
    page: int = 1
    num_pages: int = 1
    country: str = "us"
    date_posted: str = "today"
    job_requirements: str = "under_3_years_experience"


class JobListing(BaseModel):
    """A job row as returned by the backend /jobs endpoint."""
    job_id: str
    job_title: str = ""
    employer_name: str = ""
    job_description: str = ""
    job_city: Optional[str] = ""
    job_state: Optional[str] = ""
    job_apply_link: Optional[str] = None
    job_employment_type: Optional[str] = None
    job_salary_min: Optional[float] = None
    job_salary_max: Optional[float] = None
    job_salary_currency: Optional[str] = None
    job_salary_period: Optional[str] = None


class Job(BaseModel):
    """Job as presented to the candidate and used as interview context."""
    id: str
    title: str
    company: str = ""
    location: str = ""
    remote: bool = False
    skills: List[str] = Field(default_factory=list)
    description: str = ""
    apply_link: Optional[str] = None
    employment_type: Optional[str] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    salary_currency: Optional[str] = None
    salary_period: Optional[str] = None

    @classmethod
    def from_listing(cls, listing: JobListing) -> "Job":
        description = listing.job_description or ""
        lowered = description.lower()
        skills = [s for s in COMMON_SKILLS if s.lower() in lowered]
        location = ", ".join(p for p in (listing.job_city, listing.job_state) if p)
        return cls(
            id=listing.job_id,
            title=listing.job_title,
            company=listing.employer_name,
            location=location,
            remote=any(marker in lowered for marker in REMOTE_MARKERS),
            skills=skills or list(DEFAULT_SKILLS),
            description=description,
            apply_link=listing.job_apply_link,
            employment_type=listing.job_employment_type,
            salary_min=listing.job_salary_min,
            salary_max=listing.job_salary_max,
            salary_currency=listing.job_salary_currency,
            salary_period=listing.job_salary_period,
        )


class JobAnalysis(BaseModel):
    """Backend summary of a job description."""
    description_summary: str = ""
    requirements: List[str] = Field(default_factory=list)
    required_skills: List[str] = Field(default_factory=list)


class ApplicationStatus(str, Enum):
    APPLIED = "applied"
    INTERVIEW = "interview"
    OFFER = "offer"
    REJECTED = "rejected"
    SAVED = "saved"


class ApplicationRecord(BaseModel):
    """A tracked job application."""
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    company: str = ""
    role: str = ""
    location: Optional[str] = None
    link: Optional[str] = None
    applied_at: Optional[str] = Field(None, alias="appliedAt")
    next_step_at: Optional[str] = Field(None, alias="nextStepAt")
    status: ApplicationStatus = ApplicationStatus.SAVED
    notes: Optional[str] = None
