"""
Typed repositories over the key-value state store.

Each repository owns a fixed set of keys. Reads are forgiving: missing,
corrupt or wrongly-typed values read as absent.
"""
import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from jobcoach.core.storage import KeyValueStore, read_json, write_json
from jobcoach.models.jobs import ApplicationRecord
from jobcoach.models.resume import Profile, ResumeSection
from jobcoach.models.scoring import ScoredReport

logger = logging.getLogger(__name__)

RESUME_SECTIONS_KEY = "resumeSections"
PROFILE_KEY = "profile"
APPLICATIONS_KEY = "applications"
LAST_SCORES_RESPONSE_KEY = "lastScoresResponse"
LAST_LEARNING_SCORES_KEY = "lastLearningScores"
LAST_LEARNING_PLAN_KEY = "lastLearningPlan"

NO_RESUME_TEXT = "No resume data available"


class ResumeStore:
    """Stored resume sections and profile header."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_sections(self) -> Optional[List[ResumeSection]]:
        data = read_json(self.store, RESUME_SECTIONS_KEY)
        if not isinstance(data, list):
            return None
        sections = []
        for item in data:
            if not item or not isinstance(item, dict):
                continue
            try:
                sections.append(ResumeSection.model_validate(item))
            except ValidationError:
                continue
        return sections

    def set_sections(self, sections: List[ResumeSection]):
        write_json(self.store, RESUME_SECTIONS_KEY, [s.model_dump() for s in sections])

    def get_profile(self) -> Optional[Profile]:
        data = read_json(self.store, PROFILE_KEY)
        if not isinstance(data, dict):
            return None
        try:
            return Profile.model_validate(data)
        except ValidationError:
            return None

    def set_profile(self, profile: Profile):
        write_json(self.store, PROFILE_KEY, profile.model_dump(exclude_none=True))

    def resume_text(self) -> str:
        """Resume as plain text for question generation."""
        sections = self.get_sections()
        if sections is None:
            return NO_RESUME_TEXT
        return "\n\n".join(f"{s.title}\n{s.content}" for s in sections)


class ApplicationsStore:
    """Tracked job applications, newest first."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def list(self) -> List[ApplicationRecord]:
        data = read_json(self.store, APPLICATIONS_KEY)
        if not isinstance(data, list):
            return []
        records = []
        for item in data:
            if not item or not isinstance(item, dict):
                continue
            try:
                records.append(ApplicationRecord.model_validate(item))
            except ValidationError:
                continue
        return records

    def set_all(self, records: List[ApplicationRecord]):
        write_json(
            self.store,
            APPLICATIONS_KEY,
            [r.model_dump(by_alias=True, exclude_none=True) for r in records],
        )

    def upsert(self, record: ApplicationRecord) -> List[ApplicationRecord]:
        """
        Replace the record with the same id, or insert it at the front.

        Raises:
            ValueError: when company or role is blank.
        """
        if not record.company.strip() or not record.role.strip():
            raise ValueError("Company and Role are required.")
        records = self.list()
        for i, existing in enumerate(records):
            if existing.id == record.id:
                records[i] = record
                break
        else:
            records.insert(0, record)
        self.set_all(records)
        return records

    def delete(self, record_id: str) -> List[ApplicationRecord]:
        records = [r for r in self.list() if r.id != record_id]
        self.set_all(records)
        return records


class ResultsStore:
    """Last interview's scores and learning plan for the results view."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def save_scores_response(self, response: Any):
        write_json(self.store, LAST_SCORES_RESPONSE_KEY, response)

    def save_learning(self, plan: Any, report: ScoredReport):
        write_json(self.store, LAST_LEARNING_PLAN_KEY, plan)
        write_json(self.store, LAST_LEARNING_SCORES_KEY, report.model_dump(exclude_none=True))

    def get_scores_response(self) -> Optional[Any]:
        return read_json(self.store, LAST_SCORES_RESPONSE_KEY)

    def get_learning_plan(self) -> Optional[Any]:
        return read_json(self.store, LAST_LEARNING_PLAN_KEY)

    def get_learning_scores(self) -> Optional[ScoredReport]:
        data = read_json(self.store, LAST_LEARNING_SCORES_KEY)
        if not isinstance(data, dict):
            return None
        try:
            return ScoredReport.model_validate(data)
        except ValidationError:
            logger.warning("Stored learning scores do not match the report shape")
            return None
