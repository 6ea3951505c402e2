"""
Pydantic models for mock interview sessions.
"""
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QuestionKind(str, Enum):
    """Kind of interview question."""
    BEHAVIORAL = "behavioral"
    TECHNICAL = "technical"
    CODING = "coding"
    LOADING = "loading"


class Difficulty(str, Enum):
    """Interview difficulty levels offered to the candidate."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class CodingDetails(BaseModel):
    """Extra detail attached to coding questions."""
    difficulty: str = "medium"
    target_language: str = "python"
    constraints: List[str] = Field(default_factory=list)
    examples: List[str] = Field(default_factory=list)


class Question(BaseModel):
    """A single interview question with its rubric and the candidate's response."""
    question_id: str
    kind: str = QuestionKind.BEHAVIORAL.value
    text: str
    rationale: str = ""
    rubric: List[str] = Field(default_factory=list)
    coding: Optional[CodingDetails] = None
    user_response: str = ""

    @field_validator("question_id", "kind", "text", "rationale", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:  # Provider ids may be ints, null means blank
        if isinstance(value, Enum):
            return value.value
        return "" if value is None else str(value)

    @field_validator("rubric", mode="before")
    @classmethod
    def _coerce_rubric(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, list):
            return [str(v) for v in value if v is not None]
        return [str(value)]

    @property
    def is_coding(self) -> bool:
        return self.kind == QuestionKind.CODING


class QuestionSet(BaseModel):
    """Ordered question set returned by the question provider."""
    job_title: str = ""
    summary: str = ""
    questions: List[Question] = Field(default_factory=list)

    @field_validator("job_title", "summary", mode="before")
    @classmethod
    def _blank_if_null(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def question_text_by_id(self) -> dict:
        return {q.question_id: q.text for q in self.questions}


# Shown while the question set is being fetched
LOADING_QUESTION = Question(
    question_id="loading",
    kind=QuestionKind.LOADING.value,
    text="Loading question...",
)


class QuestionRequest(BaseModel):
    """Request body for the question provider."""
    job_description: str
    resume: str
    job_title: str
    difficulty: str = Difficulty.MEDIUM.value


class MessageRole(str, Enum):
    """Speaker of a follow-up conversation message."""
    USER = "user"
    ASSISTANT = "assistant"


class ConversationMessage(BaseModel):
    """One message in a follow-up dialog."""
    model_config = ConfigDict(use_enum_values=True)

    id: str
    role: MessageRole
    content: str
    is_voice: bool = False


class GuideRequest(BaseModel):
    """Request body for the follow-up guidance service."""
    main_question: str
    history_str: str
    new_user_query: str
