"""
Pydantic models for interview scoring and learning-plan requests.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Fixed learning-plan policy, not user-configurable
LEARNING_THRESHOLD = 70.0
LEARNING_BUDGET_HOURS = 20.0
LEARNING_MAX_RESOURCES = 6

# Every rubric bullet is scored out of this
BULLET_MAX_SCORE = 10.0


class ScoredItem(BaseModel):
    """
    Per-question evaluation.

    verdict, bullet_evals, feedback and coding_review come from the
    scorer; the numeric aggregate fields and text are filled in locally.
    """
    model_config = ConfigDict(extra="allow")

    question_id: str
    kind: str = ""
    text: str = ""
    verdict: str = ""
    raw_score: float = 0.0
    max_score: float = 0.0
    percent: float = 0.0
    weight: float = 1.0
    weighted_raw: float = 0.0
    weighted_max: float = 0.0
    # Scorer bullets kept as sent: {criterion, score, ...}
    bullet_evals: List[Any] = Field(default_factory=list)
    feedback: str = ""
    coding_review: Optional[Any] = None


class OverallScore(BaseModel):
    """Aggregate across every scored question."""
    total_score: float = 0.0
    total_max: float = 0.0
    percent: float = 0.0


class ScoredReport(BaseModel):
    """Weighted report fed into learning-plan generation."""
    job_title: str = ""
    overall: OverallScore = Field(default_factory=OverallScore)
    items: List[ScoredItem] = Field(default_factory=list)


class LearningPlanRequest(BaseModel):
    """Request body for the learning-plan generator."""
    scored_report: ScoredReport
    threshold: float = LEARNING_THRESHOLD
    budget_hours: float = LEARNING_BUDGET_HOURS
    max_resources: int = LEARNING_MAX_RESOURCES
