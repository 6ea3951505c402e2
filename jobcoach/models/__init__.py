# Pydantic models package
from jobcoach.models.interview import (
    QuestionKind,
    Difficulty,
    CodingDetails,
    Question,
    QuestionSet,
    QuestionRequest,
    MessageRole,
    ConversationMessage,
    GuideRequest,
    LOADING_QUESTION,
)
from jobcoach.models.scoring import (
    ScoredItem,
    OverallScore,
    ScoredReport,
    LearningPlanRequest,
)

__all__ = [
    "QuestionKind",
    "Difficulty",
    "CodingDetails",
    "Question",
    "QuestionSet",
    "QuestionRequest",
    "MessageRole",
    "ConversationMessage",
    "GuideRequest",
    "LOADING_QUESTION",
    "ScoredItem",
    "OverallScore",
    "ScoredReport",
    "LearningPlanRequest",
]
