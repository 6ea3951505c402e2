"""
Scoring & Learning Pipeline.

Runs once when an interview finishes:

1. submit the answered question set to the remote scorer
2. derive per-question and overall percentages locally
3. request a learning plan for the weighted report
4. persist the scorer response, report and plan for the results view

The pipeline is best-effort. A failing step is logged and ends the run;
nothing is retried and nothing is raised to the caller. run() returns a
PipelineResult so callers can inspect the outcome, and the interview
session deliberately ignores its error.
"""
import logging
from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, Iterable, Optional, Protocol

from pydantic import ValidationError

from jobcoach.models.interview import QuestionSet
from jobcoach.models.scoring import (
    BULLET_MAX_SCORE,
    LearningPlanRequest,
    OverallScore,
    ScoredItem,
    ScoredReport,
)
from jobcoach.services.state_store import ResultsStore

logger = logging.getLogger(__name__)

ITEM_WEIGHT = 1.0


class ScoringBackend(Protocol):
    async def submit_scores(self, payload: Dict[str, Any]) -> Optional[Any]: ...
    async def request_learning_plan(self, request: LearningPlanRequest) -> Optional[Any]: ...


@dataclass
class PipelineResult:
    """Outcome of one pipeline run."""
    scores_response: Optional[Any] = None
    report: Optional[ScoredReport] = None
    learning_plan: Optional[Any] = None
    failed_step: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_score_submission(question_set: QuestionSet) -> Dict[str, Any]:
    """Scorer request body: the full question set with final responses."""
    return {
        "question_set": {
            "job_title": question_set.job_title,
            "summary": question_set.summary,
            "questions": [
                {
                    "question_id": q.question_id,
                    "kind": q.kind,
                    "text": q.text,
                    "rationale": q.rationale,
                    "rubric": list(q.rubric),
                    "coding": q.coding.model_dump() if q.coding else None,
                    "user_response": q.user_response or "",
                }
                for q in question_set.questions
            ],
        }
    }


def _numeric_score(value: Any) -> float:
    # bool is an int subclass but never a score
    if isinstance(value, Real) and not isinstance(value, bool):
        return float(value)
    return 0.0


def derive_scored_item(raw: Dict[str, Any], question_texts: Dict[str, str]) -> ScoredItem:
    """
    Build a ScoredItem from one scorer item.

    Aggregate fields are always recomputed from the bullet scores and the
    question text is looked up by id rather than trusted from the scorer.
    """
    bullets = raw.get("bullet_evals")
    if not isinstance(bullets, list):
        bullets = []

    # Malformed bullets score 0 but still count toward max_score
    raw_score = sum(_numeric_score(b.get("score")) if isinstance(b, dict) else 0.0 for b in bullets)
    max_score = len(bullets) * BULLET_MAX_SCORE
    percent = (raw_score / max_score) * 100.0 if max_score > 0 else 0.0
    question_id = str(raw.get("question_id", ""))

    return ScoredItem(
        question_id=question_id,
        kind=raw.get("kind") or "",
        text=question_texts.get(question_id, ""),
        verdict=raw.get("verdict") or "",
        raw_score=raw_score,
        max_score=max_score,
        percent=percent,
        weight=ITEM_WEIGHT,
        weighted_raw=raw_score * ITEM_WEIGHT,
        weighted_max=max_score * ITEM_WEIGHT,
        bullet_evals=bullets,
        feedback=raw.get("feedback") or "",
        coding_review=raw.get("coding_review") or None,
    )


def aggregate_overall(items: Iterable[ScoredItem]) -> OverallScore:
    """Overall percent from the weighted sums; 0 when nothing is scorable."""
    items = list(items)
    total_raw = sum(it.weighted_raw for it in items)
    total_max = sum(it.weighted_max for it in items)
    percent = (total_raw / total_max) * 100.0 if total_max > 0 else 0.0
    return OverallScore(total_score=total_raw, total_max=total_max, percent=percent)


def build_scored_report(scores_response: Dict[str, Any], question_set: QuestionSet) -> ScoredReport:
    """Turn the scorer response into the locally weighted report."""
    raw_items = scores_response.get("items")
    if not isinstance(raw_items, list):
        raw_items = []

    question_texts = question_set.question_text_by_id()
    items = [
        derive_scored_item(raw, question_texts)
        for raw in raw_items
        if isinstance(raw, dict)
    ]

    return ScoredReport(
        job_title=scores_response.get("job_title") or question_set.job_title,
        overall=aggregate_overall(items),
        items=items,
    )


class ScoringPipeline:
    """Best-effort score → learning-plan pipeline."""

    def __init__(self, backend: ScoringBackend, results: ResultsStore):
        self.backend = backend
        self.results = results

    @staticmethod
    def _fail(result: PipelineResult, step: str, error: Exception) -> PipelineResult:
        logger.error(f"Scoring pipeline step '{step}' failed: {error}")
        result.failed_step = step
        result.error = str(error) or error.__class__.__name__
        return result

    async def run(self, question_set: QuestionSet) -> PipelineResult:
        """Score the question set and fetch a learning plan. Never raises."""
        result = PipelineResult()

        try:
            scores_response = await self.backend.submit_scores(build_score_submission(question_set))
        except Exception as e:
            return self._fail(result, "scores", e)

        if not isinstance(scores_response, dict):
            logger.warning("Scores API returned no usable body, skipping learning plan")
            return result

        result.scores_response = scores_response
        try:
            self.results.save_scores_response(scores_response)
            report = build_scored_report(scores_response, question_set)
        except (OSError, TypeError, ValueError, ValidationError) as e:
            return self._fail(result, "report", e)
        result.report = report

        logger.info(
            f"Scored {len(report.items)} questions for '{report.job_title}': "
            f"{report.overall.percent:.1f}%"
        )

        request = LearningPlanRequest(scored_report=report)
        try:
            plan = await self.backend.request_learning_plan(request)
        except Exception as e:
            return self._fail(result, "learning", e)

        if plan is None:
            logger.warning("Learning API returned no usable body")
            return result

        result.learning_plan = plan
        try:
            self.results.save_learning(plan, report)
        except (OSError, TypeError, ValueError) as e:
            return self._fail(result, "persist", e)
        return result
