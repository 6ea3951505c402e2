"""
Results view for the learning-path page.

Reads what the scoring pipeline persisted and splits the scored
questions into strengths and focus areas around the plan threshold.
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional

from jobcoach.models.scoring import LEARNING_THRESHOLD, ScoredItem, ScoredReport
from jobcoach.services.state_store import ResultsStore


@dataclass
class InterviewResults:
    report: Optional[ScoredReport] = None
    learning_plan: Optional[Any] = None
    strengths: List[ScoredItem] = field(default_factory=list)
    focus_areas: List[ScoredItem] = field(default_factory=list)

    @property
    def has_results(self) -> bool:
        return self.report is not None

    @property
    def overall_percent(self) -> float:
        return self.report.overall.percent if self.report else 0.0


def load_results(results: ResultsStore, threshold: float = LEARNING_THRESHOLD) -> InterviewResults:
    """Assemble the last interview's results; empty when none were stored."""
    report = results.get_learning_scores()
    view = InterviewResults(report=report, learning_plan=results.get_learning_plan())
    if report is None:
        return view

    for item in sorted(report.items, key=lambda it: it.percent, reverse=True):
        if item.percent >= threshold:
            view.strengths.append(item)
        else:
            view.focus_areas.append(item)
    # Weakest first
    view.focus_areas.reverse()
    return view
