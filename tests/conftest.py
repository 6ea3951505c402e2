"""
pytest configuration and shared fixtures.
"""
import os
from typing import List
from unittest.mock import AsyncMock

import pytest

# Keep tests independent of a developer's .env
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ["BACKEND_BASE_URL"] = "http://backend.test"
os.environ["INACTIVITY_TIMEOUT_SECONDS"] = "30"
os.environ["MIN_RECORDING_MS"] = "500"
os.environ["TYPING_FREEZES_COUNTDOWN"] = "false"

from jobcoach.core.storage import InMemoryKeyValueStore
from jobcoach.models.interview import CodingDetails, Question, QuestionSet
from jobcoach.models.jobs import Job
from jobcoach.services.state_store import ResultsStore


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float):
        self.now += ms / 1000.0


class FakeBackend:
    """
    Stand-in for the job/interview backend.

    Every remote call is an AsyncMock so tests can assert on payloads and
    swap in failures with side_effect.
    """

    def __init__(self, question_set: QuestionSet):
        self.fetch_question_set = AsyncMock(return_value=question_set)
        self.submit_scores = AsyncMock(return_value={"items": []})
        self.request_learning_plan = AsyncMock(return_value={"modules": []})
        self.guide = AsyncMock(return_value={"guidance": "Focus on the trade-offs."})
        self.speak = AsyncMock(return_value=b"ID3-audio")
        self.transcribe = AsyncMock(return_value="transcribed answer")


def make_questions() -> List[Question]:
    return [
        Question(
            question_id="q1",
            kind="behavioral",
            text="Tell me about a time you resolved a conflict.",
            rationale="Collaboration",
            rubric=["Situation", "Action"],
        ),
        Question(
            question_id="q2",
            kind="coding",
            text="Reverse a linked list.",
            rationale="Data structures",
            rubric=["Correctness"],
            coding=CodingDetails(difficulty="easy", target_language="python"),
        ),
    ]


@pytest.fixture
def question_set() -> QuestionSet:
    """Two-question set: one behavioral, one coding."""
    return QuestionSet(
        job_title="Backend Engineer",
        summary="Python backend role",
        questions=make_questions(),
    )


@pytest.fixture
def job() -> Job:
    return Job(
        id="job-1",
        title="Backend Engineer",
        company="Acme",
        description="Build Python services with SQL and Git.",
    )


@pytest.fixture
def backend(question_set) -> FakeBackend:
    return FakeBackend(question_set)


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def results_store(kv_store) -> ResultsStore:
    return ResultsStore(kv_store)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
