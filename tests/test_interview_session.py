"""
Interview session state-machine tests.

The backend is faked; clocks are ticked by hand.
"""
import asyncio
from unittest.mock import AsyncMock

import pytest

from jobcoach.core.errors import BackendError
from jobcoach.models.interview import LOADING_QUESTION, QuestionSet
from jobcoach.models.jobs import Job
from jobcoach.services.interview_session import (
    QUESTIONS_FAILED_MESSAGE,
    InterviewSession,
    SessionState,
)
from jobcoach.services.response_capture import ResponseCapture
from jobcoach.services.scoring_pipeline import ScoringPipeline
from jobcoach.services.session_timers import SessionTimers
from jobcoach.services.speech import MemoryAudioPlayer, SpeechPlayback
from jobcoach.services.state_store import NO_RESUME_TEXT


SCORES_RESPONSE = {
    "job_title": "Backend Engineer",
    "items": [
        {
            "question_id": "q1",
            "kind": "behavioral",
            "verdict": "good",
            "bullet_evals": [
                {"criterion": "Situation", "score": 8},
                {"criterion": "Action", "score": 6},
            ],
            "feedback": "Clear structure.",
        },
        {
            "question_id": "q2",
            "kind": "coding",
            "verdict": "strong",
            "bullet_evals": [{"criterion": "Correctness", "score": 10}],
            "feedback": "Correct.",
        },
    ],
}


async def settle():
    """Let spawned background tasks run."""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def make_session(backend, job, results_store, clock):
    def _make(**kwargs):
        kwargs.setdefault("timers", SessionTimers(inactivity_seconds=30))
        session = InterviewSession(
            job=kwargs.pop("job", job),
            provider=backend,
            pipeline=ScoringPipeline(backend, results_store),
            capture=ResponseCapture(backend, clock=clock, min_recording_ms=500),
            **kwargs,
        )
        return session

    return _make


class TestLoading:

    @pytest.mark.asyncio
    async def test_load_enters_first_question(self, make_session, backend, job):
        session = make_session()
        await session.load()

        assert session.state == SessionState.READY
        assert session.index == 0
        assert session.current_question.question_id == "q1"
        assert session.question_count == 2
        assert session.progress == 50.0

        request = backend.fetch_question_set.await_args.args[0]
        assert request.job_description == job.description
        assert request.job_title == job.title
        assert request.resume == NO_RESUME_TEXT
        assert request.difficulty == "medium"
        await session.close()

    @pytest.mark.asyncio
    async def test_loading_placeholder_before_load(self, make_session):
        session = make_session()
        assert session.current_question is LOADING_QUESTION
        assert session.progress == 0.0

    @pytest.mark.asyncio
    async def test_no_description_stays_idle(self, make_session, backend):
        session = make_session(job=Job(id="j", title="Empty", description=""))
        await session.load()
        assert session.state == SessionState.IDLE
        backend.fetch_question_set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_failure_then_retry(self, make_session, backend, question_set):
        error = BackendError("POST /questions", 500, "boom")
        backend.fetch_question_set.side_effect = [error, question_set]
        session = make_session()

        await session.load()
        assert session.state == SessionState.ERROR
        assert session.error == str(error)

        await session.load()
        assert session.state == SessionState.READY
        assert session.error is None
        await session.close()

    @pytest.mark.asyncio
    async def test_blank_error_message_uses_default(self, make_session, backend):
        backend.fetch_question_set.side_effect = RuntimeError()
        session = make_session()
        await session.load()
        assert session.error == QUESTIONS_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_empty_question_set_is_error(self, make_session, backend):
        backend.fetch_question_set.return_value = QuestionSet(job_title="x", questions=[])
        session = make_session()
        await session.load()
        assert session.state == SessionState.ERROR
        assert session.error == QUESTIONS_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_difficulty_change_refetches(self, make_session, backend):
        session = make_session()
        await session.load()
        session.mount(drive_clock=False)
        session.set_answer("partial")
        for _ in range(5):
            await session.tick()

        await session.set_difficulty("hard")

        assert backend.fetch_question_set.await_count == 2
        assert backend.fetch_question_set.await_args.args[0].difficulty == "hard"
        assert session.index == 0
        assert session.capture.text == ""
        assert session.timers.per_question_elapsed == 0

        await session.set_difficulty("hard")
        assert backend.fetch_question_set.await_count == 2
        await session.close()


class TestTransitions:

    @pytest.mark.asyncio
    async def test_advance_stores_response_verbatim(self, make_session, question_set):
        session = make_session()
        await session.load()
        session.set_answer("  I mediated between two teams.  ")
        await session.advance()

        assert question_set.questions[0].user_response == "  I mediated between two teams.  "
        assert session.index == 1
        assert session.capture.text == ""
        await session.close()

    @pytest.mark.asyncio
    async def test_skip_stores_empty_response(self, make_session, question_set):
        session = make_session()
        await session.load()
        session.set_answer("something typed")
        await session.skip()

        assert question_set.questions[0].user_response == ""
        assert session.index == 1
        await session.close()

    @pytest.mark.asyncio
    async def test_coding_question_submits_code(self, make_session, question_set):
        session = make_session()
        await session.load()
        await session.advance()
        assert session.current_question.is_coding
        assert session.capture.code.startswith("// python solution")

        session.set_code("def reverse(head): ...")
        await session.advance()
        assert question_set.questions[1].user_response == "def reverse(head): ..."
        await session.close()

    @pytest.mark.asyncio
    async def test_transitions_ignored_outside_ready(self, make_session, backend):
        session = make_session()
        await session.advance()
        await session.skip()
        assert session.state == SessionState.IDLE
        backend.submit_scores.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_advance_while_recording_keeps_typed_text(
        self, make_session, backend, clock, question_set
    ):
        session = make_session()
        await session.load()
        session.set_answer("typed")
        session.press_record()
        session.capture.recorder.feed(b"voice")
        clock.advance_ms(800)

        await session.advance()
        await settle()

        assert question_set.questions[0].user_response == "typed"
        backend.transcribe.assert_awaited_once()
        # Late transcription belongs to the previous question
        assert session.capture.text == ""
        await session.close()

    @pytest.mark.asyncio
    async def test_skip_while_recording_discards_audio(self, make_session, backend, clock):
        session = make_session()
        await session.load()
        session.press_record()
        session.capture.recorder.feed(b"voice")
        clock.advance_ms(800)

        await session.skip()
        await settle()

        assert not session.capture.is_recording
        backend.transcribe.assert_not_awaited()
        await session.close()


class TestAutoSkip:

    @pytest.mark.asyncio
    async def test_idle_question_is_skipped(self, make_session, question_set):
        session = make_session()
        await session.load()
        session.mount(drive_clock=False)
        session.set_answer("typing does not count")

        for _ in range(30):
            await session.tick()

        assert session.index == 1
        assert question_set.questions[0].user_response == ""
        assert session.timers.inactivity_countdown == 30
        assert session.timers.total_elapsed == 30
        await session.close()

    @pytest.mark.asyncio
    async def test_auto_skip_on_last_question_completes(self, make_session, backend):
        session = make_session()
        await session.load()
        session.mount(drive_clock=False)

        for _ in range(60):
            await session.tick()

        assert session.state == SessionState.COMPLETE
        payload = backend.submit_scores.await_args.args[0]
        responses = [q["user_response"] for q in payload["question_set"]["questions"]]
        assert responses == ["", ""]
        await session.close()

    @pytest.mark.asyncio
    async def test_recording_freezes_countdown(self, make_session):
        session = make_session()
        await session.load()
        session.mount(drive_clock=False)
        session.press_record()

        for _ in range(45):
            await session.tick()

        assert session.index == 0
        assert session.timers.per_question_elapsed == 45
        await session.close()

    @pytest.mark.asyncio
    async def test_typing_freezes_when_enabled(self, make_session):
        session = make_session(typing_freezes_countdown=True)
        await session.load()
        session.mount(drive_clock=False)
        session.set_answer("I am typing")

        for _ in range(45):
            await session.tick()

        assert session.index == 0
        await session.close()

    @pytest.mark.asyncio
    async def test_expiry_before_questions_load_is_ignored(self, make_session):
        session = make_session()
        session.mount(drive_clock=False)

        for _ in range(31):
            await session.tick()

        assert session.state == SessionState.IDLE
        await session.close()


class TestCompletion:

    @pytest.mark.asyncio
    async def test_two_question_interview_end_to_end(self, make_session, backend, results_store):
        backend.submit_scores.return_value = SCORES_RESPONSE
        on_complete = AsyncMock()
        session = make_session(on_complete=on_complete)

        await session.load()
        session.mount(drive_clock=False)
        session.set_answer("A")
        await session.advance()
        session.set_code("B")
        await session.advance()

        assert session.state == SessionState.COMPLETE
        payload = backend.submit_scores.await_args.args[0]
        questions = payload["question_set"]["questions"]
        assert [q["user_response"] for q in questions] == ["A", "B"]

        plan_request = backend.request_learning_plan.await_args.args[0]
        assert plan_request.threshold == 70.0
        assert plan_request.budget_hours == 20.0
        assert plan_request.max_resources == 6
        assert plan_request.scored_report.overall.percent == pytest.approx(80.0)

        assert results_store.get_scores_response() == SCORES_RESPONSE
        assert results_store.get_learning_plan() == {"modules": []}
        assert results_store.get_learning_scores().overall.percent == pytest.approx(80.0)

        on_complete.assert_awaited_once_with("job-1")
        assert session.timers.mounted is False
        await session.close()

    @pytest.mark.asyncio
    async def test_pipeline_failure_still_completes(self, make_session, backend, results_store):
        backend.submit_scores.side_effect = BackendError("POST /scores", 500)
        on_complete = AsyncMock()
        session = make_session(on_complete=on_complete)

        await session.load()
        await session.skip()
        await session.skip()

        assert session.state == SessionState.COMPLETE
        assert session.pipeline_result.failed_step == "scores"
        assert results_store.get_scores_response() is None
        on_complete.assert_awaited_once()
        await session.close()


class TestSpeechAndFollowUp:

    @pytest.mark.asyncio
    async def test_question_read_aloud(self, make_session, backend):
        player = MemoryAudioPlayer()
        session = make_session(speech=SpeechPlayback(backend, player))
        await session.load()
        await settle()

        backend.speak.assert_awaited_with("Tell me about a time you resolved a conflict.")
        assert len(player.handles) == 1

        await session.advance()
        await settle()
        # Previous question's audio is released before the next plays
        assert player.handles[0].released
        assert len(player.handles) == 2
        await session.close()

    @pytest.mark.asyncio
    async def test_follow_up_requires_guide_service(self, make_session):
        session = make_session()
        await session.load()
        with pytest.raises(RuntimeError):
            session.open_follow_up()
        await session.close()

    @pytest.mark.asyncio
    async def test_follow_up_seeded_with_current_question(self, make_session, backend):
        session = make_session(guide_service=backend)
        await session.load()
        session.mount(drive_clock=False)

        assistant = session.open_follow_up()
        assert assistant.messages[0].content == session.current_question.text
        assert session.timers.has_interacted

        reply = await assistant.send("How much detail?")
        assert reply.content == "Focus on the trade-offs."
        request = backend.guide.await_args.args[0]
        assert request.main_question == session.current_question.text

        reopened = session.open_follow_up()
        assert reopened is not assistant
        assert len(reopened.messages) == 1
        await session.close()

    @pytest.mark.asyncio
    async def test_follow_up_closed_on_next_question(self, make_session, backend):
        session = make_session(guide_service=backend)
        await session.load()
        session.open_follow_up()
        await session.advance()
        assert session.follow_up is None
        await session.close()
