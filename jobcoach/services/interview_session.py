"""
Interview Session Service.

State machine for one mock interview:

    loading -> ready(0) -> ... -> ready(last) -> submitting -> complete

Questions come from the question-set provider; answers come from the
response capture; the session timers auto-skip idle questions; the
scoring pipeline runs once after the last question. A failed question
fetch moves to `error`, and load() is the retry.
"""
import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol, Set

from jobcoach.core.config import get_settings
from jobcoach.models.interview import (
    LOADING_QUESTION,
    Difficulty,
    Question,
    QuestionRequest,
    QuestionSet,
)
from jobcoach.models.jobs import Job
from jobcoach.services.follow_up_assistant import FollowUpAssistant, GuideService
from jobcoach.services.response_capture import ResponseCapture
from jobcoach.services.scoring_pipeline import PipelineResult, ScoringPipeline
from jobcoach.services.session_timers import SessionTimers, TimerDriver
from jobcoach.services.speech import SpeechPlayback
from jobcoach.services.state_store import NO_RESUME_TEXT

logger = logging.getLogger(__name__)

QUESTIONS_FAILED_MESSAGE = "Failed to fetch interview questions"


class SessionState(str, Enum):
    """Lifecycle of an interview session."""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    SUBMITTING = "submitting"
    COMPLETE = "complete"
    ERROR = "error"


class QuestionSetProvider(Protocol):
    async def fetch_question_set(self, request: QuestionRequest) -> QuestionSet: ...


class InterviewSession:
    """
    Drives a mock interview for one job.

    The in-memory question set is only mutated by advance/skip, which write
    each question's user_response exactly once.
    """

    def __init__(
        self,
        job: Job,
        provider: QuestionSetProvider,
        pipeline: ScoringPipeline,
        capture: ResponseCapture,
        resume_text: str = NO_RESUME_TEXT,
        difficulty: str = Difficulty.MEDIUM.value,
        timers: Optional[SessionTimers] = None,
        speech: Optional[SpeechPlayback] = None,
        guide_service: Optional[GuideService] = None,
        on_complete: Optional[Callable[[str], Awaitable[None]]] = None,
        typing_freezes_countdown: Optional[bool] = None,
    ):
        settings = get_settings()
        self.job = job
        self.provider = provider
        self.pipeline = pipeline
        self.capture = capture
        self.resume_text = resume_text
        self.difficulty = difficulty
        self.timers = timers or SessionTimers(settings.inactivity_timeout_seconds)
        self.speech = speech
        self.guide_service = guide_service
        self.on_complete = on_complete
        self.typing_freezes_countdown = (
            settings.typing_freezes_countdown
            if typing_freezes_countdown is None
            else typing_freezes_countdown
        )

        self.state = SessionState.IDLE
        self.error: Optional[str] = None
        self.question_set: Optional[QuestionSet] = None
        self.index = 0
        self.follow_up: Optional[FollowUpAssistant] = None
        self.pipeline_result: Optional[PipelineResult] = None

        self._driver = TimerDriver(self.tick)
        self._background: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def current_question(self) -> Question:
        if not self.question_set or not self.question_set.questions:
            return LOADING_QUESTION
        return self.question_set.questions[self.index]

    @property
    def question_count(self) -> int:
        return len(self.question_set.questions) if self.question_set else 0

    @property
    def is_last_question(self) -> bool:
        return self.index >= self.question_count - 1

    @property
    def progress(self) -> float:
        if not self.question_count:
            return 0.0
        return (self.index + 1) / self.question_count * 100

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self, drive_clock: bool = True):
        """Start the session clocks; drive_clock=False leaves ticking to the caller."""
        self.timers.start()
        if drive_clock:
            self._driver.start()

    async def close(self):
        """Tear down: stop clocks, recording, speech and background work."""
        await self._driver.stop()
        self.timers.stop()
        self.capture.stop_recording()
        if self.follow_up is not None:
            self.follow_up.close()
        if self.speech is not None:
            self.speech.stop()
        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        self._background.clear()

    def _spawn(self, coro):
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def load(self):
        """Fetch a fresh question set and restart from the first question."""
        if not self.job.description:
            self.state = SessionState.IDLE
            return

        self.state = SessionState.LOADING
        self.error = None
        request = QuestionRequest(
            job_description=self.job.description,
            resume=self.resume_text,
            job_title=self.job.title,
            difficulty=self.difficulty,
        )

        try:
            question_set = await self.provider.fetch_question_set(request)
        except Exception as e:
            logger.error(f"Error fetching interview questions: {e}")
            self.state = SessionState.ERROR
            self.error = str(e) or QUESTIONS_FAILED_MESSAGE
            return

        if not question_set.questions:
            logger.error(f"Question provider returned no questions for '{self.job.title}'")
            self.state = SessionState.ERROR
            self.error = QUESTIONS_FAILED_MESSAGE
            return

        self.question_set = question_set
        self.index = 0
        self.state = SessionState.READY
        logger.info(
            f"Interview ready for '{self.job.title}' ({self.difficulty}): "
            f"{len(question_set.questions)} questions"
        )
        self._enter_question()

    async def set_difficulty(self, difficulty: str):
        """Changing difficulty restarts the interview with new questions."""
        if difficulty == self.difficulty:
            return
        self.difficulty = difficulty
        self.question_set = None
        await self.load()

    def _enter_question(self):
        question = self.current_question
        self.capture.reset_for(question)
        self.timers.reset_question()
        if self.follow_up is not None:
            self.follow_up.close()
            self.follow_up = None
        if self.speech is not None:
            self._spawn(self.speech.speak(question.text))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def advance(self):
        """Submit the current answer and move on."""
        await self._move_on(skip=False)

    async def skip(self):
        """Move on with an empty answer, discarding whatever was typed."""
        await self._move_on(skip=True)

    async def _move_on(self, skip: bool):
        if self.state != SessionState.READY:
            logger.warning(f"Ignoring transition while session is {self.state.value}")
            return

        # Transcription is not awaited; a late result is dropped as stale
        recording = self.capture.stop_recording()
        if recording is not None and not skip:
            self._spawn(self.capture.process_recording(recording))

        question = self.current_question
        question.user_response = "" if skip else self.capture.current_response

        if self.is_last_question:
            await self._submit()
            return

        self.index += 1
        self._enter_question()

    async def _submit(self):
        self.state = SessionState.SUBMITTING
        logger.info(f"Submitting {self.question_count} answers for scoring")

        # Best-effort: a failed pipeline still completes the interview
        self.pipeline_result = await self.pipeline.run(self.question_set)

        self.state = SessionState.COMPLETE
        self.timers.stop()
        if self.on_complete is not None:
            await self.on_complete(self.job.id)

    async def tick(self):
        """One-second clock tick; auto-skips an idle question."""
        expired = self.timers.tick()
        if expired and self.state == SessionState.READY:
            await self.skip()

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def set_answer(self, text: str):
        self.capture.set_text(text)
        if self.typing_freezes_countdown:
            self.timers.mark_interaction()

    def set_code(self, code: str):
        self.capture.set_code(code)
        if self.typing_freezes_countdown:
            self.timers.mark_interaction()

    def press_record(self) -> bool:
        """Push-to-talk press."""
        self.timers.mark_interaction()
        return self.capture.press()

    async def release_record(self) -> Optional[str]:
        """Push-to-talk release; transcribes into the answer."""
        self.timers.mark_interaction()
        return await self.capture.release()

    def open_follow_up(self) -> FollowUpAssistant:
        """Open the follow-up assistant for the current question."""
        if self.guide_service is None:
            raise RuntimeError("No guidance service configured for follow-up questions")
        self.timers.mark_interaction()
        # Every opening starts a fresh conversation seeded with the question
        if self.follow_up is not None:
            self.follow_up.close()
        self.follow_up = FollowUpAssistant(
            question=self.current_question.text,
            guide_service=self.guide_service,
            capture=ResponseCapture(self.capture.transcriber),
            speech=self.speech,
        )
        return self.follow_up
