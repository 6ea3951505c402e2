"""
Response Capture Service.

Collects the candidate's answer to the current question: a free-text
buffer or a code buffer (for coding questions), optionally filled by
push-to-talk voice recordings that are transcribed remotely and appended
to the text buffer.
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol

from jobcoach.core.config import get_settings
from jobcoach.core.errors import InputLockedError
from jobcoach.models.interview import Question

logger = logging.getLogger(__name__)

TRANSCRIPTION_FAILED_MESSAGE = "Failed to transcribe audio. Please try again."


class Transcriber(Protocol):
    """Anything that turns a whole recording into text."""

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "recording.webm",
        content_type: str = "audio/webm",
    ) -> str: ...


class AudioRecorder(Protocol):
    """Audio source. stop() returns everything captured since start()."""

    def start(self) -> None: ...
    def stop(self) -> bytes: ...


class BufferedRecorder:
    """
    Recorder fed with audio chunks by the caller.

    Empty chunks are dropped, matching how browser recorders only report
    non-empty data.
    """

    def __init__(self):
        self._chunks: List[bytes] = []
        self.active = False

    def start(self) -> None:
        self._chunks = []
        self.active = True

    def feed(self, chunk: bytes) -> None:
        if self.active and chunk:
            self._chunks.append(chunk)

    def stop(self) -> bytes:
        self.active = False
        return b"".join(self._chunks)


class CaptureMode(str, Enum):
    TEXT = "text"
    CODE = "code"


@dataclass
class Recording:
    """A finished recording tagged with the question it belongs to."""
    audio: bytes
    duration_ms: float
    generation: int

    @property
    def size(self) -> int:
        return len(self.audio)


def code_placeholder(question: Question) -> str:
    """Starter text for a coding question's code buffer."""
    if not question.is_coding or question.coding is None:
        return ""
    language = question.coding.target_language
    return f"// {language} solution\nfunction solution() {{\n  // Your code here\n  \n}}"


class ResponseCapture:
    """
    Answer buffers plus push-to-talk voice capture for one question at a time.

    Only one recording may be in flight. While recording or transcribing,
    the text input is locked and no new recording can start. Releasing is
    idempotent so the control and a document-level release can both call
    release() without double-stopping.
    """

    def __init__(
        self,
        transcriber: Transcriber,
        recorder: Optional[AudioRecorder] = None,
        clock: Callable[[], float] = time.monotonic,
        min_recording_ms: Optional[int] = None,
    ):
        self.transcriber = transcriber
        self.recorder = recorder or BufferedRecorder()
        self._clock = clock
        self.min_recording_ms = (
            min_recording_ms if min_recording_ms is not None else get_settings().min_recording_ms
        )

        self.mode = CaptureMode.TEXT
        self.text = ""
        self.code = ""
        self.transcript = ""
        self.error: Optional[str] = None

        self.is_recording = False
        self.is_transcribing = False
        self._recording_started_at = 0.0
        self._generation = 0

    # ------------------------------------------------------------------
    # Buffers
    # ------------------------------------------------------------------

    def reset_for(self, question: Question):
        """Prepare empty buffers for a newly displayed question."""
        self._generation += 1
        self.mode = CaptureMode.CODE if question.is_coding else CaptureMode.TEXT
        self.text = ""
        self.code = code_placeholder(question)
        self.transcript = ""
        self.error = None

    def clear(self):
        """Empty the text buffer and transcript, keeping the mode."""
        self.text = ""
        self.transcript = ""

    @property
    def input_locked(self) -> bool:
        return self.is_recording or self.is_transcribing

    @property
    def can_start_recording(self) -> bool:
        return not self.is_recording and not self.is_transcribing

    def set_text(self, value: str):
        if self.input_locked:
            raise InputLockedError("Answer input is locked while audio is being captured")
        self.text = value

    def set_code(self, value: str):
        self.code = value

    @property
    def current_response(self) -> str:
        """The buffer that counts as this question's answer."""
        return self.code if self.mode == CaptureMode.CODE else self.text

    # ------------------------------------------------------------------
    # Voice
    # ------------------------------------------------------------------

    def start_recording(self) -> bool:
        """Begin a recording. Returns False when one is already in flight."""
        if not self.can_start_recording:
            return False
        self.recorder.start()
        self.is_recording = True
        self.error = None
        self._recording_started_at = self._clock()
        return True

    def stop_recording(self) -> Optional[Recording]:
        """Stop the active recording, if any, and hand back its audio."""
        if not self.is_recording:
            return None
        audio = self.recorder.stop()
        self.is_recording = False
        duration_ms = (self._clock() - self._recording_started_at) * 1000
        return Recording(audio=audio, duration_ms=duration_ms, generation=self._generation)

    async def process_recording(self, recording: Recording) -> Optional[str]:
        """
        Transcribe a finished recording and append it to the text buffer.

        Recordings with no audio or shorter than the minimum duration are
        dropped without a network call. A transcription that arrives after
        the question changed is discarded.

        Returns:
            The transcription text, or None when nothing was appended.
        """
        if recording.size == 0:
            logger.info("No audio data to transcribe")
            return None
        if recording.duration_ms < self.min_recording_ms:
            logger.info(f"Recording too short ({recording.duration_ms:.0f}ms), skipping transcription")
            return None

        self.is_transcribing = True
        try:
            transcription = await self.transcriber.transcribe(recording.audio)
        except Exception as e:
            logger.error(f"Error transcribing audio: {e}")
            if recording.generation == self._generation:
                self.error = TRANSCRIPTION_FAILED_MESSAGE
            return None
        finally:
            self.is_transcribing = False

        if recording.generation != self._generation:
            logger.warning("Discarding transcription for a question that is no longer active")
            return None

        self.transcript = transcription
        if transcription:
            separator = "\n\n" if self.text else ""
            self.text = f"{self.text}{separator}{transcription}"
        return transcription

    def press(self) -> bool:
        """Push-to-talk press."""
        return self.start_recording()

    async def release(self) -> Optional[str]:
        """Push-to-talk release from the control or anywhere in the document."""
        recording = self.stop_recording()
        if recording is None:
            return None
        return await self.process_recording(recording)
