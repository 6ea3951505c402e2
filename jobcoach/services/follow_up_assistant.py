"""
Follow-up Q&A Assistant.

A side conversation where the candidate asks clarifying questions about
the interview question on screen. Each turn sends the main question, the
prior turns and the new query to the coaching service, and the reply is
read aloud.
"""
import logging
import random
import uuid
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Union

from jobcoach.core.errors import AssistantBusyError
from jobcoach.models.interview import ConversationMessage, GuideRequest, MessageRole
from jobcoach.services.response_capture import ResponseCapture
from jobcoach.services.speech import SpeechPlayback

logger = logging.getLogger(__name__)

# Tried in order; the first non-empty value is the reply
GUIDANCE_FIELDS = (
    "guidance",
    "answer",
    "response",
    "text",
    "result",
    "message",
    "guide",
    "content",
)

FILLER_OPENERS = [
    "That's a great question! Let me clarify: ",
    "To elaborate on that point: ",
    "Here's what I mean by that: ",
    "Let me give you an example: ",
    "Think of it this way: ",
]
FILLER_SUFFIX = " I'm here to help with details."
GUIDANCE_FAILED_MESSAGE = "Sorry, I could not fetch guidance right now. Please try again."


class GuideService(Protocol):
    async def guide(self, request: GuideRequest) -> Union[dict, str]: ...


def resolve_first_field(payload: Any, candidates: Sequence[str] = GUIDANCE_FIELDS) -> str:
    """
    Pick the reply text out of a loosely shaped payload.

    A string payload is returned as-is. For a mapping, the first candidate
    field holding a non-empty value wins.
    """
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload
    if not isinstance(payload, dict):
        return ""
    for name in candidates:
        value = payload.get(name)
        if value:
            return str(value)
    return ""


def _quote(text: str) -> str:
    return text.replace('"', "“")


def build_history_string(messages: Iterable[ConversationMessage]) -> str:
    """
    Serialize a conversation for the coaching service.

    The first message is the seed (the interview question itself) and is
    left out. Output looks like: [candidate: "..." interviewer: "..."]
    """
    conversational = list(messages)[1:]
    parts = []
    for m in conversational:
        speaker = "interviewer" if m.role == MessageRole.ASSISTANT else "candidate"
        parts.append(f'{speaker}: "{_quote(m.content)}"')
    return f"[{' '.join(parts)}]"


def _new_id() -> str:
    return uuid.uuid4().hex


class FollowUpAssistant:
    """
    Conversation about one interview question.

    One exchange at a time: send() raises AssistantBusyError while a
    guidance request is outstanding.
    """

    def __init__(
        self,
        question: str,
        guide_service: GuideService,
        capture: Optional[ResponseCapture] = None,
        speech: Optional[SpeechPlayback] = None,
        rng: Optional[random.Random] = None,
    ):
        self.question = question
        self.guide_service = guide_service
        self.capture = capture
        self.speech = speech
        self._rng = rng or random.Random()
        self.is_fetching_guide = False
        self.messages: List[ConversationMessage] = []
        self.reset()

    def reset(self):
        """Start over with only the seed message."""
        self.messages = [
            ConversationMessage(
                id=_new_id(),
                role=MessageRole.ASSISTANT,
                content=self.question,
                is_voice=False,
            )
        ]

    @property
    def can_send(self) -> bool:
        if self.is_fetching_guide:
            return False
        if self.capture is not None and self.capture.input_locked:
            return False
        return True

    def _filler(self) -> str:
        return self._rng.choice(FILLER_OPENERS) + FILLER_SUFFIX

    async def send(self, text: Optional[str] = None, is_voice: bool = False) -> Optional[ConversationMessage]:
        """
        Send a user turn and append the assistant's reply.

        Args:
            text: The query; defaults to the capture's text buffer.
            is_voice: Whether the query came from a voice recording.

        Returns:
            The assistant message, or None when there was nothing to send.
        """
        if text is None:
            text = self.capture.text if self.capture is not None else ""
        if not text.strip():
            return None
        if not self.can_send:
            raise AssistantBusyError("A follow-up question is already being answered")

        user_msg = ConversationMessage(
            id=_new_id(), role=MessageRole.USER, content=text, is_voice=is_voice
        )
        self.messages.append(user_msg)

        request = GuideRequest(
            main_question=self.question,
            history_str=build_history_string(self.messages),
            new_user_query=text,
        )

        self.is_fetching_guide = True
        try:
            payload = await self.guide_service.guide(request)
        except Exception as e:
            logger.error(f"Guide API error: {e}")
            reply = ConversationMessage(
                id=_new_id(),
                role=MessageRole.ASSISTANT,
                content=GUIDANCE_FAILED_MESSAGE,
                is_voice=False,
            )
            self.messages.append(reply)
            return reply
        finally:
            self.is_fetching_guide = False
            if self.capture is not None:
                self.capture.clear()

        guidance = resolve_first_field(payload)
        reply = ConversationMessage(
            id=_new_id(),
            role=MessageRole.ASSISTANT,
            content=guidance if guidance.strip() else self._filler(),
            is_voice=True,
        )
        self.messages.append(reply)

        if self.speech is not None:
            await self.speech.speak(reply.content)
        return reply

    def close(self):
        """Stop any reply being read aloud and abandon an in-progress recording."""
        if self.speech is not None:
            self.speech.stop()
        if self.capture is not None:
            self.capture.stop_recording()
            self.capture.clear()
