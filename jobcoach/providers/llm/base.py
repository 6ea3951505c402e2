"""
Generative-language provider contract.

The resume services talk to a model only through BaseLLMProvider, so a
hosted API can be swapped or mocked without touching prompt code.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional

DEFAULT_MAX_TOKENS = 1024
DEFAULT_TEMPERATURE = 0.7


class LLMProvider(str, Enum):
    GEMINI = "gemini"


@dataclass
class Message:
    """One turn of a prompt. role is system, user or assistant."""
    role: str
    content: str


@dataclass
class GenerationConfig:
    """Sampling options, mirrored onto the provider's generationConfig."""
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = 0.9
    top_k: int = 40
    stop_sequences: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "GenerationConfig":
        """Build from a models.yaml generation block; missing keys keep defaults."""
        values = dict(data or {})
        defaults = cls()
        return cls(
            max_tokens=int(values.get("max_tokens", defaults.max_tokens)),
            temperature=float(values.get("temperature", defaults.temperature)),
            top_p=float(values.get("top_p", defaults.top_p)),
            top_k=int(values.get("top_k", defaults.top_k)),
            stop_sequences=list(values.get("stop_sequences") or []),
        )


@dataclass
class LLMResponse:
    content: str
    model: str
    finish_reason: Optional[str] = None
    # prompt_tokens / completion_tokens / total_tokens
    usage: Dict[str, int] = field(default_factory=dict)
    latency_ms: Optional[float] = None

    @property
    def tokens_used(self) -> int:
        return self.usage.get("total_tokens", 0)


class BaseLLMProvider(ABC):
    """Interface every model backend implements."""

    def __init__(self, model: str, **options):
        self.model = model
        self.options = options

    @abstractmethod
    async def generate(
        self,
        messages: List[Message],
        config: Optional[GenerationConfig] = None,
    ) -> LLMResponse:
        """
        Run one prompt to completion.

        Args:
            messages: System instructions followed by the conversation turns
            config: Sampling options; provider defaults when omitted

        Returns:
            LLMResponse holding the generated text and token usage
        """

    @abstractmethod
    async def generate_stream(
        self,
        messages: List[Message],
        config: Optional[GenerationConfig] = None,
    ) -> AsyncIterator[str]:
        """Yield generated text as it arrives."""

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the model endpoint answers."""

    async def close(self):
        """Release held connections. No-op by default."""


def system_message(content: str) -> Message:
    return Message(role="system", content=content)


def user_message(content: str) -> Message:
    return Message(role="user", content=content)


def assistant_message(content: str) -> Message:
    return Message(role="assistant", content=content)
