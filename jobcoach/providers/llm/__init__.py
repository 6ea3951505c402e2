"""
LLM Providers Package.

Generative-language backends used by the resume services.
"""
from jobcoach.providers.llm.base import (
    BaseLLMProvider,
    LLMProvider,
    Message,
    GenerationConfig,
    LLMResponse,
    system_message,
    user_message,
    assistant_message,
)
from jobcoach.providers.llm.gemini_provider import GeminiProvider
from jobcoach.providers.llm.factory import (
    LLMProviderFactory,
    get_llm_provider,
    reset_llm_provider,
    close_llm_provider,
)

__all__ = [
    # Base classes
    "BaseLLMProvider",
    "LLMProvider",
    "Message",
    "GenerationConfig",
    "LLMResponse",
    # Message helpers
    "system_message",
    "user_message",
    "assistant_message",
    # Providers
    "GeminiProvider",
    # Factory
    "LLMProviderFactory",
    "get_llm_provider",
    "reset_llm_provider",
    "close_llm_provider",
]
