"""
LLM Provider Factory.

Creates the configured LLM provider. The API key is checked at call time
so the server starts without one and reports the problem per request.
"""
import logging
from typing import Optional

from jobcoach.core.config import load_model_config, get_settings
from jobcoach.core.errors import ServiceError
from jobcoach.providers.llm.base import BaseLLMProvider, LLMProvider
from jobcoach.providers.llm.gemini_provider import GeminiProvider

logger = logging.getLogger(__name__)


class LLMProviderFactory:
    """Factory for creating LLM provider instances from configuration."""

    @staticmethod
    def create(
        provider_type: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs
    ) -> BaseLLMProvider:
        """
        Create an LLM provider instance.

        Args:
            provider_type: Provider type. If None, reads from config.
            model: Model name. If None, reads from config.
            **kwargs: Additional provider-specific arguments.

        Raises:
            ServiceError: 500 when the API key is not configured.
            ValueError: for an unknown provider type.
        """
        config = load_model_config()
        settings = get_settings()
        llm_config = config.get("providers", {}).get("llm", {})

        provider_type = provider_type or llm_config.get("provider", LLMProvider.GEMINI.value)
        model = model or llm_config.get("model", settings.gemini_model)

        if provider_type == LLMProvider.GEMINI.value:
            api_key = kwargs.pop("api_key", None) or settings.gemini_api_key
            if not api_key:
                raise ServiceError(500, "GEMINI_API_KEY environment variable is not set.")

            logger.info(f"Creating LLM provider: {provider_type} with model: {model}")
            return GeminiProvider(
                model=model,
                api_key=api_key,
                api_url=kwargs.pop("api_url", settings.gemini_api_url),
                timeout=float(llm_config.get("timeout", settings.gemini_timeout_seconds)),
                **kwargs
            )

        raise ValueError(f"Unsupported LLM provider: {provider_type}")


# Global provider instance (lazy loaded)
_llm_provider: Optional[BaseLLMProvider] = None


def get_llm_provider() -> BaseLLMProvider:
    """Get or create the global LLM provider instance."""
    global _llm_provider
    if _llm_provider is None:
        _llm_provider = LLMProviderFactory.create()
    return _llm_provider


def reset_llm_provider() -> None:
    """Forget the cached provider (settings changed, tests)."""
    global _llm_provider
    _llm_provider = None


async def close_llm_provider() -> None:
    """Close the cached provider's HTTP client, if one was created."""
    global _llm_provider
    if _llm_provider is not None:
        await _llm_provider.close()
        _llm_provider = None
