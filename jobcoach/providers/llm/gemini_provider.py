"""
Gemini Provider Implementation.

Talks to the Google generative-language REST API over httpx.
"""
import json
import time
import logging
from typing import Any, Dict, List, Optional, AsyncIterator

import httpx

from jobcoach.providers.llm.base import (
    BaseLLMProvider,
    Message,
    GenerationConfig,
    LLMResponse,
)

logger = logging.getLogger(__name__)


class GeminiProvider(BaseLLMProvider):
    """
    Gemini provider using the generateContent endpoints.

    System messages are sent as the request's systemInstruction; assistant
    turns are mapped to Gemini's "model" role.
    """

    def __init__(
        self,
        model: str,
        api_key: str,
        api_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 120.0,
        **kwargs
    ):
        """
        Initialize Gemini provider.

        Args:
            model: Model name (e.g., "gemini-2.5-pro")
            api_key: Generative-language API key
            api_url: Base URL of the REST API
            timeout: Request timeout in seconds
        """
        super().__init__(model, **kwargs)
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"x-goog-api-key": api_key},
        )

    def _build_payload(
        self,
        messages: List[Message],
        config: GenerationConfig,
    ) -> Dict[str, Any]:
        system_parts = [{"text": m.content} for m in messages if m.role == "system"]
        contents = [
            {
                "role": "model" if m.role == "assistant" else "user",
                "parts": [{"text": m.content}],
            }
            for m in messages
            if m.role != "system"
        ]

        payload: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "maxOutputTokens": config.max_tokens,
                "temperature": config.temperature,
                "topP": config.top_p,
                "topK": config.top_k,
            },
        }
        if config.stop_sequences:
            payload["generationConfig"]["stopSequences"] = config.stop_sequences
        if system_parts:
            payload["systemInstruction"] = {"parts": system_parts}
        return payload

    @staticmethod
    def _candidate_text(data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict))

    async def generate(
        self,
        messages: List[Message],
        config: Optional[GenerationConfig] = None,
    ) -> LLMResponse:
        """Generate a response using generateContent."""
        config = config or GenerationConfig()
        start_time = time.time()

        try:
            response = await self._client.post(
                f"{self.api_url}/models/{self.model}:generateContent",
                json=self._build_payload(messages, config),
            )
            response.raise_for_status()
            data = response.json()

            latency_ms = (time.time() - start_time) * 1000
            usage = data.get("usageMetadata") or {}
            candidates = data.get("candidates") or [{}]

            return LLMResponse(
                content=self._candidate_text(data),
                model=data.get("modelVersion", self.model),
                finish_reason=(candidates[0].get("finishReason") or "").lower() or None,
                usage={
                    "prompt_tokens": usage.get("promptTokenCount", 0),
                    "completion_tokens": usage.get("candidatesTokenCount", 0),
                    "total_tokens": usage.get("totalTokenCount", 0),
                },
                latency_ms=latency_ms,
            )

        except httpx.HTTPStatusError as e:
            logger.error(f"Gemini API error: {e.response.status_code} - {e.response.text}")
            raise
        except httpx.RequestError as e:
            logger.error(f"Gemini connection error: {e}")
            raise

    async def generate_stream(
        self,
        messages: List[Message],
        config: Optional[GenerationConfig] = None,
    ) -> AsyncIterator[str]:
        """Stream a response via server-sent events."""
        config = config or GenerationConfig()

        try:
            async with self._client.stream(
                "POST",
                f"{self.api_url}/models/{self.model}:streamGenerateContent",
                params={"alt": "sse"},
                json=self._build_payload(messages, config),
            ) as response:
                response.raise_for_status()

                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    try:
                        data = json.loads(line[5:].strip())
                    except json.JSONDecodeError:
                        continue
                    text = self._candidate_text(data)
                    if text:
                        yield text

        except httpx.HTTPStatusError as e:
            logger.error(f"Gemini stream error: {e.response.status_code}")
            raise
        except httpx.RequestError as e:
            logger.error(f"Gemini stream connection error: {e}")
            raise

    async def health_check(self) -> bool:
        """Check the model is reachable with the configured key."""
        try:
            response = await self._client.get(f"{self.api_url}/models/{self.model}")
            return response.status_code == 200
        except Exception:
            return False

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()
