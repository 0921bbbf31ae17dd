"""Base classes for LLM adapters."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from lineup_agent.errors import ConfigurationError
from lineup_agent.schemas import LLMMessage, LLMResponse


class LLMAdapter(ABC):
    """Abstract base class for LLM provider adapters.

    All LLM providers (DeepSeek, Kimi, etc.) implement this interface
    to ensure consistent behavior across providers.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'deepseek', 'kimi')."""
        ...

    @property
    @abstractmethod
    def available_models(self) -> list[str]:
        """Return list of available model names for this provider."""
        ...

    @abstractmethod
    async def chat_completion(
        self,
        messages: list[LLMMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        response_format: dict[str, str] | None = None,
    ) -> LLMResponse:
        """Send a chat completion request.

        Args:
            messages: List of conversation messages
            model: Model name (uses default if None)
            temperature: Sampling temperature (0-2)
            max_tokens: Maximum tokens in response
            response_format: Optional response format (e.g., {"type": "json_object"})

        Returns:
            LLMResponse with content, or finish_reason "error" on failure
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release any underlying connections."""
        ...

    def _build_request(
        self,
        messages: list[LLMMessage],
        model: str,
        temperature: float,
        max_tokens: int,
        response_format: dict[str, str] | None,
    ) -> dict[str, Any]:
        """Build the API request payload."""
        payload: dict[str, Any] = {
            "model": model,
            "messages": [m.model_dump(exclude_none=True) for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        if response_format:
            payload["response_format"] = response_format

        return payload


class OpenAICompatibleAdapter(LLMAdapter):
    """Adapter for providers exposing an OpenAI-style /chat/completions endpoint.

    Subclasses only supply the provider name, credentials and model list.
    HTTP failures are reported as an ``LLMResponse`` with
    ``finish_reason="error"`` so the router can fall back.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        default_model: str,
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ):
        if not api_key:
            raise ConfigurationError(
                f"{self.provider_name} API key not configured",
                details={"provider": self.provider_name},
            )

        self.api_key = api_key
        self.base_url = base_url
        self.default_model = default_model
        self.timeout = timeout

        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    async def chat_completion(
        self,
        messages: list[LLMMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        response_format: dict[str, str] | None = None,
    ) -> LLMResponse:
        model = model or self.default_model

        payload = self._build_request(
            messages=messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format=response_format,
        )

        start_time = time.perf_counter()

        try:
            response = await self._client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            return LLMResponse(
                content=None,
                model=model,
                finish_reason="error",
                raw_response={"error": str(e), "status_code": e.response.status_code},
            )
        except (httpx.HTTPError, ValueError) as e:
            return LLMResponse(
                content=None,
                model=model,
                finish_reason="error",
                raw_response={"error": str(e)},
            )

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        try:
            choice = (data.get("choices") or [{}])[0]
            message = choice.get("message", {})
            return LLMResponse(
                content=message.get("content"),
                model=data.get("model", model),
                usage=data.get("usage") or {},
                finish_reason=choice.get("finish_reason"),
                latency_ms=latency_ms,
                raw_response=data,
            )
        except (AttributeError, TypeError, IndexError, ValueError) as e:
            # Body is JSON but not a chat completion
            return LLMResponse(
                content=None,
                model=model,
                finish_reason="error",
                latency_ms=latency_ms,
                raw_response={"error": f"Malformed completion body: {e}", "body": repr(data)[:500]},
            )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
