"""LLM Router for provider selection and fallback logic.

Strategy:
- Send every request to the primary provider
- On an error response or adapter failure: retry once on the fallback provider
- A fallback provider without an API key is skipped
"""

from __future__ import annotations

import logging

import httpx

from lineup_agent.config import Settings, get_settings
from lineup_agent.errors import ConfigurationError, LineupAgentError
from lineup_agent.schemas import LLMMessage, LLMResponse
from lineup_agent.llm.base import LLMAdapter
from lineup_agent.llm.deepseek import DeepSeekAdapter
from lineup_agent.llm.kimi import KimiAdapter


logger = logging.getLogger(__name__)


class ModelRouter:
    """Routes LLM requests to the configured providers with fallback logic."""

    def __init__(self, settings: Settings | None = None):
        settings = settings or get_settings()
        self.primary_provider = settings.primary_provider
        self.fallback_provider = settings.fallback_provider

        # Initialize adapters lazily
        self._adapters: dict[str, LLMAdapter] = {}
        self._settings = settings

    def _get_adapter(self, provider: str) -> LLMAdapter:
        """Get or create an adapter for a provider."""
        if provider not in self._adapters:
            if provider == "deepseek":
                self._adapters["deepseek"] = DeepSeekAdapter(
                    api_key=self._settings.deepseek_api_key,
                    base_url=self._settings.deepseek_base_url,
                    default_model=self._settings.deepseek_model_chat,
                )
            elif provider == "kimi":
                self._adapters["kimi"] = KimiAdapter(
                    api_key=self._settings.kimi_api_key,
                    base_url=self._settings.kimi_base_url,
                    default_model=self._settings.kimi_model,
                )
            else:
                raise ConfigurationError(f"Unknown provider: {provider}")
        return self._adapters[provider]

    def _get_model(self, provider: str) -> str:
        if provider == "deepseek":
            return self._settings.deepseek_model_chat
        return self._settings.kimi_model

    def _is_configured(self, provider: str) -> bool:
        """Whether an adapter exists or can be built for ``provider``."""
        if provider in self._adapters:
            return True
        if provider == "deepseek":
            return bool(self._settings.deepseek_api_key)
        if provider == "kimi":
            return bool(self._settings.kimi_api_key)
        return False

    def _has_fallback(self) -> bool:
        return (
            bool(self.fallback_provider)
            and self.fallback_provider != self.primary_provider
            and self._is_configured(self.fallback_provider)
        )

    async def chat_completion(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 2048,
        response_format: dict[str, str] | None = None,
        allow_fallback: bool = True,
    ) -> tuple[LLMResponse, str, str]:
        """Route a chat completion request with fallback.

        Args:
            messages: Conversation messages
            temperature: Sampling temperature
            max_tokens: Max response tokens
            response_format: Response format config
            allow_fallback: Whether to try fallback on failure

        Returns:
            Tuple of (response, provider_used, model_used)
        """
        provider = self.primary_provider
        model = self._get_model(provider)
        use_fallback = allow_fallback and self._has_fallback()

        logger.info(f"Routing request to {provider}/{model}")

        try:
            adapter = self._get_adapter(provider)
            response = await adapter.chat_completion(
                messages=messages,
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format=response_format,
            )
        except (LineupAgentError, httpx.HTTPError) as e:
            logger.error(f"Error with {provider}: {e}")
            if not use_fallback:
                raise
            return await self._try_fallback(messages, temperature, max_tokens, response_format)

        if response.finish_reason == "error" and use_fallback:
            logger.warning(f"Primary provider {provider} failed, trying fallback")
            return await self._try_fallback(messages, temperature, max_tokens, response_format)

        return (response, provider, model)

    async def _try_fallback(
        self,
        messages: list[LLMMessage],
        temperature: float,
        max_tokens: int,
        response_format: dict[str, str] | None,
    ) -> tuple[LLMResponse, str, str]:
        """Try the fallback provider."""
        fallback_provider = self.fallback_provider
        model = self._get_model(fallback_provider)

        logger.info(f"Falling back to {fallback_provider}/{model}")

        adapter = self._get_adapter(fallback_provider)
        response = await adapter.chat_completion(
            messages=messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format=response_format,
        )

        return (response, fallback_provider, model)

    async def close(self) -> None:
        """Close all adapters."""
        for adapter in self._adapters.values():
            await adapter.close()
        self._adapters.clear()


# Singleton instance
_router: ModelRouter | None = None


def get_router() -> ModelRouter:
    """Get the global model router instance."""
    global _router
    if _router is None:
        _router = ModelRouter()
    return _router
