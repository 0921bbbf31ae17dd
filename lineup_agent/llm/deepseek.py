"""DeepSeek LLM adapter.

DeepSeek provides OpenAI-compatible API at https://api.deepseek.com
"""

from __future__ import annotations

import httpx

from lineup_agent.config import get_settings
from lineup_agent.llm.base import OpenAICompatibleAdapter


class DeepSeekAdapter(OpenAICompatibleAdapter):
    """DeepSeek API adapter using OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        default_model: str | None = None,
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        super().__init__(
            api_key=settings.deepseek_api_key if api_key is None else api_key,
            base_url=base_url or settings.deepseek_base_url,
            default_model=default_model or settings.deepseek_model_chat,
            timeout=timeout,
            client=client,
        )

    @property
    def provider_name(self) -> str:
        return "deepseek"

    @property
    def available_models(self) -> list[str]:
        return ["deepseek-chat", "deepseek-reasoner"]
