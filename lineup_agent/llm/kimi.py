"""Kimi/Moonshot LLM adapter.

Moonshot AI provides OpenAI-compatible API at https://api.moonshot.cn/v1
"""

from __future__ import annotations

import httpx

from lineup_agent.config import get_settings
from lineup_agent.llm.base import OpenAICompatibleAdapter


class KimiAdapter(OpenAICompatibleAdapter):
    """Kimi/Moonshot API adapter using OpenAI-compatible endpoint."""

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
            api_key=settings.kimi_api_key if api_key is None else api_key,
            base_url=base_url or settings.kimi_base_url,
            default_model=default_model or settings.kimi_model,
            timeout=timeout,
            client=client,
        )

    @property
    def provider_name(self) -> str:
        return "kimi"

    @property
    def available_models(self) -> list[str]:
        return ["moonshot-v1-8k", "moonshot-v1-32k", "moonshot-v1-128k"]
