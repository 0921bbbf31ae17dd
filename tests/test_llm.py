"""Provider adapters, routing fallback and structured output parsing."""

from __future__ import annotations

import json

import httpx
import pytest

from lineup_agent.errors import ConfigurationError, ModelCallError, StructuredOutputError
from lineup_agent.llm.deepseek import DeepSeekAdapter
from lineup_agent.llm.router import ModelRouter
from lineup_agent.llm.structured import LLMStructuredGenerator
from lineup_agent.schemas import LLMMessage, LLMResponse, Position, PotentialLineup


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url="https://llm.test", transport=httpx.MockTransport(handler))


class FakeAdapter:
    def __init__(self, response: LLMResponse):
        self.response = response
        self.requests: list[dict] = []

    async def chat_completion(self, messages, model=None, **kwargs) -> LLMResponse:
        self.requests.append({"messages": messages, "model": model, **kwargs})
        return self.response

    async def close(self) -> None:
        pass


class FakeRouter:
    def __init__(self, response: LLMResponse):
        self.response = response
        self.calls: list[dict] = []

    async def chat_completion(self, **kwargs):
        self.calls.append(kwargs)
        return self.response, "deepseek", "deepseek-chat"


# ════════════════════════════════════════════════════════════════════
# Adapters
# ════════════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_adapter_posts_chat_completion():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["payload"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "model": "deepseek-chat",
                "choices": [{"message": {"content": "{\"players\": []}"}, "finish_reason": "stop"}],
                "usage": {"total_tokens": 12},
            },
        )

    adapter = DeepSeekAdapter(api_key="key", client=_client(handler))
    response = await adapter.chat_completion(
        [LLMMessage(role="user", content="hi")],
        response_format={"type": "json_object"},
    )
    await adapter.close()

    assert seen["path"] == "/chat/completions"
    assert seen["payload"]["messages"] == [{"role": "user", "content": "hi"}]
    assert seen["payload"]["response_format"] == {"type": "json_object"}
    assert response.content == "{\"players\": []}"
    assert response.finish_reason == "stop"
    assert response.usage == {"total_tokens": 12}


@pytest.mark.asyncio
async def test_adapter_reports_http_errors_as_error_response():
    adapter = DeepSeekAdapter(
        api_key="key",
        client=_client(lambda request: httpx.Response(503, json={"error": "overloaded"})),
    )

    response = await adapter.chat_completion([LLMMessage(role="user", content="hi")])

    assert response.finish_reason == "error"
    assert response.content is None
    assert response.raw_response["status_code"] == 503


@pytest.mark.asyncio
async def test_adapter_reports_transport_errors_as_error_response():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    adapter = DeepSeekAdapter(api_key="key", client=_client(handler))

    response = await adapter.chat_completion([LLMMessage(role="user", content="hi")])

    assert response.finish_reason == "error"
    assert "connection refused" in response.raw_response["error"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        ["not", "an", "object"],
        {"choices": [None]},
        {"choices": [{"message": None}]},
        {"choices": [{"message": {"content": 42}}]},
        {"choices": [{"message": {"content": "{}"}}], "usage": ["tokens"]},
    ],
)
async def test_adapter_reports_malformed_body_as_error_response(body):
    adapter = DeepSeekAdapter(
        api_key="key",
        client=_client(lambda request: httpx.Response(200, json=body)),
    )

    response = await adapter.chat_completion([LLMMessage(role="user", content="hi")])

    assert response.finish_reason == "error"
    assert response.content is None
    assert "Malformed completion body" in response.raw_response["error"]


def test_adapter_requires_api_key():
    with pytest.raises(ConfigurationError, match="API key"):
        DeepSeekAdapter(api_key="")


# ════════════════════════════════════════════════════════════════════
# Router
# ════════════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_router_uses_primary_provider(settings):
    router = ModelRouter(settings)
    primary = FakeAdapter(LLMResponse(content="{}", model="deepseek-chat", finish_reason="stop"))
    router._adapters["deepseek"] = primary

    response, provider, model = await router.chat_completion([LLMMessage(role="user", content="x")])

    assert (provider, model) == ("deepseek", settings.deepseek_model_chat)
    assert response.content == "{}"
    assert primary.requests[0]["model"] == settings.deepseek_model_chat


@pytest.mark.asyncio
async def test_router_falls_back_on_error_response(settings):
    router = ModelRouter(settings)
    router._adapters["deepseek"] = FakeAdapter(LLMResponse(model="deepseek-chat", finish_reason="error"))
    fallback = FakeAdapter(LLMResponse(content="{}", model="moonshot-v1-32k", finish_reason="stop"))
    router._adapters["kimi"] = fallback

    response, provider, model = await router.chat_completion([LLMMessage(role="user", content="x")])

    assert provider == "kimi"
    assert model == settings.kimi_model
    assert len(fallback.requests) == 1


@pytest.mark.asyncio
async def test_router_falls_back_when_primary_is_not_configured(settings):
    settings = settings.model_copy(update={"deepseek_api_key": ""})
    router = ModelRouter(settings)
    router._adapters["kimi"] = FakeAdapter(LLMResponse(content="{}", model="moonshot-v1-32k"))

    _, provider, _ = await router.chat_completion([LLMMessage(role="user", content="x")])

    assert provider == "kimi"


@pytest.mark.asyncio
async def test_router_without_fallback_raises_configuration_error(settings):
    settings = settings.model_copy(update={"deepseek_api_key": "", "fallback_provider": None})
    router = ModelRouter(settings)

    with pytest.raises(ConfigurationError):
        await router.chat_completion([LLMMessage(role="user", content="x")])


@pytest.mark.asyncio
async def test_router_returns_error_response_when_fallback_disabled(settings):
    router = ModelRouter(settings)
    router._adapters["deepseek"] = FakeAdapter(LLMResponse(model="deepseek-chat", finish_reason="error"))

    response, provider, _ = await router.chat_completion(
        [LLMMessage(role="user", content="x")], allow_fallback=False
    )

    assert provider == "deepseek"
    assert response.finish_reason == "error"


@pytest.mark.asyncio
async def test_router_passes_its_own_models_to_adapters(settings):
    settings = settings.model_copy(
        update={"deepseek_model_chat": "deepseek-reasoner", "kimi_model": "moonshot-v1-8k"}
    )
    router = ModelRouter(settings)

    assert router._get_adapter("deepseek").default_model == "deepseek-reasoner"
    assert router._get_adapter("kimi").default_model == "moonshot-v1-8k"
    await router.close()


@pytest.mark.asyncio
async def test_router_skips_fallback_without_api_key(settings):
    settings = settings.model_copy(update={"kimi_api_key": ""})
    router = ModelRouter(settings)
    router._adapters["deepseek"] = FakeAdapter(
        LLMResponse(model="deepseek-chat", finish_reason="error", raw_response={"error": "503"})
    )

    response, provider, _ = await router.chat_completion([LLMMessage(role="user", content="x")])

    assert provider == "deepseek"
    assert response.finish_reason == "error"
    assert "kimi" not in router._adapters


# ════════════════════════════════════════════════════════════════════
# Structured output
# ════════════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_structured_generator_parses_lineup(settings):
    content = json.dumps(
        {"players": [{"name": "Alice", "position": "PITCHER"}, {"name": "Bob", "position": "BENCH"}]}
    )
    router = FakeRouter(LLMResponse(content=content, model="deepseek-chat", finish_reason="stop"))

    lineup = await LLMStructuredGenerator(router, settings=settings).create_object("assign", PotentialLineup)

    assert [p.position for p in lineup.players] == [Position.PITCHER, Position.BENCH]
    call = router.calls[0]
    assert call["response_format"] == {"type": "json_object"}
    assert call["temperature"] == settings.llm_temperature
    user_message = call["messages"][-1]
    assert user_message.role == "user"
    assert user_message.content.startswith("assign")
    assert "\"players\"" in user_message.content


@pytest.mark.asyncio
async def test_structured_generator_rejects_unknown_position(settings):
    content = json.dumps({"players": [{"name": "Alice", "position": "GOALIE"}]})
    router = FakeRouter(LLMResponse(content=content, model="deepseek-chat"))

    with pytest.raises(StructuredOutputError, match="PotentialLineup"):
        await LLMStructuredGenerator(router, settings=settings).create_object("assign", PotentialLineup)


@pytest.mark.asyncio
async def test_structured_generator_rejects_non_json(settings):
    router = FakeRouter(LLMResponse(content="Sure! Here is your lineup", model="deepseek-chat"))

    with pytest.raises(StructuredOutputError):
        await LLMStructuredGenerator(router, settings=settings).create_object("assign", PotentialLineup)


@pytest.mark.asyncio
async def test_structured_generator_rejects_empty_content(settings):
    router = FakeRouter(LLMResponse(content=None, model="deepseek-chat", finish_reason="stop"))

    with pytest.raises(StructuredOutputError, match="empty"):
        await LLMStructuredGenerator(router, settings=settings).create_object("assign", PotentialLineup)


@pytest.mark.asyncio
async def test_structured_generator_raises_model_call_error(settings):
    router = FakeRouter(
        LLMResponse(model="deepseek-chat", finish_reason="error", raw_response={"error": "timeout"})
    )

    with pytest.raises(ModelCallError, match="timeout"):
        await LLMStructuredGenerator(router, settings=settings).create_object("assign", PotentialLineup)
