"""Structured-output model calls.

``StructuredGenerator`` is the capability the workflow depends on: turn a
prompt into an instance of a pydantic model. ``LLMStructuredGenerator`` is the
production implementation on top of ``ModelRouter``; tests substitute a
scripted stub.
"""

from __future__ import annotations

import json
import logging
from typing import Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from lineup_agent.config import Settings, get_settings
from lineup_agent.errors import ModelCallError, StructuredOutputError
from lineup_agent.llm.router import ModelRouter
from lineup_agent.schemas import LLMMessage


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


SYSTEM_PROMPT = """You are a careful assistant that answers only with JSON.
Never include commentary, markdown fences or trailing text."""

FORMAT_INSTRUCTIONS = """Respond with a single JSON object conforming to this JSON schema:
```json
{schema}
```"""


class StructuredGenerator(Protocol):
    """Capability that produces a typed object from a prompt."""

    async def create_object(self, prompt: str, output_type: type[T]) -> T:
        ...


class LLMStructuredGenerator:
    """Generates pydantic objects by asking the routed LLM for JSON output.

    The reply is validated as-is; malformed output is not repaired.
    """

    def __init__(self, router: ModelRouter, settings: Settings | None = None):
        self.router = router
        self._settings = settings or get_settings()

    def build_messages(self, prompt: str, output_type: type[BaseModel]) -> list[LLMMessage]:
        schema = json.dumps(output_type.model_json_schema(), indent=2)
        return [
            LLMMessage(role="system", content=SYSTEM_PROMPT),
            LLMMessage(
                role="user",
                content=f"{prompt}\n\n{FORMAT_INSTRUCTIONS.format(schema=schema)}",
            ),
        ]

    async def create_object(self, prompt: str, output_type: type[T]) -> T:
        response, provider, model = await self.router.chat_completion(
            messages=self.build_messages(prompt, output_type),
            temperature=self._settings.llm_temperature,
            max_tokens=self._settings.llm_max_tokens,
            response_format={"type": "json_object"},
        )

        if response.finish_reason == "error":
            error = (response.raw_response or {}).get("error", "unknown error")
            raise ModelCallError(
                f"{provider}/{model} request failed: {error}",
                details={"provider": provider, "model": model},
            )

        if not response.content:
            raise StructuredOutputError(
                f"{provider}/{model} returned an empty response",
                details={"provider": provider, "model": model},
            )

        try:
            result = output_type.model_validate_json(response.content)
        except ValidationError as e:
            raise StructuredOutputError(
                f"{provider}/{model} returned output that does not match "
                f"{output_type.__name__}: {e.error_count()} validation error(s)",
                details={"provider": provider, "model": model, "content": response.content[:500]},
            ) from e

        logger.debug(f"Parsed {output_type.__name__} from {provider}/{model}")
        return result
