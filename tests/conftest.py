"""
Shared pytest fixtures for lineup agent tests.

Provides:
- Test settings (no real API keys, short timeouts)
- A scripted structured generator standing in for the LLM
- Lineup builders
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest
from pydantic import BaseModel

from lineup_agent.config import Settings, get_settings
from lineup_agent.schemas import Player, Position, PotentialLineup


NAMES = [
    "Alice", "Bob", "Carl", "Dan", "Eve", "Frank", "Grace", "Hank", "Ivy",
    "Jack", "Kim", "Lou", "Mo", "Ned", "Olga", "Pat", "Quin", "Rae", "Sam", "Tia",
]

FIELD_POSITIONS = [position for position in Position if position != Position.BENCH]

# Outcome marker: the call never returns on its own
HANG = object()


def build_lineup(size: int) -> PotentialLineup:
    """Lineup of ``size`` players; the first nine get distinct field positions, the rest BENCH."""
    players = []
    for i in range(size):
        position = FIELD_POSITIONS[i] if i < len(FIELD_POSITIONS) else Position.BENCH
        players.append(Player(name=NAMES[i % len(NAMES)], position=position))
    return PotentialLineup(players=players)


class ScriptedGenerator:
    """Structured generator returning queued outcomes in order.

    An outcome is a model instance to return, an exception to raise, or HANG.
    Once the script runs out every call returns an empty lineup.
    """

    def __init__(self, outcomes: list[Any] | None = None):
        self.outcomes = list(outcomes or [])
        self.prompts: list[str] = []
        self.output_types: list[type[BaseModel]] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def create_object(self, prompt: str, output_type: type[BaseModel]) -> Any:
        self.prompts.append(prompt)
        self.output_types.append(output_type)
        outcome = self.outcomes.pop(0) if self.outcomes else PotentialLineup(players=[])
        if outcome is HANG:
            await asyncio.sleep(3600)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        deepseek_api_key="test-deepseek-key",
        kimi_api_key="test-kimi-key",
        max_llm_calls=3,
        min_lineup_size=9,
        llm_call_timeout_seconds=5.0,
    )


@pytest.fixture
def make_lineup() -> Callable[[int], PotentialLineup]:
    return build_lineup


@pytest.fixture
def scripted() -> Callable[..., ScriptedGenerator]:
    def factory(*outcomes: Any) -> ScriptedGenerator:
        return ScriptedGenerator(list(outcomes))

    return factory
