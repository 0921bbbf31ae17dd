"""Named conditions evaluated by the action graph.

Every condition is a pure predicate over ``RunState``.
"""

from __future__ import annotations

from functools import partial
from typing import Callable

from lineup_agent.agent.state import RunState, get_llm_calls
from lineup_agent.config import Settings

Condition = Callable[[RunState], bool]

LLM_CALLS_INITIALIZED = "llmCallsInitialized"
CAN_CALL_LLM = "canCallLlm"
VALID_LINEUP = "validLineup"
LINEUP_COMPLETE = "lineupComplete"

MAX_LLM_CALLS = 3
MIN_LINEUP_SIZE = 9


def llm_calls_initialized(state: RunState) -> bool:
    return state.get("llm_calls") is not None


def can_call_llm(state: RunState, max_llm_calls: int = MAX_LLM_CALLS) -> bool:
    """True while the budget allows another model call.

    The ceiling is inclusive, so ``max_llm_calls + 1`` attempts are made
    before the budget runs out.
    """
    return get_llm_calls(state) <= max_llm_calls


def is_valid_lineup(state: RunState, min_lineup_size: int = MIN_LINEUP_SIZE) -> bool:
    """True if the latest candidate has at least ``min_lineup_size`` players.

    Larger rosters pass, and repeated non-BENCH positions are not rejected.
    """
    candidate = state.get("candidate")
    return candidate is not None and len(candidate.players) >= min_lineup_size


def lineup_complete(state: RunState) -> bool:
    return state.get("lineup") is not None


def build_conditions(settings: Settings) -> dict[str, Condition]:
    """Condition registry bound to the configured budget and roster size."""
    return {
        LLM_CALLS_INITIALIZED: llm_calls_initialized,
        CAN_CALL_LLM: partial(can_call_llm, max_llm_calls=settings.max_llm_calls),
        VALID_LINEUP: partial(is_valid_lineup, min_lineup_size=settings.min_lineup_size),
        LINEUP_COMPLETE: lineup_complete,
    }
