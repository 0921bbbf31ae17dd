"""Per-run workflow state."""

from __future__ import annotations

from typing import TypedDict
from uuid import uuid4

from lineup_agent.schemas import Lineup, PotentialLineup, StuckHandlerResult


class RunState(TypedDict):
    """State for one lineup run.

    Attributes:
        run_id: Unique identifier for this run
        user_input: Raw player-name text, passed to the prompt untouched
        llm_calls: Model calls made so far; None until eligibility is checked
        candidate: Latest potential lineup (None if the last attempt failed)
        lineup: Accepted lineup once the goal is reached
        stuck: Stuck handler report when the run cannot progress
        executed: Names of actions run, in order
        errors: Messages for attempts that produced no candidate
    """
    run_id: str
    user_input: str
    llm_calls: int | None
    candidate: PotentialLineup | None
    lineup: Lineup | None
    stuck: StuckHandlerResult | None
    executed: list[str]
    errors: list[str]


def initial_state(user_input: str, run_id: str | None = None) -> RunState:
    """Create a fresh state; runs never share one."""
    return RunState(
        run_id=run_id or str(uuid4()),
        user_input=user_input,
        llm_calls=None,
        candidate=None,
        lineup=None,
        stuck=None,
        executed=[],
        errors=[],
    )


def get_llm_calls(state: RunState) -> int:
    """Model calls made so far, treating an uninitialized counter as zero."""
    llm_calls = state.get("llm_calls")
    return 0 if llm_calls is None else llm_calls
