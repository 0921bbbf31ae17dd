"""Lineup workflow: actions, stuck handler and public entry points.

Action graph (see ``lineup_agent.agent.graph``):

check_llm_eligibility        pre: -                              post: llmCallsInitialized
generate_potential_lineup    pre: llmCallsInitialized, canCallLlm post: validLineup   (re-runnable)
complete_lineup              pre: validLineup                    post: lineupComplete  (goal)

When the budget is spent without a valid candidate, LineupStuckHandler ends
the run with NO_RESOLUTION.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from lineup_agent.agent.conditions import (
    CAN_CALL_LLM,
    LINEUP_COMPLETE,
    LLM_CALLS_INITIALIZED,
    VALID_LINEUP,
    build_conditions,
)
from lineup_agent.agent.graph import Action, ActionGraph, StuckHandler
from lineup_agent.agent.prompts import format_lineup_prompt
from lineup_agent.agent.state import RunState, get_llm_calls, initial_state
from lineup_agent.config import Settings, get_settings
from lineup_agent.errors import LLMError, ModelCallTimeout
from lineup_agent.llm.router import ModelRouter
from lineup_agent.llm.structured import LLMStructuredGenerator, StructuredGenerator
from lineup_agent.schemas import (
    Lineup,
    LineupRunResult,
    PotentialLineup,
    RunStatus,
    StuckHandlerResult,
    StuckHandlingResultCode,
)


logger = logging.getLogger(__name__)

STUCK_MESSAGE = (
    "Cannot complete lineup: stuck because we called the LLM too many times "
    "and we don't want to run out of money"
)


class LineupStuckHandler:
    """Ends a run that exhausted its model-call budget. Never calls the model."""

    name = "LineupStuckHandler"

    def handle_stuck(self, run_id: str) -> StuckHandlerResult:
        return StuckHandlerResult(
            message=STUCK_MESSAGE,
            code=StuckHandlingResultCode.NO_RESOLUTION,
            handler=self.name,
            run_id=run_id,
        )


class LineupWorkflow:
    """Assigns field positions to players with a bounded number of model calls."""

    def __init__(
        self,
        generator: StructuredGenerator,
        settings: Settings | None = None,
        stuck_handler: StuckHandler | None = None,
    ):
        self.generator = generator
        self.settings = settings or get_settings()
        self.graph = ActionGraph(
            actions=self.actions(),
            conditions=build_conditions(self.settings),
            goal=LINEUP_COMPLETE,
            stuck_handler=stuck_handler or LineupStuckHandler(),
        )

    def actions(self) -> list[Action]:
        return [
            Action(
                name="check_llm_eligibility",
                run=self.check_llm_eligibility,
                post=(LLM_CALLS_INITIALIZED,),
                description="initializes the model-call counter",
            ),
            Action(
                name="generate_potential_lineup",
                run=self.generate_potential_lineup,
                pre=(LLM_CALLS_INITIALIZED, CAN_CALL_LLM),
                post=(VALID_LINEUP,),
                can_rerun=True,
                cost=100.0,
                description="calls the LLM to generate a potential baseball lineup",
            ),
            Action(
                name="complete_lineup",
                run=self.complete_lineup,
                pre=(VALID_LINEUP,),
                post=(LINEUP_COMPLETE,),
                description="accepts the validated lineup",
            ),
        ]

    # =========================================================================
    # Actions
    # =========================================================================

    async def check_llm_eligibility(self, state: RunState) -> dict[str, Any]:
        if state.get("llm_calls") is None:
            return {"llm_calls": 0}
        return {}

    async def generate_potential_lineup(self, state: RunState) -> dict[str, Any]:
        """Ask the model for a new candidate. Every attempt consumes budget."""
        llm_calls = get_llm_calls(state) + 1
        run_id = state["run_id"]
        timeout = self.settings.llm_call_timeout_seconds

        logger.info(f"[{run_id}] Generating potential lineup (call {llm_calls})")

        try:
            candidate = await asyncio.wait_for(
                self.generator.create_object(
                    format_lineup_prompt(state["user_input"]),
                    PotentialLineup,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            error: LLMError = ModelCallTimeout(f"Model call timed out after {timeout:g}s")
        except LLMError as e:
            error = e
        else:
            logger.info(f"[{run_id}] Model proposed {len(candidate.players)} players")
            return {"llm_calls": llm_calls, "candidate": candidate}

        logger.warning(f"[{run_id}] Call {llm_calls} produced no lineup: {error}")
        return {
            "llm_calls": llm_calls,
            "candidate": None,
            "errors": [*state["errors"], f"call {llm_calls}: {error}"],
        }

    async def complete_lineup(self, state: RunState) -> dict[str, Any]:
        candidate = state["candidate"]
        logger.info(f"[{state['run_id']}] Completing lineup with {len(candidate.players)} players")
        return {"lineup": Lineup(players=list(candidate.players))}

    # =========================================================================
    # Public API
    # =========================================================================

    async def run(self, user_input: str, run_id: str | None = None) -> LineupRunResult:
        """Execute one run and return its terminal result.

        Args:
            user_input: Raw player names
            run_id: Optional run ID (generated if not provided)
        """
        state = initial_state(user_input, run_id)

        logger.info(f"Starting lineup run {state['run_id']}")

        # one step per action attempt plus routing headroom
        max_steps = len(self.graph.actions) + self.settings.max_llm_calls + 5
        final = await self.graph.run(state, max_steps=max_steps)

        lineup = final.get("lineup")
        result = LineupRunResult(
            run_id=final["run_id"],
            status=RunStatus.COMPLETED if lineup is not None else RunStatus.STUCK,
            lineup=lineup,
            stuck=final.get("stuck") if lineup is None else None,
            llm_calls=get_llm_calls(final),
            actions=final["executed"],
            errors=final["errors"],
        )

        logger.info(
            f"Lineup run {result.run_id} finished with status {result.status.value} "
            f"after {result.llm_calls} LLM call(s)"
        )

        return result


async def run_lineup(
    user_input: str,
    run_id: str | None = None,
    settings: Settings | None = None,
) -> LineupRunResult:
    """Run the lineup workflow against the configured LLM providers.

    The provider clients live only for this run and are closed before returning.
    """
    settings = settings or get_settings()
    router = ModelRouter(settings)
    try:
        generator = LLMStructuredGenerator(router, settings=settings)
        return await LineupWorkflow(generator, settings=settings).run(user_input, run_id)
    finally:
        await router.close()
