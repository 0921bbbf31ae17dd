"""Goal-directed action graph compiled onto LangGraph.

Graph structure:
START → route → <first eligible action> → route → ... → END
                        ↓ (nothing eligible)
                  handle_stuck → END

Each action declares the conditions it needs (``pre``) and the conditions it
is expected to establish (``post``). After every step the router picks the
first action, in declaration order, whose preconditions hold, whose
postconditions are not all satisfied yet, and which is re-runnable or has not
run. The run ends when the goal condition holds, or via the stuck handler
when no action qualifies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

from langgraph.graph import END, START, StateGraph

from lineup_agent.agent.conditions import Condition
from lineup_agent.agent.state import RunState
from lineup_agent.errors import WorkflowDefinitionError
from lineup_agent.schemas import StuckHandlerResult


logger = logging.getLogger(__name__)

STUCK_NODE = "handle_stuck"
GOAL_REACHED = "goal_reached"

ActionFn = Callable[[RunState], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class Action:
    """A named step gated by preconditions.

    ``run`` returns a partial state update; the graph records the action name
    in ``executed`` after it completes.
    """
    name: str
    run: ActionFn
    pre: tuple[str, ...] = ()
    post: tuple[str, ...] = ()
    can_rerun: bool = False
    cost: float = 0.0
    description: str = ""


class StuckHandler(Protocol):
    """Called when no action can move the run toward its goal."""

    def handle_stuck(self, run_id: str) -> StuckHandlerResult:
        ...


class ActionGraph:
    """Selects and runs eligible actions until the goal holds or the run is stuck."""

    def __init__(
        self,
        actions: list[Action],
        conditions: dict[str, Condition],
        goal: str,
        stuck_handler: StuckHandler,
    ):
        self.actions = list(actions)
        self.conditions = dict(conditions)
        self.goal = goal
        self.stuck_handler = stuck_handler
        self._validate()
        self._compiled = self.build().compile()

    def _validate(self) -> None:
        names = [action.name for action in self.actions]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise WorkflowDefinitionError(
                f"Duplicate action names: {', '.join(duplicates)}",
                details={"actions": duplicates},
            )

        reserved = ({STUCK_NODE, GOAL_REACHED} | set(RunState.__annotations__)) & set(names)
        if reserved:
            raise WorkflowDefinitionError(f"Reserved action names used: {', '.join(sorted(reserved))}")

        referenced = {self.goal}
        for action in self.actions:
            referenced.update(action.pre)
            referenced.update(action.post)
        unknown = sorted(referenced - set(self.conditions))
        if unknown:
            raise WorkflowDefinitionError(
                f"Unknown conditions: {', '.join(unknown)}",
                details={"conditions": unknown},
            )

    # =========================================================================
    # Selection
    # =========================================================================

    def holds(self, condition: str, state: RunState) -> bool:
        return self.conditions[condition](state)

    def is_eligible(self, action: Action, state: RunState) -> bool:
        if not action.can_rerun and action.name in state["executed"]:
            return False
        if not all(self.holds(name, state) for name in action.pre):
            return False
        if action.post and all(self.holds(name, state) for name in action.post):
            return False
        return True

    def next_action(self, state: RunState) -> Action | None:
        """First eligible action in declaration order, or None if stuck."""
        for action in self.actions:
            if self.is_eligible(action, state):
                return action
        return None

    def route(self, state: RunState) -> str:
        """Conditional edge: goal reached, next action name, or stuck."""
        if self.holds(self.goal, state):
            logger.info(f"[{state['run_id']}] Goal {self.goal} satisfied")
            return GOAL_REACHED

        action = self.next_action(state)
        if action is None:
            logger.warning(f"[{state['run_id']}] No eligible action for goal {self.goal}")
            return STUCK_NODE

        logger.info(f"[{state['run_id']}] Selected action {action.name}")
        return action.name

    # =========================================================================
    # Nodes
    # =========================================================================

    def _node(self, action: Action) -> ActionFn:
        async def node(state: RunState) -> dict[str, Any]:
            update = await action.run(state)
            return {**update, "executed": [*state["executed"], action.name]}

        node.__name__ = action.name
        return node

    async def _stuck_node(self, state: RunState) -> dict[str, Any]:
        result = self.stuck_handler.handle_stuck(state["run_id"])
        logger.warning(f"[{state['run_id']}] Stuck: {result.message} ({result.code.value})")
        return {"stuck": result}

    # =========================================================================
    # Builder
    # =========================================================================

    def build(self) -> StateGraph:
        """Build the LangGraph workflow."""
        workflow = StateGraph(RunState)

        for action in self.actions:
            workflow.add_node(action.name, self._node(action))
        workflow.add_node(STUCK_NODE, self._stuck_node)

        targets = {action.name: action.name for action in self.actions}
        targets[STUCK_NODE] = STUCK_NODE
        targets[GOAL_REACHED] = END

        workflow.add_conditional_edges(START, self.route, targets)
        for action in self.actions:
            workflow.add_conditional_edges(action.name, self.route, targets)

        workflow.add_edge(STUCK_NODE, END)

        return workflow

    async def run(self, state: RunState, max_steps: int) -> RunState:
        """Drive the graph from ``state``; ``max_steps`` bounds the number of node executions."""
        return await self._compiled.ainvoke(state, config={"recursion_limit": max_steps})
