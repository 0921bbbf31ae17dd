"""Lineup workflow: run state, conditions, action graph and actions."""

from lineup_agent.agent.workflow import LineupStuckHandler, LineupWorkflow, run_lineup

__all__ = ["LineupStuckHandler", "LineupWorkflow", "run_lineup"]
