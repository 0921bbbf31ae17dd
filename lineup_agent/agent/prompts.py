"""Prompt templates for the lineup generator."""

from __future__ import annotations

from lineup_agent.schemas import Position


LINEUP_PROMPT = """You are given a list of baseball player names. For each name, assign one of the following positions: {positions}.
Here are the player names:
{player_list}"""


def format_lineup_prompt(player_list: str) -> str:
    """Format the lineup instruction; the player list is passed through unchanged."""
    members = [position.value for position in Position]
    positions = ", ".join(members[:-1]) + f", and {members[-1]}"
    return LINEUP_PROMPT.format(positions=positions, player_list=player_list).strip()
