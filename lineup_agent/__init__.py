"""Lineup Agent: assigns baseball positions to players with a budgeted LLM workflow."""

__version__ = "0.1.0"
