"""LLM provider adapters, routing and structured output."""

from lineup_agent.llm.router import ModelRouter, get_router
from lineup_agent.llm.structured import LLMStructuredGenerator, StructuredGenerator

__all__ = ["ModelRouter", "get_router", "LLMStructuredGenerator", "StructuredGenerator"]
