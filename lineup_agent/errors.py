"""Exception hierarchy for the lineup agent.

Only configuration and workflow-definition errors are meant to escape a run.
``LLMError`` subclasses are caught by the generator action and recorded as a
failed attempt.
"""

from __future__ import annotations

from typing import Any, Mapping

ErrorDetails = Mapping[str, Any] | None


class LineupAgentError(Exception):
    """Base exception carrying optional structured details."""

    def __init__(self, message: str, *, details: ErrorDetails = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def __str__(self) -> str:
        return self.message


class ConfigurationError(LineupAgentError):
    """Raised when required settings (API keys, providers) are missing or invalid."""


class WorkflowDefinitionError(LineupAgentError):
    """Raised when an action graph references unknown conditions or duplicate names."""


class LLMError(LineupAgentError):
    """Base class for recoverable model-call failures."""


class ModelCallError(LLMError):
    """Raised when the provider could not be reached or returned an error."""


class ModelCallTimeout(LLMError):
    """Raised when a model call exceeds the configured timeout."""


class StructuredOutputError(LLMError):
    """Raised when the model reply is empty or does not match the requested schema."""


def error_response(error: Exception, *, details: ErrorDetails = None) -> dict[str, Any]:
    """Normalize errors into the public API response format."""
    payload: dict[str, Any]
    if isinstance(error, LineupAgentError):
        payload = dict(error.details)
        if details:
            payload.update(details)
    else:
        payload = dict(details or {})

    return {
        "error": {
            "type": error.__class__.__name__,
            "message": str(error),
            "details": payload,
        }
    }


__all__ = [
    "LineupAgentError",
    "ConfigurationError",
    "WorkflowDefinitionError",
    "LLMError",
    "ModelCallError",
    "ModelCallTimeout",
    "StructuredOutputError",
    "error_response",
]
