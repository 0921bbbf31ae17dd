"""Pydantic schemas for the lineup agent I/O contracts.

These schemas define the contracts between:
- the workflow and the structured-output model call
- the workflow and its callers (API, CLI)
- the LLM adapters and provider APIs
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================

class Position(str, Enum):
    """Field positions a player can be assigned to. Only BENCH may repeat."""
    PITCHER = "PITCHER"
    CATCHER = "CATCHER"
    FIRST_BASE = "FIRST_BASE"
    SECOND_BASE = "SECOND_BASE"
    THIRD_BASE = "THIRD_BASE"
    SHORTSTOP = "SHORTSTOP"
    LEFT_FIELD = "LEFT_FIELD"
    CENTER_FIELD = "CENTER_FIELD"
    RIGHT_FIELD = "RIGHT_FIELD"
    BENCH = "BENCH"


class RunStatus(str, Enum):
    """Terminal status of a lineup run."""
    COMPLETED = "completed"
    STUCK = "stuck"


class StuckHandlingResultCode(str, Enum):
    """Outcome reported by a stuck handler."""
    NO_RESOLUTION = "no_resolution"


# =============================================================================
# Lineup Schemas
# =============================================================================

class Player(BaseModel):
    """A named player and the position assigned to them (None = unassigned)."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Player name as given in the input")
    position: Position | None = Field(default=None, description="Assigned field position")


class PotentialLineup(BaseModel):
    """Unvalidated lineup proposed by the model."""
    players: list[Player] = Field(default_factory=list, description="Players in input order")


class Lineup(BaseModel):
    """Accepted lineup, copied from a validated PotentialLineup."""
    players: list[Player] = Field(..., description="Players in input order")

    def to_markdown(self) -> str:
        """Render lineup as a markdown table."""
        md = "| # | Player | Position |\n|---|---|---|\n"
        for i, player in enumerate(self.players, 1):
            position = player.position.value if player.position else "UNASSIGNED"
            md += f"| {i} | {player.name} | {position} |\n"
        return md


# =============================================================================
# Run Results
# =============================================================================

class StuckHandlerResult(BaseModel):
    """Terminal, non-retriable report produced when no action can make progress."""
    message: str = Field(..., description="Human-readable explanation")
    code: StuckHandlingResultCode = Field(default=StuckHandlingResultCode.NO_RESOLUTION)
    handler: str = Field(..., description="Name of the handler that produced this result")
    run_id: str


class LineupRunResult(BaseModel):
    """Outcome of one lineup run. Exactly one of lineup/stuck is set."""
    run_id: str
    status: RunStatus
    lineup: Lineup | None = None
    stuck: StuckHandlerResult | None = None
    llm_calls: int = Field(default=0, ge=0, description="Model calls made during the run")
    actions: list[str] = Field(default_factory=list, description="Actions executed, in order")
    errors: list[str] = Field(default_factory=list, description="Failed attempt messages")


# =============================================================================
# API Request Schemas
# =============================================================================

class LineupRequest(BaseModel):
    """API request to generate a lineup."""
    players: str = Field(..., min_length=1, description="Player names, comma or newline separated")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"players": "Alice, Bob, Carl, Dan, Eve, Frank, Grace, Hank, Ivy"}
        }
    )


# =============================================================================
# LLM Schemas
# =============================================================================

class LLMMessage(BaseModel):
    """A single message in an LLM conversation."""
    role: Literal["system", "user", "assistant"] = Field(...)
    content: str = Field(...)


class LLMResponse(BaseModel):
    """Response from an LLM provider."""
    content: str | None = None
    model: str
    usage: dict[str, Any] = Field(default_factory=dict)
    finish_reason: str | None = None
    latency_ms: int | None = None
    raw_response: dict[str, Any] | None = None
