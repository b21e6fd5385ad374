"""Guided session models and schemas for /sessions."""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from nextstep.api.schemas.task import MicroStep

SessionStatus = Literal["active", "completed", "paused", "abandoned"]
SessionOutcome = Literal["idle", "active", "ignored", "started", "advanced", "completed", "exhausted", "shrunk", "ended"]


class GuidedSession(BaseModel):
    """One run through a task's micro-steps.

    `micro_steps` is a private copy of the task's steps. `completed_steps` only
    grows on completion; skipping moves `current_step_index` forward without
    touching it, so the two may diverge.
    """

    id: str
    task_id: str
    task_title: str
    micro_steps: List[MicroStep]
    current_step_index: int = Field(default=0, ge=0)
    started_at: datetime
    completed_steps: List[str] = Field(default_factory=list)
    status: SessionStatus = "active"


class SessionStartRequest(BaseModel):
    task_id: str


class SessionEndRequest(BaseModel):
    completed: bool = False


class SessionStateResponse(BaseModel):
    outcome: SessionOutcome
    session: Optional[GuidedSession]
    finished: Optional[GuidedSession] = None
    current_step: Optional[MicroStep] = None
    suggest_break: bool = False
    break_minutes: Optional[int] = None
    request_id: str


class SessionHistoryResponse(BaseModel):
    sessions: List[GuidedSession]
    request_id: str
