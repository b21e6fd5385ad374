"""Schemas for recurring routines (stored and listed only)."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from nextstep.api.schemas.preferences import HHMM_PATTERN

RoutineFrequency = Literal["daily", "weekly", "monthly", "custom"]


class Routine(BaseModel):
    id: str
    task_template_id: str
    task_title: str
    frequency: RoutineFrequency
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    time_of_day: Optional[str] = Field(default=None, pattern=HHMM_PATTERN)


class RoutineCreateRequest(BaseModel):
    task_template_id: str
    task_title: str = Field(..., min_length=1, max_length=200)
    frequency: RoutineFrequency
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    time_of_day: Optional[str] = Field(default=None, pattern=HHMM_PATTERN)


class RoutineResponse(BaseModel):
    routine: Routine
    request_id: str


class RoutineListResponse(BaseModel):
    routines: List[Routine]
    request_id: str
