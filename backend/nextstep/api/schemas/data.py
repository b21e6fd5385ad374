"""Schemas for data export and reset."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from nextstep.api.schemas.insights import UserInsights
from nextstep.api.schemas.preferences import UserPreferences
from nextstep.api.schemas.routine import Routine
from nextstep.api.schemas.session import GuidedSession
from nextstep.api.schemas.task import Task
from nextstep.api.schemas.template import TaskTemplate


class ExportDocument(BaseModel):
    version: int
    exported_at: datetime
    tasks: List[Task]
    templates: List[TaskTemplate]
    sessions: List[GuidedSession]
    routines: List[Routine]
    preferences: Optional[UserPreferences]
    insights: Optional[UserInsights]


class ClearDataResponse(BaseModel):
    cleared: bool
    reason: Optional[str] = None
    request_id: str
