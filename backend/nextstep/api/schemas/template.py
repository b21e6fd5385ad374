"""Schemas for the template library."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from nextstep.api.schemas.task import TaskCategory


class StepBlueprint(BaseModel):
    """Template step without identity or completion state."""

    text: str
    suggested_minutes: Optional[int] = Field(default=None, ge=1)


class TaskTemplate(BaseModel):
    id: str
    name: str
    category: TaskCategory
    micro_steps: List[StepBlueprint]
    is_built_in: bool = False
    usage_count: Optional[int] = None


class QuickAddPreset(BaseModel):
    label: str
    template_id: str


class TemplateResponse(BaseModel):
    template: TaskTemplate
    request_id: str


class TemplateListResponse(BaseModel):
    templates: List[TaskTemplate]
    request_id: str


class PresetListResponse(BaseModel):
    presets: List[QuickAddPreset]
    request_id: str
