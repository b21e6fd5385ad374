"""Task and micro-step models, plus request/response schemas for /tasks."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

TaskCategory = Literal["home", "work", "self-care", "admin", "planning", "other"]
TaskContext = Literal["home", "office", "phone", "computer", "anywhere"]
EnergyLevel = Literal["low", "medium", "high"]

TASK_CATEGORIES: tuple[str, ...] = ("home", "work", "self-care", "admin", "planning", "other")

CATEGORY_LABELS = {
    "home": "Home",
    "work": "Work",
    "self-care": "Self-care",
    "admin": "Admin",
    "planning": "Planning",
    "other": "Other",
}


class MicroStep(BaseModel):
    """A small time-boxed action; `order` is unique within its task."""

    id: str
    text: str
    order: int = Field(..., ge=0)
    suggested_minutes: Optional[int] = Field(default=None, ge=1)
    completed: Optional[bool] = None


class Task(BaseModel):
    id: str
    title: str
    category: Optional[TaskCategory] = None
    context: Optional[TaskContext] = None
    energy_level: Optional[EnergyLevel] = None
    due_date: Optional[date] = None
    micro_steps: Optional[List[MicroStep]] = None
    template_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None


class TaskCreateRequest(BaseModel):
    title: Optional[str] = Field(default=None, max_length=200)
    category: Optional[TaskCategory] = None
    context: Optional[TaskContext] = None
    energy_level: Optional[EnergyLevel] = None
    due_date: Optional[date] = None
    template_id: Optional[str] = None

    @field_validator("title")
    @classmethod
    def trim_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class TaskUpdateRequest(BaseModel):
    """Partial update; only fields present in the payload are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[TaskCategory] = None
    context: Optional[TaskContext] = None
    energy_level: Optional[EnergyLevel] = None
    due_date: Optional[date] = None
    micro_steps: Optional[List[MicroStep]] = None
    template_id: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_null(cls, value: Optional[str]) -> Optional[str]:
        # A task always has a title; omit the field to leave it unchanged.
        if value is None:
            raise ValueError("title cannot be null")
        return value

    @field_validator("micro_steps")
    @classmethod
    def unique_step_ids_and_orders(cls, value: Optional[List[MicroStep]]) -> Optional[List[MicroStep]]:
        if value is None:
            return value
        if len({step.id for step in value}) != len(value):
            raise ValueError("micro step ids must be unique")
        if len({step.order for step in value}) != len(value):
            raise ValueError("micro step orders must be unique")
        return value


class TaskResponse(BaseModel):
    task: Task
    request_id: str


class TaskListResponse(BaseModel):
    tasks: List[Task]
    count: int
    request_id: str


class SuggestedTaskResponse(BaseModel):
    task: Optional[Task]
    request_id: str


class TaskDeleteResponse(BaseModel):
    id: str
    deleted: bool
    request_id: str


class TemplateSaveRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
