"""Task collection operations and user template management."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from uuid import uuid4

from nextstep.api.schemas.insights import UserInsights
from nextstep.api.schemas.task import MicroStep, Task
from nextstep.api.schemas.template import StepBlueprint, TaskTemplate
from nextstep.core.clock import local_now
from nextstep.services.analytics import track
from nextstep.services.step_generator import generate_micro_steps
from nextstep.services.storage_service import StorageService
from nextstep.services.template_library import TEMPLATE_LIBRARY

logger = logging.getLogger(__name__)

DEFAULT_TASK_TITLE = "New task"


class TemplatePreconditionError(Exception):
    """Saving a template needs a task that already has micro-steps."""


class TemplateNotDeletableError(Exception):
    """Built-in templates cannot be deleted."""


def list_tasks(
    storage: StorageService,
    *,
    status: str = "all",
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Task]:
    tasks = storage.get_tasks()
    if status == "active":
        tasks = [task for task in tasks if task.completed_at is None]
    elif status == "completed":
        tasks = sorted(
            (task for task in tasks if task.completed_at is not None),
            key=lambda task: task.completed_at,
            reverse=True,
        )

    query = (search or "").strip().lower()
    if query:
        tasks = [task for task in tasks if query in task.title.lower()]
    if category:
        tasks = [task for task in tasks if (task.category or "other") == category]
    return tasks


def get_task(storage: StorageService, task_id: str) -> Optional[Task]:
    return next((task for task in storage.get_tasks() if task.id == task_id), None)


def add_task(storage: StorageService, fields: Dict[str, Any]) -> Task:
    """Create a task at the front of the collection."""
    now = local_now()
    task = Task(
        id=str(uuid4()),
        title=fields.get("title") or DEFAULT_TASK_TITLE,
        category=fields.get("category"),
        context=fields.get("context"),
        energy_level=fields.get("energy_level"),
        due_date=fields.get("due_date"),
        template_id=fields.get("template_id"),
        created_at=now,
        updated_at=now,
    )
    storage.save_tasks([task, *storage.get_tasks()])
    track("task_created", task_id=task.id, category=task.category)
    if task.template_id:
        track("template_used", template_id=task.template_id)
    return task


def update_task(storage: StorageService, task_id: str, updates: Dict[str, Any]) -> Optional[Task]:
    """Apply a partial update and bump `updated_at`; None if the task is gone."""
    tasks = storage.get_tasks()
    updated: Optional[Task] = None
    next_tasks: List[Task] = []
    for task in tasks:
        if task.id == task_id:
            merged = {**task.model_dump(), **updates, "updated_at": local_now()}
            updated = Task.model_validate(merged)
            next_tasks.append(updated)
        else:
            next_tasks.append(task)

    if updated is None:
        return None
    result = storage.save_tasks(next_tasks)
    if not result.ok:
        logger.warning("Task %s update not persisted: %s", task_id, result.reason)
    return updated


def delete_task(storage: StorageService, task_id: str) -> bool:
    tasks = storage.get_tasks()
    remaining = [task for task in tasks if task.id != task_id]
    if len(remaining) == len(tasks):
        return False
    storage.save_tasks(remaining)
    return True


def complete_task(storage: StorageService, task_id: str) -> Optional[Task]:
    """Mark a task done. Insight counters only move when a session completes."""
    return update_task(storage, task_id, {"completed_at": local_now()})


def reopen_task(storage: StorageService, task_id: str) -> Optional[Task]:
    return update_task(storage, task_id, {"completed_at": None})


def generate_steps_for(storage: StorageService, task: Task) -> List[MicroStep]:
    return generate_micro_steps(
        task.title,
        category=task.category,
        template_id=task.template_id,
        user_templates=storage.get_templates(),
    )


def regenerate_steps(storage: StorageService, task_id: str) -> Optional[Task]:
    task = get_task(storage, task_id)
    if task is None:
        return None
    steps = generate_steps_for(storage, task)
    track("template_regenerated", task_id=task_id)
    return update_task(storage, task_id, {"micro_steps": [step.model_dump() for step in steps]})


def list_templates(storage: StorageService) -> List[TaskTemplate]:
    return [*TEMPLATE_LIBRARY, *storage.get_templates()]


def save_task_template(storage: StorageService, task_id: str, name: Optional[str] = None) -> Optional[TaskTemplate]:
    """Store a task's current steps as a reusable user template."""
    task = get_task(storage, task_id)
    if task is None:
        return None
    if not task.micro_steps:
        raise TemplatePreconditionError("No steps to save")

    template = TaskTemplate(
        id=str(uuid4()),
        name=(name or "").strip() or task.title,
        category=task.category or "other",
        micro_steps=[
            StepBlueprint(text=step.text, suggested_minutes=step.suggested_minutes)
            for step in sorted(task.micro_steps, key=lambda step: step.order)
        ],
        is_built_in=False,
    )
    storage.save_templates([template, *storage.get_templates()])
    return template


def delete_template(storage: StorageService, template_id: str) -> bool:
    templates = storage.get_templates()
    remaining = [template for template in templates if template.id != template_id]
    if len(remaining) != len(templates):
        storage.save_templates(remaining)
        return True
    if any(template.id == template_id for template in TEMPLATE_LIBRARY):
        raise TemplateNotDeletableError(f"Template {template_id!r} is built in")
    return False


def suggest_next_task(tasks: List[Task], insights: Optional[UserInsights]) -> Optional[Task]:
    """Prefer an open task built from the user's most frequent template."""
    active = [task for task in tasks if task.completed_at is None]
    if not active or insights is None or not insights.frequent_templates:
        return None
    top_template = insights.frequent_templates[0]
    return next((task for task in active if task.template_id == top_template), active[0])
