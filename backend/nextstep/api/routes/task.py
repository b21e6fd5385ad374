"""Task API routes."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from nextstep.api.deps import get_storage, request_id_of
from nextstep.api.schemas.task import (
    SuggestedTaskResponse,
    TaskCategory,
    TaskCreateRequest,
    TaskDeleteResponse,
    TaskListResponse,
    TaskResponse,
    TaskUpdateRequest,
    TemplateSaveRequest,
)
from nextstep.api.schemas.template import TemplateResponse
from nextstep.observability.metrics import log_metric, timed
from nextstep.observability.tracing import annotate, trace
from nextstep.services import task_service
from nextstep.services.storage_service import StorageService

router = APIRouter()


@router.get("/tasks", response_model=TaskListResponse, tags=["tasks"])
def list_tasks(
    http_request: Request,
    status_filter: str = Query("active", alias="status", pattern="^(active|completed|all)$"),
    search: Optional[str] = Query(default=None, max_length=200),
    category: Optional[TaskCategory] = Query(default=None),
    storage: StorageService = Depends(get_storage),
) -> TaskListResponse:
    """List tasks, newest first, filtered by status, title search and category."""
    request_id = request_id_of(http_request)
    user_id = str(storage.user_id)
    with trace(
        "task.list",
        metadata={"route": "/tasks", "status": status_filter, "category": category, "search": bool(search)},
        user_id=user_id,
        request_id=request_id,
    ):
        tasks = task_service.list_tasks(storage, status=status_filter, search=search, category=category)

    log_metric("task.list.count", len(tasks), metadata={"user_id": user_id, "status": status_filter})
    return TaskListResponse(tasks=tasks, count=len(tasks), request_id=request_id or "")


@router.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED, tags=["tasks"])
def create_task(
    payload: TaskCreateRequest,
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> TaskResponse:
    request_id = request_id_of(http_request)
    with trace(
        "task.create",
        metadata={"route": "/tasks", "category": payload.category, "template_id": payload.template_id},
        user_id=str(storage.user_id),
        request_id=request_id,
    ):
        task = task_service.add_task(storage, payload.model_dump())

    log_metric("task.create.success", 1, metadata={"user_id": str(storage.user_id)})
    return TaskResponse(task=task, request_id=request_id or "")


@router.get("/tasks/suggested", response_model=SuggestedTaskResponse, tags=["tasks"])
def get_suggested_task(
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> SuggestedTaskResponse:
    """Open task that matches the user's most frequent template, if any."""
    request_id = request_id_of(http_request)
    with trace("task.suggested", user_id=str(storage.user_id), request_id=request_id):
        task = task_service.suggest_next_task(storage.get_tasks(), storage.get_insights())
    return SuggestedTaskResponse(task=task, request_id=request_id or "")


@router.get("/tasks/{task_id}", response_model=TaskResponse, tags=["tasks"])
def get_task(
    task_id: str,
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> TaskResponse:
    task = task_service.get_task(storage, task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return TaskResponse(task=task, request_id=request_id_of(http_request) or "")


@router.patch("/tasks/{task_id}", response_model=TaskResponse, tags=["tasks"])
def update_task(
    task_id: str,
    payload: TaskUpdateRequest,
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> TaskResponse:
    request_id = request_id_of(http_request)
    updates = payload.model_dump(exclude_unset=True)
    with trace(
        "task.update",
        metadata={"route": f"/tasks/{task_id}", "task_id": task_id, "fields": sorted(updates)},
        user_id=str(storage.user_id),
        request_id=request_id,
    ):
        task = task_service.update_task(storage, task_id, updates)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return TaskResponse(task=task, request_id=request_id or "")


@router.delete("/tasks/{task_id}", response_model=TaskDeleteResponse, tags=["tasks"])
def delete_task(
    task_id: str,
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> TaskDeleteResponse:
    request_id = request_id_of(http_request)
    with trace("task.delete", metadata={"task_id": task_id}, user_id=str(storage.user_id), request_id=request_id):
        deleted = task_service.delete_task(storage, task_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return TaskDeleteResponse(id=task_id, deleted=True, request_id=request_id or "")


@router.post("/tasks/{task_id}/complete", response_model=TaskResponse, tags=["tasks"])
def complete_task(
    task_id: str,
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> TaskResponse:
    """Mark a task done outside of any session."""
    request_id = request_id_of(http_request)
    with timed("task.complete", metadata={"task_id": task_id}), trace(
        "task.complete", metadata={"task_id": task_id}, user_id=str(storage.user_id), request_id=request_id
    ):
        task = task_service.complete_task(storage, task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    log_metric("task.complete.success", 1, metadata={"user_id": str(storage.user_id), "task_id": task_id})
    return TaskResponse(task=task, request_id=request_id or "")


@router.post("/tasks/{task_id}/reopen", response_model=TaskResponse, tags=["tasks"])
def reopen_task(
    task_id: str,
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> TaskResponse:
    request_id = request_id_of(http_request)
    with trace("task.reopen", metadata={"task_id": task_id}, user_id=str(storage.user_id), request_id=request_id):
        task = task_service.reopen_task(storage, task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return TaskResponse(task=task, request_id=request_id or "")


@router.post("/tasks/{task_id}/steps/regenerate", response_model=TaskResponse, tags=["tasks"])
def regenerate_task_steps(
    task_id: str,
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> TaskResponse:
    """Replace a task's micro-steps with a freshly generated set."""
    request_id = request_id_of(http_request)
    with trace(
        "task.steps.regenerate",
        metadata={"task_id": task_id},
        user_id=str(storage.user_id),
        request_id=request_id,
    ) as span:
        task = task_service.regenerate_steps(storage, task_id)
        if task:
            annotate(span, task_id=task_id, step_count=len(task.micro_steps or []))
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    log_metric("task.steps.regenerate.count", len(task.micro_steps or []), metadata={"task_id": task_id})
    return TaskResponse(task=task, request_id=request_id or "")


@router.post(
    "/tasks/{task_id}/template",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["tasks", "templates"],
)
def save_task_as_template(
    task_id: str,
    http_request: Request,
    payload: TemplateSaveRequest | None = None,
    storage: StorageService = Depends(get_storage),
) -> TemplateResponse:
    """Save the task's current steps as a user template."""
    request_id = request_id_of(http_request)
    params = payload or TemplateSaveRequest()
    try:
        with trace(
            "task.template.save",
            metadata={"task_id": task_id},
            user_id=str(storage.user_id),
            request_id=request_id,
        ):
            template = task_service.save_task_template(storage, task_id, params.name)
    except task_service.TemplatePreconditionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    log_metric("task.template.save.success", 1, metadata={"user_id": str(storage.user_id)})
    return TemplateResponse(template=template, request_id=request_id or "")
