"""Guided session API routes."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from nextstep.api.deps import get_storage, request_id_of
from nextstep.api.schemas.session import (
    GuidedSession,
    SessionEndRequest,
    SessionHistoryResponse,
    SessionOutcome,
    SessionStartRequest,
    SessionStateResponse,
)
from nextstep.observability.metrics import log_metric, timed
from nextstep.observability.tracing import annotate, trace
from nextstep.services.personalization import get_preferences
from nextstep.services.session_controller import (
    SessionController,
    SessionTransition,
    current_step,
    should_suggest_break,
)
from nextstep.services.storage_service import StorageService

router = APIRouter()


def get_controller(storage: StorageService = Depends(get_storage)) -> SessionController:
    return SessionController(storage)


@router.get("/sessions/active", response_model=SessionStateResponse, tags=["sessions"])
def get_active_session(
    http_request: Request,
    controller: SessionController = Depends(get_controller),
) -> SessionStateResponse:
    session = controller.active()
    return _state_response(controller, "idle" if session is None else "active", session, http_request)


@router.post("/sessions", response_model=SessionStateResponse, status_code=status.HTTP_201_CREATED, tags=["sessions"])
def start_session(
    payload: SessionStartRequest,
    http_request: Request,
    controller: SessionController = Depends(get_controller),
) -> SessionStateResponse:
    """Start a session for a task, replacing any session already in progress."""
    request_id = request_id_of(http_request)
    user_id = str(controller.storage.user_id)
    with timed("session.start", metadata={"user_id": user_id}), trace(
        "session.start",
        metadata={"route": "/sessions", "task_id": payload.task_id},
        user_id=user_id,
        request_id=request_id,
    ) as span:
        session = controller.start(payload.task_id)
        if session:
            annotate(span, task_id=payload.task_id, step_count=len(session.micro_steps))
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    log_metric("session.start.success", 1, metadata={"user_id": user_id})
    return _state_response(controller, "started", session, http_request)


@router.post(
    "/sessions/{session_id}/steps/{step_id}/complete",
    response_model=SessionStateResponse,
    tags=["sessions"],
)
def complete_step(
    session_id: str,
    step_id: str,
    http_request: Request,
    controller: SessionController = Depends(get_controller),
) -> SessionStateResponse:
    with _step_trace("session.step.complete", controller, session_id, step_id, http_request):
        transition = controller.complete_step(session_id, step_id)
    return _transition_response(controller, transition, http_request)


@router.post(
    "/sessions/{session_id}/steps/{step_id}/skip",
    response_model=SessionStateResponse,
    tags=["sessions"],
)
def skip_step(
    session_id: str,
    step_id: str,
    http_request: Request,
    controller: SessionController = Depends(get_controller),
) -> SessionStateResponse:
    with _step_trace("session.step.skip", controller, session_id, step_id, http_request):
        transition = controller.skip_step(session_id, step_id)
    return _transition_response(controller, transition, http_request)


@router.post(
    "/sessions/{session_id}/steps/{step_id}/shrink",
    response_model=SessionStateResponse,
    tags=["sessions"],
)
def shrink_step(
    session_id: str,
    step_id: str,
    http_request: Request,
    controller: SessionController = Depends(get_controller),
) -> SessionStateResponse:
    """Swap the step for a smaller starter action in the same position."""
    with _step_trace("session.step.shrink", controller, session_id, step_id, http_request):
        transition = controller.shrink_step(session_id, step_id)
    return _transition_response(controller, transition, http_request)


@router.post("/sessions/{session_id}/end", response_model=SessionStateResponse, tags=["sessions"])
def end_session(
    session_id: str,
    http_request: Request,
    payload: SessionEndRequest | None = None,
    controller: SessionController = Depends(get_controller),
) -> SessionStateResponse:
    params = payload or SessionEndRequest()
    request_id = request_id_of(http_request)
    with trace(
        "session.end",
        metadata={"session_id": session_id, "completed": params.completed},
        user_id=str(controller.storage.user_id),
        request_id=request_id,
    ):
        transition = controller.end(session_id, params.completed)
    if transition.outcome == "ended" and not params.completed:
        log_metric("session.abandoned", 1, metadata={"user_id": str(controller.storage.user_id)})
    return _transition_response(controller, transition, http_request)


@router.get("/sessions/history", response_model=SessionHistoryResponse, tags=["sessions"])
def list_session_history(
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> SessionHistoryResponse:
    """Most recent completed sessions first."""
    return SessionHistoryResponse(sessions=storage.get_sessions(), request_id=request_id_of(http_request) or "")


def _step_trace(name: str, controller: SessionController, session_id: str, step_id: str, http_request: Request):
    return trace(
        name,
        metadata={"session_id": session_id, "step_id": step_id},
        user_id=str(controller.storage.user_id),
        request_id=request_id_of(http_request),
    )


def _transition_response(
    controller: SessionController,
    transition: SessionTransition,
    http_request: Request,
) -> SessionStateResponse:
    if transition.outcome == "completed":
        log_metric(
            "session.completed.steps",
            len(transition.finished.completed_steps) if transition.finished else 0,
            metadata={"user_id": str(controller.storage.user_id)},
        )
    return _state_response(
        controller, transition.outcome, transition.session, http_request, finished=transition.finished
    )


def _state_response(
    controller: SessionController,
    outcome: SessionOutcome,
    session: Optional[GuidedSession],
    http_request: Request,
    finished: Optional[GuidedSession] = None,
) -> SessionStateResponse:
    preferences = get_preferences(controller.storage)
    suggest_break = should_suggest_break(session, preferences)
    return SessionStateResponse(
        outcome=outcome,
        session=session,
        finished=finished,
        current_step=current_step(session),
        suggest_break=suggest_break,
        break_minutes=preferences.break_minutes if suggest_break else None,
        request_id=request_id_of(http_request) or "",
    )
