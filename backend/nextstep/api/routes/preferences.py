"""User preference API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from nextstep.api.deps import get_storage, request_id_of
from nextstep.api.schemas.preferences import PreferencesResponse, PreferencesUpdateRequest
from nextstep.observability.metrics import log_metric
from nextstep.observability.tracing import trace
from nextstep.services import personalization
from nextstep.services.storage_service import StorageService

router = APIRouter()


@router.get("/preferences", response_model=PreferencesResponse, tags=["preferences"])
def get_preferences(
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> PreferencesResponse:
    """Stored preferences merged over the defaults."""
    return PreferencesResponse(
        preferences=personalization.get_preferences(storage),
        request_id=request_id_of(http_request) or "",
    )


@router.patch("/preferences", response_model=PreferencesResponse, tags=["preferences"])
def update_preferences(
    payload: PreferencesUpdateRequest,
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> PreferencesResponse:
    request_id = request_id_of(http_request)
    updates = payload.model_dump(exclude_unset=True)
    with trace(
        "preferences.update",
        metadata={"fields": sorted(updates)},
        user_id=str(storage.user_id),
        request_id=request_id,
    ):
        preferences, result = personalization.save_preferences(storage, updates)

    log_metric("preferences.update.success", 1 if result.ok else 0, metadata={"user_id": str(storage.user_id)})
    return PreferencesResponse(preferences=preferences, saved=result.ok, request_id=request_id or "")
