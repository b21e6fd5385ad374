"""Data export and reset API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from nextstep.api.deps import get_storage, request_id_of
from nextstep.api.schemas.data import ClearDataResponse, ExportDocument
from nextstep.observability.metrics import log_metric
from nextstep.observability.tracing import trace
from nextstep.services.storage_service import StorageService

router = APIRouter()


@router.get("/data/export", response_model=ExportDocument, tags=["data"])
def export_data(
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> ExportDocument:
    """Everything stored for the user as one versioned JSON document."""
    with trace("data.export", user_id=str(storage.user_id), request_id=request_id_of(http_request)):
        document = storage.export_data()
    log_metric("data.export.tasks", len(document.tasks), metadata={"user_id": str(storage.user_id)})
    return document


@router.delete("/data", response_model=ClearDataResponse, tags=["data"])
def clear_data(
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> ClearDataResponse:
    request_id = request_id_of(http_request)
    with trace("data.clear", user_id=str(storage.user_id), request_id=request_id):
        result = storage.clear_all()
    return ClearDataResponse(cleared=result.ok, reason=result.reason, request_id=request_id or "")
