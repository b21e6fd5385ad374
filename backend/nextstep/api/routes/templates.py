"""Template library API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from nextstep.api.deps import get_storage, request_id_of
from nextstep.api.schemas.template import PresetListResponse, TemplateListResponse
from nextstep.observability.tracing import trace
from nextstep.services import task_service
from nextstep.services.storage_service import StorageService
from nextstep.services.template_library import QUICK_ADD_PRESETS

router = APIRouter()


@router.get("/templates", response_model=TemplateListResponse, tags=["templates"])
def list_templates(
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> TemplateListResponse:
    """Built-in templates followed by the user's saved ones."""
    request_id = request_id_of(http_request)
    with trace("template.list", user_id=str(storage.user_id), request_id=request_id):
        templates = task_service.list_templates(storage)
    return TemplateListResponse(templates=templates, request_id=request_id or "")


@router.get("/templates/presets", response_model=PresetListResponse, tags=["templates"])
def list_quick_add_presets(http_request: Request) -> PresetListResponse:
    return PresetListResponse(presets=QUICK_ADD_PRESETS, request_id=request_id_of(http_request) or "")


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["templates"])
def delete_template(
    template_id: str,
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> None:
    request_id = request_id_of(http_request)
    try:
        with trace(
            "template.delete",
            metadata={"template_id": template_id},
            user_id=str(storage.user_id),
            request_id=request_id,
        ):
            deleted = task_service.delete_template(storage, template_id)
    except task_service.TemplateNotDeletableError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
