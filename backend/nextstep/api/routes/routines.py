"""Routine API routes."""
from __future__ import annotations

from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Request, status

from nextstep.api.deps import get_storage, request_id_of
from nextstep.api.schemas.routine import Routine, RoutineCreateRequest, RoutineListResponse, RoutineResponse
from nextstep.services.storage_service import StorageService

router = APIRouter()


@router.get("/routines", response_model=RoutineListResponse, tags=["routines"])
def list_routines(
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> RoutineListResponse:
    return RoutineListResponse(routines=storage.get_routines(), request_id=request_id_of(http_request) or "")


@router.post("/routines", response_model=RoutineResponse, status_code=status.HTTP_201_CREATED, tags=["routines"])
def create_routine(
    payload: RoutineCreateRequest,
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> RoutineResponse:
    routine = Routine(id=str(uuid4()), **payload.model_dump())
    storage.save_routines([*storage.get_routines(), routine])
    return RoutineResponse(routine=routine, request_id=request_id_of(http_request) or "")


@router.delete("/routines/{routine_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["routines"])
def delete_routine(
    routine_id: str,
    storage: StorageService = Depends(get_storage),
) -> None:
    routines = storage.get_routines()
    remaining = [routine for routine in routines if routine.id != routine_id]
    if len(remaining) == len(routines):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Routine not found")
    storage.save_routines(remaining)
