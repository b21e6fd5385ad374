"""Shared route dependencies."""
from __future__ import annotations

from uuid import UUID

from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from nextstep.db.deps import get_db
from nextstep.services.storage_service import StorageService


def get_storage(
    user_id: UUID = Query(..., description="User ID owning the data"),
    db: Session = Depends(get_db),
) -> StorageService:
    """Storage bound to the requesting user; the user row is created on first use."""
    return StorageService.for_user(db, user_id)


def request_id_of(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)
