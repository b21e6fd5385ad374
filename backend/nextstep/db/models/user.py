"""User ORM model.

A user row only anchors ownership; all app state hangs off it as storage
blobs and goes with it when the user is deleted.
"""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from nextstep.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    storage_blobs = relationship(
        "StorageBlob",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
