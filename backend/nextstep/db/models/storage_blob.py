"""Key-value blob ORM model.

Each user's app state is a handful of independently keyed JSON documents
(tasks, templates, session history, preferences, insights, routines and the
active session slot). A row holds one whole document and is always
overwritten wholesale.
"""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from nextstep.db.base import Base
from nextstep.db.types import JSONDocument


class StorageBlob(Base):
    __tablename__ = "storage_blobs"

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    key = Column(String(length=64), primary_key=True)
    value = Column(JSONDocument, nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    user = relationship("User", back_populates="storage_blobs")
