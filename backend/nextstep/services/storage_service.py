"""Per-user key-value storage over the `storage_blobs` table.

Every key holds one whole JSON document that is read and overwritten as a
unit (last writer wins). Reads never raise: a missing or unreadable blob
yields the documented default. Writes never raise either; they report a
`StorageResult` so callers can decide whether the failure matters. A failed
write does not roll back whatever the caller already changed in memory.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional, Sequence, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from nextstep.api.schemas.data import ExportDocument
from nextstep.api.schemas.insights import UserInsights
from nextstep.api.schemas.preferences import UserPreferences
from nextstep.api.schemas.routine import Routine
from nextstep.api.schemas.session import GuidedSession
from nextstep.api.schemas.task import Task
from nextstep.api.schemas.template import TaskTemplate
from nextstep.core.config import settings
from nextstep.db.models.storage_blob import StorageBlob
from nextstep.db.models.user import User
from nextstep.observability.metrics import log_metric

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class StorageKey(str, Enum):
    TASKS = "tasks"
    TEMPLATES = "templates"
    SESSIONS = "sessions"
    PREFERENCES = "preferences"
    INSIGHTS = "insights"
    ROUTINES = "routines"
    ACTIVE_SESSION = "active_session"


@dataclass
class StorageResult:
    ok: bool
    reason: Optional[str] = None


class StorageService:
    def __init__(self, db: Session, user_id: UUID):
        self.db = db
        self.user_id = user_id

    @classmethod
    def for_user(cls, db: Session, user_id: UUID) -> "StorageService":
        """Storage bound to `user_id`; the owning user row is inserted on first use."""
        if db.get(User, user_id) is None:
            db.add(User(id=user_id))
            try:
                db.flush()
            except IntegrityError:
                # A concurrent request inserted it first.
                db.rollback()
        return cls(db, user_id)

    # Tasks

    def get_tasks(self) -> List[Task]:
        return self._read_list(StorageKey.TASKS, Task)

    def save_tasks(self, tasks: Sequence[Task]) -> StorageResult:
        return self._write_list(StorageKey.TASKS, tasks)

    # Templates (user-created only; built-ins are never persisted)

    def get_templates(self) -> List[TaskTemplate]:
        return [template for template in self._read_list(StorageKey.TEMPLATES, TaskTemplate) if not template.is_built_in]

    def save_templates(self, templates: Sequence[TaskTemplate]) -> StorageResult:
        return self._write_list(StorageKey.TEMPLATES, [template for template in templates if not template.is_built_in])

    # Session history

    def get_sessions(self) -> List[GuidedSession]:
        return self._read_list(StorageKey.SESSIONS, GuidedSession)

    def save_sessions(self, sessions: Sequence[GuidedSession]) -> StorageResult:
        return self._write_list(StorageKey.SESSIONS, list(sessions)[: settings.session_history_limit])

    def append_session_history(self, session: GuidedSession) -> StorageResult:
        """Prepend a finished session, dropping the oldest beyond the history limit."""
        return self.save_sessions([session, *self.get_sessions()])

    # Active session slot

    def get_active_session(self) -> Optional[GuidedSession]:
        return self._read_model(StorageKey.ACTIVE_SESSION, GuidedSession)

    def save_active_session(self, session: Optional[GuidedSession]) -> StorageResult:
        if session is None:
            return self._delete(StorageKey.ACTIVE_SESSION)
        return self._write(StorageKey.ACTIVE_SESSION, session.model_dump(mode="json"))

    # Preferences and insights

    def get_preferences(self) -> Optional[UserPreferences]:
        """Stored preferences merged over the defaults, or None if never saved."""
        return self._read_model(StorageKey.PREFERENCES, UserPreferences)

    def save_preferences(self, preferences: UserPreferences) -> StorageResult:
        return self._write(StorageKey.PREFERENCES, preferences.model_dump(mode="json"))

    def get_insights(self) -> Optional[UserInsights]:
        """Stored insights merged over the zeroed baseline, or None if never saved."""
        return self._read_model(StorageKey.INSIGHTS, UserInsights)

    def save_insights(self, insights: UserInsights) -> StorageResult:
        return self._write(StorageKey.INSIGHTS, insights.model_dump(mode="json"))

    # Routines

    def get_routines(self) -> List[Routine]:
        return self._read_list(StorageKey.ROUTINES, Routine)

    def save_routines(self, routines: Sequence[Routine]) -> StorageResult:
        return self._write_list(StorageKey.ROUTINES, routines)

    # Whole-store operations

    def export_data(self) -> ExportDocument:
        return ExportDocument(
            version=settings.export_version,
            exported_at=datetime.now(timezone.utc),
            tasks=self.get_tasks(),
            templates=self.get_templates(),
            sessions=self.get_sessions(),
            routines=self.get_routines(),
            preferences=self.get_preferences(),
            insights=self.get_insights(),
        )

    def clear_all(self) -> StorageResult:
        """Remove every key for this user in a single transaction."""
        try:
            removed = (
                self.db.query(StorageBlob)
                .filter(StorageBlob.user_id == self.user_id)
                .delete()
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Failed to clear storage for user=%s: %s", self.user_id, exc)
            log_metric("storage.clear.failed", 1, metadata={"user_id": str(self.user_id)})
            return StorageResult(ok=False, reason=str(exc))

        logger.info("Cleared %s storage keys for user=%s", removed, self.user_id)
        return StorageResult(ok=True)

    # Internals

    def _read(self, key: StorageKey) -> Any:
        try:
            blob = self.db.get(StorageBlob, (self.user_id, key.value))
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Failed to read storage key=%s user=%s: %s", key.value, self.user_id, exc)
            log_metric("storage.read.failed", 1, metadata={"key": key.value})
            return None
        return blob.value if blob is not None else None

    def _read_model(self, key: StorageKey, model: Type[ModelT]) -> Optional[ModelT]:
        raw = self._read(key)
        if not isinstance(raw, dict):
            return None
        try:
            return model.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Ignoring unreadable %s blob for user=%s: %s", key.value, self.user_id, exc)
            return None

    def _read_list(self, key: StorageKey, model: Type[ModelT]) -> List[ModelT]:
        raw = self._read(key)
        if not isinstance(raw, list):
            return []
        try:
            return TypeAdapter(List[model]).validate_python(raw)
        except ValidationError as exc:
            logger.warning("Ignoring unreadable %s blob for user=%s: %s", key.value, self.user_id, exc)
            return []

    def _write_list(self, key: StorageKey, items: Sequence[BaseModel]) -> StorageResult:
        return self._write(key, [item.model_dump(mode="json") for item in items])

    def _write(self, key: StorageKey, value: Any) -> StorageResult:
        try:
            blob = self.db.get(StorageBlob, (self.user_id, key.value))
            if blob is None:
                self.db.add(StorageBlob(user_id=self.user_id, key=key.value, value=value))
            else:
                blob.value = value
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Failed to write storage key=%s user=%s: %s", key.value, self.user_id, exc)
            log_metric("storage.write.failed", 1, metadata={"key": key.value})
            return StorageResult(ok=False, reason=str(exc))
        return StorageResult(ok=True)

    def _delete(self, key: StorageKey) -> StorageResult:
        try:
            blob = self.db.get(StorageBlob, (self.user_id, key.value))
            if blob is not None:
                self.db.delete(blob)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Failed to delete storage key=%s user=%s: %s", key.value, self.user_id, exc)
            log_metric("storage.delete.failed", 1, metadata={"key": key.value})
            return StorageResult(ok=False, reason=str(exc))
        return StorageResult(ok=True)
