"""Guided session state machine.

States: no session, active, and terminal (completed or ended), with terminal
collapsing straight back to no session. There is a single active-session
slot per user; starting a session replaces whatever occupied it.

Every operation loads the whole session snapshot, applies one change, and
writes the whole snapshot back. The step index never moves backwards.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from nextstep.api.schemas.preferences import UserPreferences
from nextstep.api.schemas.session import GuidedSession, SessionOutcome
from nextstep.api.schemas.task import MicroStep
from nextstep.core.clock import local_now
from nextstep.services.analytics import track
from nextstep.services.personalization import record_session_complete
from nextstep.services.step_generator import make_step_smaller
from nextstep.services.storage_service import StorageService
from nextstep.services.task_service import generate_steps_for, get_task, update_task

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "other"


@dataclass
class SessionTransition:
    outcome: SessionOutcome
    # Session occupying the active slot after the operation (None once terminal).
    session: Optional[GuidedSession]
    # Final snapshot written to history when the session completed.
    finished: Optional[GuidedSession] = None


class SessionController:
    def __init__(
        self,
        storage: StorageService,
        *,
        clock: Callable[[], datetime] = local_now,
        rng: Optional[random.Random] = None,
    ):
        self.storage = storage
        self.clock = clock
        self.rng = rng

    def active(self) -> Optional[GuidedSession]:
        return self.storage.get_active_session()

    def start(self, task_id: str) -> Optional[GuidedSession]:
        """Begin a session for a task, generating its steps first if it has none."""
        task = get_task(self.storage, task_id)
        if task is None:
            return None

        steps = task.micro_steps
        if not steps:
            steps = generate_steps_for(self.storage, task)
            if update_task(self.storage, task_id, {"micro_steps": [step.model_dump() for step in steps]}) is None:
                logger.warning("Generated steps for task %s were not stored", task_id)

        started_at = self.clock()
        session = GuidedSession(
            id=str(uuid4()),
            task_id=task.id,
            task_title=task.title,
            micro_steps=[step.model_copy(deep=True) for step in steps],
            current_step_index=0,
            started_at=started_at,
            completed_steps=[],
            status="active",
        )
        self.storage.save_active_session(session)

        track("session_started", task_id=task_id, step_count=len(steps))
        track("session_start_hour", hour=started_at.hour)
        return session

    def complete_step(self, session_id: str, step_id: str) -> SessionTransition:
        session = self._load(session_id)
        if session is None:
            return self._ignored()
        position = _position(session, step_id)
        if position is None or step_id in session.completed_steps:
            return SessionTransition(outcome="ignored", session=session)

        steps = [
            step.model_copy(update={"completed": True}) if step.id == step_id else step
            for step in session.micro_steps
        ]
        completed_steps = [*session.completed_steps, step_id]
        next_index = max(session.current_step_index, position + 1)
        track("microstep_completed", session_id=session_id, step_id=step_id)

        if next_index >= len(steps):
            finished = session.model_copy(
                update={
                    "micro_steps": steps,
                    "completed_steps": completed_steps,
                    "current_step_index": len(steps),
                    "status": "completed",
                }
            )
            self._finish(finished)
            return SessionTransition(outcome="completed", session=None, finished=finished)

        advanced = session.model_copy(
            update={"micro_steps": steps, "completed_steps": completed_steps, "current_step_index": next_index}
        )
        self.storage.save_active_session(advanced)
        return SessionTransition(outcome="advanced", session=advanced)

    def skip_step(self, session_id: str, step_id: str) -> SessionTransition:
        """Move past a step without counting it as completed."""
        session = self._load(session_id)
        if session is None:
            return self._ignored()
        position = _position(session, step_id)
        if position is None:
            return SessionTransition(outcome="ignored", session=session)

        next_index = max(session.current_step_index, position + 1)
        track("microstep_skipped", session_id=session_id, step_id=step_id)

        if next_index >= len(session.micro_steps):
            # Running out of steps by skipping is not a completion: no history, no insights.
            self.storage.save_active_session(None)
            return SessionTransition(outcome="exhausted", session=None)

        advanced = session.model_copy(update={"current_step_index": next_index})
        self.storage.save_active_session(advanced)
        return SessionTransition(outcome="advanced", session=advanced)

    def shrink_step(self, session_id: str, step_id: str) -> SessionTransition:
        session = self._load(session_id)
        if session is None:
            return self._ignored()
        position = _position(session, step_id)
        if position is None:
            return SessionTransition(outcome="ignored", session=session)

        steps = list(session.micro_steps)
        steps[position] = make_step_smaller(steps[position], self.rng)
        shrunk = session.model_copy(update={"micro_steps": steps})
        self.storage.save_active_session(shrunk)
        track("microstep_made_smaller", session_id=session_id, step_id=step_id)
        return SessionTransition(outcome="shrunk", session=shrunk)

    def end(self, session_id: str, completed: bool) -> SessionTransition:
        session = self._load(session_id)
        if session is None:
            return self._ignored()
        self.storage.save_active_session(None)
        if not completed:
            track("session_abandoned", session_id=session_id, step_index=session.current_step_index)
        return SessionTransition(outcome="ended", session=None)

    def _load(self, session_id: str) -> Optional[GuidedSession]:
        session = self.active()
        if session is None or session.id != session_id:
            return None
        return session

    def _ignored(self) -> SessionTransition:
        return SessionTransition(outcome="ignored", session=self.active())

    def _finish(self, finished: GuidedSession) -> None:
        history = self.storage.append_session_history(finished)
        if not history.ok:
            logger.warning("Completed session %s not added to history: %s", finished.id, history.reason)

        task = get_task(self.storage, finished.task_id)
        category = (task.category if task else None) or DEFAULT_CATEGORY
        template_ids = [task.template_id] if task and task.template_id else []
        record_session_complete(
            self.storage,
            len(finished.completed_steps),
            finished.started_at.hour,
            [category],
            template_ids,
            today=self.clock().date(),
        )
        self.storage.save_active_session(None)
        track("session_completed", session_id=finished.id, steps_completed=len(finished.completed_steps))


def current_step(session: Optional[GuidedSession]) -> Optional[MicroStep]:
    if session is None or session.current_step_index >= len(session.micro_steps):
        return None
    return session.micro_steps[session.current_step_index]


def should_suggest_break(session: Optional[GuidedSession], preferences: UserPreferences) -> bool:
    """Offer a breather every `break_after_steps` completions, never before the last step."""
    if session is None:
        return False
    completed = len(session.completed_steps)
    is_last_step = session.current_step_index >= len(session.micro_steps) - 1
    return completed > 0 and completed % preferences.break_after_steps == 0 and not is_last_step


def _position(session: GuidedSession, step_id: str) -> Optional[int]:
    return next((index for index, step in enumerate(session.micro_steps) if step.id == step_id), None)
