"""Preferences and the insight counters updated after each completed session."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional, Sequence

from nextstep.api.schemas.insights import UserInsights
from nextstep.api.schemas.preferences import DEFAULT_PREFERENCES, UserPreferences
from nextstep.api.schemas.task import CATEGORY_LABELS
from nextstep.core.clock import local_today
from nextstep.services.recent_list import (
    BEST_COMPLETION_TIMES,
    FREQUENT_TEMPLATES,
    MOST_COMPLETED_CATEGORIES,
)
from nextstep.services.storage_service import StorageResult, StorageService

logger = logging.getLogger(__name__)


def get_preferences(storage: StorageService) -> UserPreferences:
    return storage.get_preferences() or DEFAULT_PREFERENCES.model_copy(deep=True)


def save_preferences(storage: StorageService, updates: Dict[str, Any]) -> tuple[UserPreferences, StorageResult]:
    """Merge `updates` over the current preferences and overwrite the stored value."""
    current = get_preferences(storage)
    merged = UserPreferences.model_validate({**current.model_dump(), **updates})
    return merged, storage.save_preferences(merged)


def get_insights(storage: StorageService) -> UserInsights:
    return storage.get_insights() or UserInsights()


def format_hour_slot(hour: int) -> str:
    return f"{hour:02d}:00"


def next_streak(previous: Optional[UserInsights], today: date) -> int:
    """Consecutive-day streak after a session completes on `today`."""
    if previous is None or previous.last_active_date is None:
        return 1
    last = previous.last_active_date
    if last == today - timedelta(days=1):
        return previous.current_streak + 1
    if last != today:
        return 1
    # Already counted today.
    return previous.current_streak or 1


def record_session_complete(
    storage: StorageService,
    steps_completed: int,
    start_hour: int,
    categories: Sequence[str],
    template_ids: Sequence[str],
    *,
    today: Optional[date] = None,
) -> UserInsights:
    """Fold one completed session into the stored insights and persist them.

    Returns the updated insights even when the write fails.
    """
    today = today or local_today()
    previous = storage.get_insights()
    current = previous or UserInsights()

    updated = current.model_copy(
        update={
            "total_micro_steps_completed": current.total_micro_steps_completed + steps_completed,
            "total_sessions_completed": current.total_sessions_completed + 1,
            "last_active_date": today,
            "current_streak": next_streak(previous, today),
            "best_completion_times": BEST_COMPLETION_TIMES.push(
                current.best_completion_times, format_hour_slot(start_hour)
            ),
            "most_completed_categories": MOST_COMPLETED_CATEGORIES.push_all(
                current.most_completed_categories, categories
            ),
            "frequent_templates": FREQUENT_TEMPLATES.push_all(current.frequent_templates, template_ids),
        }
    )

    result = storage.save_insights(updated)
    if not result.ok:
        logger.warning("Insights update not persisted: %s", result.reason)
    return updated


def get_friendly_insight(insights: Optional[UserInsights]) -> Optional[str]:
    """One short, encouraging line derived from the insight counters."""
    if insights is None:
        return None
    if insights.best_completion_times:
        hour = int(insights.best_completion_times[0].split(":")[0])
        return f"You tend to get more done around {format_clock_hour(hour)}."
    if insights.most_completed_categories:
        category = insights.most_completed_categories[0]
        return f"{CATEGORY_LABELS.get(category, category)} tasks work well for you."
    return None


def format_clock_hour(hour: int) -> str:
    """Render 0-23 as "12am", "9am", "12pm", "3pm"."""
    suffix = "pm" if hour >= 12 else "am"
    if hour > 12:
        hour -= 12
    elif hour == 0:
        hour = 12
    return f"{hour}{suffix}"
