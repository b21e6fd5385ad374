"""Read-side aggregation over session history and tasks for the progress view."""
from __future__ import annotations

from collections import Counter
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

from nextstep.api.schemas.insights import CategoryShare, InsightData, UserInsights, WeekdayActivity
from nextstep.api.schemas.session import GuidedSession
from nextstep.api.schemas.task import CATEGORY_LABELS, TASK_CATEGORIES, Task
from nextstep.services.personalization import format_clock_hour

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
MAX_RECOMMENDATIONS = 3
STREAK_MILESTONE_DAYS = 7


def analyze_insights(
    insights: Optional[UserInsights],
    sessions: Sequence[GuidedSession],
    tasks: Sequence[Task],
) -> InsightData:
    completed_sessions = [session for session in sessions if session.status == "completed"]
    total_sessions = len(sessions) or 1

    hour_counts = Counter(session.started_at.hour for session in completed_sessions)
    best_hour = _most_common(hour_counts)
    best_time_of_day = format_clock_hour(best_hour) if best_hour is not None else None

    day_counts = Counter(_sunday_index(session.started_at) for session in completed_sessions)
    best_day = _most_common(day_counts)
    best_day_of_week = DAY_NAMES[best_day] if best_day is not None else None

    category_breakdown = _category_breakdown(insights, tasks)

    total_steps = sum(len(session.completed_steps) for session in completed_sessions)
    average_steps = _round_half_up(total_steps / len(completed_sessions)) if completed_sessions else 0

    completion_rate = _round_half_up(len(completed_sessions) / total_sessions * 100)

    weekly_activity = [
        WeekdayActivity(day=name[:3], count=day_counts.get(index, 0)) for index, name in enumerate(DAY_NAMES)
    ]

    recommendations: List[str] = []
    if best_time_of_day:
        recommendations.append(
            f"Try scheduling tasks around {best_time_of_day}, that's when you're most productive."
        )
    if best_day_of_week:
        recommendations.append(f"{best_day_of_week}s are your strongest days. Plan bigger tasks then.")
    if category_breakdown:
        top = category_breakdown[0]
        recommendations.append(
            f"You complete {CATEGORY_LABELS[top.category]} tasks most often. Keep that momentum going!"
        )
    if completion_rate < 50 and len(completed_sessions) > 3:
        recommendations.append("Try breaking tasks into even smaller steps if sessions feel too long.")
    if average_steps > 5:
        recommendations.append("You're completing lots of steps per session. That's great progress!")
    if insights and insights.current_streak >= STREAK_MILESTONE_DAYS:
        recommendations.append(f"You're on a {insights.current_streak}-day streak! Keep it up.")

    return InsightData(
        best_time_of_day=best_time_of_day,
        best_day_of_week=best_day_of_week,
        category_breakdown=category_breakdown,
        average_steps_per_session=average_steps,
        completion_rate=completion_rate,
        weekly_activity=weekly_activity,
        most_productive_hour=best_time_of_day,
        recommendations=recommendations[:MAX_RECOMMENDATIONS],
    )


def _category_breakdown(insights: Optional[UserInsights], tasks: Sequence[Task]) -> List[CategoryShare]:
    # Both sources are summed, so a task that also shows up in the insights
    # list is counted twice.
    counts: Dict[str, int] = {category: 0 for category in TASK_CATEGORIES}
    if insights:
        for category in insights.most_completed_categories:
            counts[category] += 1
    for task in tasks:
        if task.category and task.completed_at:
            counts[task.category] += 1

    total = sum(counts.values()) or 1
    shares = [
        CategoryShare(category=category, count=count, percentage=_round_half_up(count / total * 100))
        for category, count in counts.items()
        if count > 0
    ]
    return sorted(shares, key=lambda share: share.count, reverse=True)


def _most_common(counts: Counter) -> Optional[int]:
    # Counter.most_common keeps insertion order among equal counts.
    top = counts.most_common(1)
    return top[0][0] if top else None


def _sunday_index(moment: datetime) -> int:
    return (moment.weekday() + 1) % 7


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
