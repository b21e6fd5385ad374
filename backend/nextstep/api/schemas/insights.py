"""Personalization insight models and schemas for /insights."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from nextstep.api.schemas.task import TaskCategory


class UserInsights(BaseModel):
    best_completion_times: List[str] = Field(default_factory=list)
    best_step_length_minutes: int = 3
    most_completed_categories: List[TaskCategory] = Field(default_factory=list)
    frequent_templates: List[str] = Field(default_factory=list)
    total_micro_steps_completed: int = 0
    total_sessions_completed: int = 0
    current_streak: int = 0
    last_active_date: Optional[date] = None


class CategoryShare(BaseModel):
    category: TaskCategory
    count: int
    percentage: int


class WeekdayActivity(BaseModel):
    day: str
    count: int


class InsightData(BaseModel):
    best_time_of_day: Optional[str]
    best_day_of_week: Optional[str]
    category_breakdown: List[CategoryShare]
    average_steps_per_session: int
    completion_rate: int
    weekly_activity: List[WeekdayActivity]
    most_productive_hour: Optional[str]
    recommendations: List[str]


class InsightsResponse(BaseModel):
    insights: UserInsights
    friendly_insight: Optional[str]
    request_id: str


class InsightAnalysisResponse(BaseModel):
    analysis: InsightData
    request_id: str
