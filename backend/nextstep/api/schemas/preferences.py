"""User preference model and schemas for /preferences."""
from __future__ import annotations

from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

ClockTime = Annotated[str, Field(pattern=HHMM_PATTERN)]


class UserPreferences(BaseModel):
    preferred_step_length_minutes: int = Field(default=3, ge=1, le=60)
    break_after_steps: int = Field(default=3, ge=1)
    break_minutes: int = Field(default=2, ge=1, le=60)
    quiet_hours_start: Optional[str] = Field(default="22:00", pattern=HHMM_PATTERN)
    quiet_hours_end: Optional[str] = Field(default="08:00", pattern=HHMM_PATTERN)
    nudge_times: List[ClockTime] = Field(default_factory=lambda: ["09:00", "14:00"])
    notification_enabled: bool = True
    timer_enabled: bool = True
    micro_step_detail_level: Literal["simple", "explicit"] = "simple"
    theme: Literal["light", "dark", "system"] = "system"


DEFAULT_PREFERENCES = UserPreferences()


class PreferencesUpdateRequest(BaseModel):
    preferred_step_length_minutes: Optional[int] = Field(default=None, ge=1, le=60)
    break_after_steps: Optional[int] = Field(default=None, ge=1)
    break_minutes: Optional[int] = Field(default=None, ge=1, le=60)
    quiet_hours_start: Optional[str] = Field(default=None, pattern=HHMM_PATTERN)
    quiet_hours_end: Optional[str] = Field(default=None, pattern=HHMM_PATTERN)
    nudge_times: Optional[List[ClockTime]] = None
    notification_enabled: Optional[bool] = None
    timer_enabled: Optional[bool] = None
    micro_step_detail_level: Optional[Literal["simple", "explicit"]] = None
    theme: Optional[Literal["light", "dark", "system"]] = None

    @field_validator(
        "preferred_step_length_minutes",
        "break_after_steps",
        "break_minutes",
        "nudge_times",
        "notification_enabled",
        "timer_enabled",
        "micro_step_detail_level",
        "theme",
    )
    @classmethod
    def not_null(cls, value):
        # Only the quiet-hours bounds may be cleared with null.
        if value is None:
            raise ValueError("value cannot be null")
        return value


class PreferencesResponse(BaseModel):
    preferences: UserPreferences
    saved: bool = True
    request_id: str
