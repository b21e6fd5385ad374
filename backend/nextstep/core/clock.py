"""Wall-clock helpers bound to the configured user timezone."""
from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from nextstep.core.config import settings


def local_now() -> datetime:
    """Current time in the user's timezone, without tzinfo (local wall clock)."""
    return datetime.now(ZoneInfo(settings.user_timezone)).replace(tzinfo=None, microsecond=0)


def local_today() -> date:
    return local_now().date()
