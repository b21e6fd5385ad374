"""Context variables carrying who and what the current request is about."""
from __future__ import annotations

from contextvars import ContextVar
from typing import Dict

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx_var: ContextVar[str | None] = ContextVar("user_id", default=None)

UNKNOWN = "-"


def get_request_id() -> str | None:
    return request_id_ctx_var.get()


def get_user_id() -> str | None:
    return user_id_ctx_var.get()


def log_context() -> Dict[str, str]:
    """Values stamped onto every log record; placeholders outside a request."""
    return {
        "request_id": get_request_id() or UNKNOWN,
        "user_id": get_user_id() or UNKNOWN,
    }
