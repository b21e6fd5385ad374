"""Main FastAPI application for the NextStep backend."""
from fastapi import FastAPI, Request

from nextstep.api.routes.data import router as data_router
from nextstep.api.routes.insights import router as insights_router
from nextstep.api.routes.preferences import router as preferences_router
from nextstep.api.routes.routines import router as routines_router
from nextstep.api.routes.sessions import router as sessions_router
from nextstep.api.routes.task import router as task_router
from nextstep.api.routes.templates import router as templates_router
from nextstep.core.config import settings
from nextstep.core.logging import configure_logging
from nextstep.core.middleware import RequestIDMiddleware
from nextstep.observability.client import init_opik
from nextstep.observability.tracing import trace

configure_logging(log_level=settings.log_level, debug=settings.debug)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(task_router)
app.include_router(templates_router)
app.include_router(sessions_router)
app.include_router(preferences_router)
app.include_router(insights_router)
app.include_router(routines_router)
app.include_router(data_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
