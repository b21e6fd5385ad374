"""Personalization insight API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from nextstep.api.deps import get_storage, request_id_of
from nextstep.api.schemas.insights import InsightAnalysisResponse, InsightsResponse
from nextstep.observability.metrics import timed
from nextstep.observability.tracing import annotate, trace
from nextstep.services.insight_analyzer import analyze_insights
from nextstep.services.personalization import get_friendly_insight, get_insights
from nextstep.services.storage_service import StorageService

router = APIRouter()


@router.get("/insights", response_model=InsightsResponse, tags=["insights"])
def read_insights(
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> InsightsResponse:
    stored = storage.get_insights()
    return InsightsResponse(
        insights=stored or get_insights(storage),
        friendly_insight=get_friendly_insight(stored),
        request_id=request_id_of(http_request) or "",
    )


@router.get("/insights/analysis", response_model=InsightAnalysisResponse, tags=["insights"])
def read_insight_analysis(
    http_request: Request,
    storage: StorageService = Depends(get_storage),
) -> InsightAnalysisResponse:
    """Aggregate session history and tasks into the progress view."""
    request_id = request_id_of(http_request)
    user_id = str(storage.user_id)
    with timed("insights.analysis", metadata={"user_id": user_id}), trace(
        "insights.analysis", user_id=user_id, request_id=request_id
    ) as span:
        sessions = storage.get_sessions()
        analysis = analyze_insights(storage.get_insights(), sessions, storage.get_tasks())
        annotate(span, sessions=len(sessions), recommendations=len(analysis.recommendations))

    return InsightAnalysisResponse(analysis=analysis, request_id=request_id or "")
