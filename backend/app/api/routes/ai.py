"""AI analysis API routes."""
from __future__ import annotations

from dataclasses import asdict
from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api.schemas.ai import (
    ConnectionTestResponse,
    DowngradeRequest,
    DowngradeResponse,
    DowngradeSuggestionsPayload,
    FeasibilityChecksPayload,
    FeasibilityRequest,
    FeasibilityResponse,
    GenerateTasksRequest,
    GenerateTasksResponse,
    InsightsRequest,
    InsightsResponse,
    OverthinkingRequest,
    OverthinkingResponse,
    ProviderInfoResponse,
    WeeklyReflectionRequest,
    WeeklyReflectionResponse,
    WeekSummaryPayload,
)
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.ai.errors import AllProvidersUnavailable, InvalidAnalysisInput, describe_ai_error
from app.services.ai.factory import get_orchestrator
from app.services.ai.orchestrator import AIOrchestrator
from app.services.feasibility_check import check_feasibility
from app.services.overthinking_guard import check_overthinking
from app.services.task_downgrade import should_suggest_downgrade, suggest_task_downgrade
from app.services.task_generation import generate_tasks, get_schedule_insights
from app.services.weekly_reflection import generate_weekly_reflection, summarize_week

router = APIRouter(prefix="/ai", tags=["ai"])


def _bad_request(exc: InvalidAnalysisInput) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _unavailable(exc: AllProvidersUnavailable) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=describe_ai_error(exc))


@router.post("/generate-tasks", response_model=GenerateTasksResponse)
async def generate_tasks_route(
    payload: GenerateTasksRequest,
    http_request: Request,
    orchestrator: AIOrchestrator = Depends(get_orchestrator),
) -> GenerateTasksResponse:
    """Break a goal into bullet tasks with the AI."""
    request_id = getattr(http_request.state, "request_id", None)
    start = perf_counter()
    with trace("ai.generate_tasks", metadata={"route": "/ai/generate-tasks"}, request_id=request_id):
        try:
            generated = await generate_tasks(payload.goal_name, payload.goal_category, orchestrator=orchestrator)
        except InvalidAnalysisInput as exc:
            raise _bad_request(exc) from exc
        except AllProvidersUnavailable as exc:
            raise _unavailable(exc) from exc

    log_metric("ai.generate_tasks.count", len(generated.tasks))
    log_metric("ai.generate_tasks.latency_ms", (perf_counter() - start) * 1000)
    return GenerateTasksResponse(goal_name=generated.goal_name, tasks=generated.tasks, raw_response=generated.raw_response)


@router.post("/check-feasibility", response_model=FeasibilityResponse)
async def check_feasibility_route(
    payload: FeasibilityRequest,
    orchestrator: AIOrchestrator = Depends(get_orchestrator),
) -> FeasibilityResponse:
    try:
        result = await check_feasibility(
            [task.model_dump() for task in payload.daily_tasks],
            orchestrator=orchestrator,
            mood=payload.mood,
            main_focus_day=payload.main_focus_day,
        )
    except InvalidAnalysisInput as exc:
        raise _bad_request(exc) from exc

    log_metric("ai.feasibility.feasible", 1 if result.feasible else 0, {"fallback": result.fallback_mode})
    return FeasibilityResponse(
        feasible=result.feasible,
        rule_based_checks=FeasibilityChecksPayload(**result.checks.to_dict()),
        ai_suggestions=result.ai_suggestions,
        fallback_mode=result.fallback_mode,
        error=result.error,
        timestamp=result.timestamp,
    )


@router.post("/suggest-downgrade", response_model=DowngradeResponse)
async def suggest_downgrade_route(
    payload: DowngradeRequest,
    orchestrator: AIOrchestrator = Depends(get_orchestrator),
) -> DowngradeResponse:
    try:
        suggestion = await suggest_task_downgrade(
            payload.task_name,
            payload.difficulty,
            payload.missed_count,
            orchestrator=orchestrator,
        )
    except InvalidAnalysisInput as exc:
        raise _bad_request(exc) from exc

    return DowngradeResponse(
        original_task=suggestion.original_task,
        difficulty=suggestion.difficulty,
        missed_count=suggestion.missed_count,
        should_downgrade=should_suggest_downgrade(suggestion.missed_count, suggestion.difficulty),
        suggestions=DowngradeSuggestionsPayload(rule_based=suggestion.rule_based, ai_generated=suggestion.ai_generated),
        message=suggestion.message,
        fallback_mode=suggestion.fallback_mode,
        timestamp=suggestion.timestamp,
    )


@router.post("/weekly-reflection", response_model=WeeklyReflectionResponse)
async def weekly_reflection_route(
    payload: WeeklyReflectionRequest,
    orchestrator: AIOrchestrator = Depends(get_orchestrator),
) -> WeeklyReflectionResponse:
    try:
        summary = summarize_week(
            payload.total_tasks,
            payload.completed_tasks,
            payload.missed_tasks,
            mood=payload.mood,
            main_focus_day=payload.main_focus_day,
        )
    except InvalidAnalysisInput as exc:
        raise _bad_request(exc) from exc

    result = await generate_weekly_reflection(
        summary,
        [task.model_dump() for task in payload.task_breakdown],
        orchestrator=orchestrator,
    )
    log_metric("ai.reflection.completion_rate", summary.completion_rate, {"fallback": result.fallback_mode})
    return WeeklyReflectionResponse(
        week_summary=WeekSummaryPayload(**asdict(result.week_summary)),
        reflection=result.reflection,
        raw_ai_response=result.raw_ai_response,
        fallback_mode=result.fallback_mode,
        timestamp=result.timestamp,
    )


@router.post("/check-overthinking", response_model=OverthinkingResponse)
async def check_overthinking_route(
    payload: OverthinkingRequest,
    orchestrator: AIOrchestrator = Depends(get_orchestrator),
) -> OverthinkingResponse:
    try:
        result = await check_overthinking(payload.edit_count, payload.days_inactive, orchestrator=orchestrator)
    except InvalidAnalysisInput as exc:
        raise _bad_request(exc) from exc

    return OverthinkingResponse(
        triggered=result.triggered,
        severity=result.severity.value,
        edit_count=result.edit_count,
        days_inactive=result.days_inactive,
        message=result.message,
        nudge=result.nudge,
        fallback_mode=result.fallback_mode,
        timestamp=result.timestamp,
    )


@router.post("/get-insights", response_model=InsightsResponse)
async def get_insights_route(
    payload: InsightsRequest,
    orchestrator: AIOrchestrator = Depends(get_orchestrator),
) -> InsightsResponse:
    try:
        result = await get_schedule_insights(
            [task.model_dump() for task in payload.daily_tasks],
            orchestrator=orchestrator,
            main_focus_day=payload.main_focus_day,
            mood=payload.mood,
        )
    except InvalidAnalysisInput as exc:
        raise _bad_request(exc) from exc
    except AllProvidersUnavailable as exc:
        raise _unavailable(exc) from exc

    return InsightsResponse(
        insights=result.insights,
        workload_summary=[asdict(entry) for entry in result.workload_summary],
    )


@router.get("/providers", response_model=ProviderInfoResponse)
async def provider_info_route(orchestrator: AIOrchestrator = Depends(get_orchestrator)) -> ProviderInfoResponse:
    return ProviderInfoResponse(**orchestrator.provider_info())


@router.get("/test-connection", response_model=ConnectionTestResponse)
async def test_connection_route(orchestrator: AIOrchestrator = Depends(get_orchestrator)) -> ConnectionTestResponse:
    return ConnectionTestResponse(**await orchestrator.test_connection())
