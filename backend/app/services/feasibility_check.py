"""Weekly plan feasibility check: rule-based load analysis with optional AI elaboration."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from app.observability.metrics import log_fallback
from app.observability.tracing import trace
from app.services.ai.errors import AllProvidersUnavailable, InvalidAnalysisInput, describe_ai_error
from app.services.ai.orchestrator import AIOrchestrator

logger = logging.getLogger(__name__)

WEEK_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
DIFFICULTY_POINTS = {"Easy": 1, "Medium": 2, "Hard": 3}
DEFAULT_TASK_POINTS = 2

HEAVY_DAY_LOAD = 7
LIGHT_DAY_LOAD = 3
HIGH_AVERAGE_LOAD = 5
MAX_FEASIBLE_AVERAGE_LOAD = 6
MAX_HEAVY_DAYS = 2
LOW_ENERGY_MOODS = {"tired", "stressed"}

BALANCED_PLAN_MESSAGE = "Your weekly plan looks well-balanced! 🎯"


@dataclass
class DayLoad:
    day: str
    task_count: int
    load: int
    label: str


@dataclass
class FeasibilityChecks:
    total_tasks: int
    total_load: int
    average_load: float
    heavy_days: List[str]
    empty_days: List[str]
    daily_breakdown: List[DayLoad]
    has_issues: bool
    feasible: bool
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FeasibilityResult:
    feasible: bool
    checks: FeasibilityChecks
    ai_suggestions: Optional[str]
    fallback_mode: bool = False
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


async def check_feasibility(
    daily_tasks: Sequence[Dict[str, Any]],
    *,
    orchestrator: AIOrchestrator,
    mood: Optional[str] = None,
    main_focus_day: Optional[str] = None,
) -> FeasibilityResult:
    """Judge whether a week's task assignments are realistic.

    The verdict always comes from :func:`perform_rule_based_checks`. Only plans with
    heavy days or a high average load are sent to the AI for suggestions; if every
    provider is down the rule-based checks are returned in fallback mode.
    """
    if not daily_tasks:
        raise InvalidAnalysisInput("Weekly plan with tasks is required")

    checks = perform_rule_based_checks(daily_tasks, mood)
    if not checks.has_issues:
        return FeasibilityResult(feasible=checks.feasible, checks=checks, ai_suggestions=BALANCED_PLAN_MESSAGE)

    metadata = {"heavy_days": len(checks.heavy_days), "average_load": checks.average_load}
    with trace("feasibility.ai_analysis", metadata=metadata):
        try:
            suggestions = await orchestrator.call_structured(
                _build_prompt(checks, mood, main_focus_day), max_tokens=1000
            )
        except AllProvidersUnavailable as exc:
            logger.warning("Feasibility AI analysis unavailable; returning rule-based checks only")
            log_fallback("feasibility", "all_providers_unavailable")
            return FeasibilityResult(
                feasible=checks.feasible,
                checks=checks,
                ai_suggestions=None,
                fallback_mode=True,
                error=describe_ai_error(exc),
            )

    return FeasibilityResult(feasible=checks.feasible, checks=checks, ai_suggestions=suggestions)


def perform_rule_based_checks(daily_tasks: Sequence[Dict[str, Any]], mood: Optional[str] = None) -> FeasibilityChecks:
    daily_loads = calculate_daily_loads(group_tasks_by_day(daily_tasks))

    heavy_days = [entry.day for entry in daily_loads if entry.load >= HEAVY_DAY_LOAD]
    empty_days = [entry.day for entry in daily_loads if entry.load == 0]
    total_load = sum(entry.load for entry in daily_loads)
    average_load = total_load / len(WEEK_DAYS)

    warnings: List[str] = []
    if heavy_days:
        warnings.append(f"⚠️ Heavy days detected: {', '.join(heavy_days)}")
    if average_load > HIGH_AVERAGE_LOAD:
        warnings.append("⚠️ Overall weekly load is high")
    normalized_mood = (mood or "").strip().lower()
    if normalized_mood in LOW_ENERGY_MOODS:
        warnings.append(f"⚠️ Your mood is {normalized_mood} - consider reducing task load")

    return FeasibilityChecks(
        total_tasks=len(daily_tasks),
        total_load=total_load,
        average_load=average_load,
        heavy_days=heavy_days,
        empty_days=empty_days,
        daily_breakdown=daily_loads,
        has_issues=bool(heavy_days) or average_load > HIGH_AVERAGE_LOAD,
        feasible=average_load <= MAX_FEASIBLE_AVERAGE_LOAD and len(heavy_days) <= MAX_HEAVY_DAYS,
        warnings=warnings,
    )


def group_tasks_by_day(daily_tasks: Sequence[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    grouped: Dict[str, List[Dict[str, Any]]] = {day: [] for day in WEEK_DAYS}
    for task in daily_tasks:
        day = str(task.get("day") or "").strip().capitalize()
        if day in grouped:
            grouped[day].append(task)
    return grouped


def calculate_daily_loads(tasks_by_day: Dict[str, List[Dict[str, Any]]]) -> List[DayLoad]:
    loads: List[DayLoad] = []
    for day, tasks in tasks_by_day.items():
        load = sum(task_points(task) for task in tasks)
        loads.append(DayLoad(day=day, task_count=len(tasks), load=load, label=_load_label(load)))
    return loads


def task_points(task: Dict[str, Any]) -> int:
    """Difficulty points for a task; tasks without a known difficulty weigh as Medium."""
    difficulty = str(task.get("difficulty") or "").strip().capitalize()
    return DIFFICULTY_POINTS.get(difficulty, DEFAULT_TASK_POINTS)


def _load_label(load: int) -> str:
    if load == 0:
        return "Free"
    if load <= LIGHT_DAY_LOAD:
        return "Light"
    if load >= HEAVY_DAY_LOAD:
        return "Heavy"
    return "Balanced"


def _build_prompt(checks: FeasibilityChecks, mood: Optional[str], main_focus_day: Optional[str]) -> str:
    breakdown = "\n".join(
        f"{entry.day}: {entry.task_count} tasks (Load: {entry.load} points) - {entry.label}"
        for entry in checks.daily_breakdown
    )
    return (
        "You are a productivity AI assistant analyzing a student's weekly plan.\n\n"
        "Weekly Plan Summary:\n"
        f"Main Focus Day: {main_focus_day or 'Not set'}\n"
        f"Current Mood: {mood or 'Not shared'}\n"
        f"Total Tasks: {checks.total_tasks}\n\n"
        "Daily Breakdown:\n"
        f"{breakdown}\n\n"
        "Task Difficulty Points: Easy = 1, Medium = 2, Hard = 3\n\n"
        "Analyze this plan and provide:\n"
        "1. Is it feasible?\n"
        "2. Which days are overloaded?\n"
        "3. 2-3 specific suggestions to improve balance\n\n"
        "Respond in short bullet points only."
    )
