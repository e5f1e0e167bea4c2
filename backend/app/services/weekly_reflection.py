"""End-of-week reflection: AI coaching parsed into fixed sections, with a rule-based fallback."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from app.observability.metrics import log_fallback
from app.observability.tracing import trace
from app.services.ai.errors import AllProvidersUnavailable, InvalidAnalysisInput
from app.services.ai.orchestrator import AIOrchestrator
from app.services.ai.response_parser import REFLECTION_SECTIONS, extract_sections

logger = logging.getLogger(__name__)

SEPARATOR = "━" * 38


@dataclass
class WeekSummary:
    total_tasks: int
    completed_tasks: int
    missed_tasks: int
    completion_rate: int
    mood: Optional[str] = None
    main_focus_day: Optional[str] = None


@dataclass
class ReflectionResult:
    week_summary: WeekSummary
    reflection: Dict[str, List[str]]
    raw_ai_response: Optional[str] = None
    fallback_mode: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def summarize_week(
    total_tasks: int,
    completed_tasks: int,
    missed_tasks: int,
    mood: Optional[str] = None,
    main_focus_day: Optional[str] = None,
) -> WeekSummary:
    if total_tasks <= 0:
        raise InvalidAnalysisInput("Week summary data is required: total_tasks must be positive")
    if completed_tasks < 0 or missed_tasks < 0:
        raise InvalidAnalysisInput("Task counts must not be negative")
    if completed_tasks > total_tasks:
        raise InvalidAnalysisInput("completed_tasks cannot exceed total_tasks")
    if completed_tasks + missed_tasks > total_tasks:
        raise InvalidAnalysisInput("completed_tasks and missed_tasks together cannot exceed total_tasks")
    return WeekSummary(
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        missed_tasks=missed_tasks,
        completion_rate=round(completed_tasks / total_tasks * 100),
        mood=mood,
        main_focus_day=main_focus_day,
    )


async def generate_weekly_reflection(
    summary: WeekSummary,
    task_breakdown: Sequence[Dict[str, Any]] = (),
    *,
    orchestrator: AIOrchestrator,
) -> ReflectionResult:
    with trace("reflection.ai", metadata={"completion_rate": summary.completion_rate}):
        try:
            raw = await orchestrator.call_structured(_build_prompt(summary, task_breakdown), max_tokens=2000)
        except AllProvidersUnavailable:
            logger.warning("Weekly reflection AI unavailable; using rule-based reflection")
            log_fallback("reflection", "all_providers_unavailable")
            return ReflectionResult(
                week_summary=summary,
                reflection=generate_fallback_reflection(summary),
                fallback_mode=True,
            )

    return ReflectionResult(
        week_summary=summary,
        reflection=extract_sections(raw, REFLECTION_SECTIONS),
        raw_ai_response=raw,
    )


def generate_fallback_reflection(summary: WeekSummary) -> Dict[str, List[str]]:
    sections: Dict[str, List[str]] = {key: [] for key in REFLECTION_SECTIONS}
    rate = summary.completion_rate
    mood = (summary.mood or "").strip().lower()

    if rate >= 80:
        sections["what_went_well"].append("Excellent completion rate - you stayed consistent!")
        sections["what_went_well"].append("Strong commitment to your goals this week")
    elif rate >= 60:
        sections["what_went_well"].append("Good progress on majority of tasks")
        sections["what_went_well"].append("Maintained momentum despite challenges")
    else:
        sections["what_went_well"].append(f"Completed {summary.completed_tasks} tasks - that's still progress")

    if summary.missed_tasks > 0:
        sections["what_went_wrong"].append(f"{summary.missed_tasks} tasks were skipped or incomplete")
        if rate < 50:
            sections["what_went_wrong"].append("More than half of planned tasks were missed")

    if mood in ("tired", "stressed"):
        sections["possible_reasons"].append(f"Your mood ({mood}) may have impacted energy levels")
    if rate < 50:
        sections["possible_reasons"].append("Weekly plan may have been too ambitious")

    sections["suggestions"].append("Start with smaller, achievable tasks to build momentum")
    sections["suggestions"].append("Focus on consistency over perfection")
    if rate < 70:
        sections["suggestions"].append("Reduce task difficulty or quantity for next week")

    return sections


def _task_lines(task_breakdown: Sequence[Dict[str, Any]], status: str) -> str:
    return "\n".join(
        f"- {task.get('task_name', 'Task')} ({task.get('day', 'unscheduled')})"
        for task in task_breakdown
        if task.get("status") == status
    )


def _build_prompt(summary: WeekSummary, task_breakdown: Sequence[Dict[str, Any]]) -> str:
    completed = _task_lines(task_breakdown, "completed")
    missed = _task_lines(task_breakdown, "skipped")
    return (
        "You are an AI productivity coach providing a weekly reflection for a student.\n\n"
        "Weekly Summary:\n"
        f"{SEPARATOR}\n"
        f"Total Tasks: {summary.total_tasks}\n"
        f"Completed: {summary.completed_tasks} ({summary.completion_rate}%)\n"
        f"Missed: {summary.missed_tasks}\n"
        f"Main Focus Day: {summary.main_focus_day or 'Not set'}\n"
        f"Mood State: {summary.mood or 'Not shared'}\n\n"
        f"Completed Tasks:\n{completed or 'None'}\n\n"
        f"Missed Tasks:\n{missed or 'None'}\n"
        f"{SEPARATOR}\n\n"
        "Generate a reflection with these sections:\n\n"
        "**What Went Well:**\n"
        "- Highlight achievements\n"
        "- Recognize patterns of success\n\n"
        "**What Went Wrong:**\n"
        "- Identify missed tasks\n"
        "- Note consistency issues\n\n"
        "**Possible Reasons:**\n"
        "- Analyze why tasks were missed\n"
        "- Consider mood and workload factors\n\n"
        "**Suggestions for Next Week:**\n"
        "- Give 2-3 specific, actionable improvements\n"
        "- Be encouraging and realistic\n\n"
        "Keep each section to 2-3 bullet points. Be honest but supportive."
    )
