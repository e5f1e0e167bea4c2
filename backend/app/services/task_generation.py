"""AI task breakdown for goals and weekly schedule insights."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from app.observability.tracing import trace
from app.services.ai.errors import InvalidAnalysisInput
from app.services.ai.orchestrator import AIOrchestrator
from app.services.ai.response_parser import extract_bullet_items

FLAT_TASK_POINTS = 2


@dataclass
class GeneratedTasks:
    goal_name: str
    tasks: List[str]
    raw_response: str


@dataclass
class DayWorkload:
    day: str
    task_count: int
    load: int


@dataclass
class ScheduleInsights:
    insights: str
    workload_summary: List[DayWorkload]


async def generate_tasks(goal_name: str, goal_category: Optional[str] = None, *, orchestrator: AIOrchestrator) -> GeneratedTasks:
    """Break a weekly goal into 5-7 bullet tasks.

    There is no offline task bank, so AllProvidersUnavailable propagates to the caller.
    """
    goal_name = (goal_name or "").strip()
    if not goal_name:
        raise InvalidAnalysisInput("Goal name is required")

    with trace("tasks.generate", metadata={"category": goal_category or "General"}):
        raw = await orchestrator.call(_task_prompt(goal_name, goal_category), max_tokens=1500)
    return GeneratedTasks(goal_name=goal_name, tasks=extract_bullet_items(raw), raw_response=raw)


def summarize_workload(daily_tasks: Sequence[Dict[str, Any]]) -> List[DayWorkload]:
    counts: Dict[str, int] = {}
    for task in daily_tasks:
        day = str(task.get("day") or "Unscheduled")
        counts[day] = counts.get(day, 0) + 1
    return [DayWorkload(day=day, task_count=count, load=count * FLAT_TASK_POINTS) for day, count in counts.items()]


async def get_schedule_insights(
    daily_tasks: Sequence[Dict[str, Any]],
    *,
    orchestrator: AIOrchestrator,
    main_focus_day: Optional[str] = None,
    mood: Optional[str] = None,
) -> ScheduleInsights:
    if not daily_tasks:
        raise InvalidAnalysisInput("Daily tasks are required")

    workload = summarize_workload(daily_tasks)
    with trace("tasks.insights", metadata={"days": len(workload)}):
        insights = await orchestrator.call(_insights_prompt(workload, main_focus_day, mood), max_tokens=1500)
    return ScheduleInsights(insights=insights, workload_summary=workload)


def _task_prompt(goal_name: str, goal_category: Optional[str]) -> str:
    return (
        "You are a student productivity expert. Break down this weekly goal into 5-7 specific, actionable tasks.\n\n"
        f'Goal: "{goal_name}"\n'
        f"Category: {goal_category or 'General'}\n\n"
        "Requirements:\n"
        "- Each task should be realistic (30 mins - 2 hours)\n"
        "- Include variety: studying, practice, projects, review\n"
        "- Make tasks concrete and measurable\n"
        "- Consider student energy levels\n"
        "- Format: One task per line, starting with •\n\n"
        "Example format:\n"
        "• Study chapter concepts for 1 hour\n"
        "• Complete 10 practice problems\n"
        "• Create summary notes (30 mins)\n"
        "• Review with flashcards (45 mins)\n"
        "• Take practice quiz\n\n"
        "Now generate tasks for the goal above:"
    )


def _insights_prompt(workload: List[DayWorkload], main_focus_day: Optional[str], mood: Optional[str]) -> str:
    summary = "\n".join(f"{entry.day}: {entry.task_count} tasks (Load: {entry.load})" for entry in workload)
    mood_label = mood or "Not shared"
    return (
        "You are an AI productivity coach analyzing a student's weekly schedule.\n\n"
        f"Weekly Overview:\n{summary}\n\n"
        f"Main Focus Day: {main_focus_day or 'Not set'}\n"
        f"Current Mood: {mood_label}\n\n"
        "Provide 3-5 specific, actionable insights to optimize this schedule. Consider:\n"
        "- Workload distribution\n"
        "- Task balance across days\n"
        "- Break recommendations\n"
        f"- Priority adjustments based on mood ({mood_label})\n\n"
        "Keep it concise with bullet points."
    )
