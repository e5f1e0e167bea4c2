from __future__ import annotations

import pytest

from app.services.ai.errors import AllProvidersUnavailable, InvalidAnalysisInput
from app.services.ai.orchestrator import AIOrchestrator
from app.services.task_generation import generate_tasks, get_schedule_insights, summarize_workload


@pytest.mark.asyncio
async def test_generated_tasks_are_bullet_lines(orchestrator_replying) -> None:
    raw = "Here is your plan:\n• Study chapter 4 for 1 hour\n• Complete 10 practice problems\nGood luck!"
    orchestrator, provider = orchestrator_replying(raw)

    result = await generate_tasks("Ace the calculus midterm", "Study", orchestrator=orchestrator)

    assert result.goal_name == "Ace the calculus midterm"
    assert result.tasks == ["Study chapter 4 for 1 hour", "Complete 10 practice problems"]
    assert result.raw_response == raw
    prompt, max_tokens = provider.calls[0]
    assert 'Goal: "Ace the calculus midterm"' in prompt
    assert "Category: Study" in prompt
    assert max_tokens == 1500


@pytest.mark.asyncio
async def test_blank_goal_is_rejected(scripted_provider) -> None:
    provider = scripted_provider("groq", ["unused"])

    with pytest.raises(InvalidAnalysisInput):
        await generate_tasks("  ", orchestrator=AIOrchestrator([provider]))

    assert provider.calls == []


@pytest.mark.asyncio
async def test_task_generation_has_no_offline_fallback(offline_orchestrator) -> None:
    with pytest.raises(AllProvidersUnavailable):
        await generate_tasks("Learn Spanish", orchestrator=offline_orchestrator)


def test_workload_counts_tasks_per_day_in_first_seen_order() -> None:
    workload = summarize_workload([{"day": "Tuesday"}, {"day": "Monday"}, {"day": "Tuesday"}, {}])

    assert [(entry.day, entry.task_count, entry.load) for entry in workload] == [
        ("Tuesday", 2, 4),
        ("Monday", 1, 2),
        ("Unscheduled", 1, 2),
    ]


@pytest.mark.asyncio
async def test_schedule_insights_include_workload_summary(orchestrator_replying) -> None:
    orchestrator, provider = orchestrator_replying("- Spread Tuesday's tasks out")

    result = await get_schedule_insights(
        [{"day": "Tuesday"}, {"day": "Tuesday"}], orchestrator=orchestrator, main_focus_day="Tuesday", mood="tired"
    )

    assert result.insights == "- Spread Tuesday's tasks out"
    assert result.workload_summary[0].load == 4
    prompt = provider.calls[0][0]
    assert "Tuesday: 2 tasks (Load: 4)" in prompt
    assert "Priority adjustments based on mood (tired)" in prompt


@pytest.mark.asyncio
async def test_schedule_insights_need_tasks(scripted_provider) -> None:
    with pytest.raises(InvalidAnalysisInput):
        await get_schedule_insights([], orchestrator=AIOrchestrator([scripted_provider("groq", ["x"])]))
