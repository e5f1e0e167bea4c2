"""HTTP-level tests for the /ai routes with scripted providers."""
from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.ai.factory import get_orchestrator
from app.services.ai.orchestrator import AIOrchestrator


@pytest.fixture()
def use_orchestrator() -> Iterator:
    def _install(orchestrator: AIOrchestrator) -> TestClient:
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        return TestClient(app)

    yield _install
    app.dependency_overrides.clear()


def test_generate_tasks_returns_bullets(use_orchestrator, orchestrator_replying) -> None:
    orchestrator, _ = orchestrator_replying("• Outline chapter 1\n• Draft intro paragraph")
    client = use_orchestrator(orchestrator)

    response = client.post("/ai/generate-tasks", json={"goal_name": "Finish essay", "goal_category": "Writing"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["tasks"] == ["Outline chapter 1", "Draft intro paragraph"]


def test_generate_tasks_outage_is_503(use_orchestrator, offline_orchestrator) -> None:
    client = use_orchestrator(offline_orchestrator)

    response = client.post("/ai/generate-tasks", json={"goal_name": "Finish essay"})

    assert response.status_code == 503
    assert response.json()["detail"] == "All AI services are temporarily unavailable. Manual input is still available."


def test_generate_tasks_blank_goal_is_400(use_orchestrator, orchestrator_replying) -> None:
    orchestrator, provider = orchestrator_replying("unused")
    client = use_orchestrator(orchestrator)

    response = client.post("/ai/generate-tasks", json={"goal_name": "   "})

    assert response.status_code == 400
    assert provider.calls == []


def test_feasibility_empty_plan_is_400(use_orchestrator, orchestrator_replying) -> None:
    orchestrator, _ = orchestrator_replying("unused")
    client = use_orchestrator(orchestrator)

    response = client.post("/ai/check-feasibility", json={"daily_tasks": []})

    assert response.status_code == 400


def test_feasibility_outage_still_answers_with_rule_based_checks(use_orchestrator, offline_orchestrator) -> None:
    client = use_orchestrator(offline_orchestrator)
    plan = [{"day": "Monday", "difficulty": "Hard", "task_name": f"Task {i}"} for i in range(3)]

    response = client.post("/ai/check-feasibility", json={"daily_tasks": plan, "mood": "tired"})

    assert response.status_code == 200
    body = response.json()
    assert body["fallback_mode"] is True
    assert body["ai_suggestions"] is None
    assert body["rule_based_checks"]["heavy_days"] == ["Monday"]
    assert body["rule_based_checks"]["average_load"] == pytest.approx(9 / 7)
    assert len(body["rule_based_checks"]["daily_breakdown"]) == 7


def test_suggest_downgrade_reports_threshold(use_orchestrator, orchestrator_replying) -> None:
    orchestrator, _ = orchestrator_replying("Stretch for 10 minutes.")
    client = use_orchestrator(orchestrator)

    response = client.post("/ai/suggest-downgrade", json={"task_name": "Gym session", "difficulty": "Hard", "missed_count": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["should_downgrade"] is True
    assert body["suggestions"] == {"rule_based": "20-minute light cardio or stretching", "ai_generated": "Stretch for 10 minutes."}


def test_suggest_downgrade_rejects_unknown_difficulty(use_orchestrator, orchestrator_replying) -> None:
    orchestrator, _ = orchestrator_replying("unused")
    client = use_orchestrator(orchestrator)

    response = client.post("/ai/suggest-downgrade", json={"task_name": "Gym", "difficulty": "Brutal"})

    assert response.status_code == 422


def test_weekly_reflection_falls_back_when_offline(use_orchestrator, offline_orchestrator) -> None:
    client = use_orchestrator(offline_orchestrator)

    response = client.post("/ai/weekly-reflection", json={"total_tasks": 10, "completed_tasks": 9, "missed_tasks": 1})

    assert response.status_code == 200
    body = response.json()
    assert body["fallback_mode"] is True
    assert body["week_summary"]["completion_rate"] == 90
    assert set(body["reflection"]) == {"what_went_well", "what_went_wrong", "possible_reasons", "suggestions"}


def test_weekly_reflection_completed_above_total_is_400(use_orchestrator, offline_orchestrator) -> None:
    client = use_orchestrator(offline_orchestrator)

    response = client.post("/ai/weekly-reflection", json={"total_tasks": 3, "completed_tasks": 4})

    assert response.status_code == 400


def test_check_overthinking_not_triggered(use_orchestrator, orchestrator_replying) -> None:
    orchestrator, _ = orchestrator_replying("unused")
    client = use_orchestrator(orchestrator)

    response = client.post("/ai/check-overthinking", json={"edit_count": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["triggered"] is False
    assert body["severity"] == "none"
    assert body["message"] is None


def test_get_insights_outage_is_503(use_orchestrator, offline_orchestrator) -> None:
    client = use_orchestrator(offline_orchestrator)

    response = client.post("/ai/get-insights", json={"daily_tasks": [{"day": "Monday"}]})

    assert response.status_code == 503


def test_providers_lists_fallback_chain(use_orchestrator, scripted_provider) -> None:
    client = use_orchestrator(AIOrchestrator([scripted_provider("gemini", ["x"]), scripted_provider("groq", ["y"])]))

    response = client.get("/ai/providers")

    assert response.status_code == 200
    body = response.json()
    assert [entry["id"] for entry in body["providers"]] == ["gemini", "groq"]
    assert body["fallback_enabled"] is True


def test_connection_check_reports_outage_without_error_status(use_orchestrator, offline_orchestrator) -> None:
    client = use_orchestrator(offline_orchestrator)

    response = client.get("/ai/test-connection")

    assert response.status_code == 200
    assert response.json()["success"] is False
