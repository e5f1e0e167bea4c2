from __future__ import annotations

import logging

import pytest

from app.core.config import Settings
from app.services.ai.errors import AllProvidersUnavailable, ProviderErrorKind
from app.services.ai.factory import build_orchestrator
from app.services.ai.orchestrator import STRUCTURED_SUFFIX, AIOrchestrator


@pytest.mark.asyncio
async def test_falls_through_to_first_success(scripted_provider, failing_provider) -> None:
    groq = failing_provider("groq", ProviderErrorKind.RATE_LIMITED)
    gemini = failing_provider("gemini", ProviderErrorKind.CONFIGURATION_MISSING)
    huggingface = scripted_provider("huggingface", ["- Take a short walk"])
    orchestrator = AIOrchestrator([groq, gemini, huggingface])

    result = await orchestrator.call("Suggest a break", 200)

    assert result == "- Take a short walk"
    assert groq.calls == [("Suggest a break", 200)]
    assert gemini.calls == [("Suggest a break", 200)]
    assert huggingface.calls == [("Suggest a break", 200)]


@pytest.mark.asyncio
async def test_stops_at_first_success(scripted_provider) -> None:
    first = scripted_provider("groq", ["first answer"])
    second = scripted_provider("gemini", ["second answer"])

    result = await AIOrchestrator([first, second]).call("hello")

    assert result == "first answer"
    assert second.calls == []


@pytest.mark.asyncio
async def test_all_failures_raise_one_unavailable_error(offline_orchestrator, caplog) -> None:
    caplog.set_level(logging.WARNING, logger="app.services.ai.orchestrator")

    with pytest.raises(AllProvidersUnavailable) as excinfo:
        await offline_orchestrator.call("hello")

    assert str(excinfo.value) == "All AI providers are currently unavailable"
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 3
    assert any(record.levelno == logging.ERROR for record in caplog.records)


@pytest.mark.asyncio
async def test_unclassified_exception_does_not_stop_the_chain(scripted_provider) -> None:
    broken = scripted_provider("groq", [RuntimeError("socket closed")])
    healthy = scripted_provider("gemini", ["recovered"])

    assert await AIOrchestrator([broken, healthy]).call("hello") == "recovered"


@pytest.mark.asyncio
async def test_structured_call_appends_formatting_rules(scripted_provider) -> None:
    provider = scripted_provider("groq", ["- ok"])

    await AIOrchestrator([provider]).call_structured("Analyze my week", 1000)

    prompt, max_tokens = provider.calls[0]
    assert prompt == "Analyze my week" + STRUCTURED_SUFFIX
    assert "RULES:" in prompt
    assert "- Respond in bullet points" in prompt
    assert max_tokens == 1000


def test_primary_provider_moves_to_front(scripted_provider) -> None:
    providers = [scripted_provider(name, ["x"]) for name in ("groq", "gemini", "huggingface")]

    orchestrator = AIOrchestrator(providers, primary="huggingface")

    assert orchestrator.provider_order == ["huggingface", "groq", "gemini"]


def test_primary_lookup_ignores_case_and_whitespace(scripted_provider) -> None:
    providers = [scripted_provider(name, ["x"]) for name in ("groq", "gemini")]

    assert AIOrchestrator(providers, primary="  Gemini ").provider_order == ["gemini", "groq"]


def test_unknown_primary_keeps_default_order_and_warns(scripted_provider, caplog) -> None:
    caplog.set_level(logging.WARNING, logger="app.services.ai.orchestrator")
    providers = [scripted_provider(name, ["x"]) for name in ("groq", "gemini", "huggingface")]

    orchestrator = AIOrchestrator(providers, primary="claude")

    assert orchestrator.provider_order == ["groq", "gemini", "huggingface"]
    assert "Invalid AI_PROVIDER" in caplog.text


def test_duplicate_providers_are_tried_once(scripted_provider) -> None:
    providers = [scripted_provider("groq", ["x"]), scripted_provider("gemini", ["y"]), scripted_provider("groq", ["z"])]

    assert AIOrchestrator(providers, primary="gemini").provider_order == ["gemini", "groq"]


def test_empty_provider_list_is_rejected() -> None:
    with pytest.raises(ValueError):
        AIOrchestrator([])


def test_provider_info_lists_chain_in_order(scripted_provider) -> None:
    orchestrator = AIOrchestrator([scripted_provider("groq", ["x"]), scripted_provider("gemini", ["y"])])

    info = orchestrator.provider_info()

    assert [entry["id"] for entry in info["providers"]] == ["groq", "gemini"]
    assert all(entry["free"] for entry in info["providers"])
    assert info["fallback_enabled"] is True


@pytest.mark.asyncio
async def test_connection_check_reports_success(orchestrator_replying) -> None:
    orchestrator, provider = orchestrator_replying("AI system operational.")

    result = await orchestrator.test_connection()

    assert result == {"success": True, "response": "AI system operational."}
    assert provider.calls == [("Reply with: AI system operational.", 50)]


@pytest.mark.asyncio
async def test_connection_check_never_raises(offline_orchestrator) -> None:
    result = await offline_orchestrator.test_connection()

    assert result == {"success": False, "error": "All AI providers are currently unavailable"}


def test_factory_uses_fastest_first_default_order() -> None:
    orchestrator = build_orchestrator(Settings(ai_provider=None))

    assert orchestrator.provider_order == ["groq", "gemini", "huggingface"]


def test_factory_honours_configured_primary() -> None:
    orchestrator = build_orchestrator(Settings(ai_provider="gemini"))

    assert orchestrator.provider_order == ["gemini", "groq", "huggingface"]
