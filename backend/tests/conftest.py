"""Shared fixtures: scripted providers standing in for the real AI services."""
from __future__ import annotations

from typing import List, Sequence, Tuple, Union

import pytest

from app.services.ai.errors import ProviderError, ProviderErrorKind
from app.services.ai.orchestrator import AIOrchestrator

Outcome = Union[str, BaseException]


class ScriptedProvider:
    """Provider double that replays a fixed list of outcomes (the last one repeats)."""

    label = ""
    speed = "Instant"
    quality = "Scripted"

    def __init__(self, name: str, outcomes: Sequence[Outcome]) -> None:
        self.name = name
        self._outcomes = list(outcomes)
        self.calls: List[Tuple[str, int]] = []

    async def invoke(self, prompt: str, max_tokens: int = 1500) -> str:
        self.calls.append((prompt, max_tokens))
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def failing(name: str, kind: ProviderErrorKind = ProviderErrorKind.UNKNOWN) -> ScriptedProvider:
    return ScriptedProvider(name, [ProviderError(kind, name, "scripted failure")])


@pytest.fixture()
def scripted_provider():
    return ScriptedProvider


@pytest.fixture()
def failing_provider():
    return failing


@pytest.fixture()
def orchestrator_replying():
    """Build an orchestrator whose single provider answers with ``text``."""

    def _build(text: str) -> Tuple[AIOrchestrator, ScriptedProvider]:
        provider = ScriptedProvider("groq", [text])
        return AIOrchestrator([provider]), provider

    return _build


@pytest.fixture()
def offline_orchestrator() -> AIOrchestrator:
    """Every provider down: missing key, rate limited, still warming."""
    return AIOrchestrator(
        [
            failing("groq", ProviderErrorKind.CONFIGURATION_MISSING),
            failing("gemini", ProviderErrorKind.RATE_LIMITED),
            failing("huggingface", ProviderErrorKind.MODEL_WARMING),
        ]
    )
