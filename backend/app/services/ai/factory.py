"""AI orchestrator factory."""
from __future__ import annotations

from functools import lru_cache
from typing import Dict, List, Type

import httpx

from app.core.config import Settings, settings
from app.services.ai.orchestrator import AIOrchestrator
from app.services.ai.providers.base import ProviderAdapter
from app.services.ai.providers.gemini import GeminiProvider
from app.services.ai.providers.groq import GroqProvider
from app.services.ai.providers.huggingface import HuggingFaceProvider

# Fastest/cheapest first.
PROVIDER_CLASSES: Dict[str, Type[ProviderAdapter]] = {
    "groq": GroqProvider,
    "gemini": GeminiProvider,
    "huggingface": HuggingFaceProvider,
}


def build_providers(config: Settings, *, http_client: httpx.AsyncClient | None = None) -> List[ProviderAdapter]:
    return [provider_cls(config, http_client=http_client) for provider_cls in PROVIDER_CLASSES.values()]


def build_orchestrator(config: Settings | None = None) -> AIOrchestrator:
    config = config or settings
    return AIOrchestrator(build_providers(config), primary=config.ai_provider)


@lru_cache
def get_orchestrator() -> AIOrchestrator:
    """Process-wide orchestrator; AI_PROVIDER is read once, here."""
    return build_orchestrator(settings)
