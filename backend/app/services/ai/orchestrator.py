"""Ordered provider failover for every AI-backed feature."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from app.observability.metrics import log_metric
from app.observability.tracing import annotate, trace
from app.services.ai.errors import AllProvidersUnavailable, ProviderError, ProviderErrorKind
from app.services.ai.providers.base import DEFAULT_MAX_TOKENS, ProviderAdapter, ProviderResult

logger = logging.getLogger(__name__)

STRUCTURED_SUFFIX = """

RULES:
- Respond in bullet points
- Keep it concise
- Avoid unnecessary explanations
"""

CONNECTION_TEST_PROMPT = "Reply with: AI system operational."


class AIOrchestrator:
    """Try each provider in order until one answers.

    The order is fixed when the orchestrator is built: the configured primary provider
    (if it names a known adapter) goes first, the rest keep their given order, and no
    provider appears twice. Individual provider failures are logged and swallowed; the
    caller only ever sees the text of the first success or one AllProvidersUnavailable.
    """

    def __init__(self, providers: Sequence[ProviderAdapter], primary: Optional[str] = None) -> None:
        if not providers:
            raise ValueError("AIOrchestrator needs at least one provider")
        self._providers = self._resolve_order(providers, primary)
        logger.info("AI provider fallback order: %s", " -> ".join(self.provider_order))

    @property
    def provider_order(self) -> List[str]:
        return [adapter.name for adapter in self._providers]

    @staticmethod
    def _resolve_order(providers: Sequence[ProviderAdapter], primary: Optional[str]) -> List[ProviderAdapter]:
        ordered: List[ProviderAdapter] = []
        seen: set[str] = set()
        for adapter in providers:
            if adapter.name in seen:
                continue
            seen.add(adapter.name)
            ordered.append(adapter)

        preferred = (primary or "").strip().lower()
        if not preferred:
            return ordered
        match = next((adapter for adapter in ordered if adapter.name == preferred), None)
        if match is None:
            logger.warning("Invalid AI_PROVIDER %r, using default fallback order", primary)
            return ordered
        return [match] + [adapter for adapter in ordered if adapter is not match]

    async def call(self, prompt: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> str:
        """Return the first provider's response text, or raise AllProvidersUnavailable."""
        attempts: List[ProviderResult] = []
        with trace("ai.call", metadata={"providers": self.provider_order, "max_tokens": max_tokens}) as span:
            for adapter in self._providers:
                logger.info("Attempting AI provider: %s", adapter.name)
                try:
                    text = await adapter.invoke(prompt, max_tokens)
                except ProviderError as exc:
                    attempts.append(ProviderResult(provider=adapter.name, error=exc.kind))
                    logger.warning("AI provider %s failed: %s", adapter.name, exc)
                    log_metric("ai.provider.failure", 1, {"provider": adapter.name, "kind": exc.kind.value})
                    continue
                except Exception:
                    attempts.append(ProviderResult(provider=adapter.name, error=ProviderErrorKind.UNKNOWN))
                    logger.exception("AI provider %s raised an unclassified error", adapter.name)
                    log_metric("ai.provider.failure", 1, {"provider": adapter.name, "kind": ProviderErrorKind.UNKNOWN.value})
                    continue

                attempts.append(ProviderResult(provider=adapter.name, text=text))
                log_metric("ai.provider.success", 1, {"provider": adapter.name, "attempt": len(attempts)})
                annotate(span, provider=adapter.name, attempts=len(attempts))
                return text

            summary = ", ".join(f"{result.provider}={result.error.value}" for result in attempts if result.error)
            logger.error("All AI providers failed (%s)", summary)
            log_metric("ai.all_providers_unavailable", 1, {"attempts": summary})
            raise AllProvidersUnavailable()

    async def call_structured(self, prompt: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> str:
        """Like :meth:`call`, with a bullet-point formatting instruction appended to the prompt."""
        return await self.call(f"{prompt}{STRUCTURED_SUFFIX}", max_tokens)

    def provider_info(self) -> Dict[str, Any]:
        return {
            "providers": [
                {"name": adapter.label or adapter.name, "id": adapter.name, "free": True, "speed": adapter.speed, "quality": adapter.quality}
                for adapter in self._providers
            ],
            "fallback_enabled": len(self._providers) > 1,
        }

    async def test_connection(self) -> Dict[str, Any]:
        """Round-trip a tiny prompt through the chain without raising."""
        try:
            response = await self.call(CONNECTION_TEST_PROMPT, 50)
        except AllProvidersUnavailable as exc:
            return {"success": False, "error": str(exc)}
        return {"success": True, "response": response}
