"""Error taxonomy shared by the provider adapters, the orchestrator and the rule engines."""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ProviderErrorKind(str, Enum):
    CONFIGURATION_MISSING = "configuration_missing"
    MODEL_WARMING = "model_warming"
    RATE_LIMITED = "rate_limited"
    CONTENT_FILTERED = "content_filtered"
    EMPTY_RESPONSE = "empty_response"
    UNKNOWN = "unknown"


class ProviderError(Exception):
    """A single provider failed; always carries a classification."""

    def __init__(self, kind: ProviderErrorKind, provider: str, detail: str = "") -> None:
        self.kind = kind
        self.provider = provider
        self.detail = detail
        super().__init__(f"{provider}: {kind.value}" + (f" ({detail})" if detail else ""))


class AllProvidersUnavailable(Exception):
    """Raised by the orchestrator once every provider in the chain has failed."""

    def __init__(self) -> None:
        super().__init__("All AI providers are currently unavailable")


class InvalidAnalysisInput(ValueError):
    """Caller supplied missing or malformed input; raised before any provider is contacted."""


RATE_LIMIT_HINTS = ("rate limit", "rate_limit", "quota", "too many requests", "resource_exhausted")
WARMING_HINTS = ("currently loading", "is loading", "loading")
CONTENT_FILTER_HINTS = ("safety", "blocked", "content filter", "content_filter", "moderation")
CREDENTIAL_HINTS = ("api key", "api_key", "unauthorized", "invalid token", "permission denied")


def classify_error(status_code: Optional[int], message: str) -> ProviderErrorKind:
    """Map an HTTP status and the provider's error message to a ProviderErrorKind."""
    lowered = (message or "").lower()
    if status_code == 429 or any(hint in lowered for hint in RATE_LIMIT_HINTS):
        return ProviderErrorKind.RATE_LIMITED
    if any(hint in lowered for hint in WARMING_HINTS):
        return ProviderErrorKind.MODEL_WARMING
    # 401/403 bodies may say "blocked"; the status decides.
    if status_code in (401, 403):
        return ProviderErrorKind.CONFIGURATION_MISSING
    if any(hint in lowered for hint in CONTENT_FILTER_HINTS):
        return ProviderErrorKind.CONTENT_FILTERED
    if any(hint in lowered for hint in CREDENTIAL_HINTS):
        return ProviderErrorKind.CONFIGURATION_MISSING
    return ProviderErrorKind.UNKNOWN


def error_message_from_envelope(payload: Any) -> str:
    """Pull the human-readable message out of a provider error body.

    Gemini and Groq nest it as ``{"error": {"message": ...}}``; Hugging Face returns
    ``{"error": "..."}`` or ``{"error": ["..."]}``.
    """
    if not isinstance(payload, dict):
        return str(payload or "")
    error = payload.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or error.get("status") or "")
    if isinstance(error, list):
        return "; ".join(str(item) for item in error)
    if error:
        return str(error)
    return str(payload.get("message") or "")


def describe_ai_error(exc: BaseException) -> str:
    """Return a user-facing sentence for an AI failure."""
    kind = exc.kind if isinstance(exc, ProviderError) else None
    message = str(exc).lower()

    if kind is ProviderErrorKind.RATE_LIMITED or any(hint in message for hint in ("rate", "quota", "limit")):
        return "AI services are busy right now. Please try again shortly."
    if kind is ProviderErrorKind.CONFIGURATION_MISSING or "api key" in message:
        return "AI service configuration error. Please contact the administrator."
    if kind is ProviderErrorKind.MODEL_WARMING:
        return "AI model is warming up. Please try again in 20 seconds."
    if kind is ProviderErrorKind.CONTENT_FILTERED:
        return "Request blocked by safety filters. Please rephrase."
    return "All AI services are temporarily unavailable. Manual input is still available."
