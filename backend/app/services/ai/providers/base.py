"""Provider adapter interface and shared HTTP plumbing."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from app.core.config import Settings, get_settings
from app.observability.tracing import annotate, trace
from app.services.ai.errors import (
    ProviderError,
    ProviderErrorKind,
    classify_error,
    error_message_from_envelope,
)
from app.services.ai.retry import Sleep, retry_once

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1500
TEMPERATURE = 0.7


@dataclass(frozen=True)
class Prompt:
    text: str
    max_tokens: int = DEFAULT_MAX_TOKENS


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one provider attempt inside an orchestrator call."""

    provider: str
    text: Optional[str] = None
    error: Optional[ProviderErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ProviderAdapter:
    """Base interface for text-generation providers.

    Subclasses describe themselves with ``name``/``label``/``speed``/``quality``,
    expose the credential they need via :meth:`api_key`, and implement
    :meth:`_complete` for their wire format. Adapters keep no per-call state, so one
    instance can serve concurrent requests.
    """

    name: str = ""
    label: str = ""
    speed: str = ""
    quality: str = ""
    credential_env: str = ""
    # Only providers that report a cold-start condition opt into the one-shot retry.
    warmup_retry: bool = False

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self._http_client = http_client
        self._sleep = sleep

    def api_key(self) -> str | None:
        raise NotImplementedError

    async def _complete(self, prompt: Prompt) -> str:
        raise NotImplementedError

    async def invoke(self, prompt: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> str:
        """Send ``prompt`` and return the trimmed response text or raise ProviderError."""
        if not self.api_key():
            raise ProviderError(ProviderErrorKind.CONFIGURATION_MISSING, self.name, f"{self.credential_env} is not set")

        request = Prompt(text=prompt, max_tokens=max_tokens)
        with trace(f"ai.provider.{self.name}", metadata={"provider": self.name, "max_tokens": max_tokens}) as span:
            if self.warmup_retry:
                text = await retry_once(
                    lambda: self._guarded_complete(request),
                    retry_on=ProviderErrorKind.MODEL_WARMING,
                    delay_seconds=self._settings.ai_warmup_retry_seconds,
                    sleep=self._sleep,
                )
            else:
                text = await self._guarded_complete(request)

            text = (text or "").strip()
            if not text:
                raise ProviderError(ProviderErrorKind.EMPTY_RESPONSE, self.name, "no response text")
            annotate(span, provider=self.name, response_length=len(text))

        logger.debug("%s response received (%d chars)", self.name, len(text))
        return text

    async def _guarded_complete(self, prompt: Prompt) -> str:
        try:
            return await self._complete(prompt)
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(ProviderErrorKind.UNKNOWN, self.name, f"{type(exc).__name__}: {exc}") from exc

    async def _post_json(
        self,
        url: str,
        *,
        body: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        """POST a JSON body and return the decoded JSON envelope, classifying any failure."""
        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, json=body, headers=headers, params=params)
            else:
                async with httpx.AsyncClient(timeout=self._settings.ai_request_timeout_seconds) as client:
                    response = await client.post(url, json=body, headers=headers, params=params)
        except httpx.HTTPError as exc:
            raise ProviderError(ProviderErrorKind.UNKNOWN, self.name, f"transport error: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            message = error_message_from_envelope(payload) or response.reason_phrase
            raise ProviderError(classify_error(response.status_code, message), self.name, message)
        if payload is None:
            raise ProviderError(ProviderErrorKind.UNKNOWN, self.name, "response body is not JSON")
        return payload
