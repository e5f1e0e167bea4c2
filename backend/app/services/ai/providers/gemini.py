"""Google Gemini adapter (Generative Language REST API via httpx)."""
from __future__ import annotations

from typing import Any, Dict

from app.services.ai.errors import ProviderError, ProviderErrorKind
from app.services.ai.providers.base import TEMPERATURE, Prompt, ProviderAdapter


class GeminiProvider(ProviderAdapter):
    name = "gemini"
    label = "Gemini"
    speed = "Fast"
    quality = "Excellent"
    credential_env = "GEMINI_API_KEY"

    def api_key(self) -> str | None:
        return self._settings.gemini_api_key

    async def _complete(self, prompt: Prompt) -> str:
        url = f"{self._settings.gemini_base_url}/models/{self._settings.gemini_model}:generateContent"
        body: Dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt.text}]}],
            "generationConfig": {
                "temperature": TEMPERATURE,
                "topK": 40,
                "topP": 0.95,
                "maxOutputTokens": prompt.max_tokens,
            },
        }
        data = await self._post_json(url, body=body, params={"key": self.api_key() or ""})
        return self._extract_text(data)

    def _extract_text(self, data: Any) -> str:
        if not isinstance(data, dict):
            raise ProviderError(ProviderErrorKind.UNKNOWN, self.name, "unexpected response format")

        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise ProviderError(ProviderErrorKind.CONTENT_FILTERED, self.name, f"prompt blocked: {block_reason}")

        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        first = candidates[0]
        parts = (first.get("content") or {}).get("parts") or []
        text = (parts[0].get("text") or "") if parts else ""
        if not text.strip() and first.get("finishReason") == "SAFETY":
            raise ProviderError(ProviderErrorKind.CONTENT_FILTERED, self.name, "candidate blocked by safety settings")
        return text
