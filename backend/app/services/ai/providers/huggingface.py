"""Hugging Face Inference API adapter."""
from __future__ import annotations

from typing import Any

from app.services.ai.errors import (
    ProviderError,
    ProviderErrorKind,
    classify_error,
    error_message_from_envelope,
)
from app.services.ai.providers.base import TEMPERATURE, Prompt, ProviderAdapter


class HuggingFaceProvider(ProviderAdapter):
    """Community-hosted models; the first request after idle gets a 503 while the model loads."""

    name = "huggingface"
    label = "Hugging Face"
    speed = "Moderate"
    quality = "Good"
    credential_env = "HUGGINGFACE_API_KEY"
    warmup_retry = True

    def api_key(self) -> str | None:
        return self._settings.huggingface_api_key

    async def _complete(self, prompt: Prompt) -> str:
        url = f"{self._settings.huggingface_base_url}/{self._settings.huggingface_model}"
        body = {
            "inputs": prompt.text,
            "parameters": {
                "max_new_tokens": prompt.max_tokens,
                "temperature": TEMPERATURE,
                "top_p": 0.95,
                "return_full_text": False,
            },
        }
        data = await self._post_json(url, body=body, headers={"Authorization": f"Bearer {self.api_key()}"})
        return self._extract_text(data)

    def _extract_text(self, data: Any) -> str:
        if isinstance(data, list):
            first = data[0] if data else None
            if isinstance(first, dict):
                return first.get("generated_text") or ""
        elif isinstance(data, dict):
            if data.get("error"):
                message = error_message_from_envelope(data)
                raise ProviderError(classify_error(None, message), self.name, message)
            if "generated_text" in data:
                return data.get("generated_text") or ""
        raise ProviderError(ProviderErrorKind.UNKNOWN, self.name, "unexpected response format")
