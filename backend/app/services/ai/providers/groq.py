"""Groq adapter (LLaMA on Groq's OpenAI-compatible endpoint)."""
from __future__ import annotations

import openai

from app.services.ai.errors import (
    ProviderError,
    ProviderErrorKind,
    classify_error,
    error_message_from_envelope,
)
from app.services.ai.providers.base import TEMPERATURE, Prompt, ProviderAdapter


class GroqProvider(ProviderAdapter):
    name = "groq"
    label = "Groq (LLaMA)"
    speed = "Ultra Fast"
    quality = "Very Good"
    credential_env = "GROQ_API_KEY"

    def api_key(self) -> str | None:
        return self._settings.groq_api_key

    async def _complete(self, prompt: Prompt) -> str:
        # SDK retries stay off: failover to the next provider is the orchestrator's job.
        client = openai.AsyncOpenAI(
            api_key=self.api_key(),
            base_url=self._settings.groq_base_url,
            timeout=self._settings.ai_request_timeout_seconds,
            max_retries=0,
            http_client=self._http_client,
        )
        try:
            completion = await client.chat.completions.create(
                model=self._settings.groq_model,
                messages=[{"role": "user", "content": prompt.text}],
                temperature=TEMPERATURE,
                max_tokens=prompt.max_tokens,
                top_p=1,
                stream=False,
            )
        except openai.APIStatusError as exc:
            message = error_message_from_envelope(exc.body) or exc.message
            raise ProviderError(classify_error(exc.status_code, message), self.name, message) from exc
        except openai.APIError as exc:
            raise ProviderError(ProviderErrorKind.UNKNOWN, self.name, f"transport error: {exc}") from exc
        finally:
            if self._http_client is None:
                await client.close()

        if not completion.choices:
            return ""
        choice = completion.choices[0]
        if choice.finish_reason == "content_filter":
            raise ProviderError(ProviderErrorKind.CONTENT_FILTERED, self.name, "completion filtered")
        return choice.message.content or ""
