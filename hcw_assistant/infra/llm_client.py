# hcw_assistant/infra/llm_client.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx
from openai import AsyncOpenAI, APIError

from hcw_assistant.core.config import Settings
from hcw_assistant.core.errors import ConfigError, GenerationError

logger = logging.getLogger("hcw.infra.llm")


@dataclass(frozen=True)
class PromptParts:
    system: str
    user: str

    def as_single_text(self) -> str:
        return f"{self.system}\n\n{self.user}"


class GenerativeClient(Protocol):
    async def generate(self, prompt: PromptParts) -> str:
        ...


class GeminiClient:
    """
    Google generative-language REST client (models/{model}:generateContent).

    - single user turn (system + context + query in one text part)
    - explicit deadline on every call
    - any non-200 / network error / empty candidate -> GenerationError
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        api_base: str,
        temperature: float,
        max_output_tokens: int,
        timeout: float,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self._http_client = http_client

    def _body(self, prompt: PromptParts) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt.as_single_text()}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
            },
        }

    async def _post(self, url: str, body: Dict[str, Any]) -> httpx.Response:
        # key goes in a header so it never shows up in URLs or access logs
        headers = {"x-goog-api-key": self.api_key}
        if self._http_client is not None:
            return await self._http_client.post(url, json=body, headers=headers, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, json=body, headers=headers)

    async def generate(self, prompt: PromptParts) -> str:
        url = f"{self.api_base}/models/{self.model}:generateContent"

        try:
            r = await self._post(url, self._body(prompt))
        except httpx.HTTPError as e:
            raise GenerationError(f"Gemini request failed: {e.__class__.__name__}: {e}") from e

        if r.status_code != 200:
            raise GenerationError(f"Gemini API error: {r.status_code}", status_code=r.status_code)

        try:
            data = r.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GenerationError(f"Gemini response has no candidate text: {e}") from e

        if not isinstance(text, str) or not text.strip():
            raise GenerationError("Gemini returned empty text")
        return text


class OpenAIChatClient:
    """Chat-completions client for deployments that run on OpenAI instead of Gemini."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        temperature: float,
        max_output_tokens: int,
        timeout: float,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.client = client or AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    async def generate(self, prompt: PromptParts) -> str:
        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": prompt.system},
                    {"role": "user", "content": prompt.user},
                ],
                temperature=self.temperature,
                max_tokens=self.max_output_tokens,
            )
        except APIError as e:
            raise GenerationError(f"OpenAI API error: {e}", status_code=getattr(e, "status_code", None)) from e

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content:
            raise GenerationError("OpenAI returned empty text")
        return content


def build_llm_client(settings: Settings) -> GenerativeClient:
    provider = settings.LLM_PROVIDER

    if provider == "gemini":
        if not settings.GOOGLE_AI_API_KEY:
            raise ConfigError("Missing GOOGLE_AI_API_KEY")
        return GeminiClient(
            api_key=settings.GOOGLE_AI_API_KEY,
            model=settings.GEMINI_MODEL,
            api_base=settings.GEMINI_API_BASE,
            temperature=settings.LLM_TEMPERATURE,
            max_output_tokens=settings.LLM_MAX_OUTPUT_TOKENS,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    if provider == "openai":
        if not settings.OPENAI_API_KEY:
            raise ConfigError("Missing OPENAI_API_KEY")
        return OpenAIChatClient(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_CHAT_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            max_output_tokens=settings.LLM_MAX_OUTPUT_TOKENS,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    raise ConfigError(f"Unknown LLM_PROVIDER: {provider}")
