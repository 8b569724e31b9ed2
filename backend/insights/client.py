"""
Text Generation Client

Thin async client for an OpenAI-compatible chat-completions endpoint. Used
only to phrase narrative insights on top of already-computed metrics; the
analytics never depend on it being reachable.

Failure handling:
  - transport errors (connect / read timeouts) are retried with backoff
  - an HTTP error on the primary model triggers one attempt on the fallback model
  - if both fail, InsightServiceError is raised for the caller to absorb
  - a body that is not a chat completion also raises InsightServiceError
"""

from typing import Any, Protocol

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.config import Settings, get_settings

logger = structlog.get_logger()


class InsightServiceError(RuntimeError):
    """Raised when no model could produce a completion."""


class TextGenerator(Protocol):
    async def complete(self, messages: list[dict[str, str]], *, temperature: float, max_tokens: int) -> str: ...


class TextGenerationClient:
    """Client for chat-completion interactions."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        fallback_model: str | None = "gpt-3.5-turbo",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.model = model
        self.fallback_model = fallback_model
        self.timeout = timeout
        self._transport = transport
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TextGenerationClient":
        settings = settings or get_settings()
        return cls(
            settings.openai_api_key,
            base_url=settings.ai_base_url,
            model=settings.ai_model,
            fallback_model=settings.ai_fallback_model,
            timeout=settings.ai_timeout_seconds,
        )

    async def complete(self, messages: list[dict[str, str]], *, temperature: float, max_tokens: int) -> str:
        """
        Return the first choice's message content ("" when the model returned none).

        Raises:
            InsightServiceError when no model answered or the answer is not a chat completion
        """
        try:
            return await self._create_completion(self.model, messages, temperature, max_tokens)
        except httpx.HTTPError as exc:
            logger.warning("insights.primary_model_failed", model=self.model, error=str(exc))
            if not self.fallback_model or self.fallback_model == self.model:
                raise InsightServiceError(f"Text generation failed: {exc}") from exc

        try:
            return await self._create_completion(self.fallback_model, messages, temperature, max_tokens)
        except httpx.HTTPError as exc:
            logger.error("insights.fallback_model_failed", model=self.fallback_model, error=str(exc))
            raise InsightServiceError("Text generation service temporarily unavailable") from exc

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        reraise=True,
    )
    async def _create_completion(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> str:
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                "/chat/completions",
                headers=self.headers,
                json={
                    "model": model,
                    "messages": messages,
                    "temperature": temperature,
                    "max_tokens": max_tokens,
                    "stream": False,
                },
            )
            response.raise_for_status()
            try:
                payload = response.json()
            except ValueError as exc:
                raise InsightServiceError("Completion body is not JSON") from exc

        return _extract_content(payload)


def _extract_content(payload: Any) -> str:
    """First choice's message content; "" when the model returned no choices."""
    if not isinstance(payload, dict):
        raise InsightServiceError(f"Unexpected completion body: {type(payload).__name__}")

    choices = payload.get("choices") or []
    if not isinstance(choices, list):
        raise InsightServiceError(f"Unexpected choices: {type(choices).__name__}")
    if not choices:
        return ""

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if message is None:
        raise InsightServiceError("Completion choice carries no message")
    if not isinstance(message, dict):
        raise InsightServiceError(f"Unexpected message: {type(message).__name__}")

    content = message.get("content") or ""
    if not isinstance(content, str):
        raise InsightServiceError(f"Unexpected message content: {type(content).__name__}")
    return content
