"""Thin chat-completion client wrapper for the call analysis model."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from callsight.config.settings import AnalysisConfig, OpenAIConfig
from callsight.telemetry import observe_upstream_call

from .openai_http import bearer_headers, create_http_client, truncate_body

logger = logging.getLogger(__name__)


class UpstreamAnalysisError(RuntimeError):
    """Raised when the chat-completion service cannot be reached or rejects the call."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ChatCompletionClient:
    """Invoke an OpenAI-compatible chat model with the configured defaults."""

    def __init__(
        self,
        openai_config: OpenAIConfig,
        config: AnalysisConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._openai = openai_config
        self._config = config
        self._transport = transport

    async def invoke(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        model: str | None = None,
    ) -> str:
        """Run one chat completion and return the raw message text.

        The text is whatever the model produced; it is *expected* to be JSON
        but nothing here checks that.
        """

        api_key = self._openai.require_api_key()

        payload: dict[str, Any] = {
            "model": model or self._config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": (
                temperature if temperature is not None else self._config.temperature
            ),
            "max_tokens": max_tokens or self._config.max_tokens,
        }

        start_time = time.perf_counter()
        async with create_http_client(
            self._openai,
            timeout_seconds=self._config.timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(
                    "/chat/completions",
                    headers=bearer_headers(api_key),
                    json=payload,
                )
            except httpx.TimeoutException as exc:
                observe_upstream_call("analysis", "timeout", time.perf_counter() - start_time)
                raise UpstreamAnalysisError(
                    f"Analysis API timed out after {self._config.timeout_seconds}s"
                ) from exc
            except httpx.RequestError as exc:
                observe_upstream_call("analysis", "unreachable", time.perf_counter() - start_time)
                raise UpstreamAnalysisError(f"Unable to reach analysis API: {exc}") from exc

        elapsed = time.perf_counter() - start_time
        if response.status_code >= 400:
            observe_upstream_call("analysis", "http_error", elapsed)
            body = truncate_body(response.text)
            logger.error("Analysis API error %s: %s", response.status_code, body)
            raise UpstreamAnalysisError(
                f"Analysis API error: {response.status_code} - {body}",
                status_code=response.status_code,
                body=body,
            )

        observe_upstream_call("analysis", "ok", elapsed)
        return _extract_message_content(response)


def _extract_message_content(response: httpx.Response) -> str:
    """Return ``choices[0].message.content``; empty text when the shape is off."""

    try:
        body = response.json()
    except ValueError:
        logger.warning("Analysis API returned a non-JSON body")
        return ""

    if not isinstance(body, dict):
        return ""
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""


__all__ = ["ChatCompletionClient", "UpstreamAnalysisError"]
