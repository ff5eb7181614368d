"""Shared HTTP helpers for the OpenAI-compatible service clients."""

from __future__ import annotations

from typing import Any

import httpx

from callsight.config.settings import OpenAIConfig


def create_http_client(
    config: OpenAIConfig,
    *,
    timeout_seconds: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Instantiate an async client bound to the configured base URL and deadline."""

    client_kwargs: dict[str, Any] = {
        "base_url": config.base_url.rstrip("/"),
        "timeout": httpx.Timeout(timeout_seconds, connect=min(timeout_seconds, 30.0)),
    }
    if transport is not None:
        client_kwargs["transport"] = transport
    else:
        client_kwargs["transport"] = httpx.AsyncHTTPTransport(
            retries=config.connect_retries
        )
    return httpx.AsyncClient(**client_kwargs)


def bearer_headers(api_key: str) -> dict[str, str]:
    """Authorization header for the upstream API."""

    return {"Authorization": f"Bearer {api_key}"}


def truncate_body(text: str, max_length: int = 1000) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


__all__ = ["bearer_headers", "create_http_client", "truncate_body"]
