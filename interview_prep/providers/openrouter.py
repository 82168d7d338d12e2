import asyncio
from typing import Any

import httpx

from interview_prep.core.config import GenerationConfig
from interview_prep.core.constants import (
    APP_TITLE,
    DEFAULT_APP_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_OPENROUTER_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
)
from interview_prep.core.logging import log_event, span

from .base import ChatTransport
from .cache import ResponseCache
from .exceptions import (
    ErrorCode,
    ProviderError,
    Sleep,
    classify_status,
    retry_with_exponential_backoff,
)


def _error_detail(response: httpx.Response) -> str:
    """Best-effort message from an error body, bounded for logs."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])[:200]
        if isinstance(error, str):
            return error[:200]
    return ""


class OpenRouterClient(ChatTransport):
    """Chat-completion client for OpenRouter with caching, timeouts and retries."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_OPENROUTER_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        app_url: str = DEFAULT_APP_URL,
        app_title: str = APP_TITLE,
        cache: ResponseCache | None = None,
        sleep: Sleep = asyncio.sleep,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.app_url = app_url
        self.app_title = app_title
        self.cache = cache
        self._sleep = sleep
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: GenerationConfig,
        cache: ResponseCache | None = None,
        **options: Any,
    ) -> "OpenRouterClient":
        return cls(
            api_key=config.api_key or "",
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
            app_url=config.app_url,
            app_title=config.app_title,
            cache=cache,
            **options,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.app_url,
            "X-Title": self.app_title,
        }

    async def request(self, endpoint: str, payload: dict[str, Any], use_cache: bool = True) -> dict[str, Any]:
        cache_key = ResponseCache.make_key(endpoint, payload)
        if use_cache and self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                log_event(
                    "llm.cache_hit",
                    component="openrouter",
                    operation="chat_completion",
                    endpoint=endpoint,
                    model=payload.get("model"),
                )
                return cached

        with span(
            "llm.request",
            component="openrouter",
            operation="chat_completion",
            endpoint=endpoint,
            model=payload.get("model"),
            max_retries=self.max_retries,
        ):
            data = await retry_with_exponential_backoff(
                lambda: self._send(endpoint, payload),
                max_retries=self.max_retries,
                sleep=self._sleep,
                context={"operation": "chat_completion", "endpoint": endpoint, "model": payload.get("model")},
            )

        # Only complete, successful bodies are cached
        if use_cache and self.cache is not None:
            self.cache.set(cache_key, data)
        return data

    async def _send(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        """One attempt, bounded by the configured timeout and classified on failure."""
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await asyncio.wait_for(
                    client.post(endpoint, json=payload, headers=self._headers()),
                    timeout=self.timeout,
                )
        except (httpx.TimeoutException, TimeoutError) as e:
            raise ProviderError(ErrorCode.TIMEOUT, f"Request timed out after {self.timeout}s", cause=e) from e
        except httpx.HTTPError as e:
            raise ProviderError(ErrorCode.UNKNOWN_ERROR, f"Request failed: {e}", cause=e) from e

        if not response.is_success:
            raise classify_status(response.status_code, _error_detail(response))

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(ErrorCode.INVALID_RESPONSE, "API response is not valid JSON", cause=e) from e
        if not isinstance(data, dict):
            raise ProviderError(ErrorCode.INVALID_RESPONSE, "API response is not a JSON object")
        return data
