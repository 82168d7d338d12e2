from typing import Any

import openai
from openai import AsyncOpenAI

from interview_prep.core.config import GenerationConfig
from interview_prep.core.constants import DEFAULT_OPENAI_TIMEOUT_SECONDS
from interview_prep.core.logging import log_event, span

from .base import CHAT_COMPLETIONS_ENDPOINT, ChatTransport
from .cache import ResponseCache
from .exceptions import ErrorCode, ProviderError, Sleep, classify_status


class OpenAIChatClient(ChatTransport):
    """Single-shot client for the OpenAI API: one attempt, short timeout, no retries."""

    def __init__(
        self,
        api_key: str,
        timeout: float = DEFAULT_OPENAI_TIMEOUT_SECONDS,
        cache: ResponseCache | None = None,
        client: AsyncOpenAI | None = None,
    ):
        self.timeout = timeout
        self.cache = cache
        self.client = client or AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    @classmethod
    def from_config(
        cls,
        config: GenerationConfig,
        cache: ResponseCache | None = None,
        sleep: Sleep | None = None,
        client: AsyncOpenAI | None = None,
    ) -> "OpenAIChatClient":
        # A single attempt never waits, so sleep is accepted and ignored
        return cls(api_key=config.api_key or "", timeout=config.timeout_seconds, cache=cache, client=client)

    async def request(self, endpoint: str, payload: dict[str, Any], use_cache: bool = True) -> dict[str, Any]:
        if endpoint != CHAT_COMPLETIONS_ENDPOINT:
            raise ValueError(f"Unsupported endpoint '{endpoint}'")

        cache_key = ResponseCache.make_key(endpoint, payload)
        if use_cache and self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                log_event("llm.cache_hit", component="openai", operation="chat_completion", model=payload.get("model"))
                return cached

        with span("llm.request", component="openai", operation="chat_completion", model=payload.get("model")):
            try:
                completion = await self.client.chat.completions.create(**payload)
            except openai.APITimeoutError as e:
                raise ProviderError(ErrorCode.TIMEOUT, f"Request timed out after {self.timeout}s", cause=e) from e
            except openai.APIStatusError as e:
                error = classify_status(e.status_code, e.message)
                error.cause = e
                raise error from e
            except openai.APIError as e:
                raise ProviderError(ErrorCode.UNKNOWN_ERROR, f"Request failed: {e}", cause=e) from e

        data = completion.model_dump()
        if use_cache and self.cache is not None:
            self.cache.set(cache_key, data)
        return data
