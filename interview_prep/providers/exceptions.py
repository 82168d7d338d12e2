import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any, TypeVar

from interview_prep.core.logging import log_event

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class ErrorCode(StrEnum):
    API_KEY_INVALID = "API_KEY_INVALID"
    RATE_LIMIT = "RATE_LIMIT"
    TIMEOUT = "TIMEOUT"
    SERVER_ERROR = "SERVER_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# Errors that a later attempt cannot fix
NON_RETRYABLE = frozenset({ErrorCode.INVALID_RESPONSE})


class ProviderError(Exception):
    """A classified failure of the generation backend.

    Callers branch on ``code``; ``message`` is for logs and operators.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.cause = cause
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.code not in NON_RETRYABLE

    def __repr__(self) -> str:
        return f"ProviderError(code={self.code.value!r}, message={self.message!r}, status_code={self.status_code!r})"


def classify_status(status_code: int, detail: str = "") -> ProviderError:
    """Turn a non-2xx HTTP status into a classified error."""
    suffix = f": {detail}" if detail else ""
    if status_code == 401:
        return ProviderError(ErrorCode.API_KEY_INVALID, f"Invalid API key{suffix}", status_code=status_code)
    if status_code == 429:
        return ProviderError(ErrorCode.RATE_LIMIT, f"Rate limit exceeded{suffix}", status_code=status_code)
    if status_code >= 500:
        return ProviderError(ErrorCode.SERVER_ERROR, f"Server error {status_code}{suffix}", status_code=status_code)
    return ProviderError(ErrorCode.UNKNOWN_ERROR, f"HTTP {status_code}{suffix}", status_code=status_code)


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after the given 1-based failed attempt: 2, 4, 8, ..."""
    return float(2**attempt)


async def retry_with_exponential_backoff(
    operation_func: Callable[[], Awaitable[T]],
    max_retries: int,
    sleep: Sleep = asyncio.sleep,
    context: dict[str, Any] | None = None,
) -> T:
    """Run ``operation_func`` up to ``max_retries`` times.

    Only ``ProviderError`` is retried, and only when it is retryable. Between
    attempts the caller waits ``2 ** attempt`` seconds. Once attempts run out
    the last classified error is raised unchanged.
    """
    context = context or {}
    attempt = 1
    while True:
        try:
            return await operation_func()
        except ProviderError as e:
            if not e.retryable or attempt >= max_retries:
                log_event(
                    "llm.request_failed",
                    component="provider",
                    operation=context.get("operation", "request"),
                    attempt=attempt,
                    max_retries=max_retries,
                    error_code=e.code.value,
                    error_msg=e.message,
                    level=logging.WARNING,
                    **{k: v for k, v in context.items() if k != "operation"},
                )
                raise
            delay = backoff_delay(attempt)
            log_event(
                "llm.retry",
                component="provider",
                operation=context.get("operation", "request"),
                attempt=attempt,
                max_retries=max_retries,
                delay_s=delay,
                error_code=e.code.value,
                **{k: v for k, v in context.items() if k != "operation"},
            )
            await sleep(delay)
            attempt += 1


def parse_json_response(content: str, error_context: dict[str, Any]) -> Any:
    """Parse model output as JSON, classifying failures as INVALID_RESPONSE."""
    if not content:
        raise ProviderError(ErrorCode.INVALID_RESPONSE, "No content in API response")

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        log_event(
            "llm.json_parse_error",
            component="provider",
            operation=error_context.get("operation", "unknown"),
            model=error_context.get("model", "unknown"),
            error_msg=str(e),
            content_length=len(content),
            level=logging.WARNING,
        )
        raise ProviderError(ErrorCode.INVALID_RESPONSE, f"Invalid JSON in API response: {e}", cause=e) from e


def extract_content_from_response(response: Any) -> str:
    """Pull ``choices[0].message.content`` out of a chat completion body."""
    try:
        content = response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderError(ErrorCode.INVALID_RESPONSE, "No content in API response", cause=e) from e
    if not isinstance(content, str) or not content.strip():
        raise ProviderError(ErrorCode.INVALID_RESPONSE, "No content in API response")
    return content
