"""Error handling helpers for API routes."""

import logging
from typing import NoReturn

from starlette.status import (
    HTTP_422_UNPROCESSABLE_CONTENT,
    HTTP_429_TOO_MANY_REQUESTS,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from interview_prep.api.exceptions import GenerationFailedException
from interview_prep.core.logging import log_event
from interview_prep.providers.exceptions import ErrorCode, ProviderError

# status, error type, user-facing message
GENERATION_ERROR_RESPONSES: dict[ErrorCode, tuple[int, str, str]] = {
    ErrorCode.API_KEY_INVALID: (
        HTTP_500_INTERNAL_SERVER_ERROR,
        "service_unavailable",
        "Service temporarily unavailable. Please try again later.",
    ),
    ErrorCode.RATE_LIMIT: (
        HTTP_429_TOO_MANY_REQUESTS,
        "rate_limit_exceeded",
        "Too many requests. Please try again in a few minutes.",
    ),
    ErrorCode.INVALID_RESPONSE: (
        HTTP_422_UNPROCESSABLE_CONTENT,
        "generation_quality",
        "Unable to generate quality questions for this job posting. Please try with a different posting.",
    ),
    ErrorCode.TIMEOUT: (
        HTTP_500_INTERNAL_SERVER_ERROR,
        "generation_timeout",
        "The question service timed out. Please try again shortly.",
    ),
}

DEFAULT_GENERATION_ERROR = (
    HTTP_500_INTERNAL_SERVER_ERROR,
    "generation_failed",
    "Failed to generate questions. Please try again.",
)


def handle_generation_error(e: ProviderError, user_id: str) -> NoReturn:
    """Translate a classified generation failure into an HTTP error.

    Credential problems are reported as a generic outage so key details never
    reach the client.
    """
    status_code, error, message = GENERATION_ERROR_RESPONSES.get(e.code, DEFAULT_GENERATION_ERROR)
    log_event(
        "question.generate_failed",
        level=logging.ERROR if status_code >= 500 else logging.WARNING,
        component="api",
        operation="generate_questions",
        user_id=user_id,
        error_code=e.code.value,
        error_msg=e.message,
        upstream_status=e.status_code,
        status_code=status_code,
    )
    raise GenerationFailedException(status_code, error, message) from e
