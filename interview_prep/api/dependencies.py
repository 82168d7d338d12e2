import os
import uuid
from functools import lru_cache

from fastapi import Depends, Request

from interview_prep.api.auth import JWTService
from interview_prep.api.error_responses import AuthenticationError
from interview_prep.api.exceptions import InvalidQuestionIdException, RateLimitExceededException
from interview_prep.api.rate_limiting import RateLimiter
from interview_prep.core.config import GenerationConfig, get_int_env
from interview_prep.core.constants import DEFAULT_DATABASE_URL
from interview_prep.core.logging import log_event
from interview_prep.core.services.question_generation_service import QuestionGenerationService
from interview_prep.core.storage import DatabaseManager
from interview_prep.core.storage_interface import QuestionStoreInterface
from interview_prep.providers.adapter import GenerationAdapter, build_adapter


@lru_cache
def get_storage() -> QuestionStoreInterface:
    """Get the process-wide question store."""
    return DatabaseManager(os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL))


@lru_cache
def get_generation_config() -> GenerationConfig:
    return GenerationConfig.from_env()


@lru_cache
def get_generation_adapter() -> GenerationAdapter:
    """Get the process-wide adapter; its response cache lives as long as it does."""
    return build_adapter(get_generation_config())


def get_question_generation_service(
    adapter: GenerationAdapter = Depends(get_generation_adapter),
    store: QuestionStoreInterface = Depends(get_storage),
) -> QuestionGenerationService:
    return QuestionGenerationService(adapter, store)


@lru_cache
def get_jwt_service() -> JWTService:
    secret_key = os.getenv("JWT_SECRET_KEY")
    if not secret_key:
        raise ValueError("JWT_SECRET_KEY environment variable is required")
    return JWTService(secret_key, audience=os.getenv("JWT_AUDIENCE") or None)


def get_current_user_id(request: Request) -> str:
    """Get the authenticated user's id set by the authentication middleware."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise AuthenticationError()
    return user_id


@lru_cache
def get_generate_rate_limiter() -> RateLimiter:
    return RateLimiter(
        max_requests=get_int_env("GENERATE_RATE_LIMIT", 10, 1, 1000),
        window_seconds=get_int_env("GENERATE_RATE_WINDOW_SECONDS", 60, 1, 3600),
    )


def enforce_generate_rate_limit(limiter: RateLimiter, user_id: str) -> None:
    """Allow a limited number of generations per user per window.

    Called from the handler so that only requests with a valid body use up a slot.
    """
    allowed, retry_after = limiter.is_allowed(user_id)
    if not allowed:
        log_event(
            "question.generate_rate_limited",
            component="api",
            operation="generate_questions",
            user_id=user_id,
            retry_after=retry_after,
        )
        raise RateLimitExceededException(retry_after)


def get_validated_question_id(question_id: str) -> str:
    """Validate the path id is a UUID and return it in canonical form."""
    try:
        return str(uuid.UUID(question_id))
    except ValueError:
        raise InvalidQuestionIdException(question_id)
