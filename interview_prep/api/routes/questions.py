from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from interview_prep.api.dependencies import (
    enforce_generate_rate_limit,
    get_current_user_id,
    get_generate_rate_limiter,
    get_question_generation_service,
    get_storage,
    get_validated_question_id,
)
from interview_prep.api.error_handlers import handle_generation_error
from interview_prep.api.rate_limiting import RateLimiter
from interview_prep.api.schemas import (
    ClearQuestionsResponse,
    GenerateQuestionsRequest,
    GenerateQuestionsResponse,
    MessageResponse,
    Pagination,
    QuestionListResponse,
    QuestionResponse,
    UpdatePracticedRequest,
)
from interview_prep.core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from interview_prep.core.logging import log_event
from interview_prep.core.services.question_generation_service import QuestionGenerationService
from interview_prep.core.storage_interface import QuestionStoreInterface
from interview_prep.providers.exceptions import ProviderError

router = APIRouter()


@router.post(
    "/questions/generate",
    response_model=GenerateQuestionsResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_questions(
    request: GenerateQuestionsRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    limiter: Annotated[RateLimiter, Depends(get_generate_rate_limiter)],
    service: Annotated[QuestionGenerationService, Depends(get_question_generation_service)],
) -> GenerateQuestionsResponse:
    """Generate five interview questions from a job posting and save them."""
    enforce_generate_rate_limit(limiter, user_id)
    try:
        records = await service.generate_for_user(request.job_posting, user_id)
    except ProviderError as e:
        handle_generation_error(e, user_id)

    demo_mode = service.adapter.is_demo_mode
    message = "Questions generated successfully"
    if demo_mode:
        message += " (demo mode)"
    return GenerateQuestionsResponse(
        questions=[QuestionResponse.from_record(record) for record in records],
        message=message,
        demo_mode=demo_mode,
    )


@router.get("/questions", response_model=QuestionListResponse)
def list_questions(
    user_id: Annotated[str, Depends(get_current_user_id)],
    store: Annotated[QuestionStoreInterface, Depends(get_storage)],
    practiced: Annotated[bool | None, Query()] = None,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_LIMIT)] = DEFAULT_PAGE_LIMIT,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> QuestionListResponse:
    """List the caller's questions, newest first."""
    page = store.list_by_owner(user_id, practiced=practiced, limit=limit, offset=offset)
    return QuestionListResponse(
        questions=[QuestionResponse.from_record(record) for record in page.records],
        pagination=Pagination(total=page.total, limit=limit, offset=offset),
    )


@router.delete("/questions", response_model=ClearQuestionsResponse)
def clear_questions(
    user_id: Annotated[str, Depends(get_current_user_id)],
    store: Annotated[QuestionStoreInterface, Depends(get_storage)],
) -> ClearQuestionsResponse:
    """Delete every question the caller owns."""
    deleted = store.delete_all_for_owner(user_id)
    log_event("question.cleared", component="api", operation="clear_questions", user_id=user_id, deleted=deleted)
    return ClearQuestionsResponse(message="All questions deleted", deleted=deleted)


@router.get("/questions/{question_id}", response_model=QuestionResponse)
def get_question(
    question_id: Annotated[str, Depends(get_validated_question_id)],
    user_id: Annotated[str, Depends(get_current_user_id)],
    store: Annotated[QuestionStoreInterface, Depends(get_storage)],
) -> QuestionResponse:
    return QuestionResponse.from_record(store.get_by_id(question_id, user_id))


@router.patch("/questions/{question_id}", response_model=QuestionResponse)
def update_practiced(
    question_id: Annotated[str, Depends(get_validated_question_id)],
    request: UpdatePracticedRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    store: Annotated[QuestionStoreInterface, Depends(get_storage)],
) -> QuestionResponse:
    """Mark a question as practiced or not. Only the owner may do this."""
    record = store.update_practiced(question_id, request.practiced, user_id)
    log_event(
        "question.practiced_updated",
        component="api",
        operation="update_practiced",
        user_id=user_id,
        question_id=question_id,
        practiced=record.practiced,
    )
    return QuestionResponse.from_record(record)


@router.delete("/questions/{question_id}", response_model=MessageResponse)
def delete_question(
    question_id: Annotated[str, Depends(get_validated_question_id)],
    user_id: Annotated[str, Depends(get_current_user_id)],
    store: Annotated[QuestionStoreInterface, Depends(get_storage)],
) -> MessageResponse:
    store.delete(question_id, user_id)
    log_event(
        "question.deleted",
        component="api",
        operation="delete_question",
        user_id=user_id,
        question_id=question_id,
    )
    return MessageResponse(message="Question deleted successfully")
