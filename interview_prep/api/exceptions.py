from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_429_TOO_MANY_REQUESTS,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from interview_prep.api.error_responses import ErrorDetail, error_content
from interview_prep.core.storage import (
    QuestionDeleteError,
    QuestionLoadError,
    QuestionNotFoundError,
    QuestionSaveError,
    StorageError,
)


class APIException(HTTPException):
    """Base API exception; ``detail`` always carries the standard error body."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        details: list[ErrorDetail] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(
            status_code=status_code,
            detail=error_content(error, message, status_code, details),
            headers=headers,
        )


class ValidationException(APIException):
    def __init__(self, message: str, field: str | None = None):
        details = [ErrorDetail(type="validation", message=message, field=field)] if field else None
        super().__init__(HTTP_400_BAD_REQUEST, "validation_failed", message, details)


class InvalidQuestionIdException(ValidationException):
    def __init__(self, question_id: str):
        super().__init__(f"Invalid question ID format: {question_id}", field="question_id")


class RateLimitExceededException(APIException):
    def __init__(self, retry_after: int, message: str = "Too many generation requests. Please try again later."):
        super().__init__(
            HTTP_429_TOO_MANY_REQUESTS,
            "rate_limit_exceeded",
            message,
            details=[ErrorDetail(type="rate_limit", message=f"Retry after {retry_after} seconds")],
            headers={"Retry-After": str(retry_after)},
        )


class GenerationFailedException(APIException):
    def __init__(self, status_code: int, error: str, message: str):
        super().__init__(status_code, error, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render every HTTP error with the standard body, whatever raised it."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        content = error_content("http_error", str(exc.detail), exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        field = ".".join(str(x) for x in error["loc"])
        details.append(ErrorDetail(type="validation", message=error["msg"], field=field))

    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content=error_content("validation_failed", "Request validation failed", HTTP_400_BAD_REQUEST, details),
    )


async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Handle storage-related exceptions."""
    if isinstance(exc, QuestionNotFoundError):
        return JSONResponse(
            status_code=HTTP_404_NOT_FOUND,
            content=error_content("question_not_found", str(exc), HTTP_404_NOT_FOUND),
        )
    if isinstance(exc, QuestionSaveError):
        message = "Failed to save questions. Please try again."
    elif isinstance(exc, QuestionLoadError):
        message = "Failed to load questions. Please try again."
    elif isinstance(exc, QuestionDeleteError):
        message = "Failed to delete questions. Please try again."
    else:
        message = "Unexpected storage error"
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_content("storage_error", message, HTTP_500_INTERNAL_SERVER_ERROR),
    )
