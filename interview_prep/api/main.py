import os
from typing import Annotated

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from interview_prep import __version__
from interview_prep.api.dependencies import get_generation_adapter, get_jwt_service
from interview_prep.api.exceptions import (
    http_exception_handler,
    request_validation_exception_handler,
    storage_exception_handler,
)
from interview_prep.api.middleware import AuthenticationMiddleware, RequestIDMiddleware
from interview_prep.api.routes import questions
from interview_prep.api.schemas import GenerationStatus, HealthResponse
from interview_prep.core.logging import init_logging
from interview_prep.core.storage import StorageError
from interview_prep.providers.adapter import GenerationAdapter

app = FastAPI(
    title="InterviewPrep API",
    description="Generate interview practice questions from job postings",
    version=__version__,
)

init_logging(use_stderr=True)

allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in allowed_origins if origin.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    max_age=86400,
)

# Added last so it runs first and every log line carries the request id
app.add_middleware(AuthenticationMiddleware, jwt_service=get_jwt_service())
app.add_middleware(RequestIDMiddleware)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(StorageError, storage_exception_handler)

app.include_router(questions.router, prefix="/api/v1", tags=["questions"])


@app.get("/")
async def root():
    return {"message": "InterviewPrep API", "version": __version__}


@app.get("/health", response_model=HealthResponse)
async def health_check(adapter: Annotated[GenerationAdapter, Depends(get_generation_adapter)]) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        generation=GenerationStatus(
            demo_mode=adapter.is_demo_mode,
            model=adapter.model,
            cache=adapter.cache_stats(),
        ),
    )
