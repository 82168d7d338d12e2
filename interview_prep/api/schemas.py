from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StringConstraints

from interview_prep.core.constants import JOB_POSTING_MAX_LENGTH, JOB_POSTING_MIN_LENGTH
from interview_prep.core.models import QuestionRecord

JobPostingText = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=JOB_POSTING_MIN_LENGTH, max_length=JOB_POSTING_MAX_LENGTH),
]


class GenerateQuestionsRequest(BaseModel):
    """Accepts ``jobPosting`` as sent by browser clients, or ``job_posting``."""

    model_config = ConfigDict(populate_by_name=True)

    job_posting: JobPostingText = Field(alias="jobPosting")


class UpdatePracticedRequest(BaseModel):
    practiced: StrictBool


class QuestionResponse(BaseModel):
    id: str
    content: str
    position: int
    practiced: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: QuestionRecord) -> "QuestionResponse":
        # The owner id stays server-side
        return cls(
            id=record.id,
            content=record.content,
            position=record.position,
            practiced=record.practiced,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class GenerateQuestionsResponse(BaseModel):
    questions: list[QuestionResponse]
    message: str
    demo_mode: bool


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int


class QuestionListResponse(BaseModel):
    questions: list[QuestionResponse]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str


class ClearQuestionsResponse(BaseModel):
    message: str
    deleted: int


class GenerationStatus(BaseModel):
    demo_mode: bool
    model: str
    cache: dict[str, int]


class HealthResponse(BaseModel):
    status: str
    version: str
    generation: GenerationStatus
