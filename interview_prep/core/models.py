from datetime import datetime
from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from interview_prep.core.constants import (
    QUESTION_MAX_LENGTH,
    QUESTION_MIN_LENGTH,
    QUESTIONS_PER_BATCH,
)


class Language(StrEnum):
    EN = "en"
    PL = "pl"
    DE = "de"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


QuestionText = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=QUESTION_MIN_LENGTH, max_length=QUESTION_MAX_LENGTH),
]


class Question(BaseModel):
    """A generated interview question before it is persisted."""

    text: QuestionText
    category: str = "general"
    difficulty: Difficulty = Difficulty.MEDIUM


class GeneratedQuestionSet(BaseModel):
    """The validated output of one generation: exactly five well-sized questions."""

    questions: list[Question] = Field(min_length=QUESTIONS_PER_BATCH, max_length=QUESTIONS_PER_BATCH)


class QuestionRecord(BaseModel):
    id: str
    user_id: str
    content: str
    position: int = Field(ge=1, le=QUESTIONS_PER_BATCH)
    practiced: bool = False
    created_at: datetime
    updated_at: datetime


class QuestionPage(BaseModel):
    records: list[QuestionRecord]
    total: int
