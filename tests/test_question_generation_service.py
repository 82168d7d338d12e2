import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from interview_prep.core.memory_storage import MemoryQuestionStore
from interview_prep.core.models import Question
from interview_prep.core.services.question_generation_service import QuestionGenerationService
from interview_prep.providers.exceptions import ErrorCode, ProviderError
from tests.mocks.mock_transport import ENGLISH_POSTING, VALID_QUESTIONS


class TestQuestionGenerationService:
    """Generation and persistence happen together or not at all."""

    @pytest.fixture
    def mock_adapter(self):
        adapter = Mock()
        adapter.is_demo_mode = False
        adapter.generate_questions = AsyncMock(return_value=[Question(text=text) for text in VALID_QUESTIONS])
        return adapter

    @pytest.fixture
    def store(self):
        return MemoryQuestionStore()

    @pytest.fixture
    def service(self, mock_adapter, store):
        return QuestionGenerationService(mock_adapter, store)

    def test_generated_questions_are_saved_as_one_batch(self, service, mock_adapter, store):
        records = asyncio.run(service.generate_for_user(ENGLISH_POSTING, "user-1"))

        mock_adapter.generate_questions.assert_awaited_once_with(ENGLISH_POSTING)
        assert [r.content for r in records] == VALID_QUESTIONS
        assert [r.position for r in records] == [1, 2, 3, 4, 5]
        assert store.list_by_owner("user-1").total == 5

    def test_failed_generation_saves_nothing(self, service, mock_adapter, store):
        mock_adapter.generate_questions.side_effect = ProviderError(ErrorCode.TIMEOUT, "Request timed out")

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(service.generate_for_user(ENGLISH_POSTING, "user-1"))

        assert exc_info.value.code == ErrorCode.TIMEOUT
        assert store.list_by_owner("user-1").total == 0

    def test_store_is_written_once(self, mock_adapter):
        store = Mock()
        store.create_batch.return_value = []
        service = QuestionGenerationService(mock_adapter, store)

        asyncio.run(service.generate_for_user(ENGLISH_POSTING, "user-9"))

        store.create_batch.assert_called_once_with(VALID_QUESTIONS, "user-9")
