from interview_prep.core.logging import log_event, span
from interview_prep.core.models import QuestionRecord
from interview_prep.core.storage_interface import QuestionStoreInterface
from interview_prep.providers.adapter import GenerationAdapter


class QuestionGenerationService:
    """Generates a batch of questions for a user and persists it in one step."""

    def __init__(self, adapter: GenerationAdapter, store: QuestionStoreInterface):
        self.adapter = adapter
        self.store = store

    async def generate_for_user(self, job_posting: str, user_id: str) -> list[QuestionRecord]:
        """Generate five questions and store them as one batch.

        Nothing is written unless the adapter returned a complete, validated set,
        and the write happens exactly once per call regardless of how many
        attempts the outbound client needed.
        """
        with span(
            "question_generation.generate_for_user",
            component="service",
            operation="generate_for_user",
            user_id=user_id,
            demo_mode=self.adapter.is_demo_mode,
        ):
            questions = await self.adapter.generate_questions(job_posting)
            records = self.store.create_batch([question.text for question in questions], user_id)

        log_event(
            "question.batch_created",
            component="service",
            operation="generate_for_user",
            user_id=user_id,
            question_ids=[record.id for record in records],
        )
        return records
