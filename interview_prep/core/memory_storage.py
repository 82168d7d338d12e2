import threading
from uuid import uuid4

from .constants import DEFAULT_PAGE_LIMIT
from .database_models import utc_now
from .models import QuestionPage, QuestionRecord
from .storage import QuestionNotFoundError, validate_batch
from .storage_interface import QuestionStoreInterface


class MemoryQuestionStore(QuestionStoreInterface):
    """In-memory question store for tests, demos and the CLI."""

    def __init__(self):
        self._records: dict[str, QuestionRecord] = {}
        # Insertion order of batches breaks created_at ties deterministically
        self._batch_of: dict[str, int] = {}
        self._next_batch = 0
        self._lock = threading.Lock()

    def _owned(self, question_id: str, user_id: str) -> QuestionRecord:
        record = self._records.get(question_id)
        if record is None or record.user_id != user_id:
            raise QuestionNotFoundError(question_id)
        return record

    def create_batch(self, contents: list[str], user_id: str) -> list[QuestionRecord]:
        validate_batch(contents)
        with self._lock:
            now = utc_now()
            batch = self._next_batch
            self._next_batch += 1
            created = []
            for index, content in enumerate(contents, start=1):
                record = QuestionRecord(
                    id=str(uuid4()),
                    user_id=user_id,
                    content=content,
                    position=index,
                    practiced=False,
                    created_at=now,
                    updated_at=now,
                )
                self._records[record.id] = record
                self._batch_of[record.id] = batch
                created.append(record.model_copy())
            return created

    def list_by_owner(
        self,
        user_id: str,
        practiced: bool | None = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> QuestionPage:
        with self._lock:
            owned = [
                r
                for r in self._records.values()
                if r.user_id == user_id and (practiced is None or r.practiced == practiced)
            ]
            owned.sort(key=lambda r: (-r.created_at.timestamp(), -self._batch_of[r.id], r.position))
            page = owned[offset : offset + limit]
            return QuestionPage(records=[r.model_copy() for r in page], total=len(owned))

    def get_by_id(self, question_id: str, user_id: str) -> QuestionRecord:
        with self._lock:
            return self._owned(question_id, user_id).model_copy()

    def update_practiced(self, question_id: str, practiced: bool, user_id: str) -> QuestionRecord:
        with self._lock:
            current = self._owned(question_id, user_id)
            updated = current.model_copy(update={"practiced": practiced, "updated_at": utc_now()})
            self._records[question_id] = updated
            return updated.model_copy()

    def delete(self, question_id: str, user_id: str) -> None:
        with self._lock:
            self._owned(question_id, user_id)
            del self._records[question_id]
            del self._batch_of[question_id]

    def delete_all_for_owner(self, user_id: str) -> int:
        with self._lock:
            doomed = [qid for qid, r in self._records.items() if r.user_id == user_id]
            for qid in doomed:
                del self._records[qid]
                del self._batch_of[qid]
            return len(doomed)
