import uuid

import pytest

from interview_prep.core.memory_storage import MemoryQuestionStore
from interview_prep.core.storage import (
    NOT_FOUND_MESSAGE,
    DatabaseManager,
    QuestionNotFoundError,
)
from tests.mocks.mock_transport import VALID_QUESTIONS

OWNER = "user-alice"
OTHER = "user-bob"


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Run every test against both store implementations."""
    if request.param == "memory":
        yield MemoryQuestionStore()
        return

    manager = DatabaseManager(f"sqlite:///{tmp_path / 'questions.db'}")
    yield manager
    manager.close()


class TestCreateBatch:
    """Test persisting generated batches."""

    def test_assigns_ids_positions_and_owner(self, store):
        records = store.create_batch(VALID_QUESTIONS, OWNER)

        assert [r.content for r in records] == VALID_QUESTIONS
        assert [r.position for r in records] == [1, 2, 3, 4, 5]
        assert all(r.user_id == OWNER for r in records)
        assert all(r.practiced is False for r in records)
        assert len({r.id for r in records}) == 5
        for record in records:
            assert str(uuid.UUID(record.id)) == record.id

    def test_batch_shares_one_timestamp(self, store):
        records = store.create_batch(VALID_QUESTIONS, OWNER)
        assert len({r.created_at for r in records}) == 1

    @pytest.mark.parametrize("size", [0, 6])
    def test_rejects_bad_batch_size(self, store, size):
        contents = (VALID_QUESTIONS * 2)[:size]
        with pytest.raises(ValueError):
            store.create_batch(contents, OWNER)
        assert store.list_by_owner(OWNER).total == 0


class TestListByOwner:
    def test_only_returns_own_questions(self, store):
        store.create_batch(VALID_QUESTIONS, OWNER)
        store.create_batch(VALID_QUESTIONS[:2], OTHER)

        page = store.list_by_owner(OWNER)

        assert page.total == 5
        assert all(r.user_id == OWNER for r in page.records)

    def test_newest_batch_first_then_position(self, store):
        first = store.create_batch(VALID_QUESTIONS, OWNER)
        second = store.create_batch(VALID_QUESTIONS[:3], OWNER)

        ids = [r.id for r in store.list_by_owner(OWNER).records]

        assert ids == [r.id for r in second] + [r.id for r in first]

    def test_pagination(self, store):
        store.create_batch(VALID_QUESTIONS, OWNER)

        page = store.list_by_owner(OWNER, limit=2, offset=1)

        assert page.total == 5
        assert [r.position for r in page.records] == [2, 3]

    def test_offset_past_end_is_empty(self, store):
        store.create_batch(VALID_QUESTIONS, OWNER)
        page = store.list_by_owner(OWNER, offset=10)
        assert page.records == []
        assert page.total == 5

    def test_filter_by_practiced(self, store):
        records = store.create_batch(VALID_QUESTIONS, OWNER)
        store.update_practiced(records[0].id, True, OWNER)
        store.update_practiced(records[3].id, True, OWNER)

        practiced = store.list_by_owner(OWNER, practiced=True)
        pending = store.list_by_owner(OWNER, practiced=False)

        assert practiced.total == 2
        assert {r.id for r in practiced.records} == {records[0].id, records[3].id}
        assert pending.total == 3

    def test_unknown_owner_is_empty(self, store):
        page = store.list_by_owner("nobody")
        assert page.records == []
        assert page.total == 0


class TestOwnerScopedAccess:
    """Another user's question is indistinguishable from a missing one."""

    def test_get_by_id(self, store):
        record = store.create_batch(VALID_QUESTIONS, OWNER)[2]

        loaded = store.get_by_id(record.id, OWNER)

        assert loaded.id == record.id
        assert loaded.content == record.content
        assert loaded.position == 3

    def test_get_other_users_question(self, store):
        record = store.create_batch(VALID_QUESTIONS, OWNER)[0]
        with pytest.raises(QuestionNotFoundError) as exc_info:
            store.get_by_id(record.id, OTHER)
        assert str(exc_info.value) == NOT_FOUND_MESSAGE
        assert exc_info.value.question_id == record.id

    def test_get_missing_question(self, store):
        with pytest.raises(QuestionNotFoundError):
            store.get_by_id(str(uuid.uuid4()), OWNER)

    def test_update_practiced(self, store):
        record = store.create_batch(VALID_QUESTIONS, OWNER)[0]

        updated = store.update_practiced(record.id, True, OWNER)

        assert updated.practiced is True
        assert updated.content == record.content
        assert store.get_by_id(record.id, OWNER).practiced is True

        assert store.update_practiced(record.id, False, OWNER).practiced is False

    def test_update_other_users_question_changes_nothing(self, store):
        record = store.create_batch(VALID_QUESTIONS, OWNER)[0]
        with pytest.raises(QuestionNotFoundError):
            store.update_practiced(record.id, True, OTHER)
        assert store.get_by_id(record.id, OWNER).practiced is False

    def test_delete(self, store):
        records = store.create_batch(VALID_QUESTIONS, OWNER)

        store.delete(records[0].id, OWNER)

        with pytest.raises(QuestionNotFoundError):
            store.get_by_id(records[0].id, OWNER)
        assert store.list_by_owner(OWNER).total == 4

    def test_delete_other_users_question(self, store):
        record = store.create_batch(VALID_QUESTIONS, OWNER)[0]
        with pytest.raises(QuestionNotFoundError):
            store.delete(record.id, OTHER)
        assert store.list_by_owner(OWNER).total == 5

    def test_delete_twice(self, store):
        record = store.create_batch(VALID_QUESTIONS, OWNER)[0]
        store.delete(record.id, OWNER)
        with pytest.raises(QuestionNotFoundError):
            store.delete(record.id, OWNER)


class TestDeleteAllForOwner:
    def test_removes_only_owner_questions(self, store):
        store.create_batch(VALID_QUESTIONS, OWNER)
        store.create_batch(VALID_QUESTIONS[:2], OWNER)
        store.create_batch(VALID_QUESTIONS[:3], OTHER)

        assert store.delete_all_for_owner(OWNER) == 7
        assert store.list_by_owner(OWNER).total == 0
        assert store.list_by_owner(OTHER).total == 3

    def test_nothing_to_delete(self, store):
        assert store.delete_all_for_owner(OWNER) == 0


class TestDatabaseManager:
    def test_data_survives_reopening(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'persist.db'}"
        first = DatabaseManager(url)
        records = first.create_batch(VALID_QUESTIONS, OWNER)
        first.close()

        second = DatabaseManager(url)
        try:
            page = second.list_by_owner(OWNER)
            assert [r.id for r in page.records] == [r.id for r in records]
        finally:
            second.close()

    def test_in_memory_sqlite(self):
        manager = DatabaseManager("sqlite://")
        assert manager.db_engine == "sqlite"
        manager.close()
