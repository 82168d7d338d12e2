import threading

from sqlalchemy import create_engine, delete, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .constants import DEFAULT_DATABASE_URL, DEFAULT_PAGE_LIMIT, QUESTIONS_PER_BATCH
from .database_models import Base, QuestionTable, utc_now
from .logging import span
from .models import QuestionPage, QuestionRecord
from .storage_interface import QuestionStoreInterface

NOT_FOUND_MESSAGE = "Question not found or access denied"


class StorageError(Exception):
    """Base exception for storage operations."""

    pass


class QuestionNotFoundError(StorageError):
    """Raised when a question does not exist or belongs to another user."""

    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(NOT_FOUND_MESSAGE)


class QuestionSaveError(StorageError):
    """Raised when questions cannot be saved."""

    pass


class QuestionLoadError(StorageError):
    """Raised when questions cannot be loaded."""

    pass


class QuestionDeleteError(StorageError):
    """Raised when questions cannot be deleted."""

    pass


def validate_batch(contents: list[str]) -> None:
    if not 1 <= len(contents) <= QUESTIONS_PER_BATCH:
        raise ValueError(f"A question batch must hold 1 to {QUESTIONS_PER_BATCH} questions, got {len(contents)}")


def table_to_record(row: QuestionTable) -> QuestionRecord:
    return QuestionRecord(
        id=row.id,
        user_id=row.user_id,
        content=row.content,
        position=row.position,
        practiced=row.practiced,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DatabaseManager(QuestionStoreInterface):
    def __init__(self, database_url: str = DEFAULT_DATABASE_URL):
        """Initialize the store against any SQLAlchemy URL (SQLite by default)."""
        url = make_url(database_url)
        self.db_engine = url.get_backend_name()
        self._write_lock = threading.Lock()

        connect_args = {}
        if self.db_engine == "sqlite":
            # FastAPI runs sync handlers in a threadpool
            connect_args["check_same_thread"] = False

        self.engine = create_engine(
            url,
            echo=False,
            pool_pre_ping=True,
            pool_recycle=3600,
            connect_args=connect_args,
        )
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(bind=self.engine)

    def _owned_question(self, db_session, question_id: str, user_id: str) -> QuestionTable:
        query = select(QuestionTable).where(QuestionTable.id == question_id, QuestionTable.user_id == user_id)
        row = db_session.execute(query).scalar_one_or_none()
        if row is None:
            raise QuestionNotFoundError(question_id)
        return row

    def create_batch(self, contents: list[str], user_id: str) -> list[QuestionRecord]:
        validate_batch(contents)
        with span(
            "db.create_batch",
            component="db",
            operation="create_batch",
            user_id=user_id,
            questions=len(contents),
            db_engine=self.db_engine,
        ):
            with self._write_lock, self.SessionLocal() as db_session:
                try:
                    now = utc_now()
                    rows = [
                        QuestionTable(
                            user_id=user_id,
                            content=content,
                            position=index,
                            practiced=False,
                            created_at=now,
                            updated_at=now,
                        )
                        for index, content in enumerate(contents, start=1)
                    ]
                    db_session.add_all(rows)
                    db_session.commit()
                    return [table_to_record(row) for row in rows]
                except SQLAlchemyError as e:
                    db_session.rollback()
                    raise QuestionSaveError(f"Failed to save questions for user {user_id}: {str(e)}") from e

    def list_by_owner(
        self,
        user_id: str,
        practiced: bool | None = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> QuestionPage:
        with span(
            "db.list_by_owner",
            component="db",
            operation="list_by_owner",
            user_id=user_id,
            practiced=practiced,
            limit=limit,
            offset=offset,
            db_engine=self.db_engine,
        ):
            with self.SessionLocal() as db_session:
                try:
                    conditions = [QuestionTable.user_id == user_id]
                    if practiced is not None:
                        conditions.append(QuestionTable.practiced == practiced)

                    total = db_session.execute(
                        select(func.count()).select_from(QuestionTable).where(*conditions)
                    ).scalar_one()

                    query = (
                        select(QuestionTable)
                        .where(*conditions)
                        .order_by(QuestionTable.created_at.desc(), QuestionTable.position.asc())
                        .limit(limit)
                        .offset(offset)
                    )
                    rows = db_session.execute(query).scalars().all()
                    return QuestionPage(records=[table_to_record(row) for row in rows], total=total)
                except SQLAlchemyError as e:
                    raise QuestionLoadError(f"Failed to list questions for user {user_id}: {str(e)}") from e

    def get_by_id(self, question_id: str, user_id: str) -> QuestionRecord:
        with span(
            "db.get_question",
            component="db",
            operation="get_by_id",
            question_id=question_id,
            user_id=user_id,
            db_engine=self.db_engine,
        ):
            with self.SessionLocal() as db_session:
                try:
                    return table_to_record(self._owned_question(db_session, question_id, user_id))
                except SQLAlchemyError as e:
                    raise QuestionLoadError(f"Failed to load question {question_id}: {str(e)}") from e

    def update_practiced(self, question_id: str, practiced: bool, user_id: str) -> QuestionRecord:
        with span(
            "db.update_practiced",
            component="db",
            operation="update_practiced",
            question_id=question_id,
            user_id=user_id,
            practiced=practiced,
            db_engine=self.db_engine,
        ):
            with self._write_lock, self.SessionLocal() as db_session:
                try:
                    row = self._owned_question(db_session, question_id, user_id)
                    row.practiced = practiced
                    row.updated_at = utc_now()
                    db_session.commit()
                    return table_to_record(row)
                except SQLAlchemyError as e:
                    db_session.rollback()
                    raise QuestionSaveError(f"Failed to update question {question_id}: {str(e)}") from e

    def delete(self, question_id: str, user_id: str) -> None:
        with span(
            "db.delete_question",
            component="db",
            operation="delete",
            question_id=question_id,
            user_id=user_id,
            db_engine=self.db_engine,
        ):
            with self._write_lock, self.SessionLocal() as db_session:
                try:
                    row = self._owned_question(db_session, question_id, user_id)
                    db_session.delete(row)
                    db_session.commit()
                except SQLAlchemyError as e:
                    db_session.rollback()
                    raise QuestionDeleteError(f"Failed to delete question {question_id}: {str(e)}") from e

    def delete_all_for_owner(self, user_id: str) -> int:
        with span(
            "db.delete_all_for_owner",
            component="db",
            operation="delete_all_for_owner",
            user_id=user_id,
            db_engine=self.db_engine,
        ):
            with self._write_lock, self.SessionLocal() as db_session:
                try:
                    result = db_session.execute(delete(QuestionTable).where(QuestionTable.user_id == user_id))
                    db_session.commit()
                    return result.rowcount or 0
                except SQLAlchemyError as e:
                    db_session.rollback()
                    raise QuestionDeleteError(f"Failed to delete questions for user {user_id}: {str(e)}") from e

    def close(self) -> None:
        """Close the database engine and release pooled connections."""
        self.engine.dispose()
