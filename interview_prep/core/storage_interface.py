from abc import ABC, abstractmethod

from .constants import DEFAULT_PAGE_LIMIT
from .models import QuestionPage, QuestionRecord


class QuestionStoreInterface(ABC):
    """Abstract interface for owner-scoped question storage.

    Every read and write takes the owner's user id. A record that exists but
    belongs to someone else is indistinguishable from a missing one: both raise
    ``QuestionNotFoundError``.
    """

    @abstractmethod
    def create_batch(self, contents: list[str], user_id: str) -> list[QuestionRecord]:
        """Insert one generation's questions atomically with positions 1..n."""
        pass

    @abstractmethod
    def list_by_owner(
        self,
        user_id: str,
        practiced: bool | None = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> QuestionPage:
        """List the owner's questions, newest batch first, by position within a batch."""
        pass

    @abstractmethod
    def get_by_id(self, question_id: str, user_id: str) -> QuestionRecord:
        pass

    @abstractmethod
    def update_practiced(self, question_id: str, practiced: bool, user_id: str) -> QuestionRecord:
        pass

    @abstractmethod
    def delete(self, question_id: str, user_id: str) -> None:
        pass

    @abstractmethod
    def delete_all_for_owner(self, user_id: str) -> int:
        """Delete every question the owner has. Returns the number removed."""
        pass

    def close(self) -> None:
        """Release any resources held by the store."""
        return None
