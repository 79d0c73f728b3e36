"""Repository contracts.

Use cases depend only on these ABCs. ``sql`` implements them over an
``AsyncSession``; ``memory`` keeps everything in dicts for tests and
local experiments.
"""
import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable

from forum_api.schemas import (
    AddedComment,
    AddedThread,
    CommentRecord,
    NewComment,
    NewThread,
    ThreadRecord,
    UserRecord,
)

IdGenerator = Callable[[], str]
Clock = Callable[[], datetime]


def random_id() -> str:
    return secrets.token_hex(8)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ThreadRepository(ABC):
    def __init__(self, id_generator: IdGenerator = random_id) -> None:
        self._id_generator = id_generator

    def _next_id(self) -> str:
        return f"thread-{self._id_generator()}"

    @abstractmethod
    async def add_thread(self, new_thread: NewThread, owner_id: str) -> AddedThread:
        """Persist a thread owned by *owner_id*."""

    @abstractmethod
    async def get_thread_by_id(self, thread_id: str) -> ThreadRecord:
        """Return the thread or raise ``NotFoundError``."""

    async def verify_thread_exists(self, thread_id: str) -> None:
        """Raise ``NotFoundError`` when the thread is absent."""
        await self.get_thread_by_id(thread_id)


class CommentRepository(ABC):
    def __init__(self, id_generator: IdGenerator = random_id) -> None:
        self._id_generator = id_generator

    def _next_id(self) -> str:
        return f"comment-{self._id_generator()}"

    @abstractmethod
    async def add_comment(
        self, new_comment: NewComment, thread_id: str, owner_id: str
    ) -> AddedComment:
        """Persist an active comment on *thread_id*."""

    @abstractmethod
    async def get_comment_by_id(self, comment_id: str) -> CommentRecord:
        """Return the comment (deleted or not) or raise ``NotFoundError``."""

    @abstractmethod
    async def verify_comment_owner(self, comment_id: str, owner_id: str) -> None:
        """Raise ``AuthorizationError`` unless *owner_id* owns the comment."""

    @abstractmethod
    async def soft_delete_comment(self, comment_id: str) -> None:
        """Mark the comment deleted. Deleting twice is not an error."""

    @abstractmethod
    async def get_comments_by_thread_id(self, thread_id: str) -> list[CommentRecord]:
        """All comments of the thread, oldest first, with ``username`` set."""


class UserRepository(ABC):
    @abstractmethod
    async def add_user(self, user_id: str, username: str, fullname: str | None = None) -> UserRecord:
        """Register a user. Used by seeding and tests."""

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> UserRecord:
        """Return the user or raise ``NotFoundError``."""

    async def get_username_by_id(self, user_id: str) -> str:
        return (await self.get_user_by_id(user_id)).username
