"""
In-memory repositories sharing one ``InMemoryStore``.

They behave like the SQL implementations (same errors, same ordering)
and are used by the use-case tests so business rules can be exercised
without a database.
"""
from dataclasses import dataclass, field

from forum_api.exceptions import AuthorizationError, NotFoundError
from forum_api.repositories.base import (
    CommentRepository,
    Clock,
    IdGenerator,
    ThreadRepository,
    UserRepository,
    random_id,
    utc_now,
)
from forum_api.schemas import (
    AddedComment,
    AddedThread,
    CommentRecord,
    NewComment,
    NewThread,
    ThreadRecord,
    UserRecord,
)


@dataclass
class InMemoryStore:
    users: dict[str, UserRecord] = field(default_factory=dict)
    threads: dict[str, ThreadRecord] = field(default_factory=dict)
    comments: dict[str, CommentRecord] = field(default_factory=dict)
    clock: Clock = utc_now


class InMemoryThreadRepository(ThreadRepository):
    def __init__(self, store: InMemoryStore, id_generator: IdGenerator = random_id) -> None:
        super().__init__(id_generator)
        self.store = store

    async def add_thread(self, new_thread: NewThread, owner_id: str) -> AddedThread:
        thread = ThreadRecord(
            id=self._next_id(),
            title=new_thread.title,
            body=new_thread.body,
            owner_id=owner_id,
            created_at=self.store.clock(),
        )
        self.store.threads[thread.id] = thread
        return AddedThread(id=thread.id, title=thread.title, owner=owner_id)

    async def get_thread_by_id(self, thread_id: str) -> ThreadRecord:
        try:
            return self.store.threads[thread_id]
        except KeyError:
            raise NotFoundError(f"thread {thread_id} not found") from None


class InMemoryCommentRepository(CommentRepository):
    def __init__(self, store: InMemoryStore, id_generator: IdGenerator = random_id) -> None:
        super().__init__(id_generator)
        self.store = store

    def _get(self, comment_id: str) -> CommentRecord:
        try:
            return self.store.comments[comment_id]
        except KeyError:
            raise NotFoundError(f"comment {comment_id} not found") from None

    async def add_comment(
        self, new_comment: NewComment, thread_id: str, owner_id: str
    ) -> AddedComment:
        if thread_id not in self.store.threads:
            # Mirrors the foreign key on comments.thread_id.
            raise NotFoundError(f"thread {thread_id} not found")
        comment = CommentRecord(
            id=self._next_id(),
            thread_id=thread_id,
            owner_id=owner_id,
            content=new_comment.content,
            created_at=self.store.clock(),
        )
        self.store.comments[comment.id] = comment
        return AddedComment(id=comment.id, content=comment.content, owner=owner_id)

    async def get_comment_by_id(self, comment_id: str) -> CommentRecord:
        return self._get(comment_id)

    async def verify_comment_owner(self, comment_id: str, owner_id: str) -> None:
        if self._get(comment_id).owner_id != owner_id:
            raise AuthorizationError("you are not allowed to access this comment")

    async def soft_delete_comment(self, comment_id: str) -> None:
        comment = self._get(comment_id)
        self.store.comments[comment_id] = comment.model_copy(update={"is_deleted": True})

    async def get_comments_by_thread_id(self, thread_id: str) -> list[CommentRecord]:
        comments = [c for c in self.store.comments.values() if c.thread_id == thread_id]
        comments.sort(key=lambda c: (c.created_at, c.id))
        result = []
        for comment in comments:
            owner = self.store.users.get(comment.owner_id)
            if owner is None:
                raise NotFoundError(f"user {comment.owner_id} not found")
            result.append(comment.model_copy(update={"username": owner.username}))
        return result


class InMemoryUserRepository(UserRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def add_user(self, user_id: str, username: str, fullname: str | None = None) -> UserRecord:
        user = UserRecord(id=user_id, username=username, fullname=fullname)
        self.store.users[user_id] = user
        return user

    async def get_user_by_id(self, user_id: str) -> UserRecord:
        try:
            return self.store.users[user_id]
        except KeyError:
            raise NotFoundError(f"user {user_id} not found") from None
