"""
SQLAlchemy implementations of the repository contracts.

- Every repository wraps the request-scoped ``AsyncSession`` it is given.
- Writes flush but do not commit; write handlers commit the request
  session before responding.
- Comment listings join ``users`` in the same statement so the thread
  detail costs a fixed number of queries regardless of comment count.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from forum_api.exceptions import AuthorizationError, NotFoundError
from forum_api.models import Comment, Thread, User
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

logger = logging.getLogger(__name__)


class SqlThreadRepository(ThreadRepository):
    def __init__(
        self, db: AsyncSession, id_generator: IdGenerator = random_id, clock: Clock = utc_now
    ) -> None:
        super().__init__(id_generator)
        self.db = db
        self.clock = clock

    async def add_thread(self, new_thread: NewThread, owner_id: str) -> AddedThread:
        thread = Thread(
            id=self._next_id(),
            title=new_thread.title,
            body=new_thread.body,
            owner_id=owner_id,
            created_at=self.clock(),
        )
        self.db.add(thread)
        await self.db.flush()
        return AddedThread(id=thread.id, title=thread.title, owner=thread.owner_id)

    async def get_thread_by_id(self, thread_id: str) -> ThreadRecord:
        thread = await self.db.get(Thread, thread_id)
        if thread is None:
            raise NotFoundError(f"thread {thread_id} not found")
        return ThreadRecord.model_validate(thread)

    async def verify_thread_exists(self, thread_id: str) -> None:
        q = select(Thread.id).where(Thread.id == thread_id)
        if (await self.db.execute(q)).scalar_one_or_none() is None:
            raise NotFoundError(f"thread {thread_id} not found")


class SqlCommentRepository(CommentRepository):
    def __init__(
        self, db: AsyncSession, id_generator: IdGenerator = random_id, clock: Clock = utc_now
    ) -> None:
        super().__init__(id_generator)
        self.db = db
        self.clock = clock

    async def add_comment(
        self, new_comment: NewComment, thread_id: str, owner_id: str
    ) -> AddedComment:
        comment = Comment(
            id=self._next_id(),
            thread_id=thread_id,
            owner_id=owner_id,
            content=new_comment.content,
            created_at=self.clock(),
            is_deleted=False,
        )
        self.db.add(comment)
        await self.db.flush()
        return AddedComment(id=comment.id, content=comment.content, owner=comment.owner_id)

    async def get_comment_by_id(self, comment_id: str) -> CommentRecord:
        comment = await self.db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError(f"comment {comment_id} not found")
        return CommentRecord.model_validate(comment)

    async def verify_comment_owner(self, comment_id: str, owner_id: str) -> None:
        q = select(Comment.owner_id).where(Comment.id == comment_id)
        actual_owner = (await self.db.execute(q)).scalar_one_or_none()
        if actual_owner is None:
            raise NotFoundError(f"comment {comment_id} not found")
        if actual_owner != owner_id:
            raise AuthorizationError("you are not allowed to access this comment")

    async def soft_delete_comment(self, comment_id: str) -> None:
        q = update(Comment).where(Comment.id == comment_id).values(is_deleted=True)
        result = await self.db.execute(q)
        if result.rowcount == 0:
            raise NotFoundError(f"comment {comment_id} not found")
        await self.db.flush()

    async def get_comments_by_thread_id(self, thread_id: str) -> list[CommentRecord]:
        # Outer join: a comment whose owner row is gone is an error, not a gap.
        q = (
            select(Comment, User.username)
            .outerjoin(User, User.id == Comment.owner_id)
            .where(Comment.thread_id == thread_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        rows = (await self.db.execute(q)).all()
        result = []
        for comment, username in rows:
            if username is None:
                raise NotFoundError(f"user {comment.owner_id} not found")
            result.append(
                CommentRecord.model_validate(comment).model_copy(update={"username": username})
            )
        return result


class SqlUserRepository(UserRepository):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def add_user(self, user_id: str, username: str, fullname: str | None = None) -> UserRecord:
        user = User(id=user_id, username=username, fullname=fullname)
        self.db.add(user)
        await self.db.flush()
        return UserRecord(id=user.id, username=user.username, fullname=user.fullname)

    async def get_user_by_id(self, user_id: str) -> UserRecord:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError(f"user {user_id} not found")
        return UserRecord.model_validate(user)

    async def get_username_by_id(self, user_id: str) -> str:
        q = select(User.username).where(User.id == user_id)
        username = (await self.db.execute(q)).scalar_one_or_none()
        if username is None:
            raise NotFoundError(f"user {user_id} not found")
        return username
