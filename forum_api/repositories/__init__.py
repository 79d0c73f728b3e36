from forum_api.repositories.base import CommentRepository, ThreadRepository, UserRepository
from forum_api.repositories.memory import (
    InMemoryCommentRepository,
    InMemoryStore,
    InMemoryThreadRepository,
    InMemoryUserRepository,
)
from forum_api.repositories.sql import SqlCommentRepository, SqlThreadRepository, SqlUserRepository

__all__ = [
    "CommentRepository",
    "ThreadRepository",
    "UserRepository",
    "InMemoryCommentRepository",
    "InMemoryStore",
    "InMemoryThreadRepository",
    "InMemoryUserRepository",
    "SqlCommentRepository",
    "SqlThreadRepository",
    "SqlUserRepository",
]
