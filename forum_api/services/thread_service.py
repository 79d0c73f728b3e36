"""
Thread service — use cases for the Thread aggregate.

- ``add_thread`` validates the raw payload before touching storage.
- ``get_thread_detail`` issues a fixed number of repository calls:
  thread, owner username, and one joined listing of comments.
  Deleted comments stay in the listing with their content masked.
"""
import logging

from forum_api.exceptions import ValidationError
from forum_api.repositories import CommentRepository, ThreadRepository, UserRepository
from forum_api.schemas import AddedThread, CommentDetail, CommentRecord, ThreadDetail
from forum_api.validators import validate_thread_payload

logger = logging.getLogger(__name__)

# Shown in place of the content of soft-deleted comments.
DELETED_COMMENT_PLACEHOLDER = "**komentar telah dihapus**"


def _comment_to_detail(comment: CommentRecord) -> CommentDetail:
    return CommentDetail(
        id=comment.id,
        username=comment.username,
        date=comment.created_at,
        content=DELETED_COMMENT_PLACEHOLDER if comment.is_deleted else comment.content,
    )


async def add_thread(threads: ThreadRepository, owner_id: str, payload) -> AddedThread:
    result = validate_thread_payload(payload)
    if not result.ok:
        raise ValidationError(result.message)

    added = await threads.add_thread(result.value, owner_id)
    logger.info("Thread %s created by %s", added.id, owner_id)
    return added


async def get_thread_detail(
    threads: ThreadRepository,
    comments: CommentRepository,
    users: UserRepository,
    thread_id: str,
) -> ThreadDetail:
    thread = await threads.get_thread_by_id(thread_id)
    username = await users.get_username_by_id(thread.owner_id)
    thread_comments = await comments.get_comments_by_thread_id(thread_id)

    return ThreadDetail(
        id=thread.id,
        title=thread.title,
        body=thread.body,
        date=thread.created_at,
        username=username,
        comments=[_comment_to_detail(c) for c in thread_comments],
    )
