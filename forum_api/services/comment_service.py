"""
Comment service — add and soft-delete comments on a thread.

Check order matters and is fixed:

1. the thread must exist (404), even before the payload is looked at;
2. the comment must exist and belong to that thread (404);
3. only then is ownership checked (403).

A missing resource therefore always reports "not found" before
"forbidden".
"""
import logging

from forum_api.exceptions import AuthorizationError, NotFoundError, ValidationError
from forum_api.repositories import CommentRepository, ThreadRepository
from forum_api.schemas import AddedComment
from forum_api.validators import validate_comment_payload

logger = logging.getLogger(__name__)


async def add_comment(
    threads: ThreadRepository,
    comments: CommentRepository,
    owner_id: str,
    thread_id: str,
    payload,
) -> AddedComment:
    await threads.verify_thread_exists(thread_id)

    result = validate_comment_payload(payload)
    if not result.ok:
        raise ValidationError(result.message)

    added = await comments.add_comment(result.value, thread_id, owner_id)
    logger.info("Comment %s added to %s by %s", added.id, thread_id, owner_id)
    return added


async def delete_comment(
    threads: ThreadRepository,
    comments: CommentRepository,
    owner_id: str,
    thread_id: str,
    comment_id: str,
) -> None:
    """Soft-delete *comment_id*. Deleting an already deleted comment succeeds."""
    await threads.verify_thread_exists(thread_id)

    comment = await comments.get_comment_by_id(comment_id)
    if comment.thread_id != thread_id:
        raise NotFoundError(f"comment {comment_id} not found in thread {thread_id}")

    try:
        await comments.verify_comment_owner(comment_id, owner_id)
    except AuthorizationError:
        logger.warning("User %s tried to delete comment %s owned by %s", owner_id, comment_id, comment.owner_id)
        raise

    await comments.soft_delete_comment(comment_id)
    logger.info("Comment %s deleted by %s", comment_id, owner_id)
