import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from forum_api.database import get_db
from forum_api.dependencies import (
    AuthUser,
    get_comment_repository,
    get_current_user,
    get_thread_repository,
    get_user_repository,
)
from forum_api.repositories import CommentRepository, ThreadRepository, UserRepository
from forum_api.services import comment_service, thread_service

router = APIRouter(prefix="/threads", tags=["threads"])


async def _read_payload(request: Request) -> Any:
    """
    Decode the JSON body inside the handler, after authentication has run.

    An empty or undecodable body yields None, which the validators reject.
    """
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


@router.post("", status_code=201)
async def post_thread(
    request: Request,
    user: AuthUser = Depends(get_current_user),
    threads: ThreadRepository = Depends(get_thread_repository),
    db: AsyncSession = Depends(get_db),
):
    payload = await _read_payload(request)
    added = await thread_service.add_thread(threads, user.id, payload)
    await db.commit()
    return {"status": "success", "data": {"addedThread": added.model_dump()}}


@router.get("/{thread_id}")
async def get_thread(
    thread_id: str,
    threads: ThreadRepository = Depends(get_thread_repository),
    comments: CommentRepository = Depends(get_comment_repository),
    users: UserRepository = Depends(get_user_repository),
):
    detail = await thread_service.get_thread_detail(threads, comments, users, thread_id)
    return {"status": "success", "data": {"thread": detail.model_dump(mode="json")}}


@router.post("/{thread_id}/comments", status_code=201)
async def post_comment(
    thread_id: str,
    request: Request,
    user: AuthUser = Depends(get_current_user),
    threads: ThreadRepository = Depends(get_thread_repository),
    comments: CommentRepository = Depends(get_comment_repository),
    db: AsyncSession = Depends(get_db),
):
    payload = await _read_payload(request)
    added = await comment_service.add_comment(threads, comments, user.id, thread_id, payload)
    await db.commit()
    return {"status": "success", "data": {"addedComment": added.model_dump()}}


@router.delete("/{thread_id}/comments/{comment_id}")
async def delete_comment(
    thread_id: str,
    comment_id: str,
    user: AuthUser = Depends(get_current_user),
    threads: ThreadRepository = Depends(get_thread_repository),
    comments: CommentRepository = Depends(get_comment_repository),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(threads, comments, user.id, thread_id, comment_id)
    await db.commit()
    return {"status": "success"}
