"""
FastAPI dependencies: the authenticated caller and the repositories bound
to the request-scoped database session.

Tokens are issued elsewhere; this module only verifies them::

    @router.post("/threads")
    async def create(user: AuthUser = Depends(get_current_user)):
        ...
"""
import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from forum_api.config import settings
from forum_api.database import get_db
from forum_api.exceptions import AuthenticationError
from forum_api.repositories import SqlCommentRepository, SqlThreadRepository, SqlUserRepository

logger = logging.getLogger(__name__)

# auto_error=False: missing credentials are reported by get_current_user (401).
bearer_scheme = HTTPBearer(auto_error=False)


class AuthUser(BaseModel):
    id: str


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthUser:
    """
    Verify the bearer token and return the acting user.

    The user id is read from the ``id`` claim, falling back to ``sub``.
    """
    if credentials is None:
        raise AuthenticationError("Missing authentication")

    options = {"verify_aud": settings.ACCESS_TOKEN_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.ACCESS_TOKEN_AUDIENCE,
            options=options,
        )
    except ExpiredSignatureError:
        logger.info("Rejected expired access token")
        raise AuthenticationError("Token has expired")
    except JWTError as exc:
        logger.info("Rejected access token: %s", exc)
        raise AuthenticationError("Invalid token")

    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token: missing user id")
    return AuthUser(id=str(user_id))


def get_thread_repository(db: AsyncSession = Depends(get_db)) -> SqlThreadRepository:
    return SqlThreadRepository(db)


def get_comment_repository(db: AsyncSession = Depends(get_db)) -> SqlCommentRepository:
    return SqlCommentRepository(db)


def get_user_repository(db: AsyncSession = Depends(get_db)) -> SqlUserRepository:
    return SqlUserRepository(db)
