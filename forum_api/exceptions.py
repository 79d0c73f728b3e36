"""
Domain errors and the exception handlers that turn them into the API's
response envelope::

    {"status": "fail", "message": "..."}

Client errors (4xx) use ``status: "fail"``; server errors (5xx) use
``status: "error"`` with a generic message so internals are never leaked.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ForumError(Exception):
    """Base class for every error the API reports to clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"status": "fail", "message": self.message}


class ValidationError(ForumError):
    """Payload is missing a required field or a field has the wrong type."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(ForumError):
    """Bearer credential is missing, malformed or expired."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def to_dict(self) -> dict:
        return {"status": "fail", "error": "Unauthorized", "message": self.message}


class AuthorizationError(ForumError):
    """Caller is authenticated but may not act on the resource."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ForumError):
    """Referenced thread, comment or user does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class UnexpectedError(ForumError):
    """Persistence or infrastructure failure."""

    def to_dict(self) -> dict:
        return {"status": "error", "message": "An internal server error occurred"}


# =============================================================================
# Exception Handlers
# =============================================================================

async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    FastAPI rejects undecodable or non-object bodies before our validators
    run; report those as 400 like any other payload error.
    """
    first = exc.errors()[0] if exc.errors() else {}
    message = first.get("msg", "Invalid request payload")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationError(message).to_dict(),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    error = UnexpectedError(str(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last resort for infrastructure failures (driver connect errors, bugs).

    Starlette still re-raises the exception after this response is sent so
    the server logs it; the client only sees the envelope.
    """
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = UnexpectedError(str(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ForumError, forum_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
