"""
Payload validators for thread and comment creation.

Each validator takes the raw decoded JSON body and returns a
``ValidationResult`` rather than raising, so callers decide how a bad
payload is reported.
"""
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import pydantic

from forum_api.schemas import NewComment, NewThread

T = TypeVar("T")


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    value: T | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.message is None

    @classmethod
    def success(cls, value: T) -> "ValidationResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, message: str) -> "ValidationResult[T]":
        return cls(message=message)


def _describe(exc: pydantic.ValidationError, entity: str) -> str:
    """Collapse pydantic's error list into one client-facing sentence."""
    missing = []
    wrong_type = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or entity
        if error["type"] == "missing":
            missing.append(field)
        else:
            wrong_type.append(field)
    if missing:
        return f"cannot create {entity}: missing required field(s) {', '.join(missing)}"
    return f"cannot create {entity}: field(s) {', '.join(wrong_type)} must be strings"


def _validate(model: type[pydantic.BaseModel], payload: Any, entity: str) -> ValidationResult:
    if not isinstance(payload, dict):
        return ValidationResult.failure(f"cannot create {entity}: payload must be a JSON object")
    try:
        return ValidationResult.success(model.model_validate(payload))
    except pydantic.ValidationError as exc:
        return ValidationResult.failure(_describe(exc, entity))


def validate_thread_payload(payload: Any) -> ValidationResult[NewThread]:
    """``title`` and ``body`` are required strings."""
    return _validate(NewThread, payload, "thread")


def validate_comment_payload(payload: Any) -> ValidationResult[NewComment]:
    """``content`` is a required string."""
    return _validate(NewComment, payload, "comment")
