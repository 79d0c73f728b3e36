from datetime import datetime

from pydantic import BaseModel, ConfigDict


# --- Request payloads ---
# Strict: a number is not a title. Unknown keys are ignored.

class NewThread(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    title: str
    body: str


class NewComment(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    content: str


# --- Stored entities (what repositories hand back) ---

class UserRecord(BaseModel):
    id: str
    username: str
    fullname: str | None = None
    model_config = ConfigDict(from_attributes=True)


class ThreadRecord(BaseModel):
    id: str
    title: str
    body: str
    owner_id: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CommentRecord(BaseModel):
    id: str
    thread_id: str
    owner_id: str
    content: str
    created_at: datetime
    is_deleted: bool = False
    # Owner's username, filled in by listing queries only.
    username: str | None = None
    model_config = ConfigDict(from_attributes=True)


# --- Responses ---

class AddedThread(BaseModel):
    id: str
    title: str
    owner: str


class AddedComment(BaseModel):
    id: str
    content: str
    owner: str


class CommentDetail(BaseModel):
    id: str
    username: str
    date: datetime
    content: str


class ThreadDetail(BaseModel):
    id: str
    title: str
    body: str
    date: datetime
    username: str
    comments: list[CommentDetail] = []

