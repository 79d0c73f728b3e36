from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forum_api.database import Base


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    fullname: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships — lazy="noload" enforces explicit loading in repositories
    threads: Mapped[List["Thread"]] = relationship(
        "Thread", back_populates="owner", lazy="noload"
    )


# ---------------------------------------------------------------------------
# Thread
# ---------------------------------------------------------------------------
class Thread(Base):
    __tablename__ = "threads"

    __table_args__ = (
        # User's threads sorted by date
        Index("ix_threads_owner_id_created_at", "owner_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    owner_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    owner: Mapped["User"] = relationship("User", back_populates="threads", lazy="noload")
    comments: Mapped[List["Comment"]] = relationship(
        "Comment", back_populates="thread", lazy="noload"
    )


# ---------------------------------------------------------------------------
# Comment
# ---------------------------------------------------------------------------
class Comment(Base):
    __tablename__ = "comments"

    __table_args__ = (
        # Thread detail lists comments oldest first
        Index("ix_comments_thread_id_created_at", "thread_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Soft delete: rows are kept so the thread detail can still render them.
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    thread_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("threads.id", ondelete="CASCADE"), nullable=False
    )
    owner_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    thread: Mapped["Thread"] = relationship("Thread", back_populates="comments", lazy="noload")
    owner: Mapped["User"] = relationship("User", lazy="noload")
