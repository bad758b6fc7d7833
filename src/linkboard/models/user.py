# src/linkboard/models/user.py
"""SQLAlchemy model for community members."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from linkboard.db.session import Base

if TYPE_CHECKING:
    from .post import Post
    from .vote import Vote


class User(Base):
    """Registered member able to post and vote.

    Credentials live with the external authentication layer; only the
    identity needed to own posts and votes is stored here.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    posts: Mapped[list[Post]] = relationship("Post", back_populates="creator")
    votes: Mapped[list[Vote]] = relationship("Vote", back_populates="user")
