# src/linkboard/models/vote.py
"""Model for the per-user vote ledger."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, SmallInteger
from sqlalchemy.orm import Mapped, mapped_column, relationship

from linkboard.db.session import Base

if TYPE_CHECKING:
    from .post import Post
    from .user import User

VOTE_UP = 1
VOTE_NONE = 0
VOTE_DOWN = -1


class Vote(Base):
    """One user's current stance on one post.

    The row is created on the first vote and updated in place afterwards;
    a retracted vote keeps its row with ``value == 0``.
    """

    __tablename__ = "vote"
    __table_args__ = (
        CheckConstraint("value IN (-1, 0, 1)", name="ck_vote_value"),
        Index("ix_vote_post_id", "post_id"),
    )

    # Composite primary key prevents duplicate votes from the same user.
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        primary_key=True,
    )
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # 1 = upvote, -1 = downvote, 0 = no active vote.
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=VOTE_NONE)

    user: Mapped[User] = relationship("User", back_populates="votes")
    post: Mapped[Post] = relationship("Post", back_populates="votes")
