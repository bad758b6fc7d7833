"""Data access helpers for the vote ledger and post scores."""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import Row, func, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from linkboard.models.post import Post
from linkboard.models.user import User
from linkboard.models.vote import VOTE_NONE, Vote

__all__ = ["VoteRepository"]


class VoteRepository:
    """Thin wrapper around the SQL statements issued by the voting service.

    Every method runs inside the caller's session transaction; nothing here
    commits or rolls back.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def user_exists(self, user_id: int) -> bool:
        """Return True if a user row with this id exists."""
        return self.session.execute(
            select(User.id).where(User.id == user_id)
        ).first() is not None

    def get_post_creator(self, post_id: int) -> int | None:
        """Return the creator id of a post, or None when the post does not exist."""
        return self.session.execute(
            select(Post.creator_id).where(Post.id == post_id)
        ).scalar_one_or_none()

    def ensure_vote_row(self, user_id: int, post_id: int) -> bool:
        """Materialize a neutral ledger row for the pair if none exists.

        Returns:
            True if this call inserted the row, False if it was already present.
        """
        values = {"user_id": user_id, "post_id": post_id, "value": VOTE_NONE}
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(Vote).values(**values).on_conflict_do_nothing(
                index_elements=[Vote.user_id, Vote.post_id]
            )
        elif dialect == "sqlite":
            stmt = sqlite.insert(Vote).values(**values).on_conflict_do_nothing(
                index_elements=[Vote.user_id, Vote.post_id]
            )
        else:
            # No portable upsert; a racing duplicate insert fails on the primary key.
            if self.get_vote_value(user_id, post_id) is not None:
                return False
            stmt = insert(Vote).values(**values)
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def lock_vote_value(self, user_id: int, post_id: int) -> int | None:
        """Read the stored vote value while holding a row lock where supported."""
        return self.session.execute(
            select(Vote.value)
            .where(Vote.user_id == user_id, Vote.post_id == post_id)
            .with_for_update()
        ).scalar_one_or_none()

    def set_vote_value(self, user_id: int, post_id: int, value: int) -> None:
        """Overwrite the stored value of an existing ledger row."""
        self.session.execute(
            update(Vote)
            .where(Vote.user_id == user_id, Vote.post_id == post_id)
            .values(value=value)
            .execution_options(synchronize_session=False)
        )

    def apply_score_delta(self, post_id: int, delta: int) -> bool:
        """Atomically shift a post's score by ``delta``.

        Returns:
            False if no post row matched.
        """
        result = self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(score=Post.score + delta)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def get_vote_value(self, user_id: int, post_id: int) -> int | None:
        """Return the stored value for the pair without locking."""
        return self.session.execute(
            select(Vote.value).where(Vote.user_id == user_id, Vote.post_id == post_id)
        ).scalar_one_or_none()

    def get_vote_values(self, user_id: int, post_ids: Iterable[int]) -> dict[int, int]:
        """Return stored values keyed by post id for the posts the user voted on."""
        ids = list(post_ids)
        if not ids:
            return {}
        rows = self.session.execute(
            select(Vote.post_id, Vote.value).where(
                Vote.user_id == user_id,
                Vote.post_id.in_(ids),
            )
        )
        return {post_id: value for post_id, value in rows}

    def tally(self, post_id: int) -> int:
        """Return the sum of ledger values for a post."""
        total = self.session.execute(
            select(func.coalesce(func.sum(Vote.value), 0)).where(Vote.post_id == post_id)
        ).scalar_one()
        return int(total)

    def score_mismatches(self) -> Sequence[Row[tuple[int, int, int]]]:
        """Return (post_id, stored, tallied) for posts whose score disagrees with the ledger."""
        tallies = (
            select(Vote.post_id, func.sum(Vote.value).label("tallied"))
            .group_by(Vote.post_id)
            .subquery()
        )
        tallied = func.coalesce(tallies.c.tallied, 0)
        stmt = (
            select(Post.id, Post.score, tallied)
            .outerjoin(tallies, tallies.c.post_id == Post.id)
            .where(Post.score != tallied)
            .order_by(Post.id)
        )
        return self.session.execute(stmt).all()
