"""Vote reconciliation service.

This module owns every write to the vote ledger and to ``Post.score``. A vote
is applied as a single unit of work:

- read the post's creator (missing post, self-vote)
- make sure a ledger row exists for the (user, post) pair
- lock that row and read its current value
- compute the new value and the score delta
- update the row and shift the score with ``score = score + delta``
- commit

Both writes commit together or not at all. Because the score is changed by
an atomic increment instead of read-modify-write, concurrent votes from
different users never lose updates. Votes from the same user on the same
post serialize on the ledger row.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from linkboard.core.exceptions import (
    NotFound,
    StorageError,
    Unauthorized,
    ValidationError,
    VotingError,
)
from linkboard.models.vote import VOTE_DOWN, VOTE_NONE, VOTE_UP
from linkboard.repositories.vote_repo import VoteRepository

__all__ = [
    "ScoreDrift",
    "TransitionKind",
    "VoteDirection",
    "VoteTransition",
    "find_score_drift",
    "get_vote_status",
    "load_vote_statuses",
    "parse_direction",
    "reconcile",
    "submit_vote",
    "tally_votes",
]


class VoteDirection(str, Enum):
    """Directions accepted from clients."""

    UP = "up"
    DOWN = "down"

    @property
    def weight(self) -> int:
        """Return the ledger value this direction stands for."""
        return VOTE_UP if self is VoteDirection.UP else VOTE_DOWN


class TransitionKind(Enum):
    """How a vote changed the caller's stance."""

    CAST = "cast"        # no active vote -> up/down
    RETRACT = "retract"  # same direction again -> no active vote
    FLIP = "flip"        # up <-> down


@dataclass(frozen=True)
class VoteTransition:
    """Outcome of reconciling a stored vote with a requested one."""

    previous: int | None
    value: int
    delta: int
    kind: TransitionKind


@dataclass(frozen=True)
class ScoreDrift:
    """A post whose stored score disagrees with its ledger."""

    post_id: int
    stored: int
    tallied: int


def parse_direction(direction: Any) -> int:
    """Map a client direction to a ledger value.

    Accepts exactly ``"up"`` or ``"down"``, or a ``VoteDirection`` member.

    Raises:
        ValidationError: For anything else.
    """
    if isinstance(direction, VoteDirection):
        return direction.weight
    if isinstance(direction, str):
        try:
            return VoteDirection(direction).weight
        except ValueError as err:
            raise ValidationError(direction) from err
    raise ValidationError(direction)


def reconcile(existing: int | None, requested: int) -> VoteTransition:
    """Compute the new ledger value and score delta for a vote.

    Args:
        existing: Stored value for the pair, or None if no row exists yet.
        requested: 1 for up, -1 for down.

    Returns:
        The transition to apply.
    """
    if requested not in (VOTE_UP, VOTE_DOWN):
        raise ValidationError(requested)

    if existing is None or existing == VOTE_NONE:
        return VoteTransition(existing, requested, requested, TransitionKind.CAST)
    if existing == requested:
        return VoteTransition(existing, VOTE_NONE, -existing, TransitionKind.RETRACT)
    return VoteTransition(existing, requested, 2 * requested, TransitionKind.FLIP)


def submit_vote(
    db: Session,
    acting_user_id: int | None,
    post_id: int,
    direction: Any,
) -> bool:
    """Apply a vote by ``acting_user_id`` on ``post_id`` and commit it.

    Args:
        db: Session whose transaction the vote runs in. It is committed on
            success and rolled back on failure.
        acting_user_id: Authenticated caller.
        post_id: Post being voted on.
        direction: ``"up"`` or ``"down"``.

    Returns:
        True on success, including the silent no-op for a vote on one's own post.

    Raises:
        Unauthorized: If ``acting_user_id`` is missing, not an integer, or
            names no existing user.
        ValidationError: If ``direction`` is not recognized.
        NotFound: If the post does not exist.
        StorageError: If the transaction fails. Nothing is persisted and the
            call may be replayed.
    """
    # bool is an int subclass; True must not pass for user 1.
    if not isinstance(acting_user_id, int) or isinstance(acting_user_id, bool):
        raise Unauthorized()
    requested = parse_direction(direction)

    repo = VoteRepository(db)
    try:
        if not repo.user_exists(acting_user_id):
            raise Unauthorized()
        creator_id = repo.get_post_creator(post_id)
        if creator_id is None:
            raise NotFound(post_id)
        if creator_id == acting_user_id:
            # Nothing to write; end the read transaction.
            db.rollback()
            return True

        inserted = repo.ensure_vote_row(acting_user_id, post_id)
        stored = repo.lock_vote_value(acting_user_id, post_id)
        transition = reconcile(None if inserted else stored, requested)

        repo.set_vote_value(acting_user_id, post_id, transition.value)
        if not repo.apply_score_delta(post_id, transition.delta):
            # Post was deleted after the creator lookup.
            raise NotFound(post_id)
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        raise StorageError(f"Vote on post {post_id} failed to commit") from err
    except VotingError:
        db.rollback()
        raise
    return True


def get_vote_status(db: Session, user_id: int | None, post_id: int) -> int | None:
    """Return the caller's stored vote on a post.

    Anonymous viewers and users who never voted get None; a retracted vote
    reads as 0.
    """
    if user_id is None:
        return None
    return VoteRepository(db).get_vote_value(user_id, post_id)


def load_vote_statuses(
    db: Session,
    user_id: int | None,
    post_ids: Iterable[int],
) -> dict[int, int | None]:
    """Batch form of ``get_vote_status`` used when rendering a list of posts."""
    ids = list(dict.fromkeys(post_ids))
    if user_id is None:
        return dict.fromkeys(ids)
    found = VoteRepository(db).get_vote_values(user_id, ids)
    return {post_id: found.get(post_id) for post_id in ids}


def tally_votes(db: Session, post_id: int) -> int:
    """Return the ledger sum for a post."""
    return VoteRepository(db).tally(post_id)


def find_score_drift(db: Session) -> list[ScoreDrift]:
    """Report posts whose stored score differs from the ledger sum.

    Read-only; scores are never rewritten here.
    """
    return [
        ScoreDrift(post_id=post_id, stored=int(stored), tallied=int(tallied))
        for post_id, stored, tallied in VoteRepository(db).score_mismatches()
    ]
