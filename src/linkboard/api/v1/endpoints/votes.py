# src/linkboard/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Linkboard API."""

import logging

from fastapi import APIRouter, HTTPException, status

from linkboard.api.v1.dependencies import CurrentUserDep, SessionDep
from linkboard.core.exceptions import (
    NotFound,
    StorageError,
    Unauthorized,
    ValidationError,
    VotingError,
)
from linkboard.schemas.vote import VoteCreate, VoteResult, VoteStatus
from linkboard.services.voting import get_vote_status, submit_vote

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/votes", tags=["votes"])

_STATUS_BY_ERROR: dict[type[VotingError], int] = {
    Unauthorized: status.HTTP_401_UNAUTHORIZED,
    NotFound: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _to_http_error(err: VotingError) -> HTTPException:
    status_code = _STATUS_BY_ERROR.get(type(err), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if isinstance(err, StorageError):
        logger.error("Vote transaction failed: %s", err, exc_info=err.__cause__)
        return HTTPException(status_code=status_code, detail="Vote could not be recorded")
    logger.debug("Vote rejected (%d): %s", status_code, err)
    return HTTPException(status_code=status_code, detail=str(err))


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=VoteResult)
def cast_vote(
    vote_data: VoteCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VoteResult:
    """Cast, flip or retract a vote on a post.

    Voting the same direction twice retracts the vote. Votes on one's own
    post succeed without effect.
    """
    try:
        success = submit_vote(db, current_user.id, vote_data.post_id, vote_data.direction)
    except VotingError as err:
        raise _to_http_error(err) from err
    return VoteResult(success=success)


@router.get("/{post_id}/my-vote", response_model=VoteStatus)
def get_my_vote(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VoteStatus:
    """Get current user's vote on a specific post."""
    return VoteStatus(post_id=post_id, value=get_vote_status(db, current_user.id, post_id))
