"""Business logic services for the Linkboard application."""

from .voting import (
    find_score_drift,
    get_vote_status,
    load_vote_statuses,
    submit_vote,
    tally_votes,
)

__all__ = [
    "submit_vote",
    "get_vote_status",
    "load_vote_statuses",
    "tally_votes",
    "find_score_drift",
]
