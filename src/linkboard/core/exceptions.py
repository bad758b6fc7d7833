"""Error taxonomy raised by the voting engine."""

from __future__ import annotations

from typing import Any


class VotingError(RuntimeError):
    """Base exception for every failure surfaced by the voting engine."""


class Unauthorized(VotingError):
    """Raised when the caller identity is missing."""

    def __init__(self, message: str = "Authentication required to vote") -> None:
        super().__init__(message)


class NotFound(VotingError):
    """Raised when the referenced post does not exist."""

    def __init__(self, post_id: int | None = None, message: str | None = None) -> None:
        self.post_id = post_id
        if message is None:
            message = f"Post {post_id} not found" if post_id is not None else "Post not found"
        super().__init__(message)


class ValidationError(VotingError):
    """Raised when a vote direction is not one of the recognized values."""

    def __init__(self, value: Any, message: str | None = None) -> None:
        self.value = value
        super().__init__(message or f"Invalid vote direction: {value!r}")


class StorageError(VotingError):
    """Raised when the vote transaction fails to commit.

    The originating database error is chained as ``__cause__``. Nothing was
    persisted, so callers may replay the whole vote.
    """
