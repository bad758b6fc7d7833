"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    post_id: int
    # Checked by the voting service so that bad values surface as its ValidationError.
    direction: str = Field(..., description='"up" or "down"')


class VoteResult(BaseModel):
    """Outcome of a vote submission."""

    success: bool


class VoteStatus(BaseModel):
    """The caller's current vote on a post."""

    post_id: int
    value: int | None = Field(
        None,
        description="1 for up, -1 for down, 0 for retracted, null if never voted",
    )
