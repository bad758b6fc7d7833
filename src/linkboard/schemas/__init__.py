"""Pydantic schemas for the Linkboard API."""

from .vote import VoteCreate, VoteResult, VoteStatus

__all__ = ["VoteCreate", "VoteResult", "VoteStatus"]
