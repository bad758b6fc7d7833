# src/linkboard/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import votes_router

__all__ = ["votes_router"]
