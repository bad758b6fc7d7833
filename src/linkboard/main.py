# src/linkboard/main.py
"""Main entry point for the Linkboard application."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from linkboard.api.v1 import votes_router
from linkboard.core.settings import settings

# Initialize FastAPI app
app = FastAPI(
    title="Linkboard API",
    description="Voting engine for a link-sharing community",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include API routers
app.include_router(votes_router, prefix="/api/v1")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("linkboard.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
