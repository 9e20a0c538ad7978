"""FastAPI application for the campusvoice complaint board.

Provides REST API endpoints wrapping the campusvoice package for:
- Accounts and sessions
- Complaint submission, voting, reactions and the leaderboard
- Moderation: solving, editing, bulk deletion, bans and roles
- The notes marketplace
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from campusvoice import __version__
from campusvoice.config import load_settings, setup_logging
from campusvoice.errors import (
    AuthenticationError,
    BannedError,
    CampusVoiceError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from web.backend.app.routers import admin, auth, complaints, notes

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[CampusVoiceError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def create_app() -> FastAPI:
    settings = load_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="campusvoice API",
        description=(
            "REST API for the campusvoice complaint board. "
            "Screens complaints for abuse, clusters similar ones and escalates "
            "urgency as clusters grow."
        ),
        version=__version__,
    )

    # -----------------------------------------------------------------------
    # CORS middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Error mapping
    # -----------------------------------------------------------------------

    @app.exception_handler(CampusVoiceError)
    async def domain_error(request: Request, exc: CampusVoiceError):
        code = next(
            (s for cls, s in _STATUS_BY_ERROR if isinstance(exc, cls)),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        content = {"detail": str(exc)}
        if isinstance(exc, BannedError):
            content["banned_until"] = exc.banned_until.isoformat()
        return JSONResponse(status_code=code, content=content)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Failed to process request"},
        )

    # -----------------------------------------------------------------------
    # Include routers
    # -----------------------------------------------------------------------
    app.include_router(auth.router)
    app.include_router(complaints.router)
    app.include_router(complaints.leaderboard_router)
    app.include_router(admin.router)
    app.include_router(notes.router)

    @app.get("/", tags=["meta"])
    async def root():
        """Return basic API information."""
        return {
            "name": "campusvoice API",
            "version": __version__,
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    @app.get("/health", tags=["meta"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
