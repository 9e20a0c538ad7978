"""Auth router -- signup, login, logout and password endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from campusvoice.auth.models import User
from campusvoice.services import Services
from web.backend.app.middleware.auth import (
    bearer_token,
    get_current_user,
    get_services,
)
from web.backend.app.models.api import (
    AuthStatusResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    SignupRequest,
    UserResponse,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=LoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account and start a session",
)
async def signup(body: SignupRequest, services: Services = Depends(get_services)):
    """Register a new user. The first account on a fresh board is an admin."""
    services.auth.signup(
        body.username,
        body.email,
        body.password,
        roll_number=body.roll_number,
        user_type=body.user_type,
    )
    user, session = services.auth.login(body.username, body.password)
    return LoginResponse(token=session.token, expires_at=session.expires_at, user=UserResponse.from_user(user))


@router.post("/login", response_model=LoginResponse, summary="Login with username and password")
async def login(body: LoginRequest, services: Services = Depends(get_services)):
    user, session = services.auth.login(body.username, body.password)
    return LoginResponse(token=session.token, expires_at=session.expires_at, user=UserResponse.from_user(user))


@router.post("/logout", summary="Logout / invalidate session")
async def logout(
    token: Optional[str] = Depends(bearer_token),
    services: Services = Depends(get_services),
):
    """Invalidate the presented session token. Idempotent."""
    if token:
        services.auth.logout(token)
    return {"message": "Logged out successfully"}


@router.post("/change-password", summary="Change the current user's password")
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    services.auth.change_password(user.id, body.current_password, body.new_password)
    return {"success": True, "message": "Password updated successfully"}


@router.get("/me", response_model=AuthStatusResponse, summary="Get current user info")
async def me(user: User = Depends(get_current_user)):
    """Return the currently authenticated user."""
    return AuthStatusResponse(authenticated=True, user=UserResponse.from_user(user))
