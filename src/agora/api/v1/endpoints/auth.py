# src/agora/api/v1/endpoints/auth.py
"""Authentication endpoints for the Agora API."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status

from agora.api.v1.dependencies import (
    CurrentUserIdDep,
    RequestGateDep,
    SessionTokenDep,
    clear_session_cookie,
    set_session_cookie,
)
from agora.core.errors import (
    AuthenticationRequired,
    DuplicateIdentity,
    InvalidCredentials,
    InvalidRegistration,
)
from agora.schemas.user import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from agora.services.gate import LoginResult

router = APIRouter(prefix="/auth", tags=["authentication"])


def _auth_response(response: Response, result: LoginResult, message: str) -> AuthResponse:
    set_session_cookie(response, result.session)
    return AuthResponse(
        user=UserResponse.model_validate(result.user),
        expires_at=result.session.expires_at,
        message=message,
    )


@router.post(
    "/register",
    summary="Create an account and log it in",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
)
def register_user(
    payload: RegisterRequest,
    response: Response,
    gate: RequestGateDep,
) -> AuthResponse:
    """Register a new user; the new session replaces nothing since the user is new."""
    try:
        result = gate.register(payload.email, payload.username, payload.password)
    except DuplicateIdentity as err:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=err.message,
        ) from err
    except InvalidRegistration as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=err.message,
        ) from err
    return _auth_response(response, result, "Account created! You are now logged in.")


@router.post(
    "/login",
    summary="Authenticate with email or username and password",
    response_model=AuthResponse,
)
def login_user(
    payload: LoginRequest,
    response: Response,
    gate: RequestGateDep,
) -> AuthResponse:
    """Start a session, ending any session the user already had elsewhere."""
    try:
        result = gate.login(payload.login, payload.password)
    except InvalidCredentials as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=err.message,
        ) from err
    return _auth_response(response, result, f"Welcome back, {result.user.username}!")


@router.post("/logout", response_model=MessageResponse)
def logout_user(
    response: Response,
    token: SessionTokenDep,
    gate: RequestGateDep,
) -> MessageResponse:
    """Revoke the caller's session and clear the cookie."""
    gate.logout(token)
    clear_session_cookie(response)
    return MessageResponse(message="You have been logged out.")


@router.post("/guest", response_model=MessageResponse)
def continue_as_guest(
    response: Response,
    token: SessionTokenDep,
    gate: RequestGateDep,
) -> MessageResponse:
    """Drop any session and continue browsing anonymously."""
    gate.logout(token)
    clear_session_cookie(response)
    return MessageResponse(message="Continuing as Guest. Sign in to post or react.")


@router.get("/me", response_model=UserResponse)
def read_current_user(user_id: CurrentUserIdDep, gate: RequestGateDep) -> UserResponse:
    """Return the account behind the session cookie."""
    try:
        user = gate.current_user(user_id)
    except AuthenticationRequired as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=err.message,
        ) from err
    return UserResponse.model_validate(user)
