"""
FastAPI routes for user accounts.

Prefix: /api/user

Login returns the session token in the body and also sets it as an
HttpOnly cookie. Protected routes accept either.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response, status

from iothub.auth.models import AuthenticatedUser
from iothub.auth.service import AuthService
from .auth_middleware import get_auth_service, require_user
from .schemas import CredentialsIn, LoginOut, MeOut, MessageOut


router = APIRouter(prefix="/api/user", tags=["user"])


def _set_session_cookie(response: Response, token: str, auth_service: AuthService) -> None:
    settings = auth_service.settings
    lifetime = settings.token_ttl_hours * 60 * 60
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=lifetime,
        expires=lifetime,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


@router.post("/signup", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def signup(
    body: CredentialsIn,
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    """
    Create an account.

    Request (JSON):
        email, password

    Errors:
        400 policy or missing fields, 409 email already registered
    """
    auth_service.signup(body.email, body.password)
    return MessageOut(success=True, message="User created successfully.")


@router.post("/login", response_model=LoginOut)
def login(
    body: CredentialsIn,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    """
    Exchange credentials for a session token.

    Response:
        {"success": true, "message": "...", "token": "<session_token>"}
    """
    token = auth_service.login(body.email, body.password)
    _set_session_cookie(response, token, auth_service)
    return LoginOut(success=True, message="Login successful.", token=token)


@router.post("/logout", response_model=MessageOut)
def logout(
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    """Clear the session cookie. Tokens are stateless and stay valid until expiry."""
    response.delete_cookie(auth_service.settings.cookie_name, path="/")
    return MessageOut(success=True, message="Logged out.")


@router.get("/me", response_model=MeOut)
def me(current_user: AuthenticatedUser = Depends(require_user)) -> Any:
    return MeOut(email=current_user.email)
