"""
Auth dependency helpers.

require_user() is a FastAPI dependency that:
- Reads the session token from Authorization: Bearer <token>, falling
  back to the session cookie
- Verifies it through the AuthService
- Returns the authenticated identity (AuthError -> 401 otherwise)
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request

from iothub.auth.models import AuthenticatedUser
from iothub.auth.service import AuthService
from iothub.services.registry import ResourceRegistry


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_registry(request: Request) -> ResourceRegistry:
    return request.app.state.registry


def _extract_token(request: Request, cookie_name: str) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip()
    return request.cookies.get(cookie_name)


def require_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthenticatedUser:
    """Dependency for protected routes."""
    token = _extract_token(request, auth_service.settings.cookie_name)
    return auth_service.resolve_token(token)
