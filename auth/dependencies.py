"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Only one auth method exists: an `Authorization: Bearer <token>` header
carrying a JWT issued by POST /api/v1/auth/login.

bearer_token() is the header-parsing step (boundary concern: syntax only).
get_current_user() hands the token to AuthService.authenticate(), which
validates it and loads the user. Every failure surfaces as
UnauthorizedError; api/main.py renders that as 401 with WWW-Authenticate.

Layer rule: no imports from api/ or inventory/.
  auth/dependencies.py may import from fastapi (for Depends/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Depends, Request

from auth.models import User
from auth.service import AuthService
from core.errors import UnauthorizedError


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def bearer_token(request: Request) -> str:
    """Extract the raw token from the Authorization header.

    The header must be exactly two space-separated parts with the literal
    scheme "Bearer".
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        raise UnauthorizedError("Authorization header required")
    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise UnauthorizedError("Invalid authorization header format")
    return parts[1]


def get_current_user(
    token: str = Depends(bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """Require authentication. Raises UnauthorizedError (-> 401) if the token does not resolve to a user.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    return auth_service.authenticate(token)
