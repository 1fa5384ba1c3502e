"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in inventory/models.py -- dataclasses own domain shape; stores and services
do the work.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    hashed_password is always a bcrypt hash, never the plaintext. It stays on
    the domain object because login needs it; api/models.UserResponse has no
    field for it, so it cannot leak into a response body.

    deleted_at is None for live accounts. There is no delete endpoint, but
    the store honours the marker on every read so an operator can retire an
    account directly in the database.
    """

    username: str
    email: str
    hashed_password: str
    id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None
    deleted_at: str | None = None


@dataclass(frozen=True)
class RegisterCommand:
    """Validated input for AuthService.register()."""

    username: str
    email: str
    password: str


@dataclass(frozen=True)
class LoginCommand:
    """Validated input for AuthService.login()."""

    username: str
    password: str


@dataclass(frozen=True)
class LoginResult:
    """A freshly issued session token plus the account it belongs to."""

    token: str
    user: User
    expires_in: int  # seconds
