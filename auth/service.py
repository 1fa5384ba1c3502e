"""
auth/service.py -- Registration, login, and token-to-user resolution.

AuthService is a stateless orchestration layer over three collaborators it
receives at construction time: a user repository, a password hasher and a
token issuer. It holds no mutable state of its own and never reads global
configuration -- the token duration and clock are constructor arguments.

Ordering rules:
  register(): username check, then email check, then hash, then insert.
      Both uniqueness checks run before bcrypt so a doomed request does not
      pay for a hash, and before the insert so there is never a partial write.
      The store's partial unique indexes back the checks up: if a concurrent
      registration wins the race, the IntegrityError becomes the same
      ConflictError the pre-check would have raised.

  login(): unknown username and wrong password raise the identical
      UnauthorizedError. bcrypt runs on both paths (against a dummy hash when
      the user does not exist) so response time does not reveal whether a
      username is registered [C1].

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Protocol

from sqlalchemy.exc import IntegrityError

from auth.hashing import PasswordHasher
from auth.models import LoginCommand, LoginResult, RegisterCommand, User
from auth.tokens import INVALID_TOKEN_MESSAGE, TokenIssuer
from core.errors import ConflictError, UnauthorizedError

logger = logging.getLogger("stockroom.auth")

BAD_CREDENTIALS_MESSAGE = "invalid username or password"


class UserRepository(Protocol):
    def create_user(self, user: User) -> int: ...

    def get_by_username(self, username: str) -> User | None: ...

    def get_by_email(self, email: str) -> User | None: ...

    def get_by_id(self, user_id: int) -> User | None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthService:
    def __init__(
        self,
        store: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        token_duration: timedelta,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.token_duration = token_duration
        self.clock = clock
        # Timing equalization target for unknown usernames [C1]. Hashed once
        # here so the first failed login is not measurably slower than later ones.
        self._dummy_hash = hasher.hash("stockroom-timing-dummy")

    def register(self, cmd: RegisterCommand) -> User:
        """Create an account. Raises ConflictError if the username or email is taken."""
        if self.store.get_by_username(cmd.username) is not None:
            raise ConflictError("username already exists")
        if self.store.get_by_email(cmd.email) is not None:
            raise ConflictError("email already exists")

        user = User(
            username=cmd.username,
            email=cmd.email,
            hashed_password=self.hasher.hash(cmd.password),
        )
        try:
            user_id = self.store.create_user(user)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration; report which field collided.
            if self.store.get_by_username(cmd.username) is not None:
                raise ConflictError("username already exists") from exc
            raise ConflictError("email already exists") from exc

        created = self.store.get_by_id(user_id)
        logger.info("Registered user %s (id=%s)", cmd.username, user_id)
        return created

    def login(self, cmd: LoginCommand) -> LoginResult:
        """Check credentials and issue a session token.

        Raises UnauthorizedError with the same message whether the username
        is unknown or the password is wrong.
        """
        user = self.store.get_by_username(cmd.username)
        if user is None:
            self.hasher.verify(cmd.password, self._dummy_hash)
            logger.warning("Failed login for unknown username")
            raise UnauthorizedError(BAD_CREDENTIALS_MESSAGE)
        if not self.hasher.verify(cmd.password, user.hashed_password):
            logger.warning("Failed login for user id=%s", user.id)
            raise UnauthorizedError(BAD_CREDENTIALS_MESSAGE)

        token = self.tokens.issue(user.id, self.clock(), self.token_duration)
        return LoginResult(
            token=token,
            user=user,
            expires_in=int(self.token_duration.total_seconds()),
        )

    def authenticate(self, token: str) -> User:
        """Resolve a bearer token to a live User.

        A valid token whose user no longer exists is indistinguishable from
        an invalid token.
        """
        user_id = self.tokens.validate(token, self.clock())
        user = self.store.get_by_id(user_id)
        if user is None:
            raise UnauthorizedError(INVALID_TOKEN_MESSAGE)
        return user
