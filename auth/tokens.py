"""
auth/tokens.py -- Session token issuer/validator (JWT, HS256).

Security design decisions:
  JWT: python-jose with HS256. Tokens carry only the subject (user id as a
       string, per RFC 7519), issued-at and expiry. Nothing else about the
       user is embedded -- identity details are re-read from the store on
       every authenticated request, so a retired account stops working
       immediately even while its token is unexpired.

  Time is an argument. issue() and validate() take `now` from the caller
       instead of reading the clock, which keeps them pure functions of
       (inputs, secret) and lets tests pin expiry behaviour to the second.
       python-jose's own exp check reads the wall clock, so it is switched
       off and the comparison happens here.

  Algorithm pinning: the unverified header's `alg` must equal the configured
       algorithm before the signature is even checked, and decode() is also
       given a one-element allow-list. Tokens signed with "none", RS256 or
       anything else are rejected outright.

  Uniform failure: every rejection -- malformed structure, bad signature,
       wrong algorithm, missing claims, expiry -- raises the same
       UnauthorizedError("invalid or expired token"). The reason is logged at
       DEBUG for operators and never returned to the caller.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Protocol

from jose import JWTError, jwt

from core.errors import UnauthorizedError

logger = logging.getLogger("stockroom.auth")

INVALID_TOKEN_MESSAGE = "invalid or expired token"

_ALGORITHM = "HS256"


class TokenIssuer(Protocol):
    def issue(self, user_id: int, now: datetime, duration: timedelta) -> str: ...

    def validate(self, token: str, now: datetime) -> int: ...


class JWTTokenIssuer:
    """Mint and verify signed, time-bounded session tokens.

    Usage:
        tokens = JWTTokenIssuer(settings.secret_key)
        token = tokens.issue(42, datetime.now(timezone.utc), timedelta(hours=24))
        user_id = tokens.validate(token, datetime.now(timezone.utc))  # -> 42
    """

    def __init__(self, secret_key: str, algorithm: str = _ALGORITHM) -> None:
        self._secret_key = secret_key
        self.algorithm = algorithm

    def issue(self, user_id: int, now: datetime, duration: timedelta) -> str:
        """Encode a signed JWT for user_id valid from now until now + duration.

        Timestamps are whole epoch seconds. exp is computed from the truncated
        iat so that exp - iat is exactly the configured duration.
        """
        issued_at = int(now.timestamp())
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + int(duration.total_seconds()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def validate(self, token: str, now: datetime) -> int:
        """Verify token at time now and return its subject user id.

        Raises UnauthorizedError on any failure. A token is expired from the
        instant now reaches exp.
        """
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg") != self.algorithm:
                raise JWTError(f"unexpected signing algorithm {header.get('alg')!r}")
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
            expires_at = payload.get("exp")
            if not isinstance(expires_at, (int, float)):
                raise JWTError("missing exp claim")
            if now.timestamp() >= expires_at:
                raise JWTError("token expired")
            subject = payload.get("sub")
            if not isinstance(subject, str) or not subject.isdigit():
                raise JWTError("missing or malformed sub claim")
        except JWTError as exc:
            logger.debug("Token rejected: %s", exc)
            raise UnauthorizedError(INVALID_TOKEN_MESSAGE) from None
        return int(subject)
