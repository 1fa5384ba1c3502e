"""
tests/test_tokens.py -- Unit tests for JWTTokenIssuer.

Covers:
  - issue() then validate() before expiry returns the subject user id
  - exp - iat equals the configured duration, in whole seconds
  - expiry boundary: valid one second before exp, rejected at and after exp
  - tampered payload, wrong key, garbage input are rejected
  - algorithm pinning: HS512 and unsigned ("none") tokens are rejected
  - every rejection carries the identical "invalid or expired token" message
"""

from __future__ import annotations

import base64
import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.tokens import INVALID_TOKEN_MESSAGE, JWTTokenIssuer
from core.errors import UnauthorizedError

TEST_SECRET = "token-test-secret-key-at-least-32-characters"
FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

DAY = timedelta(hours=24)


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


@pytest.fixture
def issuer() -> JWTTokenIssuer:
    return JWTTokenIssuer(TEST_SECRET)


class TestIssueAndValidate:
    def test_round_trip_returns_user_id(self, issuer: JWTTokenIssuer) -> None:
        token = issuer.issue(42, FIXED_NOW, DAY)
        assert issuer.validate(token, FIXED_NOW) == 42

    def test_claims_shape(self, issuer: JWTTokenIssuer) -> None:
        """sub is a string, iat/exp are whole seconds exactly one duration apart."""
        token = issuer.issue(7, FIXED_NOW, DAY)
        claims = jwt.get_unverified_claims(token)
        assert claims["sub"] == "7"
        assert claims["iat"] == int(FIXED_NOW.timestamp())
        assert claims["exp"] - claims["iat"] == 86400
        assert set(claims) == {"sub", "iat", "exp"}

    def test_header_uses_hs256(self, issuer: JWTTokenIssuer) -> None:
        token = issuer.issue(1, FIXED_NOW, DAY)
        assert jwt.get_unverified_header(token)["alg"] == "HS256"

    def test_valid_one_second_before_expiry(self, issuer: JWTTokenIssuer) -> None:
        token = issuer.issue(5, FIXED_NOW, timedelta(hours=1))
        assert issuer.validate(token, FIXED_NOW + timedelta(minutes=59, seconds=59)) == 5


class TestRejection:
    def test_rejected_exactly_at_expiry(self, issuer: JWTTokenIssuer) -> None:
        """now >= exp is expired -- the boundary instant itself is not valid."""
        token = issuer.issue(5, FIXED_NOW, timedelta(hours=1))
        with pytest.raises(UnauthorizedError) as exc_info:
            issuer.validate(token, FIXED_NOW + timedelta(hours=1))
        assert exc_info.value.message == INVALID_TOKEN_MESSAGE

    def test_rejected_after_expiry(self, issuer: JWTTokenIssuer) -> None:
        token = issuer.issue(5, FIXED_NOW, timedelta(hours=1))
        with pytest.raises(UnauthorizedError):
            issuer.validate(token, FIXED_NOW + timedelta(days=3))

    def test_tampered_payload_rejected(self, issuer: JWTTokenIssuer) -> None:
        token = issuer.issue(5, FIXED_NOW, DAY)
        header, _payload, signature = token.split(".")
        claims = jwt.get_unverified_claims(token)
        claims["sub"] = "1"
        forged = f"{header}.{_b64(claims)}.{signature}"
        with pytest.raises(UnauthorizedError):
            issuer.validate(forged, FIXED_NOW)

    def test_wrong_key_rejected(self, issuer: JWTTokenIssuer) -> None:
        other = JWTTokenIssuer("another-secret-key-also-at-least-32-chars")
        token = other.issue(5, FIXED_NOW, DAY)
        with pytest.raises(UnauthorizedError):
            issuer.validate(token, FIXED_NOW)

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c", "Bearer xyz"])
    def test_garbage_rejected(self, issuer: JWTTokenIssuer, garbage: str) -> None:
        with pytest.raises(UnauthorizedError):
            issuer.validate(garbage, FIXED_NOW)

    def test_hs512_token_rejected(self, issuer: JWTTokenIssuer) -> None:
        """Same secret, different algorithm: still rejected by the pin."""
        iat = int(FIXED_NOW.timestamp())
        token = jwt.encode({"sub": "5", "iat": iat, "exp": iat + 3600}, TEST_SECRET, algorithm="HS512")
        with pytest.raises(UnauthorizedError):
            issuer.validate(token, FIXED_NOW)

    def test_unsigned_token_rejected(self, issuer: JWTTokenIssuer) -> None:
        iat = int(FIXED_NOW.timestamp())
        token = f"{_b64({'alg': 'none', 'typ': 'JWT'})}.{_b64({'sub': '5', 'iat': iat, 'exp': iat + 3600})}."
        with pytest.raises(UnauthorizedError):
            issuer.validate(token, FIXED_NOW)

    def test_non_numeric_subject_rejected(self, issuer: JWTTokenIssuer) -> None:
        iat = int(FIXED_NOW.timestamp())
        token = jwt.encode({"sub": "admin", "iat": iat, "exp": iat + 3600}, TEST_SECRET, algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            issuer.validate(token, FIXED_NOW)

    def test_missing_exp_rejected(self, issuer: JWTTokenIssuer) -> None:
        token = jwt.encode({"sub": "5"}, TEST_SECRET, algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            issuer.validate(token, FIXED_NOW)

    def test_all_failures_share_one_message(self, issuer: JWTTokenIssuer) -> None:
        expired = issuer.issue(5, FIXED_NOW, timedelta(seconds=1))
        messages = set()
        for token, now in [(expired, FIXED_NOW + timedelta(seconds=2)), ("garbage", FIXED_NOW)]:
            with pytest.raises(UnauthorizedError) as exc_info:
                issuer.validate(token, now)
            messages.add(exc_info.value.message)
        assert messages == {INVALID_TOKEN_MESSAGE}
