"""
tests/test_config.py -- Unit tests for the SECRET_KEY policy in core.config.

Covers:
  - production mode without SECRET_KEY refuses to start
  - dev mode without SECRET_KEY generates a 32+ char key
  - keys shorter than 32 characters are rejected in both modes
  - defaults for token lifetime and bcrypt cost
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.config import Settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell environment out of these tests."""
    for name in ("SECRET_KEY", "DEBUG", "DATABASE_URL", "TOKEN_EXPIRE_SECONDS", "BCRYPT_ROUNDS", "RATE_LIMIT_ENABLED"):
        monkeypatch.delenv(name, raising=False)


def test_production_requires_secret_key() -> None:
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        Settings(_env_file=None, debug=False)


def test_debug_generates_secret_key() -> None:
    settings = Settings(_env_file=None, debug=True)
    assert len(settings.secret_key) >= 32


def test_generated_keys_differ() -> None:
    assert Settings(_env_file=None, debug=True).secret_key != Settings(_env_file=None, debug=True).secret_key


@pytest.mark.parametrize("debug", [True, False])
def test_short_secret_key_rejected(debug: bool) -> None:
    with pytest.raises(ValidationError, match="at least 32 characters"):
        Settings(_env_file=None, debug=debug, secret_key="too-short")


def test_defaults() -> None:
    settings = Settings(_env_file=None, secret_key="x" * 32)
    assert settings.token_expire_seconds == 86400
    assert settings.bcrypt_rounds == 12
    assert settings.rate_limit_enabled is True
    assert settings.database_url.startswith("sqlite:///")


def test_env_var_is_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SECRET_KEY", "k" * 40)
    monkeypatch.setenv("TOKEN_EXPIRE_SECONDS", "60")
    settings = Settings(_env_file=None)
    assert settings.secret_key == "k" * 40
    assert settings.token_expire_seconds == 60
