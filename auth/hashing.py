"""
auth/hashing.py -- Password hashing capability and its bcrypt implementation.

AuthService depends on the PasswordHasher protocol, not on bcrypt. Tests and
alternative deployments can hand it anything with the same two methods.

bcrypt is used directly rather than through passlib: passlib's wrap-bug
detection hashes a password longer than 72 bytes, which bcrypt >= 4.1
rejects. bcrypt itself only reads the first 72 bytes of its input and
bcrypt 5 raises on anything longer, so both methods truncate to that limit
explicitly. Hash and verify therefore agree for every input length.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from typing import Protocol

import bcrypt

_BCRYPT_MAX_BYTES = 72


class PasswordHasher(Protocol):
    def hash(self, plain: str) -> str: ...

    def verify(self, plain: str, hashed: str) -> bool: ...


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class BcryptHasher:
    """One-way, salted password hashing with a configurable cost factor.

    rounds is the bcrypt log2 work factor (Settings.bcrypt_rounds). Every
    call to hash() draws a fresh salt, so the same password never produces
    the same hash twice.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if plain matches hashed. A malformed hash is a mismatch, not an error."""
        try:
            return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
        except ValueError:
            return False
