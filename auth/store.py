"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as inventory/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route and service code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Uniqueness:
  username and email are each unique among live (non-deleted) accounts. The
  partial unique indexes below enforce that at write time, which is what
  makes AuthService's check-then-insert safe under concurrent registrations:
  the loser of the race gets an IntegrityError instead of a duplicate row.

Soft delete:
  Every read filters on deleted_at IS NULL explicitly. There is no implicit
  default scope to forget.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Index, Integer, String, Table, Text
from sqlalchemy.engine import Engine

from auth.models import User
from core.database import init_schema, metadata, ping

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(50), nullable=False),
    Column("email", String(255), nullable=False),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    Column("deleted_at", String(32), index=True),
)

Index(
    "uq_users_username_live",
    _users.c.username,
    unique=True,
    sqlite_where=_users.c.deleted_at.is_(None),
    postgresql_where=_users.c.deleted_at.is_(None),
)
Index(
    "uq_users_email_live",
    _users.c.email,
    unique=True,
    sqlite_where=_users.c.deleted_at.is_(None),
    postgresql_where=_users.c.deleted_at.is_(None),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


_live = _users.c.deleted_at.is_(None)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore(make_engine("sqlite:///:memory:"))
        user_id = store.create_user(User(username="johndoe", email="john@example.com", hashed_password=h))
        user = store.get_by_username("johndoe")
        store.close()
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        init_schema(self.engine)

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if a live account already holds
        the username or email. AuthService translates that into a conflict.
        """
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    username=user.username,
                    email=user.email,
                    hashed_password=user.hashed_password,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_username(self, username: str) -> User | None:
        """Look up a live user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where((_users.c.username == username) & _live)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Look up a live user by exact email. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where((_users.c.email == email) & _live)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a live user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where((_users.c.id == user_id) & _live)).fetchone()
        return _row_to_user(row) if row is not None else None

    def ping(self) -> bool:
        return ping(self.engine)

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
        updated_at=row.updated_at,
        deleted_at=row.deleted_at,
    )
