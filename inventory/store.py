"""
inventory/store.py -- SQLAlchemy-backed persistence layer for stock items.

Uses SQLAlchemy Core (not ORM) so the Item dataclass in inventory/models.py
remains the authoritative domain representation.

Pattern: Repository + Data Mapper. ItemStore is the repository; _row_to_item
is the mapper. Route handlers and services never touch SQL directly.

Soft delete:
  delete_item() stamps deleted_at instead of removing the row. Every read
  path applies `deleted_at IS NULL` itself -- get_item, get_item_by_sku,
  list_items and update_item all share the _live predicate.

SKU uniqueness:
  uq_items_sku_live is a partial unique index over live rows only, so a SKU
  freed by a soft delete can be reused, and two concurrent writers claiming
  the same SKU cannot both succeed (the second gets IntegrityError).

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ItemStore(make_engine("sqlite:///:memory:"))
    item_id = store.create_item(Item(name="Laptop", sku="LAPTOP-001", quantity=25, price=1299.99))
    store.update_item(item_id, quantity=30)
    store.delete_item(item_id)
    store.close()
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Index, Integer, Numeric, String, Table, Text
from sqlalchemy.engine import Engine

from core.database import init_schema, metadata
from inventory.models import UPDATABLE_FIELDS, Item

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_items = Table(
    "items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(200), nullable=False),
    Column("sku", String(100), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("quantity", Integer, nullable=False, server_default="0"),
    Column("price", Numeric(10, 2, asdecimal=False), nullable=False, server_default="0"),
    Column("category", String(100), nullable=False, server_default="", index=True),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    Column("deleted_at", String(32), index=True),
)

Index(
    "uq_items_sku_live",
    _items.c.sku,
    unique=True,
    sqlite_where=_items.c.deleted_at.is_(None),
    postgresql_where=_items.c.deleted_at.is_(None),
)

_live = _items.c.deleted_at.is_(None)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ItemStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        init_schema(self.engine)

    def create_item(self, item: Item) -> int:
        """Insert a new item and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if a live item already has the SKU.
        """
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _items.insert().values(
                    name=item.name,
                    sku=item.sku,
                    description=item.description,
                    quantity=item.quantity,
                    price=item.price,
                    category=item.category,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def list_items(self) -> list[Item]:
        """Return all live items ordered by ID."""
        with self.engine.connect() as conn:
            rows = conn.execute(_items.select().where(_live).order_by(_items.c.id)).fetchall()
        return [_row_to_item(r) for r in rows]

    def get_item(self, item_id: int) -> Optional[Item]:
        """Fetch a live item by ID. Returns None if absent or soft-deleted."""
        with self.engine.connect() as conn:
            row = conn.execute(_items.select().where((_items.c.id == item_id) & _live)).fetchone()
        return _row_to_item(row) if row is not None else None

    def get_item_by_sku(self, sku: str) -> Optional[Item]:
        """Look up a live item by exact SKU. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_items.select().where((_items.c.sku == sku) & _live)).fetchone()
        return _row_to_item(row) if row is not None else None

    def update_item(self, item_id: int, **fields) -> bool:
        """Update mutable fields on a live item and refresh updated_at.

        Accepts any subset of UPDATABLE_FIELDS; unknown names raise ValueError
        before any SQL runs. Raises IntegrityError if a new SKU collides with
        another live item.

        Returns True if a row was updated, False if item_id was not found.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown item fields: {sorted(unknown)!r}")
        with self.engine.connect() as conn:
            result = conn.execute(
                _items.update().where((_items.c.id == item_id) & _live).values(**fields, updated_at=_now_iso())
            )
            conn.commit()
        return result.rowcount > 0

    def delete_item(self, item_id: int) -> bool:
        """Soft-delete a live item. Returns True if deleted, False if not found."""
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _items.update().where((_items.c.id == item_id) & _live).values(deleted_at=now, updated_at=now)
            )
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern -- DB row -> domain dataclass)
# ---------------------------------------------------------------------------


def _row_to_item(row) -> Item:
    return Item(
        id=row.id,
        name=row.name,
        sku=row.sku,
        description=row.description or "",
        quantity=row.quantity,
        price=float(row.price) if row.price is not None else 0.0,
        category=row.category or "",
        created_at=row.created_at,
        updated_at=row.updated_at,
        deleted_at=row.deleted_at,
    )
