"""
inventory/models.py -- Domain dataclasses for stock items.

These are pure data containers with zero logic. Uniqueness and range rules
live in inventory/service.py; persistence lives in inventory/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Item:
    """A stock-keeping unit tracked by the inventory.

    sku is unique among live items. quantity and price are never negative.
    price is held as a float and stored as NUMERIC(10, 2).

    id is None before the record is written to the database.
    deleted_at is set (ISO 8601) when the item is soft-deleted; the store
    never returns such rows.
    """

    name: str
    sku: str
    description: str = ""
    quantity: int = 0
    price: float = 0.0
    category: str = ""
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, refreshed by store on every update
    deleted_at: Optional[str] = None


# Fields a partial update may touch. Everything else on Item is store-owned.
UPDATABLE_FIELDS = frozenset({"name", "sku", "description", "quantity", "price", "category"})
