"""
inventory/service.py -- Business rules for stock items.

InventoryService sits between the HTTP boundary and ItemStore. The boundary
has already enforced field syntax (lengths, types, non-negative numbers);
this layer enforces the rules that need the store or that must hold no
matter who calls it (CLI seeding, tests, future routes):

  - SKU is unique among live items, on create and on SKU-changing updates.
  - quantity and price are never negative.
  - name and sku are never blank.
  - Updates are partial: only supplied fields change.
  - Every lookup by id treats a soft-deleted item as absent.

The pre-checks give precise error messages; the partial unique index in
ItemStore is the backstop for concurrent writers, and its IntegrityError is
translated into the same ConflictError.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional, Protocol

from sqlalchemy.exc import IntegrityError

from core.errors import ConflictError, InvalidError, NotFoundError
from inventory.models import UPDATABLE_FIELDS, Item

logger = logging.getLogger("stockroom.inventory")

ITEM_NOT_FOUND_MESSAGE = "item not found"
SKU_TAKEN_MESSAGE = "item with this SKU already exists"


class ItemRepository(Protocol):
    def create_item(self, item: Item) -> int: ...

    def list_items(self) -> list[Item]: ...

    def get_item(self, item_id: int) -> Optional[Item]: ...

    def get_item_by_sku(self, sku: str) -> Optional[Item]: ...

    def update_item(self, item_id: int, **fields) -> bool: ...

    def delete_item(self, item_id: int) -> bool: ...


def _check_fields(fields: Mapping[str, Any]) -> None:
    """Raise InvalidError if any supplied value breaks a range or presence rule."""
    for name in ("name", "sku"):
        if name in fields and not str(fields[name]).strip():
            raise InvalidError(f"{name} must not be blank")
    if "quantity" in fields and fields["quantity"] < 0:
        raise InvalidError("quantity must be non-negative")
    if "price" in fields and fields["price"] < 0:
        raise InvalidError("price must be non-negative")


class InventoryService:
    def __init__(self, store: ItemRepository) -> None:
        self.store = store

    def create_item(self, item: Item) -> Item:
        """Persist a new item. Raises ConflictError if its SKU is already in use."""
        if self.store.get_item_by_sku(item.sku) is not None:
            raise ConflictError(SKU_TAKEN_MESSAGE)
        _check_fields(
            {"name": item.name, "sku": item.sku, "quantity": item.quantity, "price": item.price}
        )
        try:
            item_id = self.store.create_item(item)
        except IntegrityError as exc:
            raise ConflictError(SKU_TAKEN_MESSAGE) from exc
        logger.info("Created item %s (id=%s)", item.sku, item_id)
        return self.store.get_item(item_id)

    def get_all_items(self) -> list[Item]:
        return self.store.list_items()

    def get_item_by_id(self, item_id: int) -> Item:
        item = self.store.get_item(item_id)
        if item is None:
            raise NotFoundError(ITEM_NOT_FOUND_MESSAGE)
        return item

    def update_item(self, item_id: int, changes: Mapping[str, Any]) -> Item:
        """Apply a partial update and return the stored result.

        `changes` holds only the fields the caller supplied. A None value
        counts as not supplied, so `{"quantity": 30, "price": None}` touches
        quantity alone.
        """
        item = self.get_item_by_id(item_id)

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidError(f"unknown fields: {', '.join(sorted(unknown))}")
        fields = {k: v for k, v in changes.items() if v is not None}
        _check_fields(fields)

        if "sku" in fields and fields["sku"] != item.sku:
            if self.store.get_item_by_sku(fields["sku"]) is not None:
                raise ConflictError(f"item with SKU '{fields['sku']}' already exists")

        if not fields:
            return item

        try:
            updated = self.store.update_item(item_id, **fields)
        except IntegrityError as exc:
            raise ConflictError(f"item with SKU '{fields['sku']}' already exists") from exc
        if not updated:
            # Soft-deleted by a concurrent request after our lookup.
            raise NotFoundError(ITEM_NOT_FOUND_MESSAGE)
        logger.info("Updated item id=%s fields=%s", item_id, sorted(fields))
        return self.get_item_by_id(item_id)

    def delete_item(self, item_id: int) -> None:
        """Soft-delete an item. Raises NotFoundError if it is absent or already deleted."""
        self.get_item_by_id(item_id)
        if not self.store.delete_item(item_id):
            raise NotFoundError(ITEM_NOT_FOUND_MESSAGE)
        logger.info("Deleted item id=%s", item_id)
