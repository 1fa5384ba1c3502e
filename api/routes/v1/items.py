"""
api/routes/v1/items.py -- Inventory item CRUD routes for the Stockroom REST API.

Routes:
  POST   /inventory/items              -- create item; 201
  GET    /inventory/items              -- list all live items
  GET    /inventory/items/{item_id}    -- item detail
  PUT    /inventory/items/{item_id}    -- partial update
  PATCH  /inventory/items/{item_id}    -- partial update (same handler)
  DELETE /inventory/items/{item_id}    -- soft delete; 204

Partial updates:
  PUT behaves like PATCH and only touches the fields present in the body:
  the handler forwards model_dump(exclude_unset=True).

Errors from InventoryService (ConflictError, NotFoundError, InvalidError)
propagate to the app-level handler in api/main.py.
"""

from fastapi import APIRouter, Depends, Request, Response

from api.limiter import limiter
from api.models import ItemCreate, ItemResponse, ItemUpdate
from auth.dependencies import get_current_user
from inventory.service import InventoryService

# All inventory routes require authentication.
# Router-level dependency applies to every route registered on this router,
# so individual handlers don't each need to repeat Depends(get_current_user).
router = APIRouter(prefix="/inventory", dependencies=[Depends(get_current_user)])


def get_inventory_service(request: Request) -> InventoryService:
    return request.app.state.inventory_service


@router.post("/items", response_model=ItemResponse, status_code=201)
@limiter.limit("30/minute")
def create_item(
    request: Request,
    body: ItemCreate,
    service: InventoryService = Depends(get_inventory_service),
) -> ItemResponse:
    """Add a new item. 409 if another live item already uses the SKU."""
    return ItemResponse.from_item(service.create_item(body.to_item()))


@router.get("/items", response_model=list[ItemResponse])
@limiter.limit("60/minute")
def list_items(
    request: Request,
    service: InventoryService = Depends(get_inventory_service),
) -> list[ItemResponse]:
    """Return every live item, oldest first. No pagination or filtering."""
    return [ItemResponse.from_item(item) for item in service.get_all_items()]


@router.get("/items/{item_id}", response_model=ItemResponse)
@limiter.limit("60/minute")
def get_item(
    request: Request,
    item_id: int,
    service: InventoryService = Depends(get_inventory_service),
) -> ItemResponse:
    return ItemResponse.from_item(service.get_item_by_id(item_id))


@router.put("/items/{item_id}", response_model=ItemResponse)
@router.patch("/items/{item_id}", response_model=ItemResponse)
@limiter.limit("30/minute")
def update_item(
    request: Request,
    item_id: int,
    body: ItemUpdate,
    service: InventoryService = Depends(get_inventory_service),
) -> ItemResponse:
    """Change only the supplied fields of an item.

    404 if the item does not exist, 409 if a new SKU is taken.
    """
    changes = body.model_dump(exclude_unset=True)
    return ItemResponse.from_item(service.update_item(item_id, changes))


@router.delete("/items/{item_id}", status_code=204)
@limiter.limit("30/minute")
def delete_item(
    request: Request,
    item_id: int,
    service: InventoryService = Depends(get_inventory_service),
) -> Response:
    """Soft-delete an item. It disappears from every subsequent read."""
    service.delete_item(item_id)
    return Response(status_code=204)
