from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from plant_inventory.core.deps import get_current_active_user, get_session, require_admin, require_editor
from plant_inventory.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemRead,
    InventoryItemUpdate,
    InventorySummary,
)
from plant_inventory.services.inventory import InventoryService, item_to_read

router = APIRouter(prefix="/inventory", tags=["Inventory"])


# PUBLIC_INTERFACE
@router.get(
    "/items",
    response_model=List[InventoryItemRead],
    summary="List inventory items",
    description="List items ordered by name with derived stock status and series. Optional case-insensitive name search.",
    dependencies=[Depends(get_current_active_user)],
)
async def list_items(
    session: AsyncSession = Depends(get_session),
    search: Optional[str] = Query(None, description="Substring of the item name"),
) -> List[InventoryItemRead]:
    """
    Return the shared inventory.

    Returns:
        List[InventoryItemRead]: Items ordered by name (case-insensitive).
    """
    items = await InventoryService(session).list_items(search)
    return [item_to_read(i) for i in items]


# PUBLIC_INTERFACE
@router.post(
    "/items",
    response_model=InventoryItemRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create inventory item",
    description="Add an item. Names are unique ignoring case (409 on duplicates). Requires admin or editor.",
    dependencies=[Depends(require_editor)],
)
async def create_item(
    payload: InventoryItemCreate,
    session: AsyncSession = Depends(get_session),
) -> InventoryItemRead:
    item = await InventoryService(session).create_item(payload)
    return item_to_read(item)


# PUBLIC_INTERFACE
@router.get(
    "/items/{item_id}",
    response_model=InventoryItemRead,
    summary="Get inventory item",
    dependencies=[Depends(get_current_active_user)],
)
async def get_item(
    item_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
) -> InventoryItemRead:
    item = await InventoryService(session).get_item(item_id)
    return item_to_read(item)


# PUBLIC_INTERFACE
@router.patch(
    "/items/{item_id}",
    response_model=InventoryItemRead,
    summary="Edit inventory item",
    description="Edit name, category, threshold or set stock to an absolute value (>= 0). Requires admin.",
    dependencies=[Depends(require_admin)],
)
async def update_item(
    payload: InventoryItemUpdate,
    item_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
) -> InventoryItemRead:
    item = await InventoryService(session).update_item(item_id, payload)
    return item_to_read(item)


# PUBLIC_INTERFACE
@router.delete(
    "/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete inventory item",
    description="Delete an item and its machine assignments. Usage history keeps the item name. Requires admin.",
    dependencies=[Depends(require_admin)],
)
async def delete_item(
    item_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await InventoryService(session).delete_item(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@router.get(
    "/summary",
    response_model=InventorySummary,
    summary="Inventory summary",
    description="Dashboard counters: item count, total units, low-stock and out-of-stock counts.",
    dependencies=[Depends(get_current_active_user)],
)
async def inventory_summary(session: AsyncSession = Depends(get_session)) -> InventorySummary:
    return await InventoryService(session).summary()
