from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class ItemCategory(str, Enum):
    """Broad family of a spare part."""
    bearings = "bearings"
    pistons = "pistons"
    canvas = "canvas"
    belts = "belts"
    other = "other"


class StockStatus(str, Enum):
    """Stock level relative to the item's threshold."""
    out_of_stock = "out_of_stock"
    low_stock = "low_stock"
    in_stock = "in_stock"


def _strip_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("name must not be blank")
    return v


class InventoryItemCreate(BaseModel):
    """Payload for adding an item to the inventory."""
    name: str = Field(..., min_length=1, description="Item code/name, unique ignoring case")
    category: ItemCategory = Field(ItemCategory.other, description="Item family")
    stock: int = Field(0, ge=0, description="Units on hand")
    threshold: int = Field(2, ge=0, description="Low-stock threshold")

    _name = field_validator("name")(_strip_name)


class InventoryItemUpdate(BaseModel):
    """Admin edit of an item. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[ItemCategory] = Field(None)
    stock: Optional[int] = Field(None, ge=0, description="New absolute stock level")
    threshold: Optional[int] = Field(None, ge=0)

    _name = field_validator("name")(_strip_name)


class InventoryItemRead(BaseModel):
    """Read model for an inventory item."""
    id: UUID = Field(..., description="Item ID")
    name: str = Field(..., description="Item code/name")
    category: ItemCategory = Field(..., description="Item family")
    stock: int = Field(..., description="Units on hand")
    threshold: int = Field(..., description="Low-stock threshold")
    status: StockStatus = Field(..., description="Stock status")
    series: str = Field(..., description="Series label derived from the item name")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last update timestamp (UTC)")


class InventorySummary(BaseModel):
    """Dashboard counters."""
    item_count: int = Field(..., description="Number of distinct items")
    total_stock: int = Field(..., description="Sum of stock over all items")
    low_stock_count: int = Field(..., description="Items with stock below threshold")
    out_of_stock_count: int = Field(..., description="Items with zero stock")
