from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UsageCreate(BaseModel):
    """Stock deduction request. Without sector/machine the usage is general."""
    item_id: UUID = Field(..., description="Inventory item ID")
    quantity: int = Field(..., gt=0, description="Units used")
    sector_id: Optional[UUID] = Field(None, description="Sector where the units were used")
    machine_id: Optional[UUID] = Field(None, description="Machine where the units were used")


class UsageLogRead(BaseModel):
    """Read model for a usage log entry."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Entry ID")
    item_id: Optional[UUID] = Field(None, description="Item ID (null if the item was deleted)")
    item_name: str = Field(..., description="Item name at the time of use")
    quantity: int = Field(..., description="Units used")
    used_at: datetime = Field(..., description="Timestamp of use")
    sector_id: Optional[UUID] = Field(None)
    machine_id: Optional[UUID] = Field(None)
    general: bool = Field(..., description="True for usage not tied to a sector or machine")


class UsageRecorded(BaseModel):
    """Result of a successful stock deduction."""
    entry: UsageLogRead = Field(..., description="Appended log entry")
    remaining_stock: int = Field(..., description="Stock after the deduction")
    low_stock_alert: bool = Field(
        ..., description="True when this deduction brought the item to or below its threshold"
    )


class UsageQuery(BaseModel):
    """Usage log filters; date range bounds are inclusive whole days."""
    date_from: Optional[date] = Field(None)
    date_to: Optional[date] = Field(None)
    sector_id: Optional[UUID] = Field(None)
    general_only: bool = Field(False, description="Only entries without sector/machine")


class SectorUsage(BaseModel):
    """Total units used in a sector."""
    sector: str = Field(..., description="Sector name")
    quantity: int = Field(..., description="Units used")


class ClearedLogs(BaseModel):
    deleted: int = Field(..., description="Number of entries removed")
