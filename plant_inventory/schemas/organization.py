from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SectorWrite(BaseModel):
    """Create or rename a sector."""
    name: str = Field(..., min_length=1, description="Sector name")


class MachineWrite(BaseModel):
    """Create or rename a machine."""
    name: str = Field(..., min_length=1, description="Machine name")


class MachineRead(BaseModel):
    """Read model for a machine."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Machine ID")
    name: str = Field(..., description="Machine name")
    sector_id: UUID = Field(..., description="Owning sector ID")


class SectorRead(BaseModel):
    """Read model for a sector with its machines."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Sector ID")
    name: str = Field(..., description="Sector name")
    machines: List[MachineRead] = Field(default_factory=list, description="Machines in the sector")


class AssignmentCreate(BaseModel):
    """Assign units of an item to a machine."""
    item_id: UUID = Field(..., description="Inventory item ID")
    quantity: int = Field(..., gt=0, description="Units the machine needs")
    usage_description: Optional[str] = Field(None, description="Where/how the part is used")


class AssignmentUpdate(BaseModel):
    """Edit an assignment's quantity and description."""
    quantity: int = Field(..., gt=0, description="Units the machine needs")
    usage_description: Optional[str] = Field(None)


class AssignmentRead(BaseModel):
    """Read model for a machine assignment."""
    id: UUID = Field(..., description="Assignment ID")
    item_id: UUID = Field(..., description="Inventory item ID")
    item_name: str = Field(..., description="Inventory item name")
    machine_id: UUID = Field(..., description="Machine ID")
    sector_id: UUID = Field(..., description="Sector ID")
    quantity: int = Field(..., description="Units the machine needs")
    usage_description: Optional[str] = Field(None)
    created_at: datetime = Field(...)
    updated_at: datetime = Field(...)
