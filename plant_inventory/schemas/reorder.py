from __future__ import annotations

from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ReorderMode(str, Enum):
    """Machine-driven requirement (filter) or threshold replenishment (general)."""
    filter = "filter"
    general = "general"


class ReorderItem(BaseModel):
    """Snapshot of the inventory item a reorder entry refers to."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Item ID")
    name: str = Field(..., description="Item name")
    stock: int = Field(..., description="Units on hand")
    threshold: int = Field(..., description="Low-stock threshold")


class ReorderEntry(BaseModel):
    """One line of the purchase list."""
    item: ReorderItem
    total_required: Optional[int] = Field(
        None, description="Units required by the selected machines (filter mode only)"
    )
    quantity_to_buy: int = Field(..., gt=0, description="Units to purchase")


class ReorderRequest(BaseModel):
    """Purchase list selection."""
    mode: ReorderMode = Field(..., description="filter | general")
    sector_ids: List[UUID] = Field(default_factory=list)
    machine_ids: List[UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def _require_selection(self):
        if self.mode == ReorderMode.filter and not (self.sector_ids or self.machine_ids):
            raise ValueError("filter mode requires at least one sector or machine")
        return self


class ReorderList(BaseModel):
    mode: ReorderMode
    entries: List[ReorderEntry] = Field(default_factory=list)


class Recommendation(BaseModel):
    """Advisory reorder quantity for one item."""
    item_name: str = Field(..., description="Item name")
    quantity_to_reorder: float = Field(..., ge=0, description="Suggested units")
    reasoning: str = Field(..., description="Why this quantity")


class RecommendationsRequest(BaseModel):
    """Input sent to the recommendation model."""
    item_names: List[str] = Field(..., min_length=1)
    historical_usage_summary: str = Field(...)
    current_stock_summary: str = Field(...)
    reorder_threshold: float = Field(..., ge=0)
    lead_time_days: float = Field(..., ge=0)


class RecommendationsResult(BaseModel):
    """Model output: per-item suggestions and their aggregate value."""
    recommendations: List[Recommendation] = Field(default_factory=list)
    total_estimated_value: float = Field(..., ge=0)

    def quantity_for(self, item_name: str) -> Optional[float]:
        for rec in self.recommendations:
            if rec.item_name == item_name:
                return rec.quantity_to_reorder
        return None


class RecommendationsQuery(ReorderRequest):
    """Purchase list selection plus the advisory parameters."""
    reorder_threshold: Optional[int] = Field(None, ge=0)
    lead_time_days: Optional[int] = Field(None, ge=0)


class RecommendationsResponse(BaseModel):
    """Advisory outcome; failures are reported, never raised."""
    success: bool
    data: Optional[RecommendationsResult] = None
    error: Optional[str] = None


class ReorderExportRequest(ReorderRequest):
    """Purchase list selection plus optional suggestions to include as a column."""
    recommendations: Optional[RecommendationsResult] = None
