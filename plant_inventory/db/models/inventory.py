from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, Text, Uuid, false, func
from sqlalchemy.orm import Mapped, mapped_column

from plant_inventory.db.base import Base, UUIDPkMixin, TimestampMixin


class InventoryItem(UUIDPkMixin, TimestampMixin, Base):
    """Spare part held in the shared plant inventory."""
    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="stock_non_negative"),
        CheckConstraint("threshold >= 0", name="threshold_non_negative"),
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False, default="other", server_default="other")
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=2, server_default="2")


# Item names are unique regardless of case.
Index("uq_inventory_items_name_lower", func.lower(InventoryItem.name), unique=True)


class UsageLog(UUIDPkMixin, Base):
    """Append-only record of a stock deduction.

    General usage is flagged explicitly. Sector and machine ids are kept as plain
    references so entries outlive the sector or machine they were logged against.
    """
    __tablename__ = "usage_logs"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
    )

    item_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("inventory_items.id", ondelete="SET NULL"), nullable=True, index=True
    )
    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    used_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    sector_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    machine_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    general: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
