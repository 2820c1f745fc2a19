from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from plant_inventory.db.base import Base, UUIDPkMixin, TimestampMixin


class Sector(UUIDPkMixin, TimestampMixin, Base):
    """Factory area grouping machines."""
    __tablename__ = "sectors"

    name: Mapped[str] = mapped_column(Text, nullable=False)

    machines: Mapped[list["Machine"]] = relationship(
        "Machine",
        back_populates="sector",
        order_by="Machine.name",
        passive_deletes=True,
        lazy="selectin",
    )


class Machine(UUIDPkMixin, TimestampMixin, Base):
    """Machine inside a sector; assignments attach here."""
    __tablename__ = "machines"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    sector_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("sectors.id", ondelete="CASCADE"), nullable=False, index=True
    )

    sector: Mapped["Sector"] = relationship("Sector", back_populates="machines")


class MachineAssignment(UUIDPkMixin, TimestampMixin, Base):
    """Units of an inventory item a machine needs to operate."""
    __tablename__ = "machine_assignments"
    __table_args__ = (
        UniqueConstraint("item_id", "machine_id", name="uq_machine_assignments_item_machine"),
        CheckConstraint("quantity > 0", name="quantity_positive"),
    )

    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    machine_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("machines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sector_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("sectors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    usage_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
