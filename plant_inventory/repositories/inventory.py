from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import case, delete, func, select, update

from plant_inventory.db.models.inventory import InventoryItem, UsageLog
from plant_inventory.db.models.organization import Sector
from .base import BaseRepository


class InventoryItemRepository(BaseRepository):
    """Repository for inventory items."""

    async def list_items(self, search: Optional[str] = None) -> List[InventoryItem]:
        stmt = select(InventoryItem)
        if search:
            stmt = stmt.where(InventoryItem.name.ilike(f"%{search.strip()}%"))
        stmt = stmt.order_by(func.lower(InventoryItem.name), InventoryItem.id)
        res = await self.scalars(stmt)
        return list(res)

    async def get_item(self, item_id: UUID) -> Optional[InventoryItem]:
        stmt = select(InventoryItem).where(InventoryItem.id == item_id)
        return await self.scalar_one_or_none(stmt)

    async def get_item_by_name(self, name: str) -> Optional[InventoryItem]:
        """Case-insensitive lookup."""
        stmt = select(InventoryItem).where(func.lower(InventoryItem.name) == name.strip().lower())
        return await self.scalar_one_or_none(stmt)

    async def create_item(self, *, name: str, category: str, stock: int, threshold: int) -> InventoryItem:
        item = InventoryItem(name=name, category=category, stock=stock, threshold=threshold)
        await self.add(item)
        await self.flush()
        return await self.refresh(item)

    async def update_item(self, item: InventoryItem, **values: Any) -> InventoryItem:
        for key, value in values.items():
            setattr(item, key, value)
        await self.flush()
        return await self.refresh(item)

    async def delete_item(self, item: InventoryItem) -> None:
        await self.execute(delete(InventoryItem).where(InventoryItem.id == item.id))

    async def deduct_stock(self, item_id: UUID, quantity: int) -> bool:
        """
        Atomically subtract quantity from stock.

        Returns False, without touching the row, when the item is missing or holds
        fewer than quantity units.
        """
        stmt = (
            update(InventoryItem)
            .where(InventoryItem.id == item_id, InventoryItem.stock >= quantity)
            .values(stock=InventoryItem.stock - quantity, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = await self.execute(stmt)
        return result.rowcount == 1

    async def summary(self) -> Tuple[int, int, int, int]:
        """Return (item_count, total_stock, low_stock_count, out_of_stock_count)."""
        stmt = select(
            func.count(InventoryItem.id),
            func.coalesce(func.sum(InventoryItem.stock), 0),
            func.coalesce(func.sum(case((InventoryItem.stock < InventoryItem.threshold, 1), else_=0)), 0),
            func.coalesce(func.sum(case((InventoryItem.stock == 0, 1), else_=0)), 0),
        )
        row = (await self.execute(stmt)).one()
        return int(row[0]), int(row[1]), int(row[2]), int(row[3])


class UsageLogRepository(BaseRepository):
    """Repository for the append-only usage log."""

    async def add_entry(
        self,
        *,
        item_id: UUID,
        item_name: str,
        quantity: int,
        used_at: datetime,
        sector_id: Optional[UUID],
        machine_id: Optional[UUID],
        general: bool,
        user_id: Optional[UUID],
    ) -> UsageLog:
        entry = UsageLog(
            item_id=item_id,
            item_name=item_name,
            quantity=quantity,
            used_at=used_at,
            sector_id=sector_id,
            machine_id=machine_id,
            general=general,
            user_id=user_id,
        )
        await self.add(entry)
        await self.flush()
        return await self.refresh(entry)

    async def list_entries(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        sector_id: Optional[UUID] = None,
        general_only: bool = False,
        item_ids: Optional[Iterable[UUID]] = None,
    ) -> List[UsageLog]:
        """Entries newest first; start is inclusive, end exclusive."""
        stmt = select(UsageLog)
        if start is not None:
            stmt = stmt.where(UsageLog.used_at >= start)
        if end is not None:
            stmt = stmt.where(UsageLog.used_at < end)
        if sector_id is not None:
            stmt = stmt.where(UsageLog.sector_id == sector_id)
        if general_only:
            stmt = stmt.where(UsageLog.general.is_(True))
        if item_ids is not None:
            stmt = stmt.where(UsageLog.item_id.in_(list(item_ids)))
        stmt = stmt.order_by(UsageLog.used_at.desc(), UsageLog.id)
        res = await self.scalars(stmt)
        return list(res)

    async def delete_all(self) -> int:
        result = await self.execute(delete(UsageLog))
        return int(result.rowcount or 0)

    async def totals_by_sector(self) -> List[Tuple[str, int]]:
        """(sector name, units used) for sectors with usage, highest first."""
        total = func.sum(UsageLog.quantity).label("total")
        stmt = (
            select(Sector.name, total)
            .join(UsageLog, UsageLog.sector_id == Sector.id)
            .where(UsageLog.general.is_(False))
            .group_by(Sector.name)
            .having(func.sum(UsageLog.quantity) > 0)
            .order_by(total.desc(), Sector.name)
        )
        rows = (await self.execute(stmt)).all()
        return [(name, int(qty)) for name, qty in rows]
