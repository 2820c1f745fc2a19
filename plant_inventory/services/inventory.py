from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from plant_inventory.db.models.inventory import InventoryItem, UsageLog
from plant_inventory.repositories.inventory import InventoryItemRepository, UsageLogRepository
from plant_inventory.repositories.organization import SectorRepository
from plant_inventory.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemRead,
    InventoryItemUpdate,
    InventorySummary,
)
from plant_inventory.schemas.usage import SectorUsage, UsageCreate, UsageLogRead, UsageQuery, UsageRecorded
from plant_inventory.services.base import (
    BaseService,
    ConflictError,
    DuplicateItemError,
    InsufficientStockError,
    NotFoundError,
)
from plant_inventory.services.catalog import classify_series, stock_status

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def item_to_read(item: InventoryItem) -> InventoryItemRead:
    """Project an item row onto its read model with derived status and series."""
    return InventoryItemRead(
        id=item.id,
        name=item.name,
        category=item.category,
        stock=item.stock,
        threshold=item.threshold,
        status=stock_status(item.stock, item.threshold),
        series=classify_series(item.name),
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


# PUBLIC_INTERFACE
def day_bounds(date_from: Optional[date], date_to: Optional[date]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Convert an inclusive day range into [start, end) UTC datetimes.

    A missing date_to means the single day date_from.
    """
    if date_from is None:
        if date_to is None:
            return None, None
        return None, datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=timezone.utc)
    last = date_to or date_from
    start = datetime.combine(date_from, time.min, tzinfo=timezone.utc)
    end = datetime.combine(last + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return start, end


class InventoryService(BaseService):
    """
    Inventory items and the usage log.

    Stock only ever decreases through record_usage, which deducts and appends
    the log entry in a single transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.items = InventoryItemRepository(session)
        self.usage = UsageLogRepository(session)
        self.org = SectorRepository(session)

    # Items

    async def list_items(self, search: Optional[str] = None) -> List[InventoryItem]:
        return await self.items.list_items(search)

    async def get_item(self, item_id: UUID) -> InventoryItem:
        item = await self.items.get_item(item_id)
        if item is None:
            raise NotFoundError("Item not found")
        return item

    # PUBLIC_INTERFACE
    async def create_item(self, payload: InventoryItemCreate) -> InventoryItem:
        """Add an item; names are unique ignoring case."""
        if await self.items.get_item_by_name(payload.name):
            raise DuplicateItemError(f"An item named '{payload.name}' already exists")
        try:
            item = await self.items.create_item(
                name=payload.name,
                category=payload.category.value,
                stock=payload.stock,
                threshold=payload.threshold,
            )
            await self.items.commit()
        except IntegrityError as exc:
            await self.items.rollback()
            raise DuplicateItemError(f"An item named '{payload.name}' already exists") from exc
        logger.info("Created item %s (stock=%d, threshold=%d)", item.name, item.stock, item.threshold)
        return item

    # PUBLIC_INTERFACE
    async def update_item(self, item_id: UUID, payload: InventoryItemUpdate) -> InventoryItem:
        """Apply an admin edit; stock is set to an absolute, non-negative value."""
        item = await self.get_item(item_id)
        values = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "category" in values:
            values["category"] = payload.category.value  # type: ignore[union-attr]
        if "name" in values and values["name"].lower() != item.name.lower():
            if await self.items.get_item_by_name(values["name"]):
                raise DuplicateItemError(f"An item named '{values['name']}' already exists")
        if not values:
            return item
        try:
            item = await self.items.update_item(item, **values)
            await self.items.commit()
        except IntegrityError as exc:
            await self.items.rollback()
            raise DuplicateItemError("An item with that name already exists") from exc
        logger.info("Updated item %s: %s", item.id, ", ".join(sorted(values)))
        return item

    async def delete_item(self, item_id: UUID) -> None:
        item = await self.get_item(item_id)
        await self.items.delete_item(item)
        await self.items.commit()
        logger.info("Deleted item %s (%s)", item.name, item.id)

    async def summary(self) -> InventorySummary:
        item_count, total_stock, low, out = await self.items.summary()
        return InventorySummary(
            item_count=item_count,
            total_stock=total_stock,
            low_stock_count=low,
            out_of_stock_count=out,
        )

    # Usage

    async def _resolve_location(
        self, sector_id: Optional[UUID], machine_id: Optional[UUID]
    ) -> Tuple[Optional[UUID], Optional[UUID]]:
        if machine_id is not None:
            machine = await self.org.get_machine(machine_id)
            if machine is None:
                raise NotFoundError("Machine not found")
            if sector_id is not None and sector_id != machine.sector_id:
                raise ConflictError("Machine does not belong to the given sector")
            return machine.sector_id, machine.id
        if sector_id is not None:
            if await self.org.get_sector(sector_id) is None:
                raise NotFoundError("Sector not found")
        return sector_id, None

    # PUBLIC_INTERFACE
    async def record_usage(self, payload: UsageCreate, user_id: Optional[UUID] = None) -> UsageRecorded:
        """
        Deduct used units from stock and append the usage log entry.

        Raises:
            NotFoundError: unknown item, sector or machine.
            InsufficientStockError: quantity exceeds stock; nothing is persisted.
        """
        item = await self.get_item(payload.item_id)
        sector_id, machine_id = await self._resolve_location(payload.sector_id, payload.machine_id)

        item_id, item_name = item.id, item.name
        if not await self.items.deduct_stock(item_id, payload.quantity):
            # rollback expires loaded rows, so only the captured values are used below
            await self.items.rollback()
            current = await self.items.get_item(item_id)
            available = current.stock if current is not None else 0
            logger.warning(
                "Rejected usage of %d x %s: only %d in stock", payload.quantity, item_name, available
            )
            raise InsufficientStockError(item_name, payload.quantity, available)

        await self.items.refresh(item)
        entry = await self.usage.add_entry(
            item_id=item.id,
            item_name=item.name,
            quantity=payload.quantity,
            used_at=datetime.now(timezone.utc),
            sector_id=sector_id,
            machine_id=machine_id,
            general=sector_id is None,
            user_id=user_id,
        )
        await self.usage.commit()

        remaining = item.stock
        previous = remaining + payload.quantity
        low_stock_alert = previous > item.threshold and remaining <= item.threshold
        logger.info(
            "Recorded usage of %d x %s (remaining=%d, sector=%s, machine=%s)",
            payload.quantity,
            item.name,
            remaining,
            sector_id or "general",
            machine_id or "-",
        )
        if low_stock_alert:
            logger.info("Item %s reached its low-stock threshold (%d)", item.name, item.threshold)
        return UsageRecorded(
            entry=UsageLogRead.model_validate(entry),
            remaining_stock=remaining,
            low_stock_alert=low_stock_alert,
        )

    async def list_usage(self, query: UsageQuery) -> List[UsageLog]:
        start, end = day_bounds(query.date_from, query.date_to)
        return await self.usage.list_entries(
            start=start,
            end=end,
            sector_id=query.sector_id,
            general_only=query.general_only,
        )

    # PUBLIC_INTERFACE
    async def clear_usage(self) -> int:
        """Delete every usage log entry and return how many were removed."""
        deleted = await self.usage.delete_all()
        await self.usage.commit()
        logger.warning("Cleared usage log (%d entries)", deleted)
        return deleted

    async def usage_by_sector(self) -> List[SectorUsage]:
        rows = await self.usage.totals_by_sector()
        return [SectorUsage(sector=name, quantity=qty) for name, qty in rows]
