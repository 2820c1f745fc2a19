from __future__ import annotations

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, select

from plant_inventory.db.models.inventory import InventoryItem
from plant_inventory.db.models.organization import Machine, MachineAssignment, Sector
from .base import BaseRepository


class SectorRepository(BaseRepository):
    """Repository for sectors and their machines."""

    async def list_sectors(self) -> List[Sector]:
        # populate_existing so machines added earlier in the session are picked up
        stmt = (
            select(Sector)
            .order_by(Sector.name, Sector.id)
            .execution_options(populate_existing=True)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def get_sector(self, sector_id: UUID) -> Optional[Sector]:
        stmt = select(Sector).where(Sector.id == sector_id).execution_options(populate_existing=True)
        return await self.scalar_one_or_none(stmt)

    async def create_sector(self, name: str) -> Sector:
        sector = Sector(name=name)
        await self.add(sector)
        await self.flush()
        return await self.refresh(sector)

    async def delete_sector(self, sector_id: UUID) -> None:
        # machines and assignments go with it through ON DELETE CASCADE
        await self.execute(delete(Sector).where(Sector.id == sector_id))

    async def list_machines(self, sector_id: Optional[UUID] = None) -> List[Machine]:
        stmt = select(Machine)
        if sector_id is not None:
            stmt = stmt.where(Machine.sector_id == sector_id)
        stmt = stmt.order_by(Machine.name, Machine.id)
        res = await self.scalars(stmt)
        return list(res)

    async def get_machine(self, machine_id: UUID) -> Optional[Machine]:
        stmt = select(Machine).where(Machine.id == machine_id)
        return await self.scalar_one_or_none(stmt)

    async def create_machine(self, sector_id: UUID, name: str) -> Machine:
        machine = Machine(sector_id=sector_id, name=name)
        await self.add(machine)
        await self.flush()
        return await self.refresh(machine)

    async def delete_machine(self, machine_id: UUID) -> None:
        await self.execute(delete(Machine).where(Machine.id == machine_id))


class AssignmentRepository(BaseRepository):
    """Repository for machine assignments."""

    async def list_assignments(
        self,
        *,
        sector_id: Optional[UUID] = None,
        machine_id: Optional[UUID] = None,
    ) -> List[Tuple[MachineAssignment, str]]:
        """Assignments with the current item name, ordered by item name."""
        stmt = select(MachineAssignment, InventoryItem.name).join(
            InventoryItem, InventoryItem.id == MachineAssignment.item_id
        )
        if sector_id is not None:
            stmt = stmt.where(MachineAssignment.sector_id == sector_id)
        if machine_id is not None:
            stmt = stmt.where(MachineAssignment.machine_id == machine_id)
        stmt = stmt.order_by(InventoryItem.name, MachineAssignment.id)
        rows = (await self.execute(stmt)).all()
        return [(assignment, name) for assignment, name in rows]

    async def all_assignments(self) -> List[MachineAssignment]:
        res = await self.scalars(select(MachineAssignment))
        return list(res)

    async def get_assignment(self, assignment_id: UUID) -> Optional[MachineAssignment]:
        stmt = select(MachineAssignment).where(MachineAssignment.id == assignment_id)
        return await self.scalar_one_or_none(stmt)

    async def find_assignment(self, item_id: UUID, machine_id: UUID) -> Optional[MachineAssignment]:
        stmt = select(MachineAssignment).where(
            MachineAssignment.item_id == item_id,
            MachineAssignment.machine_id == machine_id,
        )
        return await self.scalar_one_or_none(stmt)

    async def create_assignment(
        self,
        *,
        item_id: UUID,
        machine_id: UUID,
        sector_id: UUID,
        quantity: int,
        usage_description: Optional[str],
    ) -> MachineAssignment:
        assignment = MachineAssignment(
            item_id=item_id,
            machine_id=machine_id,
            sector_id=sector_id,
            quantity=quantity,
            usage_description=usage_description,
        )
        await self.add(assignment)
        await self.flush()
        return await self.refresh(assignment)

    async def delete_assignment(self, assignment_id: UUID) -> None:
        await self.execute(delete(MachineAssignment).where(MachineAssignment.id == assignment_id))
