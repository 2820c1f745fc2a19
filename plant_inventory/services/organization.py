from __future__ import annotations

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from plant_inventory.db.models.organization import Machine, MachineAssignment, Sector
from plant_inventory.repositories.inventory import InventoryItemRepository
from plant_inventory.repositories.organization import AssignmentRepository, SectorRepository
from plant_inventory.schemas.organization import AssignmentCreate, AssignmentRead, AssignmentUpdate
from plant_inventory.services.base import BaseService, NotFoundError

logger = logging.getLogger(__name__)


def assignment_to_read(assignment: MachineAssignment, item_name: str) -> AssignmentRead:
    return AssignmentRead(
        id=assignment.id,
        item_id=assignment.item_id,
        item_name=item_name,
        machine_id=assignment.machine_id,
        sector_id=assignment.sector_id,
        quantity=assignment.quantity,
        usage_description=assignment.usage_description,
        created_at=assignment.created_at,
        updated_at=assignment.updated_at,
    )


class OrganizationService(BaseService):
    """
    Sectors, their machines and the parts assigned to each machine.

    Deleting a sector removes its machines; deleting a machine removes its
    assignments. The database enforces both through ON DELETE CASCADE.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.sectors = SectorRepository(session)
        self.assignments = AssignmentRepository(session)
        self.items = InventoryItemRepository(session)

    # Sectors

    async def list_sectors(self) -> List[Sector]:
        return await self.sectors.list_sectors()

    async def get_sector(self, sector_id: UUID) -> Sector:
        sector = await self.sectors.get_sector(sector_id)
        if sector is None:
            raise NotFoundError("Sector not found")
        return sector

    async def create_sector(self, name: str) -> Sector:
        sector = await self.sectors.create_sector(name.strip())
        await self.sectors.commit()
        logger.info("Created sector %s", sector.name)
        return await self.get_sector(sector.id)

    async def rename_sector(self, sector_id: UUID, name: str) -> Sector:
        sector = await self.get_sector(sector_id)
        sector.name = name.strip()
        await self.sectors.flush()
        await self.sectors.commit()
        return await self.get_sector(sector_id)

    # PUBLIC_INTERFACE
    async def delete_sector(self, sector_id: UUID) -> None:
        """Delete a sector together with its machines and their assignments."""
        sector = await self.get_sector(sector_id)
        name = sector.name
        await self.sectors.delete_sector(sector_id)
        await self.sectors.commit()
        logger.info("Deleted sector %s and its machines", name)

    # Machines

    async def get_machine(self, machine_id: UUID) -> Machine:
        machine = await self.sectors.get_machine(machine_id)
        if machine is None:
            raise NotFoundError("Machine not found")
        return machine

    async def list_machines(self, sector_id: UUID) -> List[Machine]:
        await self.get_sector(sector_id)
        return await self.sectors.list_machines(sector_id)

    async def create_machine(self, sector_id: UUID, name: str) -> Machine:
        await self.get_sector(sector_id)
        machine = await self.sectors.create_machine(sector_id, name.strip())
        await self.sectors.commit()
        logger.info("Created machine %s in sector %s", machine.name, sector_id)
        return machine

    async def rename_machine(self, machine_id: UUID, name: str) -> Machine:
        machine = await self.get_machine(machine_id)
        machine.name = name.strip()
        await self.sectors.flush()
        await self.sectors.refresh(machine)
        await self.sectors.commit()
        return machine

    async def delete_machine(self, machine_id: UUID) -> None:
        machine = await self.get_machine(machine_id)
        name = machine.name
        await self.sectors.delete_machine(machine_id)
        await self.sectors.commit()
        logger.info("Deleted machine %s", name)

    # Assignments

    async def list_assignments(
        self, *, sector_id: Optional[UUID] = None, machine_id: Optional[UUID] = None
    ) -> List[AssignmentRead]:
        rows = await self.assignments.list_assignments(sector_id=sector_id, machine_id=machine_id)
        return [assignment_to_read(a, name) for a, name in rows]

    # PUBLIC_INTERFACE
    async def assign_item(self, machine_id: UUID, payload: AssignmentCreate) -> AssignmentRead:
        """
        Assign units of an item to a machine.

        If the item is already assigned to the machine, the quantity is added to
        the existing assignment instead of creating a second one.
        """
        machine = await self.get_machine(machine_id)
        item = await self.items.get_item(payload.item_id)
        if item is None:
            raise NotFoundError("Item not found")

        existing = await self.assignments.find_assignment(item.id, machine.id)
        if existing is not None:
            existing.quantity = existing.quantity + payload.quantity
            if payload.usage_description:
                existing.usage_description = payload.usage_description
            await self.assignments.flush()
            assignment = await self.assignments.refresh(existing)
            logger.info(
                "Added %d x %s to machine %s (now %d)",
                payload.quantity, item.name, machine.name, assignment.quantity,
            )
        else:
            assignment = await self.assignments.create_assignment(
                item_id=item.id,
                machine_id=machine.id,
                sector_id=machine.sector_id,
                quantity=payload.quantity,
                usage_description=payload.usage_description,
            )
            logger.info("Assigned %d x %s to machine %s", payload.quantity, item.name, machine.name)
        await self.assignments.commit()
        return assignment_to_read(assignment, item.name)

    async def _get_assignment(self, assignment_id: UUID) -> Tuple[MachineAssignment, str]:
        assignment = await self.assignments.get_assignment(assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found")
        item = await self.items.get_item(assignment.item_id)
        return assignment, item.name if item is not None else ""

    async def update_assignment(self, assignment_id: UUID, payload: AssignmentUpdate) -> AssignmentRead:
        assignment, item_name = await self._get_assignment(assignment_id)
        assignment.quantity = payload.quantity
        assignment.usage_description = payload.usage_description
        await self.assignments.flush()
        await self.assignments.refresh(assignment)
        await self.assignments.commit()
        return assignment_to_read(assignment, item_name)

    async def delete_assignment(self, assignment_id: UUID) -> None:
        await self._get_assignment(assignment_id)
        await self.assignments.delete_assignment(assignment_id)
        await self.assignments.commit()
