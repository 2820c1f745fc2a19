from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from plant_inventory.core.deps import get_current_active_user, get_session, require_editor
from plant_inventory.schemas.organization import (
    AssignmentCreate,
    AssignmentRead,
    AssignmentUpdate,
    MachineRead,
    MachineWrite,
    SectorRead,
    SectorWrite,
)
from plant_inventory.services.organization import OrganizationService

router = APIRouter(tags=["Organization"])


# Sectors

# PUBLIC_INTERFACE
@router.get(
    "/sectors",
    response_model=List[SectorRead],
    summary="List sectors",
    description="List sectors ordered by name, each with its machines.",
    dependencies=[Depends(get_current_active_user)],
)
async def list_sectors(session: AsyncSession = Depends(get_session)) -> List[SectorRead]:
    sectors = await OrganizationService(session).list_sectors()
    return [SectorRead.model_validate(s) for s in sectors]


# PUBLIC_INTERFACE
@router.post(
    "/sectors",
    response_model=SectorRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create sector",
    dependencies=[Depends(require_editor)],
)
async def create_sector(payload: SectorWrite, session: AsyncSession = Depends(get_session)) -> SectorRead:
    sector = await OrganizationService(session).create_sector(payload.name)
    return SectorRead.model_validate(sector)


# PUBLIC_INTERFACE
@router.put(
    "/sectors/{sector_id}",
    response_model=SectorRead,
    summary="Rename sector",
    dependencies=[Depends(require_editor)],
)
async def rename_sector(
    payload: SectorWrite,
    sector_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
) -> SectorRead:
    sector = await OrganizationService(session).rename_sector(sector_id, payload.name)
    return SectorRead.model_validate(sector)


# PUBLIC_INTERFACE
@router.delete(
    "/sectors/{sector_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete sector",
    description="Delete a sector together with its machines and their assignments.",
    dependencies=[Depends(require_editor)],
)
async def delete_sector(sector_id: UUID = Path(...), session: AsyncSession = Depends(get_session)) -> Response:
    await OrganizationService(session).delete_sector(sector_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Machines

# PUBLIC_INTERFACE
@router.post(
    "/sectors/{sector_id}/machines",
    response_model=MachineRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create machine",
    dependencies=[Depends(require_editor)],
)
async def create_machine(
    payload: MachineWrite,
    sector_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
) -> MachineRead:
    machine = await OrganizationService(session).create_machine(sector_id, payload.name)
    return MachineRead.model_validate(machine)


# PUBLIC_INTERFACE
@router.put(
    "/machines/{machine_id}",
    response_model=MachineRead,
    summary="Rename machine",
    dependencies=[Depends(require_editor)],
)
async def rename_machine(
    payload: MachineWrite,
    machine_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
) -> MachineRead:
    machine = await OrganizationService(session).rename_machine(machine_id, payload.name)
    return MachineRead.model_validate(machine)


# PUBLIC_INTERFACE
@router.delete(
    "/machines/{machine_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete machine",
    description="Delete a machine and its assignments.",
    dependencies=[Depends(require_editor)],
)
async def delete_machine(machine_id: UUID = Path(...), session: AsyncSession = Depends(get_session)) -> Response:
    await OrganizationService(session).delete_machine(machine_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Assignments

# PUBLIC_INTERFACE
@router.get(
    "/assignments",
    response_model=List[AssignmentRead],
    summary="List machine assignments",
    description="List assignments, optionally restricted to a sector or a machine.",
    dependencies=[Depends(get_current_active_user)],
)
async def list_assignments(
    sector_id: Optional[UUID] = Query(None),
    machine_id: Optional[UUID] = Query(None),
    session: AsyncSession = Depends(get_session),
) -> List[AssignmentRead]:
    return await OrganizationService(session).list_assignments(sector_id=sector_id, machine_id=machine_id)


# PUBLIC_INTERFACE
@router.post(
    "/machines/{machine_id}/assignments",
    response_model=AssignmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Assign item to machine",
    description="Assign units of an item to a machine. Assigning an item the machine already has adds to its quantity.",
    dependencies=[Depends(require_editor)],
)
async def assign_item(
    payload: AssignmentCreate,
    machine_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
) -> AssignmentRead:
    return await OrganizationService(session).assign_item(machine_id, payload)


# PUBLIC_INTERFACE
@router.put(
    "/assignments/{assignment_id}",
    response_model=AssignmentRead,
    summary="Edit assignment",
    dependencies=[Depends(require_editor)],
)
async def update_assignment(
    payload: AssignmentUpdate,
    assignment_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
) -> AssignmentRead:
    return await OrganizationService(session).update_assignment(assignment_id, payload)


# PUBLIC_INTERFACE
@router.delete(
    "/assignments/{assignment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete assignment",
    dependencies=[Depends(require_editor)],
)
async def delete_assignment(
    assignment_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await OrganizationService(session).delete_assignment(assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
