from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from plant_inventory.core.deps import get_current_active_user, get_session, require_admin, require_editor
from plant_inventory.db.models.security import User
from plant_inventory.schemas.usage import ClearedLogs, UsageCreate, UsageLogRead, UsageQuery, UsageRecorded
from plant_inventory.services.inventory import InventoryService

router = APIRouter(prefix="/usage", tags=["Usage"])


# PUBLIC_INTERFACE
def usage_query(
    date_from: Optional[date] = Query(None, description="First day (inclusive)"),
    date_to: Optional[date] = Query(None, description="Last day (inclusive); defaults to date_from"),
    sector_id: Optional[UUID] = Query(None, description="Only usage in this sector"),
    general_only: bool = Query(False, description="Only usage not tied to a sector"),
) -> UsageQuery:
    """Collect usage log filters from query parameters."""
    if date_from and date_to and date_to < date_from:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="date_to must not be before date_from",
        )
    if general_only and sector_id is not None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="general_only cannot be combined with sector_id",
        )
    return UsageQuery(date_from=date_from, date_to=date_to, sector_id=sector_id, general_only=general_only)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=UsageRecorded,
    status_code=status.HTTP_201_CREATED,
    summary="Record usage",
    description=(
        "Deduct used units from stock and append a usage log entry. A machine implies its sector; "
        "without sector and machine the usage is general. Using more than the stock on hand is "
        "rejected with 409 and nothing is saved. Requires admin or editor."
    ),
)
async def record_usage(
    payload: UsageCreate,
    user: User = Depends(require_editor),
    session: AsyncSession = Depends(get_session),
) -> UsageRecorded:
    return await InventoryService(session).record_usage(payload, user_id=user.id)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[UsageLogRead],
    summary="List usage log",
    description="Usage entries newest first, filtered by inclusive day range, sector or general usage.",
    dependencies=[Depends(get_current_active_user)],
)
async def list_usage(
    query: UsageQuery = Depends(usage_query),
    session: AsyncSession = Depends(get_session),
) -> List[UsageLogRead]:
    entries = await InventoryService(session).list_usage(query)
    return [UsageLogRead.model_validate(e) for e in entries]


# PUBLIC_INTERFACE
@router.delete(
    "",
    response_model=ClearedLogs,
    summary="Clear usage log",
    description="Delete every usage log entry. Requires admin.",
    dependencies=[Depends(require_admin)],
)
async def clear_usage(session: AsyncSession = Depends(get_session)) -> ClearedLogs:
    deleted = await InventoryService(session).clear_usage()
    return ClearedLogs(deleted=deleted)
