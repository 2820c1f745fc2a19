from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from plant_inventory.api.routes.auth import user_to_read
from plant_inventory.core.deps import get_session, require_admin
from plant_inventory.db.models.security import User
from plant_inventory.repositories.security import SecurityRepository
from plant_inventory.schemas.auth import RoleName, RoleUpdate, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["Users"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[UserRead],
    summary="List users",
    description="List users with their effective role. Requires admin.",
    dependencies=[Depends(require_admin)],
)
async def list_users(
    session: AsyncSession = Depends(get_session),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[UserRead]:
    repo = SecurityRepository(session)
    users = await repo.list_users(limit=limit, offset=offset)
    return [user_to_read(u) for u in users]


# PUBLIC_INTERFACE
@router.put(
    "/{user_id}/role",
    response_model=UserRead,
    summary="Set user role",
    description="Set a user's role to admin, editor or user. Admins cannot change their own role.",
)
async def set_user_role(
    payload: RoleUpdate,
    user_id: UUID = Path(...),
    current: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    """Grant or revoke permissions by changing the user's single role."""
    if user_id == current.id and payload.role != RoleName.admin:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Admins cannot change their own role")

    repo = SecurityRepository(session)
    user = await repo.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    user = await repo.set_role(user, payload.role.value)
    await repo.commit()
    logger.info("Set role of %s to %s", user.email, payload.role.value)
    return user_to_read(user)
