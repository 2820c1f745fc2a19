from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func

from plant_inventory.db.models.security import User, UserRole
from .base import BaseRepository


class SecurityRepository(BaseRepository):
    """Repository for users and their roles."""

    # Users
    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return await self.scalar_one_or_none(stmt)

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        return await self.scalar_one_or_none(stmt)

    async def count_users(self) -> int:
        stmt = select(func.count(User.id))
        result = await self.execute(stmt)
        return int(result.scalar_one())

    async def list_users(self, limit: int = 100, offset: int = 0) -> List[User]:
        stmt = select(User).order_by(User.created_at, User.email).offset(offset).limit(limit)
        result = await self.scalars(stmt)
        return list(result)

    async def create_user(
        self,
        *,
        email: str,
        display_name: Optional[str],
        hashed_password: str,
        role: Optional[str] = None,
    ) -> User:
        user = User(
            email=email.strip().lower(),
            display_name=display_name,
            hashed_password=hashed_password,
            is_active=True,
        )
        await self.add(user)
        await self.flush()
        if role is not None:
            await self.add(UserRole(user_id=user.id, role=role))
            await self.flush()
        return await self.refresh(user)

    # Roles
    async def set_role(self, user: User, role: str) -> User:
        """Create or replace the user's single role row."""
        stmt = select(UserRole).where(UserRole.user_id == user.id)
        assignment = await self.scalar_one_or_none(stmt)
        if assignment is None:
            await self.add(UserRole(user_id=user.id, role=role))
        else:
            assignment.role = role
        await self.flush()
        return await self.reload_user(user.id)  # type: ignore[return-value]

    async def reload_user(self, user_id: UUID) -> Optional[User]:
        """Fetch the user with its role relationship refreshed."""
        stmt = select(User).where(User.id == user_id).execution_options(populate_existing=True)
        return await self.scalar_one_or_none(stmt)
