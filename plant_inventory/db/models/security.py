from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Text, Uuid, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from plant_inventory.db.base import Base, UUIDPkMixin, TimestampMixin

ROLE_NAMES = ("admin", "editor", "user")
DEFAULT_ROLE = "user"


class User(UUIDPkMixin, TimestampMixin, Base):
    """Application user."""
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    display_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    role_assignment: Mapped[Optional["UserRole"]] = relationship(
        "UserRole", uselist=False, lazy="selectin", passive_deletes=True
    )

    @property
    def role(self) -> str:
        """Effective role; users without a role row are plain users."""
        return self.role_assignment.role if self.role_assignment else DEFAULT_ROLE


class UserRole(UUIDPkMixin, TimestampMixin, Base):
    """Role granted to a user. At most one row per user."""
    __tablename__ = "user_roles"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'editor', 'user')", name="role_valid"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    role: Mapped[str] = mapped_column(Text, nullable=False)
