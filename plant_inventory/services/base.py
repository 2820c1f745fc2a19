from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession


class BaseService:
    """
    Base class for services. Holds a session for use across multiple repositories.

    Services keep business rules and own the transaction boundary, delegating
    data access to repositories.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session


class ServiceError(Exception):
    """Base class for domain errors raised by services."""


class NotFoundError(ServiceError):
    """A referenced entity does not exist."""


class ConflictError(ServiceError):
    """The request conflicts with the current state."""


class DuplicateItemError(ConflictError):
    """An inventory item with the same name (ignoring case) already exists."""


class InsufficientStockError(ConflictError):
    """A deduction asked for more units than are in stock."""

    def __init__(self, item_name: str, requested: int, available: int) -> None:
        super().__init__(
            f"Cannot use {requested} units of {item_name}: only {available} in stock"
        )
        self.item_name = item_name
        self.requested = requested
        self.available = available
