"""
ORM models for the plant inventory: items and usage log, the sector/machine
hierarchy with machine assignments, and users with their roles.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .inventory import (  # noqa: F401
    InventoryItem,
    UsageLog,
)
from .organization import (  # noqa: F401
    Sector,
    Machine,
    MachineAssignment,
)
from .security import (  # noqa: F401
    User,
    UserRole,
)
