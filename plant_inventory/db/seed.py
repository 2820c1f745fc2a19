"""
Database seeding with sample plant data.

Seeds (only into an empty inventory):
- Sectors: Envasadora 1, Envasadora 2, Línea de Galletitas
- One or two machines per sector
- Sample bearings with stock and thresholds
- Machine assignments for each bearing in its sector's first machine

Usage:
  python -m plant_inventory.db.run_migrations upgrade head
  python -m plant_inventory.db.seed
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from plant_inventory.db.models import InventoryItem, Machine, MachineAssignment, Sector
from plant_inventory.db.session import get_session_maker

logger = logging.getLogger(__name__)

SECTORS: Dict[str, List[str]] = {
    "Envasadora 1": ["Selladora A"],
    "Envasadora 2": ["Selladora B"],
    "Línea de Galletitas": ["Horno continuo", "Cinta de enfriado"],
}

# (name, sector, stock, threshold)
BEARINGS: List[Tuple[str, str, int, int]] = [
    ("6203-2RS", "Envasadora 1", 50, 10),
    ("6204-2RS", "Envasadora 1", 45, 10),
    ("6205-2Z", "Envasadora 2", 30, 15),
    ("6001-2RS", "Envasadora 2", 60, 20),
    ("6305-2RS", "Línea de Galletitas", 22, 5),
    ("6306-2Z", "Línea de Galletitas", 18, 5),
    ("UC205", "Línea de Galletitas", 40, 10),
    ("UC206", "Línea de Galletitas", 35, 10),
    ("608-2Z", "Envasadora 1", 8, 15),
    ("627-2Z", "Envasadora 2", 12, 10),
]

ASSIGNED_UNITS = 2


async def _seed_organization(session: AsyncSession) -> Dict[str, Machine]:
    """Create sectors and machines; return the first machine of each sector by sector name."""
    first_machine: Dict[str, Machine] = {}
    for sector_name, machine_names in SECTORS.items():
        sector = Sector(name=sector_name)
        session.add(sector)
        await session.flush()
        for machine_name in machine_names:
            machine = Machine(name=machine_name, sector_id=sector.id)
            session.add(machine)
            await session.flush()
            first_machine.setdefault(sector_name, machine)
    return first_machine


async def _seed_items(session: AsyncSession, machines: Dict[str, Machine]) -> int:
    for name, sector_name, stock, threshold in BEARINGS:
        item = InventoryItem(name=name, category="bearings", stock=stock, threshold=threshold)
        session.add(item)
        await session.flush()
        machine = machines[sector_name]
        session.add(
            MachineAssignment(
                item_id=item.id,
                machine_id=machine.id,
                sector_id=machine.sector_id,
                quantity=ASSIGNED_UNITS,
            )
        )
    await session.flush()
    return len(BEARINGS)


# PUBLIC_INTERFACE
async def seed_all(session: AsyncSession | None = None) -> bool:
    """
    Seed sample sectors, machines and bearings.

    Does nothing when the inventory already holds items. Returns True when data was written.
    """
    if session is None:
        async with get_session_maker()() as own_session:
            return await seed_all(own_session)

    existing = (await session.execute(select(func.count(InventoryItem.id)))).scalar_one()
    if existing:
        logger.info("Inventory already has %d items; skipping seed", existing)
        return False

    machines = await _seed_organization(session)
    count = await _seed_items(session, machines)
    await session.commit()
    logger.info("Seeded %d sectors and %d items", len(SECTORS), count)
    return True


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_all())
