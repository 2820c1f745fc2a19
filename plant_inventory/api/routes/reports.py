from __future__ import annotations

from typing import Dict, List
from uuid import UUID

import pandas as pd
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from plant_inventory.api.routes.usage import usage_query
from plant_inventory.core.deps import get_current_active_user, get_session
from plant_inventory.db.models.inventory import UsageLog
from plant_inventory.repositories.organization import SectorRepository
from plant_inventory.schemas.usage import SectorUsage, UsageQuery
from plant_inventory.services.export import export_dataframe
from plant_inventory.services.inventory import InventoryService

GENERAL_SECTOR = "General use"
GENERAL_MACHINE = "Not specified"
UNKNOWN = "Unknown"

USAGE_COLUMNS = ["date", "item", "quantity", "sector", "machine"]

# PUBLIC_INTERFACE
router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(get_current_active_user)],
)


def _usage_rows(
    entries: List[UsageLog], sector_names: Dict[UUID, str], machine_names: Dict[UUID, str]
) -> List[dict]:
    rows = []
    for entry in entries:
        if entry.general:
            sector, machine = GENERAL_SECTOR, GENERAL_MACHINE
        else:
            sector = sector_names.get(entry.sector_id, UNKNOWN) if entry.sector_id else UNKNOWN
            machine = machine_names.get(entry.machine_id, UNKNOWN) if entry.machine_id else GENERAL_MACHINE
        rows.append(
            {
                "date": entry.used_at.strftime("%Y-%m-%d %H:%M"),
                "item": entry.item_name,
                "quantity": entry.quantity,
                "sector": sector,
                "machine": machine,
            }
        )
    return rows


# PUBLIC_INTERFACE
@router.get(
    "/usage",
    summary="Usage report",
    description=(
        "Exports the usage log (newest first) with sector and machine names, filtered by inclusive "
        "day range, sector or general usage."
    ),
    response_description="File stream (CSV/XLSX/PDF)",
)
async def usage_report(
    query: UsageQuery = Depends(usage_query),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
    session: AsyncSession = Depends(get_session),
):
    """
    Generate a usage report.

    General entries read "General use" / "Not specified"; sectors or machines deleted
    since the entry was logged read "Unknown".
    """
    entries = await InventoryService(session).list_usage(query)
    repo = SectorRepository(session)
    sector_names = {s.id: s.name for s in await repo.list_sectors()}
    machine_names = {m.id: m.name for m in await repo.list_machines()}

    df = pd.DataFrame(_usage_rows(entries, sector_names, machine_names), columns=USAGE_COLUMNS)
    return export_dataframe(df, "usage_report", format)


# PUBLIC_INTERFACE
@router.get(
    "/usage-by-sector",
    response_model=List[SectorUsage],
    summary="Usage by sector",
    description="Total units used per sector, highest first. Sectors without usage are omitted.",
)
async def usage_by_sector(session: AsyncSession = Depends(get_session)) -> List[SectorUsage]:
    return await InventoryService(session).usage_by_sector()
