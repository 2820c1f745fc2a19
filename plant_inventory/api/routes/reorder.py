from __future__ import annotations

import logging
from typing import List, Tuple

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from plant_inventory.core.deps import get_current_active_user, get_session
from plant_inventory.core.settings import get_app_settings
from plant_inventory.db.models.inventory import InventoryItem
from plant_inventory.repositories.inventory import InventoryItemRepository, UsageLogRepository
from plant_inventory.repositories.organization import AssignmentRepository
from plant_inventory.schemas.reorder import (
    RecommendationsQuery,
    RecommendationsResponse,
    ReorderEntry,
    ReorderExportRequest,
    ReorderList,
    ReorderRequest,
)
from plant_inventory.services.export import REORDER_CSV_SEPARATOR, export_dataframe, reorder_dataframe
from plant_inventory.services.recommendations import (
    RecommendationError,
    ReorderAdvisor,
    build_recommendation_request,
    get_reorder_advisor,
)
from plant_inventory.services.reorder import compute_reorder_list

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reorder",
    tags=["Reorder"],
    dependencies=[Depends(get_current_active_user)],
)

EXPORT_FILENAME = "purchase_order_items"


async def _compute(
    session: AsyncSession, request: ReorderRequest
) -> Tuple[List[ReorderEntry], List[InventoryItem]]:
    inventory = await InventoryItemRepository(session).list_items()
    assignments = await AssignmentRepository(session).all_assignments()
    entries = compute_reorder_list(
        inventory,
        assignments,
        request.mode,
        sector_ids=request.sector_ids,
        machine_ids=request.machine_ids,
    )
    return entries, inventory


# PUBLIC_INTERFACE
@router.post(
    "/list",
    response_model=ReorderList,
    summary="Compute purchase list",
    description=(
        "filter mode: units required by the selected machines (or every machine of the selected "
        "sectors) minus stock. general mode: items below threshold topped up to it."
    ),
)
async def compute_purchase_list(
    payload: ReorderRequest,
    session: AsyncSession = Depends(get_session),
) -> ReorderList:
    entries, _ = await _compute(session, payload)
    return ReorderList(mode=payload.mode, entries=entries)


# PUBLIC_INTERFACE
@router.post(
    "/export",
    summary="Export purchase list",
    description="Download the purchase list. CSV is semicolon-delimited; xlsx and pdf are also available.",
    response_description="File stream (CSV/XLSX/PDF)",
)
async def export_purchase_list(
    payload: ReorderExportRequest,
    format: str = Query("csv", pattern="^(csv|xlsx|pdf)$", description="csv | xlsx | pdf"),
    session: AsyncSession = Depends(get_session),
):
    entries, _ = await _compute(session, payload)
    df = reorder_dataframe(entries, payload.mode, payload.recommendations)
    return export_dataframe(df, EXPORT_FILENAME, format, csv_separator=REORDER_CSV_SEPARATOR)


# PUBLIC_INTERFACE
@router.post(
    "/recommendations",
    response_model=RecommendationsResponse,
    summary="AI reorder recommendations",
    description=(
        "Ask the recommendation model for advisory quantities for the computed purchase list. "
        "Failures are reported as success=false and never affect the list itself."
    ),
)
async def reorder_recommendations(
    payload: RecommendationsQuery,
    session: AsyncSession = Depends(get_session),
    advisor: ReorderAdvisor = Depends(get_reorder_advisor),
) -> RecommendationsResponse:
    entries, inventory = await _compute(session, payload)
    if not entries:
        return RecommendationsResponse(success=False, error="There are no items to reorder.")

    settings = get_app_settings()
    usage_logs = await UsageLogRepository(session).list_entries(item_ids=[e.item.id for e in entries])
    request = build_recommendation_request(
        entries,
        inventory,
        usage_logs,
        reorder_threshold=(
            payload.reorder_threshold
            if payload.reorder_threshold is not None
            else settings.REORDER_THRESHOLD_DEFAULT
        ),
        lead_time_days=(
            payload.lead_time_days if payload.lead_time_days is not None else settings.LEAD_TIME_DAYS_DEFAULT
        ),
    )
    try:
        result = await advisor.recommend(request)
    except RecommendationError as exc:
        logger.warning("Reorder recommendations unavailable: %s", exc)
        return RecommendationsResponse(success=False, error="Failed to get recommendations from AI.")
    return RecommendationsResponse(success=True, data=result)
