"""
Advisory reorder quantities from a chat-completion model.

The advisor is optional: it needs OPENAI_API_KEY, and any failure surfaces as
RecommendationError so the purchase list itself is never affected.
"""
from __future__ import annotations

import json
import logging
from collections import defaultdict
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional

import openai
from openai import AsyncOpenAI
from pydantic import ValidationError

from plant_inventory.core.settings import AppSettings, get_app_settings
from plant_inventory.schemas.reorder import (
    RecommendationsRequest,
    RecommendationsResult,
    ReorderEntry,
)
from plant_inventory.services.base import ServiceError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an inventory management expert for a manufacturing plant. "
    "You analyse spare-part usage and stock levels and recommend reorder quantities. "
    "Always answer with a single JSON object."
)

PROMPT_TEMPLATE = """Recommend reorder quantities for the following items.

Items: {item_names}

Historical usage:
{historical_usage_summary}

Current stock:
{current_stock_summary}

Reorder threshold: {reorder_threshold}
Lead time (days): {lead_time_days}

For every item give the quantity to reorder and a short reasoning that takes
into account usage trends, current stock, the reorder threshold and the lead
time. Assume a unit price of {unit_price} for every item and report the total
estimated value of the order.

Reply with JSON of the form:
{{"recommendations": [{{"item_name": str, "quantity_to_reorder": number, "reasoning": str}}],
  "total_estimated_value": number}}"""


class RecommendationError(ServiceError):
    """Raised when suggestions cannot be produced."""


# PUBLIC_INTERFACE
def build_recommendation_request(
    entries: Iterable[ReorderEntry],
    inventory: Iterable[Any],
    usage_logs: Iterable[Any],
    reorder_threshold: float,
    lead_time_days: float,
) -> RecommendationsRequest:
    """
    Derive the model input from a computed purchase list.

    Usage is summarised per listed item (total units, number of events, last use
    date); the stock summary is a JSON snapshot of those items.
    """
    entries = list(entries)
    item_names = [e.item.name for e in entries]
    listed_ids = {e.item.id for e in entries}

    totals: Dict[Any, int] = defaultdict(int)
    events: Dict[Any, int] = defaultdict(int)
    last_used: Dict[Any, Any] = {}
    for log in usage_logs:
        if log.item_id not in listed_ids:
            continue
        totals[log.item_id] += int(log.quantity)
        events[log.item_id] += 1
        if log.item_id not in last_used or log.used_at > last_used[log.item_id]:
            last_used[log.item_id] = log.used_at

    usage_lines: List[str] = []
    for entry in entries:
        item_id = entry.item.id
        if item_id in totals:
            usage_lines.append(
                f"- {entry.item.name}: {totals[item_id]} units over {events[item_id]} uses, "
                f"last used {last_used[item_id].date().isoformat()}"
            )
        else:
            usage_lines.append(f"- {entry.item.name}: no recorded usage")

    snapshot = [
        {"name": item.name, "stock": item.stock, "threshold": item.threshold}
        for item in inventory
        if item.id in listed_ids
    ]

    return RecommendationsRequest(
        item_names=item_names,
        historical_usage_summary="\n".join(usage_lines),
        current_stock_summary=json.dumps(snapshot, ensure_ascii=False),
        reorder_threshold=reorder_threshold,
        lead_time_days=lead_time_days,
    )


class ReorderAdvisor:
    """Thin wrapper around the OpenAI chat completions API."""

    def __init__(self, settings: Optional[AppSettings] = None, client: Optional[AsyncOpenAI] = None):
        self.settings = settings or get_app_settings()
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is not None:
            return self._client
        if not self.settings.OPENAI_API_KEY:
            raise RecommendationError("AI recommendations are not configured (OPENAI_API_KEY missing)")
        self._client = AsyncOpenAI(
            api_key=self.settings.OPENAI_API_KEY,
            base_url=self.settings.OPENAI_BASE_URL or None,
            timeout=self.settings.AI_TIMEOUT_SECONDS,
        )
        return self._client

    async def aclose(self) -> None:
        """Release the HTTP connection pool; a later call opens a new client."""
        if self._client is not None:
            await self._client.close()
            self._client = None

    def _prompt(self, request: RecommendationsRequest) -> str:
        return PROMPT_TEMPLATE.format(
            item_names=", ".join(request.item_names),
            historical_usage_summary=request.historical_usage_summary,
            current_stock_summary=request.current_stock_summary,
            reorder_threshold=request.reorder_threshold,
            lead_time_days=request.lead_time_days,
            unit_price=self.settings.AI_UNIT_PRICE,
        )

    # PUBLIC_INTERFACE
    async def recommend(self, request: RecommendationsRequest) -> RecommendationsResult:
        """Ask the model for reorder suggestions; raises RecommendationError on any failure."""
        client = self._get_client()
        logger.info("Requesting reorder recommendations for %d items", len(request.item_names))
        try:
            completion = await client.chat.completions.create(
                model=self.settings.AI_MODEL,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": self._prompt(request)},
                ],
                response_format={"type": "json_object"},
                temperature=0.2,
            )
        except openai.APIError as exc:
            logger.warning("Recommendation request failed: %s", exc)
            raise RecommendationError(f"AI service error: {exc}") from exc

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise RecommendationError("AI service returned an empty response")
        try:
            result = RecommendationsResult.model_validate_json(content)
        except ValidationError as exc:
            logger.warning("Recommendation reply did not match the expected schema: %s", exc)
            raise RecommendationError("AI service returned an invalid response") from exc
        logger.info(
            "Received %d recommendations (estimated value %.2f)",
            len(result.recommendations),
            result.total_estimated_value,
        )
        return result


# PUBLIC_INTERFACE
@lru_cache
def get_reorder_advisor() -> ReorderAdvisor:
    """FastAPI dependency providing the process-wide advisor and its HTTP client."""
    return ReorderAdvisor()
