"""
Purchase list ("to buy") calculation.

Two independent policies, never combined in one pass:

- filter mode: units required by the selected machines (or, when no machine
  is selected, by every machine of the selected sectors) minus stock on hand.
- general mode: items below their low-stock threshold are topped up to it.

The calculator works on snapshots already loaded by the caller and performs
no I/O. It copies what it reports, so callers can recompute with other
selections without the inputs ever changing.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Collection, Dict, Iterable, List, Optional
from uuid import UUID

from plant_inventory.schemas.reorder import ReorderEntry, ReorderItem, ReorderMode


def _sort_key(entry: ReorderEntry):
    return (entry.item.name.casefold(), str(entry.item.id))


def _selected_assignments(
    assignments: Iterable[Any],
    sector_ids: Collection[UUID],
    machine_ids: Collection[UUID],
) -> List[Any]:
    # A machine selection takes precedence over the sector selection.
    if machine_ids:
        wanted = set(machine_ids)
        return [a for a in assignments if a.machine_id in wanted]
    if sector_ids:
        wanted = set(sector_ids)
        return [a for a in assignments if a.sector_id in wanted]
    return []


def _required_by_item(assignments: Iterable[Any]) -> Dict[UUID, int]:
    required: Dict[UUID, int] = defaultdict(int)
    for assignment in assignments:
        required[assignment.item_id] += int(assignment.quantity)
    return required


# PUBLIC_INTERFACE
def compute_reorder_list(
    inventory: Iterable[Any],
    assignments: Iterable[Any],
    mode: ReorderMode | str,
    sector_ids: Optional[Collection[UUID]] = None,
    machine_ids: Optional[Collection[UUID]] = None,
) -> List[ReorderEntry]:
    """
    Compute the purchase list.

    Parameters:
        inventory: items exposing id, name, stock and threshold.
        assignments: machine assignments exposing item_id, machine_id, sector_id and quantity.
        mode: ReorderMode.filter or ReorderMode.general.
        sector_ids / machine_ids: selection used in filter mode; ignored in general mode.
    Returns:
        Entries sorted by item name (case-insensitive). In filter mode only items whose
        required total strictly exceeds stock are listed; in general mode only items
        strictly below threshold. Assignments for items missing from the inventory
        snapshot are ignored.
    """
    mode = ReorderMode(mode)
    entries: List[ReorderEntry] = []

    if mode == ReorderMode.general:
        for item in inventory:
            if item.stock < item.threshold:
                entries.append(
                    ReorderEntry(
                        item=ReorderItem.model_validate(item),
                        total_required=None,
                        quantity_to_buy=item.threshold - item.stock,
                    )
                )
        return sorted(entries, key=_sort_key)

    selected = _selected_assignments(assignments, sector_ids or (), machine_ids or ())
    required = _required_by_item(selected)
    items_by_id = {item.id: item for item in inventory}

    for item_id, total_required in required.items():
        item = items_by_id.get(item_id)
        if item is None:
            continue
        if total_required > item.stock:
            entries.append(
                ReorderEntry(
                    item=ReorderItem.model_validate(item),
                    total_required=total_required,
                    quantity_to_buy=total_required - item.stock,
                )
            )
    return sorted(entries, key=_sort_key)
