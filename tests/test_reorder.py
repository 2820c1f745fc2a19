from __future__ import annotations

import copy
from types import SimpleNamespace
from uuid import uuid4

import pytest
from pydantic import ValidationError

from plant_inventory.schemas.reorder import ReorderMode, ReorderRequest
from plant_inventory.services.reorder import compute_reorder_list


def item(name, stock, threshold=2):
    return SimpleNamespace(id=uuid4(), name=name, stock=stock, threshold=threshold)


def assignment(item_, machine_id, sector_id, quantity):
    return SimpleNamespace(item_id=item_.id, machine_id=machine_id, sector_id=sector_id, quantity=quantity)


def test_general_mode_lists_items_below_threshold():
    a = item("A", stock=5, threshold=10)
    b = item("B", stock=20, threshold=5)

    result = compute_reorder_list([a, b], [], ReorderMode.general)

    assert [(e.item.id, e.quantity_to_buy, e.total_required) for e in result] == [(a.id, 5, None)]


def test_general_mode_excludes_stock_equal_to_threshold():
    result = compute_reorder_list([item("A", stock=3, threshold=3)], [], "general")
    assert result == []


def test_general_mode_ignores_assignments_and_selection():
    a = item("A", stock=0, threshold=4)
    s1, m1 = uuid4(), uuid4()
    result = compute_reorder_list(
        [a], [assignment(a, m1, s1, 50)], ReorderMode.general, sector_ids=[s1], machine_ids=[m1]
    )
    assert [(e.quantity_to_buy, e.total_required) for e in result] == [(4, None)]


def test_filter_by_sector_subtracts_stock():
    s1, m1 = uuid4(), uuid4()
    one = item("6204", stock=5)

    result = compute_reorder_list([one], [assignment(one, m1, s1, 8)], ReorderMode.filter, sector_ids=[s1])

    assert len(result) == 1
    assert result[0].item.id == one.id
    assert result[0].total_required == 8
    assert result[0].quantity_to_buy == 3


def test_filter_when_stock_covers_requirement_is_empty():
    s1, m1 = uuid4(), uuid4()
    one = item("6204", stock=10)
    assert compute_reorder_list([one], [assignment(one, m1, s1, 8)], "filter", sector_ids=[s1]) == []


def test_filter_excludes_requirement_equal_to_stock():
    s1, m1 = uuid4(), uuid4()
    one = item("6204", stock=8)
    assert compute_reorder_list([one], [assignment(one, m1, s1, 8)], "filter", sector_ids=[s1]) == []


def test_filter_sums_requirements_across_machines_of_selected_sectors():
    s1, s2, s3 = uuid4(), uuid4(), uuid4()
    m1, m2, m3 = uuid4(), uuid4(), uuid4()
    one = item("6204", stock=4)
    assignments = [
        assignment(one, m1, s1, 3),
        assignment(one, m2, s2, 5),
        assignment(one, m3, s3, 100),
    ]

    result = compute_reorder_list([one], assignments, ReorderMode.filter, sector_ids=[s1, s2])

    assert [(e.total_required, e.quantity_to_buy) for e in result] == [(8, 4)]


def test_machine_selection_takes_precedence_over_sectors():
    s1 = uuid4()
    m1, m2 = uuid4(), uuid4()
    one = item("6204", stock=0)
    assignments = [assignment(one, m1, s1, 2), assignment(one, m2, s1, 7)]

    result = compute_reorder_list([one], assignments, ReorderMode.filter, sector_ids=[s1], machine_ids=[m2])

    assert [(e.total_required, e.quantity_to_buy) for e in result] == [(7, 7)]


def test_filter_skips_assignments_for_items_missing_from_inventory():
    s1, m1 = uuid4(), uuid4()
    present = item("present", stock=0)
    gone = item("gone", stock=0)
    assignments = [assignment(present, m1, s1, 1), assignment(gone, m1, s1, 9)]

    result = compute_reorder_list([present], assignments, ReorderMode.filter, machine_ids=[m1])

    assert [e.item.name for e in result] == ["present"]


def test_filter_with_empty_selection_is_empty():
    s1, m1 = uuid4(), uuid4()
    one = item("6204", stock=0)
    assert compute_reorder_list([one], [assignment(one, m1, s1, 3)], ReorderMode.filter) == []


def test_output_sorted_by_name_case_insensitively():
    items = [item("b-item", 0, 1), item("A-item", 0, 1), item("c-item", 0, 1), item("B2", 0, 1)]
    result = compute_reorder_list(items, [], ReorderMode.general)
    assert [e.item.name for e in result] == ["A-item", "b-item", "B2", "c-item"]


def test_recomputing_never_mutates_inputs():
    s1, s2 = uuid4(), uuid4()
    m1, m2 = uuid4(), uuid4()
    a, b = item("A", 1, 5), item("B", 2, 1)
    inventory = [a, b]
    assignments = [assignment(a, m1, s1, 4), assignment(b, m2, s2, 6)]
    before_inv = copy.deepcopy(inventory)
    before_asg = copy.deepcopy(assignments)

    first = compute_reorder_list(inventory, assignments, ReorderMode.filter, sector_ids=[s1])
    compute_reorder_list(inventory, assignments, ReorderMode.general)
    compute_reorder_list(inventory, assignments, ReorderMode.filter, machine_ids=[m2])
    again = compute_reorder_list(inventory, assignments, ReorderMode.filter, sector_ids=[s1])

    assert inventory == before_inv
    assert assignments == before_asg
    assert first == again


def test_entries_are_snapshots_of_items():
    a = item("A", 1, 5)
    result = compute_reorder_list([a], [], ReorderMode.general)
    a.stock = 100
    assert result[0].item.stock == 1


@pytest.mark.parametrize("seed", range(5))
def test_result_properties_hold_for_mixed_fixtures(seed):
    import random

    rng = random.Random(seed)
    sectors = [uuid4() for _ in range(3)]
    machines = [(uuid4(), rng.choice(sectors)) for _ in range(5)]
    inventory = [item(f"item-{i}", rng.randint(0, 10), rng.randint(0, 10)) for i in range(12)]
    assignments = []
    for it in inventory:
        for machine_id, sector_id in rng.sample(machines, rng.randint(0, 3)):
            assignments.append(assignment(it, machine_id, sector_id, rng.randint(1, 6)))

    general = compute_reorder_list(inventory, assignments, ReorderMode.general)
    assert {e.item.id for e in general} == {i.id for i in inventory if i.stock < i.threshold}
    for e in general:
        assert e.quantity_to_buy == e.item.threshold - e.item.stock

    selected = sectors[:2]
    filtered = compute_reorder_list(inventory, assignments, ReorderMode.filter, sector_ids=selected)
    for e in filtered:
        required = sum(a.quantity for a in assignments if a.item_id == e.item.id and a.sector_id in selected)
        assert e.total_required == required > e.item.stock
        assert e.quantity_to_buy == required - e.item.stock

    for result in (general, filtered):
        names = [e.item.name.casefold() for e in result]
        assert names == sorted(names)


def test_request_requires_selection_in_filter_mode():
    with pytest.raises(ValidationError):
        ReorderRequest(mode="filter")
    assert ReorderRequest(mode="general").sector_ids == []
    assert ReorderRequest(mode="filter", machine_ids=[uuid4()]).mode == ReorderMode.filter
