from __future__ import annotations

import pytest

from conftest import API, assign, create_item, create_machine, create_sector
from plant_inventory.schemas.reorder import Recommendation, RecommendationsResult, ReorderList
from plant_inventory.services.export import export_reorder_csv


@pytest.fixture
async def line(client, users):
    """Two sectors with one machine each and three items."""
    admin = users["admin"]
    bearing = await create_item(client, admin, "6204-2RS", stock=5, threshold=2)
    belt = await create_item(client, admin, "HTD 8M-1200", stock=0, threshold=3, category="belts")
    spare = await create_item(client, admin, "608-2Z", stock=8, threshold=15)
    packing = await create_sector(client, admin, "Packing")
    baking = await create_sector(client, admin, "Baking")
    sealer = await create_machine(client, admin, packing["id"], "Sealer")
    oven = await create_machine(client, admin, baking["id"], "Oven")
    await assign(client, admin, sealer["id"], bearing["id"], 8)
    await assign(client, admin, oven["id"], bearing["id"], 2)
    await assign(client, admin, oven["id"], belt["id"], 1)
    return {
        "bearing": bearing,
        "belt": belt,
        "spare": spare,
        "packing": packing,
        "baking": baking,
        "sealer": sealer,
        "oven": oven,
    }


def summarise(body):
    return [(e["item"]["name"], e["total_required"], e["quantity_to_buy"]) for e in body["entries"]]


async def test_filter_by_sector(client, users, line):
    resp = await client.post(
        f"{API}/reorder/list", json={"mode": "filter", "sector_ids": [line["packing"]["id"]]}, headers=users["user"]
    )
    assert resp.status_code == 200
    assert resp.json()["mode"] == "filter"
    assert summarise(resp.json()) == [("6204-2RS", 8, 3)]


async def test_filter_by_all_sectors_sums_requirements(client, users, line):
    resp = await client.post(
        f"{API}/reorder/list",
        json={"mode": "filter", "sector_ids": [line["packing"]["id"], line["baking"]["id"]]},
        headers=users["user"],
    )
    assert summarise(resp.json()) == [("6204-2RS", 10, 5), ("HTD 8M-1200", 1, 1)]


async def test_filter_by_machine(client, users, line):
    resp = await client.post(
        f"{API}/reorder/list", json={"mode": "filter", "machine_ids": [line["oven"]["id"]]}, headers=users["user"]
    )
    assert summarise(resp.json()) == [("HTD 8M-1200", 1, 1)]


async def test_general_mode(client, users, line):
    resp = await client.post(f"{API}/reorder/list", json={"mode": "general"}, headers=users["user"])
    assert summarise(resp.json()) == [("608-2Z", None, 7), ("HTD 8M-1200", None, 3)]


async def test_purchase_list_is_served_under_list_path_only(client, users, line):
    resp = await client.post(f"{API}/reorder", json={"mode": "general"}, headers=users["user"])
    assert resp.status_code in (404, 405)


async def test_filter_without_selection_is_rejected(client, users, line):
    resp = await client.post(f"{API}/reorder/list", json={"mode": "filter"}, headers=users["user"])
    assert resp.status_code == 422


async def test_reorder_requires_login(client, line):
    resp = await client.post(f"{API}/reorder/list", json={"mode": "general"})
    assert resp.status_code == 401


async def test_csv_export(client, users, line):
    resp = await client.post(
        f"{API}/reorder/export",
        json={"mode": "filter", "sector_ids": [line["packing"]["id"]]},
        headers=users["user"],
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "text/csv; charset=utf-8"
    assert 'filename="purchase_order_items.csv"' in resp.headers["content-disposition"]
    assert resp.text.strip().split("\n") == [
        "Item;Current stock;Required (machines);Threshold;Quantity to buy (calculated)",
        "6204-2RS;5;8;2;3",
    ]


async def test_csv_export_matches_purchase_list_csv(client, users, line):
    selection = {"mode": "filter", "sector_ids": [line["packing"]["id"], line["baking"]["id"]]}
    listing = await client.post(f"{API}/reorder/list", json=selection, headers=users["user"])
    entries = ReorderList.model_validate(listing.json()).entries

    resp = await client.post(f"{API}/reorder/export", params={"format": "csv"}, json=selection, headers=users["user"])

    assert resp.text == export_reorder_csv(entries, "filter")


async def test_csv_export_with_recommendations(client, users, line):
    recommendations = {
        "recommendations": [{"item_name": "608-2Z", "quantity_to_reorder": 20, "reasoning": "seasonal"}],
        "total_estimated_value": 200,
    }
    resp = await client.post(
        f"{API}/reorder/export",
        json={"mode": "general", "recommendations": recommendations},
        headers=users["user"],
    )
    assert resp.text.strip().split("\n") == [
        "Item;Current stock;Threshold;Quantity to buy (calculated);Quantity to buy (AI)",
        "608-2Z;8;15;7;20",
        "HTD 8M-1200;0;3;3;",
    ]


@pytest.mark.parametrize(
    "fmt,content_type",
    [
        ("xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
        ("pdf", "application/pdf"),
    ],
)
async def test_binary_exports(client, users, line, fmt, content_type):
    resp = await client.post(
        f"{API}/reorder/export", params={"format": fmt}, json={"mode": "general"}, headers=users["user"]
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"] == content_type
    assert resp.content


async def test_recommendations_success(client, users, line, advisor):
    advisor.result = RecommendationsResult(
        recommendations=[Recommendation(item_name="HTD 8M-1200", quantity_to_reorder=4, reasoning="lead time")],
        total_estimated_value=40,
    )
    await client.post(
        f"{API}/usage", json={"item_id": line["spare"]["id"], "quantity": 2}, headers=users["editor"]
    )

    resp = await client.post(f"{API}/reorder/recommendations", json={"mode": "general"}, headers=users["user"])

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["recommendations"][0]["quantity_to_reorder"] == 4
    request = advisor.requests[0]
    assert request.item_names == ["608-2Z", "HTD 8M-1200"]
    assert "608-2Z: 2 units over 1 uses" in request.historical_usage_summary
    assert "HTD 8M-1200: no recorded usage" in request.historical_usage_summary
    assert (request.reorder_threshold, request.lead_time_days) == (2, 7)


async def test_recommendations_pass_parameters(client, users, line, advisor):
    advisor.result = RecommendationsResult(total_estimated_value=0)
    await client.post(
        f"{API}/reorder/recommendations",
        json={"mode": "general", "reorder_threshold": 5, "lead_time_days": 14},
        headers=users["user"],
    )
    assert (advisor.requests[0].reorder_threshold, advisor.requests[0].lead_time_days) == (5, 14)


async def test_recommendations_failure_is_reported(client, users, line, advisor):
    advisor.error = "timeout"
    resp = await client.post(f"{API}/reorder/recommendations", json={"mode": "general"}, headers=users["user"])
    assert resp.status_code == 200
    assert resp.json() == {"success": False, "data": None, "error": "Failed to get recommendations from AI."}

    # the purchase list itself is unaffected
    listing = await client.post(f"{API}/reorder/list", json={"mode": "general"}, headers=users["user"])
    assert len(listing.json()["entries"]) == 2


async def test_recommendations_for_empty_list(client, users, line, advisor):
    await client.patch(
        f"{API}/inventory/items/{line['bearing']['id']}", json={"stock": 50}, headers=users["admin"]
    )
    resp = await client.post(
        f"{API}/reorder/recommendations",
        json={"mode": "filter", "machine_ids": [line["sealer"]["id"]]},
        headers=users["user"],
    )
    assert resp.json() == {"success": False, "data": None, "error": "There are no items to reorder."}
    assert advisor.requests == []
