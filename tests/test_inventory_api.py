from __future__ import annotations

from conftest import API, create_item


async def test_create_item_derives_status_and_series(client, users):
    item = await create_item(client, users["editor"], "6204-2RS", stock=1, threshold=2)

    assert item["name"] == "6204-2RS"
    assert item["category"] == "bearings"
    assert item["status"] == "low_stock"
    assert item["series"] == "Series 62xx"

    resp = await client.get(f"{API}/inventory/items/{item['id']}", headers=users["user"])
    assert resp.status_code == 200
    assert resp.json()["stock"] == 1


async def test_item_names_are_unique_ignoring_case(client, users):
    await create_item(client, users["admin"], "UC205", stock=3)
    resp = await client.post(
        f"{API}/inventory/items", json={"name": " uc205 ", "stock": 1}, headers=users["editor"]
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["type"] == "conflict"


async def test_invalid_items_are_rejected(client, users):
    for payload in ({"name": "   "}, {"name": "X", "stock": -1}, {"name": "X", "threshold": -2}):
        resp = await client.post(f"{API}/inventory/items", json=payload, headers=users["editor"])
        assert resp.status_code == 422, payload


async def test_plain_users_read_but_cannot_write(client, users):
    await create_item(client, users["admin"], "6001-2RS")

    listing = await client.get(f"{API}/inventory/items", headers=users["user"])
    assert listing.status_code == 200
    assert [i["name"] for i in listing.json()] == ["6001-2RS"]

    resp = await client.post(f"{API}/inventory/items", json={"name": "6002"}, headers=users["user"])
    assert resp.status_code == 403


async def test_list_is_sorted_and_searchable(client, users):
    for name in ("b-2", "A-1", "c-3", "ab-9"):
        await create_item(client, users["editor"], name)

    resp = await client.get(f"{API}/inventory/items", headers=users["user"])
    assert [i["name"] for i in resp.json()] == ["A-1", "ab-9", "b-2", "c-3"]

    resp = await client.get(f"{API}/inventory/items", params={"search": "AB"}, headers=users["user"])
    assert [i["name"] for i in resp.json()] == ["ab-9"]


async def test_only_admin_edits_and_deletes(client, users):
    item = await create_item(client, users["editor"], "6305-2RS", stock=4, threshold=2)
    url = f"{API}/inventory/items/{item['id']}"

    resp = await client.patch(url, json={"stock": 0}, headers=users["editor"])
    assert resp.status_code == 403

    resp = await client.patch(url, json={"stock": 0, "threshold": 5}, headers=users["admin"])
    assert resp.status_code == 200
    body = resp.json()
    assert (body["stock"], body["threshold"], body["status"]) == (0, 5, "out_of_stock")
    assert body["name"] == "6305-2RS"

    resp = await client.delete(url, headers=users["editor"])
    assert resp.status_code == 403
    resp = await client.delete(url, headers=users["admin"])
    assert resp.status_code == 204
    resp = await client.get(url, headers=users["admin"])
    assert resp.status_code == 404


async def test_rename_to_existing_name_conflicts(client, users):
    await create_item(client, users["admin"], "H308")
    other = await create_item(client, users["admin"], "H309")

    resp = await client.patch(
        f"{API}/inventory/items/{other['id']}", json={"name": "h308"}, headers=users["admin"]
    )
    assert resp.status_code == 409

    # changing only the case of its own name is allowed
    resp = await client.patch(
        f"{API}/inventory/items/{other['id']}", json={"name": "h309"}, headers=users["admin"]
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "h309"


async def test_negative_stock_edit_is_rejected(client, users):
    item = await create_item(client, users["admin"], "PHS 12", stock=2)
    resp = await client.patch(
        f"{API}/inventory/items/{item['id']}", json={"stock": -1}, headers=users["admin"]
    )
    assert resp.status_code == 422


async def test_summary_counts(client, users):
    await create_item(client, users["admin"], "A", stock=0, threshold=2)
    await create_item(client, users["admin"], "B", stock=1, threshold=2)
    await create_item(client, users["admin"], "C", stock=10, threshold=2)

    resp = await client.get(f"{API}/inventory/summary", headers=users["user"])
    assert resp.status_code == 200
    assert resp.json() == {
        "item_count": 3,
        "total_stock": 11,
        "low_stock_count": 2,
        "out_of_stock_count": 1,
    }


async def test_summary_of_empty_inventory(client, users):
    resp = await client.get(f"{API}/inventory/summary", headers=users["user"])
    assert resp.json() == {"item_count": 0, "total_stock": 0, "low_stock_count": 0, "out_of_stock_count": 0}
