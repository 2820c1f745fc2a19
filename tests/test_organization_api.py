from __future__ import annotations

from uuid import uuid4

from conftest import API, assign, create_item, create_machine, create_sector


async def test_sectors_list_their_machines(client, users):
    packing = await create_sector(client, users["editor"], "Packing")
    await create_sector(client, users["editor"], "Baking")
    await create_machine(client, users["editor"], packing["id"], "Sealer B")
    await create_machine(client, users["editor"], packing["id"], "Sealer A")

    resp = await client.get(f"{API}/sectors", headers=users["user"])
    assert resp.status_code == 200
    sectors = {s["name"]: [m["name"] for m in s["machines"]] for s in resp.json()}
    assert sectors == {"Packing": ["Sealer A", "Sealer B"], "Baking": []}


async def test_rename_sector_and_machine(client, users):
    sector = await create_sector(client, users["editor"], "Packing")
    machine = await create_machine(client, users["editor"], sector["id"], "Sealer")

    resp = await client.put(f"{API}/sectors/{sector['id']}", json={"name": "Packing 1"}, headers=users["editor"])
    assert resp.status_code == 200
    assert resp.json()["name"] == "Packing 1"

    resp = await client.put(f"{API}/machines/{machine['id']}", json={"name": "Sealer X"}, headers=users["editor"])
    assert resp.status_code == 200
    assert resp.json() == {"id": machine["id"], "name": "Sealer X", "sector_id": sector["id"]}


async def test_plain_users_cannot_change_organization(client, users):
    resp = await client.post(f"{API}/sectors", json={"name": "Packing"}, headers=users["user"])
    assert resp.status_code == 403


async def test_machine_in_unknown_sector(client, users):
    resp = await client.post(f"{API}/sectors/{uuid4()}/machines", json={"name": "Ghost"}, headers=users["editor"])
    assert resp.status_code == 404


async def test_assigning_same_item_twice_adds_quantity(client, users):
    item = await create_item(client, users["admin"], "6204-2RS")
    sector = await create_sector(client, users["editor"], "Packing")
    machine = await create_machine(client, users["editor"], sector["id"], "Sealer")

    first = await assign(client, users["editor"], machine["id"], item["id"], 2)
    second = await assign(client, users["editor"], machine["id"], item["id"], 3)

    assert second["id"] == first["id"]
    assert second["quantity"] == 5
    assert second["sector_id"] == sector["id"]
    assert second["item_name"] == "6204-2RS"

    resp = await client.get(f"{API}/assignments", params={"machine_id": machine["id"]}, headers=users["user"])
    assert [(a["item_name"], a["quantity"]) for a in resp.json()] == [("6204-2RS", 5)]


async def test_assignment_validation(client, users):
    item = await create_item(client, users["admin"], "6204-2RS")
    sector = await create_sector(client, users["editor"], "Packing")
    machine = await create_machine(client, users["editor"], sector["id"], "Sealer")
    url = f"{API}/machines/{machine['id']}/assignments"

    resp = await client.post(url, json={"item_id": item["id"], "quantity": 0}, headers=users["editor"])
    assert resp.status_code == 422
    resp = await client.post(url, json={"item_id": str(uuid4()), "quantity": 1}, headers=users["editor"])
    assert resp.status_code == 404
    resp = await client.post(
        f"{API}/machines/{uuid4()}/assignments", json={"item_id": item["id"], "quantity": 1}, headers=users["editor"]
    )
    assert resp.status_code == 404


async def test_edit_and_delete_assignment(client, users):
    item = await create_item(client, users["admin"], "6204-2RS")
    sector = await create_sector(client, users["editor"], "Packing")
    machine = await create_machine(client, users["editor"], sector["id"], "Sealer")
    created = await assign(client, users["editor"], machine["id"], item["id"], 2)

    resp = await client.put(
        f"{API}/assignments/{created['id']}",
        json={"quantity": 7, "usage_description": "main shaft"},
        headers=users["editor"],
    )
    assert resp.status_code == 200
    assert (resp.json()["quantity"], resp.json()["usage_description"]) == (7, "main shaft")

    resp = await client.delete(f"{API}/assignments/{created['id']}", headers=users["editor"])
    assert resp.status_code == 204
    resp = await client.get(f"{API}/assignments", headers=users["user"])
    assert resp.json() == []


async def test_assignments_filter_by_sector(client, users):
    item = await create_item(client, users["admin"], "6204-2RS")
    packing = await create_sector(client, users["editor"], "Packing")
    baking = await create_sector(client, users["editor"], "Baking")
    sealer = await create_machine(client, users["editor"], packing["id"], "Sealer")
    oven = await create_machine(client, users["editor"], baking["id"], "Oven")
    await assign(client, users["editor"], sealer["id"], item["id"], 1)
    await assign(client, users["editor"], oven["id"], item["id"], 4)

    resp = await client.get(f"{API}/assignments", params={"sector_id": baking["id"]}, headers=users["user"])
    assert [(a["machine_id"], a["quantity"]) for a in resp.json()] == [(oven["id"], 4)]


async def test_deleting_sector_removes_machines_and_assignments(client, users):
    item = await create_item(client, users["admin"], "6204-2RS")
    packing = await create_sector(client, users["editor"], "Packing")
    baking = await create_sector(client, users["editor"], "Baking")
    sealer = await create_machine(client, users["editor"], packing["id"], "Sealer")
    oven = await create_machine(client, users["editor"], baking["id"], "Oven")
    await assign(client, users["editor"], sealer["id"], item["id"], 1)
    kept = await assign(client, users["editor"], oven["id"], item["id"], 4)

    resp = await client.delete(f"{API}/sectors/{packing['id']}", headers=users["editor"])
    assert resp.status_code == 204

    sectors = (await client.get(f"{API}/sectors", headers=users["user"])).json()
    assert [s["name"] for s in sectors] == ["Baking"]
    assignments = (await client.get(f"{API}/assignments", headers=users["user"])).json()
    assert [a["id"] for a in assignments] == [kept["id"]]
    resp = await client.put(f"{API}/machines/{sealer['id']}", json={"name": "x"}, headers=users["editor"])
    assert resp.status_code == 404


async def test_deleting_item_removes_its_assignments(client, users):
    item = await create_item(client, users["admin"], "6204-2RS")
    sector = await create_sector(client, users["editor"], "Packing")
    machine = await create_machine(client, users["editor"], sector["id"], "Sealer")
    await assign(client, users["editor"], machine["id"], item["id"], 2)

    await client.delete(f"{API}/inventory/items/{item['id']}", headers=users["admin"])

    assert (await client.get(f"{API}/assignments", headers=users["user"])).json() == []


async def test_deleting_unknown_sector(client, users):
    resp = await client.delete(f"{API}/sectors/{uuid4()}", headers=users["editor"])
    assert resp.status_code == 404
