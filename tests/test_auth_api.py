from __future__ import annotations

from conftest import API, PASSWORD, login, register


async def test_first_user_is_admin_and_later_users_are_plain(client):
    first = await register(client, "first@example.com")
    second = await register(client, "second@example.com")

    assert first["role"] == "admin"
    assert second["role"] == "user"


async def test_duplicate_email_is_rejected_ignoring_case(client):
    await register(client, "dup@example.com")
    resp = await client.post(f"{API}/auth/register", json={"email": "DUP@example.com", "password": PASSWORD})
    assert resp.status_code == 409
    assert resp.json()["error"]["type"] == "http_error"


async def test_login_with_wrong_password_is_unauthorized(client):
    await register(client, "someone@example.com")
    resp = await client.post(f"{API}/auth/login", data={"username": "someone@example.com", "password": "wrong-one"})
    assert resp.status_code == 401


async def test_me_requires_a_token(client):
    resp = await client.get(f"{API}/auth/me")
    assert resp.status_code == 401


async def test_me_and_refresh(client):
    await register(client, "me@example.com")
    resp = await client.post(f"{API}/auth/login", data={"username": "me@example.com", "password": PASSWORD})
    tokens = resp.json()

    me = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "me@example.com"

    refreshed = await client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["access_token"]

    # access tokens cannot be used to refresh and refresh tokens cannot authenticate
    bad = await client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert bad.status_code == 401
    bad = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert bad.status_code == 401


async def test_garbage_refresh_token(client):
    resp = await client.post(f"{API}/auth/refresh", json={"refresh_token": "not-a-jwt"})
    assert resp.status_code == 401


async def test_admin_lists_users_with_roles(client, users):
    resp = await client.get(f"{API}/admin/users", headers=users["admin"])
    assert resp.status_code == 200
    roles = {u["email"]: u["role"] for u in resp.json()}
    assert roles == {
        "admin@example.com": "admin",
        "editor@example.com": "editor",
        "user@example.com": "user",
    }


async def test_non_admins_cannot_manage_users(client, users):
    for who in ("editor", "user"):
        resp = await client.get(f"{API}/admin/users", headers=users[who])
        assert resp.status_code == 403
        resp = await client.put(
            f"{API}/admin/users/{users['admin_id']}/role", json={"role": "user"}, headers=users[who]
        )
        assert resp.status_code == 403


async def test_admin_cannot_demote_themselves(client, users):
    resp = await client.put(
        f"{API}/admin/users/{users['admin_id']}/role", json={"role": "user"}, headers=users["admin"]
    )
    assert resp.status_code == 400
    me = await client.get(f"{API}/auth/me", headers=users["admin"])
    assert me.json()["role"] == "admin"


async def test_role_change_takes_effect_immediately(client, users):
    editor = await client.get(f"{API}/auth/me", headers=users["editor"])
    resp = await client.put(
        f"{API}/admin/users/{editor.json()['id']}/role", json={"role": "user"}, headers=users["admin"]
    )
    assert resp.status_code == 200
    assert resp.json()["role"] == "user"

    denied = await client.post(
        f"{API}/inventory/items", json={"name": "6204-2RS", "stock": 1}, headers=users["editor"]
    )
    assert denied.status_code == 403


async def test_unknown_user_and_invalid_role(client, users):
    resp = await client.put(
        f"{API}/admin/users/00000000-0000-0000-0000-000000000001/role",
        json={"role": "editor"},
        headers=users["admin"],
    )
    assert resp.status_code == 404
    resp = await client.put(
        f"{API}/admin/users/{users['admin_id']}/role", json={"role": "owner"}, headers=users["admin"]
    )
    assert resp.status_code == 422


async def test_logout(client, users):
    resp = await client.post(f"{API}/auth/logout")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Logged out"


async def test_login_is_case_insensitive_on_email(client):
    await register(client, "Mixed@Example.com")
    headers = await login(client, "mixed@example.com")
    assert headers["Authorization"].startswith("Bearer ")
