from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ["AUTO_SEED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ.pop("OPENAI_API_KEY", None)

from typing import AsyncGenerator, Dict, List, Optional  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from plant_inventory.api.main import app  # noqa: E402
from plant_inventory.db.base import Base  # noqa: E402
from plant_inventory.db.session import enable_sqlite_foreign_keys, get_async_session  # noqa: E402
from plant_inventory.schemas.reorder import RecommendationsRequest, RecommendationsResult  # noqa: E402
from plant_inventory.services.recommendations import RecommendationError, get_reorder_advisor  # noqa: E402

API = "/api/v1"
PASSWORD = "secret-pass"


class FakeAdvisor:
    """Stands in for the OpenAI-backed advisor; records requests."""

    def __init__(self) -> None:
        self.requests: List[RecommendationsRequest] = []
        self.result: Optional[RecommendationsResult] = None
        self.error: Optional[str] = None

    async def recommend(self, request: RecommendationsRequest) -> RecommendationsResult:
        self.requests.append(request)
        if self.error is not None:
            raise RecommendationError(self.error)
        assert self.result is not None
        return self.result


@pytest.fixture
async def session_maker() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    await engine.dispose()


@pytest.fixture
def advisor() -> FakeAdvisor:
    return FakeAdvisor()


@pytest.fixture
async def client(session_maker, advisor) -> AsyncGenerator[httpx.AsyncClient, None]:
    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = _session
    app.dependency_overrides[get_reorder_advisor] = lambda: advisor
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
    app.dependency_overrides.clear()


async def register(client: httpx.AsyncClient, email: str, password: str = PASSWORD) -> dict:
    resp = await client.post(f"{API}/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()


async def login(client: httpx.AsyncClient, email: str, password: str = PASSWORD) -> Dict[str, str]:
    resp = await client.post(f"{API}/auth/login", data={"username": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
async def users(client) -> dict:
    """Auth headers for an admin (first user), an editor and a plain user."""
    admin = await register(client, "admin@example.com")
    editor = await register(client, "editor@example.com")
    await register(client, "user@example.com")
    admin_headers = await login(client, "admin@example.com")
    resp = await client.put(
        f"{API}/admin/users/{editor['id']}/role", json={"role": "editor"}, headers=admin_headers
    )
    assert resp.status_code == 200, resp.text
    return {
        "admin": admin_headers,
        "editor": await login(client, "editor@example.com"),
        "user": await login(client, "user@example.com"),
        "admin_id": admin["id"],
    }


async def create_item(client, headers, name: str, stock: int = 0, threshold: int = 2, category: str = "bearings") -> dict:
    resp = await client.post(
        f"{API}/inventory/items",
        json={"name": name, "stock": stock, "threshold": threshold, "category": category},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_sector(client, headers, name: str) -> dict:
    resp = await client.post(f"{API}/sectors", json={"name": name}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_machine(client, headers, sector_id: str, name: str) -> dict:
    resp = await client.post(f"{API}/sectors/{sector_id}/machines", json={"name": name}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def assign(client, headers, machine_id: str, item_id: str, quantity: int) -> dict:
    resp = await client.post(
        f"{API}/machines/{machine_id}/assignments",
        json={"item_id": item_id, "quantity": quantity},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
