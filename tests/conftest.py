"""Shared fixtures: an in-memory SQLite database and an API client bound to it."""

import os
from contextlib import asynccontextmanager
from pathlib import Path

os.environ.setdefault(
    "CONFIG",
    str(Path(__file__).resolve().parent.parent / "resources" / "config" / "test.yaml"),
)

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from rentline_backend.database import Base, get_db, import_models  # noqa: E402
from rentline_backend.main import app  # noqa: E402
from rentline_backend.modules.auth.services import create_initial_admin  # noqa: E402

PASSWORD = "s3cret-pass"


@pytest_asyncio.fixture
async def engine():
    import_models()
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def async_session(session_factory):
    async with session_factory() as session:
        yield session


@asynccontextmanager
async def api_client(factory):
    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(session_factory):
    async with api_client(session_factory) as ac:
        yield ac


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    """Sessions on a file database, each with its own connection.

    For tests that run writers side by side; the in-memory engine shares one
    connection between every session.
    """
    import_models()
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rentline.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def file_client(file_session_factory):
    async with api_client(file_session_factory) as ac:
        yield ac


async def login(client: AsyncClient, email: str, password: str = PASSWORD) -> dict:
    response = await client.post(
        "/api/auth/login", json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    token = response.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


async def signup(
    client: AsyncClient, email: str, role: str = "tenant", full_name: str | None = None
) -> tuple[int, dict]:
    """Register a profile and return its id with auth headers."""
    response = await client.post(
        "/api/auth/register",
        json={
            "email": email,
            "password": PASSWORD,
            "full_name": full_name or email.split("@")[0].title(),
            "role": role,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"], await login(client, email)


@pytest_asyncio.fixture
async def landlord(client):
    return await signup(client, "landlord@example.com", "landlord", "Lara Landlord")


@pytest_asyncio.fixture
async def tenant(client):
    return await signup(client, "tenant@example.com", "tenant", "Tom Tenant")


@pytest_asyncio.fixture
async def admin(client, session_factory):
    async with session_factory() as db:
        profile = await create_initial_admin(
            db, "admin@example.com", PASSWORD, "Ada Admin"
        )
    return profile.id, await login(client, "admin@example.com")


async def create_property(
    client: AsyncClient, headers: dict, name: str = "Palm Court", **fields
) -> dict:
    payload = {"name": name, "address": "12 Ring Road", "city": "Accra"}
    payload.update(fields)
    response = await client.post("/api/properties", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_unit(
    client: AsyncClient,
    headers: dict,
    property_id: int,
    unit_number: str = "A1",
    rent_amount: float = 1000,
    **fields,
) -> dict:
    payload = {"unit_number": unit_number, "rent_amount": rent_amount}
    payload.update(fields)
    response = await client.post(
        f"/api/properties/{property_id}/units", json=payload, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def place_tenant(
    client: AsyncClient,
    landlord_headers: dict,
    unit_id: int,
    email: str = "tenant@example.com",
    rent_amount: float = 1000,
    start_date: str = "2026-01-01",
    end_date: str | None = None,
) -> dict:
    response = await client.post(
        "/api/tenancies",
        json={
            "email": email,
            "unit_id": unit_id,
            "rent_amount": rent_amount,
            "start_date": start_date,
            "end_date": end_date,
        },
        headers=landlord_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]
