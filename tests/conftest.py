"""
Shared fixtures: in-memory SQLite database, HTTP client against the real app,
and one profile per role with a provider-style bearer token.
"""

import os

os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("DB_TYPE", "sqlite")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")
os.environ.setdefault("ENABLE_SCHEDULER", "false")

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from main import app  # noqa: E402
from app.core.db import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.models.enums.user_role import UserRole  # noqa: E402
from app.models.users.user_models import Profile  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def async_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db(async_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(async_engine) -> AsyncGenerator[AsyncClient, None]:
    session_factory = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# Profiles and tokens
@pytest.fixture
def make_profile(db):
    async def _make(role: UserRole, *, email: str = None, is_active: bool = True) -> Profile:
        profile_id = f"{role.value}-0000-0000-0000-000000000000"[:36]
        profile = Profile(
            id=profile_id,
            email=email or f"{role.value}@dealer.test",
            full_name=role.value.replace("_", " ").title(),
            role=role,
            is_active=is_active,
        )
        db.add(profile)
        await db.commit()
        return profile

    return _make


def bearer(profile: Profile) -> dict:
    return {"Authorization": f"Bearer {create_access_token(profile.id, profile.email)}"}


@pytest.fixture
async def admin_headers(make_profile) -> dict:
    return bearer(await make_profile(UserRole.super_admin))


@pytest.fixture
async def viewer_headers(make_profile) -> dict:
    return bearer(await make_profile(UserRole.viewer))


@pytest.fixture
async def finance_headers(make_profile) -> dict:
    return bearer(await make_profile(UserRole.finance_manager))


# Domain factories
VIN = "1HGCM82633A004352"


@pytest.fixture
def vehicle_payload():
    def _payload(**overrides) -> dict:
        data = {
            "vin": VIN,
            "year": 2021,
            "make": "Toyota",
            "model": "Camry",
            "auction_house": "Copart",
            "purchase_price": "10000.00",
            "purchase_currency": "USD",
        }
        data.update(overrides)
        return data

    return _payload


@pytest.fixture
def create_vehicle(client, admin_headers, vehicle_payload):
    async def _create(status: str = None, **overrides) -> dict:
        resp = await client.post("/vehicles", json=vehicle_payload(**overrides), headers=admin_headers)
        assert resp.status_code == 201, resp.text
        vehicle = resp.json()["data"]
        if status:
            resp = await client.post(
                f"/vehicles/{vehicle['id']}/status",
                json={"status": status},
                headers=admin_headers,
            )
            assert resp.status_code == 200, resp.text
            vehicle = resp.json()["data"]
        return vehicle

    return _create


@pytest.fixture
def create_customer(client, admin_headers):
    async def _create(**overrides) -> dict:
        data = {"full_name": "Sara Ahmed", "email": "sara@example.com", "phone": "+971500000001"}
        data.update(overrides)
        resp = await client.post("/customers", json=data, headers=admin_headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _create


@pytest.fixture
def create_invoice(client, admin_headers):
    async def _create(customer_id: int, **overrides) -> dict:
        data = {
            "customer_id": customer_id,
            "currency": "AED",
            "items": [{"description": "Detailing", "quantity": "1", "unit_price": "1000.00"}],
        }
        data.update(overrides)
        resp = await client.post("/invoices", json=data, headers=admin_headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _create


@pytest.fixture
def headers_for():
    return bearer
