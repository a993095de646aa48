"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.

Users are normally provisioned by the identity service; here one is inserted
directly and a token is signed with the shared JWT_SECRET.
"""

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import text

from config.settings import settings
from src.main import app
from src.pf_common.database import async_session_factory

STATIC_PRICES = {"INFY": Decimal("1600"), "TCS": Decimal("3500")}


class StaticPriceProvider:
    """Deterministic prices; the app lifespan (and its HTTP client) is not run here."""

    async def get_prices(self, symbols):  # type: ignore[no-untyped-def]
        return {s: STATIC_PRICES.get(s, Decimal(0)) for s in symbols}


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    app.state.price_provider = StaticPriceProvider()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def create_user_token() -> str:
    """Insert a fresh active user and return a bearer token for it."""
    user_id = uuid.uuid4()
    async with async_session_factory() as session:
        await session.execute(
            text("INSERT INTO users (id, email, name) VALUES (:id, :email, :name)"),
            {"id": user_id, "email": f"it_{user_id.hex[:8]}@example.com", "name": "IT"},
        )
        await session.commit()
    payload = {
        "sub": str(user_id),
        "type": "access",
        "exp": datetime.now(UTC) + timedelta(minutes=30),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def auth_client(client: AsyncClient) -> AsyncClient:
    """Authenticated client — one fresh user for the whole session."""
    token = await create_user_token()
    client.headers.update({"Authorization": f"Bearer {token}"})
    return client
