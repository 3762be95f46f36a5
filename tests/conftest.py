"""Shared test fixtures.

Every API test runs twice: once against the in-memory store and once against a
throwaway SQLite database created through the SQL store.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("ATOM_JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256-signing")
os.environ.setdefault("ATOM_LOG_FORMAT", "console")
os.environ.setdefault("ATOM_SEED_DEMO_DATA", "false")

from atompoint.auth.password import hash_password  # noqa: E402
from atompoint.config import get_settings  # noqa: E402
from atompoint.main import create_app  # noqa: E402
from atompoint.store.base import StoreBackend  # noqa: E402

ADMIN_USERNAME = "boss"
ADMIN_PASSWORD = "adminpass1"


@pytest.fixture(params=["memory", "database"])
def store_backend_name(request: pytest.FixtureRequest, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Point settings at the requested backend for the duration of one test."""
    monkeypatch.setenv("ATOM_STORE_BACKEND", request.param)
    monkeypatch.setenv("ATOM_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'atompoint.db'}")
    monkeypatch.setenv("ATOM_AUTO_CREATE_SCHEMA", "true")
    monkeypatch.setenv("ATOM_FALLBACK_ENABLED", "false")
    get_settings.cache_clear()
    yield request.param
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def app(store_backend_name: str) -> AsyncGenerator[FastAPI, None]:
    """Application with its lifespan running (the store backend is open)."""
    application = create_app()
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client bound to the running app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def backend(app: FastAPI) -> StoreBackend:
    """The store backend the app opened at startup."""
    return app.state.store_backend


def session_token(response: Any) -> str:
    """Pull the session token out of a response's Set-Cookie header."""
    header = response.headers["set-cookie"]
    return header.split(";", 1)[0].split("=", 1)[1]


async def register(client: AsyncClient, username: str, password: str = "secret1", security_amount: int = 0) -> dict:
    """Register through the API. Returns the user payload plus bearer headers."""
    response = await client.post("/api/auth/register", json={
        "username": username,
        "password": password,
        "securityAmount": security_amount,
    })
    assert response.status_code == 201, response.text
    token = session_token(response)
    # bearer headers are used from here on; a stored cookie would take precedence
    client.cookies.clear()
    return {**response.json()["user"], "token": token, "headers": {"Authorization": f"Bearer {token}"}}


async def login(client: AsyncClient, username: str, password: str) -> dict:
    response = await client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    token = session_token(response)
    client.cookies.clear()
    return {**response.json()["user"], "token": token, "headers": {"Authorization": f"Bearer {token}"}}


async def create_admin(backend: StoreBackend, username: str = ADMIN_USERNAME, password: str = ADMIN_PASSWORD) -> int:
    """Insert an admin account directly; admins cannot self-register."""
    async with backend.session() as store:
        user = await store.users.create(username, hash_password(password), 0, is_admin=True)
        await store.commit()
        return user.id


async def give_credits(backend: StoreBackend, user_id: int, amount: int) -> None:
    async with backend.session() as store:
        await store.users.add_credits(user_id, amount)
        await store.commit()


@pytest_asyncio.fixture
async def user(client: AsyncClient) -> dict:
    """A freshly registered regular user (alice / secret1)."""
    return await register(client, "alice", "secret1")


@pytest_asyncio.fixture
async def admin(client: AsyncClient, backend: StoreBackend) -> dict:
    """An admin account, logged in."""
    await create_admin(backend)
    return await login(client, ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest_asyncio.fixture
async def product(client: AsyncClient, admin: dict) -> dict:
    """An 80-credit data pack created through the admin API."""
    response = await client.post("/api/products", headers=admin["headers"], json={
        "operator": "Telenor",
        "category": "Data",
        "name": "1GB Daily",
        "priceMMK": 800,
        "priceCr": 80,
    })
    assert response.status_code == 201, response.text
    return response.json()["product"]
