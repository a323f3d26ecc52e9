"""
Cocktail Catalog Backend: Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the whole suite.
How:   A real SQLite database (aiosqlite) per test, created from
       Base.metadata; a fresh app per test wired to that database and to a
       temporary image directory.

Fixture Hierarchy (all function-scoped):
    db_engine ─┬─ session_factory ─┬─ db_session         (service tests)
               │                   └─ make_app ── app ── test_client (API tests)
               └─ seed fixtures: user, admin_user, vodka
    image_service, png_bytes, codec, token_service

API tests seed and inspect the database through session_factory in short
`async with` blocks, so no test session holds a lock while the app writes.
"""

import io
import os
import tempfile
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image

# Settings are read at import time: point them at throwaway resources
# BEFORE any cocktail_api import.
_TEST_ROOT = tempfile.mkdtemp(prefix="cocktail_api_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_ROOT, 'health.db')}"
os.environ["ACCESS_TOKEN_SECRET"] = "test-secret-not-for-production-0123456789"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_ROOT, "images")
os.environ["LOG_LEVEL"] = "WARNING"

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

import cocktail_api.models  # noqa: E402,F401
from cocktail_api.config import Settings  # noqa: E402
from cocktail_api.database import Base, dispose_engine, get_db_session  # noqa: E402
from cocktail_api.models import Spirit, User  # noqa: E402
from cocktail_api.services.credentials import CredentialCodec  # noqa: E402
from cocktail_api.services.image_service import ImageService  # noqa: E402
from cocktail_api.services.tokens import TokenService  # noqa: E402

TEST_SECRET = os.environ["ACCESS_TOKEN_SECRET"]
USER_PASSWORD = "correct-horse"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(autouse=True)
async def _dispose_global_engine():
    """/health pings through the global engine; its pool must not outlive the test's loop."""
    yield
    await dispose_engine()


# ══════════════════════════════════════════════════════════════════════════
# Services & sample data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def codec():
    return CredentialCodec()


@pytest.fixture
def token_service():
    return TokenService(TEST_SECRET)


@pytest.fixture
def image_service(tmp_path):
    """ImageService rooted in a per-test directory."""
    return ImageService(str(tmp_path / "images"))


def make_png(width: int = 800, height: int = 600, color=(180, 40, 40)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    """A real 800x600 PNG."""
    return make_png()


# ══════════════════════════════════════════════════════════════════════════
# Seed data (committed, visible to every session)
# ══════════════════════════════════════════════════════════════════════════

async def _persist(session_factory, obj):
    async with session_factory() as session:
        session.add(obj)
        await session.commit()
    return obj


@pytest_asyncio.fixture
async def user(session_factory, codec):
    return await _persist(session_factory, User(
        first_name="Ada",
        last_name="Bartender",
        email="ada@example.com",
        access_level=1,
        password=codec.hash(USER_PASSWORD),
    ))


@pytest_asyncio.fixture
async def admin_user(session_factory, codec):
    return await _persist(session_factory, User(
        first_name="Grace",
        last_name="Owner",
        email="grace@example.com",
        access_level=2,
        password=codec.hash(USER_PASSWORD),
    ))


@pytest_asyncio.fixture
async def vodka(session_factory):
    return await _persist(session_factory, Spirit(spirit_name="Vodka"))


# ══════════════════════════════════════════════════════════════════════════
# Application
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_app(session_factory, tmp_path):
    """
    Build an app on the per-test database with Settings overrides.

    Usage:
        configured = make_app(icon_width=64, icon_height=64)
    """
    from cocktail_api.main import create_app

    def factory(**overrides):
        overrides.setdefault("storage_root", str(tmp_path / "images"))
        application = create_app(Settings(**overrides))

        async def override_session() -> AsyncGenerator[AsyncSession, None]:
            async with session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        application.dependency_overrides[get_db_session] = override_session
        return application

    return factory


@pytest.fixture
def app(make_app):
    """A fresh app whose sessions and image storage are per-test."""
    return make_app()


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def client_for():
    """Open HTTPX clients on extra apps built with make_app."""
    clients = []

    async def open_client(application):
        client = AsyncClient(transport=ASGITransport(app=application), base_url="http://test")
        clients.append(client)
        return client

    yield open_client
    for client in clients:
        await client.aclose()


def _bearer(app, account) -> dict:
    token = app.state.token_service.issue({"sub": str(account.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(app, user):
    return _bearer(app, user)


@pytest.fixture
def admin_headers(app, admin_user):
    return _bearer(app, admin_user)


@pytest.fixture
def png_factory():
    """make_png for tests that need several sizes or colours."""
    return make_png
