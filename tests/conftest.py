"""
Shared test fixtures.

Every test runs with a clean GeoStar environment, inside its own temporary
working directory (so no stray .env file is loaded) and with DATABASE_URL
pointing at a throwaway SQLite file. Storage tests get a real
``sqlite+aiosqlite`` session; vendor tests get a GeoStarClient wired to an
``httpx.MockTransport``.

CHANGELOG:
- 2026-10-08: Add TestClient fixture for the API routes (STORY-010)
- 2026-10-05: Add db_session fixture on a temporary SQLite file (STORY-006)
- 2026-10-03: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, Callable, Generator
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from geostar.db.models import Base
from geostar.db.session import create_engine, create_session_factory
from geostar.vendor.client import GeoStarClient

FIXTURES_DIR = Path(__file__).parent / "fixtures"
BASE_URL = "https://portal.test"

_ALL_ENV_VARS = (
    "DATABASE_URL",
    "GEOSTAR_EMAIL",
    "GEOSTAR_PASSWORD",
    "GEOSTAR_BASE_URL",
    "TIMEZONE",
    "SESSION_MAX_AGE_S",
    "FETCH_INTERVAL_S",
    "LOG_LEVEL",
    "API_HOST",
    "API_PORT",
)


def load_fixture(name: str) -> Any:
    """Load a JSON fixture from tests/fixtures."""
    return json.loads((FIXTURES_DIR / name).read_text())


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove GeoStar env vars, isolate from .env files and point at a temp DB."""
    for var in _ALL_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'app.db'}")


@pytest.fixture()
def fixture_json() -> Callable[[str], Any]:
    """Return the JSON fixture loader."""
    return load_fixture


@pytest_asyncio.fixture()
async def db_session(tmp_path: Path) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session on a fresh SQLite database with the full schema."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'storage.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with create_session_factory(engine)() as session:
        yield session

    await engine.dispose()


@pytest.fixture()
def make_vendor_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], GeoStarClient]:
    """Return a factory building a GeoStarClient over a mock transport.

    The handler receives every outgoing ``httpx.Request`` and returns the
    response the portal would send.
    """

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> GeoStarClient:
        http = httpx.AsyncClient(
            transport=httpx.MockTransport(handler), follow_redirects=False
        )
        return GeoStarClient(BASE_URL, http_client=http)

    return _make


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """Create a FastAPI TestClient with the lifespan running.

    Unhandled exceptions are rendered by the app's 500 handler instead of
    being re-raised into the test.
    """
    from geostar.api.main import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
