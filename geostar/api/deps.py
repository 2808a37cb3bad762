"""
FastAPI dependency injection providers.

Provides database sessions, settings and the portal client for use with
FastAPI's Depends() mechanism.

CHANGELOG:
- 2026-10-08: Add get_settings and get_vendor_client (STORY-010)
- 2026-10-03: Initial creation (STORY-005)
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from geostar.config import Settings
from geostar.db.session import get_async_session
from geostar.vendor.client import GeoStarClient


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session.

    Yields:
        AsyncSession: An async SQLAlchemy session.
    """
    async for session in get_async_session():
        yield session


def get_settings(request: Request) -> Settings:
    """Return the Settings loaded by the application lifespan."""
    return request.app.state.settings


async def get_vendor_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[GeoStarClient, None]:
    """Yield a portal client for the duration of one request."""
    async with GeoStarClient(settings.geostar_base_url) as client:
        yield client


DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]
VendorClient = Annotated[GeoStarClient, Depends(get_vendor_client)]
