"""
Persistence for the shared portal session.

The store is injected into the session manager rather than being a module
global. The database implementation keeps exactly one row (id = 1) and
replaces it wholesale on every put; concurrent writers race with
last-writer-wins semantics, which is acceptable because any valid session
works for every caller.

CHANGELOG:
- 2026-10-04: Initial creation (STORY-004)

TODO:
- None
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from geostar.db.models import PortalSessionRow
from geostar.models import PortalSession

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Get/put access to the single persisted portal session."""

    async def get(self) -> PortalSession | None: ...

    async def put(self, session: PortalSession) -> None: ...


class DbSessionStore:
    """SessionStore backed by the single-row ``sessions`` table.

    Args:
        db: Async SQLAlchemy session. ``put`` commits immediately.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get(self) -> PortalSession | None:
        """Load the stored session, or None when none has been saved."""
        row = await self._db.get(
            PortalSessionRow, PortalSessionRow.SINGLETON_ID, populate_existing=True
        )
        if row is None:
            return None
        return PortalSession(
            session_id=row.session_id,
            user_key=row.user_key,
            created_at=row.created_at,
        )

    async def put(self, session: PortalSession) -> None:
        """Replace the stored session with *session* and commit."""
        await self._db.merge(
            PortalSessionRow(
                id=PortalSessionRow.SINGLETON_ID,
                session_id=session.session_id,
                user_key=session.user_key,
                created_at=session.created_at,
            )
        )
        await self._db.commit()
        logger.debug("Stored portal session created at %d", session.created_at)


class MemorySessionStore:
    """In-process SessionStore, for tools and tests without a database."""

    def __init__(self, session: PortalSession | None = None) -> None:
        self.session = session

    async def get(self) -> PortalSession | None:
        return self.session

    async def put(self, session: PortalSession) -> None:
        self.session = session
