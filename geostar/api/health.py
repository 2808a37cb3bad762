"""
Health check endpoint.

GET /health returns {"status": "ok"} with HTTP 200. No authentication; meant
for container health checks.

CHANGELOG:
- 2026-10-08: Initial creation (STORY-010)

TODO:
- None
"""

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Return a simple health status."""
    return {"status": "ok"}
